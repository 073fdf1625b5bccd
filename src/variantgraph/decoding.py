"""Decode annotation JSON lines into canonical records.

Scalar fields are copied through a declarative :class:`FieldMapping` table.
Shapes that do not line up with the raw JSON layout (the allele string and the
nested transcript consequences) are rebuilt by reconstruction rules registered
per target type.
"""

from __future__ import annotations

import json
from collections.abc import Callable, Mapping, Sequence
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from jsonschema import exceptions as jsex
from jsonschema.validators import validator_for

from variantgraph.errors import RecordDecodeError
from variantgraph.models import AnnotationRecord, TranscriptConsequence

ReconstructionRule = Callable[[Mapping[str, Any]], Mapping[str, Any]]


ANNOTATION_RECORD_SCHEMA: dict[str, Any] = {
    "$schema": "http://json-schema.org/draft-07/schema#",
    "type": "object",
    "required": ["seq_region_name", "start", "allele_string"],
    "properties": {
        "id": {"type": ["string", "null"]},
        "seq_region_name": {"type": ["string", "integer"], "minLength": 1},
        "start": {"type": "integer", "minimum": 1},
        "allele_string": {"type": "string", "pattern": "^[^/]+/[^/]+$"},
        "gene_id": {"type": ["string", "null"]},
        "most_severe_consequence": {"type": ["string", "null"]},
        "transcript_consequences": {
            "type": "array",
            "items": {
                "type": "object",
                "required": ["transcript_id"],
                "properties": {
                    "transcript_id": {"type": "string", "pattern": "\\S"},
                    "gene_id": {"type": ["string", "null"]},
                    "consequence_terms": {"type": "array", "items": {"type": "string"}},
                    "impact": {"type": ["string", "null"]},
                    "hgvsc": {"type": ["string", "null"]},
                    "hgvsp": {"type": ["string", "null"]},
                    "biotype": {"type": ["string", "null"]},
                },
            },
        },
    },
}


@dataclass(frozen=True)
class FieldMapping:
    """Copy one raw JSON key onto one constructor argument."""

    target: str
    source: str
    convert: Callable[[Any], Any] = lambda value: value
    required: bool = False

    def extract(self, payload: Mapping[str, Any]) -> tuple[bool, Any]:
        value = payload.get(self.source)
        if value is None:
            if self.required:
                raise ValueError(f"missing required field '{self.source}'")
            return False, None
        return True, self.convert(value)


def _clean_text(value: Any) -> str | None:
    cleaned = str(value).strip()
    return cleaned or None


ANNOTATION_FIELD_MAPPINGS: tuple[FieldMapping, ...] = (
    FieldMapping("chrom", "seq_region_name", str, required=True),
    FieldMapping("pos", "start", int, required=True),
    FieldMapping("variant_id", "id", _clean_text),
    FieldMapping("gene_id", "gene_id", _clean_text),
    FieldMapping("most_severe_consequence", "most_severe_consequence", _clean_text),
)


def split_alleles(payload: Mapping[str, Any]) -> Mapping[str, Any]:
    """Split ``REF/ALT`` into separate reference and alternate alleles."""

    ref, alt = (part.strip() for part in str(payload["allele_string"]).split("/", 1))
    return {"ref": ref, "alt": alt}


def rebuild_transcripts(payload: Mapping[str, Any]) -> Mapping[str, Any]:
    """Rebuild the transcript collection and the record-level consequence terms.

    Record-level terms are the ordered union of every transcript's terms; the
    most severe consequence is folded in when no transcript carries it.
    """

    transcripts: list[TranscriptConsequence] = []
    terms: list[str] = []

    for raw in payload.get("transcript_consequences") or ():
        transcript_terms = tuple(
            term.strip() for term in raw.get("consequence_terms") or () if term and term.strip()
        )
        transcripts.append(
            TranscriptConsequence(
                transcript_id=raw["transcript_id"].strip(),
                gene_id=_optional_text(raw.get("gene_id")),
                consequence_terms=transcript_terms,
                impact=_optional_text(raw.get("impact")),
                hgvsc=_optional_text(raw.get("hgvsc")),
                hgvsp=_optional_text(raw.get("hgvsp")),
                biotype=_optional_text(raw.get("biotype")),
            )
        )
        for term in transcript_terms:
            if term not in terms:
                terms.append(term)

    most_severe = _optional_text(payload.get("most_severe_consequence"))
    if most_severe and most_severe not in terms:
        terms.append(most_severe)

    return {"transcripts": tuple(transcripts), "consequence_terms": tuple(terms)}


def _optional_text(value: Any) -> str | None:
    return None if value is None else _clean_text(value)


class RecordDecoder:
    """Turn raw JSON lines into immutable records of a registered type."""

    def __init__(self, schema: Mapping[str, Any] | None = None) -> None:
        self._mappings: dict[type, tuple[FieldMapping, ...]] = {}
        self._rules: dict[type, list[ReconstructionRule]] = {}
        self._validator = None
        if schema is not None:
            validator_cls = validator_for(schema)
            validator_cls.check_schema(schema)
            self._validator = validator_cls(schema)

    def register_mapping(self, record_type: type, mappings: Sequence[FieldMapping]) -> None:
        """Declare the scalar fields copied straight from the raw payload."""

        self._mappings[record_type] = tuple(mappings)

    def register_rule(self, record_type: type, rule: ReconstructionRule) -> None:
        """Add a rule whose returned keys become constructor arguments."""

        self._rules.setdefault(record_type, []).append(rule)

    def decode(
        self,
        line: str,
        record_type: type = AnnotationRecord,
        *,
        source: Path | str | None = None,
        line_number: int | None = None,
    ) -> Any:
        """Decode one line. Raises :class:`RecordDecodeError` on any mismatch."""

        if record_type not in self._mappings and record_type not in self._rules:
            raise KeyError(f"No decoding rules registered for {record_type.__name__}")

        try:
            payload = json.loads(line)
        except json.JSONDecodeError as exc:
            raise RecordDecodeError(
                f"malformed JSON: {exc.msg} (column {exc.colno})",
                source=source,
                line_number=line_number,
            ) from exc
        except RecursionError as exc:
            raise RecordDecodeError(
                "malformed JSON: nesting too deep",
                source=source,
                line_number=line_number,
            ) from exc

        if self._validator is not None:
            try:
                error = jsex.best_match(self._validator.iter_errors(payload))
            except RecursionError as exc:
                raise RecordDecodeError(
                    "schema mismatch: nesting too deep",
                    source=source,
                    line_number=line_number,
                ) from exc
            if error is not None:
                location = "/" + "/".join(str(item) for item in error.path)
                raise RecordDecodeError(
                    f"schema mismatch at {location}: {error.message}",
                    source=source,
                    line_number=line_number,
                )
        elif not isinstance(payload, dict):
            raise RecordDecodeError(
                f"expected a JSON object, got {type(payload).__name__}",
                source=source,
                line_number=line_number,
            )

        try:
            return record_type(**self._build_arguments(record_type, payload))
        except (KeyError, TypeError, ValueError) as exc:
            raise RecordDecodeError(
                f"cannot build {record_type.__name__}: {exc}",
                source=source,
                line_number=line_number,
            ) from exc

    def _build_arguments(self, record_type: type, payload: Mapping[str, Any]) -> dict[str, Any]:
        arguments: dict[str, Any] = {}
        for mapping in self._mappings.get(record_type, ()):
            present, value = mapping.extract(payload)
            if present:
                arguments[mapping.target] = value
        for rule in self._rules.get(record_type, ()):
            arguments.update(rule(payload))
        return arguments


def fill_identity(arguments: Mapping[str, Any]) -> dict[str, Any]:
    """Fill identity fields the raw layout may leave out."""

    filled = dict(arguments)
    if not filled.get("variant_id"):
        filled["variant_id"] = "-".join(
            str(filled[key]) for key in ("chrom", "pos", "ref", "alt")
        )
    if not filled.get("gene_id"):
        genes = [item.gene_id for item in filled.get("transcripts", ()) if item.gene_id]
        filled["gene_id"] = genes[0] if genes else None
    return filled


class AnnotationRecordDecoder(RecordDecoder):
    """Decoder preloaded with the annotation mapping, schema and rules."""

    def __init__(self, schema: Mapping[str, Any] | None = None) -> None:
        super().__init__(schema=ANNOTATION_RECORD_SCHEMA if schema is None else schema)
        self.register_mapping(AnnotationRecord, ANNOTATION_FIELD_MAPPINGS)
        self.register_rule(AnnotationRecord, split_alleles)
        self.register_rule(AnnotationRecord, rebuild_transcripts)

    def _build_arguments(self, record_type: type, payload: Mapping[str, Any]) -> dict[str, Any]:
        arguments = super()._build_arguments(record_type, payload)
        if record_type is AnnotationRecord:
            arguments = fill_identity(arguments)
        return arguments
