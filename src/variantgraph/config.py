"""Configuration contracts for annotation graph import runs."""

from __future__ import annotations

import json
from dataclasses import dataclass, replace
from enum import Enum
from pathlib import Path
from typing import Any, Mapping

from jsonschema import exceptions as jsex
from jsonschema.validators import validator_for

from variantgraph.errors import ConfigurationError


class OutputFileType(str, Enum):
    """Closed set of CSV outputs produced for graph bulk import.

    The value is the file prefix shared by the data file and its header file.
    """

    GENETIC_VARIANT = "GeneticVariant"
    GENE_TO_GENETIC_VARIANT = "GeneToGeneticVariant"
    TRANSCRIPT_VARIANT = "TranscriptVariant"
    GENETIC_VARIANT_TO_TRANSCRIPT_VARIANT = "GeneticVariantToTranscriptVariant"
    TRANSCRIPT_TO_TRANSCRIPT_VARIANT = "TranscriptToTranscriptVariant"
    CONSEQUENCE_TERM = "ConsequenceTerm"

    @property
    def file_prefix(self) -> str:
        return self.value


class QueuePolicy(str, Enum):
    """Back-pressure policy between the producer and the dispatch lanes."""

    UNBOUNDED = "unbounded"


HEADER_COLUMNS: Mapping[OutputFileType, tuple[str, ...]] = {
    OutputFileType.GENETIC_VARIANT: (
        "variantId:ID(GeneticVariant)",
        "chrom",
        "pos:long",
        "ref",
        "alt",
        "mostSevereConsequence",
    ),
    OutputFileType.GENE_TO_GENETIC_VARIANT: (
        ":START_ID(Gene)",
        ":END_ID(GeneticVariant)",
    ),
    OutputFileType.TRANSCRIPT_VARIANT: (
        "transcriptVariantId:ID(TranscriptVariant)",
        "hgvsc",
        "hgvsp",
        "impact",
        "biotype",
        "consequenceTerms:string[]",
    ),
    OutputFileType.GENETIC_VARIANT_TO_TRANSCRIPT_VARIANT: (
        ":START_ID(GeneticVariant)",
        ":END_ID(TranscriptVariant)",
    ),
    OutputFileType.TRANSCRIPT_TO_TRANSCRIPT_VARIANT: (
        ":START_ID(Transcript)",
        ":END_ID(TranscriptVariant)",
    ),
    OutputFileType.CONSEQUENCE_TERM: ("consequenceTermId:ID(ConsequenceTerm)",),
}

ANNOTATION_OUTPUT_TYPES: tuple[OutputFileType, ...] = tuple(OutputFileType)

DEFAULT_INPUT_SUFFIXES: tuple[str, ...] = (".json",)
GZIP_INPUT_SUFFIXES: tuple[str, ...] = (".json.gz",)


@dataclass(frozen=True)
class RunSettings:
    """Tunable knobs for one input-folder to output-folder run."""

    worker_count: int = 10
    drain_timeout_seconds: float = 600.0
    progress_every: int = 1000
    input_suffixes: tuple[str, ...] = DEFAULT_INPUT_SUFFIXES
    include_gzip: bool = False
    queue_policy: QueuePolicy = QueuePolicy.UNBOUNDED
    source_name: str = "AnnotationParser"

    def __post_init__(self) -> None:
        if self.worker_count < 1:
            raise ConfigurationError(f"worker_count must be >= 1, got {self.worker_count}")
        if self.drain_timeout_seconds <= 0:
            raise ConfigurationError(
                f"drain_timeout_seconds must be > 0, got {self.drain_timeout_seconds}"
            )
        if self.progress_every < 1:
            raise ConfigurationError(f"progress_every must be >= 1, got {self.progress_every}")
        if not self.source_name.strip():
            raise ConfigurationError("source_name cannot be empty")

    def recognized_suffixes(self) -> tuple[str, ...]:
        """Return lower-cased file suffixes that qualify as annotation input."""

        suffixes = tuple(item.lower() for item in self.input_suffixes)
        if self.include_gzip:
            suffixes += tuple(item for item in GZIP_INPUT_SUFFIXES if item not in suffixes)
        return suffixes

    def with_overrides(self, overrides: Mapping[str, Any]) -> "RunSettings":
        """Return a copy with non-``None`` overrides applied."""

        applied = {key: value for key, value in overrides.items() if value is not None}
        return replace(self, **applied) if applied else self


RUN_SETTINGS_SCHEMA: dict[str, Any] = {
    "$schema": "http://json-schema.org/draft-07/schema#",
    "type": "object",
    "additionalProperties": False,
    "properties": {
        "worker_count": {"type": "integer", "minimum": 1},
        "drain_timeout_seconds": {"type": "number", "exclusiveMinimum": 0},
        "progress_every": {"type": "integer", "minimum": 1},
        "input_suffixes": {
            "type": "array",
            "items": {"type": "string", "minLength": 1},
            "minItems": 1,
        },
        "include_gzip": {"type": "boolean"},
        "queue_policy": {"enum": [policy.value for policy in QueuePolicy]},
        "source_name": {"type": "string", "minLength": 1},
    },
}


class RunSettingsLoader:
    """Load :class:`RunSettings` from an optional JSON settings file."""

    def __init__(self, schema: Mapping[str, Any] | None = None) -> None:
        schema = dict(schema or RUN_SETTINGS_SCHEMA)
        validator_cls = validator_for(schema)
        validator_cls.check_schema(schema)
        self._validator = validator_cls(schema)

    def load(self, path: str | Path | None) -> RunSettings:
        """Return defaults when ``path`` is ``None``, otherwise parse the file."""

        if path is None:
            return RunSettings()

        settings_path = Path(path)
        try:
            payload = json.loads(settings_path.read_text(encoding="utf-8"))
        except OSError as exc:
            raise ConfigurationError(f"Cannot read settings file {settings_path}: {exc}") from exc
        except json.JSONDecodeError as exc:
            raise ConfigurationError(
                f"Settings file {settings_path} is not valid JSON: {exc.msg} (line {exc.lineno})"
            ) from exc

        return self.parse(payload, origin=str(settings_path))

    def parse(self, payload: Any, *, origin: str = "<settings>") -> RunSettings:
        errors = sorted(self._validator.iter_errors(payload), key=lambda err: list(err.path))
        if errors:
            raise ConfigurationError(
                f"Invalid settings in {origin}: " + "; ".join(_describe(err) for err in errors)
            )

        values: dict[str, Any] = dict(payload)
        if "input_suffixes" in values:
            values["input_suffixes"] = tuple(values["input_suffixes"])
        if "queue_policy" in values:
            values["queue_policy"] = QueuePolicy(values["queue_policy"])
        return RunSettings(**values)


def _describe(err: jsex.ValidationError) -> str:
    location = "/" + "/".join(str(item) for item in err.path)
    return f"{location}: {err.message}"


@dataclass(frozen=True)
class OutputLayout:
    """File naming for one output folder."""

    output_folder: Path
    source_name: str = "AnnotationParser"
    data_suffix: str = ".csv"

    def data_path(self, output_type: OutputFileType) -> Path:
        return self.output_folder / f"{output_type.file_prefix}-{self.source_name}{self.data_suffix}"

    def header_path(self, output_type: OutputFileType) -> Path:
        return self.output_folder / f"{output_type.file_prefix}-header.csv"
