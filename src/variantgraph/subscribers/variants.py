"""Node subscribers: genetic variants, transcript variants and consequence terms."""

from __future__ import annotations

from collections.abc import Iterable

from variantgraph.config import OutputFileType
from variantgraph.models import AnnotationRecord
from variantgraph.subscribers.base import CsvRecordSubscriber, OutputRow, to_row

ARRAY_DELIMITER = ";"


class GeneticVariantSubscriber(CsvRecordSubscriber):
    """One node row per annotated variant."""

    name = "genetic_variant"
    output_type = OutputFileType.GENETIC_VARIANT

    def rows_for(self, record: AnnotationRecord) -> Iterable[OutputRow]:
        yield to_row(
            (
                record.variant_id,
                record.chrom,
                record.pos,
                record.ref,
                record.alt,
                record.most_severe_consequence,
            )
        )


class TranscriptVariantSubscriber(CsvRecordSubscriber):
    """One node row per transcript consequence of a variant."""

    name = "transcript_variant"
    output_type = OutputFileType.TRANSCRIPT_VARIANT

    def rows_for(self, record: AnnotationRecord) -> Iterable[OutputRow]:
        for transcript in record.transcripts:
            yield to_row(
                (
                    record.transcript_variant_id(transcript),
                    transcript.hgvsc,
                    transcript.hgvsp,
                    transcript.impact,
                    transcript.biotype,
                    ARRAY_DELIMITER.join(transcript.consequence_terms),
                )
            )


class ConsequenceTermSubscriber(CsvRecordSubscriber):
    """Consequence term nodes, each written the first time it appears in a run."""

    name = "consequence_term"
    output_type = OutputFileType.CONSEQUENCE_TERM

    def __init__(self, **kwargs) -> None:
        super().__init__(**kwargs)
        self._seen: set[str] = set()

    def rows_for(self, record: AnnotationRecord) -> Iterable[OutputRow]:
        for term in record.consequence_terms:
            if term in self._seen:
                continue
            self._seen.add(term)
            yield to_row((term,))
