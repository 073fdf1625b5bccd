"""Relationship subscribers linking genes, variants and transcripts."""

from __future__ import annotations

from collections.abc import Iterable

from variantgraph.config import OutputFileType
from variantgraph.models import AnnotationRecord
from variantgraph.subscribers.base import CsvRecordSubscriber, OutputRow, to_row


class GeneToGeneticVariantSubscriber(CsvRecordSubscriber):
    name = "gene_to_genetic_variant"
    output_type = OutputFileType.GENE_TO_GENETIC_VARIANT

    def rows_for(self, record: AnnotationRecord) -> Iterable[OutputRow]:
        for gene_id in record.gene_ids():
            yield to_row((gene_id, record.variant_id))


class GeneticVariantToTranscriptVariantSubscriber(CsvRecordSubscriber):
    name = "genetic_variant_to_transcript_variant"
    output_type = OutputFileType.GENETIC_VARIANT_TO_TRANSCRIPT_VARIANT

    def rows_for(self, record: AnnotationRecord) -> Iterable[OutputRow]:
        for transcript in record.transcripts:
            yield to_row((record.variant_id, record.transcript_variant_id(transcript)))


class TranscriptToTranscriptVariantSubscriber(CsvRecordSubscriber):
    name = "transcript_to_transcript_variant"
    output_type = OutputFileType.TRANSCRIPT_TO_TRANSCRIPT_VARIANT

    def rows_for(self, record: AnnotationRecord) -> Iterable[OutputRow]:
        for transcript in record.transcripts:
            yield to_row((transcript.transcript_id, record.transcript_variant_id(transcript)))
