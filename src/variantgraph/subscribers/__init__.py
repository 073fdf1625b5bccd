"""Output subscribers that turn annotation records into graph CSV rows."""

from .base import CsvRecordSubscriber, OutputRow, RecordSubscriber
from .relationships import (
    GeneticVariantToTranscriptVariantSubscriber,
    GeneToGeneticVariantSubscriber,
    TranscriptToTranscriptVariantSubscriber,
)
from .variants import (
    ConsequenceTermSubscriber,
    GeneticVariantSubscriber,
    TranscriptVariantSubscriber,
)

__all__ = [
    "RecordSubscriber",
    "CsvRecordSubscriber",
    "OutputRow",
    "GeneticVariantSubscriber",
    "TranscriptVariantSubscriber",
    "ConsequenceTermSubscriber",
    "GeneToGeneticVariantSubscriber",
    "GeneticVariantToTranscriptVariantSubscriber",
    "TranscriptToTranscriptVariantSubscriber",
]
