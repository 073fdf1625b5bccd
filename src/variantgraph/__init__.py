"""Annotation-to-graph CSV import primitives.

This package turns line-delimited annotation JSON into node and relationship
CSV files for graph database bulk import.
"""

from .config import (
    ANNOTATION_OUTPUT_TYPES,
    HEADER_COLUMNS,
    OutputFileType,
    OutputLayout,
    QueuePolicy,
    RunSettings,
    RunSettingsLoader,
)
from .decoding import AnnotationRecordDecoder, FieldMapping, RecordDecoder
from .dispatch import DispatchBus
from .errors import (
    ConfigurationError,
    DeliveryError,
    DirectoryError,
    DrainInterruptedError,
    InputReadError,
    OutputWriteError,
    PoolTimeoutError,
    RecordDecodeError,
    VariantGraphError,
)
from .headers import HeaderGenerator
from .models import AnnotationRecord, TranscriptConsequence
from .output import read_output_table, summarize_output
from .pipeline import AnnotationParser, AnnotationRunReport
from .registry import SubscriberRegistry, build_default_subscriber_registry
from .shutdown import ShutdownCoordinator

__all__ = [
    "AnnotationRecord",
    "TranscriptConsequence",
    "ANNOTATION_OUTPUT_TYPES",
    "HEADER_COLUMNS",
    "OutputFileType",
    "OutputLayout",
    "QueuePolicy",
    "RunSettings",
    "RunSettingsLoader",
    "FieldMapping",
    "RecordDecoder",
    "AnnotationRecordDecoder",
    "DispatchBus",
    "SubscriberRegistry",
    "build_default_subscriber_registry",
    "ShutdownCoordinator",
    "HeaderGenerator",
    "AnnotationParser",
    "AnnotationRunReport",
    "read_output_table",
    "summarize_output",
    "VariantGraphError",
    "ConfigurationError",
    "DirectoryError",
    "InputReadError",
    "OutputWriteError",
    "RecordDecodeError",
    "DeliveryError",
    "PoolTimeoutError",
    "DrainInterruptedError",
]
