"""Input adapters for annotation graph import."""

from .annotation_json import AnnotationJsonAdapter, ReadStatistics, iter_lines
from .base import DataAdapter
from .common import list_annotation_files

__all__ = [
    "DataAdapter",
    "AnnotationJsonAdapter",
    "ReadStatistics",
    "iter_lines",
    "list_annotation_files",
]
