"""Base interface for annotation input adapters."""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Iterator, Sequence
from pathlib import Path

from variantgraph.models import AnnotationRecord


class DataAdapter(ABC):
    """Stream annotation records out of a folder of input files."""

    name: str

    @abstractmethod
    def input_files(self) -> Sequence[Path]:
        """Files the adapter would read, in read order."""

    @abstractmethod
    def read(self, input_files: Sequence[Path] | None = None) -> Iterator[AnnotationRecord]:
        """Yield records from ``input_files``, or from :meth:`input_files` when omitted."""
