"""Subscriber contract for records fanned out by the dispatch bus."""

from __future__ import annotations

import csv
import logging
from abc import ABC, abstractmethod
from collections.abc import Iterable, Sequence
from typing import Any

from variantgraph.config import OutputFileType, OutputLayout
from variantgraph.errors import OutputWriteError
from variantgraph.models import AnnotationRecord

OutputRow = tuple[str, ...]


class RecordSubscriber(ABC):
    """Receives every published record, in publish order, on one lane at a time."""

    name: str

    @abstractmethod
    def on_record(self, record: AnnotationRecord) -> None:
        """Derive output rows from ``record`` and persist them."""

    @abstractmethod
    def close(self) -> None:
        """Flush and release owned resources. Calling it again has no effect."""


def to_row(values: Sequence[Any]) -> OutputRow:
    """Render values as CSV fields; ``None`` becomes an empty field."""

    return tuple("" if value is None else str(value) for value in values)


class CsvRecordSubscriber(RecordSubscriber):
    """Subscriber that owns one CSV data file for a single output type.

    The data file is truncated when the subscriber is created and written
    without a header row; headers are emitted separately once the run ends.
    """

    output_type: OutputFileType

    def __init__(self, *, layout: OutputLayout, logger: logging.Logger | None = None) -> None:
        self.path = layout.data_path(self.output_type)
        self.logger = logger or logging.getLogger(f"variantgraph.subscribers.{self.name}")
        self.rows_written = 0
        self._closed = False

        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            self._stream = self.path.open("w", newline="", encoding="utf-8")
        except OSError as exc:
            raise OutputWriteError(f"Cannot open output file {self.path}: {exc}") from exc
        self._writer = csv.writer(self._stream)

    @property
    def closed(self) -> bool:
        return self._closed

    @abstractmethod
    def rows_for(self, record: AnnotationRecord) -> Iterable[OutputRow]:
        """Return zero or more rows for ``record``."""

    def on_record(self, record: AnnotationRecord) -> None:
        if self._closed:
            raise OutputWriteError(f"{self.name} received a record after close")

        rows = list(self.rows_for(record))
        if not rows:
            return
        try:
            self._writer.writerows(rows)
        except OSError as exc:
            raise OutputWriteError(f"Failed writing {self.path}: {exc}") from exc
        self.rows_written += len(rows)

    def close(self) -> None:
        if self._closed:
            return
        self._closed = True
        try:
            self._stream.close()
        except OSError as exc:
            raise OutputWriteError(f"Failed closing {self.path}: {exc}") from exc
        self.logger.info("Writing out: %s (%d rows)", self.path, self.rows_written)
