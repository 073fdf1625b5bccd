"""Adapter that streams line-delimited annotation JSON files."""

from __future__ import annotations

import contextlib
import gzip
import logging
from collections.abc import Iterator, Sequence
from dataclasses import dataclass
from pathlib import Path
from typing import IO

from variantgraph.adapters.base import DataAdapter
from variantgraph.adapters.common import list_annotation_files
from variantgraph.config import RunSettings
from variantgraph.decoding import AnnotationRecordDecoder, RecordDecoder
from variantgraph.errors import InputReadError
from variantgraph.models import AnnotationRecord

LOGGER = logging.getLogger("variantgraph.reader")


def _open_text(path: Path) -> IO[str]:
    if path.name.lower().endswith(".gz"):
        return gzip.open(path, "rt", encoding="utf-8")
    return path.open("r", encoding="utf-8")


def iter_lines(
    path: str | Path,
    *,
    logger: logging.Logger | None = None,
    progress_every: int = 1000,
) -> Iterator[str]:
    """Yield the lines of one input file, without trailing newlines.

    The file is closed on every exit path, including when the caller stops
    iterating early. Any read failure is raised as :class:`InputReadError`.
    """

    logger = logger or LOGGER
    path = Path(path)
    line_number = 0
    try:
        with _open_text(path) as stream:
            for line in stream:
                line_number += 1
                if line_number % progress_every == 0:
                    logger.info("Processed %d lines", line_number)
                yield line.rstrip("\r\n")
    except (OSError, EOFError, UnicodeDecodeError) as exc:
        raise InputReadError(f"Failed to read {path} after line {line_number}: {exc}") from exc


@dataclass
class ReadStatistics:
    """Counters collected while streaming input files."""

    files: int = 0
    lines: int = 0
    records: int = 0


class AnnotationJsonAdapter(DataAdapter):
    """Decode every qualifying file of an input folder into annotation records.

    Files are read one after another and lines in file order, so the yielded
    sequence is the publish order seen by every subscriber. The first
    undecodable line, blank lines included, aborts iteration.
    """

    name = "annotation_json"

    def __init__(
        self,
        *,
        input_folder: str | Path,
        decoder: RecordDecoder | None = None,
        settings: RunSettings | None = None,
        logger: logging.Logger | None = None,
    ) -> None:
        self.input_folder = Path(input_folder)
        self.decoder = decoder or AnnotationRecordDecoder()
        self.settings = settings or RunSettings()
        self.logger = logger or LOGGER
        self.statistics = ReadStatistics()

    def input_files(self) -> Sequence[Path]:
        return list_annotation_files(self.input_folder, self.settings.recognized_suffixes())

    def read(self, input_files: Sequence[Path] | None = None) -> Iterator[AnnotationRecord]:
        """Yield records from ``input_files``, scanning the input folder when omitted."""

        if input_files is None:
            input_files = self.input_files()
        for input_file in input_files:
            self.logger.info("Processing file: %s", input_file)
            self.statistics.files += 1
            file_lines = 0

            lines = iter_lines(
                input_file,
                logger=self.logger,
                progress_every=self.settings.progress_every,
            )
            with contextlib.closing(lines):
                for line_number, line in enumerate(lines, 1):
                    file_lines = line_number
                    self.statistics.lines += 1
                    record = self.decoder.decode(
                        line,
                        AnnotationRecord,
                        source=input_file,
                        line_number=line_number,
                    )
                    self.statistics.records += 1
                    yield record

            self.logger.info("Finished file: %s (%d lines)", input_file, file_lines)
