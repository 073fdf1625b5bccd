"""Header files for graph bulk-import CSV outputs."""

from __future__ import annotations

import csv
import logging
from collections.abc import Iterable
from pathlib import Path

from variantgraph.config import HEADER_COLUMNS, OutputFileType, OutputLayout
from variantgraph.errors import OutputWriteError

LOGGER = logging.getLogger("variantgraph.headers")


class HeaderGenerator:
    """Write one single-row header file per output type.

    Header content depends only on the output type, so files are always
    overwritten and never compared with what is already on disk.
    """

    def __init__(self, logger: logging.Logger | None = None) -> None:
        self.logger = logger or LOGGER

    def generate_headers(
        self,
        output_folder: str | Path,
        output_types: Iterable[OutputFileType],
    ) -> list[Path]:
        layout = OutputLayout(Path(output_folder))
        written: list[Path] = []
        for output_type in output_types:
            path = layout.header_path(output_type)
            self.logger.info("Writing out: %s", path)
            try:
                path.parent.mkdir(parents=True, exist_ok=True)
                with path.open("w", newline="", encoding="utf-8") as stream:
                    csv.writer(stream).writerow(HEADER_COLUMNS[output_type])
            except OSError as exc:
                raise OutputWriteError(f"Cannot write header file {path}: {exc}") from exc
            written.append(path)
        return written
