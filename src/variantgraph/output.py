"""Read generated CSV outputs back for inspection and run summaries."""

from __future__ import annotations

from collections.abc import Iterable
from pathlib import Path

import pandas as pd

from variantgraph.config import ANNOTATION_OUTPUT_TYPES, OutputFileType, OutputLayout


def read_output_table(layout: OutputLayout, output_type: OutputFileType) -> pd.DataFrame:
    """Load one output type as a DataFrame, using its header file for column names.

    Every value is kept as a string, the same way the graph importer sees it.
    """

    header_path = layout.header_path(output_type)
    columns = list(pd.read_csv(header_path, nrows=0, dtype=str).columns)

    data_path = layout.data_path(output_type)
    if not data_path.exists() or data_path.stat().st_size == 0:
        return pd.DataFrame(columns=columns)

    return pd.read_csv(
        data_path,
        header=None,
        names=columns,
        dtype=str,
        keep_default_na=False,
    )


def summarize_output(
    output_folder: str | Path,
    *,
    source_name: str = "AnnotationParser",
    output_types: Iterable[OutputFileType] = ANNOTATION_OUTPUT_TYPES,
) -> dict[str, int]:
    """Return the number of data rows on disk per output type."""

    layout = OutputLayout(Path(output_folder), source_name=source_name)
    return {
        output_type.file_prefix: len(read_output_table(layout, output_type))
        for output_type in output_types
    }
