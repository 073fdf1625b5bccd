"""Shared utilities for locating annotation input files."""

from __future__ import annotations

import os
from collections.abc import Sequence
from pathlib import Path

from variantgraph.config import DEFAULT_INPUT_SUFFIXES
from variantgraph.errors import DirectoryError


def _has_suffix(path: Path, suffixes: Sequence[str]) -> bool:
    """Return True if the file name ends in one of ``suffixes`` (case-insensitive)."""

    name = path.name.lower()
    return any(name.endswith(suffix.lower()) for suffix in suffixes)


def list_annotation_files(
    input_folder: str | Path,
    suffixes: Sequence[str] = DEFAULT_INPUT_SUFFIXES,
) -> list[Path]:
    """List qualifying input files in ``input_folder``.

    Files come back in the order the filesystem reports them; records are
    independent so no sorting is applied. A missing or unreadable folder raises
    :class:`DirectoryError` instead of looking like an empty folder.
    """

    folder = Path(os.path.expandvars(os.path.expanduser(str(input_folder))))
    if not folder.exists():
        raise DirectoryError(f"Input folder does not exist: {folder}")
    if not folder.is_dir():
        raise DirectoryError(f"Input path is not a folder: {folder}")

    try:
        entries = list(folder.iterdir())
    except OSError as exc:
        raise DirectoryError(f"Cannot list input folder {folder}: {exc}") from exc

    return [path for path in entries if path.is_file() and _has_suffix(path, suffixes)]
