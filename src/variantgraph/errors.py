"""Exception hierarchy for annotation graph import runs.

Every failure below is fatal to a run: nothing is retried or skipped, and
output written before the failure is left on disk as-is.
"""

from __future__ import annotations

from pathlib import Path


class VariantGraphError(Exception):
    """Base exception for all variantgraph failures."""


class ConfigurationError(VariantGraphError):
    """Raised for invalid run settings."""


class DirectoryError(VariantGraphError):
    """Raised when the input folder is missing or cannot be listed."""


class InputReadError(VariantGraphError):
    """Raised when an input file cannot be opened or read."""


class OutputWriteError(VariantGraphError):
    """Raised when an output CSV file cannot be opened, written or flushed."""


class RecordDecodeError(VariantGraphError):
    """Raised when a line is not valid JSON or does not match the record schema."""

    def __init__(self, message: str, *, source: Path | str | None = None, line_number: int | None = None):
        location = ""
        if source is not None:
            location = f"{source}:{line_number}: " if line_number is not None else f"{source}: "
        super().__init__(f"{location}{message}")
        self.source = source
        self.line_number = line_number


class DeliveryError(VariantGraphError):
    """Raised when a subscriber fails while handling a published record."""


class PoolTimeoutError(VariantGraphError):
    """Raised when queued deliveries do not drain within the shutdown timeout."""


class DrainInterruptedError(VariantGraphError):
    """Raised when the shutdown drain wait is interrupted."""
