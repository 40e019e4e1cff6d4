"""Data types shared by the dispatch pipeline stages."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path


class DispatchError(Exception):
    """Base error for the dispatch pipeline."""

    pass


class TraversalError(DispatchError):
    """Raised when the input tree cannot be walked."""

    def __init__(self, path: Path | str, cause: OSError) -> None:
        self.path = str(path)
        self.cause = cause
        super().__init__(f"error when browsing file {self.path}: {cause}")


@dataclass(frozen=True)
class DateFieldRule:
    """A metadata field and the strptime pattern used to parse its value."""

    field: str
    pattern: str


@dataclass(frozen=True)
class RelocationIntent:
    """A pending move of one source file into a date bucket.

    The bucket is a formatted date string, not a path; the relocator
    joins it with the output root.
    """

    source: Path
    bucket: str


@dataclass
class ClassifierStats:
    """Per-worker counters, merged after the pool's join barrier."""

    classified: int = 0
    skipped: int = 0
    failed: int = 0

    def merge(self, other: ClassifierStats) -> None:
        self.classified += other.classified
        self.skipped += other.skipped
        self.failed += other.failed


@dataclass
class DispatchResult:
    """Aggregate outcome of one pipeline run."""

    files_found: int = 0
    files_classified: int = 0
    files_moved: int = 0
    files_skipped: int = 0  # No configured date field present
    files_failed: int = 0  # Extraction, parse or move errors
    files_cancelled: int = 0  # Dated but left in place after cancellation
    cancelled: bool = False
    scan_error: str | None = None
    elapsed_seconds: float = 0.0
    input_root: str | None = None
    output_root: str | None = None
