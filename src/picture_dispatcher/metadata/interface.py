"""MetadataExtractor interface for capture-date metadata extraction."""

from __future__ import annotations

from collections.abc import Mapping
from pathlib import Path
from typing import Any, Protocol


class MetadataExtractionError(Exception):
    """Raised when metadata cannot be extracted from a file."""

    pass


class ExtractorUnavailableError(MetadataExtractionError):
    """Raised when the extraction tool cannot be found or started."""

    pass


class MetadataExtractor(Protocol):
    """Protocol for metadata extraction handles.

    A handle wraps a long-lived resource (typically an external process)
    and is owned by exactly one classifier worker for its whole lifetime.
    Handles are not required to be thread-safe.
    """

    def get_metadata(self, path: Path) -> Mapping[str, Any]:
        """Extract metadata from a file.

        Args:
            path: Path to the file.

        Returns:
            Mapping of metadata field name to value.

        Raises:
            MetadataExtractionError: If extraction fails for this file.
        """
        ...

    def close(self) -> None:
        """Release the underlying resource. Safe to call more than once."""
        ...

    def __enter__(self) -> MetadataExtractor: ...

    def __exit__(self, *exc_info: object) -> None: ...
