"""ExifTool-based implementation of the MetadataExtractor protocol."""

from __future__ import annotations

import logging
import shutil
from pathlib import Path
from typing import Any

import exiftool
from exiftool.exceptions import ExifToolException

from picture_dispatcher.metadata.interface import (
    ExtractorUnavailableError,
    MetadataExtractionError,
)

logger = logging.getLogger(__name__)

EXIFTOOL_BINARY = "exiftool"

# Keys exiftool adds to every record that are not file metadata
_IGNORED_KEYS = frozenset({"SourceFile"})


def resolve_exiftool_path(configured: Path | None = None) -> Path | None:
    """Locate the exiftool executable.

    Args:
        configured: Explicit path from configuration, if any.

    Returns:
        The configured path if it is an existing file, otherwise the
        exiftool found on PATH, or None if neither is available.
    """
    if configured is not None:
        configured = configured.expanduser()
        if configured.is_file():
            return configured
        logger.warning(
            "Configured exiftool path %s does not exist, falling back to PATH",
            configured,
        )
    found = shutil.which(EXIFTOOL_BINARY)
    return Path(found) if found else None


class ExifToolExtractor:
    """Extracts metadata through one long-running exiftool process.

    The process is started once and kept in ``-stay_open`` mode until
    :meth:`close`. Field names are returned without group prefixes
    (``CreateDate`` rather than ``EXIF:CreateDate``).
    """

    def __init__(self, executable: Path | None = None) -> None:
        """Start the exiftool process.

        Args:
            executable: Path to exiftool. If not provided, uses PATH.

        Raises:
            ExtractorUnavailableError: If exiftool cannot be started.
        """
        self._executable = executable or resolve_exiftool_path()
        if self._executable is None:
            raise ExtractorUnavailableError(
                "exiftool is not installed or not in PATH. "
                "Install exiftool or set exiftool_path in the configuration."
            )
        try:
            self._helper = exiftool.ExifToolHelper(
                executable=str(self._executable),
                common_args=[],
            )
            self._helper.run()
        except (OSError, ExifToolException) as e:
            raise ExtractorUnavailableError(
                f"Could not start exiftool ({self._executable}): {e}"
            ) from e

    def __enter__(self) -> ExifToolExtractor:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    def get_metadata(self, path: Path) -> dict[str, Any]:
        """Extract metadata from a file.

        Raises:
            MetadataExtractionError: If exiftool fails or returns nothing.
        """
        try:
            records = self._helper.get_metadata(str(path))
        except (ExifToolException, ValueError) as e:
            raise MetadataExtractionError(
                f"exiftool failed for {path}: {e}"
            ) from e

        if not records:
            raise MetadataExtractionError(f"exiftool returned no data for {path}")

        return {
            key: value
            for key, value in records[0].items()
            if key not in _IGNORED_KEYS
        }

    def close(self) -> None:
        if self._helper.running:
            self._helper.terminate()
