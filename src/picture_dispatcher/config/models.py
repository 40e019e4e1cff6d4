"""Configuration data models for picture-dispatcher.

This module defines the resolved configuration handed to the dispatcher
and to the logging setup, after file, environment and CLI layers have
been merged.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path

from picture_dispatcher.dispatcher.classifier import DEFAULT_OUTPUT_DATE_FORMAT
from picture_dispatcher.dispatcher.models import DateFieldRule


@dataclass
class LoggingConfig:
    """Configuration for structured logging."""

    # Log level: debug, info, warning, error
    level: str = "info"

    # Log file path (None = stderr only)
    file: Path | None = None

    # Log format: text or json
    format: str = "text"

    # Also log to stderr when file is set
    include_stderr: bool = False

    # Rotation threshold in bytes (default 10MB)
    max_bytes: int = 10_485_760

    # Number of rotated files to keep
    backup_count: int = 5

    def __post_init__(self) -> None:
        """Validate configuration."""
        valid_levels = {"debug", "info", "warning", "error"}
        if self.level.lower() not in valid_levels:
            raise ValueError(f"level must be one of {valid_levels}, got {self.level}")
        valid_formats = {"text", "json"}
        if self.format.lower() not in valid_formats:
            raise ValueError(
                f"format must be one of {valid_formats}, got {self.format}"
            )
        if self.max_bytes < 1:
            raise ValueError(f"max_bytes must be positive, got {self.max_bytes}")
        if self.backup_count < 0:
            raise ValueError(
                f"backup_count must be non-negative, got {self.backup_count}"
            )


@dataclass(frozen=True)
class DispatcherConfig:
    """Resolved dispatcher configuration.

    This dataclass is immutable (frozen); the date field rules are kept
    as a tuple so their priority order cannot be changed after loading.
    """

    # Ordered rules; the first field present in a file's metadata wins
    date_fields: tuple[DateFieldRule, ...]

    # Classifier worker count (None = CPU count)
    thread_count: int | None = None

    # strftime pattern used to name buckets
    output_date_format: str = DEFAULT_OUTPUT_DATE_FORMAT

    # exiftool executable (None = look up in PATH)
    exiftool_path: Path | None = None

    # Delete .MOV companions of JPEG images before dispatching
    remove_live_videos: bool = True

    logging: LoggingConfig = field(default_factory=LoggingConfig)

    def __post_init__(self) -> None:
        """Validate configuration."""
        if not self.date_fields:
            raise ValueError("date_fields must contain at least one rule")
        if not isinstance(self.date_fields, tuple):
            object.__setattr__(self, "date_fields", tuple(self.date_fields))
