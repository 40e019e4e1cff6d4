"""Configuration loading with precedence handling.

Precedence (highest to lowest):
1. CLI arguments
2. Environment variables (PICTURE_DISPATCHER_*)
3. Config file (YAML; JSON files load too)
4. Default values
"""

from __future__ import annotations

import dataclasses
import logging
from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from picture_dispatcher.config.env import (
    ENV_EXIFTOOL_PATH,
    ENV_LOG_LEVEL,
    ENV_THREAD_COUNT,
    EnvReader,
)
from picture_dispatcher.config.models import (
    DEFAULT_OUTPUT_DATE_FORMAT,
    DispatcherConfig,
    LoggingConfig,
)
from picture_dispatcher.dispatcher.models import DateFieldRule

logger = logging.getLogger(__name__)

VALID_LOG_LEVELS = ("debug", "info", "warning", "error")
VALID_LOG_FORMATS = ("text", "json")


class ConfigError(Exception):
    """Error while loading or validating configuration."""

    def __init__(self, message: str, field: str | None = None) -> None:
        self.message = message
        self.field = field
        super().__init__(message)


def _check_pattern(value: str) -> str:
    if "%" not in value:
        raise ValueError(f"pattern has no % directive: {value!r}")
    return value


class DateFieldModel(BaseModel):
    """Pydantic model for one date field rule."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    field: str = Field(min_length=1)
    pattern: str = Field(min_length=1)

    @field_validator("pattern")
    @classmethod
    def validate_pattern(cls, v: str) -> str:
        return _check_pattern(v)


class ConfigFileModel(BaseModel):
    """Pydantic model for the configuration file.

    Keys are snake_case; the camelCase spellings used by earlier
    configuration files are accepted as aliases.
    """

    model_config = ConfigDict(extra="forbid", frozen=True, populate_by_name=True)

    logging_level: str | None = Field(default=None, alias="loggingLevel")
    log_file: str | None = None
    log_format: str = "text"
    thread_count: int | None = Field(default=None, alias="threadCount")
    date_fields: list[DateFieldModel] = Field(alias="dateFields")
    output_date_format: str | None = Field(default=None, alias="outputDateFormat")
    exiftool_path: str | None = Field(default=None, alias="exiftoolPath")
    remove_live_videos: bool = True

    @field_validator("logging_level")
    @classmethod
    def validate_logging_level(cls, v: str | None) -> str | None:
        if v is None:
            return v
        if v.lower() not in VALID_LOG_LEVELS:
            raise ValueError(f"must be one of {list(VALID_LOG_LEVELS)}, got {v!r}")
        return v.lower()

    @field_validator("log_format")
    @classmethod
    def validate_log_format(cls, v: str) -> str:
        if v.lower() not in VALID_LOG_FORMATS:
            raise ValueError(f"must be one of {list(VALID_LOG_FORMATS)}, got {v!r}")
        return v.lower()

    @field_validator("output_date_format")
    @classmethod
    def validate_output_date_format(cls, v: str | None) -> str | None:
        if v is None:
            return v
        return _check_pattern(v)


def _field_name(loc: tuple[int | str, ...]) -> str | None:
    """Map a pydantic error location to the snake_case field name."""
    if not loc:
        return None
    head = str(loc[0])
    for name, info in ConfigFileModel.model_fields.items():
        if head in (name, info.alias):
            return name
    return head


def _format_validation_error(error: ValidationError) -> ConfigError:
    """Turn a pydantic validation error into a ConfigError."""
    errors = error.errors()
    if not errors:
        return ConfigError(f"Config validation failed: {error}")
    first_error = errors[0]
    loc = tuple(first_error.get("loc", ()))
    msg = first_error.get("msg", str(error))
    if loc:
        location = ".".join(str(x) for x in loc)
        return ConfigError(
            f"Config validation failed: {location}: {msg}", field=_field_name(loc)
        )
    return ConfigError(f"Config validation failed: {msg}")


def _normalize_thread_count(value: int | None, source: str) -> int | None:
    if value is not None and value < 1:
        logger.warning(
            "Thread count %d from %s is lower than 1, using the CPU count",
            value,
            source,
        )
        return None
    return value


def parse_config_data(data: Any) -> DispatcherConfig:
    """Validate parsed configuration data and build a DispatcherConfig.

    Args:
        data: Result of parsing the configuration file.

    Returns:
        DispatcherConfig with file values and defaults.

    Raises:
        ConfigError: If the data is not a valid configuration.
    """
    if data is None:
        raise ConfigError("Config file is empty")
    if not isinstance(data, dict):
        raise ConfigError("Config file must be a mapping")

    try:
        model = ConfigFileModel.model_validate(data)
    except ValidationError as e:
        raise _format_validation_error(e) from e

    if not model.date_fields:
        raise ConfigError("No date field configured", field="date_fields")

    if model.logging_level is None:
        logger.warning("No logging level specified, using info")
        level = "info"
    else:
        level = model.logging_level

    if model.output_date_format is None:
        logger.warning(
            "No output date format specified, using %s", DEFAULT_OUTPUT_DATE_FORMAT
        )
        output_date_format = DEFAULT_OUTPUT_DATE_FORMAT
    else:
        output_date_format = model.output_date_format

    return DispatcherConfig(
        date_fields=tuple(
            DateFieldRule(field=entry.field, pattern=entry.pattern)
            for entry in model.date_fields
        ),
        thread_count=_normalize_thread_count(model.thread_count, "config file"),
        output_date_format=output_date_format,
        exiftool_path=Path(model.exiftool_path) if model.exiftool_path else None,
        remove_live_videos=model.remove_live_videos,
        logging=LoggingConfig(
            level=level,
            file=Path(model.log_file) if model.log_file else None,
            format=model.log_format,
        ),
    )


def load_config_file(path: Path) -> DispatcherConfig:
    """Load and validate configuration from a YAML (or JSON) file.

    Args:
        path: Path to the config file.

    Returns:
        Validated DispatcherConfig.

    Raises:
        ConfigError: If the file is missing, unreadable or invalid.
    """
    if not path.is_file():
        raise ConfigError(f"Config file not found: {path}")

    try:
        with open(path, encoding="utf-8") as f:
            data = yaml.safe_load(f)
    except yaml.YAMLError as e:
        raise ConfigError(f"Invalid YAML syntax in {path}: {e}") from e
    except OSError as e:
        raise ConfigError(f"Cannot read config file {path}: {e}") from e

    config = parse_config_data(data)
    logger.debug("Loaded config from %s", path)
    return config


def get_config(
    config_path: Path,
    # CLI overrides (highest precedence)
    thread_count: int | None = None,
    exiftool_path: Path | None = None,
    log_level: str | None = None,
    log_file: Path | None = None,
    log_format: str | None = None,
    remove_live_videos: bool | None = None,
    env_reader: EnvReader | None = None,
) -> DispatcherConfig:
    """Get configuration with full precedence handling.

    Args:
        config_path: Path to the config file.
        thread_count: CLI override for the classifier worker count.
        exiftool_path: CLI override for the exiftool executable.
        log_level: CLI override for the log level.
        log_file: CLI override for the log file.
        log_format: CLI override for the log format.
        remove_live_videos: CLI override for the companion-video pass.
        env_reader: Environment reader; defaults to os.environ.

    Returns:
        DispatcherConfig with merged configuration.

    Raises:
        ConfigError: If the file or a merged value is invalid.
    """
    env = env_reader if env_reader is not None else EnvReader()
    file_config = load_config_file(config_path)

    if thread_count is not None:
        resolved_threads = _normalize_thread_count(thread_count, "command line")
    elif (env_threads := env.get_int(ENV_THREAD_COUNT)) is not None:
        resolved_threads = _normalize_thread_count(env_threads, ENV_THREAD_COUNT)
    else:
        resolved_threads = file_config.thread_count

    file_logging = file_config.logging
    try:
        logging_config = dataclasses.replace(
            file_logging,
            level=log_level or env.get_str(ENV_LOG_LEVEL) or file_logging.level,
            file=log_file or file_logging.file,
            format=log_format or file_logging.format,
        )
    except ValueError as e:
        raise ConfigError(str(e), field="logging_level") from e

    return dataclasses.replace(
        file_config,
        thread_count=resolved_threads,
        exiftool_path=(
            exiftool_path
            or env.get_path(ENV_EXIFTOOL_PATH)
            or file_config.exiftool_path
        ),
        remove_live_videos=(
            file_config.remove_live_videos
            if remove_live_videos is None
            else remove_live_videos
        ),
        logging=logging_config,
    )
