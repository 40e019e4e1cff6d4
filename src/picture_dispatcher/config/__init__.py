"""Configuration module for picture-dispatcher.

This module provides configuration management with layered precedence:
1. CLI arguments (highest)
2. Environment variables (PICTURE_DISPATCHER_*)
3. Config file
4. Default values (lowest)
"""

from picture_dispatcher.config.env import EnvReader
from picture_dispatcher.config.loader import (
    ConfigError,
    get_config,
    load_config_file,
    parse_config_data,
)
from picture_dispatcher.config.models import DispatcherConfig, LoggingConfig

__all__ = [
    "ConfigError",
    "DispatcherConfig",
    "EnvReader",
    "LoggingConfig",
    "get_config",
    "load_config_file",
    "parse_config_data",
]
