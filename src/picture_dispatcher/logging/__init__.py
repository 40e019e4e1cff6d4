"""Structured logging module for picture-dispatcher.

Provides configurable logging with JSON format support and file rotation.
Includes worker context support for the classifier pool.
"""

from picture_dispatcher.logging.config import configure_logging, parse_level
from picture_dispatcher.logging.context import (
    WorkerContextFilter,
    clear_worker_context,
    get_worker_context,
    set_worker_context,
    worker_context,
)
from picture_dispatcher.logging.handlers import JSONFormatter

__all__ = [
    "JSONFormatter",
    "WorkerContextFilter",
    "clear_worker_context",
    "configure_logging",
    "get_worker_context",
    "parse_level",
    "set_worker_context",
    "worker_context",
]
