"""Worker context for structured logging.

Provides context propagation for classifier worker threads using
contextvars, enabling automatic injection of worker_id and file_path
into log records.
"""

from __future__ import annotations

import contextvars
import logging
from contextlib import contextmanager
from pathlib import Path
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Generator

_worker_id: contextvars.ContextVar[str | None] = contextvars.ContextVar(
    "worker_id", default=None
)
_file_path: contextvars.ContextVar[str | None] = contextvars.ContextVar(
    "file_path", default=None
)


def set_worker_context(
    worker_id: str,
    file_path: Path | str | None = None,
) -> None:
    """Set the current worker context.

    Args:
        worker_id: Worker identifier (e.g., "01", "02").
        file_path: Path of the file being processed, or None.
    """
    _worker_id.set(worker_id)
    _file_path.set(str(file_path) if file_path is not None else None)


def clear_worker_context() -> None:
    """Clear the current worker context."""
    _worker_id.set(None)
    _file_path.set(None)


@contextmanager
def worker_context(
    worker_id: str,
    file_path: Path | str | None = None,
) -> Generator[None, None, None]:
    """Context manager for worker processing context.

    Sets worker context on entry and restores the previous one on exit,
    so contexts can be nested (worker, then worker plus file).

    Example:
        with worker_context("01", "/photos/IMG_0001.JPG"):
            logger.warning("extraction failed")  # Includes worker and file
    """
    old_worker_id = _worker_id.get()
    old_file_path = _file_path.get()
    try:
        set_worker_context(worker_id, file_path)
        yield
    finally:
        _worker_id.set(old_worker_id)
        _file_path.set(old_file_path)


def get_worker_context() -> tuple[str | None, str | None]:
    """Get current worker context.

    Returns:
        Tuple of (worker_id, file_path), either may be None.
    """
    return _worker_id.get(), _file_path.get()


class WorkerContextFilter(logging.Filter):
    """Logging filter that injects worker context into log records.

    Adds worker_id and file_path attributes to every LogRecord. For text
    format, also adds a worker_tag such as ``[W01] `` (empty outside
    workers).
    """

    def filter(self, record: logging.LogRecord) -> bool:
        worker_id, file_path = get_worker_context()

        record.worker_id = worker_id
        record.file_path = file_path
        record.worker_tag = f"[W{worker_id}] " if worker_id else ""

        return True  # Never filter out records
