"""Unit tests for logging context module."""

from __future__ import annotations

import logging
import threading
from pathlib import Path

from picture_dispatcher.logging.context import (
    WorkerContextFilter,
    clear_worker_context,
    get_worker_context,
    set_worker_context,
    worker_context,
)


def _record() -> logging.LogRecord:
    return logging.LogRecord("test", logging.INFO, __file__, 1, "msg", None, None)


class TestSetAndGetWorkerContext:
    """Tests for set_worker_context and get_worker_context functions."""

    def test_set_and_get(self) -> None:
        set_worker_context("01", Path("/photos/a.jpg"))
        assert get_worker_context() == ("01", "/photos/a.jpg")
        clear_worker_context()

    def test_default_context_is_none(self) -> None:
        clear_worker_context()
        assert get_worker_context() == (None, None)


class TestWorkerContextManager:
    """Tests for worker_context context manager."""

    def test_nested_contexts_restore_outer(self) -> None:
        """Leaving the per-file context keeps the worker context."""
        with worker_context("02"):
            with worker_context("02", "/photos/b.jpg"):
                assert get_worker_context() == ("02", "/photos/b.jpg")
            assert get_worker_context() == ("02", None)
        assert get_worker_context() == (None, None)

    def test_restores_on_exception(self) -> None:
        try:
            with worker_context("03", "/photos/c.jpg"):
                raise RuntimeError("boom")
        except RuntimeError:
            pass
        assert get_worker_context() == (None, None)

    def test_threads_are_isolated(self) -> None:
        """Each thread sees only its own context."""
        seen: dict[str, tuple] = {}
        barrier = threading.Barrier(2)

        def worker(worker_id: str) -> None:
            with worker_context(worker_id):
                barrier.wait()
                seen[worker_id] = get_worker_context()

        threads = [threading.Thread(target=worker, args=(w,)) for w in ("01", "02")]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()

        assert seen == {"01": ("01", None), "02": ("02", None)}


class TestWorkerContextFilter:
    """Tests for WorkerContextFilter."""

    def test_adds_tag_inside_worker(self) -> None:
        record = _record()
        with worker_context("07", "/photos/d.jpg"):
            assert WorkerContextFilter().filter(record) is True

        assert record.worker_id == "07"
        assert record.file_path == "/photos/d.jpg"
        assert record.worker_tag == "[W07] "

    def test_empty_tag_outside_worker(self) -> None:
        record = _record()
        WorkerContextFilter().filter(record)

        assert record.worker_id is None
        assert record.worker_tag == ""
