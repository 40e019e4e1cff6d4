"""Unit tests for JSONFormatter."""

from __future__ import annotations

import json
import logging
import sys

from picture_dispatcher.logging.context import WorkerContextFilter, worker_context
from picture_dispatcher.logging.handlers import JSONFormatter


def _record(name: str = "picture_dispatcher.test") -> logging.LogRecord:
    return logging.LogRecord(
        name, logging.WARNING, __file__, 10, "moved %d file(s)", (3,), None
    )


class TestJSONFormatter:
    """Tests for JSONFormatter.format()."""

    def test_basic_fields(self) -> None:
        entry = json.loads(JSONFormatter().format(_record()))

        assert entry == {
            "timestamp": entry["timestamp"],
            "level": "WARNING",
            "message": "moved 3 file(s)",
            "logger": "picture_dispatcher.test",
        }
        assert entry["timestamp"].endswith("+00:00")

    def test_root_logger_name_is_omitted(self) -> None:
        entry = json.loads(JSONFormatter().format(_record(name="root")))
        assert "logger" not in entry

    def test_worker_fields_are_top_level(self) -> None:
        record = _record()
        with worker_context("01", "/photos/a.jpg"):
            WorkerContextFilter().filter(record)

        entry = json.loads(JSONFormatter().format(record))

        assert entry["worker_id"] == "01"
        assert entry["file_path"] == "/photos/a.jpg"

    def test_worker_without_file(self) -> None:
        record = _record()
        with worker_context("02"):
            WorkerContextFilter().filter(record)

        entry = json.loads(JSONFormatter().format(record))

        assert entry["worker_id"] == "02"
        assert "file_path" not in entry

    def test_outside_worker_has_no_worker_fields(self) -> None:
        record = _record()
        WorkerContextFilter().filter(record)

        entry = json.loads(JSONFormatter().format(record))

        assert "worker_id" not in entry
        assert "file_path" not in entry

    def test_record_extras_are_not_emitted(self) -> None:
        record = _record()
        record.bucket = "2019_04"

        entry = json.loads(JSONFormatter().format(record))

        assert "bucket" not in entry

    def test_exception_is_formatted(self) -> None:
        try:
            raise OSError("disk full")
        except OSError:
            record = logging.LogRecord(
                "x", logging.ERROR, __file__, 1, "failed", None, sys.exc_info()
            )

        entry = json.loads(JSONFormatter().format(record))

        assert "OSError: disk full" in entry["exception"]
