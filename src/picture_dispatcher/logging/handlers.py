"""JSON log formatting for picture-dispatcher."""

from __future__ import annotations

import json
import logging
from datetime import datetime, timezone
from typing import Any

# Record attributes set by WorkerContextFilter, emitted when not None
_WORKER_FIELDS = ("worker_id", "file_path")


class JSONFormatter(logging.Formatter):
    """Format each log record as one JSON object per line.

    Keys: ``timestamp`` (ISO-8601 UTC), ``level``, ``message``, ``logger``
    (omitted for the root logger), then ``worker_id`` and ``file_path``
    when the record was emitted inside a classifier worker, and
    ``exception`` when the record carries a traceback.
    """

    def format(self, record: logging.LogRecord) -> str:
        created = datetime.fromtimestamp(record.created, tz=timezone.utc)
        entry: dict[str, Any] = {
            "timestamp": created.isoformat(),
            "level": record.levelname,
            "message": record.getMessage(),
        }
        if record.name != "root":
            entry["logger"] = record.name

        for field in _WORKER_FIELDS:
            value = getattr(record, field, None)
            if value is not None:
                entry[field] = value

        if record.exc_info:
            entry["exception"] = self.formatException(record.exc_info)

        return json.dumps(entry)
