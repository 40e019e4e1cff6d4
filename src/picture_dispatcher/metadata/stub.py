"""Stub implementation of MetadataExtractor for development and testing."""

from __future__ import annotations

import threading
from collections.abc import Mapping
from pathlib import Path
from typing import Any

from picture_dispatcher.metadata.interface import MetadataExtractionError


class StubExtractor:
    """Returns canned metadata keyed by file name.

    Lookups try the full path first, then the base name, so a test can
    describe a tree by file names alone. Files listed in ``failures``
    raise MetadataExtractionError; unknown files return empty metadata.
    """

    def __init__(
        self,
        metadata: Mapping[str, Mapping[str, Any]] | None = None,
        failures: Mapping[str, str] | None = None,
    ) -> None:
        self.metadata = dict(metadata or {})
        self.failures = dict(failures or {})
        self.extracted: list[Path] = []
        self.closed = False

    def __enter__(self) -> StubExtractor:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    def _lookup(self, table: Mapping[str, Any], path: Path) -> Any:
        if str(path) in table:
            return table[str(path)]
        return table.get(path.name)

    def get_metadata(self, path: Path) -> dict[str, Any]:
        if self.closed:
            raise MetadataExtractionError("extractor is closed")
        self.extracted.append(path)
        failure = self._lookup(self.failures, path)
        if failure is not None:
            raise MetadataExtractionError(failure)
        return dict(self._lookup(self.metadata, path) or {})

    def close(self) -> None:
        self.closed = True


class StubExtractorFactory:
    """Creates StubExtractor handles sharing one metadata table.

    Keeps every handle it created so tests can check that each worker
    opened exactly one handle and closed it.
    """

    def __init__(
        self,
        metadata: Mapping[str, Mapping[str, Any]] | None = None,
        failures: Mapping[str, str] | None = None,
    ) -> None:
        self.metadata = metadata
        self.failures = failures
        self.handles: list[StubExtractor] = []
        self._lock = threading.Lock()

    def __call__(self) -> StubExtractor:
        handle = StubExtractor(self.metadata, self.failures)
        with self._lock:
            self.handles.append(handle)
        return handle
