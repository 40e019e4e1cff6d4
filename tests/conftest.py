"""Shared test fixtures for picture-dispatcher."""

from __future__ import annotations

import logging
from collections.abc import Iterable
from pathlib import Path

import pytest

from picture_dispatcher.dispatcher.models import DateFieldRule
from picture_dispatcher.logging import clear_worker_context

EXIF_DATE_PATTERN = "%Y:%m:%d %H:%M:%S"


def make_files(
    root: Path, names: Iterable[str], content: bytes = b"data"
) -> list[Path]:
    """Create files (and parent folders) under root."""
    created = []
    for name in names:
        path = root / name
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_bytes(content)
        created.append(path)
    return created


def relative_files(root: Path) -> set[str]:
    """All files under root, as POSIX paths relative to it."""
    return {p.relative_to(root).as_posix() for p in root.rglob("*") if p.is_file()}


@pytest.fixture(autouse=True)
def restore_root_logger():
    """Undo handler and level changes made by configure_logging()."""
    root_logger = logging.getLogger()
    handlers = list(root_logger.handlers)
    level = root_logger.level
    yield
    root_logger.handlers[:] = handlers
    root_logger.setLevel(level)
    clear_worker_context()


@pytest.fixture
def date_rules() -> list[DateFieldRule]:
    """CreateDate first, DateTimeOriginal as fallback."""
    return [
        DateFieldRule("CreateDate", EXIF_DATE_PATTERN),
        DateFieldRule("DateTimeOriginal", EXIF_DATE_PATTERN),
    ]


@pytest.fixture
def source_dir(tmp_path: Path) -> Path:
    path = tmp_path / "source"
    path.mkdir()
    return path


@pytest.fixture
def output_dir(tmp_path: Path) -> Path:
    path = tmp_path / "output"
    path.mkdir()
    return path


@pytest.fixture
def config_file(tmp_path: Path) -> Path:
    """Minimal valid YAML configuration."""
    path = tmp_path / "config.yaml"
    path.write_text(
        "logging_level: debug\n"
        "thread_count: 2\n"
        "output_date_format: '%Y_%m'\n"
        "date_fields:\n"
        "  - field: CreateDate\n"
        "    pattern: '%Y:%m:%d %H:%M:%S'\n"
        "  - field: DateTimeOriginal\n"
        "    pattern: '%Y:%m:%d %H:%M:%S'\n"
    )
    return path


@pytest.fixture
def make_tree():
    """Return a helper creating files under a root folder."""
    return make_files


@pytest.fixture
def list_tree():
    """Return a helper listing files under a root folder."""
    return relative_files
