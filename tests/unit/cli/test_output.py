"""Tests for cli/output.py helpers."""

import pytest

from picture_dispatcher.cli.exit_codes import ExitCode
from picture_dispatcher.cli.output import error_exit, format_summary
from picture_dispatcher.dispatcher.models import DispatchResult


def test_error_exit_prints_and_exits(capsys) -> None:
    with pytest.raises(SystemExit) as exc_info:
        error_exit("bad config", ExitCode.CONFIG_ERROR)

    assert exc_info.value.code == ExitCode.CONFIG_ERROR
    assert "Error: bad config" in capsys.readouterr().err


class TestFormatSummary:
    """Tests for format_summary()."""

    def test_counts(self) -> None:
        result = DispatchResult(
            files_found=5,
            files_moved=3,
            files_skipped=1,
            files_failed=1,
            elapsed_seconds=2.0,
        )
        assert format_summary(result) == (
            "Dispatched 3/5 file(s) in 2.0s (1 without date, 1 failed)"
        )

    def test_aborted_run_is_marked(self) -> None:
        result = DispatchResult(cancelled=True, files_cancelled=4)
        assert format_summary(result).endswith("[aborted, 4 left in place]")
