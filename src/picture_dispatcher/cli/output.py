"""Output helpers for the command line."""

from __future__ import annotations

import sys
from typing import NoReturn

import click

from picture_dispatcher.cli.exit_codes import ExitCode
from picture_dispatcher.dispatcher.models import DispatchResult


def error_exit(message: str, code: ExitCode) -> NoReturn:
    """Print an error message to stderr and exit with the given code."""
    click.echo(f"Error: {message}", err=True)
    sys.exit(code)


def format_summary(result: DispatchResult) -> str:
    """One-line summary of a dispatch run."""
    summary = (
        f"Dispatched {result.files_moved}/{result.files_found} file(s) "
        f"in {result.elapsed_seconds:.1f}s "
        f"({result.files_skipped} without date, {result.files_failed} failed)"
    )
    if result.cancelled:
        summary += f" [aborted, {result.files_cancelled} left in place]"
    return summary
