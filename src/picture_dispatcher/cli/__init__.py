"""CLI module for picture-dispatcher."""

from __future__ import annotations

import functools
import logging
import sys
from collections.abc import Callable
from pathlib import Path

import click

from picture_dispatcher import __version__
from picture_dispatcher.cli.exit_codes import ExitCode
from picture_dispatcher.cli.output import error_exit, format_summary
from picture_dispatcher.config import ConfigError, get_config
from picture_dispatcher.dispatcher import (
    Dispatcher,
    TraversalError,
    remove_live_videos,
)
from picture_dispatcher.logging import configure_logging
from picture_dispatcher.metadata import (
    ExifToolExtractor,
    MetadataExtractor,
    resolve_exiftool_path,
)

logger = logging.getLogger(__name__)

DEFAULT_OUTPUT_DIRNAME = "out"


def make_extractor_factory(executable: Path) -> Callable[[], MetadataExtractor]:
    """Factory giving each classifier worker its own exiftool process."""
    return functools.partial(ExifToolExtractor, executable)


@click.command(name="picture-dispatcher")
@click.version_option(version=__version__, prog_name="picture-dispatcher")
@click.option(
    "--source",
    "-s",
    "source",
    type=click.Path(path_type=Path),
    default=None,
    help="Folder containing the pictures to dispatch",
)
@click.option(
    "--dest",
    "-d",
    "dest",
    type=click.Path(path_type=Path),
    default=None,
    help="Output folder (default: SOURCE/out)",
)
@click.option(
    "--config",
    "-c",
    "config_path",
    type=click.Path(path_type=Path),
    default=None,
    help="Path to the YAML (or JSON) configuration file",
)
@click.option(
    "--threads",
    "thread_count",
    type=int,
    default=None,
    help="Number of classifier workers (overrides config)",
)
@click.option(
    "--exiftool",
    "exiftool_path",
    type=click.Path(path_type=Path),
    default=None,
    help="Path to the exiftool executable (overrides config)",
)
@click.option(
    "--log-level",
    type=click.Choice(["debug", "info", "warning", "error"], case_sensitive=False),
    default=None,
    help="Log level (overrides config)",
)
@click.option(
    "--log-file",
    type=click.Path(path_type=Path),
    default=None,
    help="Write logs to this file instead of stderr",
)
@click.option(
    "--log-json",
    is_flag=True,
    default=False,
    help="Emit logs as JSON objects",
)
@click.option(
    "--keep-live-videos",
    is_flag=True,
    default=False,
    help="Do not delete the .MOV companions of JPEG images",
)
def main(
    source: Path | None,
    dest: Path | None,
    config_path: Path | None,
    thread_count: int | None,
    exiftool_path: Path | None,
    log_level: str | None,
    log_file: Path | None,
    log_json: bool,
    keep_live_videos: bool,
) -> None:
    """Move pictures into folders named after the date they were taken.

    Dates are read from the metadata fields listed in the configuration,
    in order; files without any of them stay where they are.
    """
    if source is None:
        error_exit("Missing source folder (-s)", ExitCode.INVALID_ARGUMENTS)
    if config_path is None:
        error_exit("Missing configuration file (-c)", ExitCode.INVALID_ARGUMENTS)

    try:
        config = get_config(
            config_path,
            thread_count=thread_count,
            exiftool_path=exiftool_path,
            log_level=log_level.lower() if log_level else None,
            log_file=log_file,
            log_format="json" if log_json else None,
            remove_live_videos=False if keep_live_videos else None,
        )
    except ConfigError as e:
        error_exit(f"Configuration error: {e}", ExitCode.CONFIG_ERROR)

    configure_logging(config.logging)

    if not source.is_dir():
        error_exit(f"Source folder not found: {source}", ExitCode.TARGET_NOT_FOUND)

    if dest is None:
        dest = source / DEFAULT_OUTPUT_DIRNAME
        logger.info("No output folder specified, using %s", dest)
    try:
        dest.mkdir(parents=True, exist_ok=True)
    except OSError as e:
        error_exit(
            f"Cannot create output folder {dest}: {e}", ExitCode.CONFIG_ERROR
        )

    executable = resolve_exiftool_path(config.exiftool_path)
    if executable is None:
        error_exit(
            "exiftool is not installed or not in PATH. "
            "Install exiftool or set exiftool_path in the configuration.",
            ExitCode.TOOL_NOT_AVAILABLE,
        )

    try:
        if config.remove_live_videos:
            try:
                remove_live_videos(source)
            except TraversalError as e:
                logger.error("Error while removing live videos: %s", e)
                error_exit(str(e), ExitCode.OPERATION_FAILED)

        dispatcher = Dispatcher.from_config(
            config, extractor_factory=make_extractor_factory(executable)
        )
        result = dispatcher.dispatch(source, dest)
    except KeyboardInterrupt:
        error_exit("Interrupted", ExitCode.INTERRUPTED)

    click.echo(format_summary(result))

    if result.scan_error:
        sys.exit(ExitCode.OPERATION_FAILED)
    sys.exit(ExitCode.SUCCESS)
