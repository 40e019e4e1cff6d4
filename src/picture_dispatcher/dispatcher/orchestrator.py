"""Pipeline orchestrator wiring scanner, classifier pool and relocator."""

from __future__ import annotations

import functools
import logging
import time
from collections.abc import Callable, Iterable
from concurrent.futures import Future, ThreadPoolExecutor, wait
from pathlib import Path
from typing import TYPE_CHECKING, Any

from picture_dispatcher.dispatcher.channel import (
    POLL_INTERVAL,
    CancellationToken,
    ClosableQueue,
)
from picture_dispatcher.dispatcher.classifier import (
    DEFAULT_OUTPUT_DATE_FORMAT,
    DateClassifier,
)
from picture_dispatcher.dispatcher.models import (
    DateFieldRule,
    DispatchResult,
    RelocationIntent,
)
from picture_dispatcher.dispatcher.relocator import FileRelocator
from picture_dispatcher.dispatcher.scanner import TreeScanner
from picture_dispatcher.metadata.interface import MetadataExtractor

if TYPE_CHECKING:
    from picture_dispatcher.config.models import DispatcherConfig

logger = logging.getLogger(__name__)


def _wait_interruptibly(futures: Iterable[Future[Any]]) -> None:
    """Wait for all futures, waking up regularly so Ctrl+C is not deferred."""
    pending = set(futures)
    while pending:
        _, pending = wait(pending, timeout=POLL_INTERVAL)


class Dispatcher:
    """Moves the files of an input tree into date buckets.

    A run starts three concurrent stages sharing one cancellation token:
    the tree scanner, the classifier pool and the relocator, connected by
    two bounded queues sized to the worker count.
    """

    def __init__(
        self,
        rules: Iterable[DateFieldRule],
        extractor_factory: Callable[[], MetadataExtractor],
        output_date_format: str = DEFAULT_OUTPUT_DATE_FORMAT,
        thread_count: int | None = None,
    ) -> None:
        """Initialize the dispatcher.

        Args:
            rules: Date field rules, in priority order. Must not be empty.
            extractor_factory: Creates one extraction handle per worker.
            output_date_format: strftime pattern for bucket names.
            thread_count: Classifier worker count; None or < 1 means CPU count.
        """
        self.classifier = DateClassifier(
            rules,
            extractor_factory,
            output_date_format=output_date_format,
            thread_count=thread_count,
        )

    @classmethod
    def from_config(
        cls,
        config: DispatcherConfig,
        extractor_factory: Callable[[], MetadataExtractor] | None = None,
    ) -> Dispatcher:
        """Build a dispatcher from configuration.

        Without an explicit factory, each worker gets its own exiftool
        process using the configured executable.
        """
        if extractor_factory is None:
            from picture_dispatcher.metadata.exif import ExifToolExtractor

            extractor_factory = functools.partial(
                ExifToolExtractor, config.exiftool_path
            )
        return cls(
            config.date_fields,
            extractor_factory,
            output_date_format=config.output_date_format,
            thread_count=config.thread_count,
        )

    @property
    def thread_count(self) -> int:
        return self.classifier.thread_count

    def dispatch(self, input_root: Path, output_root: Path) -> DispatchResult:
        """Run the pipeline and block until all stages have finished.

        Per-file failures are logged and counted but do not fail the run.
        A traversal error cancels the run; the call still returns normally
        once every stage has stopped, with ``cancelled`` and ``scan_error``
        set on the result.

        On KeyboardInterrupt the token is raised, the stages are joined and
        the interrupt is re-raised; nothing is moved after that point.

        Args:
            input_root: Directory tree to dispatch.
            output_root: Directory receiving the date buckets.

        Returns:
            DispatchResult with the run's counters.
        """
        start_time = time.time()
        logger.info(
            "Dispatching %s to %s with %d worker(s)",
            input_root,
            output_root,
            self.thread_count,
        )

        cancel = CancellationToken()
        paths: ClosableQueue[Path] = ClosableQueue(self.thread_count)
        intents: ClosableQueue[RelocationIntent] = ClosableQueue(self.thread_count)
        scanner = TreeScanner(input_root, exclude=output_root)
        relocator = FileRelocator(output_root)

        with ThreadPoolExecutor(
            max_workers=3, thread_name_prefix="dispatch"
        ) as executor:
            scan_future = executor.submit(scanner.scan, paths, cancel)
            classify_future = executor.submit(
                self.classifier.run, paths, intents, cancel
            )
            relocate_future = executor.submit(relocator.drain, intents, cancel)

            try:
                _wait_interruptibly([scan_future, classify_future, relocate_future])
            except KeyboardInterrupt:
                # Stages wind down on the token; leaving the block joins them
                logger.warning("Interrupted, cancelling dispatch")
                cancel.cancel()
                raise

            files_found = scan_future.result()
            stats = classify_future.result()
            files_moved = relocate_future.result()

        result = DispatchResult(
            files_found=files_found,
            files_classified=stats.classified,
            files_moved=files_moved,
            files_skipped=stats.skipped,
            files_failed=stats.failed + relocator.files_failed,
            files_cancelled=relocator.files_skipped,
            cancelled=cancel.is_cancelled,
            scan_error=str(scanner.error) if scanner.error else None,
            elapsed_seconds=time.time() - start_time,
            input_root=str(input_root),
            output_root=str(output_root),
        )
        logger.debug("Dispatch finished: %s", result)
        return result
