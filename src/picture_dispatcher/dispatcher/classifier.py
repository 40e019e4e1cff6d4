"""Date classification worker pool.

Each worker owns one metadata extraction handle for its whole lifetime,
pulls paths from the shared path queue and emits relocation intents for
files whose capture date could be determined.
"""

from __future__ import annotations

import logging
import os
import threading
from collections.abc import Callable, Iterable, Mapping
from datetime import datetime
from pathlib import Path
from typing import Any

from picture_dispatcher.dispatcher.channel import CancellationToken, ClosableQueue
from picture_dispatcher.dispatcher.models import (
    ClassifierStats,
    DateFieldRule,
    DispatchError,
    RelocationIntent,
)
from picture_dispatcher.logging import worker_context
from picture_dispatcher.metadata.interface import (
    MetadataExtractionError,
    MetadataExtractor,
)

logger = logging.getLogger(__name__)

DEFAULT_OUTPUT_DATE_FORMAT = "%Y_%m"


class NoDateFoundError(DispatchError):
    """None of the configured date fields is present in the metadata."""

    pass


class DateParseError(DispatchError):
    """A configured date field is present but its value does not parse."""

    def __init__(self, rule: DateFieldRule, value: Any, cause: Exception) -> None:
        self.rule = rule
        self.value = value
        super().__init__(
            f"error when parsing date {value!r} from {rule.field} "
            f"with pattern {rule.pattern!r}: {cause}"
        )


def resolve_thread_count(requested: int | None) -> int:
    """Return the worker count, defaulting to the CPU count.

    Args:
        requested: Configured count; None or values below 1 mean default.
    """
    if requested is None or requested < 1:
        return os.cpu_count() or 1
    return requested


def guess_date(
    metadata: Mapping[str, Any], rules: Iterable[DateFieldRule]
) -> datetime:
    """Parse the capture date using the first rule whose field is present.

    Rules are tried in order and the first field present wins, even if
    its value turns out to be malformed.

    Raises:
        NoDateFoundError: If no rule's field is present.
        DateParseError: If the selected field's value does not parse.
    """
    for rule in rules:
        if rule.field not in metadata:
            continue
        value = metadata[rule.field]
        try:
            return datetime.strptime(str(value), rule.pattern)
        except ValueError as e:
            raise DateParseError(rule, value, e) from e
    raise NoDateFoundError("No date found")


class DateClassifier:
    """Fixed-size pool of workers turning paths into relocation intents."""

    def __init__(
        self,
        rules: Iterable[DateFieldRule],
        extractor_factory: Callable[[], MetadataExtractor],
        output_date_format: str = DEFAULT_OUTPUT_DATE_FORMAT,
        thread_count: int | None = None,
    ) -> None:
        """Initialize the pool.

        Args:
            rules: Date field rules, in priority order.
            extractor_factory: Creates one extraction handle per worker.
            output_date_format: strftime pattern for bucket names.
            thread_count: Worker count; None or < 1 means CPU count.

        Raises:
            ValueError: If no rules are given.
        """
        self.rules: tuple[DateFieldRule, ...] = tuple(rules)
        if not self.rules:
            raise ValueError("at least one date field rule is required")
        self.extractor_factory = extractor_factory
        self.output_date_format = output_date_format
        self.thread_count = resolve_thread_count(thread_count)
        self._failed_starts = 0
        self._lock = threading.Lock()

    def bucket_for(self, metadata: Mapping[str, Any]) -> str:
        """Return the bucket name for a file's metadata.

        Raises:
            NoDateFoundError: If no rule's field is present.
            DateParseError: If the selected field's value does not parse.
        """
        return guess_date(metadata, self.rules).strftime(self.output_date_format)

    def run(
        self,
        paths: ClosableQueue[Path],
        intents: ClosableQueue[RelocationIntent],
        cancel: CancellationToken,
    ) -> ClassifierStats:
        """Run all workers to completion, then close the intent queue.

        Workers stop when the path queue is closed and drained or when
        cancellation is observed. The intent queue is closed exactly once,
        after every worker has been joined.

        Returns:
            Counters merged from all workers.
        """
        self._failed_starts = 0
        worker_stats = [ClassifierStats() for _ in range(self.thread_count)]
        threads = [
            threading.Thread(
                target=self._work,
                args=(f"{i + 1:02d}", paths, intents, cancel, worker_stats[i]),
                name=f"classifier-{i + 1:02d}",
                daemon=True,
            )
            for i in range(self.thread_count)
        ]
        started: list[threading.Thread] = []
        try:
            for thread in threads:
                thread.start()
                started.append(thread)
        except RuntimeError:
            logger.error(
                "Only %d of %d classifier worker(s) could start, cancelling run",
                len(started),
                len(threads),
            )
            cancel.cancel()
            raise
        finally:
            # Close only once no started worker can put() any more
            for thread in started:
                thread.join()
            intents.close()

        total = ClassifierStats()
        for stats in worker_stats:
            total.merge(stats)
        return total

    def _record_failed_start(self, cancel: CancellationToken) -> None:
        with self._lock:
            self._failed_starts += 1
            all_failed = self._failed_starts >= self.thread_count
        if all_failed:
            # Nobody would drain the path queue; stop the scanner
            logger.error("No classifier worker could start, cancelling run")
            cancel.cancel()

    def _work(
        self,
        worker_id: str,
        paths: ClosableQueue[Path],
        intents: ClosableQueue[RelocationIntent],
        cancel: CancellationToken,
        stats: ClassifierStats,
    ) -> None:
        with worker_context(worker_id):
            try:
                extractor = self.extractor_factory()
            except MetadataExtractionError as e:
                logger.error("error while initializing metadata extractor: %s", e)
                self._record_failed_start(cancel)
                return
            except Exception:
                logger.exception("Unexpected error while initializing extractor")
                self._record_failed_start(cancel)
                return

            try:
                while not cancel.is_cancelled:
                    path = paths.get(cancel)
                    if path is None:
                        break
                    with worker_context(worker_id, file_path=path):
                        try:
                            intent = self._classify(extractor, path, stats)
                        except Exception:
                            logger.exception(
                                "Unexpected error in classifier worker, cancelling run"
                            )
                            stats.failed += 1
                            cancel.cancel()
                            break
                    if intent is not None:
                        intents.put(intent)
            finally:
                extractor.close()

    def _classify(
        self,
        extractor: MetadataExtractor,
        path: Path,
        stats: ClassifierStats,
    ) -> RelocationIntent | None:
        try:
            metadata = extractor.get_metadata(path)
        except MetadataExtractionError as e:
            logger.warning("error while extracting metadata: %s", e)
            stats.failed += 1
            return None

        try:
            bucket = self.bucket_for(metadata)
        except NoDateFoundError:
            logger.debug("No date field found in %s", path)
            stats.skipped += 1
            return None
        except DateParseError as e:
            logger.error("error while generating relocation: %s", e)
            stats.failed += 1
            return None

        stats.classified += 1
        return RelocationIntent(source=path, bucket=bucket)
