"""Input tree scanner: the single producer of the path queue."""

from __future__ import annotations

import logging
import os
from pathlib import Path

from picture_dispatcher.dispatcher.channel import CancellationToken, ClosableQueue
from picture_dispatcher.dispatcher.models import TraversalError

logger = logging.getLogger(__name__)


def _raise_walk_error(error: OSError) -> None:
    raise TraversalError(error.filename or "", error)


class TreeScanner:
    """Walks the input tree and feeds every non-directory entry to a queue.

    A directory equal to ``exclude`` is pruned from the walk, so an output
    root nested in the input tree is never scanned.
    """

    def __init__(self, root: Path, exclude: Path | None = None) -> None:
        self.root = root
        self.exclude = exclude.resolve() if exclude is not None else None
        self.files_found = 0
        self.error: TraversalError | None = None

    def scan(self, paths: ClosableQueue[Path], cancel: CancellationToken) -> int:
        """Enqueue all files under the root, then close the queue.

        Blocks while the queue is full. Once cancellation is observed no
        further files are enqueued, although the walk itself finishes. A
        traversal error is logged, raises the cancellation signal and ends
        the walk; it is not propagated.

        Args:
            paths: Bounded output queue. Always closed on return.
            cancel: Shared cancellation token.

        Returns:
            Number of files enqueued.
        """
        try:
            for dirpath, dirnames, filenames in os.walk(
                self.root, onerror=_raise_walk_error
            ):
                dirnames[:] = sorted(
                    d for d in dirnames if not self._excluded(Path(dirpath) / d)
                )
                for name in sorted(filenames):
                    if cancel.is_cancelled:
                        continue
                    path = Path(dirpath) / name
                    if paths.put(path, cancel):
                        self.files_found += 1
                        logger.debug("New file to extract: %s", path)
        except TraversalError as e:
            self.error = e
            cancel.cancel()
            logger.error("%s", e)
        finally:
            paths.close()

        logger.info("%d file(s) found", self.files_found)
        return self.files_found

    def _excluded(self, directory: Path) -> bool:
        return self.exclude is not None and directory.resolve() == self.exclude
