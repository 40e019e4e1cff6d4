"""File relocator: the single consumer of relocation intents.

Moves are copy-then-delete, so the input and output roots may live on
different filesystems. The source is removed only after the copy fully
succeeds. An existing file with the same name in the destination bucket
is overwritten without warning.
"""

from __future__ import annotations

import errno
import logging
import shutil
from enum import Enum
from pathlib import Path

from picture_dispatcher.dispatcher.channel import CancellationToken, ClosableQueue
from picture_dispatcher.dispatcher.models import RelocationIntent

logger = logging.getLogger(__name__)


class MoveErrorType(Enum):
    """Categorization of move failures for log output."""

    DISK_SPACE = "disk_space"
    PERMISSION = "permission"
    NOT_FOUND = "not_found"
    IO_ERROR = "io_error"
    UNKNOWN = "unknown"


_ERRNO_TO_TYPE = {
    errno.ENOSPC: MoveErrorType.DISK_SPACE,
    errno.EACCES: MoveErrorType.PERMISSION,
    errno.EPERM: MoveErrorType.PERMISSION,
    errno.ENOENT: MoveErrorType.NOT_FOUND,
    errno.EIO: MoveErrorType.IO_ERROR,
    errno.EROFS: MoveErrorType.IO_ERROR,
}


def classify_os_error(error: OSError) -> MoveErrorType:
    return _ERRNO_TO_TYPE.get(error.errno, MoveErrorType.UNKNOWN)


def move_file(source: Path, destination: Path) -> None:
    """Copy a file's bytes to destination, then delete the source.

    Raises:
        OSError: If the copy or the delete fails. A failed copy leaves
            the source untouched.
    """
    shutil.copyfile(source, destination)
    source.unlink()


class FileRelocator:
    """Drains relocation intents and moves files into date buckets."""

    def __init__(self, output_root: Path) -> None:
        self.output_root = output_root
        self.files_moved = 0
        self.files_failed = 0
        self.files_skipped = 0
        # Buckets already created during this run; owned by the consumer thread
        self._created_buckets: set[str] = set()

    def _ensure_bucket(self, bucket: str) -> Path:
        bucket_dir = self.output_root / bucket
        if bucket not in self._created_buckets:
            bucket_dir.mkdir(parents=True, exist_ok=True)
            self._created_buckets.add(bucket)
        return bucket_dir

    def relocate(self, intent: RelocationIntent) -> bool:
        """Move one file into its bucket.

        Returns:
            True if the file was moved, False if it was left in place.
        """
        try:
            bucket_dir = self._ensure_bucket(intent.bucket)
        except OSError as e:
            logger.error(
                "error when creating output folder %s for %s (%s): %s",
                self.output_root / intent.bucket,
                intent.source,
                classify_os_error(e).value,
                e,
            )
            return False

        destination = bucket_dir / intent.source.name
        logger.debug("Moving %s to %s", intent.source, destination)
        try:
            move_file(intent.source, destination)
        except OSError as e:
            logger.error(
                "error when moving %s to %s (%s): %s",
                intent.source,
                destination,
                classify_os_error(e).value,
                e,
            )
            return False
        return True

    def drain(
        self,
        intents: ClosableQueue[RelocationIntent],
        cancel: CancellationToken,
    ) -> int:
        """Consume intents until the queue is closed.

        After cancellation is observed the remaining intents are still
        consumed, but only logged, so the upstream stages can finish.

        Returns:
            Number of files moved.
        """
        for intent in intents:
            if cancel.is_cancelled:
                logger.info("Relocation cancelled, leaving %s in place", intent.source)
                self.files_skipped += 1
                continue
            if self.relocate(intent):
                self.files_moved += 1
            else:
                self.files_failed += 1

        logger.info("%d moved file(s)", self.files_moved)
        return self.files_moved
