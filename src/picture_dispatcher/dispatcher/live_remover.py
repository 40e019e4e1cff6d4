"""Removal of live-photo companion videos.

Phones store a "live photo" as a still JPEG plus a short clip sharing the
same stem (``IMG_0001.JPG`` / ``IMG_0001.MOV``). When the still is present
the clip is redundant, so it is deleted before dispatching. This pass is
destructive and runs to completion before the pipeline starts.
"""

from __future__ import annotations

import logging
import os
import re
from pathlib import Path

from picture_dispatcher.dispatcher.models import TraversalError

logger = logging.getLogger(__name__)

# Matches .jpg and .jpeg in any case
JPEG_EXTENSION_RE = re.compile(r"\.jpe?g", re.IGNORECASE)

LIVE_VIDEO_EXTENSION = ".MOV"


def is_jpeg(path: Path | str) -> bool:
    """Check whether a path has a JPEG extension.

    Args:
        path: File path or name.

    Returns:
        True for ``.jpg``/``.jpeg`` in any case, False otherwise.
    """
    suffix = os.path.splitext(str(path))[1]
    return JPEG_EXTENSION_RE.fullmatch(suffix) is not None


def live_video_path(image_path: Path) -> Path:
    """Return the companion video path for a still image."""
    return image_path.with_suffix(LIVE_VIDEO_EXTENSION)


def _raise_walk_error(error: OSError) -> None:
    raise TraversalError(error.filename or "", error)


def remove_live_videos(root: Path) -> int:
    """Delete every companion video whose paired still image exists.

    Deletion failures are logged and skipped. A traversal failure aborts
    the pass.

    Args:
        root: Directory to walk recursively.

    Returns:
        Number of companion videos deleted.

    Raises:
        TraversalError: If any part of the tree cannot be read.
    """
    removed = 0
    for dirpath, dirnames, filenames in os.walk(root, onerror=_raise_walk_error):
        dirnames.sort()
        for name in sorted(filenames):
            if not is_jpeg(name):
                continue
            video = live_video_path(Path(dirpath) / name)
            if not video.is_file():
                continue
            try:
                video.unlink()
            except OSError as e:
                logger.warning("error while removing file %s: %s", video, e)
                continue
            removed += 1
            logger.debug("Removed live video: %s", video)

    logger.info("%d live video(s) removed", removed)
    return removed
