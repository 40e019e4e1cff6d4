"""Dispatch pipeline for picture-dispatcher.

This module moves media files into date-bucketed directories:

- Dispatcher: Runs scanner, classifier pool and relocator concurrently
- TreeScanner: Walks the input tree into the path queue
- DateClassifier: Worker pool turning paths into relocation intents
- FileRelocator: Copies files into buckets and deletes the sources
- remove_live_videos: Deletes live-photo companion videos beforehand
"""

from picture_dispatcher.dispatcher.channel import CancellationToken, ClosableQueue
from picture_dispatcher.dispatcher.classifier import (
    DEFAULT_OUTPUT_DATE_FORMAT,
    DateClassifier,
    DateParseError,
    NoDateFoundError,
    guess_date,
    resolve_thread_count,
)
from picture_dispatcher.dispatcher.live_remover import is_jpeg, remove_live_videos
from picture_dispatcher.dispatcher.models import (
    DateFieldRule,
    DispatchError,
    DispatchResult,
    RelocationIntent,
    TraversalError,
)
from picture_dispatcher.dispatcher.orchestrator import Dispatcher
from picture_dispatcher.dispatcher.relocator import FileRelocator
from picture_dispatcher.dispatcher.scanner import TreeScanner

__all__ = [
    "DEFAULT_OUTPUT_DATE_FORMAT",
    "CancellationToken",
    "ClosableQueue",
    "DateClassifier",
    "DateFieldRule",
    "DateParseError",
    "DispatchError",
    "DispatchResult",
    "Dispatcher",
    "FileRelocator",
    "NoDateFoundError",
    "RelocationIntent",
    "TraversalError",
    "TreeScanner",
    "guess_date",
    "is_jpeg",
    "remove_live_videos",
    "resolve_thread_count",
]
