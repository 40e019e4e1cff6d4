"""Bounded closable queue and one-way cancellation token.

These are the only synchronization primitives the pipeline stages share.
Every blocking call re-checks the cancellation token at POLL_INTERVAL so a
stage waiting on a full or empty queue notices cancellation promptly.
"""

from __future__ import annotations

import threading
from collections import deque
from collections.abc import Iterator
from typing import Generic, TypeVar

T = TypeVar("T")

# Seconds between cancellation checks while blocked on a queue
POLL_INTERVAL = 0.1


class CancellationToken:
    """Run-scoped, one-way cancellation signal.

    Once cancelled it stays cancelled; there is no reset.
    Any number of threads may observe it without locking.
    """

    def __init__(self) -> None:
        self._event = threading.Event()

    def cancel(self) -> None:
        """Raise the signal. Idempotent."""
        self._event.set()

    @property
    def is_cancelled(self) -> bool:
        return self._event.is_set()

    def wait(self, timeout: float | None = None) -> bool:
        """Block until cancelled or timeout; return the signal state."""
        return self._event.wait(timeout)


class ClosableQueue(Generic[T]):
    """Bounded FIFO queue that producers close to signal end-of-input.

    Consumers see ``None`` from :meth:`get` once the queue is closed and
    drained, so items must never be ``None`` themselves.
    """

    def __init__(self, maxsize: int) -> None:
        """Initialize the queue.

        Args:
            maxsize: Capacity; values below 1 are raised to 1.
        """
        self.maxsize = max(1, maxsize)
        self._items: deque[T] = deque()
        self._closed = False
        self._cond = threading.Condition()

    @property
    def closed(self) -> bool:
        with self._cond:
            return self._closed

    def __len__(self) -> int:
        with self._cond:
            return len(self._items)

    def put(self, item: T, cancel: CancellationToken | None = None) -> bool:
        """Enqueue an item, blocking while the queue is full.

        Args:
            item: Item to enqueue.
            cancel: Optional token; if raised while waiting for room, the
                item is not enqueued.

        Returns:
            True if the item was enqueued, False if cancelled first.

        Raises:
            ValueError: If the queue has already been closed.
        """
        with self._cond:
            while len(self._items) >= self.maxsize:
                if self._closed:
                    break
                if cancel is not None and cancel.is_cancelled:
                    return False
                self._cond.wait(POLL_INTERVAL)
            if self._closed:
                raise ValueError("put() on a closed queue")
            self._items.append(item)
            self._cond.notify_all()
            return True

    def get(self, cancel: CancellationToken | None = None) -> T | None:
        """Dequeue the next item, blocking while the queue is empty.

        Args:
            cancel: Optional token; if raised while waiting, returns None
                even if the queue is still open.

        Returns:
            The next item, or None once the queue is closed and drained
            (or cancellation was observed).
        """
        with self._cond:
            while not self._items:
                if self._closed:
                    return None
                if cancel is not None and cancel.is_cancelled:
                    return None
                self._cond.wait(POLL_INTERVAL)
            item = self._items.popleft()
            self._cond.notify_all()
            return item

    def close(self) -> None:
        """Mark end-of-input. Items already queued remain readable."""
        with self._cond:
            self._closed = True
            self._cond.notify_all()

    def __iter__(self) -> Iterator[T]:
        """Drain the queue until it is closed, ignoring cancellation."""
        while True:
            item = self.get()
            if item is None:
                return
            yield item
