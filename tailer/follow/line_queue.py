"""
Delivery Queue Module - bounded, closable line queue

Handles:
- Blocking producers while full (backpressure, never drops)
- Waking blocked producers and consumers on stop or cancel
- Closing: consumers drain what is left, then iteration ends
"""
import threading
import time
from collections import deque
from queue import Empty
from typing import Generic, Iterator, Optional, TypeVar

T = TypeVar("T")

# How often a waiter re-checks an external cancel event it cannot be
# notified by directly.
CANCEL_CHECK_INTERVAL = 0.05


class QueueClosed(Exception):
    """Raised by get() once the queue is closed and empty"""


class LineQueue(Generic[T]):
    """
    Bounded FIFO shared between one producer thread and its consumers.

    Args:
        maxsize: Capacity; a put on a full queue blocks
    """

    def __init__(self, maxsize: int):
        if maxsize < 1:
            raise ValueError("maxsize must be at least 1")
        self.maxsize = maxsize
        self._items: deque = deque()
        self._closed = False
        self._cond = threading.Condition()

    def put(self, item: T, cancel: Optional[threading.Event] = None) -> bool:
        """
        Append an item, waiting while the queue is full.

        Returns:
            False if the queue was closed or *cancel* was set before space
            became available; the item is then not enqueued
        """
        with self._cond:
            while len(self._items) >= self.maxsize:
                if self._closed or (cancel is not None and cancel.is_set()):
                    return False
                self._cond.wait(CANCEL_CHECK_INTERVAL if cancel is not None else None)
            if self._closed:
                return False
            self._items.append(item)
            self._cond.notify_all()
            return True

    def get(self, timeout: Optional[float] = None,
            cancel: Optional[threading.Event] = None) -> T:
        """
        Remove and return the oldest item.

        Raises:
            QueueClosed: the queue is closed and fully drained
            queue.Empty: *timeout* elapsed or *cancel* was set
        """
        deadline = None
        if timeout is not None:
            deadline = time.monotonic() + timeout
        with self._cond:
            while not self._items:
                if self._closed:
                    raise QueueClosed()
                if cancel is not None and cancel.is_set():
                    raise Empty()
                wait = None
                if deadline is not None:
                    wait = deadline - time.monotonic()
                    if wait <= 0:
                        raise Empty()
                if cancel is not None:
                    wait = CANCEL_CHECK_INTERVAL if wait is None else min(wait, CANCEL_CHECK_INTERVAL)
                self._cond.wait(wait)
            item = self._items.popleft()
            self._cond.notify_all()
            return item

    def wake(self) -> None:
        """Wake every waiter so it re-checks its cancel condition"""
        with self._cond:
            self._cond.notify_all()

    def close(self) -> None:
        """No more puts; consumers may still drain remaining items"""
        with self._cond:
            self._closed = True
            self._cond.notify_all()

    @property
    def closed(self) -> bool:
        return self._closed

    def qsize(self) -> int:
        with self._cond:
            return len(self._items)

    def iterate(self, cancel: Optional[threading.Event] = None) -> Iterator[T]:
        """Yield items until the queue is closed and drained, or *cancel* is set"""
        while True:
            try:
                yield self.get(cancel=cancel)
            except QueueClosed:
                return
            except Empty:
                return

    def __iter__(self) -> Iterator[T]:
        return self.iterate()
