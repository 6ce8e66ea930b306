"""
Multi-Source Module - merge several followers into one alias-tagged stream

Handles:
- Computing a common alias width once, at construction
- Starting every child follower (all or nothing)
- One forwarding thread per child copying into the merged queue
- Fan-in stop: every child and forwarder is released before stop returns
"""
import logging
import threading
from typing import Iterator, List, Optional

from ..config import DEFAULT_BUFFER_SIZE
from ..errors import ConfigurationError, StartError, StopError
from .follower import Follower
from .line_queue import LineQueue

logger = logging.getLogger(__name__)


class MergedSource:
    """An alias paired with its follower"""

    def __init__(self, alias: str, follower: Follower, width: int):
        self.alias = alias
        self.follower = follower
        self.label = alias.ljust(width)

    def format(self, line: str) -> str:
        return f"{self.label} {line}"


class MultiTail:
    """
    Follow several files as one stream.

    Each line is prefixed with its source's alias padded to the longest
    alias. Order is preserved per source; sources interleave in the order
    their lines are delivered.

    Example:
        >>> merged = MultiTail(Follower("app.log", alias="app"),
        ...                    Follower("/var/log/syslog", alias="system-log"))
        >>> merged.start()
        >>> next(iter(merged.lines()))
        'app        ERROR boom'
    """

    def __init__(self, *followers: Follower, buffer_size: Optional[int] = None):
        if len(followers) == 1 and isinstance(followers[0], (list, tuple)):
            followers = tuple(followers[0])
        if not followers:
            raise ConfigurationError("MultiTail needs at least one follower")
        if buffer_size is None:
            buffer_size = max((f.config.buffer_size for f in followers), default=DEFAULT_BUFFER_SIZE)
        if buffer_size < 1:
            raise ConfigurationError("buffer_size must be at least 1")

        self.width = max(len(f.alias) for f in followers)
        self.sources: List[MergedSource] = [
            MergedSource(f.alias, f, self.width) for f in followers
        ]

        self._queue: LineQueue[str] = LineQueue(buffer_size)
        self._lock = threading.Lock()
        self._stop_event = threading.Event()
        self._forwarders: List[threading.Thread] = []
        self._started = False
        self._stopped = False

    @property
    def followers(self) -> List[Follower]:
        return [source.follower for source in self.sources]

    def start(self) -> None:
        """
        Start every child follower, then the forwarders.

        Raises:
            StartError: a child failed to start; children already started
                are stopped again
        """
        with self._lock:
            if self._started or self._stopped:
                raise StartError(", ".join(f.path for f in self.followers),
                                 RuntimeError("merger cannot be restarted"))
            self._started = True

            started = []
            for source in self.sources:
                try:
                    source.follower.start()
                except StartError:
                    for follower in started:
                        try:
                            follower.stop()
                        except StopError as e:
                            logger.warning("%s", e)
                    self._stopped = True
                    self._queue.close()
                    raise
                started.append(source.follower)

            for source in self.sources:
                thread = threading.Thread(
                    target=self._forward, args=(source,),
                    name=f"tailer-merge-{source.alias}", daemon=True,
                )
                self._forwarders.append(thread)
                thread.start()
            logger.info("Merging %d sources", len(self.sources))

    def _forward(self, source: MergedSource) -> None:
        for line in source.follower.lines(cancel=self._stop_event):
            if not self._queue.put(source.format(line), cancel=self._stop_event):
                return

    def stop(self) -> None:
        """
        Stop every child and forwarder; returns once all are released.

        Raises:
            StopError: the first child that failed to release its handle
        """
        with self._lock:
            if self._stopped:
                return
            self._stopped = True

        self._stop_event.set()
        self._queue.wake()

        first_error = None
        for follower in self.followers:
            try:
                follower.stop()
            except StopError as e:
                logger.warning("%s", e)
                if first_error is None:
                    first_error = e
        for thread in self._forwarders:
            thread.join()
        self._queue.close()

        if first_error is not None:
            raise first_error

    def lines(self, cancel: Optional[threading.Event] = None) -> Iterator[str]:
        return self._queue.iterate(cancel)

    def get_line(self, timeout: Optional[float] = None,
                 cancel: Optional[threading.Event] = None) -> str:
        return self._queue.get(timeout=timeout, cancel=cancel)

    def __iter__(self) -> Iterator[str]:
        return self.lines()

    def __enter__(self) -> "MultiTail":
        self.start()
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.stop()
