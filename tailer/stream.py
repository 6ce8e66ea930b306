"""
Event Stream Module - consumer-facing reader loop for streaming transports

Handles:
- One follower per subscriber, with query filter groups layered on top of
  the configured pattern groups
- Formatting lines as newline-delimited server-sent events
- Idle keepalive events so a transport can notice dropped subscribers
- Exiting promptly on the process shutdown broadcast or subscriber cancel
"""
import logging
import threading
from queue import Empty
from typing import Iterator, Optional

from .config import TailConfig
from .filters.patterns import parse_filter_query
from .follow.follower import Follower
from .follow.line_queue import QueueClosed
from .shutdown import ShutdownSignal, process_shutdown

logger = logging.getLogger(__name__)

KEEPALIVE = ": keepalive\n\n"


def format_event(line: str) -> str:
    """Render one line as a server-sent event"""
    return f"data: {line}\n\n"


class _AnySet:
    """is_set() over several events; None entries are ignored"""

    def __init__(self, *events):
        self.events = [e for e in events if e is not None]

    def is_set(self) -> bool:
        return any(e.is_set() for e in self.events)


class EventStream:
    """
    Stream a followed file to one subscriber.

    Args:
        path: File to follow
        config: Base follower options
        query: Subscriber filter, "tok1&&tok2||tok3"
        shutdown: Broadcast that ends the stream; the process-wide signal
            by default
        cancel: Subscriber-side cancel (e.g. the connection went away)
        heartbeat: Seconds of idleness before a keepalive event; None disables

    Raises:
        ConfigurationError: a query token is not a valid expression
    """

    def __init__(self, path, config: Optional[TailConfig] = None, query: str = "",
                 shutdown: Optional[ShutdownSignal] = None,
                 cancel: Optional[threading.Event] = None,
                 heartbeat: Optional[float] = None):
        config = config or TailConfig()
        groups = parse_filter_query(query)
        if groups:
            config = config.with_patterns(groups)
        self.follower = Follower(path, config=config)
        self.shutdown = shutdown or process_shutdown
        self.cancel = cancel
        self.heartbeat = heartbeat
        self._closed = threading.Event()
        self._started = False

    def start(self) -> None:
        """Start following; StartError means the stream never produces events"""
        self.follower.start()
        self._started = True
        self.shutdown.subscribe(self._closed.set)

    def close(self) -> None:
        self.shutdown.unsubscribe(self._closed.set)
        self._closed.set()
        self.follower.stop()

    def events(self) -> Iterator[str]:
        if not self._started:
            self.start()
        done = _AnySet(self._closed, self.cancel)
        try:
            while not done.is_set():
                try:
                    line = self.follower.get_line(timeout=self.heartbeat, cancel=done)
                except QueueClosed:
                    return
                except Empty:
                    if done.is_set():
                        return
                    yield KEEPALIVE
                    continue
                yield format_event(line)
        finally:
            self.close()
            logger.debug("Event stream for %s closed", self.follower.path)

    def __iter__(self) -> Iterator[str]:
        return self.events()

    def __enter__(self) -> "EventStream":
        self.start()
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()
