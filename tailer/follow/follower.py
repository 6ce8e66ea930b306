"""
Follower Module - poll-driven tail of a single file

Handles:
- Opening the file and delivering a bounded backfill of trailing lines
- Periodic polling on a dedicated background thread
- Rotation detection (path now names a different file) with old-file draining
- Truncation detection (file shrank in place) with rewind to offset 0
- Splitting raw bytes into lines, holding unterminated tails
- Filtering and plugin transforms before delivery to a bounded queue
- Synchronous, idempotent stop
"""
import logging
import os
import threading
from enum import Enum
from typing import BinaryIO, Iterator, List, Optional, Tuple

from ..config import TailConfig
from ..diagnostics import TRACE, emit
from ..errors import StartError, StopError, TransientIOError
from ..sysmon.identity import FileIdentity, handle_identity, handle_size, identity, open_shared
from ..sysmon.truncation import TruncationDetector
from .line_queue import LineQueue

logger = logging.getLogger(__name__)

READ_CHUNK = 64 * 1024
BACKFILL_BLOCK = 4096


class FollowerState(Enum):
    """Poll loop states"""
    NEW = "new"
    STARTING = "starting"
    FOLLOWING = "following"
    ROTATION_PENDING = "rotation-pending"
    TRUNCATION_PENDING = "truncation-pending"
    DRAINING = "draining"
    STOPPED = "stopped"


def read_backfill(handle: BinaryIO, size: int, count: int, limit: int,
                  block: int = BACKFILL_BLOCK) -> Tuple[List[bytes], bytes]:
    """
    Scan backward from *size* for the last *count* complete lines.

    The scan stops once count+1 terminators are seen, the start of the file
    is reached, or *limit* bytes have been read.

    Returns:
        (complete lines without terminators, trailing unterminated bytes);
        fewer than *count* lines when the file or the scan window is shorter.
        The handle is left positioned at *size*.
    """
    pos = size
    data = b""
    while pos > 0 and size - pos < limit:
        step = min(block, pos, limit - (size - pos))
        pos -= step
        handle.seek(pos)
        data = handle.read(step) + data
        if data.count(b"\n") > count:
            break
    handle.seek(size)

    body, sep, partial = data.rpartition(b"\n")
    if not sep or count == 0:
        return [], partial
    lines = body.split(b"\n")
    if pos > 0:
        # the window may start mid-line
        lines = lines[1:]
    return lines[-count:], partial


class Follower:
    """
    Follow one file, like `tail -F`.

    Args:
        path: File to follow
        config: Validated TailConfig; keyword options override its fields

    Example:
        >>> tail = Follower("/var/log/syslog", backfill_lines=2, poll_interval=0.5)
        >>> tail.start()
        >>> for line in tail.lines():
        ...     print(line)
    """

    def __init__(self, path, config: Optional[TailConfig] = None, **options):
        if config is None:
            config = TailConfig.build(**options)
        elif options:
            config = TailConfig.build(**{**dict(config), **options})

        self.path = os.fspath(path)
        self.config = config
        self.alias = config.alias or os.path.basename(self.path) or self.path
        self.state = FollowerState.NEW

        self._filter = config.pattern_filter()
        self._chain = config.plugin_chain()
        self._queue: LineQueue[str] = LineQueue(config.buffer_size)

        self._lock = threading.Lock()
        self._stop_event = threading.Event()
        self._thread: Optional[threading.Thread] = None
        self._started = False
        self._stopped = False

        # Owned by the worker thread once start() returns
        self._handle: Optional[BinaryIO] = None
        self._identity: Optional[FileIdentity] = None
        self._detector = TruncationDetector()
        self._partial = b""
        self._backfill: List[bytes] = []
        self._close_error: Optional[OSError] = None

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def start(self) -> None:
        """
        Open the file and start the background poll loop.

        Raises:
            StartError: the file cannot be opened, or this follower was
                already started or stopped
        """
        with self._lock:
            if self._started or self._stopped:
                raise StartError(self.path, RuntimeError("follower cannot be restarted"))
            self._started = True
            self.state = FollowerState.STARTING

            try:
                handle = open_shared(self.path)
            except OSError as e:
                self._abort_start()
                raise StartError(self.path, e) from e

            try:
                self._identity = handle_identity(handle)
                size = handle_size(handle)
                self._backfill, self._partial = read_backfill(
                    handle, size, self.config.backfill_lines, self.config.max_backfill_bytes
                )
            except OSError as e:
                handle.close()
                self._abort_start()
                raise StartError(self.path, e) from e

            self._handle = handle
            self._detector.reset(offset=size, size=size)
            logger.info("Following %s (identity %s, offset %d)", self.path, self._identity, size)

            self._thread = threading.Thread(
                target=self._run, name=f"tailer-{self.alias}", daemon=True
            )
            self._thread.start()

    def _abort_start(self) -> None:
        self._stopped = True
        self.state = FollowerState.STOPPED
        self._queue.close()

    def stop(self) -> None:
        """
        Stop polling, close the file and wait for the worker to exit.

        Idempotent. Lines already queued remain readable from lines().

        Raises:
            StopError: the file handle could not be closed; the follower is
                stopped regardless
        """
        with self._lock:
            if self._stopped:
                return
            self._stopped = True

        self._stop_event.set()
        # a producer blocked on a full queue re-checks the stop event
        self._queue.wake()
        if self._thread is not None:
            self._thread.join()
        self._queue.close()
        self.state = FollowerState.STOPPED
        logger.info("Stopped following %s", self.path)

        if self._close_error is not None:
            error, self._close_error = self._close_error, None
            raise StopError(self.path, error) from error

    def lines(self, cancel: Optional[threading.Event] = None) -> Iterator[str]:
        """
        Live sequence of delivered lines.

        Ends once the follower is stopped and the queue is drained, straight
        away after a failed start, or when *cancel* is set.
        """
        return self._queue.iterate(cancel)

    def get_line(self, timeout: Optional[float] = None,
                 cancel: Optional[threading.Event] = None) -> str:
        """
        Next delivered line.

        Raises:
            QueueClosed: stopped and drained
            queue.Empty: *timeout* elapsed or *cancel* was set
        """
        return self._queue.get(timeout=timeout, cancel=cancel)

    def __iter__(self) -> Iterator[str]:
        return self.lines()

    def __enter__(self) -> "Follower":
        self.start()
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.stop()

    @property
    def running(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    @property
    def offset(self) -> int:
        return self._detector.offset

    def __repr__(self) -> str:
        return f"Follower({self.path!r}, alias={self.alias!r}, state={self.state.value})"

    # ------------------------------------------------------------------
    # Worker
    # ------------------------------------------------------------------

    def _run(self) -> None:
        try:
            backfill, self._backfill = self._backfill, []
            for raw in backfill:
                if not self._emit(raw):
                    return
            self.state = FollowerState.FOLLOWING

            while not self._stop_event.is_set():
                self._tick()
                if self._stop_event.wait(self.config.poll_interval):
                    break
        except Exception:
            logger.exception("Follower for %s stopped unexpectedly", self.path)
            self.state = FollowerState.STOPPED
            self._queue.close()
        finally:
            self._release()

    def _release(self) -> None:
        handle, self._handle = self._handle, None
        if handle is None:
            return
        try:
            handle.close()
        except OSError as e:
            logger.error("Failed to close %s: %s", self.path, e)
            self._close_error = e

    def _tick(self) -> None:
        try:
            self._poll_once()
        except OSError as e:
            # Retried on the next tick; never guess past an ambiguous state
            self.state = FollowerState.FOLLOWING
            error = TransientIOError(self.path, e)
            logger.warning("%s", error)
            emit(self.config.on_diagnostic, self.path, "transient-io", str(error))

    def _poll_once(self) -> None:
        current = identity(self.path)
        if current is None:
            logger.log(TRACE, "%s is missing, reading remainder of open file", self.path)
        elif current != self._identity:
            self._rotate()
            return

        size = handle_size(self._handle)
        if self._detector.observe(size):
            self._truncate(size)
        self._read_available(size)

    def _rotate(self) -> None:
        logger.info("Rotation detected on %s", self.path)

        # finish the old file before touching the new one
        self.state = FollowerState.DRAINING
        size = handle_size(self._handle)
        self._detector.observe(size)
        if not self._read_available(size):
            return

        self.state = FollowerState.ROTATION_PENDING
        new_handle = open_shared(self.path)
        try:
            new_identity = handle_identity(new_handle)
            if self._partial:
                raw, self._partial = self._partial, b""
                if not self._emit(raw):
                    new_handle.close()
                    return
        except BaseException:
            new_handle.close()
            raise

        old_handle = self._handle
        self._handle = new_handle
        self._identity = new_identity
        self._detector.reset()
        try:
            old_handle.close()
        except OSError as e:
            logger.warning("Failed to close rotated file %s: %s", self.path, e)
        emit(self.config.on_diagnostic, self.path, "rotation", f"reopened {self.path} ({new_identity})")
        self.state = FollowerState.FOLLOWING

        size = handle_size(self._handle)
        self._detector.observe(size)
        self._read_available(size)

    def _truncate(self, size: int) -> None:
        self.state = FollowerState.TRUNCATION_PENDING
        logger.info("Truncation detected on %s (size %d < offset %d)",
                    self.path, size, self._detector.offset)
        self._handle.seek(0)
        self._detector.reset(offset=0, size=size)
        self._partial = b""
        emit(self.config.on_diagnostic, self.path, "truncation", f"rewound {self.path} to offset 0")
        self.state = FollowerState.FOLLOWING

    def _read_available(self, size: int) -> bool:
        """Read offset..size; False if delivery was cut short by stop"""
        logger.log(TRACE, "%s: %d bytes pending at offset %d",
                   self.path, self._detector.pending(), self._detector.offset)
        self._handle.seek(self._detector.offset)
        while self._detector.offset < size:
            data = self._handle.read(min(READ_CHUNK, size - self._detector.offset))
            if not data:
                break
            self._detector.advance(len(data))
            if not self._consume(data):
                return False
        return True

    def _consume(self, data: bytes) -> bool:
        *complete, self._partial = (self._partial + data).split(b"\n")
        for raw in complete:
            if not self._emit(raw):
                return False
        if len(self._partial) > self.config.max_line_bytes:
            raw, self._partial = self._partial, b""
            return self._emit(raw)
        return True

    def _emit(self, raw: bytes) -> bool:
        """Filter, transform and enqueue one line; False once stopping"""
        if raw.endswith(b"\r"):
            raw = raw[:-1]
        line = raw.decode(self.config.encoding, errors="replace")
        if not self._filter.accepts(line):
            return True
        try:
            line = self._chain.run(line)
        except Exception as e:
            # the line is delivered untransformed; the loop keeps running
            logger.exception("Plugin failed on a line from %s", self.path)
            emit(self.config.on_diagnostic, self.path, "plugin-error", f"{type(e).__name__}: {e}")
        if line is None:
            return True
        return self._queue.put(line, cancel=self._stop_event)
