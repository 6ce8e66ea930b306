"""
Process-wide shutdown broadcast for consumer-facing stream loops.

Firing the signal ends every active EventStream. Followers themselves are
stopped by their owners. The signal fires at most once and cannot be reset.
"""
import logging
import threading
from typing import Callable, List, Optional

logger = logging.getLogger(__name__)


class ShutdownSignal:
    """A single-fire broadcast usable as a cancel event"""

    def __init__(self):
        self._event = threading.Event()
        self._lock = threading.Lock()
        self._callbacks: List[Callable[[], None]] = []

    def fire(self) -> bool:
        """Raise the signal; returns False if it had already fired"""
        with self._lock:
            if self._event.is_set():
                return False
            self._event.set()
            callbacks, self._callbacks = self._callbacks, []
        logger.info("Shutdown broadcast to %d listener(s)", len(callbacks))
        for callback in callbacks:
            try:
                callback()
            except Exception:
                logger.exception("Shutdown listener failed")
        return True

    def is_set(self) -> bool:
        return self._event.is_set()

    def wait(self, timeout: Optional[float] = None) -> bool:
        return self._event.wait(timeout)

    def subscribe(self, callback: Callable[[], None]) -> None:
        """Run *callback* when the signal fires (immediately if it already has)"""
        with self._lock:
            if not self._event.is_set():
                self._callbacks.append(callback)
                return
        callback()

    def unsubscribe(self, callback: Callable[[], None]) -> None:
        with self._lock:
            if callback in self._callbacks:
                self._callbacks.remove(callback)


# Owned by the process; transports read it unless handed their own signal
process_shutdown = ShutdownSignal()


def shutdown() -> None:
    """Close every active consumer-facing stream loop in this process"""
    process_shutdown.fire()
