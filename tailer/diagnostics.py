"""
Diagnostics Module - logging setup and the poll-loop diagnostics hook

Handles:
- Logging configuration for the CLI (console or file output)
- A TRACE level below DEBUG for per-tick chatter
- Diagnostic records describing transient errors, rotations, truncations
  and plugin failures
- A queue-backed collector usable as a follower's on_diagnostic hook
"""
import logging
import os
import queue
from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, Field

TRACE = 5

logging.addLevelName(TRACE, "TRACE")

LOG_FORMAT = "%(asctime)s - %(levelname)s - %(message)s"
LOG_DATEFMT = "%Y-%m-%d %H:%M:%S"

logger = logging.getLogger(__name__)


def configure_logging(level: str = "WARNING", log_file: Optional[str] = None) -> None:
    """
    Configure root logging for the command-line follower.

    Args:
        level: Level name (TRACE, DEBUG, INFO, WARNING, ERROR)
        log_file: Optional file to log into; stderr when omitted
    """
    numeric = logging.getLevelName(level.upper())
    if not isinstance(numeric, int):
        numeric = logging.WARNING

    kwargs = {}
    if log_file:
        log_dir = os.path.dirname(log_file)
        if log_dir and not os.path.exists(log_dir):
            os.makedirs(log_dir)
        kwargs["filename"] = log_file

    logging.basicConfig(
        level=numeric,
        format=LOG_FORMAT,
        datefmt=LOG_DATEFMT,
        force=True,
        **kwargs,
    )


class Diagnostic(BaseModel):
    timestamp: datetime = Field(default_factory=datetime.now)
    path: str
    kind: str
    message: str


class DiagnosticsCollector:
    """Collects diagnostics from one or more followers into a bounded queue"""

    def __init__(self, maxsize: int = 1000):
        self._queue: "queue.Queue[Diagnostic]" = queue.Queue(maxsize=maxsize)

    def __call__(self, diagnostic: Diagnostic) -> None:
        try:
            self._queue.put_nowait(diagnostic)
        except queue.Full:
            logger.debug("Diagnostics queue full, dropping: %s", diagnostic.message)

    def drain(self) -> List[Diagnostic]:
        items = []
        while True:
            try:
                items.append(self._queue.get_nowait())
            except queue.Empty:
                break
        return items

    def empty(self) -> bool:
        return self._queue.empty()


def emit(hook, path: str, kind: str, message: str) -> None:
    """Deliver a diagnostic to a hook; a failing hook is logged, never raised."""
    if hook is None:
        return
    try:
        hook(Diagnostic(path=path, kind=kind, message=message))
    except Exception:
        logger.exception("Diagnostics hook failed for %s", path)
