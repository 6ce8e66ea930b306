"""
Error kinds raised by the tailer package.

Handles:
- Configuration problems surfaced at construction time
- Start failures when the initial file cannot be opened
- Transient I/O failures during a poll tick (never raised to consumers)
- Failures to release a file handle on stop
"""
from typing import Optional


class TailerError(Exception):
    """Base class for all tailer errors"""


class ConfigurationError(TailerError, ValueError):
    """Invalid option or malformed pattern expression"""


class StartError(TailerError):
    """The initial file could not be opened"""

    def __init__(self, path: str, cause: Optional[BaseException] = None):
        self.path = path
        self.cause = cause
        detail = f": {cause}" if cause else ""
        super().__init__(f"failed to start following '{path}'{detail}")


class TransientIOError(TailerError):
    """
    A stat or read failure during an active poll tick.

    Constructed by the poll loop and handed to logging and the diagnostics
    hook. The loop retries on the next tick.
    """

    def __init__(self, path: str, cause: BaseException):
        self.path = path
        self.cause = cause
        super().__init__(f"transient I/O error on '{path}': {cause}")


class StopError(TailerError):
    """The underlying handle could not be released"""

    def __init__(self, path: str, cause: BaseException):
        self.path = path
        self.cause = cause
        super().__init__(f"failed to release '{path}': {cause}")
