"""
Truncation Detector Module - in-place shrink detection for a followed file

Handles:
- Comparing the current size against the last read offset
- Tracking the read baseline between polls
"""
from dataclasses import dataclass


def detect_truncation(offset: int, current_size: int) -> bool:
    """
    True when the file shrank below what has already been read.

    Equal sizes mean "no new data", not truncation.
    """
    return current_size < offset


@dataclass
class TruncationDetector:
    """Read baseline for one open handle"""
    offset: int = 0
    last_size: int = 0

    def observe(self, current_size: int) -> bool:
        """Record the current size; return True if the file was truncated"""
        truncated = detect_truncation(self.offset, current_size)
        self.last_size = current_size
        return truncated

    def advance(self, nbytes: int) -> None:
        self.offset += nbytes

    def reset(self, offset: int = 0, size: int = 0) -> None:
        self.offset = offset
        self.last_size = size

    def pending(self) -> int:
        """Bytes available past the offset at the last observed size"""
        return max(0, self.last_size - self.offset)
