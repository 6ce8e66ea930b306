"""
File system monitoring primitives used by the poll loop.

- identity: stable per-file identity and shared-open helper (FileIdentity)
- truncation: in-place shrink detection (TruncationDetector)
"""
from .identity import FileIdentity, identity, handle_identity, handle_size, open_shared
from .truncation import TruncationDetector, detect_truncation

__all__ = [
    'FileIdentity',
    'identity',
    'handle_identity',
    'handle_size',
    'open_shared',
    'TruncationDetector',
    'detect_truncation',
]
