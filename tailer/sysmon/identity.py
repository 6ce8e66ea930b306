"""
File Identity Module - stable per-file identity for rotation detection

Handles:
- Resolving a path to a comparable identity (device + file index)
- Resolving the identity of an already-open handle
- A fallback key for file systems that report no inode number
- Opening files so that rotators may rename/delete them while followed
"""
import os
import sys
from dataclasses import dataclass
from typing import BinaryIO, Optional


@dataclass(frozen=True)
class FileIdentity:
    """
    Opaque identity of an underlying file.

    Two identities for the same path that compare unequal mean the path now
    names a different file (rotation).
    """
    device: int
    index: int

    def __str__(self) -> str:
        return f"{self.device}:{self.index}"


def _identity_from_stat(st: os.stat_result) -> FileIdentity:
    index = st.st_ino
    if not index:
        # No inode semantics on this file system; creation time is stable
        # for the lifetime of the file on those platforms.
        index = getattr(st, "st_birthtime_ns", None) or st.st_ctime_ns
    return FileIdentity(device=st.st_dev, index=index)


def identity(path: str) -> Optional[FileIdentity]:
    """
    Return the identity of the file currently at *path*.

    Returns None when the path does not exist, which callers treat as a
    rotation in progress. Other OSErrors propagate.
    """
    try:
        st = os.stat(path)
    except FileNotFoundError:
        return None
    return _identity_from_stat(st)


def handle_identity(handle: BinaryIO) -> FileIdentity:
    """Return the identity of the file behind an open handle"""
    return _identity_from_stat(os.fstat(handle.fileno()))


def handle_size(handle: BinaryIO) -> int:
    """Current size of the file behind an open handle"""
    return os.fstat(handle.fileno()).st_size


if sys.platform == "win32":
    import msvcrt
    import _winapi

    _GENERIC_READ = 0x80000000
    _FILE_SHARE_ALL = 0x1 | 0x2 | 0x4  # read | write | delete
    _OPEN_EXISTING = 3
    _FILE_ATTRIBUTE_NORMAL = 0x80

    def _shared_opener(path: str, flags: int) -> int:
        handle = _winapi.CreateFile(
            path,
            _GENERIC_READ,
            _FILE_SHARE_ALL,
            0,
            _OPEN_EXISTING,
            _FILE_ATTRIBUTE_NORMAL,
            0,
        )
        return msvcrt.open_osfhandle(handle, os.O_RDONLY | os.O_BINARY)

    def open_shared(path: str) -> BinaryIO:
        """Open *path* for binary reading without blocking rename/delete"""
        return open(path, "rb", opener=_shared_opener)

else:

    def open_shared(path: str) -> BinaryIO:
        """Open *path* for binary reading"""
        return open(path, "rb")
