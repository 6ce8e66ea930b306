import os
import shutil
import tempfile
import time
from queue import Empty

import pytest


@pytest.fixture
def temp_dir_manager(request):
    """Fixture to manage temporary directories for tests."""
    temp_dir = tempfile.mkdtemp(prefix="tailer_test_")

    def cleanup_dir():
        if os.path.exists(temp_dir):
            shutil.rmtree(temp_dir, ignore_errors=True)

    request.addfinalizer(cleanup_dir)
    return temp_dir


def write(path, text, mode="a"):
    with open(path, mode + "b") as f:
        f.write(text.encode("utf-8"))
        f.flush()


def take(source, count, timeout=5.0):
    """Pull exactly *count* lines from a Follower/MultiTail or fail the test"""
    lines = []
    deadline = time.monotonic() + timeout
    while len(lines) < count:
        remaining = deadline - time.monotonic()
        if remaining <= 0:
            pytest.fail(f"expected {count} lines, got {len(lines)}: {lines!r}")
        try:
            lines.append(source.get_line(timeout=remaining))
        except Empty:
            continue
    return lines


def assert_quiet(source, wait=0.3):
    """No further line arrives within *wait* seconds"""
    with pytest.raises(Empty):
        source.get_line(timeout=wait)
