"""
File following engine.

- follower: single-file poll loop (Follower, FollowerState, read_backfill)
- multi: alias-tagged merge of several followers (MultiTail)
- line_queue: bounded delivery queue with backpressure (LineQueue)
"""
from .follower import Follower, FollowerState, read_backfill
from .multi import MultiTail, MergedSource
from .line_queue import LineQueue, QueueClosed

__all__ = [
    'Follower',
    'FollowerState',
    'read_backfill',
    'MultiTail',
    'MergedSource',
    'LineQueue',
    'QueueClosed',
]
