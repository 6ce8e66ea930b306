"""
tailer - follow growing files like `tail -F`

Poll-driven, cross-platform following of one or more log files with
rotation and truncation handling, OR-of-AND regex filtering, a line plugin
pipeline and an alias-tagged merge of several sources.

Package Structure:
- follow: Follower (single file), MultiTail (merge), LineQueue
- sysmon: file identity and truncation detection
- filters: pattern groups and query parsing
- plugins: plugin chain, coloring
- stream: consumer-facing event stream for transports
- shutdown: process-wide shutdown broadcast
"""
from .config import TailConfig
from .errors import (
    TailerError,
    ConfigurationError,
    StartError,
    StopError,
    TransientIOError,
)
from .follow import Follower, FollowerState, MultiTail
from .filters import PatternFilter, PatternGroup, parse_filter_query
from .plugins import Plugin, FunctionPlugin, PluginChain, Coloring
from .stream import EventStream
from .shutdown import ShutdownSignal, shutdown

__version__ = "0.1.0"

__all__ = [
    'TailConfig',
    'TailerError',
    'ConfigurationError',
    'StartError',
    'StopError',
    'TransientIOError',
    'Follower',
    'FollowerState',
    'MultiTail',
    'PatternFilter',
    'PatternGroup',
    'parse_filter_query',
    'Plugin',
    'FunctionPlugin',
    'PluginChain',
    'Coloring',
    'EventStream',
    'ShutdownSignal',
    'shutdown',
]
