"""
Plugin Pipeline Module - ordered line transformers

Handles:
- The Plugin capability: apply(line) -> (line, keep)
- Adapting plain callables into plugins
- Running a chain with short-circuit on drop
- Small built-in transformers (Exclude, Strip)
"""
import re
from abc import ABC, abstractmethod
from typing import Callable, Iterable, List, Optional, Tuple, Union

from ..errors import ConfigurationError


class Plugin(ABC):
    """
    A line transformer.

    Plugins must not touch follower state. Returning keep=False discards the
    line and stops the chain.
    """

    @abstractmethod
    def apply(self, line: str) -> Tuple[str, bool]:
        pass


class FunctionPlugin(Plugin):
    """
    Wrap a callable as a plugin.

    The callable may return a (line, keep) tuple, a replacement string, or
    None to drop the line.
    """

    def __init__(self, func: Callable[[str], Union[Tuple[str, bool], str, None]]):
        self.func = func

    def apply(self, line: str) -> Tuple[str, bool]:
        result = self.func(line)
        if result is None:
            return line, False
        if isinstance(result, tuple):
            return result
        return result, True

    def __repr__(self) -> str:
        name = getattr(self.func, "__name__", repr(self.func))
        return f"FunctionPlugin({name})"


PluginLike = Union[Plugin, Callable[[str], Union[Tuple[str, bool], str, None]]]


def as_plugin(obj: PluginLike) -> Plugin:
    if isinstance(obj, Plugin):
        return obj
    if callable(obj):
        return FunctionPlugin(obj)
    raise ConfigurationError(f"not a plugin: {obj!r}")


class PluginChain:
    """Plugins evaluated in registration order"""

    def __init__(self, plugins: Iterable[PluginLike] = ()):
        self.plugins: List[Plugin] = [as_plugin(p) for p in plugins]

    def run(self, line: str) -> Optional[str]:
        """
        Run every plugin over *line*.

        Returns:
            The transformed line, or None if some plugin dropped it
        """
        for plugin in self.plugins:
            line, keep = plugin.apply(line)
            if not keep:
                return None
        return line

    def __len__(self) -> int:
        return len(self.plugins)


class Exclude(Plugin):
    """Drop lines matching a regular expression"""

    def __init__(self, pattern: str):
        try:
            self.regex = re.compile(pattern)
        except re.error as e:
            raise ConfigurationError(f"invalid pattern {pattern!r}: {e}") from e

    def apply(self, line: str) -> Tuple[str, bool]:
        return line, not self.regex.search(line)


class Strip(Plugin):
    """Trim trailing whitespace"""

    def apply(self, line: str) -> Tuple[str, bool]:
        return line.rstrip(), True
