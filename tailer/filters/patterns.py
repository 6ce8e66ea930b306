"""
Pattern Filter Module - OR-of-ANDs regular expression line filtering

Handles:
- Compiling pattern groups once, at configuration time
- AND evaluation within a group, OR evaluation across groups
- Parsing transport query strings ("a&&b||c") into pattern groups
"""
import re
from typing import Iterable, List, Sequence

from ..errors import ConfigurationError

GROUP_SEPARATOR = "||"
TOKEN_SEPARATOR = "&&"


class PatternGroup:
    """
    An ordered set of regular expressions that must all match a line.

    Matching uses re.search, so patterns match anywhere in the line unless
    anchored.
    """

    def __init__(self, patterns: Iterable[str]):
        self.patterns: List[str] = list(patterns)
        if not self.patterns:
            raise ConfigurationError("a pattern group needs at least one expression")
        self._compiled = []
        for pattern in self.patterns:
            try:
                self._compiled.append(re.compile(pattern))
            except re.error as e:
                raise ConfigurationError(f"invalid pattern {pattern!r}: {e}") from e

    def matches(self, line: str) -> bool:
        return all(regex.search(line) for regex in self._compiled)

    def __repr__(self) -> str:
        return f"PatternGroup({self.patterns!r})"


class PatternFilter:
    """
    Stateless predicate over lines.

    A line passes if any group matches, or unconditionally when no groups are
    configured.
    """

    def __init__(self, groups: Iterable[Sequence[str]] = ()):
        self.groups: List[PatternGroup] = [
            group if isinstance(group, PatternGroup) else PatternGroup(group)
            for group in groups
        ]

    def accepts(self, line: str) -> bool:
        if not self.groups:
            return True
        return any(group.matches(line) for group in self.groups)

    def __call__(self, line: str) -> bool:
        return self.accepts(line)

    def __bool__(self) -> bool:
        return bool(self.groups)

    def __len__(self) -> int:
        return len(self.groups)


def parse_filter_query(query: str) -> List[List[str]]:
    """
    Split a query filter string into pattern groups.

    Args:
        query: e.g. "error&&db||warn"

    Returns:
        [["error", "db"], ["warn"]]; empty tokens and groups are skipped
    """
    groups = []
    if not query:
        return groups
    for raw_group in query.split(GROUP_SEPARATOR):
        tokens = [token.strip() for token in raw_group.split(TOKEN_SEPARATOR)]
        tokens = [token for token in tokens if token]
        if tokens:
            groups.append(tokens)
    return groups
