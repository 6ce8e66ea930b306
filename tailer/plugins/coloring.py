"""
Coloring Plugin Module - ANSI coloring of log level tokens

Handles:
- Named color themes for level tokens (TRACE ... FATAL)
- Rendering styled lines to ANSI escape sequences for terminals and xterm.js
"""
import re
from typing import Dict, Tuple

from rich.color import ColorSystem
from rich.style import Style
from rich.theme import Theme

from ..errors import ConfigurationError
from .base import Plugin

# Level token -> regex; word boundaries keep "INFORMATION" uncolored
LEVEL_PATTERNS = {
    "trace": r"\bTRACE\b",
    "debug": r"\bDEBUG\b",
    "info": r"\bINFO\b",
    "warn": r"\bWARN(?:ING)?\b",
    "error": r"\bERROR\b",
    "fatal": r"\b(?:FATAL|CRITICAL)\b",
}

_LEVEL_REGEXES = {name: re.compile(pattern) for name, pattern in LEVEL_PATTERNS.items()}

THEMES: Dict[str, Dict[str, str]] = {
    "default": {
        "trace": "white",
        "debug": "cyan",
        "info": "blue",
        "warn": "yellow",
        "error": "red",
        "fatal": "bold red",
    },
    "molokai": {
        "trace": "#75715e",
        "debug": "#a6e22e",
        "info": "#66d9ef",
        "warn": "#e6db74",
        "error": "#f92672",
        "fatal": "bold #f92672",
    },
    "solarized": {
        "trace": "#586e75",
        "debug": "#2aa198",
        "info": "#268bd2",
        "warn": "#b58900",
        "error": "#dc322f",
        "fatal": "bold #d33682",
    },
}

COLOR_SYSTEMS = {
    "standard": ColorSystem.STANDARD,
    "256": ColorSystem.EIGHT_BIT,
    "truecolor": ColorSystem.TRUECOLOR,
}


class Coloring(Plugin):
    """
    Wrap recognized level tokens in ANSI color codes.

    Never drops a line.
    """

    def __init__(self, theme: str = "default", color_system: str = "standard"):
        if theme not in THEMES:
            raise ConfigurationError(
                f"unknown theme {theme!r}; choose one of {', '.join(sorted(THEMES))}"
            )
        if color_system not in COLOR_SYSTEMS:
            raise ConfigurationError(f"unknown color system {color_system!r}")
        self.theme = theme
        self.color_system = COLOR_SYSTEMS[color_system]
        self._styles: Dict[str, Style] = Theme(
            {f"level.{name}": style for name, style in THEMES[theme].items()}
        ).styles

    def apply(self, line: str) -> Tuple[str, bool]:
        matches = sorted(
            (m.start(), m.end(), name)
            for name, regex in _LEVEL_REGEXES.items()
            for m in regex.finditer(line)
        )
        if not matches:
            return line, True

        # escape codes go around the tokens; the rest of the line is kept as is
        parts = []
        pos = 0
        for start, end, name in matches:
            if start < pos:
                continue
            parts.append(line[pos:start])
            parts.append(self._styles[f"level.{name}"].render(
                line[start:end], color_system=self.color_system,
            ))
            pos = end
        parts.append(line[pos:])
        return "".join(parts), True

    def __repr__(self) -> str:
        return f"Coloring({self.theme!r})"
