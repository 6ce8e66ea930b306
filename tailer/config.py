"""
Configuration management for tailer.

This module validates follower options once, at construction, and provides
process-level defaults for the command-line follower read from the
environment (optionally via a .env file).
"""
import codecs
import os
from dataclasses import dataclass
from typing import Any, Callable, List, Optional

from dotenv import load_dotenv
from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from .errors import ConfigurationError
from .filters.patterns import PatternFilter
from .plugins.base import PluginChain

DEFAULT_POLL_INTERVAL = 1.0
DEFAULT_BUFFER_SIZE = 100
DEFAULT_BACKFILL_LINES = 10
DEFAULT_MAX_LINE_BYTES = 1024 * 1024
DEFAULT_MAX_BACKFILL_BYTES = 4 * 1024 * 1024


class TailConfig(BaseModel):
    """Options for one followed file"""

    model_config = ConfigDict(arbitrary_types_allowed=True, extra="forbid")

    poll_interval: float = Field(DEFAULT_POLL_INTERVAL, gt=0)
    buffer_size: int = Field(DEFAULT_BUFFER_SIZE, ge=1)
    backfill_lines: int = Field(DEFAULT_BACKFILL_LINES, ge=0)
    patterns: List[List[str]] = Field(default_factory=list)
    alias: Optional[str] = None
    plugins: List[Any] = Field(default_factory=list)
    encoding: str = "utf-8"
    max_line_bytes: int = Field(DEFAULT_MAX_LINE_BYTES, ge=1)
    max_backfill_bytes: int = Field(DEFAULT_MAX_BACKFILL_BYTES, ge=1)
    on_diagnostic: Optional[Callable[..., Any]] = None

    @field_validator("encoding")
    @classmethod
    def _known_encoding(cls, value: str) -> str:
        try:
            codecs.lookup(value)
        except LookupError as e:
            raise ValueError(f"unknown encoding {value!r}") from e
        return value

    @field_validator("patterns")
    @classmethod
    def _compiles(cls, value: List[List[str]]) -> List[List[str]]:
        PatternFilter(value)
        return value

    @classmethod
    def build(cls, **options) -> "TailConfig":
        """Validate options, raising ConfigurationError instead of ValidationError"""
        try:
            return cls(**options)
        except ValidationError as e:
            raise ConfigurationError(str(e)) from e

    def with_patterns(self, groups: List[List[str]]) -> "TailConfig":
        """Copy of this config with extra pattern groups appended"""
        return self.model_copy(update={"patterns": self.patterns + [list(g) for g in groups]})

    def pattern_filter(self) -> PatternFilter:
        return PatternFilter(self.patterns)

    def plugin_chain(self) -> PluginChain:
        return PluginChain(self.plugins)


@dataclass
class Settings:
    """Process-level defaults for the command-line follower"""

    poll_interval: float = DEFAULT_POLL_INTERVAL
    buffer_size: int = DEFAULT_BUFFER_SIZE
    backfill_lines: int = DEFAULT_BACKFILL_LINES
    log_level: str = "WARNING"
    log_file: Optional[str] = None
    theme: Optional[str] = None


def _env(name: str, cast, default):
    raw = os.getenv(name)
    if raw is None or raw == "":
        return default
    try:
        return cast(raw)
    except ValueError as e:
        raise ConfigurationError(f"invalid value for {name}: {raw!r}") from e


def load_settings(dotenv_path: Optional[str] = None) -> Settings:
    """
    Read CLI defaults from TAILER_* environment variables.

    A .env file is loaded first; variables already set in the environment win.
    """
    load_dotenv(dotenv_path)
    return Settings(
        poll_interval=_env("TAILER_POLL_INTERVAL", float, DEFAULT_POLL_INTERVAL),
        buffer_size=_env("TAILER_BUFFER_SIZE", int, DEFAULT_BUFFER_SIZE),
        backfill_lines=_env("TAILER_BACKFILL", int, DEFAULT_BACKFILL_LINES),
        log_level=os.getenv("TAILER_LOG_LEVEL", "WARNING"),
        log_file=os.getenv("TAILER_LOG_FILE") or None,
        theme=os.getenv("TAILER_THEME") or None,
    )
