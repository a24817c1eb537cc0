from __future__ import annotations

import enum
import os
from dataclasses import dataclass, replace
from typing import Optional

from expando.constants import (
    DEFAULT_COLUMNS,
    DEFAULT_MAX_RECYCLE,
    DEFAULT_PIPE_TIMEOUT,
    LONG_STRING,
)


class FormatFlag(enum.IntFlag):
    """Flags steering a single format expansion."""
    NONE = 0
    # Arrow cursor is drawn in front of the row.
    ARROWCURSOR = 2
    # Do not treat a trailing '|' as a pipe directive.
    NOFILTER = 4


@dataclass(frozen=True)
class FieldRequest:
    """Everything a field callback needs to expand one code."""
    code: str
    prefix: str = ""
    col: int = 0
    cols: int = DEFAULT_COLUMNS
    source: str = ""
    if_body: str = ""
    else_body: str = ""
    optional: bool = False
    capacity: int = LONG_STRING


@dataclass(frozen=True)
class FieldResult:
    """Result of a field callback.

    ``consumed`` counts template characters the callback parsed past the
    code; ``present`` overrides the "has content" test for conditionals.
    """
    text: str = ""
    consumed: int = 0
    present: Optional[bool] = None

    @property
    def is_present(self) -> bool:
        return bool(self.text) if self.present is None else self.present


@dataclass(frozen=True)
class CommandResult:
    returncode: int
    stdout: bytes = b""


@dataclass(frozen=True)
class SpamMatch:
    """Outcome of a spam-list evaluation; truthy when a rule matched."""
    matched: bool
    text: str = ""
    pattern: Optional[str] = None

    def __bool__(self) -> bool:
        return self.matched


def _env_int(name: str, default: int) -> int:
    raw = (os.getenv(name) or "").strip()
    if not raw:
        return default
    try:
        return int(raw)
    except ValueError:
        return default


def _env_float(name: str, default: float) -> float:
    raw = (os.getenv(name) or "").strip()
    if not raw:
        return default
    try:
        return float(raw)
    except ValueError:
        return default


@dataclass(frozen=True)
class RenderOptions:
    """Immutable configuration for the format interpreter.

    Attributes:
        cols: Screen columns available to a row.
        buflen: Destination capacity in bytes (one byte is kept for the terminator).
        arrow_cursor: Reserve room for the arrow cursor when ARROWCURSOR is set.
        pipe_timeout: Seconds to wait for a pipe command; None waits forever.
        max_recycle_depth: How many times pipe output may be re-fed as a template.
    """
    cols: int = DEFAULT_COLUMNS
    buflen: int = LONG_STRING
    arrow_cursor: bool = False
    pipe_timeout: Optional[float] = DEFAULT_PIPE_TIMEOUT
    max_recycle_depth: int = DEFAULT_MAX_RECYCLE

    @classmethod
    def from_env(cls) -> "RenderOptions":
        """Build options from EXPANDO_* environment variables."""
        timeout = _env_float("EXPANDO_PIPE_TIMEOUT", DEFAULT_PIPE_TIMEOUT)
        return cls(
            cols=_env_int("EXPANDO_COLUMNS", DEFAULT_COLUMNS),
            buflen=_env_int("EXPANDO_BUFLEN", LONG_STRING),
            arrow_cursor=os.getenv("EXPANDO_ARROW_CURSOR") == "1",
            pipe_timeout=timeout if timeout > 0 else None,
            max_recycle_depth=_env_int("EXPANDO_MAX_RECYCLE", DEFAULT_MAX_RECYCLE),
        )

    def with_overrides(self, **changes) -> "RenderOptions":
        clean = {k: v for k, v in changes.items() if v is not None}
        return replace(self, **clean)
