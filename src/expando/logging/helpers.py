from __future__ import annotations

"""Logger naming, one-shot configuration and opt-in tracing for expando.

Every module logs through ``expando.<area>`` loggers (``expando.format``,
``expando.format.pipe``, ``expando.replace``, ...). Only the CLI configures
the base ``expando`` logger; library callers inherit whatever the host
application set up.

Tracing covers the noisy per-call details (pipe command lines, per-rule regex
hits, substitution results). It is off unless ``EXPANDO_TRACE_IO=1`` and the
context travels on the record, so the JSON formatter emits it as ``ctx``.
"""

import json
import logging
import os
import sys
from datetime import datetime, timezone
from typing import Optional, TextIO

BASE_LOGGER = "expando"
PLAIN_FORMAT = "%(levelname)s: %(message)s"


class JsonLogFormatter(logging.Formatter):
    """One JSON object per record.

    Keys: ``ts`` (UTC, milliseconds), ``level``, ``module`` (logger name),
    ``msg``, ``version`` and, when the record carries a ``context`` dict,
    ``ctx``. Exceptions are rendered into ``exc``.
    """

    def __init__(self) -> None:
        super().__init__()
        self._version = self._resolve_version()

    @staticmethod
    def _resolve_version() -> str:
        # Imported late: expando/__init__ imports modules that import this one.
        try:
            from expando import __version__ as _v  # type: ignore
            return str(_v)
        except ImportError:
            return os.getenv("EXPANDO_VERSION", "unknown")

    def format(self, record: logging.LogRecord) -> str:
        ts = datetime.fromtimestamp(record.created, tz=timezone.utc)
        payload = {
            "ts": ts.isoformat(timespec="milliseconds").replace("+00:00", "Z"),
            "level": record.levelname,
            "module": record.name,
            "msg": record.getMessage(),
            "version": self._version,
        }
        ctx = getattr(record, "context", None)
        if isinstance(ctx, dict) and ctx:
            payload["ctx"] = ctx
        if record.exc_info:
            payload["exc"] = self.formatException(record.exc_info)
        return json.dumps(payload, ensure_ascii=False, default=repr)


def _formatter(json_logs: bool) -> logging.Formatter:
    return JsonLogFormatter() if json_logs else logging.Formatter(PLAIN_FORMAT)


def setup_base_logger(
    *, json_logs: bool = False, level: int = logging.INFO, stream: Optional[TextIO] = None
) -> logging.Logger:
    """Attach a single stream handler to the ``expando`` logger.

    Calling it again adjusts the level and output format of the handler that
    is already installed instead of stacking a second one.

    Args:
        json_logs: Emit JSON lines instead of ``LEVEL: message``.
        level: Level for the base logger.
        stream: Target stream, stderr by default.
    """
    base = logging.getLogger(BASE_LOGGER)
    base.setLevel(level)
    base.propagate = False

    owned = [h for h in base.handlers if getattr(h, "_expando_base", False)]
    if owned:
        for handler in owned:
            handler.setFormatter(_formatter(json_logs))
        return base

    handler = logging.StreamHandler(stream or sys.stderr)
    handler.setFormatter(_formatter(json_logs))
    handler._expando_base = True  # type: ignore[attr-defined]
    base.addHandler(handler)
    return base


def get_logger(name: str | None = None) -> logging.Logger:
    """``get_logger("format")`` → ``expando.format``; full names pass through."""
    if not name or name == BASE_LOGGER:
        return logging.getLogger(BASE_LOGGER)
    if name.startswith(BASE_LOGGER + "."):
        return logging.getLogger(name)
    return logging.getLogger(f"{BASE_LOGGER}.{name}")


def is_trace_io_enabled() -> bool:
    return os.getenv("EXPANDO_TRACE_IO") == "1"


def trace_io(logger: logging.Logger, message: str, **ctx) -> None:
    """Debug-level trace, emitted only when ``EXPANDO_TRACE_IO=1``.

    Keyword arguments are appended to the plain message and attached to the
    record as ``context``.
    """
    if not is_trace_io_enabled():
        return
    if ctx:
        logger.debug("%s | ctx=%r", message, ctx, extra={"context": ctx})
    else:
        logger.debug("%s", message)
