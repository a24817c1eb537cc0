from __future__ import annotations

"""
pretty – Small string helpers that sit next to the format interpreter.

    pretty_size(n)               1234 → "1.2K"
    quote_filename(path)         shell-safe single quoting for file names
    expand_fmt(fmt, src)         "%s"-style command templates
    expand_file_fmt(fmt, path)   expand_fmt with a quoted file name
    open_read(path)              read a file, or a command's output for "cmd |"
"""

import io
import logging
import os
from typing import IO, Optional

from expando.constants import LONG_STRING
from expando.core.interfaces.commands import CommandRunnerProtocol
from expando.logging.helpers import get_logger
from expando.rendering.width import byte_len, truncate_bytes

_log = get_logger("utils.pretty")


def pretty_size(n: int) -> str:
    """Human-readable size with one decimal below 10 units."""
    if n == 0:
        return "0K"
    if n < 10189:
        return "%3.1fK" % (0.1 if n < 103 else n / 1024.0)
    if n < 1023949:
        return "%dK" % ((n + 51) // 1024)
    if n < 10433332:
        return "%3.1fM" % (n / 1048576.0)
    # rounds to the nearest megabyte from 10M on
    return "%dM" % ((n + 52428) // 1048576)


def quote_filename(filename: str) -> str:
    """Wrap *filename* in single quotes; ``'`` and backticks become ``'\\X'``."""
    out = ["'"]
    for ch in filename:
        if ch in ("'", "`"):
            out.append("'\\" + ch + "'")
        else:
            out.append(ch)
    out.append("'")
    return "".join(out)


def expand_fmt(fmt: str, src: str, destlen: int = LONG_STRING) -> str:
    """Replace ``%s`` in *fmt* with *src* (``%%`` is a literal percent).

    When *fmt* has no ``%s``, `` src`` is appended instead. The result holds
    at most ``destlen - 1`` bytes.
    """
    limit = destlen - 1
    if limit <= 0:
        return ""
    out: list[str] = []
    used = 0
    found = False
    i, n = 0, len(fmt)
    while i < n and used < limit:
        ch = fmt[i]
        nxt = fmt[i + 1] if i + 1 < n else ""
        if ch == "%" and nxt == "%":
            out.append("%")
            used += 1
            i += 2
            continue
        if ch == "%" and nxt == "s":
            found = True
            piece = truncate_bytes(src, limit - used)
            out.append(piece)
            used += byte_len(piece)
            i += 2
            continue
        piece = truncate_bytes(ch, limit - used)
        if not piece:
            break
        out.append(piece)
        used += byte_len(piece)
        i += 1

    if not found and used < limit:
        tail = truncate_bytes(" " + src, limit - used)
        out.append(tail)
    return "".join(out)


def expand_file_fmt(fmt: str, path: str, destlen: int = LONG_STRING) -> str:
    """`expand_fmt` with *path* quoted for the shell."""
    return expand_fmt(fmt, quote_filename(path), destlen)


def open_read(path: str, *, runner: Optional[CommandRunnerProtocol] = None,
              logger: Optional[logging.Logger] = None) -> IO[bytes]:
    """Open *path* for reading; ``"command |"`` reads the command's stdout.

    Raises:
        IsADirectoryError: *path* names a directory.
        OSError: The file cannot be opened.
    """
    log = logger or _log
    if path.endswith("|"):
        if runner is None:
            from expando.runtime.commands import SubprocessCommandRunner

            runner = SubprocessCommandRunner(logger=log)
        result = runner.run(path[:-1], -1)
        if result is None:
            log.warning("⚠  cannot read from command %r", path[:-1])
            return io.BytesIO(b"")
        return io.BytesIO(result.stdout)

    if os.path.isdir(path):
        raise IsADirectoryError(path)
    return open(path, "rb")
