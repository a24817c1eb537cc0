from __future__ import annotations

"""
width – Display-column and byte accounting for rendered text.

Budgets in the format interpreter are expressed twice: in UTF-8 bytes (the
destination capacity) and in terminal columns (the row width). These helpers
answer both questions per character, and truncate a string so that it fits
both limits without splitting a character.
"""

import unicodedata
from typing import Optional, Tuple

_ZERO_WIDTH_CATEGORIES = frozenset({"Mn", "Me", "Cf"})


def char_len(ch: str) -> int:
    """UTF-8 length of *ch*; characters that cannot be encoded count as one byte."""
    try:
        return len(ch.encode("utf-8"))
    except UnicodeEncodeError:
        return 1


def char_width(ch: str) -> int:
    """Number of terminal columns used by *ch*."""
    if ch == "\0":
        return 0
    if unicodedata.category(ch) in _ZERO_WIDTH_CATEGORIES:
        return 0
    if unicodedata.east_asian_width(ch) in ("W", "F"):
        return 2
    return 1


def mb_charlen(s: str, pos: int = 0) -> Tuple[int, int]:
    """Return ``(bytes, columns)`` of the character at *pos* (``(0, 0)`` at the end)."""
    if pos >= len(s):
        return (0, 0)
    ch = s[pos]
    return (char_len(ch), char_width(ch))


def byte_len(s: str) -> int:
    return sum(char_len(ch) for ch in s)


def strwidth(s: str) -> int:
    return sum(char_width(ch) for ch in s)


def wstr_trunc(s: str, maxbytes: int, maxwid: Optional[int] = None) -> Tuple[int, int, int]:
    """Measure the longest prefix of *s* fitting both *maxbytes* and *maxwid*.

    Zero-width characters (combining marks) stay attached to the character
    before them as long as the byte budget allows.

    Returns:
        ``(chars, bytes, columns)`` of the accepted prefix.
    """
    if maxwid is None:
        maxwid = maxbytes
    nbytes = 0
    ncols = 0
    idx = 0
    for idx, ch in enumerate(s):
        cl = char_len(ch)
        cw = char_width(ch)
        if nbytes + cl > maxbytes or ncols + cw > maxwid:
            return (idx, nbytes, ncols)
        nbytes += cl
        ncols += cw
    else:
        idx = len(s)
    return (idx, nbytes, ncols)


def truncate_bytes(s: str, maxbytes: int) -> str:
    """Return the longest prefix of *s* whose UTF-8 form fits in *maxbytes*."""
    if maxbytes <= 0:
        return ""
    nbytes = 0
    for idx, ch in enumerate(s):
        nbytes += char_len(ch)
        if nbytes > maxbytes:
            return s[:idx]
    return s


def truncate_columns(s: str, maxbytes: int, maxwid: int) -> Tuple[str, int]:
    """Truncate *s* to both budgets and return ``(text, columns)``."""
    chars, _nbytes, ncols = wstr_trunc(s, max(0, maxbytes), max(0, maxwid))
    return (s[:chars], ncols)
