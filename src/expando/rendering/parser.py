from __future__ import annotations

"""
parser – Node scanner for expando format templates.

A template is read one node at a time so that field callbacks may consume
extra template text after their code (the interpreter advances past it
before asking for the next node). Node kinds:

    Literal      plain character copied as-is
    Escape       backslash sequence (\\n \\t \\r \\f \\v, anything else literal)
    Percent      %%
    Expando      %[prefix][_:]code
    Conditional  %<code[prefix]?if[&else]>   (legacy form: %?code?if&else?)
    Pad          %>X  %*X  %|X               (X is the fill character)
    Malformed    anything the scanner cannot make sense of; expansion stops

The legacy ``%?`` form is retargeted on a private copy of the template; the
caller's string is never modified.
"""

from dataclasses import dataclass
from typing import Iterator, List, Tuple, Union

PAD_CODES = frozenset(">*|")
_PREFIX_CHARS = frozenset("0123456789.-=")
_ESCAPES = {"n": "\n", "t": "\t", "r": "\r", "f": "\f", "v": "\v"}


@dataclass(frozen=True)
class Literal:
    text: str


@dataclass(frozen=True)
class Escape:
    text: str


@dataclass(frozen=True)
class Percent:
    text: str = "%"


@dataclass(frozen=True)
class Expando:
    code: str
    prefix: str = ""
    lower: bool = False
    nodots: bool = False


@dataclass(frozen=True)
class Conditional:
    code: str
    prefix: str = ""
    if_body: str = ""
    else_body: str = ""
    lower: bool = False
    nodots: bool = False


@dataclass(frozen=True)
class Pad:
    kind: str
    fill: str = " "
    rest: str = ""


@dataclass(frozen=True)
class Malformed:
    reason: str


Node = Union[Literal, Escape, Percent, Expando, Conditional, Pad, Malformed]


def convert_legacy(src: str, pos: int) -> str:
    """Rewrite ``%?c?if&else?`` starting at *pos* (the first ``?``) to ``%<c?if&else>``.

    Only the opening and the closing ``?`` are retargeted; the string keeps
    its length so positions stay valid.
    """
    chars = list(src)
    chars[pos] = "<"
    p = pos
    n = len(chars)
    while p < n and chars[p] != "?":
        p += 1
    if p < n:
        p += 1
    while p < n and chars[p] != "?":
        p += 1
    if p < n:
        chars[p] = ">"
    return "".join(chars)


def _strip_modifiers(src: str, i: int) -> Tuple[str, bool, bool, int]:
    """Read a code character, consuming leading ``_`` / ``:`` modifiers."""
    lower = nodots = False
    n = len(src)
    while i < n and src[i] in "_:":
        if src[i] == "_":
            lower = True
        else:
            nodots = True
        i += 1
    if i >= n:
        return ("", lower, nodots, i)
    return (src[i], lower, nodots, i + 1)


def _scan_span(src: str, i: int, balance: int, *, stop_on_amp: bool) -> Tuple[str, int, int]:
    """Collect a conditional body, tracking ``%<`` / ``>`` nesting.

    Returns ``(body, index, balance)``; the index points at the terminating
    ``&`` or ``>`` (balance 0), or at the end of the string.
    """
    out: List[str] = []
    n = len(src)
    while balance > 0 and i < n:
        ch = src[i]
        nxt = src[i + 1] if i + 1 < n else ""
        if ch == "%" and nxt in (">", "%"):
            # padding expando or literal percent: copy both, no depth change
            out.append(ch + nxt)
            i += 2
            continue
        if ch == "\\":
            out.append(src[i:i + 2])
            i += 2
            continue
        if ch == "%" and nxt == "<":
            balance += 1
        elif ch == ">":
            balance -= 1
            if balance == 0:
                break
        if stop_on_amp and balance == 1 and ch == "&":
            break
        out.append(ch)
        i += 1
    return ("".join(out), i, balance)


def _parse_percent(src: str, i: int) -> Tuple[Node, int, str]:
    """Parse an expando; *i* points just past the ``%``."""
    n = len(src)
    if i >= n:
        return (Malformed("dangling %"), n, src)
    if src[i] == "%":
        return (Percent(), i + 1, src)

    if src[i] == "?":
        src = convert_legacy(src, i)

    if src[i] == "<":
        code, lower, nodots, i = _strip_modifiers(src, i + 1)
        if not code:
            return (Malformed("missing conditional code"), n, src)
        start = i
        while i < n and src[i] != "?":
            i += 1
        prefix = src[start:i]
        if i >= n:
            return (Malformed("missing '?' in conditional"), n, src)
        i += 1

        if_body, i, balance = _scan_span(src, i, 1, stop_on_amp=True)
        if i < n and src[i] == "&":
            i += 1
        else_body, i, balance = _scan_span(src, i, balance, stop_on_amp=False)
        if i >= n:
            return (Malformed("unterminated conditional"), n, src)
        return (Conditional(code, prefix, if_body, else_body, lower, nodots), i + 1, src)

    start = i
    while i < n and src[i] in _PREFIX_CHARS:
        i += 1
    prefix = src[start:i]
    if i >= n:
        return (Malformed("missing expando code"), n, src)

    if src[i] in PAD_CODES:
        kind = src[i]
        i += 1
        if i < n:
            return (Pad(kind, src[i], src[i + 1:]), n, src)
        return (Pad(kind, " ", ""), n, src)

    code, lower, nodots, i = _strip_modifiers(src, i)
    if not code:
        return (Malformed("missing expando code"), n, src)
    return (Expando(code, prefix, lower, nodots), i, src)


def next_node(src: str, pos: int) -> Tuple[Node, int, str]:
    """Scan the node starting at *pos*.

    Returns:
        ``(node, next_pos, src)``; *src* is the template to keep scanning,
        which differs from the input only after a legacy conditional was
        retargeted.
    """
    ch = src[pos]
    if ch == "%":
        return _parse_percent(src, pos + 1)
    if ch == "\\":
        if pos + 1 >= len(src):
            return (Malformed("dangling backslash"), len(src), src)
        esc = src[pos + 1]
        return (Escape(_ESCAPES.get(esc, esc)), pos + 2, src)
    return (Literal(ch), pos + 1, src)


def iter_nodes(src: str) -> Iterator[Node]:
    """Yield every node of *src*, stopping after a Pad or Malformed node."""
    pos = 0
    while pos < len(src):
        node, pos, src = next_node(src, pos)
        yield node
        if isinstance(node, (Pad, Malformed)):
            return


def parse_template(src: str) -> List[Node]:
    """Parse *src* into a node list (for callbacks that never consume text)."""
    return list(iter_nodes(src))
