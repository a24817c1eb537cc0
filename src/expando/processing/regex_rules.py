from __future__ import annotations

"""
regex_rules – Compiled patterns and the ordered lists that hold them.

Two list flavours exist:

  • RegexList    – plain patterns, used for "does anything match" checks.
  • ReplaceList  – (pattern, template) rules consumed by the substitution
                   engine in :mod:`expando.processing.replace`.

Both lists are ordered, and both understand the ``*`` key on removal, which
drops every entry at once.
"""

import logging
import re
from dataclasses import dataclass
from typing import Iterable, Iterator, List, Optional, Tuple

from expando.logging.helpers import get_logger, trace_io

_log = get_logger("regex")

_BACKREF_RX = re.compile(r"%[ \t]*[+-]?(\d+)")


class RegexCompileError(ValueError):
    """Raised when a rule list rejects a pattern that does not compile."""


@dataclass(frozen=True)
class Regex:
    """A compiled pattern that remembers its source text."""
    pattern: str
    regex: re.Pattern
    flags: int = 0

    def search(self, s: str) -> Optional[re.Match]:
        return self.regex.search(s)


def compile_regex(pattern: Optional[str], flags: int = 0) -> Optional[Regex]:
    """Compile *pattern*; return None (and log) when it is not a valid regex."""
    src = pattern or ""
    try:
        return Regex(pattern=src, regex=re.compile(src, flags), flags=flags)
    except re.error as exc:
        _log.warning("⚠  invalid regex %r: %s", src, exc)
        return None


def template_nmatch(template: Optional[str]) -> int:
    """Number of match slots a template needs: highest %N reference plus one."""
    highest = 0
    for m in _BACKREF_RX.finditer(template or ""):
        highest = max(highest, int(m.group(1)))
    return highest + 1


@dataclass(frozen=True)
class ReplaceRule:
    """One (pattern, template) rule of a ReplaceList."""
    regex: Regex
    template: str
    nmatch: int = 1

    @property
    def pattern(self) -> str:
        return self.regex.pattern

    @classmethod
    def build(cls, pattern: str, template: str, flags: int = 0) -> "ReplaceRule":
        rx = compile_regex(pattern, flags)
        if rx is None:
            raise RegexCompileError(f"cannot compile pattern {pattern!r}")
        return cls(regex=rx, template=template or "", nmatch=template_nmatch(template))


class _OrderedRules:
    """Shared list plumbing: iteration, '*' removal, case-insensitive keys."""

    def __init__(self, *, logger: Optional[logging.Logger] = None) -> None:
        self._items: list = []
        self._log = logger or _log

    @staticmethod
    def _key(item) -> str:
        raise NotImplementedError

    def remove(self, pattern: str) -> bool:
        """Remove entries by their pattern text.

        ``"*"`` clears the whole list; any other key removes every entry whose
        pattern equals it case-insensitively.

        Returns:
            True when at least one entry was removed (``"*"`` always succeeds).
        """
        if pattern == "*":
            self._items.clear()
            return True
        needle = pattern.casefold()
        kept = [it for it in self._items if self._key(it).casefold() != needle]
        removed = len(kept) != len(self._items)
        self._items = kept
        return removed

    def clear(self) -> None:
        self._items.clear()

    def __iter__(self) -> Iterator:
        return iter(self._items)

    def __len__(self) -> int:
        return len(self._items)

    def __bool__(self) -> bool:
        return bool(self._items)

    def __getitem__(self, idx: int):
        return self._items[idx]


class RegexList(_OrderedRules):
    """Ordered list of plain patterns."""

    def __init__(self, patterns: Iterable[str] = (), *, flags: int = 0,
                 logger: Optional[logging.Logger] = None) -> None:
        super().__init__(logger=logger)
        for pat in patterns:
            self.add(pat, flags)

    @staticmethod
    def _key(item: Regex) -> str:
        return item.pattern

    def add(self, pattern: str, flags: int = 0) -> Regex:
        """Append *pattern*; an already present pattern text is not duplicated."""
        for rx in self._items:
            if rx.pattern.casefold() == pattern.casefold():
                return rx
        rx = compile_regex(pattern, flags)
        if rx is None:
            raise RegexCompileError(f"cannot compile pattern {pattern!r}")
        self._items.append(rx)
        return rx

    def matches(self, s: Optional[str]) -> bool:
        """True when any pattern in the list matches somewhere in *s*."""
        if s is None:
            return False
        for rx in self._items:
            if rx.search(s):
                trace_io(self._log, "regex list hit", subject=s, pattern=rx.pattern)
                return True
        return False


class ReplaceList(_OrderedRules):
    """Ordered (pattern, template) rules for the substitution engine."""

    def __init__(self, rules: Iterable[Tuple[str, str]] = (), *, flags: int = 0,
                 logger: Optional[logging.Logger] = None) -> None:
        super().__init__(logger=logger)
        for pat, tmpl in rules:
            self.add(pat, tmpl, flags)

    @staticmethod
    def _key(item: ReplaceRule) -> str:
        return item.pattern

    def add(self, pattern: str, template: str, flags: int = 0) -> ReplaceRule:
        """Append a rule, or update the template of a rule with the same pattern."""
        rule = ReplaceRule.build(pattern, template, flags)
        for idx, existing in enumerate(self._items):
            if existing.pattern.casefold() == pattern.casefold():
                self._items[idx] = rule
                return rule
        self._items.append(rule)
        return rule

    @property
    def rules(self) -> List[ReplaceRule]:
        return list(self._items)


def coerce_rules(rules) -> List[ReplaceRule]:
    """Accept a ReplaceList, ReplaceRule objects or raw (pattern, template) pairs.

    Raw pairs whose pattern does not compile are discarded with a warning.
    """
    out: List[ReplaceRule] = []
    for item in rules or ():
        if isinstance(item, ReplaceRule):
            out.append(item)
            continue
        pattern, template = item
        try:
            out.append(ReplaceRule.build(pattern, template))
        except RegexCompileError as exc:
            _log.warning("⚠  discarding rule: %s", exc)
    return out
