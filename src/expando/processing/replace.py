from __future__ import annotations

"""
replace – Rule-driven rewriting of short display strings.

Two evaluation styles share the same rule lists:

  • apply_replace – rewrite a string with the first rule whose pattern
    matches. Templates understand ``%L`` (text left of the match), ``%R``
    (text right of the match) and ``%N`` (capture group N). The work happens
    in two scratch buffers that swap roles, so a rule never reads from the
    buffer it writes to.
  • match_spam – report whether any rule matches and expand its ``%N``
    template into an annotation bounded by ``textsize``.

Both are meant for visual rewrites: the working copy is bounded to
LONG_STRING bytes.
"""

import logging
import re
from typing import Optional, Sequence

from expando.constants import LONG_STRING
from expando.core.buffer import Buffer
from expando.core.models import SpamMatch
from expando.logging.helpers import get_logger, trace_io
from expando.processing.regex_rules import ReplaceRule, coerce_rules
from expando.rendering.width import byte_len, char_len, truncate_bytes

_STRTOL_RX = re.compile(r"[ \t]*[+-]?\d+")


def _group_text(match: re.Match, n: int, nmatch: int) -> str:
    """Text of group *n*, empty past the rule's nmatch slots or the pattern's groups."""
    if n < 0 or n >= nmatch or n > (match.re.groups or 0):
        return ""
    return match.group(n) or ""


class ReplaceEngine:
    """Template substitution over ordered (pattern, template) rules."""

    def __init__(self, *, scratch_size: int = LONG_STRING, logger: Optional[logging.Logger] = None) -> None:
        if scratch_size < 2:
            raise ValueError("scratch_size must leave room for at least one byte")
        self._scratch = scratch_size
        self._log = logger or get_logger("replace")

    # ------------------------------------------------------------------ #
    # template expansion
    # ------------------------------------------------------------------ #
    def _expand_into(self, dst: Buffer, rule: ReplaceRule, src: str, match: re.Match) -> None:
        limit = self._scratch - 1
        tmpl = rule.template
        tlen = 0
        i, n = 0, len(tmpl)

        def _copy(piece: str) -> int:
            piece = truncate_bytes(piece, limit - tlen)
            dst.addstr(piece)
            return byte_len(piece)

        while i < n and tlen < limit:
            ch = tmpl[i]
            if ch != "%":
                cl = char_len(ch)
                if tlen + cl > limit:
                    break
                dst.addstr(ch)
                tlen += cl
                i += 1
                continue

            nxt = tmpl[i + 1] if i + 1 < n else ""
            if nxt == "L":
                tlen += _copy(src[:match.start()])
                i += 2
            elif nxt == "R":
                tlen += _copy(src[match.end():])
                i += 2
            elif nxt.isdigit() and nxt.isascii():
                j = i + 1
                while j < n and tmpl[j].isdigit() and tmpl[j].isascii():
                    j += 1
                tlen += _copy(_group_text(match, int(tmpl[i + 1:j]), rule.nmatch))
                i = j
            else:
                # Unknown sequence: drop it.
                i += 2

    def apply_replace(
        self,
        source: Optional[str],
        rules: Sequence,
        dlen: Optional[int] = None,
        *,
        chain: bool = False,
    ) -> str:
        """Rewrite *source* with the first matching rule.

        Args:
            source: String to rewrite. None or "" yields "".
            rules: ReplaceList, ReplaceRule objects or (pattern, template) pairs.
            dlen: Optional destination size; the result holds at most dlen - 1 bytes.
            chain: Evaluate every rule once, top to bottom, each one seeing the
                output of the previous match, instead of stopping at the first hit.

        Returns:
            The rewritten string, or the (bounded) source when nothing matched.
        """
        if dlen is not None and dlen <= 0:
            return ""
        if not source:
            return ""

        twin = (Buffer(), Buffer())
        switcher = 0
        src = twin[switcher]
        src.addstr(truncate_bytes(source, self._scratch - 1))
        current = src.text

        for rule in coerce_rules(rules):
            match = rule.regex.search(current)
            if match is None:
                continue

            switcher ^= 1
            dst = twin[switcher]
            dst.reset()
            trace_io(self._log, "replace rule matched", subject=current, pattern=rule.pattern)
            self._expand_into(dst, rule, current, match)
            current = dst.text
            trace_io(self._log, "replace result", result=current)
            if not chain:
                break

        for buf in twin:
            buf.reinit()
        if dlen is not None:
            return truncate_bytes(current, dlen - 1)
        return current

    def match_spam(self, source: Optional[str], rules: Sequence, textsize: int = LONG_STRING) -> SpamMatch:
        """Match *source* against scored rules, expanding ``%N`` into the annotation.

        When ``textsize <= 0`` the match is still performed but no annotation
        is produced.
        """
        if source is None:
            return SpamMatch(False)

        for rule in coerce_rules(rules):
            match = rule.regex.search(source)
            if match is None:
                continue

            trace_io(self._log, "spam rule matched", subject=source, pattern=rule.pattern,
                     groups=match.re.groups)
            if textsize <= 0:
                return SpamMatch(True, "", rule.pattern)

            limit = textsize - 1
            out: list[str] = []
            tlen = 0
            tmpl = rule.template
            i, n = 0, len(tmpl)
            while i < n and tlen < limit:
                ch = tmpl[i]
                if ch == "%":
                    i += 1
                    num = _STRTOL_RX.match(tmpl, i)
                    if num is not None:
                        idx = int(num.group(0))
                        piece = truncate_bytes(_group_text(match, idx, rule.nmatch), limit - tlen)
                        out.append(piece)
                        tlen += byte_len(piece)
                        i = num.end()
                    continue
                cl = char_len(ch)
                if tlen + cl > limit:
                    break
                out.append(ch)
                tlen += cl
                i += 1

            text = "".join(out)
            trace_io(self._log, "spam annotation", text=text)
            return SpamMatch(True, text, rule.pattern)

        return SpamMatch(False)


_DEFAULT_ENGINE: Optional[ReplaceEngine] = None


def _engine() -> ReplaceEngine:
    global _DEFAULT_ENGINE
    if _DEFAULT_ENGINE is None:
        _DEFAULT_ENGINE = ReplaceEngine()
    return _DEFAULT_ENGINE


def apply_replace(source: Optional[str], rules: Sequence, dlen: Optional[int] = None, *,
                  chain: bool = False) -> str:
    """Module-level shortcut for :meth:`ReplaceEngine.apply_replace`."""
    return _engine().apply_replace(source, rules, dlen, chain=chain)


def match_spam(source: Optional[str], rules: Sequence, textsize: int = LONG_STRING) -> SpamMatch:
    """Module-level shortcut for :meth:`ReplaceEngine.match_spam`."""
    return _engine().match_spam(source, rules, textsize)
