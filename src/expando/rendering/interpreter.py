from __future__ import annotations

"""
interpreter – Expand expando format templates into fixed-width rows.

The interpreter walks a template node by node (see
:mod:`expando.rendering.parser`), writing into a row that is bounded twice:
by a byte capacity (``buflen``, one byte of which stays reserved for the
terminator) and by a screen width (``cols``). Every write is checked against
the remaining bytes first, so a malformed template or a greedy callback can
only ever truncate the row.

Codes other than the padding codes are delegated to a field callback. For
conditional codes the callback's answer only decides which body is expanded;
the body itself goes through the interpreter again.
"""

import logging
from typing import Optional

from expando.constants import ARROW_CURSOR_WIDTH, LONG_STRING
from expando.core.interfaces.commands import CommandRunnerProtocol
from expando.core.interfaces.templating import FieldCallback, FieldCallbackResult
from expando.core.models import FieldRequest, FieldResult, FormatFlag, RenderOptions
from expando.logging.helpers import get_logger
from expando.rendering import parser as P
from expando.rendering.pipe import PipeRenderer, is_pipe_template
from expando.rendering.width import (
    byte_len,
    char_len,
    mb_charlen,
    strwidth,
    truncate_bytes,
    truncate_columns,
    wstr_trunc,
)
from expando.runtime.commands import SubprocessCommandRunner


class _Row:
    """Output accumulator tracking bytes (``wlen``) and columns (``col``)."""

    __slots__ = ("parts", "wlen", "col", "budget")

    def __init__(self, *, budget: int, col: int, wlen: int) -> None:
        self.parts: list[str] = []
        self.wlen = wlen
        self.col = col
        self.budget = budget

    def room(self) -> int:
        return self.budget - self.wlen

    def put(self, text: str, nbytes: int, ncols: int) -> None:
        self.parts.append(text)
        self.wlen += nbytes
        self.col += ncols

    def text(self) -> str:
        return "".join(self.parts)


def _normalize(result: FieldCallbackResult) -> FieldResult:
    if result is None:
        return FieldResult()
    if isinstance(result, FieldResult):
        return result
    return FieldResult(text=str(result))


class FormatInterpreter:
    """Expando format interpreter.

    Args:
        options: Default columns, capacity and pipe settings.
        runner: Command runner used by pipe templates.
        logger: Optional logger ('expando.format' by default).
    """

    def __init__(
        self,
        *,
        options: Optional[RenderOptions] = None,
        runner: Optional[CommandRunnerProtocol] = None,
        logger: Optional[logging.Logger] = None,
    ) -> None:
        self._opts = options or RenderOptions()
        self._log = logger or get_logger("format")
        self._runner = runner or SubprocessCommandRunner(timeout=self._opts.pipe_timeout)
        self._pipe = PipeRenderer(
            expand=self._expand,
            runner=self._runner,
            max_recycle_depth=self._opts.max_recycle_depth,
            logger=get_logger("format.pipe"),
        )

    @property
    def options(self) -> RenderOptions:
        return self._opts

    def render(
        self,
        template: Optional[str],
        callback: FieldCallback,
        *,
        col: int = 0,
        cols: Optional[int] = None,
        buflen: Optional[int] = None,
        flags: FormatFlag = FormatFlag.NONE,
    ) -> str:
        """Expand *template* using *callback* for field codes.

        Args:
            template: Format string.
            callback: Field callback, see :class:`~expando.core.models.FieldRequest`.
            col: Column the row starts at.
            cols: Screen columns (defaults to the configured width).
            buflen: Capacity in bytes; the result holds at most ``buflen - 1``.
            flags: FormatFlag.NOFILTER disables pipe templates,
                FormatFlag.ARROWCURSOR reserves room for the arrow cursor.
        """
        return self._expand(template, callback, col=col, cols=cols, buflen=buflen, flags=flags, depth=0)

    # ------------------------------------------------------------------ #
    # core loop
    # ------------------------------------------------------------------ #
    def _expand(
        self,
        template: Optional[str],
        callback: FieldCallback,
        *,
        col: int = 0,
        cols: Optional[int] = None,
        buflen: Optional[int] = None,
        flags: FormatFlag = FormatFlag.NONE,
        depth: int = 0,
    ) -> str:
        if not template:
            return ""
        cols = self._opts.cols if cols is None else cols
        buflen = self._opts.buflen if buflen is None else buflen
        if buflen <= 0:
            return ""

        if not (flags & FormatFlag.NOFILTER) and is_pipe_template(template):
            return self._pipe.render(
                template, callback, col=col, cols=cols, buflen=buflen, flags=flags, depth=depth,
            )

        arrow = ARROW_CURSOR_WIDTH if (flags & FormatFlag.ARROWCURSOR and self._opts.arrow_cursor) else 0
        row = _Row(budget=buflen - 1, col=col + arrow, wlen=arrow)

        src = template
        pos = 0
        while pos < len(src) and row.wlen < row.budget:
            node, pos, src = P.next_node(src, pos)

            if isinstance(node, P.Literal):
                cl, cw = mb_charlen(node.text)
                if row.wlen + cl > row.budget:
                    break
                row.put(node.text, cl, cw)
            elif isinstance(node, P.Escape):
                cl = char_len(node.text)
                if row.wlen + cl > row.budget:
                    break
                row.put(node.text, cl, 1)
            elif isinstance(node, P.Percent):
                row.put("%", 1, 1)
            elif isinstance(node, P.Pad):
                self._pad(row, node, callback, cols=cols, flags=flags, arrow=arrow, depth=depth)
                break
            elif isinstance(node, P.Malformed):
                self._log.debug("bad format (%s) in %r", node.reason, template)
                break
            else:
                pos = self._field(row, node, callback, src, pos, cols=cols, flags=flags, depth=depth)

        return row.text()

    def _field(self, row: _Row, node, callback: FieldCallback, src: str, pos: int, *,
               cols: int, flags: FormatFlag, depth: int) -> int:
        optional = isinstance(node, P.Conditional)
        request = FieldRequest(
            code=node.code,
            prefix=node.prefix,
            col=row.col,
            cols=cols,
            source=src[pos:],
            if_body=node.if_body if optional else "",
            else_body=node.else_body if optional else "",
            optional=optional,
            capacity=LONG_STRING,
        )
        result = _normalize(callback(request))
        pos = min(len(src), pos + max(0, result.consumed))

        if optional:
            body = node.if_body if result.is_present else node.else_body
            text = self._expand(
                body, callback, col=row.col, cols=cols, buflen=LONG_STRING,
                flags=flags | FormatFlag.NOFILTER, depth=depth,
            )
        else:
            text = truncate_bytes(result.text, LONG_STRING - 1)

        if node.lower:
            text = text.lower()
        if node.nodots:
            text = text.replace(".", "_")

        nbytes = byte_len(text)
        if nbytes > row.room():
            text, _ = truncate_columns(text, row.room(), cols - row.col)
            nbytes = byte_len(text)
        row.put(text, nbytes, strwidth(text))
        return pos

    def _pad(self, row: _Row, node: P.Pad, callback: FieldCallback, *,
             cols: int, flags: FormatFlag, arrow: int, depth: int) -> None:
        pl, pw = mb_charlen(node.fill)
        if pl <= 0:
            pl = pw = 1
        # Zero-width fill characters would never fill anything.
        pw = max(pw, 1)

        if node.kind == "|":
            if row.col < cols and row.wlen < row.budget:
                count = (cols - row.col) // pw
                if count > 0 and row.wlen + count * pl > row.budget:
                    count = (row.budget - row.wlen) // pl
                if count > 0:
                    row.put(node.fill * count, count * pl, count * pw)
            return

        soft = node.kind == "*"
        if not ((row.col < cols and row.wlen < row.budget) or soft):
            return

        right = self._expand(node.rest, callback, col=0, cols=cols, buflen=LONG_STRING,
                             flags=flags, depth=depth)
        rlen = byte_len(right)
        rwid = strwidth(right)

        avail = cols - row.col - rwid
        if avail >= 0:
            pad = avail // pw
            if row.wlen + pad * pl + rlen > row.budget:
                pad = (row.budget - row.wlen - rlen) // pl if row.budget > row.wlen + rlen else 0
            else:
                # Pre-spacing so multi-column pad glyphs and the right side line up.
                while row.col + pad * pw + rwid < cols and row.wlen + pad * pl + rlen < row.budget:
                    row.put(" ", 1, 1)
            if pad > 0:
                row.put(node.fill * pad, pad * pl, pad * pw)
        elif soft:
            avail_cols = max(0, cols - arrow)
            # Right side at most as wide as the display, then cut the left to fit.
            rchars, rlen, rwid = wstr_trunc(right, row.budget - arrow, avail_cols)
            right = right[:rchars]
            left = row.text()
            lchars, lbytes, lcols = wstr_trunc(left, max(0, row.budget - arrow - rlen), avail_cols - rwid)
            row.parts = [left[:lchars]]
            row.wlen = arrow + lbytes
            row.col = arrow + lcols
            # Wide characters cut in the middle leave a gap; fill it with spaces.
            while lcols + rwid < avail_cols and row.wlen + rlen < row.budget:
                row.put(" ", 1, 1)
                lcols += 1

        if rlen > row.room():
            right, rwid = truncate_columns(right, row.room(), cols - row.col)
            rlen = byte_len(right)
        row.put(right, rlen, rwid)


_DEFAULT: Optional[FormatInterpreter] = None


def _default_interpreter() -> FormatInterpreter:
    global _DEFAULT
    if _DEFAULT is None:
        _DEFAULT = FormatInterpreter(options=RenderOptions.from_env())
    return _DEFAULT


def expando_format(
    template: Optional[str],
    callback: FieldCallback,
    *,
    col: int = 0,
    cols: Optional[int] = None,
    buflen: Optional[int] = None,
    flags: FormatFlag = FormatFlag.NONE,
) -> str:
    """Expand *template* with a shared interpreter configured from the environment."""
    return _default_interpreter().render(
        template, callback, col=col, cols=cols, buflen=buflen, flags=flags,
    )
