from __future__ import annotations

"""
pipe – Templates that end in an unescaped ``|`` run as shell commands.

The part before the ``|`` is split into words; every word is expanded on its
own (without pipe detection), single-quoted for the shell and the quoted
words are joined into a command line. The command's stdout, minus trailing
newlines, becomes the rendered result. Output ending in a lone ``%`` is fed
back into the interpreter as a fresh template ("recycling"); ``%%`` at the
end keeps a literal ``%``.
"""

import logging
import shlex
from typing import Callable, List, Optional

from expando.constants import LONG_STRING
from expando.core.buffer import Buffer
from expando.core.interfaces.commands import CommandRunnerProtocol
from expando.core.interfaces.templating import FieldCallback
from expando.core.models import FormatFlag
from expando.logging.helpers import get_logger, trace_io
from expando.rendering.width import truncate_bytes

ExpandFn = Callable[..., str]


def is_pipe_template(src: Optional[str]) -> bool:
    """True when *src* ends in ``|`` preceded by an even number of backslashes."""
    if not src or len(src) < 2 or src[-1] != "|":
        return False
    slashes = len(src) - 1 - len(src[:-1].rstrip("\\"))
    return slashes % 2 == 0


def shell_quote(word: str) -> str:
    """Single-quote *word*; embedded quotes become ``'"'"'``."""
    return "'" + word.replace("'", "'\"'\"'") + "'"


def split_words(command: str) -> List[str]:
    """Shell-like word split, falling back to whitespace on unbalanced quotes.

    Quotes group words; backslashes are left in place so that escapes such
    as ``\\t`` are decoded when each word is expanded.
    """
    lex = shlex.shlex(command, posix=True)
    lex.whitespace_split = True
    lex.commenters = ""
    lex.escape = ""
    try:
        return list(lex)
    except ValueError:
        return command.split()


class PipeRenderer:
    def __init__(
        self,
        *,
        expand: ExpandFn,
        runner: CommandRunnerProtocol,
        max_recycle_depth: int,
        logger: Optional[logging.Logger] = None,
    ) -> None:
        self._expand = expand
        self._runner = runner
        self._max_depth = max_recycle_depth
        self._log = logger or get_logger("format.pipe")

    def build_command(self, template: str, callback: FieldCallback, *, cols: int, depth: int) -> str:
        """Expand and quote every word of the pipe template (without the ``|``)."""
        command = Buffer(logger=self._log)
        words = split_words(template[:-1])
        for idx, word in enumerate(words):
            trace_io(self._log, "fmtpipe word", index=idx, word=word)
            expanded = self._expand(
                word, callback, col=0, cols=cols, buflen=LONG_STRING,
                flags=FormatFlag.NOFILTER, depth=depth,
            )
            if idx:
                command.addch(" ")
            command.addstr(shell_quote(expanded))
        return command.text

    def render(
        self,
        template: str,
        callback: FieldCallback,
        *,
        col: int,
        cols: int,
        buflen: int,
        flags: FormatFlag,
        depth: int,
    ) -> str:
        trace_io(self._log, "fmtpipe", template=template)
        command = self.build_command(template, callback, cols=cols, depth=depth)
        if not command:
            return ""
        trace_io(self._log, "fmtpipe >", command=command)

        result = self._runner.run(command, buflen - 1)
        if result is None:
            return ""
        if result.returncode != 0:
            self._log.debug("format pipe command exited code %d", result.returncode)
            return ""

        text = truncate_bytes(result.stdout.decode("utf-8", "replace"), buflen - 1)
        text = text.rstrip("\r\n")
        trace_io(self._log, "fmtpipe <", output=text)

        if not text.endswith("%"):
            return text
        text = text[:-1]
        if not text or text.endswith("%"):
            return text
        if depth >= self._max_depth:
            self._log.warning("⚠  format pipe recycled %d times; returning output unexpanded", depth)
            return text
        return self._expand(
            text, callback, col=col, cols=cols, buflen=buflen,
            flags=flags & ~FormatFlag.NOFILTER, depth=depth + 1,
        )
