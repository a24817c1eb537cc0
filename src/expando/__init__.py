from __future__ import annotations

import logging
from typing import Optional

from expando.constants import LONG_STRING
from expando.core.buffer import Buffer, ResourceExhausted
from expando.core.interfaces.commands import CommandRunnerProtocol
from expando.core.models import (
    CommandResult,
    FieldRequest,
    FieldResult,
    FormatFlag,
    RenderOptions,
    SpamMatch,
)
from expando.logging.helpers import get_logger
from expando.processing.regex_rules import (
    Regex,
    RegexCompileError,
    RegexList,
    ReplaceList,
    ReplaceRule,
    compile_regex,
)
from expando.processing.replace import ReplaceEngine, apply_replace, match_spam
from expando.rendering.fields import MappingCallback, format_field
from expando.rendering.interpreter import FormatInterpreter, expando_format
from expando.rendering.pipe import is_pipe_template, shell_quote
from expando.rendering.width import strwidth, wstr_trunc
from expando.runtime.commands import SubprocessCommandRunner

__version__ = '0.3.1'


def interpreter_factory(
    *,
    options: Optional[RenderOptions] = None,
    runner: Optional[CommandRunnerProtocol] = None,
    logger: Optional[logging.Logger] = None,
) -> FormatInterpreter:
    """Factory helper that returns a configured FormatInterpreter.

    Falls back to environment-derived options and a subprocess runner.
    """
    opts = options or RenderOptions.from_env()
    run = runner or SubprocessCommandRunner(timeout=opts.pipe_timeout)
    return FormatInterpreter(options=opts, runner=run, logger=logger or get_logger('format'))


def replace_engine_factory(
    *, scratch_size: int = LONG_STRING, logger: Optional[logging.Logger] = None
) -> ReplaceEngine:
    """Factory helper that returns a ReplaceEngine."""
    return ReplaceEngine(scratch_size=scratch_size, logger=logger or get_logger('replace'))


__all__ = [
    'Buffer',
    'ResourceExhausted',
    'CommandResult',
    'FieldRequest',
    'FieldResult',
    'FormatFlag',
    'RenderOptions',
    'SpamMatch',
    'Regex',
    'RegexCompileError',
    'RegexList',
    'ReplaceList',
    'ReplaceRule',
    'compile_regex',
    'ReplaceEngine',
    'apply_replace',
    'match_spam',
    'MappingCallback',
    'format_field',
    'FormatInterpreter',
    'expando_format',
    'is_pipe_template',
    'shell_quote',
    'strwidth',
    'wstr_trunc',
    'SubprocessCommandRunner',
    'interpreter_factory',
    'replace_engine_factory',
]
