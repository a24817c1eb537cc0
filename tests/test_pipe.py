#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Pipe-mode templates: command building, quoting, output handling and
recycling of output that ends in '%'.

A scripted runner stands in for the shell; one test at the end spawns a
real /bin/sh to make sure the subprocess runner is wired in.
"""
from __future__ import annotations

import shlex
import sys
import unittest
from pathlib import Path
from typing import List, Optional, Sequence

SRC = Path(__file__).resolve().parents[1] / "src"
if str(SRC) not in sys.path:
    sys.path.insert(0, str(SRC))

from expando.core.models import CommandResult, FormatFlag, RenderOptions  # noqa: E402
from expando.rendering.fields import MappingCallback  # noqa: E402
from expando.rendering.interpreter import FormatInterpreter  # noqa: E402
from expando.rendering.pipe import is_pipe_template, shell_quote, split_words  # noqa: E402
from expando.runtime.commands import SubprocessCommandRunner  # noqa: E402


class EchoRunner:
    """Understands ``echo`` only; records every command line it receives."""

    def __init__(self) -> None:
        self.commands: List[str] = []
        self.limits: List[int] = []

    def run(self, command: str, limit: int) -> Optional[CommandResult]:
        self.commands.append(command)
        self.limits.append(limit)
        words = shlex.split(command)
        if not words or words[0] != "echo":
            return CommandResult(127, b"")
        out = (" ".join(words[1:]) + "\n").encode("utf-8")
        return CommandResult(0, out if limit < 0 else out[:limit])


class ScriptedRunner:
    """Returns the queued results in order, repeating the last one."""

    def __init__(self, results: Sequence[Optional[CommandResult]]) -> None:
        self._results = list(results)
        self.calls = 0

    def run(self, command: str, limit: int) -> Optional[CommandResult]:
        self.calls += 1
        idx = min(self.calls, len(self._results)) - 1
        return self._results[idx]


CB = MappingCallback({"a": "alpha", "q": "it's"})


class PipeDetectionTests(unittest.TestCase):
    def test_is_pipe_template(self) -> None:
        self.assertTrue(is_pipe_template("ab|"))
        self.assertTrue(is_pipe_template("a\\\\|"))
        self.assertFalse(is_pipe_template("a\\|"))
        self.assertFalse(is_pipe_template("|"))
        self.assertFalse(is_pipe_template("ab"))
        self.assertFalse(is_pipe_template(None))

    def test_shell_quote(self) -> None:
        self.assertEqual(shell_quote("plain"), "'plain'")
        self.assertEqual(shell_quote("it's"), "'it'\"'\"'s'")

    def test_escaped_pipe_is_literal(self) -> None:
        runner = EchoRunner()
        fmt = FormatInterpreter(runner=runner)
        self.assertEqual(fmt.render("a\\|", CB), "a|")
        self.assertEqual(runner.commands, [])

    def test_nofilter_disables_pipe(self) -> None:
        runner = EchoRunner()
        fmt = FormatInterpreter(runner=runner)
        self.assertEqual(fmt.render("echo hi|", CB, flags=FormatFlag.NOFILTER), "echo hi|")
        self.assertEqual(runner.commands, [])


class PipeCommandTests(unittest.TestCase):
    def setUp(self) -> None:
        self.runner = EchoRunner()
        self.fmt = FormatInterpreter(runner=self.runner)

    def test_output_replaces_template(self) -> None:
        self.assertEqual(self.fmt.render("echo hello|", CB), "hello")
        self.assertEqual(self.runner.commands, ["'echo' 'hello'"])

    def test_words_are_expanded_before_quoting(self) -> None:
        self.assertEqual(self.fmt.render("echo %a|", CB), "alpha")
        self.assertEqual(self.runner.commands, ["'echo' 'alpha'"])

    def test_embedded_quote_is_escaped(self) -> None:
        self.assertEqual(self.fmt.render("echo %q|", CB), "it's")
        self.assertEqual(self.runner.commands, ["'echo' 'it'\"'\"'s'"])

    def test_quoted_word_stays_one_argument(self) -> None:
        self.assertEqual(self.fmt.render("echo 'two  words'|", CB), "two  words")
        self.assertEqual(self.runner.commands, ["'echo' 'two  words'"])

    def test_backslash_escapes_are_decoded_inside_words(self) -> None:
        self.fmt.render("printf a\\tb|", CB)
        self.assertEqual(self.runner.commands, ["'printf' 'a\tb'"])

    def test_split_words_keeps_backslashes(self) -> None:
        self.assertEqual(split_words("printf 'x y' a\\nb"), ["printf", "x y", "a\\nb"])

    def test_limit_is_buflen_minus_one(self) -> None:
        self.assertEqual(self.fmt.render("echo abcdefgh|", CB, buflen=5), "abcd")
        self.assertEqual(self.runner.limits, [4])

    def test_failing_command_renders_empty(self) -> None:
        self.assertEqual(self.fmt.render("false|", CB), "")


class PipeOutputTests(unittest.TestCase):
    def _render(self, *results: Optional[CommandResult], **opts) -> str:
        fmt = FormatInterpreter(options=RenderOptions(**opts), runner=ScriptedRunner(results))
        return fmt.render("gen|", CB)

    def test_spawn_failure_renders_empty(self) -> None:
        self.assertEqual(self._render(None), "")

    def test_trailing_newlines_are_stripped(self) -> None:
        self.assertEqual(self._render(CommandResult(0, b"hi\r\n\n")), "hi")

    def test_invalid_utf8_is_replaced(self) -> None:
        self.assertEqual(self._render(CommandResult(0, b"a\xffb")), "a\ufffdb")

    def test_output_ending_in_percent_is_recycled(self) -> None:
        self.assertEqual(self._render(CommandResult(0, b"[%a]%\n")), "[alpha]")

    def test_double_percent_keeps_literal(self) -> None:
        self.assertEqual(self._render(CommandResult(0, b"50%%")), "50%")

    def test_recycling_depth_is_bounded(self) -> None:
        runner = ScriptedRunner([CommandResult(0, b"loop|%")])
        fmt = FormatInterpreter(options=RenderOptions(max_recycle_depth=3), runner=runner)
        with self.assertLogs("expando.format.pipe", level="WARNING"):
            self.assertEqual(fmt.render("gen|", CB), "loop|")
        self.assertEqual(runner.calls, 4)


class SubprocessIntegrationTests(unittest.TestCase):
    def test_real_shell(self) -> None:
        fmt = FormatInterpreter(runner=SubprocessCommandRunner(timeout=10))
        self.assertEqual(fmt.render("echo %a|", CB), "alpha")

    def test_runner_reports_exit_code(self) -> None:
        runner = SubprocessCommandRunner(timeout=10)
        res = runner.run("echo hi; exit 3", 100)
        self.assertEqual(res.returncode, 3)
        self.assertEqual(res.stdout, b"hi\n")

    def test_runner_truncates_to_limit(self) -> None:
        res = SubprocessCommandRunner(timeout=10).run("echo abcdef", 3)
        self.assertEqual(res.stdout, b"abc")

    def test_runner_timeout(self) -> None:
        runner = SubprocessCommandRunner(timeout=0.2)
        with self.assertLogs("expando.commands", level="WARNING"):
            self.assertIsNone(runner.run("sleep 5", 10))

    def test_runner_extra_env(self) -> None:
        runner = SubprocessCommandRunner(timeout=10, env={"EXPANDO_TEST_VALUE": "xyz"})
        self.assertEqual(runner.run('echo "$EXPANDO_TEST_VALUE"', -1).stdout, b"xyz\n")


if __name__ == "__main__":
    unittest.main()
