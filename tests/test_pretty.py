#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""Size formatting, file-name quoting, %s command templates and pipe readers."""
from __future__ import annotations

import sys
import tempfile
import unittest
from pathlib import Path

SRC = Path(__file__).resolve().parents[1] / "src"
if str(SRC) not in sys.path:
    sys.path.insert(0, str(SRC))

from expando.core.models import CommandResult  # noqa: E402
from expando.utils.pretty import (  # noqa: E402
    expand_file_fmt,
    expand_fmt,
    open_read,
    pretty_size,
    quote_filename,
)


class _StaticRunner:
    def __init__(self, result) -> None:
        self.result = result
        self.commands = []

    def run(self, command: str, limit: int):
        self.commands.append((command, limit))
        return self.result


class PrettySizeTests(unittest.TestCase):
    def test_ranges(self) -> None:
        self.assertEqual(pretty_size(0), "0K")
        self.assertEqual(pretty_size(100), "0.1K")
        self.assertEqual(pretty_size(1024), "1.0K")
        self.assertEqual(pretty_size(10189), "10K")
        self.assertEqual(pretty_size(1023949), "1.0M")
        self.assertEqual(pretty_size(20 * 1048576), "20M")


class QuotingTests(unittest.TestCase):
    def test_quote_filename(self) -> None:
        self.assertEqual(quote_filename("plain"), "'plain'")
        self.assertEqual(quote_filename("a'b"), "'a'\\''b'")
        self.assertEqual(quote_filename("a`b"), "'a'\\`'b'")


class ExpandFmtTests(unittest.TestCase):
    def test_placeholder(self) -> None:
        self.assertEqual(expand_fmt("cat %s | less", "file"), "cat file | less")

    def test_missing_placeholder_appends(self) -> None:
        self.assertEqual(expand_fmt("lpr", "x"), "lpr x")

    def test_literal_percent(self) -> None:
        self.assertEqual(expand_fmt("%%s %s", "x"), "%s x")

    def test_destlen(self) -> None:
        self.assertEqual(expand_fmt("cat %s", "file", 6), "cat f")

    def test_file_variant_quotes(self) -> None:
        self.assertEqual(expand_file_fmt("cat %s", "my file"), "cat 'my file'")


class OpenReadTests(unittest.TestCase):
    def test_regular_file(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            path = Path(tmp) / "data.txt"
            path.write_bytes(b"payload")
            with open_read(str(path)) as fh:
                self.assertEqual(fh.read(), b"payload")

    def test_directory_is_rejected(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            with self.assertRaises(IsADirectoryError):
                open_read(tmp)

    def test_pipe_reads_command_output(self) -> None:
        runner = _StaticRunner(CommandResult(0, b"hi\n"))
        with open_read("echo hi|", runner=runner) as fh:
            self.assertEqual(fh.read(), b"hi\n")
        self.assertEqual(runner.commands, [("echo hi", -1)])

    def test_pipe_failure_reads_nothing(self) -> None:
        with self.assertLogs("expando.utils.pretty", level="WARNING"):
            fh = open_read("boom|", runner=_StaticRunner(None))
        self.assertEqual(fh.read(), b"")


if __name__ == "__main__":
    unittest.main()
