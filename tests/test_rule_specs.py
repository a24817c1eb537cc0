#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""'/pattern/template/flags' rule spec parsing."""
from __future__ import annotations

import re
import sys
import unittest
from pathlib import Path
from unittest import mock

SRC = Path(__file__).resolve().parents[1] / "src"
if str(SRC) not in sys.path:
    sys.path.insert(0, str(SRC))

from expando.processing import regex_rules  # noqa: E402
from expando.processing.rule_specs import RuleSpecParser, split_delimited  # noqa: E402


class RuleSpecParserTests(unittest.TestCase):
    def setUp(self) -> None:
        self.parser = RuleSpecParser()

    def test_pattern_template_and_flags(self) -> None:
        self.assertEqual(self.parser.parse("/foo/bar/i"), ("foo", "bar", re.IGNORECASE))

    def test_pattern_only(self) -> None:
        self.assertEqual(self.parser.parse("/foo/"), ("foo", "", 0))

    def test_escaped_delimiter(self) -> None:
        self.assertEqual(self.parser.parse(r"/a\/b/x/"), ("a/b", "x", 0))

    def test_regex_escapes_survive(self) -> None:
        self.assertEqual(self.parser.parse(r"/a\d+/x/"), (r"a\d+", "x", 0))

    def test_quoted_spec(self) -> None:
        self.assertEqual(self.parser.parse("'/a b/c/'"), ("a b", "c", 0))

    def test_invalid_specs(self) -> None:
        with self.assertLogs("expando.processing.rules", level="WARNING"):
            self.assertIsNone(self.parser.parse("foo"))
        with self.assertLogs("expando.processing.rules", level="WARNING"):
            self.assertIsNone(self.parser.parse("/a/b/c/d"))

    def test_bad_pattern_is_rejected_when_the_list_is_built(self) -> None:
        self.assertEqual(self.parser.parse("/(/x/"), ("(", "x", 0))
        with mock.patch.object(regex_rules, "compile_regex", wraps=regex_rules.compile_regex) as compile_:
            with self.assertLogs("expando.processing.rules", level="WARNING"):
                rules = self.parser.build_list(["/(/x/", "/ok/y/"])
        self.assertEqual([r.pattern for r in rules], ["ok"])
        self.assertEqual([c.args[0] for c in compile_.call_args_list], ["(", "ok"])

    def test_custom_delimiter(self) -> None:
        parser = RuleSpecParser(regex_delim="|")
        self.assertEqual(parser.parse("|a/b|c|"), ("a/b", "c", 0))
        with self.assertRaises(ValueError):
            RuleSpecParser(regex_delim="//")

    def test_build_list_skips_invalid(self) -> None:
        with self.assertLogs("expando.processing.rules", level="WARNING"):
            rules = self.parser.build_list(["/a/b/", "bad", "/c/d/i"])
        self.assertEqual([r.pattern for r in rules], ["a", "c"])
        self.assertEqual(rules[1].regex.flags, re.IGNORECASE)


class SplitDelimitedTests(unittest.TestCase):
    def test_plain_split(self) -> None:
        self.assertEqual(split_delimited("a/b/", "/"), ["a", "b", ""])

    def test_trailing_backslash_is_kept(self) -> None:
        self.assertEqual(split_delimited("a\\", "/"), ["a\\"])


if __name__ == "__main__":
    unittest.main()
