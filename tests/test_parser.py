#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Template scanner suite.

The scanner is checked on its own so that the interpreter tests can focus on
layout and budgets.
"""
from __future__ import annotations

import sys
import unittest
from pathlib import Path

SRC = Path(__file__).resolve().parents[1] / "src"
if str(SRC) not in sys.path:
    sys.path.insert(0, str(SRC))

from expando.rendering.parser import (  # noqa: E402
    Conditional,
    Escape,
    Expando,
    Literal,
    Malformed,
    Pad,
    Percent,
    convert_legacy,
    next_node,
    parse_template,
)


class ScannerTests(unittest.TestCase):
    def test_literals(self) -> None:
        self.assertEqual(parse_template("ab"), [Literal("a"), Literal("b")])

    def test_percent(self) -> None:
        self.assertEqual(parse_template("%%"), [Percent()])

    def test_escapes(self) -> None:
        self.assertEqual(parse_template("\\n\\t\\q"), [Escape("\n"), Escape("\t"), Escape("q")])

    def test_expando_with_prefix(self) -> None:
        self.assertEqual(parse_template("%-10.5s"), [Expando("s", "-10.5")])
        self.assertEqual(parse_template("%=8x"), [Expando("x", "=8")])

    def test_modifiers(self) -> None:
        self.assertEqual(parse_template("%_:x"), [Expando("x", "", True, True)])
        self.assertEqual(parse_template("%:_x"), [Expando("x", "", True, True)])

    def test_padding_stops_the_scan(self) -> None:
        self.assertEqual(parse_template("%>-rest%a"), [Pad(">", "-", "rest%a")])
        self.assertEqual(parse_template("ab%|"), [Literal("a"), Literal("b"), Pad("|", " ", "")])


class ConditionalTests(unittest.TestCase):
    def test_if_and_else(self) -> None:
        self.assertEqual(parse_template("%<a?yes&no>"), [Conditional("a", "", "yes", "no")])

    def test_if_only(self) -> None:
        self.assertEqual(parse_template("%<a?yes>"), [Conditional("a", "", "yes", "")])

    def test_prefix_and_modifiers(self) -> None:
        node, _, _ = next_node("%<_a5?x&y>", 0)
        self.assertEqual(node, Conditional("a", "5", "x", "y", True, False))

    def test_nested(self) -> None:
        nodes = parse_template("%<a?x%<b?y&z>&w>")
        self.assertEqual(nodes, [Conditional("a", "", "x%<b?y&z>", "w")])

    def test_padding_inside_body_is_not_a_terminator(self) -> None:
        nodes = parse_template("%<a?pad%>-&none>")
        self.assertEqual(nodes, [Conditional("a", "", "pad%>-", "none")])

    def test_escaped_terminator_is_kept(self) -> None:
        nodes = parse_template("%<a?x\\>y>")
        self.assertEqual(nodes, [Conditional("a", "", "x\\>y", "")])

    def test_legacy_form(self) -> None:
        nodes = parse_template("%?a?yes&no?tail")
        self.assertEqual(nodes[0], Conditional("a", "", "yes", "no"))
        self.assertEqual(nodes[1:], [Literal(c) for c in "tail"])

    def test_legacy_conversion_keeps_length(self) -> None:
        src = "%?a?yes&no?"
        out = convert_legacy(src, 1)
        self.assertEqual(out, "%<a?yes&no>")
        self.assertEqual(src, "%?a?yes&no?")

    def test_next_node_continues_after_conditional(self) -> None:
        node, pos, src = next_node("%<a?b>!", 0)
        self.assertIsInstance(node, Conditional)
        self.assertEqual(src[pos:], "!")


class MalformedTests(unittest.TestCase):
    def test_unterminated_conditional(self) -> None:
        self.assertIsInstance(parse_template("%<a?yes")[-1], Malformed)

    def test_conditional_without_question_mark(self) -> None:
        self.assertIsInstance(parse_template("%<abc")[-1], Malformed)

    def test_dangling_percent(self) -> None:
        self.assertEqual(parse_template("ab%")[-1], Malformed("dangling %"))
        self.assertIsInstance(parse_template("%-")[-1], Malformed)

    def test_dangling_backslash(self) -> None:
        self.assertIsInstance(parse_template("ab\\")[-1], Malformed)


if __name__ == "__main__":
    unittest.main()
