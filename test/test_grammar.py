"""
Usage grammar tests (tokenizing, tree shapes, syntax faults).

Scope
- Validate the tree produced for placeholders, literals, optionals and alternatives.
- Validate that malformed usages raise UsageSyntaxError with code and position.
- Validate the trailing placeholder placement rules.

Conventions
- Test method names follow CamelCase per project convention.
"""

from __future__ import annotations

import unittest
from unittest import TestCase

from commodore.faults import FaultCode, UsageSyntaxError
from commodore.grammar import parse, tokenize
from commodore.syntax import (
    Alternatives,
    Literal,
    Optional,
    Placeholder,
    Sequence,
    TrailingPlaceholder,
    Usage,
)


class TestTokenize(TestCase):
    """Tokenizer behavior."""

    def testKindsAndPositions(self):
        tokens = tokenize("<a> ['b'] (<c...>|<d>)")
        self.assertEqual(
            [(token.kind, token.value) for token in tokens],
            [
                ("placeholder", "a"), ("[", "["), ("literal", "b"), ("]", "]"),
                ("(", "("), ("trailing", "c"), ("|", "|"), ("placeholder", "d"), (")", ")"),
                ("end", ""),
            ],
        )
        self.assertEqual(tokens[2].position, 5)

    def testPlaceholderNamesAreFreeText(self):
        token, _ = tokenize("<coin type:integer>")
        self.assertEqual(token.value, "coin type:integer")


class TestParse(TestCase):
    """Tree shapes for valid usages."""

    def testSinglePlaceholder(self):
        tree = parse("<name>")
        self.assertIsInstance(tree, Usage)
        self.assertIsInstance(tree.expression, Placeholder)
        self.assertEqual(tree.expression.name, "name")
        self.assertEqual(str(tree), "<name>")

    def testSequence(self):
        tree = parse("'add' <amount:integer> <note...>")
        self.assertIsInstance(tree.expression, Sequence)
        first, second, third = tree.expression.children
        self.assertIsInstance(first, Literal)
        self.assertEqual(first.text, "add")
        self.assertEqual(first.name, "add")
        self.assertEqual(second.name, "amount:integer")
        self.assertIsInstance(third, TrailingPlaceholder)
        self.assertEqual(third.name, "note")

    def testOptionalAndAlternatives(self):
        tree = parse("[<a> <b>] (<c> | 'd' | ['e'])")
        optional, alternatives = tree.expression.children
        self.assertIsInstance(optional, Optional)
        self.assertIsInstance(optional.child, Sequence)
        self.assertIsInstance(alternatives, Alternatives)
        self.assertEqual(len(alternatives.branches), 3)
        self.assertIsInstance(alternatives.branches[2], Optional)

    def testWhitespaceIsInsignificant(self):
        self.assertEqual(repr(parse("  ( <a>|<b> )  ")), repr(parse("(<a> | <b>)")))

    def testTrailingInsideFinalGroupsIsAccepted(self):
        parse("<a> [<rest...>]")
        parse("<a> (<b> | <rest...>)")
        parse("(<a> | <b>) <rest...>")

    def testNodesAreImmutable(self):
        tree = parse("<a>")
        with self.assertRaises(AttributeError):
            tree.expression.name = "b"

    def testDistinctParsesAreDistinctObjects(self):
        self.assertIsNot(parse("<a>"), parse("<a>"))

    def testWalkVisitsAllNodesInOrder(self):
        names = [node.name for node in parse("<a> [<b>] ('c' | <d>)").walk() if hasattr(node, "name")]
        self.assertEqual(names, ["a", "b", "c", "d"])


class TestParseFaults(TestCase):
    """Syntax faults raised for malformed usages."""

    def assertFault(self, usage, code):
        with self.assertRaises(UsageSyntaxError) as context:
            parse(usage)
        self.assertEqual(context.exception.code, code)
        self.assertEqual(context.exception.usage, usage)
        return context.exception

    def testEmptyUsage(self):
        self.assertFault("", FaultCode.EMPTY_USAGE)
        self.assertFault("   ", FaultCode.EMPTY_USAGE)

    def testUnterminatedPlaceholder(self):
        fault = self.assertFault("<a> <b", FaultCode.UNTERMINATED_PLACEHOLDER)
        self.assertEqual(fault.position, 4)
        self.assertEqual(fault.token, "<b")

    def testUnterminatedLiteral(self):
        self.assertFault("'abc", FaultCode.UNTERMINATED_LITERAL)

    def testUnterminatedGroups(self):
        self.assertFault("[<a>", FaultCode.UNTERMINATED_GROUP)
        self.assertFault("(<a> | <b>", FaultCode.UNTERMINATED_GROUP)

    def testSingleBranchAlternatives(self):
        self.assertFault("(<a>)", FaultCode.SINGLE_ALTERNATIVE)

    def testEmptyBranch(self):
        self.assertFault("(<a> | )", FaultCode.UNEXPECTED_TOKEN)
        self.assertFault("[]", FaultCode.UNEXPECTED_TOKEN)

    def testStrayCharacters(self):
        fault = self.assertFault("<a> b", FaultCode.UNEXPECTED_TOKEN)
        self.assertEqual(fault.position, 4)
        self.assertFault("<a> ]", FaultCode.UNEXPECTED_TOKEN)

    def testEmptyNames(self):
        self.assertFault("<>", FaultCode.EMPTY_NAME)
        self.assertFault("<...>", FaultCode.EMPTY_NAME)
        self.assertFault("''", FaultCode.EMPTY_NAME)

    def testTrailingPlaceholderMustBeLast(self):
        self.assertFault("<rest...> <a>", FaultCode.MISPLACED_TRAILING_PLACEHOLDER)
        self.assertFault("[<rest...>] <a>", FaultCode.MISPLACED_TRAILING_PLACEHOLDER)
        self.assertFault("(<rest...> | <b>) <a>", FaultCode.MISPLACED_TRAILING_PLACEHOLDER)

    def testOnlyOneTrailingPlaceholder(self):
        self.assertFault("(<a...> | <b...>)", FaultCode.MISPLACED_TRAILING_PLACEHOLDER)

    def testNonStringUsage(self):
        with self.assertRaises(TypeError):
            parse(None)


if __name__ == "__main__":
    unittest.main()
