"""
Converter registry tests.

Scope
- Validate built-in converters and their format faults.
- Validate user override of built-ins, duplicates and ambiguity.
- Validate message-type scoping and eager usage checks.

Conventions
- Test method names follow CamelCase per project convention.
"""

from __future__ import annotations

import decimal
import unittest
from unittest import TestCase

from commodore.converters import (
    ConverterRegistry,
    convert_decimal,
    convert_number,
    convert_string,
    split_type,
)
from commodore.faults import (
    AmbiguousConverterError,
    DuplicateConverterError,
    InvalidParameterFormatError,
    MissingConverterError,
)
from commodore.grammar import parse


class ChatMessage:
    pass


class ForumMessage(ChatMessage):
    pass


class TestBuiltinConverters(TestCase):
    """Built-in number, decimal and string conversion."""

    def testNumber(self):
        self.assertEqual(convert_number("42", "number", None), 42)
        self.assertEqual(convert_number("-7", "integer", None), -7)
        self.assertEqual(convert_number("+3", "integer", None), 3)

    def testNumberRejects(self):
        for value in ("4.2", "abc", "1_000", "٣"):
            with self.subTest(value=value), self.assertRaises(InvalidParameterFormatError) as caught:
                convert_number(value, "number", None)
            self.assertEqual(str(caught.exception), f"'{value}' is not a valid number")

    def testDecimal(self):
        self.assertEqual(convert_decimal("2.5", "decimal", None), decimal.Decimal("2.5"))
        self.assertEqual(convert_decimal(".5", "decimal", None), decimal.Decimal("0.5"))
        self.assertEqual(convert_decimal("1e3", "decimal", None), decimal.Decimal("1000"))

    def testDecimalRejects(self):
        for value in ("NaN", "Infinity", "1.2.3", "x"):
            with self.subTest(value=value), self.assertRaises(InvalidParameterFormatError) as caught:
                convert_decimal(value, "decimal", None)
            self.assertEqual(str(caught.exception), f"'{value}' is not a valid decimal")

    def testString(self):
        self.assertEqual(convert_string("as is", "string", None), "as is")

    def testSplitType(self):
        self.assertEqual(split_type("amount:integer"), ("amount", "integer"))
        self.assertEqual(split_type("a:b:decimal"), ("a:b", "decimal"))
        self.assertEqual(split_type("user"), ("user", "string"))


class TestConverterRegistry(TestCase):
    """Resolution rules of the registry."""

    def testBuiltinAliases(self):
        registry = ConverterRegistry()
        self.assertIs(registry.resolve("number", object()), convert_number)
        self.assertIs(registry.resolve("integer", object()), convert_number)
        self.assertIs(registry.resolve("decimal", object()), convert_decimal)
        self.assertIs(registry.resolve("text", object()), convert_string)

    def testWithoutBuiltins(self):
        with self.assertRaises(MissingConverterError):
            ConverterRegistry(builtins=False).resolve("number", object())

    def testUserConverterOverridesBuiltin(self):
        registry = ConverterRegistry()

        @registry.converter("number")
        def lenient(value, type, context):
            return int(float(value))

        self.assertIs(registry.resolve("number", object()), lenient)
        self.assertIs(registry.resolve("integer", object()), convert_number)

    def testDuplicateUserConverterIsRejected(self):
        registry = ConverterRegistry()
        registry.register(convert_string, "color")
        with self.assertRaises(DuplicateConverterError):
            registry.register(convert_string, "color")

    def testMessageTypeScoping(self):
        registry = ConverterRegistry()
        chat = registry.register(lambda value, type, context: "chat", "user", message_type=ChatMessage)
        self.assertIs(registry.resolve("user", ChatMessage()), chat)
        self.assertIs(registry.resolve("user", ForumMessage()), chat)
        with self.assertRaises(MissingConverterError):
            registry.resolve("user", object())

    def testOverlappingMessageTypesAreAmbiguous(self):
        registry = ConverterRegistry()
        registry.register(lambda value, type, context: "chat", "user", message_type=ChatMessage)
        forum = registry.register(lambda value, type, context: "forum", "user", message_type=ForumMessage)
        self.assertIsNotNone(registry.resolve("user", ChatMessage()))
        with self.assertRaises(AmbiguousConverterError):
            registry.resolve("user", ForumMessage())
        self.assertIsNotNone(forum)

    def testResolutionIsRefreshedAfterRegistration(self):
        registry = ConverterRegistry()
        self.assertIs(registry.resolve("number", object()), convert_number)
        custom = registry.register(lambda value, type, context: 0, "number")
        self.assertIs(registry.resolve("number", object()), custom)

    def testRegistrationDuringResolutionIsNotLost(self):
        registry = ConverterRegistry()
        candidates = registry._candidates
        custom = lambda value, type, context: 0

        def register_meanwhile(*arguments):
            result = candidates(*arguments)
            del registry._candidates
            registry.register(custom, "number")
            return result

        registry._candidates = register_meanwhile
        self.assertIs(registry.resolve("number", object()), convert_number)
        self.assertIs(registry.resolve("number", object()), custom)

    def testCheckFindsMissingTypes(self):
        registry = ConverterRegistry()
        registry.check(parse("<a:integer> [<b>] ('c' | <d:decimal>)"))
        with self.assertRaises(MissingConverterError):
            registry.check(parse("<a> <b:color>"))

    def testCheckHonorsMessageType(self):
        registry = ConverterRegistry()
        registry.register(convert_string, "user", message_type=ChatMessage)
        registry.check(parse("<u:user>"), ChatMessage)
        with self.assertRaises(MissingConverterError):
            registry.check(parse("<u:user>"))

    def testRegisterValidatesArguments(self):
        registry = ConverterRegistry()
        with self.assertRaises(TypeError):
            registry.register("not callable", "x")
        with self.assertRaises(TypeError):
            registry.register(convert_string)
        with self.assertRaises(TypeError):
            registry.register(convert_string, "x", message_type="ChatMessage")


if __name__ == "__main__":
    unittest.main()
