"""
Fault tests (options, replacement, triggering and rendering).

Conventions
- Test method names follow CamelCase per project convention.
- Shell rendering is captured by swapping the module console for a recording one.
"""

from __future__ import annotations

import io
import unittest
from unittest import TestCase, mock

from rich.console import Console

from commodore import faults
from commodore.faults import (
    EmptyPrefixWarning,
    FaultCode,
    InvalidParameterFormatError,
    ParameterParseError,
    UsageSyntaxError,
    getdoc,
    trigger,
)


class TestFaults(TestCase):
    """Fault construction and triggering."""

    def testDefaultsAndOptions(self):
        fault = ParameterParseError("bad", parameter_name="n", parameter_value="x")
        self.assertEqual(str(fault), "bad")
        self.assertEqual(fault.code, FaultCode.WRONG_ARGUMENTS)
        self.assertEqual((fault.parameter_name, fault.parameter_value), ("n", "x"))
        with self.assertRaises(TypeError):
            fault.options["code"] = 1

    def testCodeOverride(self):
        self.assertEqual(ParameterParseError("x", code=FaultCode.INVALID_VALUE).code, FaultCode.INVALID_VALUE)

    def testReplaceKeepsTypeAndMergesOptions(self):
        fault = InvalidParameterFormatError("bad", hint="use digits")
        replaced = fault.__replace__(parameter_name="n")
        self.assertIsInstance(replaced, InvalidParameterFormatError)
        self.assertEqual(replaced.parameter_name, "n")
        self.assertEqual(replaced.options["hint"], "use digits")
        self.assertIsNone(fault.parameter_name)

    def testMessageMustBeString(self):
        with self.assertRaises(TypeError):
            ParameterParseError(1)

    def testTriggerRaises(self):
        with self.assertRaises(UsageSyntaxError) as caught:
            trigger(UsageSyntaxError("broken"), position=3)
        self.assertEqual(caught.exception.position, 3)

    def testTriggerWarns(self):
        with self.assertWarns(EmptyPrefixWarning):
            trigger(EmptyPrefixWarning("empty"))

    def testTriggerRequiresFault(self):
        with self.assertRaises(TypeError):
            trigger(ValueError("x"))

    def testShellRendering(self):
        buffer = io.StringIO()
        with mock.patch.object(faults, "console", Console(file=buffer, width=100, color_system=None)):
            trigger(UsageSyntaxError("Unexpected 'x'", hint="remove it"), shell=True, colorful=False)
            trigger(EmptyPrefixWarning("empty"), shell=True, fancy=True)
        output = buffer.getvalue()
        self.assertIn(str(FaultCode.UNEXPECTED_TOKEN.value), output)
        self.assertIn("Invalid Usage", output)
        self.assertIn("Unexpected 'x'", output)
        self.assertIn("remove it", output)
        self.assertIn("Empty Prefix", output)

    def testGetdoc(self):
        self.assertIsNone(getdoc(FaultCode.EMPTY_PREFIX))
        with self.assertRaises(TypeError):
            getdoc(22101)

    def testNormalize(self):
        self.assertEqual(FaultCode.DUPLICATE_ALIAS.normalize(), "21304")


if __name__ == "__main__":
    unittest.main()
