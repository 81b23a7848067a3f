"""
Utility tests (sentinel, coalesce, rename, pluralize, mglob).

Conventions
- Test method names follow CamelCase per project convention.
"""

from __future__ import annotations

import unittest
from unittest import TestCase

from commodore.utils import Unset, UnsetType, coalesce, mglob, pluralize, rename


class TestUnset(TestCase):
    """The Unset sentinel and coalesce()."""

    def testSingletonAndFalsey(self):
        self.assertIs(UnsetType(), Unset)
        self.assertFalse(Unset)
        self.assertEqual(repr(Unset), "Unset")

    def testSealed(self):
        with self.assertRaises(TypeError):
            class Other(UnsetType):
                pass

    def testCoalesce(self):
        self.assertEqual(coalesce(Unset, "!"), "!")
        self.assertIsNone(coalesce(None, "!"))
        self.assertEqual(coalesce("", "!"), "")


class TestHelpers(TestCase):
    """rename(), pluralize() and mglob()."""

    def testRename(self):
        def function():
            pass

        self.assertEqual(rename(function, "other").__name__, "other")
        self.assertEqual(rename("third")(function).__qualname__, "third")
        with self.assertRaises(TypeError):
            rename()

    def testPluralize(self):
        self.assertEqual(pluralize("command", 1), "1 command")
        self.assertEqual(pluralize("command", 0), "0 commands")
        self.assertEqual(pluralize("alias", 2), "2 aliases")
        self.assertEqual(pluralize("entry", 3), "3 entries")

    def testMglob(self):
        self.assertEqual(mglob("commodore.grammar"), ["commodore.grammar"])
        self.assertIn("commodore.grammar", mglob("commodore.gram*"))
        self.assertEqual(mglob("missing_package_xyz.*"), [])
        with self.assertRaises(ValueError):
            mglob("*.x")
        with self.assertRaises(ValueError):
            mglob("  ")


if __name__ == "__main__":
    unittest.main()
