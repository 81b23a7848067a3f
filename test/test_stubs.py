"""
Type stub tests.

Scope
- Validate that every name a module exports is declared in its .pyi stub, so
  type checkers reading the stubs see the whole public API.

Conventions
- Test method names follow CamelCase per project convention.
"""

from __future__ import annotations

import ast
import pathlib
import unittest
from unittest import TestCase

import commodore
from commodore import commands, parameters, pipeline


def declared(module):
    tree = ast.parse(pathlib.Path(module.__file__).with_suffix(".pyi").read_text(encoding="utf-8"))
    names = set()
    for node in tree.body:
        match node:
            case ast.ClassDef(name=name) | ast.FunctionDef(name=name):
                names.add(name)
            case ast.AnnAssign(target=ast.Name(id=name)) | ast.Assign(targets=[ast.Name(id=name)]):
                names.add(name)
    return names


class TestStubs(TestCase):
    """Stubs shipped beside the modules."""

    def testStubsDeclareEveryExport(self):
        for module in (commands, parameters, pipeline):
            with self.subTest(module=module.__name__):
                self.assertLessEqual(set(module.__all__), declared(module))

    def testPackageStubDeclaresMetadata(self):
        names = declared(commodore)
        for name in ("__title__", "__author__", "__license__", "__version__", "version_info", "VersionInfo"):
            self.assertIn(name, names)


if __name__ == "__main__":
    unittest.main()
