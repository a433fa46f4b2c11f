"""
Tests for the shared helpers (Unset, coalesce, rename, mirror).

Conventions
- Test method names follow CamelCase per project convention.
"""
import unittest
from types import MappingProxyType
from unittest import TestCase

from sub.utils import *


class TestUnset(TestCase):
    """The Unset marker."""

    def testSingleton(self):
        self.assertIs(UnsetType(), Unset)

    def testFalsyAndPrintable(self):
        self.assertFalse(Unset)
        self.assertEqual(repr(Unset), "Unset")
        self.assertIsNot(Unset, None)

    def testUnionsForIsinstance(self):
        self.assertTrue(isinstance(Unset, str | Unset))
        self.assertTrue(isinstance("x", Unset | str))
        self.assertFalse(isinstance(None, str | Unset))

    def testCannotBeSubclassed(self):
        with self.assertRaises(TypeError):
            type("Other", (UnsetType,), {})

    def testCoalesce(self):
        self.assertEqual(coalesce(Unset, "auto"), "auto")
        self.assertIsNone(coalesce(Unset))
        self.assertEqual(coalesce("", "auto"), "")
        self.assertIsNone(coalesce(None, "auto"))


class TestMirror(TestCase):
    """Read-only, frozen properties."""

    class Node:
        names = mirror("names")
        table = mirror("table")
        path = mirror("path")

        def __init__(self):
            self._names = ["admin", "restart"]
            self._table = {"a": 1}
            self._path = "libexec/admin"

    def testContainersAreFrozen(self):
        node = self.Node()
        self.assertEqual(node.names, ("admin", "restart"))
        self.assertIsInstance(node.table, MappingProxyType)
        self.assertEqual(node.path, "libexec/admin")

    def testReadOnly(self):
        with self.assertRaises(AttributeError):
            self.Node().names = ()

    def testPropertyName(self):
        self.assertEqual(self.Node.names.fget.__name__, "names")


class TestRename(TestCase):
    """Stable names for generated functions."""

    def testDecorator(self):
        @rename("__repr__")
        def generated(self):
            pass

        self.assertEqual(generated.__name__, "__repr__")
        self.assertEqual(generated.__qualname__, "__repr__")

    def testArgumentChecks(self):
        with self.assertRaises(TypeError):
            rename(1)
        with self.assertRaises(TypeError):
            rename("x", "y")
        with self.assertRaises(TypeError):
            rename()


if __name__ == "__main__":
    unittest.main()
