"""
Tests for the Unset sentinel and the host helpers.

This module verifies:
- Singleton identity, falsy semantics and representation of `Unset`.
- Finality (UnsetType cannot be subclassed).
- coalesce() preserving legitimate falsey values.
- program() and host() reading overrides published in __main__.
"""
import copy
import sys
import unittest
from unittest import TestCase

from pennant.utils import *


class UnsetTest(TestCase):

    def testSingleton(self) -> None:
        self.assertIs(UnsetType(), Unset)
        self.assertIs(copy.copy(Unset), Unset)
        self.assertIs(copy.deepcopy(Unset), Unset)

    def testFalsyAndRepr(self) -> None:
        self.assertFalse(Unset)
        self.assertIsNot(Unset, None)
        self.assertEqual(repr(Unset), "Unset")

    def testFinal(self) -> None:
        with self.assertRaises(TypeError):
            class Subclass(UnsetType):  # NOQA: F-841
                pass

    def testUnion(self) -> None:
        self.assertEqual(str | UnsetType, UnsetType | str)


class CoalesceTest(TestCase):

    def testReplacesUnset(self) -> None:
        self.assertEqual(coalesce(Unset, "fallback"), "fallback")
        self.assertIsNone(coalesce(Unset))

    def testPreservesFalsey(self) -> None:
        for value in (None, 0, "", []):
            with self.subTest(value=value):
                self.assertEqual(coalesce(value, "fallback"), value)


class HostTest(TestCase):

    def tearDown(self) -> None:
        if hasattr(sys.modules["__main__"], "__prog__"):
            delattr(sys.modules["__main__"], "__prog__")

    def testProgramOverride(self) -> None:
        sys.modules["__main__"].__prog__ = "hosted"
        self.assertEqual(program(), "hosted")
        self.assertEqual(host("__prog__"), "hosted")

    def testHostDefault(self) -> None:
        self.assertEqual(host("__missing_override__", {}), {})


if __name__ == "__main__":
    unittest.main()
