"""
Tests for the Unset sentinel and the small helpers built around it.

This module verifies:
- Singleton identity, falsy semantics and representation of Unset.
- coalesce() replacing only Unset.
- rename() in direct and decorator forms.
- mirror() exposing copies of container fields.
"""
import unittest
from unittest import TestCase

from flagprompt.utils import *


class TestUnset(TestCase):

    def testSingleton(self):
        self.assertIs(UnsetType(), Unset)

    def testFalsyAndRepr(self):
        self.assertFalse(Unset)
        self.assertEqual(repr(Unset), "Unset")

    def testUnionInIsinstance(self):
        self.assertTrue(isinstance(Unset, str | Unset))
        self.assertTrue(isinstance("x", str | Unset))
        self.assertFalse(isinstance(3, str | Unset))

    def testFinal(self):
        with self.assertRaises(TypeError):
            class Subclass(UnsetType):
                pass


class TestHelpers(TestCase):

    def testCoalesce(self):
        self.assertEqual(coalesce(Unset, "fallback"), "fallback")
        self.assertIsNone(coalesce(Unset))
        self.assertEqual(coalesce(0, 1), 0)
        self.assertIsNone(coalesce(None, "fallback"))

    def testRenameDirect(self):
        def hook():
            pass

        self.assertIs(rename(hook, "resolver"), hook)
        self.assertEqual(hook.__name__, "resolver")
        self.assertEqual(hook.__qualname__, "resolver")

    def testRenameDecorator(self):
        @rename("stage")
        def hook():
            pass

        self.assertEqual(hook.__name__, "stage")

    def testRenameArity(self):
        with self.assertRaises(TypeError):
            rename()

    def testMirrorCopiesContainers(self):
        class Holder:
            items = mirror("items")

            def __init__(self):
                self._items = ["a"]

        holder = Holder()
        holder.items.append("b")
        self.assertEqual(holder.items, ["a"])
        with self.assertRaises(AttributeError):
            holder.items = []


if __name__ == "__main__":
    unittest.main()
