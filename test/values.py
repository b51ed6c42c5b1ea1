"""
Value cell tests (scalar replacement, list accumulation, string forms).

Scope
- boolean() spellings.
- ScalarValue: conversion, failed conversion keeps the previous value.
- ListValue: default replacement on first set, CSV splitting, reset/append.

Conventions
- Test method names follow CamelCase per project convention.
"""

from __future__ import annotations

import unittest
from unittest import TestCase

from flagprompt.values import ScalarValue, ListValue, boolean


class TestBoolean(TestCase):

    def testTruthSpellings(self):
        for text in ("1", "t", "T", "TRUE", "true", "True"):
            self.assertIs(boolean(text), True, text)

    def testFalseSpellings(self):
        for text in ("0", "f", "F", "FALSE", "false", "False"):
            self.assertIs(boolean(text), False, text)

    def testOtherTextRejected(self):
        with self.assertRaises(ValueError):
            boolean("yes")


class TestScalarValue(TestCase):

    def testDefaultStringForms(self):
        self.assertEqual(str(ScalarValue()), "")
        self.assertEqual(str(ScalarValue(boolean, False)), "false")
        self.assertEqual(str(ScalarValue(int, 3)), "3")

    def testSetConverts(self):
        value = ScalarValue(int)
        value.set("42")
        self.assertEqual(value.get(), 42)

    def testFailedSetKeepsPreviousValue(self):
        value = ScalarValue(int, 7)
        with self.assertRaises(ValueError):
            value.set("seven")
        self.assertEqual(value.get(), 7)

    def testTypename(self):
        self.assertEqual(ScalarValue().typename, "string")
        self.assertEqual(ScalarValue(boolean).typename, "bool")
        self.assertEqual(ScalarValue(float).typename, "float")

    def testTypeMustBeCallable(self):
        with self.assertRaises(TypeError):
            ScalarValue("int")


class TestListValue(TestCase):

    def testFirstSetReplacesDefaults(self):
        value = ListValue(str, ["default value"])
        value.set("a,b")
        self.assertEqual(value.get(), ["a", "b"])

    def testLaterSetsExtend(self):
        value = ListValue(str, ["default value"])
        value.set("a")
        value.set("b,c")
        self.assertEqual(value.get(), ["a", "b", "c"])

    def testQuotedCommaSurvives(self):
        value = ListValue()
        value.set('"a,b",c')
        self.assertEqual(value.get(), ["a,b", "c"])

    def testResetThenAppend(self):
        value = ListValue(str, ["default value"])
        value.reset()
        self.assertEqual(value.get(), [])
        value.append("x,y")
        self.assertEqual(value.get(), ["x,y"])

    def testFailedAppendLeavesListUntouched(self):
        value = ListValue(int, [1])
        with self.assertRaises(ValueError):
            value.append("two")
        self.assertEqual(value.get(), [1])

    def testStringForm(self):
        self.assertEqual(str(ListValue()), "[]")
        self.assertEqual(str(ListValue(int, [1, 2])), "[1,2]")

    def testGetReturnsCopy(self):
        value = ListValue(str, ["a"])
        value.get().append("b")
        self.assertEqual(value.get(), ["a"])


if __name__ == "__main__":
    unittest.main()
