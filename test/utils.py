"""
Tests for the shared utilities.

Scope
- Unset sentinel and coalesce().
- canonicalize() over every accepted spelling and its rejections.
- ordinal() labels, mirror() freezing, rename().

Conventions
- Test method names follow CamelCase per project convention.
"""
import unittest
from unittest import TestCase

from pennant.utils import *


class UnsetTest(TestCase):

    def testSingletonAndFalsy(self):
        self.assertIs(UnsetType(), Unset)
        self.assertFalse(Unset)
        self.assertEqual(repr(Unset), "Unset")

    def testFinal(self):
        with self.assertRaises(TypeError):
            type("Child", (UnsetType,), {})

    def testCoalesce(self):
        self.assertEqual(coalesce(Unset, "fallback"), "fallback")
        self.assertIsNone(coalesce(Unset))
        self.assertIsNone(coalesce(None, "fallback"))
        self.assertEqual(coalesce("", "fallback"), "")


class CanonicalizeTest(TestCase):

    def testSpellings(self):
        for token, name in (
            ("--more-verbose", "more_verbose"),
            ("--flag1=", "flag1"),
            ("-v", "v"),
            ("--switch-a", "switch_a"),
            ("switch_a", "switch_a"),
            ("more-verbose", "more_verbose"),
        ):
            with self.subTest(token=token):
                self.assertEqual(canonicalize(token), name)

    def testRejections(self):
        for token in ("", "--", "-", "---a", "--a b", "1st", "--a=b"):
            with self.subTest(token=token):
                with self.assertRaises(ValueError):
                    canonicalize(token)
        with self.assertRaises(TypeError):
            canonicalize(None)


class OrdinalTest(TestCase):

    def testWords(self):
        self.assertEqual(ordinal(1), "first")
        self.assertEqual(ordinal(10), "tenth")

    def testSuffixes(self):
        self.assertEqual(ordinal(11), "11th")
        self.assertEqual(ordinal(12), "12th")
        self.assertEqual(ordinal(21), "21st")
        self.assertEqual(ordinal(22), "22nd")
        self.assertEqual(ordinal(23), "23rd")
        self.assertEqual(ordinal(111), "111th")


class MirrorTest(TestCase):

    def testFreezesContainers(self):
        class Holder:
            names = mirror("names")
            tags = mirror("tags")

            def __init__(self):
                self._names = ["-v", "--verbose"]
                self._tags = {"a"}

        holder = Holder()
        self.assertEqual(holder.names, ("-v", "--verbose"))
        self.assertEqual(holder.tags, frozenset({"a"}))
        with self.assertRaises(AttributeError):
            holder.names = ()

    def testRename(self):
        @rename("accessor")
        def function():
            pass
        self.assertEqual(function.__name__, "accessor")
        self.assertEqual(function.__qualname__, "accessor")
        with self.assertRaises(TypeError):
            rename(1)


if __name__ == "__main__":
    unittest.main()
