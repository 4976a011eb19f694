"""
Tests for generated result types (Args).

Scope
- Accessor table: value getters, switch predicates, alias lookup through get().
- Immutability, equality, hashing and representation.
- Generated types are sealed against subclassing and need a sealed registry.

Conventions
- Test method names follow CamelCase per project convention.
"""
from __future__ import annotations

import unittest
from unittest import TestCase

from rich.console import Console

from pennant.options import OptionKind, OptionSpec, OptionRegistry
from pennant.results import *


def registry(*specs):
    registry = OptionRegistry()
    for spec in specs:
        registry.register(spec)
    registry.seal()
    return registry


class ArgsTest(TestCase):

    def setUp(self):
        self.type = build(registry(
            OptionSpec("-v", "--verbose", kind=OptionKind.SWITCH),
            OptionSpec("--flag1=", kind=OptionKind.FLAG),
            OptionSpec("--files", kind=OptionKind.LIST),
        ))
        self.args = self.type({"verbose": True, "files": ("a", "b")}, ["target"])

    def testValueAccessors(self):
        self.assertIs(self.args.verbose, True)
        self.assertIsNone(self.args.flag1)
        self.assertEqual(self.args.files, ("a", "b"))
        self.assertEqual(self.args.remaining, ("target",))

    def testSwitchPredicate(self):
        self.assertIs(self.args.is_verbose, True)
        self.assertIs(self.type({}).is_verbose, False)
        self.assertFalse(hasattr(self.args, "is_flag1"))

    def testGetAcceptsAliases(self):
        self.assertIs(self.args.get("-v"), True)
        self.assertIs(self.args.get("--verbose"), True)
        self.assertEqual(self.args.get("files"), ("a", "b"))
        self.assertIsNone(self.args.get("--flag1="))

    def testGetUnknownRaises(self):
        for name in ("--random", "not an option", 3):
            with self.subTest(name=name):
                with self.assertRaises(KeyError):
                    self.args.get(name)

    def testUndeclaredValuesAreDropped(self):
        args = self.type({"verbose": True, "ghost": "x"})
        self.assertFalse(hasattr(args, "ghost"))

    def testImmutable(self):
        with self.assertRaises(AttributeError):
            self.args.verbose = False
        with self.assertRaises(AttributeError):
            self.args.anything = 1
        with self.assertRaises(AttributeError):
            del self.args.files
        with self.assertRaises(TypeError):
            self.args._values["verbose"] = False

    def testEqualityAndHash(self):
        other = self.type({"verbose": True, "files": ("a", "b")}, ("target",))
        self.assertEqual(self.args, other)
        self.assertEqual(hash(self.args), hash(other))
        self.assertNotEqual(self.args, self.type({"verbose": True, "files": ("a", "b")}))

    def testDifferentTypesAreNotEqual(self):
        other = build(registry(OptionSpec("-v", "--verbose", kind=OptionKind.SWITCH)))
        self.assertNotEqual(other({"verbose": True}), self.type({"verbose": True}))

    def testRepr(self):
        self.assertEqual(
            repr(self.args),
            "args(verbose=True, flag1=None, files=('a', 'b'), remaining=('target',))",
        )

    def testRichRendering(self):
        console = Console(width=120, color_system=None)
        with console.capture() as capture:
            console.print(self.args)
        self.assertIn("remaining=('target',)", capture.get())

    def testGeneratedTypeIsFinal(self):
        with self.assertRaises(TypeError):
            type("Child", (self.type,), {})


class BuildTest(TestCase):

    def testUnsealedRegistryRejected(self):
        registry = OptionRegistry()
        registry.register(OptionSpec("--pry", kind=OptionKind.SWITCH))
        with self.assertRaises(TypeError):
            build(registry)

    def testCustomName(self):
        result = build(registry(OptionSpec("--pry", kind=OptionKind.SWITCH)), "BrewArgs")
        self.assertEqual(result.__name__, "BrewArgs")
        self.assertTrue(repr(result({})).startswith("brew-args("))


if __name__ == "__main__":
    unittest.main()
