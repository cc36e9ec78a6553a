"""
Specs module behavioral tests (Option, Switch, @option).

Scope
- Validate naming rules (longhand/shorthand sanitation) shared by both specs.
- Validate completion value sets: static tuples, dynamic providers, prefix matching.
- Validate read-only introspection and representation.

Conventions
- Test method names follow CamelCase per project convention.
- Tests use the public API (Option, Switch, option).
"""

from __future__ import annotations

import unittest
from unittest import TestCase

from tabtree import Option, Switch, option


class TestOption(TestCase):
    """Behavioral tests for value-bearing flag specifications."""

    def testOptionNamesLongFirst(self):
        o = Option("shell", "s", values=("bash", "sh"))
        self.assertEqual(o.names, ["--shell", "-s"])

    def testOptionWithoutShorthand(self):
        o = Option("encoding")
        self.assertIsNone(o.shorthand)
        self.assertEqual(o.names, ["--encoding"])

    def testOptionLonghandIsTrimmed(self):
        self.assertEqual(Option("  shell ").longhand, "shell")

    def testOptionLonghandWithHyphensRejected(self):
        with self.assertRaises(ValueError):
            Option("--shell")

    def testOptionLonghandEmptyRejected(self):
        with self.assertRaises(ValueError):
            Option("   ")

    def testOptionLonghandWithEqualsRejected(self):
        with self.assertRaises(ValueError):
            Option("a=b")

    def testOptionLonghandWithWhitespaceRejected(self):
        with self.assertRaises(ValueError):
            Option("two words")

    def testOptionLonghandMustBeString(self):
        with self.assertRaises(TypeError):
            Option(42)

    def testOptionShorthandMustBeOneCharacter(self):
        with self.assertRaises(ValueError):
            Option("shell", "sh")

    def testOptionShorthandHyphenRejected(self):
        with self.assertRaises(ValueError):
            Option("shell", "-")

    def testOptionValuesAsBareStringRejected(self):
        with self.assertRaises(TypeError):
            Option("shell", values="bash")

    def testOptionValuesMustBeStrings(self):
        with self.assertRaises(TypeError):
            Option("port", values=(80, 443))

    def testOptionDuplicateValuesRejected(self):
        with self.assertRaises(ValueError):
            Option("shell", values=("bash", "bash"))

    def testOptionStaticValuesKeepOrder(self):
        o = Option("shell", values=["sh", "bash", "zsh"])
        self.assertEqual(o.values, ["sh", "bash", "zsh"])
        self.assertEqual(o.completions(), ["sh", "bash", "zsh"])

    def testOptionValuesAreCopies(self):
        o = Option("shell", values=("bash", "sh"))
        o.values.append("zsh")
        self.assertEqual(o.completions(), ["bash", "sh"])

    def testOptionMatchingByPrefix(self):
        o = Option("shell", values=("bash", "sh", "zsh"))
        self.assertEqual(o.matching("b"), ["bash"])
        self.assertEqual(o.matching(""), ["bash", "sh", "zsh"])
        self.assertEqual(o.matching("x"), [])

    def testOptionDescrDefaultsToNone(self):
        self.assertIsNone(Option("shell").descr)

    def testOptionDescrEmptyRejected(self):
        with self.assertRaises(ValueError):
            Option("shell", descr="  ")

    def testOptionReadOnly(self):
        o = Option("shell")
        with self.assertRaises(AttributeError):
            o.longhand = "other"  # type: ignore[misc]

    def testOptionRepr(self):
        self.assertTrue(repr(Option("shell", "s")).startswith("option(longhand='shell', shorthand='s'"))


class TestOptionDecorator(TestCase):
    """Behavioral tests for dynamic value providers."""

    def testDecoratorBuildsOption(self):
        @option("container", "c")
        def container():
            return ["web", "db"]

        self.assertIsInstance(container, Option)
        self.assertEqual(container.names, ["--container", "-c"])
        self.assertEqual(container.completions(), ["web", "db"])

    def testDecoratorProviderIsQueriedEveryTime(self):
        calls = []

        @option("container")
        def container():
            calls.append(None)
            return ["c%d" % len(calls)]

        self.assertEqual(container.matching("c"), ["c1"])
        self.assertEqual(container.matching("c"), ["c2"])
        self.assertEqual(len(calls), 2)

    def testDecoratorRejectsValuesKeyword(self):
        with self.assertRaises(TypeError):
            option("container", values=("a",))

    def testDecoratorRequiresCallable(self):
        with self.assertRaises(TypeError):
            option("container")("not callable")

    def testProviderResultIsChecked(self):
        @option("container")
        def container():
            return [1, 2]

        with self.assertRaises(TypeError):
            container.completions()


class TestSwitch(TestCase):
    """Behavioral tests for presence-only flag specifications."""

    def testSwitchNames(self):
        self.assertEqual(Switch("all", "a").names, ["--all", "-a"])
        self.assertEqual(Switch("recursive").names, ["--recursive"])

    def testSwitchLonghandWithHyphensRejected(self):
        with self.assertRaises(ValueError):
            Switch("-a")

    def testSwitchShorthandMustBeString(self):
        with self.assertRaises(TypeError):
            Switch("all", 1)

    def testSwitchHasNoValues(self):
        self.assertFalse(hasattr(Switch("all"), "values"))


if __name__ == "__main__":
    unittest.main()
