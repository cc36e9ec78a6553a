"""
Validation module behavioral tests (structural invariants of a command tree).

Scope
- Sibling subcommand names must be distinct; identical names under different
  parents are accepted.
- Option/switch long and short names must be unique per node.
- Nodes with subcommands cannot own options or switches.
- The process entry point validates before reading any input.

Conventions
- Test method names follow CamelCase per project convention.
"""

from __future__ import annotations

import unittest
from unittest import TestCase

from tabtree import DefinitionError, Option, Switch, command, group, invoke, validate


def noop(options, switches, args):
    return None


class TestValidate(TestCase):
    """Behavioral tests for validate()."""

    def testValidTreeIsReturned(self):
        tool = group("tool")
        command(noop, tool, "enter", options=[Option("shell", "s")], switches=[Switch("all", "a")])
        self.assertIs(validate(tool), tool)

    def testDuplicateSiblingNamesRejected(self):
        tool = group("tool")
        command(noop, tool, "enter")
        command(noop, tool, "enter")
        with self.assertRaises(DefinitionError) as context:
            validate(tool)
        self.assertEqual(context.exception.name, "enter")
        self.assertIs(context.exception.command, tool)

    def testSameNameUnderDifferentParentsAccepted(self):
        tool = group("tool")
        command(noop, tool.group("network"), "list")
        command(noop, tool.group("volume"), "list")
        validate(tool)

    def testGroupWithOptionsRejected(self):
        tool = group("tool", options=[Option("verbose")])
        command(noop, tool, "enter")
        with self.assertRaises(DefinitionError) as context:
            validate(tool)
        self.assertEqual(context.exception.name, "verbose")

    def testGroupWithSwitchesRejected(self):
        tool = group("tool", switches=[Switch("quiet")])
        command(noop, tool, "enter")
        with self.assertRaises(DefinitionError):
            validate(tool)

    def testDefinitionErrorIsValueError(self):
        self.assertTrue(issubclass(DefinitionError, ValueError))

    def testDuplicateOptionLonghandRejected(self):
        tool = command(noop, name="tool", options=[Option("shell"), Option("shell", "s")])
        with self.assertRaises(DefinitionError) as context:
            validate(tool)
        self.assertEqual(context.exception.name, "shell")

    def testDuplicateOptionShorthandRejected(self):
        tool = command(noop, name="tool", options=[Option("shell", "s"), Option("size", "s")])
        with self.assertRaises(DefinitionError) as context:
            validate(tool)
        self.assertEqual(context.exception.name, "s")

    def testDuplicateSwitchLonghandRejected(self):
        tool = command(noop, name="tool", switches=[Switch("all", "a"), Switch("all")])
        with self.assertRaises(DefinitionError) as context:
            validate(tool)
        self.assertEqual(context.exception.name, "all")

    def testDuplicateSwitchShorthandRejected(self):
        tool = command(noop, name="tool", switches=[Switch("all", "a"), Switch("any", "a")])
        with self.assertRaises(DefinitionError) as context:
            validate(tool)
        self.assertEqual(context.exception.name, "a")

    def testShorthandCollidingWithLonghandRejected(self):
        tool = command(noop, name="tool", switches=[Switch("a"), Switch("all", "a")])
        with self.assertRaises(DefinitionError):
            validate(tool)

    def testNestedViolationIsFound(self):
        tool = group("tool")
        network = tool.group("network")
        command(noop, network, "create", options=[Option("driver", "d"), Option("dns", "d")])
        with self.assertRaises(DefinitionError) as context:
            validate(tool)
        self.assertEqual(context.exception.command.name, "create")
        self.assertIn("tool network create", str(context.exception))

    def testEntryPointValidatesFirst(self):
        calls = []
        tool = group("tool")
        command(lambda options, switches, args: calls.append(args), tool, "enter")
        command(noop, tool, "enter")
        with self.assertRaises(DefinitionError):
            invoke(tool, ["enter"])
        self.assertEqual(calls, [])


if __name__ == "__main__":
    unittest.main()
