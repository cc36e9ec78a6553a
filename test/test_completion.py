"""
Completion module behavioral tests (hints for partially typed invocations).

Scope
- Hint sets for empty input, partial words, flags and option values.
- Trailing-space rule: option headers end with '=', everything else with ' '.
- Subcommand descent and purity (identical inputs, identical hints).

Conventions
- Test method names follow CamelCase per project convention.
"""

from __future__ import annotations

import unittest
from unittest import TestCase

from tabtree import Option, Switch, complete, group, option
from tabtree.faults import UnknownOptionError


def noop(options, switches, args):
    return None


def build():
    tool = group("tool")
    tool.command(noop, "enter", options=[Option("shell", "s", values=("bash", "sh"))], arguments=["c1", "c2"])
    tool.command(noop, "list", switches=[Switch("all", "a")])
    return tool


class TestComplete(TestCase):
    """Behavioral tests for complete()."""

    def setUp(self):
        self.tool = build()

    def testScenarioEmptyInput(self):
        self.assertEqual(complete(self.tool, [], True), ["enter ", "list "])

    def testScenarioPartialSubcommand(self):
        self.assertEqual(complete(self.tool, ["ent"], False), ["enter "])

    def testScenarioOptionHeaderHasNoTrailingSpace(self):
        hints = complete(self.tool, ["enter", "--sh"], False)
        self.assertIn("--shell=", hints)
        self.assertNotIn("--shell= ", hints)

    def testScenarioOptionValues(self):
        self.assertEqual(complete(self.tool, ["enter", "--shell="], False), ["bash ", "sh "])

    def testOptionValuesByPrefix(self):
        self.assertEqual(complete(self.tool, ["enter", "--shell=b"], False), ["bash "])

    def testOptionValuesByShorthand(self):
        self.assertEqual(complete(self.tool, ["enter", "-s="], False), ["bash ", "sh "])

    def testUnknownOptionValuesRaise(self):
        with self.assertRaises(UnknownOptionError):
            complete(self.tool, ["enter", "--color="], False)

    def testSubcommandAfterSpace(self):
        self.assertEqual(
            complete(self.tool, ["enter"], True),
            ["--shell=", "-s=", "c1 ", "c2 "],
        )

    def testSwitchesThenOptionsForPartialFlag(self):
        tool = group("tool")
        tool.command(noop, "run", options=[Option("detach-keys")], switches=[Switch("detach", "d")])
        self.assertEqual(complete(tool, ["run", "--de"], False), ["--detach ", "--detach-keys="])

    def testShortFlagPrefix(self):
        self.assertEqual(complete(self.tool, ["list", "-"], False), ["--all ", "-a "])

    def testFlagAfterSpaceOffersFlagsAndPositionals(self):
        self.assertEqual(
            complete(self.tool, ["enter", "--shell=sh"], True),
            ["--shell=", "-s=", "c1 ", "c2 "],
        )

    def testPartialPositional(self):
        self.assertEqual(complete(self.tool, ["enter", "c"], False), ["c1 ", "c2 "])

    def testSettledPositionalThenSpace(self):
        self.assertEqual(
            complete(self.tool, ["enter", "c1"], True),
            ["--shell=", "-s=", "c1 ", "c2 "],
        )

    def testSettledFlagsAreSkipped(self):
        self.assertEqual(complete(self.tool, ["enter", "--shell=sh", "c"], False), ["c1 ", "c2 "])

    def testNoMatchGivesNoHints(self):
        self.assertEqual(complete(self.tool, ["zzz"], False), [])

    def testDeepDescent(self):
        tool = group("tool")
        network = tool.group("network")
        network.command(noop, "create")
        network.command(noop, "connect")
        self.assertEqual(complete(tool, ["network", "c"], False), ["create ", "connect "])
        self.assertEqual(complete(tool, ["network"], True), ["create ", "connect "])

    def testDynamicProvidersAreQueried(self):
        running = ["web"]
        tool = group("tool")

        @option("container", "c")
        def container():
            return list(running)

        logs = tool.command(noop, "logs", options=[container])

        @logs.provide
        def containers():
            return list(running)

        self.assertEqual(complete(tool, ["logs", "w"], False), ["web "])
        running.append("worker")
        self.assertEqual(complete(tool, ["logs", "w"], False), ["web ", "worker "])
        self.assertEqual(complete(tool, ["logs", "-c=w"], False), ["web ", "worker "])

    def testIdempotent(self):
        for tokens, spaced in (([], True), (["enter", "--sh"], False), (["list"], True)):
            self.assertEqual(complete(self.tool, tokens, spaced), complete(self.tool, tokens, spaced))

    def testTrailingSpaceRule(self):
        for tokens, spaced in ((["enter"], True), (["enter", "-"], False), (["list", "--"], False)):
            for hint in complete(self.tool, tokens, spaced):
                if hint.endswith("="):
                    self.assertFalse(hint.endswith(" "))
                else:
                    self.assertTrue(hint.endswith(" "), hint)

    def testTreeIsNotMutated(self):
        before = repr(self.tool)
        complete(self.tool, ["enter", "--shell="], False)
        self.assertEqual(repr(self.tool), before)


if __name__ == "__main__":
    unittest.main()
