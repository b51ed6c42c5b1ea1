"""
Commands module behavioral tests (parsing, routing, help, faults, prompting).

Scope
- Validate switch forms (--name=value, --name value, -n value, -nvalue, bare booleans).
- Validate parse faults (unknown switch, missing value, invalid value, unknown command).
- Validate routing to subcommands and persistent option lookup.
- Validate help rendering and shell mode.
- Validate the end-to-end flow: parse, prompt for missing options, run the callback.

Conventions
- Test method names follow CamelCase per project convention.
- Tests use the public API (command, invoke, Command, boolean).
"""

from __future__ import annotations

import io
import unittest
from unittest import TestCase

from flagprompt import command, invoke, Command, boolean
from flagprompt.faults import (
    NoSuchOptionError,
    InvalidValueError,
    UnknownCommandError,
    UnknownSwitchError,
    OptionValueRequiredError,
)


def recorder():
    calls = []

    @command(name="tool")
    def tool(command, args):
        calls.append((command.name, args))

    tool.calls = calls
    return tool


class TestCommandParsing(TestCase):
    """Behavioral tests for Command parsing and faults."""

    def testSwitchForms(self):
        tool = recorder()
        tool.option("region", "r")
        tool.option("count", "c", type=int)
        tool.option("zone", "z")
        tool.option("force", type=boolean)

        invoke(tool, "--region=eu -c 3 -zb --force file.txt")

        self.assertEqual(tool.get("region"), "eu")
        self.assertEqual(tool.get("count"), 3)
        self.assertEqual(tool.get("zone"), "b")
        self.assertIs(tool.get("force"), True)
        self.assertEqual(tool.calls, [("tool", ["file.txt"])])

    def testSpacedLongValue(self):
        tool = recorder()
        tool.option("region")
        invoke(tool, ["--region", "us east"])
        self.assertEqual(tool.get("region"), "us east")

    def testRepeatedListAccumulates(self):
        tool = recorder()
        tool.option("tag", default=["default"], multiple=True)
        invoke(tool, "--tag a,b --tag c")
        self.assertEqual(tool.get("tag"), ["a", "b", "c"])

    def testTerminator(self):
        tool = recorder()
        tool.option("force", type=boolean)
        invoke(tool, "-- --force")
        self.assertIs(tool.get("force"), None)
        self.assertEqual(tool.calls, [("tool", ["--force"])])

    def testUnknownSwitchRaises(self):
        tool = recorder()
        tool.option("threads", type=int)
        with self.assertRaises(UnknownSwitchError):
            invoke(tool, "--threds=4")

    def testMissingValueRaises(self):
        tool = recorder()
        tool.option("region")
        with self.assertRaises(OptionValueRequiredError):
            invoke(tool, "--region")

    def testInvalidValueRaises(self):
        tool = recorder()
        tool.option("threads", type=int)
        with self.assertRaises(InvalidValueError) as context:
            invoke(tool, "--threads=r")
        self.assertIs(context.exception.options["tool"], tool)
        self.assertEqual(tool.calls, [])

    def testInvalidPromptType(self):
        with self.assertRaises(TypeError):
            invoke(recorder(), 42)


class TestCommandTree(TestCase):
    """Behavioral tests for subcommands and option visibility."""

    def testRouting(self):
        seen = []

        @command
        def parent(command, args):
            seen.append("parent")

        @parent.command
        def run(command, args):
            seen.append(("run", args))

        invoke(parent, "run now")

        self.assertEqual(seen, [("run", ["now"])])
        self.assertIs(run.parent, parent)
        self.assertEqual(run.path, (parent, run))
        self.assertIs(run.root, parent)

    def testUnknownSubcommandRaises(self):
        @command
        def parent(command, args):
            pass

        @parent.command
        def run(command, args):
            pass

        with self.assertRaises(UnknownCommandError):
            invoke(parent, "rn")  # misspelled 'run'

    def testPersistentOptionsVisibleFromChildren(self):
        root = Command(name="root")
        verbose = root.persistent("verbose", "v", type=boolean)
        local = root.option("region")
        child = root.command(lambda command, args: None, name="child")

        self.assertIs(child.flag("verbose"), verbose)
        self.assertIsNone(child.flag("region"))
        self.assertIs(root.flag("region"), local)
        self.assertEqual(list(child.options), ["verbose"])

        invoke(root, "child -v")
        self.assertIs(child.get("verbose"), True)

    def testPersistentSwitchBeforeSubcommand(self):
        root = Command(name="root")
        root.persistent("region")
        child = root.command(lambda command, args: None, name="child")

        invoke(root, "--region eu child")

        self.assertEqual(child.get("region"), "eu")

    def testDuplicateOptionRejected(self):
        tool = Command(name="tool")
        tool.option("region", "r")
        with self.assertRaises(ValueError):
            tool.option("region")
        with self.assertRaises(ValueError):
            tool.option("root", "r")

    def testDuplicateChildRejected(self):
        root = Command(name="root")
        Command(parent=root, name="child")
        with self.assertRaises(ValueError):
            Command(parent=root, name="child")

    def testGetUnknownOption(self):
        with self.assertRaises(NoSuchOptionError):
            Command(name="tool").get("missing")

    def testNameDefaultsToCallbackName(self):
        @command
        def deploy(command, args):
            """Deploy the service."""

        self.assertEqual(deploy.name, "deploy")
        self.assertEqual(deploy.descr, "Deploy the service.")


class TestCommandRuntime(TestCase):
    """Behavioral tests for help, shell mode and prompting."""

    def testHelpRendersAndStops(self):
        seen = []
        tool = Command(lambda command, args: seen.append(args), name="tool", stdout=io.StringIO())
        tool.option("region", "r", usage="region")
        tool.require("region")

        invoke(tool, "--help")

        output = tool.stdout.getvalue()
        self.assertIn("usage: tool [flags]", output)
        self.assertIn("--region", output)
        self.assertIn("(required)", output)
        self.assertEqual(seen, [])

    def testHiddenOptionsNotListed(self):
        tool = Command(name="tool", stdout=io.StringIO())
        tool.option("secret", hidden=True)
        invoke(tool, "-h")
        self.assertNotIn("--secret", tool.stdout.getvalue())

    def testShellModeExits(self):
        tool = Command(name="tool", shell=True)
        with self.assertRaises(SystemExit) as context:
            invoke(tool, "--nope")
        self.assertEqual(context.exception.code, 1)

    def testShellModeInherited(self):
        root = Command(name="root", shell=True, colorful=True)
        child = Command(parent=root, name="child")
        self.assertTrue(child.shell)
        self.assertTrue(child.colorful)
        self.assertFalse(child.fancy)

    def testMissingOptionsPromptedBeforeCallback(self):
        seen = []
        stdout = io.StringIO()

        @command(name="deploy", stdin=io.StringIO("eu\na\nb\n\n"), stdout=stdout)
        def deploy(command, args):
            seen.append((command.get("region"), command.get("zones"), command.get("force")))

        deploy.option("region", "r", usage="cloud region")
        deploy.option("zones", default=["default value"], usage="zones", multiple=True)
        deploy.option("force", type=boolean, default=False, usage="skip checks")
        deploy.require("region")
        deploy.require("zones")

        invoke(deploy, [])

        self.assertEqual(seen, [("eu", ["a", "b"], False)])
        self.assertIn("Flag --region is required.", stdout.getvalue())
        self.assertNotIn("--force", stdout.getvalue())

    def testSuppliedOptionsNotPrompted(self):
        seen = []
        stdout = io.StringIO()
        tool = Command(lambda command, args: seen.append(command.get("region")), name="tool",
                       stdin=io.StringIO(), stdout=stdout)
        tool.option("region", usage="region")
        tool.require("region")

        invoke(tool, "--region eu")

        self.assertEqual(seen, ["eu"])
        self.assertEqual(stdout.getvalue(), "")

    def testInvokePlainCallable(self):
        seen = []

        def tool(command, args):
            seen.append(args)

        invoke(tool, "a b")

        self.assertEqual(seen, [["a", "b"]])

    def testInvokeRejectsOtherObjects(self):
        with self.assertRaises(TypeError):
            invoke(42)


if __name__ == "__main__":
    unittest.main()
