"""
Runner behavioral tests (resolution, validation, dispatch, faults).

Scope
- Validate the end-to-end scenarios: plain run, insufficient arguments,
  positional fetch, option fetch, and the default "serve" fallback.
- Validate command-id resolution rules (first non-option token, unknown ids,
  options before the id) and the command-local argument list.
- Validate registration rules (duplicate ids, non-commands, console binding).
- Validate fault propagation (framework faults vs. command errors, shell mode).

Conventions
- Test method names follow CamelCase per project convention.
- Output is observed through BufferConsole.capture().
"""

from __future__ import annotations

import unittest
from unittest import TestCase

from commandeer import (
    Runner,
    Command,
    command,
    Value,
    Option,
    BufferConsole,
)
from commandeer.utils import Unset
from commandeer.faults import (
    UsageError,
    CommandNotFoundError,
    DuplicateIdError,
)


class FirstCommand(Command, id="test-1"):
    def run(self, arguments):
        self.console.print("Test 1 Ran")


class SecondCommand(
    Command,
    id="test-2",
    signature=[Value("arg-1"), Option("opt-1"), Option("opt-2")],
):
    def run(self, arguments):
        self.console.print(self.value("arg-1", arguments))
        self.console.print(self.option("opt-1", arguments) or "")


class RecordingCommand(Command):
    """Remembers every argument list it was run with."""

    def __init__(self, console=Unset):
        super().__init__(console)
        self.calls = []

    def run(self, arguments):
        self.calls.append(list(arguments))


class ServeCommand(RecordingCommand, id="serve"):
    pass


class PingCommand(RecordingCommand, id="ping"):
    pass


class TestScenarios(TestCase):
    """Behavioral tests mirroring the canonical dispatch scenarios."""

    def setUp(self):
        self.console = BufferConsole()

    def testCommandRun(self):
        runner = Runner(self.console, ["/path/to/exe", "test-1"])
        runner.register([FirstCommand(self.console)])
        runner.run()
        self.assertEqual(self.console.capture(), "Test 1 Ran")

    def testCommandInsufficientArgs(self):
        runner = Runner(self.console, ["/path/to/exe", "test-2"])
        runner.register([SecondCommand(self.console)])
        with self.assertRaises(UsageError):
            runner.run()
        self.assertIn("Usage: /path/to/exe test-2 arg-1 [--opt-1] [--opt-2]", self.console.capture())

    def testCommandFetchArgs(self):
        runner = Runner(self.console, ["/path/to/ext", "test-2", "123"])
        runner.register([SecondCommand(self.console)])
        runner.run()
        self.assertEqual(self.console.capture(), "123")

    def testCommandFetchOptions(self):
        runner = Runner(self.console, ["/path/to/ext", "test-2", "123", "--opt-1=abc"])
        runner.register([SecondCommand(self.console)])
        runner.run()
        self.assertEqual(self.console.capture(), "123abc")

    def testDefaultServe(self):
        serve = ServeCommand(self.console)
        runner = Runner(self.console, ["/path/to/exec"])
        runner.register([serve])
        runner.run()
        self.assertEqual(serve.calls, [[]])


class TestResolution(TestCase):
    """Behavioral tests for command-id resolution and local arguments."""

    def setUp(self):
        self.console = BufferConsole()
        self.serve = ServeCommand(self.console)
        self.ping = PingCommand(self.console)

    def runWith(self, *arguments):
        runner = Runner(self.console, ["/p/exe", *arguments])
        runner.register([self.serve, self.ping])
        runner.run()
        return runner

    def testExplicitIdIsStripped(self):
        self.runWith("ping", "a", "--x=1")
        self.assertEqual(self.ping.calls, [["a", "--x=1"]])
        self.assertEqual(self.serve.calls, [])

    def testUnknownIdFallsBackToServeKeepingToken(self):
        self.runWith("bogus", "--x")
        self.assertEqual(self.serve.calls, [["bogus", "--x"]])
        self.assertEqual(self.ping.calls, [])

    def testOnlyOptionsFallBackToServe(self):
        self.runWith("--port=80")
        self.assertEqual(self.serve.calls, [["--port=80"]])

    def testIdAfterLeadingOptions(self):
        self.runWith("--verbose", "ping", "b")
        self.assertEqual(self.ping.calls, [["--verbose", "b"]])

    def testOnlyFirstPositionalNamesTheCommand(self):
        # 'ping' is not the first non-option token, so serve receives everything
        self.runWith("other", "ping")
        self.assertEqual(self.serve.calls, [["other", "ping"]])
        self.assertEqual(self.ping.calls, [])

    def testRepeatedIdTokenIsStrippedOnce(self):
        self.runWith("ping", "ping")
        self.assertEqual(self.ping.calls, [["ping"]])

    def testCustomDefault(self):
        runner = Runner(self.console, ["/p/exe"], default="ping")
        runner.register([self.serve, self.ping])
        runner.run()
        self.assertEqual(self.ping.calls, [[]])
        self.assertEqual(self.serve.calls, [])

    def testCommandNotFoundWithoutDefault(self):
        runner = Runner(self.console, ["/p/exe"])
        runner.register([self.ping])
        with self.assertRaises(CommandNotFoundError) as context:
            runner.run()
        self.assertEqual(context.exception.id, "serve")
        self.assertIsNone(context.exception.input)
        self.assertEqual(self.ping.calls, [])

    def testCommandNotFoundSuggestsCloseIds(self):
        runner = Runner(self.console, ["/p/exe", "pnig"])
        runner.register([self.ping])
        with self.assertRaises(CommandNotFoundError) as context:
            runner.run()
        self.assertEqual(context.exception.input, "pnig")
        self.assertIn("ping", context.exception.suggestions)

    def testEmptyArgumentsResolveDefault(self):
        runner = Runner(self.console, [])
        runner.register([self.serve])
        runner.run()
        self.assertEqual(runner.executable, "")
        self.assertEqual(self.serve.calls, [[]])


class TestValidation(TestCase):
    """Behavioral tests for eager signature validation."""

    def setUp(self):
        self.console = BufferConsole()
        self.ran = []

        @command("copy", [Value("source"), Option("force"), Value("target")], console=self.console)
        def copy(this, arguments):
            self.ran.append((this.value("source", arguments), this.value("target", arguments)))

        self.copy = copy

    def runWith(self, *arguments):
        Runner(self.console, ["/p/exe", "copy", *arguments]).register([self.copy]).run()

    def testPositionalsIgnoreInterleavedOptions(self):
        self.runWith("--force", "a", "--other=1", "b")
        self.assertEqual(self.ran, [("a", "b")])

    def testMissingSecondPositionalAborts(self):
        with self.assertRaises(UsageError) as context:
            self.runWith("a", "--force")
        self.assertEqual(self.ran, [])
        self.assertEqual(context.exception.argument, "target")
        self.assertTrue(str(context.exception).startswith("Usage: /p/exe copy"))
        self.assertEqual(context.exception.usage, "Usage: /p/exe copy source [--force] target")

    def testUsageIsWrittenThroughConsole(self):
        with self.assertRaises(UsageError):
            self.runWith()
        self.assertEqual(self.console.capture(), "Usage: /p/exe copy source [--force] target")

    def testExtraPositionalsAreIgnored(self):
        self.runWith("a", "b", "c", "d")
        self.assertEqual(self.ran, [("a", "b")])

    def testUsagePrintsHelpLines(self):
        @command(
            "deploy",
            [Value("target", help="where to deploy"), Option("dry-run", help="only print the plan")],
            help=["Deploys the current build."],
            console=self.console,
        )
        def deploy(this, arguments):
            pass

        with self.assertRaises(UsageError):
            Runner(self.console, ["/p/exe", "deploy"]).register([deploy]).run()
        output = self.console.capture()
        self.assertIn("Usage: /p/exe deploy target [--dry-run]", output)
        self.assertIn("Deploys the current build.", output)
        self.assertIn("  target: where to deploy", output)
        self.assertIn("  [--dry-run]: only print the plan", output)

    def testOptionsOnlySignatureNeverFails(self):
        seen = []

        @command("list", [Option("all")], console=self.console)
        def listing(this, arguments):
            seen.append(this.option("all", arguments))

        Runner(self.console, ["/p/exe", "list"]).register([listing]).run()
        self.assertEqual(seen, [None])

    def testUsageWithoutProcessArguments(self):
        with self.assertRaises(UsageError) as context:
            Runner(self.console, [], default="copy").register([self.copy]).run()
        self.assertEqual(context.exception.usage, "Usage: copy source [--force] target")

    def testShellModeExits(self):
        runner = Runner(self.console, ["/p/exe", "copy"], shell=True)
        runner.register([self.copy])
        with self.assertRaises(SystemExit) as context:
            runner.run()
        self.assertEqual(context.exception.code, 1)
        self.assertEqual(self.ran, [])


class TestRegistration(TestCase):
    """Behavioral tests for the registry."""

    def setUp(self):
        self.console = BufferConsole()

    def testDuplicateIdRaises(self):
        runner = Runner(self.console, ["/p/exe"])
        with self.assertRaises(DuplicateIdError) as context:
            runner.register([PingCommand(self.console), PingCommand(self.console)])
        self.assertEqual(context.exception.id, "ping")

    def testSameInstanceTwiceIsADuplicate(self):
        runner = Runner(self.console, ["/p/exe"])
        serve = ServeCommand(self.console)
        with self.assertRaises(DuplicateIdError) as context:
            runner.register([serve, serve])
        self.assertEqual(context.exception.id, "serve")
        self.assertEqual(dict(runner.commands), {})

    def testFailedRegistrationKeepsPreviousSet(self):
        runner = Runner(self.console, ["/p/exe"])
        serve = ServeCommand(self.console)
        runner.register([serve])
        with self.assertRaises(DuplicateIdError):
            runner.register([PingCommand(self.console), PingCommand(self.console)])
        self.assertEqual(dict(runner.commands), {"serve": serve})

    def testRegisterReplacesSet(self):
        runner = Runner(self.console, ["/p/exe"])
        runner.register([ServeCommand(self.console)])
        runner.register([PingCommand(self.console)])
        self.assertEqual(list(runner.commands), ["ping"])

    def testRegisterRejectsNonCommands(self):
        runner = Runner(self.console, ["/p/exe"])
        with self.assertRaises(TypeError):
            runner.register(["serve"])

    def testCommandsMappingIsReadOnly(self):
        runner = Runner(self.console, ["/p/exe"]).register([ServeCommand(self.console)])
        with self.assertRaises(TypeError):
            runner.commands["ping"] = PingCommand(self.console)  # type: ignore[index]

    def testRunnerConsoleIsBound(self):
        serve = ServeCommand()
        Runner(self.console, ["/p/exe"]).register([serve])
        self.assertIs(serve.console, self.console)

    def testOwnConsoleIsKept(self):
        own = BufferConsole()
        serve = ServeCommand(own)
        Runner(self.console, ["/p/exe"]).register([serve])
        self.assertIs(serve.console, own)

    def testInvalidArgumentsRejected(self):
        with self.assertRaises(TypeError):
            Runner(self.console, "/p/exe serve")
        with self.assertRaises(TypeError):
            Runner(self.console, ["/p/exe", 1])

    def testInvalidConsoleRejected(self):
        with self.assertRaises(TypeError):
            Runner(object(), ["/p/exe"])


class TestCommandErrors(TestCase):
    """Command-level failures are opaque to the runner."""

    def testCommandErrorPropagatesUnchanged(self):
        console = BufferConsole()
        failure = RuntimeError("boom")

        @command("serve", console=console)
        def serve(this, arguments):
            raise failure

        with self.assertRaises(RuntimeError) as context:
            Runner(console, ["/p/exe"]).register([serve]).run()
        self.assertIs(context.exception, failure)

    def testCommandErrorPropagatesInShellMode(self):
        console = BufferConsole()

        @command("serve", console=console)
        def serve(this, arguments):
            raise KeyError("missing")

        with self.assertRaises(KeyError):
            Runner(console, ["/p/exe"], shell=True).register([serve]).run()


if __name__ == "__main__":
    unittest.main()
