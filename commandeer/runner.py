"""
Commandeer runner: resolve a command from process arguments and run it.

Dispatch (one synchronous pass per run())
1. resolve: the first argument after the executable that does not start with
   '--' names the command; when there is none, or it names no registered
   command, the default id ("serve") is used instead.
2. look up: CommandNotFoundError when neither resolves.
3. localize: strip the executable and (when matched explicitly) that one
   command-id token; everything else is handed to the command in order.
4. validate: when the command declares a signature, every Value must be
   present. On the first miss the usage line (and help) is written to the
   console and UsageError is raised; the command never runs.
5. execute: command.run(arguments); its errors propagate unchanged.

Faults raised by steps 2 and 4 go through trigger(): by default they are
raised to the caller; a runner built with shell=True renders them to stderr
with rich and exits with status 1 instead.

Example
    runner = Runner(TerminalConsole())
    runner.register([Serve(), Migrate()])
    runner.run()
"""
import difflib
import sys
from collections.abc import Iterable
from types import MappingProxyType

from .commands import Command
from .consoles import Console, TerminalConsole
from .faults import *
from .utils import *


class Runner:
    """
    Registry of commands plus the single entry point that dispatches to one.

    Parameters
    - console: Console | Unset
      Port used for usage output and bound to commands that have none.
      A TerminalConsole when Unset.
    - arguments: Iterable[str] | Unset
      Raw process arguments, executable path first. sys.argv when Unset.
    - default: str
      Id of the command run when no registered id is named ("serve").
    - shell, fancy, colorful: bool (keyword-only)
      Fault presentation: shell renders faults and exits instead of raising;
      fancy wraps them in a panel; colorful enables the palette.

    State
    - commands: read-only mapping id -> Command, replaced by register().
    """

    def __init__(
            self,
            console=Unset,
            arguments=Unset,
            default="serve",
            *,
            shell=False,
            fancy=False,
            colorful=False
    ):
        if not isinstance(console, Console | Unset):
            raise TypeError("runner 'console' must be a console")
        if not isinstance(default, str):
            raise TypeError("runner 'default' must be a string")
        elif not default.strip():
            raise ValueError("runner 'default' cannot be empty")

        arguments = coalesce(arguments, sys.argv)
        if isinstance(arguments, str) or not isinstance(arguments, Iterable):
            raise TypeError("runner 'arguments' must be an iterable of strings")
        arguments = tuple(arguments)
        if not all(isinstance(argument, str) for argument in arguments):
            raise TypeError("runner 'arguments' must be an iterable of strings")

        self._console = TerminalConsole() if console is Unset else console
        self._arguments = arguments
        self._default = default.strip()
        self._commands = {}
        self._shell = bool(shell)
        self._fancy = bool(fancy)
        self._colorful = bool(colorful)

    console = mirror("console")
    arguments = mirror("arguments")
    default = mirror("default")
    shell = mirror("shell")
    fancy = mirror("fancy")
    colorful = mirror("colorful")

    @property
    def commands(self):
        return MappingProxyType(self._commands)

    @property
    def executable(self):
        """
        Executable path (first raw argument); empty when no arguments were given.
        """
        return self._arguments[0] if self._arguments else ""

    def register(self, commands, /):
        """
        Replace the active command set.

        Parameters
        - commands: Iterable[Command]

        Behavior
        - Ids must be unique (the same instance listed twice is a duplicate too);
          the check happens here, never at dispatch time.
        - Commands built without a console get this runner's console bound.
        - The previous set is kept when registration fails.

        Raises
        - TypeError: when an item is not a Command.
        - DuplicateIdError: when two commands share an id (routed through trigger()).

        Returns
        - self, so setup can be chained: Runner(...).register([...]).run()
        """
        if not isinstance(commands, Iterable):
            raise TypeError("register() argument must be an iterable of commands")

        registry = {}
        for command in commands:
            if not isinstance(command, Command):
                raise TypeError("register() argument must be an iterable of commands")
            if command.id in registry:
                self.trigger(DuplicateIdError(
                    "command id %r is already in use" % command.id,
                    id=command.id,
                    hint="give every command a distinct id",
                ))
            registry[command.id] = command

        for command in registry.values():
            command.bind(self._console)
        self._commands = registry
        return self

    def trigger(self, fault, /, **options):
        """
        Surface a fault with this runner's presentation flags merged in.
        """
        trigger(fault, **options, tool=self, shell=self._shell, fancy=self._fancy, colorful=self._colorful)

    def resolve(self):
        """
        Resolve (command, local arguments) from the raw process arguments.

        Raises
        - CommandNotFoundError: when neither the named nor the default id is registered.
        """
        tokens = list(self._arguments[1:])
        index, input = next(
            ((index, token) for index, token in enumerate(tokens) if not token.startswith("--")),
            (None, None),
        )

        if input is not None and input in self._commands:
            del tokens[index]
            return self._commands[input], tuple(tokens)

        try:
            return self._commands[self._default], tuple(tokens)
        except KeyError:
            pass

        if input is None:
            message = "no command given and no default %r command registered" % self._default
            suggestions = []
        else:
            message = "unknown command %r and no default %r command registered" % (input, self._default)
            suggestions = difflib.get_close_matches(input, self._commands.keys(), 5)

        try:
            hint = "did you mean %r?" % suggestions[0]
        except IndexError:
            if self._commands:
                hint = "available commands: %s" % ", ".join(sorted(self._commands))
            else:
                hint = "register a %r command or name one explicitly" % self._default

        self.trigger(CommandNotFoundError(
            message,
            id=self._default,
            input=input,
            suggestions=suggestions,
            hint=hint,
        ))

    def validate(self, command, arguments, /):
        """
        Check every Value of command's signature against arguments.

        On the first missing Value the usage line is written to the console
        (error style) followed by the command help and the spec help (info
        style), then UsageError carrying the usage line is raised.
        """
        for spec in command.signature.values:
            try:
                command.value(spec.name, arguments)
            except MissingArgumentError as error:
                usage = command.usage(self.executable)
                self._console.error(usage)
                for line in command.help:
                    self._console.info(line)
                for name, help in command.signature.describe():
                    self._console.info("  %s: %s" % (name, help))
                self.trigger(UsageError(
                    usage,
                    usage=usage,
                    command=command.id,
                    argument=error.name,
                    hint=error.options.get("hint"),
                ))

    def run(self):
        """
        Resolve, validate and execute exactly one command.

        Raises
        - CommandNotFoundError, UsageError: framework faults (non-shell mode).
        - Anything raised by the command's run(), unchanged.
        """
        command, arguments = self.resolve()
        if command.signature:
            self.validate(command, arguments)
        command.run(list(arguments))

    def __repr__(self):
        return "runner(commands=%r, default=%r)" % (tuple(self._commands), self._default)

    def __rich_repr__(self):
        yield "commands", tuple(self._commands)
        yield "arguments", self._arguments
        yield "default", self._default


__all__ = (
    "Runner",
)
