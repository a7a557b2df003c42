"""
Commandeer command layer: declare units of work the runner can dispatch to.

What this module provides
- Command: abstract, polymorphic unit of work with
  • an id (unique within a runner),
  • a signature (Values and Options it accepts, possibly empty),
  • help lines shown under its usage line,
  • a console it writes to, and
  • run(arguments), which receives the command-local argument list.
- command(id, ...): build a Command from a plain function (decorator form).

Declaring commands
- Class form: identity is given as class keywords and run() is overridden.

    class Greet(Command, id="greet", signature=[Value("name"), Option("loud")]):
        def run(self, arguments):
            name = self.value("name", arguments)
            if self.option("loud", arguments) is not None:
                name = name.upper()
            self.console.print("hello " + name)

    greet = Greet(console)

- Function form: the function receives the command instance and the arguments.

    @command("version", console=console)
    def version(self, arguments):
        self.console.print("1.0")

Lifecycle
- Built once at application setup, registered once into a Runner, invoked at
  most once per process (when its id is the resolved one).
"""
import re
from abc import ABCMeta, abstractmethod
from collections.abc import Iterable

from .arguments import Signature
from .consoles import Console
from .extractor import value, option
from .utils import *


def _process_id(cls, id):
    if not isinstance(id, str):
        raise TypeError(f"{cls.__typename__} 'id' must be a string")
    elif not (id := id.strip()):
        raise ValueError(f"{cls.__typename__} 'id' cannot be empty")
    elif id.startswith("--") or re.search(r"\s", id):
        raise ValueError(f"{cls.__typename__} 'id' must not start with '--' nor contain spaces")
    return id


def _process_help(cls, help):
    """
    Normalize help into a tuple of lines: a string is split on newlines, an
    iterable must only contain strings. Blank strings are rejected.
    """
    if isinstance(help, str):
        help = help.strip().splitlines() if help.strip() else ()
    elif not isinstance(help, Iterable):
        raise TypeError(f"{cls.__typename__} 'help' must be a string or an iterable of strings")

    lines = []
    for line in help:
        if not isinstance(line, str):
            raise TypeError(f"{cls.__typename__} 'help' lines must be strings")
        elif not (line := line.rstrip()):
            raise ValueError(f"{cls.__typename__} 'help' lines cannot be empty")
        lines.append(line)
    return tuple(lines)


class CommandType(ABCMeta):
    """
    Metaclass that reads a command's identity from its class keywords.

    Options (class construction-time)
    - id: str, required once a concrete command is declared.
    - signature: Signature | Iterable[Value | Option], defaults to empty (or inherited).
    - help: str | Iterable[str], defaults to empty (or inherited).

    The sanitized values are stored on the class as _id, _signature and _help,
    and surface as read-only properties through __introspectable__.
    """
    __introspectable__ = ()

    def __new__(cls, name, bases, namespace, **options):
        # Plain class attributes are accepted as declarations too (id = "serve").
        namespace = dict(namespace)
        for key in ("id", "signature", "help"):
            if key in namespace and not isinstance(namespace[key], property):
                options.setdefault(key, namespace.pop(key))

        self = super().__new__(
            cls,
            name,
            bases,
            namespace | {
                "__typename__": re.sub(r"(?<!^)(?=[A-Z])", r"-", name).lower(),
            } | {
                name: mirror(name) for name in namespace.get("__introspectable__", ())
            },
        )

        if "id" in options:
            self._id = _process_id(self, options.pop("id"))
        if "signature" in options:
            self._signature = Signature.coerce(options.pop("signature"))
        if "help" in options:
            self._help = _process_help(self, options.pop("help"))
        if options:
            raise TypeError(f"{self.__typename__} got unexpected class keywords: {', '.join(options)}")

        @rename("__repr__")
        def __repr__(self):
            return "%s(id=%r, signature=%r)" % (type(self).__typename__, self.id, self.signature)
        self.__repr__ = __repr__

        return self

    def __init__(cls, name, bases, namespace, **options):
        super().__init__(name, bases, namespace)


class Command(metaclass=CommandType):
    """
    Abstract command: an id, an optional signature and a run operation.

    Parameters
    - console: Console | Unset
      Where the command writes. When Unset, the runner binds its own console at
      registration time.

    Properties
    - id, signature, help: class-level identity (read-only).
    - console: the bound console (AttributeError until one is bound).
    """

    __introspectable__ = (
        "id",
        "signature",
        "help",
    )

    _signature = Signature()
    _help = ()

    def __init__(self, console=Unset, /):
        if not isinstance(console, Console | Unset):
            raise TypeError(f"{type(self).__typename__} 'console' must be a console")
        if not hasattr(type(self), "_id"):
            raise TypeError(f"{type(self).__typename__} must declare an 'id' class keyword")
        self._console = console

    @property
    def console(self):
        if self._console is Unset:
            raise AttributeError(f"{type(self).__typename__} {self.id!r} has no console bound")
        return self._console

    def bind(self, console, /):
        """
        Bind console unless one was given at construction; return the bound console.
        """
        if not isinstance(console, Console):
            raise TypeError("bind() argument must be a console")
        if self._console is Unset:
            self._console = console
        return self._console

    @abstractmethod
    def run(self, arguments, /):
        """
        Execute the command with its command-local arguments.

        Errors raised here propagate unchanged to the caller of Runner.run().
        """

    def usage(self, executable, /):
        """
        Render this command's usage line for the given executable path.
        """
        return self.signature.usage(executable, self.id)

    def value(self, name, arguments, /):
        """
        Positional token bound to the Value named name in this command's signature.

        Raises MissingArgumentError when it is undeclared or absent.
        """
        return value(name, arguments, self.signature)

    def option(self, name, arguments, /):
        """
        Payload of --name=value / --name in arguments, or None.
        """
        return option(name, arguments)


def command(id, /, signature=(), help=(), *, console=Unset):
    """
    Return a decorator that turns a function into a Command instance.

    The function is called as function(command, arguments), where command is
    the generated Command (so it can reach command.console, command.value(...)
    and command.option(...)).

    Parameters
    - id: str, the command id.
    - signature: Signature | Iterable[Value | Option].
    - help: str | Iterable[str].
    - console: Console | Unset, bound now or later by the runner.

    Example
        @command("test-1")
        def test(self, arguments):
            self.console.print("Test 1 Ran")
    """
    id = _process_id(Command, id)

    @rename("command")
    def wrapper(function, /):
        if not callable(function):
            raise TypeError("@command() must be applied to a callable")

        @rename("run")
        def run(self, arguments, /):
            return function(self, arguments)

        name = "".join(part.title() for part in re.split(r"[^0-9A-Za-z]+", id) if part) or "Function"
        factory = type(Command)(
            name + "Command",
            (Command,),
            {"run": run, "__doc__": function.__doc__, "__wrapped__": function},
            id=id,
            signature=signature,
            help=help,
        )
        return factory(console)

    return wrapper


__all__ = (
    "Command",
    "command",
)

# Keep the metaclass out of star-imports; reach it through type(Command).
del CommandType
