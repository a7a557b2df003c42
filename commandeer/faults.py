"""
Commandeer faults (errors) and rendering.

Scope
- FaultCode: canonical, stable numeric identifiers for every user-facing issue
  raised by the dispatch layer (routing, registration, signatures, consoles).
- CommandException: base type that carries a message plus options and knows how
  to render itself in a friendly, lowercased, and actionable way.
- trigger(): central entry point to surface any fault (raise, or print and exit
  in shell mode).

UX goals
- Short titles, one-sentence bodies, a single clear hint.
- Lowercased tone with readable styling (configurable via __styles__ in __main__).

Integration
- The runner builds faults while resolving and validating, then calls
  trigger(fault, **ctx). In non-shell mode the fault is raised to the caller of
  Runner.run(); in shell mode it is rendered to stderr via rich and the process
  exits with status 1.
"""
import os.path
import sys
from collections import defaultdict
from enum import IntEnum
from types import MappingProxyType

from rich.console import Console, Group
from rich.panel import Panel
from rich.text import Text

from .utils import Unset

console = Console(stderr=True)


class FaultCode(IntEnum):
    """
    canonical fault codes used across the dispatch layer (stable identifiers).

    grouping (by high-level domain)
    - routing (1110x)
      • UNKNOWN_COMMAND, DUPLICATE_COMMAND
    - signatures (1112x)
      • MISSING_ARGUMENT, USAGE
    - consoles (1113x)
      • EXECUTION_FAILED

    numeric ranges leave room for future additions without reshuffling existing
    codes; normalize() lets the host remap them to its own labels.
    """
    # --- routing errors (11xxx) ---
    UNKNOWN_COMMAND   = 11101
    DUPLICATE_COMMAND = 11102

    # --- signature errors (11xxx) ---
    MISSING_ARGUMENT  = 11121
    USAGE             = 11122

    # --- console errors (11xxx) ---
    EXECUTION_FAILED  = 11131

    def normalize(self):
        """
        return a host-normalized string for this code.

        the host application can provide a __codes__ mapping in __main__
        to override numeric ids with friendlier labels. when no mapping
        is present, the numeric value is returned as a string.
        """
        return str(getattr(__import__("__main__"), "__codes__", {}).get(self, self.value))


class CommandException(Exception):
    """
    base fault of the dispatch layer.

    the message is the exception text; every other piece of context (code,
    title, hint, offending id or name, runtime flags) travels in a read-only
    options mapping that is also reachable through attribute access:

        >>> error = MissingArgumentError("missing argument 'path'", name="path")
        >>> error.name
        'path'
    """
    _code = Unset
    _title = Unset

    def __init__(self, message=Unset, /, **options):
        assert isinstance(message, str | Unset)
        super().__init__(*(() if message is Unset else (message,)))
        self.message = message
        self.options = MappingProxyType(options)

    def __getattr__(self, name):
        # options is set in __init__; guard against lookups before it exists
        if name == "options":
            raise AttributeError(name)
        try:
            return self.options[name]
        except KeyError:
            raise AttributeError(f"{type(self).__name__!r} object has no attribute {name!r}") from None

    def __str__(self):
        return "" if self.message is Unset else self.message

    @property
    def code(self):
        return self.options.get("code", type(self)._code)

    @property
    def title(self):
        return self.options.get("title", type(self)._title)

    def __rich__(self):
        main = __import__("__main__")

        styles = defaultdict(str, {
            # header parts
            "prog-name": "bold #E6E6F0",  # near-white program name
            "code": "bold #00E5FF",  # neon cyan fault code
            "error-title": "bold #FF4DA6",  # friendly pinky title

            # body
            "error-message": "#C8C8D0",  # soft light gray message
            "hint-arrow": "#9CE19C dim",  # gentle green arrow
            "hint": "italic #9CE19C",  # gentle green hint text
        } | getattr(main, "__styles__", {}))

        colorful = self.options.get("colorful", False)
        fancy = self.options.get("fancy", False)

        def styler(style):
            return styles[style] if colorful else ""

        def text(fragment, style=""):
            if not fragment:
                return Text("")
            if not colorful:
                return Text(str(fragment))
            if isinstance(fragment, Text):
                return fragment
            return Text(str(fragment), style)

        tool = self.options.get("tool")
        executable = getattr(tool, "executable", None) or next(iter(sys.argv), "") or "commandeer"
        prog = text(getattr(main, "__prog__", os.path.basename(executable)), styler("prog-name"))

        code = self.code.normalize() if isinstance(self.code, FaultCode) else "?"
        header = Text.assemble(
            "[ ",
            prog,
            " — ",
            text(code, styler("code")),
            " | ",
            text(str(self.title or "error").title(), styler("error-title")),
            " ]"
        )
        message = text(str(self), styler("error-message"))
        renderables = [message]
        if hint := self.options.get("hint"):
            renderables.append(Text.assemble(text(" → ", styler("hint-arrow")), text(hint, styler("hint"))))

        if fancy:
            return Panel(Group(*renderables), title=header, title_align="left")

        return Group(header, *renderables)

    def __trigger__(self) -> None:
        if not self.options.get("shell", False):
            raise self from None
        console.print(self)
        sys.exit(1)

    def __replace__(self, *unused, **overrides):
        assert not unused, "unused arguments are not allowed"
        return type(self)(self.message, **{**self.options, **overrides})


class CommandNotFoundError(CommandException):
    _code = FaultCode.UNKNOWN_COMMAND
    _title = "unknown command"


class DuplicateIdError(CommandException):
    _code = FaultCode.DUPLICATE_COMMAND
    _title = "duplicated command"


class MissingArgumentError(CommandException):
    _code = FaultCode.MISSING_ARGUMENT
    _title = "missing argument"


class UsageError(CommandException):
    _code = FaultCode.USAGE
    _title = "usage"


class ExecutionError(CommandException):
    _code = FaultCode.EXECUTION_FAILED
    _title = "execution failed"


def trigger(fault, /, **options):
    """
    surface a fault with the given runtime options.

    contract
    - fault must provide __trigger__ and __replace__ methods (see CommandException).
    - options are merged into a copy of the fault via __replace__(**options)
      before triggering.
    - with shell=False (the default) the fault is raised; with shell=True it is
      rendered through rich to stderr and the process exits with status 1.

    typical options
    - tool, shell, fancy, colorful, hint, and any context the renderer may want
      to show (id, name, usage, suggestions).
    """
    if (
        not hasattr(fault, "__trigger__") or
        not callable(fault.__trigger__) or
        not hasattr(fault, "__replace__") or
        not callable(fault.__replace__)
    ):
        raise TypeError("trigger() argument must have a __trigger__ and __replace__ methods")
    fault.__replace__(**options).__trigger__()


__all__ = (
    "FaultCode",
    "CommandException",
    "CommandNotFoundError",
    "DuplicateIdError",
    "MissingArgumentError",
    "UsageError",
    "ExecutionError",
    "trigger",
)
