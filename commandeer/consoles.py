"""
Commandeer console port.

Commands and the runner never write to a terminal directly: they talk to a
Console, an abstract capability for output (with style), output capture,
screen clearing, and external command execution. A concrete adapter is
injected at construction time.

What this module provides
- ConsoleStyle: semantic output styles (plain, info, warning, error, success).
  A raw rich style string (e.g. "bold magenta") is accepted wherever a
  ConsoleStyle is.
- ConsoleClear: what clear() wipes (the whole screen or the last line).
- Console: the abstract port plus print/info/warning/error/success helpers.
- TerminalConsole: real adapter backed by rich.console.Console and subprocess.
- BufferConsole: in-memory adapter that accumulates output for later capture().

Styling
- TerminalConsole resolves ConsoleStyle members through a palette that the host
  can override with a __styles__ mapping in __main__, keyed by the style value
  ("info", "warning", ...).
"""
import subprocess
from abc import ABC, abstractmethod
from collections import defaultdict
from enum import Enum

from rich.console import Console as RichConsole
from rich.control import Control
from rich.segment import ControlType

from .faults import ExecutionError
from .utils import *


class ConsoleStyle(Enum):
    PLAIN = "plain"
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"
    SUCCESS = "success"


class ConsoleClear(Enum):
    SCREEN = "screen"
    LINE = "line"


class Console(ABC):
    """
    Abstract console capability.

    Adapters implement output(), clear(), execute(), subexecute() and size;
    capture() is optional (an inspection aid for doubles and tests).
    """

    @abstractmethod
    def output(self, text, /, style=ConsoleStyle.PLAIN, newline=True):
        """
        Write text with the given style, followed by a newline unless newline is False.
        """

    def capture(self):
        """
        Return all output written since the previous capture() and forget it.

        Production adapters are not required to keep their output around.
        """
        raise NotImplementedError(f"{type(self).__name__} does not support output capture")

    @abstractmethod
    def clear(self, mode, /):
        """
        Clear the screen or the last line (see ConsoleClear).
        """

    @abstractmethod
    def execute(self, command, /):
        """
        Run a shell command attached to the terminal.
        """

    @abstractmethod
    def subexecute(self, command, input, /):
        """
        Run a shell command feeding it input and return what it printed.
        """

    @property
    @abstractmethod
    def size(self):
        """
        (width, height) of the output surface.
        """

    def print(self, text="", /, newline=True):
        self.output(text, ConsoleStyle.PLAIN, newline)

    def info(self, text="", /, newline=True):
        self.output(text, ConsoleStyle.INFO, newline)

    def warning(self, text="", /, newline=True):
        self.output(text, ConsoleStyle.WARNING, newline)

    def error(self, text="", /, newline=True):
        self.output(text, ConsoleStyle.ERROR, newline)

    def success(self, text="", /, newline=True):
        self.output(text, ConsoleStyle.SUCCESS, newline)


class TerminalConsole(Console):
    """
    Console adapter for a real terminal.

    Parameters
    - console: rich.console.Console | Unset
      The rich console to write to. A fresh stdout console when Unset.
    - shell: str | Unset
      Executable used for execute()/subexecute(); the platform default shell
      when Unset.
    """

    def __init__(self, console=Unset, /, *, shell=Unset):
        if not isinstance(console, RichConsole | Unset):
            raise TypeError("terminal console 'console' must be a rich console")
        if not isinstance(shell, str | Unset):
            raise TypeError("terminal console 'shell' must be a string")
        self._console = coalesce(console, RichConsole(highlight=False))
        self._shell = coalesce(shell)

    @property
    def console(self):
        return self._console

    def _resolve(self, style):
        main = __import__("__main__")

        styles = defaultdict(str, {
            "plain": "",
            "info": "#00E5FF",  # neon cyan
            "warning": "bold #FFB400",  # amber
            "error": "bold #FF4DA6",  # pinky red
            "success": "bold #9CE19C",  # gentle green
        } | getattr(main, "__styles__", {}))

        if isinstance(style, ConsoleStyle):
            return styles[style.value]
        if isinstance(style, str):
            return style
        raise TypeError("output() style must be a console style or a string")

    def output(self, text, /, style=ConsoleStyle.PLAIN, newline=True):
        self._console.print(
            text,
            style=self._resolve(style) or None,
            end="\n" if newline else "",
            markup=False,
            highlight=False,
            soft_wrap=True,
        )

    def clear(self, mode, /):
        if mode is ConsoleClear.SCREEN:
            self._console.clear()
        elif mode is ConsoleClear.LINE:
            # cursor up one line, then erase it
            self._console.control(Control.move(0, -1), Control((ControlType.ERASE_IN_LINE, 2)))
        else:
            raise TypeError("clear() argument must be a console clear mode")

    def execute(self, command, /):
        status = subprocess.run(command, shell=True, executable=self._shell).returncode
        if status:
            raise ExecutionError(
                "command %r exited with status %d" % (command, status),
                command=command,
                status=status,
                hint="run the command by itself to inspect its output",
            )

    def subexecute(self, command, input, /):
        completed = subprocess.run(
            command,
            shell=True,
            executable=self._shell,
            input=input,
            capture_output=True,
            text=True,
        )
        if completed.returncode:
            raise ExecutionError(
                "command %r exited with status %d" % (command, completed.returncode),
                command=command,
                status=completed.returncode,
                output=completed.stderr,
                hint="run the command by itself to inspect its output",
            )
        return completed.stdout

    @property
    def size(self):
        width, height = self._console.size
        return width, height


class BufferConsole(Console):
    """
    In-memory console.

    Output is accumulated as plain text (style and newline are ignored, so
    consecutive outputs concatenate) until capture() hands it back. execute()
    only records the command; subexecute() records it and returns reply.
    """

    def __init__(self, reply=""):
        self._buffer = []
        self._executed = []
        self._clears = []
        self._reply = reply

    @property
    def executed(self):
        return tuple(self._executed)

    @property
    def clears(self):
        return tuple(self._clears)

    def output(self, text, /, style=ConsoleStyle.PLAIN, newline=True):
        self._buffer.append(str(text))

    def capture(self):
        output = "".join(self._buffer)
        self._buffer.clear()
        return output

    def clear(self, mode, /):
        self._clears.append(mode)

    def execute(self, command, /):
        self._executed.append(command)

    def subexecute(self, command, input, /):
        self._executed.append(command)
        return self._reply

    @property
    def size(self):
        return 0, 0


__all__ = (
    "ConsoleStyle",
    "ConsoleClear",
    "Console",
    "TerminalConsole",
    "BufferConsole",
)
