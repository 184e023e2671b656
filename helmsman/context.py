"""
Per-invocation state threaded through validators, middleware and handlers.

A Context is created by the dispatcher for one argument vector and discarded
afterwards. It holds
- the bound positional values (see Parser for the binding rules),
- one tagged Value per flag of the command (global flags included),
- which flags were explicitly set (command line or environment),
- the detected interactivity and the application streams,
- the owning App and Command.

Reads never fail: an unknown flag name, or a payload that cannot be
interpreted as the requested type, reads as that type's zero value.
"""
import os
import sys

from rich.text import Text

from . import values
from .utils import console

_WRITERS = {
    # name: (stream, style)
    "success": ("stdout", "green"),
    "info": ("stdout", "cyan"),
    "warn": ("stderr", "yellow"),
    "fail": ("stderr", "red"),
}


class Context:
    def __init__(
            self,
            app=None,
            command=None,
            /,
            *,
            interactive=False,
            stdin=None,
            stdout=None,
            stderr=None,
            environ=None,
            color=True,
    ):
        self._app = app
        self._command = command
        self._interactive = bool(interactive)
        self._stdin = stdin
        self._stdout = stdout
        self._stderr = stderr
        self._environ = environ
        self._color = color
        self._positional = []
        self._values = {}
        self._set = {}
        self._consoles = {}
        self.auth_key = ""

    # --- ownership and environment ---

    @property
    def app(self):
        return self._app

    @property
    def command(self):
        return self._command

    @property
    def interactive(self):
        return self._interactive

    @property
    def stdin(self):
        return self._stdin if self._stdin is not None else sys.stdin

    @property
    def environ(self):
        """the environment this invocation was parsed against."""
        return self._environ if self._environ is not None else os.environ

    @property
    def stdout(self):
        return self._stdout if self._stdout is not None else sys.stdout

    @property
    def stderr(self):
        return self._stderr if self._stderr is not None else sys.stderr

    # --- population (parser and config loader) ---

    def assign(self, name, value, /, *, explicit=False):
        """store value for flag name; explicit marks it as set."""
        if not isinstance(value, values.Value):
            raise TypeError("Context.assign() value must be a Value")
        self._values[name] = value
        self._set[name] = bool(explicit)

    def bind(self, positional, /):
        """replace the positional values."""
        self._positional = list(positional)

    def lookup(self, name, /):
        """the stored Value of flag name (an empty text value when unknown)."""
        return self._values.get(name, values.MISSING)

    # --- typed reads ---

    def string(self, name, /):
        return values.as_string(self.lookup(name))

    def int(self, name, /):
        return values.as_int(self.lookup(name))

    def float(self, name, /):
        return values.as_float(self.lookup(name))

    def bool(self, name, /):
        return values.as_bool(self.lookup(name))

    def duration(self, name, /):
        return values.as_duration(self.lookup(name))

    def strings(self, name, /):
        return values.as_strings(self.lookup(name))

    def ints(self, name, /):
        return values.as_ints(self.lookup(name))

    def is_set(self, name, /):
        """True when name came from the command line or its environment variable."""
        return self._set.get(name, False)

    # --- positional access ---

    def arg(self, index, /):
        """the positional value at index, or "" when out of range."""
        if 0 <= index < len(self._positional):
            return self._positional[index]
        return ""

    @property
    def args(self):
        return list(self._positional)

    @property
    def nargs(self):
        return len(self._positional)

    # --- output ---

    def _console(self, stream):
        if (writer := self._consoles.get(stream)) is None or writer.file is not getattr(self, stream):
            writer = self._consoles[stream] = console(getattr(self, stream), color=self._color)
        return writer

    def print(self, *objects, sep=" ", end="\n"):
        """write objects to the output stream."""
        self._console("stdout").print(*objects, sep=sep, end=end)

    def error(self, *objects, sep=" ", end="\n"):
        """write objects to the error stream."""
        self._console("stderr").print(*objects, sep=sep, end=end)

    def _write(self, kind, message, args):
        stream, style = _WRITERS[kind]
        self._console(stream).print(Text(message % args if args else message, style))

    def success(self, message, /, *args):
        """green message on the output stream; message is %-formatted with args."""
        self._write("success", message, args)

    def info(self, message, /, *args):
        """cyan message on the output stream."""
        self._write("info", message, args)

    def warn(self, message, /, *args):
        """yellow message on the error stream."""
        self._write("warn", message, args)

    def fail(self, message, /, *args):
        """red message on the error stream."""
        self._write("fail", message, args)

    def confirm(self, message, /):
        """
        ask a yes/no question and block until one line is read from stdin.

        prints "<message> [y/N]: " to the output stream; only "y" and "yes"
        (any case) count as yes. end of input counts as no.
        """
        self._console("stdout").print("%s [y/N]: " % message, end="")
        self.stdout.flush()
        answer = self.stdin.readline()
        return answer.strip().lower() in ("y", "yes")

    def __repr__(self):
        return "Context(command=%r, args=%r, set=%r)" % (
            getattr(self._command, "path", None),
            self._positional,
            sorted(name for name, flag in self._set.items() if flag),
        )


__all__ = (
    "Context",
)
