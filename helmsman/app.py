"""
Helmsman application registry.

App
- Owns the keyed collections of commands and groups, the global flags, the
  global middleware, the root action, the config files, the IO streams and the
  interactivity override.
- Definitions are built once with chained builder calls; the first dispatch
  checks them (flag names and short names unique across global flags and each
  command's flags) and seals them. IO streams and the interactivity override
  remain adjustable afterwards.

Running
- execute(prompt) resolves, parses and dispatches one argument vector and
  returns the handler's result; faults propagate as exceptions.
- run(prompt) does the same but renders faults to the error stream and returns
  the exit code (0 success or help, N for ExitRequest(N), 1 otherwise).
- main(prompt) exits the process with run()'s exit code.

prompt is Unset (use sys.argv[1:]), a string (split like a shell would, with
shlex) or an iterable of strings.
"""
import os
import shlex
import sys
from collections.abc import Iterable

from .arguments import Arg, Flag
from .commands import Command, Group, _check_name
from .faults import CommandException, ExitRequest, exit_code, is_help_requested
from .utils import Unset, coalesce, console, mirror


def _isatty(stream):
    try:
        return bool(stream.isatty())
    except (AttributeError, ValueError):
        return False


class App:
    def __init__(self, name, description="", /, *, version="", color=True):
        if not isinstance(name, str) or not name:
            raise ValueError("application name must be a non-empty string")
        self._name = name
        self._description = description
        self._version = version
        self._color = bool(color)
        self._root = Command(name, description)
        self._commands = {}
        self._groups = {}
        self._flags = []
        self._middleware = []
        self._config_files = []
        self._stdin = None
        self._stdout = None
        self._stderr = None
        self._interactive = None
        self._sealed = False

    name = mirror("name")
    description = mirror("description")
    version = mirror("version")
    color = mirror("color")
    commands = mirror("commands")
    groups = mirror("groups")
    flags = mirror("flags")
    middleware = mirror("middleware")
    config_paths = mirror("config_files")
    interactive_override = mirror("interactive")

    @property
    def root(self):
        """the command holding the root action, its args and validators."""
        return self._root

    @property
    def stdin(self):
        return self._stdin if self._stdin is not None else sys.stdin

    @property
    def stdout(self):
        return self._stdout if self._stdout is not None else sys.stdout

    @property
    def stderr(self):
        return self._stderr if self._stderr is not None else sys.stderr

    def _open(self):
        if self._sealed:
            raise RuntimeError("application %r can no longer be modified once dispatch has begun" % self._name)
        return self

    # --- registry ---

    def command(self, name, description="", /):
        """return the top-level command called name, creating it when needed."""
        if (existing := self._commands.get(name)) is not None:
            return existing
        self._open()
        if name in self._groups:
            raise ValueError("command %r would shadow the group of the same name" % name)
        command = self._commands[_check_name("command", name)] = Command(name, description)
        return command

    def group(self, name, description="", /):
        """return the group called name, creating it when needed."""
        if (existing := self._groups.get(name)) is not None:
            return existing
        self._open()
        if name in self._commands:
            raise ValueError("group %r would shadow the command of the same name" % name)
        group = self._groups[name] = Group(name, description)
        return group

    def global_flags(self, *flags):
        """register flags available to every command."""
        self._open()
        for flag in flags:
            if not isinstance(flag, Flag):
                raise TypeError("global_flags() arguments must be flags, not %s" % type(flag).__name__)
            if self.find_global_flag(flag.name) is not None:
                raise ValueError("global flag --%s is declared more than once" % flag.name)
            if flag.short and self.find_global_flag(flag.short, short=True) is not None:
                raise ValueError("global short flag -%s is declared more than once" % flag.short)
            self._flags.append(flag)
        return self

    def use(self, *middleware):
        """register middleware wrapping every handler (inside command middleware)."""
        self._open()
        for item in middleware:
            if not callable(item):
                raise TypeError("middleware must be callable, not %s" % type(item).__name__)
            self._middleware.append(item)
        return self

    def action(self, handler, /):
        """the handler run when no command is given."""
        self._open()
        self._root.run(handler)
        return self

    def with_args(self, *specs):
        self._open()
        self._root.with_args(*specs)
        return self

    def add_arg(self, arg, /):
        if not isinstance(arg, Arg):
            raise TypeError("add_arg() argument must be an Arg")
        self._open()
        self._root.add_arg(arg)
        return self

    def validate(self, *validators):
        self._open()
        self._root.validate(*validators)
        return self

    def config_files(self, *paths):
        """YAML files seeding flag values below environment variables."""
        self._open()
        self._config_files.extend(map(os.fspath, paths))
        return self

    def add_completion_command(self):
        """register "completion <shell>" printing a bash, zsh or fish script."""
        from .completions import install

        install(self)
        return self

    # --- runtime handles ---

    def force_interactive(self, value=True, /):
        """override terminal detection; None restores detection."""
        self._interactive = None if value is None else bool(value)
        return self

    def streams(self, stdin=Unset, stdout=Unset, stderr=Unset):
        """replace the IO streams (None restores the process streams)."""
        if stdin is not Unset:
            self._stdin = stdin
        if stdout is not Unset:
            self._stdout = stdout
        if stderr is not Unset:
            self._stderr = stderr
        return self

    def is_interactive(self):
        if self._interactive is not None:
            return self._interactive
        return _isatty(self.stdin) and _isatty(self.stdout)

    def console(self, stream, /):
        return console(stream, color=self._color)

    # --- lookups ---

    def find_global_flag(self, name, /, *, short=False):
        for flag in self._flags:
            if (flag.short if short else flag.name) == name:
                return flag
        return None

    def locate(self, token, /):
        """
        resolve a command-position token to (group, command).

        order: command name, command alias, "group:command" (subcommand name
        or alias), bare group name → (group, None). (None, None) when nothing
        matches.
        """
        if (command := self._commands.get(token)) is not None:
            return None, command
        for command in self._commands.values():
            if token in command.aliases:
                return None, command
        if ":" in token:
            prefix, _, suffix = token.partition(":")
            if (group := self._groups.get(prefix)) is not None and (command := group.find(suffix)) is not None:
                return group, command
            return None, None
        if (group := self._groups.get(token)) is not None:
            return group, None
        return None, None

    def walk(self):
        """every command of the registry: root, top-level, group actions, subcommands."""
        yield self._root
        yield from self._commands.values()
        for group in self._groups.values():
            yield group.action_command
            yield from group.commands.values()

    # --- lifecycle ---

    def seal(self):
        """check flag uniqueness for every command and freeze all definitions."""
        if self._sealed:
            return self
        for command in self.walk():
            names, shorts = {}, {}
            for flag in [*self._flags, *command.flags]:
                if (other := names.setdefault(flag.name, flag)) is not flag:
                    raise ValueError("flag --%s of %r conflicts with another flag of the same name" % (flag.name, command))
                if flag.short and (other := shorts.setdefault(flag.short, flag)) is not flag:
                    raise ValueError("short flag -%s of %r is shared by --%s and --%s" % (
                        flag.short, command, other.name, flag.name))
        self._root.seal()
        for command in self._commands.values():
            command.seal()
        for group in self._groups.values():
            group.seal()
        self._sealed = True
        return self

    @staticmethod
    def _tokenize(prompt):
        if prompt is Unset:
            return sys.argv[1:]
        if isinstance(prompt, str):
            return shlex.split(prompt)
        if not isinstance(prompt, Iterable):
            raise TypeError("prompt must be a string or an iterable of strings")
        tokens = list(prompt)
        if not all(isinstance(token, str) for token in tokens):
            raise TypeError("prompt must be a string or an iterable of strings")
        return tokens

    def execute(self, prompt=Unset, /, *, environ=Unset):
        """dispatch one argument vector; returns the handler result, raises faults."""
        from .dispatch import Dispatcher

        tokens = self._tokenize(prompt)
        self.seal()
        return Dispatcher(self, environ=coalesce(environ, os.environ)).dispatch(tokens)

    def report(self, error, /):
        """render a fault to the error stream (help and silent exits print nothing)."""
        if is_help_requested(error) or (isinstance(error, ExitRequest) and error.silent):
            return
        self.console(self.stderr).print(error.render(self._name))

    def run(self, prompt=Unset, /, *, environ=Unset):
        """dispatch, render any fault, and return the exit code."""
        try:
            self.execute(prompt, environ=environ)
        except CommandException as error:
            self.report(error)
            return exit_code(error)
        return 0

    def main(self, prompt=Unset, /):
        sys.exit(self.run(prompt))

    def __repr__(self):
        return "App(%r, commands=%r, groups=%r)" % (self._name, sorted(self._commands), sorted(self._groups))


__all__ = (
    "App",
)
