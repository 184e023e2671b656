"""
Helmsman dispatcher: run one argument vector against a sealed App.

Flow
1. Resolve the vector (helmsman.resolver).
2. Built-ins: "help [command|group]" and "version" print and return None.
   Flag-shaped tokens after "help" (and the values of global value flags)
   never name the help topic.
3. An unresolved command position fails as UnknownCommandError (with a
   did-you-mean hint); "group:missing" fails as UnknownSubcommandError.
4. A group without a subcommand and without an action renders its help on
   "--help"/"-h", rejects a stray word as UnknownSubcommandError, and fails
   with MissingSubcommandError otherwise.
5. Parse the target's tokens (global-flag tokens first) into a fresh Context.
   HelpRequested renders the target's help and propagates.
6. A root invocation without a root action renders the application help.
7. A deprecated command prints a warning to the error stream and still runs.
8. The handler variant is selected by interactivity and run inside the
   composed middleware chain (global inside, command outside).
"""
import difflib
import logging

from . import config, help
from .context import Context
from .faults import (
    DeprecatedCommandWarning,
    HelpRequested,
    MissingHandlerError,
    MissingSubcommandError,
    UnknownCommandError,
    UnknownSubcommandError,
)
from .middleware import compose
from .parser import Parser
from .resolver import Resolver, looks_like_flag

log = logging.getLogger(__name__)


def _visible(commands):
    return sorted(name for name, command in commands.items() if not command.hidden)


def _close(word, candidates):
    if matches := difflib.get_close_matches(word, list(candidates), n=1):
        return "did you mean '%s'?" % matches[0]
    return None


class Dispatcher:
    def __init__(self, app, /, *, environ=None):
        self._app = app
        self._environ = environ if environ is not None else {}

    def _print(self, renderable):
        self._app.console(self._app.stdout).print(renderable)

    # --- built-ins ---

    def _topic(self, tokens):
        """the words naming a help topic; flags, their values and "--" are skipped."""
        words = []
        queue = iter(tokens)
        for token in queue:
            if token == "--":
                continue
            if not looks_like_flag(token):
                words.append(token)
                continue
            if token.startswith("--"):
                flag = None if "=" in token else self._app.find_global_flag(token[2:])
            else:
                flag = self._app.find_global_flag(token[-1], short=True)
            if flag is not None and flag.kind.takes_value:
                next(queue, None)
        return words

    def _help(self, tokens):
        tokens = self._topic(tokens)
        if not tokens:
            self._print(help.render_app(self._app))
            return None
        group, command = self._app.locate(tokens[0])
        if command is not None:
            self._print(help.render_command(self._app, command))
        elif group is not None:
            if len(tokens) > 1 and (command := group.find(tokens[1])) is not None:
                self._print(help.render_command(self._app, command))
            else:
                self._print(help.render_group(self._app, group))
        else:
            raise self._unknown(tokens[0])
        return None

    def _version(self):
        if self._app.version:
            self._print("%s version %s" % (self._app.name, self._app.version))
        else:
            self._print("%s (no version set)" % self._app.name)
        return None

    # --- failures ---

    def _unknown(self, name):
        app = self._app
        if ":" in name:
            prefix, _, suffix = name.partition(":")
            if (group := app.groups.get(prefix)) is not None:
                return self._stray(group, suffix)
        candidates = _visible(app.commands) + sorted(app.groups)
        for command in app.commands.values():
            if not command.hidden:
                candidates.extend(command.aliases)
        return UnknownCommandError(
            "unknown command: %s" % name,
            hint=_close(name, candidates) or "run '%s help' for usage" % app.name,
            command=name,
        )

    def _stray(self, group, word):
        visible = _visible(group.commands)
        hint = _close(word, visible)
        if hint is None and visible:
            hint = "available commands: %s" % ", ".join(visible)
        return UnknownSubcommandError(
            "unknown subcommand '%s' for group '%s'" % (word, group.name),
            hint=hint,
            command=word,
        )

    def _orphan(self, resolution):
        """a group invoked bare, without an action of its own: never returns."""
        group = resolution.group
        tokens = [*resolution.head, *resolution.tokens]
        for token in tokens:
            if token == "--":
                break
            if token in ("--help", "-h"):
                self._print(help.render_group(self._app, group))
                raise HelpRequested(target=group)
        if resolution.tokens and not looks_like_flag(word := resolution.tokens[0]) and word != "--":
            raise self._stray(group, word)
        visible = _visible(group.commands)
        raise MissingSubcommandError(
            "group '%s' requires a subcommand" % group.name,
            hint="available commands: %s" % ", ".join(visible) if visible else None,
        )

    # --- dispatch ---

    def _target(self, resolution):
        """(command, path, render) for the resolved invocation."""
        app = self._app
        if resolution.command is not None:
            command = resolution.command
            return command, tuple(command.path.split()), lambda: help.render_command(app, command)
        if resolution.group is not None:
            group = resolution.group
            return group.action_command, (group.name,), lambda: help.render_group(app, group)
        return app.root, (), lambda: help.render_app(app)

    def _settings(self, path):
        if not (paths := self._app.config_paths):
            return {}
        return config.section(config.load(*paths), *path)

    def dispatch(self, argv, /):
        app = self._app
        resolution = Resolver(app).resolve(argv)

        match resolution.builtin:
            case "help":
                return self._help(list(resolution.tokens))
            case "version":
                return self._version()

        if resolution.unknown:
            raise self._unknown(resolution.name)
        if resolution.missing_subcommand:
            self._orphan(resolution)

        command, path, render = self._target(resolution)
        interactive = app.is_interactive()
        context = Context(
            app,
            command,
            interactive=interactive,
            stdin=app.stdin,
            stdout=app.stdout,
            stderr=app.stderr,
            environ=self._environ,
            color=app.color,
        )

        try:
            Parser(command, app.flags).parse(
                context,
                [*resolution.head, *resolution.tokens],
                environ=self._environ,
                config=self._settings(path),
            )
        except HelpRequested:
            self._print(render())
            raise

        if command is app.root and not command.runnable:
            self._print(help.render_app(app))
            return None

        if command.deprecation:
            warning = DeprecatedCommandWarning(
                "command '%s' is deprecated: %s" % (command.path, command.deprecation),
            )
            app.console(app.stderr).print(warning.render(app.name))

        if (handler := command.select(interactive)) is None:
            raise MissingHandlerError(
                "no handler defined for command: %s" % command.path,
                hint="register one with .run(handler)",
            )

        log.debug("dispatching %r (interactive=%s) to %s", command, interactive,
                  getattr(handler, "__qualname__", repr(handler)))
        return compose(handler, app.middleware, command.middleware)(context)


__all__ = (
    "Dispatcher",
)
