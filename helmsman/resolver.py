"""
Helmsman resolver: split an argument vector into global-flag tokens, a command
path and the tokens that belong to that command.

Behavior
- A single left-to-right scan with one token of lookahead.
- Flag-shaped tokens before the command are collected as global tokens:
  • known boolean global flags take no value;
  • known value-taking global flags take the next token (a parse error when
    there is none);
  • "--name=value" and "--help"/"-h" are kept as one token;
  • an unknown flag defers judgment: when the next token names a command or
    group the flag moves into that command's tokens, otherwise a following
    non-flag token is taken as its value and the per-command parser decides.
- The first non-flag token is the command position, resolved in order against
  the built-ins ("help", "version"), a command name, a command alias, the
  "group:command" compact form and a bare group name. A group then claims the
  next token when it names one of its subcommands (or an alias).
- "--" ends the scan: the very next token is still tried as a command, every
  token after it is handed to the command verbatim (behind a "--").
- When the command position resolves to nothing, the token is kept for an
  "unknown command" error, unless the application registers no commands and
  no groups at all: then every remaining token is positional input for the
  root action.

Flag shape
- Everything starting with "-" is flag-shaped except "-" itself and negative
  numbers ("-5", "-0.5", "-.5"). A flag literally named with a leading digit
  is therefore unsupported.
"""
import logging
import re
from typing import NamedTuple

from .faults import MissingValueError

log = logging.getLogger(__name__)

BUILTINS = ("help", "version")

_NUMERIC = re.compile(r"-(\d|\.\d)")


def looks_like_flag(token, /):
    """True when token is flag-shaped (see module documentation)."""
    if not token.startswith("-") or token == "-":
        return False
    return not _NUMERIC.match(token)


class Resolution(NamedTuple):
    """
    the outcome of resolving one argument vector.

    - head: global-flag tokens found before the command position.
    - name: the command-position token as typed (None when there was none).
    - builtin: "help" or "version" when the command position is a built-in.
    - group: the resolved Group, if any.
    - command: the resolved Command, if any.
    - tokens: the tokens left for the resolved command (or the root action).
    """
    head: tuple = ()
    name: str | None = None
    builtin: str | None = None
    group: object = None
    command: object = None
    tokens: tuple = ()

    @property
    def unknown(self):
        """a command position that matched nothing."""
        return self.name is not None and self.builtin is None and self.group is None and self.command is None

    @property
    def bare_group(self):
        """a group invoked without a subcommand."""
        return self.group is not None and self.command is None

    @property
    def missing_subcommand(self):
        """a bare group with no action of its own."""
        return self.bare_group and not self.group.runnable


class Resolver:
    def __init__(self, app, /):
        self._app = app

    def _global(self, token):
        """the known global flags spelled by token (a list), or None when unknown."""
        if token.startswith("--"):
            flag = self._app.find_global_flag(token[2:])
            return None if flag is None else [flag]
        flags = [self._app.find_global_flag(char, short=True) for char in token[1:]]
        return None if None in flags else flags

    def _known(self, token):
        return token in BUILTINS or self._app.locate(token) != (None, None)

    def _position(self, head, argv, index, verbatim=False):
        """resolve the command position argv[index] and finish the scan."""
        token = argv[index]
        rest = list(argv[index + 1:])
        guard = ["--"] if verbatim else []

        if token in BUILTINS:
            return Resolution(tuple(head), token, token, None, None, tuple(rest))

        group, command = self._app.locate(token)
        if command is not None:
            return Resolution(tuple(head), token, None, group, command, tuple(guard + rest))
        if group is not None:
            if rest and (command := group.find(rest[0])) is not None:
                return Resolution(tuple(head), token, None, group, command, tuple(guard + rest[1:]))
            return Resolution(tuple(head), token, None, group, None, tuple(guard + rest))

        if not self._app.commands and not self._app.groups:
            return Resolution(tuple(head), None, None, None, None, tuple(guard + [token] + rest))
        return Resolution(tuple(head), token, None, None, None, tuple(guard + rest))

    def resolve(self, argv, /):
        argv = list(argv)
        head = []
        index = 0

        while index < len(argv):
            token = argv[index]

            if token == "--":
                if index + 1 < len(argv):
                    return self._trace(self._position(head, argv, index + 1, verbatim=True))
                return self._trace(Resolution(tuple(head)))

            if not looks_like_flag(token):
                return self._trace(self._position(head, argv, index))

            if token in ("--help", "-h") or (token.startswith("--") and "=" in token):
                head.append(token)
                index += 1
                continue

            if (flags := self._global(token)) is None:
                following = argv[index + 1] if index + 1 < len(argv) else None
                if following is not None and not looks_like_flag(following):
                    if self._known(following):
                        resolution = self._position(head, argv, index + 1)
                        return self._trace(resolution._replace(tokens=(token,) + resolution.tokens))
                    head.extend((token, following))
                    index += 2
                    continue
                head.append(token)
                index += 1
                continue

            if not flags[-1].kind.takes_value:
                head.append(token)
                index += 1
                continue

            if index + 1 >= len(argv):
                spelled = token if token.startswith("--") else "-" + token[-1]
                raise MissingValueError(
                    "flag %s requires a value" % spelled,
                    hint="pass it as %s <value>" % spelled,
                    flag=flags[-1].name,
                )
            head.extend((token, argv[index + 1]))
            index += 2

        return self._trace(Resolution(tuple(head)))

    def _trace(self, resolution):
        log.debug(
            "resolved head=%r name=%r builtin=%r group=%r command=%r tokens=%r",
            resolution.head,
            resolution.name,
            resolution.builtin,
            resolution.group,
            resolution.command,
            resolution.tokens,
        )
        return resolution


__all__ = (
    "BUILTINS",
    "looks_like_flag",
    "Resolution",
    "Resolver",
)
