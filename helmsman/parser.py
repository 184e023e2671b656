"""
Helmsman parser: populate a Context from a command's tokens.

Passes
1. Seeding. Every flag visible to the command (global flags first, then the
   command's own) gets a value: its environment variable when present, even
   empty (marked set), else a config value (unmarked), else its default
   (unmarked).
2. Token scan, left to right:
   • "--" sends every remaining token to the positional overflow verbatim;
   • "--name=value" splits on the first "=";
   • "--name" sets a boolean flag, or takes the next token as the value;
   • "-xyz" toggles boolean short flags; only the last letter may take a value;
   • "--help" / "-h" raise HelpRequested;
   • anything else (including "-" and negative numbers) is positional.
   Every value is checked against the flag's allowed values and validator.
   List flags accumulate; the first explicit value replaces the seeded one.
3. Positional binding: overflow tokens bind to the declared args by index; a
   missing required arg is an error, a missing optional arg binds its
   stringified default when it has one. When there are more tokens than
   declared args, the whole overflow list is exposed instead.
4. Required flags (not set on the command line or through the environment)
   are rejected, then the command validators run in declaration order.

Failures raise ParseError / ValidationError subclasses (see helmsman.faults);
nothing has been dispatched yet when they do.
"""
import difflib
import logging
from collections import deque

from .arguments import Kind
from .faults import (
    HelpRequested,
    InvalidChoiceError,
    InvalidValueError,
    MalformedTokenError,
    MissingArgumentError,
    MissingFlagError,
    MissingValueError,
    UnknownFlagError,
    ValidationError,
)
from .resolver import looks_like_flag
from .utils import Unset, ordinal
from .values import Tag, Value, stringify

log = logging.getLogger(__name__)


def _suggest(word, candidates):
    if matches := difflib.get_close_matches(word, list(candidates), n=1):
        return "did you mean %s?" % matches[0]
    return None


class Parser:
    """
    Parser(command, global_flags=(), /)

    Parses token lists for one command; holds no per-invocation state, so one
    instance can parse any number of vectors.
    """

    def __init__(self, command, global_flags=(), /):
        self._command = command
        self._flags = [*global_flags, *command.flags]
        self._long = {}
        self._short = {}
        for flag in self._flags:
            self._long.setdefault(flag.name, flag)
            if flag.short:
                self._short.setdefault(flag.short, flag)

    @property
    def flags(self):
        return list(self._flags)

    def parse(self, context, tokens, /, *, environ=None, config=None):
        """run the four passes over tokens, filling context."""
        self._seed(context, environ or {}, config or {})
        overflow = self._scan(context, tokens)
        self._bind(context, overflow)
        self._check(context)
        log.debug("parsed %r: args=%r set=%r", self._command, context.args,
                  [flag.name for flag in self._flags if context.is_set(flag.name)])
        return context

    # --- pass 1 ---

    def _seed(self, context, environ, config):
        for flag in self._flags:
            if flag.env and flag.env in environ:
                log.debug("flag --%s seeded from $%s", flag.name, flag.env)
                context.assign(flag.name, Value.text(environ[flag.env]), explicit=True)
            elif (key := self._config_key(flag.name, config)) is not None:
                log.debug("flag --%s seeded from config key %r", flag.name, key)
                context.assign(flag.name, Value.loaded(flag.kind, config[key]))
            else:
                context.assign(flag.name, Value.initial(flag))

    @staticmethod
    def _config_key(name, config):
        for key in (name, name.replace("-", "_")):
            if key in config:
                return key
        return None

    # --- pass 2 ---

    def _scan(self, context, tokens):
        queue = deque(tokens)
        overflow = []
        explicit = set()

        while queue:
            token = queue.popleft()

            if token == "--":
                overflow.extend(queue)
                break

            if not looks_like_flag(token):
                overflow.append(token)
                continue

            if token.startswith("--"):
                name, separator, value = token[2:].partition("=")
                if not name:
                    raise MalformedTokenError(
                        "malformed flag: %s" % token,
                        hint="use --name=value or --name value",
                    )
                if name == "help":
                    raise HelpRequested(target=self._command)
                if (flag := self._long.get(name)) is None:
                    raise UnknownFlagError(
                        "unknown flag: --%s" % name,
                        hint=_suggest("--" + name, ("--" + known for known in self._long)),
                        flag=name,
                    )
                if separator:
                    self._set(context, flag, value, explicit)
                elif flag.kind.takes_value:
                    self._set(context, flag, self._take(queue, "--" + name), explicit)
                else:
                    self._toggle(context, flag, explicit)
                continue

            letters = token[1:]
            for position, letter in enumerate(letters):
                if letter == "h":
                    raise HelpRequested(target=self._command)
                if (flag := self._short.get(letter)) is None:
                    if len(letters) > 1:
                        hint = "the %s letter of %s is not a known short flag" % (ordinal(position + 1), token)
                    else:
                        hint = _suggest("--" + letter, ("--" + known for known in self._long))
                    raise UnknownFlagError("unknown flag: -%s" % letter, hint=hint, flag=letter)
                if not flag.kind.takes_value:
                    self._toggle(context, flag, explicit)
                elif position < len(letters) - 1:
                    raise MissingValueError(
                        "flag -%s requires a value" % letter,
                        hint="only the last flag of %s may take a value" % token,
                        flag=flag.name,
                    )
                else:
                    self._set(context, flag, self._take(queue, "-" + letter), explicit)

        return overflow

    @staticmethod
    def _take(queue, spelled):
        if queue and not looks_like_flag(queue[0]):
            return queue.popleft()
        raise MissingValueError(
            "flag %s requires a value" % spelled,
            hint="pass it as %s <value>" % spelled,
        )

    def _toggle(self, context, flag, explicit):
        context.assign(flag.name, Value(Tag.BOOL, True), explicit=True)
        explicit.add(flag.name)

    def _set(self, context, flag, raw, explicit):
        """validate raw for flag and store it (accumulating for list kinds)."""
        if flag.enum and raw not in flag.enum:
            raise InvalidChoiceError(
                "invalid value for --%s: %s (allowed: %s)" % (flag.name, raw, ", ".join(flag.enum)),
                hint=_suggest(raw, flag.enum),
                flag=flag.name,
            )
        if flag.validator is not None:
            try:
                flag.validator(raw)
            except (ValueError, ValidationError) as error:
                raise InvalidValueError(
                    "invalid value for --%s: %s" % (flag.name, error),
                    flag=flag.name,
                ) from error

        previous = ()
        if flag.kind.repeatable and flag.name in explicit:
            previous = context.lookup(flag.name).payload

        match flag.kind:
            case Kind.STRINGS:
                value = Value(Tag.TEXTS, (*previous, raw))
            case Kind.INTS:
                try:
                    number = int(raw.strip())
                except ValueError:
                    raise InvalidValueError(
                        "invalid integer for --%s: %s" % (flag.name, raw),
                        flag=flag.name,
                    ) from None
                value = Value(Tag.INTS, (*previous, number))
            case _:
                value = Value.text(raw)

        context.assign(flag.name, value, explicit=True)
        explicit.add(flag.name)

    # --- pass 3 ---

    def _bind(self, context, overflow):
        declared = self._command.args
        if len(overflow) > len(declared):
            context.bind(overflow)
            return
        bound = []
        for index, arg in enumerate(declared):
            if index < len(overflow):
                bound.append(overflow[index])
            elif arg.required:
                raise MissingArgumentError(
                    "missing required argument: %s" % arg.name,
                    hint="expected %s as the %s argument" % (arg.usage, ordinal(index + 1)),
                    argument=arg.name,
                )
            elif arg.default is not None and arg.default is not Unset:
                bound.append(stringify(arg.default))
        context.bind(bound)

    # --- pass 4 ---

    def _check(self, context):
        for flag in self._flags:
            if flag.required and not context.is_set(flag.name):
                raise MissingFlagError(
                    "missing required flag: --%s" % flag.name,
                    hint=self._remedy(flag),
                    flag=flag.name,
                )
        for validator in self._command.validators:
            validator(context)

    @staticmethod
    def _remedy(flag):
        usage = "--%s <value>" % flag.name if flag.kind.takes_value else "--%s" % flag.name
        if flag.env:
            return "pass %s or set $%s" % (usage, flag.env)
        return "pass %s" % usage


__all__ = (
    "Parser",
)
