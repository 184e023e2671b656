"""
Helmsman commands: Command and Group definitions.

Command
- Owns its flags, positional args, validators, middleware, aliases and up to
  three handler variants (default / interactive / non-interactive).
- Knows its group by name only (command.group); the App owns every Group and
  Command, so the registry forms a tree without back pointers.
- Built with chained builder calls:

      app.command("deploy", "Deploy the service") \\
          .with_args("target", "tag?") \\
          .with_flags(String("env", "e", enum=("staging", "prod"), required=True)) \\
          .use(Confirm("Deploy now?")) \\
          .run(deploy)

Group
- A namespace of commands, reachable as "group command" or "group:command".
- May carry an action of its own (with flags, args, validators and middleware)
  run when the group is invoked without a subcommand.

Handlers, validators and middleware
- handler(context): returns anything (passed back by App.execute) or raises.
- validator(context): raises (ValidationError, usually) to reject the input;
  validators run in declaration order after required flags/args are enforced.
- middleware(context, next): see helmsman.middleware.

Lifecycle
- Definitions are sealed by the first dispatch; a builder call after that
  raises RuntimeError.
"""
import re

from .arguments import Arg, Flag
from .faults import ValidationError
from .utils import mirror, pluralize

_NAME = re.compile(r"[^\W\d_][\w.-]*")


def _check_name(kind, name):
    if not isinstance(name, str) or not _NAME.fullmatch(name):
        raise ValueError("invalid %s name: %r" % (kind, name))
    if ":" in name:
        raise ValueError("%s name %r may not contain ':'" % (kind, name))
    return name


def _check_callable(kind, object):
    if not callable(object):
        raise TypeError("%s must be callable, not %s" % (kind, type(object).__name__))
    return object


class Command:
    def __init__(self, name, description="", /, *, group=None):
        self._name = name
        self._description = description
        self._long_description = ""
        self._deprecation = ""
        self._aliases = []
        self._hidden = False
        self._tool = False
        self._flags = []
        self._args = []
        self._validators = []
        self._middleware = []
        self._handler = None
        self._interactive_handler = None
        self._non_interactive_handler = None
        self._group = group
        self._sealed = False

    name = mirror("name")
    description = mirror("description")
    long_description = mirror("long_description")
    deprecation = mirror("deprecation")
    aliases = mirror("aliases")
    hidden = mirror("hidden")
    tool = mirror("tool")
    flags = mirror("flags")
    args = mirror("args")
    validators = mirror("validators")
    middleware = mirror("middleware")
    handler = mirror("handler")
    interactive_handler = mirror("interactive_handler")
    non_interactive_handler = mirror("non_interactive_handler")
    group = mirror("group")

    @property
    def path(self):
        """the words that invoke this command: "deploy" or "users list"."""
        return " ".join(part for part in (self._group, self._name) if part)

    @property
    def qualified(self):
        """the compact form: "deploy" or "users:list"."""
        return ":".join(part for part in (self._group, self._name) if part)

    @property
    def runnable(self):
        return any((self._handler, self._interactive_handler, self._non_interactive_handler))

    def _open(self):
        if self._sealed:
            raise RuntimeError("command %r can no longer be modified once dispatch has begun" % (self.path or self._name))
        return self

    def seal(self):
        self._sealed = True
        return self

    # --- metadata ---

    def describe(self, text, /):
        self._open()._description = text
        return self

    def long(self, text, /):
        """set the long description shown in this command's help."""
        self._open()._long_description = text
        return self

    def alias(self, *names):
        self._open()
        for name in names:
            if _check_name("alias", name) not in self._aliases and name != self._name:
                self._aliases.append(name)
        return self

    def hide(self, hidden=True, /):
        """keep this command out of help listings and completion scripts."""
        self._open()._hidden = bool(hidden)
        return self

    def deprecate(self, message, /):
        """mark as deprecated; the command still runs, after a warning."""
        self._open()._deprecation = message
        return self

    def as_tool(self, tool=True, /):
        """expose this command through helmsman.tools schemas."""
        self._open()._tool = bool(tool)
        return self

    # --- inputs ---

    def with_args(self, *specs):
        """declare positional args from their compact forms ("src", "dest?", "files...")."""
        for spec in specs:
            self.add_arg(Arg.parse(spec))
        return self

    def add_arg(self, arg, /):
        self._open()
        if not isinstance(arg, Arg):
            raise TypeError("add_arg() argument must be an Arg")
        if any(existing.name == arg.name for existing in self._args):
            raise ValueError("argument %r is declared more than once for %r" % (arg.name, self.path))
        self._args.append(arg)
        return self

    def with_flags(self, *flags):
        self._open()
        for flag in flags:
            if not isinstance(flag, Flag):
                raise TypeError("with_flags() arguments must be flags, not %s" % type(flag).__name__)
            for existing in self._flags:
                if existing.name == flag.name:
                    raise ValueError("flag --%s is declared more than once for %r" % (flag.name, self.path))
                if flag.short and existing.short == flag.short:
                    raise ValueError("short flag -%s is declared more than once for %r" % (flag.short, self.path))
            self._flags.append(flag)
        return self

    def with_schema(self, schema, /):
        """declare flags from a field schema or a dataclass (see helmsman.schema)."""
        from . import schema as schemas

        return self.with_flags(*schemas.flags(schema))

    # --- handlers ---

    def run(self, handler, /):
        """set the default handler."""
        self._open()._handler = _check_callable("handler", handler)
        return self

    def on_interactive(self, handler, /):
        """handler used when both stdin and stdout are terminals."""
        self._open()._interactive_handler = _check_callable("handler", handler)
        return self

    def on_non_interactive(self, handler, /):
        """handler used when the invocation is not interactive."""
        self._open()._non_interactive_handler = _check_callable("handler", handler)
        return self

    def select(self, interactive, /):
        """
        pick the handler variant for an invocation.

        interactive + interactive handler → it; non-interactive +
        non-interactive handler → it; otherwise the default handler (None when
        there is none).
        """
        if interactive and self._interactive_handler is not None:
            return self._interactive_handler
        if not interactive and self._non_interactive_handler is not None:
            return self._non_interactive_handler
        return self._handler

    # --- behaviour ---

    def use(self, *middleware):
        self._open()
        self._middleware.extend(_check_callable("middleware", item) for item in middleware)
        return self

    def validate(self, *validators):
        self._open()
        self._validators.extend(_check_callable("validator", item) for item in validators)
        return self

    def args_range(self, minimum, maximum, /):
        """require between minimum and maximum positional values (maximum < 0: unbounded)."""

        def validator(context):
            count = context.nargs
            if count < minimum:
                raise ValidationError(
                    "requires at least %d %s, got %d" % (minimum, pluralize("argument", minimum), count),
                    hint="see '%s --help' for usage" % self.path if self.path else None,
                )
            if 0 <= maximum < count:
                raise ValidationError(
                    "accepts at most %d %s, got %d" % (maximum, pluralize("argument", maximum), count),
                    hint="see '%s --help' for usage" % self.path if self.path else None,
                )

        return self.validate(validator)

    def exact_args(self, count, /):
        """require exactly count positional values."""

        def validator(context):
            if context.nargs != count:
                raise ValidationError(
                    "requires exactly %d %s, got %d" % (count, pluralize("argument", count), context.nargs)
                )

        return self.validate(validator)

    def no_args(self):
        """reject any positional value."""

        def validator(context):
            if context.nargs:
                raise ValidationError("accepts no arguments, got %d" % context.nargs)

        return self.validate(validator)

    def __repr__(self):
        return "Command(%r)" % (self.qualified or self._name)


class Group:
    def __init__(self, name, description="", /):
        self._name = _check_name("group", name)
        self._description = description
        self._commands = {}
        self._action = Command(name, description)
        self._sealed = False

    name = mirror("name")
    description = mirror("description")
    commands = mirror("commands")

    @property
    def action_command(self):
        """the command run when the group is invoked without a subcommand."""
        return self._action

    @property
    def handler(self):
        return self._action.handler

    @property
    def runnable(self):
        return self._action.runnable

    flags = property(lambda self: self._action.flags)
    args = property(lambda self: self._action.args)
    validators = property(lambda self: self._action.validators)
    middleware = property(lambda self: self._action.middleware)

    def _open(self):
        if self._sealed:
            raise RuntimeError("group %r can no longer be modified once dispatch has begun" % self._name)
        return self

    def seal(self):
        self._sealed = True
        self._action.seal()
        for command in self._commands.values():
            command.seal()
        return self

    def describe(self, text, /):
        self._open()._description = text
        self._action.describe(text)
        return self

    def command(self, name, description="", /):
        """return the subcommand called name, creating it when needed."""
        if (existing := self._commands.get(name)) is not None:
            return existing
        self._open()
        command = self._commands[_check_name("command", name)] = Command(name, description, group=self._name)
        return command

    def find(self, token, /):
        """the subcommand named token, or aliased as token, or None."""
        if (command := self._commands.get(token)) is not None:
            return command
        for command in self._commands.values():
            if token in command._aliases:
                return command
        return None

    def action(self, handler, /):
        self._open()
        self._action.run(handler)
        return self

    def with_flags(self, *flags):
        self._open()
        self._action.with_flags(*flags)
        return self

    def with_args(self, *specs):
        self._open()
        self._action.with_args(*specs)
        return self

    def add_arg(self, arg, /):
        self._open()
        self._action.add_arg(arg)
        return self

    def use(self, *middleware):
        self._open()
        self._action.use(*middleware)
        return self

    def validate(self, *validators):
        self._open()
        self._action.validate(*validators)
        return self

    def __repr__(self):
        return "Group(%r)" % self._name


__all__ = (
    "Command",
    "Group",
)
