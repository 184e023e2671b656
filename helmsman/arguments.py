"""
Helmsman arguments: the flag and positional-argument models.

Overview
- Kind: the tag every flag carries (string, bool, int, float, duration,
  strings, ints). Everything downstream (parser, value coercion, help, tool
  schemas) switches on this tag.
- Flag: one named option with an optional single-character short alias,
  help text, environment binding, typed default, required/hidden markers, an
  allowed-values list and a raw-string validator.
  Concrete kinds: String, Bool, Int, Float, Duration, Strings, Ints.
- Arg: one declared positional slot (required, optional with default, or
  variadic), plus Arg.parse() for the compact "name", "name?", "name..." forms.
- parse_duration() / format_duration(): the "1h30m" / "250ms" duration grammar.

Definitions are immutable once built: defaults are normalized at
construction (list kinds become tuples), so parsing an argument vector never
changes a definition and re-parsing the same vector yields the same result.

Naming
- Flag names match [^\\W\\d_][\\w-]* ("dry-run", "max_retries"). A name starting
  with a digit could never be told apart from a negative number and is
  rejected.
- "help" and the short "h" are reserved for the help switch.
"""
import re
from datetime import timedelta
from enum import Enum

from .utils import Unset, coalesce

_NAME = re.compile(r"[^\W\d_][\w-]*")
_DURATION = re.compile(r"(?P<number>\d+(?:\.\d*)?|\.\d+)(?P<unit>ns|us|µs|μs|ms|s|m|h)")
_UNITS = {
    "ns": timedelta(microseconds=1) / 1000,
    "us": timedelta(microseconds=1),
    "µs": timedelta(microseconds=1),
    "μs": timedelta(microseconds=1),
    "ms": timedelta(milliseconds=1),
    "s": timedelta(seconds=1),
    "m": timedelta(minutes=1),
    "h": timedelta(hours=1),
}


class Kind(Enum):
    """the tag of a flag: which kind of value it holds."""
    STRING = "string"
    BOOL = "bool"
    INT = "int"
    FLOAT = "float"
    DURATION = "duration"
    STRINGS = "strings"
    INTS = "ints"

    @property
    def takes_value(self):
        """every kind but BOOL consumes a value token."""
        return self is not Kind.BOOL

    @property
    def repeatable(self):
        """list kinds accumulate one value per occurrence."""
        return self in (Kind.STRINGS, Kind.INTS)


def parse_duration(text, /):
    """
    parse a duration such as "300ms", "-1.5h" or "2h45m" into a timedelta.

    grammar
    - optional sign, then one or more <number><unit> pairs.
    - units: ns, us (µs), ms, s, m, h.
    - the bare string "0" is accepted.

    raises ValueError on anything else (including a missing unit) and on
    durations a timedelta cannot hold.
    """
    if not isinstance(text, str):
        raise TypeError("parse_duration() argument must be a string")
    source = text.strip()
    sign = -1 if source.startswith("-") else 1
    body = source[1:] if source[:1] in ("+", "-") else source
    if body == "0":
        return timedelta(0)
    if not body:
        raise ValueError("invalid duration: %r" % text)
    total = timedelta(0)
    position = 0
    try:
        while position < len(body):
            if not (match := _DURATION.match(body, position)):
                raise ValueError("invalid duration: %r" % text)
            total += _UNITS[match["unit"]] * float(match["number"])
            position = match.end()
        return total * sign
    except OverflowError:
        raise ValueError("invalid duration: %r (out of range)" % text) from None


def _trim(number):
    return ("%.6f" % number).rstrip("0").rstrip(".")


def format_duration(value, /):
    """
    format a timedelta with the same grammar parse_duration() reads.

    examples: 0 -> "0s", 90 minutes -> "1h30m0s", 1.5 seconds -> "1.5s",
    250 milliseconds -> "250ms".
    """
    micros = (value.days * 86400 + value.seconds) * 1_000_000 + value.microseconds
    if micros == 0:
        return "0s"
    sign = "-" if micros < 0 else ""
    micros = abs(micros)
    if micros < 1000:
        return "%s%dµs" % (sign, micros)
    if micros < 1_000_000:
        return "%s%sms" % (sign, _trim(micros / 1000))
    hours, rest = divmod(micros, 3600 * 1_000_000)
    minutes, rest = divmod(rest, 60 * 1_000_000)
    text = sign
    if hours:
        text += "%dh" % hours
    if hours or minutes:
        text += "%dm" % minutes
    return text + "%ss" % _trim(rest / 1_000_000)


def _normalize(kind, default, name):
    """
    turn a user-supplied default into the canonical python value for kind.

    Unset becomes the kind's zero value.
    """
    try:
        match kind:
            case Kind.STRING:
                return "" if default is Unset or default is None else str(default)
            case Kind.BOOL:
                return bool(coalesce(default, False))
            case Kind.INT:
                if isinstance(default, bool):
                    raise TypeError
                return int(coalesce(default, 0))
            case Kind.FLOAT:
                if isinstance(default, bool):
                    raise TypeError
                return float(coalesce(default, 0.0))
            case Kind.DURATION:
                if default is Unset:
                    return timedelta(0)
                if isinstance(default, timedelta):
                    return default
                if isinstance(default, str):
                    return parse_duration(default)
                if isinstance(default, int | float) and not isinstance(default, bool):
                    return timedelta(seconds=default)
                raise TypeError
            case Kind.STRINGS:
                if isinstance(default, str):
                    raise TypeError
                return tuple(map(str, coalesce(default, ())))
            case Kind.INTS:
                if isinstance(default, str):
                    raise TypeError
                return tuple(map(int, coalesce(default, ())))
    except (TypeError, ValueError, OverflowError):
        raise TypeError("default %r is not a valid %s value for flag %r" % (default, kind.value, name)) from None


class Flag:
    """
    One named option of a command (or of the whole application when
    registered as a global flag).

    Flag is abstract: instantiate one of its kinds.

        String("env", "e", help="target environment", env="DEPLOY_ENV",
               default="staging", enum=("staging", "prod"))
        Bool("verbose", "v", help="verbose output")
        Ints("port", "p", default=(8080,))

    Parameters
    - name: long name, used as --name.
    - short: optional single character, used as -s.
    - help: description shown in help and tool schemas.
    - env: environment variable that seeds the flag (and marks it set).
    - default: typed default; a missing default is the kind's zero value.
    - required: the flag must be given on the command line or via env.
    - hidden: omitted from help and completion scripts.
    - enum: allowed raw values (exact match).
    - validator: callable(raw) raising ValueError to reject a raw value.
    """

    kind = None

    def __init__(
            self,
            name,
            short="",
            /,
            *,
            help="",
            env="",
            default=Unset,
            required=False,
            hidden=False,
            enum=(),
            validator=None,
    ):
        if self.kind is None:
            raise TypeError("Flag is abstract; use String, Bool, Int, Float, Duration, Strings or Ints")
        if not isinstance(name, str) or not _NAME.fullmatch(name):
            raise ValueError("invalid flag name: %r" % (name,))
        if name == "help":
            raise ValueError("flag name 'help' is reserved for the help switch")
        if not isinstance(short, str) or len(short) > 1 or short.isdigit() or short in ("-", "="):
            raise ValueError("invalid short name for flag %r: %r" % (name, short))
        if short == "h":
            raise ValueError("short name 'h' is reserved for the help switch")
        if validator is not None and not callable(validator):
            raise TypeError("validator for flag %r must be callable" % name)
        if isinstance(enum, str):
            raise TypeError("enum for flag %r must be an iterable of strings, not a string" % name)

        self._name = name
        self._short = short
        self._help = help
        self._env = env
        self._default = _normalize(self.kind, default, name)
        self._required = bool(required)
        self._hidden = bool(hidden)
        self._enum = tuple(map(str, enum))
        self._validator = validator

    name = property(lambda self: self._name)
    short = property(lambda self: self._short)
    help = property(lambda self: self._help)
    env = property(lambda self: self._env)
    default = property(lambda self: self._default)
    required = property(lambda self: self._required)
    hidden = property(lambda self: self._hidden)
    enum = property(lambda self: self._enum)
    validator = property(lambda self: self._validator)

    @property
    def label(self):
        """the flag as the user types it: "-v, --verbose" or "--verbose"."""
        return ("-%s, --%s" % (self._short, self._name)) if self._short else "--%s" % self._name

    def __repr__(self):
        fields = ["%r" % self._name]
        if self._short:
            fields.append("%r" % self._short)
        if self._default not in ("", False, 0, 0.0, (), timedelta(0)):
            fields.append("default=%r" % (self._default,))
        for option in ("env", "required", "hidden", "enum"):
            if value := getattr(self, "_" + option):
                fields.append("%s=%r" % (option, value))
        return "%s(%s)" % (type(self).__name__, ", ".join(fields))


class String(Flag):
    kind = Kind.STRING


class Bool(Flag):
    kind = Kind.BOOL


class Int(Flag):
    kind = Kind.INT


class Float(Flag):
    kind = Kind.FLOAT


class Duration(Flag):
    kind = Kind.DURATION


class Strings(Flag):
    kind = Kind.STRINGS


class Ints(Flag):
    kind = Kind.INTS


FLAG_TYPES = {
    Kind.STRING: String,
    Kind.BOOL: Bool,
    Kind.INT: Int,
    Kind.FLOAT: Float,
    Kind.DURATION: Duration,
    Kind.STRINGS: Strings,
    Kind.INTS: Ints,
}


class Arg:
    """
    A declared positional slot.

    Arg(name, description="", /, *, required=Unset, default=Unset, variadic=False)

    - required defaults to True unless a default is given.
    - a missing optional arg binds str(default) when a default exists, and
      nothing otherwise.
    - variadic only documents that extra tokens are expected (the parser always
      exposes the full token list when more tokens than slots are given).
    """

    def __init__(self, name, description="", /, *, required=Unset, default=Unset, variadic=False):
        if not isinstance(name, str) or not name:
            raise ValueError("invalid argument name: %r" % (name,))
        self._name = name
        self._description = description
        self._default = default
        self._required = bool(coalesce(required, default is Unset))
        self._variadic = bool(variadic)

    name = property(lambda self: self._name)
    description = property(lambda self: self._description)
    default = property(lambda self: self._default)
    required = property(lambda self: self._required)
    variadic = property(lambda self: self._variadic)

    @classmethod
    def parse(cls, spec, /):
        """
        build an Arg from its compact form.

        - "source"   → required
        - "dest?"    → optional
        - "files..." → required, variadic
        """
        if not isinstance(spec, str):
            raise TypeError("Arg.parse() argument must be a string")
        if spec.endswith("..."):
            return cls(spec[:-3], variadic=True)
        if spec.endswith("?"):
            return cls(spec[:-1], required=False)
        return cls(spec)

    @property
    def usage(self):
        """the slot as shown in a usage line: <source>, [dest] or <files>..."""
        text = ("<%s>" if self._required else "[%s]") % self._name
        return text + "..." if self._variadic else text

    def __repr__(self):
        return "Arg(%r, required=%r%s)" % (
            self._name,
            self._required,
            "" if self._default is Unset else ", default=%r" % (self._default,),
        )


__all__ = (
    "Kind",
    "Flag",
    "String",
    "Bool",
    "Int",
    "Float",
    "Duration",
    "Strings",
    "Ints",
    "FLAG_TYPES",
    "Arg",
    "parse_duration",
    "format_duration",
)
