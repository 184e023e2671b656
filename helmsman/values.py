"""
Tagged flag values and best-effort coercion on read.

A Context stores every flag as a Value: a (tag, payload) pair. Raw strings
from the command line or the environment are stored untouched under the TEXT
tag and interpreted only when read; defaults and config values are stored
under the tag of their kind. Each reader (as_string, as_int, ...) is an
explicit match over the tags, so reading never depends on the payload's
python type and never raises: an unparsable payload reads as the zero value
of the requested type.
"""
import math
from datetime import timedelta
from enum import Enum
from typing import NamedTuple

from .arguments import Kind, format_duration, parse_duration

_TRUTHY = ("true", "1", "yes")


class Tag(Enum):
    TEXT = "text"
    BOOL = "bool"
    INT = "int"
    FLOAT = "float"
    DURATION = "duration"
    TEXTS = "texts"
    INTS = "ints"


_KIND_TAGS = {
    Kind.STRING: Tag.TEXT,
    Kind.BOOL: Tag.BOOL,
    Kind.INT: Tag.INT,
    Kind.FLOAT: Tag.FLOAT,
    Kind.DURATION: Tag.DURATION,
    Kind.STRINGS: Tag.TEXTS,
    Kind.INTS: Tag.INTS,
}


class Value(NamedTuple):
    tag: Tag
    payload: object

    @classmethod
    def text(cls, raw, /):
        return cls(Tag.TEXT, str(raw))

    @classmethod
    def initial(cls, flag, /):
        """the value of flag before any source overrides its default."""
        return cls(_KIND_TAGS[flag.kind], flag.default)

    @classmethod
    def loaded(cls, kind, object, /):
        """
        a value read from a structured source (a YAML config file).

        lists keep their items, booleans stay booleans, every other scalar is
        kept as text and coerced on read like a command-line value.
        """
        match kind:
            case Kind.STRINGS | Kind.INTS if isinstance(object, list | tuple):
                return cls(Tag.TEXTS, tuple(map(str, object)))
            case Kind.BOOL if isinstance(object, bool):
                return cls(Tag.BOOL, object)
            case _ if isinstance(object, bool):
                return cls.text("true" if object else "false")
            case _:
                return cls.text(object)


MISSING = Value(Tag.TEXT, "")


def stringify(object, /):
    """format a python default the way it would have been typed."""
    match object:
        case bool():
            return "true" if object else "false"
        case timedelta():
            return format_duration(object)
        case list() | tuple():
            return ",".join(map(stringify, object))
        case _:
            return str(object)


def _split(text):
    return [part.strip() for part in text.split(",") if part.strip()]


def _int(text):
    text = text.strip()
    try:
        return int(text, 0) if text.lower().startswith(("0x", "0o", "0b")) else int(text)
    except ValueError:
        number = float(text)
        if not math.isfinite(number):
            raise
        return int(number)


def as_string(value, /):
    match value.tag:
        case Tag.TEXT:
            return value.payload
        case Tag.BOOL:
            return "true" if value.payload else "false"
        case Tag.INT | Tag.FLOAT:
            return str(value.payload)
        case Tag.DURATION:
            return format_duration(value.payload)
        case Tag.TEXTS | Tag.INTS:
            return ",".join(map(str, value.payload))


def as_int(value, /):
    match value.tag:
        case Tag.TEXT:
            try:
                return _int(value.payload)
            except ValueError:
                return 0
        case Tag.BOOL:
            return int(value.payload)
        case Tag.INT:
            return value.payload
        case Tag.FLOAT:
            return int(value.payload) if math.isfinite(value.payload) else 0
        case Tag.DURATION:
            return int(value.payload.total_seconds())
        case Tag.TEXTS | Tag.INTS:
            return 0


def as_float(value, /):
    match value.tag:
        case Tag.TEXT:
            try:
                return float(value.payload.strip())
            except ValueError:
                return 0.0
        case Tag.BOOL | Tag.INT | Tag.FLOAT:
            return float(value.payload)
        case Tag.DURATION:
            return value.payload.total_seconds()
        case Tag.TEXTS | Tag.INTS:
            return 0.0


def as_bool(value, /):
    match value.tag:
        case Tag.TEXT:
            return value.payload.strip().lower() in _TRUTHY
        case Tag.BOOL | Tag.INT | Tag.FLOAT | Tag.DURATION:
            return bool(value.payload)
        case Tag.TEXTS | Tag.INTS:
            return bool(value.payload)


def as_duration(value, /):
    match value.tag:
        case Tag.TEXT:
            try:
                return parse_duration(value.payload)
            except ValueError:
                return timedelta(0)
        case Tag.INT | Tag.FLOAT:
            try:
                return timedelta(seconds=value.payload)
            except (OverflowError, ValueError):
                return timedelta(0)
        case Tag.DURATION:
            return value.payload
        case Tag.BOOL | Tag.TEXTS | Tag.INTS:
            return timedelta(0)


def as_strings(value, /):
    match value.tag:
        case Tag.TEXT:
            return _split(value.payload)
        case Tag.TEXTS | Tag.INTS:
            return list(map(str, value.payload))
        case Tag.BOOL | Tag.INT | Tag.FLOAT | Tag.DURATION:
            return [as_string(value)]


def as_ints(value, /):
    match value.tag:
        case Tag.TEXT | Tag.TEXTS:
            items = _split(value.payload) if value.tag is Tag.TEXT else value.payload
            try:
                return [_int(item) for item in items]
            except ValueError:
                return []
        case Tag.INTS:
            return list(value.payload)
        case Tag.INT:
            return [value.payload]
        case Tag.BOOL | Tag.FLOAT | Tag.DURATION:
            return []


__all__ = (
    "Tag",
    "Value",
    "MISSING",
    "stringify",
    "as_string",
    "as_int",
    "as_float",
    "as_bool",
    "as_duration",
    "as_strings",
    "as_ints",
)
