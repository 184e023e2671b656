"""
Schema layer: declare a command's flags as data.

A schema is either an iterable of Field descriptors or a dataclass. For a
dataclass every init field becomes a flag: the type hint gives the kind
(str, bool, int, float, timedelta, list/tuple of str or int, Optional of any
of these), the field default gives the flag default, and
dataclasses.field(metadata={...}) may carry "flag" (the long name, default
the attribute name with "_" replaced by "-"), "short", "env", "help",
"enum", "required", "hidden" and "kind".

    @dataclass
    class DeployOptions:
        env: str = field(default="staging", metadata={"short": "e", "enum": ("staging", "prod")})
        dry_run: bool = False
        timeout: timedelta = timedelta(seconds=30)

    app.command("deploy").with_schema(DeployOptions).run(
        lambda context: deploy(bind(context, DeployOptions)))
"""
import collections.abc
import dataclasses
import types
import typing
from datetime import timedelta
from typing import NamedTuple

from .arguments import FLAG_TYPES, Kind
from .utils import Unset

_SCALARS = {
    str: Kind.STRING,
    bool: Kind.BOOL,
    int: Kind.INT,
    float: Kind.FLOAT,
    timedelta: Kind.DURATION,
}

_READERS = {
    Kind.STRING: "string",
    Kind.BOOL: "bool",
    Kind.INT: "int",
    Kind.FLOAT: "float",
    Kind.DURATION: "duration",
    Kind.STRINGS: "strings",
    Kind.INTS: "ints",
}

_OPTIONS = ("short", "env", "help", "enum", "required", "hidden")


class Field(NamedTuple):
    """one flag described as data; attribute names the bound key (default: name)."""
    name: str
    kind: Kind | str
    short: str = ""
    default: object = Unset
    env: str = ""
    enum: tuple = ()
    required: bool = False
    hidden: bool = False
    help: str = ""
    attribute: str | None = None

    @property
    def key(self):
        return self.attribute or self.name

    def flag(self):
        """the Flag this field declares."""
        return FLAG_TYPES[Kind(self.kind)](
            self.name,
            self.short,
            help=self.help,
            env=self.env,
            default=self.default,
            required=self.required,
            hidden=self.hidden,
            enum=self.enum,
        )


def kind_of(hint, /):
    """the flag kind for a type hint; TypeError when there is none."""
    if hint in _SCALARS:
        return _SCALARS[hint]
    if hint in (list, tuple):
        return Kind.STRINGS
    origin, arguments = typing.get_origin(hint), typing.get_args(hint)
    if origin in (typing.Union, types.UnionType):
        members = [member for member in arguments if member is not type(None)]
        if len(members) == 1:
            return kind_of(members[0])
    elif origin in (list, tuple, collections.abc.Sequence):
        item = arguments[0] if arguments else str
        if item is str:
            return Kind.STRINGS
        if item is int:
            return Kind.INTS
    raise TypeError("no flag kind for type %r" % (hint,))


def derive(cls, /):
    """the fields of a dataclass type."""
    if not (isinstance(cls, type) and dataclasses.is_dataclass(cls)):
        raise TypeError("derive() argument must be a dataclass type")
    hints = typing.get_type_hints(cls)
    declared = []
    for item in dataclasses.fields(cls):
        if not item.init:
            continue
        metadata = item.metadata
        if item.default is not dataclasses.MISSING:
            default = item.default
        elif item.default_factory is not dataclasses.MISSING:
            default = item.default_factory()
        else:
            default = Unset
        if default is None:
            default = Unset
        options = {option: metadata[option] for option in _OPTIONS if option in metadata}
        if "enum" in options:
            options["enum"] = tuple(options["enum"])
        declared.append(Field(
            metadata.get("flag", item.name.replace("_", "-")),
            Kind(metadata["kind"]) if "kind" in metadata else kind_of(hints[item.name]),
            default=default,
            attribute=item.name,
            **options,
        ))
    return declared


def fields(schema, /):
    """normalize a schema (dataclass type or iterable of Field) to a list of fields."""
    if isinstance(schema, type) and dataclasses.is_dataclass(schema):
        return derive(schema)
    items = list(schema)
    for item in items:
        if not isinstance(item, Field):
            raise TypeError("schema entries must be Field instances, not %s" % type(item).__name__)
    return items


def flags(schema, /):
    """the Flag objects declared by schema."""
    return [field.flag() for field in fields(schema)]


def bind(context, schema, /):
    """
    read a schema's values back from a parsed context.

    returns an instance of the dataclass for a dataclass schema, a dict keyed
    by field attribute (or name) otherwise.
    """
    values = {}
    for field in fields(schema):
        values[field.key] = getattr(context, _READERS[Kind(field.kind)])(field.name)
    if isinstance(schema, type) and dataclasses.is_dataclass(schema):
        return schema(**values)
    return values


__all__ = (
    "Field",
    "kind_of",
    "derive",
    "fields",
    "flags",
    "bind",
)
