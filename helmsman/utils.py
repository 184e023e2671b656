"""
Helmsman utilities (small shared helpers)

Scope
- Building blocks reused by the flag model, the registry, the parser and the
  renderers. Stable enough for consumers, written primarily for the package.

Overview
- UnsetType / Unset
  • Singleton sentinel for "not provided", distinct from None (a flag default
    of None, "" or 0 is a real default).
  • Falsey, printable as "Unset", and non-subclassable.

- coalesce(value, default=None)
  • Replace Unset with a concrete default; every other value is kept.

- rename(callable, name) / @rename("name")
  • Give generated middleware links a readable __name__/__qualname__.

- mirror("attr")
  • Read-only property over self._attr; containers are returned as copies so
    builder state cannot be mutated through the public API.

- pluralize(text, count=2) / ordinal(number)
  • Message helpers: "1 argument" / "2 arguments", "first" / "third".

- console(stream, color=True)
  • A rich Console bound to one of the application streams.
"""
import builtins
import functools
from collections.abc import Sequence, Mapping, Set
from typing import final

from rich.console import Console


@final
class UnsetType:
    """
    Sentinel type for a value that was not provided.

    Flag and arg defaults may legitimately be None, "" or 0, so the builders
    use Unset to tell "no default given" apart from "default is falsey".

    Characteristics
    - bool(Unset) is False, yet Unset is neither None nor 0.
    - repr(Unset) -> "Unset".
    - UnsetType() always returns the same instance and cannot be subclassed.
    """

    def __or__(self, other, /):
        try:
            return other | type(self)
        except TypeError:
            return NotImplemented

    def __ror__(self, other, /):
        try:
            return other | type(self)
        except TypeError:
            return NotImplemented

    @functools.cache
    def __new__(cls):
        return super().__new__(cls)

    def __bool__(self):
        return False

    def __repr__(self):
        return "Unset"

    def __init_subclass__(cls, **options):
        raise TypeError("type 'UnsetType' is not an acceptable base type")


def coalesce(object, default=None, /):
    """
    Resolve the Unset sentinel to a concrete default.

    Returns object unless it is Unset, in which case default is returned.
    Falsey values such as None, 0, "" or () are preserved.

    Examples
    - coalesce("prod", "staging") -> "prod"
    - coalesce(Unset, "staging")  -> "staging"
    - coalesce(None, "staging")   -> None
    """
    return object if object is not Unset else default


def rename(*parameters):
    """
    Set __name__/__qualname__ on a callable, or return a decorator doing so.

    Forms
    - rename(callable, name) -> callable
    - rename(name) -> decorator

    The chain links built by middleware composition are renamed after the
    middleware they wrap, which keeps tracebacks readable.
    """
    match len(parameters):
        case 2:
            callable, name = parameters
            if not builtins.callable(callable):
                raise TypeError("rename() first argument must be callable")
            if not isinstance(name, str):
                raise TypeError("rename() second argument must be a string")
            try:
                callable.__qualname__ = name
                callable.__name__ = name
            except (AttributeError, TypeError):
                raise TypeError("rename() first argument must be a updatable callable") from None
            return callable
        case 1:
            name, = parameters
            if not isinstance(name, str):
                raise TypeError("@rename() argument must be a string")

            def wrapper(callable):
                if not builtins.callable(callable):
                    raise TypeError("@rename() must be applied to a callable")
                return rename(callable, name)

            return rename(wrapper, "rename")
        case _:
            raise TypeError("rename takes 1 to 2 arguments but %d were given" % len(parameters))


def _detach(object):
    """
    copy containers one level deep at every level; leaves everything else as-is.

    mappings keep their keys, sequences (other than strings) become lists,
    sets become sets. definition objects (flags, args, commands) are returned
    by identity since they are never mutated after construction.
    """
    if isinstance(object, Sequence) and not isinstance(object, str):
        return list(map(_detach, object))
    elif isinstance(object, Mapping):
        return dict(zip(object.keys(), map(_detach, object.values())))
    elif isinstance(object, Set):
        return set(map(_detach, object))
    return object


def mirror(name, /):
    """
    Define a read-only property that mirrors the backing field "_{name}".

    Container values are copied on every read, so callers can iterate or even
    modify what they get without touching the registry's own state.

    Example
    - with self._aliases = ["ls"], declare aliases = mirror("aliases").
    """
    if not isinstance(name, str):
        raise TypeError("mirror() argument must be a string")

    @rename(name)
    def getter(self):
        return _detach(getattr(self, "_" + name))

    return property(getter)


def pluralize(text, count=2, /):
    """
    pluralize a message noun according to count ("argument" -> "arguments").

    only the regular English forms used by the package messages are covered.
    """
    if count == 1 or not text:
        return text
    if text.endswith(("s", "sh", "ch", "x", "z")):
        return text + "es"
    if text.endswith("y") and text[-2:-1] not in tuple("aeiou"):
        return text[:-1] + "ies"
    return text + "s"


@functools.cache
def ordinal(number, /):
    """
    spell a 1-based position as an ordinal word ("first", "second", ...).

    positions above twenty fall back to the numeric suffix form ("21st").
    """
    words = (
        "zeroth", "first", "second", "third", "fourth", "fifth", "sixth",
        "seventh", "eighth", "ninth", "tenth", "eleventh", "twelfth",
        "thirteenth", "fourteenth", "fifteenth", "sixteenth", "seventeenth",
        "eighteenth", "nineteenth", "twentieth",
    )
    if 0 <= number < len(words):
        return words[number]
    if 10 <= number % 100 <= 20:
        suffix = "th"
    else:
        suffix = {1: "st", 2: "nd", 3: "rd"}.get(number % 10, "th")
    return "%d%s" % (number, suffix)


def console(stream, /, *, color=True):
    """
    Build a rich Console writing to stream.

    Markup, highlighting and emoji substitution are disabled: command output is
    user data and must be written verbatim. Styling is applied explicitly with
    rich.text.Text by the renderers and the Context writers.
    """
    return Console(
        file=stream,
        no_color=not color,
        markup=False,
        highlight=False,
        emoji=False,
        soft_wrap=True,
    )


Unset = UnsetType()
"""
Sentinel for "not provided".

Use it as a default when None is a meaningful value; materialize with
coalesce(value, default).
"""


__all__ = (
    # Functions
    "coalesce",
    "rename",
    "mirror",
    "pluralize",
    "ordinal",
    "console",

    # Types
    "UnsetType",

    # Constants
    "Unset",
)
