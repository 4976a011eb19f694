"""
Pennant utilities shared by the option, constraint, parser and result layers.

- Unset: "not provided" marker for keyword defaults where None is a real value.
- coalesce(value, default): Unset → default, anything else passes through.
- rename(name): decorator naming generated accessors (readable tracebacks and reprs).
- mirror(name): read-only property over self._<name>, handing out frozen copies.
- canonicalize(token): the dash-free identity of an option spelling.
- ordinal(number): "first", "second", ..., "11th", "22nd" for fault messages.

    >>> canonicalize("--switch-a")
    'switch_a'
    >>> canonicalize("--flag1=")
    'flag1'
    >>> ordinal(3)
    'third'
"""
import functools
import re
from collections.abc import Mapping, Set
from typing import final


@final
class UnsetType:
    """
    Type of the Unset marker (one instance per process, falsy, not subclassable).

    Supports `str | Unset` in isinstance checks through __or__/__ror__.
    """

    def __or__(self, other, /):
        try:
            return type(self) | other
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
        raise TypeError(f"type {UnsetType.__name__!r} cannot be subclassed")


def coalesce(value, default=None, /):
    """
    value, unless it is Unset; then default.

    None, "", 0 and empty containers are real values and are returned unchanged.
    """
    if value is Unset:
        return default
    return value


def rename(name, /):
    """
    decorator setting __name__ and __qualname__ of a generated function.
    """
    if not isinstance(name, str):
        raise TypeError("rename() argument must be a string")

    def decorator(function):
        if not callable(function):
            raise TypeError("rename() must decorate a callable")
        function.__name__ = function.__qualname__ = name
        return function

    return decorator


def _freeze(value):
    # tuples, str and other scalars pass through; lists become tuples, sets frozensets
    match value:
        case str() | bytes():
            return value
        case list() | tuple():
            return tuple(map(_freeze, value))
        case Mapping():
            return {key: _freeze(item) for key, item in value.items()}
        case Set():
            return frozenset(map(_freeze, value))
        case _:
            return value


def mirror(name, /):
    """
    read-only property exposing self._<name> (containers are copied frozen).

        class OptionSpec:
            names = mirror("names")   # reads self._names
    """
    if not isinstance(name, str):
        raise TypeError("mirror() argument must be a string")

    @rename(name)
    def getter(self):
        return _freeze(getattr(self, "_" + name))

    return property(getter)


# Shell-style option spelling: "-x", "--name", "--long-name", optional trailing "=" sentinel.
TOKEN = re.compile(r"(?P<dashes>--?)(?P<body>[^\W\d_](-?[^\W_]+)*)(?P<sentinel>=?)")

# Bare canonical spelling: "verbose", "switch_a", "more-verbose".
WORD = re.compile(r"[^\W\d_][^\W_]*([-_][^\W_]+)*")


@functools.cache
def canonicalize(token, /):
    """
    Derive the canonical (dash-free) identity of an option spelling.

    Rules
    - leading '-' or '--' are stripped.
    - a trailing '=' (the "takes a value" sentinel) is dropped.
    - hyphens become underscores so the name is a valid attribute.
    - a bare word is accepted as-is (after the same hyphen normalization),
      which lets constraints refer to options by canonical name.

    Raises
    - TypeError: token is not a string.
    - ValueError: token is not a valid option spelling.

    Examples
    - canonicalize("--more-verbose") -> "more_verbose"
    - canonicalize("--flag1=")       -> "flag1"
    - canonicalize("-v")             -> "v"
    - canonicalize("switch_a")       -> "switch_a"
    """
    if not isinstance(token, str):
        raise TypeError("canonicalize() argument must be a string")
    if match := TOKEN.fullmatch(token):
        return match["body"].replace("-", "_")
    if WORD.fullmatch(token):
        return token.replace("-", "_")
    raise ValueError(f"{token!r} is not a valid option spelling")


_WORDS = ("first", "second", "third", "fourth", "fifth", "sixth", "seventh", "eighth", "ninth", "tenth")


def ordinal(number, /):
    """
    1-based position label: words up to ten, then "11th", "21st", "102nd", ...
    """
    if 1 <= number <= len(_WORDS):
        return _WORDS[number - 1]
    if number % 100 in (11, 12, 13):
        return f"{number}th"
    suffix = {1: "st", 2: "nd", 3: "rd"}.get(number % 10, "th")
    return f"{number}{suffix}"


Unset = UnsetType()


__all__ = (
    "coalesce",
    "rename",
    "mirror",
    "canonicalize",
    "ordinal",
    "UnsetType",
    "Unset",
    "TOKEN",
    "WORD",
)
