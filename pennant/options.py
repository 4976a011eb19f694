r"""
Pennant option specifications and registry.

Overview
- Specs
  • OptionSpec: one declared option with its aliases, kind, environment binding,
    and description. The canonical (dash-free) name is derived from the aliases.
  • OptionKind: SWITCH (presence-only, boolean), FLAG (exactly one string value),
    LIST (one string value split literally on ',').

- Registry
  • OptionRegistry: ordered collection of OptionSpecs keyed by canonical name with
    an alias index for token resolution. Rejects colliding names/aliases with
    DuplicateOptionError and becomes read-only once sealed.

- Introspection & representation
  • SpecType metaclass provides stable __repr__/__rich_repr__ and exposes selected
    fields via read-only properties declared in __introspectable__/__displayable__.

Metadata (sanitized on construction)
- names: Iterable[str] validated as shell-style option spellings; duplicates rejected.
  A trailing '=' is the "takes a value" sentinel and is only accepted on FLAG/LIST.
- env: Unset | str (environment key, non-empty when provided).
- descr: Unset | str | Text (short help), non-empty when provided.

Canonical names
- Taken from the longest '--' alias (falling back to the longest alias), with the
  dashes stripped and hyphens turned into underscores:
  "-a", "--switch-a" → "switch_a";  "--flag1=" → "flag1";  "-v" → "v".

Quick example:
    >>> registry = OptionRegistry()
    >>> registry.register(OptionSpec("-v", "--verbose", kind=OptionKind.SWITCH))
    >>> registry.resolve("-v")
    'verbose'
"""
import functools
import operator
import re
from enum import Enum

from rich.text import Text

from .faults import DuplicateOptionError
from .utils import *


# Attribute names owned by the result object; options cannot shadow them.
RESERVED = frozenset({"get", "remaining"})


class OptionKind(Enum):
    SWITCH = "switch"
    FLAG = "flag"
    LIST = "list"

    @property
    def valued(self):
        """whether the option consumes a value from the command line."""
        return self is not OptionKind.SWITCH

    def convert(self, raw, /):
        """
        turn a raw string into the value stored for this kind.

        - SWITCH: always True (presence is the signal).
        - FLAG: the string itself.
        - LIST: literal ',' split (no trimming, empty elements preserved).
        """
        if self is OptionKind.SWITCH:
            return True
        if self is OptionKind.LIST:
            return tuple(raw.split(","))
        return raw

    def __repr__(self):
        return f"{type(self).__name__}.{self.name}"


class SpecType(type):
    """
    Metaclass that gives specs a stable, introspectable shape.

    Responsibilities
    - Expose selected fields as read-only properties using mirror() for all
      names listed in __introspectable__.
    - Provide readable __repr__/__rich_repr__ implementations for diagnostics.

    Conventions
    - __typename__ is derived from the class name (camel-case split with hyphens)
      and used in messages.
    - __displayable__ (if set) narrows which properties are shown by __rich_repr__;
      otherwise __introspectable__ is used.
    """
    __introspectable__ = ()
    __displayable__ = Unset

    def __new__(cls, name, bases, namespace, **options):
        self = super().__new__(
            cls,
            name,
            bases,
            namespace | {
                "__typename__": re.sub(r"(?<!^)(?=[A-Z])", r"-", name).lower(),
            } | {
                name: mirror(name) for name in namespace.get("__introspectable__", ())
            },
        )

        @rename("__repr__")
        def __repr__(self):
            """
            Return a concise, stable representation with key metadata.

            Example
            - option-spec(name='verbose', names=('-v', '--verbose'), ...)
            """
            return f"{type(self).__typename__}({
                ", ".join(map(functools.partial(operator.mod, "%s=%r"), self.__rich_repr__()))
            })"
        self.__repr__ = __repr__

        @rename("__rich_repr__")
        def __rich_repr__(self):
            for name in coalesce(type(self).__displayable__, type(self).__introspectable__):
                yield name, getattr(self, name)
        self.__rich_repr__ = __rich_repr__

        return self


def _sanitize_metadata(cls, metadata, /):
    """
    Internal: normalize and validate the free-text metadata ('descr', 'env').

    - descr: optional short description. If omitted (Unset), it becomes None.
      If provided, it must be a non-empty string (or rich Text) after trimming.
    - env: optional environment key. If omitted (Unset), it becomes None.
      If provided, it must be a non-empty string without whitespace.

    Raises
    - TypeError: if a field has the wrong type.
    - ValueError: if a string is empty after trimming.
    """
    if not isinstance(descr := metadata["descr"], str | Text | Unset):
        raise TypeError(f"{cls.__typename__} 'descr' must be a string")
    elif isinstance(descr, str) and not (descr := descr.strip()):
        raise ValueError(f"{cls.__typename__} 'descr' cannot be empty")
    metadata["descr"] = coalesce(descr)

    if not isinstance(env := metadata["env"], str | Unset):
        raise TypeError(f"{cls.__typename__} 'env' must be a string")
    elif isinstance(env, str) and not re.fullmatch(r"\S+", env := env.strip()):
        raise ValueError(f"{cls.__typename__} 'env' must be a non-empty key without spaces")
    metadata["env"] = coalesce(env)


def _sanitize_named_metadata(cls, metadata, /):
    r"""
    Internal: validate option spellings and derive the canonical name.

    Accepted forms
    - short: "-x"
    - long: "--long", "--long-name" (single-dash longs like "-long" are accepted too)
    - value sentinel: a trailing "=" ("--name=") marks a value-taking option and is
      only allowed on FLAG and LIST kinds.

    Result
    - metadata["names"]: tuple of aliases (sentinel stripped), declaration order kept.
    - metadata["name"]: canonical name from the longest '--' alias (or the longest alias).

    Raises
    - TypeError: when names are missing or contain non-string entries.
    - ValueError: when a name fails validation, carries a misplaced sentinel, or repeats.
    """
    names = []
    if not metadata["names"]:
        raise TypeError(f"{cls.__typename__} must specify at least one name")

    for name in metadata["names"]:
        if not isinstance(name, str):
            raise TypeError(f"{cls.__typename__} names must be strings")
        elif not (match := TOKEN.fullmatch(name.strip())):
            raise ValueError(f"{cls.__typename__} name {name!r} is not a valid shell-style option name")
        elif match["sentinel"] and not metadata["kind"].valued:
            raise ValueError(f"{cls.__typename__} name {name!r} cannot take a value ('=' is only valid on flags)")
        elif (alias := match["dashes"] + match["body"]) in names:
            raise ValueError(f"{cls.__typename__} names cannot contain duplicates")
        names.append(alias)

    metadata["names"] = tuple(names)
    longs = [alias for alias in names if alias.startswith("--")] or names
    metadata["name"] = canonicalize(max(longs, key=len))


class OptionSpec(metaclass=SpecType):
    """
    One declared option.

    Highlights
    - Aliases via 'names' (e.g., "-v", "--verbose"); all resolve to one canonical name.
    - Kind decides how a raw value is stored (see OptionKind.convert).
    - Optional environment binding seeds the value before argv is scanned.
    - Switches expose an 'accessor' (the predicate attribute, "is_<name>") on results.

    Properties
    - The names listed in __introspectable__ are exposed as read-only attributes.
    """

    __introspectable__ = (
        "name",
        "names",
        "kind",
        "env",
        "descr",
    )

    def __new__(cls, *names, kind, env=Unset, descr=Unset):
        if not isinstance(kind, OptionKind):
            raise TypeError(f"{cls.__typename__} 'kind' must be an option kind")

        metadata = {
            "names": names,
            "kind": kind,
            "env": env,
            "descr": descr,
        }
        _sanitize_metadata(cls, metadata)
        _sanitize_named_metadata(cls, metadata)

        self = super().__new__(cls)
        for name, object in metadata.items():
            setattr(self, "_" + name, object)
        return self

    @property
    def accessor(self):
        """predicate attribute published on results (switches only)."""
        return "is_" + self._name if self._kind is OptionKind.SWITCH else None

    @property
    def primary(self):
        """the alias used when naming this option in messages (the longest one)."""
        return max(self._names, key=len)

    def __setattr__(self, name, value, /):
        if hasattr(self, "_name"):
            raise AttributeError(f"{type(self).__typename__} is read-only")
        object.__setattr__(self, name, value)

    def __eq__(self, other):
        if not isinstance(other, OptionSpec):
            return NotImplemented
        return dict(self.__rich_repr__()) == dict(other.__rich_repr__())

    def __hash__(self):
        return hash((self._name, self._names, self._kind))


class OptionRegistry:
    """
    Ordered registry of OptionSpecs.

    Contract
    - register(spec): add a spec; DuplicateOptionError when its canonical name, any
      alias, or its result accessors collide with an existing spec.
    - resolve(token): alias → canonical name, or None when unknown.
    - all(): specs in registration order.
    - seal(): close the declaration phase; the registry is read-only afterwards.
    """

    def __init__(self):
        self._options = {}
        self._aliases = {}
        self._accessors = {}
        self._sealed = False

    @property
    def sealed(self):
        return self._sealed

    def register(self, spec, /):
        if self._sealed:
            raise TypeError("option registry is sealed, no more options can be declared")
        if not isinstance(spec, OptionSpec):
            raise TypeError("register() argument must be an option spec")

        if spec.name in self._options:
            raise DuplicateOptionError(f"option name {spec.name!r} is already in use", spec.name)
        for alias in spec.names:
            if alias in self._aliases:
                raise DuplicateOptionError(
                    f"option alias {alias!r} is already in use by {self._aliases[alias]!r}",
                    spec.name,
                    self._aliases[alias],
                )

        # result attributes: the value getter and, for switches, the predicate
        accessors = (spec.name,) + ((spec.accessor,) if spec.accessor else ())
        for accessor in accessors:
            if accessor in RESERVED:
                raise DuplicateOptionError(f"option name {accessor!r} is reserved", spec.name)
            if accessor in self._accessors or accessor in self._options:
                raise DuplicateOptionError(
                    f"option accessor {accessor!r} clashes with option {self._accessors.get(accessor, accessor)!r}",
                    spec.name,
                    self._accessors.get(accessor, accessor),
                )

        self._options[spec.name] = spec
        for alias in spec.names:
            self._aliases[alias] = spec.name
        for accessor in accessors:
            self._accessors[accessor] = spec.name

    def resolve(self, token, /):
        return self._aliases.get(token)

    def lookup(self, name, /):
        """
        fetch a spec by canonical name or by any alias spelling.

        raises KeyError when no option matches.
        """
        if (resolved := self._aliases.get(name)) is not None:
            return self._options[resolved]
        try:
            return self._options[canonicalize(name)]
        except ValueError:
            raise KeyError(name) from None

    def all(self):
        return tuple(self._options.values())

    def names(self):
        return tuple(self._aliases)

    def seal(self):
        self._sealed = True

    def __contains__(self, name):
        try:
            self.lookup(name)
        except (KeyError, TypeError):
            return False
        return True

    def __iter__(self):
        return iter(self.all())

    def __len__(self):
        return len(self._options)

    def __repr__(self):
        return f"option-registry({", ".join(map(repr, self._options))})"


__all__ = (
    "OptionKind",
    "OptionSpec",
    "OptionRegistry",
    "RESERVED",
)
