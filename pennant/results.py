"""
Pennant results: the read-only view a parse call hands back.

Each sealed Parser owns one generated Args subclass whose accessors are built once,
from the option registry, when the declaration phase closes:

- args.<name>      value or None (True for switches, str for flags, tuple[str, ...] for lists)
- args.is_<name>   switches only; always a bool (False when not passed)
- args.get(name)   same as the attribute, but accepts any alias spelling ('-v', '--flag1=')
- args.remaining   positional tokens left after option scanning, in input order

Instances are immutable: values live in a read-only mapping, attributes cannot be
set or deleted, and every parse call builds a fresh instance.

Example
    >>> args = parser.parse(["-v", "--files=a,b", "target"])
    >>> args.verbose, args.is_verbose, args.files, args.remaining
    (True, True, ('a', 'b'), ('target',))
"""
import functools
import operator
import re
from types import MappingProxyType

from .options import OptionKind
from .utils import *


def _getter(name, /):
    @rename(name)
    def getter(self):
        return self._values[name]
    getter.__doc__ = f"value of option {name!r} (None when not passed)."
    return property(getter)


def _predicate(name, accessor, /):
    @rename(accessor)
    def predicate(self):
        return self._values[name] is True
    predicate.__doc__ = f"whether switch {name!r} was passed (or seeded from its environment)."
    return property(predicate)


class ResultType(type):
    """
    Metaclass that builds the accessor table of a result class.

    Options (metaclass construction-time)
    - registry: a sealed OptionRegistry. Each spec contributes a value property named
      after its canonical name and, for switches, a predicate property (spec.accessor).
      The resulting class is sealed against further subclassing.
    """

    def __new__(cls, name, bases, namespace, **options):
        if (registry := options.get("registry")) is not None:
            if not registry.sealed:
                raise TypeError("result types can only be built from a sealed registry")
            namespace = namespace | {
                "__options__": MappingProxyType({spec.name: spec for spec in registry}),
                "__aliases__": MappingProxyType({alias: spec.name for spec in registry for alias in spec.names}),
            }
            for spec in registry:
                namespace[spec.name] = _getter(spec.name)
                if spec.kind is OptionKind.SWITCH:
                    namespace[spec.accessor] = _predicate(spec.name, spec.accessor)

        self = super().__new__(
            cls,
            name,
            bases,
            namespace | {
                "__typename__": re.sub(r"(?<!^)(?=[A-Z])", r"-", name).lower(),
            },
        )

        if registry is not None:
            @rename("__init_subclass__")
            def __init_subclass__(cls, **options):  # NOQA: F-841
                raise TypeError(f"type {self.__name__!r} is not an acceptable base type")
            self.__init_subclass__ = classmethod(__init_subclass__)

        return self


class Args(metaclass=ResultType):
    """
    Immutable snapshot of one parse call.

    Built by Parser.parse() through the generated subclass of its sealed parser; the
    base class itself declares no options.
    """
    __slots__ = ("_values", "_remaining")
    __options__ = MappingProxyType({})
    __aliases__ = MappingProxyType({})

    def __new__(cls, values=MappingProxyType({}), remaining=(), /):
        self = super().__new__(cls)
        object.__setattr__(self, "_values", MappingProxyType({
            name: values.get(name) for name in cls.__options__
        }))
        object.__setattr__(self, "_remaining", tuple(remaining))
        return self

    @property
    def remaining(self):
        return self._remaining

    def get(self, name, /):
        """
        value of an option by canonical name or alias spelling.

        raises KeyError when the option was never declared.
        """
        try:
            resolved = self.__aliases__.get(name) or canonicalize(name)
        except (TypeError, ValueError):
            raise KeyError(name) from None
        try:
            return self._values[resolved]
        except KeyError:
            raise KeyError(name) from None

    def __setattr__(self, name, value, /):
        raise AttributeError(f"{type(self).__typename__} is read-only")

    def __delattr__(self, name, /):
        raise AttributeError(f"{type(self).__typename__} is read-only")

    def __eq__(self, other):
        if not isinstance(other, Args):
            return NotImplemented
        return (
            type(self) is type(other) and
            self._values == other._values and
            self._remaining == other._remaining
        )

    def __hash__(self):
        return hash((type(self), tuple(self._values.items()), self._remaining))

    def __rich_repr__(self):
        yield from self._values.items()
        yield "remaining", self._remaining

    def __repr__(self):
        return f"{type(self).__typename__}({
            ", ".join(map(functools.partial(operator.mod, "%s=%r"), self.__rich_repr__()))
        })"


def build(registry, /, name="Args"):
    """
    generate the result class for a sealed registry.

    the class name shows in reprs through its typename ("Args" → "args").
    """
    return ResultType(name, (Args,), {"__slots__": ()}, registry=registry)


__all__ = (
    "Args",
    "build",
)
