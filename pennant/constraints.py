"""
Pennant constraint graph: relations between options, checked twice.

Declaration time (independent of any argv)
- ConstraintGraph records edges between canonical option names and rejects
  contradictory declarations as soon as they appear: a pair of options may not
  both conflict and require one another (in either direction), an option may not
  constrain itself, and a conflicting set needs at least two distinct options.
- seal(names) re-runs the whole self-check and verifies that every endpoint is a
  declared option, then freezes the graph.

Parse time
- validate(values, graph) walks the edges over a fully scanned value map:
  • conflicts first: two present options joined by a CONFLICTS edge fault with
    OptionConflictError.
  • requirements next: a present dependent whose dependency is absent faults with
    OptionConstraintError.
  Edges whose guarding option is absent are satisfied (dependencies are optional
  until triggered).

Edge model
- CONFLICTS is symmetric and stored over an unordered pair.
- REQUIRES is directed (dependent → dependency). Both declaration spellings map
  onto it:
  • flag("--a=", depends_on="--b=")    →  a requires b (b alone is fine)
  • flag("--b=", required_for="--a=")  →  a requires b, and b requires a
  The spelling is kept on the edge for diagnostics.
"""
import itertools
from contextlib import contextmanager
from enum import Enum

from .faults import *
from .options import SpecType
from .utils import *


class ConstraintKind(Enum):
    REQUIRES = "requires"
    CONFLICTS = "conflicts"

    def __repr__(self):
        return f"{type(self).__name__}.{self.name}"


class ConstraintEdge(metaclass=SpecType):
    """
    One declared relation between two canonical option names.

    - kind: ConstraintKind.REQUIRES or ConstraintKind.CONFLICTS.
    - source/target: for REQUIRES, the dependent and its dependency; for CONFLICTS
      the two peers in declaration order (the relation itself is symmetric).
    - spelling: how the edge was declared ("required_for", "depends_on", "conflicts").
    """

    __introspectable__ = (
        "kind",
        "source",
        "target",
        "spelling",
    )

    def __new__(cls, kind, source, target, /, spelling=Unset):
        if not isinstance(kind, ConstraintKind):
            raise TypeError(f"{cls.__typename__} 'kind' must be a constraint kind")
        self = super().__new__(cls)
        self._kind = kind
        self._source = canonicalize(source)
        self._target = canonicalize(target)
        self._spelling = coalesce(spelling, kind.value)
        return self

    @property
    def pair(self):
        return frozenset((self._source, self._target))

    def __eq__(self, other):
        if not isinstance(other, ConstraintEdge):
            return NotImplemented
        if self._kind is not other._kind:
            return False
        if self._kind is ConstraintKind.CONFLICTS:
            return self.pair == other.pair
        return (self._source, self._target) == (other._source, other._target)

    def __hash__(self):
        if self._kind is ConstraintKind.CONFLICTS:
            return hash((self._kind, self.pair))
        return hash((self._kind, self._source, self._target))


class ConstraintGraph:
    """
    Declared relations between options, with a declaration-time self-check.

    Contract
    - required_for(option, peer): peer's presence requires option, and option is
      only accepted alongside peer.
    - depends_on(option, peer): option's presence requires peer.
    - conflicts(*options): pairwise, symmetric exclusion.
    - check(): full self-check (pure; no argv involved).
    - seal(names): self-check, verify endpoints are declared, then freeze.
    - edges(kind=Unset): declared edges in declaration order.
    - atomic(): context in which a failing declaration leaves no edges behind.
    """

    def __init__(self):
        self._edges = []
        self._sealed = False

    @property
    def sealed(self):
        return self._sealed

    @contextmanager
    def atomic(self):
        if self._sealed:
            raise TypeError("constraint graph is sealed, no more constraints can be declared")
        size = len(self._edges)
        try:
            yield self
        except Exception:
            del self._edges[size:]
            raise

    def _add(self, edge):
        if self._sealed:
            raise TypeError("constraint graph is sealed, no more constraints can be declared")
        if edge.source == edge.target:
            raise InvalidConstraintError(
                f"option {edge.source!r} cannot be constrained by itself",
                edge.source,
            )
        if edge in self._edges:
            return edge
        self._edges.append(edge)
        try:
            self._check(edge.pair)
        except InvalidConstraintError:
            self._edges.pop()
            raise
        return edge

    def requires(self, dependent, dependency, /, spelling=Unset):
        return self._add(ConstraintEdge(ConstraintKind.REQUIRES, dependent, dependency, spelling))

    def required_for(self, option, peer, /):
        with self.atomic():
            return (
                self.requires(peer, option, "required_for"),
                self.requires(option, peer, "required_for"),
            )

    def depends_on(self, option, peer, /):
        return self.requires(option, peer, "depends_on")

    def conflicts(self, *options):
        names = list(dict.fromkeys(map(canonicalize, options)))
        if len(names) < 2:
            raise InvalidConstraintError("conflicting option sets must have at least two distinct options", *names)
        with self.atomic():
            return tuple(
                self._add(ConstraintEdge(ConstraintKind.CONFLICTS, source, target, "conflicts"))
                for source, target in itertools.combinations(names, 2)
            )

    def _check(self, pair):
        kinds = {edge.kind for edge in self._edges if edge.pair == pair}
        if kinds >= {ConstraintKind.REQUIRES, ConstraintKind.CONFLICTS}:
            first, second = sorted(pair)
            raise InvalidConstraintError(
                f"options {first!r} and {second!r} cannot both conflict and depend on each other",
                first,
                second,
            )

    def check(self):
        for pair in dict.fromkeys(edge.pair for edge in self._edges):
            self._check(pair)

    def seal(self, names=Unset, /):
        self.check()
        if names is not Unset:
            names = set(names)
            for edge in self._edges:
                for name in (edge.source, edge.target):
                    if name not in names:
                        raise InvalidConstraintError(
                            f"{edge.spelling.replace("_", " ")} constraint refers to undeclared option {name!r}",
                            name,
                        )
        self._edges = tuple(self._edges)
        self._sealed = True

    def edges(self, kind=Unset, /):
        return tuple(edge for edge in self._edges if kind is Unset or edge.kind is kind)

    def __iter__(self):
        return iter(self.edges())

    def __len__(self):
        return len(self._edges)

    def __repr__(self):
        return f"constraint-graph({", ".join(map(repr, self._edges))})"


def present(value, /):
    """whether a raw value counts as "passed" (None and False mean absent)."""
    return value is not None and value is not False


def validate(values, graph, /, registry=Unset, *, trigger=trigger):
    """
    enforce the graph over a fully scanned raw value map.

    parameters
    - values: Mapping[str, object] keyed by canonical name.
    - graph: ConstraintGraph.
    - registry: OptionRegistry | Unset, used to spell options the way they were declared.
    - trigger: fault sink (defaults to faults.trigger, which raises).

    returns
    - values unchanged when every edge is satisfied.
    """
    def spell(name):
        try:
            return registry.lookup(name).primary
        except (AttributeError, KeyError):
            return "--" + name.replace("_", "-")

    for edge in graph.edges(ConstraintKind.CONFLICTS):
        if present(values.get(edge.source)) and present(values.get(edge.target)):
            source, target = spell(edge.source), spell(edge.target)
            trigger(OptionConflictError(
                "options %r and %r are mutually exclusive" % (source, target),
                title="conflicting options",
                code=FaultCode.OPTION_CONFLICT,
                peers=(edge.source, edge.target),
                hint="pass only one of %r or %r" % (source, target),
                docs=getdoc(FaultCode.OPTION_CONFLICT),
            ))

    for edge in graph.edges(ConstraintKind.REQUIRES):
        if present(values.get(edge.source)) and not present(values.get(edge.target)):
            source, target = spell(edge.source), spell(edge.target)
            trigger(OptionConstraintError(
                "option %r requires option %r" % (source, target),
                title="missing required option",
                code=FaultCode.OPTION_CONSTRAINT,
                peers=(edge.source, edge.target),
                spelling=edge.spelling,
                hint="add %r or remove %r" % (target, source),
                docs=getdoc(FaultCode.OPTION_CONSTRAINT),
            ))

    return values


__all__ = (
    "ConstraintKind",
    "ConstraintEdge",
    "ConstraintGraph",
    "present",
    "validate",
)
