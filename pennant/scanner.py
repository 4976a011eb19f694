"""
Pennant token scanner: turn an argv-like token list into primitive events.

The scanner knows option spellings (through an OptionRegistry) but nothing about
values, environment, or constraints. It never raises for user input; every outcome
is an Event the parser decides what to do with.

Events (Found)
- SWITCH      a presence-only option was found ('-v', '--verbose', or one letter of '-ab').
- FLAG        a value-taking option was found with its raw value.
- POSITIONAL  a bare token (a lone '-', anything not starting with '-', everything after '--').
- UNKNOWN     a dash-led token that matches no declared alias ('-1', '---x' included).
- MISSING     a value-taking option at the end of input without its value.
- NEEDLESS    a presence-only option given an inline value ('--verbose=yes').

Accepted forms
- long:      --name, --name=value, --name value
- short:     -x, -x value, -xvalue, -x=value
- clusters:  -abc (switches a, b, c); the first value-taking letter consumes the
             rest of the cluster as its value, or the next token when nothing is left.
             an inline value ('-ab=x') belongs to the last letter of the cluster.
- '--' ends option scanning; later tokens are positional even when they start with '-'.

Positions
- Event.index is the 1-based position of the option token itself (for spaced values,
  the value's own position is not reported).
"""
import re
from collections import deque, namedtuple
from enum import Enum

# Option-shaped: a dash followed by anything. A lone '-' is positional.
OPTION = re.compile(r"-.", re.DOTALL)

TERMINATOR = "--"


class Found(Enum):
    SWITCH = "switch"
    FLAG = "flag"
    POSITIONAL = "positional"
    UNKNOWN = "unknown"
    MISSING = "missing"
    NEEDLESS = "needless"

    def __repr__(self):
        return f"{type(self).__name__}.{self.name}"


Event = namedtuple("Event", (
    "found",
    "token",
    "name",
    "value",
    "index",
))
Event.__doc__ = """
one scanner outcome.

- found: Found kind.
- token: the option alias (or the positional token) as typed.
- name: canonical option name (None for positional/unknown).
- value: raw string value for FLAG (None otherwise; the token for POSITIONAL).
- index: 1-based position of the token in the input.
"""


def _named(registry, input, value, tokens, index):
    """
    resolve one alias with an optional inline value into a single event.

    returns the event plus the number of extra tokens consumed (0 or 1).
    """
    name = registry.resolve(input)
    if name is None:
        return Event(Found.UNKNOWN, input, None, None, index), 0

    if not registry.lookup(name).kind.valued:
        if value is not None:
            return Event(Found.NEEDLESS, input, name, value, index), 0
        return Event(Found.SWITCH, input, name, None, index), 0

    if value is not None:
        return Event(Found.FLAG, input, name, value, index), 0
    if tokens:
        return Event(Found.FLAG, input, name, tokens.popleft(), index), 1
    return Event(Found.MISSING, input, name, None, index), 0


def _cluster(registry, cluster, value, tokens, index):
    """
    expand '-abc' into one event per letter; yields (event, consumed) pairs.

    value is the inline part after '=' (or None); it belongs to the last letter,
    or to the value-taking letter that consumes the rest of the cluster.
    """
    letters = cluster[1:]
    for position, letter in enumerate(letters):
        input = "-" + letter
        name = registry.resolve(input)
        if name is None:
            yield Event(Found.UNKNOWN, input, None, None, index), 0
            return
        if not (rest := letters[position + 1:]):
            yield _named(registry, input, value, tokens, index)
            return
        if not registry.lookup(name).kind.valued:
            yield Event(Found.SWITCH, input, name, None, index), 0
            continue
        if value is not None:
            rest += "=" + value
        yield Event(Found.FLAG, input, name, rest, index), 0
        return


def scan(argv, registry, /):
    """
    scan tokens against a registry, yielding Event objects in input order.

    parameters
    - argv: Iterable[str]; it is copied, never consumed or mutated.
    - registry: OptionRegistry (only resolve() and lookup() are used).

    notes
    - the generator stops early only when the caller stops consuming it.
    """
    tokens = deque(argv)
    index = 0

    while tokens:
        token = tokens.popleft()
        index += 1

        if token == TERMINATOR:
            for offset, token in enumerate(tokens, index + 1):
                yield Event(Found.POSITIONAL, token, None, token, offset)
            return

        if not OPTION.match(token):
            yield Event(Found.POSITIONAL, token, None, token, index)
            continue

        input, equals, value = token.partition("=")
        value = value if equals else None

        # a whole-token alias ("--name", "-x", "-long") wins over cluster expansion
        if token.startswith("--") or registry.resolve(input) is not None or len(input) <= 2:
            event, consumed = _named(registry, input, value, tokens, index)
            yield event
            index += consumed
            continue

        for event, consumed in _cluster(registry, input, value, tokens, index):
            yield event
            index += consumed


__all__ = (
    "Found",
    "Event",
    "OPTION",
    "TERMINATOR",
    "scan",
)
