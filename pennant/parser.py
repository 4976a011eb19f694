"""
Pennant parser layer: declare options and constraints, then parse argv.

What this module provides
- Parser: the declaration surface and the parse engine.
  • switch / flag / comma_array register options (OptionRegistry).
  • required_for / depends_on / conflicts register relations (ConstraintGraph).
  • max_named caps the number of positional (named) arguments.
  • parse(argv) scans tokens, merges environment defaults, validates constraints,
    and returns a fresh, immutable Args value.

Lifecycle
- Declaration phase: every DSL call mutates the parser's own registry and graph.
  Contradictory constraints and colliding names are rejected immediately.
- Sealing: seal(), leaving a `with Parser() as parser:` block, or the first parse()
  closes the declaration phase. The constraint graph is re-checked as a whole,
  dangling constraint peers are rejected, and the result class is generated.
- Parsing: parse() only reads the sealed declarations and writes to a call-local
  value map, so one sealed parser can serve concurrent calls.

Quick start
    from pennant import Parser

    with Parser("brew", env_prefix="HOMEBREW_") as parser:
        parser.switch("verbose", descr="Flag for verbosity")
        parser.switch("--pry", env="pry")
        parser.flag("--filename=", descr="Name of the file")
        parser.comma_array("--files", descr="Comma separated filenames")
        parser.flag("--flag2=", required_for="--flag1=")
        parser.flag("--flag1=")

    args = parser.parse(["-v", "--files=a.txt,b.txt", "formula"])
    args.is_verbose   # True
    args.files        # ('a.txt', 'b.txt')
    args.remaining    # ('formula',)

Faults
- Declaration: DuplicateOptionError, InvalidConstraintError (always raised).
- Parsing: UnknownOptionError, MissingValueError, NeedlessValueError,
  NamedArgumentsError, OptionConflictError, OptionConstraintError; all go through
  Parser.trigger(), which raises them (or renders and exits in shell mode).
"""
import difflib
import os
import os.path
import shlex
import sys
from collections.abc import Iterable
from types import MappingProxyType

from . import results
from .constraints import ConstraintGraph, validate
from .faults import *
from .options import OptionKind, OptionSpec, OptionRegistry
from .scanner import Found, scan
from .utils import *

# Bare-word switches with conventional short aliases.
COMMON_SWITCHES = MappingProxyType({
    "verbose": ("-v", "--verbose"),
    "debug": ("-d", "--debug"),
    "quiet": ("-q", "--quiet"),
    "force": ("-f", "--force"),
})


def _peers(cls, label, object):
    """
    normalize a required_for/depends_on argument into a tuple of spellings.
    """
    if isinstance(object, str):
        return (object,)
    if not isinstance(object, Iterable):
        raise TypeError(f"{cls.__name__.lower()} {label!r} must be a string or an iterable of strings")
    peers = tuple(object)
    if not all(isinstance(peer, str) for peer in peers):
        raise TypeError(f"{cls.__name__.lower()} {label!r} must be a string or an iterable of strings")
    return peers


class Parser:
    """
    Declarative option parser with constraint validation.

    Options (constructor)
    - name: program name shown in rendered faults (defaults to basename(sys.argv[0])).
    - env_prefix: prepended to every environment binding ("HOMEBREW_" + "PRY").
    - getenv: key → str | None lookup used for environment bindings (os.environ.get).
    - shell: when True, faults are rendered to stderr and the process exits with 1;
      otherwise they are raised.
    - fancy: render faults inside a rich panel (shell mode only).
    - colorful: colorize rendered faults (shell mode only).
    """

    def __init__(
            self,
            name=Unset,
            /,
            *,
            env_prefix="",
            getenv=os.environ.get,
            shell=False,
            fancy=False,
            colorful=True,
    ):
        if not isinstance(name, str | Unset):
            raise TypeError("parser 'name' must be a string")
        elif isinstance(name, str) and not (name := name.strip()):
            raise ValueError("parser 'name' cannot be empty")
        if not isinstance(env_prefix, str):
            raise TypeError("parser 'env_prefix' must be a string")
        if not callable(getenv):
            raise TypeError("parser 'getenv' must be callable")

        self._name = coalesce(name, os.path.basename(sys.argv[0]) or "pennant")
        self._env_prefix = env_prefix
        self._getenv = getenv
        self._shell = bool(shell)
        self._fancy = bool(fancy)
        self._colorful = bool(colorful)

        self._registry = OptionRegistry()
        self._graph = ConstraintGraph()
        self._max_named = None
        self._result = Unset

    name = mirror("name")
    env_prefix = mirror("env_prefix")
    shell = mirror("shell")
    fancy = mirror("fancy")
    colorful = mirror("colorful")

    @property
    def sealed(self):
        return self._result is not Unset

    @property
    def options(self):
        return self._registry.all()

    @property
    def constraints(self):
        return self._graph.edges()

    @property
    def registry(self):
        return self._registry

    @property
    def graph(self):
        return self._graph

    def __enter__(self):
        return self

    def __exit__(self, type, value, traceback):
        if type is None:
            self.seal()
        return False

    # ── declaration ───────────────────────────────────────────────────────────

    def _declare(self, kind, tokens, descr, env, required_for, depends_on):
        if self.sealed:
            raise TypeError("parser is sealed, no more options can be declared")

        required_for = _peers(type(self), "required_for", required_for)
        depends_on = _peers(type(self), "depends_on", depends_on)
        for peer in required_for + depends_on:
            canonicalize(peer)

        spec = OptionSpec(*tokens, kind=kind, env=env, descr=descr)
        # the option is registered only once all of its constraints are accepted
        with self._graph.atomic():
            for peer in required_for:
                self._graph.required_for(spec.name, peer)
            for peer in depends_on:
                self._graph.depends_on(spec.name, peer)
            self._registry.register(spec)
        return spec

    def switch(self, *tokens, descr=Unset, env=Unset, required_for=(), depends_on=()):
        """
        declare a presence-only option.

        - tokens: aliases ("-a", "--switch-a"); a single bare word names a common switch
          ("verbose" → "-v", "--verbose") or expands to "--<word>".
        - env: environment key whose presence (any value) seeds the switch as passed.
        - required_for / depends_on: peer spelling(s); see ConstraintGraph.
        """
        if len(tokens) == 1 and isinstance(tokens[0], str) and WORD.fullmatch(tokens[0]):
            word = tokens[0].replace("_", "-")
            tokens = COMMON_SWITCHES.get(word, ("--" + word,))
        return self._declare(OptionKind.SWITCH, tokens, descr, env, required_for, depends_on)

    def flag(self, *tokens, descr=Unset, env=Unset, required_for=(), depends_on=()):
        """
        declare an option taking exactly one value ("--filename=", the '=' is optional).
        """
        return self._declare(OptionKind.FLAG, tokens, descr, env, required_for, depends_on)

    def comma_array(self, *tokens, descr=Unset, env=Unset, required_for=(), depends_on=()):
        """
        declare an option whose value is split on ',' into a tuple.

        the split is literal: no trimming, empty elements kept ("--files=" → ("",)).
        """
        return self._declare(OptionKind.LIST, tokens, descr, env, required_for, depends_on)

    def conflicts(self, *tokens):
        """
        declare the given options mutually exclusive (pairwise).
        """
        if self.sealed:
            raise TypeError("parser is sealed, no more constraints can be declared")
        return self._graph.conflicts(*tokens)

    def max_named(self, count, /):
        """
        cap the number of positional (named) arguments a parse call accepts.
        """
        if self.sealed:
            raise TypeError("parser is sealed, no more constraints can be declared")
        if not isinstance(count, int) or isinstance(count, bool):
            raise TypeError("max_named() argument must be an integer")
        if count < 0:
            raise ValueError("max_named() argument must be a non-negative integer")
        self._max_named = count

    def seal(self):
        """
        close the declaration phase (idempotent).

        re-checks the constraint graph, rejects constraints naming undeclared options,
        freezes registry and graph, and generates the result class.
        """
        if self.sealed:
            return self
        self._graph.seal(option.name for option in self._registry)
        self._registry.seal()
        self._result = results.build(self._registry)
        return self

    # ── faults ────────────────────────────────────────────────────────────────

    def trigger(self, fault, /, **options):
        if (
                not hasattr(fault, "__trigger__") or
                not callable(fault.__trigger__) or
                not hasattr(fault, "__replace__") or
                not callable(fault.__replace__)
        ):
            raise TypeError("trigger() argument must have a __trigger__ and __replace__ methods")
        trigger(fault, **options, tool=self, shell=self._shell, fancy=self._fancy, colorful=self._colorful)

    def _unknown(self, event, token):
        suggestions = difflib.get_close_matches(event.token, self._registry.names(), 5)
        try:
            hint = "did you mean %r?" % suggestions[0]
        except IndexError:
            hint = "check the spelling; known options are %s" % ", ".join(map(repr, self._registry.names()))
        where = "" if event.token == token else " in %r" % token
        self.trigger(UnknownOptionError(
            "unknown option %r%s at %s position" % (event.token, where, ordinal(event.index)),
            title="unknown option",
            code=FaultCode.UNKNOWN_OPTION,
            input=event.token,
            token=token,
            index=event.index,
            suggestions=suggestions,
            hint=hint,
            docs=getdoc(FaultCode.UNKNOWN_OPTION),
        ))

    def _missing(self, event):
        self.trigger(MissingValueError(
            "option %r at %s position requires a value" % (event.token, ordinal(event.index)),
            title="missing value",
            code=FaultCode.MISSING_VALUE,
            input=event.token,
            name=event.name,
            index=event.index,
            hint="pass it inline (%s=<value>) or as the next token (%s <value>)" % (event.token, event.token),
            docs=getdoc(FaultCode.MISSING_VALUE),
        ))

    def _needless(self, event):
        self.trigger(NeedlessValueError(
            "switch %r at %s position cannot take a value" % (event.token, ordinal(event.index)),
            title="switch cannot take a value",
            code=FaultCode.NEEDLESS_VALUE,
            input=event.token,
            name=event.name,
            index=event.index,
            hint="remove everything from '=' (for example: %s)" % event.token,
            docs=getdoc(FaultCode.NEEDLESS_VALUE),
        ))

    # ── parsing ───────────────────────────────────────────────────────────────

    def _seed(self, getenv):
        """
        initial value map: every declared name, seeded from its environment binding.
        """
        values = dict.fromkeys((option.name for option in self._registry), None)
        for option in self._registry:
            if option.env is None:
                continue
            if (raw := getenv(self._env_prefix + option.env.upper())) is not None:
                values[option.name] = option.kind.convert(raw)
        return values

    def parse(self, argv=Unset, /, *, getenv=Unset):
        """
        parse argv into an immutable Args value.

        parameters
        - argv:
          • Unset: read tokens from sys.argv[1:].
          • str: shell-like string; split via shlex.split.
          • Iterable[str]: pre-tokenized sequence; copied, never mutated.
        - getenv: per-call override of the environment lookup.

        phases
        - seal the declaration if still open.
        - seed values from environment bindings.
        - scan tokens: switches → True, flags → raw value, lists → literal split;
          the command line overrides the environment and the last occurrence wins.
        - enforce max_named, then validate constraints (conflicts before requirements).
        """
        self.seal()

        if argv is Unset:
            tokens = sys.argv[1:]
        elif isinstance(argv, str):
            tokens = shlex.split(argv)
        elif isinstance(argv, Iterable):
            tokens = list(argv)
            if not all(isinstance(token, str) for token in tokens):
                raise TypeError("parse() argument must be a string or an iterable of strings")
        else:
            raise TypeError("parse() argument must be a string or an iterable of strings")

        getenv = coalesce(getenv, self._getenv)
        if not callable(getenv):
            raise TypeError("parse() 'getenv' must be callable")

        values = self._seed(getenv)
        remaining = []
        token = None

        for event in scan(tokens, self._registry):
            if event.found is not Found.POSITIONAL:
                token = tokens[event.index - 1]
            match event.found:
                case Found.SWITCH:
                    values[event.name] = True
                case Found.FLAG:
                    values[event.name] = self._registry.lookup(event.name).kind.convert(event.value)
                case Found.POSITIONAL:
                    remaining.append(event.token)
                case Found.UNKNOWN:
                    self._unknown(event, token)
                case Found.MISSING:
                    self._missing(event)
                case Found.NEEDLESS:
                    self._needless(event)

        if self._max_named is not None and len(remaining) > self._max_named:
            self.trigger(NamedArgumentsError(
                "expected at most %d named argument%s but got %d (%s)" % (
                    self._max_named,
                    "" if self._max_named == 1 else "s",
                    len(remaining),
                    ", ".join(map(repr, remaining)),
                ),
                title="too many named arguments",
                code=FaultCode.TOO_MANY_NAMED,
                remaining=tuple(remaining),
                hint="remove the extra arguments (%s)" % ", ".join(map(repr, remaining[self._max_named:])),
                docs=getdoc(FaultCode.TOO_MANY_NAMED),
            ))

        validate(values, self._graph, self._registry, trigger=self.trigger)
        return self._result(values, remaining)

    def __repr__(self):
        return f"parser(name={self._name!r}, options={len(self._registry)}, constraints={len(self._graph)})"


__all__ = (
    "Parser",
    "COMMON_SWITCHES",
)
