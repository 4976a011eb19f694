"""
Pennant faults (declaration errors and parse-time faults) and rendering.

Scope
- DeclarationError family: raised while an option set is being declared
  (colliding names, contradictory constraints). These are programming errors
  in the host application and are always raised, never rendered.
- FaultCode: canonical, stable numeric identifiers for all user-facing faults.
- ParserException: base type that carries message + options and knows how to
  render itself in a friendly, lowercased, and actionable way.
- trigger(): central entry point to surface any fault (respecting shell/fancy/colorful).
- getdoc(): optional description lookup for a code from the host application.

UX goals
- Position-first messages: scanning faults include the ordinal position of the
  offending token (“at second position”).
- Every message names the offending option(s) so the user can act on it.

Integration
- Parser code builds a fault and calls Parser.trigger(fault, **ctx), which stamps
  the run options and forwards here.
- In non-shell mode, exceptions are raised; in shell mode, they are rendered via rich
  and the process exits with status 1.
"""
import sys
from collections import defaultdict
from enum import IntEnum
from types import MappingProxyType

from rich.console import Console, Group
from rich.panel import Panel
from rich.text import Text

from .utils import Unset

console = Console(stderr=True)


class DeclarationError(ValueError):
    """
    base class for faults in the declaration itself (independent of any argv).

    carries the offending option identities in `options` so callers and tests can
    inspect them without parsing the message.
    """

    def __init__(self, message, /, *options):
        super().__init__(message)
        self.message = message
        self.options = options


class DuplicateOptionError(DeclarationError): ...
class InvalidConstraintError(DeclarationError): ...


class FaultCode(IntEnum):
    """
    canonical fault codes used across the parser (stable identifiers).

    grouping (by high-level domain)
    - scanning (111xx)
      • UNKNOWN_OPTION, NEEDLESS_VALUE, MISSING_VALUE
    - named arguments (1112x)
      • TOO_MANY_NAMED
    - constraints (1113x)
      • OPTION_CONFLICT, OPTION_CONSTRAINT

    normalize() allows host remapping to custom labels while keeping code-stability.
    """
    # --- scanning errors (111xx) ---
    UNKNOWN_OPTION              = 11112
    NEEDLESS_VALUE              = 11113
    MISSING_VALUE               = 11117

    # --- named argument errors (1112x) ---
    TOO_MANY_NAMED              = 11121

    # --- constraint errors (1113x) ---
    OPTION_CONFLICT             = 11131
    OPTION_CONSTRAINT           = 11132

    def normalize(self):
        """
        label shown in fault headers: __main__.__codes__[self] when the host defines
        it, the number otherwise.
        """
        return str(getattr(__import__("__main__"), "__codes__", {}).get(self, self.value))


class ParserException(Exception):
    def __init__(self, message=Unset, /, **options):
        assert isinstance(message, str | Unset)
        super().__init__(message)
        self.message = message
        self.options = MappingProxyType(options)

    def __rich__(self):
        main = __import__("__main__")

        styles = defaultdict(str, {
            # header parts
            "prog-name": "bold #E6E6F0",
            "code": "bold #00E5FF",
            "error-title": "bold #FF4DA6",

            # body
            "error-message": "#C8C8D0",
            "hint-arrow": "#9CE19C dim",
            "hint": "italic #9CE19C",
        } | getattr(main, "__styles__", {}))

        colorful = self.options.get("colorful", False)
        fancy = self.options.get("fancy", False)

        def styler(style):
            return styles[style] if colorful else ""

        def text(fragment, style=""):
            if not fragment:
                return Text("")
            if not colorful:
                return Text(str(fragment))
            if isinstance(fragment, Text):
                return fragment
            return Text(str(fragment), style)

        tool = self.options.get("tool")
        prog = text(getattr(main, "__prog__", getattr(tool, "name", "pennant")), styler("prog-name"))

        header = Text.assemble(
            "[ ",
            prog,
            " — ",
            text(self.code.normalize(), styler("code")),
            " | ",
            text(str(self.options.get("title", "")).title(), styler("error-title")),
            " ]"
        )
        message = text(self.message, styler("error-message"))
        hint = Text.assemble(text(" → ", styler("hint-arrow")), text(self.options.get("hint"), styler("hint")))

        if fancy:
            return Panel(Group(message, hint), title=header, title_align="left")

        return Group(header, message, hint)

    @property
    def code(self):
        return self.options.get("code", type(self).__faultcode__)

    def __trigger__(self) -> None:
        if not self.options.get("shell", False):
            raise self from None
        console.print(self)
        sys.exit(1)

    def __replace__(self, *unused, **overrides):
        assert not unused, "unused arguments are not allowed"
        return type(self)(self.message, **{**self.options, **overrides})


class UnknownOptionError(ParserException):
    __faultcode__ = FaultCode.UNKNOWN_OPTION


class NeedlessValueError(ParserException):
    __faultcode__ = FaultCode.NEEDLESS_VALUE


class MissingValueError(ParserException):
    __faultcode__ = FaultCode.MISSING_VALUE


class NamedArgumentsError(ParserException):
    __faultcode__ = FaultCode.TOO_MANY_NAMED


class OptionConflictError(ParserException):
    __faultcode__ = FaultCode.OPTION_CONFLICT


class OptionConstraintError(ParserException):
    __faultcode__ = FaultCode.OPTION_CONSTRAINT


def trigger(fault, /, **options):
    """
    merge run options into fault (through __replace__) and fire it.

    the parser passes tool/shell/fancy/colorful; the fault itself carries title, code,
    hint, docs and context (input, index, suggestions, peers...). outside shell mode
    the fault is raised; in shell mode it is printed to stderr and the process exits 1.
    """
    if (
        not hasattr(fault, "__trigger__") or
        not callable(fault.__trigger__) or
        not hasattr(fault, "__replace__") or
        not callable(fault.__replace__)
    ):
        raise TypeError("trigger() argument must have a __trigger__ and __replace__ methods")
    fault.__replace__(**options).__trigger__()


def getdoc(code, /):
    """
    __main__.__docs__[code] when the host defines it, else None.
    """
    if not isinstance(code, FaultCode):
        raise TypeError("getdoc() argument must be a fault-code")
    try:
        return getattr(__import__("__main__"), "__docs__", {})[code]
    except KeyError:
        return None


__all__ = (
    "DeclarationError",
    "DuplicateOptionError",
    "InvalidConstraintError",
    "ParserException",
    "UnknownOptionError",
    "NeedlessValueError",
    "MissingValueError",
    "NamedArgumentsError",
    "OptionConflictError",
    "OptionConstraintError",
    "FaultCode",
    "trigger",
    "getdoc",
)
