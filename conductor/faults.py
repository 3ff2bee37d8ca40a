"""
Conductor faults (errors) and rendering.

Scope
- FaultCode: canonical, stable numeric identifiers for every user-facing failure
  of the tokenize → match → dispatch pipeline.
- CommandLineError: the single error kind callers catch. Subclasses narrow the
  taxonomy (malformed token, unrecognized option, missing argument, validation,
  write failure) without changing how a caller handles them.
- trigger(): central entry point to surface any fault (respecting shell/fancy/colorful).

UX goals
- Soft but technical language: short titles, one-sentence bodies, a single clear hint.
- Lowercased tone with readable styling (configurable via __styles__ in __main__).

Integration
- The tokenizer, the coordinator and the handlers raise CommandLineError subclasses.
- The owning CLI shell calls trigger(fault, shell=True, ...): in shell mode the
  fault is rendered via rich and the process exits with status 1; otherwise it is raised.
"""
import copy
import sys
from collections import defaultdict
from enum import IntEnum
from types import MappingProxyType

from rich.console import Console, Group
from rich.panel import Panel
from rich.text import Text

from .utils import Unset

console = Console(stderr=True)


class FaultCode(IntEnum):
    """
    canonical fault codes used across the cli (stable identifiers).

    grouping (by high-level domain)
    - tokens (1111x)
      • MALFORMED_TOKEN
    - options (1112x)
      • UNRECOGNIZED_OPTION, AMBIGUOUS_OPTION, MISSING_ARGUMENT
    - values (1113x)
      • INVALID_VALUE, UNEXPECTED_VALUE, WRITE_FAILURE, MISSING_PREFERENCES

    normalize() allows host remapping to custom labels while keeping code-stability.
    """
    # --- token errors (1111x) ---
    MALFORMED_TOKEN             = 11111

    # --- option errors (1112x) ---
    UNRECOGNIZED_OPTION         = 11121
    AMBIGUOUS_OPTION            = 11122
    MISSING_ARGUMENT            = 11123

    # --- value errors (1113x) ---
    INVALID_VALUE               = 11131
    UNEXPECTED_VALUE            = 11132
    WRITE_FAILURE               = 11133
    MISSING_PREFERENCES         = 11134

    def normalize(self):
        """
        return a host-normalized string for this code.

        the host application can provide a __codes__ mapping in __main__
        to override numeric ids with friendlier labels. when no mapping
        is present, the numeric value is returned as a string.
        """
        return str(getattr(__import__("__main__"), "__codes__", {}).get(self, self.value))


class CommandLineError(Exception):
    """
    base fault of the command line engine.

    carries a human-readable message plus rendering options (code, title, hint,
    and the runtime flags shell/fancy/colorful). subclasses provide defaults for
    code and title so raising them directly needs only a message.
    """
    __code__ = FaultCode.INVALID_VALUE
    __title__ = "command line error"

    def __init__(self, message=Unset, /, **options):
        assert isinstance(message, str | Unset)
        super().__init__(*(() if message is Unset else (message,)))
        self.message = message
        self.options = MappingProxyType({
            "code": type(self).__code__,
            "title": type(self).__title__,
            "hint": "",
            "shell": False,
            "fancy": False,
            "colorful": True,
        } | options)

    @property
    def code(self):
        return self.options["code"]

    @property
    def hint(self):
        return self.options["hint"]

    def __str__(self):
        return "" if self.message is Unset else self.message

    def __rich__(self):
        main = __import__("__main__")

        styles = defaultdict(str, {
            # header parts
            "prog-name": "bold #E6E6F0",  # near-white program name
            "code": "bold #00E5FF",  # neon cyan fault code
            "error-title": "bold #FF4DA6",  # friendly pinky title

            # body
            "error-message": "#C8C8D0",  # soft light gray message
            "hint-arrow": "#9CE19C dim",  # gentle green arrow
            "hint": "italic #9CE19C",  # gentle green hint text
        } | getattr(main, "__styles__", {}))

        def styler(style):
            return styles[style] if self.options["colorful"] else ""

        def text(fragment, style=""):
            if not fragment:
                return Text("")
            if not self.options["colorful"]:
                return Text(str(fragment))
            return Text(str(fragment), style)

        prog = text(getattr(main, "__prog__", self.options.get("prog", "conductor")), styler("prog-name"))

        header = Text.assemble(
            "[ ",
            prog,
            " — ",
            text(self.code.normalize(), styler("code")),
            " | ",
            text(self.options["title"].title(), styler("error-title")),
            " ]"
        )
        message = text(str(self), styler("error-message"))
        renders = [message]
        if self.hint:
            renders.append(Text.assemble(text(" → ", styler("hint-arrow")), text(self.hint, styler("hint"))))

        if self.options["fancy"]:
            return Panel(Group(*renders), title=header, title_align="left")

        return Group(header, *renders)

    def __trigger__(self) -> None:
        if not self.options["shell"]:
            raise self
        console.print(self)
        sys.exit(1)

    def __replace__(self, *unused, **overrides):
        assert not unused, "unused arguments are not allowed"
        fault = type(self)(self.message, **{**self.options, **overrides})
        fault.__cause__ = self.__cause__
        return fault


class MalformedTokenError(CommandLineError):
    """the syntax error of the tokenizer: three or more leading hyphens."""
    __code__ = FaultCode.MALFORMED_TOKEN
    __title__ = "malformed option"


class UnrecognizedOptionError(CommandLineError):
    """no handler is registered for a token standing in option position."""
    __code__ = FaultCode.UNRECOGNIZED_OPTION
    __title__ = "unrecognized option"


class MissingArgumentError(CommandLineError):
    """an option has no trailing value where the policy requires one."""
    __code__ = FaultCode.MISSING_ARGUMENT
    __title__ = "missing argument"


class ValidationError(CommandLineError):
    """a value could not be parsed, failed validation, or was not expected."""
    __code__ = FaultCode.INVALID_VALUE
    __title__ = "invalid value"


class WriteFailureError(ValidationError):
    """the preference store rejected a write."""
    __code__ = FaultCode.WRITE_FAILURE
    __title__ = "write failure"


def trigger(fault, /, **options):
    """
    surface a fault with the given runtime options.

    contract
    - fault must provide __trigger__ and __replace__ methods (see CommandLineError).
    - options are merged into the fault via __replace__(**options) before triggering.
    - in shell mode, rendering happens via rich console; otherwise, the fault is raised.

    typical options
    - shell, fancy, colorful, prog, hint.
    """
    if (
        not hasattr(fault, "__trigger__") or
        not callable(fault.__trigger__) or
        not hasattr(fault, "__replace__") or
        not callable(fault.__replace__)
    ):
        raise TypeError("trigger() argument must have a __trigger__ and __replace__ methods")
    copy.replace(fault, **options).__trigger__()


__all__ = (
    "CommandLineError",
    "MalformedTokenError",
    "UnrecognizedOptionError",
    "MissingArgumentError",
    "ValidationError",
    "WriteFailureError",
    "FaultCode",
    "trigger",
)
