"""
Usage banner for an option enumeration.

Layout
    usage: prog [-reset] [-level lglv] [-report [rprt]]
        -reset: reset preferences to defaults
    -level lglv: severity level
    ...

- every option is bracketed on the usage line;
- an argument whose option does not make it mandatory is bracketed again;
- description lines right-align the option syntax on the longest one.

Styles can be overridden with a __styles__ mapping in __main__ (keys:
"usage-prog", "usage-option", "usage-argument", "usage-description").
"""
from collections import defaultdict

from rich.text import Text

from .identifiers import OptionId
from .utils import Unset, coalesce

_INDENT = " " * 4


def entries(identifiers, /):
    """
    (syntax, description) pairs in rank order, e.g. ("-level lglv", "...").
    """
    pairs = []
    for identifier in identifiers:
        if not isinstance(identifier, OptionId):
            raise TypeError("entries() expects OptionId members, got %r" % (identifier,))
        syntax = "-" + identifier.canonical
        if identifier.argument is not None:
            argument = identifier.argument if identifier.mandatory else "[%s]" % identifier.argument
            syntax += " " + argument
        pairs.append((syntax, identifier.description))
    return pairs


def render(identifiers, /, prog=Unset, *, colorful=True):
    """
    Build the banner as rich Text.

    Parameters
    - identifiers: Iterable[OptionId] (an OptionId enumeration works as is)
    - prog: str | Unset
      program name; defaults to __main__.__prog__, then "conductor".
    - colorful: bool (keyword-only)
    """
    main = __import__("__main__")
    styles = defaultdict(str, {
        "usage-prog": "bold #E6E6F0",
        "usage-option": "#00E5FF",
        "usage-argument": "italic #9CE19C",
        "usage-description": "#C8C8D0",
    } | getattr(main, "__styles__", {}))

    def styler(style):
        return styles[style] if colorful else ""

    def syntax(text):
        option, _, argument = text.partition(" ")
        return Text.assemble(
            (option, styler("usage-option")),
            *((" ", (argument, styler("usage-argument"))) if argument else ()),
        )

    pairs = entries(identifiers)
    prog = coalesce(prog, getattr(main, "__prog__", "conductor"))

    banner = Text.assemble("usage: ", (prog, styler("usage-prog")))
    for text, _ in pairs:
        banner.append(" [")
        banner.append_text(syntax(text))
        banner.append("]")

    width = max((len(text) for text, _ in pairs), default=0)
    for text, description in pairs:
        banner.append("\n" + _INDENT + " " * (width - len(text)))
        banner.append_text(syntax(text))
        banner.append(": ")
        banner.append(description, styler("usage-description"))
    return banner


def plain(identifiers, /, prog=Unset):
    """the banner as a plain string."""
    return render(identifiers, prog, colorful=False).plain


__all__ = (
    "entries",
    "render",
    "plain",
)
