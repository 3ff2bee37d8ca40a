"""
Tokenizer: split raw argv strings into typed tokens.

Every token belongs to exactly one of two kinds
- positional: a plain value (`identifier is positional`);
- option: a name in option position. Its identifier is the OptionId member the
  spelling resolved to, or None when nothing (or more than one entry) matched;
  the coordinator rejects those as unrecognized.

Only leading hyphens are counted
- none:     `word`                 → positional
- one:      `-word`, `-w`          → option (or a negative number, see below)
- two:      `--word`               → option
- either:   `-word=value`, `--word=value` → option followed by a positional value
- three+:   `---word`              → MalformedTokenError

With numeric disambiguation enabled, a single-hyphen argument that reads as a
signed decimal (`-3.5`, `-.5`, `-1e3`) is a positional value, sign included.
"""
from typing import NamedTuple

from rich.text import Text

from .faults import MalformedTokenError
from .logs import get_logger
from . import matching
from .utils import isnumeric, ordinal

logger = get_logger(__name__)

# Tag carried by positional tokens in place of an option identifier.
positional = type("positional-type", (), {
    "__module__": None,
    "__slots__": (),
    "__rich__": lambda self: Text.assemble(("(", "yellow"), ("positional", "cyan"), (")", "yellow")),
    "__repr__": lambda self: "(positional)",
    "__doc__": "tag of positional tokens (plain values, not option names)",
    # Cache the singleton creation so repeated instantiation returns the same object.
    "__new__": __import__("functools").cache(lambda cls: super(type, cls).__new__(cls)),
    "__copy__": lambda self: self,
    "__deepcopy__": lambda self, memo: self,
})()


class Token(NamedTuple):
    """
    one tokenized argv element, immutable once created.

    - identifier: `positional`, an OptionId member, or None (unmatched option name).
    - value: the positional text, or the option name as the user spelled it.
    """
    identifier: object
    value: str

    @property
    def positional(self):
        return self.identifier is positional


def _resolve(name, vocabulary):
    entry = matching.match(name, vocabulary.keys())
    return Token(vocabulary[entry] if entry is not None else None, name)


def _option(tokens, body, vocabulary):
    """
    emit the token(s) for an option body (hyphens already removed).

    `name=value` splits at the first '='. An empty name before '=' is
    skipped; an empty value emits nothing.
    """
    name, separator, value = body.partition("=")
    if name:
        tokens.append(_resolve(name, vocabulary))
    if separator and value:
        tokens.append(Token(positional, value))


def tokenize(arguments, vocabulary, /, *, numeric=True):
    """
    Turn raw arguments into tokens, in input order.

    Parameters
    - arguments: Iterable[str]
      raw process arguments; surrounding whitespace only matters for
      classification, positional values are kept whole.
    - vocabulary: Mapping[str, OptionId]
      canonical names mapped to their identifiers (see OptionId.vocabulary).
    - numeric: bool (keyword-only)
      enable negative-number disambiguation for single-hyphen arguments.

    Returns
    - list[Token]

    Raises
    - TypeError: when an argument is not a string.
    - MalformedTokenError: on three or more leading hyphens; the message names
      the offending raw argument.
    """
    tokens = []
    for position, argument in enumerate(arguments):
        if not isinstance(argument, str):
            raise TypeError("tokenize() arguments must be strings")

        string = argument.strip()
        body = string.lstrip("-")
        match len(string) - len(body):
            case 0:
                tokens.append(Token(positional, argument))
            case 1 if numeric and isnumeric(string):
                tokens.append(Token(positional, argument))
            case 1 | 2 if not body:
                # a bare "-" or "--" names no option
                tokens.append(Token(None, string))
            case 1 | 2:
                _option(tokens, body, vocabulary)
            case _:
                raise MalformedTokenError(
                    "unrecognized option %r: too many leading hyphens" % argument,
                    hint="the %s argument starts with %d hyphens; use '-name' or '--name'" % (
                        ordinal(position + 1), len(string) - len(body)
                    ),
                    token=argument,
                )

    logger.debug("arguments_tokenized", count=len(tokens), tokens=[(repr(token.identifier), token.value) for token in tokens])
    return tokens


__all__ = (
    "Token",
    "positional",
    "tokenize",
)
