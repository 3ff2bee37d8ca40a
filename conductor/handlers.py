r"""
Conductor handlers: units of work bound to one option identifier.

Contract
- A handler exposes `identifier` (an OptionId member) and `dispatch(value)`,
  where value is the option's trailing string, or None when the option was
  given without one. Handlers keep no state between invocations; whatever
  outlives a call lives in the injected preference store.
- Failures are raised as CommandLineError subclasses; lower-level causes are
  chained (`raise ... from cause`).

Building blocks
- Callback: forwards the raw value to a function.
- Switch: a presence-only option; a value is rejected (UNEXPECTED_VALUE).
- Required: wraps any handler and rejects an absent value before delegating.
- Parsing: null-rejecting, parses the raw string, hands the typed value on.
- PreferenceHandler: the preference-backed unit, composed from plain functions
  • parse(text) -> typed        user input to typed value
  • validate(typed)             raises ValueError when the value is refused
  • format(typed) -> str        display form used when reporting
  • dump(typed) -> str          stored form (defaults to format)
  • load(text) -> typed         stored form back to typed (defaults to parse)
  • hook(typed)                 side effect run after a successful write

Per-invocation flow of a PreferenceHandler
    value is None  -> report the current (or default) value -> done
    value given    -> parse -> validate -> write -> hook     -> done
                              └─ any failure raises; nothing is retried

Factories
- string_preference, float_preference, int_preference, level_preference,
  limited_level_preference, path_preference.

Quick example
    >>> store = MemoryStore()
    >>> handler = level_preference(Surface.LEVEL, store)
    >>> handler.dispatch("info")
    >>> handler.report()
    'INFO'
"""
import logging
import math
from pathlib import Path
from typing import Protocol, runtime_checkable

from rich.console import Console

from .faults import FaultCode, ValidationError, WriteFailureError
from .identifiers import OptionId
from .logs import get_logger
from .utils import Unset, coalesce, rename

logger = get_logger(__name__)


@runtime_checkable
class Handler(Protocol):
    identifier: OptionId

    def dispatch(self, value: str | None, /) -> None: ...


def _identifier(identifier):
    if not isinstance(identifier, OptionId):
        raise TypeError("handler identifier must be an OptionId member, got %r" % (identifier,))
    return identifier


def _function(function, name):
    if not callable(function):
        raise TypeError("handler %s must be callable" % name)
    return function


class Callback:
    """forward the raw value (None included) to a function."""

    def __init__(self, identifier, function, /):
        self.identifier = _identifier(identifier)
        self._function = _function(function, "function")

    def dispatch(self, value, /):
        self._function(value)

    def __repr__(self):
        return "callback(%r, %s)" % (self.identifier, getattr(self._function, "__qualname__", self._function))


class Switch(Callback):
    """
    presence-only option: the function is called without arguments.

    An empty value (the fallback convention) counts as no value.
    """

    def dispatch(self, value, /):
        if value:
            raise ValidationError(
                "option %r takes no argument, got %r" % (self.identifier.canonical, value),
                code=FaultCode.UNEXPECTED_VALUE,
                title="unexpected value",
                hint="pass --%s on its own" % self.identifier.canonical,
                input=value,
            )
        self._function()

    def __repr__(self):
        return "switch(%r, %s)" % (self.identifier, getattr(self._function, "__qualname__", self._function))


def _missing(identifier):
    return ValidationError(
        "option %r requires an argument" % identifier.canonical,
        code=FaultCode.MISSING_ARGUMENT,
        title="missing value",
        hint="add a value (for example: --%s=<%s>)" % (identifier.canonical, identifier.argument or "value"),
    )


class Required:
    """reject an absent value, then delegate to the wrapped handler."""

    def __init__(self, handler, /):
        if not isinstance(handler, Handler):
            raise TypeError("Required() argument must be a handler")
        self._handler = handler

    @property
    def identifier(self):
        return self._handler.identifier

    @property
    def handler(self):
        return self._handler

    def dispatch(self, value, /):
        if value is None:
            raise _missing(self.identifier)
        self._handler.dispatch(value)

    def __repr__(self):
        return "required(%r)" % (self._handler,)


def _invalid(identifier, value, cause):
    return ValidationError(
        "invalid value %r for option %r: %s" % (value, identifier.canonical, cause),
        hint="expected <%s>" % identifier.argument if identifier.argument else "",
        input=value,
    )


class Parsing:
    """
    null-rejecting handler that parses the raw string before handing it on.

    ValueError and TypeError raised by parse become ValidationError.
    """

    def __init__(self, identifier, parse, function, /):
        self.identifier = _identifier(identifier)
        self._parse = _function(parse, "parse")
        self._function = _function(function, "function")

    def dispatch(self, value, /):
        if value is None:
            raise _missing(self.identifier)
        try:
            parsed = self._parse(value)
        except (ValueError, TypeError) as cause:
            raise _invalid(self.identifier, value, cause) from cause
        self._function(parsed)


class PreferenceHandler:
    """
    The preference-backed handler.

    Parameters
    - identifier: OptionId
    - store: PreferenceStore
    - parse: Callable[[str], T]            (default: str)
    - validate: Callable[[T], None] | None raises ValueError to refuse a value.
    - format: Callable[[T], str]           (default: str)
    - dump: Callable[[T], str] | Unset     stored form (default: format)
    - load: Callable[[str], T] | Unset     read back (default: parse)
    - default: T | None                    reported while nothing is stored.
    - key: str | Unset                     store key (default: identifier name)
    - hook: Callable[[T], None] | None     runs after every successful write.
    - console: Console | Unset             where reports are printed.
    """

    def __init__(
        self, identifier, store, /, *,
        parse=str, validate=None, format=str, dump=Unset, load=Unset,
        default=None, key=Unset, hook=None, console=Unset,
    ):
        self.identifier = _identifier(identifier)
        for method in ("get", "put"):
            if not callable(getattr(store, method, None)):
                raise TypeError("preference store must provide a callable %r" % method)
        self._store = store
        self._parse = _function(parse, "parse")
        self._validate = None if validate is None else _function(validate, "validate")
        self._format = _function(format, "format")
        self._dump = _function(coalesce(dump, self._format), "dump")
        self._load = _function(coalesce(load, self._parse), "load")
        self._default = default
        self._key = coalesce(key, self.identifier.name)
        if not isinstance(self._key, str) or not self._key:
            raise TypeError("preference key must be a non-empty string")
        self._hook = None if hook is None else _function(hook, "hook")
        self._console = Console() if console is Unset else console

    @property
    def key(self):
        return self._key

    @property
    def store(self):
        return self._store

    @property
    def default(self):
        return self._default

    @property
    def hook(self):
        return self._hook

    @hook.setter
    def hook(self, hook):
        self._hook = None if hook is None else _function(hook, "hook")

    def convert(self, value, /):
        """
        Parse and validate a user value without writing it.

        Raises
        - ValidationError: the cause (ValueError/TypeError) is chained.
        """
        try:
            typed = self._parse(value)
            if self._validate is not None:
                self._validate(typed)
        except (ValueError, TypeError) as cause:
            raise _invalid(self.identifier, value, cause) from cause
        return typed

    def current(self):
        """
        The typed value in the store, or the default when nothing is stored.
        """
        stored = self._store.get(self._key)
        if stored is None:
            return self._default
        try:
            return self._load(stored)
        except (ValueError, TypeError) as cause:
            raise ValidationError(
                "stored value %r for option %r is unreadable: %s" % (stored, self.identifier.canonical, cause),
                hint="write it again (for example: --%s=<%s>)" % (
                    self.identifier.canonical, self.identifier.argument or "value"
                ),
            ) from cause

    def report(self):
        """
        The formatted current value, or None when unset and without default.
        """
        typed = self.current()
        return None if typed is None else self._format(typed)

    def write(self, typed, /):
        """
        Store an already-converted value and run the hook.

        Raises
        - WriteFailureError: the store refused the write (cause chained).
        """
        stored = self._dump(typed)
        try:
            self._store.put(self._key, stored)
        except (OSError, ValueError, TypeError) as cause:
            raise WriteFailureError(
                "could not write %r for option %r: %s" % (stored, self.identifier.canonical, cause),
                hint="check the preference file and its permissions",
            ) from cause
        logger.debug("preference_written", key=self._key, value=stored)
        if self._hook is not None:
            self._hook(typed)

    def dispatch(self, value, /):
        if value is None:
            formatted = self.report()
            logger.debug("preference_reported", key=self._key, value=formatted)
            self._console.print(
                "the current value for '%s' is set to '%s'" % (self.identifier.canonical, formatted),
                markup=False,
                highlight=False,
                soft_wrap=True,
            )
            return
        self.write(self.convert(value))

    def __repr__(self):
        return "preference(%r, key=%r)" % (self.identifier, self._key)


def callback(identifier, /):
    """
    Decorator form of Callback.

        >>> @callback(Surface.USE)
        ... def use(value): ...
    """
    _identifier(identifier)

    def wrapper(function):
        return Callback(identifier, function)

    return rename(wrapper, "callback")


def switch(identifier, /):
    """Decorator form of Switch."""
    _identifier(identifier)

    def wrapper(function):
        return Switch(identifier, function)

    return rename(wrapper, "switch")


# --- parsers and validators ---

def _text(value):
    text = value.strip()
    if not text:
        raise ValueError("value must not be empty")
    return text


def _finite(value):
    number = float(value)
    if not math.isfinite(number):
        raise ValueError("%r is not a finite number" % value)
    return number


def _non_negative(number):
    if number < 0:
        raise ValueError("%s must not be negative" % number)


def _levels():
    return {name: level for name, level in logging.getLevelNamesMapping().items() if name not in ("WARN", "FATAL")}


def parse_level(value, /):
    """
    a severity level from its stdlib name (case-insensitive) or number.
    """
    levels = _levels()
    text = value.strip().upper()
    if text.isdigit() and int(text) in levels.values():
        return int(text)
    if text in levels:
        return levels[text]
    raise ValueError("%r is not a level (choose from %s)" % (value, ", ".join(sorted(levels, key=levels.get))))


def format_level(level, /):
    return logging.getLevelName(level)


def directory(path, /):
    """validator: the path must name an existing directory."""
    if not path.is_dir():
        raise ValueError("%s is not an existing directory" % path)


# --- factories ---

def string_preference(identifier, store, /, **options):
    """a non-empty string, stored as given (surrounding whitespace removed)."""
    return PreferenceHandler(identifier, store, parse=_text, **options)


def float_preference(identifier, store, /, *, negatives=False, precision=None, **options):
    """
    a finite float; negatives are refused unless allowed.

    With a precision, values are rounded to that many decimals and formatted
    with exactly that many.
    """
    if precision is None:
        parse, format = _finite, repr
    else:
        parse = lambda value: round(_finite(value), precision)
        format = lambda number: "%.*f" % (precision, number)
    return PreferenceHandler(
        identifier, store,
        parse=parse,
        validate=None if negatives else _non_negative,
        format=format,
        **options,
    )


def int_preference(identifier, store, /, *, negatives=False, **options):
    """a base-10 integer; negatives are refused unless allowed."""
    return PreferenceHandler(
        identifier, store,
        parse=lambda value: int(value.strip(), 10),
        validate=None if negatives else _non_negative,
        format=str,
        **options,
    )


def level_preference(identifier, store, /, *, default=None, **options):
    """a stdlib severity level, stored by name."""
    if default is not None:
        default = parse_level(default) if isinstance(default, str) else default
    return PreferenceHandler(
        identifier, store,
        parse=parse_level,
        format=format_level,
        default=default,
        **options,
    )


def limited_level_preference(identifier, store, /, *, allowed=("NOTSET", "DEBUG", "INFO"), **options):
    """a severity level restricted to an allow-list."""
    permitted = frozenset(parse_level(level) if isinstance(level, str) else level for level in allowed)
    if not permitted:
        raise TypeError("limited_level_preference() needs at least one allowed level")

    def validate(level):
        if level not in permitted:
            raise ValueError("%s is not allowed here (choose from %s)" % (
                format_level(level), ", ".join(format_level(each) for each in sorted(permitted))
            ))

    return PreferenceHandler(
        identifier, store,
        parse=parse_level,
        validate=validate,
        format=format_level,
        **options,
    )


def path_preference(identifier, store, /, **options):
    """an existing directory, stored as its (user-expanded) path."""
    return PreferenceHandler(
        identifier, store,
        parse=lambda value: Path(_text(value)).expanduser(),
        validate=directory,
        format=str,
        load=lambda value: Path(value),
        **options,
    )


__all__ = (
    "Handler",
    "Callback",
    "Switch",
    "Required",
    "Parsing",
    "PreferenceHandler",
    "callback",
    "switch",
    "parse_level",
    "format_level",
    "directory",
    "string_preference",
    "float_preference",
    "int_preference",
    "level_preference",
    "limited_level_preference",
    "path_preference",
)
