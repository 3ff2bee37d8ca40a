"""
Dispatch table and coordinator: from tokens to executed handlers.

What this module provides
- Policy: SIMPLE (one handler per identifier, every option needs a value,
  encounter order) or EXTENDED (handler lists, optional values, rank order).
- DispatchTable: identifier → ordered handlers, fixed for a dispatch pass.
- Invocation: one scheduled (handler, value) call.
- CommandLine: the parse-and-dispatch entry point.

Walk (cursor over the tokens)
1. a token in option position must resolve to an identifier with handlers,
   otherwise UnrecognizedOptionError (stray positionals included);
2. a following positional token is consumed as its value; when there is none,
   SIMPLE fails with MissingArgumentError and EXTENDED schedules value None
   (“report the current value”);
3. one invocation per bound handler.

After the walk: no option at all and a fallback configured → exactly one
invocation (fallback, ""). Otherwise EXTENDED sorts invocations by identifier
rank (stable), SIMPLE keeps encounter order. Execution is fail-fast and never
rolls back writes already applied.

Quick example
    >>> table = DispatchTable(Policy.EXTENDED)
    >>> table.register(level_preference(Surface.LEVEL, store))
    >>> CommandLine(table).process(["--level=INFO"])
"""
import difflib
from enum import Enum
from typing import NamedTuple

from . import matching
from .faults import FaultCode, MissingArgumentError, UnrecognizedOptionError
from .logs import get_logger
from .tokens import tokenize
from .utils import Unset, coalesce

logger = get_logger(__name__)


class Policy(Enum):
    """how registrations accumulate and how a pass is ordered."""
    SIMPLE = "simple"
    EXTENDED = "extended"


class Invocation(NamedTuple):
    """a transient (handler, value) pair; value None means “no value given”."""
    handler: object
    value: str | None

    def __call__(self):
        return self.handler.dispatch(self.value)


class DispatchTable:
    """
    identifier → handlers registry.

    Registration
    - SIMPLE: a later registration silently replaces the earlier one.
    - EXTENDED: handlers accumulate in registration order.

    Handlers expose their OptionId as `identifier`; every identifier in one
    table must come from the same enumeration.
    """

    def __init__(self, policy=Policy.EXTENDED, /, handlers=()):
        if not isinstance(policy, Policy):
            raise TypeError("dispatch table policy must be a Policy")
        self._policy = policy
        self._handlers = {}
        self._surface = Unset
        for handler in handlers:
            self.register(handler)

    @property
    def policy(self):
        return self._policy

    def register(self, handler, /):
        """
        Bind a handler to its identifier and return the handler (decorator-friendly).
        """
        identifier = getattr(handler, "identifier", None)
        if identifier is None or not callable(getattr(handler, "dispatch", None)):
            raise TypeError("handlers must expose an 'identifier' and a callable 'dispatch'")
        if self._surface is not Unset and type(identifier) is not self._surface:
            raise TypeError("identifier %r does not belong to %s" % (identifier, self._surface.__name__))
        self._surface = type(identifier)

        if self._policy is Policy.SIMPLE:
            self._handlers[identifier] = [handler]
        else:
            self._handlers.setdefault(identifier, []).append(handler)
        return handler

    def lookup(self, identifier, /):
        """
        Handlers bound to an identifier, in registration order; empty when none.
        """
        return tuple(self._handlers.get(identifier, ()))

    def vocabulary(self):
        """
        Canonical names of the registered identifiers, in rank order.
        """
        return {
            identifier.canonical: identifier
            for identifier in sorted(self._handlers, key=lambda identifier: identifier.rank)
        }

    def __contains__(self, identifier):
        return identifier in self._handlers

    def __len__(self):
        return len(self._handlers)

    def __repr__(self):
        return "dispatch-table(policy=%s, identifiers=%r)" % (self._policy.value, list(self.vocabulary()))


class CommandLine:
    """
    The parse-and-dispatch entry point for one command line surface.

    Parameters
    - table: DispatchTable
      constructed once at startup; must not change during a pass.
    - fallback: handler | None
      invoked once with "" when the arguments hold no option at all.
    - numeric: bool | Unset (keyword-only)
      negative-number disambiguation; defaults to on for EXTENDED, off for SIMPLE.
    """

    def __init__(self, table, /, fallback=None, *, numeric=Unset):
        if not isinstance(table, DispatchTable):
            raise TypeError("command line table must be a DispatchTable")
        if fallback is not None and not callable(getattr(fallback, "dispatch", None)):
            raise TypeError("command line fallback must expose a callable 'dispatch'")
        self._table = table
        self._fallback = fallback
        self._numeric = bool(coalesce(numeric, table.policy is Policy.EXTENDED))

    @property
    def table(self):
        return self._table

    @property
    def fallback(self):
        return self._fallback

    def tokenize(self, arguments, /):
        return tokenize(arguments, self._table.vocabulary(), numeric=self._numeric)

    def _unrecognized(self, token):
        entries = matching.candidates(token.value, self._table.vocabulary().keys())
        if token.positional:
            return UnrecognizedOptionError(
                "unrecognized option %r: values must follow an option" % token.value,
                input=token.value,
                hint="pass values after an option (for example: --name=%s)" % token.value,
            )
        if len(entries) > 1:
            return UnrecognizedOptionError(
                "ambiguous option %r: it could be %s" % (token.value, " or ".join(map(repr, entries))),
                code=FaultCode.AMBIGUOUS_OPTION,
                title="ambiguous option",
                input=token.value,
                suggestions=entries,
                hint="type more of the name (for example: --%s)" % entries[0],
            )
        # nothing matched by prefix or abbreviation; suggest the closest spellings
        suggestions = difflib.get_close_matches(token.value.casefold(), self._table.vocabulary().keys(), 3)
        try:
            hint = "did you mean %r? valid options are %s" % (
                "--" + suggestions[0], ", ".join("-" + name for name in self._table.vocabulary())
            )
        except IndexError:
            hint = "valid options are %s" % ", ".join("-" + name for name in self._table.vocabulary())
        return UnrecognizedOptionError(
            "unrecognized option %r" % token.value,
            input=token.value,
            suggestions=tuple(suggestions),
            hint=hint,
        )

    def schedule(self, arguments, /):
        """
        Tokenize the arguments and build the ordered invocation list.

        Nothing is executed and nothing is written; every fault of the
        tokenize/walk phase is raised from here.
        """
        tokens = self.tokenize(arguments)
        invocations = []
        options = 0

        index = 0
        while index < len(tokens):
            token = tokens[index]
            index += 1

            handlers = () if token.positional or token.identifier is None else self._table.lookup(token.identifier)
            if not handlers:
                raise self._unrecognized(token)
            options += 1

            if index < len(tokens) and tokens[index].positional:
                value = tokens[index].value
                index += 1
            elif self._table.policy is Policy.SIMPLE:
                raise MissingArgumentError(
                    "option %r has no argument" % token.identifier.canonical,
                    input=token.value,
                    hint="add a value (for example: --%s=<%s>)" % (
                        token.identifier.canonical, token.identifier.argument or "value"
                    ),
                )
            else:
                value = None

            invocations.extend(Invocation(handler, value) for handler in handlers)

        if not options and self._fallback is not None:
            invocations = [Invocation(self._fallback, "")]
        elif self._table.policy is Policy.EXTENDED:
            invocations.sort(key=lambda invocation: invocation.handler.identifier.rank)

        logger.debug(
            "invocations_scheduled",
            invocations=[
                (repr(getattr(invocation.handler, "identifier", invocation.handler)), invocation.value)
                for invocation in invocations
            ],
        )
        return invocations

    def process(self, arguments, /):
        """
        Tokenize, schedule and execute, in that order.

        Returns
        - list[Invocation]: the executed invocations.

        Raises
        - CommandLineError (any subclass): the first fault aborts the pass;
          writes already applied stay applied.
        """
        invocations = self.schedule(arguments)
        for invocation in invocations:
            invocation()
        return invocations


__all__ = (
    "Policy",
    "Invocation",
    "DispatchTable",
    "CommandLine",
)
