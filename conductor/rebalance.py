"""
The rebalance command line: a concrete surface built on the dispatch engine.

Options run in declaration order (extended policy), so a single command line
can reset, seed the minimum settings, adjust individual preferences and list
the outcome:

    conductor -reset -minimum --high=4796.56 -current 4500 -preference

- RESET, MINIMUM, PREFERENCE take no argument.
- LEVEL, ORDINARY, EXTRAORDINARY are severity levels (the latter two limited
  to NOTSET, DEBUG and INFO).
- INFLATION, HIGH, CURRENT are floats; writing CURRENT raises HIGH to at
  least the same value.
- X is a non-negative integer.
- SOURCE must be an existing directory; DESTINATION is free text; USE derives
  DESTINATION from a link name and the current SOURCE.

Without any option, the command line checks that the required preferences are
set (the fallback).
"""
import getpass
import logging
from pathlib import Path

from rich.box import ROUNDED
from rich.console import Console
from rich.table import Table
from rich.text import Text

from .dispatch import CommandLine, DispatchTable, Policy
from .faults import FaultCode, ValidationError
from .handlers import (
    PreferenceHandler,
    Switch,
    float_preference,
    int_preference,
    level_preference,
    limited_level_preference,
    path_preference,
    string_preference,
)
from .identifiers import OptionId
from .logs import get_logger
from .utils import Unset

logger = get_logger(__name__)


class CommandLineId(OptionId):
    # declaration order is execution order
    RESET = "reset preferences to defaults"
    MINIMUM = "minimum running settings using expected values"
    LEVEL = "NOTSET, DEBUG, INFO, WARNING, ERROR or CRITICAL", "lglv", True
    ORDINARY = "level of ordinary messages: NOTSET, DEBUG or INFO", "rdnr", True
    EXTRAORDINARY = "level of extraordinary messages: NOTSET, DEBUG or INFO", "xtrd", True
    INFLATION = "annual inflation rate", "fltn", True
    HIGH = "S&P 500 high", "sphg", True
    CURRENT = "S&P 500 current", "spcr", True
    X = "rebalance limit of funds per account", "ncnt", True
    SOURCE = "data source", "spth", True
    DESTINATION = "backup destination", "dpth", True
    USE = "use expected prefix and suffix for given backup destination", "link", True
    PREFERENCE = "list the preference settings"


# Written by -minimum.
MINIMUM_INFLATION = 3.022
MINIMUM_LEVEL = logging.INFO
MINIMUM_SOURCE = Path("data")

# Checked by the fallback.
REQUIRED = (CommandLineId.SOURCE,)


def destination(link, source=None, /, user=Unset):
    """
    The backup destination for a link name: /home/<user>/<link>/<source parts>.

    Without a source the link is used as given.
    """
    link = link.strip()
    if not link:
        raise ValueError("link must not be empty")
    if source is None:
        return Path(link)
    source = Path(source)
    parts = source.relative_to(source.anchor).parts if source.anchor else source.parts
    return Path("/home", getpass.getuser() if user is Unset else user, link, *parts)


class Rebalance:
    """
    Handlers of the rebalance surface, sharing one preference store and console.

    - preferences: dict[CommandLineId, PreferenceHandler]
      the preference-backed options (USE included, keyed on DESTINATION).
    """

    def __init__(self, store, /, *, console=Unset):
        self.store = store
        self.console = Console() if console is Unset else console

        options = {"console": self.console}
        self.preferences = {
            CommandLineId.LEVEL: level_preference(CommandLineId.LEVEL, store, **options),
            CommandLineId.ORDINARY: limited_level_preference(CommandLineId.ORDINARY, store, **options),
            CommandLineId.EXTRAORDINARY: limited_level_preference(CommandLineId.EXTRAORDINARY, store, **options),
            CommandLineId.INFLATION: float_preference(CommandLineId.INFLATION, store, negatives=True, **options),
            CommandLineId.HIGH: float_preference(CommandLineId.HIGH, store, precision=2, **options),
            CommandLineId.CURRENT: float_preference(CommandLineId.CURRENT, store, precision=2, **options),
            CommandLineId.X: int_preference(CommandLineId.X, store, **options),
            CommandLineId.SOURCE: path_preference(CommandLineId.SOURCE, store, **options),
            CommandLineId.DESTINATION: string_preference(CommandLineId.DESTINATION, store, **options),
            CommandLineId.USE: PreferenceHandler(
                CommandLineId.USE, store,
                parse=lambda link: destination(link, self.preferences[CommandLineId.SOURCE].current()),
                format=str,
                load=Path,
                key=CommandLineId.DESTINATION.name,
                **options,
            ),
        }
        self.preferences[CommandLineId.CURRENT].hook = self.cascade

    def handlers(self):
        """every handler of the surface, in rank order."""
        switches = {
            CommandLineId.RESET: Switch(CommandLineId.RESET, self.reset),
            CommandLineId.MINIMUM: Switch(CommandLineId.MINIMUM, self.minimum),
            CommandLineId.PREFERENCE: Switch(CommandLineId.PREFERENCE, self.listing),
        }
        handlers = switches | self.preferences
        return [handlers[identifier] for identifier in CommandLineId]

    def cascade(self, current, /):
        """raise HIGH to CURRENT when it is lower (or unset)."""
        high = self.preferences[CommandLineId.HIGH]
        previous = high.current()
        if previous is None or previous < current:
            high.write(current)
            logger.debug("preference_cascaded", key=high.key, previous=previous, value=current)

    def reset(self):
        keys = self.store.keys()
        for key in keys:
            self.store.remove(key)
        logger.debug("preferences_reset", keys=keys)
        self.console.print("%d preference(s) removed" % len(keys), highlight=False)

    def minimum(self):
        self.preferences[CommandLineId.INFLATION].write(MINIMUM_INFLATION)
        self.preferences[CommandLineId.LEVEL].write(MINIMUM_LEVEL)
        self.preferences[CommandLineId.SOURCE].write(MINIMUM_SOURCE)

    def listing(self):
        table = Table("preference", "value", box=ROUNDED, title="preferences")
        for identifier, handler in self.preferences.items():
            if identifier is CommandLineId.USE:
                continue
            value = handler.report()
            table.add_row(
                identifier.canonical,
                Text("None", "dim") if value is None else Text(value),
            )
        self.console.print(table)

    def missing(self):
        """canonical names of the required preferences that are not set."""
        return [identifier.canonical for identifier in REQUIRED if self.store.get(identifier.name) is None]

    def dispatch(self, value, /):
        """the fallback: fail unless every required preference is set."""
        missing = self.missing()
        if missing:
            raise ValidationError(
                "the following required preferences have not yet been set: %s" % ", ".join(missing),
                code=FaultCode.MISSING_PREFERENCES,
                title="missing preferences",
                hint="set them first (for example: --%s=<%s>)" % (
                    missing[0], CommandLineId[missing[0].upper()].argument
                ),
                missing=tuple(missing),
            )
        logger.debug("preferences_ready")
        self.console.print("all required preferences are set", highlight=False)


def build(store, /, *, policy=Policy.EXTENDED, console=Unset, numeric=Unset):
    """
    Assemble the rebalance command line over a preference store.

    Returns
    - CommandLine: its fallback is the Rebalance surface itself.
    """
    surface = Rebalance(store, console=console)
    table = DispatchTable(policy, surface.handlers())
    return CommandLine(table, surface, numeric=numeric)


__all__ = (
    "CommandLineId",
    "Rebalance",
    "destination",
    "build",
    "MINIMUM_INFLATION",
    "MINIMUM_LEVEL",
    "MINIMUM_SOURCE",
    "REQUIRED",
)
