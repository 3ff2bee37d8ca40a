"""
The conductor CLI shell.

    python -m conductor [options]

Loads the process settings, opens the preference file, configures logging at
the persisted LEVEL and dispatches the arguments. A fault is rendered on
stderr (preceded by the usage banner when the command line itself was wrong)
and the process exits with status 1.
"""
import sys

from rich.console import Console

from . import faults, logs, usage
from .faults import (
    CommandLineError,
    MalformedTokenError,
    MissingArgumentError,
    UnrecognizedOptionError,
    ValidationError,
    trigger,
)
from .rebalance import CommandLineId, build
from .settings import get_settings
from .stores import JsonStore
from .utils import Unset

# Faults about the shape of the command line; these print the usage banner.
_SYNTACTIC = (MalformedTokenError, UnrecognizedOptionError, MissingArgumentError)


def main(arguments=None, /, *, settings=None, console=Unset):
    """
    Run the command line once.

    Returns
    - int: 0 on success (faults exit through trigger with status 1).
    """
    settings = get_settings() if settings is None else settings
    arguments = sys.argv[1:] if arguments is None else list(arguments)
    options = {
        "shell": True,
        "fancy": settings.fancy,
        "colorful": settings.colorful,
        "prog": settings.program,
    }

    try:
        store = JsonStore(settings.preferences)
    except (OSError, ValueError) as cause:
        fault = ValidationError(
            "could not read preferences from %s: %s" % (settings.preferences, cause),
            title="unreadable preferences",
            hint="fix or remove the preference file",
        )
        fault.__cause__ = cause
        trigger(fault, **options)

    command = build(
        store,
        policy=settings.policy,
        console=console,
        numeric=Unset if settings.numeric is None else settings.numeric,
    )

    try:
        level = command.table.lookup(CommandLineId.LEVEL)[0].current()
        logs.configure_logging(level, renderer=settings.log_format)
        logs.bind_context(program=settings.program)
        command.process(arguments)
    except CommandLineError as fault:
        if isinstance(fault, _SYNTACTIC):
            faults.console.print(
                usage.render(CommandLineId, settings.program, colorful=settings.colorful),
                highlight=False,
            )
        trigger(fault, **options)
    finally:
        logs.clear_context()
    return 0


if __name__ == "__main__":
    sys.exit(main())
