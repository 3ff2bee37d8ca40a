"""
Option identifiers: the closed vocabulary of a command line surface.

A concrete CLI surface declares one enumeration deriving from OptionId. Every
member carries
- a canonical lowercase name (what users type, possibly abbreviated),
- a human-readable description (usage banner),
- an optional argument display name (usage banner),
- an advisory “argument is mandatory” flag (usage banner only),
- a rank: its declaration position, which is the execution order of the
  extended dispatch policy.

Example
    >>> class Surface(OptionId):
    ...     LEVEL = "severity level", "lglv", True
    ...     RESET = "reset preferences"
    >>> Surface.LEVEL.canonical, Surface.LEVEL.rank, Surface.RESET.argument
    ('level', 1, None)
"""
from enum import Enum


class OptionId(Enum):
    """
    Base of every option enumeration.

    Members are declared as `NAME = description[, argument[, mandatory]]`. The
    enumeration value is the member's rank, so two members never alias each
    other even when their metadata is identical.
    """

    def __new__(cls, description, argument=None, mandatory=False):
        if not isinstance(description, str) or not description.strip():
            raise TypeError("option description must be a non-empty string")
        if argument is not None and (not isinstance(argument, str) or not argument.strip()):
            raise TypeError("option argument name must be a non-empty string")
        self = object.__new__(cls)
        self._value_ = len(cls.__members__) + 1
        self.description = description.strip()
        self.argument = argument
        self.mandatory = bool(mandatory)
        return self

    @property
    def canonical(self):
        """the lowercase name matched against user input."""
        return self.name.lower()

    @property
    def rank(self):
        """declaration position (1-based); the extended policy sorts on it."""
        return self.value

    @classmethod
    def vocabulary(cls):
        """
        canonical names mapped to their members, in rank order.
        """
        return {member.canonical: member for member in cls}

    def __repr__(self):
        return "<%s.%s>" % (type(self).__name__, self.name)


__all__ = (
    "OptionId",
)
