"""
Option matcher: resolve a candidate spelling against a closed vocabulary.

Rules (case-insensitive, pure)
- prefix tier: an entry matches when one string is a prefix of the other, i.e.
  the first min(len(candidate), len(entry)) characters agree ('lev' → 'level',
  and also 'levels' → 'level').
- abbreviation tier (only when the prefix tier is empty): an entry matches when
  it starts with the candidate's first letter and contains the candidate as an
  in-order subsequence ('lv' → 'level').

Resolution is deterministic and independent of vocabulary order
- an exact spelling wins outright;
- otherwise a single match in the deciding tier wins;
- otherwise the spelling is ambiguous and match() returns None. candidates()
  exposes the competing entries so callers can explain the rejection.
"""


def _prefixed(candidate, entry):
    length = min(len(candidate), len(entry))
    return candidate[:length] == entry[:length]


def _abbreviated(candidate, entry):
    if not candidate or candidate[0] != entry[:1]:
        return False
    remaining = iter(entry)
    return all(char in remaining for char in candidate)


def candidates(candidate, vocabulary, /):
    """
    Return the entries competing for a candidate spelling, in vocabulary order.

    The result is empty when nothing matches, has one element when the
    spelling resolves, and several when it is ambiguous.

    Parameters
    - candidate: str
      the user's spelling, without leading hyphens.
    - vocabulary: Iterable[str]
      the registered canonical names.
    """
    if not isinstance(candidate, str):
        raise TypeError("candidates() first argument must be a string")
    if not candidate:
        return ()

    folded = candidate.casefold()
    entries = tuple(vocabulary)

    for entry in entries:
        if entry.casefold() == folded:
            return (entry,)

    prefixed = tuple(entry for entry in entries if _prefixed(folded, entry.casefold()))
    if prefixed:
        return prefixed
    return tuple(entry for entry in entries if _abbreviated(folded, entry.casefold()))


def match(candidate, vocabulary, /):
    """
    Return the single vocabulary entry a candidate resolves to, or None.

    None covers both “nothing matches” and “ambiguous”; use candidates() to
    tell them apart.
    """
    entries = candidates(candidate, vocabulary)
    return entries[0] if len(entries) == 1 else None


__all__ = (
    "candidates",
    "match",
)
