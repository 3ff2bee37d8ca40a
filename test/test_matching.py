"""
Option matcher tests (prefix tier, abbreviation tier, ambiguity).

Conventions
- Test method names follow CamelCase per project convention.
"""

import unittest
from unittest import TestCase

from conductor.matching import candidates, match

VOCABULARY = ("level", "inflation", "high", "current", "source", "destination", "use", "x", "limit")


class TestMatch(TestCase):
    """Resolution of a single candidate spelling."""

    def testExactSpellingResolves(self):
        self.assertEqual(match("level", VOCABULARY), "level")

    def testComparisonIgnoresCase(self):
        self.assertEqual(match("LeVeL", VOCABULARY), "level")
        self.assertEqual(match("INF", VOCABULARY), "inflation")

    def testUniquePrefixResolves(self):
        self.assertEqual(match("lev", VOCABULARY), "level")
        self.assertEqual(match("d", VOCABULARY), "destination")

    def testLongerSpellingResolvesToItsPrefix(self):
        # one string only needs to be a prefix of the other
        self.assertEqual(match("levels", VOCABULARY), "level")

    def testAbbreviationResolvesWhenNoPrefixMatches(self):
        self.assertEqual(match("lv", VOCABULARY), "level")
        self.assertEqual(match("dst", VOCABULARY), "destination")

    def testAbbreviationMustShareTheFirstLetter(self):
        self.assertIsNone(match("vl", VOCABULARY))

    def testAmbiguousPrefixReturnsNone(self):
        self.assertIsNone(match("l", VOCABULARY))

    def testExactSpellingBeatsLongerEntries(self):
        self.assertEqual(match("use", ("user", "use")), "use")

    def testUnknownSpellingReturnsNone(self):
        self.assertIsNone(match("unknown", VOCABULARY))

    def testEmptySpellingReturnsNone(self):
        self.assertIsNone(match("", VOCABULARY))

    def testResultDoesNotDependOnVocabularyOrder(self):
        for spelling in ("lv", "l", "lev", "c", "x", "h"):
            self.assertEqual(
                match(spelling, VOCABULARY),
                match(spelling, tuple(reversed(VOCABULARY))),
                spelling,
            )

    def testNonStringCandidateRaises(self):
        with self.assertRaises(TypeError):
            match(3, VOCABULARY)


class TestCandidates(TestCase):
    """Exposure of the competing entries."""

    def testAmbiguousSpellingListsEveryCandidate(self):
        self.assertEqual(candidates("l", VOCABULARY), ("level", "limit"))

    def testResolvedSpellingHasOneCandidate(self):
        self.assertEqual(candidates("cur", VOCABULARY), ("current",))

    def testNoCandidateForUnknownSpelling(self):
        self.assertEqual(candidates("zzz", VOCABULARY), ())

    def testPrefixTierHidesAbbreviations(self):
        # "unset" abbreviates "us" too, but the prefix tier decides first
        self.assertEqual(candidates("us", ("use", "unset")), ("use",))


if __name__ == "__main__":
    unittest.main()
