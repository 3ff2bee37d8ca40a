"""
Rebalance surface tests (end-to-end through build()).

Scope
- The behavioral scenarios of the engine on the concrete surface.
- Switches (reset, minimum, preference), the HIGH cascade, USE, the fallback.

Conventions
- Test method names follow CamelCase per project convention.
- The store is a MemoryStore (or a JsonStore in a TemporaryDirectory); output
  goes to a rich Console writing into a StringIO.
"""

import getpass
import io
import tempfile
import unittest
from pathlib import Path
from unittest import TestCase

from rich.console import Console

from conductor.dispatch import Policy
from conductor.faults import (
    FaultCode,
    MalformedTokenError,
    MissingArgumentError,
    UnrecognizedOptionError,
    ValidationError,
)
from conductor.rebalance import CommandLineId, Rebalance, build, destination
from conductor.stores import JsonStore, MemoryStore


class SurfaceTestCase(TestCase):

    def setUp(self):
        self.store = MemoryStore()
        self.console = Console(file=io.StringIO(), width=200)
        self.command = build(self.store, console=self.console)
        self.directory = tempfile.TemporaryDirectory()
        self.addCleanup(self.directory.cleanup)

    def output(self):
        return self.console.file.getvalue()

    def snapshot(self):
        return {key: self.store.get(key) for key in self.store.keys()}


class TestScenarios(SurfaceTestCase):
    """Engine scenarios on the rebalance surface."""

    def testVocabularyFollowsDeclarationOrder(self):
        self.assertEqual(list(self.command.table.vocabulary().values()), list(CommandLineId))

    def testAbbreviatedLevelIsWritten(self):
        self.command.process(["-lv=INFO"])
        self.assertEqual(self.store.get("LEVEL"), "INFO")

    def testUnknownOptionIsRejectedWithoutWrites(self):
        with self.assertRaises(UnrecognizedOptionError) as context:
            self.command.process(["--level=INFO", "--unknown", "x"])
        self.assertIn("unknown", str(context.exception))
        self.assertEqual(self.snapshot(), {})

    def testNegativeNumberIsAValue(self):
        self.command.process(["--inflation", "-3.5"])
        self.assertEqual(self.store.get("INFLATION"), "-3.5")

    def testNoOptionRunsTheFallback(self):
        self.store.put("SOURCE", self.directory.name)
        self.command.process([])
        self.assertIn("all required preferences are set", self.output())

    def testThreeHyphensRaise(self):
        with self.assertRaises(MalformedTokenError) as context:
            self.command.process(["---bad"])
        self.assertIn("---bad", str(context.exception))

    def testSameOptionTwiceIsIdempotent(self):
        self.command.process(["--x=4"])
        once = self.snapshot()
        self.command.process(["--x=4"])
        self.assertEqual(self.snapshot(), once)

    def testReportAfterWrite(self):
        self.command.process(["--high=4796.56"])
        self.command.process(["--high"])
        self.assertIn("the current value for 'high' is set to '4796.56'", self.output())

    def testOptionsRunInDeclarationOrder(self):
        # -minimum runs before -level whatever the argument order
        self.command.process(["--level=DEBUG", "-minimum"])
        self.assertEqual(self.store.get("LEVEL"), "DEBUG")


class TestSwitches(SurfaceTestCase):
    """reset, minimum and preference."""

    def testMinimumWritesTheExpectedSettings(self):
        self.command.process(["-minimum"])
        self.assertEqual(self.snapshot(), {"INFLATION": "3.022", "LEVEL": "INFO", "SOURCE": "data"})

    def testMinimumRejectsAValue(self):
        with self.assertRaises(ValidationError) as context:
            self.command.process(["-minimum=yes"])
        self.assertEqual(context.exception.code, FaultCode.UNEXPECTED_VALUE)

    def testResetRemovesEverything(self):
        self.command.process(["-minimum"])
        self.command.process(["-reset"])
        self.assertEqual(self.snapshot(), {})
        self.assertIn("3 preference(s) removed", self.output())

    def testResetThenMinimumInOneCommandLine(self):
        self.store.put("X", "9")
        self.command.process(["-minimum", "-reset"])
        self.assertEqual(self.snapshot(), {"INFLATION": "3.022", "LEVEL": "INFO", "SOURCE": "data"})

    def testPreferenceListsEverySetting(self):
        self.command.process(["-minimum", "-preference"])
        output = self.output()
        for name in ("level", "ordinary", "inflation", "high", "source", "destination"):
            self.assertIn(name, output)
        self.assertIn("3.022", output)
        self.assertIn("None", output)


class TestPreferences(SurfaceTestCase):
    """Typed preferences of the surface."""

    def testLimitedLevelsRefuseWarnings(self):
        with self.assertRaises(ValidationError):
            self.command.process(["--ordinary=WARNING"])
        self.command.process(["--extraordinary=debug"])
        self.assertEqual(self.store.get("EXTRAORDINARY"), "DEBUG")

    def testCurrentRaisesHigh(self):
        self.command.process(["--high=100", "--current=150.256"])
        self.assertEqual(self.store.get("CURRENT"), "150.26")
        self.assertEqual(self.store.get("HIGH"), "150.26")

    def testCurrentLeavesAHigherHighAlone(self):
        self.command.process(["--high=200", "--current=150"])
        self.assertEqual(self.store.get("HIGH"), "200.00")

    def testCurrentSetsAnUnsetHigh(self):
        self.command.process(["--current=10"])
        self.assertEqual(self.store.get("HIGH"), "10.00")

    def testHighRefusesNegatives(self):
        with self.assertRaises(ValidationError):
            self.command.process(["--high", "-1"])

    def testSourceMustBeADirectory(self):
        with self.assertRaises(ValidationError):
            self.command.process(["--source", str(Path(self.directory.name) / "missing")])
        self.command.process(["--source", self.directory.name])
        self.assertEqual(self.store.get("SOURCE"), str(Path(self.directory.name)))

    def testLimitIsAnInteger(self):
        with self.assertRaises(ValidationError):
            self.command.process(["-x", "1.5"])
        self.command.process(["-x", "12"])
        self.assertEqual(self.store.get("X"), "12")

    def testFailureKeepsEarlierWrites(self):
        with self.assertRaises(ValidationError):
            self.command.process(["--level=INFO", "--high=-1"])
        self.assertEqual(self.store.get("LEVEL"), "INFO")
        self.assertIsNone(self.store.get("HIGH"))


class TestUse(SurfaceTestCase):
    """USE derives DESTINATION."""

    def testLinkWithoutSourceIsUsedAsGiven(self):
        self.command.process(["--use=backup"])
        self.assertEqual(self.store.get("DESTINATION"), "backup")

    def testLinkIsCombinedWithTheSource(self):
        self.command.process(["-minimum", "--use=backup"])
        expected = Path("/home", getpass.getuser(), "backup", "data")
        self.assertEqual(self.store.get("DESTINATION"), str(expected))

    def testDestinationHelper(self):
        self.assertEqual(
            destination("link", Path("/var/data"), user="gary"),
            Path("/home/gary/link/var/data"),
        )
        self.assertEqual(destination("link"), Path("link"))

    def testEmptyLinkIsRefused(self):
        with self.assertRaises(ValueError):
            destination(" ")


class TestFallback(SurfaceTestCase):
    """Readiness check when no option is given."""

    def testMissingSourceIsReported(self):
        with self.assertRaises(ValidationError) as context:
            self.command.process([])
        self.assertEqual(context.exception.code, FaultCode.MISSING_PREFERENCES)
        self.assertIn("source", str(context.exception))

    def testBareHyphenDoesNotRunTheFallback(self):
        self.store.put("SOURCE", self.directory.name)
        with self.assertRaises(UnrecognizedOptionError):
            self.command.process(["-"])
        self.assertNotIn("all required preferences are set", self.output())

    def testMissingNames(self):
        surface = Rebalance(self.store, console=self.console)
        self.assertEqual(surface.missing(), ["source"])
        self.store.put("SOURCE", "data")
        self.assertEqual(surface.missing(), [])


class TestSimplePolicy(TestCase):
    """The surface under the simple policy."""

    def setUp(self):
        self.store = MemoryStore()
        self.command = build(self.store, policy=Policy.SIMPLE, console=Console(file=io.StringIO()))

    def testValuesAreRequired(self):
        with self.assertRaises(MissingArgumentError):
            self.command.process(["--level"])

    def testValuesAreWritten(self):
        self.command.process(["--level", "debug", "--x", "2"])
        self.assertEqual(self.store.get("LEVEL"), "DEBUG")
        self.assertEqual(self.store.get("X"), "2")


class TestPersistence(TestCase):
    """Settings written through a JsonStore survive the command line."""

    def testWritesReachTheFile(self):
        with tempfile.TemporaryDirectory() as directory:
            path = Path(directory) / "preferences.json"
            build(JsonStore(path), console=Console(file=io.StringIO())).process(["--level=warning"])
            self.assertEqual(JsonStore(path).get("LEVEL"), "WARNING")


if __name__ == "__main__":
    unittest.main()
