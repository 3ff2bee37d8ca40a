"""
CLI shell and settings tests.

Conventions
- Test method names follow CamelCase per project convention.
- The preference file lives in a TemporaryDirectory; stderr rendering is
  captured by patching the fault console.
"""

import io
import os
import tempfile
import unittest
from pathlib import Path
from unittest import TestCase, mock

from rich.console import Console

from conductor import faults
from conductor.__main__ import main
from conductor.dispatch import Policy
from conductor.settings import Settings, get_settings
from conductor.stores import JsonStore


class TestSettings(TestCase):
    """Environment-driven settings."""

    def testDefaults(self):
        with mock.patch.dict(os.environ, {}, clear=True):
            settings = Settings(_env_file=None)
        self.assertEqual(settings.policy, Policy.EXTENDED)
        self.assertEqual(settings.program, "conductor")
        self.assertIsNone(settings.numeric)
        self.assertEqual(settings.preferences.name, "preferences.json")
        self.assertNotIn("~", str(settings.preferences))

    def testEnvironmentOverrides(self):
        environment = {
            "CONDUCTOR_POLICY": "SIMPLE",
            "CONDUCTOR_PROGRAM": "rebalance",
            "CONDUCTOR_FANCY": "true",
            "CONDUCTOR_NUMERIC": "false",
        }
        with mock.patch.dict(os.environ, environment, clear=True):
            settings = Settings(_env_file=None)
        self.assertEqual(settings.policy, Policy.SIMPLE)
        self.assertEqual(settings.program, "rebalance")
        self.assertTrue(settings.fancy)
        self.assertFalse(settings.numeric)

    def testGetSettingsIsCached(self):
        get_settings.cache_clear()
        self.addCleanup(get_settings.cache_clear)
        self.assertIs(get_settings(), get_settings())


class TestMain(TestCase):
    """One run of the CLI shell."""

    def setUp(self):
        directory = tempfile.TemporaryDirectory()
        self.addCleanup(directory.cleanup)
        self.path = Path(directory.name) / "preferences.json"
        self.settings = Settings(_env_file=None, preferences=self.path, program="tool", colorful=False)
        self.console = Console(file=io.StringIO(), width=200)
        self.errors = Console(file=io.StringIO(), width=200)
        patcher = mock.patch.object(faults, "console", self.errors)
        patcher.start()
        self.addCleanup(patcher.stop)

    def invoke(self, *arguments):
        return main(arguments, settings=self.settings, console=self.console)

    def testSuccessfulRunWritesThePreferenceFile(self):
        self.assertEqual(self.invoke("--level=info"), 0)
        self.assertEqual(JsonStore(self.path).get("LEVEL"), "INFO")

    def testReportGoesToTheConsole(self):
        self.invoke("--x=3")
        self.invoke("--x")
        self.assertIn("the current value for 'x' is set to '3'", self.console.file.getvalue())

    def testUnknownOptionPrintsUsageAndExits(self):
        with self.assertRaises(SystemExit) as context:
            self.invoke("--bogus")
        self.assertEqual(context.exception.code, 1)
        output = self.errors.file.getvalue()
        self.assertIn("usage: tool [-reset] [-minimum]", output)
        self.assertIn("unrecognized option 'bogus'", output)
        self.assertIn("[ tool — 11121 | Unrecognized Option ]", output)

    def testInvalidValueExitsWithoutUsage(self):
        with self.assertRaises(SystemExit) as context:
            self.invoke("--high=-1")
        self.assertEqual(context.exception.code, 1)
        output = self.errors.file.getvalue()
        self.assertIn("invalid value '-1'", output)
        self.assertNotIn("usage:", output)

    def testMissingPreferencesExit(self):
        with self.assertRaises(SystemExit):
            self.invoke()
        self.assertIn("have not yet been set: source", self.errors.file.getvalue())

    def testUnreadablePreferenceFileExits(self):
        self.path.write_text("not json", encoding="utf-8")
        with self.assertRaises(SystemExit) as context:
            self.invoke("--level")
        self.assertEqual(context.exception.code, 1)
        self.assertIn("could not read preferences", self.errors.file.getvalue())


if __name__ == "__main__":
    unittest.main()
