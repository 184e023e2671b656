# python
"""
Config module behavioral tests (YAML loading, merging and sections).

Scope
- Validate deep merge order across files and skipped missing files.
- Validate ConfigError for malformed YAML and non-mapping documents.
- Validate per-command sections and end-to-end flag seeding.

Conventions
- Test method names follow CamelCase per project convention.
- Files are written to a temporary directory removed after each test.
"""

from __future__ import annotations

import os
import tempfile
import unittest
from unittest import TestCase, mock

from helmsman import App, Bool, ConfigError, String, Strings
from helmsman.config import load, merge, section
from helmsman.testing import invoke


class TestLoading(TestCase):
    """Behavioral tests for load() and merge()."""

    def setUp(self):
        self.directory = tempfile.TemporaryDirectory()
        self.addCleanup(self.directory.cleanup)

    def write(self, name, text):
        path = os.path.join(self.directory.name, name)
        with open(path, "w", encoding="utf-8") as stream:
            stream.write(text)
        return path

    def testLaterFilesWin(self):
        first = self.write("a.yaml", "env: staging\ndeploy:\n  region: eu\n  replicas: 2\n")
        second = self.write("b.yaml", "deploy:\n  replicas: 5\n")
        self.assertEqual(load(first, second), {"env": "staging", "deploy": {"region": "eu", "replicas": 5}})

    def testMissingFileSkipped(self):
        self.assertEqual(load(os.path.join(self.directory.name, "absent.yaml")), {})

    def testEmptyFileIsEmpty(self):
        self.assertEqual(load(self.write("empty.yaml", "")), {})

    def testMalformedYamlRaises(self):
        with self.assertRaises(ConfigError):
            load(self.write("bad.yaml", "env: [unclosed\n"))

    def testNonMappingRaises(self):
        with self.assertRaises(ConfigError):
            load(self.write("list.yaml", "- a\n- b\n"))

    def testUndecodableFileRaises(self):
        path = os.path.join(self.directory.name, "latin.yaml")
        with open(path, "wb") as stream:
            stream.write(b"env: \xe9t\xe9\n")
        with self.assertRaises(ConfigError) as caught:
            load(path)
        self.assertIn("unreadable config file", str(caught.exception))

    def testUnreadableFileRaises(self):
        path = self.write("locked.yaml", "env: prod\n")
        with mock.patch("helmsman.config.open", side_effect=PermissionError("permission denied"), create=True):
            with self.assertRaises(ConfigError) as caught:
                load(path)
        self.assertIsInstance(caught.exception.__cause__, PermissionError)

    def testMergeDoesNotModifyBase(self):
        base = {"a": {"b": 1}}
        merged = merge(base, {"a": {"c": 2}})
        self.assertEqual(merged, {"a": {"b": 1, "c": 2}})
        self.assertEqual(base, {"a": {"b": 1}})


class TestSections(TestCase):
    """Behavioral tests for section()."""

    def testNestedOverridesTopLevel(self):
        settings = {"env": "staging", "verbose": True, "users": {"env": "qa", "list": {"all": True}}}
        self.assertEqual(section(settings, "users", "list"), {"env": "qa", "verbose": True, "all": True})

    def testUnknownPathKeepsTopLevel(self):
        self.assertEqual(section({"env": "staging", "deploy": {"env": "prod"}}, "build"), {"env": "staging"})


class TestSeeding(TestCase):
    """Behavioral tests for config values reaching flags."""

    def setUp(self):
        self.directory = tempfile.TemporaryDirectory()
        self.addCleanup(self.directory.cleanup)
        self.path = os.path.join(self.directory.name, "tool.yaml")
        with open(self.path, "w", encoding="utf-8") as stream:
            stream.write("env: staging\ndry_run: true\ndeploy:\n  env: prod\n  tags: [a, b]\n")

    def build(self):
        app = App("tool").config_files(self.path)
        app.command("deploy").with_flags(
            String("env", env="TOOL_ENV"),
            Bool("dry-run"),
            Strings("tags"),
        ).run(lambda context: context.print(
            "%s %s %s %s" % (
                context.string("env"),
                context.bool("dry-run"),
                ",".join(context.strings("tags")),
                context.is_set("env"),
            )
        ))
        return app

    def testConfigSeedsFlags(self):
        self.assertTrue(invoke(self.build(), "deploy").contains("prod True a,b False"))

    def testEnvironmentBeatsConfig(self):
        outcome = invoke(self.build(), "deploy", env={"TOOL_ENV": "dev"})
        self.assertTrue(outcome.contains("dev True a,b True"))

    def testCommandLineBeatsConfig(self):
        outcome = invoke(self.build(), "deploy --env qa --tags c")
        self.assertTrue(outcome.contains("qa True c True"))


if __name__ == "__main__":
    unittest.main()
