# python
"""
Arguments module behavioral tests (flag kinds, defaults, args, durations).

Scope
- Validate flag construction: names, reserved help switch, short names, enum.
- Validate default normalization per kind (zero values, tuples for list kinds).
- Validate the duration grammar in both directions.
- Validate Arg compact forms and requiredness.

Conventions
- Test method names follow CamelCase per project convention.
- Tests use the public API (String, Bool, Int, Float, Duration, Strings, Ints, Arg).
"""

from __future__ import annotations

import unittest
from datetime import timedelta
from unittest import TestCase

from helmsman import Arg, Bool, Duration, Flag, Float, Int, Ints, Kind, String, Strings
from helmsman.arguments import format_duration, parse_duration


class TestFlagConstruction(TestCase):
    """Behavioral tests for flag definitions."""

    def testFlagIsAbstract(self):
        with self.assertRaises(TypeError):
            Flag("name")

    def testKindsCarryTheirTag(self):
        self.assertIs(String("a").kind, Kind.STRING)
        self.assertIs(Bool("a").kind, Kind.BOOL)
        self.assertIs(Ints("a").kind, Kind.INTS)

    def testKindProperties(self):
        self.assertFalse(Kind.BOOL.takes_value)
        self.assertTrue(Kind.DURATION.takes_value)
        self.assertEqual([kind for kind in Kind if kind.repeatable], [Kind.STRINGS, Kind.INTS])

    def testInvalidNameRejected(self):
        for name in ("", "1port", "-port", "has space"):
            with self.subTest(name=name), self.assertRaises(ValueError):
                String(name)

    def testHelpNameReserved(self):
        with self.assertRaises(ValueError):
            Bool("help")

    def testShortHReserved(self):
        with self.assertRaises(ValueError):
            Bool("host", "h")

    def testShortMustBeOneCharacter(self):
        with self.assertRaises(ValueError):
            String("env", "en")

    def testShortDigitRejected(self):
        with self.assertRaises(ValueError):
            String("env", "1")

    def testEnumAsStringRejected(self):
        with self.assertRaises(TypeError):
            String("env", enum="prod")

    def testValidatorMustBeCallable(self):
        with self.assertRaises(TypeError):
            String("env", validator="nope")

    def testLabel(self):
        self.assertEqual(Bool("verbose", "v").label, "-v, --verbose")
        self.assertEqual(Bool("verbose").label, "--verbose")


class TestFlagDefaults(TestCase):
    """Behavioral tests for default normalization."""

    def testZeroValues(self):
        self.assertEqual(String("a").default, "")
        self.assertIs(Bool("a").default, False)
        self.assertEqual(Int("a").default, 0)
        self.assertEqual(Float("a").default, 0.0)
        self.assertEqual(Duration("a").default, timedelta(0))
        self.assertEqual(Strings("a").default, ())
        self.assertEqual(Ints("a").default, ())

    def testListDefaultsBecomeTuples(self):
        flag = Strings("tag", default=["a", "b"])
        self.assertEqual(flag.default, ("a", "b"))

    def testDurationDefaultFromText(self):
        self.assertEqual(Duration("timeout", default="1m30s").default, timedelta(seconds=90))

    def testDurationDefaultFromSeconds(self):
        self.assertEqual(Duration("timeout", default=5).default, timedelta(seconds=5))

    def testBadDefaultRejected(self):
        with self.assertRaises(TypeError):
            Int("port", default="eighty")

    def testBoolDefaultForIntRejected(self):
        with self.assertRaises(TypeError):
            Int("port", default=True)

    def testStringDefaultForListRejected(self):
        with self.assertRaises(TypeError):
            Strings("tag", default="a,b")

    def testEnumIsStored(self):
        self.assertEqual(String("env", enum=["staging", "prod"]).enum, ("staging", "prod"))


class TestDurations(TestCase):
    """Behavioral tests for the duration grammar."""

    def testCompoundDuration(self):
        self.assertEqual(parse_duration("1h30m"), timedelta(hours=1, minutes=30))

    def testFractionalDuration(self):
        self.assertEqual(parse_duration("2.5s"), timedelta(seconds=2.5))

    def testSubSecondUnits(self):
        self.assertEqual(parse_duration("500ms"), timedelta(milliseconds=500))
        self.assertEqual(parse_duration("10us"), timedelta(microseconds=10))

    def testSignedDuration(self):
        self.assertEqual(parse_duration("-1m"), -timedelta(minutes=1))

    def testBareZero(self):
        self.assertEqual(parse_duration("0"), timedelta(0))

    def testMissingUnitRejected(self):
        for text in ("5", "", "1x", "h"):
            with self.subTest(text=text), self.assertRaises(ValueError):
                parse_duration(text)

    def testOutOfRangeRejected(self):
        for text in ("99999999999h", "1" + "0" * 400 + "s"):
            with self.subTest(text=text[:12]), self.assertRaises(ValueError):
                parse_duration(text)

    def testOutOfRangeDefaultRejected(self):
        with self.assertRaises(TypeError):
            Duration("timeout", default="99999999999h")
        with self.assertRaises(TypeError):
            Duration("timeout", default=10 ** 20)

    def testFormatting(self):
        self.assertEqual(format_duration(timedelta(minutes=90)), "1h30m0s")
        self.assertEqual(format_duration(timedelta(0)), "0s")


class TestArg(TestCase):
    """Behavioral tests for positional Arg definitions."""

    def testRequiredByDefault(self):
        self.assertTrue(Arg("source").required)

    def testDefaultMakesOptional(self):
        self.assertFalse(Arg("dest", default=".").required)

    def testCompactForms(self):
        self.assertTrue(Arg.parse("src").required)
        self.assertFalse(Arg.parse("dest?").required)
        files = Arg.parse("files...")
        self.assertTrue(files.variadic)
        self.assertEqual(files.name, "files")

    def testUsage(self):
        self.assertEqual(Arg.parse("src").usage, "<src>")
        self.assertEqual(Arg.parse("dest?").usage, "[dest]")
        self.assertEqual(Arg.parse("files...").usage, "<files>...")

    def testEmptyNameRejected(self):
        with self.assertRaises(ValueError):
            Arg("")


if __name__ == "__main__":
    unittest.main()
