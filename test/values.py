# python
"""
Values module behavioral tests (tagged storage and coercion on read).

Scope
- Validate that raw text is interpreted only when read.
- Validate zero values for unparsable payloads.
- Validate structured (config) values and stringification of defaults.

Conventions
- Test method names follow CamelCase per project convention.
"""

from __future__ import annotations

import unittest
from datetime import timedelta
from unittest import TestCase

from helmsman import Ints, Kind, Strings
from helmsman.values import (
    MISSING,
    Tag,
    Value,
    as_bool,
    as_duration,
    as_float,
    as_int,
    as_ints,
    as_string,
    as_strings,
    stringify,
)


class TestTextReads(TestCase):
    """Behavioral tests for raw command-line text."""

    def testIntFromText(self):
        self.assertEqual(as_int(Value.text("42")), 42)
        self.assertEqual(as_int(Value.text(" -7 ")), -7)

    def testUnparsableIntIsZero(self):
        self.assertEqual(as_int(Value.text("many")), 0)

    def testFloatFromText(self):
        self.assertEqual(as_float(Value.text("2.5")), 2.5)
        self.assertEqual(as_float(Value.text("x")), 0.0)

    def testBoolSpellings(self):
        for text in ("true", "1", "yes", "TRUE", "Yes"):
            with self.subTest(text=text):
                self.assertTrue(as_bool(Value.text(text)))
        for text in ("false", "0", "no", "", "on"):
            with self.subTest(text=text):
                self.assertFalse(as_bool(Value.text(text)))

    def testDurationFromText(self):
        self.assertEqual(as_duration(Value.text("1m")), timedelta(minutes=1))
        self.assertEqual(as_duration(Value.text("soon")), timedelta(0))

    def testOversizedDurationIsZero(self):
        self.assertEqual(as_duration(Value.text("99999999999h")), timedelta(0))
        self.assertEqual(as_duration(Value.text("1" + "0" * 400 + "s")), timedelta(0))

    def testStringsSplitOnCommas(self):
        self.assertEqual(as_strings(Value.text("a, b,,c")), ["a", "b", "c"])

    def testIntsSplitOnCommas(self):
        self.assertEqual(as_ints(Value.text("1,2,3")), [1, 2, 3])
        self.assertEqual(as_ints(Value.text("1,x")), [])


class TestTypedReads(TestCase):
    """Behavioral tests for typed payloads (defaults and accumulated lists)."""

    def testInitialValueOfListFlag(self):
        value = Value.initial(Strings("tag", default=("a", "b")))
        self.assertIs(value.tag, Tag.TEXTS)
        self.assertEqual(as_strings(value), ["a", "b"])

    def testIntsRenderAsString(self):
        value = Value.initial(Ints("port", default=(80, 443)))
        self.assertEqual(as_string(value), "80,443")

    def testBoolPayloadAsString(self):
        self.assertEqual(as_string(Value(Tag.BOOL, True)), "true")

    def testDurationPayloadAsSeconds(self):
        self.assertEqual(as_int(Value(Tag.DURATION, timedelta(minutes=2))), 120)

    def testUnrepresentableSecondsAreZero(self):
        self.assertEqual(as_duration(Value(Tag.INT, 10 ** 20)), timedelta(0))
        self.assertEqual(as_duration(Value(Tag.FLOAT, float("nan"))), timedelta(0))
        self.assertEqual(as_duration(Value(Tag.FLOAT, float("inf"))), timedelta(0))
        self.assertEqual(as_duration(Value(Tag.INT, 90)), timedelta(seconds=90))

    def testMissingReadsAsZeroValues(self):
        self.assertEqual(as_string(MISSING), "")
        self.assertEqual(as_int(MISSING), 0)
        self.assertFalse(as_bool(MISSING))
        self.assertEqual(as_strings(MISSING), [])


class TestLoadedValues(TestCase):
    """Behavioral tests for values read from config files."""

    def testListStaysList(self):
        value = Value.loaded(Kind.STRINGS, ["a", "b"])
        self.assertEqual(as_strings(value), ["a", "b"])

    def testBooleanForBoolFlag(self):
        self.assertTrue(as_bool(Value.loaded(Kind.BOOL, True)))

    def testScalarKeptAsText(self):
        value = Value.loaded(Kind.INT, 8080)
        self.assertIs(value.tag, Tag.TEXT)
        self.assertEqual(as_int(value), 8080)


class TestStringify(TestCase):
    """Behavioral tests for formatting python defaults."""

    def testStringify(self):
        self.assertEqual(stringify(True), "true")
        self.assertEqual(stringify(timedelta(seconds=30)), "30s")
        self.assertEqual(stringify(("a", "b")), "a,b")
        self.assertEqual(stringify(3), "3")


if __name__ == "__main__":
    unittest.main()
