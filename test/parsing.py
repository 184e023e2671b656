# python
"""
Parser behavioral tests (seeding, token scan, binding, required checks).

Scope
- Validate value precedence: command line over environment over config
  over default, and which sources mark a flag as set.
- Validate long, inline, short and bundled flag forms, and "--".
- Validate allowed values, per-flag validators and list accumulation.
- Validate positional binding, the overflow escape hatch and optional
  defaults.
- Validate required flags and command validators.

Conventions
- Test method names follow CamelCase per project convention.
- Commands are parsed directly into a fresh Context; nothing is dispatched.
"""

from __future__ import annotations

import unittest
from datetime import timedelta
from unittest import TestCase

from helmsman import Arg, Bool, Command, Context, Duration, Float, Int, Ints, String, Strings
from helmsman.faults import (
    HelpRequested,
    InvalidChoiceError,
    InvalidValueError,
    MalformedTokenError,
    MissingArgumentError,
    MissingFlagError,
    MissingValueError,
    UnknownFlagError,
    ValidationError,
)
from helmsman.parser import Parser


def parse(command, tokens, *, environ=None, config=None, global_flags=()):
    context = Context(None, command)
    Parser(command, global_flags).parse(context, tokens, environ=environ, config=config)
    return context


class TestSeeding(TestCase):
    """Behavioral tests for pass 1: defaults, environment and config."""

    def setUp(self):
        self.command = Command("deploy").with_flags(
            String("env", "e", env="DEPLOY_ENV", default="staging"),
            Int("replicas", default=1),
        )

    def testDefaultIsNotSet(self):
        context = parse(self.command, [])
        self.assertEqual(context.string("env"), "staging")
        self.assertFalse(context.is_set("env"))

    def testEnvironmentMarksSet(self):
        context = parse(self.command, [], environ={"DEPLOY_ENV": "prod"})
        self.assertEqual(context.string("env"), "prod")
        self.assertTrue(context.is_set("env"))

    def testEmptyEnvironmentCounts(self):
        context = parse(self.command, [], environ={"DEPLOY_ENV": ""})
        self.assertEqual(context.string("env"), "")
        self.assertTrue(context.is_set("env"))

    def testEmptyEnvironmentSatisfiesRequired(self):
        command = Command("login").with_flags(String("token", env="TOKEN", required=True))
        context = parse(command, [], environ={"TOKEN": ""})
        self.assertTrue(context.is_set("token"))

    def testCommandLineBeatsEnvironment(self):
        context = parse(self.command, ["--env", "dev"], environ={"DEPLOY_ENV": "prod"})
        self.assertEqual(context.string("env"), "dev")

    def testConfigBelowEnvironment(self):
        context = parse(self.command, [], environ={"DEPLOY_ENV": "prod"}, config={"env": "qa", "replicas": 3})
        self.assertEqual(context.string("env"), "prod")
        self.assertEqual(context.int("replicas"), 3)
        self.assertFalse(context.is_set("replicas"))


class TestScan(TestCase):
    """Behavioral tests for pass 2: flag forms."""

    def setUp(self):
        self.command = Command("build").with_flags(
            Bool("verbose", "v"),
            Bool("quiet", "q"),
            String("output", "o"),
            Float("ratio"),
            Duration("timeout", "t"),
        )

    def testLongWithSeparateValue(self):
        self.assertEqual(parse(self.command, ["--output", "dist"]).string("output"), "dist")

    def testInlineValue(self):
        self.assertEqual(parse(self.command, ["--output=a=b"]).string("output"), "a=b")

    def testBooleanToggle(self):
        context = parse(self.command, ["--verbose"])
        self.assertTrue(context.bool("verbose"))
        self.assertTrue(context.is_set("verbose"))

    def testBooleanInlineFalse(self):
        self.assertFalse(parse(self.command, ["--verbose=false"]).bool("verbose"))

    def testBundledShortFlags(self):
        context = parse(self.command, ["-vqo", "dist"])
        self.assertTrue(context.bool("verbose"))
        self.assertTrue(context.bool("quiet"))
        self.assertEqual(context.string("output"), "dist")

    def testValueLetterMustBeLast(self):
        with self.assertRaises(MissingValueError):
            parse(self.command, ["-ov", "dist"])

    def testMissingValueAtEnd(self):
        with self.assertRaises(MissingValueError):
            parse(self.command, ["--output"])

    def testFlagShapedValueRejected(self):
        with self.assertRaises(MissingValueError):
            parse(self.command, ["--output", "--verbose"])

    def testNegativeNumberIsAValue(self):
        self.assertEqual(parse(self.command, ["--ratio", "-0.5"]).float("ratio"), -0.5)

    def testDurationValue(self):
        self.assertEqual(parse(self.command, ["-t", "1m30s"]).duration("timeout"), timedelta(seconds=90))

    def testOversizedDurationReadsAsZero(self):
        self.assertEqual(parse(self.command, ["--timeout", "1" + "0" * 400 + "s"]).duration("timeout"), timedelta(0))
        command = Command("wait").with_flags(Duration("timeout", env="TIMEOUT"))
        context = parse(command, [], environ={"TIMEOUT": "99999999999h"})
        self.assertEqual(context.duration("timeout"), timedelta(0))
        self.assertTrue(context.is_set("timeout"))

    def testMalformedToken(self):
        with self.assertRaises(MalformedTokenError):
            parse(self.command, ["--=x"])

    def testUnknownLongFlagSuggests(self):
        with self.assertRaises(UnknownFlagError) as caught:
            parse(self.command, ["--verbos"])
        self.assertEqual(caught.exception.hint, "did you mean --verbose?")

    def testUnknownShortFlag(self):
        with self.assertRaises(UnknownFlagError):
            parse(self.command, ["-x"])

    def testHelpSwitches(self):
        for token in ("--help", "-h", "-vh"):
            with self.subTest(token=token), self.assertRaises(HelpRequested):
                parse(self.command, [token])

    def testSeparatorStopsFlagParsing(self):
        context = parse(self.command, ["--", "--verbose", "-x"])
        self.assertFalse(context.bool("verbose"))
        self.assertEqual(context.args, ["--verbose", "-x"])

    def testDashIsPositional(self):
        self.assertEqual(parse(self.command, ["-"]).args, ["-"])


class TestValueChecks(TestCase):
    """Behavioral tests for allowed values, validators and list flags."""

    def testEnumRejectsOtherValues(self):
        command = Command("deploy").with_flags(String("env", enum=("staging", "prod")))
        with self.assertRaises(InvalidChoiceError) as caught:
            parse(command, ["--env", "prd"])
        self.assertEqual(str(caught.exception), "invalid value for --env: prd (allowed: staging, prod)")

    def testValidatorFailureWrapped(self):
        def even(raw):
            if int(raw) % 2:
                raise ValueError("must be even")

        command = Command("scale").with_flags(Int("count", validator=even))
        with self.assertRaises(InvalidValueError) as caught:
            parse(command, ["--count", "3"])
        self.assertEqual(str(caught.exception), "invalid value for --count: must be even")

    def testStringsAccumulateAndReplaceDefault(self):
        command = Command("tag").with_flags(Strings("tag", default=("latest",)))
        self.assertEqual(parse(command, []).strings("tag"), ["latest"])
        self.assertEqual(parse(command, ["--tag", "a", "--tag", "b"]).strings("tag"), ["a", "b"])

    def testIntsAccumulate(self):
        command = Command("open").with_flags(Ints("port", "p"))
        self.assertEqual(parse(command, ["-p", "80", "-p", "443"]).ints("port"), [80, 443])

    def testIntsRejectNonIntegers(self):
        command = Command("open").with_flags(Ints("port"))
        with self.assertRaises(InvalidValueError) as caught:
            parse(command, ["--port", "http"])
        self.assertEqual(str(caught.exception), "invalid integer for --port: http")

    def testStringsFromEnvironmentSplitOnCommas(self):
        command = Command("tag").with_flags(Strings("tag", env="TAGS"))
        self.assertEqual(parse(command, [], environ={"TAGS": "a,b"}).strings("tag"), ["a", "b"])


class TestReparsing(TestCase):
    """Behavioral tests for parsing one vector repeatedly with fresh contexts."""

    def setUp(self):
        self.command = Command("deploy").with_flags(
            Strings("tag", default=("latest",)),
            Ints("port", default=(80,)),
            String("env", env="DEPLOY_ENV", default="staging"),
        ).with_args("target", "note?")
        self.parser = Parser(self.command)

    def snapshot(self, tokens):
        context = self.parser.parse(Context(None, self.command), tokens, environ={"DEPLOY_ENV": "prod"})
        return (
            context.args,
            context.strings("tag"),
            context.ints("port"),
            context.string("env"),
            [name for name in ("tag", "port", "env") if context.is_set(name)],
        )

    def testSameVectorSameResult(self):
        tokens = ["web", "--tag", "b", "--port", "443", "--tag", "c"]
        first = self.snapshot(tokens)
        self.assertEqual(first, (["web"], ["b", "c"], [443], "prod", ["tag", "port", "env"]))
        self.assertEqual(self.snapshot(tokens), first)

    def testListDefaultsNotMutated(self):
        self.assertEqual(self.snapshot(["web", "--tag", "b"])[1], ["b"])
        self.assertEqual(self.snapshot(["web", "--tag", "b"])[1], ["b"])
        self.assertEqual(self.command.flags[0].default, ("latest",))
        self.assertEqual(self.command.flags[1].default, (80,))
        self.assertEqual(self.snapshot(["web"])[1:3], (["latest"], [80]))


class TestBinding(TestCase):
    """Behavioral tests for pass 3: positional binding."""

    def testRequiredAndOptional(self):
        command = Command("copy").with_args("src", "dest?")
        context = parse(command, ["a"])
        self.assertEqual(context.args, ["a"])
        self.assertEqual(context.arg(1), "")

    def testMissingRequiredArgument(self):
        command = Command("copy").with_args("src", "dest")
        with self.assertRaises(MissingArgumentError) as caught:
            parse(command, ["a"])
        self.assertEqual(str(caught.exception), "missing required argument: dest")

    def testOptionalDefaultBound(self):
        command = Command("copy").add_arg(Arg("src")).add_arg(Arg("dest", default="."))
        self.assertEqual(parse(command, ["a"]).args, ["a", "."])

    def testOverflowExposesEveryToken(self):
        command = Command("cat").with_args("file")
        self.assertEqual(parse(command, ["a", "b", "c"]).args, ["a", "b", "c"])

    def testFlagsMayFollowPositionals(self):
        command = Command("copy").with_args("src").with_flags(Bool("force", "f"))
        context = parse(command, ["a", "-f"])
        self.assertEqual(context.args, ["a"])
        self.assertTrue(context.bool("force"))


class TestChecks(TestCase):
    """Behavioral tests for pass 4: required flags and validators."""

    def testRequiredFlagMissing(self):
        command = Command("deploy").with_flags(String("env", required=True, env="DEPLOY_ENV"))
        with self.assertRaises(MissingFlagError) as caught:
            parse(command, [])
        self.assertEqual(str(caught.exception), "missing required flag: --env")
        self.assertEqual(caught.exception.hint, "pass --env <value> or set $DEPLOY_ENV")

    def testRequiredSatisfiedByEnvironment(self):
        command = Command("deploy").with_flags(String("env", required=True, env="DEPLOY_ENV"))
        self.assertEqual(parse(command, [], environ={"DEPLOY_ENV": "prod"}).string("env"), "prod")

    def testRequiredNotSatisfiedByConfig(self):
        command = Command("deploy").with_flags(String("env", required=True))
        with self.assertRaises(MissingFlagError):
            parse(command, [], config={"env": "prod"})

    def testValidatorsRunInOrder(self):
        seen = []

        def first(context):
            seen.append("first")

        def second(context):
            seen.append("second")
            raise ValidationError("rejected")

        command = Command("check").validate(first, second)
        with self.assertRaises(ValidationError):
            parse(command, [])
        self.assertEqual(seen, ["first", "second"])

    def testArgumentCountValidators(self):
        command = Command("pair").exact_args(2)
        with self.assertRaises(ValidationError):
            parse(command, ["a"])
        command = Command("many").args_range(1, 2)
        with self.assertRaises(ValidationError):
            parse(command, ["a", "b", "c"])
        with self.assertRaises(ValidationError):
            parse(Command("none").no_args(), ["a"])

    def testGlobalFlagsParsedWithCommandFlags(self):
        command = Command("deploy").with_flags(Bool("force"))
        context = parse(command, ["--verbose", "--force"], global_flags=(Bool("verbose", "v"),))
        self.assertTrue(context.bool("verbose"))
        self.assertTrue(context.bool("force"))


if __name__ == "__main__":
    unittest.main()
