# python
"""
Arguments module behavioral tests.

Scope
- Validate public specs (Cardinal, Option, Flag): construction, normalization, keys.
- Validate metadata constraints (names, metavars, descr, required/exclusive/greedy rules).
- Validate Signature rendering (usage tokens, help layout).
- Validate Signature.parse(): inline/next-token values, clusters, terminator,
  greedy capture, prefix inference and every argument fault.

Conventions
- Test method names follow CamelCase per project convention.
- Never pass explicit None for any parameter; omit instead.
"""

from __future__ import annotations

import unittest
from unittest import TestCase

from sub import Cardinal, Option, Flag, Signature
from sub.faults import (
    AmbiguousSwitchError,
    DuplicatedSwitchError,
    ExclusiveArgumentError,
    FlagAssignmentError,
    MissingArgumentError,
    OptionValueRequiredError,
    UnexpectedCardinalError,
    UnknownSwitchError,
)


class TestCardinal(TestCase):
    """Behavioral tests for Cardinal (positional) specifications."""

    def testCardinalDefaults(self):
        c = Cardinal("name")
        self.assertEqual(c.name, "name")
        self.assertEqual(c.key, "name")
        self.assertTrue(c.required)
        self.assertFalse(c.exclusive)
        self.assertFalse(c.greedy)
        self.assertIsNone(c.descr)

    def testCardinalNameIsStripped(self):
        self.assertEqual(Cardinal("  name ").name, "name")

    def testCardinalNameMustBeIdentifier(self):
        for name in ("", "  ", "1st", "<name>", "na me"):
            with self.subTest(name=name), self.assertRaises(ValueError):
                Cardinal(name)

    def testCardinalNameMustBeString(self):
        with self.assertRaises(TypeError):
            Cardinal(1)

    def testCardinalDescrExplicitNoneRejected(self):
        with self.assertRaises(TypeError):
            Cardinal("name", descr=None)

    def testCardinalDescrEmptyRejected(self):
        with self.assertRaises(ValueError):
            Cardinal("name", descr="   ")

    def testCardinalDescrIsStripped(self):
        self.assertEqual(Cardinal("name", descr=" who to greet ").descr, "who to greet")

    def testRequiredCardinalCannotBeExclusive(self):
        with self.assertRaises(ValueError):
            Cardinal("name", exclusive=True)

    def testGreedyCardinalCannotBeExclusive(self):
        with self.assertRaises(ValueError):
            Cardinal("files", required=False, greedy=True, exclusive=True)

    def testCardinalIsReadOnly(self):
        c = Cardinal("name")
        with self.assertRaises(AttributeError):
            c.name = "other"

    def testCardinalRepr(self):
        self.assertEqual(
            repr(Cardinal("name")),
            "cardinal(name='name', required=True, exclusive=False, greedy=False, descr=None)",
        )


class TestOption(TestCase):
    """Behavioral tests for Option (value-bearing) specifications."""

    def testOptionDefaults(self):
        o = Option("--count", "COUNT")
        self.assertEqual(o.name, "--count")
        self.assertEqual(o.key, "count")
        self.assertEqual(o.metavar, "COUNT")
        self.assertFalse(o.required)
        self.assertFalse(o.exclusive)

    def testOptionNameNeedsDoubleDash(self):
        for name in ("count", "-c", "---count", "--"):
            with self.subTest(name=name), self.assertRaises(ValueError):
                Option(name, "COUNT")

    def testOptionMetavarMustBeNonEmptyWord(self):
        for metavar in ("", "  ", "TWO WORDS"):
            with self.subTest(metavar=metavar), self.assertRaises(ValueError):
                Option("--count", metavar)

    def testOptionMetavarMustBeString(self):
        with self.assertRaises(TypeError):
            Option("--count", 3)

    def testExclusiveOption(self):
        self.assertTrue(Option("--count", "COUNT", exclusive=True).exclusive)


class TestFlag(TestCase):
    """Behavioral tests for Flag (presence-only) specifications."""

    def testShortFlag(self):
        f = Flag("-v")
        self.assertEqual(f.name, "-v")
        self.assertEqual(f.key, "v")

    def testLongFlag(self):
        f = Flag("--dry-run", descr="do nothing")
        self.assertEqual(f.key, "dry-run")
        self.assertEqual(f.descr, "do nothing")

    def testFlagNameValidation(self):
        for name in ("v", "-1", "-ab", "--", "--1x"):
            with self.subTest(name=name), self.assertRaises(ValueError):
                Flag(name)

    def testRequiredFlagCannotBeExclusive(self):
        with self.assertRaises(ValueError):
            Flag("--loud", required=True, exclusive=True)

    def testFlagRepr(self):
        self.assertEqual(
            repr(Flag("--loud", exclusive=True)),
            "flag(name='--loud', required=False, exclusive=True, descr=None)",
        )


class TestSignatureConstruction(TestCase):
    """Declaration-level constraints of Signature."""

    def testDuplicatedKeysRejected(self):
        with self.assertRaises(ValueError):
            Signature("mycli greet", (Cardinal("loud"), Flag("--loud")))

    def testGreedyCardinalMustBeLast(self):
        with self.assertRaises(ValueError):
            Signature("mycli copy", (Cardinal("files", required=False, greedy=True), Cardinal("target")))

    def testSwitchesMayFollowGreedyCardinal(self):
        signature = Signature("mycli copy", (Cardinal("files", required=False, greedy=True), Flag("-v")))
        self.assertEqual(list(signature.switches), ["-v"])

    def testProgMustBeNonEmpty(self):
        with self.assertRaises(ValueError):
            Signature("  ", ())

    def testArgumentsMustBeSpecs(self):
        with self.assertRaises(TypeError):
            Signature("mycli", ("name",))

    def testIntrospection(self):
        name, loud = Cardinal("name"), Flag("--loud", exclusive=True)
        signature = Signature("mycli greet", [name, loud], summary="Greets")
        self.assertEqual(signature.prog, "mycli greet")
        self.assertEqual(signature.arguments, (name, loud))
        self.assertEqual(signature.cardinals, (name,))
        self.assertEqual(dict(signature.switches), {"--loud": loud})
        self.assertEqual(signature.summary, "Greets")
        self.assertIsNone(signature.description)
        self.assertFalse(signature.infer)


class TestSignatureRendering(TestCase):
    """usage() and help() output."""

    def testGreetUsage(self):
        signature = Signature("mycli greet", (Cardinal("name"), Flag("--loud", exclusive=True)))
        self.assertEqual(signature.usage().plain, "Usage: mycli greet <name> [--loud]")

    def testEveryTokenForm(self):
        signature = Signature("mycli run", (
            Cardinal("host"),
            Cardinal("port", required=False),
            Flag("-v", required=True),
            Flag("-q"),
            Flag("--force", required=True),
            Option("--count", "COUNT"),
            Option("--mode", "MODE", required=True),
            Cardinal("args", required=False, greedy=True),
        ))
        self.assertEqual(
            signature.usage().plain,
            "Usage: mycli run <host> [port] -v [-q] --force [--count=COUNT] --mode=MODE [args]...",
        )

    def testRequiredGreedyCardinal(self):
        signature = Signature("mycli cat", (Cardinal("files", greedy=True),))
        self.assertEqual(signature.usage().plain, "Usage: mycli cat <files>...")

    def testHelpLayout(self):
        signature = Signature(
            "mycli greet",
            (Cardinal("name", descr="who to greet"), Flag("--loud", exclusive=True, descr="shout")),
            summary="Greets",
            description="Says hello.",
        )
        self.assertEqual(
            signature.help().plain,
            "Usage: mycli greet <name> [--loud]\n"
            "\n"
            "Greets\n"
            "\n"
            "Arguments:\n"
            "    <name>    who to greet\n"
            "\n"
            "Options:\n"
            "    --loud    shout\n"
            "\n"
            "Says hello.",
        )

    def testHelpLabelColumnFollowsLongestLabel(self):
        signature = Signature("mycli retry", (
            Option("--count", "COUNT", descr="number of retries"),
            Flag("-v", descr="verbose"),
        ))
        lines = signature.help().plain.splitlines()
        self.assertIn("    --count=COUNT    number of retries", lines)
        self.assertIn("    -v               verbose", lines)

    def testHelpOmitsEmptySections(self):
        signature = Signature("mycli ping", ())
        self.assertEqual(signature.help().plain, "Usage: mycli ping")

    def testUndescribedArgumentHasBareLabel(self):
        signature = Signature("mycli greet", (Cardinal("name"),))
        self.assertEqual(signature.help().plain, "Usage: mycli greet <name>\n\nArguments:\n    <name>")


class TestSignatureParsing(TestCase):
    """parse() results and argument faults."""

    def setUp(self):
        self.greet = Signature("mycli greet", (Cardinal("name"), Flag("--loud", exclusive=True)))
        self.retry = Signature("mycli retry", (
            Option("--count", "COUNT"),
            Flag("-v"),
            Flag("-q"),
            Cardinal("files", required=False, greedy=True),
        ))

    def testPositional(self):
        self.assertEqual(self.greet.parse(["Ada"]), {"name": "Ada"})

    def testExclusiveAlone(self):
        self.assertEqual(self.greet.parse(["--loud"]), {"loud": True})

    def testExclusiveWithOthers(self):
        with self.assertRaises(ExclusiveArgumentError) as context:
            self.greet.parse(["Ada", "--loud"])
        self.assertEqual(context.exception.message, "argument '--loud' must be used alone")
        self.assertEqual(context.exception.argument.key, "loud")

    def testMissingRequired(self):
        with self.assertRaises(MissingArgumentError) as context:
            self.greet.parse([])
        self.assertEqual(context.exception.message, "missing required argument '<name>'")
        self.assertEqual(context.exception.argument.key, "name")

    def testInlineAndNextTokenValues(self):
        self.assertEqual(self.retry.parse(["--count=3"]), {"count": "3"})
        self.assertEqual(self.retry.parse(["--count", "3"]), {"count": "3"})
        self.assertEqual(self.retry.parse(["--count", "-"]), {"count": "-"})

    def testMissingOptionValue(self):
        for tokens in (["--count"], ["--count", "-v"], ["--count="]):
            with self.subTest(tokens=tokens), self.assertRaises(OptionValueRequiredError) as context:
                self.retry.parse(tokens)
            self.assertEqual(context.exception.argument.key, "count")

    def testShortCluster(self):
        self.assertEqual(self.retry.parse(["-vq"]), {"v": True, "q": True})

    def testUnknownShortInCluster(self):
        with self.assertRaises(UnknownSwitchError) as context:
            self.retry.parse(["-vx"])
        self.assertEqual(context.exception.input, "-x")

    def testShortFlagAssignment(self):
        with self.assertRaises(FlagAssignmentError):
            self.retry.parse(["-v=1"])

    def testLongFlagAssignment(self):
        with self.assertRaises(FlagAssignmentError) as context:
            self.greet.parse(["--loud=yes"])
        self.assertEqual(context.exception.input, "--loud")

    def testDuplicatedSwitch(self):
        with self.assertRaises(DuplicatedSwitchError) as context:
            self.retry.parse(["-v", "-v"])
        self.assertEqual(context.exception.index, 2)

    def testDuplicatedOption(self):
        with self.assertRaises(DuplicatedSwitchError):
            self.retry.parse(["--count=1", "--count", "2"])

    def testUnknownLongSwitch(self):
        with self.assertRaises(UnknownSwitchError) as context:
            self.retry.parse(["--unknown"])
        self.assertEqual(context.exception.message, "unknown option or flag '--unknown' at first position")
        self.assertIn("mycli retry --help", context.exception.hint)

    def testUnknownLongSwitchSuggestsClosest(self):
        with self.assertRaises(UnknownSwitchError) as context:
            self.greet.parse(["--lound"])
        self.assertEqual(context.exception.suggestions, ("--loud",))
        self.assertTrue(context.exception.hint.startswith("did you mean '--loud'?"))

    def testGreedyCaptureTakesEverythingOnceStarted(self):
        self.assertEqual(self.retry.parse(["a", "-v", "b"]), {"files": ("a", "-v", "b")})

    def testTerminator(self):
        self.assertEqual(self.retry.parse(["-q", "--", "-v"]), {"q": True, "files": ("-v",)})

    def testResultFollowsDeclarationOrder(self):
        self.assertEqual(list(self.retry.parse(["-v", "--count=2"])), ["count", "v"])

    def testUnexpectedPositional(self):
        with self.assertRaises(UnexpectedCardinalError) as context:
            self.greet.parse(["Ada", "Grace"])
        self.assertEqual(context.exception.input, "Grace")
        self.assertEqual(context.exception.index, 2)

    def testSingleDashIsPositional(self):
        self.assertEqual(self.greet.parse(["-"]), {"name": "-"})


class TestSignatureInference(TestCase):
    """Unique-prefix inference of long names."""

    def setUp(self):
        self.arguments = (Flag("--loud"), Flag("--long"), Option("--name", "NAME"))

    def testUniquePrefix(self):
        signature = Signature("mycli greet", self.arguments, infer=True)
        self.assertEqual(signature.parse(["--n", "Ada"]), {"name": "Ada"})

    def testAmbiguousPrefix(self):
        signature = Signature("mycli greet", self.arguments, infer=True)
        with self.assertRaises(AmbiguousSwitchError) as context:
            signature.parse(["--lo"])
        self.assertEqual(context.exception.candidates, ("--long", "--loud"))

    def testExactNameWins(self):
        signature = Signature("mycli greet", (Flag("--lo"), Flag("--loud")), infer=True)
        self.assertEqual(signature.parse(["--lo"]), {"lo": True})

    def testPrefixRejectedWithoutInference(self):
        signature = Signature("mycli greet", self.arguments)
        with self.assertRaises(UnknownSwitchError):
            signature.parse(["--n", "Ada"])


if __name__ == "__main__":
    unittest.main()
