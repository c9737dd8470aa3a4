"""
Binding engine tests (defaults, overlays, restart, requiredness, faults).

Scope
- Drive cortana.binding.Parser directly with hand-made argument slices.
- Configuration files are written to a temporary directory.

Conventions
- Test method names follow CamelCase per project convention.
- Records are declared at module level so their annotations resolve.
"""

import json
import os
import tempfile
import unittest
from datetime import timedelta
from unittest import TestCase

from cortana.binding import ConfigSource, Parser
from cortana.faults import (
    UnknownArgumentError,
    MissingValueError,
    InvalidValueError,
    MissingRequiredError,
    DuplicatedFlagError,
    ConfigReadError,
)
from cortana.fields import Embed, Field, Record
from cortana.unmarshalers import unmarshal_json, EnvironUnmarshaler
from cortana.values import Unsigned


class Greeting(Record):
    name: str = Field("--name, -n, cortana, say something to cortana")
    age: int = Field("--age, -, 18, say something to someone with certain age")
    verbose: bool = Field("--verbose, -v")
    text: str = Field("text")
    rest: list[str] = Field("rest")


class Options(Record):
    tags: list[str] = Field("--tag, -t, nil")
    levels: list[Unsigned] = Field("--level, -, 3")
    timeout: timedelta = Field("--timeout, -, 1m")
    ratio: float = Field("--ratio")


class Required(Record):
    token: str = Field("--token, -, -")
    target: str = Field("target, -, -")


class Clashing(Record):
    first: str = Field("--name, -n")
    second: str = Field("--nick, -n")


class HelpClash(Record):
    hint: str = Field("--hint, -h")


class Body(Record):
    text: str = Field("body, -, -")


class Message(Record):
    text: str = Field("text")
    body = Embed(Body)


def parse(record, args, **options):
    parser = Parser(record, args, **options)
    return parser, parser.run()


class TestArguments(TestCase):
    def testDefaultsApply(self):
        greeting = Greeting()
        _, bound = parse(greeting, [])
        self.assertTrue(bound)
        self.assertEqual(greeting.name, "cortana")
        self.assertEqual(greeting.age, 18)
        self.assertFalse(greeting.verbose)

    def testScalarAndSequencePositionals(self):
        greeting = Greeting()
        parse(greeting, ["-n", "alice", "hello", "world", "again"])
        self.assertEqual(greeting.name, "alice")
        self.assertEqual(greeting.text, "hello")
        self.assertEqual(greeting.rest, ["world", "again"])

    def testInlineEqualsSpaced(self):
        inline, spaced = Greeting(), Greeting()
        parse(inline, ["--age=30", "--name=bob"])
        parse(spaced, ["--age", "30", "--name", "bob"])
        self.assertEqual(inline, spaced)
        self.assertEqual(inline.age, 30)

    def testBareBooleanIsTrue(self):
        greeting = Greeting()
        parse(greeting, ["-v"])
        self.assertTrue(greeting.verbose)

        greeting = Greeting()
        parse(greeting, ["--verbose=false"])
        self.assertFalse(greeting.verbose)

    def testDoubleDashIsAValue(self):
        greeting = Greeting()
        parse(greeting, ["--name", "--"])
        self.assertEqual(greeting.name, "--")

    def testIdempotentReparse(self):
        first, second = Greeting(), Greeting()
        parse(first, ["-n", "alice", "hi", "a", "b"])
        parse(second, ["-n", "alice", "hi", "a", "b"])
        self.assertEqual(first, second)

    def testSequenceFlagsAppend(self):
        options = Options()
        parse(options, ["-t", "a", "--tag=b", "--level", "4"])
        self.assertEqual(options.tags, ["a", "b"])
        self.assertEqual(options.levels, [3, 4])

    def testNilDefaultIsSkipped(self):
        options = Options()
        parse(options, [])
        self.assertEqual(options.tags, [])
        self.assertEqual(options.timeout, timedelta(minutes=1))

    def testEmptyInlineValueIsIgnored(self):
        greeting = Greeting()
        parse(greeting, ["--name="])
        self.assertEqual(greeting.name, "cortana")

    def testKeepEmpty(self):
        greeting = Greeting()
        parse(greeting, ["--name="], keep_empty=True)
        self.assertEqual(greeting.name, "")

        options = Options()
        parse(options, ["--tag="], keep_empty=True)
        self.assertEqual(options.tags, [""])

        options = Options()
        parse(options, ["--ratio="], keep_empty=True)
        self.assertEqual(options.ratio, 0.0)

    def testMissingValue(self):
        with self.assertRaises(MissingValueError):
            parse(Greeting(), ["--name"])
        with self.assertRaises(MissingValueError):
            parse(Greeting(), ["--name", "-v"])

    def testInvalidValue(self):
        with self.assertRaises(InvalidValueError):
            parse(Greeting(), ["--age", "old"])
        with self.assertRaises(InvalidValueError):
            parse(Options(), ["--level=-1"])

    def testUnknownArgument(self):
        with self.assertRaises(UnknownArgumentError):
            parse(Greeting(), ["--color", "red"])
        with self.assertRaises(UnknownArgumentError):
            parse(Options(), ["stray"])

    def testIgnoreUnknown(self):
        options = Options()
        parser, bound = parse(options, ["stray", "-t", "x", "--color=red"], ignore_unknown=True)
        self.assertTrue(bound)
        self.assertEqual(parser.unknown, ["stray", "--color=red"])
        self.assertEqual(options.tags, ["x"])

    def testHelpAborts(self):
        calls = []
        greeting = Greeting()
        parser, bound = parse(greeting, ["-n", "alice", "-h", "--bogus"], on_usage=lambda: calls.append(True))
        self.assertFalse(bound)
        self.assertEqual(calls, [True])

    def testHelpCanBeDisabled(self):
        with self.assertRaises(UnknownArgumentError):
            parse(Greeting(), ["--help"], help=None)

    def testHelpTakesNoInlineValue(self):
        with self.assertRaises(UnknownArgumentError):
            parse(Greeting(), ["--help=1"])
        parser, bound = parse(Greeting(), ["--help=1"], ignore_unknown=True)
        self.assertTrue(bound)
        self.assertEqual(parser.unknown, ["--help=1"])

    def testDuplicatedFlags(self):
        with self.assertRaises(DuplicatedFlagError):
            parse(Clashing(), [])
        with self.assertRaises(DuplicatedFlagError):
            parse(HelpClash(), [])
        parse(HelpClash(), [], help=("--help", None))


class TestRequired(TestCase):
    def testMissingRequiredFlag(self):
        with self.assertRaises(MissingRequiredError):
            parse(Required(), ["target"])

    def testMissingRequiredPositional(self):
        with self.assertRaises(MissingRequiredError):
            parse(Required(), ["--token", "secret"])

    def testSatisfied(self):
        required = Required()
        _, bound = parse(required, ["--token=secret", "target"])
        self.assertTrue(bound)
        self.assertEqual(required.token, "secret")

    def testEmbeddedPositionalIsTrackedApart(self):
        with self.assertRaises(MissingRequiredError):
            parse(Message(), ["x"])

        message = Message()
        _, bound = parse(message, ["x", "y"])
        self.assertTrue(bound)
        self.assertEqual(message.text, "x")
        self.assertEqual(message.body.text, "y")

    def testPresetValueSatisfies(self):
        required = Required(token="preset", target="there")
        _, bound = parse(required, [])
        self.assertTrue(bound)


class TestOverlays(TestCase):
    def setUp(self):
        self.directory = tempfile.TemporaryDirectory()
        self.addCleanup(self.directory.cleanup)

    def write(self, name, document):
        path = os.path.join(self.directory.name, name)
        with open(path, "w") as file:
            json.dump(document, file)
        return path

    def testConfigOverridesDefaultsAndArgsOverrideConfig(self):
        path = self.write("greeting.json", {"name": "from-config", "Age": 40})
        greeting = Greeting()
        parse(greeting, ["--age", "41"], sources=[ConfigSource(path, unmarshal_json)])
        self.assertEqual(greeting.name, "from-config")
        self.assertEqual(greeting.age, 41)

    def testMissingOptionalConfigIsTolerated(self):
        greeting = Greeting()
        missing = os.path.join(self.directory.name, "missing.json")
        _, bound = parse(greeting, [], sources=[ConfigSource(missing, unmarshal_json)])
        self.assertTrue(bound)

    def testMissingRequiredConfigFails(self):
        missing = os.path.join(self.directory.name, "missing.json")
        with self.assertRaises(ConfigReadError):
            parse(Greeting(), [], sources=[ConfigSource(missing, unmarshal_json, True)])

    def testMalformedConfigFails(self):
        path = os.path.join(self.directory.name, "broken.json")
        with open(path, "w") as file:
            file.write("{not json")
        with self.assertRaises(ConfigReadError):
            parse(Greeting(), [], sources=[ConfigSource(path, unmarshal_json)])

    def testConfigFlagRestarts(self):
        default = self.write("greeting.json", {"name": "default"})
        other = self.write("other.json", {"name": "other", "age": 7})
        sources = [ConfigSource(default, unmarshal_json)]

        greeting = Greeting()
        parser, _ = parse(
            greeting,
            ["--age", "9", "--config", other, "hi"],
            sources=sources,
            conf=("--config", "-c", unmarshal_json),
        )
        self.assertEqual(greeting.name, "other")
        self.assertEqual(greeting.age, 9)
        self.assertEqual(greeting.text, "hi")
        self.assertEqual(parser.args, ["--age", "9", "hi"])
        # the commander's sources are left untouched
        self.assertEqual(sources[0].path, default)

    def testConfigFlagRestartDoesNotDuplicateSequences(self):
        other = self.write("other.json", {})
        options = Options()
        parse(options, ["-t", "a", f"-c={other}", "-t", "b"], conf=("--config", "-c", unmarshal_json))
        self.assertEqual(options.tags, ["a", "b"])
        self.assertEqual(options.levels, [3])

    def testConfigFlagWithoutRegisteredSource(self):
        other = self.write("other.json", {"name": "other"})
        greeting = Greeting()
        parse(greeting, ["-c", other], conf=("--config", "-c", unmarshal_json))
        self.assertEqual(greeting.name, "other")

    def testConfigFlagFileMustExist(self):
        missing = os.path.join(self.directory.name, "missing.json")
        with self.assertRaises(ConfigReadError):
            parse(Greeting(), ["--config", missing], conf=("--config", "-c", unmarshal_json))

    def testConfigFlagRequiresValue(self):
        with self.assertRaises(MissingValueError):
            parse(Greeting(), ["--config"], conf=("--config", "-c", unmarshal_json))

    def testEnvironmentAppliesAfterConfig(self):
        path = self.write("greeting.json", {"name": "from-config", "age": 40})
        environ = EnvironUnmarshaler("greeting", environ={"GREETING_NAME": "from-env"})
        greeting = Greeting()
        parse(greeting, [], sources=[ConfigSource(path, unmarshal_json)], environs=[environ])
        self.assertEqual(greeting.name, "from-env")
        self.assertEqual(greeting.age, 40)

    def testMalformedEnvironmentFails(self):
        environ = EnvironUnmarshaler("greeting", environ={"GREETING_AGE": "old"})
        with self.assertRaises(ConfigReadError):
            parse(Greeting(), [], environs=[environ])


if __name__ == "__main__":
    unittest.main()
