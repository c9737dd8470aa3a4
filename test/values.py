"""
Value coercion tests (scalar grammars, durations, kinds).

Conventions
- Test method names follow CamelCase per project convention.
"""

import math
import unittest
from datetime import timedelta
from unittest import TestCase

from cortana.values import Unsigned, parse_duration, kindof, convert, zero, iszero


class TestConvert(TestCase):
    def testString(self):
        self.assertEqual(convert(str, "hello world"), "hello world")

    def testBoolean(self):
        for token in ("1", "t", "T", "TRUE", "true", "True"):
            self.assertIs(convert(bool, token), True)
        for token in ("0", "f", "F", "FALSE", "false", "False"):
            self.assertIs(convert(bool, token), False)
        for token in ("yes", "no", "tRuE", ""):
            with self.assertRaises(ValueError):
                convert(bool, token)

    def testInteger(self):
        self.assertEqual(convert(int, "42"), 42)
        self.assertEqual(convert(int, "-7"), -7)
        self.assertEqual(convert(int, "+7"), 7)
        for token in ("4.2", "0x10", "1_000", " 1", "abc"):
            with self.assertRaises(ValueError):
                convert(int, token)

    def testUnsigned(self):
        self.assertEqual(convert(Unsigned, "42"), 42)
        for token in ("-1", "+1", "x"):
            with self.assertRaises(ValueError):
                convert(Unsigned, token)

    def testFloat(self):
        self.assertEqual(convert(float, "1.5"), 1.5)
        self.assertEqual(convert(float, "1e3"), 1000.0)
        self.assertTrue(math.isinf(convert(float, "inf")))
        self.assertTrue(math.isnan(convert(float, "nan")))
        for token in ("1_0", " 1.5", "one"):
            with self.assertRaises(ValueError):
                convert(float, token)

    def testDuration(self):
        self.assertEqual(convert(timedelta, "300ms"), timedelta(milliseconds=300))


class TestDuration(TestCase):
    def testUnits(self):
        self.assertEqual(parse_duration("1h"), timedelta(hours=1))
        self.assertEqual(parse_duration("1.5h"), timedelta(minutes=90))
        self.assertEqual(parse_duration("2h45m"), timedelta(hours=2, minutes=45))
        self.assertEqual(parse_duration("10s"), timedelta(seconds=10))
        self.assertEqual(parse_duration("250us"), timedelta(microseconds=250))
        self.assertEqual(parse_duration("250µs"), timedelta(microseconds=250))
        self.assertEqual(parse_duration("2000ns"), timedelta(microseconds=2))

    def testSign(self):
        self.assertEqual(parse_duration("-1m30s"), -timedelta(seconds=90))
        self.assertEqual(parse_duration("+1s"), timedelta(seconds=1))

    def testZero(self):
        self.assertEqual(parse_duration("0"), timedelta(0))
        self.assertEqual(parse_duration("-0"), timedelta(0))
        self.assertEqual(parse_duration("0ns"), timedelta(0))

    def testBelowResolution(self):
        for text in ("1ns", "499ns", "-1ns"):
            with self.assertRaises(ValueError, msg=text):
                parse_duration(text)

    def testMalformed(self):
        for text in ("", "1", "h", "1d", ".s", "1h 2m", "-"):
            with self.assertRaises(ValueError, msg=text):
                parse_duration(text)


class TestKinds(TestCase):
    def testScalars(self):
        for scalar in (str, int, Unsigned, float, bool, timedelta):
            self.assertEqual(kindof(scalar), (scalar, False))

    def testSequences(self):
        self.assertEqual(kindof(list[int]), (int, True))
        self.assertEqual(kindof(list[timedelta]), (timedelta, True))
        self.assertEqual(kindof(list), (str, True))

    def testUnsupported(self):
        for annotation in (dict, list[dict], tuple[int], complex):
            with self.assertRaises(TypeError):
                kindof(annotation)

    def testZeroValues(self):
        self.assertEqual(zero(str, False), "")
        self.assertEqual(zero(int, False), 0)
        self.assertEqual(zero(Unsigned, False), 0)
        self.assertIs(zero(bool, False), False)
        self.assertEqual(zero(timedelta, False), timedelta(0))
        self.assertEqual(zero(str, True), [])
        self.assertIsNot(zero(str, True), zero(str, True))

    def testIsZero(self):
        for value in ("", 0, 0.0, False, [], timedelta(0)):
            self.assertTrue(iszero(value))
        for value in ("x", 1, 0.5, True, [""], timedelta(seconds=1)):
            self.assertFalse(iszero(value))


if __name__ == "__main__":
    unittest.main()
