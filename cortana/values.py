"""
Cortana value coercion.

Destination kinds
- str        verbatim
- int        base-10, optional sign
- Unsigned   base-10, no sign
- float      decimal or scientific notation (inf/nan accepted)
- bool       1 t T TRUE true True / 0 f F FALSE false False
- timedelta  duration grammar: "300ms", "1.5h", "2h45m", "-1m30s", "0"
- list[T]    any of the above; every coerced token is appended

Conversions raise ValueError on malformed input; callers turn that into a
user-facing fault with the flag/positional context attached.
"""
import re
import typing
from datetime import timedelta
from typing import NewType

Unsigned = NewType("Unsigned", int)
"""Annotation marker for unsigned integer fields."""

_SCALARS = (str, int, Unsigned, float, bool, timedelta)

_TRUTHS = {"1", "t", "T", "TRUE", "true", "True"}
_FALSEHOODS = {"0", "f", "F", "FALSE", "false", "False"}

# nanoseconds per unit
_UNITS = {
    "ns": 1,
    "us": 1_000,
    "µs": 1_000,
    "μs": 1_000,
    "ms": 1_000_000,
    "s": 1_000_000_000,
    "m": 60_000_000_000,
    "h": 3_600_000_000_000,
}

_DURATION = re.compile(r"([0-9]*(?:\.[0-9]*)?)(ns|us|µs|μs|ms|s|m|h)")


def parse_duration(text, /):
    """
    Parse a duration string into a timedelta.

    A duration is an optionally signed sequence of decimal numbers, each with an
    optional fraction and a mandatory unit suffix, such as "300ms", "-1.5h" or
    "2h45m". Valid units are "ns", "us" (or "µs"), "ms", "s", "m", "h". The
    special value "0" needs no unit.

    timedelta has microsecond resolution: sub-microsecond parts are rounded,
    and a non-zero duration that rounds to zero ("1ns") is rejected.
    """
    if not isinstance(text, str):
        raise TypeError("parse_duration() argument must be a string")

    source = text
    sign = 1
    if text[:1] in ("-", "+"):
        sign = -1 if text[0] == "-" else 1
        text = text[1:]
    if text == "0":
        return timedelta(0)
    if not text:
        raise ValueError(f"invalid duration {source!r}")

    total = 0.0
    position = 0
    while position < len(text):
        match = _DURATION.match(text, position)
        if not match or match[1] in ("", "."):
            raise ValueError(f"invalid duration {source!r}")
        total += float(match[1]) * _UNITS[match[2]]
        position = match.end()

    duration = timedelta(microseconds=sign * total / 1_000)
    if total and not duration:
        raise ValueError(f"duration {source!r} is below microsecond resolution")
    return duration


def kindof(annotation, /):
    """
    Return (scalar, sequence) for a field annotation.

    - scalar is one of str, int, Unsigned, float, bool, timedelta.
    - sequence is True for list[scalar] annotations.

    Raises TypeError for anything else.
    """
    if annotation in _SCALARS:
        return annotation, False
    if typing.get_origin(annotation) is list:
        arguments = typing.get_args(annotation)
        if len(arguments) == 1 and arguments[0] in _SCALARS:
            return arguments[0], True
    if annotation is list:
        return str, True
    raise TypeError(f"unsupported field type {annotation!r}")


def convert(scalar, token, /):
    """
    Convert a single token into the given scalar kind.
    """
    if scalar is str:
        return token
    elif scalar is bool:
        if token in _TRUTHS:
            return True
        if token in _FALSEHOODS:
            return False
        raise ValueError(f"invalid boolean {token!r}")
    elif scalar is Unsigned:
        if not re.fullmatch(r"[0-9]+", token):
            raise ValueError(f"invalid unsigned integer {token!r}")
        return int(token, 10)
    elif scalar is int:
        if not re.fullmatch(r"[+-]?[0-9]+", token):
            raise ValueError(f"invalid integer {token!r}")
        return int(token, 10)
    elif scalar is float:
        # float() tolerates surrounding blanks and digit underscores; the grammar does not
        if "_" in token or token != token.strip():
            raise ValueError(f"invalid float {token!r}")
        return float(token)
    elif scalar is timedelta:
        return parse_duration(token)
    raise TypeError(f"unsupported scalar kind {scalar!r}")


def zero(scalar, sequence, /):
    """
    Natural zero value of a kind (a fresh list for sequences).
    """
    if sequence:
        return []
    if scalar is timedelta:
        return timedelta(0)
    if scalar is Unsigned:
        return 0
    return scalar()


def iszero(value, /):
    """
    True when value equals the natural zero of its kind.
    """
    if isinstance(value, timedelta):
        return not value
    if isinstance(value, list):
        return not value
    return value in ("", 0, 0.0, False, None)


__all__ = (
    "Unsigned",
    "parse_duration",
    "kindof",
    "convert",
    "zero",
    "iszero",
)
