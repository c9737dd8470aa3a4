"""
Cortana configuration collaborators.

Contracts
- Unmarshaler: callable(data: bytes, record) -> None. Decodes a configuration
  file's content onto a record; raises on malformed input.
- EnvUnmarshaler: callable(record) -> None. Reads the process environment onto
  a record; raises on malformed input.

Ready-made implementations
- unmarshal_json: JSON objects, keys matched against field attribute names.
- EnvironUnmarshaler(prefix): PREFIX_FIELD variables, sequences comma separated.

Both go through populate(), which assigns a decoded mapping onto a record:
keys match attribute names case-insensitively ("-" and "_" are
interchangeable), fields of embedded records are reachable both under the
embedding attribute (as a nested mapping) and directly, strings are coerced
with the command-line grammar, and list values replace the current list.
Unknown keys are ignored.
"""
import json
import logging
import os
from collections.abc import Mapping
from datetime import timedelta
from typing import Protocol, runtime_checkable

from .fields import Embed, Record
from .values import Unsigned, convert

logger = logging.getLogger(__name__)


@runtime_checkable
class Unmarshaler(Protocol):
    def __call__(self, data, record, /): ...


@runtime_checkable
class EnvUnmarshaler(Protocol):
    def __call__(self, record, /): ...


def _key(name):
    return name.lower().replace("-", "_")


def _lookup(record):
    """
    map normalized key -> (owner, descriptor); outer names shadow promoted ones.
    """
    table = {}
    promoted = []
    for name, object in type(record).__fields__:
        table[_key(name)] = (record, object)
        if isinstance(object, Embed):
            promoted.append(getattr(record, name))
    for inner in promoted:
        for key, entry in _lookup(inner).items():
            table.setdefault(key, entry)
    return table


def _coerce(field, value):
    scalar = field.scalar
    if isinstance(value, str):
        return convert(scalar, value)
    if scalar is bool and isinstance(value, bool):
        return value
    if scalar in (int, Unsigned) and isinstance(value, int) and not isinstance(value, bool):
        if scalar is Unsigned and value < 0:
            raise ValueError(f"invalid unsigned integer {value!r}")
        return value
    if scalar is float and isinstance(value, int | float) and not isinstance(value, bool):
        return float(value)
    if scalar is timedelta and isinstance(value, int | float) and not isinstance(value, bool):
        # bare numbers are nanoseconds
        return timedelta(microseconds=value / 1_000)
    raise ValueError(f"cannot use {value!r} as {getattr(scalar, "__name__", scalar)}")


def populate(record, mapping, /):
    """
    Assign a decoded mapping onto record (see the module documentation).

    Raises
    - TypeError: when record is not a cortana.Record or mapping is not a mapping.
    - ValueError: when a value cannot be used for its field.
    """
    if not isinstance(record, Record):
        raise TypeError("populate() first argument must be a record")
    if not isinstance(mapping, Mapping):
        raise TypeError("populate() second argument must be a mapping")

    table = _lookup(record)
    for key, value in mapping.items():
        if (entry := table.get(_key(str(key)))) is None:
            logger.debug("ignored configuration key %r", key)
            continue
        owner, descriptor = entry
        if isinstance(descriptor, Embed):
            populate(descriptor.__get__(owner), value)
            continue
        try:
            if descriptor.sequence:
                if not isinstance(value, list):
                    value = [value]
                value = [_coerce(descriptor, item) for item in value]
            else:
                value = _coerce(descriptor, value)
        except ValueError as exception:
            raise ValueError(f"{key}: {exception}") from None
        descriptor.__set__(owner, value)


def unmarshal_json(data, record, /):
    """
    Unmarshaler for JSON documents whose top level is an object.
    """
    document = json.loads(data)
    if not isinstance(document, dict):
        raise ValueError("configuration document must be a JSON object")
    populate(record, document)


class EnvironUnmarshaler:
    """
    EnvUnmarshaler reading one variable per field.

    The variable of a field is PREFIX_NAME where NAME is the upper-cased
    attribute name (fields of embedded records use their own attribute name).
    Sequence fields split the value on commas.
    """

    def __init__(self, prefix="", /, *, environ=None):
        if not isinstance(prefix, str):
            raise TypeError("EnvironUnmarshaler() 'prefix' must be a string")
        self._prefix = prefix.upper().rstrip("_")
        self._environ = environ

    @property
    def prefix(self):
        return self._prefix

    def variable(self, name):
        name = name.upper()
        return f"{self._prefix}_{name}" if self._prefix else name

    def __call__(self, record, /):
        environ = os.environ if self._environ is None else self._environ
        values = {}
        for key, (_, descriptor) in _lookup(record).items():
            if isinstance(descriptor, Embed):
                continue
            if (value := environ.get(self.variable(key))) is None:
                continue
            values[key] = value.split(",") if descriptor.sequence else value
        populate(record, values)

    def __repr__(self):
        return f"environ-unmarshaler(prefix={self._prefix!r})"


__all__ = (
    "Unmarshaler",
    "EnvUnmarshaler",
    "populate",
    "unmarshal_json",
    "EnvironUnmarshaler",
)
