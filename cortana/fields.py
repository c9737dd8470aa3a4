r"""
Cortana declarative fields.

Overview
- Record: base class for the structures command bodies parse into. The field
  table of a record is assembled once, when the class is created, from the
  Field/Embed descriptors it declares (and inherits).
- Field: one option or positional, declared with the compact tag grammar

      "long, short, default, description"

  • long: "--name" makes a flag; a word without the leading dash ("text")
    makes a positional; "-" means "no long name".
  • short: "-n", or "-" / "" for none.
  • default: a literal applied before parsing; "-" marks the field required;
    '' or "" is an explicit empty-string default; omitted means the natural
    zero value of the field's type.
  • description: free text for the usage screen (may contain commas).

  The value type comes from the annotation or from Field(..., type=...).
- Embed: splices the fields of a nested record in place.
- extract(record): flat (flags, positionals) lists of Binding objects.

Example

    >>> class Greeting(Record):
    ...     name: str = Field("--name, -n, cortana, say something to cortana")
    ...     age: int = Field("--age, -, 18, say something to someone with certain age")
    ...     text: str = Field("text, -, -")
    ...
    >>> flags, positionals = extract(Greeting())
"""
import copy
import re
import typing

from .utils import *
from .values import kindof, convert, zero

_NAME = re.compile(r"--?[^\W\d_](-?[^\W_]+)*")


def _parse_tag(tag):
    """
    split a tag into (long, short, default, required, descr).
    """
    parts = [part.strip() for part in tag.split(",", 3)]
    parts += [""] * (4 - len(parts))
    long, short, default, descr = parts

    required = default == "-"
    if required or not default:
        default = Unset
    elif default in ("''", '""'):
        default = ""
    return long, short, default, required, descr


class Field(metaclass=IntrospectableType):
    """
    Declarative description of a record field (flag or positional).

    Field is a data descriptor: reading it from a record instance returns the
    current value (the natural zero of its type until something is assigned);
    reading it from the class returns the Field itself.
    """
    __introspectable__ = (
        "name",
        "long",
        "short",
        "default",
        "required",
        "descr",
        "flag",
        "type",
        "scalar",
        "sequence",
    )
    __displayable__ = (
        "name",
        "long",
        "short",
        "default",
        "required",
        "descr",
    )

    def __init__(self, tag="", /, *, type=Unset):
        if not isinstance(tag, str):
            raise TypeError(f"{Field.__typename__} 'tag' must be a string")

        long, short, default, required, descr = _parse_tag(tag)

        self._flag = long.startswith("-")
        if short and short != "-" and not _NAME.fullmatch(short):
            raise ValueError(f"{Field.__typename__} short name {short!r} must be a valid shell-style option name")
        if self._flag and long != "-" and not _NAME.fullmatch(long):
            raise ValueError(f"{Field.__typename__} long name {long!r} must be a valid shell-style option name")
        if not self._flag and short and short != "-":
            raise ValueError(f"{Field.__typename__} positional {long!r} cannot have a short name")

        self._long = "" if long == "-" else long
        self._short = "" if short == "-" else short
        self._default = default
        self._required = required
        self._descr = descr
        self._name = Unset
        self._type = type
        self._scalar = Unset
        self._sequence = False
        if type is not Unset:
            self._resolve(type)

    def _resolve(self, annotation):
        self._type = annotation
        self._scalar, self._sequence = kindof(annotation)

    @property
    def listed(self):
        """
        False for flags whose long and short names are both "-": such fields
        are only reachable through configuration sources.
        """
        return not self._flag or bool(self._long or self._short)

    def __set_name__(self, owner, name):
        self._name = name

    def __get__(self, instance, owner=None):
        if instance is None:
            return self
        try:
            return instance.__dict__[self._name]
        except KeyError:
            return instance.__dict__.setdefault(self._name, zero(self._scalar, self._sequence))

    def __set__(self, instance, value):
        instance.__dict__[self._name] = value


class Embed(metaclass=IntrospectableType):
    """
    Nested record whose fields are spliced into the parent's flags and
    positionals, in declaration order.
    """
    __introspectable__ = (
        "name",
        "record",
    )

    def __init__(self, record, /):
        if not isinstance(record, type) or not issubclass(record, Record):
            raise TypeError(f"{Embed.__typename__} 'record' must be a record type")
        self._record = record
        self._name = Unset

    def __set_name__(self, owner, name):
        self._name = name

    def __get__(self, instance, owner=None):
        if instance is None:
            return self
        try:
            return instance.__dict__[self._name]
        except KeyError:
            return instance.__dict__.setdefault(self._name, self._record())

    def __set__(self, instance, value):
        if not isinstance(value, self._record):
            raise TypeError(f"{self._name!r} must be a {self._record.__name__!r} record")
        instance.__dict__[self._name] = value


class Record:
    """
    Base class of parse targets.

    The field table (__fields__) is built when the subclass is created:
    inherited fields come first, then the class' own ones, each in
    declaration order. Field types are resolved from the annotations at the
    same time, so a mistyped record fails at import rather than mid-parse.
    """
    __fields__ = ()

    def __init_subclass__(cls, **options):
        super().__init_subclass__(**options)

        fields = {}
        for base in reversed(cls.__mro__):
            for name, object in vars(base).items():
                if isinstance(object, Field | Embed):
                    fields[name] = object
        cls.__fields__ = tuple(fields.items())

        unresolved = [object for object in vars(cls).values() if isinstance(object, Field) and object.type is Unset]
        if not unresolved:
            return
        try:
            hints = typing.get_type_hints(cls)
        except NameError as exception:
            raise TypeError(
                f"record {cls.__name__!r} annotations cannot be resolved ({exception}); pass Field(..., type=...)"
            ) from None
        for field in unresolved:
            field._resolve(hints.get(field.name, str))

    def __init__(self, **values):
        names = dict(type(self).__fields__)
        for name, value in values.items():
            if name not in names:
                raise TypeError(f"{type(self).__name__}() got an unexpected field {name!r}")
            setattr(self, name, value)

    def __rich_repr__(self):
        for name, _ in type(self).__fields__:
            yield name, getattr(self, name)

    def __repr__(self):
        return f"{type(self).__name__}({", ".join("%s=%r" % pair for pair in self.__rich_repr__())})"

    def __eq__(self, other):
        if type(self) is not type(other):
            return NotImplemented
        return all(getattr(self, name) == getattr(other, name) for name, _ in type(self).__fields__)

    __hash__ = None


class Binding(metaclass=IntrospectableType):
    """
    One flag or positional as seen by a single parse call.

    A binding couples a field's metadata with its destination slot (the owning
    record instance and the attribute name). Synthetic bindings (help and
    configuration-path flags) carry their own slot.
    """
    __introspectable__ = (
        "name",
        "long",
        "short",
        "positional",
        "required",
        "default",
        "descr",
    )

    def __init__(
            self,
            name,
            long="",
            short="",
            *,
            positional=False,
            required=False,
            default=Unset,
            descr="",
            scalar=str,
            sequence=False,
            owner=Unset,
    ):
        self._name = name
        self._long = long
        self._short = short
        self._positional = positional
        self._required = required
        self._default = default
        self._descr = descr
        self._scalar = scalar
        self._sequence = sequence
        self._owner = owner
        self._value = zero(scalar, sequence)

    @classmethod
    def of(cls, field, owner, /):
        return cls(
            field.name,
            field.long,
            field.short,
            positional=not field.flag,
            required=field.required,
            default=field.default,
            descr=field.descr,
            scalar=field.scalar,
            sequence=field.sequence,
            owner=owner,
        )

    @property
    def scalar(self):
        return self._scalar

    @property
    def sequence(self):
        return self._sequence

    @property
    def names(self):
        """
        the flag names this binding answers to (empty for positionals).
        """
        if self._positional:
            return ()
        return tuple(name for name in (self._long, self._short) if name)

    @property
    def label(self):
        """
        the display name: long name, else short name, else attribute name.
        """
        return self._long or self._short or self._name

    def get(self):
        if self._owner is Unset:
            return self._value
        return getattr(self._owner, self._name)

    def set(self, value):
        if self._owner is Unset:
            self._value = value
        else:
            setattr(self._owner, self._name, value)

    def apply(self, token, /, *, keep_empty=False):
        """
        Coerce token and store it (append for sequences).

        An empty token is a no-op and returns False; with keep_empty the empty
        string is stored for str fields and appended for list[str] fields.
        Raises ValueError when the token cannot be coerced.
        """
        if not token:
            if not keep_empty or self._scalar is not str:
                return False
            value = ""
        else:
            value = convert(self._scalar, token)

        if self._sequence:
            current = self.get()
            current.append(value)
            self.set(current)
        else:
            self.set(value)
        return True


def _slots(record):
    """
    yield (owner, field) for every field of record, depth-first.
    """
    for name, object in type(record).__fields__:
        if isinstance(object, Embed):
            yield from _slots(getattr(record, name))
        else:
            yield record, object


def extract(record, /):
    """
    Walk a record and return its (flags, positionals) bindings.

    - Embedded records are expanded in place, depth-first.
    - Flags whose long and short names are both "-" are skipped.
    """
    if not isinstance(record, Record):
        raise TypeError("extract() argument must be a record")

    flags = []
    positionals = []
    for owner, field in _slots(record):
        if not field.listed:
            continue
        binding = Binding.of(field, owner)
        if field.flag:
            flags.append(binding)
        else:
            positionals.append(binding)
    return flags, positionals


def snapshot(record, /):
    """
    Capture every field value of record (containers are copied).
    """
    return [(owner, field, copy.copy(field.__get__(owner))) for owner, field in _slots(record)]


def restore(state, /):
    """
    Put back the values captured by snapshot().
    """
    for owner, field, value in state:
        field.__set__(owner, copy.copy(value))


__all__ = (
    "Field",
    "Embed",
    "Record",
    "Binding",
    "extract",
    "snapshot",
    "restore",
)
