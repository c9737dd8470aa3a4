"""
Cortana faults (errors) and rendering.

Scope
- FaultCode: canonical, stable numeric identifiers for every user-facing fault.
- CortanaException: base type carrying a message plus options; knows how to
  render itself with rich and how to surface itself (raise vs. print & exit).
- trigger(): central entry point to surface any fault.
- getdoc(): optional description lookup for a code from the host application.

Policy
- Outside shell mode (the default, suitable for embedding), faults are raised.
- In shell mode, faults are printed to stderr through rich and the process
  exits with status 1. The resolution and binding code never exits on its own;
  termination is the shell's choice.
"""
import copy
import sys
from collections import defaultdict
from enum import IntEnum
from types import MappingProxyType

from rich.console import Console, Group
from rich.panel import Panel
from rich.text import Text

from .utils import Unset

console = Console(stderr=True)


class FaultCode(IntEnum):
    """
    canonical fault codes used across cortana (stable identifiers).

    grouping
    - resolution (2110x)
      • UNKNOWN_COMMAND
    - arguments (2111x)
      • UNKNOWN_ARGUMENT, MISSING_VALUE, INVALID_VALUE, MISSING_REQUIRED,
        DUPLICATED_FLAG
    - configuration (2112x)
      • CONFIG_READ
    """
    # --- resolution errors ---
    UNKNOWN_COMMAND             = 21101

    # --- argument errors ---
    UNKNOWN_ARGUMENT            = 21111
    MISSING_VALUE               = 21112
    INVALID_VALUE               = 21113
    MISSING_REQUIRED            = 21114
    DUPLICATED_FLAG             = 21115

    # --- configuration errors ---
    CONFIG_READ                 = 21121

    def normalize(self):
        """
        return a host-normalized string for this code.

        the host application can provide a __codes__ mapping in __main__
        to override numeric ids with friendlier labels.
        """
        return str(getattr(__import__("__main__"), "__codes__", {}).get(self, self.value))


class CortanaException(Exception):
    def __init__(self, message=Unset, /, **options):
        assert isinstance(message, str | Unset)
        super().__init__(message)
        self.message = message
        self.options = MappingProxyType(options)

    def __str__(self):
        return str(self.message)

    def __rich__(self):
        main = __import__("__main__")

        styles = defaultdict(str, {
            # header parts
            "prog-name": "bold #E6E6F0",  # near-white program name
            "code": "bold #00E5FF",  # neon cyan fault code
            "error-title": "bold #FF4DA6",  # pinky title

            # body
            "error-message": "#C8C8D0",  # soft light gray message
            "hint-arrow": "#9CE19C dim",  # green arrow
            "hint": "italic #9CE19C",  # green hint text
        } | getattr(main, "__styles__", {}))

        colorful = self.options.get("colorful", False)
        fancy = self.options.get("fancy", False)

        def styler(style):
            return styles[style] if colorful else ""

        def text(fragment, style=""):
            if not fragment:
                return Text("")
            if not colorful:
                return Text(str(fragment))
            if isinstance(fragment, Text):
                return fragment
            return Text(str(fragment), style)

        prog = text(
            getattr(main, "__prog__", getattr(self.options.get("tool"), "name", "cortana")),
            styler("prog-name")
        )

        header = Text.assemble(
            "[ ",
            prog,
            " — ",
            text(code.normalize() if (code := self.options.get("code")) else "", styler("code")),
            " | ",
            text(str(self.options.get("title", "error")).title(), styler("error-title")),
            " ]"
        )
        message = text(self.message, styler("error-message"))
        hint = Text.assemble(text(" → ", styler("hint-arrow")), text(self.options.get("hint"), styler("hint")))

        if fancy:
            return Panel(Group(message, hint), title=header, title_align="left")

        return Group(header, message, hint)

    def __trigger__(self) -> None:
        if not self.options.get("shell", False):
            raise self from None
        self.options.get("console", console).print(self)
        sys.exit(1)

    def __replace__(self, *unused, **overrides):
        assert not unused, "unused arguments are not allowed"
        return type(self)(self.message, **{**self.options, **overrides})


class UnknownCommandError(CortanaException): ...
class UnknownArgumentError(CortanaException): ...
class MissingValueError(CortanaException): ...
class InvalidValueError(CortanaException): ...
class MissingRequiredError(CortanaException): ...
class DuplicatedFlagError(CortanaException): ...
class ConfigReadError(CortanaException): ...


def trigger(fault, /, **options):
    """
    surface a fault with the given runtime options.

    contract
    - fault must provide __trigger__ and __replace__ methods (see CortanaException).
    - options are merged into the fault via copy.replace(fault, **options) before triggering.
    - in shell mode, rendering happens via rich console; otherwise, exceptions are raised.

    typical options
    - tool, shell, fancy, colorful, title, code, hint, docs, and any context the
      reporter may want to show (e.g., input/index/argument/path).
    """
    if (
        not hasattr(fault, "__trigger__") or
        not callable(fault.__trigger__) or
        not hasattr(fault, "__replace__") or
        not callable(fault.__replace__)
    ):
        raise TypeError("trigger() argument must have a __trigger__ and __replace__ methods")
    copy.replace(fault, **options).__trigger__()


def getdoc(code, /):
    """
    optional documentation fetch for a fault code.

    the host application may expose a __docs__ mapping in __main__ where keys
    are FaultCode instances and values are short documentation strings.
    """
    if not isinstance(code, FaultCode):
        raise TypeError("getdoc() argument must be a fault-code")
    try:
        return getattr(__import__("__main__"), "__docs__", {})[code]
    except KeyError:
        return None


__all__ = (
    "CortanaException",
    "UnknownCommandError",
    "UnknownArgumentError",
    "MissingValueError",
    "InvalidValueError",
    "MissingRequiredError",
    "DuplicatedFlagError",
    "ConfigReadError",
    "FaultCode",
    "trigger",
    "getdoc",
)
