"""
Cortana command resolution.

resolve() walks an argument vector and discovers the longest registered
command path it refers to, diverting every other token to the command's
argument list. Command paths are multi-word and a prefix of one path may be a
command on its own ("say", "say hello", "say hello cortana"), so a token that
only partially matches deeper paths stays tentative until a later token
settles it.

States
- PATH:             walking command words, the last one committed a command.
- AMBIGUOUS:        the path so far only prefixes deeper commands.
- AFTER_FLAG:       the previous token was a flag.
- AFTER_FLAG_VALUE: the previous token was a (possible) flag value.
- POSITIONAL:       the previous token was a plain argument.

In every state a non-flag token is first tried as a continuation of the path
(the registry is scanned for "<path> <token>"): flags may be interleaved with
path words, and an argument-looking token may still complete a command.
"""
import logging
from enum import IntEnum

from .utils import IntrospectableType, Unset

logger = logging.getLogger(__name__)


class State(IntEnum):
    PATH = 0
    AMBIGUOUS = 1
    AFTER_FLAG = 2
    AFTER_FLAG_VALUE = 3
    POSITIONAL = 4


class Context(metaclass=IntrospectableType):
    """
    Result of one resolution attempt, consumed by the binding engine.

    Fields
    - name: committed command path, or the furthest ambiguous prefix when no
      command was committed (used for usage display).
    - args: the command's private argument slice (flags, values, positionals).
    - longest: path of the furthest successful prefix scan; the usage screen
      lists the commands available under it.
    - title, description: help texts set by the command body.
    - flags, positionals: bindings captured by the last parse (Unset until a
      parse ran), for the usage screen.
    """
    __introspectable__ = (
        "name",
        "args",
        "longest",
        "title",
        "description",
        "flags",
        "positionals",
    )
    __displayable__ = (
        "name",
        "args",
        "longest",
    )

    def __init__(self, name="", args=(), longest=""):
        self._name = name
        self._args = list(args)
        self._longest = longest
        self._title = ""
        self._description = ""
        self._flags = Unset
        self._positionals = Unset


def resolve(registry, argv):
    """
    Resolve argv against the registry.

    Returns
    - (command, context): command is the committed registry.Command, or None
      when no registered command matches (unknown command). The context is
      always returned so callers can still render usage for the furthest
      prefix reached.
    """
    pending = []
    maybe = []
    path = ""
    longest = ""
    state = State.PATH
    command = registry.get(path)

    for token in argv:
        if token.startswith("-"):
            pending.append(token)
            state = State.AFTER_FLAG
            continue

        extended = f"{path} {token}".strip()
        if matches := registry.scan(extended):
            path = longest = extended
            if matches[0].path == extended:
                maybe.clear()
                command = matches[0]
                state = State.PATH
                logger.debug("committed command %r", extended)
            else:
                maybe.append(token)
                state = State.AMBIGUOUS
            continue

        if command is None and state in (State.PATH, State.AMBIGUOUS):
            logger.debug("no command matches %r", extended)
            return None, Context(path, pending + maybe, longest)

        # the ambiguous branch is abandoned: its words were arguments after all
        if maybe:
            pending.extend(maybe)
            maybe.clear()
        if command is not None:
            path = command.path

        pending.append(token)
        state = State.AFTER_FLAG_VALUE if state is State.AFTER_FLAG else State.POSITIONAL

    pending.extend(maybe)
    return command, Context(command.path if command is not None else path, pending, longest)


__all__ = (
    "State",
    "Context",
    "resolve",
)
