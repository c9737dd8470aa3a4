"""
Cortana command registry.

The registry is an ordered associative store keyed by command path (a
whitespace-joined sequence of words, "" for the root command). It supports
exact lookups, prefix range scans in lexicographic order and keeps an
insertion-order tag on every entry so help screens can list commands in the
order they were registered.

Layout
- a dict maps path -> private entry (point lookups in O(1)).
- a sorted list of paths is maintained with bisect, so a prefix scan costs
  O(log n + k): locate the first key >= prefix, then walk while keys share it.

Entries are stored privately (with their order tag) and handed out as the
immutable public Command view through _publish().
"""
import bisect
import logging
from typing import NamedTuple

logger = logging.getLogger(__name__)


class Command(NamedTuple):
    """
    Public, immutable view of a registered command.

    - path: space-joined words identifying the command ("" for the root).
    - action: zero-argument callable executed when the command is resolved.
    - brief: one-line description shown in help listings.
    - alias: True when the entry was registered through an alias.
    """
    path: str
    action: object
    brief: str = ""
    alias: bool = False


class _Entry:
    __slots__ = ("path", "action", "brief", "alias", "order")

    def __init__(self, path, action, brief, alias, order):
        self.path = path
        self.action = action
        self.brief = brief
        self.alias = alias
        self.order = order


def _publish(entry):
    return Command(entry.path, entry.action, entry.brief, entry.alias)


class Registry:
    """
    Ordered, prefix-queryable store of commands.

    Lifecycle
    - filled during the setup phase (registration calls), read-only while
      resolving. The registry does no locking; it belongs to one commander and
      is meant to be used from a single thread.
    """

    def __init__(self):
        self._entries = {}
        self._keys = []
        self._sequence = 0

    def insert(self, path, action, brief="", *, alias=False):
        """
        Insert a command, replacing any entry registered under the same path.

        Nothing is preserved from a replaced entry: it receives a fresh
        insertion-order tag as well.
        """
        if not isinstance(path, str):
            raise TypeError("insert() 'path' must be a string")
        if not callable(action):
            raise TypeError("insert() 'action' must be callable")
        if not isinstance(brief, str):
            raise TypeError("insert() 'brief' must be a string")

        path = " ".join(path.split())
        if path not in self._entries:
            bisect.insort(self._keys, path)
        else:
            logger.debug("replacing command %r", path)
        self._entries[path] = _Entry(path, action, brief, bool(alias), self._sequence)
        self._sequence += 1

    def get(self, path):
        """
        Exact lookup; None when no command is registered under path.
        """
        try:
            return _publish(self._entries[path])
        except KeyError:
            return None

    def scan(self, prefix=""):
        """
        Return every command whose path starts with prefix, sorted by path.

        The prefix is a plain string prefix: "say h" matches "say hello".
        An exact match, when registered, is always the first element.
        """
        index = bisect.bisect_left(self._keys, prefix)
        commands = []
        while index < len(self._keys) and (key := self._keys[index]).startswith(prefix):
            commands.append(_publish(self._entries[key]))
            index += 1
        return commands

    def order(self, commands):
        """
        Sort commands (e.g., a scan result) by their insertion order.
        """
        return sorted(commands, key=lambda command: self._entries[command.path].order)

    def __contains__(self, path):
        return path in self._entries

    def __len__(self):
        return len(self._entries)

    def __iter__(self):
        return iter(self.scan())

    def __repr__(self):
        return f"registry({", ".join(map(repr, self._keys))})"


__all__ = (
    "Command",
    "Registry",
)
