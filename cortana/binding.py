"""
Cortana binding engine.

A Parser binds one argument slice into one record:

1. collect the record's bindings plus the synthetic help / config-path flags
   and index flags by name (duplicates are rejected);
2. apply field defaults, then snapshot the record;
3. loop: configuration files -> environment -> arguments. Discovering the
   config-path flag rewrites the argument slice and restarts the loop from the
   snapshot; the help flag aborts it;
4. check requiredness;
5. hand back the tokens nobody claimed (ignore_unknown mode).

Faults are reported through the `report` callable given at construction
(usually the commander's trigger, which applies the shell policy).
"""
import copy
import logging
from enum import Enum
from pathlib import Path
from typing import NamedTuple

from .faults import *
from .fields import Binding, extract, snapshot, restore
from .utils import Unset, coalesce
from .values import iszero

logger = logging.getLogger(__name__)


class ConfigSource(NamedTuple):
    """
    A configuration file and the decoder that applies it onto a record.

    - path: file location; a missing file is skipped unless required.
    - unmarshaler: callable(data: bytes, record) -> None.
    - required: the file must exist (set when given on the command line).
    """
    path: str
    unmarshaler: object
    required: bool = False


class Outcome(Enum):
    DONE = "done"
    RESTART = "restart"
    ABORT = "abort"


class Parser:
    """
    One-shot binder of args into record.

    Parameters
    - record: the cortana.Record receiving values.
    - args: argument slice left over by command resolution.
    - sources: ConfigSource sequence (copied; the parser may re-point the last one).
    - environs: environment unmarshalers, callable(record) -> None.
    - help: (long, short) names of the help flag, or None.
    - conf: (long, short, unmarshaler) of the config-path flag, or None.
    - on_usage: zero-argument callback invoked when help is requested.
    - report: callable(fault, **options) surfacing faults.
    """

    def __init__(
            self,
            record,
            args,
            *,
            sources=(),
            environs=(),
            help=("--help", "-h"),
            conf=None,
            ignore_unknown=False,
            keep_empty=False,
            on_usage=Unset,
            report=trigger,
    ):
        self._record = record
        self._args = list(args)
        self._sources = [copy.replace(source) for source in sources]
        self._environs = list(environs)
        self._ignore_unknown = ignore_unknown
        self._keep_empty = keep_empty
        self._on_usage = coalesce(on_usage, lambda: None)
        self._report = report
        self._help = None
        self._conf = None
        self._unmarshaler = None
        self._unknown = []
        self._supplied = set()
        self._seen = set()

        self._flags, self._positionals = extract(record)
        if help:
            long, short = help
            self._help = Binding("help", long or "", short or "", scalar=bool, descr="help for the command")
            self._flags.append(self._help)
        if conf:
            long, short, self._unmarshaler = conf
            self._conf = Binding(
                "config",
                long or "",
                short or "",
                default=",".join(source.path for source in self._sources) or Unset,
                descr="path of the configuration file",
            )
            self._flags.append(self._conf)

        self._index = {}
        for binding in self._flags:
            for name in binding.names:
                if name in self._index:
                    self._report(
                        DuplicatedFlagError(f"flag {name!r} is declared more than once"),
                        title="duplicated flag",
                        code=FaultCode.DUPLICATED_FLAG,
                        hint="give every field of the record its own long and short names",
                        docs=getdoc(FaultCode.DUPLICATED_FLAG),
                        argument=name,
                    )
                self._index[name] = binding
        # help is matched as a whole token only
        if self._help is not None:
            for name in self._help.names:
                self._index.pop(name, None)

    @property
    def flags(self):
        return list(self._flags)

    @property
    def positionals(self):
        return list(self._positionals)

    @property
    def args(self):
        return list(self._args)

    @property
    def unknown(self):
        return list(self._unknown)

    def _store(self, binding, token):
        try:
            if not binding.apply(token, keep_empty=self._keep_empty):
                logger.debug("ignored empty value for %r", binding.label)
        except ValueError as exception:
            self._report(
                InvalidValueError(f"invalid value {token!r} for {binding.label}: {exception}"),
                title="invalid value",
                code=FaultCode.INVALID_VALUE,
                hint=f"check the value given to {binding.label!r}",
                docs=getdoc(FaultCode.INVALID_VALUE),
                argument=binding.label,
                input=token,
            )

    def _defaults(self):
        for binding in self._flags + self._positionals:
            if binding.required or binding.default is Unset:
                continue
            if binding.sequence and binding.default == "nil":
                continue
            self._store(binding, binding.default)

    def _configs(self):
        for source in self._sources:
            path = Path(source.path).expanduser()
            try:
                data = path.read_bytes()
            except FileNotFoundError as exception:
                if not source.required:
                    logger.debug("skipped missing configuration %s", path)
                    continue
                self._unreadable(path, exception)
            except OSError as exception:
                self._unreadable(path, exception)
            else:
                logger.debug("reading configuration %s", path)
                try:
                    source.unmarshaler(data, self._record)
                except Exception as exception:
                    self._unreadable(path, exception)

    def _unreadable(self, path, exception):
        self._report(
            ConfigReadError(f"cannot read configuration {str(path)!r}: {exception}"),
            title="configuration error",
            code=FaultCode.CONFIG_READ,
            hint="check that the file exists and is well formed",
            docs=getdoc(FaultCode.CONFIG_READ),
            path=str(path),
        )

    def _environ(self):
        for unmarshaler in self._environs:
            try:
                unmarshaler(self._record)
            except Exception as exception:
                self._report(
                    ConfigReadError(f"cannot read environment: {exception}"),
                    title="configuration error",
                    code=FaultCode.CONFIG_READ,
                    hint="check the environment variables of the command",
                    docs=getdoc(FaultCode.CONFIG_READ),
                )

    def _missing(self, key):
        self._report(
            MissingValueError(f"{key} requires an argument"),
            title="missing value",
            code=FaultCode.MISSING_VALUE,
            hint=f"use '{key} <value>' or '{key}=<value>'",
            docs=getdoc(FaultCode.MISSING_VALUE),
            argument=key,
        )

    def _repoint(self, path):
        if self._sources:
            self._sources[-1] = copy.replace(self._sources[-1], path=path, required=True)
        else:
            self._sources.append(ConfigSource(path, self._unmarshaler, True))
        logger.debug("restarting with configuration %s", path)

    def _walk(self):
        """
        Bind the argument slice; returns the pass Outcome.
        """
        args = self._args
        positionals = list(self._positionals)
        self._supplied = set()
        self._seen = set()
        self._unknown = []

        index = 0
        while index < len(args):
            token = args[index]
            index += 1

            if self._help is not None and token in self._help.names:
                self._on_usage()
                return Outcome.ABORT

            if not token.startswith("-") and positionals:
                binding = positionals[0]
                self._store(binding, token)
                self._supplied.add(binding)
                if not binding.sequence:
                    positionals.pop(0)
                continue

            if token.find("=") > 0:
                key, _, value = token.partition("=")
                inline = True
            else:
                key, value, inline = token, "", False
            self._seen.add(key)

            if self._conf is not None and key in self._conf.names:
                if inline and value:
                    del args[index - 1]
                    self._repoint(value)
                    return Outcome.RESTART
                if not inline and index < len(args) and not args[index].startswith("-"):
                    self._repoint(args[index])
                    del args[index - 1:index + 1]
                    return Outcome.RESTART
                self._missing(key)
                continue

            if (binding := self._index.get(key)) is None:
                if not self._ignore_unknown:
                    self._report(
                        UnknownArgumentError(f"unknown argument: {token}"),
                        title="unknown argument",
                        code=FaultCode.UNKNOWN_ARGUMENT,
                        hint="run the command with --help to list the accepted arguments",
                        docs=getdoc(FaultCode.UNKNOWN_ARGUMENT),
                        argument=token,
                    )
                self._unknown.append(token)
                continue

            if inline:
                self._store(binding, value)
            elif binding.scalar is bool and not binding.sequence:
                self._store(binding, "true")
            elif index < len(args) and (not args[index].startswith("-") or args[index] == "--"):
                self._store(binding, args[index])
                index += 1
            else:
                self._missing(key)

        return Outcome.DONE

    def _requires(self):
        for binding in self._positionals:
            if binding.required and binding not in self._supplied and iszero(binding.get()):
                self._absent(f"<{binding.label}>")

        for binding in self._flags:
            if not binding.required or any(name in self._seen for name in binding.names):
                continue
            if iszero(binding.get()):
                self._absent(binding.label)

    def _absent(self, label):
        self._report(
            MissingRequiredError(f"{label} is required"),
            title="missing required argument",
            code=FaultCode.MISSING_REQUIRED,
            hint=f"provide {label} on the command line or in the configuration",
            docs=getdoc(FaultCode.MISSING_REQUIRED),
            argument=label,
        )

    def run(self):
        """
        Bind the record; True when bound, False when aborted by the help flag.
        """
        self._defaults()
        state = snapshot(self._record)

        while True:
            self._configs()
            self._environ()
            match self._walk():
                case Outcome.RESTART:
                    restore(state)
                    continue
                case Outcome.ABORT:
                    return False
            break

        self._requires()
        return True


__all__ = (
    "ConfigSource",
    "Outcome",
    "Parser",
)
