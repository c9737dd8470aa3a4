"""
Cortana commander.

Cortana ties the pieces together: it owns the command registry, the
configuration and environment sources and the context of the last
resolution, and exposes the whole lifecycle of a command-line program:

    commander = Cortana()

    @commander.command("say hello", brief="say hello to someone")
    def hello():
        greeting = Greeting()
        commander.title("Say hello")
        commander.parse(greeting)
        ...

    commander.alias("hi", "say hello")
    commander.launch()

Policy
- By default (embedding mode) every fault is raised as a CortanaException.
- With shell=True faults are printed to stderr and the process exits with
  status 1; the help flag prints the usage and exits with status 0.
"""
import copy
import logging
import os
import shlex
import sys
from collections.abc import Iterable
from pathlib import Path

from rich.console import Console

from .binding import ConfigSource, Parser
from .faults import *
from .registry import Registry
from .resolution import Context, resolve
from .usage import Usage
from .utils import *

logger = logging.getLogger(__name__)


def _tokens(argv):
    if argv is Unset:
        return sys.argv[1:]
    if isinstance(argv, str):
        return shlex.split(argv)
    if isinstance(argv, Iterable):
        tokens = list(argv)
        if not all(isinstance(token, str) for token in tokens):
            raise TypeError("argv must be a string or an iterable of strings")
        return tokens
    raise TypeError("argv must be a string or an iterable of strings")


def _console(object, **options):
    if isinstance(object, Console):
        return object
    return Console(file=object, **options)


class Resolved(metaclass=IntrospectableType):
    """
    A successful resolution: the committed command and its context.
    """
    __introspectable__ = (
        "command",
        "context",
    )

    def __init__(self, command, context):
        self._command = command
        self._context = context

    def run(self):
        return self._command.action()


class Cortana(metaclass=IntrospectableType):
    """
    The commander.

    Options (constructor keywords, also accepted by use())
    - name: program name shown in fault headers (defaults to the script name).
    - help: (long, short) names of the help flag, None disables it.
    - conf: (long, short, unmarshaler) of the config-path flag, None disables it.
    - shell: terminate the process on faults and after printing help.
    - colorful, fancy: rich styling of faults and usage screens.
    - stdout, stderr: rich consoles (or writable files) for usage and faults.
    """
    __introspectable__ = (
        "name",
        "help",
        "conf",
        "shell",
        "colorful",
        "fancy",
        "stdout",
        "stderr",
    )
    __displayable__ = (
        "name",
        "help",
        "conf",
        "shell",
        "colorful",
        "fancy",
    )

    def __init__(
            self,
            *,
            name=Unset,
            help=("--help", "-h"),
            conf=None,
            shell=False,
            colorful=False,
            fancy=False,
            stdout=Unset,
            stderr=Unset,
    ):
        self._registry = Registry()
        self._context = Context("", sys.argv[1:])
        self._sources = []
        self._environs = []
        self.use(
            name=coalesce(name, Path(sys.argv[0]).name if sys.argv else "") or "cortana",
            help=help,
            conf=conf,
            shell=shell,
            colorful=colorful,
            fancy=fancy,
            stdout=coalesce(stdout, Console()),
            stderr=coalesce(stderr, Console(stderr=True)),
        )

    def use(self, **options):
        """
        Update commander options (see the class documentation).
        """
        for key, value in options.items():
            match key:
                case "name":
                    if not isinstance(value, str):
                        raise TypeError(f"{type(self).__typename__} 'name' must be a string")
                case "help":
                    if value is not None and (
                        not isinstance(value, tuple) or
                        len(value) != 2 or
                        not all(isinstance(name, str | None) for name in value)
                    ):
                        raise TypeError(f"{type(self).__typename__} 'help' must be a (long, short) tuple or None")
                case "conf":
                    if value is not None and (
                        not isinstance(value, tuple) or
                        len(value) != 3 or
                        not all(isinstance(name, str | None) for name in value[:2]) or
                        not callable(value[2])
                    ):
                        raise TypeError(
                            f"{type(self).__typename__} 'conf' must be a (long, short, unmarshaler) tuple or None"
                        )
                case "shell" | "colorful" | "fancy":
                    if not isinstance(value, bool):
                        raise TypeError(f"{type(self).__typename__} {key!r} must be a boolean")
                case "stdout":
                    value = _console(value)
                case "stderr":
                    value = _console(value, stderr=True)
                case _:
                    raise TypeError(f"use() got an unexpected option {key!r}")
            setattr(self, f"_{key}", value)

    @property
    def context(self):
        return self._context

    @property
    def args(self):
        return self._context.args

    def trigger(self, fault, /, **options):
        """
        Surface a fault with the commander's runtime options attached.
        """
        fault = copy.replace(
            fault,
            **options,
            tool=self,
            shell=self._shell,
            fancy=self._fancy,
            colorful=self._colorful,
            console=self._stderr,
        )
        trigger(fault)

    def command(self, path, action=Unset, /, brief=""):
        """
        Register action under path, or return a decorator doing so.

        Forms
        - commander.command("say hello", hello, "say hello to someone")
        - @commander.command("say hello", brief="say hello to someone")
        """
        @rename("command")
        def wrapper(action, /):
            if not callable(action):
                raise TypeError("@command() must be applied to a callable")
            self._registry.insert(path, action, brief)
            logger.debug("registered command %r", path)
            return action

        return wrapper(action) if action is not Unset else wrapper

    def root(self, action, /):
        """
        Register the command run when no command path is given.
        """
        return self.command("", action)

    def alias(self, name, definition, /):
        """
        Register name as a shorthand for definition.

        Running the alias resolves the words of definition followed by the
        arguments given after the alias, e.g. with alias("hi", "say hello"),
        "hi -n alice" runs "say hello -n alice".
        """
        if not isinstance(definition, str):
            raise TypeError("alias() 'definition' must be a string")
        words = shlex.split(definition)

        @rename("alias")
        def expand():
            if (command := self.search(words + self._context.args)) is None:
                self.usage()
                return
            return command.action()

        self._registry.insert(name, expand, "alias %-5s = %-20s" % (name, definition), alias=True)

    def config(self, path, unmarshaler, /):
        """
        Register a configuration file decoded by unmarshaler(data, record).

        Files are read in registration order on every parse; a missing file
        is skipped. The config-path flag re-points the last registered one.
        """
        if not isinstance(path, str):
            raise TypeError("config() 'path' must be a string")
        if not callable(unmarshaler):
            raise TypeError("config() 'unmarshaler' must be callable")
        self._sources.append(ConfigSource(os.path.expanduser(path), unmarshaler))

    def environ(self, unmarshaler, /):
        """
        Register an environment reader, unmarshaler(record), applied after
        configuration files.
        """
        if not callable(unmarshaler):
            raise TypeError("environ() argument must be callable")
        self._environs.append(unmarshaler)

    def search(self, argv, /):
        """
        Resolve argv and remember its context; None for unknown commands.
        """
        command, self._context = resolve(self._registry, _tokens(argv))
        return command

    def resolve(self, argv, /):
        """
        Resolve argv into a Resolved, triggering UnknownCommandError when no
        registered command matches.
        """
        tokens = _tokens(argv)
        if (command := self.search(tokens)) is None:
            name = next((token for token in tokens if not token.startswith("-")), "")
            self.trigger(
                UnknownCommandError(f"unknown command: {name}"),
                title="unknown command",
                code=FaultCode.UNKNOWN_COMMAND,
                hint="run the program with --help to list the available commands",
                docs=getdoc(FaultCode.UNKNOWN_COMMAND),
                input=name,
            )
            return None
        return Resolved(command, self._context)

    def launch(self, argv=Unset, /):
        """
        Resolve argv (sys.argv[1:] by default) and run the command.

        Unknown commands print the usage; it is a fault only when the first
        token is not a flag ("prog --help" just shows the usage).
        """
        tokens = _tokens(argv)
        if (command := self.search(tokens)) is None:
            self.usage()
            if tokens and not tokens[0].startswith("-"):
                self.trigger(
                    UnknownCommandError(f"unknown command: {tokens[0]}"),
                    title="unknown command",
                    code=FaultCode.UNKNOWN_COMMAND,
                    hint="pick one of the available commands listed above",
                    docs=getdoc(FaultCode.UNKNOWN_COMMAND),
                    input=tokens[0],
                )
            return
        logger.debug("launching %r with %r", command.path, self._context.args)
        command.action()

    def parse(self, record, /, *, args=Unset, ignore_unknown=False, on_usage=Unset, keep_empty=False):
        """
        Bind the current command's arguments into record.

        Parameters
        - args: replaces the context's argument slice when given.
        - ignore_unknown: collect unknown tokens instead of failing; they are
          left in commander.args afterwards.
        - on_usage: callable(usage) invoked with the Usage renderable when the
          help flag is seen. By default the usage is printed (and the process
          exits with status 0 in shell mode).
        - keep_empty: "--flag=" stores an empty string into string fields
          instead of being ignored.

        Returns True once the record is bound, False when the help flag
        aborted binding.
        """
        if args is not Unset:
            self._context._args = _tokens(args)

        def usage():
            if on_usage is not Unset:
                on_usage(self.render())
                return
            self.usage()
            if self._shell:
                sys.exit(0)

        parser = Parser(
            record,
            self._context.args,
            sources=self._sources,
            environs=self._environs,
            help=self._help,
            conf=self._conf,
            ignore_unknown=ignore_unknown,
            keep_empty=keep_empty,
            on_usage=usage,
            report=self.trigger,
        )
        self._context._flags = parser.flags
        self._context._positionals = parser.positionals

        if not parser.run():
            return False
        self._context._args = parser.unknown
        return True

    def commands(self, prefix="", /):
        """
        Registered commands under prefix, sorted by path.

        The usage screen lists them in registration order instead.
        """
        return self._registry.scan(prefix)

    def complete(self, prefix, /):
        """
        Registered commands whose path starts with prefix, sorted by path.
        """
        return self._registry.scan(prefix)

    def title(self, text, /):
        self._context._title = text

    def description(self, text, /):
        self._context._description = text

    def render(self):
        """
        Usage renderable of the current context.
        """
        commands = self._registry.scan(self._context.longest)
        if commands and commands[0].path == self._context.name:
            commands = commands[1:]
        return Usage(
            name=self._context.name,
            title=self._context.title,
            description=self._context.description,
            commands=self._registry.order(commands),
            flags=self._context.flags,
            positionals=self._context.positionals,
            colorful=self._colorful,
            fancy=self._fancy,
        )

    def usage(self):
        """
        Print the usage of the current context.
        """
        self._stdout.print(self.render())


__all__ = (
    "Cortana",
    "Resolved",
)
