"""
Cortana usage screen.

Usage is a rich renderable assembled from what the commander knows about the
current command:

    <title>

    <description>

    Available commands:

    say hello                     say hello to someone
    ...

    Alias commands:

    hi                            alias hi    = say hello
    ...

    Usage: say [options] <text>

      -n, --name <name>              say something to cortana (default=cortana)
      -h, --help                     help for the command

str(usage) renders it as plain text (no colors, no panel).
"""
from collections import defaultdict
from datetime import timedelta

from rich.console import Console, Group
from rich.panel import Panel
from rich.text import Text

from .utils import *
from .values import zero

_COLUMN = 30
_INDENT = _COLUMN + 3


def _display(binding):
    if binding.default is not Unset:
        return binding.default
    value = zero(binding.scalar, binding.sequence)
    if isinstance(value, str):
        return '""'
    if isinstance(value, timedelta):
        return "0s"
    return str(value)


def _names(binding):
    if binding.short and binding.long:
        names = f"{binding.short}, {binding.long}"
    elif binding.short:
        names = binding.short
    else:
        names = f"    {binding.long}"
    if binding.scalar is not bool or binding.sequence:
        names += f" <{binding.long.lstrip("-") or binding.name.lower()}>"
    return names


class Usage:
    """
    Help screen of a command.

    Parameters
    - name: command path shown in the usage line ("" for the root command).
    - title, description: free texts set by the command body.
    - commands: registry.Command list available under the current prefix,
      already in display order; alias entries are listed apart.
    - flags, positionals: fields.Binding lists captured by the last parse, or
      Unset when nothing was parsed (no usage line then).
    - colorful, fancy: same meaning as for faults.

    Palette keys (overridable through a __styles__ mapping in __main__)
    - title-section, description-section
    - commands-label, command, command-brief
    - usage-label, program-name, metavar
    - option-name, flag-description, default
    - panel-title
    """

    def __init__(
            self,
            *,
            name="",
            title="",
            description="",
            commands=(),
            flags=Unset,
            positionals=Unset,
            colorful=False,
            fancy=False,
    ):
        self._name = name
        self._title = title
        self._description = description
        self._commands = list(commands)
        self._flags = flags
        self._positionals = positionals
        self._colorful = colorful
        self._fancy = fancy

    def __rich_console__(self, console, options):
        main = __import__("__main__")
        styles = defaultdict(str, {
            "title-section": "bold #FFFFFF",
            "description-section": "italic #A3A3A3",

            "commands-label": "bold #00E6FF",
            "command": "bold #36C5F0",
            "command-brief": "#9CA3AF",

            "usage-label": "bold #00E6FF",
            "program-name": "bold #FF4D94",
            "metavar": "bold #FFD600",

            "option-name": "bold #22C55E",
            "flag-description": "#9CA3AF",
            "default": "#737373",

            "panel-title": "bold #FF4D94",
        } | getattr(main, "__styles__", {}))

        def styler(style):
            return styles[style] if self._colorful else ""

        def text(fragment, style=""):
            if not fragment:
                return Text("")
            if not self._colorful:
                return Text(str(fragment))
            if isinstance(fragment, Text):
                return fragment
            return Text(str(fragment), style)

        width = options.max_width - 4 * self._fancy
        renders = []

        if self._title:
            renders.append(text(self._title, styler("title-section")).append("\n"))
        if self._description:
            renders.append(text(self._description, styler("description-section")).append("\n"))

        primary = [command for command in self._commands if not command.alias]
        aliases = [command for command in self._commands if command.alias]
        for label, commands in (("Available commands", primary), ("Alias commands", aliases)):
            if not commands:
                continue
            section = Text()
            section.append(text(label, styler("commands-label"))).append(":\n\n")
            for command in commands:
                section.append(text(f"{command.path:<{_COLUMN}}", styler("command")))
                section.append(text(command.brief, styler("command-brief"))).append("\n")
            renders.append(section)

        if self._flags is not Unset:
            usage = Text()
            usage.append(text("Usage", styler("usage-label"))).append(": ")
            usage.append(text(self._name, styler("program-name")))
            if self._flags:
                usage.append(" [options]")
            for binding in self._positionals:
                label = binding.label + ("..." if binding.sequence else "")
                usage.append(" ")
                usage.append(text(f"<{label}>" if binding.required else f"[{label}]", styler("metavar")))
            usage.append("\n")

            for binding in self._flags:
                names = _names(binding)
                section = Text("  ").append(text(f"{names:<{_COLUMN}}", styler("option-name"))).append(" ")
                if len(names) > _COLUMN:
                    section.append("\n").append(" " * _INDENT)

                descr = text(binding.descr, styler("flag-description"))
                if not binding.required and (binding.scalar is not bool or binding.sequence):
                    descr.append(" " if descr else "").append(text(f"(default={_display(binding)})", styler("default")))
                wrapped = descr.wrap(console, max(width - _INDENT, 20))
                for index, line in enumerate(wrapped):
                    if index:
                        section.append("\n").append(" " * _INDENT)
                    section.append(line)
                usage.append("\n").append(section)
            renders.append(usage)

        if not renders:
            return

        renderable = Group(*renders)
        if self._fancy:
            renderable = Panel(
                renderable,
                title=Text.assemble("[ ", f"{self._name or "usage"}".upper(), " ]", style=styler("panel-title")),
                title_align="left",
            )
        yield renderable

    def __str__(self):
        console = Console(width=100, color_system=None, force_terminal=False, highlight=False)
        with console.capture() as capture:
            console.print(Usage(
                name=self._name,
                title=self._title,
                description=self._description,
                commands=self._commands,
                flags=self._flags,
                positionals=self._positionals,
            ))
        return capture.get()


__all__ = (
    "Usage",
)
