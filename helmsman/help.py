"""
Help rendering for applications, groups and commands.

Each renderer reads registry metadata only and returns a rich renderable; the
dispatcher prints it to the application's output stream. Hidden commands and
hidden flags are never listed. Styles can be overridden by the host through a
__styles__ mapping in __main__ (keys prefixed "help-").
"""
from collections import defaultdict
from datetime import timedelta

from rich.console import Group
from rich.table import Table
from rich.text import Text

from .utils import Unset
from .values import stringify

_STYLES = {
    "help-title": "bold #508CFF",
    "help-section": "bold bright_white",
    "help-command": "bold bright_green",
    "help-flag": "bright_cyan",
    "help-hint": "bright_black",
    "help-deprecated": "italic yellow",
}


def _styles():
    return defaultdict(str, _STYLES | getattr(__import__("__main__"), "__styles__", {}))


def _grid(rows):
    table = Table.grid(padding=(0, 2))
    table.add_column(no_wrap=True)
    table.add_column()
    for row in rows:
        table.add_row(*row)
    return table


def _header(title, description, styles):
    header = Text(title, styles["help-title"])
    if description:
        header.append(" - ")
        header.append(description)
    return header


def _meta(flag):
    parts = []
    if flag.default not in ("", False, 0, 0.0, (), timedelta(0)):
        parts.append("default: %s" % stringify(flag.default))
    if flag.required:
        parts.append("required")
    if flag.enum:
        parts.append("|".join(flag.enum))
    if flag.env:
        parts.append("$%s" % flag.env)
    return ", ".join(parts)


def _flags(flags, styles):
    rows = []
    for flag in flags:
        if flag.hidden:
            continue
        label = ("  -%s, --%s" % (flag.short, flag.name)) if flag.short else "      --%s" % flag.name
        if flag.kind.takes_value:
            label += " <%s>" % flag.kind.value
        text = Text(flag.help)
        if meta := _meta(flag):
            text.append(" (%s)" % meta if flag.help else "(%s)" % meta, styles["help-hint"])
        rows.append((Text(label, styles["help-flag"]), text))
    return _grid(rows) if rows else None


def _commands(commands, styles, indent="  "):
    rows = []
    for name in sorted(commands):
        command = commands[name]
        if command.hidden:
            continue
        text = Text(command.description)
        if command.deprecation:
            text.append(" (deprecated)", styles["help-deprecated"])
        rows.append((Text(indent + name, styles["help-command"]), text))
    return rows


def _usage(words, flags, args):
    line = "  " + " ".join(word for word in words if word)
    if flags:
        line += " [flags]"
    for arg in args:
        line += " " + arg.usage
    return line


def _section(parts, title, body, styles):
    if body is None:
        return
    parts.extend((Text(""), Text(title, styles["help-section"]), body))


def render_app(app, /):
    """the top-level help: usage, commands, groups and global flags."""
    styles = _styles()
    root = app.root
    parts = [_header(app.name, app.description, styles)]
    if app.version:
        parts.append(Text("  v%s" % app.version, styles["help-hint"]))

    usage = [Text("  %s <command> [flags] [args]" % app.name)] if app.commands or app.groups else []
    if root.runnable or not usage:
        usage.insert(0, Text(_usage((app.name,), app.flags + root.flags, root.args)))
    _section(parts, "Usage:", Group(*usage), styles)

    if rows := _commands(app.commands, styles):
        _section(parts, "Commands:", _grid(rows), styles)

    if app.groups:
        rows = []
        for name in sorted(app.groups):
            group = app.groups[name]
            rows.append((Text("  " + name, styles["help-command"]), Text(group.description)))
            for subrow in _commands(group.commands, styles, indent="    "):
                subrow[1].stylize(styles["help-hint"])
                rows.append(subrow)
        _section(parts, "Groups:", _grid(rows), styles)

    _section(parts, "Flags:", _flags(root.flags, styles), styles)
    _section(parts, "Global Flags:", _flags(app.flags, styles), styles)

    if app.commands or app.groups:
        parts.append(Text(""))
        parts.append(Text.assemble(
            "Run '",
            ("%s <command> --help" % app.name, styles["help-flag"]),
            "' for more information on a command.",
        ))
    return Group(*parts)


def render_group(app, group, /):
    """help for a group: its subcommands and its own action's inputs."""
    styles = _styles()
    action = group.action_command
    parts = [_header("%s %s" % (app.name, group.name), group.description, styles)]

    usage = []
    if group.commands:
        usage.append(Text("  %s %s <command> [flags] [args]" % (app.name, group.name)))
    if group.runnable:
        usage.append(Text(_usage((app.name, group.name), app.flags + action.flags, action.args)))
    if usage:
        _section(parts, "Usage:", Group(*usage), styles)

    if rows := _commands(group.commands, styles):
        _section(parts, "Commands:", _grid(rows), styles)
    if action.args:
        _section(parts, "Arguments:", _arguments(action.args, styles), styles)
    _section(parts, "Flags:", _flags(action.flags, styles), styles)
    _section(parts, "Global Flags:", _flags(app.flags, styles), styles)

    if group.commands:
        parts.append(Text(""))
        parts.append(Text.assemble(
            "Run '",
            ("%s %s <command> --help" % (app.name, group.name), styles["help-flag"]),
            "' for more information on a command.",
        ))
    return Group(*parts)


def _arguments(args, styles):
    rows = []
    for arg in args:
        text = Text(arg.description)
        notes = []
        if not arg.required:
            notes.append("optional")
        if not arg.required and arg.default is not Unset and arg.default is not None:
            notes.append("default: %s" % stringify(arg.default))
        if notes:
            text.append((" (%s)" if arg.description else "(%s)") % ", ".join(notes), styles["help-hint"])
        rows.append((Text("  " + arg.name + ("..." if arg.variadic else ""), styles["help-command"]), text))
    return _grid(rows)


def render_command(app, command, /):
    """help for one command: usage, aliases, arguments and flags."""
    styles = _styles()
    parts = [_header("%s %s" % (app.name, command.path), command.description, styles)]
    if command.deprecation:
        parts.append(Text("  DEPRECATED: %s" % command.deprecation, styles["help-deprecated"]))
    if command.long_description:
        parts.append(Text(""))
        parts.append(Text("  " + command.long_description, styles["help-hint"]))

    _section(parts, "Usage:", Text(_usage((app.name, command.path), app.flags + command.flags, command.args)), styles)
    if command.aliases:
        _section(parts, "Aliases:", Text("  " + ", ".join(command.aliases), styles["help-command"]), styles)
    if command.args:
        _section(parts, "Arguments:", _arguments(command.args, styles), styles)
    _section(parts, "Flags:", _flags(command.flags, styles), styles)
    _section(parts, "Global Flags:", _flags(app.flags, styles), styles)
    return Group(*parts)


__all__ = (
    "render_app",
    "render_group",
    "render_command",
)
