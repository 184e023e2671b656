"""
Tool schemas: describe commands marked with as_tool() for programmatic callers.

Each schema is a JSON-schema style mapping

    {
      "name": "users:list",
      "description": "List users",
      "parameters": {
        "type": "object",
        "properties": {"all": {"type": "boolean", "description": "..."}},
        "required": ["role"]
      }
    }

Visible flags and declared args become properties. Grouped commands are
named "group:command".
"""
import json

from .arguments import Kind
from .utils import Unset
from .values import stringify

_TYPES = {
    Kind.STRING: {"type": "string"},
    Kind.BOOL: {"type": "boolean"},
    Kind.INT: {"type": "integer"},
    Kind.FLOAT: {"type": "number"},
    Kind.DURATION: {"type": "string", "format": "duration"},
    Kind.STRINGS: {"type": "array", "items": {"type": "string"}},
    Kind.INTS: {"type": "array", "items": {"type": "integer"}},
}


def _default(flag):
    match flag.kind:
        case Kind.DURATION:
            return stringify(flag.default)
        case Kind.STRINGS | Kind.INTS:
            return list(flag.default)
        case _:
            return flag.default


def schema(command, /):
    """the tool schema of one command."""
    properties = {}
    required = []
    for flag in command.flags:
        if flag.hidden:
            continue
        entry = dict(_TYPES[flag.kind])
        if flag.help:
            entry["description"] = flag.help
        if flag.enum:
            entry["enum"] = list(flag.enum)
        if flag.default:
            entry["default"] = _default(flag)
        properties[flag.name] = entry
        if flag.required:
            required.append(flag.name)
    for arg in command.args:
        entry = {"type": "array", "items": {"type": "string"}} if arg.variadic else {"type": "string"}
        if arg.description:
            entry["description"] = arg.description
        if arg.default is not Unset and arg.default is not None:
            entry["default"] = stringify(arg.default)
        properties[arg.name] = entry
        if arg.required:
            required.append(arg.name)

    parameters = {"type": "object", "properties": properties}
    if required:
        parameters["required"] = required
    return {"name": command.qualified, "description": command.description, "parameters": parameters}


def schemas(app, /):
    """schemas of every command marked as a tool, top-level commands first."""
    found = [schema(command) for _, command in sorted(app.commands.items()) if command.tool]
    for _, group in sorted(app.groups.items()):
        found.extend(schema(command) for _, command in sorted(group.commands.items()) if command.tool)
    return found


def dumps(app, /):
    """the tool schemas of app as indented JSON text."""
    return json.dumps(schemas(app), indent=2)


__all__ = (
    "schema",
    "schemas",
    "dumps",
)
