"""
Helmsman faults (errors, warnings, exit-code mapping) and rendering.

Scope
- FaultCode: stable numeric identifiers for every user-facing fault, grouped by
  domain (routing, parsing, validation, handler, configuration, control flow).
- CommandException: root of the error taxonomy. Carries a message plus read-only
  options (hint, code, details, and anything a raiser wants to attach) and knows
  how to render itself with rich.
- ParseError / ValidationError / HandlerError / ConfigError: the failure
  families; HelpRequested and ExitRequest are control-flow sentinels that ride
  the same channel but are not failures.
- exit_code(): the process exit status for any outcome.

Propagation
- ParseError and ValidationError are raised before dispatch begins, so neither
  the handler nor its middleware ever run.
- Handlers and middleware raise HandlerError (or any CommandException) to fail
  cleanly. Exceptions outside the taxonomy are crashes; the Recover middleware
  turns them into PanicRecovered.

Rendering
- "[ prog — 11112 | unknown flag ]" header, then the message, "• detail" lines,
  a " → hint" line and a " code: X" line when a machine-readable code is set.
- Styles can be overridden by the host through a __styles__ mapping in __main__,
  and fault numbers remapped through __codes__.
"""
from collections import defaultdict
from enum import IntEnum
from types import MappingProxyType

from rich.console import Group
from rich.text import Text

from .utils import Unset, coalesce


class FaultCode(IntEnum):
    """
    canonical fault codes (stable identifiers).

    grouping
    - routing (1110x): UNKNOWN_COMMAND, UNKNOWN_SUBCOMMAND, MISSING_SUBCOMMAND,
      MISSING_HANDLER
    - parsing (1111x): MALFORMED_TOKEN, UNKNOWN_FLAG, MISSING_VALUE
    - validation (1112x): INVALID_CHOICE, INVALID_VALUE, MISSING_FLAG,
      MISSING_ARGUMENT, FAILED_VALIDATION
    - handler (1113x): HANDLER_FAILURE, RECOVERED_PANIC
    - configuration (1114x): MALFORMED_CONFIG
    - control flow (1000x): HELP_REQUESTED, EXIT_REQUESTED
    - warnings (1211x): DEPRECATED_COMMAND
    """
    # --- control flow (10xxx) ---
    HELP_REQUESTED      = 10001
    EXIT_REQUESTED      = 10002

    # --- routing errors (1110x) ---
    UNKNOWN_COMMAND     = 11101
    UNKNOWN_SUBCOMMAND  = 11102
    MISSING_SUBCOMMAND  = 11103
    MISSING_HANDLER     = 11104

    # --- parsing errors (1111x) ---
    MALFORMED_TOKEN     = 11111
    UNKNOWN_FLAG        = 11112
    MISSING_VALUE       = 11113

    # --- validation errors (1112x) ---
    INVALID_CHOICE      = 11121
    INVALID_VALUE       = 11122
    MISSING_FLAG        = 11123
    MISSING_ARGUMENT    = 11124
    FAILED_VALIDATION   = 11125

    # --- handler errors (1113x) ---
    HANDLER_FAILURE     = 11131
    RECOVERED_PANIC     = 11132

    # --- configuration errors (1114x) ---
    MALFORMED_CONFIG    = 11141

    # --- warnings (12xxx) ---
    DEPRECATED_COMMAND  = 12111

    def normalize(self):
        """
        return a host-normalized string for this code.

        the host application can provide a __codes__ mapping in __main__ to
        replace numeric ids with its own labels.
        """
        return str(getattr(__import__("__main__"), "__codes__", {}).get(self, self.value))


_STYLES = {
    # header parts
    "prog-name": "bold #E6E6F0",
    "code": "bold #00E5FF",
    "error-title": "bold #FF4DA6",
    "warning-title": "bold #FFC2E0",

    # body
    "error-message": "#C8C8D0",
    "detail-bullet": "#6B6F7A",
    "detail": "#A0A0AA",
    "hint-arrow": "#9CE19C dim",
    "hint": "italic #9CE19C",
    "machine-code": "#FFB400",
}


def _styles():
    return defaultdict(str, _STYLES | getattr(__import__("__main__"), "__styles__", {}))


class CommandException(Exception):
    """
    Base of every fault raised by the resolver, parser, dispatcher and
    middleware, and the type handlers raise to fail cleanly.

    CommandException(message=Unset, /, **options)

    Recognized options
    - hint: one actionable sentence shown after the message.
    - code: machine-readable code (e.g. "ERR_DB_CONNECT").
    - details: iterable of extra lines shown as bullets.

    Any other option is kept in self.options for callers to inspect (for
    instance "flag", "command" or "target").
    """

    fault = FaultCode.HANDLER_FAILURE
    title = "command failed"
    title_style = "error-title"

    def __init__(self, message=Unset, /, **options):
        if not isinstance(message, str | Unset):
            raise TypeError("%s() message must be a string" % type(self).__name__)
        self.message = coalesce(message, self.title)
        self.options = MappingProxyType(options)
        super().__init__(self.message)

    def __str__(self):
        return self.message

    @property
    def hint(self):
        return self.options.get("hint")

    @property
    def code(self):
        return self.options.get("code")

    @property
    def details(self):
        return tuple(map(str, self.options.get("details", ())))

    def render(self, prog=Unset, /):
        """
        build the rich renderable for this fault.

        prog names the application in the header; it is left out when unset.
        """
        styles = _styles()

        header = [Text("[ ")]
        if prog:
            header.extend((Text(prog, styles["prog-name"]), Text(" — ")))
        header.extend((
            Text(self.fault.normalize(), styles["code"]),
            Text(" | "),
            Text(self.title, styles[self.title_style]),
            Text(" ]"),
        ))

        lines = [Text.assemble(*header), Text(self.message, styles["error-message"])]
        for detail in self.details:
            lines.append(Text.assemble((" • ", styles["detail-bullet"]), (detail, styles["detail"])))
        if self.hint:
            lines.append(Text.assemble((" → ", styles["hint-arrow"]), (str(self.hint), styles["hint"])))
        if self.code:
            lines.append(Text.assemble(" code: ", (str(self.code), styles["machine-code"])))
        return Group(*lines)

    def __rich__(self):
        return self.render(self.options.get("prog", Unset))


class ParseError(CommandException):
    fault = FaultCode.MALFORMED_TOKEN
    title = "malformed input"


class MalformedTokenError(ParseError):
    fault = FaultCode.MALFORMED_TOKEN
    title = "malformed token"


class UnknownFlagError(ParseError):
    fault = FaultCode.UNKNOWN_FLAG
    title = "unknown flag"


class MissingValueError(ParseError):
    fault = FaultCode.MISSING_VALUE
    title = "missing value"


class UnknownCommandError(ParseError):
    fault = FaultCode.UNKNOWN_COMMAND
    title = "unknown command"


class UnknownSubcommandError(ParseError):
    fault = FaultCode.UNKNOWN_SUBCOMMAND
    title = "unknown subcommand"


class MissingSubcommandError(ParseError):
    fault = FaultCode.MISSING_SUBCOMMAND
    title = "missing subcommand"


class ValidationError(CommandException):
    fault = FaultCode.FAILED_VALIDATION
    title = "invalid input"


class InvalidChoiceError(ValidationError):
    fault = FaultCode.INVALID_CHOICE
    title = "invalid choice"


class InvalidValueError(ValidationError):
    fault = FaultCode.INVALID_VALUE
    title = "invalid value"


class MissingFlagError(ValidationError):
    fault = FaultCode.MISSING_FLAG
    title = "missing flag"


class MissingArgumentError(ValidationError):
    fault = FaultCode.MISSING_ARGUMENT
    title = "missing argument"


class HandlerError(CommandException):
    fault = FaultCode.HANDLER_FAILURE
    title = "command failed"


class MissingHandlerError(HandlerError):
    fault = FaultCode.MISSING_HANDLER
    title = "missing handler"


class PanicRecovered(HandlerError):
    fault = FaultCode.RECOVERED_PANIC
    title = "recovered panic"


class ConfigError(CommandException):
    fault = FaultCode.MALFORMED_CONFIG
    title = "invalid configuration"


class HelpRequested(CommandException):
    """
    Sentinel: help was rendered instead of running a handler.

    Exit code 0. App.run() never prints it.
    """

    fault = FaultCode.HELP_REQUESTED
    title = "help requested"


class ExitRequest(CommandException):
    """
    Sentinel: stop with a specific exit status.

    ExitRequest(status, message=Unset, /, **options)

    Without a message nothing is printed by App.run(); the status is returned
    as is. Wrapping it (raise HandlerError(...) from ExitRequest(3)) keeps the
    status.
    """

    fault = FaultCode.EXIT_REQUESTED
    title = "exit requested"

    def __init__(self, status, message=Unset, /, **options):
        if not isinstance(status, int) or isinstance(status, bool):
            raise TypeError("ExitRequest() status must be an integer")
        self.status = status
        self.silent = message is Unset
        super().__init__(coalesce(message, "exit status %d" % status), **options)


class CommandWarning(Warning):
    """
    Non-fatal notice rendered to the error stream (never raised).
    """

    fault = FaultCode.DEPRECATED_COMMAND
    title = "warning"

    def __init__(self, message, /, **options):
        self.message = message
        self.options = MappingProxyType(options)
        super().__init__(message)

    def __str__(self):
        return self.message

    def render(self, prog=Unset, /):
        styles = _styles()
        header = [Text("[ ")]
        if prog:
            header.extend((Text(prog, styles["prog-name"]), Text(" — ")))
        header.extend((
            Text(self.fault.normalize(), styles["code"]),
            Text(" | "),
            Text(self.title, styles["warning-title"]),
            Text(" ]"),
        ))
        lines = [Text.assemble(*header), Text(self.message, styles["error-message"])]
        if hint := self.options.get("hint"):
            lines.append(Text.assemble((" → ", styles["hint-arrow"]), (str(hint), styles["hint"])))
        return Group(*lines)

    def __rich__(self):
        return self.render(self.options.get("prog", Unset))


class DeprecatedCommandWarning(CommandWarning):
    fault = FaultCode.DEPRECATED_COMMAND
    title = "deprecated command"


def _search(error, kind):
    """
    depth-first search of error, its explicit causes and group members for kind.

    implicit context (an exception raised while handling another) is not
    wrapping and is not followed.
    """
    seen = set()
    stack = [error]
    while stack:
        if (current := stack.pop()) is None or id(current) in seen:
            continue
        seen.add(id(current))
        if isinstance(current, kind):
            return current
        if isinstance(current, BaseExceptionGroup):
            stack.extend(reversed(current.exceptions))
        stack.append(current.__cause__)
    return None


def exit_code(error, /):
    """
    map an outcome to a process exit status.

    - None → 0
    - ExitRequest anywhere in the cause chain → its status
    - HelpRequested anywhere in the cause chain → 0
    - anything else → 1
    """
    if error is None:
        return 0
    if (request := _search(error, ExitRequest)) is not None:
        return request.status
    if _search(error, HelpRequested) is not None:
        return 0
    return 1


def is_help_requested(error, /):
    """return True when error is (or wraps) a HelpRequested sentinel."""
    return error is not None and _search(error, HelpRequested) is not None


__all__ = (
    "FaultCode",
    "CommandException",
    "ParseError",
    "MalformedTokenError",
    "UnknownFlagError",
    "MissingValueError",
    "UnknownCommandError",
    "UnknownSubcommandError",
    "MissingSubcommandError",
    "ValidationError",
    "InvalidChoiceError",
    "InvalidValueError",
    "MissingFlagError",
    "MissingArgumentError",
    "HandlerError",
    "MissingHandlerError",
    "PanicRecovered",
    "ConfigError",
    "HelpRequested",
    "ExitRequest",
    "CommandWarning",
    "DeprecatedCommandWarning",
    "exit_code",
    "is_help_requested",
)
