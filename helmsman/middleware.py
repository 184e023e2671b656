"""
Helmsman middleware: ordered transformers around a handler.

Model
- A middleware is any callable invoked as middleware(context, next), where
  next(context) runs the rest of the chain. It may act before next, after
  next, instead of next (by raising), or around it.
- compose(handler, *layers) folds layers into one callable. Each layer is
  wrapped from its end backward, so its first entry ends up outermost within
  that layer; each later layer wraps the previous ones.
- The dispatcher composes (global middleware, command middleware): command
  "before" logic runs first, then global "before", the handler, global
  "after", and command "after" last.

Built-ins
- Before(fn) / After(fn): hooks; After always runs, and its failure is
  reported only when the handler itself succeeded.
- Recover(): turns a crash (an exception outside the fault taxonomy) into
  PanicRecovered.
- Logger(): "[HH:MM:SS] Running: <command>" and the outcome, on stderr.
- RequireFlags(*names), RequireInteractive(), Confirm(message).
- Auth(check) / EnvAuth(variable): obtain a key before the handler runs.
"""
import logging
import time

from .faults import CommandException, HandlerError, PanicRecovered, ValidationError
from .utils import rename

log = logging.getLogger(__name__)


def _label(middleware):
    return getattr(middleware, "__name__", type(middleware).__name__)


def _link(middleware, next):
    @rename(_label(middleware))
    def link(context):
        return middleware(context, next)

    return link


def compose(handler, /, *layers):
    """
    build the call chain for handler.

    layers are given innermost first: compose(h, global_mw, command_mw).
    """
    chain = handler
    for layer in layers:
        for middleware in reversed(list(layer)):
            chain = _link(middleware, chain)
    return chain


class Middleware:
    """
    Base class for class-based middleware.

    Subclasses override __call__(context, next); the default passes through.
    """

    def __call__(self, context, next):
        return next(context)

    def __repr__(self):
        return "%s()" % type(self).__name__


class Before(Middleware):
    """run fn(context) before the rest of the chain; an exception aborts it."""

    def __init__(self, fn, /):
        self._fn = fn

    def __call__(self, context, next):
        self._fn(context)
        return next(context)


class After(Middleware):
    """
    run fn(context) after the rest of the chain, whatever its outcome.

    When the chain failed, its error wins: a failure of fn is attached to it as
    a note instead of replacing it.
    """

    def __init__(self, fn, /):
        self._fn = fn

    def __call__(self, context, next):
        try:
            result = next(context)
        except BaseException as error:
            try:
                self._fn(context)
            except Exception as cleanup:
                log.debug("cleanup failed after handler error", exc_info=True)
                error.add_note("cleanup also failed: %s" % cleanup)
            raise
        self._fn(context)
        return result


class Recover(Middleware):
    """convert an unexpected exception into PanicRecovered (exit code 1)."""

    def __call__(self, context, next):
        try:
            return next(context)
        except CommandException:
            raise
        except Exception as error:
            log.warning("recovered from panic in %r", context.command, exc_info=True)
            raise PanicRecovered(
                "panic: %s" % (str(error) or type(error).__name__),
                details=("%s: %s" % (type(error).__name__, error),),
            ) from error


class Logger(Middleware):
    """report start, duration and outcome of the command on the error stream."""

    def __call__(self, context, next):
        name = getattr(context.command, "path", "") or getattr(context.app, "name", "")
        context.error("[%s] Running: %s" % (time.strftime("%H:%M:%S"), name))
        started = time.monotonic()
        try:
            result = next(context)
        except Exception as error:
            context.error("[%s] Failed: %s" % (time.strftime("%H:%M:%S"), error))
            raise
        context.error("[%s] Done (%.3fs)" % (time.strftime("%H:%M:%S"), time.monotonic() - started))
        return result


class RequireFlags(Middleware):
    """fail unless every named flag was explicitly set (command line or env)."""

    def __init__(self, *names):
        self._names = names

    def __call__(self, context, next):
        for name in self._names:
            if not context.is_set(name):
                raise ValidationError("required flag not set: --%s" % name, flag=name)
        return next(context)


class RequireInteractive(Middleware):
    def __call__(self, context, next):
        if not context.interactive:
            raise HandlerError(
                "this command requires an interactive terminal",
                hint="run it from a terminal rather than a pipe or script",
            )
        return next(context)


class Confirm(Middleware):
    """
    ask for confirmation before running the handler.

    blocks on one line of stdin. refuses to run non-interactively.
    """

    def __init__(self, message, /):
        self._message = message

    def __call__(self, context, next):
        if not context.interactive:
            raise HandlerError(
                "confirmation required but running non-interactively",
                hint="run this command from a terminal to confirm it",
            )
        if not context.confirm(self._message):
            raise HandlerError("operation cancelled")
        return next(context)


class Auth(Middleware):
    """
    authenticate before the handler runs.

    check(context) returns the key (stored on context.auth_key) or raises.
    """

    def __init__(self, check, /):
        self._check = check

    def __call__(self, context, next):
        try:
            key = self._check(context)
        except CommandException as error:
            raise HandlerError("authentication failed: %s" % error, hint=error.hint) from error
        except (LookupError, ValueError, PermissionError) as error:
            raise HandlerError("authentication failed: %s" % error) from error
        if not key:
            raise HandlerError("authentication required")
        context.auth_key = key
        return next(context)


class EnvAuth(Auth):
    """authenticate with the value of an environment variable."""

    def __init__(self, variable, /, environ=None):
        self._variable = variable
        self._environ = environ
        super().__init__(self._lookup)

    def _lookup(self, context):
        environ = self._environ if self._environ is not None else context.environ
        if key := environ.get(self._variable):
            return key
        raise LookupError("environment variable %s not set" % self._variable)

    def __repr__(self):
        return "EnvAuth(%r)" % self._variable


__all__ = (
    "compose",
    "Middleware",
    "Before",
    "After",
    "Recover",
    "Logger",
    "RequireFlags",
    "RequireInteractive",
    "Confirm",
    "Auth",
    "EnvAuth",
)
