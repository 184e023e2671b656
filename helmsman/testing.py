"""
In-process test harness.

invoke(app, prompt) runs an application the way App.run() does, but with
in-memory streams and an overlaid environment, and returns an Outcome:

    outcome = invoke(app, "deploy prod --dry-run", env={"TOKEN": "x"})
    assert outcome.succeeded and outcome.contains("would deploy")

The application's previous streams and interactivity override are restored
afterwards. Invocations are non-interactive unless asked otherwise.
"""
import io
import os
from typing import NamedTuple

from .faults import CommandException, exit_code
from .utils import Unset


class Outcome(NamedTuple):
    exit_code: int
    stdout: str
    stderr: str
    error: BaseException | None = None

    @property
    def succeeded(self):
        return self.exit_code == 0

    @property
    def failed(self):
        return self.exit_code != 0

    def contains(self, text, /):
        """True when the output stream contains text."""
        return text in self.stdout

    def contains_error(self, text, /):
        """True when the error stream contains text."""
        return text in self.stderr


def invoke(app, prompt=(), /, *, stdin="", env=None, interactive=Unset):
    """
    run app against prompt with captured streams.

    - stdin: text served to the application's input stream.
    - env: variables overlaid on the process environment.
    - interactive: forced interactivity (Unset: keep an explicit override of
      the app, otherwise run non-interactively).
    """
    saved = app._stdin, app._stdout, app._stderr
    override = app.interactive_override
    stdout, stderr = io.StringIO(), io.StringIO()
    environ = dict(os.environ) | dict(env or {})

    app.streams(io.StringIO(stdin), stdout, stderr)
    if interactive is not Unset:
        app.force_interactive(interactive)
    elif override is None:
        app.force_interactive(False)
    try:
        try:
            app.execute(prompt, environ=environ)
        except CommandException as error:
            app.report(error)
            return Outcome(exit_code(error), stdout.getvalue(), stderr.getvalue(), error)
        return Outcome(0, stdout.getvalue(), stderr.getvalue())
    finally:
        app.streams(*saved)
        app.force_interactive(override)


__all__ = (
    "Outcome",
    "invoke",
)
