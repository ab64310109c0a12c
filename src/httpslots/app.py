"""The ``httpslots`` command line.

Commands:
    ``request``  -- send a request through the cache, share and retry slots.
    ``config``   -- show, set or reset the user configuration.

:func:`main` is the console-script entry point: it maps
:class:`~httpslots.exceptions.HttpSlotsError` to its exit code, turns Ctrl-C
into exit 130, and writes a crash log for anything unexpected.
"""

from __future__ import annotations

import logging
import signal
import sys
import traceback
from datetime import datetime
from typing import Any, Optional

import typer

from httpslots import __version__
from httpslots.commands.config import config_app
from httpslots.commands.request import request_command
from httpslots.exceptions import HttpSlotsError
from httpslots.exit_codes import EXIT_CANCELLED, EXIT_GENERIC_FAILURE
from httpslots.output import OutputFormat, OutputManager, error, set_output

app = typer.Typer(
    name="httpslots",
    help="Send HTTP requests through caching, sharing and retry slots.",
    no_args_is_help=True,
    rich_markup_mode="rich",
)
app.command("request")(request_command)
app.add_typer(config_app, name="config", help="Show or change the user configuration.")


def _print_version(value: bool) -> None:
    if value:
        typer.echo(f"httpslots {__version__}")
        raise typer.Exit()


@app.callback()
def main_callback(
    ctx: typer.Context,
    version: bool = typer.Option(
        False, "--version", callback=_print_version, is_eager=True, help="Show version and exit."
    ),
    base_url: Optional[str] = typer.Option(
        None, "--base-url", help="Prefix for relative request URLs."
    ),
    json_output: bool = typer.Option(False, "--json", help="Print data as JSON."),
    plain_output: bool = typer.Option(False, "--plain", help="Print data as plain text."),
    no_color: bool = typer.Option(False, "--no-color", help="Disable colours."),
    quiet: bool = typer.Option(False, "--quiet", "-q", help="Only print data and errors."),
    verbose: bool = typer.Option(
        False, "--verbose", "-v", help="Show debug output, including slot decisions."
    ),
) -> None:
    """Install the output manager and share root options with sub-commands."""
    if json_output:
        fmt = OutputFormat.JSON
    elif plain_output:
        fmt = OutputFormat.PLAIN
    else:
        fmt = OutputFormat.AUTO
    set_output(OutputManager(format=fmt, no_color=no_color, quiet=quiet, verbose=verbose))

    if verbose:
        _enable_debug_logging()

    ctx.obj = {
        "base_url": base_url,
        "format": None if fmt is OutputFormat.AUTO else fmt.value,
        "verbose": verbose,
    }


def _enable_debug_logging() -> None:
    """Route the ``httpslots`` loggers (slot hits, shares, retries) to stderr."""
    from rich.console import Console
    from rich.logging import RichHandler

    logger = logging.getLogger("httpslots")
    if not any(isinstance(handler, RichHandler) for handler in logger.handlers):
        logger.addHandler(RichHandler(console=Console(stderr=True), show_path=False))
    logger.setLevel(logging.DEBUG)


def _on_sigint(signum: int, frame: Any) -> None:
    sys.stderr.write("\nCancelled.\n")
    sys.exit(EXIT_CANCELLED)


def _write_crash_log() -> str:
    """Save the current traceback under the data directory; return its path."""
    from httpslots.config import get_data_dir

    path = get_data_dir() / f"crash-{datetime.now():%Y%m%d-%H%M%S}.log"
    path.write_text(traceback.format_exc(), encoding="utf-8")
    return str(path)


def main() -> None:
    """Console-script entry point."""
    signal.signal(signal.SIGINT, _on_sigint)
    try:
        app()
    except KeyboardInterrupt:
        sys.stderr.write("\nCancelled.\n")
        sys.exit(EXIT_CANCELLED)
    except HttpSlotsError as exc:
        error(str(exc))
        sys.exit(exc.exit_code)
    except Exception:
        error(f"Unexpected error. Debug log: {_write_crash_log()}")
        sys.exit(EXIT_GENERIC_FAILURE)
