"""Terminal output for the ``httpslots`` CLI.

Response bodies and config dumps are *data* and go to stdout; everything
else (status lines, transport call counts, warnings, errors, debug traces)
is a *diagnostic* and goes to stderr, so ``httpslots request ... | jq`` sees
nothing but the body.

Data is rendered in one of three formats:

* ``json`` -- indented JSON, for pipes and scripts.
* ``plain`` -- tab-separated lines, for ``cut`` and ``awk``.
* ``rich`` -- syntax-highlighted JSON on an interactive terminal.

``auto`` picks ``rich`` on a colour-capable TTY and ``plain`` otherwise.
Colour is off when ``--no-color`` is passed, ``NO_COLOR`` is set, or
``TERM=dumb``.

:func:`~httpslots.app.main_callback` builds one :class:`OutputManager` per
invocation and installs it with :func:`set_output`; the rest of the code uses
the module-level helpers.
"""

from __future__ import annotations

import json
import os
import sys
from enum import Enum
from typing import Any, Optional

from rich.console import Console
from rich.markup import escape
from rich.syntax import Syntax


class OutputFormat(str, Enum):
    """Data rendering formats."""

    AUTO = "auto"
    JSON = "json"
    PLAIN = "plain"
    RICH = "rich"


# (prefix, rich style, suppressed by --quiet) per diagnostic level
_LEVELS: dict[str, tuple[str, str, bool]] = {
    "info": ("", "", True),
    "success": ("", "green", True),
    "warning": ("Warning: ", "yellow", False),
    "error": ("Error: ", "bold red", False),
    "debug": ("[debug] ", "dim", False),
}


class OutputManager:
    """Routes data to stdout and diagnostics to stderr.

    Args:
        format: Rendering format for data; ``AUTO`` is resolved here.
        no_color: Disable colour and Rich markup.
        quiet: Drop ``info`` and ``success`` messages.
        verbose: Show ``debug`` messages.
    """

    def __init__(
        self,
        format: OutputFormat = OutputFormat.AUTO,
        no_color: bool = False,
        quiet: bool = False,
        verbose: bool = False,
    ) -> None:
        self._no_color = no_color or _should_disable_color()
        self._quiet = quiet
        self._verbose = verbose
        self._format = _resolve_format(format, self._no_color)
        self._stdout = Console(
            file=sys.stdout,
            no_color=self._no_color,
            force_terminal=self._format is OutputFormat.RICH,
        )
        self._stderr = Console(file=sys.stderr, no_color=self._no_color, stderr=True)

    @property
    def format(self) -> OutputFormat:
        return self._format

    @property
    def is_quiet(self) -> bool:
        return self._quiet

    @property
    def is_verbose(self) -> bool:
        return self._verbose

    # --- data (stdout) ---

    def format_response(self, data: Any, content_type: str = "application/json") -> None:
        """Render a response body (or any JSON-like value) to stdout."""
        if self._format is OutputFormat.JSON:
            self.print_data(_to_json(data))
        elif self._format is OutputFormat.PLAIN:
            for line in _to_plain_lines(data):
                self.print_data(line)
        else:
            self._render_rich(data, content_type)

    def print_data(self, text: str) -> None:
        print(text, file=sys.stdout, flush=True)

    # --- diagnostics (stderr) ---

    def info(self, message: str) -> None:
        self._emit("info", message)

    def success(self, message: str) -> None:
        self._emit("success", message)

    def warning(self, message: str) -> None:
        """Never suppressed by ``--quiet``."""
        self._emit("warning", message)

    def error(self, message: str) -> None:
        """Never suppressed by ``--quiet``."""
        self._emit("error", message)

    def debug(self, message: str) -> None:
        """Shown only with ``--verbose``."""
        if self._verbose:
            self._emit("debug", message)

    def _emit(self, level: str, message: str) -> None:
        prefix, style, quietable = _LEVELS[level]
        if quietable and self._quiet:
            return
        if self._no_color:
            print(f"{prefix}{message}", file=sys.stderr, flush=True)
        elif not style:
            self._stderr.print(escape(message))
        elif prefix and level != "debug":
            self._stderr.print(f"[{style}]{escape(prefix)}[/{style}]{escape(message)}")
        else:
            self._stderr.print(f"[{style}]{escape(prefix + message)}[/{style}]")

    def _render_rich(self, data: Any, content_type: str) -> None:
        if isinstance(data, str) and "json" in content_type:
            try:
                data = json.loads(data)
            except ValueError:
                pass
        if isinstance(data, (dict, list)):
            self._stdout.print(Syntax(_to_json(data), "json", theme="monokai", word_wrap=True))
        else:
            self._stdout.print(str(data))


def _resolve_format(format: OutputFormat, no_color: bool) -> OutputFormat:
    if format is not OutputFormat.AUTO:
        return format
    return OutputFormat.RICH if _is_tty() and not no_color else OutputFormat.PLAIN


def _to_json(data: Any) -> str:
    """Pretty JSON; strings that already hold JSON are re-indented, others pass through."""
    if isinstance(data, str):
        try:
            data = json.loads(data)
        except ValueError:
            return data
    return json.dumps(data, indent=2, ensure_ascii=False, default=str)


def _to_plain_lines(data: Any) -> list[str]:
    """``key<TAB>value`` for objects, one row per item for lists."""
    if isinstance(data, dict):
        return [f"{key}\t{value}" for key, value in data.items()]
    if isinstance(data, list):
        return [
            "\t".join(str(v) for v in item.values()) if isinstance(item, dict) else str(item)
            for item in data
        ]
    return [str(data)]


def _is_tty() -> bool:
    return hasattr(sys.stdout, "isatty") and sys.stdout.isatty()


def _should_disable_color() -> bool:
    """True when ``NO_COLOR`` is set (to anything) or ``TERM=dumb``."""
    return os.environ.get("NO_COLOR") is not None or os.environ.get("TERM") == "dumb"


# --- global instance ---

_output: Optional[OutputManager] = None


def get_output() -> OutputManager:
    """Return the installed :class:`OutputManager`, creating a default one lazily."""
    global _output
    if _output is None:
        _output = OutputManager()
    return _output


def set_output(output: OutputManager) -> None:
    global _output
    _output = output


def reset_output() -> None:
    """Forget the installed manager (tests use this between runs)."""
    global _output
    _output = None


def format_response(data: Any, content_type: str = "application/json") -> None:
    get_output().format_response(data, content_type)


def print_data(text: str) -> None:
    get_output().print_data(text)


def info(message: str) -> None:
    get_output().info(message)


def error(message: str) -> None:
    get_output().error(message)


def success(message: str) -> None:
    get_output().success(message)


def warning(message: str) -> None:
    get_output().warning(message)


def debug(message: str) -> None:
    get_output().debug(message)
