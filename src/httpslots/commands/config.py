"""``httpslots config`` -- inspect and edit the user configuration file.

Keys use dot notation into :class:`~httpslots.models.GlobalConfig`, so the
global slot settings can be tuned one field at a time::

    httpslots config set retry.max_times 5
    httpslots config set cache.max_age 60
    httpslots config set share false
"""

from __future__ import annotations

import json
from typing import Any

import typer
from pydantic import ValidationError

from httpslots.config import get_config_dir, load_global_config, save_global_config
from httpslots.exit_codes import EXIT_INVALID_USAGE
from httpslots.models import GlobalConfig
from httpslots.output import error, format_response, info, success

config_app = typer.Typer(no_args_is_help=True)


@config_app.command("show")
def config_show() -> None:
    """Print the user configuration."""
    info(f"Config directory: {get_config_dir()}")
    format_response(load_global_config().model_dump(mode="json"))


@config_app.command("set")
def config_set(
    key: str = typer.Argument(help="Dot-separated key, e.g. 'retry.max_times'."),
    value: str = typer.Argument(help="New value; JSON literals such as 5 or false are parsed."),
) -> None:
    """Set one configuration value.

    Setting a nested key on a slot that is unset or a plain boolean turns it
    into an options object; a boolean is kept as its ``enable`` field.
    """
    path = key.split(".")
    data = load_global_config().model_dump(mode="json")
    if path[0] not in data:
        _usage_error(f"Unknown config key: {key}")

    parsed = _parse_value(value)
    try:
        _assign(data, path, parsed)
        updated = GlobalConfig.model_validate(data)
    except (KeyError, TypeError):
        _usage_error(f"Invalid config key: {key}")
    except ValidationError as exc:
        _usage_error(f"Validation error: {exc}")

    if not _has_path(updated.model_dump(mode="json"), path):
        _usage_error(f"Unknown config key: {key}")

    save_global_config(updated)
    success(f"Set {key} = {parsed}")


@config_app.command("reset")
def config_reset(
    force: bool = typer.Option(False, "--force", "-f", help="Skip confirmation."),
) -> None:
    """Restore the default configuration."""
    if not force and not typer.confirm("Reset all config to defaults?"):
        info("Cancelled.")
        raise typer.Exit()
    save_global_config(GlobalConfig())
    success("Configuration reset to defaults.")


def _usage_error(message: str) -> None:
    error(message)
    raise typer.Exit(code=EXIT_INVALID_USAGE)


def _parse_value(value: str) -> Any:
    try:
        return json.loads(value)
    except ValueError:
        return value


def _assign(data: dict[str, Any], path: list[str], value: Any) -> None:
    """Set ``data[p0][p1]...`` creating objects along the way.

    Raises:
        TypeError: If a non-object value sits on the path.
    """
    target = data
    for part in path[:-1]:
        if target.get(part) is None:
            target[part] = {}
        elif isinstance(target[part], bool):
            target[part] = {"enable": target[part]}
        target = target[part]
        if not isinstance(target, dict):
            raise TypeError(part)
    target[path[-1]] = value


def _has_path(data: Any, path: list[str]) -> bool:
    """Whether *path* survived validation (unknown nested keys are dropped)."""
    for part in path:
        if not isinstance(data, dict) or part not in data:
            return False
        data = data[part]
    return True
