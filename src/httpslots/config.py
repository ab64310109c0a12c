"""Where the CLI's settings live and how the layers combine.

Three sources feed one :class:`~httpslots.models.GlobalConfig`:

* the user file ``config.json`` in the config directory
  (``$XDG_CONFIG_HOME/httpslots`` on Linux and BSD, ``~/.httpslots``
  elsewhere), written by ``httpslots config set``;
* an optional ``httpslots.json`` in the working directory, whose top-level
  keys replace the user file's;
* ``HTTPSLOTS_BASE_URL`` and the ``HTTPSLOTS_CACHE`` / ``HTTPSLOTS_SHARE`` /
  ``HTTPSLOTS_RETRY`` switches.

CLI flags are applied last by :func:`resolve_config`. Files are replaced
atomically so an interrupted write never leaves half a config behind.
"""

from __future__ import annotations

import json
import os
import platform
import tempfile
from pathlib import Path
from typing import Any, Optional

from pydantic import BaseModel, ValidationError

from httpslots.exceptions import ConfigError
from httpslots.models import GlobalConfig

APP_NAME = "httpslots"
CONFIG_FILENAME = "config.json"
PROJECT_CONFIG_FILENAME = "httpslots.json"
SLOT_ENV_VARS = {
    "cache": "HTTPSLOTS_CACHE",
    "share": "HTTPSLOTS_SHARE",
    "retry": "HTTPSLOTS_RETRY",
}

_BOOL_STRINGS = {
    "1": True, "true": True, "yes": True, "on": True,
    "0": False, "false": False, "no": False, "off": False,
}


def _is_xdg_platform() -> bool:
    system = platform.system()
    return system == "Linux" or system.endswith("BSD")


def _app_dir(xdg_var: str, xdg_default: str, fallback: str) -> Path:
    """Resolve and create one of the application directories."""
    if _is_xdg_platform():
        root = os.environ.get(xdg_var) or str(Path.home() / xdg_default)
        path = Path(root) / APP_NAME
    else:
        path = Path.home() / f".{APP_NAME}" / fallback
    path.mkdir(parents=True, exist_ok=True)
    return path


def get_config_dir() -> Path:
    """``$XDG_CONFIG_HOME/httpslots`` (default ``~/.config``), or ``~/.httpslots``."""
    return _app_dir("XDG_CONFIG_HOME", ".config", "")


def get_data_dir() -> Path:
    """``$XDG_DATA_HOME/httpslots`` (default ``~/.local/share``), or ``~/.httpslots/logs``.

    Crash logs are written here.
    """
    return _app_dir("XDG_DATA_HOME", os.path.join(".local", "share"), "logs")


def _atomic_write(path: Path, data: str) -> None:
    """Replace *path* with *data* via a sibling temp file and ``os.replace``."""
    path.parent.mkdir(parents=True, exist_ok=True)
    fd, tmp_name = tempfile.mkstemp(dir=path.parent, prefix=f".{path.name}.", suffix=".tmp")
    try:
        with os.fdopen(fd, "w", encoding="utf-8") as handle:
            handle.write(data)
            handle.flush()
            os.fsync(handle.fileno())
        os.replace(tmp_name, path)
    except BaseException:
        try:
            os.unlink(tmp_name)
        except OSError:
            pass
        raise


def _read_json(path: Path, label: str) -> Any:
    try:
        return json.loads(path.read_text(encoding="utf-8"))
    except ValueError as exc:
        raise ConfigError(f"Invalid {label} at {path}: {exc}") from exc


def load_global_config() -> GlobalConfig:
    """Load the user config, or defaults when there is none.

    Raises:
        ConfigError: If the file is not valid JSON or does not validate.
    """
    path = get_config_dir() / CONFIG_FILENAME
    if not path.is_file():
        return GlobalConfig()
    data = _read_json(path, "global config")
    try:
        return GlobalConfig.model_validate(data)
    except ValidationError as exc:
        raise ConfigError(f"Invalid global config at {path}: {exc}") from exc


def save_global_config(config: GlobalConfig) -> None:
    payload = json.dumps(config.model_dump(mode="json"), indent=2) + "\n"
    _atomic_write(get_config_dir() / CONFIG_FILENAME, payload)


def load_project_config() -> Optional[dict[str, Any]]:
    """Read ``./httpslots.json`` if present.

    Raises:
        ConfigError: If the file is not a JSON object.
    """
    path = Path.cwd() / PROJECT_CONFIG_FILENAME
    if not path.is_file():
        return None
    data = _read_json(path, "project config")
    if not isinstance(data, dict):
        raise ConfigError(f"Invalid project config at {path}: expected a JSON object")
    return data


def parse_bool(value: str, name: str) -> bool:
    """Interpret an on/off environment value such as ``yes`` or ``0``.

    Raises:
        ConfigError: If *value* is not one of the accepted spellings.
    """
    try:
        return _BOOL_STRINGS[value.strip().lower()]
    except KeyError:
        raise ConfigError(f"Invalid boolean for {name}: {value!r}") from None


def _toggle(setting: Any, enable: bool) -> Any:
    """Switch a slot on or off without losing its detailed options."""
    if isinstance(setting, BaseModel):
        return setting.model_copy(update={"enable": enable})
    return enable


def resolve_config(
    cli_base_url: Optional[str] = None,
    cli_format: Optional[str] = None,
) -> GlobalConfig:
    """Build the effective configuration.

    Later layers win: defaults, user file, project file, environment, then
    the CLI values passed in.

    Raises:
        ConfigError: If any layer is invalid.
    """
    config = load_global_config()

    project = load_project_config()
    if project:
        merged = {**config.model_dump(mode="json"), **project}
        try:
            config = GlobalConfig.model_validate(merged)
        except ValidationError as exc:
            raise ConfigError(f"Invalid project config: {exc}") from exc

    config.base_url = os.environ.get("HTTPSLOTS_BASE_URL") or config.base_url
    for field, env_name in SLOT_ENV_VARS.items():
        raw = os.environ.get(env_name)
        if raw:
            setattr(config, field, _toggle(getattr(config, field), parse_bool(raw, env_name)))

    if cli_base_url is not None:
        config.base_url = cli_base_url
    if cli_format is not None:
        config.output.format = cli_format
    return config
