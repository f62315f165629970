"""Utility functions for reading and writing configuration files."""

from __future__ import annotations

import os
from pathlib import Path
from typing import Any, Dict

import yaml

from smartfile.config.configuration import register_setting

# Constants
SETTINGS_FILE = "settings.yaml"
MISSING_MESSAGE = "Missing required setting: {}"
NOT_GIVEN = object()

# Built-in settings are registered here so that applications embedding
# smartfile can list them next to their own via get_settings_registry().

register_setting(
    package_name="smartfile",
    env_var="SMARTFILE_ENCODING",
    group="Files",
    description="Text encoding used by FileStream handles when none is passed explicitly",
    default="utf-8",
)
register_setting(
    package_name="smartfile",
    env_var="SMARTFILE_DEFAULT_MODE",
    group="Files",
    description=(
        "Open mode used by open_scoped_file when no mode is given. "
        "Names from read, write, append, truncate joined with '|'."
    ),
    default="read|write|append",
)
register_setting(
    package_name="smartfile",
    env_var="SMARTFILE_LOG_LEVEL",
    group="Logging",
    description="Log level for smartfile loggers",
    enum=["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"],
    default="INFO",
)


# ---------------------------------------------------------------------------
# Path helpers
# ---------------------------------------------------------------------------


def get_system_file_path(filename: str) -> Path:
    """Return the path to the configuration file for the current OS."""
    import platform

    os_name = platform.system()
    if os_name in {"Linux", "Darwin"}:
        return Path.home() / ".config" / "smartfile" / filename
    elif os_name == "Windows":
        appdata = os.getenv("APPDATA")
        if appdata is not None:
            return Path(appdata) / "smartfile" / filename
        return Path("data") / filename
    return Path("data") / filename


# ---------------------------------------------------------------------------
# Settings helpers
# ---------------------------------------------------------------------------


def load_settings(settings_file: Path | None = None) -> Dict[str, Any]:
    """Load settings from the YAML settings file, if it exists."""
    if settings_file is None:
        settings_file = get_system_file_path(SETTINGS_FILE)

    settings: Dict[str, Any] = {}
    if settings_file.exists():
        with open(settings_file, "r") as f:
            settings = yaml.safe_load(f) or {}

    return settings


def save_settings(settings: Dict[str, Any], settings_file: Path | None = None) -> None:
    """Save settings to the YAML settings file."""
    if settings_file is None:
        settings_file = get_system_file_path(SETTINGS_FILE)

    os.makedirs(os.path.dirname(settings_file), exist_ok=True)

    with open(settings_file, "w") as f:
        yaml.dump(settings, f)


def get_value(
    key: str,
    settings: Dict[str, Any],
    default_env: Dict[str, Any],
    default: Any = NOT_GIVEN,
) -> Any:
    """Retrieve a configuration value from settings, environment or defaults."""
    value = settings.get(key)
    if value is None or str(value) == "":
        value = os.environ.get(key)

    if value is None:
        value = default_env.get(key, default)

    if value is not NOT_GIVEN:
        return value
    raise KeyError(MISSING_MESSAGE.format(key))
