"""
Environment Configuration Management Module

This module provides centralized configuration for smartfile through the
Environment class. Values are resolved from multiple sources:

- Settings file (settings.yaml in the per-OS config directory)
- Environment variables, including those loaded from .env files
- Defaults registered in smartfile.config.settings

The Environment class exposes class methods so configuration can be read
anywhere without passing an object around.
"""

import os
from pathlib import Path
from typing import TYPE_CHECKING, Any, Dict, Optional

from smartfile.config.configuration import get_settings_registry
from smartfile.config.settings import get_value, load_settings

if TYPE_CHECKING:
    from smartfile.io.open_mode import OpenMode

DEFAULT_ENV: Dict[str, Any] = {setting.env_var: setting.default for setting in get_settings_registry()}

_FALSY = ("0", "false", "no", "off", "")


def load_dotenv_files(project_root: Path | None = None):
    """Load environment variables from .env files based on current environment."""
    from dotenv import load_dotenv

    if project_root is None:
        project_root = Path.cwd()

    env_name = os.environ.get("ENV", "development")

    # Later files do not override earlier ones or the process environment
    env_files = [
        project_root / ".env",
        project_root / f".env.{env_name}",
        project_root / f".env.{env_name}.local",
    ]

    for env_file in env_files:
        if env_file.exists():
            load_dotenv(env_file, override=False)


class Environment(object):
    """
    Central access point for smartfile configuration.

    Settings are loaded lazily on first access: .env files are applied to the
    process environment first, then settings.yaml is read. Lookups go through
    settings.yaml, the environment and finally DEFAULT_ENV.
    """

    settings: Optional[Dict[str, Any]] = None

    @classmethod
    def load_settings(cls):
        load_dotenv_files()
        cls.settings = load_settings()

    @classmethod
    def get_settings(cls) -> Dict[str, Any]:
        if cls.settings is None:
            cls.load_settings()
        assert cls.settings is not None
        return cls.settings

    @classmethod
    def clear_settings(cls):
        """Forget loaded settings so the next access reloads them."""
        cls.settings = None

    @classmethod
    def get(cls, key: str, default: Any = None):
        return get_value(key, cls.get_settings(), DEFAULT_ENV, default)

    @classmethod
    def get_log_level(cls) -> str:
        """Return desired log level string.

        Priority:
        1) LOG_LEVEL env
        2) If DEBUG env is truthy, return "DEBUG"
        3) SMARTFILE_LOG_LEVEL env (default "INFO")
        """
        level = os.getenv("LOG_LEVEL")
        if level:
            return str(level).upper()
        debug_env = os.getenv("DEBUG")
        if debug_env and debug_env.lower() not in _FALSY:
            return "DEBUG"
        return os.getenv("SMARTFILE_LOG_LEVEL", "INFO").upper()

    @classmethod
    def get_encoding(cls) -> str:
        """
        Text encoding used by FileStream handles.
        """
        return str(cls.get("SMARTFILE_ENCODING") or "utf-8")

    @classmethod
    def get_default_open_mode(cls) -> "OpenMode":
        """
        Open mode used by open_scoped_file when the caller passes none.
        """
        from smartfile.io.open_mode import OpenMode

        return OpenMode.parse(str(cls.get("SMARTFILE_DEFAULT_MODE") or "read|write|append"))
