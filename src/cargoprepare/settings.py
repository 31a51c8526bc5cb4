"""Settings — reads .env + cargo-prepare.toml + environment into PrepareSettings.

Resolution order for each key: environment variable > [prepare] table of
cargo-prepare.toml in the working directory > built-in default.

Key entities:
  - PrepareSettings: frozen dataclass with the resolved settings.
  - load_settings(): parse .env + cargo-prepare.toml → PrepareSettings.
"""

from __future__ import annotations

import logging
import os
import tomllib
from dataclasses import dataclass
from pathlib import Path

from dotenv import load_dotenv

from .errors import ConfigError

logger = logging.getLogger(__name__)

SETTINGS_FILE_NAME = "cargo-prepare.toml"

# Environment variables
CARGO_ENV = "CARGO"  # set by cargo when running a subcommand
LOG_LEVEL_ENV = "CARGO_PREPARE_LOG"

_LOG_LEVELS = ("CRITICAL", "ERROR", "WARNING", "INFO", "DEBUG")


@dataclass(frozen=True)
class PrepareSettings:
    """Resolved settings for one invocation."""

    cargo: str = "cargo"
    all_features: bool = True
    log_level: str = "WARNING"

    @property
    def log_level_value(self) -> int:
        return logging.getLevelName(self.log_level)


def load_settings(cwd: Path | None = None) -> PrepareSettings:
    """Read .env + cargo-prepare.toml and return the resolved settings.

    Args:
        cwd: Directory searched for ``.env`` and ``cargo-prepare.toml``.
             Defaults to the current working directory.

    Raises:
        ConfigError: If the settings file is malformed or a value is invalid.
    """
    if cwd is None:
        cwd = Path.cwd()

    local_env = cwd / ".env"
    if local_env.is_file():
        load_dotenv(local_env)

    section = _read_settings_file(cwd / SETTINGS_FILE_NAME)

    def _get(key: str, env_var: str | None, default):
        """Environment > file > default."""
        if env_var and os.getenv(env_var):
            return os.environ[env_var]
        return section.get(key, default)

    all_features = section.get("all_features", True)
    if not isinstance(all_features, bool):
        raise ConfigError(
            f"{SETTINGS_FILE_NAME}: 'all_features' must be true or false",
            context={"key": "all_features"},
        )

    log_level = str(_get("log_level", LOG_LEVEL_ENV, "WARNING")).upper()
    if log_level not in _LOG_LEVELS:
        raise ConfigError(
            f"Unknown log level '{log_level}' (expected one of {', '.join(_LOG_LEVELS)})",
            context={"key": "log_level"},
        )

    return PrepareSettings(
        cargo=str(_get("cargo", CARGO_ENV, "cargo")),
        all_features=all_features,
        log_level=log_level,
    )


def _read_settings_file(path: Path) -> dict:
    """Return the [prepare] table of ``path``, or {} if the file is absent."""
    if not path.is_file():
        return {}
    try:
        with open(path, "rb") as f:
            raw = tomllib.load(f)
    except tomllib.TOMLDecodeError as e:
        raise ConfigError(
            f"Invalid settings file {path}: {e}", context={"path": path}
        ) from e
    section = raw.get("prepare", {})
    if not isinstance(section, dict):
        raise ConfigError(
            f"{path}: [prepare] must be a table", context={"path": path}
        )
    logger.debug("Loaded settings from %s", path)
    return section
