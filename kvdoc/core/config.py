"""
kvdoc Configuration — loads and merges config from multiple sources.

Precedence (highest to lowest):
1. Explicit overrides (passed in code)
2. Environment variables (KVDOC_*)
3. Project config (./kvdoc.toml)
4. User config (~/.kvdoc/config.toml)
5. Defaults (hardcoded)

Environment variable mapping:
    KVDOC_STORAGE_BACKEND → storage.backend
    KVDOC_STORAGE_PATH → storage.path
    KVDOC_LOG_LEVEL → logging.level
    KVDOC_LOG_DIR → logging.log_dir
    KVDOC_LOG_FILE → logging.file_enabled
"""

from __future__ import annotations

import os
import re
import tomllib
from pathlib import Path
from typing import Any, Literal

from pydantic import BaseModel, Field

from kvdoc.core.errors import ConfigError

# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━
# Config Sub-Models
# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━


class StorageConfig(BaseModel):
    """Key/value backend selection."""

    backend: Literal["memory", "sqlite"] = "sqlite"
    path: str = "~/.kvdoc/store.db"

    def resolved_path(self) -> Path:
        return Path(self.path).expanduser()


class LoggingConfig(BaseModel):
    """Logging configuration."""

    level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = "WARNING"
    log_dir: str = "~/.kvdoc/logs"
    file_enabled: bool = True


# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━
# Main Config
# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━


class KvDocConfig(BaseModel):
    """Root configuration for kvdoc."""

    storage: StorageConfig = Field(default_factory=StorageConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)

    @staticmethod
    def load(
        overrides: dict[str, Any] | None = None,
        project_path: Path | None = None,
        user_path: Path | None = None,
    ) -> KvDocConfig:
        """
        Load configuration from all sources and merge.

        Precedence: overrides > env vars > project toml > user toml > defaults
        """
        merged: dict[str, Any] = {}

        # Layer 1: User config (~/.kvdoc/config.toml)
        user_config_path = user_path or get_kvdoc_home() / "config.toml"
        if user_config_path.exists():
            _deep_merge(merged, _load_toml(user_config_path))

        # Layer 2: Project config (./kvdoc.toml)
        project_config_path = project_path or Path.cwd() / "kvdoc.toml"
        if project_config_path.exists():
            _deep_merge(merged, _load_toml(project_config_path))

        # Layer 3: Environment variables
        _deep_merge(merged, _load_from_env())

        # Layer 4: Explicit overrides
        if overrides:
            _deep_merge(merged, overrides)

        _substitute_env_vars(merged)

        try:
            return KvDocConfig(**merged)
        except Exception as e:
            raise ConfigError(f"Invalid configuration: {e}") from e


def get_kvdoc_home() -> Path:
    """Get the kvdoc home directory (~/.kvdoc)."""
    return Path.home() / ".kvdoc"


# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━
# Internal Helpers
# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━


def _load_toml(path: Path) -> dict[str, Any]:
    """Load a TOML file."""
    try:
        with open(path, "rb") as f:
            return tomllib.load(f)
    except (OSError, tomllib.TOMLDecodeError) as e:
        raise ConfigError(f"Failed to load config from {path}: {e}") from e


_ENV_MAPPING = {
    "KVDOC_STORAGE_BACKEND": ("storage", "backend"),
    "KVDOC_STORAGE_PATH": ("storage", "path"),
    "KVDOC_LOG_LEVEL": ("logging", "level"),
    "KVDOC_LOG_DIR": ("logging", "log_dir"),
    "KVDOC_LOG_FILE": ("logging", "file_enabled"),
}

# Only these keys are typed; everything else stays a string.
_BOOL_KEYS = {"file_enabled"}


def _load_from_env() -> dict[str, Any]:
    """Load configuration from KVDOC_* environment variables."""
    result: dict[str, Any] = {}

    for env_var, (section, key) in _ENV_MAPPING.items():
        value = os.environ.get(env_var)
        if value is None:
            continue
        if key in _BOOL_KEYS:
            result.setdefault(section, {})[key] = _convert_bool(value)
        elif key == "level":
            result.setdefault(section, {})[key] = value.upper()
        else:
            result.setdefault(section, {})[key] = value

    return result


def _convert_bool(value: str) -> bool | str:
    """Convert a boolean-looking string; leave anything else for pydantic to reject."""
    if value.lower() in ("true", "yes", "1", "on"):
        return True
    if value.lower() in ("false", "no", "0", "off"):
        return False
    return value


def _deep_merge(base: dict, override: dict) -> None:
    """Deep merge override into base (mutates base)."""
    for key, value in override.items():
        if key in base and isinstance(base[key], dict) and isinstance(value, dict):
            _deep_merge(base[key], value)
        else:
            base[key] = value


_ENV_PATTERN = re.compile(r"\$\{([^}]+)\}")


def _substitute(value: str) -> str:
    for var_name in _ENV_PATTERN.findall(value):
        value = value.replace(f"${{{var_name}}}", os.environ.get(var_name, ""))
    return value


def _substitute_env_vars(data: dict) -> None:
    """Recursively substitute ${ENV_VAR} patterns in string values."""
    for key, value in data.items():
        if isinstance(value, dict):
            _substitute_env_vars(value)
        elif isinstance(value, str):
            data[key] = _substitute(value)
