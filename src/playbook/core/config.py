"""Runtime configuration for playbook.

Configuration is a frozen pydantic model loaded once per process. Sources,
in priority order: an explicit dict, an explicit YAML path, then
``~/.config/playbook/config.yaml``. With no source, defaults apply.

Usage:
    from playbook.core.config import get_config, load_config

    load_config({"termination_grace_seconds": 2})
    config = get_config()
"""

import logging
from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from playbook.core.exceptions import ConfigError

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_DIR = Path.home() / ".config" / "playbook"
DEFAULT_CONFIG_FILE = "config.yaml"

# Dependency caches, build outputs and intermediate-object directories
DEFAULT_EXCLUDED_DIRS = (
    "node_modules",
    "bower_components",
    "typings",
    "artifacts",
    "bin",
    "obj",
    "packages",
)


class PlaybookSettings:
    """Recognized names for the user-editable settings kept in the store."""

    LINE_LIMIT = "lineLimit"

    available = (LINE_LIMIT,)


def coerce_line_limit(value: Any) -> int:
    """Coerce any value to a usable line limit (positive integer, floor 1).

    Args:
        value: Raw value from the store or the user.

    Returns:
        The integer limit, or 1 for missing, invalid or non-positive input.

    """
    if value is None or isinstance(value, bool):
        return 1
    try:
        limit = int(value)
    except (TypeError, ValueError, OverflowError):
        return 1
    return limit if limit >= 1 else 1


class PlaybookConfig(BaseModel):
    """Process-wide playbook configuration.

    Attributes:
        default_command: Executable used for projects without a command.
        termination_grace_seconds: Wait between SIGTERM and SIGKILL on cancel.
        excluded_dirs: Directory names discovery never descends into.
        line_limit: Initial line limit written to the store, if set.

    """

    model_config = ConfigDict(frozen=True)

    default_command: str = "npm"
    termination_grace_seconds: float = Field(default=5.0, ge=0)
    excluded_dirs: list[str] = Field(default_factory=lambda: list(DEFAULT_EXCLUDED_DIRS))
    line_limit: int | None = None

    @field_validator("excluded_dirs", mode="before")
    @classmethod
    def coerce_none_to_defaults(cls, v: Any) -> list[str]:
        """YAML parses an empty key as None; fall back to the defaults."""
        if v is None:
            return list(DEFAULT_EXCLUDED_DIRS)
        return list(v)


_config: PlaybookConfig | None = None


def load_config(source: dict[str, Any] | Path | None = None) -> PlaybookConfig:
    """Load configuration and install it as the process-wide singleton.

    Args:
        source: Mapping of values, path to a YAML file, or None for the
            default location (defaults are used when that file is absent).

    Returns:
        The loaded configuration.

    Raises:
        ConfigError: If the file cannot be parsed or values are invalid.

    """
    global _config

    if source is None:
        default_path = DEFAULT_CONFIG_DIR / DEFAULT_CONFIG_FILE
        data = _read_yaml(default_path) if default_path.exists() else {}
    elif isinstance(source, Path):
        if not source.exists():
            raise ConfigError(f"Config file not found: {source}")
        data = _read_yaml(source)
    else:
        data = source

    try:
        _config = PlaybookConfig.model_validate(data)
    except ValidationError as e:
        raise ConfigError(f"Invalid configuration: {e}") from e

    logger.debug("Loaded config: %s", _config)
    return _config


def _read_yaml(path: Path) -> dict[str, Any]:
    try:
        with path.open(encoding="utf-8") as f:
            data = yaml.safe_load(f) or {}
    except (OSError, yaml.YAMLError) as e:
        raise ConfigError(f"Cannot read config file {path}: {e}") from e
    if not isinstance(data, dict):
        raise ConfigError(f"Config file {path} must contain a mapping")
    return data


def get_config() -> PlaybookConfig:
    """Return the loaded configuration, loading defaults on first use."""
    if _config is None:
        return load_config()
    return _config


def _reset_config() -> None:
    """Drop the singleton. Used by tests."""
    global _config
    _config = None
