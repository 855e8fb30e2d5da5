"""
Runtime settings for stackdown.

Settings are layered, later layers winning:

1. built-in defaults
2. a YAML file (``--config``, ``$STACKDOWN_CONFIG`` or ``./.stackdown.yaml``)
3. ``STACKDOWN_*`` environment variables
4. explicit overrides, usually command-line flags
"""

import os
import logging
from pathlib import Path
from typing import Any, Dict, Optional

import yaml
from pydantic import BaseModel, ValidationError, field_validator

from .errors import ConfigError

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_FILE = ".stackdown.yaml"
ENV_PREFIX = "STACKDOWN_"


class Settings(BaseModel):
    """Validated settings for the Docker backend and the convergence wait."""
    docker_bin: str = "docker"
    docker_context: Optional[str] = None
    api_version: Optional[str] = None
    command_timeout: float = 60.0
    poll_interval: float = 0.5
    max_poll_interval: float = 5.0
    wait_timeout: Optional[float] = None

    @field_validator("api_version", mode="before")
    @classmethod
    def _version_as_text(cls, value: Any) -> Any:
        # YAML reads an unquoted 1.41 as a float
        if isinstance(value, (int, float)):
            return str(value)
        return value

    @field_validator("command_timeout", "poll_interval", "max_poll_interval")
    @classmethod
    def _positive(cls, value: float) -> float:
        if value <= 0:
            raise ValueError("must be greater than zero")
        return value

    @field_validator("wait_timeout")
    @classmethod
    def _positive_or_none(cls, value: Optional[float]) -> Optional[float]:
        if value is not None and value <= 0:
            raise ValueError("must be greater than zero")
        return value


def get_config_path(path: Optional[str] = None) -> Optional[Path]:
    """
    Resolve which config file to read, if any.

    An explicit path or ``$STACKDOWN_CONFIG`` must exist; the default
    ``./.stackdown.yaml`` is optional.
    """
    explicit = path or os.environ.get(f"{ENV_PREFIX}CONFIG")
    if explicit:
        config_path = Path(explicit).expanduser()
        if not config_path.is_file():
            raise ConfigError(f"Config file not found: {config_path}")
        return config_path

    default_path = Path(DEFAULT_CONFIG_FILE)
    if default_path.is_file():
        return default_path
    return None


def _read_config_file(config_path: Path) -> Dict[str, Any]:
    try:
        with open(config_path, "r") as f:
            data = yaml.safe_load(f) or {}
    except (OSError, yaml.YAMLError) as e:
        raise ConfigError(f"Failed to read config file {config_path}: {e}") from e

    if not isinstance(data, dict):
        raise ConfigError(f"Config file {config_path} must contain a mapping")
    return data


def _read_environment() -> Dict[str, str]:
    values = {}
    for name in Settings.model_fields:
        env_value = os.environ.get(f"{ENV_PREFIX}{name.upper()}")
        if env_value is not None and env_value != "":
            values[name] = env_value
    return values


def load_settings(path: Optional[str] = None, overrides: Optional[Dict[str, Any]] = None) -> Settings:
    """
    Build Settings from file, environment and overrides.

    Args:
        path: Optional explicit config file
        overrides: Values that win over everything else; None values are ignored

    Returns:
        Validated settings

    Raises:
        ConfigError: If the file cannot be read or a value is invalid
    """
    values: Dict[str, Any] = {}

    config_path = get_config_path(path)
    if config_path:
        logger.debug(f"Loading settings from {config_path}")
        values.update(_read_config_file(config_path))

    values.update(_read_environment())

    if overrides:
        values.update({key: value for key, value in overrides.items() if value is not None})

    unknown = sorted(set(values) - set(Settings.model_fields))
    if unknown:
        raise ConfigError(f"Unknown setting(s): {', '.join(unknown)}")

    try:
        return Settings(**values)
    except ValidationError as e:
        raise ConfigError(f"Invalid settings: {e}") from e
