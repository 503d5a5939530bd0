"""
Configuration loading and saving.

Implements the configuration precedence chain:
    defaults < $GFV_HOME/config.json < env vars

The config file is JSON. Environment overrides are applied on load and are
never written back by save_config.
"""

import json
import logging
import os
from pathlib import Path
from typing import Any

from pydantic import ValidationError

from gfv.core.errors import ParseError
from gfv.core.manifest import write_json_atomic

from .env import load_layered_env
from .models import GfvConfig

logger = logging.getLogger(__name__)

CONFIG_FILENAME = "config.json"

# Env var -> dotted config key
ENV_OVERRIDES = {
    "GFV_AI_ENDPOINT": "ai.endpoint",
    "GFV_AI_API_KEY": "ai.api_key",
    "GFV_AI_MODEL": "ai.model",
    "GFV_DEFAULT_BRANCH": "sync.default_branch",
}


def get_gfv_home() -> Path:
    """
    Get the gfv home directory.

    Returns:
        $GFV_HOME if set, else ~/.gfv
    """
    if gfv_home := os.environ.get("GFV_HOME"):
        return Path(gfv_home).expanduser()
    return Path.home() / ".gfv"


def get_config_path() -> Path:
    """
    Get path to the global configuration file.

    Returns:
        Path to $GFV_HOME/config.json
    """
    return get_gfv_home() / CONFIG_FILENAME


def default_vault_dir(name: str) -> Path:
    """Directory a vault gets when none is given: $GFV_HOME/<name>."""
    return get_gfv_home() / name


def load_json_file(path: Path) -> dict[str, Any] | None:
    """
    Load a JSON object from path.

    Returns:
        Parsed JSON as dict, or None if the file doesn't exist

    Raises:
        ParseError: If the file is not valid JSON or not an object
    """
    if not path.exists():
        return None

    try:
        with path.open(encoding="utf-8") as f:
            data = json.load(f)
    except (json.JSONDecodeError, OSError) as e:
        raise ParseError(f"Failed to parse config at {path}: {e}", path=str(path)) from e

    if not isinstance(data, dict):
        raise ParseError(f"Config at {path} must be a JSON object", path=str(path))
    return data


def apply_env_overrides(config: GfvConfig) -> GfvConfig:
    """
    Apply environment variable overrides to configuration.

    Supported env vars:
        GFV_AI_ENDPOINT - overrides ai.endpoint
        GFV_AI_API_KEY - overrides ai.api_key
        GFV_AI_MODEL - overrides ai.model
        GFV_DEFAULT_BRANCH - overrides sync.default_branch

    The file values are remembered so save_config can write them back
    instead of the overrides.
    """
    for env_var, key in ENV_OVERRIDES.items():
        value = os.environ.get(env_var)
        if not value:
            continue
        section_name, field = key.split(".")
        section = getattr(config, section_name)
        config._env_overrides[key] = (getattr(section, field), value)
        setattr(section, field, value)
        logger.debug("%s overridden by %s", key, env_var)
    return config


def load_config(load_env_files: bool = True) -> GfvConfig:
    """
    Load the global configuration.

    Args:
        load_env_files: Seed the environment from $GFV_HOME/.env and ./.env first

    Returns:
        Validated GfvConfig (defaults if the file does not exist)

    Raises:
        ParseError: If the file is malformed

    Example:
        >>> config = load_config()
        >>> config.sync.default_branch
        'main'
    """
    gfv_home = get_gfv_home()
    if load_env_files:
        load_layered_env(gfv_home=gfv_home)

    path = get_config_path()
    data = load_json_file(path) or {}

    try:
        config = GfvConfig.model_validate(data)
    except ValidationError as e:
        raise ParseError(
            f"Invalid config format in {path}",
            path=str(path),
            errors=e.error_count(),
        ) from e

    return apply_env_overrides(config)


def save_config(config: GfvConfig) -> Path:
    """
    Write the configuration atomically to $GFV_HOME/config.json.

    Returns:
        Path of the written file
    """
    data = config.model_dump(mode="json", exclude_none=True)

    for key, (file_value, env_value) in config._env_overrides.items():
        section_name, field = key.split(".")
        section = data.setdefault(section_name, {})
        if section.get(field) != env_value:
            # Changed after load, keep the new value
            continue
        if file_value is None:
            section.pop(field, None)
        else:
            section[field] = file_value

    path = get_config_path()
    write_json_atomic(path, data)
    logger.debug("Saved config to %s", path)
    return path
