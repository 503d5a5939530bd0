"""
Configuration models and loading.

This module provides Pydantic models for the global gfv configuration with
layering: defaults < $GFV_HOME/config.json < env vars.
"""

from .keys import (
    RESERVED_COMMANDS,
    SUPPORTED_KEYS,
    add_alias,
    expand_aliases,
    get_value,
    list_values,
    remove_alias,
    set_value,
    unset_value,
)
from .loader import (
    ENV_OVERRIDES,
    default_vault_dir,
    get_config_path,
    get_gfv_home,
    load_config,
    save_config,
)
from .models import AiConfig, CurrentConfig, GfvConfig, SyncConfig

__all__ = [
    # Models
    "AiConfig",
    "CurrentConfig",
    "GfvConfig",
    "SyncConfig",
    # Loader functions
    "ENV_OVERRIDES",
    "default_vault_dir",
    "get_config_path",
    "get_gfv_home",
    "load_config",
    "save_config",
    # Keys and aliases
    "RESERVED_COMMANDS",
    "SUPPORTED_KEYS",
    "add_alias",
    "expand_aliases",
    "get_value",
    "list_values",
    "remove_alias",
    "set_value",
    "unset_value",
]
