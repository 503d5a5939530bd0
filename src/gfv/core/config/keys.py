"""
Dotted-key access to the global configuration, and command aliases.

Example:
    >>> set_value(config, "ai.model", "gpt-4o-mini")
    >>> get_value(config, "ai.model")
    'gpt-4o-mini'
    >>> expand_aliases(["st"], {"st": "status"})
    ['status']
"""

from __future__ import annotations

import shlex

from gfv.core.errors import ConfigKeyError

from .models import AiConfig, CurrentConfig, GfvConfig, SyncConfig

SUPPORTED_KEYS = (
    "ai.endpoint",
    "ai.api_key",
    "ai.model",
    "sync.conflict_strategy",
    "sync.default_branch",
    "current.active",
)

SECTION_MODELS = {
    "ai": AiConfig,
    "sync": SyncConfig,
    "current": CurrentConfig,
}

RESERVED_COMMANDS = frozenset(
    {
        "init",
        "link",
        "unlink",
        "list",
        "status",
        "backup",
        "restore",
        "config",
        "alias",
        "vault",
        "debug",
        "version",
        "help",
    }
)


def _split_key(key: str) -> tuple[str, str]:
    if key not in SUPPORTED_KEYS:
        raise ConfigKeyError(
            f"Unknown config key: {key}",
            hint=f"Supported keys: {', '.join(SUPPORTED_KEYS)}",
            key=key,
        )
    section, field = key.split(".", 1)
    return section, field


def get_value(config: GfvConfig, key: str) -> str | None:
    """Value of a dotted key, or None when unset."""
    section, field = _split_key(key)
    value = getattr(getattr(config, section), field)
    return None if value is None else str(value)


def set_value(config: GfvConfig, key: str, value: str) -> None:
    """
    Set a dotted key.

    Raises:
        ConfigKeyError: If the key is unknown or the value is empty
    """
    section, field = _split_key(key)
    if not value:
        raise ConfigKeyError(f"Value for {key} must not be empty", key=key)
    setattr(getattr(config, section), field, value)


def unset_value(config: GfvConfig, key: str) -> None:
    """Reset a dotted key to its default."""
    section, field = _split_key(key)
    default = SECTION_MODELS[section].model_fields[field].default
    setattr(getattr(config, section), field, default)


def list_values(config: GfvConfig) -> list[tuple[str, str]]:
    """Every supported key that currently has a value, in a stable order."""
    values = []
    for key in SUPPORTED_KEYS:
        value = get_value(config, key)
        if value is not None:
            values.append((key, value))
    return values


def add_alias(config: GfvConfig, name: str, expansion: str) -> None:
    """
    Register an alias.

    Raises:
        ConfigKeyError: If name shadows a command or expansion is empty
    """
    if name in RESERVED_COMMANDS:
        raise ConfigKeyError(
            f"Cannot create alias '{name}': it is a built-in command",
            alias=name,
        )
    if not name or name.startswith("-") or any(c.isspace() for c in name):
        raise ConfigKeyError(f"Invalid alias name: '{name}'", alias=name)
    if not shlex.split(expansion):
        raise ConfigKeyError(f"Alias '{name}' needs a non-empty expansion", alias=name)
    config.aliases[name] = expansion


def remove_alias(config: GfvConfig, name: str) -> str:
    """
    Remove an alias.

    Returns:
        The expansion that was removed

    Raises:
        ConfigKeyError: If the alias does not exist
    """
    if name not in config.aliases:
        raise ConfigKeyError(f"Alias '{name}' not found", alias=name)
    return config.aliases.pop(name)


def expand_aliases(args: list[str], aliases: dict[str, str]) -> list[str]:
    """
    Expand the command word of args if it is an alias.

    Leading options (e.g. --debug) are kept in place; only the first
    positional argument is considered. Expansion is not recursive.
    """
    for index, arg in enumerate(args):
        if arg.startswith("-"):
            continue
        expansion = aliases.get(arg)
        if expansion is None:
            return list(args)
        return [*args[:index], *shlex.split(expansion), *args[index + 1:]]
    return list(args)
