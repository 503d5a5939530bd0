"""
Configuration data models for gfv.

These models define the structure of `$GFV_HOME/config.json`: the vault
registry, the active vault, AI commit-message settings, sync defaults and
command aliases.
"""

from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field, PrivateAttr, field_validator


class CurrentConfig(BaseModel):
    """Which vault commands operate on when no name is given."""

    active: Optional[str] = Field(
        default=None,
        description="Name of the active vault"
    )


class AiConfig(BaseModel):
    """
    OpenAI-compatible endpoint used to generate commit messages.

    All three fields must be set for a provider to be built.
    """
    endpoint: Optional[str] = Field(
        default=None,
        description="Chat completions URL"
    )
    api_key: Optional[str] = Field(
        default=None,
        description="Bearer token for the endpoint"
    )
    model: Optional[str] = Field(
        default=None,
        description="Model name sent with each request"
    )


class SyncConfig(BaseModel):
    """Defaults for synchronization."""

    conflict_strategy: str = Field(
        default="prompt",
        description="How divergence is reported to the user"
    )
    default_branch: str = Field(
        default="main",
        min_length=1,
        description="Branch name for newly created vaults"
    )


class GfvConfig(BaseModel):
    """
    Global gfv configuration.

    Example:
        >>> config = GfvConfig()
        >>> config.vaults["default"] = "/home/me/.gfv/default"
        >>> config.current.active = "default"
    """

    vaults: dict[str, str] = Field(
        default_factory=dict,
        description="Vault name -> vault directory"
    )
    current: CurrentConfig = Field(
        default_factory=CurrentConfig,
        description="Active vault selection"
    )
    ai: AiConfig = Field(
        default_factory=AiConfig,
        description="Commit message generation"
    )
    sync: SyncConfig = Field(
        default_factory=SyncConfig,
        description="Sync defaults"
    )
    aliases: dict[str, str] = Field(
        default_factory=dict,
        description="Command alias -> expansion"
    )

    model_config = ConfigDict(
        extra="allow",  # Allow extra fields for forward compatibility
        validate_assignment=True,
    )

    # Dotted key -> (value from file, value from environment)
    _env_overrides: dict[str, tuple[Any, Any]] = PrivateAttr(default_factory=dict)

    @field_validator("vaults", mode="before")
    @classmethod
    def validate_vaults(cls, v: Any) -> Any:
        """Accept Path values for vault directories."""
        if isinstance(v, dict):
            return {name: str(path) for name, path in v.items()}
        return v

    @property
    def active(self) -> Optional[str]:
        return self.current.active
