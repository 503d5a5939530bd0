"""
Data models returned by the vault registry.
"""

from __future__ import annotations

from pydantic import BaseModel, Field


class VaultSummary(BaseModel):
    """One row of `gfv vault list`."""

    name: str
    path: str
    active: bool = False
    initialized: bool = False


class VaultInfo(BaseModel):
    """Details of a single vault."""

    name: str
    path: str
    active: bool = False
    initialized: bool = False
    remote_url: str | None = None
    branch: str | None = Field(
        default=None,
        description="Remote branch from the manifest, or the checked out branch",
    )
    file_count: int = 0


class CreateResult(BaseModel):
    """Outcome of creating a vault."""

    name: str
    vault_dir: str
    branch: str
    remote_url: str | None = None
    cloned: bool = Field(
        default=False,
        description="Existing history was cloned from the remote",
    )
    pushed: bool = Field(
        default=False,
        description="The initial commit reached the remote",
    )
    push_error: str | None = None
    active: bool = False
    file_count: int = 0
