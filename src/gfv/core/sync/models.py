"""
Data models for the sync engine.

Defines Pydantic models for the results of link, backup, restore and status.
"""

from __future__ import annotations

from enum import Enum

from pydantic import BaseModel, Field

from gfv.core.git.models import PullOutcome
from gfv.core.manifest.models import FileType


class FileState(str, Enum):
    """State of one tracked entry as reported by status."""

    MODIFIED = "modified"
    MISSING_SOURCE = "missing_source"
    UP_TO_DATE = "up_to_date"


class SkipReason(str, Enum):
    """Why backup or restore left an entry alone."""

    SOURCE_MISSING = "source_missing"
    NOT_IN_VAULT = "not_in_vault"
    PLATFORM_MISMATCH = "platform_mismatch"


class SkippedEntry(BaseModel):
    """An entry skipped during backup or restore."""

    vault_path: str
    reason: SkipReason
    detail: str = ""


class LinkResult(BaseModel):
    """
    Result of linking a path into the vault.

    Records where the content currently lives so the caller can tell the
    user whether to run backup or restore next.
    """

    vault_path: str
    source_path: str
    file_type: FileType
    platform: str | None = None
    exists_locally: bool = False
    exists_in_vault: bool = False


class BackupResult(BaseModel):
    """Result of a backup."""

    copied: list[str] = Field(
        default_factory=list,
        description="Vault paths copied from their source",
    )
    skipped: list[SkippedEntry] = Field(default_factory=list)
    committed: bool = Field(default=False, description="Whether a commit was made")
    commit_sha: str | None = None
    message: str | None = Field(default=None, description="Commit message used")
    pull_outcome: PullOutcome | None = None
    first_push: bool = Field(
        default=False,
        description="Remote branch did not exist yet, so no pull was attempted",
    )
    pushed: bool = False
    branch: str | None = None


class RestoreResult(BaseModel):
    """Result of a restore (or a dry run of one)."""

    dry_run: bool = False
    cancelled: bool = False
    restored: list[str] = Field(
        default_factory=list,
        description="Vault paths restored (or that would be restored)",
    )
    skipped: list[SkippedEntry] = Field(default_factory=list)
    pull_outcome: PullOutcome | None = None
    branch: str | None = None
    local_changes: list[str] = Field(
        default_factory=list,
        description="Source paths whose size differs from the stored copy",
    )


class EntryStatus(BaseModel):
    vault_path: str
    source_path: str
    state: FileState


class StatusReport(BaseModel):
    """
    Snapshot of a vault: repository dirtiness and per-entry state.

    Every tracked entry appears in exactly one state bucket.
    """

    vault_dir: str
    remote_url: str | None = None
    remote_branch: str | None = None
    has_uncommitted_changes: bool = False
    entries: list[EntryStatus] = Field(default_factory=list)

    def by_state(self, state: FileState) -> list[str]:
        return [entry.vault_path for entry in self.entries if entry.state == state]

    @property
    def modified(self) -> list[str]:
        return self.by_state(FileState.MODIFIED)

    @property
    def missing_source(self) -> list[str]:
        return self.by_state(FileState.MISSING_SOURCE)

    @property
    def up_to_date(self) -> list[str]:
        return self.by_state(FileState.UP_TO_DATE)

    @property
    def all_up_to_date(self) -> bool:
        return not self.modified and not self.missing_source
