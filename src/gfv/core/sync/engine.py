"""
Sync engine: link, unlink, backup, restore and status for one vault.

The engine borrows a loaded Vault and an open VersionedStore for the length
of a single command. It never talks to the user directly; interactive
decisions (overwrite local changes during restore) go through the confirm
callback supplied by the caller.

Example:
    >>> engine = SyncEngine(vault, VersionedStore.open(vault.repo_path))
    >>> engine.link("~/.zshrc")
    >>> result = engine.backup()
    >>> result.committed
    True
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable
from pathlib import Path

from gfv.core.ai import CommitMessageProvider
from gfv.core.errors import (
    AlreadyManagedError,
    BackendError,
    NotInManifestError,
    VaultError,
    VaultFileNotFoundError,
)
from gfv.core.git import REMOTE_NAME, VersionedStore
from gfv.core.manifest import FileEntry, FileType, Manifest, Platform, RemoteConfig
from gfv.core.manifest.models import utc_now
from gfv.core.vault import Vault, check_vault_path

from .fsops import copy_entry, remove_entry, sizes_differ
from .models import (
    BackupResult,
    EntryStatus,
    FileState,
    LinkResult,
    RestoreResult,
    SkippedEntry,
    SkipReason,
    StatusReport,
)
from .paths import expand_home, infer_vault_path

logger = logging.getLogger(__name__)

DEFAULT_COMMIT_MESSAGE = "Update vault"

# Receives the source paths about to be overwritten, returns True to proceed
ConfirmCallback = Callable[[list[str]], bool]


class SyncEngine:
    """
    Orchestrates copying between source locations and the versioned store.

    Args:
        vault: Loaded vault whose manifest is read and updated
        store: Open repository at vault.repo_path
        provider: Optional commit message generator
        confirm: Asked before restore overwrites locally modified sources
        current_platform: Platform used for restore filtering
        home: Home directory for `~` expansion and path inference
    """

    def __init__(
        self,
        vault: Vault,
        store: VersionedStore,
        provider: CommitMessageProvider | None = None,
        confirm: ConfirmCallback | None = None,
        current_platform: Platform | None = None,
        home: Path | None = None,
    ) -> None:
        self.vault = vault
        self.store = store
        self.provider = provider
        self.confirm = confirm
        self.current_platform = current_platform or Platform.current()
        self.home = home or Path.home()

    @property
    def manifest(self) -> Manifest:
        return self.vault.manifest

    # ------------------------------------------------------------------
    # Link / unlink
    # ------------------------------------------------------------------

    def resolve_source(self, source: str | Path) -> Path:
        return expand_home(source, self.home)

    def infer_vault_path(self, source: Path) -> str:
        return infer_vault_path(source, self.home)

    def link(
        self,
        source: str | Path,
        vault_path: str | None = None,
        platform: Platform | None = None,
    ) -> LinkResult:
        """
        Start tracking source under vault_path.

        Only the manifest changes; content moves on the next backup or
        restore.

        Raises:
            InvalidVaultPathError: If vault_path is absolute or escapes the repository
            AlreadyManagedError: If vault_path is already tracked
            VaultFileNotFoundError: If neither copy exists
        """
        source_path = self.resolve_source(source)
        vault_path = check_vault_path(vault_path or self.infer_vault_path(source_path))

        existing = self.manifest.get_file(vault_path)
        if existing is not None:
            raise AlreadyManagedError(
                f"{vault_path} is already managed (source: {existing.source_path})",
                hint="To update it, use: gfv backup",
                vault_path=vault_path,
            )

        stored_path = self.vault.get_file_path(vault_path)
        exists_locally = source_path.exists()
        exists_in_vault = stored_path.exists()

        if not exists_locally and not exists_in_vault:
            raise VaultFileNotFoundError(
                f"File not found in either location: {source_path} (vault: {stored_path})",
                source_path=str(source_path),
                vault_path=vault_path,
            )

        reference = source_path if exists_locally else stored_path
        file_type = FileType.DIRECTORY if reference.is_dir() else FileType.FILE

        entry = FileEntry(
            source_path=str(source_path),
            file_type=file_type,
            platform=platform,
        )
        self.manifest.add_file(vault_path, entry)
        self.vault.save_manifest()
        logger.info("Linked %s as %s", source_path, vault_path)

        return LinkResult(
            vault_path=vault_path,
            source_path=str(source_path),
            file_type=file_type,
            platform=platform.value if platform else None,
            exists_locally=exists_locally,
            exists_in_vault=exists_in_vault,
        )

    def unlink(self, vault_path: str, delete_stored_copy: bool = False) -> FileEntry:
        """
        Stop tracking vault_path and commit the removal.

        The source location is never touched.

        Raises:
            NotInManifestError: If vault_path is not tracked
            InvalidVaultPathError: If deleting a stored copy outside the repository
        """
        entry = self.manifest.get_file(vault_path)
        if entry is None:
            raise NotInManifestError(
                f"{vault_path} is not managed by this vault",
                hint="Run 'gfv list' to see managed files",
                vault_path=vault_path,
            )

        stored_path = self.vault.get_file_path(vault_path) if delete_stored_copy else None

        self.manifest.remove_file(vault_path)
        self.vault.save_manifest()

        if stored_path is not None:
            remove_entry(stored_path)

        self.store.add_all()
        self.store.commit(f"Remove {vault_path}")
        logger.info("Unlinked %s", vault_path)
        return entry

    # ------------------------------------------------------------------
    # Backup
    # ------------------------------------------------------------------

    def backup(self, message: str | None = None) -> BackupResult:
        """
        Copy sources into the store, commit, and sync with the remote.

        Raises:
            VaultIOError: If copying an entry fails
            ConflictError: If the remote has diverged (local commit is kept)
            BackendError: If pushing fails
        """
        result = BackupResult()

        for vault_path, entry in self.manifest.sorted_items():
            source_path = Path(entry.source_path)
            if not source_path.exists():
                logger.warning("Skipping %s: source not found at %s", vault_path, source_path)
                result.skipped.append(
                    SkippedEntry(
                        vault_path=vault_path,
                        reason=SkipReason.SOURCE_MISSING,
                        detail=str(source_path),
                    )
                )
                continue
            copy_entry(source_path, self.vault.get_file_path(vault_path))
            result.copied.append(vault_path)

        if self.store.has_changes():
            now = utc_now()
            for vault_path in result.copied:
                self.manifest.files[vault_path].last_sync = now
            self.vault.save_manifest()

            self.store.add_all()
            commit_message = message or self._generate_message()
            result.commit_sha = self.store.commit(commit_message)
            result.committed = True
            result.message = commit_message
        else:
            logger.info("No changes to commit")

        remote = self.manifest.remote
        if remote is not None:
            self._sync_remote(remote, result)

        return result

    def _generate_message(self) -> str:
        if self.provider is None:
            return DEFAULT_COMMIT_MESSAGE

        diff = self.store.diff()
        if not diff.strip():
            return DEFAULT_COMMIT_MESSAGE

        try:
            return asyncio.run(self.provider.generate(diff))
        except VaultError as e:
            logger.warning("AI commit message failed, using default: %s", e)
            return DEFAULT_COMMIT_MESSAGE

    def _branch_for(self, remote: RemoteConfig) -> str:
        try:
            return self.store.current_branch()
        except BackendError:
            return remote.branch

    def _sync_remote(self, remote: RemoteConfig, result: BackupResult) -> None:
        branch = self._branch_for(remote)
        result.branch = branch

        try:
            self.store.fetch(REMOTE_NAME, branch)
        except BackendError as e:
            # Empty or brand-new remotes have nothing to fetch
            logger.debug("Fetch before backup failed: %s", e)

        if self.store.remote_branch_exists(REMOTE_NAME, branch):
            try:
                result.pull_outcome = self.store.pull(REMOTE_NAME, branch)
            except BackendError as e:
                e.hint = (
                    "Your changes are committed locally but not pushed. "
                    f"Resolve manually in: {self.vault.repo_path}"
                )
                raise
        else:
            result.first_push = True
            logger.info("Remote branch %s/%s does not exist yet, skipping pull", REMOTE_NAME, branch)

        try:
            self.store.push(REMOTE_NAME, branch)
        except BackendError as e:
            e.hint = (
                "Your changes are committed locally but not pushed. "
                f"Repository: {self.vault.repo_path}"
            )
            raise
        result.pushed = True

    # ------------------------------------------------------------------
    # Restore
    # ------------------------------------------------------------------

    def restore(self, dry_run: bool = False, force: bool = False) -> RestoreResult:
        """
        Copy stored copies back to their source locations.

        With a remote (and not a dry run) the store is pulled first and the
        manifest reloaded. A dry run never writes anything.

        Raises:
            ConflictError: If the remote has diverged
            VaultIOError: If copying an entry fails
        """
        result = RestoreResult(dry_run=dry_run)

        remote = self.manifest.remote
        if remote is not None and not dry_run:
            branch = self._branch_for(remote)
            result.branch = branch
            try:
                result.pull_outcome = self.store.pull(REMOTE_NAME, branch)
            except BackendError as e:
                e.hint = f"Resolve manually in: {self.vault.repo_path}"
                raise
            self.vault.reload()

        if not force and not dry_run:
            result.local_changes = self._locally_modified_sources()
            if result.local_changes:
                if self.confirm is None or not self.confirm(result.local_changes):
                    logger.info("Restore cancelled")
                    result.cancelled = True
                    return result

        for vault_path, entry in self.manifest.sorted_items():
            stored_path = self.vault.get_file_path(vault_path)
            source_path = Path(entry.source_path)

            if not stored_path.exists():
                logger.warning("Skipping %s: not in vault", vault_path)
                result.skipped.append(
                    SkippedEntry(vault_path=vault_path, reason=SkipReason.NOT_IN_VAULT)
                )
                continue

            if not entry.applies_to(self.current_platform):
                platform = entry.platform.value if entry.platform else ""
                logger.warning("Skipping %s: platform %s", vault_path, platform)
                result.skipped.append(
                    SkippedEntry(
                        vault_path=vault_path,
                        reason=SkipReason.PLATFORM_MISMATCH,
                        detail=platform,
                    )
                )
                continue

            if not dry_run:
                copy_entry(stored_path, source_path)
            result.restored.append(vault_path)

        return result

    def _locally_modified_sources(self) -> list[str]:
        changed = []
        for vault_path, entry in self.manifest.sorted_items():
            source_path = Path(entry.source_path)
            stored_path = self.vault.get_file_path(vault_path)
            if source_path.exists() and stored_path.exists():
                if sizes_differ(source_path, stored_path):
                    changed.append(str(source_path))
        return changed

    # ------------------------------------------------------------------
    # Status
    # ------------------------------------------------------------------

    def status(self) -> StatusReport:
        """Repository dirtiness plus the state of every tracked entry."""
        remote = self.manifest.remote
        report = StatusReport(
            vault_dir=str(self.vault.vault_dir),
            remote_url=remote.url if remote else None,
            remote_branch=remote.branch if remote else None,
            has_uncommitted_changes=self.store.has_changes(),
        )

        for vault_path, entry in self.manifest.sorted_items():
            source_path = Path(entry.source_path)
            stored_path = self.vault.get_file_path(vault_path)

            if not source_path.exists():
                state = FileState.MISSING_SOURCE
            elif not stored_path.exists() or sizes_differ(source_path, stored_path):
                state = FileState.MODIFIED
            else:
                state = FileState.UP_TO_DATE

            report.entries.append(
                EntryStatus(vault_path=vault_path, source_path=entry.source_path, state=state)
            )

        return report
