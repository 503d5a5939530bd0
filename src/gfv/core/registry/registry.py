"""
Vault registry: named vault directories with one active vault.

The registry works on an explicit GfvConfig and persists it through the
config loader after every mutation.

Example:
    >>> registry = VaultRegistry(load_config())
    >>> registry.create("work", remote_url="git@github.com:me/dotfiles-work.git")
    >>> registry.switch("work")
    >>> vault = registry.resolve()
"""

from __future__ import annotations

import logging
import shutil
from collections.abc import Callable
from pathlib import Path

from gfv.core.config import GfvConfig, default_vault_dir, save_config
from gfv.core.errors import (
    ActiveVaultError,
    AlreadyExistsError,
    BackendError,
    NotInitializedError,
    UnknownVaultError,
    VaultIOError,
)
from gfv.core.git import REMOTE_NAME, AuthMethod, VersionedStore
from gfv.core.manifest import REPO_DIRNAME, Manifest, ManifestStore, RemoteConfig
from gfv.core.sync.paths import expand_home
from gfv.core.vault import Vault

from .models import CreateResult, VaultInfo, VaultSummary

logger = logging.getLogger(__name__)

INITIAL_COMMIT_MESSAGE = "Initialize vault"
GITIGNORE_CONTENT = "# Git-file-vault managed repository\n"


class VaultRegistry:
    """
    Named vaults and the active selection.

    Args:
        config: Global configuration holding the vault map
        save: Persists the configuration after a change
        auth_chain: Credential methods for clone and push
    """

    def __init__(
        self,
        config: GfvConfig,
        save: Callable[[GfvConfig], object] = save_config,
        auth_chain: list[AuthMethod] | None = None,
    ) -> None:
        self.config = config
        self._save = save
        self.auth_chain = auth_chain

    @property
    def active(self) -> str | None:
        return self.config.active

    # ------------------------------------------------------------------
    # Lookup
    # ------------------------------------------------------------------

    def resolve_name(self, name: str | None = None) -> str:
        """
        Name of the vault a command should act on.

        Raises:
            NotInitializedError: If no name is given and none is active
            UnknownVaultError: If the name is not registered
        """
        vault_name = name or self.active
        if vault_name is None:
            raise NotInitializedError(
                "No active vault",
                hint="Run 'gfv init' to create one",
            )
        if vault_name not in self.config.vaults:
            raise UnknownVaultError(
                f"Vault '{vault_name}' not found",
                hint="List available vaults with: gfv vault list",
                name=vault_name,
            )
        return vault_name

    def vault_dir(self, name: str | None = None) -> Path:
        vault_name = self.resolve_name(name)
        return Path(self.config.vaults[vault_name])

    def resolve(self, name: str | None = None) -> Vault:
        """
        Load a vault by name (the active vault by default).

        Raises:
            NotInitializedError: If the vault directory has no repository
            UnknownVaultError: If the name is not registered
        """
        return Vault.load(self.vault_dir(name))

    def open_store(self, vault: Vault) -> VersionedStore:
        return VersionedStore.open(vault.repo_path, self.auth_chain)

    def list_vaults(self) -> list[VaultSummary]:
        """Registered vaults sorted by name."""
        return [
            VaultSummary(
                name=name,
                path=path,
                active=name == self.active,
                initialized=Vault.is_initialized(Path(path)),
            )
            for name, path in sorted(self.config.vaults.items())
        ]

    def info(self, name: str | None = None) -> VaultInfo:
        vault_name = self.resolve_name(name)
        vault_dir = Path(self.config.vaults[vault_name])
        info = VaultInfo(
            name=vault_name,
            path=str(vault_dir),
            active=vault_name == self.active,
            initialized=Vault.is_initialized(vault_dir),
        )
        if not info.initialized:
            return info

        vault = Vault.load(vault_dir)
        info.file_count = len(vault.manifest.files)
        if vault.manifest.remote is not None:
            info.remote_url = vault.manifest.remote.url
            info.branch = vault.manifest.remote.branch
        else:
            try:
                info.branch = self.open_store(vault).current_branch()
            except BackendError:
                info.branch = None
        return info

    # ------------------------------------------------------------------
    # Mutations
    # ------------------------------------------------------------------

    def create(
        self,
        name: str,
        path: str | Path | None = None,
        remote_url: str | None = None,
        branch: str | None = None,
    ) -> CreateResult:
        """
        Create and register a vault.

        With a remote that already has history, the remote is cloned and its
        branch reused. Otherwise a fresh repository is initialized with the
        manifest and a .gitignore, committed, and pushed if a remote is given.

        Branch priority: explicit branch > cloned remote's branch >
        sync.default_branch.

        Raises:
            AlreadyExistsError: If the name is taken or the directory already
                holds a vault
        """
        if name in self.config.vaults:
            raise AlreadyExistsError(
                f"Vault '{name}' already exists at: {self.config.vaults[name]}",
                name=name,
            )

        vault_dir = expand_home(path) if path is not None else default_vault_dir(name)
        if Vault.is_initialized(vault_dir):
            raise AlreadyExistsError(
                f"Vault already initialized at {vault_dir}",
                path=str(vault_dir),
            )

        repo_path = vault_dir / REPO_DIRNAME
        try:
            repo_path.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise VaultIOError(f"Failed to create {repo_path}: {e}", path=str(repo_path)) from e

        result: CreateResult | None = None
        if remote_url:
            result = self._try_clone(name, vault_dir, remote_url, branch)
        if result is None:
            result = self._init_fresh(name, vault_dir, remote_url, branch)

        self.config.vaults[name] = str(vault_dir)
        if len(self.config.vaults) == 1 or self.active not in self.config.vaults:
            self.config.current.active = name
        result.active = self.active == name
        self._save(self.config)

        logger.info("Created vault %s at %s", name, vault_dir)
        return result

    def _try_clone(
        self,
        name: str,
        vault_dir: Path,
        remote_url: str,
        branch: str | None,
    ) -> CreateResult | None:
        repo_path = vault_dir / REPO_DIRNAME
        try:
            store = VersionedStore.clone(remote_url, repo_path, self.auth_chain)
        except BackendError as e:
            logger.info("Could not clone %s, creating a fresh vault: %s", remote_url, e)
            return None

        current = store.current_branch()
        chosen = branch or current
        if chosen != current:
            store.checkout_branch(chosen, REMOTE_NAME)

        vault = Vault.load(vault_dir)
        remote = vault.manifest.remote
        if remote is None or remote.url != remote_url or remote.branch != chosen:
            vault.manifest.remote = RemoteConfig(url=remote_url, branch=chosen)
            vault.save_manifest()

        return CreateResult(
            name=name,
            vault_dir=str(vault_dir),
            branch=chosen,
            remote_url=remote_url,
            cloned=True,
            file_count=len(vault.manifest.files),
        )

    def _init_fresh(
        self,
        name: str,
        vault_dir: Path,
        remote_url: str | None,
        branch: str | None,
    ) -> CreateResult:
        repo_path = vault_dir / REPO_DIRNAME
        chosen = branch or self.config.sync.default_branch

        store = VersionedStore.init(repo_path, self.auth_chain)
        remote = RemoteConfig(url=remote_url, branch=chosen) if remote_url else None
        ManifestStore(vault_dir).save(Manifest(remote=remote))
        try:
            (repo_path / ".gitignore").write_text(GITIGNORE_CONTENT, encoding="utf-8")
        except OSError as e:
            raise VaultIOError(f"Failed to write .gitignore: {e}", path=str(repo_path)) from e

        store.add_all()
        store.commit(INITIAL_COMMIT_MESSAGE)
        store.set_branch(chosen)

        result = CreateResult(
            name=name,
            vault_dir=str(vault_dir),
            branch=chosen,
            remote_url=remote_url,
        )
        if remote_url:
            store.add_remote(REMOTE_NAME, remote_url)
            try:
                store.push(REMOTE_NAME, chosen)
                result.pushed = True
            except BackendError as e:
                logger.warning("Initial push to %s failed: %s", remote_url, e)
                result.push_error = str(e)
        return result

    def switch(self, name: str) -> None:
        """
        Make name the active vault.

        Raises:
            UnknownVaultError: If the name is not registered
        """
        self.resolve_name(name)
        self.config.current.active = name
        self._save(self.config)

    def remove(self, name: str, delete_directory: bool = False) -> Path:
        """
        Unregister a vault, optionally deleting its directory.

        Returns:
            The vault directory

        Raises:
            UnknownVaultError: If the name is not registered
            ActiveVaultError: If name is the active vault
        """
        self.resolve_name(name)
        if name == self.active:
            raise ActiveVaultError(
                f"Cannot remove the currently active vault '{name}'",
                hint="Switch to another vault first: gfv vault switch <name>",
                name=name,
            )

        vault_dir = Path(self.config.vaults.pop(name))
        self._save(self.config)

        if delete_directory and vault_dir.exists():
            try:
                shutil.rmtree(vault_dir)
            except OSError as e:
                raise VaultIOError(
                    f"Failed to delete vault directory {vault_dir}: {e}",
                    path=str(vault_dir),
                ) from e
        return vault_dir

    # ------------------------------------------------------------------
    # Remote and branch
    # ------------------------------------------------------------------

    def get_remote(self, name: str | None = None) -> RemoteConfig | None:
        return self.resolve(name).manifest.remote

    def set_remote(
        self,
        url: str,
        name: str | None = None,
        branch: str | None = None,
    ) -> RemoteConfig:
        """Record url as the vault's remote and point `origin` at it."""
        vault = self.resolve(name)
        store = self.open_store(vault)

        if branch is None:
            if vault.manifest.remote is not None:
                branch = vault.manifest.remote.branch
            else:
                try:
                    branch = store.current_branch()
                except BackendError:
                    branch = self.config.sync.default_branch

        remote = RemoteConfig(url=url, branch=branch)
        vault.manifest.remote = remote
        vault.save_manifest()
        store.set_remote(REMOTE_NAME, url)
        return remote

    def clear_remote(self, name: str | None = None) -> bool:
        """
        Switch a vault to local-only mode.

        Returns:
            False if the vault had no remote
        """
        vault = self.resolve(name)
        if vault.manifest.remote is None:
            return False
        vault.manifest.remote = None
        vault.save_manifest()
        self.open_store(vault).remove_remote(REMOTE_NAME)
        return True

    def set_branch(self, branch: str, name: str | None = None) -> None:
        """Rename the vault's current branch and record it in the manifest."""
        vault = self.resolve(name)
        self.open_store(vault).set_branch(branch)
        if vault.manifest.remote is not None:
            vault.manifest.remote.branch = branch
            vault.save_manifest()
