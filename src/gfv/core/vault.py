"""
A vault on disk: its directory, repository path and loaded manifest.
"""

from __future__ import annotations

from pathlib import Path, PurePosixPath, PureWindowsPath

from gfv.core.errors import InvalidVaultPathError, NotInitializedError
from gfv.core.manifest import MANIFEST_FILENAME, REPO_DIRNAME, Manifest, ManifestStore


def check_vault_path(vault_path: str) -> str:
    """
    Reject vault paths that would resolve outside the repository's tracked files.

    A vault path must be relative, must not climb with `..`, and must not
    name the git directory or the manifest itself.

    Raises:
        InvalidVaultPathError: If vault_path is not a safe relative path
    """
    posix = PurePosixPath(vault_path.replace("\\", "/"))
    parts = posix.parts

    if not vault_path.strip() or not parts:
        reason = "is empty"
    elif posix.is_absolute() or PureWindowsPath(vault_path).is_absolute():
        reason = "must be relative"
    elif ".." in parts:
        reason = "must not contain '..'"
    elif parts[0] == ".git":
        reason = "must not point into the git directory"
    elif posix.as_posix() == MANIFEST_FILENAME:
        reason = "is reserved for the manifest"
    else:
        return vault_path

    raise InvalidVaultPathError(
        f"Invalid vault path '{vault_path}': {reason}",
        hint="Use a relative name such as 'zsh/zshrc' (see: gfv link --name)",
        vault_path=vault_path,
    )


class Vault:
    """
    One loaded vault.

    Attributes:
        vault_dir: Directory registered for the vault
        repo_path: The git repository inside vault_dir
        manifest: Manifest as last loaded or saved
    """

    def __init__(self, vault_dir: Path, manifest: Manifest | None = None) -> None:
        self.vault_dir = vault_dir
        self.repo_path = vault_dir / REPO_DIRNAME
        self.manifest_store = ManifestStore(vault_dir)
        self.manifest = manifest if manifest is not None else Manifest()

    @staticmethod
    def is_initialized(vault_dir: Path) -> bool:
        return (vault_dir / REPO_DIRNAME / ".git").exists()

    @classmethod
    def load(cls, vault_dir: Path) -> Vault:
        """
        Load an initialized vault.

        Raises:
            NotInitializedError: If vault_dir has no repository
            ParseError: If the manifest is malformed
        """
        if not cls.is_initialized(vault_dir):
            raise NotInitializedError(
                f"Vault not initialized at {vault_dir}",
                hint="Run 'gfv init' or 'gfv vault create <name>'",
                path=str(vault_dir),
            )
        vault = cls(vault_dir)
        vault.reload()
        return vault

    def reload(self) -> None:
        """Re-read the manifest from disk."""
        self.manifest = self.manifest_store.load()

    def save_manifest(self) -> None:
        self.manifest_store.save(self.manifest)

    def get_file_path(self, vault_path: str) -> Path:
        """
        Location of the stored copy of vault_path.

        Raises:
            InvalidVaultPathError: If vault_path escapes the repository
        """
        return self.repo_path / check_vault_path(vault_path)
