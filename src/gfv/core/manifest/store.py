"""
Manifest persistence for reading/writing `.vault-manifest.json`.

The manifest lives inside the vault repository (`<vault>/repo/`) so it is
committed with the files it describes and travels with clones.
"""

from __future__ import annotations

import json
import logging
import os
import tempfile
from pathlib import Path

from pydantic import ValidationError

from gfv.core.errors import ParseError, VaultIOError
from gfv.core.manifest.models import Manifest

logger = logging.getLogger(__name__)

REPO_DIRNAME = "repo"
MANIFEST_FILENAME = ".vault-manifest.json"


class ManifestStore:
    """
    Store for the manifest of one vault.

    Example:
        >>> store = ManifestStore(Path("~/.gfv/default").expanduser())
        >>> manifest = store.load()
        >>> manifest.add_file("zsh/zshrc", entry)
        >>> store.save(manifest)
    """

    def __init__(self, vault_dir: Path) -> None:
        self.vault_dir = vault_dir
        self._file_path = vault_dir / REPO_DIRNAME / MANIFEST_FILENAME

    @property
    def file_path(self) -> Path:
        """Get the path to the manifest file."""
        return self._file_path

    def exists(self) -> bool:
        return self._file_path.exists()

    def load(self) -> Manifest:
        """
        Read the manifest file.

        Returns:
            The parsed manifest, or a fresh empty manifest (no remote) when
            the file does not exist yet.

        Raises:
            ParseError: If the file exists but is not a valid manifest.
        """
        if not self._file_path.exists():
            logger.debug("No manifest at %s, starting empty", self._file_path)
            return Manifest()

        try:
            data = json.loads(self._file_path.read_text(encoding="utf-8"))
            return Manifest.model_validate(data)
        except json.JSONDecodeError as e:
            raise ParseError(
                f"Failed to parse manifest {self._file_path}: {e}",
                path=str(self._file_path),
            ) from e
        except ValidationError as e:
            raise ParseError(
                f"Invalid manifest format in {self._file_path}",
                path=str(self._file_path),
                errors=e.error_count(),
            ) from e

    def save(self, manifest: Manifest) -> None:
        """
        Write the manifest atomically.

        Raises:
            VaultIOError: If the file cannot be written.
        """
        data = manifest.model_dump(by_alias=True, exclude_none=True, mode="json")
        write_json_atomic(self._file_path, data)
        logger.debug("Saved manifest with %d entries", len(manifest.files))


def write_json_atomic(path: Path, data: object) -> None:
    """
    Write JSON to path via a temp file in the same directory and os.replace.

    Raises:
        VaultIOError: If the directory or file cannot be written.
    """
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        fd, temp_path = tempfile.mkstemp(
            dir=path.parent,
            prefix=f".{path.stem.lstrip('.')}_",
            suffix=".json.tmp",
        )
    except OSError as e:
        raise VaultIOError(f"Cannot write {path}: {e}", path=str(path)) from e

    try:
        with os.fdopen(fd, "w", encoding="utf-8") as f:
            json.dump(data, f, indent=2, ensure_ascii=False)
            f.write("\n")
        os.replace(temp_path, path)
    except OSError as e:
        try:
            os.unlink(temp_path)
        except OSError:
            pass
        raise VaultIOError(f"Cannot write {path}: {e}", path=str(path)) from e
