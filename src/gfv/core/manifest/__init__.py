"""
Manifest data model and persistence.

Example:
    >>> from gfv.core.manifest import ManifestStore
    >>> manifest = ManifestStore(vault_dir).load()
    >>> manifest.get_file("zsh/zshrc")
"""

from gfv.core.manifest.models import (
    MANIFEST_VERSION,
    FileEntry,
    FileType,
    Manifest,
    Platform,
    RemoteConfig,
)
from gfv.core.manifest.store import (
    MANIFEST_FILENAME,
    REPO_DIRNAME,
    ManifestStore,
    write_json_atomic,
)

__all__ = [
    "FileEntry",
    "FileType",
    "MANIFEST_FILENAME",
    "MANIFEST_VERSION",
    "Manifest",
    "ManifestStore",
    "Platform",
    "REPO_DIRNAME",
    "RemoteConfig",
    "write_json_atomic",
]
