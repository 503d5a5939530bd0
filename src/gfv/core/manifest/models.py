"""
Manifest data models.

The manifest is the registry of vault-relative path -> FileEntry mappings
for one vault, stored as `.vault-manifest.json` inside the vault repository.
Keys are serialized in camelCase and optional fields are omitted rather
than written as null.
"""

from __future__ import annotations

import sys
from datetime import datetime, timezone
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field

MANIFEST_VERSION = "1.0"


class FileType(str, Enum):
    """Kind of filesystem object a FileEntry tracks."""

    FILE = "file"
    DIRECTORY = "directory"


class Platform(str, Enum):
    """Operating systems a FileEntry can be restricted to."""

    MACOS = "macos"
    LINUX = "linux"
    WINDOWS = "windows"

    @classmethod
    def current(cls) -> Platform | None:
        """Platform of the running interpreter, or None if unrecognized."""
        if sys.platform == "darwin":
            return cls.MACOS
        if sys.platform.startswith("linux"):
            return cls.LINUX
        if sys.platform in ("win32", "cygwin"):
            return cls.WINDOWS
        return None


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


class FileEntry(BaseModel):
    """
    Metadata for one tracked path.

    Example:
        >>> entry = FileEntry(source_path="/home/me/.zshrc", file_type=FileType.FILE)
        >>> entry.model_dump(by_alias=True, exclude_none=True, mode="json")["type"]
        'file'
    """

    model_config = ConfigDict(populate_by_name=True)

    source_path: str = Field(alias="sourcePath", description="Absolute source location")
    file_type: FileType = Field(alias="type", description="file or directory")
    platform: Platform | None = Field(
        default=None,
        description="Only restore on this operating system",
    )
    added_at: datetime = Field(
        default_factory=utc_now,
        alias="addedAt",
        description="When the entry was linked",
    )
    last_sync: datetime | None = Field(
        default=None,
        alias="lastSync",
        description="When the entry was last committed by a backup",
    )

    @property
    def is_directory(self) -> bool:
        return self.file_type == FileType.DIRECTORY

    def applies_to(self, platform: Platform | None) -> bool:
        """Whether the entry should be restored on the given platform."""
        return self.platform is None or self.platform == platform


class RemoteConfig(BaseModel):
    """Remote repository the vault syncs with."""

    url: str
    branch: str = "main"


class Manifest(BaseModel):
    """
    Tracked path mappings for one vault.

    The manifest never asserts that either copy of a file exists on disk;
    it only records the mapping.
    """

    model_config = ConfigDict(populate_by_name=True)

    version: str = MANIFEST_VERSION
    files: dict[str, FileEntry] = Field(default_factory=dict)
    remote: RemoteConfig | None = None

    def add_file(self, vault_path: str, entry: FileEntry) -> None:
        self.files[vault_path] = entry

    def remove_file(self, vault_path: str) -> FileEntry | None:
        return self.files.pop(vault_path, None)

    def get_file(self, vault_path: str) -> FileEntry | None:
        return self.files.get(vault_path)

    def sorted_items(self) -> list[tuple[str, FileEntry]]:
        """Entries ordered by vault path, for stable iteration."""
        return sorted(self.files.items())
