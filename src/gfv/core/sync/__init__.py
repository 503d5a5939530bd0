"""
Synchronization between tracked source paths and the versioned store.

Example:
    >>> from gfv.core.sync import SyncEngine
    >>> engine = SyncEngine(vault, store)
    >>> report = engine.status()
    >>> report.modified
    ['zsh/zshrc']
"""

from gfv.core.sync.engine import DEFAULT_COMMIT_MESSAGE, ConfirmCallback, SyncEngine
from gfv.core.sync.fsops import copy_entry, entry_size, remove_entry, replace_directory
from gfv.core.sync.models import (
    BackupResult,
    EntryStatus,
    FileState,
    LinkResult,
    RestoreResult,
    SkippedEntry,
    SkipReason,
    StatusReport,
)
from gfv.core.sync.paths import expand_home, infer_vault_path, is_sensitive_file

__all__ = [
    # Engine
    "ConfirmCallback",
    "DEFAULT_COMMIT_MESSAGE",
    "SyncEngine",
    # Models
    "BackupResult",
    "EntryStatus",
    "FileState",
    "LinkResult",
    "RestoreResult",
    "SkipReason",
    "SkippedEntry",
    "StatusReport",
    # Paths
    "expand_home",
    "infer_vault_path",
    "is_sensitive_file",
    # Filesystem
    "copy_entry",
    "entry_size",
    "remove_entry",
    "replace_directory",
]
