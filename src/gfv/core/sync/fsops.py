"""
Copying tracked entries between their source location and the vault.

Every OSError is re-raised as VaultIOError naming the path involved. Nothing
is rolled back: a failure part-way through a backup or restore leaves the
entries copied so far in place.
"""

from __future__ import annotations

import logging
import os
import shutil
import tempfile
from pathlib import Path

from gfv.core.errors import VaultIOError

logger = logging.getLogger(__name__)


def copy_entry(src: Path, dst: Path) -> None:
    """
    Copy a file or directory from src to dst, replacing what dst holds.

    Raises:
        VaultIOError: If reading src or writing dst fails
    """
    if src.is_dir():
        replace_directory(src, dst)
    else:
        copy_file(src, dst)


def copy_file(src: Path, dst: Path) -> None:
    try:
        dst.parent.mkdir(parents=True, exist_ok=True)
        if dst.is_dir() and not dst.is_symlink():
            shutil.rmtree(dst)
        shutil.copy2(src, dst)
    except OSError as e:
        raise VaultIOError(f"Failed to copy {src} to {dst}: {e}", path=str(src)) from e
    logger.debug("Copied file %s -> %s", src, dst)


def replace_directory(src: Path, dst: Path) -> None:
    """
    Replace dst with a copy of the directory src.

    The copy is staged in a sibling temp directory and renamed into place, so
    dst is never left holding a half-copied tree.
    """
    try:
        dst.parent.mkdir(parents=True, exist_ok=True)
        staging = Path(tempfile.mkdtemp(prefix=f".{dst.name}.", suffix=".gfv-new", dir=dst.parent))
    except OSError as e:
        raise VaultIOError(f"Failed to prepare {dst}: {e}", path=str(dst)) from e

    try:
        shutil.copytree(src, staging, symlinks=True, dirs_exist_ok=True)
    except OSError as e:
        shutil.rmtree(staging, ignore_errors=True)
        raise VaultIOError(f"Failed to copy {src} to {dst}: {e}", path=str(src)) from e

    try:
        if dst.is_symlink() or dst.is_file():
            dst.unlink()
        elif dst.exists():
            old = dst.with_name(f".{dst.name}.gfv-old")
            if old.exists():
                shutil.rmtree(old)
            os.replace(dst, old)
            os.replace(staging, dst)
            shutil.rmtree(old)
            logger.debug("Replaced directory %s", dst)
            return
        os.replace(staging, dst)
    except OSError as e:
        shutil.rmtree(staging, ignore_errors=True)
        raise VaultIOError(f"Failed to replace {dst}: {e}", path=str(dst)) from e
    logger.debug("Copied directory %s -> %s", src, dst)


def remove_entry(path: Path) -> None:
    """Delete a stored file or directory if present."""
    try:
        if path.is_dir() and not path.is_symlink():
            shutil.rmtree(path)
        elif path.exists() or path.is_symlink():
            path.unlink()
    except OSError as e:
        raise VaultIOError(f"Failed to delete {path}: {e}", path=str(path)) from e


def entry_size(path: Path) -> int:
    """
    Size used by the modification heuristic.

    Files report their byte size, directories the total size of the files
    they contain.
    """
    if not path.is_dir():
        return path.stat().st_size
    total = 0
    for child in path.rglob("*"):
        if child.is_file() and not child.is_symlink():
            total += child.stat().st_size
    return total


def sizes_differ(a: Path, b: Path) -> bool:
    """Whether two existing paths differ by the size heuristic."""
    try:
        return entry_size(a) != entry_size(b)
    except OSError as e:
        raise VaultIOError(f"Failed to inspect {a}: {e}", path=str(a)) from e
