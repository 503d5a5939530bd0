"""
Path helpers: home expansion, vault path inference and sensitive-file checks.
"""

from __future__ import annotations

import os
from pathlib import Path

SENSITIVE_MARKERS = (".env", "credential", "secret", "password")
SENSITIVE_SUFFIXES = (".key", ".pem")


def expand_home(path: str | Path, home: Path | None = None) -> Path:
    """
    Expand a leading `~` and make the path absolute.

    Relative paths are resolved against the current directory. Symlinks are
    not followed, so a linked dotfile keeps its own location.
    """
    raw = str(path)
    home = home or Path.home()
    if raw == "~":
        return home
    if raw.startswith("~/") or raw.startswith("~" + os.sep):
        return home / raw[2:]
    return Path(os.path.abspath(raw))


def infer_vault_path(source: Path, home: Path | None = None) -> str:
    """
    Pick a vault-relative path for source.

    Rules, first match wins:
        ~/.config/<rest>         -> <rest>
        ~/.<name>rc              -> <name>/<name>rc
        ~/.gitconfig             -> git/gitconfig
        ~/.ssh                   -> ssh/ssh
        ~/.<name>                -> <name>/<name>
        .../Code/User/settings.json -> vscode/settings.json
        ~/<rest>                 -> <rest>
        anything else            -> file name

    Example:
        >>> infer_vault_path(Path("/home/me/.zshrc"), Path("/home/me"))
        'zsh/zshrc'
    """
    home = home or Path.home()
    name = source.name

    config_dir = home / ".config"
    if source != config_dir and _is_under(source, config_dir):
        return source.relative_to(config_dir).as_posix()

    if source.parent == home and name.startswith("."):
        stripped = name[1:]
        if stripped.endswith("rc") and len(stripped) > 2:
            return f"{stripped[:-2]}/{stripped}"
        if stripped == "gitconfig":
            return "git/gitconfig"
        if stripped.startswith("ssh/") or name == ".ssh":
            return f"ssh/{stripped}"
        return f"{stripped}/{stripped}"

    if "Code/User/settings.json" in source.as_posix():
        return "vscode/settings.json"

    if source != home and _is_under(source, home):
        return source.relative_to(home).as_posix()

    return name


def is_sensitive_file(path: Path) -> bool:
    """Check if path looks like it holds secrets (case-insensitive)."""
    lowered = str(path).lower()
    if any(marker in lowered for marker in SENSITIVE_MARKERS):
        return True
    return lowered.endswith(SENSITIVE_SUFFIXES)


def _is_under(path: Path, parent: Path) -> bool:
    try:
        path.relative_to(parent)
    except ValueError:
        return False
    return True
