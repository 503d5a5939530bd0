"""
Pytest configuration and shared fixtures.

Provides an isolated $GFV_HOME, a fake home directory, bare git remotes and
ready-to-use vaults and sync engines.
"""

import subprocess
from pathlib import Path

import pytest

from gfv.core.config import GfvConfig
from gfv.core.git import AuthMethod, VersionedStore
from gfv.core.manifest import Platform
from gfv.core.registry import VaultRegistry
from gfv.core.sync import SyncEngine
from gfv.core.vault import Vault

# ==============================================================================
# Environment Fixtures
# ==============================================================================


@pytest.fixture(autouse=True)
def isolated_env(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    """
    Keep tests away from the real ~/.gfv, user git config and AI settings.
    """
    for var in ("GFV_AI_ENDPOINT", "GFV_AI_API_KEY", "GFV_AI_MODEL", "GFV_DEFAULT_BRANCH"):
        monkeypatch.delenv(var, raising=False)

    monkeypatch.setenv("GFV_HOME", str(tmp_path / "gfv-home"))
    monkeypatch.setenv("GIT_CONFIG_GLOBAL", str(tmp_path / "gitconfig"))
    monkeypatch.setenv("GIT_CONFIG_NOSYSTEM", "1")
    monkeypatch.setenv("GIT_AUTHOR_NAME", "Test User")
    monkeypatch.setenv("GIT_AUTHOR_EMAIL", "test@example.com")
    monkeypatch.setenv("GIT_COMMITTER_NAME", "Test User")
    monkeypatch.setenv("GIT_COMMITTER_EMAIL", "test@example.com")

    # ./.env lookups resolve inside the test directory
    workdir = tmp_path / "cwd"
    workdir.mkdir()
    monkeypatch.chdir(workdir)


@pytest.fixture
def gfv_home(tmp_path: Path) -> Path:
    return tmp_path / "gfv-home"


@pytest.fixture
def home(tmp_path: Path) -> Path:
    """A fake home directory for source files."""
    path = tmp_path / "home"
    path.mkdir()
    return path


# ==============================================================================
# Git Fixtures
# ==============================================================================


def git(*args: str, cwd: Path) -> str:
    """Run a git command and return its stdout."""
    result = subprocess.run(
        ["git", *args],
        cwd=cwd,
        capture_output=True,
        text=True,
        check=True,
    )
    return result.stdout.strip()


@pytest.fixture
def local_auth() -> list[AuthMethod]:
    """A single always-available credential method for local remotes."""
    return [AuthMethod("local", lambda: True, lambda: {"GIT_TERMINAL_PROMPT": "0"})]


@pytest.fixture
def bare_remote(tmp_path: Path) -> Path:
    """An empty bare repository to use as a remote."""
    remote = tmp_path / "remote.git"
    subprocess.run(
        ["git", "init", "--bare", "--initial-branch=main", str(remote)],
        capture_output=True,
        check=True,
    )
    return remote


@pytest.fixture
def store(tmp_path: Path, local_auth: list[AuthMethod]) -> VersionedStore:
    """A fresh repository with no commits."""
    return VersionedStore.init(tmp_path / "store", local_auth)


# ==============================================================================
# Vault Fixtures
# ==============================================================================


@pytest.fixture
def registry(gfv_home: Path, local_auth: list[AuthMethod]) -> VaultRegistry:
    return VaultRegistry(GfvConfig(), auth_chain=local_auth)


@pytest.fixture
def vault(registry: VaultRegistry) -> Vault:
    """A local-only vault named 'default'."""
    registry.create("default")
    return registry.resolve("default")


@pytest.fixture
def make_engine(registry: VaultRegistry, home: Path):
    """Build a SyncEngine for a vault, on linux, with the fake home."""

    def _make(vault: Vault, **kwargs) -> SyncEngine:
        kwargs.setdefault("current_platform", Platform.LINUX)
        kwargs.setdefault("home", home)
        return SyncEngine(vault, registry.open_store(vault), **kwargs)

    return _make


@pytest.fixture
def engine(vault: Vault, make_engine) -> SyncEngine:
    return make_engine(vault)
