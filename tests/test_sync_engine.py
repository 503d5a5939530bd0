"""
Tests for SyncEngine.

Tests cover:
- link / unlink bookkeeping
- backup (idempotence, skipped sources, commit messages, remote sync)
- restore (dry run, platform filtering, overwrite confirmation, pulling)
- status classification
"""

from __future__ import annotations

import subprocess
from pathlib import Path
from unittest.mock import AsyncMock, MagicMock

import pytest

from gfv.core.ai import CommitMessageError, CommitMessageProvider
from gfv.core.errors import (
    AlreadyManagedError,
    ConflictError,
    InvalidVaultPathError,
    NotInManifestError,
    VaultFileNotFoundError,
)
from gfv.core.git import PullOutcome
from gfv.core.manifest import FileEntry, FileType, Platform
from gfv.core.sync import DEFAULT_COMMIT_MESSAGE, FileState, SkipReason, SyncEngine


def git(*args: str, cwd: Path) -> str:
    result = subprocess.run(
        ["git", *args], cwd=cwd, capture_output=True, text=True, check=True
    )
    return result.stdout.strip()


def commit_count(engine: SyncEngine) -> int:
    return int(git("rev-list", "--count", "HEAD", cwd=engine.vault.repo_path))


def last_message(engine: SyncEngine) -> str:
    return git("log", "-1", "--format=%s", cwd=engine.vault.repo_path)


@pytest.fixture
def zshrc(home: Path) -> Path:
    path = home / ".zshrc"
    path.write_text("export EDITOR=vim\n")
    return path


@pytest.fixture
def nvim_dir(home: Path) -> Path:
    path = home / ".config" / "nvim"
    (path / "lua").mkdir(parents=True)
    (path / "init.lua").write_text("require('plugins')\n")
    (path / "lua" / "plugins.lua").write_text("return {}\n")
    return path


class FakeProvider:
    """Stands in for CommitMessageProvider."""

    def __init__(self, message: str) -> None:
        self.message = message
        self.diffs: list[str] = []

    async def generate(self, diff: str) -> str:
        self.diffs.append(diff)
        return self.message


# ==============================================================================
# Link / Unlink
# ==============================================================================


class TestLink:
    def test_link_infers_vault_path(self, engine: SyncEngine, zshrc: Path) -> None:
        result = engine.link("~/.zshrc")

        assert result.vault_path == "zsh/zshrc"
        assert result.source_path == str(zshrc)
        assert result.file_type == FileType.FILE
        assert result.exists_locally
        assert not result.exists_in_vault

    def test_link_persists_manifest(self, engine: SyncEngine, zshrc: Path) -> None:
        engine.link(zshrc)

        engine.vault.reload()
        entry = engine.manifest.get_file("zsh/zshrc")
        assert entry is not None
        assert entry.source_path == str(zshrc)
        assert entry.last_sync is None

    def test_link_does_not_copy(self, engine: SyncEngine, zshrc: Path) -> None:
        engine.link(zshrc)
        assert not engine.vault.get_file_path("zsh/zshrc").exists()

    def test_link_directory(self, engine: SyncEngine, nvim_dir: Path) -> None:
        result = engine.link(nvim_dir)

        assert result.vault_path == "nvim"
        assert result.file_type == FileType.DIRECTORY

    def test_link_with_explicit_name_and_platform(self, engine: SyncEngine, zshrc: Path) -> None:
        result = engine.link(zshrc, vault_path="shell/zsh", platform=Platform.MACOS)

        assert result.vault_path == "shell/zsh"
        assert result.platform == "macos"
        assert engine.manifest.get_file("shell/zsh").platform == Platform.MACOS

    def test_link_already_managed(self, engine: SyncEngine, zshrc: Path) -> None:
        engine.link(zshrc)

        with pytest.raises(AlreadyManagedError):
            engine.link(zshrc)

    def test_link_missing_everywhere(self, engine: SyncEngine, home: Path) -> None:
        with pytest.raises(VaultFileNotFoundError):
            engine.link(home / ".nothingrc")

        assert engine.manifest.files == {}

    def test_link_existing_only_in_vault(self, engine: SyncEngine, home: Path) -> None:
        stored = engine.vault.get_file_path("tmux/tmux")
        stored.mkdir(parents=True)
        (stored / "tmux.conf").write_text("set -g mouse on\n")

        result = engine.link(home / ".tmux")

        assert not result.exists_locally
        assert result.exists_in_vault
        assert result.file_type == FileType.DIRECTORY

    @pytest.mark.parametrize(
        "vault_path",
        [
            "/etc/zshrc",
            "../escaped",
            "zsh/../../escaped",
            ".git",
            ".git/hooks/pre-commit",
            ".vault-manifest.json",
        ],
    )
    def test_link_rejects_unsafe_vault_path(
        self, engine: SyncEngine, zshrc: Path, vault_path: str
    ) -> None:
        with pytest.raises(InvalidVaultPathError):
            engine.link(zshrc, vault_path=vault_path)

        assert engine.manifest.files == {}

    def test_link_rejects_source_as_vault_path(self, engine: SyncEngine, zshrc: Path) -> None:
        with pytest.raises(InvalidVaultPathError):
            engine.link(zshrc, vault_path=str(zshrc))

        engine.vault.reload()
        assert engine.manifest.files == {}
        assert zshrc.exists()


class TestUnlink:
    def test_unlink_removes_entry_and_commits(self, engine: SyncEngine, zshrc: Path) -> None:
        engine.link(zshrc)
        engine.backup()

        engine.unlink("zsh/zshrc")

        assert engine.manifest.get_file("zsh/zshrc") is None
        assert last_message(engine) == "Remove zsh/zshrc"
        assert not engine.store.has_changes()
        assert engine.vault.get_file_path("zsh/zshrc").exists()
        assert zshrc.exists()

    def test_unlink_with_delete(self, engine: SyncEngine, zshrc: Path) -> None:
        engine.link(zshrc)
        engine.backup()

        engine.unlink("zsh/zshrc", delete_stored_copy=True)

        assert not engine.vault.get_file_path("zsh/zshrc").exists()
        assert "zsh/zshrc" not in git("ls-files", cwd=engine.vault.repo_path)
        assert zshrc.exists()

    def test_unlink_unknown(self, engine: SyncEngine) -> None:
        with pytest.raises(NotInManifestError):
            engine.unlink("nope")

    def test_unlink_never_deletes_outside_repository(
        self, engine: SyncEngine, zshrc: Path
    ) -> None:
        engine.manifest.add_file(
            str(zshrc), FileEntry(source_path=str(zshrc), file_type=FileType.FILE)
        )

        with pytest.raises(InvalidVaultPathError):
            engine.unlink(str(zshrc), delete_stored_copy=True)

        assert zshrc.exists()
        assert engine.manifest.get_file(str(zshrc)) is not None


# ==============================================================================
# Backup
# ==============================================================================


class TestBackup:
    def test_backup_copies_and_commits(
        self, engine: SyncEngine, zshrc: Path, nvim_dir: Path
    ) -> None:
        engine.link(zshrc)
        engine.link(nvim_dir)

        result = engine.backup()

        assert result.copied == ["nvim", "zsh/zshrc"]
        assert result.committed
        assert result.message == DEFAULT_COMMIT_MESSAGE
        assert engine.vault.get_file_path("zsh/zshrc").read_text() == zshrc.read_text()
        assert (engine.vault.get_file_path("nvim") / "lua" / "plugins.lua").exists()
        assert not engine.store.has_changes()

    def test_backup_stamps_last_sync(self, engine: SyncEngine, zshrc: Path) -> None:
        engine.link(zshrc)
        engine.backup()

        engine.vault.reload()
        assert engine.manifest.get_file("zsh/zshrc").last_sync is not None

    def test_backup_is_idempotent(self, engine: SyncEngine, zshrc: Path) -> None:
        engine.link(zshrc)
        engine.backup()
        before = commit_count(engine)

        result = engine.backup()

        assert not result.committed
        assert result.commit_sha is None
        assert commit_count(engine) == before

    def test_backup_custom_message(self, engine: SyncEngine, zshrc: Path) -> None:
        engine.link(zshrc)
        engine.backup(message="Tweak zsh")
        assert last_message(engine) == "Tweak zsh"

    def test_backup_skips_missing_source(self, engine: SyncEngine, zshrc: Path) -> None:
        engine.link(zshrc)
        engine.backup()
        zshrc.unlink()

        result = engine.backup()

        assert result.copied == []
        assert [s.vault_path for s in result.skipped] == ["zsh/zshrc"]
        assert result.skipped[0].reason == SkipReason.SOURCE_MISSING
        assert engine.vault.get_file_path("zsh/zshrc").exists()

    def test_backup_without_remote_does_not_push(self, engine: SyncEngine, zshrc: Path) -> None:
        engine.link(zshrc)
        result = engine.backup()

        assert not result.pushed
        assert result.pull_outcome is None


class TestCommitMessages:
    def test_provider_message_used(self, vault, make_engine, zshrc: Path) -> None:
        provider = FakeProvider(message="Add zsh config")
        engine = make_engine(vault, provider=provider)
        engine.link(zshrc)

        result = engine.backup()

        assert result.message == "Add zsh config"
        assert last_message(engine) == "Add zsh config"
        assert "zsh/zshrc" in provider.diffs[0]

    def test_provider_failure_falls_back(self, vault, make_engine, zshrc: Path) -> None:
        provider = MagicMock()
        provider.generate = AsyncMock(side_effect=CommitMessageError("API error 500"))
        engine = make_engine(vault, provider=provider)
        engine.link(zshrc)

        result = engine.backup()

        assert result.committed
        assert result.message == DEFAULT_COMMIT_MESSAGE

    def test_explicit_message_skips_provider(self, vault, make_engine, zshrc: Path) -> None:
        provider = FakeProvider(message="generated")
        engine = make_engine(vault, provider=provider)
        engine.link(zshrc)

        engine.backup(message="mine")

        assert provider.diffs == []
        assert last_message(engine) == "mine"

    def test_invalid_endpoint_falls_back(self, vault, make_engine, zshrc: Path) -> None:
        provider = CommitMessageProvider("http://[::1", "key", "model")
        engine = make_engine(vault, provider=provider)
        engine.link(zshrc)

        result = engine.backup()

        assert result.committed
        assert result.message == DEFAULT_COMMIT_MESSAGE
        assert last_message(engine) == DEFAULT_COMMIT_MESSAGE


class TestBackupWithRemote:
    def test_first_push_to_new_remote(
        self, registry, make_engine, bare_remote: Path, zshrc: Path
    ) -> None:
        registry.create("default")
        registry.set_remote(str(bare_remote))
        engine = make_engine(registry.resolve())
        engine.link(zshrc)

        result = engine.backup()

        assert result.first_push
        assert result.pushed
        assert result.branch == "main"
        assert git("rev-parse", "refs/heads/main", cwd=bare_remote) == engine.store.head_sha()

    def test_backup_pulls_then_pushes(
        self, registry, make_engine, bare_remote: Path, zshrc: Path
    ) -> None:
        registry.create("default", remote_url=str(bare_remote))
        engine = make_engine(registry.resolve())
        engine.link(zshrc)

        result = engine.backup()

        assert not result.first_push
        assert result.pull_outcome == PullOutcome.UP_TO_DATE
        assert result.pushed
        assert git("rev-parse", "refs/heads/main", cwd=bare_remote) == engine.store.head_sha()

    def test_diverged_remote_keeps_local_commit(
        self, registry, make_engine, bare_remote: Path, zshrc: Path, tmp_path: Path
    ) -> None:
        registry.create("laptop", remote_url=str(bare_remote))
        laptop = make_engine(registry.resolve("laptop"))
        laptop.link(zshrc)
        laptop.backup()

        registry.create("desktop", path=tmp_path / "desktop", remote_url=str(bare_remote))
        desktop = make_engine(registry.resolve("desktop"))

        zshrc.write_text("export EDITOR=nvim\n")
        laptop.backup(message="From laptop")

        desktop.vault.get_file_path("zsh/zshrc").write_text("export EDITOR=emacs\n")
        desktop.store.add_all()
        local_head = desktop.store.commit("From desktop")

        with pytest.raises(ConflictError) as exc_info:
            desktop.backup()

        assert str(desktop.vault.repo_path) in exc_info.value.hint
        head = desktop.store.head_sha()
        assert desktop.store.repo.is_ancestor(local_head, head)
        assert git("rev-parse", "refs/heads/main", cwd=bare_remote) != head


# ==============================================================================
# Restore
# ==============================================================================


class TestRestore:
    def test_restore_recreates_missing_source(self, engine: SyncEngine, zshrc: Path) -> None:
        engine.link(zshrc)
        engine.backup()
        zshrc.unlink()

        result = engine.restore()

        assert result.restored == ["zsh/zshrc"]
        assert zshrc.read_text() == "export EDITOR=vim\n"

    def test_restore_directory(self, engine: SyncEngine, nvim_dir: Path) -> None:
        engine.link(nvim_dir)
        engine.backup()
        (nvim_dir / "extra.lua").write_text("-- local only\n")

        engine.restore(force=True)

        assert not (nvim_dir / "extra.lua").exists()
        assert (nvim_dir / "lua" / "plugins.lua").exists()

    def test_dry_run_writes_nothing(self, engine: SyncEngine, zshrc: Path) -> None:
        engine.link(zshrc)
        engine.backup()
        zshrc.unlink()

        result = engine.restore(dry_run=True)

        assert result.dry_run
        assert result.restored == ["zsh/zshrc"]
        assert not zshrc.exists()

    def test_skips_entries_not_in_vault(self, engine: SyncEngine, zshrc: Path) -> None:
        engine.link(zshrc)

        result = engine.restore(force=True)

        assert result.restored == []
        assert result.skipped[0].reason == SkipReason.NOT_IN_VAULT

    def test_skips_other_platforms(self, vault, make_engine, zshrc: Path, home: Path) -> None:
        engine = make_engine(vault)
        engine.link(zshrc)
        ps_profile = home / "profile.ps1"
        ps_profile.write_text("Set-PSReadLineOption\n")
        engine.link(ps_profile, vault_path="powershell/profile.ps1", platform=Platform.WINDOWS)
        engine.backup()
        zshrc.unlink()
        ps_profile.unlink()

        result = engine.restore()

        assert result.restored == ["zsh/zshrc"]
        assert [(s.vault_path, s.reason) for s in result.skipped] == [
            ("powershell/profile.ps1", SkipReason.PLATFORM_MISMATCH)
        ]
        assert not ps_profile.exists()

    def test_local_changes_declined(self, vault, make_engine, zshrc: Path) -> None:
        asked: list[list[str]] = []

        def decline(paths: list[str]) -> bool:
            asked.append(paths)
            return False

        engine = make_engine(vault, confirm=decline)
        engine.link(zshrc)
        engine.backup()
        zshrc.write_text("locally edited and longer\n")

        result = engine.restore()

        assert result.cancelled
        assert asked == [[str(zshrc)]]
        assert zshrc.read_text() == "locally edited and longer\n"

    def test_local_changes_accepted(self, vault, make_engine, zshrc: Path) -> None:
        engine = make_engine(vault, confirm=lambda paths: True)
        engine.link(zshrc)
        engine.backup()
        zshrc.write_text("locally edited and longer\n")

        result = engine.restore()

        assert not result.cancelled
        assert zshrc.read_text() == "export EDITOR=vim\n"

    def test_local_changes_without_confirm_cancels(self, engine: SyncEngine, zshrc: Path) -> None:
        engine.link(zshrc)
        engine.backup()
        zshrc.write_text("locally edited and longer\n")

        assert engine.restore().cancelled

    def test_force_skips_confirmation(self, vault, make_engine, zshrc: Path) -> None:
        def never(paths: list[str]) -> bool:
            raise AssertionError("confirm should not be called")

        engine = make_engine(vault, confirm=never)
        engine.link(zshrc)
        engine.backup()
        zshrc.write_text("locally edited and longer\n")

        result = engine.restore(force=True)

        assert result.restored == ["zsh/zshrc"]

    def test_restore_pulls_from_remote(
        self, registry, make_engine, bare_remote: Path, zshrc: Path, tmp_path: Path
    ) -> None:
        registry.create("laptop", remote_url=str(bare_remote))
        laptop = make_engine(registry.resolve("laptop"))
        registry.create("desktop", path=tmp_path / "desktop", remote_url=str(bare_remote))
        desktop = make_engine(registry.resolve("desktop"))

        laptop.link(zshrc)
        laptop.backup()
        zshrc.unlink()

        result = desktop.restore()

        assert result.pull_outcome == PullOutcome.FAST_FORWARD
        assert desktop.manifest.get_file("zsh/zshrc") is not None
        assert result.restored == ["zsh/zshrc"]
        assert zshrc.read_text() == "export EDITOR=vim\n"


# ==============================================================================
# Status
# ==============================================================================


class TestStatus:
    def test_empty_vault(self, engine: SyncEngine) -> None:
        report = engine.status()

        assert report.entries == []
        assert report.all_up_to_date
        assert not report.has_uncommitted_changes
        assert report.remote_url is None

    def test_states(self, engine: SyncEngine, home: Path, zshrc: Path) -> None:
        bashrc = home / ".bashrc"
        bashrc.write_text("alias ll='ls -l'\n")
        vimrc = home / ".vimrc"
        vimrc.write_text("set number\n")
        for path in (zshrc, bashrc, vimrc):
            engine.link(path)
        engine.backup()

        bashrc.write_text("alias ll='ls -la'\n")
        vimrc.unlink()

        report = engine.status()

        assert report.modified == ["bash/bashrc"]
        assert report.missing_source == ["vim/vimrc"]
        assert report.up_to_date == ["zsh/zshrc"]
        assert not report.all_up_to_date

    def test_linked_but_never_backed_up_is_modified(self, engine: SyncEngine, zshrc: Path) -> None:
        engine.link(zshrc)

        report = engine.status()

        assert report.modified == ["zsh/zshrc"]
        assert report.has_uncommitted_changes

    def test_same_size_edit_is_not_detected(self, engine: SyncEngine, zshrc: Path) -> None:
        engine.link(zshrc)
        engine.backup()
        zshrc.write_text("export EDITOR=vi \n")

        assert engine.status().up_to_date == ["zsh/zshrc"]

    def test_every_entry_in_one_state(self, engine: SyncEngine, zshrc: Path, nvim_dir: Path) -> None:
        engine.link(zshrc)
        engine.link(nvim_dir)

        report = engine.status()

        assert sorted(e.vault_path for e in report.entries) == ["nvim", "zsh/zshrc"]
        assert all(e.state in FileState for e in report.entries)
