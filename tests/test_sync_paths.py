"""
Tests for home expansion, vault path inference and sensitive-file detection.
"""

import os
from pathlib import Path

import pytest

from gfv.core.sync import expand_home, infer_vault_path, is_sensitive_file

HOME = Path("/home/me")


class TestExpandHome:
    def test_tilde_alone(self) -> None:
        assert expand_home("~", HOME) == HOME

    def test_tilde_prefix(self) -> None:
        assert expand_home("~/.zshrc", HOME) == HOME / ".zshrc"

    def test_absolute_path_unchanged(self) -> None:
        assert expand_home("/etc/hosts", HOME) == Path("/etc/hosts")

    def test_relative_path_uses_cwd(self) -> None:
        assert expand_home("notes.txt", HOME) == Path(os.getcwd()) / "notes.txt"

    def test_tilde_user_form_is_not_expanded(self) -> None:
        assert expand_home("~other/file", HOME) == Path(os.getcwd()) / "~other" / "file"

    def test_symlink_not_resolved(self, tmp_path: Path) -> None:
        target = tmp_path / "real"
        target.write_text("x")
        link = tmp_path / "link"
        link.symlink_to(target)

        assert expand_home(str(link), HOME) == link


class TestInferVaultPath:
    @pytest.mark.parametrize(
        ("source", "expected"),
        [
            ("/home/me/.config/nvim", "nvim"),
            ("/home/me/.config/nvim/init.lua", "nvim/init.lua"),
            ("/home/me/.zshrc", "zsh/zshrc"),
            ("/home/me/.bashrc", "bash/bashrc"),
            ("/home/me/.vimrc", "vim/vimrc"),
            ("/home/me/.gitconfig", "git/gitconfig"),
            ("/home/me/.ssh", "ssh/ssh"),
            ("/home/me/.tmux.conf", "tmux.conf/tmux.conf"),
            ("/home/me/.rc", "rc/rc"),
            ("/home/me/Library/Application Support/Code/User/settings.json", "vscode/settings.json"),
            ("/home/me/bin/tool", "bin/tool"),
            ("/etc/hosts", "hosts"),
        ],
    )
    def test_rules(self, source: str, expected: str) -> None:
        assert infer_vault_path(Path(source), HOME) == expected

    def test_nested_dotfile_is_relative_to_home(self) -> None:
        assert infer_vault_path(HOME / "projects" / ".editorconfig", HOME) == "projects/.editorconfig"

    def test_config_dir_itself(self) -> None:
        assert infer_vault_path(HOME / ".config", HOME) == "config/config"


class TestIsSensitiveFile:
    @pytest.mark.parametrize(
        "path",
        [
            "/home/me/project/.env",
            "/home/me/.aws/credentials",
            "/home/me/MySecrets.txt",
            "/home/me/password-store",
            "/home/me/.ssh/server.KEY",
            "/home/me/certs/cert.pem",
        ],
    )
    def test_sensitive(self, path: str) -> None:
        assert is_sensitive_file(Path(path))

    @pytest.mark.parametrize(
        "path",
        [
            "/home/me/.zshrc",
            "/home/me/.config/nvim/init.lua",
            "/home/me/keyboard.conf",
        ],
    )
    def test_not_sensitive(self, path: str) -> None:
        assert not is_sensitive_file(Path(path))
