"""
Tests for copying tracked entries between source and vault.
"""

from pathlib import Path

import pytest

from gfv.core.errors import VaultIOError
from gfv.core.sync import copy_entry, entry_size, remove_entry
from gfv.core.sync.fsops import sizes_differ


def make_tree(root: Path, files: dict[str, str]) -> Path:
    for rel, content in files.items():
        path = root / rel
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(content)
    return root


class TestCopyFile:
    def test_copies_and_creates_parents(self, tmp_path: Path) -> None:
        src = tmp_path / "src.txt"
        src.write_text("hello")
        dst = tmp_path / "a" / "b" / "dst.txt"

        copy_entry(src, dst)

        assert dst.read_text() == "hello"

    def test_overwrites_existing_file(self, tmp_path: Path) -> None:
        src = tmp_path / "src.txt"
        src.write_text("new")
        dst = tmp_path / "dst.txt"
        dst.write_text("old content")

        copy_entry(src, dst)

        assert dst.read_text() == "new"

    def test_replaces_directory_at_destination(self, tmp_path: Path) -> None:
        src = tmp_path / "src.txt"
        src.write_text("file")
        dst = make_tree(tmp_path / "dst", {"inner.txt": "x"})

        copy_entry(src, dst)

        assert dst.is_file()
        assert dst.read_text() == "file"

    def test_missing_source_raises(self, tmp_path: Path) -> None:
        with pytest.raises(VaultIOError) as exc_info:
            copy_entry(tmp_path / "missing", tmp_path / "dst")

        assert exc_info.value.path == str(tmp_path / "missing")


class TestReplaceDirectory:
    def test_copies_tree(self, tmp_path: Path) -> None:
        src = make_tree(tmp_path / "src", {"init.lua": "a", "lua/plugins.lua": "b"})
        dst = tmp_path / "vault" / "nvim"

        copy_entry(src, dst)

        assert (dst / "init.lua").read_text() == "a"
        assert (dst / "lua" / "plugins.lua").read_text() == "b"

    def test_stale_files_are_removed(self, tmp_path: Path) -> None:
        src = make_tree(tmp_path / "src", {"keep.txt": "k"})
        dst = make_tree(tmp_path / "dst", {"keep.txt": "old", "stale.txt": "s"})

        copy_entry(src, dst)

        assert sorted(p.name for p in dst.iterdir()) == ["keep.txt"]
        assert (dst / "keep.txt").read_text() == "k"

    def test_leaves_no_staging_directories(self, tmp_path: Path) -> None:
        src = make_tree(tmp_path / "src", {"a.txt": "a"})
        parent = tmp_path / "vault"
        make_tree(parent / "dst", {"b.txt": "b"})

        copy_entry(src, parent / "dst")

        assert [p.name for p in parent.iterdir()] == ["dst"]

    def test_replaces_file_at_destination(self, tmp_path: Path) -> None:
        src = make_tree(tmp_path / "src", {"a.txt": "a"})
        dst = tmp_path / "dst"
        dst.write_text("was a file")

        copy_entry(src, dst)

        assert (dst / "a.txt").read_text() == "a"

    def test_symlinks_copied_as_links(self, tmp_path: Path) -> None:
        src = make_tree(tmp_path / "src", {"real.txt": "r"})
        (src / "link.txt").symlink_to("real.txt")
        dst = tmp_path / "dst"

        copy_entry(src, dst)

        assert (dst / "link.txt").is_symlink()


class TestRemoveEntry:
    def test_removes_file(self, tmp_path: Path) -> None:
        path = tmp_path / "f"
        path.write_text("x")
        remove_entry(path)
        assert not path.exists()

    def test_removes_directory(self, tmp_path: Path) -> None:
        path = make_tree(tmp_path / "d", {"a/b.txt": "x"})
        remove_entry(path)
        assert not path.exists()

    def test_missing_is_noop(self, tmp_path: Path) -> None:
        remove_entry(tmp_path / "missing")


class TestSizes:
    def test_file_size(self, tmp_path: Path) -> None:
        path = tmp_path / "f"
        path.write_text("12345")
        assert entry_size(path) == 5

    def test_directory_size_sums_files(self, tmp_path: Path) -> None:
        path = make_tree(tmp_path / "d", {"a": "123", "sub/b": "4567"})
        assert entry_size(path) == 7

    def test_same_size_different_content_is_not_a_difference(self, tmp_path: Path) -> None:
        a = tmp_path / "a"
        b = tmp_path / "b"
        a.write_text("abc")
        b.write_text("xyz")
        assert not sizes_differ(a, b)

    def test_different_sizes(self, tmp_path: Path) -> None:
        a = tmp_path / "a"
        b = tmp_path / "b"
        a.write_text("abc")
        b.write_text("abcd")
        assert sizes_differ(a, b)
