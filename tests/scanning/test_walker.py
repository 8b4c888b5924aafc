"""Tests for the tree walker and binary sniffing."""

import os

import pytest

from ricci_analyzer.config import AnalysisConfig
from ricci_analyzer.exceptions import FileAccessError, PathNotFoundError
from ricci_analyzer.models import WarningKind
from ricci_analyzer.scanning.walker import TreeWalker, is_binary_content, sniff_binary


def _paths(walker):
    return [entry.relative_path for entry in walker.walk()]


class TestTraversal:
    def test_sorted_depth_first(self, make_tree):
        root = make_tree(
            {
                "c.txt": "c",
                "b.py": "b",
                "a/z.py": "z",
                "a/b/c.py": "c",
            }
        )
        assert _paths(TreeWalker(root)) == ["a/b/c.py", "a/z.py", "b.py", "c.txt"]

    def test_skips_vcs_and_build_dirs(self, make_tree):
        root = make_tree(
            {
                ".git/config": "[core]",
                "node_modules/left-pad/index.js": "module.exports = 1;",
                "target/debug/app": b"\x00",
                "__pycache__/mod.cpython-311.pyc": b"\x00",
                "src/main.rs": "fn main() {}",
            }
        )
        assert _paths(TreeWalker(root)) == ["src/main.rs"]

    def test_exclude_dirs(self, make_tree):
        root = make_tree({"generated/api.py": "x = 1", "src/app.py": "x = 2"})
        config = AnalysisConfig(exclude_dirs=("generated",))
        assert _paths(TreeWalker(root, config)) == ["src/app.py"]

    def test_exclude_patterns(self, make_tree):
        root = make_tree({"web/app.js": "a", "web/app.min.js": "b"})
        config = AnalysisConfig(exclude_patterns=("*.min.js",))
        assert _paths(TreeWalker(root, config)) == ["web/app.js"]

    def test_sizes_recorded(self, make_tree):
        root = make_tree({"data.txt": "12345"})
        (entry,) = list(TreeWalker(root).walk())
        assert entry.size_bytes == 5
        assert entry.path == root / "data.txt"

    def test_rewalk_reflects_filesystem(self, make_tree):
        """Each walk() call reads the filesystem again."""
        root = make_tree({"a.py": "a"})
        walker = TreeWalker(root)
        assert _paths(walker) == ["a.py"]
        (root / "b.py").write_text("b")
        assert _paths(walker) == ["a.py", "b.py"]


class TestRootErrors:
    def test_missing_root(self, tmp_path):
        with pytest.raises(PathNotFoundError):
            list(TreeWalker(tmp_path / "missing").walk())

    def test_root_is_file(self, tmp_path):
        target = tmp_path / "file.txt"
        target.write_text("x")
        with pytest.raises(PathNotFoundError) as exc_info:
            list(TreeWalker(target).walk())
        assert "not a directory" in exc_info.value.reason


@pytest.mark.skipif(not hasattr(os, "symlink"), reason="symlinks unsupported")
class TestSymlinks:
    def test_file_symlink_not_followed(self, make_tree):
        root = make_tree({"real.py": "x = 1"})
        os.symlink(root / "real.py", root / "alias.py")
        walker = TreeWalker(root)
        assert _paths(walker) == ["real.py"]
        assert [(w.kind, w.path) for w in walker.warnings] == [
            (WarningKind.SYMLINK_SKIPPED, "alias.py")
        ]

    def test_dir_symlink_not_followed(self, make_tree):
        root = make_tree({"pkg/mod.py": "x = 1"})
        os.symlink(root / "pkg", root / "loop", target_is_directory=True)
        walker = TreeWalker(root)
        assert _paths(walker) == ["pkg/mod.py"]
        assert walker.warnings[0].kind is WarningKind.SYMLINK_SKIPPED
        assert walker.warnings[0].path == "loop"

    def test_warnings_reset_per_walk(self, make_tree):
        root = make_tree({"real.py": "x = 1"})
        os.symlink(root / "real.py", root / "alias.py")
        walker = TreeWalker(root)
        list(walker.walk())
        list(walker.walk())
        assert len(walker.warnings) == 1


@pytest.mark.skipif(
    not hasattr(os, "geteuid") or os.geteuid() == 0, reason="root ignores permissions"
)
class TestPermissions:
    def test_unreadable_directory_warns(self, make_tree):
        root = make_tree({"open/a.py": "a", "locked/b.py": "b"})
        locked = root / "locked"
        locked.chmod(0)
        try:
            walker = TreeWalker(root)
            assert _paths(walker) == ["open/a.py"]
            assert [(w.kind, w.path) for w in walker.warnings] == [
                (WarningKind.PERMISSION_DENIED, "locked")
            ]
        finally:
            locked.chmod(0o755)


class TestBinarySniffing:
    def test_empty_is_text(self):
        assert is_binary_content(b"") is False

    def test_nul_byte_is_binary(self):
        assert is_binary_content(b"abc\x00def") is True

    def test_plain_text(self):
        assert is_binary_content(b"hello\tworld\r\n") is False

    def test_utf8_is_text(self):
        assert is_binary_content("héllo wörld ✓".encode("utf-8")) is False

    def test_control_heavy_is_binary(self):
        sample = bytes(range(1, 32)) * 4
        assert is_binary_content(sample) is True

    def test_ratio_threshold(self):
        # 2 control bytes in 10 = 20%
        sample = b"\x01\x02abcdefgh"
        assert is_binary_content(sample, 0.30) is False
        assert is_binary_content(sample, 0.10) is True

    def test_sniff_file(self, tmp_path):
        path = tmp_path / "blob.bin"
        path.write_bytes(b"\x89PNG\r\n\x1a\n\x00\x00")
        assert sniff_binary(path) is True

    def test_sniff_missing_file(self, tmp_path):
        with pytest.raises(FileAccessError):
            sniff_binary(tmp_path / "missing.bin")
