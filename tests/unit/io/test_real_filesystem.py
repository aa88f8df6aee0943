"""Tests for RealFileSystem (async, on a temporary directory)."""

from pathlib import Path

import pytest

from clustersmith.core.io import RealFileSystem, absolute_path


@pytest.fixture
def real_fs():
    return RealFileSystem()


class TestAtomicWrite:
    """Tests for temp-then-rename writes."""

    async def test_write_bytes_applies_mode(self, real_fs: RealFileSystem, tmp_path: Path):
        """Test the requested mode is set on the final file."""
        path = real_fs.join(absolute_path(tmp_path), "bootstrap.ign")
        await real_fs.write_bytes(path, b"{}", mode=0o600)

        assert await real_fs.file_mode(path) == 0o600
        assert Path(path).read_bytes() == b"{}"

    async def test_write_leaves_no_temp_files(self, real_fs: RealFileSystem, tmp_path: Path):
        """Test nothing but the target remains after a write."""
        root = absolute_path(tmp_path)
        await real_fs.write_bytes(real_fs.join(root, "a", "metadata.json"), b"{}", mode=0o640)

        assert sorted(p.name for p in (tmp_path / "a").iterdir()) == ["metadata.json"]

    async def test_overwrite_replaces_mode_and_content(
        self, real_fs: RealFileSystem, tmp_path: Path
    ):
        """Test rewriting a file replaces both content and mode."""
        path = real_fs.join(absolute_path(tmp_path), "worker.ign")
        await real_fs.write_bytes(path, b"old", mode=0o644)
        await real_fs.write_bytes(path, b"new", mode=0o600)

        assert await real_fs.read_bytes(path) == b"new"
        assert await real_fs.file_mode(path) == 0o600


class TestJoin:
    """Tests for path joining."""

    def test_join_rejects_traversal(self, real_fs: RealFileSystem, tmp_path: Path):
        """Test joining a path that escapes the base raises ValueError."""
        with pytest.raises(ValueError, match="Path traversal"):
            real_fs.join(absolute_path(tmp_path), "..", "outside")
