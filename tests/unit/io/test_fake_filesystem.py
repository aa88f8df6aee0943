"""Tests for FakeFileSystem (async).

Tests the in-memory fake filesystem implementation.
"""

import pytest

from clustersmith.core.io import DEFAULT_FILE_MODE, AbsolutePath, FakeFileSystem, absolute_path


@pytest.fixture
def test_root():
    """Provide test root path."""
    return absolute_path("/test")


class TestJoin:
    """Tests for path joining (sync operation)."""

    def test_join_multiple_parts(self, fs: FakeFileSystem, test_root: AbsolutePath):
        """Test joining multiple path components."""
        result = fs.join(test_root, "a", "b", "c")
        assert str(result) == "/test/a/b/c"


class TestReadWrite:
    """Tests for read/write operations."""

    async def test_write_bytes_and_read_roundtrip(
        self, fs: FakeFileSystem, test_root: AbsolutePath
    ):
        """Test write → read roundtrip keeps bytes exactly."""
        test_file = fs.join(test_root, "bootstrap.ign")
        result = await fs.write_bytes(test_file, b"\x00{}\xff")

        assert result.bytes_written == 4
        assert await fs.read_bytes(test_file) == b"\x00{}\xff"

    async def test_write_creates_parent_directories(
        self, fs: FakeFileSystem, test_root: AbsolutePath
    ):
        """Test that write auto-creates parent directories."""
        await fs.write_text(fs.join(test_root, "a", "b", "test.txt"), "content")

        assert await fs.is_dir(fs.join(test_root, "a"))
        assert await fs.is_dir(fs.join(test_root, "a", "b"))

    async def test_read_nonexistent_raises_error(self, fs: FakeFileSystem, test_root: AbsolutePath):
        """Test reading nonexistent file raises FileNotFoundError."""
        with pytest.raises(FileNotFoundError):
            await fs.read_text(fs.join(test_root, "nonexistent.txt"))


class TestModes:
    """Tests for permission bit tracking."""

    async def test_write_bytes_defaults_mode(self, fs: FakeFileSystem, test_root: AbsolutePath):
        """Test write_bytes without mode records the default mode."""
        path = fs.join(test_root, "worker.ign")
        await fs.write_bytes(path, b"{}")
        assert await fs.file_mode(path) == DEFAULT_FILE_MODE

    async def test_write_bytes_records_mode(self, fs: FakeFileSystem, test_root: AbsolutePath):
        """Test write_bytes records an explicit mode."""
        path = fs.join(test_root, "bootstrap.ign")
        await fs.write_bytes(path, b"{}", mode=0o600)
        assert await fs.file_mode(path) == 0o600

    async def test_write_text_is_private(self, fs: FakeFileSystem, test_root: AbsolutePath):
        """Test write_text behaves like a fresh temp file (0600)."""
        path = fs.join(test_root, "meta.json")
        await fs.write_text(path, "{}")
        assert await fs.file_mode(path) == 0o600

    async def test_file_mode_missing_raises(self, fs: FakeFileSystem, test_root: AbsolutePath):
        """Test file_mode on a missing file raises FileNotFoundError."""
        with pytest.raises(FileNotFoundError):
            await fs.file_mode(fs.join(test_root, "missing"))


class TestDirectories:
    """Tests for directory operations."""

    async def test_listdir_lists_files_and_dirs(self, fs: FakeFileSystem, test_root: AbsolutePath):
        """Test listdir returns direct children only."""
        await fs.write_text(fs.join(test_root, "a.txt"), "a")
        await fs.write_text(fs.join(test_root, "sub", "b.txt"), "b")

        assert await fs.listdir(test_root) == ["a.txt", "sub"]

    async def test_remove_deletes_file(self, fs: FakeFileSystem, test_root: AbsolutePath):
        """Test remove deletes a file."""
        path = fs.join(test_root, "a.txt")
        await fs.write_text(path, "a")
        await fs.remove(path)
        assert not await fs.exists(path)

    async def test_rmdir_non_recursive_refuses_non_empty(
        self, fs: FakeFileSystem, test_root: AbsolutePath
    ):
        """Test rmdir without recursive fails on a non-empty directory."""
        await fs.write_text(fs.join(test_root, "a.txt"), "a")
        with pytest.raises(OSError):
            await fs.rmdir(test_root)

    async def test_rmdir_recursive_removes_tree(self, fs: FakeFileSystem, test_root: AbsolutePath):
        """Test recursive rmdir removes every file and directory below."""
        await fs.write_text(fs.join(test_root, "sub", "b.txt"), "b")
        await fs.rmdir(test_root, recursive=True)

        assert not await fs.exists(test_root)
        assert not await fs.exists(fs.join(test_root, "sub", "b.txt"))
