"""Tests for writing generated files into the install directory."""

from __future__ import annotations

from pathlib import Path

import pytest

from clustersmith.core.assets import AssetFile
from clustersmith.core.engine import AssetSession, ResolutionContext, TargetWriter
from clustersmith.core.errors import MaterializationError, NotGeneratedError
from clustersmith.core.io import AbsolutePath, FakeFileSystem, RealFileSystem, absolute_path

FILES = [
    AssetFile(path="auth/kubeconfig", contents=b"apiVersion: v1\n", mode=0o600),
    AssetFile(path="metadata.json", contents=b'{"clusterName": "demo"}', mode=0o640),
    AssetFile(path="worker.ign", contents=b"{}"),
]


class ReadOnlyFileSystem(FakeFileSystem):
    """Fake filesystem that refuses to write or remove files."""

    async def write_bytes(self, path: AbsolutePath, content: bytes, mode: int | None = None):
        raise PermissionError(13, "Permission denied", str(path))

    async def remove(self, path: AbsolutePath) -> None:
        raise PermissionError(13, "Permission denied", str(path))


def _snapshot(root: Path) -> dict[Path, tuple[bytes, int]]:
    return {p: (p.read_bytes(), p.stat().st_mode & 0o777) for p in root.rglob("*") if p.is_file()}


@pytest.fixture
def session_factory(make_asset, make_registry):
    def _make(fs, output_dir=None):
        return AssetSession(
            make_registry(make_asset("bundle", files=FILES), make_asset("other")).build_graph(),
            context=ResolutionContext(output_dir=output_dir),
            fs=fs,
        )

    return _make


class TestTargetWriter:
    async def test_writes_files_with_modes(self, session_factory, fs: FakeFileSystem, install_dir):
        session = session_factory(fs, install_dir)
        await session.fetch("bundle")

        results = await session.write("bundle")

        assert len(results) == 3
        kubeconfig = fs.join(install_dir, "auth", "kubeconfig")
        assert await fs.read_bytes(kubeconfig) == b"apiVersion: v1\n"
        assert await fs.file_mode(kubeconfig) == 0o600
        assert await fs.file_mode(fs.join(install_dir, "metadata.json")) == 0o640
        assert await fs.file_mode(fs.join(install_dir, "worker.ign")) == 0o644

    async def test_unrelated_files_untouched(
        self, session_factory, fs: FakeFileSystem, install_dir
    ):
        notes = fs.join(install_dir, "notes.txt")
        await fs.write_bytes(notes, b"mine", mode=0o600)
        session = session_factory(fs, install_dir)
        await session.fetch("bundle")

        await session.write("bundle")

        assert await fs.read_bytes(notes) == b"mine"
        assert sorted(await fs.listdir(install_dir)) == [
            "auth",
            "metadata.json",
            "notes.txt",
            "worker.ign",
        ]

    async def test_rewrite_is_byte_identical(self, session_factory, tmp_path: Path):
        """Test writing twice on a real filesystem gives identical bytes and modes."""
        fs = RealFileSystem()
        output_dir = absolute_path(tmp_path)
        session = session_factory(fs, output_dir)
        await session.fetch("bundle")

        await session.write("bundle")
        first = _snapshot(tmp_path)
        await session.write("bundle")
        second = _snapshot(tmp_path)

        assert first == second
        assert first[tmp_path / "auth" / "kubeconfig"] == (b"apiVersion: v1\n", 0o600)

    async def test_remove_skips_missing(self, session_factory, fs: FakeFileSystem, install_dir):
        session = session_factory(fs, install_dir)
        generated = await session.fetch("bundle")
        await fs.write_bytes(fs.join(install_dir, "worker.ign"), b"{}")

        removed = await TargetWriter(fs).remove(generated, install_dir)

        assert removed == ["worker.ign"]

    async def test_write_failure_names_asset(self, session_factory, install_dir):
        """Test an unwritable file surfaces as an asset error carrying its kind."""
        session = session_factory(ReadOnlyFileSystem(), install_dir)
        await session.fetch("bundle")

        with pytest.raises(MaterializationError) as exc_info:
            await session.write("bundle")

        assert exc_info.value.kind == "bundle"
        assert exc_info.value.path == "auth/kubeconfig"
        assert isinstance(exc_info.value.cause, PermissionError)
        assert "asset 'bundle'" in str(exc_info.value)
        assert "Permission denied" in str(exc_info.value)

    async def test_remove_failure_names_asset(self, session_factory, install_dir):
        fs = ReadOnlyFileSystem()
        session = session_factory(fs, install_dir)
        generated = await session.fetch("bundle")
        await FakeFileSystem.write_bytes(fs, fs.join(install_dir, "worker.ign"), b"{}")

        with pytest.raises(MaterializationError, match="'worker.ign' for asset 'bundle'"):
            await TargetWriter(fs).remove(generated, install_dir)


class TestSessionWrite:
    async def test_not_generated(self, session_factory, fs: FakeFileSystem, install_dir):
        session = session_factory(fs, install_dir)

        with pytest.raises(NotGeneratedError, match="state: unresolved"):
            await session.write("bundle")

    async def test_explicit_output_dir(self, session_factory, fs: FakeFileSystem):
        session = session_factory(fs)
        await session.fetch("other")

        assert await session.write("other", "/elsewhere") == []

    async def test_requires_output_dir(self, session_factory, fs: FakeFileSystem):
        session = session_factory(fs)
        await session.fetch("bundle")

        with pytest.raises(ValueError, match="No output directory"):
            await session.write("bundle")
