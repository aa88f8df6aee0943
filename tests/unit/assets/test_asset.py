"""Tests for the asset contract helpers: Parents, AssetFile, FileFetcher."""

from pydantic import BaseModel
import pytest

from clustersmith.core.assets import (
    AssetFile,
    AssetSource,
    FileFetcher,
    GeneratedAsset,
    LoadableAsset,
    Parents,
)
from clustersmith.core.errors import UndeclaredDependencyError
from clustersmith.core.io import FakeFileSystem, absolute_path


class Value(BaseModel):
    value: str


def _generated(kind: str, value: str, files=()) -> GeneratedAsset:
    return GeneratedAsset(
        kind=kind,
        payload=Value(value=value),
        files=tuple(files),
        source=AssetSource.GENERATED,
        digest="0" * 64,
    )


class TestParents:
    """Tests for the dependency view handed to generate."""

    def test_reads_declared_dependency(self):
        """Test mapping access returns the dependency payload."""
        parents = Parents("id", {"config": _generated("config", "c")})

        assert parents["config"] == Value(value="c")
        assert list(parents) == ["config"]
        assert len(parents) == 1

    def test_undeclared_dependency_raises(self):
        """Test reading a kind outside the declared set is a programming error."""
        parents = Parents("id", {"config": _generated("config", "c")})

        with pytest.raises(UndeclaredDependencyError) as exc_info:
            parents["token"]

        assert exc_info.value.kind == "id"
        assert exc_info.value.requested == "token"
        assert str(exc_info.value) == "asset 'id' read undeclared dependency 'token'"

    def test_undeclared_dependency_is_key_error(self):
        """Test Mapping.get semantics still work for absent kinds."""
        parents = Parents("id", {})
        assert parents.get("token") is None

    def test_typed_checks_model(self):
        """Test typed rejects a payload of the wrong model."""
        parents = Parents("id", {"config": _generated("config", "c")})

        assert parents.typed("config", Value).value == "c"
        with pytest.raises(TypeError, match="Expected AssetFile"):
            parents.typed("config", AssetFile)

    def test_asset_exposes_files(self):
        """Test asset() returns files alongside the payload."""
        blob = AssetFile(path="manifests/a.yaml", contents=b"a: 1\n")
        parents = Parents("ign", {"manifests": _generated("manifests", "m", [blob])})

        assert parents.asset("manifests").file("manifests/a.yaml") is blob


class TestAssetFile:
    """Tests for file blob validation and serialization."""

    @pytest.mark.parametrize("path", ["/etc/passwd", "../outside", "a/../../b", ""])
    def test_rejects_paths_escaping_output_dir(self, path: str):
        """Test absolute, empty and climbing paths are rejected."""
        with pytest.raises(ValueError):
            AssetFile(path=path, contents=b"")

    def test_json_roundtrip_keeps_binary_contents(self):
        """Test contents survive JSON (base64) serialization byte for byte."""
        blob = AssetFile(path="auth/kubeconfig", contents=b"\x00\x01\xfe\xff", mode=0o600)

        restored = AssetFile.model_validate_json(blob.model_dump_json())

        assert restored == blob

    def test_missing_file_lookup(self):
        """Test GeneratedAsset.file raises KeyError for unknown paths."""
        with pytest.raises(KeyError):
            _generated("x", "x").file("nope.txt")


class TestFileFetcher:
    """Tests for reading user-provided files."""

    async def test_fetch_existing_file(self, fs: FakeFileSystem):
        """Test fetch returns contents and mode of a present file."""
        root = absolute_path("/install")
        await fs.write_bytes(
            fs.join(root, "install-config.yaml"), b"apiVersion: v1\n", mode=0o600
        )

        blob = await FileFetcher(fs, root).fetch("install-config.yaml")

        assert blob == AssetFile(
            path="install-config.yaml", contents=b"apiVersion: v1\n", mode=0o600
        )

    async def test_fetch_missing_file(self, fs: FakeFileSystem):
        """Test fetch returns None when the user provided nothing."""
        assert await FileFetcher(fs, absolute_path("/install")).fetch("install-config.yaml") is None


class TestLoadableProtocol:
    """Tests for runtime protocol checks."""

    def test_plain_asset_is_not_loadable(self, make_asset):
        assert not isinstance(make_asset("a"), LoadableAsset)
