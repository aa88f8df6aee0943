"""File blobs produced by assets and the fetcher for user-provided files."""

from __future__ import annotations

import logging

from pydantic import BaseModel, ConfigDict, Field, field_validator

from clustersmith.core.io import DEFAULT_FILE_MODE, AbsolutePath, FileSystem, relative_path

logger = logging.getLogger(__name__)


class AssetFile(BaseModel):
    """A file an asset writes into the output directory.

    Attributes:
        path: Output path relative to the install directory (POSIX separators)
        contents: Raw file bytes (base64 encoded in JSON)
        mode: Permission bits applied when materialized

    Example:
        >>> AssetFile(path="auth/kubeconfig", contents=b"...", mode=0o600)
    """

    path: str = Field(description="Relative output path")
    contents: bytes = Field(description="File contents")
    mode: int = Field(default=DEFAULT_FILE_MODE, ge=0, le=0o7777, description="Permission bits")

    model_config = ConfigDict(
        frozen=True,
        extra="forbid",
        ser_json_bytes="base64",
        val_json_bytes="base64",
    )

    @field_validator("path")
    @classmethod
    def _check_path(cls, value: str) -> str:
        return relative_path(value).as_posix()


class FileFetcher:
    """Reads user-provided files from the install directory.

    Loadable assets use this to adopt files the user placed (or edited) in
    the output directory instead of generating them.
    """

    def __init__(self, fs: FileSystem, directory: AbsolutePath) -> None:
        self.fs = fs
        self.directory = directory

    async def fetch(self, name: str) -> AssetFile | None:
        """Return the file at ``name`` (relative), or None when absent."""
        path = self.fs.join(self.directory, *relative_path(name).parts)
        if not await self.fs.is_file(path):
            return None
        contents = await self.fs.read_bytes(path)
        mode = await self.fs.file_mode(path)
        logger.debug(f"Fetched user-provided file {name} ({len(contents)} bytes)")
        return AssetFile(path=name, contents=contents, mode=mode)
