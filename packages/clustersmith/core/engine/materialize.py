"""Target materializer: writes generated file blobs into the install directory."""

from __future__ import annotations

import logging
from pathlib import Path

from clustersmith.core.assets.asset import GeneratedAsset
from clustersmith.core.assets.files import AssetFile
from clustersmith.core.errors import MaterializationError
from clustersmith.core.io import AbsolutePath, FileSystem, WriteResult, relative_path

logger = logging.getLogger(__name__)


class TargetWriter:
    """Writes an asset's files below an output directory.

    Each file is written temp-then-rename with its declared mode, so a
    failure never leaves a half-written file in place. Parent directories
    are created as needed and nothing else in the directory is touched.
    Writing unchanged content again reproduces identical bytes and modes.

    Example:
        >>> writer = TargetWriter(RealFileSystem())
        >>> await writer.write(session.get("bootstrap-ignition"), absolute_path("install"))
    """

    def __init__(self, fs: FileSystem) -> None:
        self.fs = fs

    def target_path(self, output_dir: AbsolutePath, file: AssetFile) -> AbsolutePath:
        """Absolute path ``file`` materializes to below ``output_dir``."""
        return self.fs.join(output_dir, *relative_path(file.path).parts)

    async def write(
        self, generated: GeneratedAsset, output_dir: AbsolutePath
    ) -> list[WriteResult]:
        """Write every file of ``generated``.

        Raises:
            MaterializationError: On the first file that cannot be written;
                files already written stay in place
        """
        results: list[WriteResult] = []
        for file in generated.files:
            path = self.target_path(output_dir, file)
            try:
                await self.fs.mkdirs(AbsolutePath(Path(path).parent), exist_ok=True)
                results.append(await self.fs.write_bytes(path, file.contents, mode=file.mode))
            except OSError as e:
                raise MaterializationError(generated.kind, file.path, e) from e
            logger.debug(f"Wrote {file.path} ({len(file.contents)} bytes, mode {file.mode:o})")

        if results:
            logger.info(f"Materialized {len(results)} file(s) for {generated.kind!r}")
        return results

    async def remove(self, generated: GeneratedAsset, output_dir: AbsolutePath) -> list[str]:
        """Remove previously materialized files of ``generated``; missing files are skipped.

        Raises:
            MaterializationError: If an existing file cannot be removed
        """
        removed: list[str] = []
        for file in generated.files:
            path = self.target_path(output_dir, file)
            if await self.fs.exists(path):
                try:
                    await self.fs.remove(path)
                except OSError as e:
                    raise MaterializationError(generated.kind, file.path, e) from e
                removed.append(file.path)
        return removed
