"""Real filesystem implementation using aiofiles for async I/O.

Provides atomic writes via temp file + os.replace().
"""

import asyncio
from contextlib import suppress
import os
from pathlib import Path
import shutil
import stat
import time
from tempfile import NamedTemporaryFile

import aiofiles  # type: ignore[import-untyped]
import aiofiles.os  # type: ignore[import-untyped]

from .models import AbsolutePath, WriteResult

DEFAULT_FILE_MODE = 0o644


class RealFileSystem:
    """
    Real filesystem implementation using aiofiles for async I/O.

    Provides atomic writes via temp file + os.replace(). The temp file is
    created next to the target so the replace never crosses devices.
    """

    def join(self, base: AbsolutePath, *parts: str) -> AbsolutePath:
        """Join paths (sync - no I/O)."""
        result = Path(base).joinpath(*parts).resolve()

        # Security: Ensure result is still under base
        base_resolved = Path(base).resolve()
        try:
            result.relative_to(base_resolved)
        except ValueError as e:
            raise ValueError(f"Path traversal detected: {result} escapes {base}") from e

        return AbsolutePath(result)

    async def exists(self, path: AbsolutePath) -> bool:
        """Check existence asynchronously."""
        return bool(await aiofiles.os.path.exists(path))

    async def is_file(self, path: AbsolutePath) -> bool:
        """Check if file asynchronously."""
        return bool(await aiofiles.os.path.isfile(path))

    async def is_dir(self, path: AbsolutePath) -> bool:
        """Check if directory asynchronously."""
        return bool(await aiofiles.os.path.isdir(path))

    async def read_text(self, path: AbsolutePath, encoding: str = "utf-8") -> str:
        """Read text file asynchronously."""
        async with aiofiles.open(path, encoding=encoding) as f:
            content: str = await f.read()
            return content

    async def read_bytes(self, path: AbsolutePath) -> bytes:
        """Read binary file asynchronously."""
        async with aiofiles.open(path, mode="rb") as f:
            content: bytes = await f.read()
            return content

    async def file_mode(self, path: AbsolutePath) -> int:
        """Return permission bits asynchronously."""
        result = await aiofiles.os.stat(path)
        return stat.S_IMODE(result.st_mode)

    async def write_text(
        self,
        path: AbsolutePath,
        content: str,
        encoding: str = "utf-8",
    ) -> WriteResult:
        """Atomically write text file asynchronously."""
        start = time.perf_counter()
        data = content.encode(encoding)
        await self._atomic_write(Path(path), data, mode=None)
        return WriteResult(
            path=str(path),
            bytes_written=len(data),
            duration_ms=(time.perf_counter() - start) * 1000,
        )

    async def write_bytes(
        self,
        path: AbsolutePath,
        content: bytes,
        mode: int | None = None,
    ) -> WriteResult:
        """Atomically write binary file asynchronously, applying ``mode``."""
        start = time.perf_counter()
        await self._atomic_write(
            Path(path), content, mode=DEFAULT_FILE_MODE if mode is None else mode
        )
        return WriteResult(
            path=str(path),
            bytes_written=len(content),
            duration_ms=(time.perf_counter() - start) * 1000,
        )

    async def _atomic_write(self, path_obj: Path, data: bytes, mode: int | None) -> None:
        # Ensure parent directory exists
        await aiofiles.os.makedirs(path_obj.parent, exist_ok=True)

        loop = asyncio.get_event_loop()

        def create_temp_file() -> str:
            tmp = NamedTemporaryFile(
                mode="wb",
                dir=path_obj.parent,
                prefix=f".{path_obj.name}.",
                suffix=".tmp",
                delete=False,
            )
            tmp_path = tmp.name
            tmp.close()
            return tmp_path

        tmp_path = await loop.run_in_executor(None, create_temp_file)

        try:
            async with aiofiles.open(tmp_path, mode="wb") as f:
                await f.write(data)
                await f.flush()
                await loop.run_in_executor(None, os.fsync, f.fileno())

            if mode is not None:
                await loop.run_in_executor(None, os.chmod, tmp_path, mode)

            await loop.run_in_executor(None, os.replace, tmp_path, str(path_obj))
        except BaseException:
            # Never leave a half-written temp file behind
            with suppress(OSError):
                await aiofiles.os.unlink(tmp_path)
            raise

    async def mkdirs(self, path: AbsolutePath, exist_ok: bool = True) -> None:
        """Create directory and parents asynchronously."""
        await aiofiles.os.makedirs(path, exist_ok=exist_ok)

    async def listdir(self, path: AbsolutePath) -> list[str]:
        """List directory contents asynchronously."""
        entries: list[str] = await aiofiles.os.listdir(path)
        return entries

    async def remove(self, path: AbsolutePath) -> None:
        """Remove file asynchronously."""
        await aiofiles.os.unlink(path)

    async def rmdir(self, path: AbsolutePath, recursive: bool = False) -> None:
        """Remove directory asynchronously."""
        if recursive:
            # shutil.rmtree is blocking, run in executor
            loop = asyncio.get_event_loop()
            await loop.run_in_executor(None, shutil.rmtree, str(path))
        else:
            await aiofiles.os.rmdir(path)
