"""In-memory filesystem for fast, isolated testing.

Simulates filesystem operations without disk I/O.
Async operations complete immediately but maintain async interface.
"""

from pathlib import Path

from .impl_real import DEFAULT_FILE_MODE
from .models import AbsolutePath, WriteResult


class FakeFileSystem:
    """
    In-memory async filesystem for testing.

    Stores file contents as bytes together with their permission bits.
    Not thread-safe (use per-test instance).
    """

    def __init__(self) -> None:
        self._files: dict[str, bytes] = {}
        self._modes: dict[str, int] = {}
        self._dirs: set[str] = {"/"}  # Root always exists

    def join(self, base: AbsolutePath, *parts: str) -> AbsolutePath:
        """Join paths (sync - no I/O)."""
        result = Path(base).joinpath(*parts)

        # Normalize to absolute
        if not result.is_absolute():
            result = Path("/") / result

        return AbsolutePath(result)

    async def exists(self, path: AbsolutePath) -> bool:
        """Check existence (async, immediate)."""
        path_str = str(Path(path))
        return path_str in self._files or path_str in self._dirs

    async def is_file(self, path: AbsolutePath) -> bool:
        """Check if file (async, immediate)."""
        return str(Path(path)) in self._files

    async def is_dir(self, path: AbsolutePath) -> bool:
        """Check if directory (async, immediate)."""
        return str(Path(path)) in self._dirs

    async def read_text(self, path: AbsolutePath, encoding: str = "utf-8") -> str:
        """Read text (async, immediate)."""
        return (await self.read_bytes(path)).decode(encoding)

    async def read_bytes(self, path: AbsolutePath) -> bytes:
        """Read bytes (async, immediate)."""
        path_str = str(Path(path))
        if path_str not in self._files:
            raise FileNotFoundError(f"File not found: {path}")
        return self._files[path_str]

    async def file_mode(self, path: AbsolutePath) -> int:
        """Return recorded permission bits (async, immediate)."""
        path_str = str(Path(path))
        if path_str not in self._files:
            raise FileNotFoundError(f"File not found: {path}")
        return self._modes[path_str]

    async def write_text(
        self,
        path: AbsolutePath,
        content: str,
        encoding: str = "utf-8",
    ) -> WriteResult:
        """Write text (async, immediate)."""
        data = content.encode(encoding)
        self._put(Path(path), data, 0o600)
        return WriteResult(path=str(Path(path)), bytes_written=len(data), duration_ms=0.0)

    async def write_bytes(
        self,
        path: AbsolutePath,
        content: bytes,
        mode: int | None = None,
    ) -> WriteResult:
        """Write bytes (async, immediate)."""
        self._put(Path(path), content, DEFAULT_FILE_MODE if mode is None else mode)
        return WriteResult(path=str(Path(path)), bytes_written=len(content), duration_ms=0.0)

    def _put(self, path_obj: Path, data: bytes, mode: int) -> None:
        # Auto-create parent directories
        if str(path_obj.parent) not in self._dirs:
            self._ensure_parents(path_obj.parent)
        self._files[str(path_obj)] = bytes(data)
        self._modes[str(path_obj)] = mode

    def _ensure_parents(self, path: Path) -> None:
        """Recursively create parent directories (sync helper)."""
        parts = path.parts
        for i in range(1, len(parts) + 1):
            self._dirs.add(str(Path(*parts[:i])))

    async def mkdirs(self, path: AbsolutePath, exist_ok: bool = True) -> None:
        """Create directory (async, immediate)."""
        path_str = str(Path(path))
        if not exist_ok and path_str in self._dirs:
            raise FileExistsError(f"Directory exists: {path}")
        self._ensure_parents(Path(path))

    async def listdir(self, path: AbsolutePath) -> list[str]:
        """List directory (async, immediate)."""
        path_str = str(Path(path))
        if path_str not in self._dirs:
            raise FileNotFoundError(f"Directory not found: {path}")

        children = [
            Path(p).name
            for p in [*self._files.keys(), *self._dirs]
            if p != path_str and Path(p).parent == Path(path_str)
        ]
        return sorted(set(children))

    async def remove(self, path: AbsolutePath) -> None:
        """Remove file (async, immediate)."""
        path_str = str(Path(path))
        if path_str not in self._files:
            raise FileNotFoundError(f"File not found: {path}")
        del self._files[path_str]
        del self._modes[path_str]

    async def rmdir(self, path: AbsolutePath, recursive: bool = False) -> None:
        """Remove directory (async, immediate)."""
        path_str = str(Path(path))
        if path_str not in self._dirs:
            raise FileNotFoundError(f"Directory not found: {path}")

        prefix = path_str.rstrip("/") + "/"
        children = [p for p in self._files if p.startswith(prefix)]
        child_dirs = [p for p in self._dirs if p.startswith(prefix)]
        if not recursive and (children or child_dirs):
            raise OSError(f"Directory not empty: {path}")

        for p in children:
            del self._files[p]
            del self._modes[p]
        for p in child_dirs:
            self._dirs.discard(p)
        self._dirs.discard(path_str)
