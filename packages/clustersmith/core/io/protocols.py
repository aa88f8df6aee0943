"""Protocols for filesystem operations.

Defines the async FileSystem protocol used by the state store and the
target materializer.
"""

from typing import Protocol

from .models import AbsolutePath, WriteResult


class FileSystem(Protocol):
    """
    Protocol for async filesystem operations.

    All implementations must provide atomic write semantics and
    handle platform-specific details transparently.
    """

    # Path operations (sync - no I/O)
    def join(self, base: AbsolutePath, *parts: str) -> AbsolutePath:
        """
        Safely join path components.

        Args:
            base: Base absolute path
            *parts: Path segments to join

        Returns:
            New absolute path

        Raises:
            ValueError: If result escapes base directory
        """
        ...

    # Existence checks (async)
    async def exists(self, path: AbsolutePath) -> bool:
        """Check if path exists (file or directory)."""
        ...

    async def is_file(self, path: AbsolutePath) -> bool:
        """Check if path exists and is a file."""
        ...

    async def is_dir(self, path: AbsolutePath) -> bool:
        """Check if path exists and is a directory."""
        ...

    # Read operations (async)
    async def read_text(self, path: AbsolutePath, encoding: str = "utf-8") -> str:
        """
        Read text file contents.

        Raises:
            FileNotFoundError: If file doesn't exist
            OSError: On read failure
        """
        ...

    async def read_bytes(self, path: AbsolutePath) -> bytes:
        """
        Read binary file contents.

        Raises:
            FileNotFoundError: If file doesn't exist
            OSError: On read failure
        """
        ...

    async def file_mode(self, path: AbsolutePath) -> int:
        """
        Return permission bits of a file (e.g. ``0o644``).

        Raises:
            FileNotFoundError: If file doesn't exist
        """
        ...

    # Write operations (async, atomic)
    async def write_text(
        self,
        path: AbsolutePath,
        content: str,
        encoding: str = "utf-8",
    ) -> WriteResult:
        """
        Atomically write text to file.

        Uses temp file + atomic replace to ensure readers never
        observe partial writes.

        Raises:
            OSError: On write failure
        """
        ...

    async def write_bytes(
        self,
        path: AbsolutePath,
        content: bytes,
        mode: int | None = None,
    ) -> WriteResult:
        """
        Atomically write bytes to file, optionally applying permission bits.

        The mode is applied to the temp file before the replace, so the
        target never exists with the wrong permissions.

        Raises:
            OSError: On write failure
        """
        ...

    # Directory operations (async)
    async def mkdirs(self, path: AbsolutePath, exist_ok: bool = True) -> None:
        """
        Create directory and all parents.

        Raises:
            OSError: On creation failure
        """
        ...

    async def listdir(self, path: AbsolutePath) -> list[str]:
        """
        List directory contents (names only).

        Raises:
            FileNotFoundError: If directory doesn't exist
        """
        ...

    # Removal operations (async)
    async def remove(self, path: AbsolutePath) -> None:
        """
        Remove a file.

        Raises:
            FileNotFoundError: If file doesn't exist
        """
        ...

    async def rmdir(self, path: AbsolutePath, recursive: bool = False) -> None:
        """
        Remove a directory.

        Raises:
            FileNotFoundError: If directory doesn't exist
        """
        ...
