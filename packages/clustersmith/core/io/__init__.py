"""Filesystem abstraction layer for clustersmith.

Provides safe, testable, async filesystem operations.

Example:
    >>> from clustersmith.core.io import RealFileSystem, absolute_path
    >>> fs = RealFileSystem()
    >>> path = fs.join(absolute_path("/tmp"), "install", "metadata.json")
    >>> await fs.write_bytes(path, b"{}", mode=0o640)
    >>> content = await fs.read_bytes(path)
"""

from .impl_fake import FakeFileSystem
from .impl_real import DEFAULT_FILE_MODE, RealFileSystem
from .models import AbsolutePath, RelativePath, WriteResult, absolute_path, relative_path
from .protocols import FileSystem

__all__ = [
    # Path types and constructors
    "AbsolutePath",
    "RelativePath",
    "absolute_path",
    "relative_path",
    # Result types
    "WriteResult",
    # Protocols
    "FileSystem",
    # Implementations
    "RealFileSystem",
    "FakeFileSystem",
    "DEFAULT_FILE_MODE",
]
