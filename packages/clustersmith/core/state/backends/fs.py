"""Filesystem-backed state store using core.io for all operations.

Layout (one entry per asset kind)::

    <root>/<kind>/artifact.json   serialized content
    <root>/<kind>/meta.json       commit marker with content digest

Writes revoke the commit marker, write the artifact, then write the
marker last. Every file write is temp-then-rename.
"""

import asyncio
import logging
import re
import time

from pydantic import ValidationError

from clustersmith.core.errors import PersistenceError
from clustersmith.core.io import AbsolutePath, FileSystem
from clustersmith.core.state.models import STATE_FORMAT_VERSION, StateMeta, StateRecord

logger = logging.getLogger(__name__)


def _entry_name(kind: str) -> str:
    """Directory name for a kind: anything outside [a-zA-Z0-9._-] becomes '_'."""
    return re.sub(r"[^a-zA-Z0-9._-]", "_", kind)


class FSStateStore:
    """
    Async filesystem-backed state store.

    The store lazily initializes on first use. A store-level lock
    serializes writers so no two tasks persist state concurrently.
    """

    def __init__(self, fs: FileSystem, root: AbsolutePath) -> None:
        """
        Initialize filesystem state store.

        Args:
            fs: Async filesystem implementation
            root: Absolute path to the state directory
        """
        self.fs = fs
        self.root = root
        self._initialized = False
        self._init_lock = asyncio.Lock()
        self._write_lock = asyncio.Lock()

    async def initialize(self) -> None:
        """
        Initialize store (ensure root exists).

        Called automatically on first use. Safe to call multiple times.
        """
        async with self._init_lock:
            if not self._initialized:
                try:
                    await self.fs.mkdirs(self.root, exist_ok=True)
                except OSError as e:
                    raise PersistenceError("*", "initialize", e) from e
                self._initialized = True

    def _entry_dir(self, kind: str) -> AbsolutePath:
        return self.fs.join(self.root, _entry_name(kind))

    def _artifact_path(self, kind: str) -> AbsolutePath:
        return self.fs.join(self._entry_dir(kind), "artifact.json")

    def _meta_path(self, kind: str) -> AbsolutePath:
        """Commit marker path."""
        return self.fs.join(self._entry_dir(kind), "meta.json")

    async def exists(self, kind: str) -> bool:
        """Check if a committed record exists (async)."""
        await self.initialize()
        artifact_exists, meta_exists = await asyncio.gather(
            self.fs.exists(self._artifact_path(kind)),
            self.fs.exists(self._meta_path(kind)),
        )
        return bool(artifact_exists and meta_exists)

    async def load(self, kind: str) -> StateRecord | None:
        """
        Load and verify a committed record (async).

        Returns:
            The record, or None on miss or detected corruption

        Raises:
            PersistenceError: On I/O failure other than a missing file
        """
        await self.initialize()
        if not await self.exists(kind):
            return None

        try:
            meta_json, artifact_json = await asyncio.gather(
                self.fs.read_text(self._meta_path(kind)),
                self.fs.read_text(self._artifact_path(kind)),
            )
        except FileNotFoundError:
            # Purged between the existence check and the read
            return None
        except UnicodeDecodeError as e:
            logger.warning(f"Discarding corrupt state for {kind!r}: {e}")
            return None
        except OSError as e:
            raise PersistenceError(kind, "load", e) from e

        try:
            meta = StateMeta.model_validate_json(meta_json)
            record = StateRecord.model_validate_json(artifact_json)
        except (ValidationError, ValueError) as e:
            logger.warning(f"Discarding corrupt state for {kind!r}: {e}")
            return None

        if meta.kind != kind or record.kind != kind:
            logger.warning(
                f"Discarding state for {kind!r}: record belongs to {meta.kind!r}/{record.kind!r}"
            )
            return None

        if meta.format_version != STATE_FORMAT_VERSION:
            logger.warning(
                f"Discarding state for {kind!r}: format version {meta.format_version} "
                f"(expected {STATE_FORMAT_VERSION})"
            )
            return None

        if record.digest() != meta.digest:
            logger.warning(f"Discarding state for {kind!r}: content digest mismatch")
            return None

        return record

    async def store(
        self,
        record: StateRecord,
        content_model: str = "",
        source: str = "generated",
        generate_ms: float | None = None,
    ) -> None:
        """
        Store a record with the atomic commit pattern (async).

        Raises:
            PersistenceError: On write failure
        """
        await self.initialize()
        kind = record.kind
        artifact_json = record.model_dump_json(indent=2)
        meta = StateMeta(
            kind=kind,
            digest=record.digest(),
            content_model=content_model,
            created_at=time.time(),
            source=source,
            generate_ms=generate_ms,
            artifact_bytes=len(artifact_json.encode("utf-8")),
        )

        async with self._write_lock:
            try:
                await self.fs.mkdirs(self._entry_dir(kind), exist_ok=True)

                # Revoke the previous commit before touching the artifact
                meta_path = self._meta_path(kind)
                if await self.fs.exists(meta_path):
                    await self.fs.remove(meta_path)

                await self.fs.write_text(self._artifact_path(kind), artifact_json)
                await self.fs.write_text(meta_path, meta.model_dump_json(indent=2))
            except OSError as e:
                raise PersistenceError(kind, "save", e) from e

        logger.debug(f"Persisted state for {kind!r} ({meta.artifact_bytes} bytes)")

    async def purge(self, kind: str) -> None:
        """Remove a record by deleting its directory (async, idempotent)."""
        await self.initialize()
        entry_dir = self._entry_dir(kind)
        async with self._write_lock:
            try:
                if await self.fs.exists(entry_dir):
                    await self.fs.rmdir(entry_dir, recursive=True)
                    logger.debug(f"Purged state for {kind!r}")
            except FileNotFoundError:
                return
            except OSError as e:
                raise PersistenceError(kind, "purge", e) from e

    async def kinds(self) -> list[str]:
        """List kinds with a committed, readable record (async)."""
        await self.initialize()
        found: list[str] = []
        for name in await self.fs.listdir(self.root):
            meta_path = self.fs.join(self.root, name, "meta.json")
            if not await self.fs.is_file(meta_path):
                continue
            try:
                meta = StateMeta.model_validate_json(await self.fs.read_text(meta_path))
            except (ValidationError, ValueError):
                continue
            found.append(meta.kind)
        return sorted(found)

    async def destroy(self) -> None:
        """Delete the whole state directory (async, idempotent)."""
        async with self._write_lock:
            try:
                if await self.fs.exists(self.root):
                    await self.fs.rmdir(self.root, recursive=True)
            except OSError as e:
                raise PersistenceError("*", "destroy", e) from e
            self._initialized = False
        logger.info(f"Destroyed asset state at {self.root}")
