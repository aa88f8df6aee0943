"""No-op state store for ephemeral sessions.

Always reports a miss, discards all stores. Sessions backed by it still
guarantee single generation in memory but nothing survives the process.
"""

from clustersmith.core.state.models import StateRecord


class NullStateStore:
    """No-op async state store."""

    async def exists(self, kind: str) -> bool:
        """Always returns False (async)."""
        return False

    async def load(self, kind: str) -> StateRecord | None:
        """Always returns None (async)."""
        return None

    async def store(
        self,
        record: StateRecord,
        content_model: str = "",
        source: str = "generated",
        generate_ms: float | None = None,
    ) -> None:
        """Discard (async)."""
        pass

    async def purge(self, kind: str) -> None:
        """No-op (async)."""
        pass

    async def kinds(self) -> list[str]:
        """Always empty (async)."""
        return []

    async def destroy(self) -> None:
        """No-op (async)."""
        pass
