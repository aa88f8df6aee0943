"""Protocol for state store backends."""

from typing import Protocol

from .models import StateRecord


class StateStore(Protocol):
    """
    Durable record of generated asset content, keyed by asset kind.

    All implementations must support:
    - Atomic commits (a crash never leaves a record that loads)
    - Miss-on-corruption semantics (damaged record → None, with a warning)
    - Fatal errors for any other I/O failure (``PersistenceError``)
    - Idempotent purge
    """

    async def exists(self, kind: str) -> bool:
        """Check whether a committed record exists for ``kind``."""
        ...

    async def load(self, kind: str) -> StateRecord | None:
        """
        Load the committed record for ``kind``.

        Returns:
            The record, or None when missing or detected as corrupt

        Raises:
            PersistenceError: On I/O failures other than a missing file
        """
        ...

    async def store(
        self,
        record: StateRecord,
        content_model: str = "",
        source: str = "generated",
        generate_ms: float | None = None,
    ) -> None:
        """
        Persist ``record`` with an atomic commit.

        Raises:
            PersistenceError: On write failure
        """
        ...

    async def purge(self, kind: str) -> None:
        """Delete the record for ``kind``; no-op when absent."""
        ...

    async def kinds(self) -> list[str]:
        """Kinds with a committed record."""
        ...

    async def destroy(self) -> None:
        """Delete every record; no-op when the store is empty."""
        ...
