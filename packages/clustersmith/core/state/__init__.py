"""Durable asset state for clustersmith.

Persists each generated asset so later invocations sharing the same install
directory can adopt it instead of generating it again.

Key features:
- Async file I/O using core.io FileSystem
- One record per asset kind (artifact.json + meta.json commit marker)
- Content digest re-checked on load (corruption → miss)
- Store-level write lock, idempotent purge
- No automatic invalidation when inputs change: destroy the state instead
"""

from clustersmith.core.state.backends.fs import FSStateStore
from clustersmith.core.state.backends.null import NullStateStore
from clustersmith.core.state.fingerprint import compute_digest
from clustersmith.core.state.models import STATE_FORMAT_VERSION, StateMeta, StateRecord
from clustersmith.core.state.protocols import StateStore

__all__ = [
    # Core
    "StateStore",
    "StateRecord",
    "StateMeta",
    "STATE_FORMAT_VERSION",
    # Backends
    "FSStateStore",
    "NullStateStore",
    # Utils
    "compute_digest",
]
