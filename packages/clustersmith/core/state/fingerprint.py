"""Content digests for persisted asset state.

Provides a stable hash over an asset's serialized content, stored next to
the record and re-checked on load to detect corruption.
"""

from collections.abc import Iterable
import hashlib
import json
from typing import Any

from clustersmith.core.assets.files import AssetFile


def compute_digest(
    kind: str,
    payload: dict[str, Any],
    files: Iterable[AssetFile],
) -> str:
    """
    Compute a stable digest of an asset's content.

    Uses canonical JSON encoding (sorted keys, compact separators)
    to ensure stable hashing across processes and runs. File contents are
    folded in by their own SHA256 so large blobs are not re-encoded.

    Args:
        kind: Asset kind
        payload: JSON-mode dump of the asset payload
        files: File blobs of the asset

    Returns:
        SHA256 hex digest (64 chars)

    Example:
        >>> compute_digest("cluster-id", {"uuid": "..."}, [])
        '5d1c0...'
    """
    document = {
        "kind": kind,
        "payload": payload,
        "files": [
            {
                "path": f.path,
                "mode": f.mode,
                "sha256": hashlib.sha256(f.contents).hexdigest(),
            }
            for f in files
        ],
    }

    # Canonical JSON: sorted keys, compact separators
    canonical = json.dumps(
        document,
        sort_keys=True,
        separators=(",", ":"),
        ensure_ascii=False,
    )

    return hashlib.sha256(canonical.encode("utf-8")).hexdigest()
