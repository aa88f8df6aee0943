"""Models for the asset state store.

Provides the persisted record and its commit-marker metadata.
"""

from typing import Any

from pydantic import BaseModel, Field

from clustersmith.core.assets.files import AssetFile
from clustersmith.core.state.fingerprint import compute_digest

STATE_FORMAT_VERSION = 1


class StateRecord(BaseModel):
    """
    Serialized content of one asset kind (``artifact.json``).

    The payload is stored in JSON mode and re-validated against the
    asset's content model when a later session adopts it.
    """

    kind: str = Field(description="Asset kind")
    payload: dict[str, Any] = Field(description="JSON-mode dump of the asset payload")
    files: list[AssetFile] = Field(default_factory=list, description="File blobs")

    def digest(self) -> str:
        return compute_digest(self.kind, self.payload, self.files)


class StateMeta(BaseModel):
    """
    Metadata committed after the record is written (``meta.json``).

    Presence of meta.json indicates a complete record; the digest detects
    an artifact that was replaced or damaged after the commit.
    """

    kind: str
    digest: str = Field(description="SHA256 digest of the committed record")
    format_version: int = Field(default=STATE_FORMAT_VERSION)
    content_model: str = Field(description="Fully-qualified payload model class name")
    created_at: float = Field(description="Unix timestamp (seconds)")
    source: str = Field(default="generated", description="Where the content came from")
    generate_ms: float | None = Field(
        default=None, description="Generation duration in milliseconds"
    )
    artifact_bytes: int | None = Field(default=None, description="Artifact JSON size in bytes")
