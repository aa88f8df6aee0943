"""Result types for asset resolution."""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class ResolutionResult(BaseModel):
    """Result of resolving a set of root kinds.

    Failures are raised by ``AssetSession.resolve``; a result always means
    every root was generated. Purge failures never fail a resolution and
    are reported here instead.

    Attributes:
        roots: Kinds that were requested
        outputs: Map of root kind -> GeneratedAsset
        sources: Map of kind -> where its content came from, for every kind
            the session produced (generated, state, disk)
        purged: Transient kinds purged after resolution
        purge_errors: Map of kind -> error message for purges that failed
        total_duration_ms: Total resolution duration
        metadata: Session metrics (counts, per-kind timings)

    Example:
        >>> result = await session.resolve(["manifests"])
        >>> manifests = result.get_output("manifests")
        >>> result.sources["install-config"]
        'disk'
    """

    roots: list[str] = Field(default_factory=list, description="Requested root kinds")
    outputs: dict[str, Any] = Field(
        default_factory=dict, description="Map of root kind -> GeneratedAsset"
    )
    sources: dict[str, str] = Field(default_factory=dict, description="Map of kind -> source")
    purged: list[str] = Field(default_factory=list, description="Purged transient kinds")
    purge_errors: dict[str, str] = Field(
        default_factory=dict, description="Map of kind -> purge error message"
    )
    total_duration_ms: float = Field(default=0.0, description="Total duration (ms)")
    metadata: dict[str, Any] = Field(default_factory=dict, description="Session metrics")

    model_config = ConfigDict(frozen=True, extra="forbid")

    def get_output(self, kind: str) -> Any:
        """Get the generated content of a root kind.

        Raises:
            KeyError: If ``kind`` was not a requested root
        """
        if kind not in self.outputs:
            raise KeyError(f"Kind '{kind}' not found in outputs")
        return self.outputs[kind]

    @property
    def generated_kinds(self) -> list[str]:
        """Kinds whose generate (or load) step ran in this session."""
        return [kind for kind, source in self.sources.items() if source != "state"]
