"""Resolution context shared by every asset in a session.

Provides configuration, user inputs and mutable metrics to asset
generate steps without any module-level state.
"""

from __future__ import annotations

import asyncio
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from clustersmith.core.config.models import InstallerConfig


@dataclass
class ResolutionContext:
    """Shared context for one resolution session.

    Mutable to allow metric updates while assets generate.

    Attributes:
        config: Application configuration
        output_dir: Install directory (state, user files and artifacts)
        install_config: Install config document supplied by the caller, used
            when no install-config.yaml exists in the install directory
        metrics: Mutable metrics dictionary (counts, per-kind timings)
        cancel_token: Optional cancellation token (asyncio.Event)

    Example:
        >>> context = ResolutionContext(output_dir=Path("install"))
        >>> async def generate(self, parents, context):
        ...     if context.is_cancelled():
        ...         raise ResolutionCancelledError("cancelled")
        ...     context.increment_metric("manifests_rendered", 4)
    """

    config: InstallerConfig = field(default_factory=InstallerConfig)
    output_dir: Path | None = None
    install_config: dict[str, Any] | None = None

    metrics: dict[str, Any] = field(default_factory=dict)

    cancel_token: asyncio.Event | None = None

    def is_cancelled(self) -> bool:
        """Check if resolution has been cancelled."""
        return self.cancel_token is not None and self.cancel_token.is_set()

    def increment_metric(self, key: str, delta: int | float = 1) -> None:
        """Increment numeric metric.

        Args:
            key: Metric key
            delta: Amount to increment (default: 1)
        """
        self.metrics[key] = self.metrics.get(key, 0) + delta

    def record_timing(self, kind: str, duration_ms: float) -> None:
        """Record how long ``kind`` took to produce, in milliseconds."""
        self.metrics.setdefault("timings_ms", {})[kind] = round(duration_ms, 3)
