"""Retention policy for transient assets.

Some assets (one-time bootstrap credentials) must not stay recoverable
once everything that consumes them exists. After a resolution completes,
each consumed transient kind is evicted from memory, its state record is
purged, and any of its files already materialized are removed.
"""

from __future__ import annotations

from dataclasses import dataclass, field
import logging
from typing import TYPE_CHECKING

from clustersmith.core.assets.asset import AssetState
from clustersmith.core.assets.registry import AssetGraph
from clustersmith.core.engine.materialize import TargetWriter
from clustersmith.core.io import AbsolutePath

if TYPE_CHECKING:
    from clustersmith.core.engine.session import AssetSession

logger = logging.getLogger(__name__)


@dataclass
class PurgeReport:
    """Outcome of a purge pass.

    Attributes:
        purged: Kinds whose content was removed from memory or the state store
        errors: Map of kind -> error message for purges that failed
    """

    purged: list[str] = field(default_factory=list)
    errors: dict[str, str] = field(default_factory=dict)


class RetentionPolicy:
    """Selects transient kinds whose consumers have all been generated."""

    def candidates(self, graph: AssetGraph, session: AssetSession) -> list[str]:
        """Transient kinds with at least one dependent, all generated in ``session``.

        A transient kind nothing depends on is a root in its own right and
        is kept.
        """
        found: list[str] = []
        for kind in graph.transient_kinds():
            dependents = graph.dependents(kind)
            if dependents and all(
                session.state_of(dependent) is AssetState.GENERATED for dependent in dependents
            ):
                found.append(kind)
        return found


async def purge_consumed(
    session: AssetSession,
    output_dir: AbsolutePath | None = None,
    policy: RetentionPolicy | None = None,
) -> PurgeReport:
    """Purge every consumed transient kind of ``session``.

    Best-effort and idempotent: a kind that was never generated, or was
    already purged, is skipped. Failures are logged and reported, never
    raised.

    Args:
        session: Session whose resolution just completed
        output_dir: Install directory to remove materialized files from
        policy: Retention policy (default: RetentionPolicy())
    """
    policy = policy or RetentionPolicy()
    report = PurgeReport()

    for kind in policy.candidates(session.graph, session):
        try:
            stored = await session.store.exists(kind)
            generated = await session.evict(kind)
            if not stored and generated is None:
                logger.debug(f"Nothing to purge for {kind!r}")
                continue

            await session.store.purge(kind)
            if generated is not None and output_dir is not None:
                removed = await TargetWriter(session.fs).remove(generated, output_dir)
                if removed:
                    logger.debug(f"Removed materialized files of {kind!r}: {removed}")
        except Exception as e:
            logger.warning(f"Failed to purge transient asset {kind!r}: {e}")
            report.errors[kind] = str(e)
            continue

        report.purged.append(kind)
        logger.info(f"Purged transient asset {kind!r}")

    return report
