"""Named targets: sets of root kinds resolved and materialized together."""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass
import logging

from clustersmith.core.engine.result import ResolutionResult
from clustersmith.core.engine.session import AssetSession

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Target:
    """A named set of root kinds.

    Attributes:
        name: Name used on the command line
        roots: Kinds resolved, then materialized, in order
        description: One-line help text
    """

    name: str
    roots: tuple[str, ...]
    description: str = ""


def find_target(targets: Iterable[Target], name: str) -> Target:
    """Return the target called ``name``.

    Raises:
        KeyError: If no target has that name
    """
    for target in targets:
        if target.name == name:
            return target
    raise KeyError(f"Unknown target '{name}'")


async def build_target(session: AssetSession, target: Target) -> ResolutionResult:
    """Resolve a target's roots and write their files to the session's output directory.

    Kinds already committed to the state store are adopted, not generated,
    so a render-only target followed by a full build reuses everything the
    first invocation produced.
    """
    logger.info(f"Building target {target.name!r}")
    result = await session.resolve(target.roots)
    for kind in target.roots:
        # Roots purged as consumed transient assets have nothing left to write
        if session.get(kind) is not None:
            await session.write(kind)
    return result
