"""Asset resolution engine.

Resolves asset kinds through memory, the state store, user-provided files
or their generate step, purges consumed transient assets and writes
generated files to the install directory.
"""

from clustersmith.core.engine.context import ResolutionContext
from clustersmith.core.engine.materialize import TargetWriter
from clustersmith.core.engine.purge import PurgeReport, RetentionPolicy, purge_consumed
from clustersmith.core.engine.result import ResolutionResult
from clustersmith.core.engine.session import AssetSession
from clustersmith.core.engine.targets import Target, build_target, find_target

__all__ = [
    # Core
    "AssetSession",
    "ResolutionContext",
    "ResolutionResult",
    # Retention
    "PurgeReport",
    "RetentionPolicy",
    "purge_consumed",
    # Materialization
    "Target",
    "TargetWriter",
    "build_target",
    "find_target",
]
