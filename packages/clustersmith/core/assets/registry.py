"""Asset registry and dependency graph.

The registry maps each kind to the strategy object that generates it.
Building a graph from the registry validates the declarations once, up
front: references to unregistered kinds and dependency cycles are
configuration errors and fail before anything is generated.
"""

from __future__ import annotations

from collections.abc import Iterable
import logging

from clustersmith.core.assets.asset import Asset
from clustersmith.core.errors import CycleError, UnknownAssetError

logger = logging.getLogger(__name__)


class AssetRegistry:
    """Open registry of asset kinds.

    Example:
        >>> registry = AssetRegistry()
        >>> registry.register(InstallConfigAsset())
        >>> registry.register(ClusterIDAsset())
        >>> graph = registry.build_graph()
    """

    def __init__(self, assets: Iterable[Asset] = ()) -> None:
        self._assets: dict[str, Asset] = {}
        for asset in assets:
            self.register(asset)

    def register(self, asset: Asset, *, replace: bool = False) -> None:
        """Register an asset kind.

        Args:
            asset: Asset strategy object
            replace: Allow overriding an existing registration (tests, plugins)

        Raises:
            ValueError: If the kind is already registered and replace is False
        """
        if asset.kind in self._assets and not replace:
            raise ValueError(f"Asset kind {asset.kind!r} already registered")
        self._assets[asset.kind] = asset
        logger.debug(f"Registered asset {asset.kind!r} deps={list(asset.dependencies)}")

    def get(self, kind: str) -> Asset:
        try:
            return self._assets[kind]
        except KeyError:
            raise UnknownAssetError(kind) from None

    def kinds(self) -> list[str]:
        return list(self._assets)

    def __contains__(self, kind: object) -> bool:
        return kind in self._assets

    def __len__(self) -> int:
        return len(self._assets)

    def build_graph(self) -> AssetGraph:
        """Validate declarations and return the dependency graph.

        Raises:
            UnknownAssetError: If a dependency names an unregistered kind
            CycleError: If dependencies form a cycle
        """
        return AssetGraph(dict(self._assets))


class AssetGraph:
    """Validated DAG over asset kinds."""

    def __init__(self, assets: dict[str, Asset]) -> None:
        self._assets = assets
        self._dependents: dict[str, list[str]] = {kind: [] for kind in assets}

        for kind, asset in assets.items():
            for dep in asset.dependencies:
                if dep not in assets:
                    raise UnknownAssetError(dep, referenced_by=kind)
                if kind not in self._dependents[dep]:
                    self._dependents[dep].append(kind)

        self._detect_cycles()

    def _detect_cycles(self) -> None:
        """Detect circular dependencies using DFS.

        Raises:
            CycleError: Naming the kinds that form the cycle
        """
        WHITE, GRAY, BLACK = 0, 1, 2
        color: dict[str, int] = {kind: WHITE for kind in self._assets}

        def dfs(node: str, path: list[str]) -> None:
            if color[node] == GRAY:
                start = path.index(node)
                raise CycleError([*path[start:], node])
            if color[node] == BLACK:
                return

            color[node] = GRAY
            for dep in self._assets[node].dependencies:
                dfs(dep, [*path, node])
            color[node] = BLACK

        for kind in self._assets:
            if color[kind] == WHITE:
                dfs(kind, [])

    def __contains__(self, kind: object) -> bool:
        return kind in self._assets

    def kinds(self) -> list[str]:
        return list(self._assets)

    def asset(self, kind: str) -> Asset:
        try:
            return self._assets[kind]
        except KeyError:
            raise UnknownAssetError(kind) from None

    def dependencies(self, kind: str) -> tuple[str, ...]:
        return tuple(self.asset(kind).dependencies)

    def dependents(self, kind: str) -> list[str]:
        """Kinds that declare ``kind`` as a direct dependency."""
        self.asset(kind)
        return list(self._dependents[kind])

    def transient_kinds(self) -> list[str]:
        return [kind for kind, asset in self._assets.items() if asset.transient]

    def topological_order(self, roots: Iterable[str] | None = None) -> list[str]:
        """Kinds reachable from ``roots`` (default: all), dependencies first."""
        order: list[str] = []
        visited: set[str] = set()

        def visit(kind: str) -> None:
            if kind in visited:
                return
            visited.add(kind)
            for dep in self.dependencies(kind):
                visit(dep)
            order.append(kind)

        for root in self.kinds() if roots is None else roots:
            visit(root)
        return order

    def to_dot(self, roots: Iterable[str] | None = None) -> str:
        """Render the graph (or the part reachable from ``roots``) as Graphviz DOT.

        Edges point from an asset to each of its dependencies; transient
        assets are drawn dashed.
        """
        kinds = self.topological_order(roots)
        lines = ["digraph assets {", "  rankdir=LR;"]
        for kind in kinds:
            asset = self._assets[kind]
            style = ', style="dashed"' if asset.transient else ""
            lines.append(f'  "{kind}" [label="{asset.name}"{style}];')
        for kind in kinds:
            for dep in self.dependencies(kind):
                lines.append(f'  "{kind}" -> "{dep}";')
        lines.append("}")
        return "\n".join(lines) + "\n"
