"""Tests for AssetRegistry and AssetGraph."""

import pytest

from clustersmith.core.assets import AssetRegistry
from clustersmith.core.errors import CycleError, GraphConfigurationError, UnknownAssetError


class TestRegistration:
    """Tests for registering asset kinds."""

    def test_duplicate_kind_rejected(self, make_asset):
        """Test registering a kind twice raises ValueError."""
        registry = AssetRegistry([make_asset("a")])
        with pytest.raises(ValueError, match="already registered"):
            registry.register(make_asset("a"))

    def test_replace_allows_override(self, make_asset):
        """Test replace=True swaps the strategy object."""
        replacement = make_asset("a")
        registry = AssetRegistry([make_asset("a")])
        registry.register(replacement, replace=True)

        assert registry.get("a") is replacement
        assert len(registry) == 1

    def test_get_unknown_kind(self):
        """Test looking up an unregistered kind raises UnknownAssetError."""
        with pytest.raises(UnknownAssetError, match="unknown asset kind 'missing'"):
            AssetRegistry().get("missing")


class TestGraphValidation:
    """Tests for fail-fast graph construction."""

    def test_unknown_dependency(self, make_asset, make_registry):
        """Test a dependency on an unregistered kind fails construction."""
        registry = make_registry(make_asset("a", ["ghost"]))

        with pytest.raises(UnknownAssetError) as exc_info:
            registry.build_graph()

        assert exc_info.value.kind == "ghost"
        assert exc_info.value.referenced_by == "a"

    def test_two_node_cycle_names_both_members(self, make_asset, make_registry):
        """Test A -> B -> A fails with both kinds named."""
        registry = make_registry(make_asset("a", ["b"]), make_asset("b", ["a"]))

        with pytest.raises(CycleError) as exc_info:
            registry.build_graph()

        assert set(exc_info.value.members) == {"a", "b"}
        assert exc_info.value.members[0] == exc_info.value.members[-1]
        assert "a -> b -> a" in str(exc_info.value)

    def test_self_dependency_is_a_cycle(self, make_asset, make_registry):
        """Test an asset depending on itself is rejected."""
        with pytest.raises(CycleError, match="a -> a"):
            make_registry(make_asset("a", ["a"])).build_graph()

    def test_cycle_is_configuration_error(self, make_asset, make_registry):
        """Test cycles share the configuration error base class."""
        registry = make_registry(
            make_asset("root", ["x"]), make_asset("x", ["y"]), make_asset("y", ["x"])
        )
        with pytest.raises(GraphConfigurationError):
            registry.build_graph()


class TestGraphQueries:
    """Tests for graph traversal helpers."""

    @pytest.fixture
    def graph(self, make_asset, make_registry):
        return make_registry(
            make_asset("config"),
            make_asset("token", transient=True),
            make_asset("id", ["config"]),
            make_asset("ignition", ["config", "id", "token"]),
        ).build_graph()

    def test_dependents(self, graph):
        """Test dependents lists direct consumers only."""
        assert sorted(graph.dependents("config")) == ["id", "ignition"]
        assert graph.dependents("ignition") == []

    def test_topological_order_puts_dependencies_first(self, graph):
        """Test every kind appears after all of its dependencies."""
        order = graph.topological_order()
        for kind in order:
            for dep in graph.dependencies(kind):
                assert order.index(dep) < order.index(kind)

    def test_topological_order_restricted_to_roots(self, graph):
        """Test only kinds reachable from the roots are listed."""
        assert graph.topological_order(["id"]) == ["config", "id"]

    def test_transient_kinds(self, graph):
        assert graph.transient_kinds() == ["token"]

    def test_to_dot(self, graph):
        """Test DOT output has every edge and marks transient kinds dashed."""
        dot = graph.to_dot()

        assert dot.startswith("digraph assets {")
        assert '"ignition" -> "token";' in dot
        assert '"id" -> "config";' in dot
        assert '"token" [label="Token", style="dashed"];' in dot
