"""Tests for purging consumed transient assets."""

from __future__ import annotations

import pytest

from clustersmith.core.assets import AssetFile, AssetState
from clustersmith.core.config import EngineConfig, InstallerConfig
from clustersmith.core.engine import AssetSession, ResolutionContext, RetentionPolicy
from clustersmith.core.io import FakeFileSystem, absolute_path
from clustersmith.core.state import FSStateStore


class PurgeFailingStore(FSStateStore):
    async def purge(self, kind: str) -> None:
        raise OSError(13, "Permission denied")


@pytest.fixture
def state_store(fs: FakeFileSystem):
    return FSStateStore(fs, absolute_path("/install/.state"))


@pytest.fixture
def token_graph(make_asset, make_registry):
    """token (transient) consumed by ign; other is unrelated."""

    def _build(**token_kwargs):
        token = make_asset("token", transient=True, **token_kwargs)
        assets = (token, make_asset("ign", ["token"]), make_asset("other"))
        return token, make_registry(*assets).build_graph()

    return _build


class TestRetentionPolicy:
    async def test_candidates_need_all_dependents_generated(self, make_asset, make_registry):
        """Test a transient kind is kept while any consumer is outstanding."""
        graph = make_registry(
            make_asset("token", transient=True),
            make_asset("one", ["token"]),
            make_asset("two", ["token"]),
            make_asset("lonely", transient=True),
        ).build_graph()
        session = AssetSession(graph)

        await session.fetch("one")
        assert RetentionPolicy().candidates(graph, session) == []

        await session.fetch("two")
        assert RetentionPolicy().candidates(graph, session) == ["token"]


class TestPurgeAfterResolve:
    """Tests for the purge pass run by resolve."""

    async def test_consumed_token_purged(self, token_graph, state_store):
        """Test the token is gone from memory and state; its consumer stays."""
        _, graph = token_graph()
        session = AssetSession(graph, store=state_store)

        result = await session.resolve(["ign"])

        assert result.purged == ["token"]
        assert result.purge_errors == {}
        assert session.state_of("token") is AssetState.PURGED
        assert session.get("token") is None
        assert not await state_store.exists("token")
        assert await state_store.exists("ign")

    async def test_refetch_after_purge_generates_again(self, token_graph):
        """Test a purged kind is produced afresh when fetched again."""
        token, graph = token_graph()
        session = AssetSession(graph)
        await session.resolve(["ign"])

        await session.fetch("token")

        assert token.calls == 2
        assert session.state_of("token") is AssetState.GENERATED

    async def test_unconsumed_transient_kept(self, make_asset, make_registry, state_store):
        """Test a transient kind with an outstanding consumer is not purged."""
        session = AssetSession(
            make_registry(
                make_asset("token", transient=True),
                make_asset("one", ["token"]),
                make_asset("two", ["token"]),
            ).build_graph(),
            store=state_store,
        )

        result = await session.resolve(["one"])

        assert result.purged == []
        assert await state_store.exists("token")
        assert session.state_of("token") is AssetState.GENERATED

    async def test_transient_without_dependents_kept(self, make_asset, make_registry):
        session = AssetSession(make_registry(make_asset("lonely", transient=True)).build_graph())

        result = await session.resolve(["lonely"])

        assert result.purged == []
        assert session.get("lonely") is not None

    async def test_nothing_to_purge_when_consumer_adopted(self, token_graph, state_store):
        """Test a second invocation that adopts the consumer has nothing to purge."""
        _, graph = token_graph()
        await AssetSession(graph, store=state_store).resolve(["ign"])

        token, graph = token_graph()
        session = AssetSession(graph, store=state_store)
        result = await session.resolve(["ign"])

        assert token.calls == 0
        assert result.purged == []
        assert result.sources == {"ign": "state"}

    async def test_purge_failure_reported_not_raised(self, token_graph, fs):
        """Test a failing purge leaves the resolution successful."""
        _, graph = token_graph()
        session = AssetSession(graph, store=PurgeFailingStore(fs, absolute_path("/state")))

        result = await session.resolve(["ign"])

        assert result.get_output("ign").payload.value == "ign+token"
        assert result.purged == []
        assert "Permission denied" in result.purge_errors["token"]

    async def test_purge_disabled(self, token_graph, state_store):
        _, graph = token_graph()
        config = InstallerConfig(engine=EngineConfig(purge_transient=False))
        context = ResolutionContext(config=config)
        session = AssetSession(graph, store=state_store, context=context)

        result = await session.resolve(["ign"])

        assert result.purged == []
        assert await state_store.exists("token")

    async def test_materialized_files_removed(self, token_graph, fs, install_dir):
        """Test files of a purged kind already written to the install dir are deleted."""
        secret = AssetFile(path="auth/token", contents=b"s3cret", mode=0o600)
        _, graph = token_graph(files=[secret])
        await fs.write_bytes(fs.join(install_dir, "unrelated.txt"), b"keep me")
        session = AssetSession(
            graph, context=ResolutionContext(output_dir=install_dir), fs=fs
        )

        await session.fetch("token")
        await session.write("token")
        assert await fs.exists(fs.join(install_dir, "auth", "token"))

        await session.resolve(["ign"])

        assert not await fs.exists(fs.join(install_dir, "auth", "token"))
        assert await fs.read_bytes(fs.join(install_dir, "unrelated.txt")) == b"keep me"

    async def test_purge_is_idempotent(self, token_graph, state_store):
        _, graph = token_graph()
        session = AssetSession(graph, store=state_store)
        await session.resolve(["ign"])

        report = await session.purge()

        assert report.purged == []
        assert report.errors == {}
