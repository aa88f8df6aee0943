"""Resolution session.

A session owns the in-memory content of every asset kind it has produced
and a handle to the state store. Fetching a kind returns, in order of
preference:

1. the content already held in memory,
2. the committed state record (its dependencies are not fetched at all),
3. user-provided files adopted by a loadable asset,
4. the output of the asset's generate step, persisted before it is returned.

Each kind sits behind its own asyncio.Lock, so concurrent fetches of one
kind generate it once and every caller receives the identical object.
Independent dependencies are fetched concurrently.
"""

from __future__ import annotations

import asyncio
from collections.abc import Iterable
from contextlib import nullcontext
from dataclasses import dataclass, field
import logging
from pathlib import Path
import time
from typing import Any

from pydantic import ValidationError

from clustersmith.core.assets.asset import (
    Asset,
    AssetOutput,
    AssetSource,
    AssetState,
    GeneratedAsset,
    LoadableAsset,
    Parents,
)
from clustersmith.core.assets.files import FileFetcher
from clustersmith.core.assets.registry import AssetGraph
from clustersmith.core.engine.context import ResolutionContext
from clustersmith.core.engine.materialize import TargetWriter
from clustersmith.core.engine.purge import PurgeReport, RetentionPolicy, purge_consumed
from clustersmith.core.engine.result import ResolutionResult
from clustersmith.core.errors import (
    AggregateAssetError,
    AssetError,
    AssetFetchError,
    AssetGenerationError,
    CycleError,
    GraphConfigurationError,
    NotGeneratedError,
    ResolutionCancelledError,
)
from clustersmith.core.io import (
    AbsolutePath,
    FileSystem,
    RealFileSystem,
    WriteResult,
    absolute_path,
)
from clustersmith.core.state import NullStateStore, StateRecord, StateStore, compute_digest
from clustersmith.core.utils.logging import get_logger

logger = logging.getLogger(__name__)


@dataclass
class _Entry:
    """Per-kind slot: generation gate plus what the gate protects."""

    lock: asyncio.Lock = field(default_factory=asyncio.Lock)
    state: AssetState = AssetState.UNRESOLVED
    generated: GeneratedAsset | None = None
    error: AssetError | None = None


def _combine(errors: list[AssetError]) -> AssetError:
    return errors[0] if len(errors) == 1 else AggregateAssetError(errors)


class AssetSession:
    """One resolution session over an asset graph.

    Args:
        graph: Validated dependency graph
        store: State store (default: NullStateStore, nothing persists)
        context: Shared context handed to every generate step
        fetcher: Reader for user-provided files; loadable assets only try
            to adopt files when one is given
        fs: Filesystem used to materialize and remove files
        policy: Retention policy for transient kinds

    Example:
        >>> graph = default_registry().build_graph()
        >>> session = AssetSession(graph, store=FSStateStore(fs, state_dir))
        >>> result = await session.resolve(["manifests"])
        >>> await session.write("manifests", install_dir)
    """

    def __init__(
        self,
        graph: AssetGraph,
        store: StateStore | None = None,
        context: ResolutionContext | None = None,
        fetcher: FileFetcher | None = None,
        fs: FileSystem | None = None,
        policy: RetentionPolicy | None = None,
    ) -> None:
        self.graph = graph
        self.store: StateStore = store or NullStateStore()
        self.context = context or ResolutionContext()
        self.fetcher = fetcher
        self.fs: FileSystem = fs or RealFileSystem()
        self.policy = policy or RetentionPolicy()

        self._entries: dict[str, _Entry] = {}
        self._sources: dict[str, AssetSource] = {}
        # kind -> dependencies its producer is currently waiting on
        self._waiting: dict[str, set[str]] = {}

        limit = self.context.config.engine.max_parallel_generate
        self._generate_slots = asyncio.Semaphore(limit) if limit else None

    # ------------------------------------------------------------------
    # Inspection
    # ------------------------------------------------------------------

    def _entry(self, kind: str) -> _Entry:
        entry = self._entries.get(kind)
        if entry is None:
            entry = self._entries[kind] = _Entry()
        return entry

    def state_of(self, kind: str) -> AssetState:
        """Current lifecycle state of ``kind`` in this session.

        Raises:
            UnknownAssetError: If ``kind`` is not in the graph
        """
        self.graph.asset(kind)
        entry = self._entries.get(kind)
        return entry.state if entry else AssetState.UNRESOLVED

    def get(self, kind: str) -> GeneratedAsset | None:
        """Content of ``kind`` if it is held in memory, else None."""
        entry = self._entries.get(kind)
        return entry.generated if entry else None

    @property
    def sources(self) -> dict[str, str]:
        """Map of kind -> where its content came from, for every kind produced."""
        return {kind: source.value for kind, source in self._sources.items()}

    # ------------------------------------------------------------------
    # Fetch
    # ------------------------------------------------------------------

    async def fetch(self, kind: str, _chain: tuple[str, ...] = ()) -> GeneratedAsset:
        """Return the content of ``kind``, producing it at most once per session.

        Args:
            kind: Asset kind to fetch
            _chain: Kinds currently being produced on this call path
                (internal, used to detect dependency cycles)

        Raises:
            UnknownAssetError: If ``kind`` is not in the graph
            CycleError: If ``kind`` is reached again while it is being produced
                or its current producer is waiting on this call path
            AssetGenerationError: If its load or generate step failed
            AssetFetchError: If one of its dependencies failed
            PersistenceError: If its state could not be read or written
        """
        if kind in _chain:
            start = _chain.index(kind)
            raise CycleError([*_chain[start:], kind])

        asset = self.graph.asset(kind)
        entry = self._entry(kind)
        if entry.generated is not None:
            return entry.generated

        if _chain and entry.lock.locked():
            # Held by another producer; waiting would deadlock if it waits on us
            path = self._wait_path(kind, _chain[-1])
            if path is not None:
                raise CycleError([_chain[-1], *path])

        async with entry.lock:
            # Another caller may have finished while we waited on the gate
            if entry.generated is not None:
                return entry.generated
            if entry.state is AssetState.FAILED and entry.error is not None:
                raise entry.error

            entry.state = AssetState.GENERATING
            try:
                generated = await self._produce(asset, (*_chain, kind))
            except AssetError as e:
                entry.state = AssetState.FAILED
                entry.error = e
                raise
            except BaseException:
                entry.state = AssetState.UNRESOLVED
                raise

            entry.generated = generated
            entry.state = AssetState.GENERATED
            self._sources[kind] = generated.source
            return generated

    async def _produce(self, asset: Asset, chain: tuple[str, ...]) -> GeneratedAsset:
        kind = asset.kind
        log = get_logger(__name__, asset_kind=kind)

        adopted = await self._adopt_state(asset)
        if adopted is not None:
            log.debug(f"Adopted {kind!r} from state (subtree not fetched)")
            self.context.increment_metric("from_state")
            return adopted

        parents = await self._fetch_dependencies(asset, chain)

        if self.context.is_cancelled():
            raise AssetGenerationError(
                kind, asset.name, ResolutionCancelledError("resolution cancelled")
            )

        start = time.perf_counter()
        output, source = await self._run(asset, parents)
        duration_ms = (time.perf_counter() - start) * 1000

        payload = output.payload.model_dump(mode="json")
        generated = GeneratedAsset(
            kind=kind,
            payload=output.payload,
            files=tuple(output.files),
            source=source,
            digest=compute_digest(kind, payload, output.files),
            metadata={"duration_ms": duration_ms},
        )

        # Persisted before any caller sees it
        await self.store.store(
            StateRecord(kind=kind, payload=payload, files=list(output.files)),
            content_model=_qualified_name(asset.content_model),
            source=source.value,
            generate_ms=duration_ms,
        )

        self.context.increment_metric("from_disk" if source is AssetSource.DISK else "generated")
        self.context.record_timing(kind, duration_ms)
        log.info(
            f"{'Loaded' if source is AssetSource.DISK else 'Generated'} {asset.name} "
            f"in {duration_ms:.0f}ms"
        )
        return generated

    async def _adopt_state(self, asset: Asset) -> GeneratedAsset | None:
        record = await self.store.load(asset.kind)
        if record is None:
            return None
        try:
            payload = asset.content_model.model_validate(record.payload)
        except ValidationError as e:
            logger.warning(
                f"Ignoring state for {asset.kind!r}: it no longer matches "
                f"{asset.content_model.__name__}: {e}"
            )
            return None
        return GeneratedAsset(
            kind=asset.kind,
            payload=payload,
            files=tuple(record.files),
            source=AssetSource.STATE,
            digest=record.digest(),
        )

    async def _fetch_dependencies(self, asset: Asset, chain: tuple[str, ...]) -> Parents:
        dependencies = tuple(asset.dependencies)
        if dependencies:
            logger.debug(f"Fetching dependencies of {asset.kind!r}: {list(dependencies)}")

        self._waiting[asset.kind] = set(dependencies)
        try:
            results = await asyncio.gather(
                *(self.fetch(dep, chain) for dep in dependencies),
                return_exceptions=True,
            )
        finally:
            self._waiting.pop(asset.kind, None)

        errors: list[AssetError] = []
        generated: dict[str, GeneratedAsset] = {}
        for dep, result in zip(dependencies, results, strict=True):
            if isinstance(result, GraphConfigurationError):
                raise result
            if isinstance(result, AssetError):
                errors.append(result)
            elif isinstance(result, BaseException):
                raise result
            else:
                generated[dep] = result

        if errors:
            cause = _combine(errors)
            raise AssetFetchError(asset.kind, asset.name, cause) from cause
        return Parents(asset.kind, generated)

    def _wait_path(self, start: str, target: str) -> list[str] | None:
        """Chain of in-progress dependency waits leading from ``start`` to ``target``."""
        stack = [[start]]
        seen: set[str] = set()
        while stack:
            path = stack.pop()
            kind = path[-1]
            if kind == target:
                return path
            if kind in seen:
                continue
            seen.add(kind)
            stack.extend([*path, dep] for dep in sorted(self._waiting.get(kind, ())))
        return None

    async def _run(self, asset: Asset, parents: Parents) -> tuple[AssetOutput, AssetSource]:
        output: AssetOutput | None = None
        source = AssetSource.GENERATED

        slots = self._generate_slots or nullcontext()
        async with slots:
            try:
                if self.fetcher is not None and isinstance(asset, LoadableAsset):
                    output = await asset.load(self.fetcher)
                    if output is not None:
                        source = AssetSource.DISK
                if output is None:
                    output = await asset.generate(parents, self.context)
            except Exception as e:
                raise AssetGenerationError(asset.kind, asset.name, e) from e

        if not isinstance(output, AssetOutput) or not isinstance(
            output.payload, asset.content_model
        ):
            raise AssetGenerationError(
                asset.kind,
                asset.name,
                TypeError(
                    f"expected AssetOutput with a {asset.content_model.__name__} payload, "
                    f"got {output!r}"
                ),
            )
        return output, source

    # ------------------------------------------------------------------
    # Resolve, purge, materialize
    # ------------------------------------------------------------------

    async def resolve(self, roots: Iterable[str]) -> ResolutionResult:
        """Fetch every root concurrently, then purge consumed transient kinds.

        Raises:
            UnknownAssetError: If a root is not in the graph
            CycleError: If roots being produced concurrently wait on each other
            AssetError: The root's error, or an AggregateAssetError when
                several roots failed
        """
        start = time.perf_counter()
        root_kinds = list(dict.fromkeys(roots))
        for root in root_kinds:
            self.graph.asset(root)

        logger.debug(f"Resolving {root_kinds}")
        results = await asyncio.gather(
            *(self.fetch(root) for root in root_kinds), return_exceptions=True
        )

        errors: list[AssetError] = []
        outputs: dict[str, Any] = {}
        for root, result in zip(root_kinds, results, strict=True):
            if isinstance(result, AssetError):
                errors.append(result)
            elif isinstance(result, BaseException):
                raise result
            else:
                outputs[root] = result
        if errors:
            for error in errors:
                if isinstance(error, GraphConfigurationError):
                    raise error
            raise _combine(errors)

        report = await self.purge()

        duration_ms = (time.perf_counter() - start) * 1000
        logger.debug(f"Resolved {root_kinds} in {duration_ms:.0f}ms")
        return ResolutionResult(
            roots=root_kinds,
            outputs=outputs,
            sources=self.sources,
            purged=report.purged,
            purge_errors=report.errors,
            total_duration_ms=duration_ms,
            metadata=dict(self.context.metrics),
        )

    async def purge(self) -> PurgeReport:
        """Run the retention policy (no-op when disabled in config)."""
        if not self.context.config.engine.purge_transient:
            return PurgeReport()
        output_dir = self._output_dir(None)
        return await purge_consumed(self, output_dir, self.policy)

    async def evict(self, kind: str) -> GeneratedAsset | None:
        """Drop ``kind`` from memory; returns what was held, if anything.

        A generated kind becomes ``purged`` and is produced again if fetched.
        """
        entry = self._entries.get(kind)
        if entry is None:
            return None
        async with entry.lock:
            generated = entry.generated
            entry.generated = None
            if generated is not None:
                entry.state = AssetState.PURGED
            return generated

    async def write(self, kind: str, output_dir: Path | str | None = None) -> list[WriteResult]:
        """Materialize the files of a generated kind.

        Args:
            kind: Generated asset kind
            output_dir: Target directory (default: context.output_dir)

        Raises:
            NotGeneratedError: If ``kind`` is not held in memory
            ValueError: If no output directory is given or set on the context
            MaterializationError: If a file cannot be written
        """
        generated = self.get(kind)
        if generated is None:
            raise NotGeneratedError(kind, self.state_of(kind).value)
        directory = self._require_output_dir(output_dir)
        return await TargetWriter(self.fs).write(generated, directory)

    def _output_dir(self, output_dir: Path | str | None) -> AbsolutePath | None:
        directory = output_dir if output_dir is not None else self.context.output_dir
        return absolute_path(directory) if directory is not None else None

    def _require_output_dir(self, output_dir: Path | str | None) -> AbsolutePath:
        directory = self._output_dir(output_dir)
        if directory is None:
            raise ValueError("No output directory given and none set on the context")
        return directory


def _qualified_name(model: type) -> str:
    return f"{model.__module__}.{model.__qualname__}"
