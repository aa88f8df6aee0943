"""Asset contract.

An asset is one installation artifact: the install config, the cluster ID,
the rendered manifests, an ignition payload. Each asset kind declares the
kinds it depends on and knows how to generate its content from theirs.
The resolver depends only on these protocols, never on concrete kinds.
"""

from __future__ import annotations

from collections.abc import Iterator, Mapping
from dataclasses import dataclass, field
from enum import Enum
from typing import TYPE_CHECKING, Any, Protocol, TypeVar, runtime_checkable

from pydantic import BaseModel

from clustersmith.core.assets.files import AssetFile, FileFetcher
from clustersmith.core.errors import UndeclaredDependencyError

if TYPE_CHECKING:
    from clustersmith.core.engine.context import ResolutionContext

T = TypeVar("T", bound=BaseModel)


class AssetState(str, Enum):
    """Lifecycle of an asset kind within one session."""

    UNRESOLVED = "unresolved"
    GENERATING = "generating"
    GENERATED = "generated"
    PURGED = "purged"
    FAILED = "failed"


class AssetSource(str, Enum):
    """Where a generated asset's content came from."""

    GENERATED = "generated"
    STATE = "state"
    DISK = "disk"


@dataclass(frozen=True)
class AssetOutput:
    """What an asset's generate (or load) step returns.

    Attributes:
        payload: Typed content, an instance of the asset's ``content_model``
        files: File blobs to materialize in the output directory
    """

    payload: BaseModel
    files: tuple[AssetFile, ...] = ()


@dataclass(frozen=True)
class GeneratedAsset:
    """Content of an asset kind once the resolver has it in hand."""

    kind: str
    payload: BaseModel
    files: tuple[AssetFile, ...]
    source: AssetSource
    digest: str
    metadata: dict[str, Any] = field(default_factory=dict, compare=False)

    def file(self, path: str) -> AssetFile:
        """Return the file blob at ``path``.

        Raises:
            KeyError: If the asset has no such file
        """
        for f in self.files:
            if f.path == path:
                return f
        raise KeyError(f"asset {self.kind!r} has no file {path!r}")


@runtime_checkable
class Asset(Protocol):
    """Protocol every asset kind implements.

    Example:
        >>> class ClusterIDAsset:
        ...     kind = "cluster-id"
        ...     name = "Cluster ID"
        ...     dependencies = ("install-config",)
        ...     transient = False
        ...     content_model = ClusterID
        ...
        ...     async def generate(self, parents, context):
        ...         ic = parents.typed("install-config", InstallConfig)
        ...         infra_id = generate_infra_id(ic.metadata.name)
        ...         return AssetOutput(payload=ClusterID(uuid=str(uuid4()), infra_id=infra_id))
    """

    kind: str
    name: str
    dependencies: tuple[str, ...]
    transient: bool
    content_model: type[BaseModel]

    async def generate(self, parents: Parents, context: ResolutionContext) -> AssetOutput:
        """Produce this asset's content from its dependencies.

        Called at most once per session, with every declared dependency
        present in ``parents``. Failures are raised, never returned.
        """
        ...


@runtime_checkable
class LoadableAsset(Asset, Protocol):
    """Asset that can adopt user-provided files from the install directory."""

    async def load(self, files: FileFetcher) -> AssetOutput | None:
        """Return content built from on-disk files, or None if none exist."""
        ...


class Parents(Mapping[str, BaseModel]):
    """Read-only view of an asset's generated dependencies.

    Only declared dependencies are visible. Reading anything else is a
    programming error in the asset and raises ``UndeclaredDependencyError``.
    """

    def __init__(self, owner: str, generated: Mapping[str, GeneratedAsset]) -> None:
        self._owner = owner
        self._generated = dict(generated)

    def __getitem__(self, kind: str) -> BaseModel:
        return self.asset(kind).payload

    def __iter__(self) -> Iterator[str]:
        return iter(self._generated)

    def __len__(self) -> int:
        return len(self._generated)

    def asset(self, kind: str) -> GeneratedAsset:
        """Return the full generated dependency (payload, files, digest)."""
        try:
            return self._generated[kind]
        except KeyError:
            raise UndeclaredDependencyError(self._owner, kind) from None

    def typed(self, kind: str, model_type: type[T]) -> T:
        """Return a dependency's payload checked against ``model_type``.

        Raises:
            UndeclaredDependencyError: If ``kind`` is not a declared dependency
            TypeError: If the payload is not a ``model_type``
        """
        payload = self[kind]
        if not isinstance(payload, model_type):
            raise TypeError(
                f"Expected {model_type.__name__} for {kind!r}, got {type(payload).__name__}"
            )
        return payload
