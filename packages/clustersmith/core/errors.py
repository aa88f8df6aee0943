"""Exception hierarchy for asset resolution.

Every error raised by the engine carries the identity of the asset kind it
concerns, so a failure deep in the graph can be mapped back to a specific
input. Errors from dependencies are wrapped, never replaced:

    failed to fetch dependency of "Bootstrap Ignition Config":
    failed to generate asset "Install Config":
    platform.aws.region: Required value: region must be specified
"""

from __future__ import annotations

from collections.abc import Sequence
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from clustersmith.core.validation import FieldErrorList


class AssetError(Exception):
    """Base class for all asset engine errors."""


# ============================================================================
# Configuration errors (graph construction time, never retried)
# ============================================================================


class GraphConfigurationError(AssetError):
    """Dependency graph is malformed."""


class CycleError(GraphConfigurationError):
    """Dependency declarations form a cycle.

    Attributes:
        members: Kinds along the cycle, first kind repeated at the end
    """

    def __init__(self, members: Sequence[str]) -> None:
        self.members = tuple(members)
        super().__init__(f"dependency cycle detected: {' -> '.join(self.members)}")


class UnknownAssetError(GraphConfigurationError):
    """A kind was requested or referenced but never registered."""

    def __init__(self, kind: str, referenced_by: str | None = None) -> None:
        self.kind = kind
        self.referenced_by = referenced_by
        if referenced_by is None:
            message = f"unknown asset kind {kind!r}"
        else:
            message = f"asset {referenced_by!r} depends on unknown asset kind {kind!r}"
        super().__init__(message)


class UndeclaredDependencyError(AssetError, KeyError):
    """An asset read a parent it did not declare as a dependency."""

    def __init__(self, kind: str, requested: str) -> None:
        self.kind = kind
        self.requested = requested
        super().__init__(f"asset {kind!r} read undeclared dependency {requested!r}")

    def __str__(self) -> str:
        return str(self.args[0])


# ============================================================================
# Generation errors
# ============================================================================


class AssetGenerationError(AssetError):
    """An asset's generate (or load) step failed."""

    def __init__(self, kind: str, name: str, cause: BaseException) -> None:
        self.kind = kind
        self.name = name
        self.cause = cause
        super().__init__(f'failed to generate asset "{name}": {cause}')

    @property
    def origin(self) -> str:
        """Kind whose generation failed."""
        return self.kind

    @property
    def field_errors(self) -> FieldErrorList | None:
        """Field-scoped validation errors, if the cause carried them."""
        if isinstance(self.cause, InvalidConfigError):
            return self.cause.field_errors
        return None


class AssetFetchError(AssetError):
    """A dependency of an asset could not be fetched."""

    def __init__(self, kind: str, name: str, cause: AssetError) -> None:
        self.kind = kind
        self.name = name
        self.cause = cause
        super().__init__(f'failed to fetch dependency of "{name}": {cause}')

    @property
    def origin(self) -> str | tuple[str, ...]:
        """Kind (or kinds, for aggregated failures) where the failure started."""
        return origin_of(self.cause)


class AggregateAssetError(AssetError):
    """Several independent failures combined into one error."""

    def __init__(self, errors: Sequence[AssetError]) -> None:
        self.errors = tuple(errors)
        super().__init__("[" + ", ".join(str(e) for e in self.errors) + "]")

    @property
    def origin(self) -> tuple[str, ...]:
        kinds: list[str] = []
        for error in self.errors:
            found = origin_of(error)
            for kind in found if isinstance(found, tuple) else (found,):
                if kind not in kinds:
                    kinds.append(kind)
        return tuple(kinds)


class InvalidConfigError(AssetError):
    """Validation collaborator reported field-scoped errors."""

    def __init__(self, field_errors: FieldErrorList, source: str | None = None) -> None:
        self.field_errors = field_errors
        self.source = source
        prefix = f'invalid "{source}" file: ' if source else ""
        super().__init__(f"{prefix}{field_errors}")


class ResolutionCancelledError(AssetError):
    """Resolution was cancelled through the context's cancel token."""


class NotGeneratedError(AssetError):
    """An operation needs an asset the session has not generated."""

    def __init__(self, kind: str, state: str) -> None:
        self.kind = kind
        self.state = state
        super().__init__(f"asset {kind!r} is not generated (state: {state})")


# ============================================================================
# Persistence errors
# ============================================================================


class PersistenceError(AssetError):
    """State store could not read or write a record."""

    def __init__(self, kind: str, action: str, cause: BaseException) -> None:
        self.kind = kind
        self.action = action
        self.cause = cause
        super().__init__(f"failed to {action} state for asset {kind!r}: {cause}")

    @property
    def origin(self) -> str:
        return self.kind


class MaterializationError(AssetError):
    """A generated file could not be written to (or removed from) the output directory."""

    def __init__(self, kind: str, path: str, cause: BaseException) -> None:
        self.kind = kind
        self.path = path
        self.cause = cause
        super().__init__(f"failed to materialize {path!r} for asset {kind!r}: {cause}")

    @property
    def origin(self) -> str:
        return self.kind


def origin_of(error: BaseException) -> str | tuple[str, ...]:
    """Return the kind (or kinds) where a wrapped failure started.

    Args:
        error: Any engine error

    Returns:
        The originating kind, a tuple of kinds for aggregated failures, or
        an empty string when the error carries no kind
    """
    origin = getattr(error, "origin", None)
    if origin is not None:
        return origin  # type: ignore[no-any-return]
    return getattr(error, "kind", "")
