"""Shared pytest fixtures for clustersmith tests."""

from __future__ import annotations

import asyncio
from collections.abc import Callable, Iterable
from typing import Any

from pydantic import BaseModel
import pytest

from clustersmith.core.assets import AssetFile, AssetOutput, AssetRegistry, Parents
from clustersmith.core.engine import ResolutionContext
from clustersmith.core.io import FakeFileSystem, absolute_path

# ============================================================================
# Stub assets
# ============================================================================


class Value(BaseModel):
    """Payload of stub assets."""

    value: str


class RecordingAsset:
    """Stub asset that counts generate calls.

    Its value is its kind joined with the values of its dependencies, so a
    test can see exactly which content flowed into it.
    """

    content_model = Value

    def __init__(
        self,
        kind: str,
        dependencies: Iterable[str] = (),
        transient: bool = False,
        fail: Exception | None = None,
        files: Iterable[AssetFile] = (),
        delay: float = 0.0,
    ) -> None:
        self.kind = kind
        self.name = kind.replace("-", " ").title()
        self.dependencies = tuple(dependencies)
        self.transient = transient
        self.fail = fail
        self.files = tuple(files)
        self.delay = delay
        self.calls = 0

    async def generate(self, parents: Parents, context: ResolutionContext) -> AssetOutput:
        self.calls += 1
        if self.delay:
            await asyncio.sleep(self.delay)
        if self.fail is not None:
            raise self.fail
        parts = [self.kind, *(parents.typed(dep, Value).value for dep in self.dependencies)]
        return AssetOutput(payload=Value(value="+".join(parts)), files=self.files)


@pytest.fixture
def make_asset() -> Callable[..., RecordingAsset]:
    """Factory for RecordingAsset instances."""
    return RecordingAsset


@pytest.fixture
def make_registry() -> Callable[..., AssetRegistry]:
    """Factory building a registry from assets."""

    def _make(*assets: Any) -> AssetRegistry:
        return AssetRegistry(assets)

    return _make


# ============================================================================
# Filesystem fixtures
# ============================================================================


@pytest.fixture
def fs() -> FakeFileSystem:
    """Provide fresh FakeFileSystem instance."""
    return FakeFileSystem()


@pytest.fixture
def install_dir():
    """Install directory inside the fake filesystem."""
    return absolute_path("/install")


# ============================================================================
# Install config fixtures
# ============================================================================


PULL_SECRET = '{"auths": {"registry.example.com": {"auth": "dXNlcjpwYXNz"}}}'


@pytest.fixture
def install_config_document() -> dict[str, Any]:
    """Valid AWS install config document (camelCase, as users write it)."""
    return {
        "apiVersion": "v1",
        "metadata": {"name": "demo"},
        "baseDomain": "example.com",
        "controlPlane": {"name": "master", "replicas": 3},
        "compute": [{"name": "worker", "replicas": 2}],
        "platform": {
            "aws": {
                "region": "us-east-1",
                "subnets": [{"id": "subnet-0a1b"}, {"id": "subnet-2c3d"}],
            }
        },
        "pullSecret": PULL_SECRET,
        "sshKey": "ssh-ed25519 AAAAC3NzaC1lZDI1NTE5AAAAIExample demo@example.com",
    }
