"""Asset contract, registry, and dependency graph."""

from clustersmith.core.assets.asset import (
    Asset,
    AssetOutput,
    AssetSource,
    AssetState,
    GeneratedAsset,
    LoadableAsset,
    Parents,
)
from clustersmith.core.assets.files import AssetFile, FileFetcher
from clustersmith.core.assets.registry import AssetGraph, AssetRegistry

__all__ = [
    "Asset",
    "AssetFile",
    "AssetGraph",
    "AssetOutput",
    "AssetRegistry",
    "AssetSource",
    "AssetState",
    "FileFetcher",
    "GeneratedAsset",
    "LoadableAsset",
    "Parents",
]
