"""Installer assets and targets.

Example:
    >>> graph = default_registry().build_graph()
    >>> graph.topological_order(["manifests"])
    ['install-config', 'cluster-id', 'manifests']
"""

from clustersmith.core.assets.registry import AssetRegistry
from clustersmith.core.installer.cluster import (
    BootstrapToken,
    BootstrapTokenAsset,
    ClusterID,
    ClusterIDAsset,
    PlatformTemplateData,
    PlatformTemplateDataAsset,
    generate_infra_id,
)
from clustersmith.core.installer.ignition import (
    BootstrapIgnitionAsset,
    IgnitionConfig,
    PointerIgnitionAsset,
)
from clustersmith.core.installer.installconfig import INSTALL_CONFIG_FILENAME, InstallConfigAsset
from clustersmith.core.installer.manifests import Manifests, ManifestsAsset
from clustersmith.core.installer.metadata import ClusterMetadata, MetadataAsset
from clustersmith.core.installer.targets import TARGETS
from clustersmith.core.validation import Validator


def default_registry(platform_validators: dict[str, Validator] | None = None) -> AssetRegistry:
    """Registry holding every installer asset."""
    return AssetRegistry(
        [
            InstallConfigAsset(platform_validators),
            ClusterIDAsset(),
            PlatformTemplateDataAsset(),
            BootstrapTokenAsset(),
            ManifestsAsset(),
            BootstrapIgnitionAsset(),
            PointerIgnitionAsset("master"),
            PointerIgnitionAsset("worker"),
            MetadataAsset(),
        ]
    )


__all__ = [
    "INSTALL_CONFIG_FILENAME",
    "TARGETS",
    "BootstrapIgnitionAsset",
    "BootstrapToken",
    "BootstrapTokenAsset",
    "ClusterID",
    "ClusterIDAsset",
    "ClusterMetadata",
    "IgnitionConfig",
    "InstallConfigAsset",
    "Manifests",
    "ManifestsAsset",
    "MetadataAsset",
    "PlatformTemplateData",
    "PlatformTemplateDataAsset",
    "PointerIgnitionAsset",
    "default_registry",
    "generate_infra_id",
]
