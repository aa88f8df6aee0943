"""Cluster metadata (``metadata.json``), needed later to tear the cluster down."""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from clustersmith.core.assets.asset import AssetOutput, Parents
from clustersmith.core.assets.files import AssetFile
from clustersmith.core.engine.context import ResolutionContext
from clustersmith.core.installer.cluster import ClusterID
from clustersmith.core.types import InstallConfig

METADATA_FILENAME = "metadata.json"


class ClusterMetadata(BaseModel):
    cluster_name: str = Field(alias="clusterName")
    cluster_id: str = Field(alias="clusterID")
    infra_id: str = Field(alias="infraID")
    platform: dict[str, Any] = Field(default_factory=dict)

    model_config = ConfigDict(populate_by_name=True)


def platform_metadata(install_config: InstallConfig, cluster_id: ClusterID) -> dict[str, Any]:
    """Identifiers destroy needs to find the platform resources."""
    platform = install_config.platform
    if platform.aws is not None:
        return {
            "aws": {
                "region": platform.aws.region,
                "identifier": [{f"kubernetes.io/cluster/{cluster_id.infra_id}": "owned"}],
            }
        }
    if platform.gcp is not None:
        return {"gcp": {"region": platform.gcp.region, "projectID": platform.gcp.project_id}}
    return {}


class MetadataAsset:
    kind = "metadata"
    name = "Metadata"
    dependencies = ("install-config", "cluster-id")
    transient = False
    content_model = ClusterMetadata

    async def generate(self, parents: Parents, context: ResolutionContext) -> AssetOutput:
        install_config = parents.typed("install-config", InstallConfig)
        cluster_id = parents.typed("cluster-id", ClusterID)

        metadata = ClusterMetadata(
            cluster_name=install_config.metadata.name,
            cluster_id=cluster_id.uuid,
            infra_id=cluster_id.infra_id,
            platform=platform_metadata(install_config, cluster_id),
        )
        contents = metadata.model_dump_json(by_alias=True, indent=2).encode("utf-8")
        return AssetOutput(
            payload=metadata,
            files=(AssetFile(path=METADATA_FILENAME, contents=contents, mode=0o640),),
        )
