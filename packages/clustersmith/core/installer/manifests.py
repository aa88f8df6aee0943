"""Common cluster manifests rendered from the install config."""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, Field
import yaml

from clustersmith.core.assets.asset import AssetOutput, Parents
from clustersmith.core.assets.files import AssetFile
from clustersmith.core.engine.context import ResolutionContext
from clustersmith.core.installer.cluster import ClusterID
from clustersmith.core.types import InstallConfig

MANIFESTS_DIR = "manifests"


class Manifests(BaseModel):
    """Names of the rendered manifest files, relative to ``manifests/``."""

    names: list[str] = Field(default_factory=list)


def _render(document: dict[str, Any]) -> bytes:
    return yaml.safe_dump(document, sort_keys=False).encode("utf-8")


def cluster_config(install_config: InstallConfig) -> dict[str, Any]:
    """ConfigMap carrying the install config the cluster was built from."""
    document = install_config.to_document()
    # Never embed the pull secret in a world-readable manifest
    document.pop("pullSecret", None)
    return {
        "apiVersion": "v1",
        "kind": "ConfigMap",
        "metadata": {"name": "cluster-config-v1", "namespace": "kube-system"},
        "data": {"install-config": yaml.safe_dump(document, sort_keys=False)},
    }


def infrastructure(install_config: InstallConfig, cluster_id: ClusterID) -> dict[str, Any]:
    domain = install_config.cluster_domain
    return {
        "apiVersion": "config.openshift.io/v1",
        "kind": "Infrastructure",
        "metadata": {"name": "cluster"},
        "spec": {"platformSpec": {"type": install_config.platform.name()}},
        "status": {
            "infrastructureName": cluster_id.infra_id,
            "apiServerURL": f"https://api.{domain}:6443",
            "apiServerInternalURI": f"https://api-int.{domain}:6443",
        },
    }


def dns(install_config: InstallConfig) -> dict[str, Any]:
    return {
        "apiVersion": "config.openshift.io/v1",
        "kind": "DNS",
        "metadata": {"name": "cluster"},
        "spec": {"baseDomain": install_config.cluster_domain},
    }


def network(install_config: InstallConfig) -> dict[str, Any]:
    networking = install_config.networking
    return {
        "apiVersion": "config.openshift.io/v1",
        "kind": "Network",
        "metadata": {"name": "cluster"},
        "spec": {
            "networkType": networking.network_type,
            "clusterNetwork": [
                {"cidr": entry.cidr, "hostPrefix": entry.host_prefix}
                for entry in networking.cluster_network
            ],
            "serviceNetwork": list(networking.service_network),
        },
    }


class ManifestsAsset:
    """Renders the cluster-wide configuration manifests into ``manifests/``."""

    kind = "manifests"
    name = "Common Manifests"
    dependencies = ("install-config", "cluster-id")
    transient = False
    content_model = Manifests

    async def generate(self, parents: Parents, context: ResolutionContext) -> AssetOutput:
        install_config = parents.typed("install-config", InstallConfig)
        cluster_id = parents.typed("cluster-id", ClusterID)

        documents = {
            "cluster-config.yaml": cluster_config(install_config),
            "cluster-infrastructure-02-config.yml": infrastructure(install_config, cluster_id),
            "cluster-dns-02-config.yml": dns(install_config),
            "cluster-network-02-config.yml": network(install_config),
        }
        files = tuple(
            AssetFile(path=f"{MANIFESTS_DIR}/{name}", contents=_render(document))
            for name, document in documents.items()
        )
        context.increment_metric("manifests_rendered", len(files))
        return AssetOutput(payload=Manifests(names=list(documents)), files=files)
