"""Ignition configs for the bootstrap, master and worker machines.

The bootstrap config embeds every common manifest and the one-time
bootstrap token. Master and worker configs are pointers that fetch their
real config from the machine config server once the cluster is up.
"""

from __future__ import annotations

import base64
import json
from typing import Any

from pydantic import BaseModel

from clustersmith.core.assets.asset import AssetOutput, Parents
from clustersmith.core.assets.files import AssetFile
from clustersmith.core.engine.context import ResolutionContext
from clustersmith.core.errors import ResolutionCancelledError
from clustersmith.core.installer.cluster import BootstrapToken, ClusterID, PlatformTemplateData
from clustersmith.core.types import InstallConfig

IGNITION_VERSION = "3.2.0"
MACHINE_CONFIG_SERVER_PORT = 22623
BOOTSTRAP_DIR = "/opt/openshift"


class IgnitionConfig(BaseModel):
    """Ignition config document for one machine role."""

    role: str
    config: dict[str, Any]


def data_url(contents: bytes) -> str:
    return "data:text/plain;charset=utf-8;base64," + base64.b64encode(contents).decode("ascii")


def ignition_file(path: str, contents: bytes, mode: int = 0o644) -> dict[str, Any]:
    return {
        "path": path,
        "mode": mode,
        "overwrite": True,
        "contents": {"source": data_url(contents)},
    }


def render_ignition(config: dict[str, Any]) -> bytes:
    # Sorted keys keep repeated writes byte-identical
    return json.dumps(config, sort_keys=True, separators=(",", ":")).encode("utf-8")


def _users(install_config: InstallConfig) -> dict[str, Any]:
    if not install_config.ssh_key:
        return {}
    return {"users": [{"name": "core", "sshAuthorizedKeys": [install_config.ssh_key.strip()]}]}


class BootstrapIgnitionAsset:
    """Ignition config for the temporary bootstrap machine (``bootstrap.ign``)."""

    kind = "bootstrap-ignition"
    name = "Bootstrap Ignition Config"
    dependencies = (
        "install-config",
        "cluster-id",
        "manifests",
        "bootstrap-token",
        "platform-template-data",
    )
    transient = False
    content_model = IgnitionConfig

    async def generate(self, parents: Parents, context: ResolutionContext) -> AssetOutput:
        install_config = parents.typed("install-config", InstallConfig)
        cluster_id = parents.typed("cluster-id", ClusterID)
        token = parents.typed("bootstrap-token", BootstrapToken)
        template_data = parents.typed("platform-template-data", PlatformTemplateData)
        manifests = parents.asset("manifests")

        if context.is_cancelled():
            raise ResolutionCancelledError("cancelled while rendering bootstrap ignition")

        files = [
            ignition_file(f"{BOOTSTRAP_DIR}/{f.path}", f.contents) for f in manifests.files
        ]
        files.append(
            ignition_file(
                f"{BOOTSTRAP_DIR}/auth/bootstrap-token", token.token.encode("utf-8"), mode=0o600
            )
        )
        files.append(
            ignition_file(
                f"{BOOTSTRAP_DIR}/platform-template-data.json",
                template_data.model_dump_json().encode("utf-8"),
            )
        )
        files.append(
            ignition_file(
                "/etc/hostname", f"{cluster_id.infra_id}-bootstrap\n".encode("utf-8")
            )
        )

        config = {
            "ignition": {"version": IGNITION_VERSION},
            "passwd": _users(install_config),
            "storage": {"files": files},
        }
        return AssetOutput(
            payload=IgnitionConfig(role="bootstrap", config=config),
            # Embeds the bootstrap token
            files=(AssetFile(path="bootstrap.ign", contents=render_ignition(config), mode=0o600),),
        )


class PointerIgnitionAsset:
    """Pointer ignition config for a machine role (``<role>.ign``)."""

    dependencies = ("install-config",)
    transient = False
    content_model = IgnitionConfig

    def __init__(self, role: str) -> None:
        self.role = role
        self.kind = f"{role}-ignition"
        self.name = f"{role.capitalize()} Ignition Config"

    async def generate(self, parents: Parents, context: ResolutionContext) -> AssetOutput:
        install_config = parents.typed("install-config", InstallConfig)
        source = (
            f"https://api-int.{install_config.cluster_domain}:{MACHINE_CONFIG_SERVER_PORT}"
            f"/config/{self.role}"
        )
        config = {
            "ignition": {
                "version": IGNITION_VERSION,
                "config": {"merge": [{"source": source}]},
            },
            "passwd": _users(install_config),
        }
        return AssetOutput(
            payload=IgnitionConfig(role=self.role, config=config),
            files=(AssetFile(path=f"{self.role}.ign", contents=render_ignition(config)),),
        )
