"""Cluster identity, platform template data and the bootstrap token."""

from __future__ import annotations

import re
import secrets
import string
import uuid

from pydantic import BaseModel, Field

from clustersmith.core.assets.asset import AssetOutput, Parents
from clustersmith.core.engine.context import ResolutionContext
from clustersmith.core.types import InstallConfig, UserProvisionedDNS

INFRA_ID_MAX_LEN = 27
_INFRA_ID_SUFFIX_LEN = 5
_NON_ALNUM = re.compile(r"[^a-z0-9-]+")


class ClusterID(BaseModel):
    """Identity of the cluster being installed.

    Attributes:
        uuid: Cluster UUID reported to telemetry
        infra_id: Unique name prefix for infrastructure resources
    """

    uuid: str
    infra_id: str


def generate_infra_id(base: str, max_len: int = INFRA_ID_MAX_LEN) -> str:
    """Derive a short unique resource prefix from the cluster name.

    Example:
        >>> generate_infra_id("my.very-long-cluster-name-for-testing")
        'my-very-long-cluster-x7k2q'
    """
    suffix = "".join(
        secrets.choice(string.ascii_lowercase + string.digits) for _ in range(_INFRA_ID_SUFFIX_LEN)
    )
    prefix = _NON_ALNUM.sub("-", base.lower())[: max_len - _INFRA_ID_SUFFIX_LEN - 1]
    prefix = prefix.rstrip("-")
    return f"{prefix}-{suffix}" if prefix else suffix


class ClusterIDAsset:
    kind = "cluster-id"
    name = "Cluster ID"
    dependencies = ("install-config",)
    transient = False
    content_model = ClusterID

    async def generate(self, parents: Parents, context: ResolutionContext) -> AssetOutput:
        install_config = parents.typed("install-config", InstallConfig)
        return AssetOutput(
            payload=ClusterID(
                uuid=str(uuid.uuid4()),
                infra_id=generate_infra_id(install_config.metadata.name),
            )
        )


class PlatformTemplateData(BaseModel):
    """Platform values the bootstrap templates need."""

    platform: str = ""
    user_provisioned_dns: bool = False


class PlatformTemplateDataAsset:
    kind = "platform-template-data"
    name = "Platform Template Data"
    dependencies = ("install-config",)
    transient = False
    content_model = PlatformTemplateData

    async def generate(self, parents: Parents, context: ResolutionContext) -> AssetOutput:
        install_config = parents.typed("install-config", InstallConfig)
        gcp = install_config.platform.gcp
        return AssetOutput(
            payload=PlatformTemplateData(
                platform=install_config.platform.name(),
                user_provisioned_dns=(
                    gcp is not None and gcp.user_provisioned_dns is UserProvisionedDNS.ENABLED
                ),
            )
        )


class BootstrapToken(BaseModel):
    """One-time credential the bootstrap node presents to the cluster."""

    token: str = Field(min_length=1)


class BootstrapTokenAsset:
    """Transient: purged once the bootstrap ignition config embeds it."""

    kind = "bootstrap-token"
    name = "Bootstrap Token"
    dependencies: tuple[str, ...] = ()
    transient = True
    content_model = BootstrapToken

    async def generate(self, parents: Parents, context: ResolutionContext) -> AssetOutput:
        return AssetOutput(payload=BootstrapToken(token=secrets.token_urlsafe(32)))
