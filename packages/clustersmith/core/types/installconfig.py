"""Install config schema.

The install config is the single user-facing input of an installation. It is
read from ``install-config.yaml`` (camelCase keys) and validated by
``clustersmith.core.validation`` before any other asset consumes it.
"""

from __future__ import annotations

from enum import Enum

from pydantic import BaseModel, ConfigDict, Field


class PublishingStrategy(str, Enum):
    """How cluster endpoints are published."""

    EXTERNAL = "External"
    INTERNAL = "Internal"


class UserProvisionedDNS(str, Enum):
    """Whether the user manages cluster DNS records."""

    ENABLED = "Enabled"
    DISABLED = "Disabled"


class _Schema(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="forbid")


class ObjectMeta(_Schema):
    name: str = ""


class MachineNetworkEntry(_Schema):
    cidr: str


class ClusterNetworkEntry(_Schema):
    cidr: str
    host_prefix: int = Field(default=23, alias="hostPrefix")


class Networking(_Schema):
    network_type: str = Field(default="OVNKubernetes", alias="networkType")
    machine_network: list[MachineNetworkEntry] = Field(
        default_factory=lambda: [MachineNetworkEntry(cidr="10.0.0.0/16")],
        alias="machineNetwork",
    )
    cluster_network: list[ClusterNetworkEntry] = Field(
        default_factory=lambda: [ClusterNetworkEntry(cidr="10.128.0.0/14")],
        alias="clusterNetwork",
    )
    service_network: list[str] = Field(
        default_factory=lambda: ["172.30.0.0/16"], alias="serviceNetwork"
    )


class AWSSubnet(_Schema):
    id: str


class AWSPlatform(_Schema):
    region: str = ""
    subnets: list[AWSSubnet] = Field(default_factory=list)
    hosted_zone: str = Field(default="", alias="hostedZone")
    ami_id: str = Field(default="", alias="amiID")


class GCPPlatform(_Schema):
    project_id: str = Field(default="", alias="projectID")
    region: str = ""
    network: str = ""
    user_provisioned_dns: UserProvisionedDNS = Field(
        default=UserProvisionedDNS.DISABLED, alias="userProvisionedDNS"
    )


class NonePlatform(_Schema):
    pass


class Platform(_Schema):
    aws: AWSPlatform | None = None
    gcp: GCPPlatform | None = None
    none: NonePlatform | None = None

    def name(self) -> str:
        """Return the configured platform name, or "" if none is set."""
        for candidate in ("aws", "gcp", "none"):
            if getattr(self, candidate) is not None:
                return candidate
        return ""

    def configured(self) -> list[str]:
        return [p for p in ("aws", "gcp", "none") if getattr(self, p) is not None]


class AWSMachinePool(_Schema):
    zones: list[str] = Field(default_factory=list)
    type: str = ""


class GCPMachinePool(_Schema):
    zones: list[str] = Field(default_factory=list)
    type: str = ""


class MachinePoolPlatform(_Schema):
    aws: AWSMachinePool | None = None
    gcp: GCPMachinePool | None = None


class MachinePool(_Schema):
    name: str
    replicas: int = 3
    architecture: str = "amd64"
    platform: MachinePoolPlatform = Field(default_factory=MachinePoolPlatform)


class InstallConfig(_Schema):
    """Root install config document."""

    api_version: str = Field(default="v1", alias="apiVersion")
    metadata: ObjectMeta = Field(default_factory=ObjectMeta)
    base_domain: str = Field(default="", alias="baseDomain")
    networking: Networking = Field(default_factory=Networking)
    control_plane: MachinePool = Field(
        default_factory=lambda: MachinePool(name="master"), alias="controlPlane"
    )
    compute: list[MachinePool] = Field(default_factory=lambda: [MachinePool(name="worker")])
    platform: Platform = Field(default_factory=Platform)
    publish: PublishingStrategy = PublishingStrategy.EXTERNAL
    pull_secret: str = Field(default="", alias="pullSecret")
    ssh_key: str = Field(default="", alias="sshKey")

    @property
    def cluster_domain(self) -> str:
        """Fully qualified cluster domain (``<name>.<baseDomain>``)."""
        return f"{self.metadata.name}.{self.base_domain}"

    def to_document(self) -> dict:
        """Render as the camelCase document users write."""
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)
