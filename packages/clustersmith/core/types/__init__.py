"""Input schemas consumed by installer assets."""

from clustersmith.core.types.installconfig import (
    AWSMachinePool,
    AWSPlatform,
    AWSSubnet,
    GCPMachinePool,
    GCPPlatform,
    InstallConfig,
    MachineNetworkEntry,
    MachinePool,
    MachinePoolPlatform,
    Networking,
    NonePlatform,
    ObjectMeta,
    Platform,
    PublishingStrategy,
    UserProvisionedDNS,
)

__all__ = [
    "AWSMachinePool",
    "AWSPlatform",
    "AWSSubnet",
    "GCPMachinePool",
    "GCPPlatform",
    "InstallConfig",
    "MachineNetworkEntry",
    "MachinePool",
    "MachinePoolPlatform",
    "Networking",
    "NonePlatform",
    "ObjectMeta",
    "Platform",
    "PublishingStrategy",
    "UserProvisionedDNS",
]
