"""Targets offered by the ``create`` command."""

from clustersmith.core.engine.targets import Target

INSTALL_CONFIG = Target(
    name="install-config",
    roots=("install-config",),
    description="Generates the Install Config asset",
)

MANIFESTS = Target(
    name="manifests",
    roots=("manifests",),
    description="Generates the Kubernetes manifests (render only)",
)

IGNITION_CONFIGS = Target(
    name="ignition-configs",
    roots=("bootstrap-ignition", "master-ignition", "worker-ignition", "metadata"),
    description="Generates the Ignition Config assets",
)

CLUSTER = Target(
    name="cluster",
    roots=("manifests", "bootstrap-ignition", "master-ignition", "worker-ignition", "metadata"),
    description="Generates every installation asset (full build)",
)

TARGETS: tuple[Target, ...] = (INSTALL_CONFIG, MANIFESTS, IGNITION_CONFIGS, CLUSTER)
