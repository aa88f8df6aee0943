"""Install config validators.

Each validator is a pure function returning every problem it finds, so the
user sees all of them in one run. Provider-specific rules are looked up by
platform name; deep checks against live provider APIs are not performed here.
"""

from __future__ import annotations

from collections.abc import Callable
import ipaddress
import json
import re

from clustersmith.core.types import InstallConfig, PublishingStrategy
from clustersmith.core.validation.field import FieldError, FieldErrorList, FieldPath

Validator = Callable[[InstallConfig], FieldErrorList]

_DNS_LABEL = re.compile(r"^[a-z0-9]([-a-z0-9]*[a-z0-9])?$")
_DNS_DOMAIN = re.compile(r"^([a-z0-9]([-a-z0-9]*[a-z0-9])?\.)*[a-z0-9]([-a-z0-9]*[a-z0-9])?\.?$")
_AWS_REGION = re.compile(r"^[a-z]{2}(-[a-z]+)+-\d+$")

SUPPORTED_PLATFORMS = ["aws", "gcp", "none"]


def _parse_network(
    value: str, path: FieldPath, errors: FieldErrorList
) -> ipaddress.IPv4Network | ipaddress.IPv6Network | None:
    try:
        return ipaddress.ip_network(value, strict=True)
    except ValueError as e:
        errors.append(FieldError.invalid(path, value, f"invalid CIDR: {e}"))
        return None


def validate_common(ic: InstallConfig) -> FieldErrorList:
    """Platform-independent checks."""
    errors = FieldErrorList()

    name_path = FieldPath("metadata", "name")
    if not ic.metadata.name:
        errors.append(FieldError.required(name_path, "cluster name required"))
    elif len(ic.metadata.name) > 63 or not _DNS_LABEL.match(ic.metadata.name):
        errors.append(
            FieldError.invalid(
                name_path, ic.metadata.name, "cluster name must be a lower case RFC 1123 label"
            )
        )

    domain_path = FieldPath("baseDomain")
    if not ic.base_domain:
        errors.append(FieldError.required(domain_path, "base domain required"))
    elif not _DNS_DOMAIN.match(ic.base_domain):
        errors.append(
            FieldError.invalid(domain_path, ic.base_domain, "must be a valid DNS subdomain")
        )

    networking = FieldPath("networking")
    machine_nets = []
    for i, entry in enumerate(ic.networking.machine_network):
        net = _parse_network(
            entry.cidr, networking.child("machineNetwork").index(i).child("cidr"), errors
        )
        if net is not None:
            machine_nets.append(net)
    for i, cidr in enumerate(ic.networking.service_network):
        path = networking.child("serviceNetwork").index(i)
        net = _parse_network(cidr, path, errors)
        if net is not None and any(
            net.version == m.version and net.overlaps(m)  # type: ignore[arg-type]
            for m in machine_nets
        ):
            errors.append(
                FieldError.invalid(path, cidr, "service network overlaps with machine network")
            )
    for i, entry in enumerate(ic.networking.cluster_network):
        _parse_network(
            entry.cidr, networking.child("clusterNetwork").index(i).child("cidr"), errors
        )

    cp = FieldPath("controlPlane")
    if ic.control_plane.name != "master":
        errors.append(FieldError.not_supported(cp.child("name"), ic.control_plane.name, ["master"]))
    if ic.control_plane.replicas < 1:
        errors.append(
            FieldError.invalid(
                cp.child("replicas"),
                ic.control_plane.replicas,
                "number of control plane replicas must be positive",
            )
        )

    seen: set[str] = set()
    for i, pool in enumerate(ic.compute):
        path = FieldPath("compute").index(i)
        if pool.name in seen:
            errors.append(FieldError.duplicate(path.child("name"), pool.name))
        seen.add(pool.name)
        if pool.replicas < 0:
            errors.append(
                FieldError.invalid(
                    path.child("replicas"), pool.replicas, "number of replicas must not be negative"
                )
            )
        if i > 0 and pool.architecture != ic.compute[0].architecture:
            errors.append(
                FieldError.invalid(
                    path.child("architecture"),
                    pool.architecture,
                    "all compute machine pools must be of the same architecture",
                )
            )

    configured = ic.platform.configured()
    if not configured:
        errors.append(
            FieldError.required(
                FieldPath("platform"),
                f"must specify one of the platforms ({', '.join(SUPPORTED_PLATFORMS)})",
            )
        )
    elif len(configured) > 1:
        errors.append(
            FieldError.invalid(
                FieldPath("platform"), configured, "must only specify a single type of platform"
            )
        )

    secret_path = FieldPath("pullSecret")
    if not ic.pull_secret:
        errors.append(FieldError.required(secret_path, "pull secret required"))
    else:
        try:
            auths = json.loads(ic.pull_secret).get("auths")
        except (ValueError, AttributeError):
            auths = None
        if not isinstance(auths, dict):
            # Never echo the secret itself
            errors.append(FieldError.invalid(secret_path, "<redacted>", "auths required"))

    return errors


def validate_aws(ic: InstallConfig) -> FieldErrorList:
    """AWS platform checks."""
    errors = FieldErrorList()
    aws = ic.platform.aws
    if aws is None:
        return errors
    base = FieldPath("platform", "aws")

    if not aws.region:
        errors.append(FieldError.required(base.child("region"), "region must be specified"))
    elif not _AWS_REGION.match(aws.region):
        errors.append(FieldError.invalid(base.child("region"), aws.region, "invalid region"))

    seen: set[str] = set()
    for i, subnet in enumerate(aws.subnets):
        path = base.child("subnets").index(i)
        if not subnet.id:
            errors.append(FieldError.required(path.child("id"), "subnet ID required"))
        elif subnet.id in seen:
            errors.append(FieldError.duplicate(path.child("id"), subnet.id))
        seen.add(subnet.id)

    if aws.hosted_zone and not aws.subnets:
        errors.append(
            FieldError.invalid(
                base.child("hostedZone"),
                aws.hosted_zone,
                "may not use an existing hosted zone when not using existing subnets",
            )
        )

    if ic.publish == PublishingStrategy.INTERNAL and not aws.subnets:
        errors.append(
            FieldError.invalid(
                FieldPath("publish"),
                ic.publish.value,
                "clusters with internal publishing must use existing subnets",
            )
        )

    return errors


def validate_gcp(ic: InstallConfig) -> FieldErrorList:
    """GCP platform checks."""
    errors = FieldErrorList()
    gcp = ic.platform.gcp
    if gcp is None:
        return errors
    base = FieldPath("platform", "gcp")
    if not gcp.project_id:
        errors.append(FieldError.required(base.child("projectID"), "project ID must be specified"))
    if not gcp.region:
        errors.append(FieldError.required(base.child("region"), "region must be specified"))
    return errors


PLATFORM_VALIDATORS: dict[str, Validator] = {
    "aws": validate_aws,
    "gcp": validate_gcp,
}


def validate_install_config(
    ic: InstallConfig,
    platform_validators: dict[str, Validator] | None = None,
) -> FieldErrorList:
    """Run common checks and the configured platform's checks.

    Args:
        ic: Install config to check
        platform_validators: Override of the per-platform validator table

    Returns:
        All field errors found (empty when valid)
    """
    validators = PLATFORM_VALIDATORS if platform_validators is None else platform_validators
    errors = validate_common(ic)
    for platform in ic.platform.configured():
        validator = validators.get(platform)
        if validator is not None:
            errors.extend(validator(ic))
    return errors
