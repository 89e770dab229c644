"""
CDKTF adapter.

Turns resource descriptors into ``cdktf_cdktf_provider_aws`` constructs in a
single scope. Descriptors must arrive in dependency order; every Ref is
resolved against constructs created earlier in the same call (or passed in
through ``existing``).
"""

from __future__ import annotations

from typing import Any, Dict, Iterable, Mapping, Optional

from constructs import Construct

from cdktf import TerraformOutput, Token
from cdktf_cdktf_provider_aws.default_route_table import DefaultRouteTable
from cdktf_cdktf_provider_aws.eip import Eip
from cdktf_cdktf_provider_aws.eks_addon import EksAddon
from cdktf_cdktf_provider_aws.eks_cluster import EksCluster
from cdktf_cdktf_provider_aws.eks_node_group import EksNodeGroup
from cdktf_cdktf_provider_aws.iam_role import IamRole
from cdktf_cdktf_provider_aws.internet_gateway import InternetGateway
from cdktf_cdktf_provider_aws.kms_alias import KmsAlias
from cdktf_cdktf_provider_aws.kms_key import KmsKey
from cdktf_cdktf_provider_aws.launch_template import LaunchTemplate
from cdktf_cdktf_provider_aws.nat_gateway import NatGateway
from cdktf_cdktf_provider_aws.provider import AwsProvider
from cdktf_cdktf_provider_aws.route import Route
from cdktf_cdktf_provider_aws.route_table import RouteTable
from cdktf_cdktf_provider_aws.route_table_association import RouteTableAssociation
from cdktf_cdktf_provider_aws.secretsmanager_secret import SecretsmanagerSecret
from cdktf_cdktf_provider_aws.secretsmanager_secret_version import (
    SecretsmanagerSecretVersion,
)
from cdktf_cdktf_provider_aws.security_group import SecurityGroup
from cdktf_cdktf_provider_aws.security_group_rule import SecurityGroupRule
from cdktf_cdktf_provider_aws.subnet import Subnet
from cdktf_cdktf_provider_aws.vpc import Vpc

from eks_infra.iac_types import OutputDescriptor, Ref, ResourceDescriptor

RESOURCE_CLASSES: Dict[str, Any] = {
    "provider": AwsProvider,
    "vpc": Vpc,
    "default_route_table": DefaultRouteTable,
    "subnet": Subnet,
    "internet_gateway": InternetGateway,
    "route_table": RouteTable,
    "route": Route,
    "route_table_association": RouteTableAssociation,
    "eip": Eip,
    "nat_gateway": NatGateway,
    "security_group": SecurityGroup,
    "security_group_rule": SecurityGroupRule,
    "kms_key": KmsKey,
    "kms_alias": KmsAlias,
    "secretsmanager_secret": SecretsmanagerSecret,
    "secretsmanager_secret_version": SecretsmanagerSecretVersion,
    "iam_role": IamRole,
    "eks_cluster": EksCluster,
    "eks_addon": EksAddon,
    "launch_template": LaunchTemplate,
    "eks_node_group": EksNodeGroup,
}

# Resources whose provider schema has no tags argument.
_UNTAGGED = {"route", "route_table_association", "security_group_rule", "kms_alias",
             "secretsmanager_secret_version", "eks_addon", "provider"}


def _resolve(value: Any, created: Mapping[str, Construct]) -> Any:
    if isinstance(value, Ref):
        if value.target not in created:
            raise KeyError(f"Unresolved reference: {value.target}.{value.attribute}")
        resolved = getattr(created[value.target], value.attribute)
        return Token.as_string(resolved) if value.as_string else resolved
    if isinstance(value, dict):
        return {k: _resolve(v, created) for k, v in value.items()}
    if isinstance(value, (list, tuple)):
        return [_resolve(v, created) for v in value]
    return value


def materialize(
    scope: Construct,
    descriptors: Iterable[ResourceDescriptor],
    existing: Optional[Mapping[str, Construct]] = None,
) -> Dict[str, Construct]:
    """Create one construct per descriptor and return them keyed by logical id."""
    created: Dict[str, Construct] = dict(existing or {})
    for descriptor in descriptors:
        try:
            cls = RESOURCE_CLASSES[descriptor.kind]
        except KeyError as ex:
            raise ValueError(f"Unsupported resource kind: {descriptor.kind}") from ex
        kwargs = _resolve(dict(descriptor.attributes), created)
        if descriptor.tags is not None and descriptor.kind not in _UNTAGGED:
            kwargs["tags"] = dict(descriptor.tags)
        created[descriptor.logical_id] = cls(scope, descriptor.logical_id, **kwargs)
    return created


def emit_outputs(
    scope: Construct,
    outputs: Iterable[OutputDescriptor],
    created: Mapping[str, Construct],
) -> Dict[str, TerraformOutput]:
    return {
        out.name: TerraformOutput(
            scope,
            out.name,
            value=_resolve(out.value, created),
            description=out.description,
        )
        for out in outputs
    }
