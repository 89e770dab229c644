"""
EKS module.

Derives the cluster and its core add-ons. Control-plane endpoint access is
private unless the config opts into public access.
"""

from __future__ import annotations

from typing import Any, Dict, List, Mapping, Optional, Sequence, Union

from eks_infra.iac_types import InfraConfig, Ref, ResourceDescriptor
from eks_infra.modules.resources import describe
from eks_infra.utils.constants import (
    DEFAULT_EKS_CONTROL_PLANE_LOG_TYPES,
    DEFAULT_EKS_CORE_ADD_ONS,
    DEFAULT_EKS_VERSION,
)
from eks_infra.utils.naming import clean_string, resource_name
from eks_infra.utils.tagging import TaggingUtility

CLUSTER_ID = "eks-cluster"


def cluster_name(config: InfraConfig) -> str:
    return resource_name(config.name, config.environment, "cluster", config.region)


def build_cluster(
    config: InfraConfig,
    subnet_ids: Sequence[Union[Ref, str]],
    role_arn: Union[Ref, str],
    security_group_ids: Sequence[Union[Ref, str]] = (),
    add_ons: Optional[Mapping[str, str]] = None,
    tags: Optional[Mapping[str, Any]] = None,
) -> List[ResourceDescriptor]:
    """Return the cluster descriptor followed by one descriptor per add-on."""
    tagging = TaggingUtility(config, {**(tags or {}), "layer": "compute"})
    public_access = bool(config.eks_endpoint_public_access)

    cluster = describe(
        "eks_cluster",
        CLUSTER_ID,
        tags=tagging.get_tags({"resourceType": "cluster"}),
        name=cluster_name(config),
        role_arn=role_arn,
        version=config.eks_version or DEFAULT_EKS_VERSION,
        enabled_cluster_log_types=list(
            config.eks_control_plane_log_types or DEFAULT_EKS_CONTROL_PLANE_LOG_TYPES
        ),
        vpc_config={
            "subnet_ids": list(subnet_ids),
            "security_group_ids": list(security_group_ids),
            "endpoint_private_access": not public_access,
            "endpoint_public_access": public_access,
        },
    )

    final_add_ons: Dict[str, str] = {
        **DEFAULT_EKS_CORE_ADD_ONS,
        **(config.eks_add_ons or {}),
        **(add_ons or {}),
    }
    addons = [
        describe(
            "eks_addon",
            f"eks-addon-{clean_string(name)}",
            cluster_name=Ref(CLUSTER_ID, "name"),
            addon_name=name,
            addon_version=version,
            resolve_conflicts_on_update="PRESERVE",
        )
        for name, version in final_add_ons.items()
    ]
    return [cluster, *addons]
