"""
EKS node-group module.

Node-group identity, scaling, placement and labels/taints are all derived
from a small attribute vocabulary:

* identity: ``<name>-<capacity type>`` cleaned, plus env and region codes,
  so an on-demand and a spot group in one stack never collide;
* labels: one ``node.kubernetes.io/*`` label per present attribute;
* taints: the same attributes again, each with effect ``NO_SCHEDULE``;
* availability zones: looked up from the topology's subnets.
"""

from __future__ import annotations

import dataclasses
from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Sequence, Tuple, Union

from eks_infra.iac_types import (
    InfraConfig,
    NodeAttributes,
    NodeGroupOptions,
    Ref,
    ResourceDescriptor,
    ScalingArgs,
    Taint,
)
from eks_infra.modules.network.network import NetworkTopology
from eks_infra.modules.resources import describe, ref_key
from eks_infra.utils.constants import (
    DEFAULT_EKS_NODEGROUP_CAPACITY_TYPE,
    DEFAULT_EKS_NODEGROUP_INSTANCE_TYPES,
    DEFAULT_EKS_NODEGROUP_SCALING_CONFIG,
    EKS_NODEGROUP_STANDARD_FIELDS,
    NODEGROUP_TAINT_EFFECT,
)
from eks_infra.utils.errors import NodeGroupArgumentError
from eks_infra.utils.naming import clean_string, resource_name
from eks_infra.utils.tagging import TaggingUtility

Value = Union[Ref, str]


@dataclass(frozen=True)
class NodeGroup:
    name: str
    capacity_type: str
    scaling: ScalingArgs
    instance_type: str
    labels: Dict[str, str]
    taints: Tuple[Taint, ...]
    availability_zones: Tuple[str, ...]
    launch_template: ResourceDescriptor
    node_group: ResourceDescriptor

    def resources(self) -> List[ResourceDescriptor]:
        return [self.launch_template, self.node_group]


def _standard_fields(attributes: NodeAttributes) -> Dict[str, str]:
    result: Dict[str, str] = {}
    for field_name, label_key in EKS_NODEGROUP_STANDARD_FIELDS.items():
        value = getattr(attributes, field_name)
        if value:
            result[label_key] = getattr(value, "value", value)
    return result


def get_labels(attributes: NodeAttributes) -> Dict[str, str]:
    return _standard_fields(attributes)


def get_taints(attributes: NodeAttributes) -> List[Taint]:
    return [
        Taint(key=key, value=value, effect=NODEGROUP_TAINT_EFFECT)
        for key, value in _standard_fields(attributes).items()
    ]


def node_group_name(config: InfraConfig) -> str:
    return resource_name(config.name, config.environment, "ng", config.region)


def build_scaling_args(scaling: Optional[ScalingArgs]) -> ScalingArgs:
    """Use a complete scaling triple verbatim, else the 1/1/1 default."""
    if (
        scaling is None
        or scaling.desired_size is None
        or scaling.max_size is None
        or scaling.min_size is None
    ):
        return ScalingArgs(**DEFAULT_EKS_NODEGROUP_SCALING_CONFIG)
    if not scaling.min_size <= scaling.desired_size <= scaling.max_size:
        raise NodeGroupArgumentError(
            "EksNodeGroup: scalingArgs must satisfy minSize <= desiredSize <= maxSize",
            field="scalingArgs",
        )
    return scaling


def _validate(cluster_name: Value, cluster_arn: Value, node_role_arn: Value, subnet_ids) -> None:
    if not cluster_name:
        raise NodeGroupArgumentError("EksNodeGroup: clusterName is required", field="clusterName")
    if not cluster_arn:
        raise NodeGroupArgumentError("EksNodeGroup: clusterArn is required", field="clusterArn")
    if not node_role_arn:
        raise NodeGroupArgumentError("EksNodeGroup: nodeRoleArn is required", field="nodeRoleArn")
    if not subnet_ids:
        raise NodeGroupArgumentError("EksNodeGroup: subnetIds are required", field="subnetIds")


def _validate_single_tier(topology: NetworkTopology, subnet_ids: Sequence[Value]) -> None:
    public = {s.logical_id for s in topology.public_subnets}
    private = {s.logical_id for s in topology.private_subnets}
    keys = {ref_key(s) for s in subnet_ids}
    if keys & public and keys & private:
        raise NodeGroupArgumentError(
            "EksNodeGroup: subnetIds must all belong to the same tier",
            field="subnetIds",
        )


def provision_node_group(
    config: InfraConfig,
    cluster_name: Value,
    cluster_arn: Value,
    node_role_arn: Value,
    subnet_ids: Sequence[Value],
    options: Optional[NodeGroupOptions] = None,
    attributes: Optional[NodeAttributes] = None,
    topology: Optional[NetworkTopology] = None,
    counter: int = 0,
) -> NodeGroup:
    """Derive the launch template and managed node group for one pool."""
    _validate(cluster_name, cluster_arn, node_role_arn, subnet_ids)
    if topology is not None:
        _validate_single_tier(topology, subnet_ids)

    options = options or NodeGroupOptions()
    attributes = attributes or NodeAttributes()
    capacity_type = (
        options.capacity_type or attributes.capacity_type or DEFAULT_EKS_NODEGROUP_CAPACITY_TYPE
    )
    capacity = getattr(capacity_type, "value", capacity_type)
    instance_types = list(options.instance_types or DEFAULT_EKS_NODEGROUP_INSTANCE_TYPES)
    scaling = build_scaling_args(options.scaling_args)

    group_config = dataclasses.replace(config, name=f"{config.name}-{capacity}")
    name = node_group_name(group_config)
    logical_prefix = f"{clean_string(group_config.name)}-nodegroup-{counter}"

    zones = topology.availability_zones_for(subnet_ids) if topology is not None else []
    construct_tags: Dict[str, Any] = dict(options.tags or {})
    if zones:
        construct_tags["availabilityZone"] = ",".join(zones)
    if options.max_price:
        construct_tags["maxPrice"] = options.max_price
    construct_tags["layer"] = "compute"
    tagging = TaggingUtility(group_config, construct_tags)

    labels = get_labels(attributes)
    taints = get_taints(attributes)

    launch_template = describe(
        "launch_template",
        f"{logical_prefix}-launch-template",
        tags=tagging.get_tags({"resourceType": "lt"}),
        name=resource_name(group_config.name, config.environment, "lt", config.region),
        instance_type=instance_types[0],
        tag_specifications=[
            {"resource_type": "instance", "tags": tagging.get_tags({"resourceType": "ec2"})},
            {"resource_type": "volume", "tags": tagging.get_tags({"resourceType": "ebs"})},
        ],
    )

    attrs: Dict[str, Any] = {
        "cluster_name": cluster_name,
        "node_group_name": name,
        "node_role_arn": node_role_arn,
        "subnet_ids": list(subnet_ids),
        "capacity_type": capacity,
        "scaling_config": dataclasses.asdict(scaling),
        "launch_template": {
            "id": Ref(launch_template.logical_id),
            "version": Ref(launch_template.logical_id, "latest_version", as_string=True),
        },
    }
    if labels:
        attrs["labels"] = labels
    if taints:
        attrs["taint"] = [dataclasses.asdict(t) for t in taints]
    if options.disk_size:
        attrs["disk_size"] = options.disk_size
    if options.ami_type:
        attrs["ami_type"] = options.ami_type
    if options.release_version:
        attrs["release_version"] = options.release_version

    node_group = describe(
        "eks_node_group",
        f"{logical_prefix}-eks-nodegroup",
        tags=tagging.get_tags({"resourceType": "ng"}),
        **attrs,
    )
    return NodeGroup(
        name=name,
        capacity_type=capacity,
        scaling=scaling,
        instance_type=instance_types[0],
        labels=labels,
        taints=tuple(taints),
        availability_zones=tuple(zones),
        launch_template=launch_template,
        node_group=node_group,
    )
