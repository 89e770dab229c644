"""
AWS stack composition.

Composes the module builders into one ordered plan:

    provider -> network -> security -> compute -> outputs

Environment differences are carried by a StackSpec (which secrets to create)
rather than by stack subclasses. Node groups are threaded through an
immutable accumulator so the counter and the group list are plain return
values.
"""

from __future__ import annotations

import dataclasses
import json
import logging
import os
from dataclasses import asdict, dataclass, field
from typing import Any, Callable, Dict, List, Optional, Tuple

from eks_infra.iac_types import (
    InfraConfig,
    NodeAttributes,
    NodeGroupOptions,
    OutputDescriptor,
    Ref,
    ResourceDescriptor,
    ScalingArgs,
    SecretSpec,
)
from eks_infra.modules.eks.eks import CLUSTER_ID, build_cluster
from eks_infra.modules.eks.nodegroup import NodeGroup, provision_node_group
from eks_infra.modules.network.network import NetworkTopology, build_network
from eks_infra.modules.resources import describe, ensure_unique_ids, ids_of
from eks_infra.modules.security.iam import build_iam_role, service_assume_role_policy
from eks_infra.modules.security.kms import build_kms
from eks_infra.modules.security.secrets import build_secrets
from eks_infra.utils.constants import (
    DEFAULT_STACK_NODEGROUP_SCALING_CONFIG,
    EKS_CLUSTER_ASSUME_ROLE_SERVICE,
    EKS_CLUSTER_MANAGED_POLICY_ARNS,
    EKS_NODE_ASSUME_ROLE_SERVICE,
    EKS_NODE_MANAGED_POLICY_ARNS,
)
from eks_infra.utils.enums import Environment, NodeCapacityType, NodeNetwork
from eks_infra.utils.tagging import TaggingUtility
from eks_infra.utils.validation import validate_config
from eks_infra.utils.vendor import get_aws_region

logger = logging.getLogger(__name__)

SecretsProvider = Callable[[InfraConfig], List[SecretSpec]]

PHASES = ("provider", "network", "security", "compute", "outputs")
CLUSTER_ROLE_ID = "eks-cluster-role"
NODE_ROLE_ID = "eks-node-role"
KMS_KEY_ID = "kms-key"
SERVICE_API_KEY_ENV = "MOVIE_SERVICE_API_KEY"


def _api_key_secret() -> Optional[str]:
    api_key = os.getenv(SERVICE_API_KEY_ENV)
    return json.dumps({"apiKey": api_key}) if api_key else None


def development_secrets(config: InfraConfig) -> List[SecretSpec]:
    return [
        SecretSpec(
            name="movie-service-secrets",
            description="API key for movie API services (development)",
            secret_string=_api_key_secret(),
        )
    ]


def production_secrets(config: InfraConfig) -> List[SecretSpec]:
    return [
        SecretSpec(
            name="movie-service-secrets",
            description="API key for movie API services (production)",
            secret_string=_api_key_secret(),
        )
    ]


@dataclass(frozen=True)
class StackSpec:
    config: InfraConfig
    secrets_provider: SecretsProvider
    environment_name: str
    description: str = ""

    @property
    def stack_id(self) -> str:
        return self.config.terraform_workspace


def select_stack_spec(config: InfraConfig, description: Optional[str] = None) -> StackSpec:
    """Pick the secrets strategy for the config's environment."""
    if config.environment == Environment.DEVELOPMENT:
        provider: SecretsProvider = development_secrets
    elif config.environment == Environment.PRODUCTION:
        provider = production_secrets
    else:
        env = getattr(config.environment, "value", config.environment)
        raise ValueError(f"Unknown environment: {env}")
    env_name = config.environment.value
    return StackSpec(
        config=config,
        secrets_provider=provider,
        environment_name=env_name,
        description=description
        or f"{env_name} infrastructure for {config.name} in {env_name} environment",
    )


@dataclass(frozen=True)
class ComputeAccumulator:
    counter: int = 0
    node_groups: Tuple[NodeGroup, ...] = ()

    def add(self, node_group: NodeGroup) -> "ComputeAccumulator":
        return ComputeAccumulator(
            counter=self.counter + 1, node_groups=self.node_groups + (node_group,)
        )


@dataclass(frozen=True)
class StackPlan:
    spec: StackSpec
    provider: ResourceDescriptor
    network: NetworkTopology
    security: Tuple[ResourceDescriptor, ...] = ()
    compute: Tuple[ResourceDescriptor, ...] = ()
    node_groups: Tuple[NodeGroup, ...] = ()
    outputs: Tuple[OutputDescriptor, ...] = field(default=())

    def phases(self) -> List[Tuple[str, List[Any]]]:
        items = {
            "provider": [self.provider],
            "network": self.network.resources(),
            "security": list(self.security),
            "compute": list(self.compute),
            "outputs": list(self.outputs),
        }
        return [(phase, items[phase]) for phase in PHASES]

    def resources(self) -> List[ResourceDescriptor]:
        return [
            r
            for phase, items in self.phases()
            if phase != "outputs"
            for r in items
        ]

    def find(self, logical_id: str) -> Optional[ResourceDescriptor]:
        return next((r for r in self.resources() if r.logical_id == logical_id), None)


def _renamed(config: InfraConfig, suffix: str) -> InfraConfig:
    return dataclasses.replace(config, name=f"{config.name}-{suffix}")


def _provider(config: InfraConfig) -> ResourceDescriptor:
    return describe(
        "provider",
        "AWS",
        region=get_aws_region(config.vendor, config.region),
        default_tags=[{"tags": TaggingUtility(config).get_tags()}],
    )


def _security(
    spec: StackSpec, with_compute: bool
) -> List[ResourceDescriptor]:
    config = spec.config
    resources: List[ResourceDescriptor] = []
    if config.enable_encryption:
        resources += build_kms(config)
    if config.enable_secrets_manager:
        kms_key_id = Ref(KMS_KEY_ID) if config.enable_encryption else None
        resources += build_secrets(config, spec.secrets_provider(config), kms_key_id=kms_key_id)
    if with_compute:
        resources.append(
            build_iam_role(
                _renamed(config, "cluster"),
                CLUSTER_ROLE_ID,
                service_assume_role_policy(EKS_CLUSTER_ASSUME_ROLE_SERVICE),
                EKS_CLUSTER_MANAGED_POLICY_ARNS,
            )
        )
        resources.append(
            build_iam_role(
                _renamed(config, "node"),
                NODE_ROLE_ID,
                service_assume_role_policy(EKS_NODE_ASSUME_ROLE_SERVICE),
                EKS_NODE_MANAGED_POLICY_ARNS,
            )
        )
    return resources


def _node_group_tiers(config: InfraConfig, network: NetworkTopology):
    settings = config.node_settings
    tiers = []
    if settings.enable_private_nodes and network.private_subnets:
        tiers.append((NodeNetwork.PRIVATE, config, network.private_subnets))
    if settings.enable_public_nodes and network.public_subnets:
        tiers.append((NodeNetwork.PUBLIC, _renamed(config, "pub"), network.public_subnets))
    return tiers


def _compute(
    config: InfraConfig, network: NetworkTopology
) -> Tuple[List[ResourceDescriptor], ComputeAccumulator]:
    cluster_subnets = network.private_subnets or network.public_subnets
    resources = build_cluster(
        config,
        subnet_ids=ids_of(cluster_subnets),
        role_arn=Ref(CLUSTER_ROLE_ID, "arn"),
        security_group_ids=ids_of(network.security_groups),
    )

    settings = config.node_settings
    capacity_types = [NodeCapacityType.ON_DEMAND]
    if settings.enable_spot_nodes:
        capacity_types.append(NodeCapacityType.SPOT)

    acc = ComputeAccumulator()
    for tier, tier_config, subnets in _node_group_tiers(config, network):
        for capacity_type in capacity_types:
            spot = capacity_type == NodeCapacityType.SPOT
            group = provision_node_group(
                tier_config,
                cluster_name=Ref(CLUSTER_ID, "name"),
                cluster_arn=Ref(CLUSTER_ID, "arn"),
                node_role_arn=Ref(NODE_ROLE_ID, "arn"),
                subnet_ids=ids_of(subnets),
                options=NodeGroupOptions(
                    instance_types=settings.instance_types,
                    capacity_type=capacity_type,
                    scaling_args=ScalingArgs(**DEFAULT_STACK_NODEGROUP_SCALING_CONFIG),
                    max_price=settings.spot_max_price if spot else None,
                ),
                attributes=NodeAttributes(
                    network=tier,
                    capacity_type=capacity_type,
                    instance_family=settings.instance_family,
                    instance_size=settings.instance_size,
                ),
                topology=network,
                counter=acc.counter,
            )
            acc = acc.add(group)
    for group in acc.node_groups:
        resources += group.resources()
    return resources, acc


def _outputs(
    spec: StackSpec,
    network: NetworkTopology,
    security: List[ResourceDescriptor],
    acc: Optional[ComputeAccumulator],
) -> List[OutputDescriptor]:
    config = spec.config
    outputs = [
        OutputDescriptor("stack_name", spec.stack_id, "Name of the Terraform stack"),
        OutputDescriptor("environment", spec.environment_name, "Deployment environment"),
        OutputDescriptor("vpc_id", Ref("vpc"), "ID of the VPC"),
        OutputDescriptor("vpc_cidr", Ref("vpc", "cidr_block"), "CIDR block of the VPC"),
        OutputDescriptor(
            "private_subnet_ids", ids_of(network.private_subnets), "IDs of the private subnets"
        ),
    ]
    if network.public_subnets:
        outputs.append(
            OutputDescriptor(
                "public_subnet_ids", ids_of(network.public_subnets), "IDs of the public subnets"
            )
        )
    outputs.append(
        OutputDescriptor(
            "security_group_ids", ids_of(network.security_groups), "IDs of the security groups"
        )
    )
    if network.internet_gateway is not None:
        outputs.append(
            OutputDescriptor(
                "internet_gateway_id", Ref("internet-gateway"), "ID of the Internet Gateway"
            )
        )
    if network.nat_gateways:
        outputs.append(
            OutputDescriptor(
                "nat_gateway_ids", ids_of(network.nat_gateways), "IDs of the NAT Gateways"
            )
        )
    if config.enable_encryption:
        outputs.append(
            OutputDescriptor(
                "secrets_kms_key_arn",
                Ref(KMS_KEY_ID, "arn"),
                "ARN of the KMS key used for secrets encryption",
            )
        )
    secrets = [r for r in security if r.kind == "secretsmanager_secret"]
    if secrets:
        outputs.append(
            OutputDescriptor(
                "secrets_arns",
                [Ref(s.logical_id, "arn") for s in secrets],
                "ARNs of the created secrets",
            )
        )
    if acc is not None:
        outputs.append(
            OutputDescriptor("eks_cluster_name", Ref(CLUSTER_ID, "name"), "Name of the EKS cluster")
        )
        outputs.append(
            OutputDescriptor(
                "eks_cluster_endpoint", Ref(CLUSTER_ID, "endpoint"), "Endpoint of the EKS cluster"
            )
        )
        outputs.append(
            OutputDescriptor(
                "node_group_names",
                [g.name for g in acc.node_groups],
                "Names of the EKS node groups",
            )
        )
    return outputs


def plan_stack(spec: StackSpec) -> StackPlan:
    """Validate the config and derive every resource of the stack, in order."""
    config = spec.config
    validate_config(config)

    provider = _provider(config)
    network = build_network(config)
    with_compute = bool(network.private_subnets or network.public_subnets)
    security = _security(spec, with_compute)

    compute: List[ResourceDescriptor] = []
    acc: Optional[ComputeAccumulator] = None
    if with_compute:
        compute, acc = _compute(config, network)
    else:
        logger.info("No subnets requested for %s; skipping EKS cluster", spec.stack_id)

    plan = StackPlan(
        spec=spec,
        provider=provider,
        network=network,
        security=tuple(security),
        compute=tuple(compute),
        node_groups=acc.node_groups if acc is not None else (),
        outputs=tuple(_outputs(spec, network, security, acc)),
    )
    ensure_unique_ids(plan.resources())
    logger.info(
        "Planned %d resources for %s (%d node groups)",
        len(plan.resources()),
        spec.stack_id,
        len(plan.node_groups),
    )
    return plan


def describe_plan(plan: StackPlan) -> List[Dict[str, Any]]:
    """Flatten a plan into JSON-friendly {phase, kind, id, name, depends_on} rows."""
    rows: List[Dict[str, Any]] = []
    for phase, items in plan.phases():
        if phase == "outputs":
            continue
        for r in items:
            rows.append(
                {
                    "phase": phase,
                    "kind": r.kind,
                    "id": r.logical_id,
                    "name": r.identity,
                    "depends_on": list(r.depends_on),
                }
            )
    return rows


def synth_config_json(config: InfraConfig) -> Dict[str, Any]:
    """Convert the config dataclass to a plain dict for diagnostics or outputs."""
    data = asdict(config)
    return json.loads(json.dumps(data, default=lambda v: getattr(v, "value", str(v))))
