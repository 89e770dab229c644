from __future__ import annotations

from typing import Dict, List, Tuple

from eks_infra.utils.enums import NodeCapacityType

CONFIG_SCHEMA_VERSION = 1

DEFAULT_SERVICE_NAME = "case-studies-kubernetes"
DEFAULT_SERVICE_VERSION = "0.0.1"
DEFAULT_SERVICE_LAYER = "infrastructure"

DEFAULT_TERRAFORM_HOSTNAME = "app.terraform.io"

DEFAULT_VPC_CIDR_BLOCK = "10.0.0.0/16"
DEFAULT_VPC_PUBLIC_SUBNET_CIDR_BLOCK: Tuple[str, ...] = (
    "10.0.101.0/24",
    "10.0.102.0/24",
    "10.0.103.0/24",
)
DEFAULT_VPC_PRIVATE_SUBNET_CIDR_BLOCK: Tuple[str, ...] = (
    "10.0.1.0/24",
    "10.0.2.0/24",
    "10.0.3.0/24",
)
ANY_IPV4_CIDR_BLOCK = "0.0.0.0/0"
AVAILABILITY_ZONE_SUFFIXES: Tuple[str, ...] = ("a", "b", "c")

DEFAULT_EKS_VERSION = "1.31"
DEFAULT_EKS_CONTROL_PLANE_LOG_TYPES: Tuple[str, ...] = (
    "api",
    "audit",
    "authenticator",
)
# add-on name -> version
DEFAULT_EKS_CORE_ADD_ONS: Dict[str, str] = {
    "vpc-cni": "v1.19.2-eksbuild.1",
    "coredns": "v1.11.4-eksbuild.2",
    "kube-proxy": "v1.31.3-eksbuild.2",
}

DEFAULT_EKS_NODEGROUP_INSTANCE_TYPES: Tuple[str, ...] = ("t3.medium", "t3.large")
DEFAULT_EKS_NODEGROUP_CAPACITY_TYPE = NodeCapacityType.ON_DEMAND
# Used by provision_node_group when no complete scaling triple is supplied.
DEFAULT_EKS_NODEGROUP_SCALING_CONFIG: Dict[str, int] = {
    "desired_size": 1,
    "max_size": 1,
    "min_size": 1,
}
# Used by the stack orchestrator for the node groups it creates itself.
DEFAULT_STACK_NODEGROUP_SCALING_CONFIG: Dict[str, int] = {
    "desired_size": 1,
    "max_size": 2,
    "min_size": 1,
}
NODEGROUP_TAINT_EFFECT = "NO_SCHEDULE"

# node attribute -> kubernetes label key
EKS_NODEGROUP_STANDARD_FIELDS: Dict[str, str] = {
    "network": "node.kubernetes.io/network",
    "capacity_type": "node.kubernetes.io/capacity-type",
    "instance_family": "node.kubernetes.io/instance-family",
    "instance_size": "node.kubernetes.io/instance-size",
}

EKS_CLUSTER_ASSUME_ROLE_SERVICE = "eks.amazonaws.com"
EKS_NODE_ASSUME_ROLE_SERVICE = "ec2.amazonaws.com"
DEFAULT_IAM_ROLE_MANAGED_POLICY_ARNS: List[str] = []
EKS_CLUSTER_MANAGED_POLICY_ARNS: List[str] = [
    "arn:aws:iam::aws:policy/AmazonEKSClusterPolicy",
]
EKS_NODE_MANAGED_POLICY_ARNS: List[str] = [
    "arn:aws:iam::aws:policy/AmazonEKSWorkerNodePolicy",
    "arn:aws:iam::aws:policy/AmazonEKS_CNI_Policy",
    "arn:aws:iam::aws:policy/AmazonEC2ContainerRegistryReadOnly",
]
