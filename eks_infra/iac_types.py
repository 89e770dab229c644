from dataclasses import dataclass, field
from typing import Any, Dict, Mapping, Optional, Sequence, Tuple

from eks_infra.utils.constants import CONFIG_SCHEMA_VERSION
from eks_infra.utils.enums import (
    Environment,
    NodeCapacityType,
    NodeInstanceFamily,
    NodeInstanceSize,
    NodeNetwork,
    Region,
    Vendor,
)

Tags = Dict[str, str]


@dataclass(frozen=True)
class NodeSettings:
    enable_private_nodes: bool = True
    enable_public_nodes: bool = False
    enable_spot_nodes: bool = False
    spot_max_price: Optional[str] = None
    instance_types: Optional[Sequence[str]] = None
    instance_family: Optional[NodeInstanceFamily] = None
    instance_size: Optional[NodeInstanceSize] = None


@dataclass(frozen=True)
class InfraConfig:
    name: str
    resource_type: str
    environment: Environment
    region: Region
    vendor: Vendor
    terraform_organisation: str
    terraform_workspace: str
    terraform_hostname: str
    enable_encryption: bool
    enable_secrets_manager: bool
    enable_nat_gateway: Optional[bool] = None
    layer: Optional[str] = None
    vpc_cidr_block: Optional[str] = None
    public_subnet_cidr_blocks: Optional[Sequence[str]] = None
    private_subnet_cidr_blocks: Optional[Sequence[str]] = None
    aws_account_id: Optional[str] = None
    eks_version: Optional[str] = None
    eks_endpoint_public_access: bool = False
    eks_control_plane_log_types: Optional[Sequence[str]] = None
    eks_add_ons: Optional[Mapping[str, str]] = None
    node_settings: NodeSettings = field(default_factory=NodeSettings)
    tags: Optional[Mapping[str, str]] = None
    schema_version: int = CONFIG_SCHEMA_VERSION


@dataclass(frozen=True)
class Ref:
    """Reference to an attribute of another resource in the same plan."""

    target: str
    attribute: str = "id"
    as_string: bool = False


@dataclass(frozen=True)
class ResourceDescriptor:
    kind: str
    logical_id: str
    attributes: Mapping[str, Any] = field(default_factory=dict)
    tags: Optional[Tags] = None
    depends_on: Tuple[str, ...] = ()

    @property
    def identity(self) -> str:
        if self.tags and "Name" in self.tags:
            return self.tags["Name"]
        return str(self.attributes.get("name", self.logical_id))


@dataclass(frozen=True)
class OutputDescriptor:
    name: str
    value: Any
    description: str


@dataclass(frozen=True)
class ScalingArgs:
    desired_size: int
    max_size: int
    min_size: int


@dataclass(frozen=True)
class NodeAttributes:
    network: Optional[NodeNetwork] = None
    capacity_type: Optional[NodeCapacityType] = None
    instance_family: Optional[NodeInstanceFamily] = None
    instance_size: Optional[NodeInstanceSize] = None


@dataclass(frozen=True)
class Taint:
    key: str
    value: str
    effect: str


@dataclass(frozen=True)
class NodeGroupOptions:
    instance_types: Optional[Sequence[str]] = None
    capacity_type: Optional[NodeCapacityType] = None
    scaling_args: Optional[ScalingArgs] = None
    tags: Optional[Mapping[str, str]] = None
    max_price: Optional[str] = None
    disk_size: Optional[int] = None
    ami_type: Optional[str] = None
    release_version: Optional[str] = None


@dataclass(frozen=True)
class SecretSpec:
    name: str
    description: Optional[str] = None
    secret_string: Optional[str] = None
    tags: Optional[Mapping[str, str]] = None
