"""
Config loader for environment variables -> typed config used by the CDKTF stack.

Functional, pure helpers over a mapping (normally ``os.environ``). Defaults
mirror what the stack needs for a development deployment.
"""

from __future__ import annotations

from typing import Any, List, Mapping, Optional, Type, TypeVar

from eks_infra.iac_types import InfraConfig, NodeSettings
from eks_infra.utils.constants import (
    DEFAULT_EKS_CONTROL_PLANE_LOG_TYPES,
    DEFAULT_EKS_CORE_ADD_ONS,
    DEFAULT_EKS_VERSION,
    DEFAULT_SERVICE_NAME,
    DEFAULT_TERRAFORM_HOSTNAME,
    DEFAULT_VPC_CIDR_BLOCK,
    DEFAULT_VPC_PRIVATE_SUBNET_CIDR_BLOCK,
    DEFAULT_VPC_PUBLIC_SUBNET_CIDR_BLOCK,
)
from eks_infra.utils.enums import Environment, Region, Vendor

E = TypeVar("E")

SERVICE_RESOURCE_TYPE = "stack"


def required_env_value(env: Mapping[str, str], key: str) -> str:
    value = env.get(key)
    if not value:
        raise ValueError(f"{key} environment variable is required but not set.")
    return value


def enum_from_env(env: Mapping[str, str], key: str, enum_cls: Type[E]) -> E:
    """Look an enum member up by *name* from a required environment variable."""
    value = env.get(key)
    names = list(enum_cls.__members__)
    if not value or value not in enum_cls.__members__:
        raise ValueError(
            f"Invalid or missing {key} environment variable. Must be one of: {', '.join(names)}"
        )
    return enum_cls.__members__[value]


def _to_bool(value: str) -> bool:
    if value.lower() in ("true", "1"):
        return True
    if value.lower() in ("false", "0"):
        return False
    raise ValueError(f"Invalid boolean value: {value}")


def _optional_bool(env: Mapping[str, str], key: str) -> Optional[bool]:
    value = (env.get(key) or "").strip()
    return _to_bool(value) if value else None


def _to_list(value: Optional[str]) -> Optional[List[str]]:
    if value is None or not value.strip():
        return None
    return [item.strip() for item in value.split(",") if item.strip()]


def _environment(env: Mapping[str, str]) -> Environment:
    raw = (env.get("ENVIRONMENT") or Environment.DEVELOPMENT.value).strip()
    try:
        return Environment(raw)
    except ValueError:
        if raw in Environment.__members__:
            return Environment.__members__[raw]
        raise ValueError(
            f"Invalid ENVIRONMENT environment variable: {raw}. "
            f"Must be one of: {', '.join(e.value for e in Environment)}"
        ) from None


def build_config(
    *,
    terraform_workspace: Optional[str] = None,
    terraform_organisation: Optional[str] = None,
    **fields: Any,
) -> InfraConfig:
    """Build an InfraConfig, filling every optional field with its default."""
    if not terraform_workspace or not terraform_organisation:
        raise ValueError("Terraform workspace and organisation are required")

    defaults = {
        "name": "",
        "resource_type": "",
        "region": Region.OTHERS,
        "environment": Environment.DEVELOPMENT,
        "vendor": Vendor.OTHERS,
        "terraform_hostname": DEFAULT_TERRAFORM_HOSTNAME,
        "enable_encryption": True,
        "enable_secrets_manager": True,
        "enable_nat_gateway": False,
        "vpc_cidr_block": DEFAULT_VPC_CIDR_BLOCK,
        "eks_version": DEFAULT_EKS_VERSION,
        "eks_endpoint_public_access": False,
        "eks_control_plane_log_types": list(DEFAULT_EKS_CONTROL_PLANE_LOG_TYPES),
        "eks_add_ons": dict(DEFAULT_EKS_CORE_ADD_ONS),
    }
    values = {**defaults, **{k: v for k, v in fields.items() if v is not None}}
    return InfraConfig(
        terraform_workspace=terraform_workspace,
        terraform_organisation=terraform_organisation,
        **values,
    )


def load_env_config(env: Mapping[str, str]) -> InfraConfig:
    """Read the deployment config from environment variables."""
    environment = _environment(env)
    region = enum_from_env(env, "REGION", Region)
    vendor = enum_from_env(env, "VENDOR", Vendor)
    organisation = required_env_value(env, "TERRAFORM_ORGANISATION")

    aws_account_id = None
    if vendor == Vendor.AWS:
        aws_account_id = required_env_value(env, "AWS_ACCOUNT_ID")

    public_blocks = _to_list(env.get("PUBLIC_SUBNET_CIDR_BLOCKS"))
    if public_blocks is None and environment == Environment.DEVELOPMENT:
        public_blocks = list(DEFAULT_VPC_PUBLIC_SUBNET_CIDR_BLOCK)
    private_blocks = _to_list(env.get("PRIVATE_SUBNET_CIDR_BLOCKS"))
    if private_blocks is None:
        private_blocks = list(DEFAULT_VPC_PRIVATE_SUBNET_CIDR_BLOCK)

    spot_max_price = (env.get("SPOT_MAX_PRICE") or "").strip() or None
    node_settings = NodeSettings(
        enable_spot_nodes=spot_max_price is not None,
        spot_max_price=spot_max_price,
        instance_types=_to_list(env.get("NODE_INSTANCE_TYPES")),
    )

    return build_config(
        name=DEFAULT_SERVICE_NAME,
        resource_type=SERVICE_RESOURCE_TYPE,
        environment=environment,
        region=region,
        vendor=vendor,
        terraform_workspace=f"{DEFAULT_SERVICE_NAME}-{environment.value}",
        terraform_organisation=organisation,
        terraform_hostname=env.get("TERRAFORM_HOSTNAME") or None,
        enable_nat_gateway=_optional_bool(env, "ENABLE_NAT_GATEWAY"),
        vpc_cidr_block=env.get("VPC_CIDR_BLOCK") or None,
        public_subnet_cidr_blocks=public_blocks,
        private_subnet_cidr_blocks=private_blocks,
        aws_account_id=aws_account_id,
        eks_version=env.get("EKS_VERSION") or None,
        node_settings=node_settings,
    )
