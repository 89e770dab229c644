"""Shared pytest fixtures for eks_infra tests."""

from __future__ import annotations

from typing import Any, Callable

import pytest

from eks_infra.iac_types import InfraConfig
from eks_infra.modules.network.network import NetworkTopology, build_network
from eks_infra.utils.config_loader import build_config
from eks_infra.utils.constants import (
    DEFAULT_VPC_PRIVATE_SUBNET_CIDR_BLOCK,
    DEFAULT_VPC_PUBLIC_SUBNET_CIDR_BLOCK,
)
from eks_infra.utils.enums import Environment, Region, Vendor

ConfigFactory = Callable[..., InfraConfig]


@pytest.fixture(autouse=True)
def clear_service_secret(monkeypatch: pytest.MonkeyPatch) -> None:
    """Keep secret values from the caller's shell out of derived plans."""
    monkeypatch.delenv("MOVIE_SERVICE_API_KEY", raising=False)


@pytest.fixture
def make_config() -> ConfigFactory:
    """Factory for a valid AWS development config; keyword overrides win."""

    def _make(**overrides: Any) -> InfraConfig:
        fields: dict[str, Any] = {
            "name": "test-vpc",
            "resource_type": "vpc",
            "environment": Environment.DEVELOPMENT,
            "region": Region.AUSTRALIA_EAST,
            "vendor": Vendor.AWS,
            "terraform_workspace": "test-workspace",
            "terraform_organisation": "test-org",
            "aws_account_id": "123456789012",
        }
        fields.update(overrides)
        return build_config(**fields)

    return _make


@pytest.fixture
def config(make_config: ConfigFactory) -> InfraConfig:
    return make_config()


@pytest.fixture
def full_config(make_config: ConfigFactory) -> InfraConfig:
    """Config with public and private subnets and NAT enabled."""
    return make_config(
        public_subnet_cidr_blocks=list(DEFAULT_VPC_PUBLIC_SUBNET_CIDR_BLOCK),
        private_subnet_cidr_blocks=list(DEFAULT_VPC_PRIVATE_SUBNET_CIDR_BLOCK),
        enable_nat_gateway=True,
    )


@pytest.fixture
def topology(full_config: InfraConfig) -> NetworkTopology:
    return build_network(full_config)
