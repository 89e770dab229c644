"""Unit tests for the stack composition plan."""

from __future__ import annotations

import dataclasses
import json

import pytest

from eks_infra.iac_types import InfraConfig, NodeSettings, Ref
from eks_infra.modules.resources import describe, ensure_unique_ids
from eks_infra.stacks.aws_stack import (
    CLUSTER_ID,
    KMS_KEY_ID,
    PHASES,
    ComputeAccumulator,
    StackPlan,
    describe_plan,
    development_secrets,
    plan_stack,
    production_secrets,
    select_stack_spec,
    synth_config_json,
)
from eks_infra.utils.enums import Environment
from eks_infra.utils.errors import ConfigValidationError


def _plan(config: InfraConfig) -> StackPlan:
    return plan_stack(select_stack_spec(config))


def _outputs(plan: StackPlan) -> dict:
    return {o.name: o for o in plan.outputs}


class TestSelectStackSpec:
    def test_development(self, config: InfraConfig) -> None:
        spec = select_stack_spec(config)
        assert spec.secrets_provider is development_secrets
        assert spec.stack_id == "test-workspace"
        assert spec.environment_name == "development"

    def test_production(self, config: InfraConfig) -> None:
        spec = select_stack_spec(dataclasses.replace(config, environment=Environment.PRODUCTION))
        assert spec.secrets_provider is production_secrets

    def test_unknown_environment(self, config: InfraConfig) -> None:
        with pytest.raises(ValueError, match="Unknown environment: staging"):
            select_stack_spec(dataclasses.replace(config, environment=Environment.STAGING))


class TestPhases:
    def test_phase_order(self, full_config: InfraConfig) -> None:
        plan = _plan(full_config)
        assert tuple(name for name, _ in plan.phases()) == PHASES

    def test_provider_first(self, full_config: InfraConfig) -> None:
        plan = _plan(full_config)
        assert plan.resources()[0].kind == "provider"
        assert plan.provider.attributes["region"] == "ap-southeast-2"

    def test_global_dependency_order(self, full_config: InfraConfig) -> None:
        seen = set()
        for resource in _plan(full_config).resources():
            for target in resource.depends_on:
                assert target in seen, f"{resource.logical_id} depends on later {target}"
            seen.add(resource.logical_id)

    def test_invalid_config_rejected(self, config: InfraConfig) -> None:
        with pytest.raises(ConfigValidationError):
            _plan(dataclasses.replace(config, terraform_hostname=""))

    def test_find(self, full_config: InfraConfig) -> None:
        plan = _plan(full_config)
        assert plan.find("vpc").kind == "vpc"
        assert plan.find("nope") is None


class TestCompute:
    def test_no_subnets_no_cluster(self, config: InfraConfig) -> None:
        plan = _plan(config)
        assert plan.compute == ()
        assert plan.node_groups == ()
        assert plan.find("eks-cluster-role") is None
        assert "eks_cluster_name" not in _outputs(plan)

    def test_cluster_on_private_subnets(self, full_config: InfraConfig) -> None:
        cluster = _plan(full_config).find(CLUSTER_ID)
        subnet_ids = cluster.attributes["vpc_config"]["subnet_ids"]
        assert [ref.target for ref in subnet_ids] == [
            "private-subnet-1",
            "private-subnet-2",
            "private-subnet-3",
        ]
        assert cluster.attributes["role_arn"] == Ref("eks-cluster-role", "arn")
        assert cluster.attributes["vpc_config"]["endpoint_public_access"] is False

    def test_core_add_ons(self, full_config: InfraConfig) -> None:
        kinds = [r.logical_id for r in _plan(full_config).compute if r.kind == "eks_addon"]
        assert kinds == ["eks-addon-vpccni", "eks-addon-coredns", "eks-addon-kubeproxy"]

    def test_orchestrator_scaling_default(self, full_config: InfraConfig) -> None:
        (group,) = _plan(full_config).node_groups
        assert (group.scaling.desired_size, group.scaling.max_size, group.scaling.min_size) == (1, 2, 1)
        assert group.labels["node.kubernetes.io/network"] == "private"

    def test_spot_adds_second_group(self, full_config: InfraConfig) -> None:
        cfg = dataclasses.replace(
            full_config, node_settings=NodeSettings(enable_spot_nodes=True, spot_max_price="0.04")
        )
        on_demand, spot = _plan(cfg).node_groups
        assert on_demand.capacity_type == "ON_DEMAND"
        assert spot.capacity_type == "SPOT"
        assert spot.node_group.tags["maxPrice"] == "0.04"
        assert "maxPrice" not in on_demand.node_group.tags
        assert on_demand.node_group.logical_id.endswith("nodegroup-0-eks-nodegroup")
        assert spot.node_group.logical_id.endswith("nodegroup-1-eks-nodegroup")

    def test_public_tier_names_do_not_collide(self, full_config: InfraConfig) -> None:
        cfg = dataclasses.replace(full_config, node_settings=NodeSettings(enable_public_nodes=True))
        private, public = _plan(cfg).node_groups
        assert private.name != public.name
        assert public.labels["node.kubernetes.io/network"] == "public"
        assert all(ref.target.startswith("public-") for ref in public.node_group.attributes["subnet_ids"])

    def test_public_only_cluster(self, make_config) -> None:
        plan = _plan(make_config(public_subnet_cidr_blocks=["10.0.101.0/24"]))
        assert plan.find(CLUSTER_ID) is not None
        assert plan.node_groups == ()


class TestAccumulator:
    def test_add_is_pure(self) -> None:
        empty = ComputeAccumulator()
        grown = empty.add("group")  # type: ignore[arg-type]
        assert empty.counter == 0
        assert empty.node_groups == ()
        assert grown.counter == 1
        assert grown.node_groups == ("group",)


class TestSecurity:
    def test_kms_and_secret(self, full_config: InfraConfig) -> None:
        plan = _plan(full_config)
        key = plan.find(KMS_KEY_ID)
        assert key is not None
        assert plan.find("kms-alias").attributes["name"] == "alias/testvpc-dev-kmskey"
        secret = plan.find("secret-0")
        assert secret.attributes["name"] == "testvpc/dev/movie-service-secrets"
        assert secret.attributes["kms_key_id"] == Ref(KMS_KEY_ID)
        assert plan.find("secret-version-0") is None

    def test_secret_version_from_environment(
        self, full_config: InfraConfig, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        monkeypatch.setenv("MOVIE_SERVICE_API_KEY", "s3cr3t")
        version = _plan(full_config).find("secret-version-0")
        assert json.loads(version.attributes["secret_string"]) == {"apiKey": "s3cr3t"}

    def test_encryption_disabled(self, full_config: InfraConfig) -> None:
        plan = _plan(dataclasses.replace(full_config, enable_encryption=False))
        assert plan.find(KMS_KEY_ID) is None
        assert "kms_key_id" not in plan.find("secret-0").attributes
        assert "secrets_kms_key_arn" not in _outputs(plan)

    def test_secrets_disabled(self, full_config: InfraConfig) -> None:
        plan = _plan(dataclasses.replace(full_config, enable_secrets_manager=False))
        assert plan.find("secret-0") is None
        assert "secrets_arns" not in _outputs(plan)

    def test_kms_without_account_id_rejected(self, make_config) -> None:
        cfg = make_config(private_subnet_cidr_blocks=["10.0.1.0/24"])
        with pytest.raises(ConfigValidationError) as exc_info:
            _plan(dataclasses.replace(cfg, aws_account_id=None))
        assert exc_info.value.field == "awsAccountId"

    def test_kms_policy_names_account(self, full_config: InfraConfig) -> None:
        policy = json.loads(_plan(full_config).find(KMS_KEY_ID).attributes["policy"])
        principal = policy["Statement"][0]["Principal"]["AWS"]
        assert principal == "arn:aws:iam::123456789012:root"

    def test_secret_name_tag_includes_secret(self, full_config: InfraConfig) -> None:
        secret = _plan(full_config).find("secret-0")
        assert secret.tags["Name"] == "testvpcmovieservicesecrets-dev-secret-aue"

    def test_roles_named_per_purpose(self, full_config: InfraConfig) -> None:
        plan = _plan(full_config)
        assert plan.find("eks-cluster-role").attributes["name"] == "testvpccluster-dev-role-aue"
        assert plan.find("eks-node-role").attributes["name"] == "testvpcnode-dev-role-aue"


class TestOutputs:
    def test_full_outputs(self, full_config: InfraConfig) -> None:
        outputs = _outputs(_plan(full_config))
        for name in (
            "stack_name",
            "environment",
            "vpc_id",
            "vpc_cidr",
            "private_subnet_ids",
            "public_subnet_ids",
            "security_group_ids",
            "internet_gateway_id",
            "nat_gateway_ids",
            "secrets_kms_key_arn",
            "secrets_arns",
            "eks_cluster_name",
            "eks_cluster_endpoint",
            "node_group_names",
        ):
            assert name in outputs
        assert outputs["stack_name"].value == "test-workspace"
        assert outputs["node_group_names"].value == ["testvpcondemand-dev-ng-aue"]

    def test_private_only_has_no_gateway_outputs(self, make_config) -> None:
        outputs = _outputs(_plan(make_config(private_subnet_cidr_blocks=["10.0.1.0/24"])))
        assert "internet_gateway_id" not in outputs
        assert "nat_gateway_ids" not in outputs
        assert "public_subnet_ids" not in outputs


class TestHelpers:
    def test_describe_plan_rows(self, full_config: InfraConfig) -> None:
        rows = describe_plan(_plan(full_config))
        assert rows[0] == {
            "phase": "provider",
            "kind": "provider",
            "id": "AWS",
            "name": "AWS",
            "depends_on": [],
        }
        vpc_row = next(r for r in rows if r["id"] == "vpc")
        assert vpc_row["name"] == "testvpcpub-dev-vpc-aue"
        assert {r["phase"] for r in rows} == {"provider", "network", "security", "compute"}

    def test_identities_unique_across_plan(self, full_config: InfraConfig) -> None:
        cfg = dataclasses.replace(
            full_config,
            node_settings=NodeSettings(
                enable_public_nodes=True, enable_spot_nodes=True, spot_max_price="0.04"
            ),
        )
        identities = [r.identity for r in _plan(cfg).resources()]
        assert len(set(identities)) == len(identities)

        rows = describe_plan(_plan(cfg))
        assert len({row["name"] for row in rows}) == len(rows)

    def test_synth_config_json(self, config: InfraConfig) -> None:
        data = synth_config_json(config)
        assert data["environment"] == "development"
        assert data["vendor"] == "AWS"
        assert data["node_settings"]["enable_private_nodes"] is True
        json.dumps(data)

    def test_duplicate_ids_rejected(self) -> None:
        with pytest.raises(ValueError, match="Duplicate resource id in plan: vpc"):
            ensure_unique_ids([describe("vpc", "vpc"), describe("vpc", "vpc")])
