"""Unit tests for the command line entrypoint."""

from __future__ import annotations

import json

import pytest

from scripts import cli


@pytest.fixture
def aws_env(monkeypatch: pytest.MonkeyPatch) -> None:
    for key in (
        "ENVIRONMENT",
        "PUBLIC_SUBNET_CIDR_BLOCKS",
        "PRIVATE_SUBNET_CIDR_BLOCKS",
        "ENABLE_NAT_GATEWAY",
        "SPOT_MAX_PRICE",
        "NODE_INSTANCE_TYPES",
        "VPC_CIDR_BLOCK",
        "EKS_VERSION",
        "TERRAFORM_HOSTNAME",
    ):
        monkeypatch.delenv(key, raising=False)
    monkeypatch.setenv("REGION", "AUSTRALIA_EAST")
    monkeypatch.setenv("VENDOR", "AWS")
    monkeypatch.setenv("TERRAFORM_ORGANISATION", "test-org")
    monkeypatch.setenv("AWS_ACCOUNT_ID", "123456789012")


class TestPlanCommand:
    def test_prints_plan_json(self, aws_env: None, capsys: pytest.CaptureFixture) -> None:
        cli.main(["plan"])

        report = json.loads(capsys.readouterr().out)
        assert report["stack"] == "case-studies-kubernetes-development"
        assert report["resources"][0]["kind"] == "provider"
        assert "eks_cluster_name" in report["outputs"]

    def test_config_error_exits_1(
        self, aws_env: None, monkeypatch: pytest.MonkeyPatch, capsys: pytest.CaptureFixture
    ) -> None:
        monkeypatch.setenv("VENDOR", "NOPE")
        with pytest.raises(SystemExit) as exc_info:
            cli.main(["plan"])
        assert exc_info.value.code == 1
        assert "Invalid or missing VENDOR" in capsys.readouterr().err


class TestCdktfCommands:
    def test_missing_project_dir(self, tmp_path, capsys: pytest.CaptureFixture) -> None:
        with pytest.raises(SystemExit) as exc_info:
            cli.main(["infra-synth", "--project-dir", str(tmp_path / "missing")])
        assert exc_info.value.code == 1
        assert "Project directory not found" in capsys.readouterr().err

    def test_deploy_runs_get_synth_deploy(self, tmp_path, monkeypatch: pytest.MonkeyPatch) -> None:
        calls = []
        monkeypatch.setattr(cli, "cdktf", lambda project, args: calls.append(args) or "")

        cli.main(["infra-deploy", "--project-dir", str(tmp_path)])

        assert calls == [["get"], ["synth"], ["deploy", "--auto-approve"]]

    def test_destroy(self, tmp_path, monkeypatch: pytest.MonkeyPatch) -> None:
        calls = []
        monkeypatch.setattr(cli, "cdktf", lambda project, args: calls.append(args) or "")

        cli.main(["infra-destroy", "--project-dir", str(tmp_path)])

        assert calls == [["destroy", "--auto-approve"]]

    def test_kubeconfig(self, aws_env: None, monkeypatch: pytest.MonkeyPatch) -> None:
        calls = []
        monkeypatch.setattr(
            cli, "aws_update_kubeconfig", lambda name, region: calls.append((name, region)) or ""
        )

        cli.main(["kubeconfig"])

        assert calls == [("casestudieskubernetes-dev-cluster-aue", "ap-southeast-2")]
