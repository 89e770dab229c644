"""
CDKTF entrypoint for the EKS infrastructure.
"""

from __future__ import annotations

import os
import sys
from typing import Dict, List

from constructs import Construct
from cdktf import App, NamedRemoteWorkspace, RemoteBackend, TerraformOutput, TerraformStack

from eks_infra.provisioning import emit_outputs, materialize
from eks_infra.stacks.aws_stack import (
    CLUSTER_ID,
    KMS_KEY_ID,
    StackPlan,
    StackSpec,
    plan_stack,
    select_stack_spec,
    synth_config_json,
)
from eks_infra.utils.config_loader import load_env_config
from eks_infra.utils.validation import format_missing_env_message, missing_env

REQUIRED_ENV = ["REGION", "VENDOR", "TERRAFORM_ORGANISATION"]


class AwsInfraStack(TerraformStack):
    """TerraformStack that materializes a StackPlan built from typed config."""

    def __init__(self, scope: Construct, id: str, spec: StackSpec) -> None:
        super().__init__(scope, id)

        self.plan: StackPlan = plan_stack(spec)
        self.resources: Dict[str, Construct] = {}
        for phase, items in self.plan.phases():
            if phase == "outputs":
                continue
            self.resources = materialize(self, items, existing=self.resources)
        self.outputs: Dict[str, TerraformOutput] = emit_outputs(
            self, self.plan.outputs, self.resources
        )

        config = spec.config
        RemoteBackend(
            self,
            hostname=config.terraform_hostname,
            organization=config.terraform_organisation,
            workspaces=NamedRemoteWorkspace(name=config.terraform_workspace),
        )

    def _many(self, descriptors) -> List[Construct]:
        return [self.resources[d.logical_id] for d in descriptors]

    @property
    def vpc(self) -> Construct:
        return self.resources["vpc"]

    @property
    def public_subnets(self) -> List[Construct]:
        return self._many(self.plan.network.public_subnets)

    @property
    def private_subnets(self) -> List[Construct]:
        return self._many(self.plan.network.private_subnets)

    @property
    def security_groups(self) -> List[Construct]:
        return self._many(self.plan.network.security_groups)

    @property
    def kms_key(self):
        return self.resources.get(KMS_KEY_ID)

    @property
    def secrets(self) -> List[Construct]:
        return self._many(r for r in self.plan.security if r.kind == "secretsmanager_secret")

    @property
    def cluster(self):
        return self.resources.get(CLUSTER_ID)

    @property
    def node_groups(self) -> List[Construct]:
        return self._many(g.node_group for g in self.plan.node_groups)


def main() -> None:
    # Preflight: ensure required env vars are present before synthesizing
    missing = missing_env(env=os.environ, keys=REQUIRED_ENV)
    if missing:
        print(format_missing_env_message(missing), file=sys.stderr)
        sys.exit(2)

    app = App()
    try:
        cfg = load_env_config(os.environ)
        spec = select_stack_spec(cfg)
        stack = AwsInfraStack(app, spec.stack_id, spec)
    except ValueError as ex:
        # Surface a concise, friendly message instead of a long traceback
        print(f"Error: {ex}", file=sys.stderr)
        sys.exit(1)

    # Surface a copy of the config used for traceability
    TerraformOutput(stack, "config_json", value=str(synth_config_json(cfg)))

    try:
        app.synth()
    except Exception as ex:  # noqa: BLE001 - present actionable error
        print("Synthesis failed.", file=sys.stderr)
        print(str(ex), file=sys.stderr)
        sys.exit(1)

    print(f"Successfully synthesised Terraform configuration for {spec.environment_name} environment")


if __name__ == "__main__":
    main()
