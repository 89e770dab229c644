"""
IAM module.

Roles assumed by AWS services, named ``<name>-<env>-role-<region>``. Callers
that need several roles derive a renamed config copy for each.
"""

from __future__ import annotations

import json
from typing import Any, Mapping, Optional, Sequence

from eks_infra.iac_types import InfraConfig, ResourceDescriptor
from eks_infra.modules.resources import describe
from eks_infra.utils.constants import DEFAULT_IAM_ROLE_MANAGED_POLICY_ARNS
from eks_infra.utils.naming import resource_name
from eks_infra.utils.tagging import TaggingUtility


def service_assume_role_policy(service: str) -> str:
    return json.dumps(
        {
            "Version": "2012-10-17",
            "Statement": [
                {
                    "Effect": "Allow",
                    "Principal": {"Service": service},
                    "Action": "sts:AssumeRole",
                }
            ],
        }
    )


def build_iam_role(
    config: InfraConfig,
    logical_id: str,
    assume_role_policy: str,
    managed_policy_arns: Optional[Sequence[str]] = None,
    tags: Optional[Mapping[str, Any]] = None,
) -> ResourceDescriptor:
    tagging = TaggingUtility(config, {**(tags or {}), "layer": "security"})
    return describe(
        "iam_role",
        logical_id,
        tags=tagging.get_tags({"resourceType": "role"}),
        name=resource_name(config.name, config.environment, "role", config.region),
        assume_role_policy=assume_role_policy,
        managed_policy_arns=[
            *DEFAULT_IAM_ROLE_MANAGED_POLICY_ARNS,
            *(managed_policy_arns or []),
        ],
    )
