"""
KMS module.

Derives a customer-managed key (usable by Secrets Manager) and its alias.
"""

from __future__ import annotations

import json
from typing import Any, List, Mapping, Optional

from eks_infra.iac_types import InfraConfig, Ref, ResourceDescriptor
from eks_infra.modules.resources import describe
from eks_infra.utils.naming import clean_environment, clean_string
from eks_infra.utils.tagging import TaggingUtility


def key_policy(aws_account_id: Optional[str]) -> str:
    return json.dumps(
        {
            "Version": "2012-10-17",
            "Statement": [
                {
                    "Sid": "Enable IAM User Permissions",
                    "Effect": "Allow",
                    "Principal": {"AWS": f"arn:aws:iam::{aws_account_id}:root"},
                    "Action": "kms:*",
                    "Resource": "*",
                },
                {
                    "Sid": "Allow Secrets Manager to use the key",
                    "Effect": "Allow",
                    "Principal": {"Service": "secretsmanager.amazonaws.com"},
                    "Action": ["kms:Decrypt", "kms:GenerateDataKey"],
                    "Resource": "*",
                },
            ],
        }
    )


def build_kms(
    config: InfraConfig,
    description: Optional[str] = None,
    alias_name: Optional[str] = None,
    tags: Optional[Mapping[str, Any]] = None,
) -> List[ResourceDescriptor]:
    """Return [key, alias] descriptors."""
    tagging = TaggingUtility(config, {**(tags or {}), "layer": "security"})
    env = config.environment.value if config.environment else ""
    alias = alias_name or (
        f"{clean_string(config.name)}-{clean_environment(config.environment)}-kmskey"
    )
    key = describe(
        "kms_key",
        "kms-key",
        tags=tagging.get_tags({"resourceType": "kmskey"}),
        description=description or f"KMS key for encryption in {env}",
        policy=key_policy(config.aws_account_id),
    )
    key_alias = describe(
        "kms_alias",
        "kms-alias",
        name=f"alias/{alias}",
        target_key_id=Ref(key.logical_id),
    )
    return [key, key_alias]
