"""
Secrets Manager module.

One secret per SecretSpec, named ``<name>/<env>/<secret>``; a secret version
is added only when the SecretSpec carries a value.
"""

from __future__ import annotations

from typing import Any, List, Mapping, Optional, Sequence, Union

from eks_infra.iac_types import InfraConfig, Ref, ResourceDescriptor, SecretSpec
from eks_infra.modules.resources import describe
from eks_infra.utils.naming import clean_environment, clean_string
from eks_infra.utils.tagging import TaggingUtility


def build_secrets(
    config: InfraConfig,
    secrets: Sequence[SecretSpec],
    kms_key_id: Optional[Union[Ref, str]] = None,
    tags: Optional[Mapping[str, Any]] = None,
) -> List[ResourceDescriptor]:
    tagging = TaggingUtility(config, {**(tags or {}), "layer": "security"})
    prefix = f"{clean_string(config.name)}/{clean_environment(config.environment)}"

    resources: List[ResourceDescriptor] = []
    for index, spec in enumerate(secrets):
        attributes = {"name": f"{prefix}/{spec.name}"}
        if spec.description:
            attributes["description"] = spec.description
        if kms_key_id is not None:
            attributes["kms_key_id"] = kms_key_id
        secret = describe(
            "secretsmanager_secret",
            f"secret-{index}",
            tags=tagging.get_tags(
                {**(spec.tags or {}), "nameSuffix": spec.name, "resourceType": "secret"}
            ),
            **attributes,
        )
        resources.append(secret)
        if spec.secret_string:
            resources.append(
                describe(
                    "secretsmanager_secret_version",
                    f"secret-version-{index}",
                    secret_id=Ref(secret.logical_id),
                    secret_string=spec.secret_string,
                )
            )
    return resources
