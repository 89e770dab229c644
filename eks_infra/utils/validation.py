"""
Preflight validation helpers.

Pure functions that reject an incomplete configuration before any resource
is derived, plus the environment-variable preflight used by the entrypoint.
"""

from __future__ import annotations

from collections.abc import Mapping as MappingABC
from typing import List, Mapping

from eks_infra.iac_types import InfraConfig
from eks_infra.utils.constants import CONFIG_SCHEMA_VERSION
from eks_infra.utils.enums import Vendor
from eks_infra.utils.errors import ConfigValidationError

_PREFIX = "Config validation error:"


def _blank(value) -> bool:
    return not isinstance(value, str) or value.strip() == ""


def _fail(field: str, requirement: str) -> None:
    raise ConfigValidationError(f"{_PREFIX} {field} {requirement}", field=field)


def validate_config(config: InfraConfig) -> None:
    """Raise ConfigValidationError for the first violated field, in fixed order."""
    if _blank(config.name):
        _fail("name", "is required and cannot be empty.")
    if _blank(config.resource_type):
        _fail("resourceType", "is required and cannot be empty.")
    if config.environment is None:
        _fail("environment", "is required.")
    if config.region is None:
        _fail("region", "is required.")
    if config.vendor is None:
        _fail("vendor", "is required.")
    if _blank(config.terraform_organisation):
        _fail("terraformOrganisation", "is required and cannot be empty.")
    if _blank(config.terraform_workspace):
        _fail("terraformWorkspace", "is required and cannot be empty.")
    if _blank(config.terraform_hostname):
        _fail("terraformHostname", "is required and cannot be empty.")
    if not isinstance(config.enable_encryption, bool):
        _fail("enableEncryption", "is required and must be a boolean.")
    if not isinstance(config.enable_secrets_manager, bool):
        _fail("enableSecretsManager", "is required and must be a boolean.")
    if (
        config.vendor == Vendor.AWS
        and config.enable_encryption
        and _blank(config.aws_account_id)
    ):
        _fail("awsAccountId", "is required when encryption is enabled on AWS.")
    if config.tags is not None:
        if not isinstance(config.tags, MappingABC) or not all(
            isinstance(k, str) for k in config.tags
        ):
            _fail("tags", "must be an object with string values if provided.")
    if config.schema_version != CONFIG_SCHEMA_VERSION:
        _fail("schemaVersion", f"must be {CONFIG_SCHEMA_VERSION}.")


def missing_env(env: Mapping[str, str], keys: List[str]) -> List[str]:
    """Return the list of keys missing in the provided environment mapping."""
    return [k for k in keys if not env.get(k)]


def format_missing_env_message(missing: List[str]) -> str:
    """Format an actionable message for missing env vars (POSIX shell)."""
    if not missing:
        return ""
    lines: List[str] = []
    lines.append("Preflight check failed: missing environment variables")
    lines.append("")
    lines.append("Missing:")
    for k in missing:
        lines.append(f"  - {k}")
    lines.append("")
    lines.append("How to set them in your shell (current session):")
    for k in missing:
        lines.append(f'  export {k}="<value>"')
    lines.append("")
    lines.append("Then re-run: python -m scripts.cli infra-synth")
    return "\n".join(lines)
