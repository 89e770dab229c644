"""
Tag resolution.

Merges four tag layers into one key-sorted tag set per resource:

    base defaults -> config -> construct -> call site

Later layers win on key collisions. Every layer is filtered before it is
merged: a ``None`` value or one that is blank after trimming is dropped, so
it can never erase a value from an earlier layer. The reserved ``Name`` tag
is always computed here from the effective name, environment, resource type
and region; callers steer it only through ``name``, ``nameSuffix`` and
``resourceType``.
"""

from __future__ import annotations

import dataclasses
from enum import Enum
from typing import Any, Dict, Mapping, Optional

from eks_infra.iac_types import InfraConfig, Tags
from eks_infra.utils.constants import (
    DEFAULT_SERVICE_LAYER,
    DEFAULT_SERVICE_NAME,
    DEFAULT_SERVICE_VERSION,
)
from eks_infra.utils.enums import Confidentiality, Criticality, Region, Vendor
from eks_infra.utils.errors import TagResolutionError
from eks_infra.utils.naming import clean_environment, clean_region, clean_string
from eks_infra.utils.validation import validate_config

NAME_TAG = "Name"
_NAME_INPUT_KEYS = ("name", "nameSuffix")


def _stringify(value: Any) -> str:
    if isinstance(value, Enum):
        value = value.value
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


def _is_valid_value(value: Any) -> bool:
    return value is not None and _stringify(value).strip() != ""


def _valid_tags(tags: Mapping[str, Any]) -> Tags:
    return {k: _stringify(v) for k, v in tags.items() if _is_valid_value(v)}


class TaggingUtility:
    """Resolve tag sets for the resources of one construct."""

    def __init__(self, config: InfraConfig, tags: Optional[Mapping[str, Any]] = None) -> None:
        self.config = config
        self.tags = dict(tags) if tags else {}

    def get_tags(self, input_tags: Optional[Mapping[str, Any]] = None) -> Tags:
        input_tags = dict(input_tags or {})
        validate_config(self.config)
        self._validate_tags(input_tags)

        tags: Tags = {}
        tags.update(_valid_tags(self._base_tags()))
        tags.update(_valid_tags(self._config_tags()))
        tags.update(_valid_tags(self.tags))
        tags.update(_valid_tags(input_tags))

        name = tags.get("name") or self.config.name
        suffix = tags.get("nameSuffix")
        if suffix:
            name = f"{name}-{suffix}"
        for key in _NAME_INPUT_KEYS:
            tags.pop(key, None)

        resource_type = self._resource_type(input_tags)
        tags[NAME_TAG] = (
            f"{clean_string(name)}-{clean_environment(tags.get('environment'))}"
            f"-{clean_string(resource_type)}-{clean_region(self.config.region)}"
        )
        return dict(sorted(tags.items()))

    def _resource_type(self, input_tags: Mapping[str, Any]) -> str:
        if input_tags.get("resourceType") is not None:
            return _stringify(input_tags["resourceType"])
        return self.config.resource_type

    def _validate_tags(self, input_tags: Mapping[str, Any]) -> None:
        name = input_tags["name"] if input_tags.get("name") is not None else self.config.name
        if not name or not _stringify(name).strip():
            raise TagResolutionError(
                "Name cannot be empty. Please provide a valid name for the resource.",
                field="name",
            )
        if not self._resource_type(input_tags).strip():
            raise TagResolutionError(
                "Resource type cannot be empty. Please provide a valid resource type for the resource.",
                field="resourceType",
            )

    def _base_tags(self) -> Dict[str, Any]:
        return {
            "name": DEFAULT_SERVICE_NAME,
            "environment": self.config.environment,
            "version": DEFAULT_SERVICE_VERSION,
            "layer": DEFAULT_SERVICE_LAYER,
            "vendor": Vendor.OTHERS,
            "region": Region.OTHERS,
            "confidentiality": int(Confidentiality.INTERNAL),
            "criticality": int(Criticality.MEDIUM),
            "owner": "",
            "project": "",
            "costCenter": "",
            "compliance": "",
            "customer": "internal",
            "runningSchedule": "all the time",
            "backupSchedule": "",
        }

    def _config_tags(self) -> Dict[str, Any]:
        allowed = self._base_tags().keys()
        tags: Dict[str, Any] = {}
        for f in dataclasses.fields(self.config):
            if f.name == "tags" or f.name not in allowed:
                continue
            value = getattr(self.config, f.name)
            if _is_valid_value(value):
                tags[f.name] = value
        for key, value in (self.config.tags or {}).items():
            if _is_valid_value(value):
                tags[key] = value
        return tags


def resolve_tags(
    config: InfraConfig,
    construct_tags: Optional[Mapping[str, Any]] = None,
    call_site_tags: Optional[Mapping[str, Any]] = None,
) -> Tags:
    """Functional shorthand for ``TaggingUtility(config, construct_tags).get_tags(call_site_tags)``."""
    return TaggingUtility(config, construct_tags).get_tags(call_site_tags)
