"""
Naming helpers.

Pure functions that turn free text and enum values into the short, safe
fragments used inside generated resource names.
"""

from __future__ import annotations

import logging
import re
from typing import Optional, Union

from eks_infra.utils.enums import Environment, Region

logger = logging.getLogger(__name__)

_NON_ALPHANUMERIC = re.compile(r"[^a-zA-Z0-9]")

_ENVIRONMENT_CODES = {
    Environment.DEVELOPMENT: "dev",
    Environment.STAGING: "stg",
    Environment.PRODUCTION: "prod",
    Environment.OTHERS: "o",
}
_FALLBACK_ENVIRONMENT_CODE = "dev"

_REGION_CODES = {
    Region.AUSTRALIA_EAST: "aue",
    Region.US_EAST: "use",
    Region.ASIA_SOUTHEAST: "ase",
    Region.EUROPE_WEST: "euw",
    Region.OTHERS: "o",
}
_FALLBACK_REGION_CODE = "o"


def clean_string(value: Optional[str]) -> str:
    """Keep ASCII letters and digits only, lower-cased."""
    return _NON_ALPHANUMERIC.sub("", value or "").lower().strip()


def _coerce(value, enum_cls):
    if isinstance(value, enum_cls):
        return value
    try:
        return enum_cls(value)
    except ValueError:
        return None


def clean_environment(env: Union[Environment, str, None]) -> str:
    """Map an environment to its short code.

    Unknown values fall back to ``dev`` and log a warning.
    """
    member = _coerce(env, Environment)
    if member is None:
        logger.warning(
            "Unknown environment %r, falling back to %r",
            env,
            _FALLBACK_ENVIRONMENT_CODE,
        )
        return _FALLBACK_ENVIRONMENT_CODE
    return _ENVIRONMENT_CODES[member]


def clean_region(region: Union[Region, str, None]) -> str:
    """Map a region to its short code.

    Unknown values fall back to ``o`` and log a warning.
    """
    member = _coerce(region, Region)
    if member is None:
        logger.warning(
            "Unknown region %r, falling back to %r", region, _FALLBACK_REGION_CODE
        )
        return _FALLBACK_REGION_CODE
    return _REGION_CODES[member]


def resource_name(name: str, environment, kind: str, region) -> str:
    """Compose ``<name>-<env>-<kind>-<region>`` from cleaned fragments."""
    return (
        f"{clean_string(name)}-{clean_environment(environment)}"
        f"-{clean_string(kind)}-{clean_region(region)}"
    )
