from __future__ import annotations

from enum import Enum, IntEnum


class Confidentiality(IntEnum):
    PUBLIC = 0
    INTERNAL = 1
    CONFIDENTIAL = 2
    RESTRICTED = 3
    HIGHLY_RESTRICTED = 4
    TOP_SECRET = 5


class Criticality(IntEnum):
    NONE = 0
    LOW = 1
    MEDIUM = 2
    HIGH = 3
    CRITICAL = 4
    MISSION_CRITICAL = 5


class Vendor(str, Enum):
    OTHERS = "OTHERS"
    ON_PREMISES = "ON_PREMISES"
    AWS = "AWS"
    AZURE = "AZURE"
    GCP = "GCP"


class Region(str, Enum):
    OTHERS = "OTHERS"
    AUSTRALIA_EAST = "AUSTRALIA_EAST"
    US_EAST = "US_EAST"
    ASIA_SOUTHEAST = "ASIA_SOUTHEAST"
    EUROPE_WEST = "EUROPE_WEST"


class Environment(str, Enum):
    OTHERS = "others"
    DEVELOPMENT = "development"
    STAGING = "staging"
    PRODUCTION = "production"


class NodeNetwork(str, Enum):
    PUBLIC = "public"
    PRIVATE = "private"


class NodeCapacityType(str, Enum):
    SPOT = "SPOT"
    ON_DEMAND = "ON_DEMAND"


class NodeInstanceFamily(str, Enum):
    BURSTABLE = "burstable"
    GENERAL_PURPOSE = "general-purpose"
    COMPUTE_OPTIMIZED = "compute-optimized"
    MEMORY_OPTIMIZED = "memory-optimized"


class NodeInstanceSize(str, Enum):
    SMALL = "small"
    MEDIUM = "medium"
    LARGE = "large"
    XLARGE = "xlarge"
