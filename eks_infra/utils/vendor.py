from __future__ import annotations

from eks_infra.utils.enums import Region, Vendor

_AWS_REGIONS = {
    Region.US_EAST: "us-east-1",
    Region.ASIA_SOUTHEAST: "ap-southeast-1",
    Region.EUROPE_WEST: "eu-west-1",
    Region.AUSTRALIA_EAST: "ap-southeast-2",
}
_DEFAULT_AWS_REGION = "ap-southeast-2"


def get_aws_region(vendor: Vendor, region: Region) -> str:
    """Return the AWS region name for a region enum; only AWS is supported."""
    if vendor != Vendor.AWS:
        name = getattr(vendor, "value", vendor)
        raise ValueError(f"Unsupported vendor: {name}. Only AWS is supported.")
    return _AWS_REGIONS.get(region, _DEFAULT_AWS_REGION)
