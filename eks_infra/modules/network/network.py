"""
Network module.

Derives the VPC topology: public/private subnets, internet gateway, NAT,
route tables and the default security group. The topology depends only on
whether each subnet CIDR list is non-empty and on the NAT flag.
"""

from __future__ import annotations

import dataclasses
import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Mapping, Optional, Sequence, Tuple, Union

from eks_infra.iac_types import InfraConfig, Ref, ResourceDescriptor
from eks_infra.modules.resources import describe, ref_key
from eks_infra.utils.constants import (
    ANY_IPV4_CIDR_BLOCK,
    AVAILABILITY_ZONE_SUFFIXES,
    DEFAULT_VPC_CIDR_BLOCK,
)
from eks_infra.utils.tagging import TaggingUtility
from eks_infra.utils.vendor import get_aws_region

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class NetworkTopology:
    vpc: ResourceDescriptor
    default_route_table: ResourceDescriptor
    cidr_block: str
    public_subnets: Tuple[ResourceDescriptor, ...] = ()
    private_subnets: Tuple[ResourceDescriptor, ...] = ()
    internet_gateway: Optional[ResourceDescriptor] = None
    public_route_table: Optional[ResourceDescriptor] = None
    private_route_table: Optional[ResourceDescriptor] = None
    nat_elastic_ips: Tuple[ResourceDescriptor, ...] = ()
    nat_gateways: Tuple[ResourceDescriptor, ...] = ()
    routes: Tuple[ResourceDescriptor, ...] = ()
    route_table_associations: Tuple[ResourceDescriptor, ...] = ()
    security_groups: Tuple[ResourceDescriptor, ...] = ()
    security_group_rules: Tuple[ResourceDescriptor, ...] = ()
    ordered: Tuple[ResourceDescriptor, ...] = field(default=(), repr=False)

    def resources(self) -> List[ResourceDescriptor]:
        """All descriptors in creation (dependency) order."""
        return list(self.ordered)

    def subnet_availability_zones(self) -> Dict[str, str]:
        return {
            s.logical_id: s.attributes["availability_zone"]
            for s in (*self.public_subnets, *self.private_subnets)
        }

    def availability_zones_for(self, subnet_ids: Sequence[Union[Ref, str]]) -> List[str]:
        """De-duplicated AZs of the given subnets, in first-seen order."""
        known = self.subnet_availability_zones()
        zones: List[str] = []
        for subnet_id in subnet_ids:
            zone = known.get(ref_key(subnet_id))
            if zone and zone not in zones:
                zones.append(zone)
        return zones


def availability_zone(aws_region: str, index: int) -> str:
    suffix = AVAILABILITY_ZONE_SUFFIXES[index % len(AVAILABILITY_ZONE_SUFFIXES)]
    return f"{aws_region}{suffix}"


def _subnets(
    tier: str,
    cidr_blocks: Sequence[str],
    aws_region: str,
    tagging: TaggingUtility,
) -> List[ResourceDescriptor]:
    public = tier == "public"
    name_suffix = "pub" if public else "priv"
    return [
        describe(
            "subnet",
            f"{tier}-subnet-{index + 1}",
            tags=tagging.get_tags(
                {"nameSuffix": f"{name_suffix}{index + 1}", "resourceType": "subnet"}
            ),
            vpc_id=Ref("vpc"),
            cidr_block=cidr,
            availability_zone=availability_zone(aws_region, index),
            map_public_ip_on_launch=public,
        )
        for index, cidr in enumerate(cidr_blocks)
    ]


def _associations(subnets: Sequence[ResourceDescriptor], route_table_id: str) -> List[ResourceDescriptor]:
    return [
        describe(
            "route_table_association",
            f"{subnet.logical_id}-association",
            route_table_id=Ref(route_table_id),
            subnet_id=Ref(subnet.logical_id),
        )
        for subnet in subnets
    ]


def _security_group(cidr_block: str, tagging: TaggingUtility) -> Tuple[ResourceDescriptor, List[ResourceDescriptor]]:
    sg = describe(
        "security_group",
        "default-security-group",
        tags=tagging.get_tags({"resourceType": "sg"}),
        description="Default security group for VPC",
        vpc_id=Ref("vpc"),
    )
    rules = [
        describe(
            "security_group_rule",
            "default-internal-allow",
            security_group_id=Ref(sg.logical_id),
            type="ingress",
            from_port=0,
            to_port=0,
            protocol="-1",
            cidr_blocks=[cidr_block],
            description="Allow all internal traffic within VPC",
        ),
        describe(
            "security_group_rule",
            "default-outbound-allow",
            security_group_id=Ref(sg.logical_id),
            type="egress",
            from_port=0,
            to_port=0,
            protocol="-1",
            cidr_blocks=[ANY_IPV4_CIDR_BLOCK],
            description="Allow all outbound traffic",
        ),
    ]
    return sg, rules


def build_network(
    config: InfraConfig, construct_tags: Optional[Mapping[str, Any]] = None
) -> NetworkTopology:
    """Derive the network topology for a validated config."""
    cidr_block = config.vpc_cidr_block or DEFAULT_VPC_CIDR_BLOCK
    public_cidrs = list(config.public_subnet_cidr_blocks or [])
    private_cidrs = list(config.private_subnet_cidr_blocks or [])
    aws_region = get_aws_region(config.vendor, config.region)

    vpc_name = f"{config.name}{'-pub' if public_cidrs else '-priv'}"
    tagging = TaggingUtility(
        dataclasses.replace(config, name=vpc_name, layer="network"), construct_tags
    )

    ordered: List[ResourceDescriptor] = []
    routes: List[ResourceDescriptor] = []
    associations: List[ResourceDescriptor] = []

    vpc = describe(
        "vpc",
        "vpc",
        tags=tagging.get_tags({"resourceType": "vpc"}),
        cidr_block=cidr_block,
        enable_dns_hostnames=True,
        enable_dns_support=True,
    )
    default_rt = describe(
        "default_route_table",
        "default-route-table",
        tags=tagging.get_tags({"resourceType": "defaultrt"}),
        default_route_table_id=Ref("vpc", "default_route_table_id"),
    )
    ordered += [vpc, default_rt]

    public_subnets: List[ResourceDescriptor] = []
    igw = public_rt = None
    if public_cidrs:
        public_subnets = _subnets("public", public_cidrs, aws_region, tagging)
        igw = describe(
            "internet_gateway",
            "internet-gateway",
            tags=tagging.get_tags({"nameSuffix": "pub", "resourceType": "ig"}),
            vpc_id=Ref("vpc"),
        )
        public_rt = describe(
            "route_table",
            "public-route-table",
            tags=tagging.get_tags({"nameSuffix": "public", "resourceType": "rt"}),
            vpc_id=Ref("vpc"),
        )
        igw_route = describe(
            "route",
            "public-internet-gateway-route",
            route_table_id=Ref(public_rt.logical_id),
            destination_cidr_block=ANY_IPV4_CIDR_BLOCK,
            gateway_id=Ref(igw.logical_id),
        )
        public_assocs = _associations(public_subnets, public_rt.logical_id)
        routes.append(igw_route)
        associations += public_assocs
        ordered += [*public_subnets, igw, public_rt, igw_route, *public_assocs]

    private_subnets: List[ResourceDescriptor] = []
    private_rt = None
    eips: List[ResourceDescriptor] = []
    nats: List[ResourceDescriptor] = []
    if private_cidrs:
        private_subnets = _subnets("private", private_cidrs, aws_region, tagging)
        private_rt = describe(
            "route_table",
            "private-route-table",
            tags=tagging.get_tags({"nameSuffix": "priv", "resourceType": "rt"}),
            vpc_id=Ref("vpc"),
        )
        ordered += [*private_subnets, private_rt]

        if public_subnets and config.enable_nat_gateway is not False:
            eip = describe(
                "eip",
                "nat-elastic-ip",
                tags=tagging.get_tags({"nameSuffix": "nat", "resourceType": "eip"}),
                domain="vpc",
            )
            nat = describe(
                "nat_gateway",
                "nat-gateway",
                tags=tagging.get_tags({"resourceType": "nat"}),
                allocation_id=Ref(eip.logical_id),
                subnet_id=Ref(public_subnets[0].logical_id),
            )
            nat_route = describe(
                "route",
                "private-nat-gateway-route",
                route_table_id=Ref(private_rt.logical_id),
                destination_cidr_block=ANY_IPV4_CIDR_BLOCK,
                nat_gateway_id=Ref(nat.logical_id),
            )
            eips.append(eip)
            nats.append(nat)
            routes.append(nat_route)
            ordered += [eip, nat, nat_route]
        else:
            logger.debug("Skipping NAT gateway for %s", vpc_name)

        private_assocs = _associations(private_subnets, private_rt.logical_id)
        associations += private_assocs
        ordered += private_assocs

    sg, sg_rules = _security_group(cidr_block, tagging)
    ordered += [sg, *sg_rules]

    logger.debug(
        "Network for %s: %d public, %d private subnets, %d NAT gateways",
        vpc_name,
        len(public_subnets),
        len(private_subnets),
        len(nats),
    )
    return NetworkTopology(
        vpc=vpc,
        default_route_table=default_rt,
        cidr_block=cidr_block,
        public_subnets=tuple(public_subnets),
        private_subnets=tuple(private_subnets),
        internet_gateway=igw,
        public_route_table=public_rt,
        private_route_table=private_rt,
        nat_elastic_ips=tuple(eips),
        nat_gateways=tuple(nats),
        routes=tuple(routes),
        route_table_associations=tuple(associations),
        security_groups=(sg,),
        security_group_rules=tuple(sg_rules),
        ordered=tuple(ordered),
    )
