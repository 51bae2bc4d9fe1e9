"""EC2 client for network and instance lookups."""

from typing import Dict, Any, List, Optional
import structlog
from botocore.exceptions import BotoCoreError, ClientError

from infrascope.core.base_client import BaseClient
from infrascope.core.utils import retry_from_client
from infrascope.mappers.resource_mapper import ResourceDataMapper
from infrascope.models.resources import ComputeInstance, SubnetRecord, VpcRecord
from .client_factory import AwsClientFactory
from .errors import provider_error

logger = structlog.get_logger(__name__)

CLUSTER_TAG_PREFIX = "kubernetes.io/cluster/"
CLUSTER_TAG_VALUES = ["owned", "shared"]


class Ec2Client(BaseClient):
    """Client for EC2 operations. Region is chosen per call."""

    def __init__(self, factory: AwsClientFactory, config: Dict[str, Any]):
        super().__init__(config, "Ec2Client")
        self.factory = factory
        self.instance_states = list(config.get("instance_states") or ["running"])
        self.mapper = ResourceDataMapper()

    @retry_from_client
    async def describe_instance(self, region: str, instance_id: str) -> Optional[ComputeInstance]:
        """Describe a single instance by id."""
        try:
            async with self.factory.client("ec2", region) as ec2:
                response = await ec2.describe_instances(InstanceIds=[instance_id])
        except (ClientError, BotoCoreError) as e:
            raise provider_error("DescribeInstances", e)

        for reservation in response.get('Reservations') or []:
            for instance in reservation.get('Instances') or []:
                return self.mapper.map_instance(instance)
        return None

    @retry_from_client
    async def describe_vpc(self, region: str, vpc_id: str) -> Optional[VpcRecord]:
        """Describe a VPC by id."""
        try:
            async with self.factory.client("ec2", region) as ec2:
                response = await ec2.describe_vpcs(VpcIds=[vpc_id])
        except (ClientError, BotoCoreError) as e:
            raise provider_error("DescribeVpcs", e)

        vpcs = response.get('Vpcs') or []
        return self.mapper.map_vpc(vpcs[0]) if vpcs else None

    @retry_from_client
    async def describe_subnets(self, region: str, vpc_id: str) -> List[SubnetRecord]:
        """List every subnet in a VPC."""
        subnets = []
        try:
            async with self.factory.client("ec2", region) as ec2:
                paginator = ec2.get_paginator('describe_subnets')
                async for page in paginator.paginate(Filters=[{'Name': 'vpc-id', 'Values': [vpc_id]}]):
                    subnets.extend(page.get('Subnets') or [])
        except (ClientError, BotoCoreError) as e:
            raise provider_error("DescribeSubnets", e)

        self.logger.info(f"Discovered {len(subnets)} subnets", vpc_id=vpc_id)
        return self.mapper.map_many(self.mapper.map_subnet, subnets)

    @retry_from_client
    async def describe_cluster_instances(self,
                                         region: str,
                                         vpc_id: str,
                                         cluster_name: Optional[str] = None) -> List[ComputeInstance]:
        """List instances in a VPC, narrowed to one cluster's tag when given.

        Shared VPCs hold instances of several clusters; the
        ``kubernetes.io/cluster/<name>`` tag (owned or shared) keeps them apart.
        """
        filters = [{'Name': 'vpc-id', 'Values': [vpc_id]}]
        if cluster_name:
            filters.append({'Name': f'tag:{CLUSTER_TAG_PREFIX}{cluster_name}', 'Values': CLUSTER_TAG_VALUES})
        if self.instance_states:
            filters.append({'Name': 'instance-state-name', 'Values': self.instance_states})

        instances = []
        try:
            async with self.factory.client("ec2", region) as ec2:
                paginator = ec2.get_paginator('describe_instances')
                async for page in paginator.paginate(Filters=filters):
                    for reservation in page.get('Reservations') or []:
                        instances.extend(reservation.get('Instances') or [])
        except (ClientError, BotoCoreError) as e:
            raise provider_error("DescribeInstances", e)

        self.logger.info(f"Discovered {len(instances)} instances", vpc_id=vpc_id, cluster=cluster_name)
        return self.mapper.map_many(self.mapper.map_instance, instances)
