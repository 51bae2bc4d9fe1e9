"""Compute instance fetcher."""

from typing import List, Optional
import structlog

from infrascope.clients.gateway import CloudGateway
from infrascope.models.resolution import ResourceCategory
from infrascope.models.resources import ComputeInstance
from infrascope.resolution.base import BaseResourceFetcher

logger = structlog.get_logger(__name__)


class InstanceFetcher(BaseResourceFetcher):
    """Fetches the instances in the VPC that belong to the cluster."""

    def __init__(self,
                 gateway: CloudGateway,
                 region: str,
                 vpc_id: str,
                 cluster_name: str,
                 timeout_seconds: Optional[float] = None):
        super().__init__(gateway, region, timeout_seconds)
        self.vpc_id = vpc_id
        self.cluster_name = cluster_name

    async def fetch(self) -> List[ComputeInstance]:
        instances = await self.gateway.list_compute_instances(self.region, self.vpc_id, self.cluster_name)
        self.logger.info(f"Fetched {len(instances)} instances", vpc_id=self.vpc_id, cluster=self.cluster_name)
        return list(instances)

    def get_category(self) -> ResourceCategory:
        return ResourceCategory.COMPUTE_INSTANCES
