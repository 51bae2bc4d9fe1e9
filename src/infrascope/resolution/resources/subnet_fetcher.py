"""Subnet fetcher."""

from typing import List, Optional
import structlog

from infrascope.clients.gateway import CloudGateway
from infrascope.models.resolution import ResourceCategory
from infrascope.models.resources import SubnetRecord
from infrascope.resolution.base import BaseResourceFetcher

logger = structlog.get_logger(__name__)


class SubnetFetcher(BaseResourceFetcher):
    """Fetches every subnet of the cluster's VPC."""

    def __init__(self,
                 gateway: CloudGateway,
                 region: str,
                 vpc_id: str,
                 timeout_seconds: Optional[float] = None):
        super().__init__(gateway, region, timeout_seconds)
        self.vpc_id = vpc_id

    async def fetch(self) -> List[SubnetRecord]:
        subnets = await self.gateway.list_subnets(self.region, self.vpc_id)
        self.logger.info(f"Fetched {len(subnets)} subnets", vpc_id=self.vpc_id)
        return list(subnets)

    def get_category(self) -> ResourceCategory:
        return ResourceCategory.SUBNETS
