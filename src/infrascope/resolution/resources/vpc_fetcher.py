"""VPC fetcher."""

from typing import Optional
import structlog

from infrascope.clients.gateway import CloudGateway
from infrascope.models.resolution import ResourceCategory
from infrascope.models.resources import VpcRecord
from infrascope.resolution.base import BaseResourceFetcher

logger = structlog.get_logger(__name__)


class VpcFetcher(BaseResourceFetcher):
    """Fetches the cluster's VPC."""

    def __init__(self,
                 gateway: CloudGateway,
                 region: str,
                 vpc_id: str,
                 timeout_seconds: Optional[float] = None):
        super().__init__(gateway, region, timeout_seconds)
        self.vpc_id = vpc_id

    async def fetch(self) -> Optional[VpcRecord]:
        vpc = await self.gateway.get_vpc_details(self.region, self.vpc_id)
        if vpc is None:
            self.logger.warning("VPC not found", vpc_id=self.vpc_id)
        return vpc

    def get_category(self) -> ResourceCategory:
        return ResourceCategory.VPC
