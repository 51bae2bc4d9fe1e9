"""Workload identity binding fetcher."""

from typing import List, Optional
import structlog

from infrascope.clients.gateway import CloudGateway
from infrascope.models.resolution import ResourceCategory
from infrascope.models.resources import WorkloadIdentityBinding
from infrascope.resolution.base import BaseResourceFetcher

logger = structlog.get_logger(__name__)


class WorkloadIdentityFetcher(BaseResourceFetcher):
    """Fetches service account to role bindings of the cluster."""

    def __init__(self,
                 gateway: CloudGateway,
                 region: str,
                 cluster_name: str,
                 timeout_seconds: Optional[float] = None):
        super().__init__(gateway, region, timeout_seconds)
        self.cluster_name = cluster_name

    async def fetch(self) -> List[WorkloadIdentityBinding]:
        bindings = await self.gateway.list_workload_identity_bindings(self.region, self.cluster_name)
        self.logger.info(f"Fetched {len(bindings)} workload identity bindings", cluster=self.cluster_name)
        return list(bindings)

    def get_category(self) -> ResourceCategory:
        return ResourceCategory.WORKLOAD_IDENTITY_BINDINGS
