"""Amazon EKS client."""

from typing import Dict, Any, List, Optional
import structlog
from botocore.exceptions import BotoCoreError, ClientError

from infrascope.core.base_client import BaseClient
from infrascope.core.classifier import error_code
from infrascope.core.utils import retry_from_client
from infrascope.mappers.resource_mapper import ResourceDataMapper
from infrascope.models.resources import ClusterRecord, WorkloadIdentityBinding
from .client_factory import AwsClientFactory
from .errors import provider_error

logger = structlog.get_logger(__name__)


class EksClient(BaseClient):
    """Client for EKS managed cluster operations."""

    def __init__(self, factory: AwsClientFactory, config: Dict[str, Any]):
        super().__init__(config, "EksClient")
        self.factory = factory
        self.mapper = ResourceDataMapper()

    @retry_from_client
    async def describe_cluster(self, region: str, name: str) -> Optional[ClusterRecord]:
        """Describe a managed cluster. Returns None when no cluster has that name."""
        try:
            async with self.factory.client("eks", region) as eks:
                response = await eks.describe_cluster(name=name)
        except ClientError as e:
            if error_code(e) == "ResourceNotFoundException":
                self.logger.info("EKS cluster not found", region=region, name=name)
                return None
            raise provider_error("DescribeCluster", e)
        except BotoCoreError as e:
            raise provider_error("DescribeCluster", e)

        cluster = response.get('cluster')
        return self.mapper.map_cluster(cluster) if cluster else None

    @retry_from_client
    async def list_pod_identity_associations(self, region: str, cluster_name: str) -> List[WorkloadIdentityBinding]:
        """List every Pod Identity association of a cluster."""
        associations = []
        try:
            async with self.factory.client("eks", region) as eks:
                kwargs = {'clusterName': cluster_name}
                while True:
                    response = await eks.list_pod_identity_associations(**kwargs)
                    associations.extend(response.get('associations') or [])
                    next_token = response.get('nextToken')
                    if not next_token:
                        break
                    kwargs['nextToken'] = next_token
        except (ClientError, BotoCoreError) as e:
            raise provider_error("ListPodIdentityAssociations", e)

        self.logger.info(f"Discovered {len(associations)} pod identity associations", cluster=cluster_name)
        return self.mapper.map_many(self.mapper.map_workload_identity, associations)
