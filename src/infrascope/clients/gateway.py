"""Cluster and cloud gateway consumed by the resolution pipeline."""

import os
import sys
from abc import ABC, abstractmethod
from typing import Any, Dict, List, Optional
import structlog

from infrascope.core.base_client import BaseClient
from infrascope.models.resolution import AuthResult
from infrascope.models.resources import (
    ClusterRecord,
    ComputeInstance,
    Node,
    SubnetRecord,
    VpcRecord,
    WorkloadIdentityBinding,
)
from .aws import AwsClientFactory, Ec2Client, EksClient, StsClient
from .kubernetes import KubernetesClient, KubernetesClientFactory

logger = structlog.get_logger(__name__)


class CloudGateway(ABC):
    """Capabilities the pipeline needs from the cluster API and the cloud.

    Implementations raise ``ProviderError`` for failures and return
    ``None`` where a lookup legitimately finds nothing.
    """

    @abstractmethod
    async def list_nodes(self, cluster_context: str) -> List[Node]:
        ...

    @abstractmethod
    async def clear_credential_cache(self) -> None:
        ...

    @abstractmethod
    async def check_auth(self, region: str) -> AuthResult:
        ...

    @abstractmethod
    async def get_instance_details(self, region: str, instance_id: str) -> Optional[ComputeInstance]:
        ...

    @abstractmethod
    async def get_managed_cluster(self, region: str, name: str) -> Optional[ClusterRecord]:
        ...

    @abstractmethod
    async def get_vpc_details(self, region: str, vpc_id: str) -> Optional[VpcRecord]:
        ...

    @abstractmethod
    async def list_subnets(self, region: str, vpc_id: str) -> List[SubnetRecord]:
        ...

    @abstractmethod
    async def list_compute_instances(self,
                                     region: str,
                                     vpc_id: str,
                                     cluster_name: str) -> List[ComputeInstance]:
        ...

    @abstractmethod
    async def list_workload_identity_bindings(self,
                                              region: str,
                                              cluster_name: str) -> List[WorkloadIdentityBinding]:
        ...

    @abstractmethod
    def restart_application_process(self) -> None:
        ...


class AwsCloudGateway(BaseClient, CloudGateway):
    """Gateway over the Kubernetes API and AWS (STS, EC2, EKS)."""

    def __init__(self,
                 config: Dict[str, Any],
                 aws_factory: AwsClientFactory,
                 k8s_client: KubernetesClient,
                 ec2_client: Ec2Client,
                 eks_client: EksClient,
                 sts_client: StsClient):
        super().__init__(config, "AwsCloudGateway")
        self.aws_factory = aws_factory
        self.k8s_client = k8s_client
        self.ec2_client = ec2_client
        self.eks_client = eks_client
        self.sts_client = sts_client

    @classmethod
    def from_config(cls, config: Dict[str, Any]) -> "AwsCloudGateway":
        """Build every client from a ``{"aws", "kubernetes", "resolution"}`` config dict."""
        aws_config = config.get("aws", {})
        resolution_config = config.get("resolution", {})
        factory = AwsClientFactory(aws_config)
        return cls(
            config=config,
            aws_factory=factory,
            k8s_client=KubernetesClientFactory(config.get("kubernetes", {})).create_client(),
            ec2_client=Ec2Client(factory, resolution_config),
            eks_client=EksClient(factory, resolution_config),
            sts_client=StsClient(factory, aws_config),
        )

    def _clients(self) -> List[BaseClient]:
        return [self.k8s_client, self.ec2_client, self.eks_client, self.sts_client]

    async def connect(self) -> None:
        for client in self._clients():
            if not client.is_connected:
                await client.connect()
        self._connected = True
        self.logger.info("Gateway connected")

    async def disconnect(self) -> None:
        for client in self._clients():
            try:
                await client.disconnect()
            except Exception as e:
                self.logger.warning(f"Error disconnecting {client.name}", error=str(e))
        self._connected = False
        self.logger.info("Gateway disconnected")

    async def health_check(self) -> bool:
        if not self._connected:
            return False
        for client in self._clients():
            if not await client.health_check():
                return False
        return True

    async def list_nodes(self, cluster_context: str) -> List[Node]:
        return await self.k8s_client.list_nodes(cluster_context)

    async def clear_credential_cache(self) -> None:
        self.aws_factory.clear_cache()

    async def check_auth(self, region: str) -> AuthResult:
        return await self.sts_client.check_auth(region)

    async def get_instance_details(self, region: str, instance_id: str) -> Optional[ComputeInstance]:
        return await self.ec2_client.describe_instance(region, instance_id)

    async def get_managed_cluster(self, region: str, name: str) -> Optional[ClusterRecord]:
        return await self.eks_client.describe_cluster(region, name)

    async def get_vpc_details(self, region: str, vpc_id: str) -> Optional[VpcRecord]:
        return await self.ec2_client.describe_vpc(region, vpc_id)

    async def list_subnets(self, region: str, vpc_id: str) -> List[SubnetRecord]:
        return await self.ec2_client.describe_subnets(region, vpc_id)

    async def list_compute_instances(self,
                                     region: str,
                                     vpc_id: str,
                                     cluster_name: str) -> List[ComputeInstance]:
        return await self.ec2_client.describe_cluster_instances(region, vpc_id, cluster_name)

    async def list_workload_identity_bindings(self,
                                              region: str,
                                              cluster_name: str) -> List[WorkloadIdentityBinding]:
        return await self.eks_client.list_pod_identity_associations(region, cluster_name)

    def restart_application_process(self) -> None:
        """Replace the current process with a fresh interpreter running the same command.

        The only way to drop credentials the SDK caches for the whole process.
        """
        self.logger.warning("Restarting application process", argv=sys.argv)
        os.execv(sys.executable, [sys.executable] + sys.argv)
