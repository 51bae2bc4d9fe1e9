"""Kubernetes client for node inventory."""

import asyncio
from typing import Dict, Any, List, Optional
import structlog
from kubernetes import client, config
from kubernetes.client.rest import ApiException
from kubernetes.config.config_exception import ConfigException

from infrascope.core.base_client import BaseClient
from infrascope.core.classifier import is_credential_error
from infrascope.core.exceptions import ProviderError
from infrascope.core.utils import retry_from_client
from infrascope.mappers.resource_mapper import ResourceDataMapper
from infrascope.models.resources import Node

logger = structlog.get_logger(__name__)


class KubernetesClient(BaseClient):
    """Kubernetes client that lists nodes for any kubeconfig context."""

    def __init__(self,
                 config_dict: Dict[str, Any],
                 kubeconfig_path: Optional[str] = None,
                 context: Optional[str] = None):
        super().__init__(config_dict, "KubernetesClient")
        self.kubeconfig_path = kubeconfig_path
        self.default_context = context
        self.mapper = ResourceDataMapper()

    async def disconnect(self) -> None:
        await super().disconnect()
        self.logger.info("Kubernetes client disconnected")

    @retry_from_client
    async def list_nodes(self, context: Optional[str] = None) -> List[Node]:
        """List cluster nodes for ``context`` (falls back to the configured default)."""
        target_context = context or self.default_context
        try:
            raw_nodes = await asyncio.to_thread(self._list_nodes_sync, target_context)
        except ApiException as e:
            raise ProviderError(
                "ListNodes",
                f"{e.status} {e.reason}",
                code=str(e.status),
                credential_related=e.status == 401 or is_credential_error(str(e.reason)),
            )
        except ConfigException as e:
            raise ProviderError(
                "ListNodes",
                f"Invalid kubeconfig for context {target_context}: {e}",
                code="ConfigException"
            )

        nodes = [self.mapper.map_node(node) for node in raw_nodes]
        self.logger.info(f"Discovered {len(nodes)} nodes", context=target_context)
        return nodes

    def _list_nodes_sync(self, context: Optional[str]) -> list:
        api_client = config.new_client_from_config(config_file=self.kubeconfig_path, context=context)
        try:
            return client.CoreV1Api(api_client).list_node().items
        finally:
            api_client.close()
