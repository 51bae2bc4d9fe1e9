"""Kubernetes client factory."""

from typing import Dict, Any
import structlog

from .k8s_client import KubernetesClient

logger = structlog.get_logger(__name__)


class KubernetesClientFactory:
    """Factory for creating Kubernetes clients."""

    def __init__(self, config: Dict[str, Any]):
        self.config = config
        self.kubeconfig_path = config.get("kubeconfig_path")
        self.context = config.get("context")

        self.logger = logger.bind(factory="kubernetes")

    def create_client(self) -> KubernetesClient:
        """Create a Kubernetes client bound to the configured kubeconfig."""
        self.logger.debug("Creating Kubernetes client", kubeconfig=self.kubeconfig_path or "default")
        return KubernetesClient(
            config_dict=self.config,
            kubeconfig_path=self.kubeconfig_path,
            context=self.context
        )
