"""Managed cluster identity resolution."""

import asyncio
from typing import Dict, List, Optional, Tuple
import structlog

from infrascope.core.classifier import is_credential_error
from infrascope.core.exceptions import ClusterIdentityNotFoundError, ProviderError
from infrascope.core.utils import call_with_timeout, dedupe_preserving_order
from infrascope.models.resolution import ClusterIdentity
from .context import ResolutionContext
from .region_detector import instance_id_from_provider_id

logger = structlog.get_logger(__name__)


class ClusterIdentityResolver:
    """Maps a local cluster context to a managed cluster record.

    Candidate names are tried sequentially and the first that resolves
    wins. A cheap instance lookup may contribute the best candidate and
    the VPC id.
    """

    def __init__(self, context: ResolutionContext):
        self.context = context
        self.settings = context.settings
        self.logger = logger.bind(component="identity_resolver")

    def cluster_name_from_tags(self, tags: Dict[str, str]) -> Optional[str]:
        """Return the owning cluster name carried by instance tags, if any."""
        for prefix in self.settings.cluster_tag_prefixes:
            for key in tags:
                if key.startswith(prefix) and len(key) > len(prefix):
                    return key[len(prefix):]

        for key in self.settings.cluster_name_tag_keys:
            value = (tags.get(key) or "").strip()
            if value:
                return value
        return None

    def build_candidates(self, cluster_context: str, tag_name: Optional[str] = None) -> List[str]:
        """Tag-derived name, then the raw context, then the suffixed context."""
        suffix = self.settings.cluster_name_suffix
        suffixed = f"{cluster_context}{suffix}" if suffix and cluster_context else None
        return dedupe_preserving_order([tag_name, cluster_context, suffixed])

    async def _call(self, coro):
        return await call_with_timeout(coro, self.settings.stage_timeout_seconds)

    async def _instance_hints(self,
                              region: str,
                              provider_id: Optional[str]) -> Tuple[Optional[str], Optional[str]]:
        """Return ``(tag_name, vpc_id)`` from the instance behind ``provider_id``.

        Lookup failures are logged and ignored, except credential failures.
        """
        instance_id = instance_id_from_provider_id(provider_id)
        if not instance_id:
            return None, None

        try:
            instance = await self._call(self.context.gateway.get_instance_details(region, instance_id))
        except asyncio.TimeoutError:
            self.logger.warning("Instance lookup timed out", instance_id=instance_id)
            return None, None
        except ProviderError as e:
            if is_credential_error(e):
                raise
            self.logger.warning("Instance lookup failed", instance_id=instance_id, error=e.message)
            return None, None

        if instance is None:
            self.logger.warning("Instance not found", instance_id=instance_id)
            return None, None
        return self.cluster_name_from_tags(instance.tags), instance.vpc_id

    async def resolve(self,
                      region: str,
                      cluster_context: str,
                      provider_id: Optional[str] = None,
                      vpc_id: Optional[str] = None) -> Tuple[ClusterIdentity, Optional[str]]:
        """Resolve the cluster, returning the identity and the best known VPC id.

        Raises ClusterIdentityNotFoundError when every candidate fails and
        re-raises credential-related ProviderErrors untouched.
        """
        tag_name, instance_vpc_id = await self._instance_hints(region, provider_id)
        vpc_id = vpc_id or instance_vpc_id

        candidates = self.build_candidates(cluster_context, tag_name)
        self.logger.info("Resolving cluster identity", region=region, candidates=candidates)

        failures = {}
        for name in candidates:
            try:
                record = await self._call(self.context.gateway.get_managed_cluster(region, name))
            except asyncio.TimeoutError:
                failures[name] = "timed out"
                continue
            except ProviderError as e:
                if is_credential_error(e):
                    raise
                failures[name] = e.message
                continue

            if record is None:
                failures[name] = "not found"
                continue

            if not vpc_id and record.vpc_id:
                vpc_id = record.vpc_id
            self.logger.info("Cluster identity resolved", cluster=name, vpc_id=vpc_id)
            return ClusterIdentity(
                record=record,
                candidates=candidates,
                resolved_name=name,
                failures=failures
            ), vpc_id

        self.logger.warning("No candidate resolved", region=region, failures=failures)
        raise ClusterIdentityNotFoundError(region, candidates)
