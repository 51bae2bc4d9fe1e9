"""Concurrent resource aggregation for a resolved cluster."""

import time
from dataclasses import dataclass, field
from typing import Dict, List, Optional
import structlog

from infrascope.core.utils import gather_settled
from infrascope.models.resolution import (
    CategoryResult,
    ClusterIdentity,
    FetchStatus,
    ResourceCategory,
)
from infrascope.models.resources import (
    ComputeInstance,
    SubnetRecord,
    VpcRecord,
    WorkloadIdentityBinding,
)
from .base import BaseResourceFetcher, FetchOutcome
from .context import ResolutionContext
from .resources import InstanceFetcher, SubnetFetcher, VpcFetcher, WorkloadIdentityFetcher

logger = structlog.get_logger(__name__)

VPC_SCOPED_CATEGORIES = (
    ResourceCategory.VPC,
    ResourceCategory.SUBNETS,
    ResourceCategory.COMPUTE_INSTANCES,
)


@dataclass
class AggregationResult:
    """Resources gathered for one cluster plus per-category outcomes."""

    vpc: Optional[VpcRecord] = None
    subnets: List[SubnetRecord] = field(default_factory=list)
    instances: List[ComputeInstance] = field(default_factory=list)
    workload_identity_bindings: List[WorkloadIdentityBinding] = field(default_factory=list)
    categories: Dict[ResourceCategory, CategoryResult] = field(default_factory=dict)
    duration_seconds: float = 0.0

    @property
    def failed_categories(self) -> List[ResourceCategory]:
        return [category for category, result in self.categories.items() if result.failed]


class ResourceAggregator:
    """Fetches every resource category concurrently and waits for all of them."""

    def __init__(self, context: ResolutionContext):
        self.context = context
        self.settings = context.settings
        self.logger = logger.bind(component="aggregator")

    def build_fetchers(self,
                       identity: ClusterIdentity,
                       region: str,
                       vpc_id: Optional[str]) -> List[BaseResourceFetcher]:
        """Fetchers for every category that has the inputs it needs."""
        gateway = self.context.gateway
        timeout = self.settings.fetch_timeout_seconds
        cluster_name = identity.record.name

        fetchers = []
        if vpc_id:
            fetchers.extend([
                VpcFetcher(gateway, region, vpc_id, timeout),
                SubnetFetcher(gateway, region, vpc_id, timeout),
                InstanceFetcher(gateway, region, vpc_id, cluster_name, timeout),
            ])
        fetchers.append(WorkloadIdentityFetcher(gateway, region, cluster_name, timeout))
        return fetchers

    async def aggregate(self,
                        identity: ClusterIdentity,
                        region: str,
                        vpc_id: Optional[str]) -> AggregationResult:
        """Run all fetchers concurrently; one failing category never affects another."""
        start = time.monotonic()
        result = AggregationResult()

        if not vpc_id:
            self.logger.warning("VPC id unknown, skipping VPC scoped categories", cluster=identity.record.name)
            for category in VPC_SCOPED_CATEGORIES:
                result.categories[category] = CategoryResult(
                    category=category,
                    status=FetchStatus.SKIPPED,
                    error="VPC id unknown"
                )

        fetchers = self.build_fetchers(identity, region, vpc_id)
        self.logger.info(f"Starting aggregation with {len(fetchers)} fetchers", region=region, vpc_id=vpc_id)

        outcomes = await gather_settled(
            [fetcher.fetch_with_metadata() for fetcher in fetchers],
            max_concurrency=self.settings.max_concurrency
        )

        for fetcher, outcome in zip(fetchers, outcomes):
            if isinstance(outcome, BaseException):
                category = fetcher.get_category()
                outcome = FetchOutcome(result=CategoryResult(
                    category=category,
                    status=FetchStatus.FAILED,
                    error=str(outcome)
                ))
            self._apply(result, outcome)

        result.duration_seconds = time.monotonic() - start
        self.logger.info(
            f"Aggregation completed in {result.duration_seconds:.2f}s",
            failed=[c.value for c in result.failed_categories]
        )
        return result

    @staticmethod
    def _apply(result: AggregationResult, outcome: FetchOutcome) -> None:
        category = outcome.result.category
        result.categories[category] = outcome.result
        if outcome.result.status != FetchStatus.SUCCESS:
            return

        if category == ResourceCategory.VPC:
            result.vpc = outcome.data
        elif category == ResourceCategory.SUBNETS:
            result.subnets = outcome.data or []
        elif category == ResourceCategory.COMPUTE_INSTANCES:
            result.instances = outcome.data or []
        elif category == ResourceCategory.WORKLOAD_IDENTITY_BINDINGS:
            result.workload_identity_bindings = outcome.data or []
