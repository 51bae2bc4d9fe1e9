"""Staged resolution pipeline.

Stages run strictly in order: nodes and region, auth probe, cluster
identity, then concurrent aggregation and correlation. Every transition
publishes a new immutable ``ResolutionState``.
"""

import asyncio
from typing import Callable
import structlog

from infrascope.core.classifier import is_credential_error
from infrascope.core.exceptions import AuthRequiredError, ProviderError
from infrascope.core.utils import call_with_timeout
from infrascope.models.resolution import AuthStatus, ResolutionState, ResolutionStatus
from .aggregator import ResourceAggregator
from .auth_probe import AuthProbe
from .context import ResolutionContext
from .correlator import NodeInstanceCorrelator
from .errors import classify_exception
from .identity_resolver import ClusterIdentityResolver
from .region_detector import RegionDetector

logger = structlog.get_logger(__name__)

StatePublisher = Callable[[ResolutionState], None]


class ResolutionPipeline:
    """Runs one resolution for a cluster context."""

    def __init__(self, context: ResolutionContext, publish: StatePublisher):
        self.context = context
        self._publish = publish
        self.region_detector = RegionDetector(context.settings.region_label_keys)
        self.auth_probe = AuthProbe(context)
        self.identity_resolver = ClusterIdentityResolver(context)
        self.aggregator = ResourceAggregator(context)
        self.correlator = NodeInstanceCorrelator()
        self.logger = logger.bind(component="pipeline")

    def _advance(self, state: ResolutionState, status: ResolutionStatus, **updates) -> ResolutionState:
        state = state.transition(status, **updates)
        self.logger.info(
            f"Resolution {status.value}",
            generation=state.generation,
            context=state.cluster_context,
            status=status.value
        )
        self._publish(state)
        return state

    async def run(self,
                  cluster_context: str,
                  generation: int,
                  clear_credentials: bool = False) -> ResolutionState:
        """Run every stage and return the terminal state.

        Failures become an Error state; only cancellation propagates.
        """
        state = ResolutionState.idle(generation, cluster_context)
        self._publish(state)
        gateway = self.context.gateway
        stage_timeout = self.context.settings.stage_timeout_seconds
        stage = "nodes"

        try:
            state = self._advance(state, ResolutionStatus.DETECTING_REGION)
            nodes = await call_with_timeout(gateway.list_nodes(cluster_context), stage_timeout)

            stage = "region"
            region = self.region_detector.detect(nodes)
            state = self._advance(state, ResolutionStatus.CHECKING_AUTH, nodes=list(nodes), region=region)

            stage = "auth"
            auth = await self.auth_probe.probe(region, clear_credentials=clear_credentials)
            if auth.status == AuthStatus.UNAUTHENTICATED:
                error = classify_exception(AuthRequiredError(region, auth.reason))
                return self._advance(state, ResolutionStatus.UNAUTHENTICATED, auth=auth, error=error)
            state = state.model_copy(update={"auth": auth})
            if auth.status == AuthStatus.PROBE_ERROR:
                raise ProviderError(
                    "CheckAuth",
                    auth.reason or "unknown error",
                    credential_related=is_credential_error(auth.reason)
                )

            stage = "identity"
            state = self._advance(state, ResolutionStatus.RESOLVING_IDENTITY)
            identity, vpc_id = await self.identity_resolver.resolve(
                region, cluster_context, provider_id=nodes[0].provider_id
            )

            stage = "aggregation"
            state = self._advance(state, ResolutionStatus.AGGREGATING, identity=identity, vpc_id=vpc_id)
            aggregation = await self.aggregator.aggregate(identity, region, vpc_id)
            instances = self.correlator.correlate(nodes, aggregation.instances)

            return self._advance(
                state,
                ResolutionStatus.READY,
                vpc=aggregation.vpc,
                subnets=aggregation.subnets,
                instances=instances,
                workload_identity_bindings=aggregation.workload_identity_bindings,
                categories=aggregation.categories
            )

        except asyncio.CancelledError:
            self.logger.debug("Resolution cancelled", generation=generation, context=cluster_context)
            raise
        except Exception as e:
            error = classify_exception(e, stage=stage)
            self.logger.error(
                "Resolution failed",
                generation=generation,
                context=cluster_context,
                stage=error.stage,
                kind=error.kind.value,
                error=error.message
            )
            return self._advance(state, ResolutionStatus.ERROR, error=error)
