from .aggregator import AggregationResult, ResourceAggregator
from .auth_probe import AuthProbe
from .base import BaseResourceFetcher, FetchOutcome
from .context import CredentialCache, ResolutionContext
from .correlator import NodeInstanceCorrelator
from .errors import classify_exception
from .identity_resolver import ClusterIdentityResolver
from .orchestrator import ResolutionOrchestrator
from .pipeline import ResolutionPipeline
from .region_detector import RegionDetector, instance_id_from_provider_id, parse_provider_id

__all__ = [
    "AggregationResult",
    "ResourceAggregator",
    "AuthProbe",
    "BaseResourceFetcher",
    "FetchOutcome",
    "CredentialCache",
    "ResolutionContext",
    "NodeInstanceCorrelator",
    "classify_exception",
    "ClusterIdentityResolver",
    "ResolutionOrchestrator",
    "ResolutionPipeline",
    "RegionDetector",
    "instance_id_from_provider_id",
    "parse_provider_id",
]
