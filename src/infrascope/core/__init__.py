from .exceptions import *
from .base_client import BaseClient
from .utils import *

__all__ = [
    "BaseClient",
    "InfraScopeException",
    "ClientConnectionException",
    "ConfigurationException",
    "ProviderError",
    "ResolutionException",
    "RegionUnknownError",
    "AuthRequiredError",
    "ClusterIdentityNotFoundError",
    "retry_with_backoff",
    "retry_from_client",
    "setup_logging",
    "gather_settled",
    "call_with_timeout",
    "dedupe_preserving_order",
]
