"""Custom exceptions for the InfraScope resolution pipeline."""

from typing import Optional, Dict, Any, List


class InfraScopeException(Exception):
    """Base exception for InfraScope."""

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        self.message = message
        self.details = details or {}
        super().__init__(self.message)


class ClientConnectionException(InfraScopeException):
    """Raised when client connections fail."""

    def __init__(self, client_type: str, message: str, details: Optional[Dict[str, Any]] = None):
        self.client_type = client_type
        super().__init__(f"{client_type} connection failed: {message}", details)


class ConfigurationException(InfraScopeException):
    """Raised when configuration is invalid."""
    pass


class ProviderError(InfraScopeException):
    """Raised when a cluster or cloud gateway call fails.

    ``credential_related`` is decided once, where the error is raised, by
    :func:`infrascope.core.classifier.is_credential_error`.
    """

    def __init__(self,
                 operation: str,
                 message: str,
                 code: Optional[str] = None,
                 credential_related: bool = False,
                 details: Optional[Dict[str, Any]] = None):
        self.operation = operation
        self.code = code
        self.credential_related = credential_related
        super().__init__(f"{operation} failed: {message}", details)


class ResolutionException(InfraScopeException):
    """Raised when a sequential pipeline stage cannot produce its output."""

    def __init__(self, stage: str, message: str, details: Optional[Dict[str, Any]] = None):
        self.stage = stage
        super().__init__(message, details)


class RegionUnknownError(ResolutionException):
    """No node data, or no node carried a recognizable region signal."""

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__("region", message, details)


class AuthRequiredError(ResolutionException):
    """The credential probe reported that the caller is not authenticated."""

    def __init__(self, region: str, reason: Optional[str] = None):
        self.region = region
        self.reason = reason
        message = f"Not authenticated to AWS in region {region}"
        if reason:
            message = f"{message}: {reason}"
        super().__init__("auth", message, {"region": region, "reason": reason})


class ClusterIdentityNotFoundError(ResolutionException):
    """Every candidate cluster name was tried and none resolved."""

    def __init__(self, region: str, candidates: List[str]):
        self.region = region
        self.candidates = list(candidates)
        super().__init__(
            "identity",
            f"Cannot find EKS cluster in {region}. Tried: {', '.join(self.candidates)}",
            {"region": region, "candidates": self.candidates}
        )
