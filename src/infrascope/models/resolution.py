"""
Resolution state models.

``ResolutionState`` is the snapshot handed to the display layer. It is
frozen; every stage transition produces a new instance via
:meth:`ResolutionState.transition`.
"""

from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, List, Optional

from pydantic import Field

from .base_models import InfraScopeModel
from .resources import (
    ClusterRecord,
    ComputeInstance,
    Node,
    SubnetRecord,
    VpcRecord,
    WorkloadIdentityBinding,
)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class ResolutionStatus(str, Enum):
    """Pipeline state machine states."""
    IDLE = "Idle"
    DETECTING_REGION = "DetectingRegion"
    CHECKING_AUTH = "CheckingAuth"
    UNAUTHENTICATED = "Unauthenticated"
    RESOLVING_IDENTITY = "ResolvingIdentity"
    AGGREGATING = "Aggregating"
    READY = "Ready"
    ERROR = "Error"


TERMINAL_STATUSES = frozenset({
    ResolutionStatus.UNAUTHENTICATED,
    ResolutionStatus.READY,
    ResolutionStatus.ERROR,
})


class AuthStatus(str, Enum):
    """Outcome of the credential probe.

    ``CHECKING`` means the probe has not reported yet, which is distinct
    from ``UNAUTHENTICATED``.
    """
    CHECKING = "checking"
    AUTHENTICATED = "authenticated"
    UNAUTHENTICATED = "unauthenticated"
    PROBE_ERROR = "probe_error"


class ErrorKind(str, Enum):
    """Top-level error taxonomy."""
    REGION_UNKNOWN = "RegionUnknown"
    AUTH_REQUIRED = "AuthRequired"
    CLUSTER_IDENTITY_NOT_FOUND = "ClusterIdentityNotFound"
    PROVIDER_ERROR = "ProviderError"


class Remediation(str, Enum):
    """Recovery actions the display layer may offer."""
    RETRY = "retry"
    RETRY_WITH_CLEARED_CREDENTIALS = "retry_with_cleared_credentials"
    RESTART_APPLICATION = "restart_application"


class ResourceCategory(str, Enum):
    """Independently fetched resource collections."""
    VPC = "vpc"
    SUBNETS = "subnets"
    COMPUTE_INSTANCES = "compute_instances"
    WORKLOAD_IDENTITY_BINDINGS = "workload_identity_bindings"


class FetchStatus(str, Enum):
    """Outcome of one resource category fetch."""
    SUCCESS = "success"
    FAILED = "failed"
    TIMEOUT = "timeout"
    SKIPPED = "skipped"


class AuthResult(InfraScopeModel):
    """Credential probe result."""

    status: AuthStatus = AuthStatus.CHECKING
    reason: Optional[str] = None
    account: Optional[str] = None
    identity: Optional[str] = None

    @property
    def authenticated(self) -> bool:
        return self.status == AuthStatus.AUTHENTICATED

    @classmethod
    def checking(cls) -> "AuthResult":
        return cls(status=AuthStatus.CHECKING)

    @classmethod
    def ok(cls, account: Optional[str] = None, identity: Optional[str] = None) -> "AuthResult":
        return cls(status=AuthStatus.AUTHENTICATED, account=account, identity=identity)

    @classmethod
    def unauthenticated(cls, reason: Optional[str] = None) -> "AuthResult":
        return cls(status=AuthStatus.UNAUTHENTICATED, reason=reason)

    @classmethod
    def probe_error(cls, reason: str) -> "AuthResult":
        return cls(status=AuthStatus.PROBE_ERROR, reason=reason)


class ClusterIdentity(InfraScopeModel):
    """Resolved managed cluster plus how it was found."""

    record: ClusterRecord
    candidates: List[str] = Field(default_factory=list)
    resolved_name: Optional[str] = None
    failures: Dict[str, str] = Field(default_factory=dict)


class ResolutionError(InfraScopeModel):
    """Classified terminal error shown by the display layer."""

    kind: ErrorKind
    message: str
    stage: Optional[str] = None
    candidates: List[str] = Field(default_factory=list)
    credential_related: bool = False
    remediations: List[Remediation] = Field(default_factory=list)


class CategoryResult(InfraScopeModel):
    """Per-category fetch outcome. Failures here never reach the top level."""

    category: ResourceCategory
    status: FetchStatus
    error: Optional[str] = None
    credential_related: bool = False
    item_count: int = 0
    duration_seconds: float = 0.0

    @property
    def failed(self) -> bool:
        return self.status in (FetchStatus.FAILED, FetchStatus.TIMEOUT)


class ResolutionState(InfraScopeModel):
    """Aggregate snapshot of one resolution run."""

    generation: int = 0
    cluster_context: Optional[str] = None
    status: ResolutionStatus = ResolutionStatus.IDLE
    region: Optional[str] = None
    auth: AuthResult = Field(default_factory=AuthResult.checking)
    identity: Optional[ClusterIdentity] = None
    vpc_id: Optional[str] = None
    nodes: List[Node] = Field(default_factory=list)
    vpc: Optional[VpcRecord] = None
    subnets: List[SubnetRecord] = Field(default_factory=list)
    instances: List[ComputeInstance] = Field(default_factory=list)
    workload_identity_bindings: List[WorkloadIdentityBinding] = Field(default_factory=list)
    categories: Dict[ResourceCategory, CategoryResult] = Field(default_factory=dict)
    error: Optional[ResolutionError] = None
    started_at: Optional[datetime] = None
    updated_at: datetime = Field(default_factory=_utcnow)

    @classmethod
    def idle(cls, generation: int = 0, cluster_context: Optional[str] = None) -> "ResolutionState":
        return cls(
            generation=generation,
            cluster_context=cluster_context,
            started_at=_utcnow() if cluster_context else None,
        )

    def transition(self, status: ResolutionStatus, **updates: Any) -> "ResolutionState":
        """Return a new snapshot in ``status`` with ``updates`` applied."""
        updates["status"] = status
        updates["updated_at"] = _utcnow()
        return self.model_copy(update=updates)

    @property
    def is_terminal(self) -> bool:
        return self.status in TERMINAL_STATUSES

    @property
    def partial_failures(self) -> Dict[ResourceCategory, CategoryResult]:
        """Categories that failed or timed out during aggregation."""
        return {
            category: result
            for category, result in self.categories.items()
            if result.failed
        }

    @property
    def cluster(self) -> Optional[ClusterRecord]:
        return self.identity.record if self.identity else None

    def summary(self) -> Dict[str, Any]:
        """Compact view for logs and the CLI."""
        return {
            "generation": self.generation,
            "context": self.cluster_context,
            "status": self.status.value,
            "region": self.region,
            "auth": self.auth.status.value,
            "account": self.auth.account,
            "cluster": self.identity.resolved_name if self.identity else None,
            "vpc_id": self.vpc_id,
            "subnets": len(self.subnets),
            "instances": len(self.instances),
            "mapped_instances": sum(1 for i in self.instances if i.mapped_node),
            "workload_identity_bindings": len(self.workload_identity_bindings),
            "partial_failures": sorted(c.value for c in self.partial_failures),
            "error": self.error.message if self.error else None,
        }
