from .base_models import *
from .resources import *
from .resolution import *

__all__ = [
    "InfraScopeModel",
    "Node",
    "ClusterRecord",
    "VpcRecord",
    "SubnetRecord",
    "ComputeInstance",
    "WorkloadIdentityBinding",
    "ResolutionStatus",
    "AuthStatus",
    "AuthResult",
    "ErrorKind",
    "Remediation",
    "ResourceCategory",
    "FetchStatus",
    "CategoryResult",
    "ClusterIdentity",
    "ResolutionError",
    "ResolutionState",
]
