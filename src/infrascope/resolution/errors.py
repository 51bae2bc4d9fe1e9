"""Translation of stage failures into display-ready errors."""

import asyncio
from typing import Optional

from infrascope.core.classifier import is_credential_error
from infrascope.core.exceptions import (
    AuthRequiredError,
    ClusterIdentityNotFoundError,
    ProviderError,
    RegionUnknownError,
    ResolutionException,
)
from infrascope.models.resolution import ErrorKind, Remediation, ResolutionError

CREDENTIAL_REMEDIATIONS = [
    Remediation.RETRY_WITH_CLEARED_CREDENTIALS,
    Remediation.RESTART_APPLICATION,
]


def classify_exception(exc: BaseException, stage: Optional[str] = None) -> ResolutionError:
    """Map an exception raised by a stage to a ``ResolutionError``."""
    if isinstance(exc, ResolutionException):
        stage = exc.stage or stage

    if isinstance(exc, AuthRequiredError):
        return ResolutionError(
            kind=ErrorKind.AUTH_REQUIRED,
            message=exc.message,
            stage=stage,
            credential_related=True,
            remediations=list(CREDENTIAL_REMEDIATIONS)
        )

    if isinstance(exc, RegionUnknownError):
        return ResolutionError(
            kind=ErrorKind.REGION_UNKNOWN,
            message=exc.message,
            stage=stage,
            remediations=[Remediation.RETRY]
        )

    if isinstance(exc, ClusterIdentityNotFoundError):
        return ResolutionError(
            kind=ErrorKind.CLUSTER_IDENTITY_NOT_FOUND,
            message=exc.message,
            stage=stage,
            candidates=list(exc.candidates),
            remediations=[Remediation.RETRY]
        )

    if isinstance(exc, asyncio.TimeoutError):
        message = f"{stage} timed out" if stage else "Operation timed out"
    elif isinstance(exc, ProviderError):
        message = exc.message
    else:
        message = str(exc) or exc.__class__.__name__

    credential_related = is_credential_error(exc)
    return ResolutionError(
        kind=ErrorKind.PROVIDER_ERROR,
        message=message,
        stage=stage,
        credential_related=credential_related,
        remediations=(
            [Remediation.RETRY] + CREDENTIAL_REMEDIATIONS if credential_related else [Remediation.RETRY]
        )
    )
