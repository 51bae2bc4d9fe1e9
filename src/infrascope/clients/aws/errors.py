"""Translation of botocore failures into ProviderError."""

from infrascope.core.classifier import error_code, is_credential_error
from infrascope.core.exceptions import ProviderError


def provider_error(operation: str, exc: BaseException) -> ProviderError:
    """Wrap an SDK exception, classifying it once at the boundary."""
    return ProviderError(
        operation,
        str(exc),
        code=error_code(exc),
        credential_related=is_credential_error(exc),
        details={"exception_type": type(exc).__name__}
    )
