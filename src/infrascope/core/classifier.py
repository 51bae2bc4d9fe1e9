"""Credential failure classification.

AWS and the cluster API mostly report expired or invalid credentials as
free text, so classification is a substring match. Both tables live here
and nowhere else.
"""

from typing import Optional, Union

from botocore.exceptions import (
    ClientError,
    CredentialRetrievalError,
    NoCredentialsError,
    PartialCredentialsError,
    ProfileNotFound,
    TokenRetrievalError,
)

# Matched case-sensitively against the error message. HTTP 401 is judged
# from the response status by each client, never from message text.
CREDENTIAL_ERROR_MARKERS = (
    "ExpiredToken",
    "security token included",
    "security token",
    "InvalidClientTokenId",
    "UnrecognizedClientException",
    "SignatureDoesNotMatch",
    "AuthFailure",
)

# Matched exactly against botocore ``ClientError`` codes.
CREDENTIAL_ERROR_CODES = frozenset({
    "ExpiredToken",
    "ExpiredTokenException",
    "InvalidClientTokenId",
    "UnrecognizedClientException",
    "SignatureDoesNotMatch",
    "AuthFailure",
    "RequestExpired",
})

_CREDENTIAL_EXCEPTION_TYPES = (
    NoCredentialsError,
    PartialCredentialsError,
    CredentialRetrievalError,
    TokenRetrievalError,
    ProfileNotFound,
)


def error_code(exc: BaseException) -> Optional[str]:
    """Extract the service error code from a botocore ``ClientError``."""
    if isinstance(exc, ClientError):
        return exc.response.get("Error", {}).get("Code")
    return None


def is_credential_error(error: Union[str, BaseException, None]) -> bool:
    """Return True when ``error`` indicates missing, expired or invalid credentials."""
    if error is None:
        return False

    if isinstance(error, BaseException):
        if getattr(error, "credential_related", False):
            return True
        if isinstance(error, _CREDENTIAL_EXCEPTION_TYPES):
            return True
        if error_code(error) in CREDENTIAL_ERROR_CODES:
            return True
        if error.__cause__ is not None and is_credential_error(error.__cause__):
            return True
        message = str(error)
    else:
        message = error

    return any(marker in message for marker in CREDENTIAL_ERROR_MARKERS)
