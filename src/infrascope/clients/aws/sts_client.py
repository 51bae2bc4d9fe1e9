"""STS client used as the credential probe."""

from typing import Dict, Any
import structlog
from botocore.exceptions import BotoCoreError, ClientError

from infrascope.core.base_client import BaseClient
from infrascope.core.classifier import is_credential_error
from infrascope.models.resolution import AuthResult
from .client_factory import AwsClientFactory
from .errors import provider_error

logger = structlog.get_logger(__name__)


class StsClient(BaseClient):
    """Client for STS caller identity checks."""

    def __init__(self, factory: AwsClientFactory, config: Dict[str, Any]):
        super().__init__(config, "StsClient")
        self.factory = factory

    async def check_auth(self, region: str) -> AuthResult:
        """Call ``GetCallerIdentity`` in ``region``.

        Credential failures come back as an unauthenticated result; any
        other failure (network, endpoint) raises ProviderError.
        """
        try:
            async with self.factory.client("sts", region) as sts:
                response = await sts.get_caller_identity()
        except (ClientError, BotoCoreError) as e:
            if is_credential_error(e):
                self.logger.warning("AWS auth check failed", region=region, error=str(e))
                return AuthResult.unauthenticated(str(e))
            raise provider_error("GetCallerIdentity", e)

        self.logger.info(
            "AWS auth check successful",
            region=region,
            account=response.get('Account'),
            identity=response.get('Arn')
        )
        return AuthResult.ok(account=response.get('Account'), identity=response.get('Arn'))
