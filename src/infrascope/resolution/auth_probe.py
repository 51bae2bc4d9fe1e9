"""Credential probe run before any expensive cloud call."""

import asyncio
import structlog

from infrascope.core.classifier import is_credential_error
from infrascope.core.exceptions import InfraScopeException
from infrascope.core.utils import call_with_timeout
from infrascope.models.resolution import AuthResult
from .context import ResolutionContext

logger = structlog.get_logger(__name__)


class AuthProbe:
    """Checks that usable cloud credentials exist for a region."""

    def __init__(self, context: ResolutionContext):
        self.context = context
        self.logger = logger.bind(component="auth_probe")

    async def probe(self, region: str, clear_credentials: bool = False) -> AuthResult:
        """Probe credentials in ``region``.

        Returns an authenticated, unauthenticated or probe-error result;
        gateway failures never escape as exceptions.
        """
        if clear_credentials or self.context.settings.clear_credentials_on_refresh:
            await self.context.credentials.invalidate(
                reason="user retry" if clear_credentials else "refresh"
            )

        try:
            result = await call_with_timeout(
                self.context.gateway.check_auth(region),
                self.context.settings.stage_timeout_seconds
            )
        except asyncio.TimeoutError:
            reason = f"Auth check timed out after {self.context.settings.stage_timeout_seconds} seconds"
            self.logger.warning("Auth probe timed out", region=region)
            return AuthResult.probe_error(reason)
        except InfraScopeException as e:
            if is_credential_error(e):
                self.logger.warning("Auth probe reported invalid credentials", region=region, error=e.message)
                return AuthResult.unauthenticated(e.message)
            self.logger.error("Auth probe failed", region=region, error=e.message)
            return AuthResult.probe_error(e.message)

        if result.authenticated:
            self.logger.info("Authenticated", region=region, account=result.account, identity=result.identity)
        else:
            self.logger.warning("Not authenticated", region=region, reason=result.reason)
        return result
