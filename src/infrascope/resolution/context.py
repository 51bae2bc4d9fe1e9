"""Explicit context passed to every resolution stage."""

from dataclasses import dataclass, field
from typing import Optional
import structlog

from infrascope.clients.gateway import CloudGateway
from infrascope.config.settings import ResolutionSettings

logger = structlog.get_logger(__name__)


class CredentialCache:
    """Handle on the gateway's process-wide credential cache.

    Only the resolution pipeline clears it: before the auth probe of a
    run that follows a user retry, and on the retry itself.
    """

    def __init__(self, gateway: CloudGateway):
        self._gateway = gateway
        self.invalidations = 0
        self.logger = logger.bind(component="credential_cache")

    async def invalidate(self, reason: str) -> None:
        await self._gateway.clear_credential_cache()
        self.invalidations += 1
        self.logger.info("Credential cache invalidated", reason=reason, invalidations=self.invalidations)


@dataclass
class ResolutionContext:
    """Everything a stage may touch, injected by the orchestrator."""

    gateway: CloudGateway
    settings: ResolutionSettings = field(default_factory=ResolutionSettings)
    credentials: Optional[CredentialCache] = None
    generation: int = 0

    def __post_init__(self):
        if self.credentials is None:
            self.credentials = CredentialCache(self.gateway)
