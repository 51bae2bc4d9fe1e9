"""Shared base for the gateway's cloud and cluster clients."""

from typing import Dict, Any, Optional
import structlog

logger = structlog.get_logger(__name__)


class BaseClient:
    """Base for clients that open SDK handles per call.

    Nothing stays open between calls, so connecting only flips the
    connected flag. Subclasses with real connection state override
    ``connect``/``disconnect``. ``retry_attempts`` and
    ``retry_backoff_factor`` are read by ``retry_from_client``.
    """

    def __init__(self, config: Dict[str, Any], name: Optional[str] = None):
        self.config = config
        self.name = name or self.__class__.__name__
        self._connected = False
        self.retry_attempts = config.get("retry_attempts", 3)
        self.retry_backoff_factor = config.get("retry_backoff_factor", 1.5)
        self.logger = logger.bind(client=self.name)

    async def connect(self) -> None:
        self._connected = True

    async def disconnect(self) -> None:
        self._connected = False

    async def health_check(self) -> bool:
        return self._connected

    @property
    def is_connected(self) -> bool:
        return self._connected

    async def __aenter__(self):
        await self.connect()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.disconnect()
