"""AWS session factory and process-level credential cache."""

import time
from typing import Dict, Any, Optional
import aioboto3
import structlog

from infrascope.core.exceptions import ClientConnectionException

logger = structlog.get_logger(__name__)


class AwsClientFactory:
    """Factory for region-scoped aioboto3 clients.

    Sessions are cached per region. A cached session holds resolved
    credentials, so this cache is the credential cache the resolution
    pipeline invalidates before probing auth.
    """

    def __init__(self, config: Dict[str, Any]):
        self.config = config
        self.profile = config.get("profile")
        self.access_key_id = config.get("access_key_id")
        self.secret_access_key = config.get("secret_access_key")
        self.session_token = config.get("session_token")
        self.refresh_interval = config.get("credential_refresh_interval_seconds", 300)

        self._sessions: Dict[str, aioboto3.Session] = {}
        self._last_refresh = time.monotonic()
        self.cache_clears = 0
        self.logger = logger.bind(factory="aws")

    def _has_static_credentials(self) -> bool:
        return bool(
            isinstance(self.access_key_id, str) and self.access_key_id.strip()
            and isinstance(self.secret_access_key, str) and self.secret_access_key.strip()
        )

    def _should_refresh(self) -> bool:
        if not self.refresh_interval:
            return False
        return time.monotonic() - self._last_refresh > self.refresh_interval

    def _create_session(self, region: str) -> aioboto3.Session:
        try:
            if self._has_static_credentials():
                self.logger.debug("Using static credentials", region=region)
                return aioboto3.Session(
                    aws_access_key_id=self.access_key_id,
                    aws_secret_access_key=self.secret_access_key,
                    aws_session_token=self.session_token,
                    region_name=region
                )
            self.logger.debug("Using default credential chain", region=region, profile=self.profile)
            return aioboto3.Session(profile_name=self.profile, region_name=region)
        except Exception as e:
            raise ClientConnectionException("AWS", f"Failed to create session: {e}") from e

    def get_session(self, region: str) -> aioboto3.Session:
        """Return the cached session for ``region``, creating it if needed."""
        if self._should_refresh():
            self.clear_cache()

        session = self._sessions.get(region)
        if session is None:
            session = self._create_session(region)
            self._sessions[region] = session
        return session

    def client(self, service: str, region: str):
        """Async context manager yielding a ``service`` client for ``region``."""
        return self.get_session(region).client(service, region_name=region)

    def clear_cache(self, region: Optional[str] = None) -> None:
        """Drop cached sessions so the next call re-resolves credentials.

        Credentials cached by the SDK outside these sessions (for example a
        long-lived SSO token cache) survive this; only an application
        restart clears those.
        """
        if region is None:
            self._sessions.clear()
        else:
            self._sessions.pop(region, None)
        self._last_refresh = time.monotonic()
        self.cache_clears += 1
        self.logger.info("Cleared AWS session cache", region=region or "all")

    @property
    def cached_regions(self):
        return sorted(self._sessions)
