"""Base resource fetcher interface."""

import asyncio
import time
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, Optional
import structlog

from infrascope.clients.gateway import CloudGateway
from infrascope.core.classifier import is_credential_error
from infrascope.core.utils import call_with_timeout
from infrascope.models.resolution import CategoryResult, FetchStatus, ResourceCategory

logger = structlog.get_logger(__name__)


@dataclass
class FetchOutcome:
    """Category result plus the fetched data (None unless successful)."""

    result: CategoryResult
    data: Any = None


class BaseResourceFetcher(ABC):
    """Abstract base class for one independently fetched resource category."""

    def __init__(self, gateway: CloudGateway, region: str, timeout_seconds: Optional[float] = None):
        self.gateway = gateway
        self.region = region
        self.timeout_seconds = timeout_seconds
        self.logger = logger.bind(fetcher=self.__class__.__name__, region=region)

    @abstractmethod
    async def fetch(self) -> Any:
        """Fetch the category's data from the gateway."""
        pass

    @abstractmethod
    def get_category(self) -> ResourceCategory:
        pass

    @staticmethod
    def count(data: Any) -> int:
        if data is None:
            return 0
        if isinstance(data, list):
            return len(data)
        return 1

    async def fetch_with_metadata(self) -> FetchOutcome:
        """Fetch, recording status and duration. Failures are returned, not raised."""
        category = self.get_category()
        start = time.monotonic()
        data = None
        error = None
        credential_related = False

        try:
            data = await call_with_timeout(self.fetch(), self.timeout_seconds)
            status = FetchStatus.SUCCESS
        except asyncio.TimeoutError:
            status = FetchStatus.TIMEOUT
            error = f"Timed out after {self.timeout_seconds} seconds"
            self.logger.warning(f"Fetch timed out for {category.value}")
        except Exception as e:
            status = FetchStatus.FAILED
            error = str(e)
            credential_related = is_credential_error(e)
            self.logger.error(f"Fetch failed for {category.value}", error=error)

        result = CategoryResult(
            category=category,
            status=status,
            error=error,
            credential_related=credential_related,
            item_count=self.count(data),
            duration_seconds=time.monotonic() - start
        )
        return FetchOutcome(result=result, data=data)
