"""Utility functions and decorators."""

import asyncio
import functools
import logging.config
import structlog
import yaml
from pathlib import Path
from typing import Any, Awaitable, Callable, Dict, List, Optional, TypeVar, Union
from tenacity import retry, retry_if_exception, stop_after_attempt, wait_exponential

from infrascope.core.exceptions import ProviderError

T = TypeVar('T')


def is_transient_error(exc: BaseException) -> bool:
    """Return True for gateway failures worth retrying.

    Credential failures and missing resources never change on retry.
    """
    if isinstance(exc, ProviderError):
        if exc.credential_related:
            return False
        if exc.code and exc.code.isdigit():
            status = int(exc.code)
            return status == 429 or status >= 500
        return exc.code not in NON_RETRYABLE_CODES
    return False


NON_RETRYABLE_CODES = frozenset({
    "ResourceNotFoundException",
    "InvalidInstanceID.NotFound",
    "InvalidInstanceID.Malformed",
    "InvalidVpcID.NotFound",
    "InvalidParameterValue",
    "InvalidParameterException",
    "AccessDenied",
    "AccessDeniedException",
    "UnauthorizedOperation",
    "ConfigException",
})


def retry_with_backoff(
    max_retries: int = 3,
    backoff_factor: float = 1.5,
    max_wait: float = 60.0,
    retry_on: Callable[[BaseException], bool] = is_transient_error
):
    """Decorator for retry with exponential backoff."""
    return retry(
        stop=stop_after_attempt(max_retries),
        wait=wait_exponential(multiplier=backoff_factor, max=max_wait),
        retry=retry_if_exception(retry_on),
        reraise=True
    )


def retry_from_client(func: Callable[..., Awaitable[T]]) -> Callable[..., Awaitable[T]]:
    """Retry a client coroutine method using the client's own retry settings.

    Reads ``retry_attempts`` and ``retry_backoff_factor`` from the instance
    at call time.
    """
    @functools.wraps(func)
    async def wrapper(self, *args, **kwargs):
        retrying = retry_with_backoff(
            max_retries=max(1, self.retry_attempts),
            backoff_factor=self.retry_backoff_factor
        )(func)
        return await retrying(self, *args, **kwargs)
    return wrapper


def setup_logging(config_path: Optional[Union[str, Path]] = None,
                  log_level: str = "INFO",
                  log_format: str = "text") -> None:
    """Setup structured logging configuration."""
    if config_path and Path(config_path).exists():
        with open(config_path, 'r') as f:
            config = yaml.safe_load(f)
        logging.config.dictConfig(config)
    else:
        logging.basicConfig(
            level=getattr(logging, log_level.upper()),
            format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
        )

    renderer = (
        structlog.processors.JSONRenderer()
        if config_path or log_format == "json"
        else structlog.dev.ConsoleRenderer()
    )
    structlog.configure(
        processors=[
            structlog.stdlib.filter_by_level,
            structlog.stdlib.add_logger_name,
            structlog.stdlib.add_log_level,
            structlog.stdlib.PositionalArgumentsFormatter(),
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            structlog.processors.UnicodeDecoder(),
            renderer
        ],
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )


def dedupe_preserving_order(items: List[str]) -> List[str]:
    """Drop repeated and empty entries, keeping first occurrences in place."""
    seen = set()
    result = []
    for item in items:
        if item and item not in seen:
            seen.add(item)
            result.append(item)
    return result


async def call_with_timeout(coro: Awaitable[T], timeout_seconds: Optional[float]) -> T:
    """Await ``coro``, bounded by ``timeout_seconds`` when one is set."""
    if timeout_seconds:
        return await asyncio.wait_for(coro, timeout=timeout_seconds)
    return await coro


async def gather_settled(coros: list, max_concurrency: int = 10) -> list:
    """Run coroutines concurrently and wait for every one to settle.

    Failures come back as exception objects in the result list; one
    failing coroutine never cancels the others.
    """
    semaphore = asyncio.Semaphore(max_concurrency)

    async def limited_coro(coro):
        async with semaphore:
            return await coro

    limited_coros = [limited_coro(coro) for coro in coros]
    return await asyncio.gather(*limited_coros, return_exceptions=True)
