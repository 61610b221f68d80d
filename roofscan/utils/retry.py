"""
Exponential backoff for the scan job HTTP calls.

Submitting, polling and fetching a job all go through ``retry_with_backoff``.
A call is repeated when the server answered with a transient status (rate
limited or temporarily unavailable) or when the connection itself broke.
Anything else, such as a 404 for an unknown job, surfaces on the first try.
Projection and rendering never retry.

Usage:
    from roofscan.utils.retry import RetryConfig, retry_with_backoff

    @retry_with_backoff(config=RetryConfig(max_retries=5))
    def poll():
        return session.get(status_url, timeout=30)
"""

import dataclasses
import functools
import logging
import random
import time
from typing import Any, Callable, Optional, Tuple, Type, TypeVar

import requests

logger = logging.getLogger(__name__)

T = TypeVar("T")

TRANSIENT_STATUS_CODES = (429, 500, 502, 503, 504)


@dataclasses.dataclass(frozen=True)
class RetryConfig:
    """How many times, and how patiently, a scan API call is repeated."""

    max_retries: int = 3
    base_delay: float = 1.0
    max_delay: float = 30.0
    exponential_base: float = 2.0
    # Adds up to 25% on top of each delay
    jitter: bool = True
    retryable_exceptions: Tuple[Type[BaseException], ...] = (
        requests.ConnectionError,
        requests.Timeout,
        ConnectionError,
        TimeoutError,
    )
    retryable_status_codes: Tuple[int, ...] = TRANSIENT_STATUS_CODES


DEFAULT_RETRY_CONFIG = RetryConfig()


def calculate_delay(attempt: int, config: RetryConfig) -> float:
    """Seconds to sleep after failed attempt number ``attempt`` (0-indexed)."""
    delay = min(config.base_delay * config.exponential_base ** attempt, config.max_delay)
    if config.jitter:
        delay += delay * random.uniform(0, 0.25)
    return delay


def should_retry_exception(exc: BaseException, config: RetryConfig) -> bool:
    """
    An HTTP error is judged by its response status alone; other failures by
    their type.
    """
    status = getattr(getattr(exc, "response", None), "status_code", None)
    if status is not None:
        return status in config.retryable_status_codes
    return isinstance(exc, config.retryable_exceptions)


def retry_with_backoff(
    func: Optional[Callable[..., T]] = None,
    *,
    config: Optional[RetryConfig] = None,
    max_retries: Optional[int] = None,
    on_retry: Optional[Callable[[Exception, int], None]] = None,
    sleep: Callable[[float], None] = time.sleep,
) -> Callable[..., T]:
    """
    Wrap ``func`` so transient failures are retried with growing delays.

    Works both as ``retry_with_backoff(fn, ...)`` and as a decorator factory
    ``@retry_with_backoff(...)``. ``max_retries`` overrides the config without
    touching the caller's instance, and ``sleep`` can be swapped out in tests.
    The last exception is re-raised once the retries are spent.
    """
    config = config or DEFAULT_RETRY_CONFIG
    if max_retries is not None:
        config = dataclasses.replace(config, max_retries=max_retries)

    def decorator(fn: Callable[..., T]) -> Callable[..., T]:
        name = getattr(fn, "__name__", repr(fn))

        @functools.wraps(fn)
        def wrapper(*args: Any, **kwargs: Any) -> T:
            attempt = 0
            while True:
                try:
                    return fn(*args, **kwargs)
                except Exception as exc:
                    if not should_retry_exception(exc, config):
                        raise
                    if attempt >= config.max_retries:
                        logger.error(f"{name} failed after {attempt + 1} attempts: {exc}")
                        raise
                    delay = calculate_delay(attempt, config)
                    logger.warning(
                        f"{name} failed ({exc}), attempt {attempt + 2} of "
                        f"{config.max_retries + 1} in {delay:.1f}s"
                    )
                    if on_retry is not None:
                        on_retry(exc, attempt)
                    sleep(delay)
                    attempt += 1

        return wrapper

    return decorator(func) if func is not None else decorator
