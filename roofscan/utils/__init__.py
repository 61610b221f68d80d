"""Utility modules."""

from .logging_config import (
    get_logger,
    setup_logging,
    RoofScanFormatter,
    FileFormatter,
)
from .retry import (
    retry_with_backoff,
    RetryConfig,
    DEFAULT_RETRY_CONFIG,
)

__all__ = [
    # Logging
    "get_logger",
    "setup_logging",
    "RoofScanFormatter",
    "FileFormatter",
    # Retry
    "retry_with_backoff",
    "RetryConfig",
    "DEFAULT_RETRY_CONFIG",
]
