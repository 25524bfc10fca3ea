"""HTTP fetch layer with retries and failure classification.

Provides the JSON GET primitive used by the feed client:
- Configurable retry policy with exponential backoff and jitter
- Retry-After handling for rate limiting
- Maximum response size enforcement
- Metrics collection for observability
"""

from hnotify.fetch.client import HttpFetcher
from hnotify.fetch.config import FetchConfig
from hnotify.fetch.metrics import FetchMetrics
from hnotify.fetch.models import (
    FetchError,
    FetchErrorClass,
    FetchResult,
    ResponseSizeExceededError,
    RetryPolicy,
)


__all__ = [
    "FetchConfig",
    "FetchError",
    "FetchErrorClass",
    "FetchMetrics",
    "FetchResult",
    "HttpFetcher",
    "ResponseSizeExceededError",
    "RetryPolicy",
]
