"""Configuration model for the HTTP fetch layer."""

from typing import Annotated

from pydantic import BaseModel, ConfigDict, Field, field_validator

from hnotify.fetch.constants import (
    DEFAULT_BASE_URL,
    DEFAULT_MAX_RESPONSE_SIZE_BYTES,
    DEFAULT_TIMEOUT_SECONDS,
)
from hnotify.fetch.models import RetryPolicy


class FetchConfig(BaseModel):
    """Configuration for all HTTP fetch operations against the feed."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    base_url: Annotated[str, Field(min_length=1)] = DEFAULT_BASE_URL
    user_agent: Annotated[str, Field(min_length=1, max_length=500)] = "hnotify/0.1"
    timeout_seconds: Annotated[float, Field(gt=0.0, le=300.0)] = (
        DEFAULT_TIMEOUT_SECONDS
    )
    max_response_size_bytes: Annotated[int, Field(ge=1024, le=100 * 1024 * 1024)] = (
        DEFAULT_MAX_RESPONSE_SIZE_BYTES
    )
    retry_policy: RetryPolicy = Field(default_factory=RetryPolicy)

    @field_validator("base_url")
    @classmethod
    def validate_base_url(cls, v: str) -> str:
        """Require an http(s) base URL and drop any trailing slash."""
        if not v.startswith(("http://", "https://")):
            msg = f"base_url must start with http:// or https://, got {v!r}"
            raise ValueError(msg)
        return v.rstrip("/")

    def url_for(self, path: str) -> str:
        """Build an absolute URL for an API path.

        Args:
            path: Path beginning with ``/``.

        Returns:
            Absolute URL.
        """
        return f"{self.base_url}{path}"
