"""Configuration schema for the notifier."""

from datetime import timedelta
from typing import Annotated

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from hnotify.config.constants import (
    DEFAULT_DEGRADED_AFTER_FAILURES,
    DEFAULT_EVALUATION_INTERVAL,
    DEFAULT_EVICTION_INTERVAL,
    DEFAULT_RETENTION,
    DEFAULT_SCORE_THRESHOLD,
    DEFAULT_STALE_AGE,
)
from hnotify.evaluator.models import FetchFailurePolicy
from hnotify.fetch.config import FetchConfig


class NotifierConfig(BaseModel):
    """Policy and scheduling configuration.

    Durations accept seconds (``172800``) or ISO 8601 (``P2D``, ``PT10S``).
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    score_threshold: Annotated[int, Field(ge=0)] = DEFAULT_SCORE_THRESHOLD
    stale_age: timedelta = DEFAULT_STALE_AGE
    retention: timedelta = DEFAULT_RETENTION
    evaluation_interval: timedelta = DEFAULT_EVALUATION_INTERVAL
    eviction_interval: timedelta = DEFAULT_EVICTION_INTERVAL
    fetch_failure_policy: FetchFailurePolicy = FetchFailurePolicy.SKIP
    min_ranked_ids: Annotated[int, Field(ge=0, le=10000)] = 0
    max_ranked_ids: Annotated[int, Field(ge=0, le=10000)] = 0
    degraded_after_failures: Annotated[int, Field(ge=1, le=1000)] = (
        DEFAULT_DEGRADED_AFTER_FAILURES
    )
    fetch: FetchConfig = Field(default_factory=FetchConfig)

    @field_validator(
        "stale_age", "retention", "evaluation_interval", "eviction_interval"
    )
    @classmethod
    def validate_positive(cls, v: timedelta) -> timedelta:
        """Durations must be strictly positive."""
        if v <= timedelta(0):
            msg = f"duration must be positive, got {v}"
            raise ValueError(msg)
        return v

    @model_validator(mode="after")
    def validate_horizons(self) -> "NotifierConfig":
        """Reject horizons that would evict items before they can resolve."""
        if self.retention <= self.stale_age:
            msg = (
                f"retention ({self.retention}) must be greater than "
                f"stale_age ({self.stale_age})"
            )
            raise ValueError(msg)
        if self.max_ranked_ids and self.min_ranked_ids > self.max_ranked_ids:
            msg = (
                f"min_ranked_ids ({self.min_ranked_ids}) cannot exceed "
                f"max_ranked_ids ({self.max_ranked_ids})"
            )
            raise ValueError(msg)
        return self

    def summary(self) -> dict[str, object]:
        """Flatten the effective values for logging and display."""
        return {
            "score_threshold": self.score_threshold,
            "stale_age_hours": self.stale_age.total_seconds() / 3600,
            "retention_hours": self.retention.total_seconds() / 3600,
            "evaluation_interval_seconds": self.evaluation_interval.total_seconds(),
            "eviction_interval_seconds": self.eviction_interval.total_seconds(),
            "fetch_failure_policy": self.fetch_failure_policy.value,
            "min_ranked_ids": self.min_ranked_ids,
            "max_ranked_ids": self.max_ranked_ids,
            "degraded_after_failures": self.degraded_after_failures,
            "base_url": self.fetch.base_url,
            "timeout_seconds": self.fetch.timeout_seconds,
            "max_retries": self.fetch.retry_policy.max_retries,
        }
