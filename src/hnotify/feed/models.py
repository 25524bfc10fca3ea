"""Item model for the Hacker News API."""

from datetime import UTC, datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class Item(BaseModel):
    """A story (or other item) as returned by ``/item/{id}.json``.

    Only ``score`` and ``posted_at`` drive notification policy; the rest is
    passed through to sinks.
    """

    model_config = ConfigDict(frozen=True, extra="ignore")

    id: int
    score: int = 0
    time: int = Field(description="Unix epoch seconds the item was posted")
    title: str = ""
    by: str | None = None
    descendants: int | None = None
    kids: tuple[int, ...] = ()
    url: str | None = None
    type: str | None = None
    dead: bool = False
    deleted: bool = False

    @property
    def posted_at(self) -> datetime:
        """Posting time as an aware UTC datetime."""
        return datetime.fromtimestamp(self.time, tz=UTC)

    @property
    def discussion_url(self) -> str:
        """Link to the item's comment page."""
        return f"https://news.ycombinator.com/item?id={self.id}"

    def age(self, now: datetime) -> float:
        """Seconds elapsed between posting and ``now``."""
        return (now - self.posted_at).total_seconds()

    @classmethod
    def from_api(cls, payload: dict[str, Any]) -> "Item":
        """Validate an API payload into an Item.

        Raises:
            pydantic.ValidationError: If required fields are missing or invalid.
        """
        return cls.model_validate(payload)

    def to_notification(self) -> dict[str, Any]:
        """Flatten to the JSON-serializable shape written by sinks."""
        return {
            "id": self.id,
            "title": self.title,
            "score": self.score,
            "by": self.by,
            "url": self.url or self.discussion_url,
            "discussion_url": self.discussion_url,
            "descendants": self.descendants,
            "type": self.type,
            "posted_at": self.posted_at.isoformat(),
        }
