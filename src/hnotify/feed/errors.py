"""Error types for the feed client."""

from enum import Enum
from typing import Annotated

from pydantic import BaseModel, ConfigDict, Field

from hnotify.fetch.models import FetchErrorClass


class FeedErrorClass(str, Enum):
    """Classification of feed errors.

    - FETCH: HTTP/network errors during fetch
    - PARSE: Response body is not valid JSON
    - SCHEMA: JSON doesn't match the expected shape
    """

    FETCH = "FETCH"
    PARSE = "PARSE"
    SCHEMA = "SCHEMA"


class FeedError(Exception):
    """Base exception for feed errors.

    Raised by ``ItemFetcher`` implementations for both the ranked list and
    individual items.
    """

    def __init__(
        self,
        error_class: FeedErrorClass,
        message: str,
        item_id: int | None = None,
        fetch_error_class: FetchErrorClass | None = None,
        status_code: int | None = None,
    ) -> None:
        """Initialize the feed error.

        Args:
            error_class: Classification of the error.
            message: Human-readable error message.
            item_id: Item that failed, None for the ranked list.
            fetch_error_class: Transport-level classification, for FETCH errors.
            status_code: HTTP status code if a response was received.
        """
        super().__init__(message)
        self.error_class = error_class
        self.message = message
        self.item_id = item_id
        self.fetch_error_class = fetch_error_class
        self.status_code = status_code

    def to_dict(self) -> dict[str, str | int | None]:
        """Convert error to dictionary for logging.

        Returns:
            Dictionary representation of the error.
        """
        return {
            "error_class": self.error_class.value,
            "message": self.message,
            "item_id": self.item_id,
            "fetch_error_class": (
                self.fetch_error_class.value if self.fetch_error_class else None
            ),
            "status_code": self.status_code,
        }


class ParseError(FeedError):
    """Response body could not be decoded as JSON."""

    def __init__(self, message: str, item_id: int | None = None) -> None:
        """Initialize the parse error.

        Args:
            message: Human-readable error message.
            item_id: Item that failed, None for the ranked list.
        """
        super().__init__(FeedErrorClass.PARSE, message, item_id=item_id)


class SchemaError(FeedError):
    """Decoded JSON does not have the expected shape.

    Also raised for ``null`` item payloads, which the API returns for IDs
    that do not exist.
    """

    def __init__(
        self,
        message: str,
        item_id: int | None = None,
        field: str | None = None,
    ) -> None:
        """Initialize the schema error.

        Args:
            message: Human-readable error message.
            item_id: Item that failed, None for the ranked list.
            field: Name of the offending field, if known.
        """
        super().__init__(FeedErrorClass.SCHEMA, message, item_id=item_id)
        self.field = field


class ErrorRecord(BaseModel):
    """Serializable error record carried on evaluation results."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    error_class: FeedErrorClass = Field(description="Error classification")
    message: Annotated[str, Field(min_length=1, description="Error message")]
    item_id: int | None = Field(default=None, description="Item identifier")
    fetch_error_class: FetchErrorClass | None = Field(
        default=None, description="Transport error classification"
    )

    @classmethod
    def from_exception(cls, error: FeedError) -> "ErrorRecord":
        """Create an ErrorRecord from a FeedError exception.

        Args:
            error: The exception to convert.

        Returns:
            ErrorRecord instance.
        """
        return cls(
            error_class=error.error_class,
            message=error.message or error.error_class.value,
            item_id=error.item_id,
            fetch_error_class=error.fetch_error_class,
        )
