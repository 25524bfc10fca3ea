"""Hacker News feed client."""

import json
from typing import Any, Protocol

import structlog
from pydantic import ValidationError

from hnotify.feed.errors import FeedError, FeedErrorClass, ParseError, SchemaError
from hnotify.feed.models import Item
from hnotify.fetch.client import HttpFetcher
from hnotify.fetch.constants import ITEM_PATH_TEMPLATE, TOP_STORIES_PATH
from hnotify.fetch.models import FetchResult


logger = structlog.get_logger()


class ItemFetcher(Protocol):
    """Source of the ranked list and of item details.

    Implementations raise ``FeedError`` on any failure.
    """

    def fetch_ranked_ids(self) -> list[int]:
        """Return the current ordered list of top-ranked item IDs."""
        ...

    def fetch_item(self, item_id: int) -> Item:
        """Return current attributes for one item."""
        ...


class HackerNewsClient:
    """ItemFetcher backed by the Hacker News Firebase API."""

    def __init__(self, fetcher: HttpFetcher, run_id: str) -> None:
        """Initialize the client.

        Args:
            fetcher: HTTP fetcher configured with the API base URL.
            run_id: Unique run identifier for logging.
        """
        self._fetcher = fetcher
        self._log = logger.bind(component="feed", run_id=run_id)

    def fetch_ranked_ids(self) -> list[int]:
        """Fetch the ``topstories`` list.

        Returns:
            Item IDs in rank order.

        Raises:
            FeedError: On transport failure, invalid JSON or wrong shape.
        """
        payload = self._get_json(TOP_STORIES_PATH, item_id=None)

        if not isinstance(payload, list):
            msg = f"Expected a JSON list of IDs, got {type(payload).__name__}"
            raise SchemaError(msg)

        # bool is an int subclass; the API never sends one
        bad = [v for v in payload if not isinstance(v, int) or isinstance(v, bool)]
        if bad:
            msg = f"Ranked list contains {len(bad)} non-integer entries"
            raise SchemaError(msg)

        self._log.debug("ranked_ids_fetched", count=len(payload))
        return list(payload)

    def fetch_item(self, item_id: int) -> Item:
        """Fetch one item.

        Args:
            item_id: Item identifier.

        Returns:
            The validated item.

        Raises:
            FeedError: On transport failure, invalid JSON, a ``null`` payload
                or a payload missing required fields.
        """
        payload = self._get_json(ITEM_PATH_TEMPLATE.format(item_id=item_id), item_id)

        if payload is None:
            msg = f"Item {item_id} does not exist"
            raise SchemaError(msg, item_id=item_id)
        if not isinstance(payload, dict):
            msg = f"Expected a JSON object for item {item_id}"
            raise SchemaError(msg, item_id=item_id)

        try:
            item = Item.from_api(payload)
        except ValidationError as e:
            first = e.errors()[0]
            field = ".".join(str(p) for p in first["loc"])
            msg = f"Item {item_id} failed validation at '{field}': {first['msg']}"
            raise SchemaError(msg, item_id=item_id, field=field) from e

        if item.id != item_id:
            msg = f"Requested item {item_id} but API returned {item.id}"
            raise SchemaError(msg, item_id=item_id, field="id")

        return item

    def _get_json(self, path: str, item_id: int | None) -> Any:  # noqa: ANN401
        """GET a path and decode its JSON body.

        Raises:
            FeedError: FETCH on transport/HTTP errors, PARSE on invalid JSON.
        """
        result: FetchResult = self._fetcher.fetch(path)

        if not result.is_success:
            error = result.error
            msg = (
                error.message
                if error is not None
                else f"Unexpected status code ({result.status_code})"
            )
            raise FeedError(
                FeedErrorClass.FETCH,
                f"{result.url}: {msg}",
                item_id=item_id,
                fetch_error_class=error.error_class if error else None,
                status_code=result.status_code or None,
            )

        try:
            return result.json()
        except (json.JSONDecodeError, UnicodeDecodeError) as e:
            msg = f"{result.url}: invalid JSON ({e})"
            raise ParseError(msg, item_id=item_id) from e
