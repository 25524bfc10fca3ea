"""Unit tests for the Hacker News feed client."""

import json
from collections.abc import Generator
from datetime import UTC, datetime
from typing import Any

import httpx
import pytest

from hnotify.feed.client import HackerNewsClient
from hnotify.feed.errors import ErrorRecord, FeedError, FeedErrorClass, SchemaError
from hnotify.feed.models import Item
from hnotify.fetch.client import HttpFetcher
from hnotify.fetch.config import FetchConfig
from hnotify.fetch.metrics import FetchMetrics
from hnotify.fetch.models import FetchErrorClass, RetryPolicy


STORY = {
    "by": "pg",
    "descendants": 15,
    "id": 8863,
    "kids": [8952, 9224],
    "score": 111,
    "time": 1175714200,
    "title": "My YC app: Dropbox - Throw away your USB drive",
    "type": "story",
    "url": "http://www.getdropbox.com/u/2/screencast.html",
}


@pytest.fixture(autouse=True)
def reset_metrics() -> Generator[None]:
    """Reset singleton before and after each test."""
    FetchMetrics.reset()
    yield
    FetchMetrics.reset()


def _client(routes: dict[str, httpx.Response]) -> HackerNewsClient:
    def handler(request: httpx.Request) -> httpx.Response:
        return routes.get(request.url.path, httpx.Response(404))

    fetcher = HttpFetcher(
        FetchConfig(
            base_url="https://api.test/v0",
            retry_policy=RetryPolicy(max_retries=0),
        ),
        run_id="test",
        transport=httpx.MockTransport(handler),
        sleep=lambda _: None,
    )
    return HackerNewsClient(fetcher, run_id="test")


def _json(payload: Any) -> httpx.Response:  # noqa: ANN401
    return httpx.Response(200, content=json.dumps(payload).encode())


class TestFetchRankedIds:
    """Tests for the ranked list endpoint."""

    def test_returns_ids_in_order(self) -> None:
        """IDs come back in API order."""
        client = _client({"/v0/topstories.json": _json([30, 10, 20])})

        assert client.fetch_ranked_ids() == [30, 10, 20]

    def test_empty_list(self) -> None:
        """An empty list is valid."""
        client = _client({"/v0/topstories.json": _json([])})

        assert client.fetch_ranked_ids() == []

    def test_non_list_payload(self) -> None:
        """A JSON object instead of a list is a schema error."""
        client = _client({"/v0/topstories.json": _json({"ids": [1]})})

        with pytest.raises(SchemaError, match="Expected a JSON list"):
            client.fetch_ranked_ids()

    @pytest.mark.parametrize("bad", ["1", 1.5, True, None])
    def test_non_integer_entries(self, bad: object) -> None:
        """Non-integer entries are rejected."""
        client = _client({"/v0/topstories.json": _json([1, bad])})

        with pytest.raises(SchemaError, match="non-integer"):
            client.fetch_ranked_ids()

    def test_invalid_json(self) -> None:
        """A body that is not JSON is a parse error."""
        client = _client({"/v0/topstories.json": httpx.Response(200, content=b"<html>")})

        with pytest.raises(FeedError) as exc_info:
            client.fetch_ranked_ids()

        assert exc_info.value.error_class == FeedErrorClass.PARSE

    def test_http_error(self) -> None:
        """A failed request is a fetch error carrying the transport class."""
        client = _client({"/v0/topstories.json": httpx.Response(503)})

        with pytest.raises(FeedError) as exc_info:
            client.fetch_ranked_ids()

        error = exc_info.value
        assert error.error_class == FeedErrorClass.FETCH
        assert error.fetch_error_class == FetchErrorClass.HTTP_5XX
        assert error.status_code == 503
        assert error.item_id is None
        assert "topstories.json" in error.message


class TestFetchItem:
    """Tests for the item endpoint."""

    def test_parses_story(self) -> None:
        """A valid payload becomes an Item."""
        client = _client({"/v0/item/8863.json": _json(STORY)})

        item = client.fetch_item(8863)

        assert item.id == 8863
        assert item.score == 111
        assert item.by == "pg"
        assert item.kids == (8952, 9224)
        assert item.posted_at == datetime.fromtimestamp(1175714200, tz=UTC)

    def test_unknown_fields_are_ignored(self) -> None:
        """Extra API fields do not break parsing."""
        client = _client({"/v0/item/8863.json": _json({**STORY, "poll": 1})})

        assert client.fetch_item(8863).id == 8863

    def test_null_item(self) -> None:
        """A null payload means the item does not exist."""
        client = _client({"/v0/item/5.json": _json(None)})

        with pytest.raises(SchemaError, match="does not exist") as exc_info:
            client.fetch_item(5)

        assert exc_info.value.item_id == 5

    def test_missing_time(self) -> None:
        """A payload without ``time`` fails validation."""
        payload = {k: v for k, v in STORY.items() if k != "time"}
        client = _client({"/v0/item/8863.json": _json(payload)})

        with pytest.raises(SchemaError) as exc_info:
            client.fetch_item(8863)

        assert exc_info.value.field == "time"

    def test_mismatched_id(self) -> None:
        """A payload for a different ID is rejected."""
        client = _client({"/v0/item/1.json": _json(STORY)})

        with pytest.raises(SchemaError, match="returned 8863"):
            client.fetch_item(1)

    def test_missing_score_defaults_to_zero(self) -> None:
        """Items without a score are treated as score 0."""
        payload = {k: v for k, v in STORY.items() if k != "score"}
        client = _client({"/v0/item/8863.json": _json(payload)})

        assert client.fetch_item(8863).score == 0

    def test_not_found(self) -> None:
        """A 404 is a fetch error tagged with the item ID."""
        client = _client({})

        with pytest.raises(FeedError) as exc_info:
            client.fetch_item(77)

        assert exc_info.value.item_id == 77
        assert exc_info.value.fetch_error_class == FetchErrorClass.HTTP_4XX


class TestItemModel:
    """Tests for Item helpers."""

    def test_to_notification_falls_back_to_discussion_url(self) -> None:
        """Ask-style items without a URL link to their comment page."""
        item = Item(id=1, score=5, time=0, title="Ask HN")

        payload = item.to_notification()

        assert payload["url"] == "https://news.ycombinator.com/item?id=1"
        assert payload["posted_at"] == "1970-01-01T00:00:00+00:00"

    def test_age(self) -> None:
        """Age is measured from the posting time."""
        item = Item(id=1, time=0)

        assert item.age(datetime(1970, 1, 1, 1, tzinfo=UTC)) == 3600


class TestErrorRecord:
    """Tests for ErrorRecord conversion."""

    def test_from_exception(self) -> None:
        """Fields are copied from the exception."""
        error = FeedError(
            FeedErrorClass.FETCH,
            "boom",
            item_id=3,
            fetch_error_class=FetchErrorClass.NETWORK_TIMEOUT,
        )

        record = ErrorRecord.from_exception(error)

        assert record.item_id == 3
        assert record.fetch_error_class == FetchErrorClass.NETWORK_TIMEOUT
        assert record.message == "boom"

    def test_empty_message_falls_back_to_class(self) -> None:
        """An empty message is replaced with the error class."""
        record = ErrorRecord.from_exception(FeedError(FeedErrorClass.SCHEMA, ""))

        assert record.message == "SCHEMA"
