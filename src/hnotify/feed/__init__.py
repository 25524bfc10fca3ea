"""Feed access: item model, errors and the Hacker News client."""

from hnotify.feed.client import HackerNewsClient, ItemFetcher
from hnotify.feed.errors import (
    ErrorRecord,
    FeedError,
    FeedErrorClass,
    ParseError,
    SchemaError,
)
from hnotify.feed.models import Item


__all__ = [
    "ErrorRecord",
    "FeedError",
    "FeedErrorClass",
    "HackerNewsClient",
    "Item",
    "ItemFetcher",
    "ParseError",
    "SchemaError",
]
