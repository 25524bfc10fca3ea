"""Background eviction of the freshness cache."""

from hnotify.evictor.evictor import BackgroundEvictor


__all__ = ["BackgroundEvictor"]
