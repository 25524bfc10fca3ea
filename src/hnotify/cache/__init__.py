"""Freshness cache shared by the evaluator and the evictor."""

from hnotify.cache.store import FreshnessCache


__all__ = ["FreshnessCache"]
