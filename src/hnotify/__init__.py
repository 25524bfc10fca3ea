"""Hacker News top-story notifier.

Polls the ranked top-stories feed, decides which stories are new and
notable, and notifies each of them exactly once per process lifetime.
"""

__version__ = "0.1.0"
