"""Notification delivery."""

from hnotify.notify.sinks import (
    SINK_NAMES,
    ConsoleSink,
    JsonLinesSink,
    LogSink,
    MultiSink,
    NotificationSink,
    build_sink,
)


__all__ = [
    "SINK_NAMES",
    "ConsoleSink",
    "JsonLinesSink",
    "LogSink",
    "MultiSink",
    "NotificationSink",
    "build_sink",
]
