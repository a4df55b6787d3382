"""Functional core - pure business logic with no I/O."""

from .intervals import Interval, IntervalKind, parse_instant, sort_intervals, total_duration
from .records import DayRecord, build_window, empty_record, window_dates
from .reconcile import SyncedEvent, intervals_from_batch, reconcile
from .stats import WindowStats, format_duration, summarize_window

__all__ = [
    # Intervals
    "Interval",
    "IntervalKind",
    "parse_instant",
    "sort_intervals",
    "total_duration",
    # Records
    "DayRecord",
    "build_window",
    "empty_record",
    "window_dates",
    # Sync
    "SyncedEvent",
    "intervals_from_batch",
    "reconcile",
    # Stats
    "WindowStats",
    "format_duration",
    "summarize_window",
]
