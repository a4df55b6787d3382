"""Adapters - I/O implementations of ports."""

from .memory_store import MemoryDayStore
from .sqlite_store import SQLiteDayStore
from .google_calendar import GoogleCalendarSource

__all__ = [
    "MemoryDayStore",
    "SQLiteDayStore",
    "GoogleCalendarSource",
]
