"""Ports - interfaces/protocols for external dependencies."""

from .day_store import DayStore
from .calendar_source import CalendarSource

__all__ = [
    "DayStore",
    "CalendarSource",
]
