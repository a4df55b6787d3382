"""Calendar sync source interface."""

from datetime import date
from typing import Protocol

from daylog.core.reconcile import SyncedEvent


class CalendarSource(Protocol):
    """Interface for fetching a day's events from an external calendar."""

    async def fetch_batch(self, owner_id: str, day: date) -> list[SyncedEvent]:
        """
        Fetch every event on a day.

        Returns the complete current state of the calendar for that day.
        Raises UpstreamSyncError if it can't.
        """
        ...
