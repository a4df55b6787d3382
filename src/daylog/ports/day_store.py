"""Day record storage interface."""

from datetime import date
from typing import Protocol, Sequence

from daylog.core.intervals import Interval
from daylog.core.records import DayRecord


class DayStore(Protocol):
    """
    Interface for persisting day records.

    Records are unique per (owner_id, day). Implementations must make
    upsert_day atomic so racing writers never create a second record.
    """

    async def get_day(self, owner_id: str, day: date) -> DayRecord:
        """Return the stored record, or an unsaved empty one."""
        ...

    async def upsert_day(self, owner_id: str, day: date, intervals: Sequence[Interval]) -> DayRecord:
        """Replace the full interval set for a day, creating the record if needed."""
        ...

    async def delete_day(self, owner_id: str, day: date) -> None:
        """Remove a day's record. No error if it doesn't exist."""
        ...

    async def list_days(self, owner_id: str, start: date, end: date) -> list[DayRecord]:
        """Stored records between start and end (inclusive), oldest first."""
        ...
