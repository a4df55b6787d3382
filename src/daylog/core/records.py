"""Day records and window views - no I/O dependencies."""

from dataclasses import dataclass, field
from datetime import date, datetime, timedelta
from typing import Iterable

from daylog.errors import ValidationError

from .intervals import Interval, sort_intervals, total_duration


@dataclass
class DayRecord:
    """All intervals one owner logged on one calendar day."""

    owner_id: str
    day: date
    intervals: list[Interval] = field(default_factory=list)
    created_at: datetime | None = None
    updated_at: datetime | None = None

    @property
    def persisted(self) -> bool:
        """False for the empty placeholder returned when no record exists."""
        return self.created_at is not None

    @property
    def is_empty(self) -> bool:
        return not self.intervals

    @property
    def total_duration(self) -> timedelta:
        return total_duration(self.intervals)

    def ordered(self) -> list[Interval]:
        """Intervals in chronological order."""
        return sort_intervals(self.intervals)

    def find(self, interval_id: str) -> Interval | None:
        for interval in self.intervals:
            if interval.id == interval_id:
                return interval
        return None

    def to_dict(self) -> dict:
        return {
            "userId": self.owner_id,
            "date": self.day.isoformat(),
            "entries": [i.to_dict() for i in self.ordered()],
            "createdAt": self.created_at.isoformat() if self.created_at else None,
            "updatedAt": self.updated_at.isoformat() if self.updated_at else None,
        }


def empty_record(owner_id: str, day: date) -> DayRecord:
    return DayRecord(owner_id=owner_id, day=day)


def check_unique_ids(intervals: Iterable[Interval]) -> None:
    """Raise ValidationError if two intervals share an id."""
    seen: set[str] = set()
    for interval in intervals:
        if interval.id in seen:
            raise ValidationError({"id": f"duplicate interval id {interval.id}"})
        seen.add(interval.id)


def window_dates(today: date, size: int) -> list[date]:
    """The ``size`` days ending on ``today``, oldest first."""
    if size < 1:
        raise ValidationError({"window_size": "window must cover at least one day"})
    return [today - timedelta(days=offset) for offset in range(size - 1, -1, -1)]


def build_window(
    owner_id: str,
    records: Iterable[DayRecord],
    today: date,
    size: int,
) -> list[DayRecord]:
    """
    Build a window view covering ``[today - size + 1 .. today]``.

    Days with no stored record get an empty placeholder, so the result
    always holds exactly ``size`` records in date order.

    Args:
        owner_id: Owner of the records
        records: Stored records; anything outside the window is ignored
        today: Last day of the window, in the owner's calendar
        size: Number of days in the window

    Returns:
        List of DayRecords, oldest first
    """
    by_day = {r.day: r for r in records if r.owner_id == owner_id}
    return [by_day.get(d) or empty_record(owner_id, d) for d in window_dates(today, size)]
