"""Rolling-window statistics - no I/O dependencies."""

from dataclasses import dataclass, field
from datetime import date, timedelta
from typing import Sequence

from .intervals import IntervalKind
from .records import DayRecord


@dataclass
class WindowStats:
    """Derived statistics over a window of day records."""

    days_in_window: int
    total_duration: timedelta = field(default_factory=timedelta)
    total_entries: int = 0
    by_kind: dict[IntervalKind, int] = field(
        default_factory=lambda: {kind: 0 for kind in IntervalKind}
    )
    average_duration: timedelta = field(default_factory=timedelta)
    most_productive_day: DayRecord | None = None
    days_tracked: int = 0
    daily_totals: dict[date, timedelta] = field(default_factory=dict)

    @property
    def manual_entries(self) -> int:
        return self.by_kind[IntervalKind.MANUAL]

    @property
    def synced_entries(self) -> int:
        return self.by_kind[IntervalKind.SYNCED]

    def to_dict(self) -> dict:
        best = self.most_productive_day
        return {
            "daysInWindow": self.days_in_window,
            "daysTracked": self.days_tracked,
            "totalEntries": self.total_entries,
            "totalDuration": int(self.total_duration.total_seconds()),
            "averageDuration": int(self.average_duration.total_seconds()),
            "manualEntries": self.manual_entries,
            "syncedEntries": self.synced_entries,
            "mostProductiveDay": best.day.isoformat() if best else None,
            "dailyTotals": {
                d.isoformat(): int(total.total_seconds())
                for d, total in self.daily_totals.items()
            },
        }


def summarize_window(records: Sequence[DayRecord]) -> WindowStats:
    """
    Aggregate a window of day records.

    The average divides by the window length, not by the number of days
    that have entries, so idle days pull it down. The most productive day
    is the one with the largest tracked total (earliest date wins ties);
    it is None when nothing was tracked at all.

    Pure function - no I/O.
    """
    stats = WindowStats(days_in_window=len(records))
    best_total = timedelta()

    for record in sorted(records, key=lambda r: r.day):
        day_total = record.total_duration
        stats.daily_totals[record.day] = day_total
        stats.total_duration += day_total
        stats.total_entries += len(record.intervals)
        for interval in record.intervals:
            stats.by_kind[interval.kind] += 1
        if record.intervals:
            stats.days_tracked += 1
        if day_total > best_total:
            best_total = day_total
            stats.most_productive_day = record

    if stats.days_in_window:
        stats.average_duration = stats.total_duration / stats.days_in_window

    return stats


def format_duration(duration: timedelta) -> str:
    """Format a duration as hours and minutes, e.g. ``3h 5m``."""
    minutes = int(duration.total_seconds() // 60)
    return f"{minutes // 60}h {minutes % 60}m"
