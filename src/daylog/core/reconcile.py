"""Calendar sync reconciliation - pure next-state computation."""

from dataclasses import dataclass
from datetime import datetime
from typing import Iterable

from .intervals import Interval, IntervalKind, sort_intervals
from .records import DayRecord


@dataclass
class SyncedEvent:
    """One event as handed over by a calendar source."""

    source_id: str
    start: datetime | str
    end: datetime | str
    title: str
    description: str = ""

    def to_interval(self) -> Interval:
        """Validate into a synced Interval with a fresh internal id."""
        return Interval.synced(
            source_id=self.source_id,
            title=self.title,
            start=self.start,
            end=self.end,
            description=self.description,
        )


def intervals_from_batch(batch: Iterable[SyncedEvent]) -> list[Interval]:
    """
    Validate a whole batch up front.

    A single bad event raises ValidationError, so callers never write
    part of a batch.
    """
    return [event.to_interval() for event in batch]


def reconcile(current: DayRecord, fresh: Iterable[Interval]) -> list[Interval]:
    """
    Compute a day's intervals after a sync.

    Manual intervals are kept untouched. Every previously synced interval
    is dropped: the fresh batch is the complete current state of the
    calendar for that day, so events edited, moved or deleted upstream
    all come out right without diffing.

    Pure function - no I/O.
    """
    kept = [i for i in current.intervals if i.kind is IntervalKind.MANUAL]
    synced = [i for i in fresh if i.kind is IntervalKind.SYNCED]
    return sort_intervals(kept + synced)
