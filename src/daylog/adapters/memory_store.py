"""In-process day record storage adapter."""

from datetime import date, datetime, timezone
from typing import Sequence

from daylog.core.intervals import Interval, sort_intervals
from daylog.core.records import DayRecord, check_unique_ids, empty_record


class MemoryDayStore:
    """
    Dict-backed day record storage.

    Implements DayStore protocol. Used by tests and one-off sessions.
    Nothing awaits between reading and writing the dict, so an upsert
    can't interleave with another one on the same event loop.
    """

    def __init__(self):
        self._records: dict[tuple[str, date], DayRecord] = {}

    def _copy(self, record: DayRecord) -> DayRecord:
        return DayRecord(
            owner_id=record.owner_id,
            day=record.day,
            intervals=list(record.intervals),
            created_at=record.created_at,
            updated_at=record.updated_at,
        )

    async def get_day(self, owner_id: str, day: date) -> DayRecord:
        record = self._records.get((owner_id, day))
        if record is None:
            return empty_record(owner_id, day)
        return self._copy(record)

    async def upsert_day(self, owner_id: str, day: date, intervals: Sequence[Interval]) -> DayRecord:
        check_unique_ids(intervals)
        now = datetime.now(timezone.utc)
        existing = self._records.get((owner_id, day))
        record = DayRecord(
            owner_id=owner_id,
            day=day,
            intervals=sort_intervals(intervals),
            created_at=existing.created_at if existing else now,
            updated_at=now,
        )
        self._records[(owner_id, day)] = record
        return self._copy(record)

    async def delete_day(self, owner_id: str, day: date) -> None:
        self._records.pop((owner_id, day), None)

    async def list_days(self, owner_id: str, start: date, end: date) -> list[DayRecord]:
        return [
            self._copy(record)
            for (owner, day), record in sorted(self._records.items(), key=lambda kv: kv[0][1])
            if owner == owner_id and start <= day <= end
        ]

