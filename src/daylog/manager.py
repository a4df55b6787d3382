"""Day record lifecycle - the operations callers use to read and change logs.

Every mutation follows the same shape: read the current record, compute
the full next interval set, then hand it to the store in a single
upsert. Nothing is written when validation or a calendar fetch fails.
"""

import logging
from dataclasses import dataclass
from datetime import date, datetime
from typing import Any, Iterable
from zoneinfo import ZoneInfo

from .core.intervals import Interval, IntervalKind, sort_intervals
from .core.reconcile import SyncedEvent, intervals_from_batch, reconcile
from .core.records import DayRecord, build_window, window_dates
from .core.stats import WindowStats, summarize_window
from .errors import NotFoundError
from .ports.calendar_source import CalendarSource
from .ports.day_store import DayStore

logger = logging.getLogger(__name__)


@dataclass
class SyncResult:
    """Outcome of a calendar sync."""

    entries_added: int
    record: DayRecord


class DayLogManager:
    """Reads and mutates day records on behalf of one resolved owner per call."""

    def __init__(self, store: DayStore, timezone: str = "UTC"):
        self.store = store
        self.timezone = timezone

    def today(self) -> date:
        """Current date in the configured timezone."""
        return datetime.now(ZoneInfo(self.timezone)).date()

    # ============== Reads ==============

    async def get_day(self, owner_id: str, day: date) -> DayRecord:
        return await self.store.get_day(owner_id, day)

    async def get_window(self, owner_id: str, window_size: int, today: date | None = None) -> list[DayRecord]:
        """The last ``window_size`` days ending today, oldest first, gaps filled."""
        today = today or self.today()
        days = window_dates(today, window_size)
        records = await self.store.list_days(owner_id, days[0], days[-1])
        return build_window(owner_id, records, today, window_size)

    async def get_stats(self, owner_id: str, window_size: int, today: date | None = None) -> WindowStats:
        window = await self.get_window(owner_id, window_size, today)
        return summarize_window(window)

    # ============== Manual edits ==============

    async def add_manual_interval(
        self,
        owner_id: str,
        day: date,
        title: str,
        start: datetime | str,
        end: datetime | str,
        description: str | None = None,
    ) -> DayRecord:
        """Validate a new manual interval and append it to the day."""
        interval = Interval.manual(title=title, start=start, end=end, description=description)
        current = await self.store.get_day(owner_id, day)
        record = await self._save(owner_id, day, current.intervals + [interval])
        logger.debug(f"Added interval {interval.id} for {owner_id} on {day}")
        return record

    async def edit_manual_interval(
        self,
        owner_id: str,
        day: date,
        interval_id: str,
        **patch: Any,
    ) -> DayRecord:
        """
        Update fields of a manual interval.

        Synced intervals can't be edited; they're only replaced by the next
        sync. Raises NotFoundError for missing or synced ids and
        ValidationError if the merged interval is invalid.
        """
        current = await self.store.get_day(owner_id, day)
        target = current.find(interval_id)
        if target is None or target.kind is not IntervalKind.MANUAL:
            raise NotFoundError(f"No manual interval {interval_id} on {day}")

        updated = target.replace(**patch)
        intervals = [updated if i.id == interval_id else i for i in current.intervals]
        return await self._save(owner_id, day, intervals)

    async def remove_interval(self, owner_id: str, day: date, interval_id: str) -> DayRecord:
        """
        Remove an interval of either kind.

        A removed synced interval comes back on the next sync. Removing an
        id that isn't there succeeds without writing anything.
        """
        current = await self.store.get_day(owner_id, day)
        if current.find(interval_id) is None:
            return current
        remaining = [i for i in current.intervals if i.id != interval_id]
        return await self._save(owner_id, day, remaining)

    # ============== Sync ==============

    async def sync_from_external(
        self,
        owner_id: str,
        day: date,
        batch: Iterable[SyncedEvent],
    ) -> SyncResult:
        """Replace the day's synced intervals with a complete fresh batch."""
        fresh = intervals_from_batch(batch)
        current = await self.store.get_day(owner_id, day)
        record = await self._save(owner_id, day, reconcile(current, fresh))
        logger.info(f"Synced {len(fresh)} calendar entries for {owner_id} on {day}")
        return SyncResult(entries_added=len(fresh), record=record)

    async def sync_from_source(self, owner_id: str, day: date, source: CalendarSource) -> SyncResult:
        """Fetch a batch from ``source`` and sync it. UpstreamSyncError leaves the day as is."""
        batch = await source.fetch_batch(owner_id, day)
        return await self.sync_from_external(owner_id, day, batch)

    # ============== Lifecycle ==============

    async def delete_day(self, owner_id: str, day: date) -> None:
        await self.store.delete_day(owner_id, day)
        logger.debug(f"Deleted day {day} for {owner_id}")

    async def _save(self, owner_id: str, day: date, intervals: list[Interval]) -> DayRecord:
        return await self.store.upsert_day(owner_id, day, sort_intervals(intervals))
