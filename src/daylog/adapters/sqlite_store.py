"""SQLite day record storage adapter."""

import asyncio
import json
import logging
import sqlite3
import uuid
from contextlib import contextmanager
from datetime import date, datetime, timezone
from pathlib import Path
from typing import Generator, Sequence

from daylog.core.intervals import Interval, sort_intervals
from daylog.core.records import DayRecord, check_unique_ids, empty_record
from daylog.errors import DaylogError, StorageError

logger = logging.getLogger(__name__)

SCHEMA = """
CREATE TABLE IF NOT EXISTS day_records (
    owner_id TEXT NOT NULL,
    day TEXT NOT NULL,
    intervals TEXT NOT NULL,
    created_at TEXT NOT NULL,
    updated_at TEXT NOT NULL,
    PRIMARY KEY (owner_id, day)
)
"""

# One statement, so the uniqueness check and the write can't be split by
# another connection. created_at survives updates.
UPSERT = """
INSERT INTO day_records (owner_id, day, intervals, created_at, updated_at)
VALUES (?, ?, ?, ?, ?)
ON CONFLICT (owner_id, day) DO UPDATE SET
    intervals = excluded.intervals,
    updated_at = excluded.updated_at
"""

SELECT_ONE = """
SELECT owner_id, day, intervals, created_at, updated_at
FROM day_records
WHERE owner_id = ? AND day = ?
"""

SELECT_RANGE = """
SELECT owner_id, day, intervals, created_at, updated_at
FROM day_records
WHERE owner_id = ? AND day >= ? AND day <= ?
ORDER BY day
"""


class SQLiteDayStore:
    """
    SQLite-backed day record storage.

    Implements DayStore protocol. Each day is one row keyed by
    (owner_id, day) holding the interval list as JSON. Blocking sqlite3
    calls run in a worker thread.
    """

    def __init__(self, db_path: Path | str):
        self.db_path = Path(db_path).expanduser()
        self.db_path.parent.mkdir(parents=True, exist_ok=True)
        with self._get_conn() as conn:
            conn.execute(SCHEMA)
            conn.commit()
        logger.debug(f"Initialized {self.__class__.__name__} with db_path: {self.db_path}")

    @contextmanager
    def _get_conn(self) -> Generator[sqlite3.Connection, None, None]:
        """Open a connection with Row factory, translating driver errors."""
        try:
            conn = sqlite3.connect(str(self.db_path), timeout=30.0)
        except sqlite3.Error as e:
            raise StorageError(f"Can't open {self.db_path}: {e}") from e
        conn.row_factory = sqlite3.Row
        try:
            yield conn
        except sqlite3.Error as e:
            logger.error(f"Database error in {self.__class__.__name__}: {e}")
            raise StorageError(str(e)) from e
        finally:
            conn.close()

    def _row_to_record(self, row: sqlite3.Row) -> DayRecord:
        try:
            intervals = [
                Interval.from_dict(item, fallback_id=_legacy_id(row, n, item))
                for n, item in enumerate(json.loads(row["intervals"]))
            ]
        except (json.JSONDecodeError, TypeError, AttributeError, DaylogError) as e:
            raise StorageError(
                f"Corrupt record for {row['owner_id']} on {row['day']}: {e}"
            ) from e
        return DayRecord(
            owner_id=row["owner_id"],
            day=date.fromisoformat(row["day"]),
            intervals=sort_intervals(intervals),
            created_at=datetime.fromisoformat(row["created_at"]),
            updated_at=datetime.fromisoformat(row["updated_at"]),
        )

    def _get_day(self, owner_id: str, day: date) -> DayRecord:
        with self._get_conn() as conn:
            row = conn.execute(SELECT_ONE, (owner_id, day.isoformat())).fetchone()
        if row is None:
            return empty_record(owner_id, day)
        return self._row_to_record(row)

    def _upsert_day(self, owner_id: str, day: date, intervals: Sequence[Interval]) -> DayRecord:
        check_unique_ids(intervals)
        payload = json.dumps([i.to_dict() for i in sort_intervals(intervals)])
        now = datetime.now(timezone.utc).isoformat()
        with self._get_conn() as conn:
            conn.execute(UPSERT, (owner_id, day.isoformat(), payload, now, now))
            row = conn.execute(SELECT_ONE, (owner_id, day.isoformat())).fetchone()
            conn.commit()
        logger.debug(f"Saved {len(intervals)} intervals for {owner_id} on {day}")
        return self._row_to_record(row)

    def _delete_day(self, owner_id: str, day: date) -> None:
        with self._get_conn() as conn:
            cursor = conn.execute(
                "DELETE FROM day_records WHERE owner_id = ? AND day = ?",
                (owner_id, day.isoformat()),
            )
            conn.commit()
        if cursor.rowcount:
            logger.debug(f"Deleted record for {owner_id} on {day}")

    def _list_days(self, owner_id: str, start: date, end: date) -> list[DayRecord]:
        with self._get_conn() as conn:
            rows = conn.execute(
                SELECT_RANGE, (owner_id, start.isoformat(), end.isoformat())
            ).fetchall()
        return [self._row_to_record(row) for row in rows]

    async def get_day(self, owner_id: str, day: date) -> DayRecord:
        return await asyncio.to_thread(self._get_day, owner_id, day)

    async def upsert_day(self, owner_id: str, day: date, intervals: Sequence[Interval]) -> DayRecord:
        return await asyncio.to_thread(self._upsert_day, owner_id, day, list(intervals))

    async def delete_day(self, owner_id: str, day: date) -> None:
        await asyncio.to_thread(self._delete_day, owner_id, day)

    async def list_days(self, owner_id: str, start: date, end: date) -> list[DayRecord]:
        return await asyncio.to_thread(self._list_days, owner_id, start, end)


def _legacy_id(row: sqlite3.Row, position: int, item: dict) -> str:
    """Stable id for stored entries written without one."""
    key = "/".join(
        [
            row["owner_id"],
            row["day"],
            str(position),
            str(item.get("sourceId") or item.get("title")),
            str(item.get("startTime")),
            str(item.get("endTime")),
        ]
    )
    return uuid.uuid5(uuid.NAMESPACE_URL, key).hex
