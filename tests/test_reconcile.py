"""Tests for sync reconciliation and window construction."""

from datetime import date, datetime, timezone

import pytest

from daylog.core.intervals import Interval, IntervalKind
from daylog.core.reconcile import SyncedEvent, intervals_from_batch, reconcile
from daylog.core.records import DayRecord, build_window, window_dates
from daylog.errors import ValidationError


UTC = timezone.utc
DAY = date(2024, 1, 1)


def at(hour: int, minute: int = 0) -> datetime:
    return datetime(2024, 1, 1, hour, minute, tzinfo=UTC)


@pytest.fixture
def record():
    return DayRecord(
        owner_id="u1",
        day=DAY,
        intervals=[
            Interval.manual("Standup", at(9), at(9, 15)),
            Interval.synced("old", "Stale meeting", at(14), at(15)),
            Interval.manual("Lunch", at(12), at(13)),
        ],
    )


class TestSyncedEvent:
    def test_to_interval_gets_fresh_id(self):
        event = SyncedEvent(source_id="g1", start=at(10), end=at(11), title="Meeting")
        interval = event.to_interval()
        assert interval.kind is IntervalKind.SYNCED
        assert interval.source_id == "g1"
        assert interval.id != "g1"

    def test_batch_rejected_as_a_whole(self):
        batch = [
            SyncedEvent(source_id="g1", start=at(10), end=at(11), title="Fine"),
            SyncedEvent(source_id="g2", start=at(11), end=at(10), title="Backwards"),
        ]
        with pytest.raises(ValidationError):
            intervals_from_batch(batch)


class TestReconcile:
    def test_replaces_synced_keeps_manual(self, record):
        fresh = intervals_from_batch(
            [SyncedEvent(source_id="g1", start=at(10), end=at(11), title="Meeting")]
        )
        result = reconcile(record, fresh)

        assert [i.title for i in result] == ["Standup", "Meeting", "Lunch"]
        manual_before = [i for i in record.intervals if i.kind is IntervalKind.MANUAL]
        manual_after = [i for i in result if i.kind is IntervalKind.MANUAL]
        assert [i.id for i in manual_after] == [i.id for i in manual_before]
        assert manual_after == manual_before

    def test_empty_batch_clears_synced(self, record):
        result = reconcile(record, [])
        assert all(i.kind is IntervalKind.MANUAL for i in result)
        assert len(result) == 2

    def test_idempotent(self, record):
        batch = [
            SyncedEvent(source_id="g1", start=at(10), end=at(11), title="Meeting"),
            SyncedEvent(source_id="g2", start=at(16), end=at(17), title="1:1"),
        ]
        once = reconcile(record, intervals_from_batch(batch))
        twice = reconcile(
            DayRecord(owner_id="u1", day=DAY, intervals=once),
            intervals_from_batch(batch),
        )
        assert once == twice

    def test_manual_entries_in_fresh_are_ignored(self, record):
        stray = Interval.manual("Not from calendar", at(18), at(19))
        result = reconcile(record, [stray])
        assert stray not in result

    def test_result_is_chronological(self, record):
        fresh = intervals_from_batch(
            [SyncedEvent(source_id="g0", start=at(7), end=at(8), title="Early call")]
        )
        result = reconcile(record, fresh)
        starts = [i.start for i in result]
        assert starts == sorted(starts)


class TestWindow:
    def test_window_dates_oldest_first(self):
        assert window_dates(date(2024, 1, 3), 3) == [
            date(2024, 1, 1),
            date(2024, 1, 2),
            date(2024, 1, 3),
        ]

    def test_window_size_must_be_positive(self):
        with pytest.raises(ValidationError):
            window_dates(DAY, 0)

    def test_fills_missing_days(self, record):
        window = build_window("u1", [record], date(2024, 1, 3), 3)
        assert [r.day for r in window] == [date(2024, 1, 1), date(2024, 1, 2), date(2024, 1, 3)]
        assert window[0] is record
        assert window[1].is_empty and not window[1].persisted

    def test_ignores_other_owners_and_days(self, record):
        other = DayRecord(owner_id="u2", day=date(2024, 1, 3), intervals=record.intervals)
        outside = DayRecord(owner_id="u1", day=date(2023, 12, 1), intervals=record.intervals)
        window = build_window("u1", [other, outside], date(2024, 1, 3), 2)
        assert all(r.is_empty for r in window)
