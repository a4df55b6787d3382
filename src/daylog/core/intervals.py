"""Interval value type and chronological ordering - no I/O dependencies."""

import uuid
from dataclasses import dataclass, field
from datetime import datetime, timedelta
from enum import Enum
from typing import Any, Iterable

from daylog.errors import ValidationError


class IntervalKind(Enum):
    """Where an interval came from."""

    MANUAL = "manual"
    SYNCED = "synced"

    @classmethod
    def parse(cls, value: "str | IntervalKind") -> "IntervalKind":
        if isinstance(value, IntervalKind):
            return value
        # Older records call synced entries "calendar"
        if value == "calendar":
            return cls.SYNCED
        try:
            return cls(value)
        except ValueError:
            raise ValidationError({"kind": f"unknown interval kind {value!r}"}) from None


def new_interval_id() -> str:
    return uuid.uuid4().hex


def parse_instant(value: Any, field_name: str) -> datetime:
    """
    Parse a timezone-aware instant.

    Accepts aware datetimes or ISO 8601 strings (``Z`` suffix allowed).
    Naive values are rejected since they don't identify an instant.
    """
    if isinstance(value, datetime):
        dt = value
    elif isinstance(value, str):
        try:
            dt = datetime.fromisoformat(value.strip())
        except ValueError:
            raise ValidationError({field_name: f"invalid timestamp {value!r}"}) from None
    else:
        raise ValidationError({field_name: "timestamp is required"})

    if dt.tzinfo is None or dt.utcoffset() is None:
        raise ValidationError({field_name: "timestamp must include a UTC offset"})
    return dt


@dataclass(frozen=True)
class Interval:
    """A single tracked activity, entered by hand or synced from a calendar."""

    kind: IntervalKind
    start: datetime
    end: datetime
    title: str
    description: str = ""
    source_id: str | None = None
    id: str = field(default_factory=new_interval_id, compare=False)

    @classmethod
    def manual(
        cls,
        title: str,
        start: datetime | str,
        end: datetime | str,
        description: str | None = None,
        interval_id: str | None = None,
    ) -> "Interval":
        """Build a validated manual interval."""
        return cls._build(
            kind=IntervalKind.MANUAL,
            title=title,
            start=start,
            end=end,
            description=description,
            source_id=None,
            interval_id=interval_id,
        )

    @classmethod
    def synced(
        cls,
        source_id: str,
        title: str,
        start: datetime | str,
        end: datetime | str,
        description: str | None = None,
        interval_id: str | None = None,
    ) -> "Interval":
        """Build a validated synced interval. ``source_id`` is required."""
        return cls._build(
            kind=IntervalKind.SYNCED,
            title=title,
            start=start,
            end=end,
            description=description,
            source_id=source_id,
            interval_id=interval_id,
        )

    @classmethod
    def _build(
        cls,
        kind: IntervalKind,
        title: Any,
        start: Any,
        end: Any,
        description: Any,
        source_id: Any,
        interval_id: str | None,
    ) -> "Interval":
        errors: dict[str, str] = {}

        clean_title = title.strip() if isinstance(title, str) else ""
        if not clean_title:
            errors["title"] = "title must not be empty"

        parsed: dict[str, datetime] = {}
        for name, raw in (("start", start), ("end", end)):
            try:
                parsed[name] = parse_instant(raw, name)
            except ValidationError as e:
                errors.update(e.errors)

        if len(parsed) == 2 and parsed["end"] <= parsed["start"]:
            errors["end"] = "end must be after start"

        if kind is IntervalKind.SYNCED and not source_id:
            errors["source_id"] = "synced intervals need a source id"
        elif kind is IntervalKind.MANUAL and source_id:
            errors["source_id"] = "manual intervals can't carry a source id"

        if errors:
            raise ValidationError(errors)

        return cls(
            kind=kind,
            start=parsed["start"],
            end=parsed["end"],
            title=clean_title,
            description=(description or "").strip(),
            source_id=str(source_id) if source_id else None,
            id=interval_id or new_interval_id(),
        )

    @property
    def duration(self) -> timedelta:
        return self.end - self.start

    def replace(self, **changes: Any) -> "Interval":
        """Return a re-validated copy with ``changes`` applied. Keeps the id."""
        unknown = set(changes) - {"title", "description", "start", "end"}
        if unknown:
            raise ValidationError({name: "field can't be changed" for name in sorted(unknown)})
        merged = {
            "title": self.title,
            "description": self.description,
            "start": self.start,
            "end": self.end,
        } | changes
        return self._build(
            kind=self.kind,
            title=merged["title"],
            start=merged["start"],
            end=merged["end"],
            description=merged["description"],
            source_id=self.source_id,
            interval_id=self.id,
        )

    def to_dict(self) -> dict[str, Any]:
        """Serialize to the JSON shape used on the wire and in storage."""
        data: dict[str, Any] = {
            "id": self.id,
            "type": self.kind.value,
            "startTime": self.start.isoformat(),
            "endTime": self.end.isoformat(),
            "title": self.title,
            "description": self.description,
        }
        if self.source_id:
            data["sourceId"] = self.source_id
        return data

    @classmethod
    def from_dict(cls, data: dict[str, Any], fallback_id: str | None = None) -> "Interval":
        """Load a stored interval. ``fallback_id`` is used when the data has no id."""
        kind = IntervalKind.parse(data.get("type", IntervalKind.MANUAL.value))
        return cls._build(
            kind=kind,
            title=data.get("title"),
            start=data.get("startTime"),
            end=data.get("endTime"),
            description=data.get("description"),
            source_id=data.get("sourceId"),
            interval_id=data.get("id") or fallback_id,
        )


def sort_intervals(intervals: Iterable[Interval]) -> list[Interval]:
    """
    Sort intervals by start time.

    The sort is stable, so intervals starting at the same instant keep
    the order they were given in.
    """
    return sorted(intervals, key=lambda i: i.start)


def total_duration(intervals: Iterable[Interval]) -> timedelta:
    """Sum of interval durations."""
    return sum((i.duration for i in intervals), timedelta())
