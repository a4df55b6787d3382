"""Tests for the Google Calendar source."""

import asyncio
from datetime import date, datetime, timedelta
from unittest.mock import patch, MagicMock
from zoneinfo import ZoneInfo

import pytest

from daylog.adapters.google_calendar import GoogleCalendarSource
from daylog.errors import ReauthorizationRequired, UpstreamSyncError


@pytest.fixture
def service():
    with patch("daylog.adapters.google_calendar.GoogleCalendarSource._build_service") as mock_build:
        service = MagicMock()
        mock_build.return_value = service
        service.calendarList().list().execute.return_value = {"items": []}
        yield service


class TestGoogleCalendarSource:
    """Tests for GoogleCalendarSource."""

    def test_token_path(self):
        source = GoogleCalendarSource(config_folder="/home/user/.config/work")
        assert source._token_path.name == "token.json"
        assert "work" in str(source._token_path)

    def test_fetch_day_returns_timed_events(self, service):
        service.events().list().execute.return_value = {
            "items": [
                {
                    "id": "evt1",
                    "summary": "Standup",
                    "description": "Daily sync",
                    "start": {"dateTime": "2025-01-15T10:00:00-05:00"},
                    "end": {"dateTime": "2025-01-15T10:30:00-05:00"},
                },
            ]
        }

        source = GoogleCalendarSource(config_folder="/tmp/test", timezone="America/Toronto")
        events = source.fetch_day(date(2025, 1, 15))

        assert len(events) == 1
        assert events[0].source_id == "evt1"
        assert events[0].title == "Standup"
        assert events[0].description == "Daily sync"
        assert events[0].to_interval().duration == timedelta(minutes=30)

    def test_queries_day_bounds_in_configured_timezone(self, service):
        service.events().list().execute.return_value = {"items": []}

        source = GoogleCalendarSource(config_folder="/tmp/test", timezone="America/Toronto")
        source.fetch_day(date(2025, 1, 15))

        kwargs = service.events().list.call_args.kwargs
        assert kwargs["calendarId"] == "primary"
        assert kwargs["timeMin"] == "2025-01-15T00:00:00-05:00"
        assert kwargs["timeMax"] == "2025-01-16T00:00:00-05:00"

    def test_fetch_day_returns_all_day_events(self, service):
        service.events().list().execute.return_value = {
            "items": [
                {
                    "id": "hol",
                    "summary": "Holiday",
                    "start": {"date": "2025-01-15"},
                    "end": {"date": "2025-01-16"},
                },
            ]
        }

        source = GoogleCalendarSource(config_folder="/tmp/test", timezone="America/Toronto")
        events = source.fetch_day(date(2025, 1, 15))

        assert len(events) == 1
        assert events[0].start == datetime(2025, 1, 15, tzinfo=ZoneInfo("America/Toronto"))
        assert events[0].end - events[0].start == timedelta(days=1)

    def test_missing_summary_and_description(self, service):
        service.events().list().execute.return_value = {
            "items": [
                {
                    "id": "x",
                    "start": {"dateTime": "2025-01-15T10:00:00Z"},
                    "end": {"dateTime": "2025-01-15T11:00:00Z"},
                },
            ]
        }

        events = GoogleCalendarSource(config_folder="/tmp/test").fetch_day(date(2025, 1, 15))
        assert events[0].title == "Untitled Event"
        assert events[0].description == ""

    def test_fetch_day_excludes_declined_and_zero_length(self, service):
        service.events().list().execute.return_value = {
            "items": [
                {
                    "id": "a",
                    "summary": "Accepted Meeting",
                    "start": {"dateTime": "2025-01-15T10:00:00-05:00"},
                    "end": {"dateTime": "2025-01-15T10:30:00-05:00"},
                    "attendees": [
                        {"email": "me@example.com", "self": True, "responseStatus": "accepted"},
                    ],
                },
                {
                    "id": "d",
                    "summary": "Declined Meeting",
                    "start": {"dateTime": "2025-01-15T11:00:00-05:00"},
                    "end": {"dateTime": "2025-01-15T11:30:00-05:00"},
                    "attendees": [
                        {"email": "me@example.com", "self": True, "responseStatus": "declined"},
                    ],
                },
                {
                    "id": "z",
                    "summary": "Reminder",
                    "start": {"dateTime": "2025-01-15T12:00:00-05:00"},
                    "end": {"dateTime": "2025-01-15T12:00:00-05:00"},
                },
            ]
        }

        events = GoogleCalendarSource(config_folder="/tmp/test").fetch_day(date(2025, 1, 15))
        assert [e.title for e in events] == ["Accepted Meeting"]

    def test_api_error_raises_upstream_error(self, service):
        service.events().list().execute.side_effect = Exception("API error")
        source = GoogleCalendarSource(config_folder="/tmp/test")
        with pytest.raises(UpstreamSyncError):
            source.fetch_day(date(2025, 1, 15))

    def test_missing_token_needs_reauthorization(self, tmp_path):
        source = GoogleCalendarSource(config_folder=str(tmp_path))
        with pytest.raises(ReauthorizationRequired):
            source.fetch_day(date(2025, 1, 15))

    def test_fetch_batch_is_async(self, service):
        service.events().list().execute.return_value = {
            "items": [
                {
                    "id": "evt1",
                    "summary": "Standup",
                    "start": {"dateTime": "2025-01-15T10:00:00Z"},
                    "end": {"dateTime": "2025-01-15T10:15:00Z"},
                },
            ]
        }
        source = GoogleCalendarSource(config_folder="/tmp/test")
        events = asyncio.run(source.fetch_batch("user-1", date(2025, 1, 15)))
        assert [e.source_id for e in events] == ["evt1"]

    def test_resolve_calendar_ids_filters_by_name(self):
        service = MagicMock()
        service.calendarList().list().execute.return_value = {
            "items": [
                {"summary": "Work", "id": "work@group.calendar.google.com"},
                {"summary": "Personal", "id": "personal@gmail.com"},
            ]
        }

        source = GoogleCalendarSource(config_folder="/tmp/test", calendars=["Work"])
        assert source._resolve_calendar_ids(service) == ["work@group.calendar.google.com"]

    def test_resolve_calendar_ids_no_filter_returns_primary(self):
        source = GoogleCalendarSource(config_folder="/tmp/test")
        assert source._resolve_calendar_ids(MagicMock()) == ["primary"]

    def test_authenticate_without_secret_file(self):
        source = GoogleCalendarSource(config_folder="/tmp/test")
        assert source.authenticate() is False
