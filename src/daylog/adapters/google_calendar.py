"""Google Calendar API adapter."""

import asyncio
import logging
from datetime import date, datetime, time, timedelta
from pathlib import Path
from zoneinfo import ZoneInfo

from daylog.core.reconcile import SyncedEvent
from daylog.errors import ReauthorizationRequired, UpstreamSyncError

logger = logging.getLogger(__name__)

SCOPES = ["https://www.googleapis.com/auth/calendar.readonly"]


class GoogleCalendarSource:
    """
    Fetches a day's events from Google Calendar via the API.

    Implements CalendarSource protocol. Token refresh lives here; callers
    only see a batch or an UpstreamSyncError.
    """

    def __init__(
        self,
        config_folder: str,
        calendars: list[str] | None = None,
        client_secret_file: str = "",
        timezone: str = "UTC",
    ):
        self.config_folder = config_folder
        self.calendars = calendars
        self.client_secret_file = client_secret_file
        self.timezone = timezone
        self._token_path = Path(config_folder).expanduser() / "token.json"

    def _get_credentials(self):
        """Load credentials from token.json, refreshing if needed."""
        from google.auth.transport.requests import Request
        from google.oauth2.credentials import Credentials

        if not self._token_path.exists():
            logger.warning(f"No token.json in {self.config_folder}, run 'daylog cal-auth'")
            raise ReauthorizationRequired("Google Calendar not connected. Run 'daylog cal-auth'.")

        creds = Credentials.from_authorized_user_file(str(self._token_path), SCOPES)

        if creds.expired:
            if not creds.refresh_token:
                raise ReauthorizationRequired("Google token expired. Run 'daylog cal-auth' again.")
            try:
                creds.refresh(Request())
            except Exception as e:
                logger.warning(f"Failed to refresh Google token: {e}")
                raise ReauthorizationRequired(
                    "Failed to refresh Google token. Run 'daylog cal-auth' again."
                ) from e
            self._token_path.write_text(creds.to_json())
            self._token_path.chmod(0o600)

        return creds

    def _build_service(self):
        """Build a Google Calendar API service."""
        from googleapiclient.discovery import build

        creds = self._get_credentials()
        return build("calendar", "v3", credentials=creds)

    def _resolve_calendar_ids(self, service) -> list[str]:
        """Resolve display name filters to calendar IDs."""
        if not self.calendars:
            return ["primary"]

        result = service.calendarList().list().execute()
        cal_map = {}
        for entry in result.get("items", []):
            cal_map[entry["summary"]] = entry["id"]

        ids = []
        for name in self.calendars:
            if name in cal_map:
                ids.append(cal_map[name])
            else:
                logger.warning(f"Calendar '{name}' not found")
        return ids or ["primary"]

    def authenticate(self) -> bool:
        """Run OAuth flow. Returns True on success."""
        from google_auth_oauthlib.flow import InstalledAppFlow

        if not self.client_secret_file:
            logger.error("No client secret file configured")
            return False

        secret_path = Path(self.client_secret_file).expanduser()
        if not secret_path.exists():
            logger.error(f"Client secret file not found: {secret_path}")
            return False

        flow = InstalledAppFlow.from_client_secrets_file(str(secret_path), SCOPES)
        creds = flow.run_local_server(port=0)

        token_dir = self._token_path.parent
        token_dir.mkdir(parents=True, exist_ok=True)
        self._token_path.write_text(creds.to_json())
        self._token_path.chmod(0o600)
        return True

    async def fetch_batch(self, owner_id: str, day: date) -> list[SyncedEvent]:
        """Fetch every event on a day. Raises UpstreamSyncError on failure."""
        return await asyncio.to_thread(self.fetch_day, day)

    def fetch_day(self, target_date: date) -> list[SyncedEvent]:
        """Blocking fetch for a specific date."""
        try:
            return self._fetch_day_api(target_date)
        except UpstreamSyncError:
            raise
        except Exception as e:
            logger.warning(f"Google Calendar API error for {target_date}: {e}")
            raise UpstreamSyncError(f"Failed to fetch calendar events: {e}") from e

    def _fetch_day_api(self, target_date: date) -> list[SyncedEvent]:
        service = self._build_service()

        tz = ZoneInfo(self.timezone)
        cal_ids = self._resolve_calendar_ids(service)
        time_min = datetime.combine(target_date, time(0, 0), tzinfo=tz).isoformat()
        time_max = datetime.combine(target_date + timedelta(days=1), time(0, 0), tzinfo=tz).isoformat()

        events = []
        for cal_id in cal_ids:
            result = (
                service.events()
                .list(
                    calendarId=cal_id,
                    timeMin=time_min,
                    timeMax=time_max,
                    singleEvents=True,
                    orderBy="startTime",
                    timeZone=self.timezone,
                )
                .execute()
            )

            for item in result.get("items", []):
                if _declined(item):
                    continue

                start_raw = item.get("start", {})
                end_raw = item.get("end", {})

                if "date" in start_raw:
                    # All-day event: pin to midnight in the configured timezone
                    start_dt = datetime.fromisoformat(start_raw["date"]).replace(tzinfo=tz)
                    if "date" in end_raw:
                        end_dt = datetime.fromisoformat(end_raw["date"]).replace(tzinfo=tz)
                    else:
                        end_dt = start_dt + timedelta(days=1)
                elif "dateTime" in start_raw and "dateTime" in end_raw:
                    start_dt = datetime.fromisoformat(start_raw["dateTime"])
                    end_dt = datetime.fromisoformat(end_raw["dateTime"])
                else:
                    continue

                if end_dt <= start_dt:
                    logger.debug(f"Skipping zero-length event {item.get('id')}")
                    continue

                events.append(
                    SyncedEvent(
                        source_id=item["id"],
                        start=start_dt,
                        end=end_dt,
                        title=item.get("summary") or "Untitled Event",
                        description=item.get("description") or "",
                    )
                )

        logger.debug(f"Fetched {len(events)} Google Calendar events for {target_date}")
        return events


def _declined(item: dict) -> bool:
    """True if the calendar owner declined this event."""
    for attendee in item.get("attendees", []):
        if attendee.get("self") and attendee.get("responseStatus") == "declined":
            return True
    return False
