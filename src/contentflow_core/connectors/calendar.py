"""Calendar connector backed by the Google Calendar v3 API.

Credentials come from the token file written by the OAuth bootstrap and are
wrapped in google-auth Credentials. Before every call the connector checks the
access token's expiry and refreshes it when a refresh token is available.
The check-refresh-persist sequence runs under one asyncio.Lock, so concurrent
callers that find an expired token trigger a single refresh and then reuse
its result.
"""
import asyncio
import logging
from datetime import datetime, timedelta, timezone
from typing import Optional

import httpx
from google.oauth2.credentials import Credentials

from .. import google_oauth
from ..config import GoogleCalendarConfig
from ..errors import AuthRequiredError
from ..schemas import (
    CalendarEvent,
    CreateEventInput,
    DeleteEventInput,
    ListEventsInput,
    UpdateEventInput,
    parse_arguments,
)
from ..token_store import TokenStore
from .base import BaseConnector

CALENDAR_API_URL = "https://www.googleapis.com/calendar/v3"
CALENDAR_ID = "primary"

DEFAULT_LIST_WINDOW = timedelta(days=7)

EVENT_REMINDERS = {
    "useDefault": False,
    "overrides": [
        {"method": "email", "minutes": 24 * 60},
        {"method": "popup", "minutes": 60},
    ],
}


def _event_time(value: datetime) -> dict:
    return {"dateTime": value.isoformat(), "timeZone": "UTC"}


def event_from_api(data: dict) -> CalendarEvent:
    start = data.get("start") or {}
    end = data.get("end") or {}
    return CalendarEvent(
        id=data["id"],
        title=data.get("summary") or "(no title)",
        description=data.get("description"),
        start=start.get("dateTime") or start.get("date"),
        end=end.get("dateTime") or end.get("date"),
        attendees=[attendee["email"] for attendee in data.get("attendees", []) if attendee.get("email")],
        html_link=data.get("htmlLink"),
    )


class CalendarConnector(BaseConnector):
    """Event CRUD on the primary calendar plus the OAuth token lifecycle."""

    logger = logging.getLogger("contentflow-core.calendar")

    def __init__(
        self,
        config: GoogleCalendarConfig,
        token_store: Optional[TokenStore] = None,
        client: Optional[httpx.AsyncClient] = None,
        timeout: float = 30.0,
    ):
        self.config = config
        self.token_store = token_store or TokenStore(config.tokens_file)
        super().__init__(client or httpx.AsyncClient(timeout=timeout))
        self._refresh_lock = asyncio.Lock()
        self.tokens: Optional[dict] = self.token_store.load()
        if self.tokens:
            self.logger.info("Google Calendar tokens loaded")
        else:
            self.logger.warning(f"No Google Calendar tokens available. {google_oauth.BOOTSTRAP_HINT}")

    def _credentials(self) -> Optional[Credentials]:
        """Credentials for the in-memory tokens.

        Raises:
            MalformedTokensError: the token document has the wrong shape
        """
        if not self.tokens:
            return None
        return google_oauth.credentials_from_tokens(self.config, self.tokens)

    async def _ensure_authenticated(self) -> str:
        """Return a usable access token, refreshing it if it has expired.

        Missing, malformed or expired in-memory tokens are first re-read from
        the token file, which the bootstrap may have rewritten since startup.

        Raises:
            AuthRequiredError: no usable token is stored, or it expired and cannot be refreshed
        """
        async with self._refresh_lock:
            try:
                credentials = self._credentials()
            except google_oauth.MalformedTokensError:
                credentials = None

            if credentials is None or credentials.expired:
                reloaded = self.token_store.load()
                if reloaded is not None:
                    self.tokens = reloaded
                try:
                    credentials = self._credentials()
                except google_oauth.MalformedTokensError as e:
                    self.logger.error(f"Stored Google Calendar credentials are malformed: {e}")
                    raise AuthRequiredError(
                        f"Stored Google Calendar credentials are malformed ({e}).",
                        google_oauth.BOOTSTRAP_HINT,
                    ) from e

            if credentials is None:
                raise AuthRequiredError("Google Calendar authentication required.", google_oauth.BOOTSTRAP_HINT)

            if credentials.expired:
                if not credentials.refresh_token:
                    raise AuthRequiredError(
                        "Google Calendar token expired and no refresh token is stored.",
                        google_oauth.BOOTSTRAP_HINT,
                    )
                self.logger.info("Refreshing Google Calendar access token")
                try:
                    credentials = await asyncio.to_thread(google_oauth.refresh_credentials, credentials)
                except google_oauth.TokenGrantError as e:
                    raise AuthRequiredError(
                        f"Google Calendar token expired and could not be refreshed ({e}).",
                        google_oauth.BOOTSTRAP_HINT,
                    ) from e
                self.tokens = google_oauth.tokens_from_credentials(credentials, previous=self.tokens)
                self.token_store.save(self.tokens)
                self.logger.info("Google Calendar token refreshed")

            return credentials.token

    async def _calendar_request(self, method: str, path: str, action: str, **kwargs) -> httpx.Response:
        access_token = await self._ensure_authenticated()
        headers = {"Authorization": f"Bearer {access_token}"}
        return await self._request(method, f"{CALENDAR_API_URL}{path}", action, headers=headers, **kwargs)

    async def create_event(self, arguments: Optional[dict] = None) -> CalendarEvent:
        args = parse_arguments(CreateEventInput, arguments)
        self.logger.info(f"Creating calendar event '{args.title}' at {args.start_time.isoformat()}")
        body = {
            "summary": args.title,
            "description": args.description or "Content development deadline",
            "start": _event_time(args.start_time),
            "end": _event_time(args.end_time),
            "attendees": [{"email": email} for email in args.attendees],
            "reminders": EVENT_REMINDERS,
        }

        response = await self._calendar_request(
            "POST", f"/calendars/{CALENDAR_ID}/events", "create calendar event",
            params={"sendUpdates": "all"}, json=body,
        )
        event = event_from_api(response.json())
        self.logger.info(f"Created calendar event {event.id}")
        return event

    async def list_events(self, arguments: Optional[dict] = None) -> list[CalendarEvent]:
        args = parse_arguments(ListEventsInput, arguments)
        time_min = args.time_min or datetime.now(timezone.utc)
        time_max = args.time_max or time_min + DEFAULT_LIST_WINDOW

        response = await self._calendar_request(
            "GET", f"/calendars/{CALENDAR_ID}/events", "list calendar events",
            params={
                "timeMin": time_min.isoformat(),
                "timeMax": time_max.isoformat(),
                "maxResults": args.max_results,
                "singleEvents": "true",
                "orderBy": "startTime",
            },
        )
        return [event_from_api(item) for item in response.json().get("items", [])]

    async def update_event(self, arguments: Optional[dict] = None) -> CalendarEvent:
        args = parse_arguments(UpdateEventInput, arguments)
        body = {}
        if args.title:
            body["summary"] = args.title
        if args.description:
            body["description"] = args.description
        if args.start_time:
            body["start"] = _event_time(args.start_time)
        if args.end_time:
            body["end"] = _event_time(args.end_time)

        response = await self._calendar_request(
            "PATCH", f"/calendars/{CALENDAR_ID}/events/{args.event_id}", "update calendar event",
            params={"sendUpdates": "all"}, json=body,
        )
        self.logger.info(f"Updated calendar event {args.event_id} (fields: {sorted(body)})")
        return event_from_api(response.json())

    async def delete_event(self, arguments: Optional[dict] = None) -> str:
        """Delete an event and return its id."""
        args = parse_arguments(DeleteEventInput, arguments)
        await self._calendar_request(
            "DELETE", f"/calendars/{CALENDAR_ID}/events/{args.event_id}", "delete calendar event",
            params={"sendUpdates": "all"},
        )
        self.logger.info(f"Deleted calendar event {args.event_id}")
        return args.event_id
