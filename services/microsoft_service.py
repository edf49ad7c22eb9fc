"""
MicrosoftService — Outlook calendar operations over Microsoft Graph.

The Graph user id comes from the ``oid`` claim of the caller's access
token.  The token is only decoded, not verified: Graph verifies it on
every call.  Opaque (non-JWT) tokens fall back to the ``/me`` alias.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional
from urllib.parse import quote, urlencode

import jwt

from connectors.executor import AuthenticatedRequestExecutor
from connectors.pagination import PaginatedFetcher
from utils.schemas import CalendarEvent, parse_resource

logger = logging.getLogger(__name__)

GRAPH_BASE_URL = "https://graph.microsoft.com/v1.0"


def extract_user_id(access_token: str) -> Optional[str]:
    """Return the ``oid`` claim of a Graph access token, if it has one."""
    try:
        claims = jwt.decode(access_token, options={"verify_signature": False})
    except jwt.PyJWTError:
        return None
    oid = claims.get("oid")
    return str(oid) if oid else None


def _event_payload(
    *,
    subject: Optional[str] = None,
    start_date: Optional[str] = None,
    end_date: Optional[str] = None,
    reminder_minutes_before_start: Optional[int] = None,
    body: Optional[str] = None,
    location: Optional[str] = None,
    is_all_day: Optional[bool] = None,
    categories: Optional[List[str]] = None,
    attendees: Optional[List[str]] = None,
) -> Dict[str, Any]:
    """Graph event body with only the provided fields set."""
    data: Dict[str, Any] = {
        "subject": subject,
        "start": {"dateTime": start_date, "timeZone": "UTC"} if start_date else None,
        "end": {"dateTime": end_date, "timeZone": "UTC"} if end_date else None,
        "reminderMinutesBeforeStart": reminder_minutes_before_start,
        "body": {"contentType": "text", "content": body} if body else None,
        "location": {"displayName": location} if location else None,
        "isAllDay": is_all_day,
        "categories": categories,
        "attendees": (
            [{"emailAddress": {"address": email}} for email in attendees]
            if attendees is not None
            else None
        ),
    }
    return {k: v for k, v in data.items() if v is not None}


class MicrosoftService:
    def __init__(
        self,
        executor: AuthenticatedRequestExecutor,
        base_url: str = GRAPH_BASE_URL,
    ) -> None:
        self.executor = executor
        self.base_url = base_url
        self.user_id = extract_user_id(executor.session.credential.access_token)
        if self.user_id is None:
            logger.debug("Access token carries no oid claim; using /me")

    @property
    def user_url(self) -> str:
        if self.user_id:
            return f"{self.base_url}/users/{self.user_id}"
        return f"{self.base_url}/me"

    def _event_url(self, event_id: str) -> str:
        return f"{self.user_url}/events/{quote(event_id, safe='')}"

    # ── Calendars ───────────────────────────────────────────────────────

    async def get_user_calendar_events(self, start_date: str, end_date: str) -> List[CalendarEvent]:
        """All events overlapping [start_date, end_date], following nextLink pages."""
        query = urlencode({"startDateTime": start_date, "endDateTime": end_date})
        fetcher = PaginatedFetcher(self.executor)
        return await fetcher.fetch_all(f"{self.user_url}/calendarView?{query}", CalendarEvent)

    async def create_calendar_event(
        self,
        subject: str,
        start_date: str,
        end_date: str,
        reminder_minutes_before_start: int = 15,
        body: Optional[str] = None,
        location: Optional[str] = None,
        is_all_day: Optional[bool] = None,
        categories: Optional[List[str]] = None,
        attendees: Optional[List[str]] = None,
    ) -> CalendarEvent:
        payload = _event_payload(
            subject=subject,
            start_date=start_date,
            end_date=end_date,
            reminder_minutes_before_start=reminder_minutes_before_start,
            body=body,
            location=location,
            is_all_day=bool(is_all_day),
            categories=categories,
            attendees=attendees,
        )
        raw = await self.executor.execute_json("POST", f"{self.user_url}/events", json=payload)
        return parse_resource(CalendarEvent, raw)

    async def get_calendar_event(self, event_id: str) -> CalendarEvent:
        raw = await self.executor.execute_json("GET", self._event_url(event_id))
        return parse_resource(CalendarEvent, raw)

    async def update_calendar_event(
        self,
        event_id: str,
        subject: Optional[str] = None,
        start_date: Optional[str] = None,
        end_date: Optional[str] = None,
        reminder_minutes_before_start: Optional[int] = None,
        body: Optional[str] = None,
        location: Optional[str] = None,
        is_all_day: Optional[bool] = None,
        categories: Optional[List[str]] = None,
        attendees: Optional[List[str]] = None,
    ) -> CalendarEvent:
        """
        Partial update: only provided fields are sent.  Fields cannot be
        cleared through this call.
        """
        payload = _event_payload(
            subject=subject,
            start_date=start_date,
            end_date=end_date,
            reminder_minutes_before_start=reminder_minutes_before_start,
            body=body,
            location=location,
            is_all_day=is_all_day,
            categories=categories,
            attendees=attendees,
        )
        raw = await self.executor.execute_json("PATCH", self._event_url(event_id), json=payload)
        return parse_resource(CalendarEvent, raw)

    async def delete_calendar_event(self, event_id: str) -> None:
        await self.executor.execute("DELETE", self._event_url(event_id))
