"""
Microsoft tools — Outlook calendar events for the signed-in user.

Dates are ISO 8601 and written in UTC.
"""

from __future__ import annotations

from typing import Dict, List

from services.microsoft_service import MicrosoftService
from tools import tool
from utils.schemas import (
    CalendarEvent,
    CalendarRangeParams,
    CreateCalendarEventParams,
    EventIdParams,
    UpdateCalendarEventParams,
)


@tool(
    "microsoft",
    name="getUserCalendarEvents",
    description="Get the user's calendar events",
    params=CalendarRangeParams,
    summary="Calendar events retrieved",
)
async def get_user_calendar_events(
    service: MicrosoftService, params: CalendarRangeParams
) -> List[CalendarEvent]:
    return await service.get_user_calendar_events(params.start_date, params.end_date)


@tool(
    "microsoft",
    name="createCalendarEvent",
    description="Create a new calendar event for the user",
    params=CreateCalendarEventParams,
    summary="Calendar event created",
)
async def create_calendar_event(
    service: MicrosoftService, params: CreateCalendarEventParams
) -> CalendarEvent:
    return await service.create_calendar_event(
        params.subject,
        params.start_date,
        params.end_date,
        params.reminder_minutes_before_start,
        body=params.body,
        location=params.location,
        is_all_day=params.is_all_day,
        categories=params.categories,
        attendees=params.attendees,
    )


@tool(
    "microsoft",
    name="getCalendarEvent",
    description="Get a calendar event for the user",
    params=EventIdParams,
    summary="Calendar event retrieved",
)
async def get_calendar_event(service: MicrosoftService, params: EventIdParams) -> CalendarEvent:
    return await service.get_calendar_event(params.event_id)


@tool(
    "microsoft",
    name="updateCalendarEvent",
    description=(
        "Update a calendar event for the user. Only provided fields will be "
        "updated, other fields will be left unchanged."
    ),
    params=UpdateCalendarEventParams,
    summary="Calendar event updated",
)
async def update_calendar_event(
    service: MicrosoftService, params: UpdateCalendarEventParams
) -> CalendarEvent:
    return await service.update_calendar_event(
        params.event_id,
        subject=params.subject,
        start_date=params.start_date,
        end_date=params.end_date,
        reminder_minutes_before_start=params.reminder_minutes_before_start,
        body=params.body,
        location=params.location,
        is_all_day=params.is_all_day,
        categories=params.categories,
        attendees=params.attendees,
    )


@tool(
    "microsoft",
    name="deleteCalendarEvent",
    description="Delete a calendar event for the user",
    params=EventIdParams,
    summary="Calendar event deleted",
)
async def delete_calendar_event(service: MicrosoftService, params: EventIdParams) -> Dict[str, str]:
    await service.delete_calendar_event(params.event_id)
    return {"eventId": params.event_id}
