"""
Shared fixtures: sample upstream payloads as the vendors return them.
"""

import pytest


@pytest.fixture
def calendar_event_payload():
    """A Graph event with the OData noise Graph adds on top of the model."""
    return {
        "@odata.etag": 'W/"abc"',
        "id": "AAMkAGI2",
        "createdDateTime": "2025-08-01T09:00:00.0000000Z",
        "lastModifiedDateTime": "2025-08-01T09:05:00.0000000Z",
        "changeKey": "DwAAABYAAAA",
        "categories": ["Work"],
        "originalStartTimeZone": "UTC",
        "originalEndTimeZone": "UTC",
        "reminderMinutesBeforeStart": 15,
        "isReminderOn": True,
        "subject": "Quarterly review",
        "bodyPreview": "Agenda",
        "body": {"contentType": "html", "content": "<p>Agenda</p>"},
        "importance": "normal",
        "sensitivity": "normal",
        "isAllDay": False,
        "isCancelled": False,
        "isOrganizer": True,
        "responseRequested": True,
        "seriesMasterId": None,
        "showAs": "busy",
        "type": "singleInstance",
        "webLink": "https://outlook.office365.com/owa/?itemid=AAMkAGI2",
        "onlineMeetingUrl": None,
        "isOnlineMeeting": False,
        "onlineMeetingProvider": "unknown",
        "allowNewTimeProposals": True,
        "occurrenceId": None,
        "isDraft": False,
        "hideAttendees": False,
        "responseStatus": {"response": "organizer", "time": "0001-01-01T00:00:00Z"},
        "start": {"dateTime": "2025-08-05T14:00:00.0000000", "timeZone": "UTC"},
        "end": {"dateTime": "2025-08-05T15:00:00.0000000", "timeZone": "UTC"},
        "location": {"displayName": "Room 1"},
        "locations": [{"displayName": "Room 1"}],
        "attendees": [],
        "organizer": {"emailAddress": {"name": "Ada", "address": "ada@example.com"}},
    }


@pytest.fixture
def invoice_rows():
    """Invoices in the order QuickBooks returns them for DueDate DESC."""
    return [
        {
            "Id": "130",
            "SyncToken": "0",
            "DocNumber": "1037",
            "TxnDate": "2025-07-01",
            "DueDate": "2025-08-30",
            "TotalAmt": 362.07,
            "Balance": 362.07,
            "CustomerRef": {"value": "24", "name": "Sonnenschein Family Store"},
            "domain": "QBO",
            "sparse": False,
        },
        {
            "Id": "129",
            "SyncToken": "1",
            "DocNumber": "1036",
            "TxnDate": "2025-06-15",
            "DueDate": "2025-07-15",
            "TotalAmt": 477.5,
            "Balance": 0,
            "CustomerRef": {"value": "8", "name": "0969 Ocean View Road"},
            "domain": "QBO",
            "sparse": False,
        },
    ]
