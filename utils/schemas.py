"""
Pydantic schemas for the whole broker: upstream resources and tool
parameters.

Upstream models ignore (strip) unknown keys, so vendor shape drift never
reaches the agent as untyped data.  A missing required field fails.
"""

from __future__ import annotations

import re
from datetime import datetime
from typing import Any, Dict, List, Literal, Optional, Type, TypeVar

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic import ValidationError as PydanticValidationError
from pydantic.alias_generators import to_camel, to_pascal

from utils.errors import ValidationError

T = TypeVar("T", bound=BaseModel)


def parse_resource(model: Type[T], raw: Any) -> T:
    """Validate one untrusted payload against *model*."""
    try:
        return model.model_validate(raw)
    except PydanticValidationError as exc:
        raise ValidationError(
            f"{model.__name__} failed validation: {exc}",
            exc.errors(include_url=False),
        ) from exc


# ═══════════════════════════════════════════════════════════════════════════════
# Microsoft Graph — calendar events
# ═══════════════════════════════════════════════════════════════════════════════


class GraphModel(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel, populate_by_name=True, extra="ignore"
    )


class ItemBody(GraphModel):
    content_type: Literal["html", "text"]
    content: str


class DateTimeTimeZone(GraphModel):
    date_time: str
    time_zone: str


class ResponseStatus(GraphModel):
    response: str
    time: str


class Organizer(GraphModel):
    email_address: Any = None


class CalendarEvent(GraphModel):
    id: str
    created_date_time: str
    last_modified_date_time: str

    categories: List[str]
    original_start_time_zone: str
    original_end_time_zone: str
    reminder_minutes_before_start: int
    is_reminder_on: bool

    subject: str
    body_preview: str
    body: ItemBody

    importance: Literal["low", "normal", "high"]
    sensitivity: Literal["normal", "personal", "private", "confidential"]

    is_all_day: bool
    is_cancelled: bool
    is_organizer: bool
    response_requested: bool
    series_master_id: Optional[str] = None

    show_as: str
    type: str

    web_link: str
    online_meeting_url: Optional[str] = None
    is_online_meeting: bool
    online_meeting_provider: str

    allow_new_time_proposals: bool
    occurrence_id: Optional[str] = None
    is_draft: bool
    hide_attendees: bool

    response_status: ResponseStatus
    start: DateTimeTimeZone
    end: DateTimeTimeZone

    location: Any = None
    locations: List[Any]
    recurrence: Any = None

    attendees: List[Any]
    organizer: Organizer

    @field_validator("web_link")
    @classmethod
    def web_link_is_url(cls, v: str) -> str:
        if not v.startswith(("https://", "http://")):
            raise ValueError("webLink must be an http(s) URL")
        return v


# ═══════════════════════════════════════════════════════════════════════════════
# QuickBooks — accounting entities
# ═══════════════════════════════════════════════════════════════════════════════


class QuickBooksModel(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_pascal, populate_by_name=True, extra="ignore"
    )


class Ref(BaseModel):
    value: str
    name: Optional[str] = None


class MetaData(QuickBooksModel):
    create_time: Optional[str] = None
    last_updated_time: Optional[str] = None


class Invoice(QuickBooksModel):
    id: str
    sync_token: Optional[str] = None
    doc_number: Optional[str] = None
    txn_date: Optional[str] = None
    due_date: Optional[str] = None
    total_amt: float
    balance: Optional[float] = None
    customer_ref: Ref
    currency_ref: Optional[Ref] = None
    bill_email: Optional[Dict[str, Any]] = None
    email_status: Optional[str] = None
    line: List[Dict[str, Any]] = Field(default_factory=list)
    meta_data: Optional[MetaData] = None


class Customer(QuickBooksModel):
    id: str
    sync_token: Optional[str] = None
    display_name: str
    company_name: Optional[str] = None
    given_name: Optional[str] = None
    family_name: Optional[str] = None
    primary_email_addr: Optional[Dict[str, Any]] = None
    primary_phone: Optional[Dict[str, Any]] = None
    bill_addr: Optional[Dict[str, Any]] = None
    balance: Optional[float] = None
    active: Optional[bool] = None
    currency_ref: Optional[Ref] = None
    meta_data: Optional[MetaData] = None


class Item(QuickBooksModel):
    id: str
    sync_token: Optional[str] = None
    name: str
    fully_qualified_name: Optional[str] = None
    type: Optional[str] = None
    description: Optional[str] = None
    unit_price: Optional[float] = None
    qty_on_hand: Optional[float] = None
    active: Optional[bool] = None
    income_account_ref: Optional[Ref] = None
    meta_data: Optional[MetaData] = None


class Payment(QuickBooksModel):
    id: str
    sync_token: Optional[str] = None
    txn_date: Optional[str] = None
    total_amt: float
    unapplied_amt: Optional[float] = None
    customer_ref: Ref
    currency_ref: Optional[Ref] = None
    line: List[Dict[str, Any]] = Field(default_factory=list)
    meta_data: Optional[MetaData] = None


class Purchase(QuickBooksModel):
    id: str
    sync_token: Optional[str] = None
    txn_date: Optional[str] = None
    payment_type: Optional[str] = None
    total_amt: float
    account_ref: Optional[Ref] = None
    entity_ref: Optional[Ref] = None
    currency_ref: Optional[Ref] = None
    line: List[Dict[str, Any]] = Field(default_factory=list)
    meta_data: Optional[MetaData] = None


class Vendor(QuickBooksModel):
    id: str
    sync_token: Optional[str] = None
    display_name: str
    company_name: Optional[str] = None
    primary_email_addr: Optional[Dict[str, Any]] = None
    primary_phone: Optional[Dict[str, Any]] = None
    balance: Optional[float] = None
    active: Optional[bool] = None
    meta_data: Optional[MetaData] = None


class CompanyInfo(QuickBooksModel):
    id: str
    sync_token: Optional[str] = None
    company_name: str
    legal_name: Optional[str] = None
    company_addr: Optional[Dict[str, Any]] = None
    legal_addr: Optional[Dict[str, Any]] = None
    email: Optional[Dict[str, Any]] = None
    web_addr: Optional[Dict[str, Any]] = None
    country: Optional[str] = None
    fiscal_year_start_month: Optional[str] = None
    company_start_date: Optional[str] = None
    meta_data: Optional[MetaData] = None


class CompanyInfoResponse(QuickBooksModel):
    company_info: CompanyInfo
    time: Optional[str] = Field(None, alias="time")


TABLE_MODELS: Dict[str, Type[QuickBooksModel]] = {
    "Customer": Customer,
    "Invoice": Invoice,
    "Item": Item,
    "Payment": Payment,
    "Purchase": Purchase,
    "Vendor": Vendor,
}

TABLE_DEFAULT_SORT: Dict[str, str] = {
    "Customer": "DisplayName ASC",
    "Invoice": "DueDate DESC",
    "Item": "Name ASC",
    "Payment": "Id DESC",
    "Purchase": "Id DESC",
    "Vendor": "DisplayName ASC",
}


class QueryPage(BaseModel):
    """One page of a QuickBooks query, restricted to a single table."""

    table: str
    rows: List[Any] = Field(default_factory=list)
    start_position: Optional[int] = None
    max_results: Optional[int] = None
    total_count: Optional[int] = None


def parse_query_response(table: str, raw: Any) -> QueryPage:
    """
    Validate a ``/query`` response for *table*.

    The ``QueryResponse`` object must carry rows for *table* only; rows
    under any other table name are rejected.  QuickBooks omits the table
    key entirely when nothing matched.
    """
    if table not in TABLE_MODELS:
        raise ValidationError(f"Unknown QuickBooks table '{table}'")
    if not isinstance(raw, dict) or not isinstance(raw.get("QueryResponse"), dict):
        raise ValidationError("QuickBooks query response has no 'QueryResponse' object")

    response = raw["QueryResponse"]
    foreign = sorted(k for k in TABLE_MODELS if k != table and k in response)
    if foreign:
        raise ValidationError(
            f"QuickBooks query for {table} returned rows for other tables: {', '.join(foreign)}"
        )

    rows_raw = response.get(table, [])
    if not isinstance(rows_raw, list):
        raise ValidationError(f"QuickBooks '{table}' rows are not a list")

    model = TABLE_MODELS[table]
    return QueryPage(
        table=table,
        rows=[parse_resource(model, r) for r in rows_raw],
        start_position=response.get("startPosition"),
        max_results=response.get("maxResults"),
        total_count=response.get("totalCount"),
    )


# ═══════════════════════════════════════════════════════════════════════════════
# Tool parameters
# ═══════════════════════════════════════════════════════════════════════════════


_EXCESS_FRACTION = re.compile(r"(\.\d{6})\d+")


def _check_iso8601(value: Optional[str]) -> Optional[str]:
    if value is None:
        return value
    try:
        # Graph writes seven fractional digits; datetime keeps six.
        datetime.fromisoformat(_EXCESS_FRACTION.sub(r"\1", value.replace("Z", "+00:00")))
    except ValueError:
        raise ValueError(f"'{value}' is not an ISO 8601 date-time")
    return value


class ToolParams(BaseModel):
    """Base for tool argument schemas: strict types, unknown keys rejected."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="forbid",
        strict=True,
    )


class NoParams(ToolParams):
    pass


class PageParams(ToolParams):
    page: int = Field(0, ge=0, description="Zero-based page number")
    page_size: int = Field(10, ge=1, le=1000, description="Rows per page (1-1000)")


class CalendarRangeParams(ToolParams):
    start_date: str = Field(..., description="Start date for the events in ISO 8601 format")
    end_date: str = Field(..., description="End date for the events in ISO 8601 format")

    @field_validator("start_date", "end_date")
    @classmethod
    def dates_are_iso8601(cls, v: Optional[str]) -> Optional[str]:
        return _check_iso8601(v)


class EventIdParams(ToolParams):
    event_id: str = Field(..., min_length=1, description="The ID of the event")


class CreateCalendarEventParams(ToolParams):
    subject: str = Field(..., description="The subject of the event")
    start_date: str = Field(..., description="The start date of the event in ISO 8601 format")
    end_date: str = Field(..., description="The end date of the event in ISO 8601 format")
    reminder_minutes_before_start: int = Field(
        15, ge=0, description="The number of minutes before the event start to send a reminder"
    )
    body: Optional[str] = Field(None, description="The body of the event, in text format")
    location: Optional[str] = Field(None, description="The location of the event (or meeting link)")
    is_all_day: Optional[bool] = Field(None, description="Whether the event is all day (default: false)")
    categories: Optional[List[str]] = Field(
        None, description="The categories of the event (default: no categories)"
    )
    attendees: Optional[List[str]] = Field(
        None, description="The email addresses of the attendees of the event (default: just the user)"
    )

    @field_validator("start_date", "end_date")
    @classmethod
    def dates_are_iso8601(cls, v: Optional[str]) -> Optional[str]:
        return _check_iso8601(v)


class UpdateCalendarEventParams(ToolParams):
    event_id: str = Field(..., min_length=1, description="The ID of the event to update")
    subject: Optional[str] = Field(None, description="The subject of the event")
    start_date: Optional[str] = Field(None, description="The start date of the event in ISO 8601 format")
    end_date: Optional[str] = Field(None, description="The end date of the event in ISO 8601 format")
    reminder_minutes_before_start: Optional[int] = Field(
        None, ge=0, description="The number of minutes before the event start to send a reminder"
    )
    body: Optional[str] = Field(None, description="The body of the event, in text format")
    location: Optional[str] = Field(None, description="The location of the event (or meeting link)")
    is_all_day: Optional[bool] = Field(None, description="Whether the event is all day")
    categories: Optional[List[str]] = Field(None, description="The categories of the event")
    attendees: Optional[List[str]] = Field(
        None, description="The email addresses of the attendees of the event"
    )

    @field_validator("start_date", "end_date")
    @classmethod
    def dates_are_iso8601(cls, v: Optional[str]) -> Optional[str]:
        return _check_iso8601(v)

