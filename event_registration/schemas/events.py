from datetime import datetime
from typing import Any, Literal

from pydantic import BaseModel, Field, field_serializer, field_validator

from event_registration.services.validation import parse_int, parse_timestamp

SORT_FIELDS = ("date", "name", "createdAt")
DEFAULT_PAGE_SIZE = 5
MAX_PAGE_SIZE = 50


def format_timestamp(value: datetime) -> str:
    """Render a naive UTC datetime as ``YYYY-MM-DDTHH:MM:SS.mmmZ``."""
    return value.strftime("%Y-%m-%dT%H:%M:%S.") + f"{value.microsecond // 1000:03d}Z"


# ---------- Event ----------
class EventCreate(BaseModel):
    # Required and format rules are enforced by services.events.create_event
    name: str | None = None
    description: str | None = ""
    location: str | None = ""
    date: Any = None
    capacity: Any = None


class EventOut(BaseModel):
    id: int
    name: str
    description: str
    location: str
    date: datetime
    capacity: int
    cancelled: bool
    created_at: datetime = Field(serialization_alias="createdAt")

    class Config:
        from_attributes = True

    @field_serializer("date", "created_at")
    def serialize_timestamp(self, value: datetime) -> str:
        return format_timestamp(value)


class EventPage(BaseModel):
    items: list[EventOut]
    total: int
    page: int
    page_size: int = Field(serialization_alias="pageSize")


class EventStatsOut(BaseModel):
    event_id: int = Field(serialization_alias="eventId")
    capacity: int
    cancelled: bool
    total_registrations: int = Field(serialization_alias="totalRegistrations")
    remaining: int
    is_full: bool = Field(serialization_alias="isFull")


# ---------- Listing ----------
class EventListParams(BaseModel):
    """Listing options with defaults.

    Unknown sort fields, orders and statuses fall back to their defaults and
    out-of-range paging values are clamped, so only unparseable ``from``/``to``
    bounds can fail validation.
    """

    sort: Literal["date", "name", "createdAt"] = "date"
    order: Literal["asc", "desc"] = "asc"
    q: str = ""
    status: Literal["active", "cancelled"] | None = None
    date_from: datetime | None = None
    date_to: datetime | None = None
    page: int = Field(default=1, ge=1)
    page_size: int = Field(default=DEFAULT_PAGE_SIZE, ge=1, le=MAX_PAGE_SIZE)

    @field_validator("sort", mode="before")
    @classmethod
    def fallback_sort(cls, value: Any) -> str:
        return value if value in SORT_FIELDS else "date"

    @field_validator("order", mode="before")
    @classmethod
    def fallback_order(cls, value: Any) -> str:
        return "desc" if isinstance(value, str) and value.lower() == "desc" else "asc"

    @field_validator("q", mode="before")
    @classmethod
    def default_query(cls, value: Any) -> str:
        return value or ""

    @field_validator("status", mode="before")
    @classmethod
    def known_status(cls, value: Any) -> str | None:
        return value if value in ("active", "cancelled") else None

    @field_validator("date_from", "date_to", mode="before")
    @classmethod
    def parse_bound(cls, value: Any) -> datetime | None:
        if value is None or value == "":
            return None
        parsed = parse_timestamp(value)
        if parsed is None:
            raise ValueError("must be a valid ISO 8601 timestamp")
        return parsed

    @field_validator("page", mode="before")
    @classmethod
    def coerce_page(cls, value: Any) -> int:
        parsed = parse_int(value)
        return parsed if parsed is not None and parsed >= 1 else 1

    @field_validator("page_size", mode="before")
    @classmethod
    def clamp_page_size(cls, value: Any) -> int:
        parsed = parse_int(value)
        if parsed is None:
            return DEFAULT_PAGE_SIZE
        return min(max(parsed, 1), MAX_PAGE_SIZE)

    @property
    def offset(self) -> int:
        return (self.page - 1) * self.page_size
