import logging
from datetime import datetime

from pydantic import ValidationError as SchemaValidationError

from event_registration.core.errors import ConflictError, ErrorCode, NotFoundError, ValidationError
from event_registration.models.events import Event
from event_registration.schemas.events import EventCreate, EventListParams
from event_registration.services.validation import clean_text, parse_int, parse_timestamp, utcnow
from event_registration.stores.interfaces import EventStore

logger = logging.getLogger(__name__)

MAX_CAPACITY = 2**31 - 1


def create_event(store: EventStore, payload: EventCreate, *, now: datetime | None = None) -> Event:
    """
    Validate a creation request and insert the event.

    Checks run in order: required fields, date strictly after ``now``,
    then capacity as a positive integer.
    """
    name = clean_text(payload.name)
    if not name or payload.date is None or payload.date == "" or payload.capacity is None:
        raise ValidationError(ErrorCode.MISSING_FIELDS, "name, date, capacity are required")

    date = parse_timestamp(payload.date)
    if date is None:
        raise ValidationError(ErrorCode.INVALID_DATE, "Event date must be a valid ISO 8601 timestamp")
    if date <= (now or utcnow()):
        raise ValidationError(ErrorCode.DATE_NOT_IN_FUTURE, "Event date must be in the future")

    capacity = parse_int(payload.capacity)
    if capacity is None or not 1 <= capacity <= MAX_CAPACITY:
        raise ValidationError(ErrorCode.INVALID_CAPACITY, "capacity must be a positive integer")

    event = store.insert_event(
        name=name,
        description=clean_text(payload.description),
        location=clean_text(payload.location),
        date=date,
        capacity=capacity,
    )
    logger.info("Created event %s '%s' (capacity %s)", event.id, event.name, event.capacity)
    return event


def parse_list_params(**query) -> EventListParams:
    """Build listing options from raw query values."""
    try:
        return EventListParams(**query)
    except SchemaValidationError as e:
        error = e.errors()[0]
        field = {"date_from": "from", "date_to": "to"}.get(str(error["loc"][0]), error["loc"][0])
        raise ValidationError(ErrorCode.INVALID_QUERY, f"{field} {error['msg'].removeprefix('Value error, ')}") from e


def list_events(store: EventStore, params: EventListParams) -> dict:
    items, total = store.query_events(params)
    return {
        "items": items,
        "total": total,
        "page": params.page,
        "page_size": params.page_size,
    }


def _get_event_or_404(store: EventStore, event_id: int) -> Event:
    event = store.get_event(event_id)
    if event is None:
        raise NotFoundError(ErrorCode.EVENT_NOT_FOUND, "Event not found")
    return event


def cancel_event(store: EventStore, event_id: int) -> Event:
    """Move an event from active to cancelled. Cancelled is terminal."""
    event = _get_event_or_404(store, event_id)
    if event.cancelled:
        raise ConflictError(ErrorCode.ALREADY_CANCELLED, "Event already cancelled")

    updated = store.set_cancelled(event_id)
    if updated is None:
        # Lost a race with another cancellation
        raise ConflictError(ErrorCode.ALREADY_CANCELLED, "Event already cancelled")
    logger.info("Cancelled event %s", event_id)
    return updated


def get_event_stats(store: EventStore, event_id: int) -> dict:
    event = _get_event_or_404(store, event_id)
    total = store.count_registrations(event_id)
    remaining = max(event.capacity - total, 0)

    return {
        "event_id": event.id,
        "capacity": event.capacity,
        "cancelled": event.cancelled,
        "total_registrations": total,
        "remaining": remaining,
        "is_full": remaining == 0,
    }
