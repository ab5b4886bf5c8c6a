from fastapi import APIRouter, Body, Depends, Query

from event_registration.routes.deps import get_store
from event_registration.schemas.events import EventCreate, EventOut, EventPage, EventStatsOut
from event_registration.services.events import (
    cancel_event,
    create_event,
    get_event_stats,
    list_events,
    parse_list_params,
)
from event_registration.stores.interfaces import EventStore

router = APIRouter(prefix="/events", tags=["events"])


@router.post("", response_model=EventOut)
def create(payload: EventCreate | None = Body(None), store: EventStore = Depends(get_store)):
    return create_event(store, payload or EventCreate())


@router.get("", response_model=EventPage)
def search(
    sort: str | None = None,
    order: str | None = None,
    q: str | None = None,
    status: str | None = None,
    date_from: str | None = Query(None, alias="from"),
    date_to: str | None = Query(None, alias="to"),
    page: str | None = None,
    page_size: str | None = Query(None, alias="pageSize"),
    store: EventStore = Depends(get_store),
):
    """List events with search, status/date filters, sorting and paging."""
    raw = {
        "sort": sort,
        "order": order,
        "q": q,
        "status": status,
        "date_from": date_from,
        "date_to": date_to,
        "page": page,
        "page_size": page_size,
    }
    params = parse_list_params(**{key: value for key, value in raw.items() if value is not None})
    return list_events(store, params)


@router.post("/{event_id}/cancel", response_model=EventOut)
def cancel(event_id: int, store: EventStore = Depends(get_store)):
    return cancel_event(store, event_id)


@router.get("/{event_id}/stats", response_model=EventStatsOut)
def event_stats(event_id: int, store: EventStore = Depends(get_store)):
    return get_event_stats(store, event_id)
