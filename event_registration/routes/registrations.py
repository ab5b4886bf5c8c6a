from fastapi import APIRouter, Body, Depends

from event_registration.routes.deps import get_store
from event_registration.schemas.registrations import RegistrationCreate, RegistrationOut
from event_registration.services.registrations import register_attendee
from event_registration.stores.interfaces import EventStore

router = APIRouter(prefix="/events", tags=["registrations"])


@router.post("/{event_id}/register", response_model=RegistrationOut)
def register(
    event_id: int,
    payload: RegistrationCreate | None = Body(None),
    store: EventStore = Depends(get_store),
):
    return register_attendee(store, event_id, payload or RegistrationCreate())
