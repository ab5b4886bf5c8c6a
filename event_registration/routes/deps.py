from fastapi import Depends
from sqlalchemy.orm import Session

from event_registration.database.db import get_db
from event_registration.stores.interfaces import EventStore
from event_registration.stores.sql_store import SqlEventStore


def get_store(db: Session = Depends(get_db)) -> EventStore:
    """One store per request, bound to the request's session."""
    return SqlEventStore(db)
