"""Store interface (repository pattern).

Services depend only on ``EventStore``; the SQLAlchemy implementation lives
in ``stores/sql_store.py``. Stores report broken write guards through
``ConstraintViolation`` instead of leaking driver errors.
"""

from abc import ABC, abstractmethod
from datetime import datetime
from enum import Enum

from event_registration.models.events import Event
from event_registration.models.registrations import Registration
from event_registration.schemas.events import EventListParams


class Constraint(Enum):
    UNIQUE_EMAIL = "UNIQUE_EMAIL"
    CAPACITY = "CAPACITY"
    EVENT_OPEN = "EVENT_OPEN"


class ConstraintViolation(Exception):
    """Raised when a write is refused by a store-level guard."""

    def __init__(self, constraint: Constraint) -> None:
        super().__init__(constraint.value)
        self.constraint = constraint


class EventStore(ABC):
    """Interface for event and registration persistence."""

    @abstractmethod
    def insert_event(
        self,
        *,
        name: str,
        description: str,
        location: str,
        date: datetime,
        capacity: int,
    ) -> Event:
        """Insert an active event and return it with id and created_at set."""
        ...

    @abstractmethod
    def query_events(self, params: EventListParams) -> tuple[list[Event], int]:
        """Return one page of matching events and the unpaginated match count."""
        ...

    @abstractmethod
    def get_event(self, event_id: int) -> Event | None:
        """Return an event by ID, or None if not found."""
        ...

    @abstractmethod
    def insert_registration(self, *, event_id: int, name: str, email: str) -> Registration:
        """Insert a registration if the event is open and below capacity.

        Raises:
            ConstraintViolation: UNIQUE_EMAIL, CAPACITY or EVENT_OPEN.
        """
        ...

    @abstractmethod
    def count_registrations(self, event_id: int) -> int:
        """Return the number of registrations for an event."""
        ...

    @abstractmethod
    def set_cancelled(self, event_id: int) -> Event | None:
        """Flip an active event to cancelled.

        Returns the updated event, or None if it was not active.
        """
        ...
