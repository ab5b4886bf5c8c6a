"""SQLAlchemy implementation of the EventStore."""

from contextlib import contextmanager
from datetime import datetime
from typing import Iterator

from sqlalchemy import func, insert, literal, select, update
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from event_registration.core.errors import InternalError
from event_registration.models.events import Event
from event_registration.models.registrations import Registration
from event_registration.schemas.events import EventListParams
from event_registration.stores.interfaces import Constraint, ConstraintViolation, EventStore

SORT_COLUMNS = {
    "date": Event.date,
    "name": Event.name,
    "createdAt": Event.created_at,
}

# Signed 64-bit range of SQL integer columns
MIN_SQL_INTEGER = -(2**63)
MAX_SQL_INTEGER = 2**63 - 1


def _fits_sql_integer(value: int) -> bool:
    return MIN_SQL_INTEGER <= value <= MAX_SQL_INTEGER


class SqlEventStore(EventStore):
    """Relational store bound to a single session."""

    def __init__(self, db: Session) -> None:
        self._db = db

    @contextmanager
    def _guard(self) -> Iterator[None]:
        try:
            yield
        except SQLAlchemyError as e:
            self._db.rollback()
            raise InternalError(str(e)) from e

    def insert_event(
        self,
        *,
        name: str,
        description: str,
        location: str,
        date: datetime,
        capacity: int,
    ) -> Event:
        with self._guard():
            event = Event(
                name=name,
                description=description,
                location=location,
                date=date,
                capacity=capacity,
                cancelled=False,
            )
            self._db.add(event)
            self._db.commit()
            self._db.refresh(event)
            return event

    def query_events(self, params: EventListParams) -> tuple[list[Event], int]:
        conditions = []
        if params.q:
            conditions.append(Event.name.icontains(params.q, autoescape=True))
        if params.status == "active":
            conditions.append(Event.cancelled.is_(False))
        elif params.status == "cancelled":
            conditions.append(Event.cancelled.is_(True))
        if params.date_from is not None:
            conditions.append(Event.date >= params.date_from)
        if params.date_to is not None:
            conditions.append(Event.date <= params.date_to)

        column = SORT_COLUMNS[params.sort]
        if params.order == "desc":
            ordering = (column.desc(), Event.id.desc())
        else:
            ordering = (column.asc(), Event.id.asc())

        with self._guard():
            total = self._db.scalar(select(func.count(Event.id)).where(*conditions))
            if not _fits_sql_integer(params.offset):
                return [], int(total or 0)
            items = self._db.scalars(
                select(Event)
                .where(*conditions)
                .order_by(*ordering)
                .offset(params.offset)
                .limit(params.page_size)
            ).all()
        return list(items), int(total or 0)

    def get_event(self, event_id: int) -> Event | None:
        if not _fits_sql_integer(event_id):
            return None
        with self._guard():
            return self._db.get(Event, event_id)

    def insert_registration(self, *, event_id: int, name: str, email: str) -> Registration:
        if not _fits_sql_integer(event_id):
            raise ConstraintViolation(Constraint.EVENT_OPEN)
        # Capacity and the active flag are re-checked inside the INSERT itself,
        # so concurrent writers cannot overfill an event.
        registered = (
            select(func.count(Registration.id))
            .where(Registration.event_id == event_id)
            .correlate(None)
            .scalar_subquery()
        )
        candidate = (
            select(literal(event_id), literal(name), literal(email))
            .select_from(Event)
            .where(
                Event.id == event_id,
                Event.cancelled.is_(False),
                registered < Event.capacity,
            )
        )
        stmt = insert(Registration.__table__).from_select(["event_id", "name", "email"], candidate)

        with self._guard():
            try:
                result = self._db.execute(stmt)
            except IntegrityError as e:
                self._db.rollback()
                if self._find_registration(event_id, email) is not None:
                    raise ConstraintViolation(Constraint.UNIQUE_EMAIL) from e
                raise

            if result.rowcount != 1:
                self._db.rollback()
                event = self._db.get(Event, event_id)
                if event is not None and event.cancelled:
                    raise ConstraintViolation(Constraint.EVENT_OPEN)
                raise ConstraintViolation(Constraint.CAPACITY)

            self._db.commit()
            return self._find_registration(event_id, email)

    def _find_registration(self, event_id: int, email: str) -> Registration | None:
        return self._db.scalar(
            select(Registration).where(
                Registration.event_id == event_id,
                Registration.email == email,
            )
        )

    def count_registrations(self, event_id: int) -> int:
        if not _fits_sql_integer(event_id):
            return 0
        with self._guard():
            count = self._db.scalar(
                select(func.count(Registration.id)).where(Registration.event_id == event_id)
            )
        return int(count or 0)

    def set_cancelled(self, event_id: int) -> Event | None:
        if not _fits_sql_integer(event_id):
            return None
        stmt = (
            update(Event)
            .where(Event.id == event_id)
            .where(Event.cancelled.is_(False))
            .values(cancelled=True)
        )
        with self._guard():
            res = self._db.execute(stmt)
            if res.rowcount != 1:  # type: ignore
                self._db.rollback()
                return None
            self._db.commit()
            event = self._db.get(Event, event_id)
            if event is not None:
                self._db.refresh(event)
            return event
