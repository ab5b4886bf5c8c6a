"""
Concurrent registration tests.

Each worker thread gets its own session against a file-backed SQLite
database, the way separate requests would. Capacity and per-email
uniqueness must hold no matter how the threads interleave.
"""

from concurrent.futures import ThreadPoolExecutor

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker

from event_registration.core.errors import ConflictError, ErrorCode
from event_registration.database.db import Base
from event_registration.schemas.registrations import RegistrationCreate
from event_registration.services.events import get_event_stats
from event_registration.services.registrations import register_attendee
from event_registration.stores.sql_store import SqlEventStore
from event_registration.tests.helpers import naive_from_now


@pytest.fixture
def session_factory(tmp_path):
    engine = create_engine(
        f"sqlite:///{tmp_path / 'race.db'}",
        connect_args={"check_same_thread": False, "timeout": 30},
    )
    Base.metadata.create_all(bind=engine)
    yield sessionmaker(autocommit=False, autoflush=False, bind=engine)
    engine.dispose()


def make_event(session_factory, capacity: int) -> int:
    db = session_factory()
    try:
        event = SqlEventStore(db).insert_event(
            name="Race Test Event",
            description="",
            location="",
            date=naive_from_now(days=1),
            capacity=capacity,
        )
        return event.id
    finally:
        db.close()


def attempt(session_factory, event_id: int, email: str):
    """Try to register. Returns the registration id or the error code."""
    db = session_factory()
    try:
        registration = register_attendee(SqlEventStore(db), event_id, RegistrationCreate(name="Racer", email=email))
        return registration.id
    except ConflictError as e:
        return e.code
    finally:
        db.close()


def stats_for(session_factory, event_id: int) -> dict:
    db = session_factory()
    try:
        return get_event_stats(SqlEventStore(db), event_id)
    finally:
        db.close()


def test_capacity_holds_under_concurrency(session_factory):
    """10 distinct attendees race for 3 seats."""
    event_id = make_event(session_factory, capacity=3)

    with ThreadPoolExecutor(max_workers=10) as executor:
        futures = [
            executor.submit(attempt, session_factory, event_id, f"user{i}@example.com")
            for i in range(10)
        ]
        results = [f.result() for f in futures]

    successful = [r for r in results if isinstance(r, int)]
    failed = [r for r in results if r is ErrorCode.EVENT_FULL]

    assert len(successful) == 3, f"Expected 3 successful registrations, got {results}"
    assert len(failed) == 7

    stats = stats_for(session_factory, event_id)
    assert stats["total_registrations"] == 3
    assert stats["remaining"] == 0
    assert stats["is_full"] is True


def test_duplicate_email_holds_under_concurrency(session_factory):
    """The same attendee submits 8 times at once, with case variations."""
    event_id = make_event(session_factory, capacity=50)
    emails = ["dup@example.com", "DUP@example.com", " Dup@Example.com "] * 3

    with ThreadPoolExecutor(max_workers=8) as executor:
        futures = [executor.submit(attempt, session_factory, event_id, email) for email in emails[:8]]
        results = [f.result() for f in futures]

    successful = [r for r in results if isinstance(r, int)]
    duplicates = [r for r in results if r is ErrorCode.DUPLICATE_REGISTRATION]

    assert len(successful) == 1, f"Expected 1 successful registration, got {results}"
    assert len(duplicates) == 7
    assert stats_for(session_factory, event_id)["total_registrations"] == 1
