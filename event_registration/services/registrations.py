import logging
from contextlib import contextmanager
from functools import lru_cache
from typing import Iterator

import redis

from event_registration.core.config import (
    REGISTRATION_LOCK_TIMEOUT,
    REGISTRATION_LOCK_WAIT,
    get_redis_url,
)
from event_registration.core.errors import (
    ConflictError,
    ErrorCode,
    InternalError,
    NotFoundError,
    ValidationError,
)
from event_registration.models.registrations import Registration
from event_registration.schemas.registrations import RegistrationCreate
from event_registration.services.validation import clean_text, normalize_email
from event_registration.stores.interfaces import Constraint, ConstraintViolation, EventStore

logger = logging.getLogger(__name__)


def get_redis_client():
    """Get Redis client for locking, or None when no Redis URL is configured."""
    url = get_redis_url()
    if not url:
        return None
    return _client_for(url)


@lru_cache(maxsize=None)
def _client_for(url: str) -> redis.Redis:
    # One client, and so one connection pool, per URL for the process
    return redis.from_url(url, decode_responses=True)


@contextmanager
def event_lock(event_id: int) -> Iterator[None]:
    """
    Hold the per-event registration lock for the duration of the block.

    Serializes registrations for one event across service instances. The
    store re-checks capacity inside its INSERT, so running without Redis is
    still safe against a single database.
    """
    redis_client = get_redis_client()
    if redis_client is None:
        yield
        return

    lock = redis_client.lock(
        f"event_lock:{event_id}",
        timeout=REGISTRATION_LOCK_TIMEOUT,
        blocking_timeout=REGISTRATION_LOCK_WAIT,
    )
    try:
        acquired = lock.acquire(blocking=True)
    except redis.exceptions.LockError as e:
        raise ConflictError(ErrorCode.REGISTRATION_BUSY, "Could not acquire registration lock, please try again") from e
    except redis.exceptions.RedisError as e:
        raise InternalError(str(e)) from e
    if not acquired:
        raise ConflictError(ErrorCode.REGISTRATION_BUSY, "Could not acquire registration lock, please try again")

    try:
        yield
    finally:
        try:
            lock.release()
        except redis.exceptions.LockError:
            logger.warning("Registration lock for event %s expired before release", event_id)


def register_attendee(store: EventStore, event_id: int, payload: RegistrationCreate) -> Registration:
    """
    Register one attendee for an event.

    Failure order: missing fields, unknown event, cancelled, full, duplicate.
    The duplicate check is the store's unique constraint, so it holds under
    concurrent requests.
    """
    name = clean_text(payload.name)
    email = normalize_email(payload.email)
    if not name or not email:
        raise ValidationError(ErrorCode.MISSING_FIELDS, "name and email are required")

    with event_lock(event_id):
        event = store.get_event(event_id)
        if event is None:
            raise NotFoundError(ErrorCode.EVENT_NOT_FOUND, "Event not found")
        if event.cancelled:
            logger.warning("Rejected registration for cancelled event %s", event_id)
            raise ConflictError(ErrorCode.EVENT_CANCELLED, "Event is cancelled")
        if store.count_registrations(event_id) >= event.capacity:
            logger.warning("Rejected registration for full event %s", event_id)
            raise ConflictError(ErrorCode.EVENT_FULL, "Event is full")

        try:
            registration = store.insert_registration(event_id=event_id, name=name, email=email)
        except ConstraintViolation as e:
            logger.warning("Registration for event %s refused by store: %s", event_id, e.constraint.value)
            if e.constraint is Constraint.UNIQUE_EMAIL:
                raise ConflictError(
                    ErrorCode.DUPLICATE_REGISTRATION,
                    "This email is already registered for the event",
                ) from e
            if e.constraint is Constraint.EVENT_OPEN:
                raise ConflictError(ErrorCode.EVENT_CANCELLED, "Event is cancelled") from e
            raise ConflictError(ErrorCode.EVENT_FULL, "Event is full") from e

    logger.info("Registered %s for event %s", registration.email, event_id)
    return registration
