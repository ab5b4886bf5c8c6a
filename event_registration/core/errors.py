"""Service error taxonomy.

Every failure a request can produce is one of these. The HTTP layer maps
``status_code`` and ``message`` onto the ``{"error": ...}`` envelope.
"""

from enum import Enum


class ErrorCode(Enum):
    MISSING_FIELDS = "MISSING_FIELDS"
    INVALID_DATE = "INVALID_DATE"
    DATE_NOT_IN_FUTURE = "DATE_NOT_IN_FUTURE"
    INVALID_CAPACITY = "INVALID_CAPACITY"
    INVALID_QUERY = "INVALID_QUERY"
    EVENT_NOT_FOUND = "EVENT_NOT_FOUND"
    EVENT_CANCELLED = "EVENT_CANCELLED"
    EVENT_FULL = "EVENT_FULL"
    DUPLICATE_REGISTRATION = "DUPLICATE_REGISTRATION"
    ALREADY_CANCELLED = "ALREADY_CANCELLED"
    REGISTRATION_BUSY = "REGISTRATION_BUSY"
    INTERNAL = "INTERNAL"


class ServiceError(Exception):
    """Base error with a code and a user-safe message."""

    status_code = 500

    def __init__(self, code: ErrorCode, message: str) -> None:
        super().__init__(message)
        self.code = code
        self.message = message

    def __str__(self) -> str:
        return self.message


class ValidationError(ServiceError):
    """Malformed, missing or out-of-range input."""

    status_code = 400


class ConflictError(ServiceError):
    """Business rule violation: full, cancelled, duplicate, already cancelled."""

    status_code = 400


class NotFoundError(ServiceError):
    """Referenced event does not exist."""

    status_code = 404


class InternalError(ServiceError):
    """Unexpected failure, usually from the store."""

    status_code = 500

    def __init__(self, message: str) -> None:
        super().__init__(ErrorCode.INTERNAL, message)
