"""
Input normalization helpers shared by the schemas and services.

Request values arrive as loosely typed JSON or query strings. These helpers
coerce them the same way everywhere: integers are read from the leading
digits of a string, timestamps are normalized to naive UTC with millisecond
precision, and free text is trimmed.
"""

import math
import re
from datetime import datetime, timezone
from typing import Any

_LEADING_INT = re.compile(r"\s*([+-]?\d+)")


def utcnow() -> datetime:
    return to_naive_utc(datetime.now(timezone.utc))


def to_naive_utc(value: datetime) -> datetime:
    if value.tzinfo is not None:
        value = value.astimezone(timezone.utc).replace(tzinfo=None)
    return value.replace(microsecond=value.microsecond // 1000 * 1000)


def parse_int(value: Any) -> int | None:
    """Return the integer a value denotes, or None when it has none."""
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, float):
        return int(value) if math.isfinite(value) else None
    if isinstance(value, str):
        match = _LEADING_INT.match(value)
        return int(match.group(1)) if match else None
    return None


def parse_timestamp(value: Any) -> datetime | None:
    """Parse an ISO 8601 string or epoch milliseconds into naive UTC.

    Strings without an offset are taken as UTC. Returns None for anything
    that is not a recognizable timestamp.
    """
    if isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        try:
            parsed = datetime.fromtimestamp(value / 1000, tz=timezone.utc)
        except (OverflowError, OSError, ValueError):
            return None
    elif isinstance(value, str):
        text = value.strip()
        if text[-1:] in ("Z", "z"):
            text = text[:-1] + "+00:00"
        try:
            parsed = datetime.fromisoformat(text)
        except ValueError:
            return None
    else:
        return None
    try:
        return to_naive_utc(parsed)
    except OverflowError:
        return None


def clean_text(value: str | None) -> str:
    return value.strip() if value else ""


def normalize_email(value: str | None) -> str:
    return clean_text(value).lower()
