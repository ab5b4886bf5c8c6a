from datetime import datetime, timedelta, timezone


def iso_from_now(**delta) -> str:
    """ISO 8601 UTC timestamp offset from the current time."""
    return (datetime.now(timezone.utc) + timedelta(**delta)).isoformat().replace("+00:00", "Z")


def naive_from_now(**delta) -> datetime:
    """Naive UTC datetime offset from the current time, as the store keeps it."""
    return (datetime.now(timezone.utc) + timedelta(**delta)).replace(tzinfo=None, microsecond=0)
