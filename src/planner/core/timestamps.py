"""
Timestamp helpers.

Remote records carry ISO 8601 strings in UTC with millisecond precision and
a trailing ``Z`` (e.g. ``2026-10-17T09:30:00.000Z``) so that lexical order
matches chronological order across devices.
"""

from datetime import datetime, timezone


def utc_now() -> datetime:
    """Return the current time as a timezone-aware UTC datetime."""
    return datetime.now(timezone.utc)


def to_iso(value: datetime) -> str:
    """
    Format a datetime as a ``Z``-suffixed ISO 8601 string.

    Naive datetimes are treated as UTC.
    """
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    value = value.astimezone(timezone.utc)
    return value.isoformat(timespec="milliseconds").replace("+00:00", "Z")


def now_iso() -> str:
    """Current UTC time as a ``Z``-suffixed ISO 8601 string."""
    return to_iso(utc_now())


def parse_iso(value: str) -> datetime:
    """
    Parse an ISO 8601 timestamp, accepting a trailing ``Z``.

    Naive results are treated as UTC.

    Raises:
        ValueError: If the string is not a timestamp
    """
    parsed = datetime.fromisoformat(value.replace("Z", "+00:00"))
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def time_ago(value: str, now: datetime | None = None) -> str:
    """
    Short relative age of a timestamp: ``just now``, ``5m ago``, ``3h ago``,
    ``2d ago``, or ``12 Mar`` beyond a month.

    Unparseable values are returned unchanged.
    """
    try:
        then = parse_iso(value)
    except ValueError:
        return value
    now = now or utc_now()
    minutes = int((now - then).total_seconds() // 60)
    if minutes < 1:
        return "just now"
    if minutes < 60:
        return f"{minutes}m ago"
    hours = minutes // 60
    if hours < 24:
        return f"{hours}h ago"
    days = hours // 24
    if days < 30:
        return f"{days}d ago"
    return f"{then.day} {then.strftime('%b')}"
