"""UTC datetime utilities."""

from datetime import date, datetime, timezone


def utc_now() -> datetime:
    """Return timezone-aware UTC now."""
    return datetime.now(timezone.utc)


def local_today() -> date:
    """Return the current calendar day in the server's local timezone."""
    return datetime.now().astimezone().date()


def local_date(ts: datetime) -> date:
    """Calendar day of ts in local time. Naive datetimes are taken as UTC."""
    if ts.tzinfo is None:
        ts = ts.replace(tzinfo=timezone.utc)
    return ts.astimezone().date()


def parse_iso(value: str) -> datetime:
    """Revive an ISO-8601 timestamp written by isoformat(); naive values become UTC."""
    ts = datetime.fromisoformat(value)
    if ts.tzinfo is None:
        ts = ts.replace(tzinfo=timezone.utc)
    return ts
