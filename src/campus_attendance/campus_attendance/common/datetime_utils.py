from __future__ import annotations

from datetime import date, datetime, time, timezone, tzinfo
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from ..core.exceptions import ValidationError


def parse_iso_date(value: str) -> date:
    """Parse YYYY-MM-DD string into date."""
    return datetime.strptime(value, "%Y-%m-%d").date()


def parse_hhmm(value: str) -> time:
    """Parse a 24-hour HH:MM string into time."""
    try:
        return datetime.strptime(value.strip(), "%H:%M").time()
    except (AttributeError, ValueError):
        raise ValidationError(f"Invalid time '{value}', expected HH:MM (24-hour)") from None


def get_zone(name: str) -> tzinfo:
    try:
        return ZoneInfo(name)
    except (ZoneInfoNotFoundError, ValueError):
        raise ValidationError(f"Unknown time zone '{name}'") from None


def now_local(tz: tzinfo) -> datetime:
    """Current aware time in the given zone.

    Note: Wrapped so tests can patch/mocked easier.
    """
    return datetime.now(tz)


def ensure_aware(value: datetime, tz: tzinfo) -> datetime:
    """Naive datetimes are taken to be wall-clock time in ``tz``."""
    if value.tzinfo is None:
        return value.replace(tzinfo=tz)
    return value


def local_day(instant: datetime, tz: tzinfo) -> date:
    return ensure_aware(instant, tz).astimezone(tz).date()


def start_of_day(day: date, tz: tzinfo) -> datetime:
    return datetime.combine(day, time.min, tzinfo=tz)


def end_of_day(day: date, tz: tzinfo) -> datetime:
    return datetime.combine(day, time.max, tzinfo=tz)


def to_utc_naive(instant: datetime | None) -> datetime | None:
    """Convert for DATETIME columns, which are stored in UTC without zone."""
    if instant is None:
        return None
    if instant.tzinfo is None:
        return instant
    return instant.astimezone(timezone.utc).replace(tzinfo=None)


def from_utc_naive(value: datetime | None) -> datetime | None:
    if value is None:
        return None
    return value.replace(tzinfo=timezone.utc)
