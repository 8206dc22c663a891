# spotlight/utils/timeutils.py
from datetime import date, datetime, timezone
from typing import Optional


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def utc_today() -> date:
    return utcnow().date()


def as_utc(value: Optional[datetime]) -> Optional[datetime]:
    """
    Normalise a datetime read back from the database to an aware UTC value.

    Some drivers (SQLite) hand back naive datetimes even for
    DateTime(timezone=True) columns; every value we store is UTC.
    """
    if value is None:
        return None
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)
