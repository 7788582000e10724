from datetime import datetime, timezone


def utc_now() -> datetime:
    """Current instant as a timezone-aware UTC datetime."""
    return datetime.now(timezone.utc)


def as_utc(value: datetime | None) -> datetime | None:
    """
    Make a datetime comparable with utc_now().

    SQLite returns naive datetimes; they are stored in UTC, so naive values
    are tagged as UTC and aware values are converted.
    """
    if value is None:
        return None
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def is_within_window(now: datetime, starts_at: datetime | None, ends_at: datetime | None) -> bool:
    """True if now lies in [starts_at, ends_at]; a missing bound is open on that side."""
    now = as_utc(now)
    start = as_utc(starts_at)
    end = as_utc(ends_at)
    if start is not None and now < start:
        return False
    if end is not None and now > end:
        return False
    return True
