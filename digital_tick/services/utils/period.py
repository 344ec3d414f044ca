"""Accounting period clock."""

from datetime import datetime, timezone


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def current_period(now: datetime | None = None) -> str:
    """Return the UTC calendar month of `now` as YYYY-MM."""
    if now is None:
        now = utc_now()
    elif now.tzinfo is None:
        now = now.replace(tzinfo=timezone.utc)
    else:
        now = now.astimezone(timezone.utc)
    return f"{now.year:04d}-{now.month:02d}"
