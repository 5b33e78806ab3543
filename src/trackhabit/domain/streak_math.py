"""Elapsed-day arithmetic for streaks."""

from __future__ import annotations

from datetime import datetime, timedelta, timezone

ONE_DAY = timedelta(days=1)


def as_utc(value: datetime) -> datetime:
    """Return ``value`` in UTC; naive values are taken to already be UTC."""
    if value.tzinfo is None or value.utcoffset() is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def days_since(reference: datetime, now: datetime) -> int:
    """Return ``floor((now - reference) / one day)``.

    A reference in the future gives a negative count; callers must not create
    habits that were reset in the future.
    """

    return (as_utc(now) - as_utc(reference)) // ONE_DAY


__all__ = ["ONE_DAY", "as_utc", "days_since"]
