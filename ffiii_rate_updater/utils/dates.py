"""Date helpers shared by the feed and Firefly clients."""

from __future__ import annotations

from datetime import date, datetime

LATEST = "latest"


def parse_date(value: str | date) -> date:
    """Parse a date string in ISO format to :class:`date`."""

    if isinstance(value, date):
        return value
    return datetime.strptime(value, "%Y-%m-%d").date()


def feed_date(value: str | date | None) -> str:
    """Return the date segment used by the rate feed (``latest`` when unset)."""

    if value is None or value == "":
        return LATEST
    if isinstance(value, date):
        return value.isoformat()
    if value.lower() == LATEST:
        return LATEST
    return parse_date(value).isoformat()


def submission_date(value: str | date | None, *, today: date | None = None) -> str:
    """Return the ISO date sent to Firefly, defaulting to today."""

    if value is None or value == "":
        return (today or date.today()).isoformat()
    if isinstance(value, date):
        return value.isoformat()
    return value


__all__ = ["LATEST", "parse_date", "feed_date", "submission_date"]
