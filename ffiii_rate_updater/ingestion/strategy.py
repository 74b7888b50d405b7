"""Abstractions for pluggable rate feeds."""

from __future__ import annotations

from typing import Protocol

from ffiii_rate_updater.ingestion.models import Currency, FeedResponse


class RateFeed(Protocol):
    """Contract for fetching every published rate of one base currency.

    Implementations return the date the feed actually used (which may differ
    from a requested ``latest``) together with the rates keyed by target.
    """

    def fetch_rates(self, base: Currency | str, date: str | None = None) -> FeedResponse:
        ...  # pragma: no cover - protocol definition


__all__ = ["RateFeed"]
