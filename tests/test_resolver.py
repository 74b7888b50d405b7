"""Tests for the rate table and the resolver that builds it."""

from __future__ import annotations

import pytest

from ffiii_rate_updater.exceptions import FetchError, NotFoundError
from ffiii_rate_updater.ingestion.currency_api import parse_feed_payload
from ffiii_rate_updater.ingestion.models import Currency, FeedResponse, Pair, Rate
from ffiii_rate_updater.ingestion.resolver import RateResolver, RateTable, distinct_currencies


class _DummyFeed:
    def __init__(self, payloads: dict[str, dict], failing: set[str] | None = None) -> None:
        self.payloads = payloads
        self.failing = failing or set()
        self.calls: list[tuple[str, str | None]] = []

    def fetch_rates(self, base: Currency | str, date: str | None = None) -> FeedResponse:
        currency = Currency.normalize(base)
        self.calls.append((currency.lower, date))
        if currency.lower in self.failing:
            raise FetchError(f"failed to fetch rates for {currency}", status=500)
        return parse_feed_payload(self.payloads[currency.lower], currency)


def test_build_and_lookup_round_trip() -> None:
    feed = _DummyFeed({"usd": {"date": "2025-01-01", "usd": {"eur": 0.9, "gbp": 0.8}}})
    resolver = RateResolver(feed)

    table = resolver.build([Currency("USD")], "latest")

    eur = resolver.lookup(table, "USD", "EUR")
    gbp = resolver.lookup(table, Currency("usd"), Currency("gbp"))
    assert (eur.value, eur.date) == (0.9, "2025-01-01")
    assert (gbp.value, gbp.date) == (0.8, "2025-01-01")


def test_build_fetches_each_distinct_currency_once_in_input_order() -> None:
    feed = _DummyFeed(
        {
            "eur": {"date": "2025-01-01", "eur": {"usd": 1.1}},
            "usd": {"date": "2025-01-01", "usd": {"eur": 0.9}},
        }
    )

    table = RateResolver(feed).build(["EUR", "usd", "eur", "USD", ""], "2025-01-01")

    assert feed.calls == [("eur", "2025-01-01"), ("usd", "2025-01-01")]
    assert len(table) == 2


def test_build_fails_fast_without_partial_table() -> None:
    feed = _DummyFeed(
        {"usd": {"date": "2025-01-01", "usd": {"eur": 0.9}}},
        failing={"eur"},
    )

    with pytest.raises(FetchError):
        RateResolver(feed).build(["USD", "EUR", "GBP"])

    # GBP is never fetched once EUR failed.
    assert [code for code, _ in feed.calls] == ["usd", "eur"]


def test_lookup_missing_pair_raises_not_found() -> None:
    table = RateTable(
        [Rate(date="2025-01-01", pair=Pair(Currency("usd"), Currency("eur")), value=0.9)]
    )

    with pytest.raises(NotFoundError) as excinfo:
        table.lookup("EUR", "USD")

    assert excinfo.value.from_currency == Currency("EUR")
    assert excinfo.value.to_currency == Currency("USD")
    assert "EUR/USD" in str(excinfo.value)


@pytest.mark.parametrize("source, target", [("", "EUR"), ("USD", ""), ("", "")])
def test_lookup_with_empty_currency_is_not_found(source: str, target: str) -> None:
    table = RateTable(
        [
            Rate(date="2025-01-01", pair=Pair(Currency("usd"), Currency("eur")), value=0.9),
            Rate(date="2025-01-01", pair=Pair(Currency(""), Currency("")), value=1.0),
        ]
    )

    with pytest.raises(NotFoundError):
        table.lookup(source, target)


def test_lookup_returns_first_match() -> None:
    pair = Pair(Currency("usd"), Currency("eur"))
    table = RateTable(
        [
            Rate(date="2025-01-01", pair=pair, value=0.9),
            Rate(date="2025-01-02", pair=pair, value=0.95),
        ]
    )

    assert table.lookup("usd", "eur").value == 0.9


def test_rates_from_omits_missing_targets() -> None:
    table = RateTable(
        [
            Rate(date="2025-01-01", pair=Pair(Currency("usd"), Currency("eur")), value=0.9),
            Rate(date="2025-01-01", pair=Pair(Currency("usd"), Currency("gbp")), value=0.8),
        ]
    )

    found = table.rates_from("USD", ["EUR", "CHF"])

    assert list(found) == [Currency("EUR")]
    assert found[Currency("eur")].value == 0.9


def test_distinct_currencies_skips_blank_and_duplicates() -> None:
    assert distinct_currencies(["usd", "", "EUR", "Usd"]) == [Currency("usd"), Currency("eur")]
