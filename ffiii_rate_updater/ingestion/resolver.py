"""Build the per-run rate table and answer pair lookups against it."""

from __future__ import annotations

from typing import Iterable, Iterator, Sequence

from ffiii_rate_updater.exceptions import NotFoundError
from ffiii_rate_updater.ingestion.models import Currency, Pair, Rate
from ffiii_rate_updater.ingestion.strategy import RateFeed
from ffiii_rate_updater.utils.logger import get_logger

LOGGER = get_logger(__name__)


def distinct_currencies(currencies: Iterable[Currency | str]) -> list[Currency]:
    """Return currencies de-duplicated case-insensitively, keeping first-seen order."""

    seen: set[Currency] = set()
    ordered: list[Currency] = []
    for raw in currencies:
        currency = Currency.normalize(raw)
        if currency.is_empty() or currency in seen:
            continue
        seen.add(currency)
        ordered.append(currency)
    return ordered


class RateTable:
    """Read-only, ordered collection of rates resolved for a single run."""

    __slots__ = ("_rates",)

    def __init__(self, rates: Iterable[Rate] = ()) -> None:
        self._rates: tuple[Rate, ...] = tuple(rates)

    def __len__(self) -> int:
        return len(self._rates)

    def __iter__(self) -> Iterator[Rate]:
        return iter(self._rates)

    def pairs(self) -> list[Pair]:
        return [rate.pair for rate in self._rates]

    def lookup(self, from_currency: Currency | str, to_currency: Currency | str) -> Rate:
        """Return the first rate for ``from_currency -> to_currency``."""

        source = Currency.normalize(from_currency)
        target = Currency.normalize(to_currency)
        if not source.is_empty() and not target.is_empty():
            pair = Pair(source, target)
            for rate in self._rates:
                if rate.pair == pair:
                    return rate
        raise NotFoundError(source, target)

    def rates_from(
        self, base: Currency | str, targets: Sequence[Currency | str]
    ) -> dict[Currency, Rate]:
        """Return the rates from ``base`` to each of ``targets`` that the table holds."""

        found: dict[Currency, Rate] = {}
        for raw in targets:
            target = Currency.normalize(raw)
            try:
                found[target] = self.lookup(base, target)
            except NotFoundError:
                continue
        return found


class RateResolver:
    """Drive a :class:`RateFeed` once per base currency and index the results."""

    def __init__(self, feed: RateFeed) -> None:
        self.feed = feed

    def build(self, currencies: Iterable[Currency | str], date: str | None = None) -> RateTable:
        """Fetch every distinct currency up front.

        Any fetch or parse error propagates unchanged so that no partial table
        is ever handed to the submission stage.
        """

        rates: list[Rate] = []
        for currency in distinct_currencies(currencies):
            response = self.feed.fetch_rates(currency, date)
            LOGGER.debug(
                "Feed returned %s rates for %s on %s", len(response.rates), currency, response.date
            )
            rates.extend(response.to_rates())
        table = RateTable(rates)
        LOGGER.info("Resolved %s rates", len(table))
        return table

    @staticmethod
    def lookup(table: RateTable, from_currency: Currency | str, to_currency: Currency | str) -> Rate:
        return table.lookup(from_currency, to_currency)


__all__ = ["RateTable", "RateResolver", "distinct_currencies"]
