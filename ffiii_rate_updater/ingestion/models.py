"""Data models shared across ingestion and submission modules."""

from __future__ import annotations

from dataclasses import dataclass, field


@dataclass(frozen=True, slots=True, eq=False)
class Currency:
    """A currency code compared case-insensitively.

    The code is stored verbatim; ``upper`` is the form Firefly expects and
    ``lower`` is the form the rate feed uses for keys and URLs. An empty code
    marks an absent currency and never equals a real one.
    """

    code: str

    @classmethod
    def normalize(cls, code: "str | Currency") -> "Currency":
        if isinstance(code, Currency):
            return code
        return cls(code)

    @property
    def upper(self) -> str:
        return self.code.upper()

    @property
    def lower(self) -> str:
        return self.code.lower()

    def is_empty(self) -> bool:
        return self.code == ""

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Currency):
            return NotImplemented
        return self.upper == other.upper

    def __hash__(self) -> int:
        return hash(self.upper)

    def __str__(self) -> str:
        return self.upper


@dataclass(frozen=True, slots=True)
class Pair:
    """Directional currency pair: one ``from_currency`` buys ``rate`` ``to_currency``."""

    from_currency: Currency
    to_currency: Currency

    def __str__(self) -> str:
        return f"{self.from_currency}/{self.to_currency}"


@dataclass(frozen=True, slots=True)
class Rate:
    """A single exchange rate as published by the feed for ``date``."""

    date: str
    pair: Pair
    value: float

    def __str__(self) -> str:
        return f"{self.pair}: {self.value:.6f} on {self.date}"


@dataclass(slots=True)
class FeedResponse:
    """Decoded body of one feed request for a base currency."""

    date: str
    base: Currency
    rates: dict[Currency, float] = field(default_factory=dict)

    def to_rates(self) -> list[Rate]:
        """Expand the response into one :class:`Rate` per target currency."""

        return [
            Rate(date=self.date, pair=Pair(self.base, target), value=value)
            for target, value in self.rates.items()
        ]


__all__ = ["Currency", "Pair", "Rate", "FeedResponse"]
