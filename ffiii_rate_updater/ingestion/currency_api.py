"""requests-based client for the fawazahmed0 currency-api exchange rate feed."""

from __future__ import annotations

import math
from numbers import Real
from typing import Any, Optional, Sequence

import requests

from ffiii_rate_updater.exceptions import FetchError, ParseError
from ffiii_rate_updater.ingestion.models import Currency, FeedResponse
from ffiii_rate_updater.utils.dates import feed_date
from ffiii_rate_updater.utils.logger import get_logger

LOGGER = get_logger(__name__)

CURRENCY_API_URL_TEMPLATE = (
    "https://cdn.jsdelivr.net/npm/@fawazahmed0/currency-api@{date}/v1/{endpoint}/{currency}.min.json"
)
FALLBACK_URL_TEMPLATE = "https://{date}.currency-api.pages.dev/v1/{endpoint}/{currency}.min.json"
CURRENCIES_ENDPOINT = "currencies"
DEFAULT_FEED_TIMEOUT = 10.0


class CurrencyApiClient:
    """Fetch every published rate for one base currency on a given date.

    ``url_templates`` are tried in order; a transport failure or non-2xx answer
    moves on to the next template. A body that cannot be decoded is reported
    straight away since a mirror would serve the same document.
    """

    def __init__(
        self,
        *,
        url_templates: Optional[Sequence[str]] = None,
        timeout: float = DEFAULT_FEED_TIMEOUT,
        session: Optional[requests.Session] = None,
        endpoint: str = CURRENCIES_ENDPOINT,
    ) -> None:
        self.url_templates = (
            [CURRENCY_API_URL_TEMPLATE] if url_templates is None else list(url_templates)
        )
        if not self.url_templates:
            raise ValueError("url_templates must contain at least one template")
        self.timeout = timeout
        self.endpoint = endpoint
        self._owns_session = session is None
        self.session = session or requests.Session()
        self.session.headers.setdefault("User-Agent", "ffiii-rate-updater/1.0")

    def build_url(self, template: str, base: Currency, date: str) -> str:
        return template.format(date=date, endpoint=self.endpoint, currency=base.lower)

    def fetch_rates(self, base: Currency | str, date: str | None = None) -> FeedResponse:
        """Download and decode the rates published for ``base`` on ``date``."""

        currency = Currency.normalize(base)
        requested = feed_date(date)
        LOGGER.info("Fetching rates for %s on %s", currency.lower, requested)

        last_error: FetchError | None = None
        for index, template in enumerate(self.url_templates):
            url = self.build_url(template, currency, requested)
            if index:
                LOGGER.warning("Retrying %s rates via fallback %s", currency, url)
            try:
                response = self.session.get(url, timeout=self.timeout)
            except requests.RequestException as exc:
                last_error = FetchError(
                    f"failed to fetch rates for {currency} from {url}: {exc}", cause=exc, url=url
                )
                LOGGER.debug("Request to %s failed: %s", url, exc)
                continue
            if not 200 <= response.status_code < 300:
                last_error = FetchError(
                    f"failed to fetch rates for {currency} from {url}: HTTP {response.status_code}",
                    status=response.status_code,
                    url=url,
                )
                LOGGER.debug("%s answered with HTTP %s", url, response.status_code)
                continue
            try:
                payload = response.json()
            except ValueError as exc:
                raise ParseError(f"response from {url} is not valid JSON: {exc}") from exc
            return parse_feed_payload(payload, currency)

        if last_error is None:
            raise FetchError(f"no feed URL templates configured for {currency}")
        raise last_error

    def close(self) -> None:
        if self._owns_session:
            self.session.close()

    def __enter__(self) -> "CurrencyApiClient":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()


def parse_feed_payload(payload: Any, base: Currency | str) -> FeedResponse:
    """Strictly decode a feed body of the form ``{"date": ..., "<base>": {...}}``."""

    currency = Currency.normalize(base)
    key = currency.lower
    if not isinstance(payload, dict):
        raise ParseError("API response is not a JSON object")
    if "date" not in payload:
        raise ParseError("missing 'date' field in API response", field="date")
    resolved_date = payload["date"]
    if not isinstance(resolved_date, str):
        raise ParseError("'date' field is not a string in API response", field="date")
    if key not in payload:
        raise ParseError(f"missing '{key}' field in API response", field=key)
    raw_rates = payload[key]
    if not isinstance(raw_rates, dict):
        raise ParseError(f"'{key}' field is not an object in API response", field=key)

    rates: dict[Currency, float] = {}
    for code, value in raw_rates.items():
        if isinstance(value, bool) or not isinstance(value, Real):
            raise ParseError(f"rate for '{code}' is not a number in API response", field=code)
        if not math.isfinite(value):
            raise ParseError(f"rate for '{code}' is not finite in API response", field=code)
        if value <= 0:
            raise ParseError(f"rate for '{code}' is not positive in API response", field=code)
        rates[Currency(code)] = float(value)
    return FeedResponse(date=resolved_date, base=currency, rates=rates)


__all__ = [
    "CurrencyApiClient",
    "parse_feed_payload",
    "CURRENCY_API_URL_TEMPLATE",
    "FALLBACK_URL_TEMPLATE",
    "CURRENCIES_ENDPOINT",
    "DEFAULT_FEED_TIMEOUT",
]
