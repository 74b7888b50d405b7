"""Submit exchange rates to the Firefly III REST API."""

from __future__ import annotations

import math
from dataclasses import dataclass
from datetime import date as date_type
from typing import Any, Mapping, Optional

import requests

from ffiii_rate_updater.exceptions import SubmitError
from ffiii_rate_updater.ingestion.models import Currency
from ffiii_rate_updater.utils.dates import submission_date
from ffiii_rate_updater.utils.logger import get_logger

LOGGER = get_logger(__name__)

EXCHANGE_RATES_PATH = "/exchange-rates"
EXCHANGE_RATES_BY_DATE_PATH = "/exchange-rates/by-date/{date}"
RATE_PRECISION = 8
DEFAULT_TIMEOUT = 10.0
SUCCESS_STATUSES = frozenset({200, 201})


def format_rate(value: float, precision: int = RATE_PRECISION) -> str:
    """Render ``value`` as a fixed-point string rounded to ``precision`` digits.

    Rates below 0.1 get extra decimals so that at least ``precision``
    significant digits survive. A tiny rate is never rendered as zero.
    """

    decimals = precision
    if value:
        exponent = math.floor(math.log10(abs(value)))
        decimals = max(precision, precision - 1 - exponent)
    return f"{value:.{decimals}f}"


@dataclass(frozen=True, slots=True)
class ApiConfig:
    """Destination credentials for one run."""

    api_url: str
    api_key: str
    timeout: float = DEFAULT_TIMEOUT

    def endpoint(self, path: str) -> str:
        return self.api_url.rstrip("/") + path


class FireflyClient:
    """Post single-pair or per-base batch exchange rates to Firefly III.

    Both calls treat HTTP 200 and 201 as success and raise
    :class:`SubmitError` for anything else, including transport failures.
    Firefly upserts on ``(date, from, to)`` so re-sending a rate is harmless.
    """

    def __init__(
        self,
        config: ApiConfig,
        *,
        session: Optional[requests.Session] = None,
        precision: int = RATE_PRECISION,
    ) -> None:
        self.config = config
        self.precision = precision
        self._owns_session = session is None
        self.session = session or requests.Session()
        self.session.headers.update(
            {
                "Authorization": f"Bearer {config.api_key}",
                "Accept": "application/vnd.api+json",
                "Content-Type": "application/json",
            }
        )

    def send_single(
        self,
        rate: float,
        from_currency: Currency | str,
        to_currency: Currency | str,
        date: str | date_type | None = None,
    ) -> None:
        """Store one ``from -> to`` rate."""

        payload = {
            "date": submission_date(date),
            "from": Currency.normalize(from_currency).upper,
            "to": Currency.normalize(to_currency).upper,
            "rate": format_rate(rate, self.precision),
        }
        self._post(self.config.endpoint(EXCHANGE_RATES_PATH), payload)

    def send_batch(
        self,
        from_currency: Currency | str,
        rates: Mapping[Currency | str, float],
        date: str | date_type | None = None,
    ) -> None:
        """Store every ``from -> target`` rate of one base currency for ``date``."""

        path = EXCHANGE_RATES_BY_DATE_PATH.format(date=submission_date(date))
        payload = {
            "from": Currency.normalize(from_currency).upper,
            "rates": {
                Currency.normalize(target).upper: format_rate(value, self.precision)
                for target, value in rates.items()
            },
        }
        self._post(self.config.endpoint(path), payload)

    def _post(self, endpoint: str, payload: dict[str, Any]) -> None:
        LOGGER.debug("POST %s %s", endpoint, payload)
        try:
            response = self.session.post(endpoint, json=payload, timeout=self.config.timeout)
        except requests.RequestException as exc:
            raise SubmitError(
                f"failed to send request to {endpoint}: {exc}", cause=exc, endpoint=endpoint
            ) from exc
        if response.status_code not in SUCCESS_STATUSES:
            raise SubmitError(
                f"failed to send exchange rate to {endpoint}: HTTP {response.status_code}",
                status=response.status_code,
                endpoint=endpoint,
            )

    def close(self) -> None:
        if self._owns_session:
            self.session.close()

    def __enter__(self) -> "FireflyClient":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()


__all__ = [
    "ApiConfig",
    "FireflyClient",
    "format_rate",
    "RATE_PRECISION",
    "DEFAULT_TIMEOUT",
    "EXCHANGE_RATES_PATH",
    "EXCHANGE_RATES_BY_DATE_PATH",
]
