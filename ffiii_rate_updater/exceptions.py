"""Error taxonomy for the rate update pipeline.

``ConfigError``, ``FetchError`` and ``ParseError`` are fatal for a run and are
turned into a non-zero exit status by the CLI. ``NotFoundError`` and
``SubmitError`` only affect one unit of work and are handled by the pipeline.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:  # pragma: no cover - imported only for type checking
    from ffiii_rate_updater.ingestion.models import Currency


class RateUpdaterError(Exception):
    """Base class for every error raised by ffiii_rate_updater."""


class ConfigError(RateUpdaterError):
    """Missing or invalid configuration; raised before any network call."""


class FetchError(RateUpdaterError):
    """The rate feed could not be reached or answered with a non-2xx status."""

    def __init__(
        self,
        message: str,
        *,
        status: int | None = None,
        cause: BaseException | None = None,
        url: str | None = None,
    ) -> None:
        super().__init__(message)
        self.status = status
        self.cause = cause
        self.url = url


class ParseError(RateUpdaterError):
    """The rate feed answered with a body that does not match the expected shape."""

    def __init__(self, message: str, *, field: str | None = None) -> None:
        super().__init__(message)
        self.field = field


class NotFoundError(RateUpdaterError):
    """No rate for the requested pair exists in the resolved rate table."""

    def __init__(self, from_currency: "Currency", to_currency: "Currency") -> None:
        super().__init__(f"rate not found for pair {from_currency}/{to_currency}")
        self.from_currency = from_currency
        self.to_currency = to_currency


class SubmitError(RateUpdaterError):
    """Firefly III rejected a submission or could not be reached."""

    def __init__(
        self,
        message: str,
        *,
        status: int | None = None,
        cause: BaseException | None = None,
        endpoint: str | None = None,
    ) -> None:
        super().__init__(message)
        self.status = status
        self.cause = cause
        self.endpoint = endpoint


__all__ = [
    "RateUpdaterError",
    "ConfigError",
    "FetchError",
    "ParseError",
    "NotFoundError",
    "SubmitError",
]
