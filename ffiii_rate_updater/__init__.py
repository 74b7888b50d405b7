"""Public interface for the ffiii_rate_updater package."""

from __future__ import annotations

from importlib import metadata as importlib_metadata

from ffiii_rate_updater.config import SubmissionMode, UpdaterConfig, load_config
from ffiii_rate_updater.exceptions import (
    ConfigError,
    FetchError,
    NotFoundError,
    ParseError,
    RateUpdaterError,
    SubmitError,
)
from ffiii_rate_updater.firefly.client import ApiConfig, FireflyClient, format_rate
from ffiii_rate_updater.ingestion.currency_api import CurrencyApiClient
from ffiii_rate_updater.ingestion.models import Currency, FeedResponse, Pair, Rate
from ffiii_rate_updater.ingestion.resolver import RateResolver, RateTable
from ffiii_rate_updater.pipeline import RateUpdatePipeline, RunResult, RunState

__all__ = [
    "__version__",
    "ApiConfig",
    "ConfigError",
    "Currency",
    "CurrencyApiClient",
    "FeedResponse",
    "FetchError",
    "FireflyClient",
    "NotFoundError",
    "Pair",
    "ParseError",
    "Rate",
    "RateResolver",
    "RateTable",
    "RateUpdatePipeline",
    "RateUpdaterError",
    "RunResult",
    "RunState",
    "SubmissionMode",
    "SubmitError",
    "UpdaterConfig",
    "format_rate",
    "load_config",
]

try:
    __version__ = importlib_metadata.version("ffiii-rate-updater")
except importlib_metadata.PackageNotFoundError:  # pragma: no cover - fallback for local runs
    __version__ = "0.1.0"
