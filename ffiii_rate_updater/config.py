"""Run configuration assembled from defaults, a YAML file, the environment and CLI flags."""

from __future__ import annotations

import os
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Any, Iterable, Mapping

import yaml

from ffiii_rate_updater.exceptions import ConfigError
from ffiii_rate_updater.firefly.client import DEFAULT_TIMEOUT, ApiConfig
from ffiii_rate_updater.ingestion.currency_api import (
    CURRENCIES_ENDPOINT,
    CURRENCY_API_URL_TEMPLATE,
)
from ffiii_rate_updater.ingestion.models import Currency
from ffiii_rate_updater.ingestion.resolver import distinct_currencies
from ffiii_rate_updater.utils.dates import LATEST, feed_date
from ffiii_rate_updater.utils.logger import get_logger

LOGGER = get_logger(__name__)

ENV_PREFIX = "FFIII_RATE_UPDATER_"
CONFIG_FILENAME = "config.yaml"
PLACEHOLDER_API_KEY = "your_firefly_api_key_here"
PLACEHOLDER_API_URL = "https://your-firefly-iii-instance.com/api/v1"

# Flat setting name -> environment variable suffix.
_ENV_KEYS: dict[str, str] = {
    "api_key": "FIREFLY_API_KEY",
    "api_url": "FIREFLY_API_URL",
    "currencies": "CURRENCIES",
    "date": "DATE",
    "timeout": "TIMEOUT",
    "mode": "MODE",
    "feed_urls": "FEED_URLS",
}


class SubmissionMode(str, Enum):
    """How resolved rates are sent to Firefly III."""

    BATCH = "batch"
    PAIRS = "pairs"

    @classmethod
    def parse(cls, value: "str | SubmissionMode") -> "SubmissionMode":
        if isinstance(value, SubmissionMode):
            return value
        try:
            return cls(str(value).strip().lower())
        except ValueError:
            choices = ", ".join(mode.value for mode in cls)
            raise ConfigError(f"unsupported mode {value!r}; expected one of: {choices}") from None


@dataclass(frozen=True, slots=True)
class UpdaterConfig:
    """Everything one run needs, passed explicitly to each component."""

    api_key: str = ""
    api_url: str = ""
    currencies: tuple[str, ...] = ()
    date: str = LATEST
    timeout: float = DEFAULT_TIMEOUT
    mode: SubmissionMode = SubmissionMode.BATCH
    feed_urls: tuple[str, ...] = (CURRENCY_API_URL_TEMPLATE,)

    def distinct_currencies(self) -> list[Currency]:
        return distinct_currencies(self.currencies)

    def api_config(self) -> ApiConfig:
        return ApiConfig(api_url=self.api_url, api_key=self.api_key, timeout=self.timeout)

    def validate(self) -> None:
        """Raise :class:`ConfigError` unless the run can start."""

        if len(self.distinct_currencies()) < 2:
            raise ConfigError("please provide at least two currencies to fetch exchange rates")
        if not self.api_key or self.api_key == PLACEHOLDER_API_KEY:
            raise ConfigError("firefly API key is not set")
        if not self.api_url or self.api_url == PLACEHOLDER_API_URL:
            raise ConfigError("firefly API URL is not set")
        if self.timeout <= 0:
            raise ConfigError("timeout must be a positive number of seconds")
        if not self.feed_urls:
            raise ConfigError("at least one feed URL template is required")
        for template in self.feed_urls:
            try:
                template.format(date=LATEST, endpoint=CURRENCIES_ENDPOINT, currency="usd")
            except (KeyError, IndexError, ValueError) as exc:
                raise ConfigError(
                    f"invalid feed URL template {template!r}; only {{date}}, {{endpoint}} "
                    f"and {{currency}} placeholders are supported ({exc!r})"
                ) from exc
        try:
            feed_date(self.date)
        except ValueError:
            raise ConfigError(
                f"invalid date {self.date!r}; expected YYYY-MM-DD or 'latest'"
            ) from None

    def to_file_dict(self) -> dict[str, Any]:
        """Return the nested structure written by ``init-config``."""

        return {
            "firefly": {
                "api_key": self.api_key or PLACEHOLDER_API_KEY,
                "api_url": self.api_url or PLACEHOLDER_API_URL,
            },
            "currencies": list(self.currencies),
            "date": self.date,
            "timeout": self.timeout,
            "mode": self.mode.value,
            "feed_urls": list(self.feed_urls),
        }


def default_config_paths() -> list[Path]:
    """Locations searched when no ``--config`` is given, in priority order."""

    return [
        Path.cwd() / CONFIG_FILENAME,
        Path.home() / ".config" / "ffiii-rate-updater" / CONFIG_FILENAME,
    ]


def find_config_file(config_path: str | Path | None = None) -> Path | None:
    if config_path is not None:
        path = Path(config_path)
        if not path.is_file():
            raise ConfigError(f"config file not found: {path}")
        return path
    for candidate in default_config_paths():
        if candidate.is_file():
            return candidate
    return None


def read_config_file(path: Path) -> dict[str, Any]:
    """Read a YAML config file and flatten the ``firefly`` section."""

    try:
        with path.open(encoding="utf-8") as handle:
            raw = yaml.safe_load(handle)
    except (OSError, yaml.YAMLError) as exc:
        raise ConfigError(f"unable to read config file {path}: {exc}") from exc
    if raw is None:
        raw = {}
    if not isinstance(raw, dict):
        raise ConfigError(f"config file {path} must contain a mapping")

    values: dict[str, Any] = {}
    firefly = raw.get("firefly", {})
    if not isinstance(firefly, dict):
        raise ConfigError(f"'firefly' section in {path} must be a mapping")
    for key in ("api_key", "api_url"):
        if key in firefly:
            values[key] = firefly[key]
        # Dotted keys mirror the CLI flag names (firefly.api_key).
        dotted = f"firefly.{key}"
        if dotted in raw:
            values[key] = raw[dotted]
    for key in ("currencies", "date", "timeout", "mode", "feed_urls"):
        if key in raw:
            values[key] = raw[key]
    return values


def read_environment(environ: Mapping[str, str] | None = None) -> dict[str, Any]:
    env = os.environ if environ is None else environ
    values: dict[str, Any] = {}
    for key, suffix in _ENV_KEYS.items():
        value = env.get(ENV_PREFIX + suffix)
        if value:
            values[key] = value
    return values


def _split_list(value: Any, *, name: str) -> tuple[str, ...]:
    if isinstance(value, str):
        items: Iterable[Any] = value.split(",")
    elif isinstance(value, (list, tuple)):
        items = value
    else:
        raise ConfigError(f"'{name}' must be a list or a comma separated string")
    return tuple(str(item).strip() for item in items if str(item).strip())


def _coerce(values: Mapping[str, Any]) -> dict[str, Any]:
    coerced: dict[str, Any] = {}
    for key, value in values.items():
        if key in {"currencies", "feed_urls"}:
            coerced[key] = _split_list(value, name=key)
        elif key == "timeout":
            try:
                coerced[key] = float(value)
            except (TypeError, ValueError):
                raise ConfigError(f"timeout must be a number, got {value!r}") from None
        elif key == "mode":
            coerced[key] = SubmissionMode.parse(value)
        elif key in {"api_key", "api_url", "date"}:
            coerced[key] = str(value).strip()
    return coerced


def load_config(
    *,
    config_path: str | Path | None = None,
    overrides: Mapping[str, Any] | None = None,
    environ: Mapping[str, str] | None = None,
) -> UpdaterConfig:
    """Merge defaults < config file < environment < ``overrides`` (CLI flags)."""

    merged: dict[str, Any] = {}
    path = find_config_file(config_path)
    if path is not None:
        LOGGER.info("Using config file: %s", path)
        merged.update(_coerce(read_config_file(path)))
    merged.update(_coerce(read_environment(environ)))
    if overrides:
        merged.update(_coerce({k: v for k, v in overrides.items() if v is not None}))
    return UpdaterConfig(**merged)


def write_default_config(
    config: UpdaterConfig, path: str | Path = CONFIG_FILENAME, *, force: bool = False
) -> Path:
    """Write ``config`` as a YAML config file, refusing to clobber an existing one."""

    target = Path(path)
    if target.exists() and not force:
        raise ConfigError(f"config file already exists: {target}")
    target.parent.mkdir(parents=True, exist_ok=True)
    with target.open("w", encoding="utf-8") as handle:
        yaml.safe_dump(config.to_file_dict(), handle, sort_keys=False)
    LOGGER.info("Configuration file created at: %s", target)
    return target


__all__ = [
    "SubmissionMode",
    "UpdaterConfig",
    "load_config",
    "write_default_config",
    "default_config_paths",
    "find_config_file",
    "read_config_file",
    "read_environment",
    "ENV_PREFIX",
]
