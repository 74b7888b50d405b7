"""Resolve rates for every configured currency and push them to Firefly III."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Mapping, Protocol

from ffiii_rate_updater.config import SubmissionMode, UpdaterConfig
from ffiii_rate_updater.exceptions import NotFoundError, RateUpdaterError, SubmitError
from ffiii_rate_updater.firefly.client import FireflyClient
from ffiii_rate_updater.ingestion.currency_api import CurrencyApiClient
from ffiii_rate_updater.ingestion.models import Currency
from ffiii_rate_updater.ingestion.resolver import RateResolver, RateTable
from ffiii_rate_updater.utils.logger import get_logger

LOGGER = get_logger(__name__)


class RunState(str, Enum):
    IDLE = "idle"
    RATES_RESOLVED = "rates_resolved"
    SUBMITTING = "submitting"
    DONE = "done"


class _Submitter(Protocol):
    def send_single(
        self, rate: float, from_currency: Currency, to_currency: Currency, date: str | None = None
    ) -> None: ...  # pragma: no cover - protocol definition

    def send_batch(
        self, from_currency: Currency, rates: Mapping[Currency, float], date: str | None = None
    ) -> None: ...  # pragma: no cover - protocol definition


@dataclass(slots=True)
class UnitFailure:
    """One pair or base currency that could not be submitted."""

    unit: str
    stage: str
    error: RateUpdaterError


@dataclass(slots=True)
class RunResult:
    """Outcome of a single pipeline run."""

    mode: SubmissionMode
    state: RunState = RunState.IDLE
    submitted: int = 0
    skipped: int = 0
    failures: list[UnitFailure] = field(default_factory=list)

    @property
    def failed(self) -> int:
        return len(self.failures)

    @property
    def ok(self) -> bool:
        return self.state is RunState.DONE and not self.failures


class RateUpdatePipeline:
    """Orchestrate the resolver and the Firefly client for one run.

    Batch mode sends one request per base currency and is the default. Pairs
    mode sends every ordered permutation separately. In both modes a failing
    unit is logged and recorded, then the run moves on to the next unit.
    """

    def __init__(
        self,
        config: UpdaterConfig,
        *,
        resolver: RateResolver | None = None,
        client: _Submitter | None = None,
    ) -> None:
        self.config = config
        self.resolver = resolver
        self.client = client
        self.state = RunState.IDLE

    def run(self) -> RunResult:
        self.config.validate()
        result = RunResult(mode=self.config.mode)
        currencies = self.config.distinct_currencies()

        feed: CurrencyApiClient | None = None
        firefly: FireflyClient | None = None
        try:
            resolver = self.resolver
            if resolver is None:
                feed = CurrencyApiClient(
                    url_templates=self.config.feed_urls, timeout=self.config.timeout
                )
                resolver = RateResolver(feed)
            table = resolver.build(currencies, self.config.date)
            self._transition(RunState.RATES_RESOLVED, result)

            client = self.client
            if client is None:
                firefly = FireflyClient(self.config.api_config())
                client = firefly
            self._transition(RunState.SUBMITTING, result)
            if self.config.mode is SubmissionMode.PAIRS:
                self._submit_pairs(client, table, currencies, result)
            else:
                self._submit_batches(client, table, currencies, result)
            self._transition(RunState.DONE, result)
        finally:
            if feed is not None:
                feed.close()
            if firefly is not None:
                firefly.close()

        LOGGER.info(
            "Run finished in %s mode: %s submitted, %s failed, %s skipped",
            result.mode.value,
            result.submitted,
            result.failed,
            result.skipped,
        )
        return result

    def _transition(self, state: RunState, result: RunResult) -> None:
        LOGGER.debug("Pipeline state %s -> %s", self.state.value, state.value)
        self.state = state
        result.state = state

    @staticmethod
    def _record(result: RunResult, unit: str, stage: str, error: RateUpdaterError) -> None:
        LOGGER.warning("Error during %s for %s: %s", stage, unit, error)
        result.failures.append(UnitFailure(unit=unit, stage=stage, error=error))

    def _submit_pairs(
        self,
        client: _Submitter,
        table: RateTable,
        currencies: list[Currency],
        result: RunResult,
    ) -> None:
        for source in currencies:
            for target in currencies:
                if source == target:
                    continue
                unit = f"{source}/{target}"
                try:
                    rate = table.lookup(source, target)
                except NotFoundError as exc:
                    self._record(result, unit, "lookup", exc)
                    continue
                try:
                    client.send_single(rate.value, source, target, rate.date)
                except SubmitError as exc:
                    self._record(result, unit, "submit", exc)
                    continue
                result.submitted += 1
                LOGGER.info("Sent exchange rate for %s: %.6f on %s", unit, rate.value, rate.date)

    def _submit_batches(
        self,
        client: _Submitter,
        table: RateTable,
        currencies: list[Currency],
        result: RunResult,
    ) -> None:
        for base in currencies:
            targets = [currency for currency in currencies if currency != base]
            found = table.rates_from(base, targets)
            for target in targets:
                if target not in found:
                    self._record(result, f"{base}/{target}", "lookup", NotFoundError(base, target))
            if not found:
                LOGGER.warning("No rates resolved for base %s; skipping batch", base)
                result.skipped += 1
                continue

            rate_date = next(iter(found.values())).date
            values = {target: rate.value for target, rate in found.items()}
            try:
                client.send_batch(base, values, rate_date)
            except SubmitError as exc:
                # Remaining bases are still attempted.
                self._record(result, f"base {base}", "submit", exc)
                continue
            result.submitted += 1
            LOGGER.info(
                "Sent %s exchange rates for base %s on %s",
                len(values),
                base,
                rate_date,
            )


__all__ = ["RateUpdatePipeline", "RunResult", "RunState", "UnitFailure", "SubmissionMode"]
