"""Tests for the Firefly III submission client."""

from __future__ import annotations

from datetime import date
from typing import Any

import pytest
import requests

from ffiii_rate_updater.exceptions import SubmitError
from ffiii_rate_updater.firefly import client as client_module
from ffiii_rate_updater.firefly.client import ApiConfig, FireflyClient, format_rate
from ffiii_rate_updater.ingestion.models import Currency


class _DummyResponse:
    def __init__(self, status_code: int) -> None:
        self.status_code = status_code


class _DummySession:
    def __init__(self, *responses: Any) -> None:
        self.headers: dict[str, str] = {}
        self.responses = list(responses)
        self.calls: list[dict[str, Any]] = []
        self.closed = False

    def post(self, url: str, json: Any = None, timeout: float | None = None) -> _DummyResponse:
        self.calls.append({"url": url, "json": json, "timeout": timeout})
        item = self.responses.pop(0)
        if isinstance(item, Exception):
            raise item
        return item

    def close(self) -> None:
        self.closed = True


def _client(*responses: Any, **kwargs: Any) -> tuple[FireflyClient, _DummySession]:
    session = _DummySession(*responses)
    config = ApiConfig(api_url="https://firefly.example.com/api/v1/", api_key="secret", timeout=3)
    return FireflyClient(config, session=session, **kwargs), session


def test_format_rate_rounds_instead_of_truncating() -> None:
    assert format_rate(0.123456789, 6) == "0.123457"
    assert format_rate(0.123456789) == "0.12345679"
    assert format_rate(1) == "1.00000000"


@pytest.mark.parametrize(
    "value, expected_prefix",
    [
        (6.1e-11, "0.000000000061"),
        (2.5e-9, "0.0000000025"),
        (0.000012345678912, "0.000012345679"),
    ],
)
def test_format_rate_keeps_significant_digits_of_tiny_rates(
    value: float, expected_prefix: str
) -> None:
    rendered = format_rate(value)

    assert rendered.startswith(expected_prefix)
    assert float(rendered) != 0.0
    assert float(rendered) == pytest.approx(value, rel=1e-7)


def test_send_batch_keeps_tiny_rates_non_zero() -> None:
    client, session = _client(_DummyResponse(200))

    client.send_batch(Currency("usd"), {Currency("btc"): 6.1e-11}, "2025-01-01")

    sent = session.calls[0]["json"]["rates"]["BTC"]
    assert sent.startswith("0.000000000061")


def test_client_sets_auth_and_content_headers() -> None:
    client, session = _client()

    assert client.session is session
    assert session.headers["Authorization"] == "Bearer secret"
    assert session.headers["Content-Type"] == "application/json"


def test_send_single_posts_pair_payload() -> None:
    client, session = _client(_DummyResponse(201))

    client.send_single(0.123456789, Currency("usd"), "eur", "2025-01-01")

    assert session.calls == [
        {
            "url": "https://firefly.example.com/api/v1/exchange-rates",
            "json": {"date": "2025-01-01", "from": "USD", "to": "EUR", "rate": "0.12345679"},
            "timeout": 3,
        }
    ]


def test_send_single_defaults_to_today(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr(
        client_module, "submission_date", lambda value: value or date(2025, 6, 30).isoformat()
    )
    client, session = _client(_DummyResponse(200))

    client.send_single(1.5, "gbp", "usd", "")

    assert session.calls[0]["json"]["date"] == "2025-06-30"


def test_send_batch_posts_by_date() -> None:
    client, session = _client(_DummyResponse(200), precision=6)

    client.send_batch("usd", {Currency("eur"): 0.9, "gbp": 0.123456789}, "2025-01-01")

    assert session.calls[0]["url"] == (
        "https://firefly.example.com/api/v1/exchange-rates/by-date/2025-01-01"
    )
    assert session.calls[0]["json"] == {
        "from": "USD",
        "rates": {"EUR": "0.900000", "GBP": "0.123457"},
    }


@pytest.mark.parametrize("status", [204, 400, 401, 422, 500])
def test_non_success_status_raises_submit_error(status: int) -> None:
    client, _ = _client(_DummyResponse(status))

    with pytest.raises(SubmitError) as excinfo:
        client.send_single(0.9, "usd", "eur", "2025-01-01")

    assert excinfo.value.status == status
    assert excinfo.value.endpoint.endswith("/exchange-rates")


def test_transport_error_raises_submit_error() -> None:
    boom = requests.Timeout("read timed out")
    client, _ = _client(boom)

    with pytest.raises(SubmitError) as excinfo:
        client.send_batch("usd", {"eur": 0.9}, "2025-01-01")

    assert excinfo.value.cause is boom
    assert excinfo.value.status is None


def test_client_leaves_injected_session_open() -> None:
    client, session = _client()
    with client:
        pass

    assert session.closed is False
