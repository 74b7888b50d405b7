from datetime import date

import pytest

from ffiii_rate_updater.utils.dates import feed_date, parse_date, submission_date


def test_parse_date_accepts_iso_strings_and_dates() -> None:
    assert parse_date("2025-01-31") == date(2025, 1, 31)
    assert parse_date(date(2025, 1, 31)) == date(2025, 1, 31)


@pytest.mark.parametrize("value", [None, "", "latest", "Latest"])
def test_feed_date_defaults_to_latest(value: str | None) -> None:
    assert feed_date(value) == "latest"


def test_feed_date_normalises_explicit_dates() -> None:
    assert feed_date(date(2025, 2, 3)) == "2025-02-03"
    assert feed_date("2025-02-03") == "2025-02-03"
    with pytest.raises(ValueError):
        feed_date("03/02/2025")


def test_submission_date_defaults_to_today() -> None:
    assert submission_date(None, today=date(2025, 6, 30)) == "2025-06-30"
    assert submission_date("", today=date(2025, 6, 30)) == "2025-06-30"
    assert submission_date("2025-01-01", today=date(2025, 6, 30)) == "2025-01-01"
    assert submission_date(date(2024, 12, 31)) == "2024-12-31"
