"""Tests for calendar-day normalization."""

import logging
from datetime import date, datetime, timedelta, timezone

import pytest

from cosmosched.dates import (
    DateFrame,
    DateNormalizer,
    add_days,
    day_window,
    format_day,
    inclusive_days,
)

FALLBACK_DAY = date(2030, 1, 1)


@pytest.fixture
def normalizer() -> DateNormalizer:
    return DateNormalizer(DateFrame.UTC, today_override=FALLBACK_DAY)


class TestNormalize:
    """Test recognition of supported inputs."""

    def test_date_passthrough(self, normalizer: DateNormalizer) -> None:
        assert normalizer.normalize(date(2025, 7, 5)) == date(2025, 7, 5)

    def test_naive_datetime_truncated(self, normalizer: DateNormalizer) -> None:
        assert normalizer.normalize(datetime(2025, 7, 5, 23, 59)) == date(2025, 7, 5)

    def test_aware_datetime_converted_to_frame(self, normalizer: DateNormalizer) -> None:
        """A late evening west of UTC is already the next day in UTC."""
        moment = datetime(2025, 7, 5, 23, 30, tzinfo=timezone(timedelta(hours=-5)))
        assert normalizer.normalize(moment) == date(2025, 7, 6)

    @pytest.mark.parametrize("text", ["2025. 7. 5.", "2025.7.5", "2025. 07. 05"])
    def test_locale_dotted_form(self, normalizer: DateNormalizer, text: str) -> None:
        assert normalizer.normalize(text) == date(2025, 7, 5)

    def test_iso_date(self, normalizer: DateNormalizer) -> None:
        assert normalizer.normalize("2025-07-05") == date(2025, 7, 5)

    def test_iso_datetime_with_z(self, normalizer: DateNormalizer) -> None:
        assert normalizer.normalize("2025-07-05T10:00:00Z") == date(2025, 7, 5)

    def test_iso_datetime_with_offset(self, normalizer: DateNormalizer) -> None:
        assert normalizer.normalize("2025-07-05T23:30:00-05:00") == date(2025, 7, 6)

    @pytest.mark.parametrize(
        "text",
        ["2025/07/05", "20250705", "5 Jul 2025", "Jul 5, 2025", "July 5, 2025", "07/05/2025"],
    )
    def test_generic_formats(self, normalizer: DateNormalizer, text: str) -> None:
        assert normalizer.normalize(text) == date(2025, 7, 5)

    def test_surrounding_whitespace_ignored(self, normalizer: DateNormalizer) -> None:
        assert normalizer.normalize("  2025-07-05 ") == date(2025, 7, 5)


class TestFallback:
    """Unparseable input becomes today and is reported, never raised."""

    @pytest.mark.parametrize("value", ["not a date", "", "2025-13-45", None, 42, [2025, 7, 5]])
    def test_fallback_to_today(self, normalizer: DateNormalizer, value: object) -> None:
        parsed = normalizer.parse(value)
        assert parsed.day == FALLBACK_DAY
        assert parsed.is_fallback
        assert parsed.raw == value

    def test_fallback_logs_warning(
        self, normalizer: DateNormalizer, caplog: pytest.LogCaptureFixture
    ) -> None:
        with caplog.at_level(logging.WARNING, logger="cosmosched"):
            normalizer.normalize("next tuesday")
        assert "Unparseable date 'next tuesday'" in caplog.text

    def test_parsed_value_is_not_fallback(self, normalizer: DateNormalizer) -> None:
        assert not normalizer.parse("2025-07-05").is_fallback

    def test_fallback_without_override_uses_real_today(self) -> None:
        parsed = DateNormalizer(DateFrame.LOCAL).parse("garbage")
        assert parsed.is_fallback
        assert abs((parsed.day - date.today()).days) <= 1  # noqa: DTZ011


class TestHelpers:
    """Test day arithmetic helpers."""

    def test_add_days(self) -> None:
        assert add_days(date(2025, 7, 31), 1) == date(2025, 8, 1)
        assert add_days(date(2025, 7, 1), -1) == date(2025, 6, 30)

    def test_inclusive_days(self) -> None:
        assert inclusive_days(date(2025, 7, 1), date(2025, 7, 1)) == 1
        assert inclusive_days(date(2025, 7, 10), date(2025, 7, 13)) == 4

    def test_day_window(self) -> None:
        assert day_window(date(2025, 7, 30), 3) == [
            date(2025, 7, 30),
            date(2025, 7, 31),
            date(2025, 8, 1),
        ]
        assert day_window(date(2025, 7, 30), 0) == []
        assert day_window(date(2025, 7, 30), -2) == []

    def test_format_day(self) -> None:
        assert format_day(date(2025, 7, 5)) == "2025-07-05"
