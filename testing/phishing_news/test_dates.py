"""Tests for digest date helpers."""

import unittest
from datetime import UTC, date, datetime, timedelta, timezone

from src.phishing_news.dates import parse_published_date, to_digest_date, utc_today


class TestToDigestDate(unittest.TestCase):
    """Tests for to_digest_date."""

    def test_string_passthrough(self) -> None:
        """Test a valid date string is returned unchanged."""
        self.assertEqual(to_digest_date("2025-01-21"), "2025-01-21")

    def test_date_object(self) -> None:
        """Test formatting a date."""
        self.assertEqual(to_digest_date(date(2025, 1, 1)), "2025-01-01")

    def test_aware_datetime_converted_to_utc(self) -> None:
        """Test that a local evening time maps to the next UTC day."""
        local = datetime(2025, 1, 21, 23, 30, tzinfo=timezone(timedelta(hours=-5)))

        self.assertEqual(to_digest_date(local), "2025-01-22")

    def test_naive_datetime_treated_as_utc(self) -> None:
        """Test naive datetimes are not shifted."""
        self.assertEqual(to_digest_date(datetime(2025, 1, 21, 23, 30)), "2025-01-21")

    def test_invalid_format_rejected(self) -> None:
        """Test that other formats raise ValueError."""
        with self.assertRaises(ValueError):
            to_digest_date("21-01-2025")

    def test_impossible_day_rejected(self) -> None:
        """Test that well-formed but impossible days raise ValueError."""
        with self.assertRaises(ValueError):
            to_digest_date("2025-02-30")


class TestUtcToday(unittest.TestCase):
    """Tests for utc_today."""

    def test_uses_utc_day(self) -> None:
        """Test that 'today' follows UTC, not the client's offset."""
        now = datetime(2025, 1, 22, 1, 0, tzinfo=timezone(timedelta(hours=3)))

        self.assertEqual(utc_today(now), "2025-01-21")

    def test_default_is_current_day(self) -> None:
        """Test the default reference time is now."""
        self.assertEqual(utc_today(), datetime.now(UTC).strftime("%Y-%m-%d"))


class TestParsePublishedDate(unittest.TestCase):
    """Tests for parse_published_date."""

    def test_with_and_without_fraction(self) -> None:
        """Test that both ISO forms parse to the same second."""
        plain = parse_published_date("2025-01-21T09:30:00Z")
        fractional = parse_published_date("2025-01-21T09:30:00.5Z")

        self.assertEqual(plain, datetime(2025, 1, 21, 9, 30, tzinfo=UTC))
        self.assertEqual(fractional.replace(microsecond=0), plain)

    def test_naive_timestamp_gets_utc(self) -> None:
        """Test that timestamps without an offset are treated as UTC."""
        parsed = parse_published_date("2025-01-21T09:30:00")

        self.assertEqual(parsed, datetime(2025, 1, 21, 9, 30, tzinfo=UTC))

    def test_garbage_returns_none(self) -> None:
        """Test that unparsable text returns None."""
        self.assertIsNone(parse_published_date("not a date"))

    def test_empty_returns_none(self) -> None:
        """Test that empty values return None."""
        self.assertIsNone(parse_published_date(""))
        self.assertIsNone(parse_published_date(None))


if __name__ == "__main__":
    unittest.main()
