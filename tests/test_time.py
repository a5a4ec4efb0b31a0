"""
Tests for utils.time module - UTC timestamp utilities.
"""

from datetime import UTC, datetime

from freezegun import freeze_time

from version_ledger.utils.time import utc_now, utc_timestamp


class TestUtcNow:
    def test_has_utc_timezone(self):
        result = utc_now()
        assert isinstance(result, datetime)
        assert result.tzinfo == UTC

    @freeze_time("2025-11-02 08:30:45")
    def test_frozen_time(self):
        assert utc_now() == datetime(2025, 11, 2, 8, 30, 45, tzinfo=UTC)


class TestUtcTimestamp:
    @freeze_time("2025-11-02 08:30:45.123456")
    def test_format_drops_microseconds(self):
        assert utc_timestamp() == "2025-11-02T08:30:45Z"

    def test_ends_with_z(self):
        assert utc_timestamp().endswith("Z")
