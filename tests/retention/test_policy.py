"""Unit tests for the expiration policy."""

from datetime import UTC, datetime, timedelta

import pytest

from retention_api.core.exceptions import ValidationError
from retention_api.retention.services.policy import is_expired, parse_timestamp


class TestIsExpired:
    """Tests for is_expired function."""

    def test_age_equal_to_threshold_is_not_expired(self, fixed_now):
        created = fixed_now - timedelta(minutes=5)
        assert is_expired(created, 5, fixed_now) is False

    def test_one_minute_past_threshold_is_expired(self, fixed_now):
        created = fixed_now - timedelta(minutes=6)
        assert is_expired(created, 5, fixed_now) is True

    def test_just_past_threshold_is_expired(self, fixed_now):
        created = fixed_now - timedelta(minutes=5, seconds=1)
        assert is_expired(created, 5, fixed_now) is True

    def test_recent_object_is_not_expired(self, fixed_now):
        created = fixed_now - timedelta(minutes=2)
        assert is_expired(created, 5, fixed_now) is False

    def test_production_window(self, fixed_now):
        created = fixed_now - timedelta(days=121)
        assert is_expired(created, 175200, fixed_now) is True
        assert is_expired(fixed_now - timedelta(days=119), 175200, fixed_now) is False

    def test_accepts_iso_string(self, fixed_now):
        created = (fixed_now - timedelta(minutes=10)).isoformat()
        assert is_expired(created, 5, fixed_now) is True

    def test_accepts_zulu_suffix(self):
        now = datetime(2025, 6, 1, 12, 0, tzinfo=UTC)
        assert is_expired("2025-06-01T11:50:00Z", 5, now) is True

    def test_naive_datetimes_are_treated_as_utc(self):
        now = datetime(2025, 6, 1, 12, 0)
        created = datetime(2025, 6, 1, 11, 0)
        assert is_expired(created, 30, now) is True

    def test_defaults_to_current_time(self):
        created = datetime.now(UTC) - timedelta(hours=1)
        assert is_expired(created, 30) is True

    def test_future_timestamp_is_not_expired(self, fixed_now):
        created = fixed_now + timedelta(minutes=10)
        assert is_expired(created, 5, fixed_now) is False

    @pytest.mark.parametrize("max_age", [0, -1, float("nan"), float("inf"), True, "5"])
    def test_rejects_invalid_max_age(self, fixed_now, max_age):
        with pytest.raises(ValidationError):
            is_expired(fixed_now, max_age, fixed_now)

    def test_rejects_unparseable_timestamp(self, fixed_now):
        with pytest.raises(ValidationError, match="Unparseable"):
            is_expired("not-a-date", 5, fixed_now)

    def test_rejects_missing_timestamp(self, fixed_now):
        with pytest.raises(ValidationError, match="no creation timestamp"):
            is_expired(None, 5, fixed_now)


class TestParseTimestamp:
    """Tests for parse_timestamp function."""

    def test_keeps_aware_datetime(self):
        value = datetime(2025, 1, 1, tzinfo=UTC)
        assert parse_timestamp(value) == value

    def test_rejects_unsupported_type(self):
        with pytest.raises(ValidationError):
            parse_timestamp(12345)  # type: ignore[arg-type]
