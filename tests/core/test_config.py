"""Unit tests for settings helpers."""

from retention_api.core.config import Settings
from retention_api.core.constants import CLEANUP_INTERVAL_PRODUCTION, DEFAULT_CLEANUP_BUCKETS


class TestCleanupSettings:
    def test_buckets_from_json_list(self):
        settings = Settings(STORAGE_CLEANUP_BUCKETS='["a", " b ", ""]')
        assert settings.cleanup_buckets == ["a", "b"]

    def test_buckets_from_comma_separated_string(self):
        settings = Settings(STORAGE_CLEANUP_BUCKETS="a, b,,c")
        assert settings.cleanup_buckets == ["a", "b", "c"]

    def test_invalid_json_falls_back_to_defaults(self):
        settings = Settings(STORAGE_CLEANUP_BUCKETS="[broken")
        assert settings.cleanup_buckets == list(DEFAULT_CLEANUP_BUCKETS)

    def test_explicit_max_age_overrides_preset(self):
        settings = Settings(STORAGE_CLEANUP_PRESET="TEST", STORAGE_CLEANUP_MAX_AGE_MINUTES=42)
        assert settings.cleanup_max_age_minutes == 42

    def test_unknown_preset_falls_back_to_production(self):
        settings = Settings(STORAGE_CLEANUP_PRESET="weekly")
        assert settings.cleanup_max_age_minutes == CLEANUP_INTERVAL_PRODUCTION
