"""Resolution of trigger parameters into a RetentionConfig.

Named retention presets live here, at the call sites shared by the HTTP
trigger, the Celery task and the command line script. The cleanup engine
itself only ever sees the resolved number of minutes.
"""

from collections.abc import Iterable

from retention_api.core.config import settings
from retention_api.core.constants import CLEANUP_INTERVALS
from retention_api.core.exceptions import ValidationError
from retention_api.retention.models import RetentionConfig


def resolve_max_age_minutes(
    preset: str | None = None, max_age_minutes: float | None = None
) -> float:
    """An explicit value wins over a preset; with neither, settings decide."""
    if max_age_minutes is not None:
        return max_age_minutes
    if preset is not None:
        try:
            return CLEANUP_INTERVALS[preset.upper()]
        except KeyError:
            raise ValidationError(f"Unknown retention preset: {preset}", field="preset") from None
    return settings.cleanup_max_age_minutes


def build_retention_config(
    preset: str | None = None,
    max_age_minutes: float | None = None,
    bucket_names: Iterable[str] | None = None,
    dry_run: bool | None = None,
    deadline_seconds: float | None = None,
) -> RetentionConfig:
    if bucket_names is None:
        bucket_names = settings.cleanup_buckets
    if dry_run is None:
        dry_run = settings.STORAGE_CLEANUP_DRY_RUN
    if deadline_seconds is None:
        deadline_seconds = settings.STORAGE_CLEANUP_DEADLINE_SECONDS

    return RetentionConfig(
        max_age_minutes=resolve_max_age_minutes(preset, max_age_minutes),
        bucket_names=tuple(bucket_names),
        dry_run=dry_run,
        deadline_seconds=deadline_seconds,
    )
