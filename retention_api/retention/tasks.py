"""Celery tasks for storage retention cleanup."""

import logging
from typing import Any

from retention_api.core.celery_app import celery_app
from retention_api.core.exceptions import CleanupInProgressError
from retention_api.retention.presets import build_retention_config
from retention_api.retention.schemas import serialize_report
from retention_api.retention.services.orchestrator import CleanupOrchestrator
from retention_api.retention.services.run_lock import cleanup_run_lock

logger = logging.getLogger(__name__)


@celery_app.task(bind=True, max_retries=0)
def cleanup_expired_files_task(
    self: Any,
    preset: str | None = None,
    max_age_minutes: float | None = None,
    bucket_names: list[str] | None = None,
    dry_run: bool | None = None,
) -> dict[str, Any]:
    """Delete files older than the retention window from every configured bucket.

    This task:
    1. Resolves the retention window (explicit value, preset, or settings)
    2. Takes the advisory run lock, skipping if another run holds it
    3. Lists each bucket oldest-first and deletes expired files
    4. Returns the aggregated report

    Args:
        preset: Named retention preset (test, aggressive, production).
        max_age_minutes: Explicit retention window; overrides the preset.
        bucket_names: Buckets to sweep. Defaults to STORAGE_CLEANUP_BUCKETS.
        dry_run: If True, only log what would be deleted.
                Defaults to settings.STORAGE_CLEANUP_DRY_RUN.

    Returns:
        Dict with "status" and, for completed runs, the camelCase report.
    """
    config = build_retention_config(
        preset=preset,
        max_age_minutes=max_age_minutes,
        bucket_names=bucket_names,
        dry_run=dry_run,
    )

    try:
        with cleanup_run_lock():
            report = CleanupOrchestrator().run(config)
    except CleanupInProgressError as e:
        logger.warning(f"Skipping scheduled cleanup: {e.message}")
        return {"status": "skipped", "reason": e.message}

    return {"status": "completed", **serialize_report(report)}
