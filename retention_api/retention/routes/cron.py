"""Scheduler-facing routes for storage retention cleanup."""

from typing import Literal

from fastapi import APIRouter, Depends, Query, Request, status
from fastapi.responses import JSONResponse

from retention_api.core.rate_limit import limiter
from retention_api.retention.dependencies import verify_cron_secret
from retention_api.retention.presets import build_retention_config
from retention_api.retention.schemas import (
    CleanupReportResponse,
    CleanupTaskResponse,
    serialize_report,
)
from retention_api.retention.services.orchestrator import CleanupOrchestrator
from retention_api.retention.services.run_lock import cleanup_run_lock
from retention_api.retention.tasks import cleanup_expired_files_task

router = APIRouter(
    prefix="/cron",
    tags=["cron-storage"],
    dependencies=[Depends(verify_cron_secret)],
)

Preset = Literal["test", "aggressive", "production"]


@router.api_route(
    "/cleanup-storage",
    methods=["GET", "POST"],
    response_model=CleanupReportResponse | CleanupTaskResponse,
    responses={207: {"model": CleanupReportResponse}},
)
@limiter.limit("6/minute")
def trigger_cleanup(
    request: Request,
    preset: Preset | None = Query(
        default=None,
        description="Named retention window. Defaults to STORAGE_CLEANUP_PRESET.",
    ),
    max_age_minutes: float | None = Query(
        default=None,
        gt=0,
        description="Explicit retention window in minutes; overrides the preset.",
    ),
    buckets: list[str] | None = Query(
        default=None,
        description="Buckets to sweep. Defaults to STORAGE_CLEANUP_BUCKETS.",
    ),
    dry_run: bool | None = Query(
        default=None,
        description="Only report what would be deleted. Defaults to STORAGE_CLEANUP_DRY_RUN.",
    ),
    async_mode: bool = Query(
        default=False,
        description="Queue the cleanup as a Celery task and return its id immediately.",
    ),
) -> JSONResponse:
    """Delete expired files from every configured bucket.

    Responds 200 when every expired file was removed, 207 when the run
    finished with per-file errors or stopped at its deadline.
    """
    config = build_retention_config(
        preset=preset,
        max_age_minutes=max_age_minutes,
        bucket_names=buckets,
        dry_run=dry_run,
    )

    if async_mode:
        task = cleanup_expired_files_task.delay(
            max_age_minutes=config.max_age_minutes,
            bucket_names=list(config.bucket_names),
            dry_run=config.dry_run,
        )
        return JSONResponse(
            status_code=status.HTTP_202_ACCEPTED,
            content=CleanupTaskResponse(task_id=task.id, status="queued").model_dump(),
        )

    with cleanup_run_lock():
        report = CleanupOrchestrator().run(config)

    status_code = status.HTTP_200_OK if report.succeeded else status.HTTP_207_MULTI_STATUS
    return JSONResponse(status_code=status_code, content=serialize_report(report))


@router.get("/cleanup-storage/preview", response_model=CleanupReportResponse)
@limiter.limit("10/minute")
def preview_cleanup(
    request: Request,
    preset: Preset | None = Query(default=None),
    max_age_minutes: float | None = Query(default=None, gt=0),
    buckets: list[str] | None = Query(default=None),
) -> JSONResponse:
    """Report which files would be deleted without touching storage."""
    config = build_retention_config(
        preset=preset,
        max_age_minutes=max_age_minutes,
        bucket_names=buckets,
        dry_run=True,
    )
    report = CleanupOrchestrator().run(config)
    return JSONResponse(status_code=status.HTTP_200_OK, content=serialize_report(report))
