"""Pydantic schemas for storage retention cleanup responses."""

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel

from retention_api.core.datetime_utils import UTCDatetime
from retention_api.retention.models import BucketResult, CleanupReport


class _CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class BucketReport(_CamelModel):
    """Per-bucket tally."""

    total: int
    expired: int
    deleted: int
    errors: int
    deleted_bytes: int = 0
    listing_failed: bool = False
    skipped: bool = False
    incomplete: bool = False
    error_messages: list[str] = []

    @classmethod
    def from_result(cls, result: BucketResult) -> "BucketReport":
        return cls(
            total=result.total_seen,
            expired=result.expired_count,
            deleted=result.deleted_count,
            errors=result.error_count,
            deleted_bytes=result.deleted_bytes,
            listing_failed=result.listing_failed,
            skipped=result.skipped,
            incomplete=result.incomplete,
            error_messages=list(result.errors),
        )


class CleanupTotalsReport(_CamelModel):
    total_files: int
    total_expired: int
    total_deleted: int
    total_errors: int


class CleanupReportResponse(_CamelModel):
    """Response for a completed (or dry-run) cleanup run."""

    success: bool
    message: str
    start_time: UTCDatetime
    end_time: UTCDatetime
    duration_ms: int
    max_age_minutes: float
    dry_run: bool
    incomplete: bool
    deleted_bytes: int
    totals: CleanupTotalsReport
    buckets: dict[str, BucketReport]

    @classmethod
    def from_report(cls, report: CleanupReport) -> "CleanupReportResponse":
        totals = report.totals
        if report.succeeded:
            message = (
                f"Storage cleanup completed successfully. {totals.total_deleted} files older "
                f"than {report.max_age_minutes:g} minutes removed."
            )
        else:
            failed = report.failed_listings
            unlisted = f" and {len(failed)} unlisted buckets ({', '.join(failed)})" if failed else ""
            message = (
                f"Storage cleanup completed with {totals.total_errors} errors{unlisted}"
                f"{' before reaching its deadline' if report.incomplete else ''}. "
                f"{totals.total_deleted} files older than {report.max_age_minutes:g} "
                f"minutes removed."
            )
        if report.dry_run:
            message = f"[DRY-RUN] {message}"

        return cls(
            success=report.succeeded,
            message=message,
            start_time=report.start_time,
            end_time=report.end_time,
            duration_ms=report.duration_ms,
            max_age_minutes=report.max_age_minutes,
            dry_run=report.dry_run,
            incomplete=report.incomplete,
            deleted_bytes=report.deleted_bytes,
            totals=CleanupTotalsReport(
                total_files=totals.total_seen,
                total_expired=totals.total_expired,
                total_deleted=totals.total_deleted,
                total_errors=totals.total_errors,
            ),
            buckets={
                name: BucketReport.from_result(result)
                for name, result in report.per_bucket.items()
            },
        )


class CleanupTaskResponse(BaseModel):
    """Response when cleanup is queued as async task."""

    task_id: str
    status: str = "queued"


def serialize_report(report: CleanupReport) -> dict:
    """JSON-ready dict of a report, with camelCase field names."""
    return CleanupReportResponse.from_report(report).model_dump(mode="json", by_alias=True)
