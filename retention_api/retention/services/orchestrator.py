"""Runs the retention cleanup across every configured bucket."""

import logging
import uuid
from collections.abc import Callable, Iterable
from concurrent.futures import ThreadPoolExecutor
from datetime import datetime

import structlog

from retention_api.core.config import settings
from retention_api.core.datetime_utils import utcnow
from retention_api.core.storage import StorageBackend, get_storage
from retention_api.retention.models import (
    BucketResult,
    CleanupReport,
    CleanupTotals,
    RetentionConfig,
)
from retention_api.retention.services.cleaner import BucketCleaner
from retention_api.retention.services.deadline import Deadline
from retention_api.retention.services.deletion import DeletionExecutor
from retention_api.retention.services.inventory import BucketInventory

logger = logging.getLogger(__name__)


class CleanupOrchestrator:
    """Sweeps every bucket of a RetentionConfig and aggregates the results.

    Buckets are independent and never share keys, so they may be cleaned on
    up to ``bucket_concurrency`` threads. Totals are reduced from the
    returned BucketResults once every bucket has finished; no state is
    shared between bucket tasks.

    No bucket failure aborts the run: the report always covers every
    configured bucket. Whether a report with zero work done is an alarm is
    left to the caller.
    """

    def __init__(
        self,
        storage: StorageBackend | None = None,
        *,
        bucket_concurrency: int | None = None,
        delete_concurrency: int | None = None,
        list_max_objects: int | None = None,
        clock: Callable[[], datetime] = utcnow,
    ) -> None:
        self._storage = storage or get_storage()
        if bucket_concurrency is None:
            bucket_concurrency = settings.STORAGE_CLEANUP_BUCKET_CONCURRENCY
        self._bucket_concurrency = max(1, bucket_concurrency)
        self._delete_concurrency = delete_concurrency
        self._list_max_objects = list_max_objects
        self._clock = clock

    def run(self, config: RetentionConfig) -> CleanupReport:
        run_id = uuid.uuid4().hex[:12]
        with structlog.contextvars.bound_contextvars(cleanup_run=run_id):
            return self._run(config, run_id)

    def _run(self, config: RetentionConfig, run_id: str) -> CleanupReport:
        start_time = self._clock()
        deadline = Deadline(config.deadline_seconds)

        logger.info(
            f"Starting storage cleanup process (max age: {config.max_age_minutes} minutes, "
            f"buckets: {len(config.bucket_names)}, dry_run: {config.dry_run})"
        )

        cleaner = BucketCleaner(
            inventory=BucketInventory(self._storage, max_objects=self._list_max_objects),
            executor=DeletionExecutor(self._storage, dry_run=config.dry_run),
            delete_concurrency=self._delete_concurrency,
        )

        def clean_bucket(bucket_name: str) -> BucketResult:
            # Worker threads do not inherit the caller's context
            with structlog.contextvars.bound_contextvars(cleanup_run=run_id, bucket=bucket_name):
                return _clean_bucket(bucket_name)

        def _clean_bucket(bucket_name: str) -> BucketResult:
            if deadline.expired:
                logger.warning(f"Deadline reached, bucket {bucket_name} not started")
                return BucketResult.empty(bucket_name, skipped=True)
            try:
                return cleaner.clean(
                    bucket_name, config.max_age_minutes, now=start_time, deadline=deadline
                )
            except Exception as e:
                logger.exception(f"Unexpected failure while cleaning bucket {bucket_name}")
                return BucketResult.empty(
                    bucket_name,
                    listing_failed=True,
                    errors=(f"Unexpected failure in bucket {bucket_name}: {e}",),
                )

        results = self._map_buckets(clean_bucket, config.bucket_names)

        report = CleanupReport(
            start_time=start_time,
            end_time=self._clock(),
            max_age_minutes=config.max_age_minutes,
            per_bucket={result.bucket_name: result for result in results},
            totals=CleanupTotals.from_results(results),
            dry_run=config.dry_run,
            incomplete=any(result.incomplete for result in results),
        )

        logger.info(
            f"Storage cleanup completed in {report.duration_ms}ms: "
            f"totalFiles={report.totals.total_seen}, "
            f"totalExpired={report.totals.total_expired}, "
            f"totalDeleted={report.totals.total_deleted}, "
            f"totalErrors={report.totals.total_errors}, incomplete={report.incomplete}"
        )
        return report

    def _map_buckets(
        self, clean_bucket: Callable[[str], BucketResult], bucket_names: Iterable[str]
    ) -> list[BucketResult]:
        if self._bucket_concurrency == 1:
            return [clean_bucket(name) for name in bucket_names]

        with ThreadPoolExecutor(
            max_workers=self._bucket_concurrency, thread_name_prefix="retention-bucket"
        ) as pool:
            return list(pool.map(clean_bucket, bucket_names))


def run(
    max_age_minutes: float,
    bucket_names: Iterable[str],
    *,
    dry_run: bool = False,
    deadline_seconds: float | None = None,
    storage: StorageBackend | None = None,
) -> CleanupReport:
    """Validate the parameters and run one cleanup with the configured storage.

    Raises:
        ValidationError: If the retention window or the bucket list is invalid.
            Raised before any storage call is made.
    """
    config = RetentionConfig(
        max_age_minutes=max_age_minutes,
        bucket_names=bucket_names if isinstance(bucket_names, str) else tuple(bucket_names),
        dry_run=dry_run,
        deadline_seconds=deadline_seconds,
    )
    return CleanupOrchestrator(storage).run(config)
