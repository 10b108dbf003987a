"""Sweep of a single bucket: list, decide, delete, tally."""

import logging
from concurrent.futures import ThreadPoolExecutor
from datetime import datetime
from enum import Enum

from retention_api.core.config import settings
from retention_api.core.constants import ERROR_MESSAGE_MAX_LENGTH, MAX_ERRORS_PER_BUCKET
from retention_api.core.datetime_utils import utcnow
from retention_api.core.exceptions import DeletionError, ListingError, ValidationError
from retention_api.core.storage import StorageObject
from retention_api.retention.models import BucketResult, validate_max_age
from retention_api.retention.services.deadline import Deadline
from retention_api.retention.services.deletion import DeletionExecutor
from retention_api.retention.services.inventory import BucketInventory
from retention_api.retention.services.policy import is_expired

logger = logging.getLogger(__name__)


class _Outcome(Enum):
    DELETED = "deleted"
    FAILED = "failed"
    NOT_ATTEMPTED = "not_attempted"


def _truncate(message: str) -> str:
    if len(message) <= ERROR_MESSAGE_MAX_LENGTH:
        return message
    return message[: ERROR_MESSAGE_MAX_LENGTH - 3] + "..."


class BucketCleaner:
    """Composes inventory, expiration policy and deletion for one bucket.

    Non-expired objects are never touched. Deletions within the bucket run
    on up to ``delete_concurrency`` threads; with 1 they run in listing order.
    """

    def __init__(
        self,
        inventory: BucketInventory,
        executor: DeletionExecutor,
        delete_concurrency: int | None = None,
    ) -> None:
        self._inventory = inventory
        self._executor = executor
        if delete_concurrency is None:
            delete_concurrency = settings.STORAGE_CLEANUP_DELETE_CONCURRENCY
        self._delete_concurrency = max(1, delete_concurrency)

    def clean(
        self,
        bucket_name: str,
        max_age_minutes: float,
        now: datetime | None = None,
        deadline: Deadline | None = None,
    ) -> BucketResult:
        max_age = validate_max_age(max_age_minutes)
        if now is None:
            now = utcnow()

        logger.info(f"Starting cleanup for bucket: {bucket_name} (max age: {max_age} minutes)")

        try:
            objects = self._inventory.list(bucket_name)
        except ListingError as e:
            logger.error(f"Bucket {bucket_name} treated as empty for this run: {e.message}")
            return BucketResult.empty(
                bucket_name, listing_failed=True, errors=(_truncate(e.message),)
            )

        errors: list[str] = []
        invalid_count = 0
        expired: list[StorageObject] = []

        for obj in objects:
            try:
                if is_expired(obj.created_at, max_age, now):
                    expired.append(obj)
            except ValidationError as e:
                # Counted as expired and failed so the tally stays balanced
                invalid_count += 1
                errors.append(_truncate(f"{obj.key}: {e.message}"))
                logger.warning(f"Skipping {bucket_name}/{obj.key}: {e.message}")

        deleted_count = 0
        failed_count = 0
        deleted_bytes = 0
        not_attempted = 0

        for obj, outcome, message in self._delete_expired(bucket_name, expired, deadline):
            if outcome is _Outcome.DELETED:
                deleted_count += 1
                deleted_bytes += obj.size
            elif outcome is _Outcome.FAILED:
                failed_count += 1
                errors.append(_truncate(message or f"Failed to delete {obj.key}"))
            else:
                not_attempted += 1

        if not_attempted:
            logger.warning(
                f"Deadline reached in bucket {bucket_name}: "
                f"{not_attempted} expired files left for the next run"
            )

        result = BucketResult(
            bucket_name=bucket_name,
            total_seen=len(objects),
            expired_count=deleted_count + failed_count + invalid_count,
            deleted_count=deleted_count,
            error_count=failed_count + invalid_count,
            deleted_bytes=deleted_bytes,
            incomplete=not_attempted > 0,
            errors=tuple(errors[:MAX_ERRORS_PER_BUCKET]),
        )

        logger.info(
            f"Cleanup results for {bucket_name}: total={result.total_seen}, "
            f"expired={result.expired_count}, deleted={result.deleted_count}, "
            f"errors={result.error_count}"
        )
        return result

    def _attempt(
        self, bucket_name: str, obj: StorageObject, deadline: Deadline | None
    ) -> tuple[StorageObject, _Outcome, str | None]:
        if deadline is not None and deadline.expired:
            return obj, _Outcome.NOT_ATTEMPTED, None
        try:
            self._executor.delete_or_raise(bucket_name, obj.key)
        except DeletionError as e:
            logger.error(e.message)
            return obj, _Outcome.FAILED, e.message
        return obj, _Outcome.DELETED, None

    def _delete_expired(
        self, bucket_name: str, expired: list[StorageObject], deadline: Deadline | None
    ) -> list[tuple[StorageObject, _Outcome, str | None]]:
        if self._delete_concurrency == 1 or len(expired) <= 1:
            return [self._attempt(bucket_name, obj, deadline) for obj in expired]

        with ThreadPoolExecutor(
            max_workers=self._delete_concurrency, thread_name_prefix="retention-delete"
        ) as pool:
            futures = [pool.submit(self._attempt, bucket_name, obj, deadline) for obj in expired]
            return [future.result() for future in futures]
