"""Deletion of single expired objects."""

import logging

from botocore.exceptions import ClientError

from retention_api.core.exceptions import DeletionError
from retention_api.core.storage import StorageBackend, get_storage

logger = logging.getLogger(__name__)

_NOT_FOUND_CODES = {"NoSuchKey", "NotFound", "404"}


def _is_not_found(exc: Exception) -> bool:
    if isinstance(exc, FileNotFoundError):
        return True
    if isinstance(exc, ClientError):
        code = str(exc.response.get("Error", {}).get("Code", ""))
        return code in _NOT_FOUND_CODES
    return False


class DeletionExecutor:
    """Deletes one object from one bucket.

    Deletion is idempotent: a key that is already gone counts as deleted,
    since overlapping runs may race on the same expired object.
    """

    def __init__(self, storage: StorageBackend | None = None, dry_run: bool = False) -> None:
        self._storage = storage or get_storage()
        self._dry_run = dry_run

    @property
    def dry_run(self) -> bool:
        return self._dry_run

    def delete_or_raise(self, bucket_name: str, key: str) -> None:
        """Delete the object.

        Raises:
            DeletionError: For any storage failure other than "not found".
        """
        if self._dry_run:
            logger.info(f"[DRY-RUN] Would delete: {bucket_name}/{key}")
            return

        try:
            self._storage.delete(bucket_name, key)
        except Exception as e:
            if _is_not_found(e):
                logger.info(f"Already deleted: {bucket_name}/{key}")
                return
            raise DeletionError(bucket_name, key, str(e)) from e

        logger.info(f"Deleted: {bucket_name}/{key}")

    def delete(self, bucket_name: str, key: str) -> bool:
        """Delete the object and report success instead of raising."""
        try:
            self.delete_or_raise(bucket_name, key)
        except DeletionError as e:
            logger.error(e.message)
            return False
        return True
