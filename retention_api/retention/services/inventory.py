"""Listing of a bucket's objects, oldest first."""

import logging
from datetime import UTC, datetime

from retention_api.core.config import settings
from retention_api.core.exceptions import ListingError, ValidationError
from retention_api.core.storage import StorageBackend, StorageObject, get_storage
from retention_api.retention.services.policy import parse_timestamp

logger = logging.getLogger(__name__)

_OLDEST = datetime.min.replace(tzinfo=UTC)


def _age_sort_key(obj: StorageObject) -> tuple[bool, datetime]:
    """Ascending by creation time; objects without a usable timestamp go last."""
    try:
        return False, parse_timestamp(obj.created_at)
    except ValidationError:
        return True, _OLDEST


class BucketInventory:
    """Lists all objects of one bucket with their creation timestamps.

    Every backend page is collected before sorting, so the size cap always
    keeps the oldest (most overdue) objects.
    """

    def __init__(
        self,
        storage: StorageBackend | None = None,
        max_objects: int | None = None,
    ) -> None:
        self._storage = storage or get_storage()
        if max_objects is None:
            max_objects = settings.STORAGE_LIST_MAX_OBJECTS
        self._max_objects = max_objects if max_objects > 0 else None

    def list(self, bucket_name: str) -> list[StorageObject]:
        """Return the bucket's objects ordered oldest-first.

        Raises:
            ListingError: If the storage service failed to enumerate the bucket.
        """
        try:
            objects = self._storage.list_objects(bucket_name)
        except Exception as e:
            logger.error(f"Failed to list objects in bucket {bucket_name}: {e}")
            raise ListingError(bucket_name, str(e)) from e

        objects = sorted(objects, key=_age_sort_key)

        if self._max_objects is not None and len(objects) > self._max_objects:
            logger.warning(
                f"Bucket {bucket_name} holds {len(objects)} objects, "
                f"only the oldest {self._max_objects} are considered this run"
            )
            objects = objects[: self._max_objects]

        logger.info(f"Found {len(objects)} files in bucket {bucket_name}")
        return objects
