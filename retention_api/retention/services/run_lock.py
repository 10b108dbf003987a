"""Best-effort advisory lock preventing overlapping cleanup runs.

Deletion is idempotent, so the lock only avoids duplicate listing work.
When Redis is unreachable the run proceeds unlocked.
"""

import logging
import uuid
from collections.abc import Iterator
from contextlib import contextmanager

from redis import Redis
from redis.exceptions import RedisError

from retention_api.core.config import settings
from retention_api.core.constants import CLEANUP_LOCK_KEY
from retention_api.core.exceptions import CleanupInProgressError
from retention_api.core.redis import get_redis

logger = logging.getLogger(__name__)


class CleanupRunLock:
    """Short-lived Redis marker set with NX and an expiry."""

    def __init__(
        self,
        client: Redis | None = None,
        key: str = CLEANUP_LOCK_KEY,
        ttl_seconds: int | None = None,
    ) -> None:
        self._client = client
        self._key = key
        self._ttl = ttl_seconds or settings.STORAGE_CLEANUP_LOCK_TTL_SECONDS
        self._token = str(uuid.uuid4())
        self._held = False

    def acquire(self) -> bool:
        """Return False only when another run holds the marker."""
        try:
            client = self._client or get_redis()
            acquired = client.set(self._key, self._token, nx=True, ex=self._ttl)
        except RedisError as e:
            logger.warning(f"Cleanup lock unavailable, running unlocked: {e}")
            return True

        self._held = bool(acquired)
        return self._held

    def release(self) -> None:
        if not self._held:
            return
        try:
            client = self._client or get_redis()
            if client.get(self._key) == self._token:
                client.delete(self._key)
        except RedisError as e:
            logger.warning(f"Failed to release cleanup lock: {e}")
        finally:
            self._held = False


@contextmanager
def cleanup_run_lock(client: Redis | None = None) -> Iterator[None]:
    """Hold the advisory lock for the duration of the block.

    Raises:
        CleanupInProgressError: If another run currently holds the lock.
    """
    lock = CleanupRunLock(client)
    if not lock.acquire():
        raise CleanupInProgressError()
    try:
        yield
    finally:
        lock.release()
