from pathlib import Path

from dotenv import load_dotenv

env_file = Path(__file__).parent.parent / ".env.test"
load_dotenv(env_file, override=True)

from datetime import UTC, datetime, timedelta  # noqa: E402
from unittest.mock import MagicMock  # noqa: E402

import pytest  # noqa: E402

from retention_api.core import redis as redis_module  # noqa: E402
from retention_api.core.exceptions import ListingError  # noqa: E402
from retention_api.core.rate_limit import limiter  # noqa: E402
from retention_api.core.storage import StorageObject  # noqa: E402

FIXED_NOW = datetime(2025, 6, 1, 12, 0, tzinfo=UTC)


class InMemoryStorage:
    """Storage backend keeping objects in dicts, with injectable failures."""

    def __init__(self) -> None:
        self.buckets: dict[str, dict[str, StorageObject]] = {}
        self.failing_buckets: set[str] = set()
        self.failing_keys: set[tuple[str, str]] = set()
        self.deleted: list[tuple[str, str]] = []

    def add(
        self, bucket: str, key: str, age_minutes: float | None, size: int = 100
    ) -> StorageObject:
        created_at = None if age_minutes is None else FIXED_NOW - timedelta(minutes=age_minutes)
        obj = StorageObject(bucket=bucket, key=key, created_at=created_at, size=size)
        self.buckets.setdefault(bucket, {})[key] = obj
        return obj

    def list_objects(self, bucket: str, prefix: str = "") -> list[StorageObject]:
        if bucket in self.failing_buckets:
            raise ConnectionError(f"listing {bucket} failed")
        return [o for k, o in self.buckets.get(bucket, {}).items() if k.startswith(prefix)]

    def delete(self, bucket: str, key: str) -> None:
        if (bucket, key) in self.failing_keys:
            raise PermissionError("access denied")
        self.buckets.get(bucket, {}).pop(key, None)
        self.deleted.append((bucket, key))

    def check_connection(self) -> bool:
        return True


@pytest.fixture
def fixed_now():
    return FIXED_NOW


@pytest.fixture
def memory_storage():
    return InMemoryStorage()


@pytest.fixture
def mock_storage():
    """Mock storage backend for testing."""
    storage = MagicMock()
    storage.list_objects.return_value = []
    storage.delete.return_value = None
    return storage


@pytest.fixture
def failing_inventory():
    inventory = MagicMock()
    inventory.list.side_effect = ListingError("user-files", "boom")
    return inventory


@pytest.fixture(autouse=True)
def mock_redis():
    """Replace the Redis client so the advisory lock never touches the network."""
    redis = MagicMock()
    redis.set.return_value = True
    redis.get.return_value = None
    redis.ping.return_value = True
    previous = redis_module.redis_client
    redis_module.redis_client = redis
    yield redis
    redis_module.redis_client = previous


@pytest.fixture(autouse=True)
def disable_rate_limits():
    limiter.enabled = False
    yield
    limiter.enabled = True
