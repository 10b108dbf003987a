"""Unit tests for BucketCleaner."""

from unittest.mock import MagicMock

from retention_api.retention.services.cleaner import BucketCleaner
from retention_api.retention.services.deletion import DeletionExecutor
from retention_api.retention.services.inventory import BucketInventory


def make_cleaner(storage, dry_run=False, delete_concurrency=1):
    return BucketCleaner(
        inventory=BucketInventory(storage, max_objects=0),
        executor=DeletionExecutor(storage, dry_run=dry_run),
        delete_concurrency=delete_concurrency,
    )


def assert_balanced(result):
    assert result.expired_count == result.deleted_count + result.error_count
    assert result.total_seen >= result.expired_count


class TestBucketCleaner:
    """Tests for BucketCleaner.clean."""

    def test_deletes_only_expired_objects(self, memory_storage, fixed_now):
        memory_storage.add("user-files", "two.pdf", age_minutes=2)
        memory_storage.add("user-files", "six.pdf", age_minutes=6)
        memory_storage.add("user-files", "ten.pdf", age_minutes=10)

        result = make_cleaner(memory_storage).clean("user-files", 5, now=fixed_now)

        assert result.total_seen == 3
        assert result.expired_count == 2
        assert result.deleted_count == 2
        assert result.error_count == 0
        assert set(memory_storage.buckets["user-files"]) == {"two.pdf"}
        assert_balanced(result)

    def test_deletes_in_listing_order(self, memory_storage, fixed_now):
        memory_storage.add("user-files", "b.pdf", age_minutes=10)
        memory_storage.add("user-files", "a.pdf", age_minutes=50)

        make_cleaner(memory_storage).clean("user-files", 5, now=fixed_now)

        assert memory_storage.deleted == [("user-files", "a.pdf"), ("user-files", "b.pdf")]

    def test_empty_bucket(self, memory_storage, fixed_now):
        result = make_cleaner(memory_storage).clean("user-files", 5, now=fixed_now)

        assert (result.total_seen, result.expired_count, result.deleted_count) == (0, 0, 0)
        assert result.error_count == 0
        assert result.listing_failed is False

    def test_all_objects_expired(self, memory_storage, fixed_now):
        for i in range(4):
            memory_storage.add("user-files", f"f{i}.pdf", age_minutes=60 + i)

        result = make_cleaner(memory_storage).clean("user-files", 5, now=fixed_now)

        assert result.expired_count == result.total_seen == 4
        assert result.deleted_count == 4

    def test_deletion_failure_is_counted_and_processing_continues(
        self, memory_storage, fixed_now
    ):
        memory_storage.add("user-files", "a.pdf", age_minutes=30)
        memory_storage.add("user-files", "b.pdf", age_minutes=20)
        memory_storage.add("user-files", "c.pdf", age_minutes=10)
        memory_storage.failing_keys.add(("user-files", "a.pdf"))

        result = make_cleaner(memory_storage).clean("user-files", 5, now=fixed_now)

        assert result.expired_count == 3
        assert result.deleted_count == 2
        assert result.error_count == 1
        assert "a.pdf" in result.errors[0]
        assert set(memory_storage.buckets["user-files"]) == {"a.pdf"}
        assert_balanced(result)

    def test_listing_failure_returns_zero_result(self, failing_inventory, fixed_now):
        executor = MagicMock()
        cleaner = BucketCleaner(failing_inventory, executor, delete_concurrency=1)

        result = cleaner.clean("user-files", 5, now=fixed_now)

        assert result.listing_failed is True
        assert (result.total_seen, result.expired_count) == (0, 0)
        assert (result.deleted_count, result.error_count) == (0, 0)
        assert "boom" in result.errors[0]
        executor.delete_or_raise.assert_not_called()

    def test_missing_timestamp_counts_as_error(self, memory_storage, fixed_now):
        memory_storage.add("user-files", "unknown.pdf", age_minutes=None)
        memory_storage.add("user-files", "old.pdf", age_minutes=30)

        result = make_cleaner(memory_storage).clean("user-files", 5, now=fixed_now)

        assert result.total_seen == 2
        assert result.deleted_count == 1
        assert result.error_count == 1
        assert "unknown.pdf" in memory_storage.buckets["user-files"]
        assert_balanced(result)

    def test_dry_run_counts_without_deleting(self, memory_storage, fixed_now):
        memory_storage.add("user-files", "old.pdf", age_minutes=30, size=2048)

        result = make_cleaner(memory_storage, dry_run=True).clean(
            "user-files", 5, now=fixed_now
        )

        assert result.deleted_count == 1
        assert result.deleted_bytes == 2048
        assert memory_storage.deleted == []

    def test_concurrent_deletions(self, memory_storage, fixed_now):
        for i in range(20):
            memory_storage.add("user-files", f"f{i}.pdf", age_minutes=10 + i)
        memory_storage.failing_keys.add(("user-files", "f3.pdf"))

        result = make_cleaner(memory_storage, delete_concurrency=4).clean(
            "user-files", 5, now=fixed_now
        )

        assert result.expired_count == 20
        assert result.deleted_count == 19
        assert result.error_count == 1
        assert_balanced(result)

    def test_expired_deadline_stops_new_deletions(self, memory_storage, fixed_now):
        memory_storage.add("user-files", "a.pdf", age_minutes=30)
        memory_storage.add("user-files", "b.pdf", age_minutes=20)
        deadline = MagicMock()
        deadline.expired = True

        result = make_cleaner(memory_storage).clean(
            "user-files", 5, now=fixed_now, deadline=deadline
        )

        assert result.total_seen == 2
        assert result.expired_count == 0
        assert result.incomplete is True
        assert memory_storage.deleted == []
        assert_balanced(result)
