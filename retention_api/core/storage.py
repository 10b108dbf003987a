import os
from dataclasses import dataclass
from datetime import UTC, datetime
from pathlib import Path
from typing import Any, Protocol

import boto3
from botocore.config import Config as BotoConfig

from retention_api.core.config import settings


@dataclass(frozen=True)
class StorageObject:
    """Represents a file object in one storage bucket."""

    bucket: str
    key: str
    created_at: datetime | None
    size: int = 0


class StorageBackend(Protocol):
    def list_objects(self, bucket: str, prefix: str = "") -> list[StorageObject]:
        """List all objects in the bucket, optionally limited to a prefix."""
        ...

    def delete(self, bucket: str, key: str) -> None:
        """Delete an object. Deleting a missing key is not an error."""
        ...

    def check_connection(self) -> bool:
        """Return True if the storage service is reachable."""
        ...


class LocalStorage:
    """Local filesystem storage for development: one directory per bucket."""

    def __init__(self, base_dir: str) -> None:
        self._base_dir = Path(base_dir)

    def _resolve_safe_path(self, bucket: str, key: str = "") -> Path:
        """Resolve path and validate it stays within the bucket directory."""
        base_resolved = self._base_dir.resolve()
        bucket_path = (self._base_dir / bucket).resolve()
        if not str(bucket_path).startswith(str(base_resolved) + os.sep):
            raise ValueError(f"Path traversal attempt detected: {bucket}")
        if not key:
            return bucket_path
        full_path = (bucket_path / key).resolve()
        if not str(full_path).startswith(str(bucket_path) + os.sep):
            raise ValueError(f"Path traversal attempt detected: {key}")
        return full_path

    def list_objects(self, bucket: str, prefix: str = "") -> list[StorageObject]:
        """List all files in the bucket directory (recursively)."""
        bucket_path = self._resolve_safe_path(bucket)
        folder_path = self._resolve_safe_path(bucket, prefix) if prefix else bucket_path
        if not folder_path.exists():
            return []

        result = []
        for file_path in folder_path.rglob("*"):
            if file_path.is_file():
                stat = file_path.stat()
                result.append(
                    StorageObject(
                        bucket=bucket,
                        key=file_path.relative_to(bucket_path).as_posix(),
                        created_at=datetime.fromtimestamp(stat.st_mtime, tz=UTC),
                        size=stat.st_size,
                    )
                )
        return result

    def delete(self, bucket: str, key: str) -> None:
        full_path = self._resolve_safe_path(bucket, key)
        full_path.unlink(missing_ok=True)

    def check_connection(self) -> bool:
        return self._base_dir.is_dir()


class S3Storage:
    """S3-compatible storage (Supabase Storage S3 gateway, Cloudflare R2, MinIO)."""

    def __init__(self, client: Any | None = None) -> None:
        self._client = client or boto3.client(
            "s3",
            endpoint_url=settings.S3_ENDPOINT_URL or None,
            aws_access_key_id=settings.S3_ACCESS_KEY_ID or None,
            aws_secret_access_key=settings.S3_SECRET_ACCESS_KEY or None,
            config=BotoConfig(
                signature_version="s3v4",
                retries={"max_attempts": 3, "mode": "standard"},
                s3={"addressing_style": "path"},
            ),
            region_name=settings.S3_REGION,
        )

    def list_objects(self, bucket: str, prefix: str = "") -> list[StorageObject]:
        """List all objects in the bucket, following every page."""
        result = []
        paginator = self._client.get_paginator("list_objects_v2")

        for page in paginator.paginate(Bucket=bucket, Prefix=prefix):
            for obj in page.get("Contents", []):
                result.append(
                    StorageObject(
                        bucket=bucket,
                        key=obj["Key"],
                        created_at=obj.get("LastModified"),
                        size=obj.get("Size", 0),
                    )
                )
        return result

    def delete(self, bucket: str, key: str) -> None:
        self._client.delete_object(Bucket=bucket, Key=key)

    def check_connection(self) -> bool:
        try:
            self._client.list_buckets()
            return True
        except Exception:
            return False


def get_storage() -> StorageBackend:
    if settings.STORAGE_BACKEND == "s3":
        return S3Storage()
    return LocalStorage(settings.STORAGE_LOCAL_DIR)
