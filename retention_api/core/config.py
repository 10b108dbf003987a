import json

from pydantic_settings import BaseSettings

from retention_api.core.constants import CLEANUP_INTERVALS, DEFAULT_CLEANUP_BUCKETS


class Settings(BaseSettings):
    PROJECT_NAME: str = "Storage Retention API"
    API_V1_PREFIX: str = "/api/v1"
    DEBUG: bool = False
    LOG_LEVEL: str = "INFO"

    BACKEND_CORS_ORIGINS: str = '["http://localhost:5173","http://localhost:3000"]'

    REDIS_URL: str = "redis://redis:6379/0"

    # Bearer token expected from the scheduler. Empty disables the check.
    CRON_SECRET: str = ""

    # Storage backend: "local" for development, "s3" for any S3-compatible service
    STORAGE_BACKEND: str = "local"
    STORAGE_LOCAL_DIR: str = "./storage"

    # S3-compatible endpoint (Supabase Storage S3 gateway, Cloudflare R2, MinIO...)
    S3_ENDPOINT_URL: str = ""
    S3_ACCESS_KEY_ID: str = ""
    S3_SECRET_ACCESS_KEY: str = ""
    S3_REGION: str = "auto"

    # Retention cleanup settings
    STORAGE_CLEANUP_BUCKETS: str = json.dumps(list(DEFAULT_CLEANUP_BUCKETS))
    STORAGE_CLEANUP_PRESET: str = "PRODUCTION"
    STORAGE_CLEANUP_MAX_AGE_MINUTES: float | None = None  # Overrides the preset when set
    STORAGE_LIST_MAX_OBJECTS: int = 1000  # 0 disables the cap
    STORAGE_CLEANUP_BUCKET_CONCURRENCY: int = 1
    STORAGE_CLEANUP_DELETE_CONCURRENCY: int = 1
    STORAGE_CLEANUP_DEADLINE_SECONDS: float = 55.0
    STORAGE_CLEANUP_DRY_RUN: bool = False
    STORAGE_CLEANUP_LOCK_TTL_SECONDS: int = 300
    STORAGE_CLEANUP_SCHEDULE_HOUR: int = 3
    STORAGE_CLEANUP_SCHEDULE_MINUTE: int = 0

    class Config:
        env_file = ".env"
        case_sensitive = True
        extra = "ignore"

    @property
    def cors_origins(self) -> list[str]:
        try:
            parsed: list[str] = json.loads(self.BACKEND_CORS_ORIGINS)
            return parsed
        except json.JSONDecodeError:
            return ["http://localhost:5173", "http://localhost:3000"]

    @property
    def cleanup_buckets(self) -> list[str]:
        """Bucket names to sweep, accepting a JSON list or a comma-separated string."""
        raw = self.STORAGE_CLEANUP_BUCKETS.strip()
        if raw.startswith("["):
            try:
                parsed: list[str] = json.loads(raw)
                return [name.strip() for name in parsed if name and name.strip()]
            except json.JSONDecodeError:
                return list(DEFAULT_CLEANUP_BUCKETS)
        return [name.strip() for name in raw.split(",") if name.strip()]

    @property
    def cleanup_max_age_minutes(self) -> float:
        if self.STORAGE_CLEANUP_MAX_AGE_MINUTES is not None:
            return self.STORAGE_CLEANUP_MAX_AGE_MINUTES
        return CLEANUP_INTERVALS.get(
            self.STORAGE_CLEANUP_PRESET.upper(), CLEANUP_INTERVALS["PRODUCTION"]
        )


settings = Settings()
