import ssl

from celery import Celery
from celery.schedules import crontab

from retention_api.core.config import settings

_uses_tls = settings.REDIS_URL.startswith("rediss://")

celery_app = Celery(
    "storage_retention",
    broker=settings.REDIS_URL,
    backend=settings.REDIS_URL,
)

celery_app.conf.update(
    task_serializer="json",
    result_serializer="json",
    accept_content=["json"],
    timezone="UTC",
    task_track_started=True,
    result_expires=3600,
    beat_schedule={
        "cleanup-expired-files-daily": {
            "task": "retention_api.retention.tasks.cleanup_expired_files_task",
            "schedule": crontab(
                hour=settings.STORAGE_CLEANUP_SCHEDULE_HOUR,
                minute=settings.STORAGE_CLEANUP_SCHEDULE_MINUTE,
            ),
        },
    },
)

if _uses_tls:
    celery_app.conf.update(
        broker_use_ssl={"ssl_cert_reqs": ssl.CERT_NONE},
        redis_backend_use_ssl={"ssl_cert_reqs": ssl.CERT_NONE},
    )

celery_app.autodiscover_tasks(["retention_api.retention"])
