from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

import structlog
from fastapi import FastAPI
from fastapi.concurrency import run_in_threadpool
from fastapi.middleware.cors import CORSMiddleware
from redis.exceptions import RedisError
from slowapi import _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded

from retention_api.core import redis as redis_module
from retention_api.core.config import settings
from retention_api.core.exceptions import register_exception_handlers
from retention_api.core.log_config import RequestLoggingMiddleware, setup_logging
from retention_api.core.rate_limit import limiter
from retention_api.core.storage import get_storage
from retention_api.retention.routes import cron

setup_logging()
logger = structlog.get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    logger.info(
        "starting",
        storage_backend=settings.STORAGE_BACKEND,
        buckets=settings.cleanup_buckets,
        max_age_minutes=settings.cleanup_max_age_minutes,
    )

    yield

    if redis_module.redis_client:
        redis_module.redis_client.close()
        logger.info("redis_closed")


app = FastAPI(
    title=settings.PROJECT_NAME,
    debug=settings.DEBUG,
    lifespan=lifespan,
    description="Scheduled retention cleanup for object storage buckets",
    version="1.0.0",
)

app.state.limiter = limiter
app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)  # type: ignore[arg-type]
register_exception_handlers(app, debug=settings.DEBUG)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)
app.add_middleware(RequestLoggingMiddleware)

app.include_router(cron.router, prefix=settings.API_V1_PREFIX)


@app.get("/")
async def root() -> dict[str, str]:
    return {"message": settings.PROJECT_NAME, "version": "1.0.0", "status": "running"}


@app.get("/health")
async def health_check() -> dict[str, str]:
    storage_status = "unknown"
    redis_status = "unknown"

    try:
        reachable = await run_in_threadpool(get_storage().check_connection)
        storage_status = "healthy" if reachable else "unhealthy"
    except Exception as e:
        logger.error("storage_health_check_failed", error=str(e))
        storage_status = "unhealthy"

    try:
        await run_in_threadpool(redis_module.get_redis().ping)
        redis_status = "healthy"
    except RedisError:
        redis_status = "unhealthy"

    overall = "healthy" if storage_status == "healthy" else "degraded"

    return {"status": overall, "storage": storage_status, "redis": redis_status}
