import logging
import sys
import time
from collections.abc import Awaitable, Callable
from typing import Any, TextIO

import structlog
from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware

from retention_api.core.config import settings

# Scheduler and load balancer probes, logged at debug level only
_PROBE_PATHS = frozenset({"/", "/health"})


def setup_logging(level: str | None = None, stream: TextIO | None = None) -> None:
    """Configure structlog for JSON output in production, pretty output in dev.

    Stdlib loggers used by the cleanup services go through the same
    processors, so values bound with ``structlog.contextvars`` (the cleanup
    run id, the bucket being swept) appear on their records too.

    Records go to ``stream`` (stdout by default). The command line script
    passes stderr so its JSON report stays alone on stdout.
    """
    shared_processors: list[Any] = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.processors.TimeStamper(fmt="iso", utc=True),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        structlog.processors.UnicodeDecoder(),
    ]

    renderer: Any
    if settings.DEBUG:
        renderer = structlog.dev.ConsoleRenderer()
    else:
        renderer = structlog.processors.JSONRenderer()

    structlog.configure(
        processors=[
            structlog.stdlib.filter_by_level,
            *shared_processors,
            structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
        ],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )

    handler = logging.StreamHandler(stream or sys.stdout)
    handler.setFormatter(
        structlog.stdlib.ProcessorFormatter(
            foreign_pre_chain=shared_processors,
            processors=[
                structlog.stdlib.ProcessorFormatter.remove_processors_meta,
                renderer,
            ],
        )
    )

    root_logger = logging.getLogger()
    root_logger.handlers.clear()
    root_logger.addHandler(handler)
    root_logger.setLevel((level or settings.LOG_LEVEL).upper())

    # boto logs every request and retry at INFO
    for name in ("uvicorn.access", "botocore", "boto3", "urllib3", "celery.beat"):
        logging.getLogger(name).setLevel(logging.WARNING)


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """Log every HTTP request with method, path, status, and duration."""

    async def dispatch(
        self, request: Request, call_next: Callable[[Request], Awaitable[Response]]
    ) -> Response:
        logger = structlog.get_logger("http")
        start = time.perf_counter()

        response = await call_next(request)

        fields = {
            "method": request.method,
            "path": request.url.path,
            "status": response.status_code,
            "duration_ms": round((time.perf_counter() - start) * 1000, 2),
            "client": request.client.host if request.client else "unknown",
        }
        if request.url.path in _PROBE_PATHS:
            await logger.adebug("request", **fields)
        else:
            await logger.ainfo("request", **fields)

        return response
