from redis import Redis

from retention_api.core.config import settings

# Global Redis client instance, created lazily
redis_client: Redis | None = None


def get_redis() -> Redis:
    """
    Get the Redis client instance, connecting on first use.

    Returns:
        Redis client instance
    """
    global redis_client
    if redis_client is None:
        redis_client = Redis.from_url(
            settings.REDIS_URL,
            decode_responses=True,
            encoding="utf-8",
            socket_connect_timeout=2,
            socket_timeout=2,
        )
    return redis_client
