"""
Rate limiting for FuelPool API using SlowAPI (Redis-backed when available).
"""
from slowapi import Limiter
from slowapi.util import get_remote_address
from fastapi import Request
import redis
import logging

from api.config import settings

logger = logging.getLogger(__name__)


def _connect_redis():
    """Return a Redis client, or None when disabled or unreachable."""
    if not settings.redis_enabled:
        return None
    try:
        client = redis.from_url(
            settings.redis_url,
            decode_responses=True,
            socket_connect_timeout=5
        )
        client.ping()
        logger.info("Redis connection established")
        return client
    except redis.RedisError as e:
        logger.error(f"Redis connection failed: {e}")
        logger.warning("Rate limiting falls back to in-process storage")
        return None


redis_client = _connect_redis()


def get_api_key_identifier(request: Request) -> str:
    """
    Identifier for rate limiting: API key prefix if present, else client IP.
    """
    api_key = request.headers.get(settings.api_key_header)
    if api_key:
        return f"key:{api_key[:8]}"
    return f"ip:{get_remote_address(request)}"


limiter = Limiter(
    key_func=get_api_key_identifier,
    enabled=settings.rate_limit_enabled,
    storage_uri=settings.redis_url if redis_client else "memory://",
    strategy="fixed-window",
)


def get_rate_limit_string() -> str:
    """Rate limit string for ``@limiter.limit()`` (e.g. "60/minute")."""
    return f"{settings.rate_limit_per_minute}/minute"
