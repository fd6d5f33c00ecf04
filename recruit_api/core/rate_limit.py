"""Rate limiting configuration for the teams API."""

import logging
import os

from slowapi import Limiter
from slowapi.util import get_remote_address

from recruit_api.core.config import settings

logger = logging.getLogger(__name__)

IS_TESTING = os.getenv("TESTING", "").lower() in ("1", "true", "yes")
DEFAULT_LIMITS = (
    []
    if IS_TESTING or settings.RATE_LIMIT_API <= 0
    else [f"{settings.RATE_LIMIT_API}/minute"]
)


def _build_limiter() -> Limiter:
    # Redis keeps counters consistent across workers; memory is fine for one process
    if IS_TESTING or not settings.REDIS_URL:
        return Limiter(
            key_func=get_remote_address,
            storage_uri="memory://",
            default_limits=DEFAULT_LIMITS,
        )

    import redis

    try:
        r = redis.from_url(settings.REDIS_URL, socket_connect_timeout=1)
        r.ping()
    except redis.RedisError as e:
        logger.warning("Redis unavailable for rate limiting, using in-memory: %s", e)
        return Limiter(
            key_func=get_remote_address,
            storage_uri="memory://",
            default_limits=DEFAULT_LIMITS,
        )
    return Limiter(
        key_func=get_remote_address,
        storage_uri=settings.REDIS_URL,
        default_limits=DEFAULT_LIMITS,
    )


limiter = _build_limiter()
