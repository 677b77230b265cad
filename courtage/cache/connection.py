"""
Redis connection for the cache store
"""
import logging
import os
from typing import Optional

import redis

REDIS_URL = os.getenv("REDIS_URL", "redis://localhost:6379/0")

logger = logging.getLogger(__name__)

_redis_client: Optional[redis.Redis] = None
_connection_attempted = False


def create_redis_client(url: str = REDIS_URL) -> Optional[redis.Redis]:
    """Connect to redis; returns None when the server is unreachable"""
    try:
        client = redis.from_url(
            url,
            max_connections=int(os.getenv("REDIS_MAX_CONNECTIONS", "20")),
            decode_responses=True,
        )
        # Test connection
        client.ping()
        logger.info("Redis connection established successfully")
        return client
    except (redis.exceptions.RedisError, ValueError) as e:
        logger.warning(f"Redis connection failed: {e}. Falling back to in-memory cache.")
        return None


def get_redis() -> Optional[redis.Redis]:
    """Shared redis client, connected on first use"""
    global _redis_client, _connection_attempted
    if not _connection_attempted:
        _connection_attempted = True
        _redis_client = create_redis_client()
    return _redis_client
