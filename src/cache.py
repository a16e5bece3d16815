import logging
from typing import Optional

import redis

from src.config import settings

logger = logging.getLogger(__name__)

_redis_client: Optional[redis.Redis] = None

def get_redis_client() -> redis.Redis:
    """Get or create the shared Redis client"""
    global _redis_client

    if _redis_client is None:
        _redis_client = redis.Redis.from_url(
            settings.REDIS_URL,
            decode_responses=True,
            socket_timeout=settings.REDIS_SOCKET_TIMEOUT,
            socket_connect_timeout=settings.REDIS_SOCKET_TIMEOUT,
        )
        logger.info("Redis client initialized")

    return _redis_client

def get_cache() -> redis.Redis:
    """FastAPI dependency for the key/value cache"""
    return get_redis_client()

def close_redis_client():
    global _redis_client

    if _redis_client is not None:
        _redis_client.close()
        _redis_client = None
        logger.info("Redis client closed")
