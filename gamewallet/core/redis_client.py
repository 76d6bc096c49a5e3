import os
from typing import Optional

import redis.asyncio as redis

from gamewallet.core.config import settings

REDIS_URL = os.environ.get("REDIS_URL", settings.redis_url)

_redis_client: Optional[redis.Redis] = None


def get_redis_client() -> redis.Redis:
    """Get Redis client instance; the connection opens on first command"""
    global _redis_client
    if _redis_client is None:
        _redis_client = redis.from_url(REDIS_URL, decode_responses=True)
    return _redis_client
