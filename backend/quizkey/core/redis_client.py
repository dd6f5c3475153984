from __future__ import annotations

import redis

from quizkey.core.config import settings


def get_redis() -> redis.Redis:
    # The library slot is stored as JSON text, so responses are decoded to str.
    return redis.Redis.from_url(settings.redis_url, decode_responses=True)
