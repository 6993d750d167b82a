# backend/barbershop/redis_client.py
"""
Shared Redis connection.

Redis is optional: without REDIS_URL the availability cache runs
in-process only and `redis_client` is None.
"""

from redis import Redis

from .config import settings


def create_redis_client(url: str | None) -> Redis | None:
    if not url:
        return None
    return Redis.from_url(url, socket_timeout=2.0)


redis_client = create_redis_client(settings.redis_url)
