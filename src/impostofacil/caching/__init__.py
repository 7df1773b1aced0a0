"""Caching layer: in-process TTL cache and the Redis-backed JSON cache."""

from impostofacil.caching.redis_client import RedisClient, get_redis_client
from impostofacil.caching.ttl_cache import TTLCache

__all__ = ["RedisClient", "TTLCache", "get_redis_client"]
