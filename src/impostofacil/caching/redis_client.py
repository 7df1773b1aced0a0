"""Redis-backed JSON cache shared between API workers.

Cache Keys:
- impostofacil:snapshot:{key} -> serialized simulator snapshot (TTL: 24h)
"""

from __future__ import annotations

import json
import os
from typing import Any, Optional

import redis

SNAPSHOT_PREFIX = "impostofacil:snapshot"


class RedisClient:
    """Thin JSON layer over a redis connection.

    ``connection`` lets callers hand in an existing client (any object
    exposing ``get``/``setex``/``delete``/``ping``); otherwise one is built
    from ``url`` or ``REDIS_URL``.
    """

    def __init__(self, url: Optional[str] = None, connection: Any = None):
        self.url = url or os.getenv("REDIS_URL", "redis://localhost:6379/0")
        if connection is not None:
            self._client = connection
        else:
            self._client = redis.from_url(
                self.url,
                decode_responses=True,
                socket_keepalive=True,
                socket_connect_timeout=5,
                socket_timeout=5,
                retry_on_timeout=True,
            )

    # -------------------------------------------------------------------------
    # JSON values
    # -------------------------------------------------------------------------

    def get_json(self, key: str) -> Optional[Any]:
        """Return the decoded value stored at ``key`` or ``None`` on a miss."""
        data = self._client.get(key)
        if data:
            try:
                return json.loads(data)
            except (json.JSONDecodeError, TypeError):
                return None
        return None

    def set_json(self, key: str, value: Any, ttl: int) -> None:
        """Store ``value`` as JSON with an expiry of ``ttl`` seconds."""
        self._client.setex(key, int(ttl), json.dumps(value, ensure_ascii=False))

    def delete(self, key: str) -> None:
        self._client.delete(key)

    # -------------------------------------------------------------------------
    # Key helpers
    # -------------------------------------------------------------------------

    @staticmethod
    def snapshot_key(key: str) -> str:
        return f"{SNAPSHOT_PREFIX}:{key}"

    # -------------------------------------------------------------------------
    # Health Check
    # -------------------------------------------------------------------------

    def ping(self) -> bool:
        """Check Redis connectivity."""
        try:
            return bool(self._client.ping())
        except redis.exceptions.ConnectionError:
            return False


_redis_client: Optional[RedisClient] = None


def get_redis_client() -> RedisClient:
    """Get singleton Redis client."""
    global _redis_client
    if _redis_client is None:
        _redis_client = RedisClient()
    return _redis_client
