"""Short-lived storage of the last simulation run.

A snapshot carries the input, the full result and the teaser so a visitor
who signs up after simulating can have the run attached to their profile.
"""

from __future__ import annotations

import logging
import time
from typing import Any, Callable, Dict, Optional

from pydantic import BaseModel, ConfigDict, ValidationError

from impostofacil import config
from impostofacil.caching.redis_client import RedisClient
from impostofacil.caching.ttl_cache import TTLCache
from impostofacil.simulator.models import SimulatorInput, SimulatorResult, SimulatorTeaser

logger = logging.getLogger(__name__)

STORAGE_KEY = "impostofacil_simulator_data"


class SimulatorSnapshot(BaseModel):
    input: SimulatorInput
    result: SimulatorResult
    teaser: SimulatorTeaser
    timestamp: float

    model_config = ConfigDict(extra="forbid")


class SnapshotCache:
    """Keeps snapshots in a :class:`TTLCache` (default) or in Redis.

    Parameters
    ----------
    ttl_hours:
        Lifetime of a snapshot; defaults to ``IMPOSTOFACIL_SNAPSHOT_TTL_HOURS``.
    clock:
        Seconds source used both for the snapshot timestamp and for expiry.
    redis_client:
        When given, snapshots are written to Redis with ``SETEX`` instead of
        the in-process cache.
    """

    def __init__(
        self,
        ttl_hours: Optional[float] = None,
        *,
        clock: Optional[Callable[[], float]] = None,
        redis_client: Optional[RedisClient] = None,
    ) -> None:
        hours = config.snapshot_ttl_hours() if ttl_hours is None else ttl_hours
        if hours <= 0:
            raise ValueError("ttl_hours must be positive")
        self.ttl_seconds = hours * 3600
        self._clock = clock or time.time
        self._redis = redis_client
        self._cache: TTLCache[Dict[str, Any]] = TTLCache(self.ttl_seconds, clock=self._clock)

    def save(
        self,
        data: SimulatorInput,
        result: SimulatorResult,
        teaser: SimulatorTeaser,
        key: str = STORAGE_KEY,
    ) -> SimulatorSnapshot:
        snapshot = SimulatorSnapshot(input=data, result=result, teaser=teaser, timestamp=self._clock())
        payload = snapshot.model_dump(mode="json")
        if self._redis is not None:
            self._redis.set_json(RedisClient.snapshot_key(key), payload, ttl=int(self.ttl_seconds))
        else:
            self._cache.set(key, payload)
        return snapshot

    def load(self, key: str = STORAGE_KEY) -> Optional[SimulatorSnapshot]:
        """Return the stored snapshot, or ``None`` when absent, expired or unreadable."""

        if self._redis is not None:
            payload = self._redis.get_json(RedisClient.snapshot_key(key))
        else:
            payload = self._cache.get(key)
        if payload is None:
            return None
        try:
            snapshot = SimulatorSnapshot.model_validate(payload)
        except ValidationError:
            logger.warning("Discarding unreadable simulator snapshot under %s", key)
            self.clear(key)
            return None
        # Redis expiry is authoritative there; the timestamp check covers both backends.
        if self._clock() - snapshot.timestamp >= self.ttl_seconds:
            self.clear(key)
            return None
        return snapshot

    def clear(self, key: str = STORAGE_KEY) -> None:
        if self._redis is not None:
            self._redis.delete(RedisClient.snapshot_key(key))
        else:
            self._cache.delete(key)
