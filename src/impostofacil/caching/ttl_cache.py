"""In-process cache with per-entry expiry and an injectable clock."""

from __future__ import annotations

import time
from dataclasses import dataclass
from threading import Lock
from typing import Any, Callable, Dict, Generic, Hashable, Optional, TypeVar

V = TypeVar("V")

Clock = Callable[[], float]


@dataclass
class _Entry(Generic[V]):
    value: V
    expires_at: Optional[float]


class TTLCache(Generic[V]):
    """Mapping with time-based expiry.

    Parameters
    ----------
    ttl_seconds:
        Default lifetime of an entry. ``None`` keeps entries until deleted.
    clock:
        Zero-argument callable returning seconds. Defaults to
        :func:`time.time`; tests pass a controllable one.
    max_entries:
        Optional upper bound; the oldest inserted entry is dropped first.

    Expired entries are evicted lazily when they are read.
    """

    def __init__(
        self,
        ttl_seconds: Optional[float] = None,
        *,
        clock: Optional[Clock] = None,
        max_entries: Optional[int] = None,
    ) -> None:
        if ttl_seconds is not None and ttl_seconds <= 0:
            raise ValueError("ttl_seconds must be positive")
        self.ttl_seconds = ttl_seconds
        self._clock: Clock = clock or time.time
        self._max_entries = max_entries
        self._entries: Dict[Hashable, _Entry[V]] = {}
        self._lock = Lock()

    def now(self) -> float:
        return self._clock()

    def get(self, key: Hashable, default: Any = None) -> Any:
        with self._lock:
            entry = self._entries.get(key)
            if entry is None:
                return default
            if entry.expires_at is not None and self._clock() >= entry.expires_at:
                del self._entries[key]
                return default
            return entry.value

    def set(self, key: Hashable, value: V, ttl_seconds: Optional[float] = None) -> None:
        ttl = self.ttl_seconds if ttl_seconds is None else ttl_seconds
        expires_at = None if ttl is None else self._clock() + ttl
        with self._lock:
            self._entries.pop(key, None)
            self._entries[key] = _Entry(value=value, expires_at=expires_at)
            if self._max_entries is not None:
                while len(self._entries) > self._max_entries:
                    oldest = next(iter(self._entries))
                    del self._entries[oldest]

    def delete(self, key: Hashable) -> bool:
        with self._lock:
            return self._entries.pop(key, None) is not None

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()

    def _purge_locked(self, now: float) -> int:
        expired = [
            key
            for key, entry in self._entries.items()
            if entry.expires_at is not None and now >= entry.expires_at
        ]
        for key in expired:
            del self._entries[key]
        return len(expired)

    def purge_expired(self) -> int:
        """Drop every expired entry and return how many were removed."""

        with self._lock:
            return self._purge_locked(self._clock())

    def __contains__(self, key: Hashable) -> bool:
        sentinel = object()
        return self.get(key, sentinel) is not sentinel

    def __len__(self) -> int:
        """Number of live entries; expired ones are dropped first."""

        with self._lock:
            self._purge_locked(self._clock())
            return len(self._entries)
