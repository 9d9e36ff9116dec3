from __future__ import annotations

import json
import logging
import threading
import time
from typing import Any, Callable, Dict, List, Optional, Sequence

from suiscope.config.settings import CACHE_TTL_MS
from suiscope.core.dto import CacheEntry

logger = logging.getLogger(__name__)


def _monotonic_ms() -> float:
    return time.monotonic() * 1000.0


class ResponseCache:
    """
    TTL cache for JSON-RPC results, keyed by (method, params).

    Stale entries are evicted when read; nothing sweeps in the background
    and there is no size bound, so a long session keeps every distinct key
    it has fetched until it goes stale and is read again.
    """

    def __init__(
        self,
        ttl_ms: int = CACHE_TTL_MS,
        clock: Callable[[], float] = _monotonic_ms,
    ) -> None:
        if ttl_ms <= 0:
            raise ValueError("ttl_ms must be > 0")
        self._ttl_ms = ttl_ms
        self._clock = clock
        self._entries: Dict[str, CacheEntry] = {}
        self._lock = threading.Lock()

    @property
    def ttl_ms(self) -> int:
        return self._ttl_ms

    @staticmethod
    def key(method: str, params: Optional[Sequence[Any]] = None) -> str:
        # sorted keys: {"a":1,"b":2} and {"b":2,"a":1} must hit the same entry
        canonical = json.dumps(list(params or []), sort_keys=True, separators=(",", ":"))
        return f"{method}:{canonical}"

    def get(self, key: str) -> Optional[Any]:
        now = self._clock()
        with self._lock:
            entry = self._entries.get(key)
            if entry is None:
                return None
            if now - entry.stored_at >= self._ttl_ms:
                del self._entries[key]
                logger.debug("cache stale: %s", key)
                return None
            return entry.value

    def set(self, key: str, value: Any) -> None:
        entry = CacheEntry(key=key, value=value, stored_at=self._clock())
        with self._lock:
            self._entries[key] = entry

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()

    def keys(self) -> List[str]:
        with self._lock:
            return list(self._entries)

    def __contains__(self, key: object) -> bool:
        return isinstance(key, str) and self.get(key) is not None

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)
