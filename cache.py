# cache.py
"""
In-memory response cache with a fixed time-to-live.

Entries expire lazily: a read after the TTL has elapsed behaves as if the
key was never set and drops the stale entry. There is no size bound.
"""
import logging
import time
from typing import Any, Callable, Dict, Optional, Tuple

from config import DEFAULT_CACHE_TTL

logger = logging.getLogger(__name__)

# Request kinds used to namespace cache keys
ONGOING = "ongoing"
SEARCH = "search"
DETAIL = "detail"
EPISODE = "episode"

CACHE_KINDS = {ONGOING, SEARCH, DETAIL, EPISODE}


def cache_key(kind: str, param: Any) -> str:
    """
    Build a cache key for a request kind and its parameter.
    Examples:
        cache_key('ongoing', 2) -> 'ongoing:2'
        cache_key('detail', 'one-piece-sub-indo') -> 'detail:one-piece-sub-indo'
    """
    if kind not in CACHE_KINDS:
        raise ValueError(f"Unknown cache kind: {kind}")
    return f"{kind}:{param}"


class ResponseCache:
    def __init__(self, ttl: float = DEFAULT_CACHE_TTL, clock: Callable[[], float] = time.monotonic):
        self.ttl = ttl
        self.clock = clock
        self._entries: Dict[str, Tuple[Any, float]] = {}

    def get(self, key: str) -> Optional[Any]:
        entry = self._entries.get(key)
        if entry is None:
            return None
        value, inserted_at = entry
        if self.clock() - inserted_at >= self.ttl:
            logger.debug(f"Cache entry expired: {key}")
            self._entries.pop(key, None)
            return None
        logger.debug(f"Cache hit: {key}")
        return value

    def set(self, key: str, value: Any) -> None:
        self._entries[key] = (value, self.clock())

    def has(self, key: str) -> bool:
        return self.get(key) is not None

    def purge_expired(self) -> int:
        """Drop every expired entry and return how many were removed."""
        now = self.clock()
        expired = [key for key, (_, inserted_at) in self._entries.items() if now - inserted_at >= self.ttl]
        for key in expired:
            del self._entries[key]
        if expired:
            logger.info(f"Purged {len(expired)} expired cache entries")
        return len(expired)

    def clear(self) -> None:
        self._entries.clear()

    def __len__(self) -> int:
        return len(self._entries)
