"""
In-memory read cache with per-entry TTL and bulk invalidation.

Keys are structured tuples ``(namespace, user_id, *qualifiers)`` so that a
whole user namespace can be dropped with a structural prefix match.
Expired entries are evicted lazily on read; there is no background sweep.
"""

from __future__ import annotations

import logging
import re
import time
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Dict, Optional, Pattern, Tuple, TypeVar, Union

logger = logging.getLogger("snapcal.cache")

T = TypeVar("T")

CacheKey = Tuple[str, ...]

FOOD_NAMESPACE = "food"
USER_NAMESPACE = "user"

DEFAULT_TTL_SEC = 5 * 60


def render_key(key: CacheKey) -> str:
    return ":".join(str(part) for part in key)


class CacheKeys:
    """Key builders so every call site agrees on the layout"""

    @staticmethod
    def user_food(user_id: str) -> CacheKey:
        return (FOOD_NAMESPACE, user_id)

    @staticmethod
    def entries(user_id: str) -> CacheKey:
        return (FOOD_NAMESPACE, user_id, "entries")

    @staticmethod
    def entries_lite(user_id: str) -> CacheKey:
        return (FOOD_NAMESPACE, user_id, "entries", "lite")

    @staticmethod
    def entries_for_date(user_id: str, on_date: str) -> CacheKey:
        return (FOOD_NAMESPACE, user_id, "entries", "date", on_date)

    @staticmethod
    def entry_count(user_id: str, on_date: str) -> CacheKey:
        return (FOOD_NAMESPACE, user_id, "count", on_date)

    @staticmethod
    def entry_image(user_id: str, entry_id: str) -> CacheKey:
        return (FOOD_NAMESPACE, user_id, "image", entry_id)

    @staticmethod
    def summaries(user_id: str) -> CacheKey:
        return (FOOD_NAMESPACE, user_id, "summaries")

    @staticmethod
    def summaries_for_range(user_id: str, start: str, end: str) -> CacheKey:
        return (FOOD_NAMESPACE, user_id, "summaries", start, end)

    @staticmethod
    def user_settings(user_id: str) -> CacheKey:
        return (USER_NAMESPACE, user_id)

    @staticmethod
    def daily_goal(user_id: str) -> CacheKey:
        return (USER_NAMESPACE, user_id, "goal")

    @staticmethod
    def user_profile(user_id: str) -> CacheKey:
        return (USER_NAMESPACE, user_id, "profile")

    @staticmethod
    def onboarding(user_id: str) -> CacheKey:
        return (USER_NAMESPACE, user_id, "onboarding")


@dataclass
class CacheEntry:
    value: Any
    created_at: float
    ttl: float


class TTLCache:
    """
    Key/value map with per-entry expiry.

    One instance is created at startup and handed to every consumer; tests
    build their own with a fake clock.
    """

    def __init__(
        self,
        default_ttl: float = DEFAULT_TTL_SEC,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.default_ttl = default_ttl
        self._clock = clock
        self._entries: Dict[CacheKey, CacheEntry] = {}

    def get(self, key: CacheKey) -> Optional[Any]:
        """Return the cached value, or None if missing or expired (expired entries are dropped)"""
        entry = self._entries.get(key)
        if entry is None:
            return None
        if self._clock() - entry.created_at >= entry.ttl:
            del self._entries[key]
            return None
        return entry.value

    def set(self, key: CacheKey, value: Any, ttl: Optional[float] = None) -> None:
        """Store value, overwriting any previous entry and resetting its age"""
        self._entries[key] = CacheEntry(
            value=value,
            created_at=self._clock(),
            ttl=ttl if ttl is not None else self.default_ttl,
        )

    def has(self, key: CacheKey) -> bool:
        return self.get(key) is not None

    def invalidate(self, key: CacheKey) -> None:
        self._entries.pop(key, None)

    def invalidate_prefix(self, prefix: CacheKey) -> int:
        """Drop every key whose leading components equal ``prefix``"""
        size = len(prefix)
        doomed = [k for k in self._entries if k[:size] == tuple(prefix)]
        for k in doomed:
            del self._entries[k]
        if doomed:
            logger.debug("Invalidated %d cache keys under %s", len(doomed), render_key(prefix))
        return len(doomed)

    def invalidate_pattern(self, pattern: Union[str, Pattern[str]]) -> int:
        """Drop every key whose rendered form matches the regex"""
        regex = re.compile(pattern) if isinstance(pattern, str) else pattern
        doomed = [k for k in self._entries if regex.search(render_key(k))]
        for k in doomed:
            del self._entries[k]
        return len(doomed)

    def clear(self) -> None:
        self._entries.clear()

    def clear_date_sensitive(self) -> int:
        """Drop all meal data caches; used when the local day rolls over"""
        count = self.invalidate_prefix((FOOD_NAMESPACE,))
        logger.info("Cleared %d date-sensitive cache entries", count)
        return count

    def stats(self) -> dict:
        return {
            "size": len(self._entries),
            "keys": [render_key(k) for k in self._entries],
        }

    def __len__(self) -> int:
        return len(self._entries)


async def cached(
    cache: TTLCache,
    key: CacheKey,
    fetcher: Callable[[], Awaitable[T]],
    ttl: Optional[float] = None,
) -> T:
    """Read-through helper: return the cached value or await ``fetcher`` and store it"""
    hit = cache.get(key)
    if hit is not None:
        return hit

    value = await fetcher()
    # None is not cached so "absent" results are re-queried
    if value is not None:
        cache.set(key, value, ttl)
    return value
