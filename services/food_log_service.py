"""
Food log service: cached reads and invalidating writes over the selected backend.
"""

import datetime as dt
from typing import List, Optional, Union

from adapters.identity_adapter import IdentityProvider
from app.config import Settings
from core.base.base_service import BaseService
from core.cache import CacheKeys, TTLCache, cached
from domain.mappers import FULL_COLUMNS, LITE_COLUMNS
from domain.schemas import (
    FoodEntry,
    SchemaCheckResult,
    UserProfile,
    coerce_date,
)
from repositories.base import FoodLogRepository

DateLike = Union[dt.date, str]


class FoodLogService(BaseService[FoodLogRepository]):
    """
    Record store used by callers.

    Every call looks up the signed-in user first. Reads go through the TTL
    cache; writes hit the backend and, once the write has completed, drop the
    user's whole ``food`` cache namespace, since one write can change several
    derived views (the day list, the lite list, the day's totals).
    """

    def __init__(
        self,
        repository: FoodLogRepository,
        cache: TTLCache,
        identity: IdentityProvider,
        settings: Settings,
    ):
        super().__init__("snapcal.food_log", repository, cache, identity, settings)

    def invalidate_food(self, user_id: str) -> None:
        self.cache.invalidate_prefix(CacheKeys.user_food(user_id))

    # ------------------------------------------------------------------
    # Writes
    # ------------------------------------------------------------------

    async def save_entry(self, entry: FoodEntry) -> FoodEntry:
        """
        Insert or replace an entry (matched by id) for the signed-in user.

        Returns the stored entry, stamped with the owner id.

        Raises:
            UnauthorizedError: nobody is signed in
            StorageError: backend failure (see app.exceptions)
        """
        user_id = await self.require_user_id("save")
        stored = entry.model_copy(update={"user_id": user_id})
        await self.repository.upsert_entry(user_id, stored)
        self.invalidate_food(user_id)
        self.log_info("Saved entry", entry_id=stored.id, date=stored.date, backend=self.repository.backend_name)
        return stored

    async def delete_entry(self, entry_id: str) -> bool:
        user_id = await self.require_user_id("delete entries")
        deleted = await self.repository.delete_entry(user_id, entry_id)
        self.invalidate_food(user_id)
        return deleted

    async def clear_entry_image(self, entry_id: str) -> bool:
        """Drop the photo of an entry to free space; the entry itself stays"""
        user_id = await self.require_user_id("edit entries")
        cleared = await self.repository.clear_entry_image(user_id, entry_id)
        self.invalidate_food(user_id)
        return cleared

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    async def get_entries(self) -> List[FoodEntry]:
        """All entries, newest first, with images and AI snapshots"""
        user_id = await self.current_user_id()
        if not user_id:
            return []
        return await cached(
            self.cache,
            CacheKeys.entries(user_id),
            lambda: self.repository.list_entries(
                user_id, FULL_COLUMNS, limit=self.repository.list_limit
            ),
            self.settings.cache_default_ttl_sec,
        )

    async def get_entries_lite(self) -> List[FoodEntry]:
        """Same as get_entries without image and AI snapshot payloads"""
        user_id = await self.current_user_id()
        if not user_id:
            return []
        return await cached(
            self.cache,
            CacheKeys.entries_lite(user_id),
            lambda: self.repository.list_entries(
                user_id, LITE_COLUMNS, limit=self.repository.list_limit
            ),
            self.settings.cache_default_ttl_sec,
        )

    async def get_entries_for_date(self, on_date: DateLike) -> List[FoodEntry]:
        user_id = await self.current_user_id()
        if not user_id:
            return []
        day = coerce_date(on_date)
        return await cached(
            self.cache,
            CacheKeys.entries_for_date(user_id, day.isoformat()),
            lambda: self.repository.list_entries(user_id, LITE_COLUMNS, on_date=day),
            self.settings.cache_date_ttl_sec,
        )

    async def count_entries_for_date(self, on_date: DateLike) -> int:
        user_id = await self.current_user_id()
        if not user_id:
            return 0
        day = coerce_date(on_date)
        return await cached(
            self.cache,
            CacheKeys.entry_count(user_id, day.isoformat()),
            lambda: self.repository.count_entries(user_id, day),
            self.settings.cache_date_ttl_sec,
        )

    async def get_entry_image(self, entry_id: str) -> Optional[str]:
        user_id = await self.current_user_id()
        if not user_id:
            return None
        return await cached(
            self.cache,
            CacheKeys.entry_image(user_id, entry_id),
            lambda: self.repository.get_entry_image(user_id, entry_id),
            self.settings.cache_image_ttl_sec,
        )

    # ------------------------------------------------------------------
    # Settings and profile
    # ------------------------------------------------------------------

    async def get_daily_goal(self) -> int:
        user_id = await self.current_user_id()
        if not user_id:
            return self.settings.default_daily_goal

        async def fetch() -> int:
            stored = await self.repository.get_settings(user_id)
            if stored is None or not stored.daily_goal:
                return self.settings.default_daily_goal
            return stored.daily_goal

        return await cached(
            self.cache, CacheKeys.daily_goal(user_id), fetch, self.settings.cache_user_ttl_sec
        )

    async def save_daily_goal(self, goal: int) -> None:
        user_id = await self.require_user_id("save settings")
        await self.repository.save_settings(user_id, daily_goal=int(goal))
        self.cache.invalidate(CacheKeys.daily_goal(user_id))

    async def get_user_profile(self) -> Optional[UserProfile]:
        user_id = await self.current_user_id()
        if not user_id:
            return None
        return await cached(
            self.cache,
            CacheKeys.user_profile(user_id),
            lambda: self.repository.get_profile(user_id),
            self.settings.cache_user_ttl_sec,
        )

    async def save_user_profile(self, profile: UserProfile) -> None:
        user_id = await self.require_user_id("save a profile")
        await self.repository.save_profile(user_id, profile)
        self.cache.invalidate(CacheKeys.user_profile(user_id))

    async def has_completed_onboarding(self) -> bool:
        user_id = await self.current_user_id()
        if not user_id:
            return False

        # Only a positive answer is stable enough to cache
        if self.cache.get(CacheKeys.onboarding(user_id)):
            return True
        stored = await self.repository.get_settings(user_id)
        completed = bool(stored and stored.has_completed_onboarding)
        if completed:
            self.cache.set(CacheKeys.onboarding(user_id), True, self.settings.cache_user_ttl_sec)
        return completed

    async def mark_onboarding_complete(self) -> None:
        user_id = await self.require_user_id("finish onboarding")
        await self.repository.save_settings(user_id, has_completed_onboarding=True)
        self.cache.set(CacheKeys.onboarding(user_id), True, self.settings.cache_user_ttl_sec)

    # ------------------------------------------------------------------
    # Diagnostics
    # ------------------------------------------------------------------

    async def check_database_schema(self) -> SchemaCheckResult:
        """Report whether the remote tables exist; always ok for the local backend"""
        if not await self.current_user_id():
            return SchemaCheckResult(ok=True)
        result = await self.repository.check_schema()
        if not result.ok:
            self.log_warning("Schema check failed", error=result.error)
        return result
