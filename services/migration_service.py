"""
One-shot move of local-only data into the remote backend.
"""

import logging
from typing import List, Optional

from adapters.identity_adapter import CurrentUser, IdentityProvider
from app.config import Settings
from app.exceptions import ConfigurationError, MigrationError, StorageError
from core.cache import CacheKeys, TTLCache
from domain.enums import MigrationState
from domain.schemas import FoodEntry, LocalDataStatus, MigrationStatus
from repositories.local_repository import LocalFoodLogRepository
from services.food_log_service import FoodLogService

logger = logging.getLogger("snapcal.migration")

_ACTIVE_STATES = {
    MigrationState.UPLOADING,
    MigrationState.UPLOADING_SETTINGS,
    MigrationState.UPLOADING_PROFILE,
    MigrationState.CLEARING_LOCAL,
}


def chunk(entries: List[FoodEntry], size: int) -> List[List[FoodEntry]]:
    return [entries[i : i + size] for i in range(0, len(entries), size)]


class MigrationService:
    """
    Uploads every local entry, then settings and profile, then clears local state.

    Runs only when asked. Batches go up one after another; the first failing
    batch stops the run and local data is left exactly as it was, so the
    operation can simply be retried.

    States: IDLE -> UPLOADING -> UPLOADING_SETTINGS -> UPLOADING_PROFILE
    -> CLEARING_LOCAL -> DONE, or FAILED from any step.
    """

    def __init__(
        self,
        local_repository: LocalFoodLogRepository,
        remote_store: Optional[FoodLogService],
        identity: IdentityProvider,
        cache: TTLCache,
        settings: Settings,
    ):
        self.local_repository = local_repository
        self.remote_store = remote_store
        self.identity = identity
        self.cache = cache
        self.settings = settings
        self.status = MigrationStatus()

    async def has_local_data(self) -> bool:
        return self.local_repository.count_all_entries() > 0

    async def local_data_status(self) -> LocalDataStatus:
        count = self.local_repository.count_all_entries()
        return LocalDataStatus(has_local_data=count > 0, entry_count=count)

    def _fail(self, reason: str) -> None:
        self.status.state = MigrationState.FAILED
        self.status.reason = reason
        logger.error("Migration failed: %s", reason)

    async def sync_local_data_to_remote(self) -> MigrationStatus:
        """
        Run the migration.

        Raises:
            ConfigurationError: backend is not remote, nobody is signed in,
                or a run is already in progress
            MigrationError: an upload step failed; details name the first
                item (1-based) of the failing batch
        """
        if self.status.state in _ACTIVE_STATES:
            raise ConfigurationError("A sync is already in progress.", code="sync_in_progress")
        if not self.settings.use_remote or self.remote_store is None:
            raise ConfigurationError("Must be in cloud mode to sync.", code="not_cloud_mode")
        user = await self.identity.current_user()
        if user is None:
            raise ConfigurationError("Must be logged in to sync.", code="not_signed_in")

        self.status = MigrationStatus()
        try:
            return await self._run(user)
        except BaseException as e:
            # Anything escaping mid-run must not leave the run looking active
            if self.status.state in _ACTIVE_STATES:
                self._fail(str(e) or type(e).__name__)
            raise

    async def _run(self, user: CurrentUser) -> MigrationStatus:
        remote_repository = self.remote_store.repository
        entries = [
            e.model_copy(update={"user_id": user.id})
            for e in self.local_repository.all_entries()
        ]
        batch_size = self.settings.migration_batch_size
        batches = chunk(entries, batch_size)

        self.status.state = MigrationState.UPLOADING
        self.status.total_batches = len(batches)
        logger.info(
            "Migrating %d local entries in %d batches for user %s",
            len(entries),
            len(batches),
            user.id,
        )
        for number, batch in enumerate(batches, start=1):
            self.status.batch_index = number
            first_item = (number - 1) * batch_size + 1
            try:
                await remote_repository.upsert_entries(user.id, batch)
            except StorageError as e:
                self._fail(e.message)
                raise MigrationError(
                    f"Sync failed at item {first_item}: {e.message}",
                    details={
                        "item_index": first_item,
                        "batch": number,
                        "total_batches": len(batches),
                        "error_code": e.code,
                    },
                    cause=e,
                ) from e
            self.status.uploaded_entries += len(batch)
        if entries:
            self.remote_store.invalidate_food(user.id)

        self.status.state = MigrationState.UPLOADING_SETTINGS
        local_settings = self.local_repository.first_settings()
        try:
            if local_settings and local_settings.daily_goal:
                await self.remote_store.save_daily_goal(local_settings.daily_goal)
            if local_settings and local_settings.has_completed_onboarding:
                await self.remote_store.mark_onboarding_complete()
        except StorageError as e:
            self._fail(e.message)
            raise MigrationError(
                f"Sync failed while uploading settings: {e.message}",
                details={"stage": "settings", "error_code": e.code},
                cause=e,
            ) from e

        self.status.state = MigrationState.UPLOADING_PROFILE
        local_profile = self.local_repository.first_profile()
        try:
            if local_profile is not None:
                await self.remote_store.save_user_profile(local_profile)
        except StorageError as e:
            self._fail(e.message)
            raise MigrationError(
                f"Sync failed while uploading profile: {e.message}",
                details={"stage": "profile", "error_code": e.code},
                cause=e,
            ) from e

        self.status.state = MigrationState.CLEARING_LOCAL
        try:
            self.local_repository.clear_all()
        except OSError as e:
            self._fail(str(e))
            raise MigrationError(
                f"Uploaded, but local data could not be cleared: {e}",
                details={"stage": "clear_local"},
                cause=e,
            ) from e
        self.cache.invalidate_prefix(CacheKeys.user_food(user.id))
        self.cache.invalidate_prefix(CacheKeys.user_settings(user.id))

        self.status.state = MigrationState.DONE
        logger.info("Migration complete: %d entries uploaded", self.status.uploaded_entries)
        return self.status
