"""
Centralized wiring of the storage layer.

The backend is selected once, at construction time, from Settings; every
service receives the same cache, identity provider and repository.
"""

import datetime as dt
import logging
from dataclasses import dataclass, field
from typing import Callable, Optional, Set, Tuple

from sqlalchemy.engine import Engine

from adapters.identity_adapter import IdentityProvider, StaticIdentityProvider
from adapters.local_adapter import LocalKeyValueStore
from app.config import Settings
from core.cache import TTLCache
from domain.models import create_remote_engine, create_session_factory, init_database
from domain.schemas import CleanupReport
from repositories import (
    FoodLogRepository,
    LocalFoodLogRepository,
    RemoteFoodLogRepository,
)
from services import CleanupService, FoodLogService, MigrationService, SummaryService

logger = logging.getLogger("snapcal.dependencies")


@dataclass
class StorageContainer:
    settings: Settings
    cache: TTLCache
    identity: IdentityProvider
    local_store: LocalKeyValueStore
    local_repository: LocalFoodLogRepository
    repository: FoodLogRepository
    food_log: FoodLogService
    summaries: SummaryService
    cleanup: CleanupService
    migration: MigrationService
    engine: Optional[Engine] = None
    today: Callable[[], dt.date] = dt.date.today
    _swept: Set[Tuple[str, dt.date]] = field(default_factory=set, repr=False)

    @property
    def uses_remote(self) -> bool:
        return self.engine is not None

    async def on_authenticated_load(self) -> CleanupReport:
        """Session-lifecycle hook: run the archival sweep (never raises)"""
        return await self.cleanup.perform_data_cleanup()

    async def sweep_once_per_day(self, user_id: str) -> Optional[CleanupReport]:
        """
        Run on_authenticated_load the first time ``user_id`` is seen each day.

        Dates that failed to archive leave the user unmarked so the next
        request tries again.
        """
        key = (user_id, self.today())
        if key in self._swept:
            return None
        self._swept.add(key)
        report = await self.on_authenticated_load()
        if report.failed_dates:
            self._swept.discard(key)
        return report

    def on_day_rollover(self) -> None:
        """Local midnight: per-date caches now point at the wrong 'today'"""
        self.cache.clear_date_sensitive()

    def close(self) -> None:
        if self.engine is not None:
            self.engine.dispose()


def build_container(
    settings: Settings,
    identity: Optional[IdentityProvider] = None,
    local_store: Optional[LocalKeyValueStore] = None,
    engine: Optional[Engine] = None,
    cache: Optional[TTLCache] = None,
    create_tables: bool = True,
    today: Callable[[], dt.date] = dt.date.today,
) -> StorageContainer:
    """
    Build the storage layer for ``settings``.

    Remote is selected only when ``settings.use_remote`` is true; the local
    store is always built because migration reads from it.
    """
    identity = identity or StaticIdentityProvider()
    cache = cache or TTLCache(default_ttl=settings.cache_default_ttl_sec)
    local_store = local_store or LocalKeyValueStore(
        settings.local_store_path, quota_bytes=settings.local_quota_bytes
    )
    local_repository = LocalFoodLogRepository(local_store)

    repository: FoodLogRepository = local_repository
    remote_service: Optional[FoodLogService] = None
    if settings.use_remote:
        engine = engine or create_remote_engine(settings.remote_database_url, settings.db_echo)
        if create_tables:
            init_database(engine)
        repository = RemoteFoodLogRepository(
            create_session_factory(engine), list_limit=settings.remote_list_limit
        )
        logger.info("Using remote storage backend")
    else:
        engine = None
        if settings.remote_configured:
            logger.info("Remote database configured but local storage preferred.")
        else:
            logger.info("No remote database configured. Using local storage.")

    food_log = FoodLogService(repository, cache, identity, settings)
    if engine is not None:
        remote_service = food_log

    return StorageContainer(
        settings=settings,
        cache=cache,
        identity=identity,
        local_store=local_store,
        local_repository=local_repository,
        repository=repository,
        food_log=food_log,
        summaries=SummaryService(repository, cache, identity, settings),
        cleanup=CleanupService(repository, cache, identity, settings, today=today),
        migration=MigrationService(local_repository, remote_service, identity, cache, settings),
        engine=engine,
        today=today,
    )
