"""
Rolling cleanup: archive old raw entries into per-day rollups.
"""

import datetime as dt
from collections import defaultdict
from typing import Callable, Dict, List, Optional

from adapters.identity_adapter import IdentityProvider
from app.config import Settings
from core.base.base_service import BaseService
from core.cache import CacheKeys, TTLCache
from domain.mappers import AGGREGATE_COLUMNS, EntryMapper
from domain.schemas import CleanupReport, FoodEntry
from repositories.base import FoodLogRepository


class CleanupService(BaseService[FoodLogRepository]):
    """
    Best-effort background sweep, run once per authenticated session start.

    For every date strictly older than ``retention_days`` before today, the
    rollup is written first and only then are the raw entries deleted. A
    crash between the two leaves the raw rows in place; the next sweep
    recomputes the same totals and overwrites the rollup, so nothing is lost
    and nothing is counted twice.
    """

    def __init__(
        self,
        repository: FoodLogRepository,
        cache: TTLCache,
        identity: IdentityProvider,
        settings: Settings,
        today: Callable[[], dt.date] = dt.date.today,
    ):
        super().__init__("snapcal.cleanup", repository, cache, identity, settings)
        self._today = today

    async def perform_data_cleanup(self, today: Optional[dt.date] = None) -> CleanupReport:
        """
        Archive eligible dates for the signed-in user.

        ``today`` is read once at the start; a sweep running across midnight
        keeps the threshold it started with. Never raises.
        """
        today = today or self._today()
        threshold = today - dt.timedelta(days=self.settings.retention_days)
        report = CleanupReport(today=today, threshold=threshold)

        try:
            user_id = await self.current_user_id()
            if not user_id:
                return report
            old_entries = await self.repository.list_entries(
                user_id, AGGREGATE_COLUMNS, before=threshold
            )
        except Exception as e:
            self.log_warning("Cleanup skipped", error=e)
            return report

        if not old_entries:
            return report

        grouped: Dict[dt.date, List[FoodEntry]] = defaultdict(list)
        for entry in old_entries:
            grouped[entry.date].append(entry)

        for day in sorted(grouped):
            day_entries = grouped[day]
            try:
                summary = EntryMapper.summarize(user_id, day, day_entries)
                await self.repository.upsert_summary(summary)
                await self.repository.delete_entries_for_date(user_id, day)
            except Exception as e:
                self.log_warning("Archiving failed; will retry next session", date=day, error=e)
                report.failed_dates.append(day)
                continue
            report.archived_dates.append(day)
            report.archived_entries += len(day_entries)

        if report.archived_dates or report.failed_dates:
            self.cache.invalidate_prefix(CacheKeys.user_food(user_id))
        self.log_info(
            "Cleanup finished",
            archived=len(report.archived_dates),
            failed=len(report.failed_dates),
            threshold=threshold,
        )
        return report
