"""
Daily totals: live sums over current entries merged with archived rollups.
"""

import datetime as dt
from collections import defaultdict
from typing import Dict, Iterable, List, Optional, Union

from adapters.identity_adapter import IdentityProvider
from app.config import Settings
from core.base.base_service import BaseService
from core.cache import CacheKeys, TTLCache, cached
from domain.mappers import AGGREGATE_COLUMNS, EntryMapper
from domain.schemas import DailySummary, FoodEntry, coerce_date
from repositories.base import FoodLogRepository

DateLike = Union[dt.date, str]


def merge_summaries(
    user_id: str, entries: Iterable[FoodEntry], stored: Iterable[DailySummary]
) -> List[DailySummary]:
    """
    One summary per date, most recent first.

    A date with live entries is summed from those entries even when a rollup
    exists for it; the rollup is only used for dates whose raw entries are gone.
    """
    by_date: Dict[dt.date, DailySummary] = {s.date: s for s in stored}

    grouped: Dict[dt.date, List[FoodEntry]] = defaultdict(list)
    for entry in entries:
        grouped[entry.date].append(entry)
    for day, day_entries in grouped.items():
        by_date[day] = EntryMapper.summarize(user_id, day, day_entries)

    return sorted(by_date.values(), key=lambda s: s.date, reverse=True)


class SummaryService(BaseService[FoodLogRepository]):
    """Aggregation over the selected backend, cached in the ``food`` namespace"""

    def __init__(
        self,
        repository: FoodLogRepository,
        cache: TTLCache,
        identity: IdentityProvider,
        settings: Settings,
    ):
        super().__init__("snapcal.summaries", repository, cache, identity, settings)

    async def _build(
        self, user_id: str, start: Optional[dt.date] = None, end: Optional[dt.date] = None
    ) -> List[DailySummary]:
        entries = await self.repository.list_entries(
            user_id, AGGREGATE_COLUMNS, start=start, end=end
        )
        stored = await self.repository.list_summaries(user_id, start=start, end=end)
        return merge_summaries(user_id, entries, stored)

    async def get_daily_summaries(self) -> List[DailySummary]:
        """Every date with entries or a rollup for the signed-in user"""
        user_id = await self.current_user_id()
        if not user_id:
            return []
        return await cached(
            self.cache,
            CacheKeys.summaries(user_id),
            lambda: self._build(user_id),
            self.settings.cache_default_ttl_sec,
        )

    async def get_daily_summaries_for_range(
        self, start: DateLike, end: DateLike
    ) -> List[DailySummary]:
        """Same merge rule restricted to dates in [start, end)"""
        user_id = await self.current_user_id()
        if not user_id:
            return []
        first, stop = coerce_date(start), coerce_date(end)
        if stop <= first:
            return []
        return await cached(
            self.cache,
            CacheKeys.summaries_for_range(user_id, first.isoformat(), stop.isoformat()),
            lambda: self._build(user_id, first, stop),
            self.settings.cache_default_ttl_sec,
        )
