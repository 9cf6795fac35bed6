"""
Local Repository - meal log data kept in the device key/value store.

Layout: four independent keys (entries array, rollup array, settings map,
profile map) so clearing one never disturbs another.
"""

import datetime as dt
import logging
from typing import Callable, List, Optional, Sequence

from adapters.local_adapter import LocalKeyValueStore, QuotaExceededError
from app.exceptions import LocalStorageFullError
from domain.mappers import EntryMapper, FULL_COLUMNS
from domain.schemas import (
    DailySummary,
    FoodEntry,
    SchemaCheckResult,
    UserProfile,
    UserSettings,
)
from repositories.base import FoodLogRepository

logger = logging.getLogger("snapcal.repository.local")

ENTRIES_KEY = "snapcal_data_v1"
SUMMARIES_KEY = "snapcal_summaries_v1"
SETTINGS_KEY = "snapcal_settings_v1"
PROFILE_KEY = "snapcal_profile_v1"

ALL_KEYS = (ENTRIES_KEY, SUMMARIES_KEY, SETTINGS_KEY, PROFILE_KEY)


def _in_window(
    day: str,
    on_date: Optional[dt.date],
    start: Optional[dt.date],
    end: Optional[dt.date],
    before: Optional[dt.date],
) -> bool:
    # ISO dates compare correctly as strings
    if on_date is not None and day != on_date.isoformat():
        return False
    if start is not None and day < start.isoformat():
        return False
    if end is not None and day >= end.isoformat():
        return False
    if before is not None and day >= before.isoformat():
        return False
    return True


class LocalFoodLogRepository(FoodLogRepository):
    """Repository backed by LocalKeyValueStore"""

    backend_name = "local"
    list_limit = None

    def __init__(self, store: LocalKeyValueStore):
        self.store = store

    # ------------------------------------------------------------------
    # Raw access
    # ------------------------------------------------------------------

    def _entries(self) -> List[dict]:
        data = self.store.get_json(ENTRIES_KEY, [])
        return data if isinstance(data, list) else []

    def _summaries(self) -> List[dict]:
        data = self.store.get_json(SUMMARIES_KEY, [])
        return data if isinstance(data, list) else []

    def _map(self, key: str) -> dict:
        data = self.store.get_json(key, {})
        return data if isinstance(data, dict) else {}

    def _write(self, key: str, value) -> None:
        try:
            self.store.set_json(key, value)
        except QuotaExceededError as e:
            logger.warning("Local store full while writing %s: %s", key, e)
            raise LocalStorageFullError(
                details={"key": key, "required_bytes": e.required, "quota_bytes": e.quota}
            ) from e

    def _update_entries(self, mutate: Callable[[List[dict]], List[dict]]) -> None:
        self._write(ENTRIES_KEY, mutate(self._entries()))

    # ------------------------------------------------------------------
    # Entries
    # ------------------------------------------------------------------

    async def upsert_entry(self, user_id: str, entry: FoodEntry) -> None:
        await self.upsert_entries(user_id, [entry])

    async def upsert_entries(self, user_id: str, entries: Sequence[FoodEntry]) -> None:
        incoming = [EntryMapper.to_row(e, user_id) for e in entries]

        def mutate(rows: List[dict]) -> List[dict]:
            index = {r.get("id"): i for i, r in enumerate(rows)}
            for row in incoming:
                pos = index.get(row["id"])
                if pos is not None:
                    rows[pos] = row
                else:
                    index[row["id"]] = len(rows)
                    rows.append(row)
            return rows

        self._update_entries(mutate)

    async def list_entries(
        self,
        user_id: str,
        columns: Sequence[str] = FULL_COLUMNS,
        on_date: Optional[dt.date] = None,
        start: Optional[dt.date] = None,
        end: Optional[dt.date] = None,
        before: Optional[dt.date] = None,
        limit: Optional[int] = None,
    ) -> List[FoodEntry]:
        rows = [
            r
            for r in self._entries()
            if r.get("user_id") == user_id
            and _in_window(str(r.get("date", "")), on_date, start, end, before)
        ]
        rows.sort(key=lambda r: str(r.get("timestamp", "")), reverse=True)
        if limit is not None:
            rows = rows[:limit]
        return [EntryMapper.to_entry(r, columns) for r in rows]

    async def count_entries(self, user_id: str, on_date: dt.date) -> int:
        day = on_date.isoformat()
        return sum(
            1 for r in self._entries() if r.get("user_id") == user_id and r.get("date") == day
        )

    async def get_entry_image(self, user_id: str, entry_id: str) -> Optional[str]:
        for r in self._entries():
            if r.get("id") == entry_id and r.get("user_id") == user_id:
                return r.get("image_url")
        return None

    async def delete_entry(self, user_id: str, entry_id: str) -> bool:
        rows = self._entries()
        remaining = [r for r in rows if not (r.get("id") == entry_id and r.get("user_id") == user_id)]
        if len(remaining) == len(rows):
            return False
        self._write(ENTRIES_KEY, remaining)
        return True

    async def clear_entry_image(self, user_id: str, entry_id: str) -> bool:
        rows = self._entries()
        found = False
        for r in rows:
            if r.get("id") == entry_id and r.get("user_id") == user_id:
                r["image_url"] = None
                found = True
        if found:
            self._write(ENTRIES_KEY, rows)
        return found

    async def delete_entries_for_date(self, user_id: str, on_date: dt.date) -> int:
        day = on_date.isoformat()
        rows = self._entries()
        remaining = [r for r in rows if not (r.get("user_id") == user_id and r.get("date") == day)]
        removed = len(rows) - len(remaining)
        if removed:
            self._write(ENTRIES_KEY, remaining)
        return removed

    # ------------------------------------------------------------------
    # Rollups
    # ------------------------------------------------------------------

    async def list_summaries(
        self,
        user_id: str,
        start: Optional[dt.date] = None,
        end: Optional[dt.date] = None,
    ) -> List[DailySummary]:
        return [
            EntryMapper.to_summary(s)
            for s in self._summaries()
            if s.get("user_id") == user_id
            and _in_window(str(s.get("date", "")), None, start, end, None)
        ]

    async def upsert_summary(self, summary: DailySummary) -> None:
        row = EntryMapper.summary_row(summary)
        rows = [s for s in self._summaries() if s.get("id") != row["id"]]
        rows.append(row)
        self._write(SUMMARIES_KEY, rows)

    # ------------------------------------------------------------------
    # Settings and profile
    # ------------------------------------------------------------------

    async def get_settings(self, user_id: str) -> Optional[UserSettings]:
        raw = self._map(SETTINGS_KEY).get(user_id)
        if raw is None:
            return None
        if not isinstance(raw, dict):
            # Older layout stored the bare goal number
            raw = {"daily_goal": raw}
        return UserSettings.model_validate(raw)

    async def save_settings(self, user_id: str, **fields) -> None:
        settings_map = self._map(SETTINGS_KEY)
        current = settings_map.get(user_id)
        if not isinstance(current, dict):
            current = {} if current is None else {"daily_goal": current}
        current.update(fields)
        settings_map[user_id] = current
        self._write(SETTINGS_KEY, settings_map)

    async def get_profile(self, user_id: str) -> Optional[UserProfile]:
        raw = self._map(PROFILE_KEY).get(user_id)
        return UserProfile.model_validate(raw) if raw else None

    async def save_profile(self, user_id: str, profile: UserProfile) -> None:
        profiles = self._map(PROFILE_KEY)
        profiles[user_id] = profile.model_dump(mode="json")
        self._write(PROFILE_KEY, profiles)

    async def check_schema(self) -> SchemaCheckResult:
        return SchemaCheckResult(ok=True)

    # ------------------------------------------------------------------
    # Migration support
    # ------------------------------------------------------------------

    def count_all_entries(self) -> int:
        return len(self._entries())

    def all_entries(self) -> List[FoodEntry]:
        """Every stored entry regardless of owner or date, oldest first"""
        rows = sorted(self._entries(), key=lambda r: str(r.get("timestamp", "")))
        return [EntryMapper.to_entry(r) for r in rows]

    def first_settings(self) -> Optional[UserSettings]:
        for raw in self._map(SETTINGS_KEY).values():
            if raw:
                return UserSettings.model_validate(raw if isinstance(raw, dict) else {"daily_goal": raw})
        return None

    def first_profile(self) -> Optional[UserProfile]:
        for raw in self._map(PROFILE_KEY).values():
            if raw:
                return UserProfile.model_validate(raw)
        return None

    def clear_all(self) -> None:
        for key in ALL_KEYS:
            self.store.remove_item(key)
        logger.info("Cleared local meal log data")
