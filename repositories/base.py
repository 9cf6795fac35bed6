"""
Base repository interface for the meal log data access layer.
This follows the Repository pattern to separate business logic from data access:
one interface, one implementation per storage backend, chosen at startup.
"""

import datetime as dt
from abc import ABC, abstractmethod
from typing import List, Optional, Sequence

from domain.mappers import FULL_COLUMNS
from domain.schemas import (
    DailySummary,
    FoodEntry,
    SchemaCheckResult,
    UserProfile,
    UserSettings,
)


class FoodLogRepository(ABC):
    """
    Backend operations for entries, rollups, settings and profiles.

    Every method is scoped by the owning user id. Implementations raise only
    StorageError subclasses for backend failures.
    """

    #: Row cap applied to full listings; None means unbounded
    list_limit: Optional[int] = None
    #: Short backend name for logs
    backend_name: str = "base"

    # Entries

    @abstractmethod
    async def upsert_entry(self, user_id: str, entry: FoodEntry) -> None:
        """Insert or replace the entry with the same id"""

    @abstractmethod
    async def upsert_entries(self, user_id: str, entries: Sequence[FoodEntry]) -> None:
        """Insert or replace a batch of entries as one write"""

    @abstractmethod
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
        """
        Entries newest first by timestamp.

        ``start``/``end`` bound the half-open interval [start, end);
        ``before`` keeps dates strictly earlier than the given date.
        """

    @abstractmethod
    async def count_entries(self, user_id: str, on_date: dt.date) -> int:
        """Exact number of entries on a date"""

    @abstractmethod
    async def get_entry_image(self, user_id: str, entry_id: str) -> Optional[str]:
        """Encoded image of one entry, or None"""

    @abstractmethod
    async def delete_entry(self, user_id: str, entry_id: str) -> bool:
        """Delete one entry; False when nothing matched"""

    @abstractmethod
    async def clear_entry_image(self, user_id: str, entry_id: str) -> bool:
        """Drop the stored image of one entry; False when nothing matched"""

    @abstractmethod
    async def delete_entries_for_date(self, user_id: str, on_date: dt.date) -> int:
        """Delete all raw entries of a user on one date"""

    # Archived rollups

    @abstractmethod
    async def list_summaries(
        self,
        user_id: str,
        start: Optional[dt.date] = None,
        end: Optional[dt.date] = None,
    ) -> List[DailySummary]:
        """Persisted rollups, optionally limited to [start, end)"""

    @abstractmethod
    async def upsert_summary(self, summary: DailySummary) -> None:
        """Insert or overwrite the rollup for (user, date)"""

    # Settings and profile

    @abstractmethod
    async def get_settings(self, user_id: str) -> Optional[UserSettings]:
        pass

    @abstractmethod
    async def save_settings(self, user_id: str, **fields) -> None:
        """Upsert only the given settings fields"""

    @abstractmethod
    async def get_profile(self, user_id: str) -> Optional[UserProfile]:
        pass

    @abstractmethod
    async def save_profile(self, user_id: str, profile: UserProfile) -> None:
        pass

    # Diagnostics

    @abstractmethod
    async def check_schema(self) -> SchemaCheckResult:
        """Report whether required tables exist"""
