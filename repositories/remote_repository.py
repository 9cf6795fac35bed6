"""
Remote Repository - meal log data in the relational backend.

Each operation runs a short SQLAlchemy session in a worker thread, so the
calling coroutine suspends on the database round trip. Every database failure
is re-raised as one of the remote StorageError kinds.
"""

import datetime as dt
import logging
from typing import Callable, List, Optional, Sequence, TypeVar

import anyio
from sqlalchemy import delete, func, select, update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, sessionmaker

from app.exceptions import SchemaMissingError, StorageError, classify_remote_error
from domain.mappers import EntryMapper, FULL_COLUMNS, PROFILE_FIELDS, summary_id
from domain.models import (
    DailySummaryRow,
    FoodEntryRow,
    UserProfileRow,
    UserSettingsRow,
)
from domain.schemas import (
    DailySummary,
    FoodEntry,
    SchemaCheckResult,
    UserProfile,
    UserSettings,
)
from repositories.base import FoodLogRepository

logger = logging.getLogger("snapcal.repository.remote")

T = TypeVar("T")

REQUIRED_TABLES = (FoodEntryRow, DailySummaryRow, UserSettingsRow, UserProfileRow)


class RemoteFoodLogRepository(FoodLogRepository):
    """Repository backed by SQLAlchemy sessions against the remote database"""

    backend_name = "remote"

    def __init__(self, session_factory: sessionmaker, list_limit: Optional[int] = 200):
        self.session_factory = session_factory
        self.list_limit = list_limit

    # ------------------------------------------------------------------
    # Session plumbing
    # ------------------------------------------------------------------

    def _execute(self, operation: str, work: Callable[[Session], T]) -> T:
        session = self.session_factory()
        try:
            result = work(session)
            session.commit()
            return result
        except SQLAlchemyError as e:
            session.rollback()
            logger.error("Remote %s failed: %s", operation, getattr(e, "orig", e))
            raise classify_remote_error(e, operation) from e
        except Exception:
            session.rollback()
            raise
        finally:
            session.close()

    async def _run(self, operation: str, work: Callable[[Session], T]) -> T:
        return await anyio.to_thread.run_sync(self._execute, operation, work)

    # ------------------------------------------------------------------
    # Entries
    # ------------------------------------------------------------------

    async def upsert_entry(self, user_id: str, entry: FoodEntry) -> None:
        await self.upsert_entries(user_id, [entry])

    async def upsert_entries(self, user_id: str, entries: Sequence[FoodEntry]) -> None:
        values = [EntryMapper.to_orm_values(e, user_id) for e in entries]

        def work(session: Session) -> None:
            for v in values:
                session.merge(FoodEntryRow(**v))

        await self._run("Save Entry", work)

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
        cols = tuple(columns)
        stmt = select(*[getattr(FoodEntryRow, c) for c in cols]).where(
            FoodEntryRow.user_id == user_id
        )
        if on_date is not None:
            stmt = stmt.where(FoodEntryRow.date == on_date)
        if start is not None:
            stmt = stmt.where(FoodEntryRow.date >= start)
        if end is not None:
            stmt = stmt.where(FoodEntryRow.date < end)
        if before is not None:
            stmt = stmt.where(FoodEntryRow.date < before)
        stmt = stmt.order_by(FoodEntryRow.timestamp.desc())
        if limit is not None:
            stmt = stmt.limit(limit)

        def work(session: Session) -> List[dict]:
            return [dict(row._mapping) for row in session.execute(stmt)]

        rows = await self._run("Fetch Entries", work)
        return [EntryMapper.to_entry(r, cols) for r in rows]

    async def count_entries(self, user_id: str, on_date: dt.date) -> int:
        stmt = (
            select(func.count())
            .select_from(FoodEntryRow)
            .where(FoodEntryRow.user_id == user_id, FoodEntryRow.date == on_date)
        )
        return await self._run("Count Entries", lambda s: int(s.execute(stmt).scalar_one()))

    async def get_entry_image(self, user_id: str, entry_id: str) -> Optional[str]:
        stmt = select(FoodEntryRow.image_url).where(
            FoodEntryRow.id == entry_id, FoodEntryRow.user_id == user_id
        )
        return await self._run("Fetch Image", lambda s: s.execute(stmt).scalar_one_or_none())

    async def delete_entry(self, user_id: str, entry_id: str) -> bool:
        stmt = delete(FoodEntryRow).where(
            FoodEntryRow.id == entry_id, FoodEntryRow.user_id == user_id
        )
        return await self._run("Delete Entry", lambda s: s.execute(stmt).rowcount > 0)

    async def clear_entry_image(self, user_id: str, entry_id: str) -> bool:
        stmt = (
            update(FoodEntryRow)
            .where(FoodEntryRow.id == entry_id, FoodEntryRow.user_id == user_id)
            .values(image_url=None)
        )
        return await self._run("Clear Image", lambda s: s.execute(stmt).rowcount > 0)

    async def delete_entries_for_date(self, user_id: str, on_date: dt.date) -> int:
        stmt = delete(FoodEntryRow).where(
            FoodEntryRow.user_id == user_id, FoodEntryRow.date == on_date
        )
        return await self._run("Delete Day", lambda s: s.execute(stmt).rowcount)

    # ------------------------------------------------------------------
    # Rollups
    # ------------------------------------------------------------------

    async def list_summaries(
        self,
        user_id: str,
        start: Optional[dt.date] = None,
        end: Optional[dt.date] = None,
    ) -> List[DailySummary]:
        stmt = select(DailySummaryRow).where(DailySummaryRow.user_id == user_id)
        if start is not None:
            stmt = stmt.where(DailySummaryRow.date >= start)
        if end is not None:
            stmt = stmt.where(DailySummaryRow.date < end)

        def work(session: Session) -> List[DailySummary]:
            return [
                EntryMapper.to_summary(
                    {c.name: getattr(row, c.name) for c in DailySummaryRow.__table__.columns}
                )
                for row in session.scalars(stmt)
            ]

        return await self._run("Fetch Summaries", work)

    async def upsert_summary(self, summary: DailySummary) -> None:
        values = dict(
            id=summary_id(summary.user_id, summary.date.isoformat()),
            user_id=summary.user_id,
            date=summary.date,
            total_calories=summary.total_calories,
            total_protein=summary.total_protein,
            total_carbs=summary.total_carbs,
            total_fat=summary.total_fat,
            entry_count=summary.entry_count,
        )
        await self._run("Save Summary", lambda s: s.merge(DailySummaryRow(**values)))

    # ------------------------------------------------------------------
    # Settings and profile
    # ------------------------------------------------------------------

    async def get_settings(self, user_id: str) -> Optional[UserSettings]:
        def work(session: Session) -> Optional[UserSettings]:
            row = session.get(UserSettingsRow, user_id)
            if row is None:
                return None
            return UserSettings(
                daily_goal=row.daily_goal,
                has_completed_onboarding=bool(row.has_completed_onboarding),
            )

        return await self._run("Fetch Settings", work)

    async def save_settings(self, user_id: str, **fields) -> None:
        def work(session: Session) -> None:
            row = session.get(UserSettingsRow, user_id)
            if row is None:
                row = UserSettingsRow(user_id=user_id)
                session.add(row)
            for name, value in fields.items():
                setattr(row, name, value)

        await self._run("Save Settings", work)

    async def get_profile(self, user_id: str) -> Optional[UserProfile]:
        def work(session: Session) -> Optional[UserProfile]:
            row = session.get(UserProfileRow, user_id)
            if row is None or not row.name:
                return None
            return UserProfile.model_validate(row)

        return await self._run("Fetch Profile", work)

    async def save_profile(self, user_id: str, profile: UserProfile) -> None:
        values = {name: getattr(profile, name) for name in PROFILE_FIELDS}
        await self._run(
            "Save Profile", lambda s: s.merge(UserProfileRow(user_id=user_id, **values))
        )

    # ------------------------------------------------------------------
    # Diagnostics
    # ------------------------------------------------------------------

    async def check_schema(self) -> SchemaCheckResult:
        missing = []
        for model in REQUIRED_TABLES:
            pk = list(model.__table__.primary_key.columns)[0]
            stmt = select(pk).limit(1)
            try:
                await self._run("Schema Check", lambda s, stmt=stmt: s.execute(stmt).first())
            except SchemaMissingError:
                missing.append(model.__tablename__)
            except StorageError as e:
                return SchemaCheckResult(ok=False, error=e.message)
        if missing:
            return SchemaCheckResult(
                ok=False, missing_tables=True, error=f"Tables missing: {', '.join(missing)}"
            )
        return SchemaCheckResult(ok=True)
