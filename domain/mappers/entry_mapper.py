"""
Meal log mappers.
Handles transformation between backend rows (ORM rows or local JSON dicts)
and the FoodEntry / DailySummary DTOs.
"""

from typing import Any, Iterable, Mapping, Optional, Tuple

from domain.schemas.food_log_schemas import FoodEntry, DailySummary
from domain.schemas.user_schemas import UserProfile

FULL_COLUMNS: Tuple[str, ...] = (
    "id",
    "user_id",
    "timestamp",
    "date",
    "time",
    "food_item",
    "calories",
    "protein",
    "carbs",
    "fat",
    "confidence",
    "image_url",
    "is_manual",
    "ingredients",
    "original_ai_response",
)

# List views: drop the heavy payloads
LITE_COLUMNS: Tuple[str, ...] = tuple(
    c for c in FULL_COLUMNS if c not in ("image_url", "original_ai_response")
)

# Aggregate-only callers
AGGREGATE_COLUMNS: Tuple[str, ...] = (
    "id",
    "user_id",
    "timestamp",
    "date",
    "time",
    "food_item",
    "calories",
    "protein",
    "carbs",
    "fat",
)

SUMMARY_FIELDS: Tuple[str, ...] = (
    "total_calories",
    "total_protein",
    "total_carbs",
    "total_fat",
)

PROFILE_FIELDS: Tuple[str, ...] = tuple(UserProfile.model_fields)


def summary_id(user_id: str, on_date) -> str:
    return f"{user_id}_{on_date}"


class EntryMapper:
    """Mapper for meal log transformations."""

    @staticmethod
    def to_entry(row: Mapping[str, Any], columns: Optional[Iterable[str]] = None) -> FoodEntry:
        """
        Build a FoodEntry from a backend row restricted to ``columns``.

        Missing macro fields default to zero and a missing ingredient list to
        empty, matching what older rows may hold.
        """
        wanted = tuple(columns) if columns is not None else FULL_COLUMNS
        data = {c: row.get(c) for c in wanted if c in row}
        return FoodEntry.model_validate(data)

    @staticmethod
    def to_row(entry: FoodEntry, user_id: str) -> dict:
        """Snake_case row for upsert, stamped with the owning user"""
        row = entry.model_dump(mode="json")
        row["user_id"] = user_id
        return row

    @staticmethod
    def to_orm_values(entry: FoodEntry, user_id: str) -> dict:
        """Like to_row but keeps ``date`` as a date object for SQLAlchemy"""
        row = entry.model_dump(mode="python")
        row["user_id"] = user_id
        return row

    @staticmethod
    def summarize(user_id: Optional[str], on_date, entries: Iterable[FoodEntry]) -> DailySummary:
        """Live totals for one date"""
        items = list(entries)
        return DailySummary(
            user_id=user_id,
            date=on_date,
            total_calories=sum(e.calories for e in items),
            total_protein=sum(e.protein or 0 for e in items),
            total_carbs=sum(e.carbs or 0 for e in items),
            total_fat=sum(e.fat or 0 for e in items),
            entry_count=len(items),
            archived=False,
        )

    @staticmethod
    def to_summary(row: Mapping[str, Any]) -> DailySummary:
        """Archived rollup row to DTO"""
        return DailySummary(
            user_id=row.get("user_id"),
            date=row["date"],
            total_calories=row.get("total_calories") or 0,
            total_protein=row.get("total_protein") or 0,
            total_carbs=row.get("total_carbs") or 0,
            total_fat=row.get("total_fat") or 0,
            entry_count=row.get("entry_count") or 0,
            archived=True,
        )

    @staticmethod
    def summary_row(summary: DailySummary) -> dict:
        row = summary.model_dump(mode="json", exclude={"archived"})
        row["id"] = summary_id(summary.user_id, row["date"])
        return row
