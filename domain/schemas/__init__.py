"""
Domain schemas package - Pydantic models for validation.
"""

from domain.schemas.food_log_schemas import (
    Ingredient,
    AiEstimateSnapshot,
    FoodEntry,
    DailySummary,
    EntryCount,
    CleanupReport,
    coerce_date,
)
from domain.schemas.user_schemas import UserProfile, UserSettings, DailyGoalUpdate
from domain.schemas.analysis_schemas import (
    AnalysisIngredient,
    AnalysisResult,
    safe_parse_ai_response,
)
from domain.schemas.sync_schemas import (
    SchemaCheckResult,
    MigrationStatus,
    LocalDataStatus,
)

__all__ = [
    # Meal log schemas
    "Ingredient",
    "AiEstimateSnapshot",
    "FoodEntry",
    "DailySummary",
    "EntryCount",
    "CleanupReport",
    "coerce_date",
    # User schemas
    "UserProfile",
    "UserSettings",
    "DailyGoalUpdate",
    # AI analysis schemas
    "AnalysisIngredient",
    "AnalysisResult",
    "safe_parse_ai_response",
    # Sync schemas
    "SchemaCheckResult",
    "MigrationStatus",
    "LocalDataStatus",
]
