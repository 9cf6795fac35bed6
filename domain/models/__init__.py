"""
Domain models package - SQLAlchemy ORM models for the remote backend.
"""

from domain.models.database import (
    Base,
    create_remote_engine,
    create_session_factory,
    init_database,
)
from domain.models.food_log import FoodEntryRow, DailySummaryRow
from domain.models.user import UserSettingsRow, UserProfileRow

__all__ = [
    # Database
    "Base",
    "create_remote_engine",
    "create_session_factory",
    "init_database",
    # Meal log models
    "FoodEntryRow",
    "DailySummaryRow",
    # User models
    "UserSettingsRow",
    "UserProfileRow",
]
