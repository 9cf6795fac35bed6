"""
Meal log tables: raw food entries and archived daily rollups.
"""

from sqlalchemy import (
    Column,
    Text,
    String,
    Date,
    Float,
    Boolean,
    Integer,
    JSON,
    Index,
    UniqueConstraint,
    CheckConstraint,
)

from domain.models.database import Base


class FoodEntryRow(Base):
    """One logged meal"""

    __tablename__ = "food_entries"

    id = Column(String(64), primary_key=True)
    user_id = Column(String(128), nullable=False)
    timestamp = Column(Text, nullable=False)  # ISO instant as written by the client
    date = Column(Date, nullable=False)  # local calendar date at creation, never recomputed
    time = Column(String(8))
    food_item = Column(Text, nullable=False)
    calories = Column(Float, nullable=False, default=0)
    protein = Column(Float, default=0)
    carbs = Column(Float, default=0)
    fat = Column(Float, default=0)
    confidence = Column(Float, default=0)
    image_url = Column(Text)
    is_manual = Column(Boolean, default=False)
    ingredients = Column(JSON)
    original_ai_response = Column(JSON)

    __table_args__ = (
        Index("ix_food_entries_user_date", "user_id", "date"),
        Index("ix_food_entries_user_timestamp", "user_id", "timestamp"),
        CheckConstraint("calories >= 0", name="ck_food_entries_calories_nonneg"),
    )


class DailySummaryRow(Base):
    """Per-day totals persisted when raw entries are archived"""

    __tablename__ = "daily_summaries"

    id = Column(String(160), primary_key=True)  # "{user_id}_{date}"
    user_id = Column(String(128), nullable=False)
    date = Column(Date, nullable=False)
    total_calories = Column(Float, nullable=False, default=0)
    total_protein = Column(Float, nullable=False, default=0)
    total_carbs = Column(Float, nullable=False, default=0)
    total_fat = Column(Float, nullable=False, default=0)
    entry_count = Column(Integer, default=0)

    __table_args__ = (
        UniqueConstraint("user_id", "date", name="uq_daily_summaries_user_date"),
    )
