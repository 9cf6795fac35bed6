"""
User-related database models.
"""

from sqlalchemy import Column, Text, String, Integer, Float, Boolean, Enum as SQLEnum

from domain.models.database import Base
from domain.enums import GoalType, ActivityLevel, Gender, EquipmentAccess


class UserSettingsRow(Base):
    """Per-user settings (daily goal, onboarding flag)"""

    __tablename__ = "user_settings"

    user_id = Column(String(128), primary_key=True)
    daily_goal = Column(Integer)
    has_completed_onboarding = Column(Boolean, default=False)


class UserProfileRow(Base):
    """User anthropometrics and goals"""

    __tablename__ = "user_profiles"

    user_id = Column(String(128), primary_key=True)
    name = Column(Text)
    height = Column(Float)
    weight = Column(Float)
    age = Column(Integer)
    gender = Column(SQLEnum(Gender, values_callable=lambda e: [m.value for m in e]))
    activity_level = Column(
        SQLEnum(ActivityLevel, values_callable=lambda e: [m.value for m in e])
    )
    goal = Column(SQLEnum(GoalType, values_callable=lambda e: [m.value for m in e]))
    equipment_access = Column(
        SQLEnum(EquipmentAccess, values_callable=lambda e: [m.value for m in e])
    )
