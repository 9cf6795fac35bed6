from pydantic import BaseModel, Field
from typing import Optional

from domain.enums import GoalType, ActivityLevel, Gender, EquipmentAccess


class UserProfile(BaseModel):
    name: str = Field(..., min_length=1, max_length=200)
    height: float = Field(..., gt=0, le=300, description="Height in cm")
    weight: float = Field(..., gt=0, le=700, description="Weight in kg")
    age: Optional[int] = Field(None, ge=1, le=130)
    gender: Optional[Gender] = None
    activity_level: Optional[ActivityLevel] = None
    goal: Optional[GoalType] = None
    equipment_access: Optional[EquipmentAccess] = None

    model_config = {"from_attributes": True}


class DailyGoalUpdate(BaseModel):
    daily_goal: int = Field(..., ge=0, le=20000)


class UserSettings(BaseModel):
    daily_goal: Optional[int] = None
    has_completed_onboarding: bool = False

    model_config = {"from_attributes": True}
