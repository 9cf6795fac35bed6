"""Daily goal, profile and onboarding routes"""

from typing import Optional

from fastapi import APIRouter, Depends

from api.dependencies import get_food_log
from domain.schemas import DailyGoalUpdate, UserProfile, UserSettings
from services import FoodLogService

router = APIRouter(prefix="/settings", tags=["Settings"])


@router.get("", response_model=UserSettings)
async def get_settings(service: FoodLogService = Depends(get_food_log)):
    return UserSettings(
        daily_goal=await service.get_daily_goal(),
        has_completed_onboarding=await service.has_completed_onboarding(),
    )


@router.get("/goal", response_model=DailyGoalUpdate)
async def get_daily_goal(service: FoodLogService = Depends(get_food_log)):
    return DailyGoalUpdate(daily_goal=await service.get_daily_goal())


@router.put("/goal", response_model=DailyGoalUpdate)
async def save_daily_goal(body: DailyGoalUpdate, service: FoodLogService = Depends(get_food_log)):
    await service.save_daily_goal(body.daily_goal)
    return body


@router.get("/profile", response_model=Optional[UserProfile])
async def get_user_profile(service: FoodLogService = Depends(get_food_log)):
    """The caller's profile, or null before onboarding"""
    return await service.get_user_profile()


@router.put("/profile", response_model=UserProfile)
async def save_user_profile(profile: UserProfile, service: FoodLogService = Depends(get_food_log)):
    await service.save_user_profile(profile)
    return profile


@router.get("/onboarding")
async def has_completed_onboarding(service: FoodLogService = Depends(get_food_log)):
    return {"completed": await service.has_completed_onboarding()}


@router.post("/onboarding")
async def mark_onboarding_complete(service: FoodLogService = Depends(get_food_log)):
    await service.mark_onboarding_complete()
    return {"completed": True}
