"""Daily summary routes"""

import datetime as dt
from typing import List

from fastapi import APIRouter, Depends, Query

from api.dependencies import get_summaries
from domain.schemas import DailySummary
from services import SummaryService

router = APIRouter(prefix="/summaries", tags=["Summaries"])


@router.get("", response_model=List[DailySummary])
async def get_daily_summaries(service: SummaryService = Depends(get_summaries)):
    """One summary per date (live totals or archived rollups), most recent first"""
    return await service.get_daily_summaries()


@router.get("/range", response_model=List[DailySummary])
async def get_daily_summaries_for_range(
    start: dt.date = Query(..., description="First date, inclusive"),
    end: dt.date = Query(..., description="Last date, exclusive"),
    service: SummaryService = Depends(get_summaries),
):
    return await service.get_daily_summaries_for_range(start, end)
