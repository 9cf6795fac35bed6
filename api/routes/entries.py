"""Meal entry routes"""

import datetime as dt
import logging
from typing import List

from fastapi import APIRouter, Depends, status

from api.dependencies import get_food_log
from app.exceptions import NotFoundError
from domain.schemas import EntryCount, FoodEntry
from services import FoodLogService

router = APIRouter(prefix="/entries", tags=["Entries"])
logger = logging.getLogger("snapcal.api.entries")


@router.post("", response_model=FoodEntry, status_code=status.HTTP_201_CREATED)
async def save_entry(entry: FoodEntry, service: FoodLogService = Depends(get_food_log)):
    """Insert or replace an entry (matched by id) for the caller"""
    return await service.save_entry(entry)


@router.get("", response_model=List[FoodEntry])
async def get_entries(service: FoodLogService = Depends(get_food_log)):
    """All entries, newest first, including images"""
    return await service.get_entries()


@router.get("/lite", response_model=List[FoodEntry])
async def get_entries_lite(service: FoodLogService = Depends(get_food_log)):
    """All entries without image and AI snapshot payloads"""
    return await service.get_entries_lite()


@router.get("/date/{on_date}", response_model=List[FoodEntry])
async def get_entries_for_date(on_date: dt.date, service: FoodLogService = Depends(get_food_log)):
    return await service.get_entries_for_date(on_date)


@router.get("/date/{on_date}/count", response_model=EntryCount)
async def count_entries_for_date(on_date: dt.date, service: FoodLogService = Depends(get_food_log)):
    count = await service.count_entries_for_date(on_date)
    return EntryCount(date=on_date, count=count)


@router.get("/{entry_id}/image")
async def get_entry_image(entry_id: str, service: FoodLogService = Depends(get_food_log)):
    """Photo of one entry; null when the entry has none"""
    return {"id": entry_id, "image_url": await service.get_entry_image(entry_id)}


@router.delete("/{entry_id}/image")
async def clear_entry_image(entry_id: str, service: FoodLogService = Depends(get_food_log)):
    if not await service.clear_entry_image(entry_id):
        raise NotFoundError(f"Entry {entry_id} not found")
    return {"status": "ok", "id": entry_id}


@router.delete("/{entry_id}")
async def delete_entry(entry_id: str, service: FoodLogService = Depends(get_food_log)):
    if not await service.delete_entry(entry_id):
        raise NotFoundError(f"Entry {entry_id} not found")
    return {"status": "ok", "deleted": entry_id}
