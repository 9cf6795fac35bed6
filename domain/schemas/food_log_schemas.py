import datetime as dt
from typing import Optional, List
from uuid import uuid4

from pydantic import BaseModel, Field, field_validator, model_validator


def _utc_now_iso() -> str:
    return dt.datetime.now(dt.timezone.utc).isoformat().replace("+00:00", "Z")


def parse_timestamp(value: str) -> dt.datetime:
    """Parse an ISO instant, accepting a trailing 'Z'"""
    text = value.strip()
    if text.endswith("Z") or text.endswith("z"):
        text = text[:-1] + "+00:00"
    return dt.datetime.fromisoformat(text)


def coerce_date(value) -> dt.date:
    """Accept a date or a 'YYYY-MM-DD' string"""
    if isinstance(value, dt.datetime):
        return value.date()
    if isinstance(value, dt.date):
        return value
    return dt.date.fromisoformat(str(value))


def local_date_and_time(timestamp: str) -> tuple[dt.date, str]:
    """Calendar date and HH:MM clock time of ``timestamp`` in the local time zone"""
    moment = parse_timestamp(timestamp)
    if moment.tzinfo is not None:
        moment = moment.astimezone()
    return moment.date(), moment.strftime("%H:%M")


class Ingredient(BaseModel):
    name: str = "Unknown ingredient"
    grams: float = Field(0, ge=0)
    calories: float = Field(0, ge=0)


class AiEstimateSnapshot(BaseModel):
    """The untouched AI estimate, kept so a manual edit can be undone"""

    item: str
    calories: float = 0
    protein: float = 0
    carbs: float = 0
    fat: float = 0
    ingredients: List[Ingredient] = []


class FoodEntry(BaseModel):
    """
    One logged meal.

    ``date`` and ``time`` are filled from ``timestamp`` (writer's local time
    zone) when not supplied. Once set they are carried as-is, even through
    edits, so a meal never moves to another day.
    """

    id: str = Field(default_factory=lambda: str(uuid4()))
    user_id: Optional[str] = None
    timestamp: str = Field(default_factory=_utc_now_iso)
    date: Optional[dt.date] = None
    time: Optional[str] = None
    food_item: str = Field(..., min_length=1, max_length=200)
    calories: float = Field(0, ge=0)
    protein: float = Field(0, ge=0)
    carbs: float = Field(0, ge=0)
    fat: float = Field(0, ge=0)
    confidence: float = Field(0, ge=0, le=1)
    image_url: Optional[str] = None
    is_manual: bool = False
    ingredients: List[Ingredient] = []
    original_ai_response: Optional[AiEstimateSnapshot] = None

    model_config = {"from_attributes": True}

    @field_validator("timestamp")
    @classmethod
    def validate_timestamp(cls, v: str) -> str:
        try:
            parse_timestamp(v)
        except ValueError as exc:
            raise ValueError(f"timestamp must be an ISO 8601 instant: {v!r}") from exc
        return v

    @field_validator("protein", "carbs", "fat", mode="before")
    @classmethod
    def null_macros_are_zero(cls, v):
        return 0 if v is None else v

    @field_validator("ingredients", mode="before")
    @classmethod
    def null_ingredients_are_empty(cls, v):
        return [] if v is None else v

    @model_validator(mode="after")
    def derive_calendar_fields(self):
        if self.date is None or self.time is None:
            local_day, clock = local_date_and_time(self.timestamp)
            if self.date is None:
                self.date = local_day
            if self.time is None:
                self.time = clock
        return self


class DailySummary(BaseModel):
    """Per-day totals, either computed live or read from an archived rollup"""

    user_id: Optional[str] = None
    date: dt.date
    total_calories: float = 0
    total_protein: float = 0
    total_carbs: float = 0
    total_fat: float = 0
    entry_count: int = 0
    archived: bool = False

    model_config = {"from_attributes": True}


class EntryCount(BaseModel):
    date: dt.date
    count: int


class CleanupReport(BaseModel):
    """Outcome of one archival sweep"""

    today: dt.date
    threshold: dt.date
    archived_dates: List[dt.date] = []
    failed_dates: List[dt.date] = []
    archived_entries: int = 0
