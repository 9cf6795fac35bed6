"""
Validation schemas for AI food-analysis responses.

The recognition client returns JSON text. A malformed or partial payload must
never crash a save, so parsing falls back to the schema defaults.
"""

import json
import logging
from typing import List, Type, TypeVar

from pydantic import BaseModel, Field, ValidationError

from domain.schemas.food_log_schemas import AiEstimateSnapshot

logger = logging.getLogger("snapcal.analysis")

ModelT = TypeVar("ModelT", bound=BaseModel)


class AnalysisIngredient(BaseModel):
    name: str = "Unknown ingredient"
    grams: float = 0
    calories: float = 0


class AnalysisResult(BaseModel):
    item: str = "Unknown food"
    calories: float = 0
    protein: float = 0
    carbs: float = 0
    fat: float = 0
    confidence: float = Field(0.5, ge=0, le=1)
    ingredients: List[AnalysisIngredient] = []

    def to_snapshot(self) -> AiEstimateSnapshot:
        """Audit copy stored on the saved entry"""
        return AiEstimateSnapshot(
            item=self.item,
            calories=max(self.calories, 0),
            protein=max(self.protein, 0),
            carbs=max(self.carbs, 0),
            fat=max(self.fat, 0),
            ingredients=[
                {"name": i.name, "grams": max(i.grams, 0), "calories": max(i.calories, 0)}
                for i in self.ingredients
            ],
        )


def safe_parse_ai_response(
    schema: Type[ModelT], json_text: str, context: str = "AI response"
) -> ModelT:
    """
    Parse ``json_text`` into ``schema``.

    Returns the schema's defaults when the text is not JSON or any field
    fails validation. Never raises for bad input.
    """
    try:
        parsed = json.loads(json_text or "{}")
    except (TypeError, ValueError) as e:
        logger.warning("%s failed to parse JSON: %s", context, e)
        return schema()

    try:
        return schema.model_validate(parsed)
    except ValidationError as e:
        logger.warning("%s had invalid fields: %s", context, e.errors())
        return schema()
