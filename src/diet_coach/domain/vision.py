"""Models for food image analysis results."""

from pydantic import BaseModel, Field

from diet_coach.domain.meals import NutritionInfo


class FoodAnalysis(BaseModel):
    """Structured output for a single analyzed food image."""

    food_name: str
    is_food: bool
    confidence: float = Field(ge=0.0, le=1.0)
    nutrition: NutritionInfo
