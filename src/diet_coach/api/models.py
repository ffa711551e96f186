"""Pydantic models for API request payloads."""

from typing import Literal

from pydantic import BaseModel, Field

from diet_coach.domain.meals import NutritionInfo
from diet_coach.domain.profile import DietGoal

CLEARABLE_PROFILE_FIELDS = frozenset(
    {"age", "weight_kg", "height_cm", "sex", "activity_level", "timezone"}
)


class MealCreate(BaseModel):
    """Accepted food analysis to log as a meal."""

    food_name: str = Field(min_length=1)
    nutrition: NutritionInfo
    image: str | None = None
    timestamp: int | None = Field(default=None, ge=0)


class ProfileUpdate(BaseModel):
    """Settings edits; only fields present in the payload are applied.

    An explicit null clears an optional biometric or the timezone; it is
    ignored for the goal and the daily targets, which always have a value.
    """

    goal: DietGoal | None = None
    daily_calorie_target: float | None = Field(default=None, ge=0)
    daily_protein_target: float | None = Field(default=None, ge=0)
    age: int | None = Field(default=None, ge=0)
    weight_kg: float | None = Field(default=None, ge=0)
    height_cm: float | None = Field(default=None, ge=0)
    sex: Literal["male", "female"] | None = None
    activity_level: float | None = Field(default=None, gt=0)
    timezone: str | None = None

    def changes(self) -> dict[str, object]:
        """Return the edits to apply to the stored profile."""
        return {
            key: value
            for key, value in self.model_dump(exclude_unset=True).items()
            if value is not None or key in CLEARABLE_PROFILE_FIELDS
        }


class QuestionRequest(BaseModel):
    """Free-form question for the diet agent."""

    question: str = Field(min_length=1)
