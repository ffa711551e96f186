"""Domain models for logged meals and derived totals."""

from dataclasses import dataclass

from pydantic import BaseModel, ConfigDict, Field


class NutritionInfo(BaseModel):
    """Nutrition values for a single meal."""

    model_config = ConfigDict(extra="ignore")

    calories: float = 0.0
    protein: float = 0.0
    carbs: float = 0.0
    fat: float = 0.0
    fiber: float | None = None


class MealRecord(BaseModel):
    """Meal accepted into a day's ledger."""

    model_config = ConfigDict(extra="ignore", frozen=True)

    id: str
    timestamp: int = Field(ge=0)
    food_name: str
    nutrition: NutritionInfo
    image: str | None = None


@dataclass(frozen=True)
class NutritionTotals:
    """Sum of nutrition values across the current meal list."""

    calories: float
    protein: float
    carbs: float
    fat: float
    fiber: float


@dataclass(frozen=True)
class DailyProgress:
    """Progress of today's totals against the profile targets."""

    calorie_target: float
    protein_target: float
    calorie_percent: float
    protein_percent: float


@dataclass(frozen=True)
class IntakePace:
    """Hourly intake rate and the projected end-of-day total."""

    hourly_rate: float
    projected_total: float
    over_target: bool
