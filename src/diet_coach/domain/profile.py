"""Domain models for user profiles."""

from enum import StrEnum
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field


class DietGoal(StrEnum):
    """Closed set of diet goals a profile can target."""

    WEIGHT_LOSS = "Weight Loss"
    MUSCLE_GAIN = "Muscle Gain"
    MAINTENANCE = "Maintenance"
    KETO = "Keto Diet"
    VEGAN = "Plant Based"


ACTIVITY_LEVELS: dict[str, float] = {
    "sedentary": 1.2,
    "light": 1.375,
    "moderate": 1.55,
    "high": 1.725,
}


class Profile(BaseModel):
    """Per-identity targets, biometrics and the last active calendar day."""

    model_config = ConfigDict(extra="ignore")

    name: str
    goal: DietGoal = DietGoal.MAINTENANCE
    daily_calorie_target: float = Field(default=2400, ge=0)
    daily_protein_target: float = Field(default=150, ge=0)
    age: int | None = Field(default=None, ge=0)
    weight_kg: float | None = Field(default=None, ge=0)
    height_cm: float | None = Field(default=None, ge=0)
    sex: Literal["male", "female"] | None = None
    activity_level: float | None = Field(default=None, gt=0)
    timezone: str | None = None
    last_active_date: str | None = None
