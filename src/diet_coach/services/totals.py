"""Nutrition totals, progress and pace derived from the meal list."""

from collections.abc import Iterable
from datetime import datetime

from diet_coach.domain.meals import (
    DailyProgress,
    IntakePace,
    MealRecord,
    NutritionTotals,
)
from diet_coach.domain.profile import Profile

FALLBACK_CALORIE_TARGET = 2000.0
FALLBACK_PROTEIN_TARGET = 150.0
HOURS_PER_DAY = 24


def compute_totals(meals: Iterable[MealRecord]) -> NutritionTotals:
    """Sum every nutrition field across the given meals."""
    total = NutritionTotals(calories=0.0, protein=0.0, carbs=0.0, fat=0.0, fiber=0.0)
    for meal in meals:
        nutrition = meal.nutrition
        total = NutritionTotals(
            calories=total.calories + nutrition.calories,
            protein=total.protein + nutrition.protein,
            carbs=total.carbs + nutrition.carbs,
            fat=total.fat + nutrition.fat,
            fiber=total.fiber + (nutrition.fiber or 0.0),
        )
    return total


def compute_progress(totals: NutritionTotals, profile: Profile) -> DailyProgress:
    """Return calorie and protein progress as percentages of the targets."""
    calorie_target = _target_or(profile.daily_calorie_target, FALLBACK_CALORIE_TARGET)
    protein_target = _target_or(profile.daily_protein_target, FALLBACK_PROTEIN_TARGET)
    return DailyProgress(
        calorie_target=calorie_target,
        protein_target=protein_target,
        calorie_percent=totals.calories / calorie_target * 100,
        protein_percent=totals.protein / protein_target * 100,
    )


def compute_pace(
    totals: NutritionTotals, profile: Profile, now: datetime
) -> IntakePace:
    """Project today's calorie intake from the hourly rate so far.

    Midnight counts as one elapsed hour so the rate stays defined.
    """
    elapsed_hours = now.hour or 1
    hourly_rate = totals.calories / elapsed_hours
    calorie_target = _target_or(profile.daily_calorie_target, FALLBACK_CALORIE_TARGET)
    return IntakePace(
        hourly_rate=hourly_rate,
        projected_total=hourly_rate * HOURS_PER_DAY,
        over_target=totals.calories > calorie_target,
    )


def _target_or(value: float | None, fallback: float) -> float:
    if value is None or value <= 0:
        return fallback
    return float(value)
