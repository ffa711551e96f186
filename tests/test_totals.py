"""Tests for nutrition totals, progress and pace."""

from datetime import datetime

import pytest

from diet_coach.domain.profile import Profile
from diet_coach.services.totals import compute_pace, compute_progress, compute_totals
from tests.conftest import make_meal


def test_compute_totals_sums_each_field() -> None:
    meals = [
        make_meal("a", calories=500, protein=30, carbs=40, fat=12),
        make_meal("b", calories=700, protein=45, carbs=60, fat=20),
    ]

    totals = compute_totals(meals)

    assert totals.calories == sum(meal.nutrition.calories for meal in meals)
    assert totals.protein == 75
    assert totals.carbs == 100
    assert totals.fat == 32
    assert totals.fiber == 0


def test_compute_totals_empty_is_zero() -> None:
    totals = compute_totals([])

    assert (totals.calories, totals.protein, totals.carbs, totals.fat) == (0, 0, 0, 0)


def test_compute_totals_is_idempotent() -> None:
    meals = [make_meal("a", calories=320.5, protein=12.25)]

    assert compute_totals(meals) == compute_totals(meals)


def test_progress_matches_daily_scenario() -> None:
    profile = Profile(name="ana", daily_calorie_target=2200, daily_protein_target=160)
    meals = [
        make_meal("a", calories=500, protein=30),
        make_meal("b", calories=700, protein=45),
    ]

    totals = compute_totals(meals)
    progress = compute_progress(totals, profile)

    assert totals.calories == 1200
    assert totals.protein == 75
    assert progress.calorie_percent == pytest.approx(54.545, abs=0.01)
    assert progress.protein_percent == pytest.approx(46.875, abs=0.01)


def test_progress_falls_back_when_targets_are_zero() -> None:
    profile = Profile(name="ana", daily_calorie_target=0, daily_protein_target=0)
    totals = compute_totals([make_meal("a", calories=1000, protein=75)])

    progress = compute_progress(totals, profile)

    assert progress.calorie_target == 2000
    assert progress.protein_target == 150
    assert progress.calorie_percent == 50
    assert progress.protein_percent == 50


def test_pace_projects_hourly_rate() -> None:
    profile = Profile(name="ana", daily_calorie_target=2200)
    totals = compute_totals([make_meal("a", calories=1200, protein=0)])

    pace = compute_pace(totals, profile, datetime(2024, 3, 14, 12, 0))

    assert pace.hourly_rate == 100
    assert pace.projected_total == 2400
    assert pace.over_target is False


def test_pace_treats_midnight_as_one_hour() -> None:
    profile = Profile(name="ana", daily_calorie_target=300)
    totals = compute_totals([make_meal("a", calories=400, protein=0)])

    pace = compute_pace(totals, profile, datetime(2024, 3, 14, 0, 15))

    assert pace.hourly_rate == 400
    assert pace.over_target is True
