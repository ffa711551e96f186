"""Daily target calibration from biometrics."""

from dataclasses import dataclass

from diet_coach.domain.profile import DietGoal, Profile

DEFAULT_AGE = 30
DEFAULT_WEIGHT_KG = 75.0
DEFAULT_HEIGHT_CM = 180.0
DEFAULT_ACTIVITY_LEVEL = 1.375

WEIGHT_LOSS_DEFICIT = 500
MUSCLE_GAIN_SURPLUS = 300


@dataclass(frozen=True)
class CalibratedTargets:
    """Daily targets derived from a profile's biometrics."""

    bmr: float
    tdee: float
    daily_calorie_target: int
    daily_protein_target: int


def calibrate_targets(profile: Profile) -> CalibratedTargets:
    """Compute targets with the Mifflin-St Jeor equation.

    Missing biometrics use the default profile values.
    """
    age = profile.age if profile.age is not None else DEFAULT_AGE
    weight = profile.weight_kg if profile.weight_kg is not None else DEFAULT_WEIGHT_KG
    height = profile.height_cm if profile.height_cm is not None else DEFAULT_HEIGHT_CM
    activity = profile.activity_level or DEFAULT_ACTIVITY_LEVEL

    bmr = 10 * weight + 6.25 * height - 5 * age
    bmr = bmr - 161 if profile.sex == "female" else bmr + 5
    tdee = bmr * activity

    calories = tdee
    if profile.goal == DietGoal.WEIGHT_LOSS:
        calories -= WEIGHT_LOSS_DEFICIT
    elif profile.goal == DietGoal.MUSCLE_GAIN:
        calories += MUSCLE_GAIN_SURPLUS
    protein_per_kg = 2.2 if profile.goal == DietGoal.MUSCLE_GAIN else 1.6

    return CalibratedTargets(
        bmr=bmr,
        tdee=tdee,
        daily_calorie_target=round(calories),
        daily_protein_target=round(weight * protein_per_kg),
    )
