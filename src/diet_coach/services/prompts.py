"""Prompt text and response schemas for the reasoning service."""

from diet_coach.domain.meals import MealRecord, NutritionTotals
from diet_coach.domain.profile import Profile

NO_MEALS_SUMMARY = "No meals logged today yet."

FOOD_ANALYSIS_PROMPT = (
    "Perform a high-precision nutritional analysis on this image. "
    "1. Identify the specific food item. "
    "2. If it is fish, identify the exact variety or species. "
    "3. Identify the preparation method (e.g. deep fried, pan seared, grilled). "
    "4. Estimate calories, protein, carbs and fat for that variety and "
    "preparation. "
    "5. Set is_food to false when the image does not show food, and give a "
    "confidence between 0 and 1."
)

FOOD_ANALYSIS_SCHEMA: dict[str, object] = {
    "type": "object",
    "properties": {
        "food_name": {"type": "string"},
        "is_food": {"type": "boolean"},
        "confidence": {"type": "number", "minimum": 0.0, "maximum": 1.0},
        "nutrition": {
            "type": "object",
            "properties": {
                "calories": {"type": "number"},
                "protein": {"type": "number"},
                "carbs": {"type": "number"},
                "fat": {"type": "number"},
            },
            "required": ["calories", "protein", "carbs", "fat"],
            "additionalProperties": False,
        },
    },
    "required": ["food_name", "is_food", "confidence", "nutrition"],
    "additionalProperties": False,
}


def build_food_analysis_prompt(hint: str | None = None) -> str:
    """Return the image analysis prompt, with the user's hint if given."""
    if hint and hint.strip():
        return f"{FOOD_ANALYSIS_PROMPT} User note about the meal: {hint.strip()}"
    return FOOD_ANALYSIS_PROMPT


def build_advice_instructions(profile: Profile) -> str:
    """Return system instructions for the daily gap analysis."""
    return "\n".join(
        [
            "You are a nutrition strategist reviewing one user's day.",
            f"Context: User goal is {profile.goal.value}.",
            (
                f"Daily target: {_fmt(profile.daily_calorie_target)}kcal, "
                f"{_fmt(profile.daily_protein_target)}g protein."
            ),
            "",
            "Your task:",
            "- Perform a gap analysis on current intake.",
            "- Suggest a specific meal or snack to balance the day's macros.",
            "- Search the web for highly rated recipe links if useful.",
            "",
            "Format:",
            "STATUS: [OPTIMAL/WARNING/CRITICAL]",
            "REASONING: [1 sentence analysis]",
            "ACTION: [Specific tactical instruction]",
        ]
    )


def build_advice_input(
    profile: Profile, meals: list[MealRecord], totals: NutritionTotals
) -> str:
    """Return the user message embedding totals and the meal history."""
    return "\n".join(
        [
            "Current status:",
            (
                f"Total calories: {_fmt(totals.calories)} / "
                f"{_fmt(profile.daily_calorie_target)}"
            ),
            (
                f"Total protein: {_fmt(totals.protein)} / "
                f"{_fmt(profile.daily_protein_target)}"
            ),
            f"Total carbs: {_fmt(totals.carbs)}",
            f"Total fat: {_fmt(totals.fat)}",
            "Logs:",
            summarize_meals(meals),
        ]
    )


def build_question_instructions(profile: Profile, totals: NutritionTotals) -> str:
    """Return system instructions for a free-form question."""
    return (
        "You are a personal diet agent. Answer the user's question about "
        "their diet, exercise or cravings based on their current status. "
        f"User goal: {profile.goal.value}. "
        f"Intake so far: {_fmt(totals.calories)} kcal."
    )


def summarize_meals(meals: list[MealRecord]) -> str:
    """One line per meal, or a placeholder when nothing is logged."""
    if not meals:
        return NO_MEALS_SUMMARY
    return "\n".join(
        f"- {meal.food_name}: {_fmt(meal.nutrition.calories)}cal, "
        f"{_fmt(meal.nutrition.protein)}g protein"
        for meal in meals
    )


def _fmt(value: float) -> str:
    if float(value).is_integer():
        return f"{value:.0f}"
    return f"{value:.1f}"
