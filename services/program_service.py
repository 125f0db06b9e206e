"""Program assembly.

Connects a user's program assignment to the static content: which day of
the 30-day program it is, which weekday's meals and workout apply, the
dietary pass over those meals, and the per-meal AI overrides stored for the
user. Also pulls the profile fields (first name, training location, diet)
out of the quiz answers at completion time.
"""

import os
from datetime import date
from typing import Any, Dict, List, Mapping, Optional

from core.logger import get_logger
from data.content_loader import get_meal_plan, get_workout_plan
from data.quiz_bank import question_id
from schemas.choices import DIETARY_PREFERENCES, WORKOUT_LOCATIONS, ensure_choice
from schemas.meal_schema import DayTotals, Meal, SubstitutedMeal
from schemas.program_schema import ProgramAssignment
from schemas.workout_schema import Workout
from services.dietary_substitution import apply_day_substitutions
from services.quiz_scoring import normalize_option

logger = get_logger("services.program_service")

PROGRAM_LENGTH_DAYS = int(os.getenv("PROGRAM_LENGTH_DAYS", "30"))

FIRST_NAME_SLOT = 5
WORKOUT_LOCATION_SLOT = 10
DIETARY_PREFERENCE_SLOT = 20

DEFAULT_WORKOUT_LOCATION = "gym"
DEFAULT_DIETARY_PREFERENCE = "omnivor"

# spellings accepted for the diet answer besides the option ids
_PREFERENCE_ALIASES = {
    "omnivore": "omnivor",
    "everything": "omnivor",
    "i_eat_everything": "omnivor",
    "pescetarian": "pescatarian",
}


def get_program_day(start: date, today: Optional[date] = None, length: int = PROGRAM_LENGTH_DAYS) -> int:
    """Day number of the program (1-based), capped at the program length."""
    today = today or date.today()
    day = (today - start).days + 1
    return min(max(day, 1), length)


def get_days_remaining(start: date, today: Optional[date] = None, length: int = PROGRAM_LENGTH_DAYS) -> int:
    return length - get_program_day(start, today, length)


def is_program_completed(start: date, today: Optional[date] = None, length: int = PROGRAM_LENGTH_DAYS) -> bool:
    today = today or date.today()
    return (today - start).days >= length


def next_dietary_preference(current: str) -> str:
    """Next preference in the toggle ring omnivor -> pescatarian -> vegetarian -> vegan -> omnivor."""
    ensure_choice("dietary_preference", current, DIETARY_PREFERENCES)
    idx = DIETARY_PREFERENCES.index(current)
    return DIETARY_PREFERENCES[(idx + 1) % len(DIETARY_PREFERENCES)]


def extract_first_name(responses: Mapping[str, Any], category: str) -> Optional[str]:
    """First word of the name answer, or None if it was skipped."""
    raw = (responses or {}).get(question_id(category, FIRST_NAME_SLOT))
    if not isinstance(raw, str) or not raw.strip():
        return None
    return raw.strip().split()[0]


def extract_workout_location(responses: Mapping[str, Any], category: str) -> str:
    raw = (responses or {}).get(question_id(category, WORKOUT_LOCATION_SLOT))
    if raw is None:
        return DEFAULT_WORKOUT_LOCATION
    value = normalize_option(raw)
    return value if value in WORKOUT_LOCATIONS else DEFAULT_WORKOUT_LOCATION


def extract_dietary_preference(responses: Mapping[str, Any], category: str) -> str:
    raw = (responses or {}).get(question_id(category, DIETARY_PREFERENCE_SLOT))
    if raw is None:
        return DEFAULT_DIETARY_PREFERENCE
    value = normalize_option(raw)
    value = _PREFERENCE_ALIASES.get(value, value)
    return value if value in DIETARY_PREFERENCES else DEFAULT_DIETARY_PREFERENCE


def build_day_meals(
    assignment: ProgramAssignment,
    day: date,
    overrides: Optional[Mapping[int, Meal]] = None,
) -> List[SubstitutedMeal]:
    """Assemble the meals shown for one calendar day.

    The weekday's static meals go through the dietary pass (always, so every
    meal has the same shape), then stored overrides replace their slot. An
    override keeps the slot's meal_number and time.

    Args:
        assignment: The user's program assignment.
        day: Calendar date to build.
        overrides: meal_number -> replacement meal for that date.

    Returns:
        Meals ordered by meal_number.
    """
    static = get_meal_plan(assignment.category, assignment.level).get(day.isoweekday(), [])
    meals = {m.meal_number: m for m in apply_day_substitutions(static, assignment.dietary_preference)}
    for meal_number, override in (overrides or {}).items():
        data = override.model_dump() if hasattr(override, "model_dump") else dict(override)
        slot = meals.get(meal_number)
        data["meal_number"] = meal_number
        if slot is not None:
            data["time"] = slot.time
        meals[meal_number] = SubstitutedMeal.model_validate(data)
        logger.debug("Override applied to meal %s on %s", meal_number, day)
    return [meals[n] for n in sorted(meals)]


def day_totals(meals: List[SubstitutedMeal]) -> DayTotals:
    return DayTotals(
        calories=sum(m.calories for m in meals),
        protein=sum(m.protein for m in meals),
        carbs=sum(m.carbs for m in meals),
        fats=sum(m.fats for m in meals),
    )


def build_week_meals(assignment: ProgramAssignment) -> Dict[int, List[SubstitutedMeal]]:
    """The whole week of meals after the dietary pass, keyed by weekday."""
    plan = get_meal_plan(assignment.category, assignment.level)
    return {
        day: apply_day_substitutions(meals, assignment.dietary_preference)
        for day, meals in plan.items()
    }


def build_day_workout(assignment: ProgramAssignment, day: date) -> Optional[Workout]:
    """Workout for the weekday of `day`, or None if the plan has no entry."""
    plan = get_workout_plan(assignment.category, assignment.level, assignment.workout_location)
    return plan.get(day.isoweekday())
