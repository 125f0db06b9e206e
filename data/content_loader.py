"""Load the static program content (meal and workout plans) from CSV.

Both datasets live in ``data/fixtures``:

- ``meal_plans.csv``: one row per ingredient, keyed by category, level,
  day_of_week and meal_number. Meal totals are not stored; they are the sums
  of the meal's ingredient rows.
- ``workout_plans.csv``: one row per exercise, keyed by category, level,
  location and day_of_week. A rest day is a single row with no exercise.

Each file is read once with pandas and cached; the lookup functions return
fresh pydantic objects so callers can never mutate the cached tables.
"""

import os
import math
from functools import lru_cache
from typing import Dict, List, Optional

import pandas as pd

from core.exceptions import InsufficientDataError
from core.logger import get_logger
from schemas.choices import CATEGORIES, LEVELS, WORKOUT_LOCATIONS, ensure_choice
from schemas.meal_schema import Ingredient, Meal
from schemas.workout_schema import Exercise, Workout

logger = get_logger("data.content_loader")

FIXTURES_DIR = os.path.join(os.path.dirname(os.path.abspath(__file__)), "fixtures")
MEAL_PLANS_CSV = os.path.join(FIXTURES_DIR, "meal_plans.csv")
WORKOUT_PLANS_CSV = os.path.join(FIXTURES_DIR, "workout_plans.csv")

DAYS_OF_WEEK = range(1, 8)


def _float_or_none(value) -> Optional[float]:
    """Return a float for numeric CSV cells, None for blanks and NaN."""
    if value is None:
        return None
    try:
        f = float(value)
    except (TypeError, ValueError):
        return None
    if math.isnan(f):
        return None
    return f


def _text(value) -> str:
    if value is None or (isinstance(value, float) and math.isnan(value)):
        return ""
    return str(value).strip()


@lru_cache(maxsize=1)
def load_meal_table(csv_path: str = MEAL_PLANS_CSV) -> pd.DataFrame:
    """Read the meal-plan CSV into a DataFrame.

    Args:
        csv_path: Path to the meal-plan CSV file.

    Returns:
        DataFrame with one row per ingredient.
    """
    logger.info("Loading meal plans: %s", csv_path)
    df = pd.read_csv(
        csv_path,
        encoding="utf-8",
        dtype={"quantity": str, "time": str, "category": str, "level": str},
    )
    df = df.rename(columns=lambda s: s.strip())
    logger.info("Loaded %s ingredient rows", len(df))
    return df


@lru_cache(maxsize=1)
def load_workout_table(csv_path: str = WORKOUT_PLANS_CSV) -> pd.DataFrame:
    """Read the workout-plan CSV into a DataFrame (one row per exercise)."""
    logger.info("Loading workout plans: %s", csv_path)
    df = pd.read_csv(
        csv_path,
        encoding="utf-8",
        dtype={"reps": str, "exercise": str, "category": str, "level": str, "location": str},
    )
    df = df.rename(columns=lambda s: s.strip())
    logger.info("Loaded %s exercise rows", len(df))
    return df


def _build_meal(rows: pd.DataFrame) -> Meal:
    first = rows.iloc[0]
    ingredients = []
    for _, row in rows.iterrows():
        ingredients.append(Ingredient(
            name=_text(row["ingredient"]),
            quantity=_text(row["quantity"]),
            calories=int(round(_float_or_none(row["calories"]) or 0)),
            protein=_float_or_none(row["protein"]),
            carbs=_float_or_none(row["carbs"]),
            fats=_float_or_none(row["fats"]),
        ))
    return Meal(
        meal_number=int(first["meal_number"]),
        time=_text(first["time"]),
        name=_text(first["meal_name"]),
        calories=sum(i.calories for i in ingredients),
        protein=int(round(sum(i.protein or 0 for i in ingredients))),
        carbs=int(round(sum(i.carbs or 0 for i in ingredients))),
        fats=int(round(sum(i.fats or 0 for i in ingredients))),
        ingredients=ingredients,
    )


@lru_cache(maxsize=None)
def _meal_plan(category: str, level: str) -> Dict[int, List[Meal]]:
    df = load_meal_table()
    subset = df[(df["category"] == category) & (df["level"] == level)]
    if subset.empty:
        raise InsufficientDataError(
            f"No meal plan content for {category}/{level}", category=category, level=level
        )
    plan: Dict[int, List[Meal]] = {}
    for (day, _meal_number), rows in subset.groupby(["day_of_week", "meal_number"], sort=True):
        plan.setdefault(int(day), []).append(_build_meal(rows))
    logger.debug("Built meal plan %s/%s for %s days", category, level, len(plan))
    return plan


def get_meal_plan(category: str, level: str) -> Dict[int, List[Meal]]:
    """Return the week of meals for a program.

    Args:
        category: Program category (energy, libido, muscle).
        level: Program level (low, normal, high).

    Returns:
        Mapping of ISO weekday (1 = Monday .. 7 = Sunday) to the day's meals,
        ordered by meal_number.

    Raises:
        InvalidChoiceError: If category or level is outside its enum.
        InsufficientDataError: If the dataset has no rows for the program.
    """
    ensure_choice("category", category, CATEGORIES)
    ensure_choice("level", level, LEVELS)
    plan = _meal_plan(category, level)
    return {day: [m.model_copy(deep=True) for m in meals] for day, meals in plan.items()}


def get_day_meals(category: str, level: str, day_of_week: int) -> List[Meal]:
    return get_meal_plan(category, level).get(day_of_week, [])


def _build_workout(day: int, rows: pd.DataFrame) -> Workout:
    name = _text(rows.iloc[0]["workout_name"])
    exercises = []
    for _, row in rows.iterrows():
        exercise = _text(row["exercise"])
        if not exercise:
            continue
        exercises.append(Exercise(
            order=int(_float_or_none(row["exercise_order"]) or len(exercises) + 1),
            name=exercise,
            sets=int(_float_or_none(row["sets"]) or 0),
            reps=_text(row["reps"]),
            rest_seconds=int(_float_or_none(row["rest_seconds"]) or 0),
        ))
    exercises.sort(key=lambda e: e.order)
    return Workout(day_of_week=day, name=name, is_rest_day=not exercises, exercises=exercises)


@lru_cache(maxsize=None)
def _workout_plan(category: str, level: str, location: str) -> Dict[int, Workout]:
    df = load_workout_table()
    subset = df[(df["category"] == category) & (df["level"] == level) & (df["location"] == location)]
    if subset.empty:
        raise InsufficientDataError(
            f"No workout content for {category}/{level}/{location}",
            category=category, level=level, location=location,
        )
    plan = {}
    for day, rows in subset.groupby("day_of_week", sort=True):
        plan[int(day)] = _build_workout(int(day), rows)
    return plan


def get_workout_plan(category: str, level: str, location: str) -> Dict[int, Workout]:
    """Return the week of workouts for a program and training location.

    Raises:
        InvalidChoiceError: If category, level or location is outside its enum.
        InsufficientDataError: If the dataset has no rows for the program.
    """
    ensure_choice("category", category, CATEGORIES)
    ensure_choice("level", level, LEVELS)
    ensure_choice("workout_location", location, WORKOUT_LOCATIONS)
    plan = _workout_plan(category, level, location)
    return {day: w.model_copy(deep=True) for day, w in plan.items()}
