"""Closed value sets shared by schemas, services and the static content.

Each set is exposed twice: as a `Literal` alias for pydantic models and as a
tuple for runtime checks. Order matters for `DIETARY_PREFERENCES` (it is the
toggle ring and the restrictiveness order) and for `LEVELS` (intensity).
"""

from typing import Literal, Iterable, Any

from core.exceptions import InvalidChoiceError

Category = Literal["energy", "libido", "muscle"]
Level = Literal["low", "normal", "high"]
WorkoutLocation = Literal["home", "gym"]
DietaryPreference = Literal["omnivor", "pescatarian", "vegetarian", "vegan"]
Section = Literal["symptoms", "nutrition", "training", "sleep_recovery", "context"]
HabitCondition = Literal["healthy_habits", "average_habits", "unhealthy_habits"]
QuestionType = Literal["scale", "single_choice", "text_input", "transition_message"]
SupplementPeriod = Literal["morning", "evening"]

CATEGORIES = ("energy", "libido", "muscle")
LEVELS = ("low", "normal", "high")
WORKOUT_LOCATIONS = ("home", "gym")
DIETARY_PREFERENCES = ("omnivor", "pescatarian", "vegetarian", "vegan")
SECTIONS = ("symptoms", "nutrition", "training", "sleep_recovery", "context")
HABIT_CONDITIONS = ("healthy_habits", "average_habits", "unhealthy_habits")

# question-id prefix per category, e.g. "ene_q11"
CATEGORY_PREFIXES = {"energy": "ene", "libido": "lib", "muscle": "mus"}


def ensure_choice(field: str, value: Any, allowed: Iterable[str]) -> str:
    """Return `value` if it belongs to `allowed`, else raise InvalidChoiceError."""
    allowed = tuple(allowed)
    if value not in allowed:
        raise InvalidChoiceError(field, value, allowed)
    return value
