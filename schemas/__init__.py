"""Pydantic schema package for request and response models."""

from .meal_schema import Ingredient, Meal, SubstitutedIngredient, SubstitutedMeal
from .quiz_schema import QuizQuestion, QuizScoreResult, QuizBreakdown
from .program_schema import ProgramAssignment
from .workout_schema import Exercise, Workout

__all__ = [
    "Ingredient",
    "Meal",
    "SubstitutedIngredient",
    "SubstitutedMeal",
    "QuizQuestion",
    "QuizScoreResult",
    "QuizBreakdown",
    "ProgramAssignment",
    "Exercise",
    "Workout",
]
