"""Schemas for meals, their ingredients and the substituted variants."""

from pydantic import BaseModel, Field
from typing import List, Optional
from datetime import date

from .choices import DietaryPreference


class Ingredient(BaseModel):
    """One ingredient line of a static meal."""

    name: str
    quantity: str = ""
    calories: int = 0
    protein: Optional[float] = None
    carbs: Optional[float] = None
    fats: Optional[float] = None


class Meal(BaseModel):
    """One eating occasion of a day's plan. Totals are ingredient sums."""

    meal_number: int = 1
    time: str = ""
    name: str
    calories: int = 0
    protein: int = 0
    carbs: int = 0
    fats: int = 0
    ingredients: List[Ingredient] = []


class SubstitutedIngredient(Ingredient):
    substituted: bool = False
    original_name: Optional[str] = None
    substitution_note: Optional[str] = None


class SubstitutedMeal(Meal):
    """A meal after the dietary pass. Always carries the metadata fields."""

    substitution_count: int = 0
    name_updated: bool = False
    ingredients: List[SubstitutedIngredient] = []


class DayTotals(BaseModel):
    calories: int = 0
    protein: int = 0
    carbs: int = 0
    fats: int = 0


class DayMealsResponse(BaseModel):
    email: str
    date: date
    program_day: int
    day_of_week: int
    dietary_preference: DietaryPreference
    meals: List[SubstitutedMeal]
    totals: DayTotals
    completed_meals: List[int] = []


class SubstitutionSummary(BaseModel):
    total_substitutions: int = 0
    meals_affected: int = 0
    substitutions: List[str] = []


class MealOverrideRequest(BaseModel):
    """An AI-generated replacement for one meal slot on one day."""

    email: str = Field(..., examples=["ivan@example.com"])
    date: date
    meal_number: int = Field(..., ge=1)
    meal: Meal


class MealOverrideResponse(BaseModel):
    email: str
    date: date
    meal_number: int
    meal: Meal


class MealCompletionRequest(BaseModel):
    email: str = Field(..., examples=["ivan@example.com"])
    date: date
    meal_number: int = Field(..., ge=1)


class MealCompletionResponse(BaseModel):
    email: str
    date: date
    completed_meals: List[int]


class MealSwapRequest(BaseModel):
    """Ask for an alternative to one meal of the user's current plan."""

    email: str = Field(..., examples=["ivan@example.com"])
    date: date
    meal_number: int = Field(..., ge=1)


class MealSwapResponse(BaseModel):
    original: SubstitutedMeal
    substitute: SubstitutedMeal
    similarity: float
    meal_time_category: str
