"""Schemas for the user's program assignment and preference endpoints."""

from pydantic import BaseModel, Field
from typing import Optional
from datetime import date

from .choices import Category, Level, WorkoutLocation, DietaryPreference


class ProgramAssignment(BaseModel):
    """Which static content tables a user's program is built from."""

    category: Category
    level: Level
    workout_location: WorkoutLocation = "gym"
    dietary_preference: DietaryPreference = "omnivor"
    program_start_date: date


class ProgramResponse(ProgramAssignment):
    email: str
    first_name: Optional[str] = None
    program_day: int
    days_remaining: int
    is_completed: bool


class LevelUpdateRequest(BaseModel):
    email: str = Field(..., examples=["ivan@example.com"])
    level: Level = Field(..., examples=["high"])


class WorkoutLocationUpdateRequest(BaseModel):
    email: str = Field(..., examples=["ivan@example.com"])
    workout_location: WorkoutLocation = Field(..., examples=["home"])


class DietaryPreferenceRequest(BaseModel):
    email: str = Field(..., examples=["ivan@example.com"])
    dietary_preference: DietaryPreference = Field(..., examples=["vegetarian"])


class DietaryPreferenceToggleRequest(BaseModel):
    email: str = Field(..., examples=["ivan@example.com"])


class DietaryPreferenceResponse(BaseModel):
    email: str
    dietary_preference: DietaryPreference
    requires_substitutions: bool
