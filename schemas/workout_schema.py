"""Schemas for workout plans."""

from pydantic import BaseModel
from typing import List, Optional
from datetime import date

from .choices import WorkoutLocation


class Exercise(BaseModel):
    order: int
    name: str
    sets: int
    reps: str
    rest_seconds: int = 0


class Workout(BaseModel):
    day_of_week: int
    name: str
    is_rest_day: bool = False
    exercises: List[Exercise] = []


class DayWorkoutResponse(BaseModel):
    email: str
    date: date
    program_day: int
    workout_location: WorkoutLocation
    workout: Optional[Workout] = None
