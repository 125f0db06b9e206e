"""Schemas for the daily tracking records: workouts, sleep and supplements."""

from pydantic import BaseModel, Field
from typing import Dict, List, Optional
from datetime import date, datetime

from .choices import SupplementPeriod


class WorkoutCompletionRequest(BaseModel):
    """A finished workout; ``completed_sets`` maps an exercise to the set numbers done."""

    email: str = Field(..., examples=["ivan@example.com"])
    date: date
    day_of_week: int = Field(..., ge=1, le=7)
    workout_name: str = Field(..., min_length=1)
    target_duration_minutes: int = Field(0, ge=0)
    completed_sets: Dict[str, List[int]] = Field(default_factory=dict, examples=[{"1": [1, 2, 3]}])


class WorkoutSessionOut(BaseModel):
    email: str
    date: date
    day_of_week: int
    workout_name: str
    target_duration_minutes: int
    actual_duration_minutes: int
    completed_sets: Dict[str, List[int]] = {}
    total_sets_completed: int = 0


class WorkoutCompletionResponse(BaseModel):
    success: bool = True
    session: WorkoutSessionOut
    locked_until: datetime


class WorkoutCompletionStatus(BaseModel):
    email: str
    date: date
    completed: bool
    sessions: List[WorkoutSessionOut] = []


class SleepEntryRequest(BaseModel):
    email: str = Field(..., examples=["ivan@example.com"])
    date: date
    hours: float = Field(..., ge=0, le=24)
    quality: int = Field(..., ge=1, le=5)
    feeling: Optional[str] = None
    notes: Optional[str] = None


class SleepEntryResponse(BaseModel):
    """Sleep for one night; zeros and nulls when nothing was logged."""

    email: str
    date: date
    hours: float = 0
    quality: int = 0
    feeling: Optional[str] = None
    notes: Optional[str] = None


class SupplementIntakeRequest(BaseModel):
    email: str = Field(..., examples=["ivan@example.com"])
    date: date
    period: SupplementPeriod


class SupplementTrackingResponse(BaseModel):
    email: str
    date: date
    morning_taken: bool = False
    evening_taken: bool = False
    capsules_remaining: Optional[int] = None
