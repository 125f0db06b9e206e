"""Workouts API router.

Serves the workout of a program day and records finished workouts. A
workout is stored once per (email, date, day_of_week); the client keeps it
locked until the following midnight.
"""

import json
from datetime import date, datetime, time, timedelta
from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from core.exceptions import ConflictError
from core.logger import get_logger
from core.repository import BaseRepository
from database import models
from database.deps import get_db_read, get_db_write
from schemas.tracking_schema import (
    WorkoutCompletionRequest,
    WorkoutCompletionResponse,
    WorkoutCompletionStatus,
    WorkoutSessionOut,
)
from schemas.workout_schema import DayWorkoutResponse
from services.program_service import build_day_workout, get_program_day
from api.program import load_program, normalize_email, to_assignment

logger = get_logger("api.workouts")
router = APIRouter(prefix="/api/workouts", tags=["workouts"])


def to_session_out(row: models.WorkoutSession) -> WorkoutSessionOut:
    return WorkoutSessionOut(
        email=row.email,
        date=row.date,
        day_of_week=row.day_of_week,
        workout_name=row.workout_name,
        target_duration_minutes=row.target_duration_minutes,
        actual_duration_minutes=row.actual_duration_minutes,
        completed_sets=json.loads(row.completed_sets or "{}"),
        total_sets_completed=row.total_sets_completed,
    )


@router.get("/day", response_model=DayWorkoutResponse)
def get_day_workout(
    email: str,
    day: Optional[date] = Query(None, alias="date"),
    db: Session = Depends(get_db_read),
):
    """Return the workout for a date at the user's training location.

    Raises:
        NotFoundError: If the email has no program.
    """
    day = day or date.today()
    program = load_program(db, email)
    assignment = to_assignment(program)
    logger.debug("Workout requested: email=%s date=%s location=%s", program.email, day, assignment.workout_location)
    return DayWorkoutResponse(
        email=program.email,
        date=day,
        program_day=get_program_day(assignment.program_start_date, day),
        workout_location=assignment.workout_location,
        workout=build_day_workout(assignment, day),
    )


@router.post("/complete", response_model=WorkoutCompletionResponse, status_code=201)
def complete_workout(payload: WorkoutCompletionRequest, db: Session = Depends(get_db_write)):
    """Record a finished workout.

    The actual duration is taken to be the target duration, and the set
    total counts every set number listed in ``completed_sets``.

    Raises:
        ValidationError: If the email is malformed.
        ConflictError: If this workout was already completed on that date.
    """
    email = normalize_email(payload.email)
    repo = BaseRepository(models.WorkoutSession, db)
    keys = {"email": email, "date": payload.date, "day_of_week": payload.day_of_week}
    if repo.first_by(**keys) is not None:
        raise ConflictError(
            "Workout already completed for this day",
            email=email, date=payload.date.isoformat(), day_of_week=payload.day_of_week,
        )

    row = repo.create(models.WorkoutSession(
        **keys,
        workout_name=payload.workout_name,
        target_duration_minutes=payload.target_duration_minutes,
        actual_duration_minutes=payload.target_duration_minutes,
        completed_sets=json.dumps(payload.completed_sets),
        total_sets_completed=sum(len(sets) for sets in payload.completed_sets.values()),
    ))
    logger.info(
        "Workout completed: email=%s date=%s day=%s sets=%s",
        email, row.date, row.day_of_week, row.total_sets_completed,
    )
    return WorkoutCompletionResponse(
        session=to_session_out(row),
        locked_until=datetime.combine(row.date + timedelta(days=1), time.min),
    )


@router.get("/complete", response_model=WorkoutCompletionStatus)
def get_workout_completion(
    email: str,
    day: date = Query(..., alias="date"),
    db: Session = Depends(get_db_read),
):
    email = normalize_email(email)
    rows = BaseRepository(models.WorkoutSession, db).filter_by(email=email, date=day)
    return WorkoutCompletionStatus(
        email=email, date=day, completed=bool(rows), sessions=[to_session_out(r) for r in rows]
    )
