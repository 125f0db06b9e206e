"""Meals API router.

Assembles the meals of a program day and stores the per-day records kept
against them: AI-generated meal overrides and meal completion marks, both
keyed by (email, date, meal_number) with last-write-wins semantics.
"""

import json
from datetime import date
from typing import Dict, List, Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from core.exceptions import NotFoundError
from core.logger import get_logger
from core.repository import BaseRepository, save
from database import models
from database.deps import get_db_read, get_db_write
from schemas.meal_schema import (
    DayMealsResponse,
    Meal,
    MealCompletionRequest,
    MealCompletionResponse,
    MealOverrideRequest,
    MealOverrideResponse,
    MealSwapRequest,
    MealSwapResponse,
)
from services.meal_matcher import get_meal_time_category, meal_matcher
from services.program_service import (
    build_day_meals,
    build_week_meals,
    day_totals,
    get_program_day,
)
from api.program import load_program, normalize_email, to_assignment

logger = get_logger("api.meals")
router = APIRouter(prefix="/api/meals", tags=["meals"])


def load_overrides(db: Session, email: str, day: date) -> Dict[int, Meal]:
    """Stored AI overrides for one day, keyed by meal_number."""
    rows = BaseRepository(models.MealSubstitution, db).filter_by(email=email, date=day)
    return {row.meal_number: Meal.model_validate(json.loads(row.substituted_meal)) for row in rows}


def completed_meal_numbers(db: Session, email: str, day: date) -> List[int]:
    rows = BaseRepository(models.MealCompletion, db).filter_by(email=email, date=day)
    return sorted(row.meal_number for row in rows)


@router.get("/day", response_model=DayMealsResponse)
def get_day_meals(
    email: str,
    day: Optional[date] = Query(None, alias="date"),
    db: Session = Depends(get_db_read),
):
    """Return the meals the user should eat on a given date.

    Static meals for the weekday are adapted to the user's dietary
    preference, then any stored override replaces its slot.

    Args:
        email: User email.
        day: Calendar date, defaults to today.
        db: Read-only SQLAlchemy session injected by dependency.

    Returns:
        `DayMealsResponse` with meals, day totals and completed meal numbers.

    Raises:
        NotFoundError: If the email has no program.
    """
    day = day or date.today()
    program = load_program(db, email)
    assignment = to_assignment(program)
    meals = build_day_meals(assignment, day, load_overrides(db, program.email, day))
    return DayMealsResponse(
        email=program.email,
        date=day,
        program_day=get_program_day(assignment.program_start_date, day),
        day_of_week=day.isoweekday(),
        dietary_preference=assignment.dietary_preference,
        meals=meals,
        totals=day_totals(meals),
        completed_meals=completed_meal_numbers(db, program.email, day),
    )


@router.get("/substitutions", response_model=List[MealOverrideResponse])
def list_meal_overrides(
    email: str,
    day: date = Query(..., alias="date"),
    db: Session = Depends(get_db_read),
):
    email = normalize_email(email)
    rows = BaseRepository(models.MealSubstitution, db).filter_by(email=email, date=day)
    return [
        MealOverrideResponse(
            email=row.email,
            date=row.date,
            meal_number=row.meal_number,
            meal=Meal.model_validate(json.loads(row.substituted_meal)),
        )
        for row in rows
    ]


@router.post("/substitutions", response_model=MealOverrideResponse)
def save_meal_override(payload: MealOverrideRequest, db: Session = Depends(get_db_write)):
    """Create or replace the override for one meal slot (last write wins)."""
    email = normalize_email(payload.email)
    repo = BaseRepository(models.MealSubstitution, db)
    row = repo.first_by(email=email, date=payload.date, meal_number=payload.meal_number)
    meal = payload.meal.model_copy(update={"meal_number": payload.meal_number})
    if row is None:
        row = models.MealSubstitution(email=email, date=payload.date, meal_number=payload.meal_number)
    row.substituted_meal = json.dumps(meal.model_dump())
    row = save(db, row)
    logger.info("Meal override saved: email=%s date=%s meal=%s", email, payload.date, payload.meal_number)
    return MealOverrideResponse(email=email, date=row.date, meal_number=row.meal_number, meal=meal)


@router.delete("/substitutions")
def delete_meal_override(
    email: str,
    day: date = Query(..., alias="date"),
    meal_number: Optional[int] = None,
    db: Session = Depends(get_db_write),
):
    """Remove one override, or every override of the day when no meal_number is given."""
    email = normalize_email(email)
    keys = {"email": email, "date": day}
    if meal_number is not None:
        keys["meal_number"] = meal_number
    deleted = BaseRepository(models.MealSubstitution, db).delete_by(**keys)
    logger.info("Meal overrides deleted: email=%s date=%s meal=%s count=%s", email, day, meal_number, deleted)
    return {"success": True, "deleted": deleted}


@router.get("/complete", response_model=MealCompletionResponse)
def get_completed_meals(
    email: str,
    day: date = Query(..., alias="date"),
    db: Session = Depends(get_db_read),
):
    email = normalize_email(email)
    return MealCompletionResponse(email=email, date=day, completed_meals=completed_meal_numbers(db, email, day))


@router.post("/complete", response_model=MealCompletionResponse)
def toggle_meal_completion(payload: MealCompletionRequest, db: Session = Depends(get_db_write)):
    """Mark a meal as eaten, or unmark it if it already was.

    Repeating the call toggles instead of duplicating the record.
    """
    email = normalize_email(payload.email)
    repo = BaseRepository(models.MealCompletion, db)
    row = repo.first_by(email=email, date=payload.date, meal_number=payload.meal_number)
    if row is None:
        repo.create(models.MealCompletion(email=email, date=payload.date, meal_number=payload.meal_number))
        logger.info("Meal completed: email=%s date=%s meal=%s", email, payload.date, payload.meal_number)
    else:
        repo.delete(row)
        logger.info("Meal uncompleted: email=%s date=%s meal=%s", email, payload.date, payload.meal_number)
    return MealCompletionResponse(
        email=email, date=payload.date, completed_meals=completed_meal_numbers(db, email, payload.date)
    )


@router.post("/substitute", response_model=MealSwapResponse)
def find_meal_swap(payload: MealSwapRequest, db: Session = Depends(get_db_read)):
    """Suggest an alternative to one meal from elsewhere in the user's week.

    Candidates come from the week after the dietary pass, so the
    alternative already fits the user's preference.

    Raises:
        NotFoundError: If the program, the meal slot or a suitable alternative is missing.
    """
    program = load_program(db, payload.email)
    assignment = to_assignment(program)
    meals = build_day_meals(assignment, payload.date, load_overrides(db, program.email, payload.date))
    current = next((m for m in meals if m.meal_number == payload.meal_number), None)
    if current is None:
        raise NotFoundError("Meal", f"{payload.date}#{payload.meal_number}")

    match = meal_matcher.find_substitute(current, build_week_meals(assignment))
    if match is None:
        raise NotFoundError("MealSubstitute", current.name)
    substitute, score = match
    substitute = substitute.model_copy(update={"meal_number": current.meal_number, "time": current.time})
    logger.info("Meal swap suggested: email=%s %r -> %r", program.email, current.name, substitute.name)
    return MealSwapResponse(
        original=current,
        substitute=substitute,
        similarity=round(score, 4),
        meal_time_category=get_meal_time_category(current.meal_number),
    )
