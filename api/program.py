"""User program API router.

Reads and updates the program a user follows: the assignment itself, the
level and training location the user may change later, and the dietary
preference (set directly or toggled around the ring).
"""

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from core.exceptions import NotFoundError, ValidationError
from core.logger import get_logger
from core.repository import BaseRepository
from database import models
from database.deps import get_db_read, get_db_write
from schemas.program_schema import (
    DietaryPreferenceRequest,
    DietaryPreferenceResponse,
    DietaryPreferenceToggleRequest,
    LevelUpdateRequest,
    ProgramAssignment,
    ProgramResponse,
    WorkoutLocationUpdateRequest,
)
from services.dietary_substitution import requires_substitutions
from services.program_service import (
    DEFAULT_DIETARY_PREFERENCE,
    get_days_remaining,
    get_program_day,
    is_program_completed,
    next_dietary_preference,
)

logger = get_logger("api.program")
router = APIRouter(prefix="/api/user", tags=["program"])


def normalize_email(email: str) -> str:
    """Trim and lower-case an email; reject values without an "@".

    Raises:
        ValidationError: If the email is empty or has no "@".
    """
    email = (email or "").strip().lower()
    if "@" not in email:
        raise ValidationError("A valid email is required", field="email")
    return email


def load_program(db: Session, email: str) -> models.UserProgram:
    """Return the user's program row.

    Raises:
        NotFoundError: If the email has no program.
    """
    program = BaseRepository(models.UserProgram, db).first_by(email=normalize_email(email))
    if program is None:
        raise NotFoundError("Program", email)
    return program


def to_assignment(program: models.UserProgram) -> ProgramAssignment:
    return ProgramAssignment(
        category=program.category,
        level=program.level,
        workout_location=program.workout_location,
        dietary_preference=program.dietary_preference or DEFAULT_DIETARY_PREFERENCE,
        program_start_date=program.program_start_date,
    )


def to_program_response(program: models.UserProgram) -> ProgramResponse:
    start = program.program_start_date
    return ProgramResponse(
        email=program.email,
        first_name=program.first_name,
        program_day=get_program_day(start),
        days_remaining=get_days_remaining(start),
        is_completed=is_program_completed(start),
        **to_assignment(program).model_dump(),
    )


@router.get("/program", response_model=ProgramResponse)
def get_program(email: str, db: Session = Depends(get_db_read)):
    """Return the user's program assignment and progress.

    Raises:
        NotFoundError: If the email has no program.
    """
    return to_program_response(load_program(db, email))


@router.patch("/program/level", response_model=ProgramResponse)
def update_level(payload: LevelUpdateRequest, db: Session = Depends(get_db_write)):
    """Change the program level; category and start date stay as they are."""
    program = load_program(db, payload.email)
    repo = BaseRepository(models.UserProgram, db)
    program.level = payload.level
    program = repo.update(program)
    logger.info("Level updated: email=%s level=%s", program.email, program.level)
    return to_program_response(program)


@router.patch("/program/workout-location", response_model=ProgramResponse)
def update_workout_location(payload: WorkoutLocationUpdateRequest, db: Session = Depends(get_db_write)):
    program = load_program(db, payload.email)
    program.workout_location = payload.workout_location
    program = BaseRepository(models.UserProgram, db).update(program)
    logger.info("Workout location updated: email=%s location=%s", program.email, program.workout_location)
    return to_program_response(program)


def _preference_response(program: models.UserProgram) -> DietaryPreferenceResponse:
    preference = program.dietary_preference or DEFAULT_DIETARY_PREFERENCE
    return DietaryPreferenceResponse(
        email=program.email,
        dietary_preference=preference,
        requires_substitutions=requires_substitutions(preference),
    )


@router.get("/dietary-preference", response_model=DietaryPreferenceResponse)
def get_dietary_preference(email: str, db: Session = Depends(get_db_read)):
    """Return the user's dietary preference (``omnivor`` when never set)."""
    return _preference_response(load_program(db, email))


@router.post("/dietary-preference", response_model=DietaryPreferenceResponse)
def set_dietary_preference(payload: DietaryPreferenceRequest, db: Session = Depends(get_db_write)):
    program = load_program(db, payload.email)
    program.dietary_preference = payload.dietary_preference
    program = BaseRepository(models.UserProgram, db).update(program)
    logger.info("Dietary preference set: email=%s preference=%s", program.email, program.dietary_preference)
    return _preference_response(program)


@router.post("/dietary-preference/toggle", response_model=DietaryPreferenceResponse)
def toggle_dietary_preference(payload: DietaryPreferenceToggleRequest, db: Session = Depends(get_db_write)):
    """Advance the preference one step around the ring."""
    program = load_program(db, payload.email)
    program.dietary_preference = next_dietary_preference(program.dietary_preference or DEFAULT_DIETARY_PREFERENCE)
    program = BaseRepository(models.UserProgram, db).update(program)
    logger.info("Dietary preference toggled: email=%s preference=%s", program.email, program.dietary_preference)
    return _preference_response(program)
