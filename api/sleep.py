"""Sleep tracking API router: one entry per (email, date), last write wins."""

from datetime import date

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from core.logger import get_logger
from core.repository import BaseRepository, save
from database import models
from database.deps import get_db_read, get_db_write
from schemas.tracking_schema import SleepEntryRequest, SleepEntryResponse
from api.program import normalize_email

logger = get_logger("api.sleep")
router = APIRouter(prefix="/api/sleep", tags=["sleep"])

DEFAULT_FEELING = "neutral"


def to_sleep_response(row: models.SleepEntry) -> SleepEntryResponse:
    return SleepEntryResponse(
        email=row.email,
        date=row.date,
        hours=row.hours_slept,
        quality=row.quality_rating,
        feeling=row.feeling,
        notes=row.notes,
    )


@router.get("", response_model=SleepEntryResponse)
def get_sleep(
    email: str,
    day: date = Query(..., alias="date"),
    db: Session = Depends(get_db_read),
):
    """Return the sleep logged for a night; zero hours and quality when nothing was logged."""
    email = normalize_email(email)
    row = BaseRepository(models.SleepEntry, db).first_by(email=email, date=day)
    if row is None:
        return SleepEntryResponse(email=email, date=day)
    return to_sleep_response(row)


@router.post("/track", response_model=SleepEntryResponse)
def track_sleep(payload: SleepEntryRequest, db: Session = Depends(get_db_write)):
    """Create or replace the sleep entry for a night.

    Raises:
        ValidationError: If the email is malformed.
    """
    email = normalize_email(payload.email)
    row = BaseRepository(models.SleepEntry, db).first_by(email=email, date=payload.date)
    if row is None:
        row = models.SleepEntry(email=email, date=payload.date)
    row.hours_slept = payload.hours
    row.quality_rating = payload.quality
    row.feeling = payload.feeling or DEFAULT_FEELING
    row.notes = payload.notes
    row = save(db, row)
    logger.info("Sleep tracked: email=%s date=%s hours=%s quality=%s", email, row.date, row.hours_slept, row.quality_rating)
    return to_sleep_response(row)
