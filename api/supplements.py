"""Supplement tracking API router.

Records the morning and evening capsule of each day and keeps a running
count of the capsules left in the user's pack. Marking a period that is
already taken changes nothing, so retries never consume extra capsules.
"""

from datetime import date
from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from core.logger import get_logger
from core.repository import BaseRepository, save
from database import models
from database.deps import get_db_read, get_db_write
from schemas.tracking_schema import SupplementIntakeRequest, SupplementTrackingResponse
from api.program import normalize_email

logger = get_logger("api.supplements")
router = APIRouter(prefix="/api/supplements", tags=["supplements"])

CAPSULES_PER_PACK = 60


def capsules_remaining(db: Session, email: str) -> Optional[int]:
    row = BaseRepository(models.SupplementInventory, db).first_by(email=email)
    return row.capsules_remaining if row is not None else None


def consume_capsule(db: Session, email: str) -> int:
    """Take one capsule from the user's pack, opening a full pack on first use.

    Returns:
        Capsules left, never below zero.
    """
    repo = BaseRepository(models.SupplementInventory, db)
    inventory = repo.first_by(email=email)
    if inventory is None:
        inventory = models.SupplementInventory(
            email=email,
            total_capsules=CAPSULES_PER_PACK,
            capsules_remaining=CAPSULES_PER_PACK,
            last_refill_date=date.today(),
        )
    inventory.capsules_remaining = max(0, (inventory.capsules_remaining or 0) - 1)
    inventory = save(db, inventory)
    if inventory.capsules_remaining == 0:
        logger.warning("Supplement pack empty: email=%s", email)
    return inventory.capsules_remaining


@router.get("", response_model=SupplementTrackingResponse)
def get_supplements(
    email: str,
    day: date = Query(..., alias="date"),
    db: Session = Depends(get_db_read),
):
    email = normalize_email(email)
    row = BaseRepository(models.SupplementIntake, db).first_by(email=email, date=day)
    return SupplementTrackingResponse(
        email=email,
        date=day,
        morning_taken=bool(row and row.morning_taken),
        evening_taken=bool(row and row.evening_taken),
        capsules_remaining=capsules_remaining(db, email),
    )


@router.post("/track", response_model=SupplementTrackingResponse)
def track_supplement(payload: SupplementIntakeRequest, db: Session = Depends(get_db_write)):
    """Mark the morning or evening capsule of a day as taken.

    Raises:
        ValidationError: If the email is malformed.
    """
    email = normalize_email(payload.email)
    flag = f"{payload.period}_taken"
    row = BaseRepository(models.SupplementIntake, db).first_by(email=email, date=payload.date)
    if row is None:
        row = models.SupplementIntake(email=email, date=payload.date, morning_taken=False, evening_taken=False)

    if getattr(row, flag):
        remaining = capsules_remaining(db, email)
    else:
        setattr(row, flag, True)
        row = save(db, row)
        remaining = consume_capsule(db, email)
        logger.info("Supplement taken: email=%s date=%s period=%s left=%s", email, payload.date, payload.period, remaining)

    return SupplementTrackingResponse(
        email=email,
        date=payload.date,
        morning_taken=bool(row.morning_taken),
        evening_taken=bool(row.evening_taken),
        capsules_remaining=remaining,
    )
