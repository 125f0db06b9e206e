"""Quiz API router.

Serves the question bank, scores answers on the fly for the results page,
and persists completed quizzes together with the program they assign.
"""

import json
from datetime import date
from typing import Any, Dict

from fastapi import APIRouter, Body, Depends
from sqlalchemy.orm import Session

from core.exceptions import NotFoundError
from core.logger import get_logger
from core.repository import BaseRepository, save
from data.quiz_bank import get_quiz_for_category
from database import models
from database.deps import get_db_read, get_db_write
from schemas.choices import CATEGORIES, ensure_choice
from schemas.quiz_schema import (
    CategoryQuiz,
    HabitConditionResponse,
    QuizBreakdown,
    QuizCompleteRequest,
    QuizCompleteResponse,
    QuizScoreRequest,
    QuizScoreResult,
    ScoredAnswer,
    StoredQuizResult,
)
from services.program_service import (
    extract_dietary_preference,
    extract_first_name,
    extract_workout_location,
)
from services.quiz_scoring import (
    calculate_quiz_score,
    classify_habit_condition,
    get_dynamic_copy,
    get_score_level_display,
)
from api.program import normalize_email

logger = get_logger("api.quiz")
router = APIRouter(prefix="/api/quiz", tags=["quiz"])


@router.get("/{category}/questions", response_model=CategoryQuiz)
def get_questions(category: str):
    """Return the category's quiz with each question's default copy.

    Raises:
        InvalidChoiceError: If `category` is unknown.
    """
    ensure_choice("category", category, CATEGORIES)
    quiz = get_quiz_for_category(category)
    questions = [
        q.model_copy(update={"description": get_dynamic_copy(q, {}, category)})
        for q in quiz.questions
    ]
    return quiz.model_copy(update={"questions": questions})


@router.post("/{category}/copy", response_model=Dict[str, str])
def get_question_copy(category: str, responses: Dict[str, Any] = Body(default={})):
    """Resolve the dynamic copy of every question against the answers so far."""
    ensure_choice("category", category, CATEGORIES)
    quiz = get_quiz_for_category(category)
    return {
        q.id: get_dynamic_copy(q, responses, category)
        for q in quiz.questions
        if q.dynamic_copy
    }


@router.post("/score", response_model=QuizScoreResult)
def score_quiz(payload: QuizScoreRequest):
    """Score answers without persisting anything."""
    return calculate_quiz_score(payload.responses, payload.category)


@router.post("/habit-condition", response_model=HabitConditionResponse)
def habit_condition(payload: QuizScoreRequest):
    condition = classify_habit_condition(payload.responses, payload.category)
    return HabitConditionResponse(category=payload.category, condition=condition)


@router.post("/complete", response_model=QuizCompleteResponse, status_code=201)
def complete_quiz(payload: QuizCompleteRequest, db: Session = Depends(get_db_write)):
    """Persist a completed quiz and assign the program it determines.

    A retake stores a new result and replaces the user's program, which
    restarts on today's date.

    Args:
        payload: Email, category and the full answer map.
        db: SQLAlchemy session (write) injected by dependency.

    Returns:
        The stored result id, the score and whether a new program was created.

    Raises:
        ValidationError: If the email is malformed or the category unknown.
    """
    email = normalize_email(payload.email)
    result = calculate_quiz_score(payload.responses, payload.category)
    location = extract_workout_location(payload.responses, payload.category)

    row = models.QuizResult(
        email=email,
        session_id=payload.session_id,
        category=result.category,
        total_score=result.total_score,
        determined_level=result.determined_level,
        habit_condition=result.habit_condition,
        workout_location=location,
        breakdown_symptoms=result.breakdown.symptoms,
        breakdown_nutrition=result.breakdown.nutrition,
        breakdown_training=result.breakdown.training,
        breakdown_sleep_recovery=result.breakdown.sleep_recovery,
        breakdown_context=result.breakdown.context,
        breakdown_overall=result.breakdown.overall,
        answers=[
            models.QuizAnswer(question_id=a.question_id, answer=json.dumps(a.answer), points=a.points)
            for a in result.responses
        ],
    )
    row = save(db, row)

    programs = BaseRepository(models.UserProgram, db)
    program = programs.first_by(email=email)
    created = program is None
    if created:
        program = models.UserProgram(email=email)
    program.first_name = extract_first_name(payload.responses, payload.category) or program.first_name
    program.category = result.category
    program.level = result.determined_level
    program.workout_location = location
    program.dietary_preference = extract_dietary_preference(payload.responses, payload.category)
    program.program_start_date = date.today()
    program.quiz_result_id = row.id
    save(db, program)

    logger.info(
        "Quiz completed: email=%s category=%s score=%s level=%s (new program=%s)",
        email, result.category, result.total_score, result.determined_level, created,
    )
    return QuizCompleteResponse(result_id=row.id, result=result, program_created=created)


def to_stored_result(row: models.QuizResult) -> StoredQuizResult:
    return StoredQuizResult(
        id=row.id,
        email=row.email,
        category=row.category,
        total_score=row.total_score,
        determined_level=row.determined_level,
        habit_condition=row.habit_condition,
        workout_location=row.workout_location,
        breakdown=QuizBreakdown(
            symptoms=row.breakdown_symptoms,
            nutrition=row.breakdown_nutrition,
            training=row.breakdown_training,
            sleep_recovery=row.breakdown_sleep_recovery,
            context=row.breakdown_context,
            overall=row.breakdown_overall,
        ),
        responses=[
            ScoredAnswer(question_id=a.question_id, answer=json.loads(a.answer), points=a.points)
            for a in sorted(row.answers, key=lambda a: a.id)
        ],
        created_at=row.created_at.isoformat() if row.created_at else "",
        level_display=get_score_level_display(row.total_score),
    )


@router.get("/results", response_model=StoredQuizResult)
def get_latest_result(email: str, db: Session = Depends(get_db_read)):
    """Return the user's most recent quiz result.

    Raises:
        NotFoundError: If the email has no stored result.
    """
    email = normalize_email(email)
    row = BaseRepository(models.QuizResult, db).latest_by(email=email)
    if row is None:
        raise NotFoundError("QuizResult", email)
    return to_stored_result(row)
