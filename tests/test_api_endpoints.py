"""Endpoint tests calling the router functions directly with real sessions."""

import uuid
from datetime import date, timedelta

import pytest

from api.meals import (
    delete_meal_override,
    find_meal_swap,
    get_completed_meals,
    get_day_meals,
    list_meal_overrides,
    save_meal_override,
    toggle_meal_completion,
)
from api.program import (
    get_dietary_preference,
    get_program,
    set_dietary_preference,
    toggle_dietary_preference,
    update_level,
    update_workout_location,
)
from api.quiz import complete_quiz, get_latest_result, get_question_copy, get_questions, habit_condition, score_quiz
from api.workouts import get_day_workout
from core.exceptions import NotFoundError
from schemas.meal_schema import Meal, MealCompletionRequest, MealOverrideRequest, MealSwapRequest
from schemas.program_schema import (
    DietaryPreferenceRequest,
    DietaryPreferenceToggleRequest,
    LevelUpdateRequest,
    WorkoutLocationUpdateRequest,
)
from schemas.quiz_schema import QuizCompleteRequest, QuizScoreRequest

ENERGY_ANSWERS = {
    "ene_q1": 8,
    "ene_q2": 7,
    "ene_q3": "rarely",
    "ene_q5": "Ivan",
    "ene_q10": "home",
    "ene_q11": "balanced diet",
    "ene_q12": "non-smoker",
    "ene_q13": "rarely",
    "ene_q14": 8,
    "ene_q20": "vegan",
}


def new_email():
    return f"user-{uuid.uuid4().hex[:10]}@example.com"


def complete(db, email, category="energy", responses=None):
    payload = QuizCompleteRequest(email=email, category=category, responses=responses or ENERGY_ANSWERS)
    return complete_quiz(payload=payload, db=db)


def test_questions_and_copy_endpoints():
    quiz = get_questions(category="libido")
    assert len(quiz.questions) == 21
    assert quiz.questions[0].id == "lib_q1"
    copy = get_question_copy(category="energy", responses=ENERGY_ANSWERS)
    assert set(copy) == {"ene_q15", "ene_q19"}


def test_score_and_habit_condition_endpoints():
    request = QuizScoreRequest(category="energy", responses=ENERGY_ANSWERS)
    result = score_quiz(payload=request)
    assert 0 <= result.total_score <= 100
    assert result.habit_condition == "healthy_habits"
    assert habit_condition(payload=request).condition == "healthy_habits"


def test_complete_quiz_creates_program(write_db, read_db):
    email = new_email()
    response = complete(write_db, email.upper())
    assert response.success is True
    assert response.program_created is True

    program = get_program(email=email, db=read_db)
    assert program.email == email
    assert program.first_name == "Ivan"
    assert program.category == "energy"
    assert program.level == response.result.determined_level
    assert program.workout_location == "home"
    assert program.dietary_preference == "vegan"
    assert program.program_day == 1
    assert program.days_remaining == 29

    stored = get_latest_result(email=email, db=read_db)
    assert stored.id == response.result_id
    assert stored.total_score == response.result.total_score
    assert stored.breakdown == response.result.breakdown
    answers = {a.question_id: a.answer for a in stored.responses}
    assert answers["ene_q1"] == 8
    assert answers["ene_q5"] == "Ivan"
    assert stored.level_display["level"] == stored.determined_level


def test_retake_replaces_program_and_keeps_results(write_db, read_db):
    email = new_email()
    first = complete(write_db, email)
    second = complete(write_db, email, category="muscle", responses={"mus_q1": 10, "mus_q10": "gym"})
    assert second.program_created is False
    assert second.result_id != first.result_id
    program = get_program(email=email, db=read_db)
    assert program.category == "muscle"
    assert program.workout_location == "gym"
    assert program.first_name == "Ivan"
    assert get_latest_result(email=email, db=read_db).id == second.result_id


def test_level_location_and_preference_updates(write_db, read_db):
    email = new_email()
    complete(write_db, email)

    assert update_level(payload=LevelUpdateRequest(email=email, level="high"), db=write_db).level == "high"
    updated = update_workout_location(
        payload=WorkoutLocationUpdateRequest(email=email, workout_location="gym"), db=write_db
    )
    assert updated.workout_location == "gym"
    assert updated.category == "energy"

    pref = set_dietary_preference(
        payload=DietaryPreferenceRequest(email=email, dietary_preference="omnivor"), db=write_db
    )
    assert pref.dietary_preference == "omnivor"
    assert pref.requires_substitutions is False
    toggled = toggle_dietary_preference(payload=DietaryPreferenceToggleRequest(email=email), db=write_db)
    assert toggled.dietary_preference == "pescatarian"
    assert get_dietary_preference(email=email, db=read_db).dietary_preference == "pescatarian"


def test_day_meals_apply_preference_and_overrides(write_db, read_db):
    email = new_email()
    complete(write_db, email)
    today = date.today()

    day = get_day_meals(email=email, day=today, db=read_db)
    assert day.dietary_preference == "vegan"
    assert [m.meal_number for m in day.meals] == [1, 2, 3, 4, 5]
    assert day.totals.calories == sum(m.calories for m in day.meals)
    assert day.day_of_week == today.isoweekday()

    override = Meal(name="Chef's lentil bowl", calories=480, protein=25, carbs=60, fats=12)
    save_meal_override(
        payload=MealOverrideRequest(email=email, date=today, meal_number=2, meal=override), db=write_db
    )
    save_meal_override(
        payload=MealOverrideRequest(email=email, date=today, meal_number=2, meal=override.model_copy(update={"calories": 500})),
        db=write_db,
    )
    stored = list_meal_overrides(email=email, day=today, db=read_db)
    assert len(stored) == 1
    assert stored[0].meal.calories == 500

    read_db.expire_all()
    day = get_day_meals(email=email, day=today, db=read_db)
    assert day.meals[1].name == "Chef's lentil bowl"
    assert day.meals[1].meal_number == 2

    assert delete_meal_override(email=email, day=today, meal_number=2, db=write_db)["deleted"] == 1
    assert list_meal_overrides(email=email, day=today, db=read_db) == []


def test_meal_completion_toggles(write_db, read_db):
    email = new_email()
    today = date.today()
    first = toggle_meal_completion(payload=MealCompletionRequest(email=email, date=today, meal_number=3), db=write_db)
    assert first.completed_meals == [3]
    toggle_meal_completion(payload=MealCompletionRequest(email=email, date=today, meal_number=1), db=write_db)
    again = toggle_meal_completion(payload=MealCompletionRequest(email=email, date=today, meal_number=3), db=write_db)
    assert again.completed_meals == [1]
    assert get_completed_meals(email=email, day=today, db=read_db).completed_meals == [1]
    other_day = get_completed_meals(email=email, day=today - timedelta(days=1), db=read_db)
    assert other_day.completed_meals == []


SWAP_MONDAY = date(2026, 10, 5)


def vegan_low_energy_program(write_db):
    email = new_email()
    complete(write_db, email)
    update_level(payload=LevelUpdateRequest(email=email, level="low"), db=write_db)
    return email


def test_meal_swap_returns_alternative_from_the_week(write_db, read_db):
    email = vegan_low_energy_program(write_db)
    swap = find_meal_swap(payload=MealSwapRequest(email=email, date=SWAP_MONDAY, meal_number=3), db=read_db)
    assert swap.substitute.name != swap.original.name
    assert swap.substitute.meal_number == 3
    assert abs(swap.substitute.calories - swap.original.calories) <= 100
    assert swap.meal_time_category == "lunch"
    assert not any(i.name == "Chicken breast" for i in swap.substitute.ingredients)


def test_meal_swap_without_candidate_raises_not_found(write_db, read_db):
    email = vegan_low_energy_program(write_db)
    tuesday = SWAP_MONDAY + timedelta(days=1)
    with pytest.raises(NotFoundError) as exc_info:
        find_meal_swap(payload=MealSwapRequest(email=email, date=tuesday, meal_number=3), db=read_db)
    assert exc_info.value.details["resource"] == "MealSubstitute"


def test_meal_swap_for_unknown_slot_raises_not_found(write_db, read_db):
    email = vegan_low_energy_program(write_db)
    with pytest.raises(NotFoundError) as exc_info:
        find_meal_swap(payload=MealSwapRequest(email=email, date=SWAP_MONDAY, meal_number=9), db=read_db)
    assert exc_info.value.details["resource"] == "Meal"


def test_day_workout(write_db, read_db):
    email = new_email()
    complete(write_db, email)
    monday = date.today() - timedelta(days=date.today().isoweekday() - 1)
    workout = get_day_workout(email=email, day=monday, db=read_db)
    assert workout.workout_location == "home"
    assert workout.workout is not None
    assert workout.workout.day_of_week == 1
    assert workout.workout.exercises
