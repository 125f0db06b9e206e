"""Tests for program assembly: day arithmetic, profile extraction and day building."""

from datetime import date, timedelta

import pytest

from core.exceptions import ValidationError
from schemas.meal_schema import Meal
from schemas.program_schema import ProgramAssignment
from services.program_service import (
    build_day_meals,
    build_day_workout,
    build_week_meals,
    day_totals,
    extract_dietary_preference,
    extract_first_name,
    extract_workout_location,
    get_days_remaining,
    get_program_day,
    is_program_completed,
    next_dietary_preference,
)

MONDAY = date(2026, 10, 5)


def assignment(**overrides):
    values = dict(
        category="energy",
        level="low",
        workout_location="home",
        dietary_preference="omnivor",
        program_start_date=MONDAY,
    )
    values.update(overrides)
    return ProgramAssignment(**values)


def test_program_day_counts_from_one_and_is_capped():
    assert get_program_day(MONDAY, MONDAY) == 1
    assert get_program_day(MONDAY, MONDAY + timedelta(days=9)) == 10
    assert get_program_day(MONDAY, MONDAY - timedelta(days=3)) == 1
    assert get_program_day(MONDAY, MONDAY + timedelta(days=45)) == 30
    assert get_program_day(MONDAY, MONDAY + timedelta(days=45), length=60) == 46


def test_days_remaining_and_completion():
    assert get_days_remaining(MONDAY, MONDAY) == 29
    assert get_days_remaining(MONDAY, MONDAY + timedelta(days=29)) == 0
    assert is_program_completed(MONDAY, MONDAY + timedelta(days=29)) is False
    assert is_program_completed(MONDAY, MONDAY + timedelta(days=30)) is True


def test_dietary_preference_ring():
    assert next_dietary_preference("omnivor") == "pescatarian"
    assert next_dietary_preference("pescatarian") == "vegetarian"
    assert next_dietary_preference("vegetarian") == "vegan"
    assert next_dietary_preference("vegan") == "omnivor"
    with pytest.raises(ValidationError):
        next_dietary_preference("carnivore")


def test_profile_fields_from_quiz_answers():
    responses = {"mus_q5": "  ivan petrov ", "mus_q10": "Home", "mus_q20": "Vegetarian"}
    assert extract_first_name(responses, "muscle") == "ivan"
    assert extract_workout_location(responses, "muscle") == "home"
    assert extract_dietary_preference(responses, "muscle") == "vegetarian"


def test_profile_field_defaults():
    assert extract_first_name({}, "energy") is None
    assert extract_first_name({"ene_q5": 42}, "energy") is None
    assert extract_workout_location({}, "energy") == "gym"
    assert extract_workout_location({"ene_q10": "park"}, "energy") == "gym"
    assert extract_dietary_preference({}, "energy") == "omnivor"
    assert extract_dietary_preference({"ene_q20": "omnivore"}, "energy") == "omnivor"


def test_build_day_meals_uses_weekday_content():
    meals = build_day_meals(assignment(), MONDAY)
    assert [m.meal_number for m in meals] == [1, 2, 3, 4, 5]
    assert meals[2].name == "Chicken with rice"
    assert all(m.substitution_count == 0 for m in meals)


def test_build_day_meals_applies_dietary_preference():
    meals = build_day_meals(assignment(dietary_preference="vegan"), MONDAY)
    assert meals[2].name == "Tofu with rice"
    for meal in meals:
        assert meal.calories == sum(i.calories for i in meal.ingredients)
        assert not any(i.name == "Chicken breast" for i in meal.ingredients)


def test_override_replaces_its_slot_and_keeps_slot_time():
    override = Meal(meal_number=9, time="23:00", name="Lentil bowl", calories=480, protein=25, carbs=60, fats=12)
    meals = build_day_meals(assignment(dietary_preference="vegan"), MONDAY, {3: override})
    lunch = meals[2]
    assert lunch.name == "Lentil bowl"
    assert lunch.meal_number == 3
    assert lunch.time == "14:00"
    assert lunch.substitution_count == 0
    assert meals[4].name != "Lentil bowl"


def test_day_totals_sum_the_meals():
    meals = build_day_meals(assignment(), MONDAY)
    totals = day_totals(meals)
    assert totals.calories == sum(m.calories for m in meals)
    assert totals.protein == sum(m.protein for m in meals)


def test_build_week_meals_covers_every_weekday():
    week = build_week_meals(assignment(dietary_preference="pescatarian"))
    assert sorted(week) == list(range(1, 8))
    assert all(
        i.name not in ("Chicken breast", "Turkey fillet", "Lean beef", "Pork loin", "Lamb")
        for meals in week.values() for m in meals for i in m.ingredients
    )


def test_build_day_workout_follows_location_and_weekday():
    home = build_day_workout(assignment(), MONDAY)
    gym = build_day_workout(assignment(workout_location="gym"), MONDAY)
    assert home.name != gym.name
    saturday = build_day_workout(assignment(), MONDAY + timedelta(days=5))
    assert saturday.is_rest_day
