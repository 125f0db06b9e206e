"""Tests for loading meal and workout plans from the CSV fixtures."""

import pytest

from core.exceptions import ValidationError
from data.content_loader import get_day_meals, get_meal_plan, get_workout_plan


@pytest.mark.parametrize("category", ["energy", "libido", "muscle"])
@pytest.mark.parametrize("level", ["low", "normal", "high"])
def test_every_program_has_a_full_week_of_meals(category, level):
    plan = get_meal_plan(category, level)
    assert sorted(plan) == list(range(1, 8))
    for meals in plan.values():
        assert [m.meal_number for m in meals] == [1, 2, 3, 4, 5]
        for meal in meals:
            assert meal.ingredients
            assert meal.calories == sum(i.calories for i in meal.ingredients)


def test_meal_fields_are_parsed():
    meal = get_day_meals("energy", "low", 1)[2]
    assert meal.name == "Chicken with rice"
    assert meal.time == "14:00"
    chicken = meal.ingredients[0]
    assert chicken.name == "Chicken breast"
    assert chicken.quantity == "130g"
    assert chicken.calories == 215
    assert chicken.protein == pytest.approx(40.3)


def test_levels_scale_portions():
    low = sum(m.calories for m in get_day_meals("muscle", "low", 1))
    high = sum(m.calories for m in get_day_meals("muscle", "high", 1))
    assert high > low


def test_returned_plans_are_copies():
    plan = get_meal_plan("energy", "normal")
    plan[1][0].name = "Changed"
    plan[1][0].ingredients.clear()
    fresh = get_meal_plan("energy", "normal")
    assert fresh[1][0].name != "Changed"
    assert fresh[1][0].ingredients


@pytest.mark.parametrize("location", ["home", "gym"])
def test_workout_week_has_rest_days(location):
    plan = get_workout_plan("energy", "normal", location)
    assert sorted(plan) == list(range(1, 8))
    assert plan[6].is_rest_day and plan[7].is_rest_day
    assert plan[6].exercises == []
    monday = plan[1]
    assert not monday.is_rest_day
    assert [e.order for e in monday.exercises] == sorted(e.order for e in monday.exercises)
    assert all(e.sets == 3 for e in monday.exercises)


def test_reps_keep_their_text():
    exercises = get_workout_plan("energy", "low", "home")[1].exercises
    assert {e.reps for e in exercises} >= {"15", "30s"}


@pytest.mark.parametrize("args", [
    ("sleep", "low"),
    ("energy", "extreme"),
])
def test_invalid_meal_plan_keys_raise(args):
    with pytest.raises(ValidationError):
        get_meal_plan(*args)


def test_invalid_location_raises():
    with pytest.raises(ValidationError):
        get_workout_plan("energy", "low", "park")
