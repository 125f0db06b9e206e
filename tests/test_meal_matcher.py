"""Unit tests for the meal swap finder."""

from schemas.meal_schema import SubstitutedMeal
from services.meal_matcher import MealMatcher, find_meal_substitute, get_meal_time_category


def make_meal(number, name, calories, protein, carbs, fats):
    return SubstitutedMeal(
        meal_number=number, time="14:00", name=name,
        calories=calories, protein=protein, carbs=carbs, fats=fats,
    )


def sample_plan():
    return {
        1: [make_meal(3, "Chicken with rice", 500, 45, 50, 10), make_meal(5, "Salmon with rice", 520, 35, 40, 20)],
        2: [make_meal(3, "Turkey with quinoa", 480, 44, 48, 9), make_meal(5, "Beef with rice", 700, 40, 60, 30)],
        3: [make_meal(3, "Lentil stew", 450, 20, 70, 8)],
        4: [make_meal(3, "Pork with potatoes", 560, 30, 40, 28)],
        5: [make_meal(3, "Beef with buckwheat", 800, 50, 60, 35)],
    }


def test_picks_most_similar_same_slot_meal():
    current = sample_plan()[1][0]
    result = MealMatcher(calorie_threshold=100).find_substitute(current, sample_plan())
    assert result is not None
    meal, score = result
    assert meal.name == "Turkey with quinoa"
    assert 0.99 < score <= 1.0


def test_candidates_respect_slot_name_and_threshold():
    current = sample_plan()[1][0]
    names = {m.name for m in MealMatcher().candidates(current, sample_plan(), 100)}
    # Salmon is another slot; Beef with buckwheat is 300 kcal away
    assert names == {"Turkey with quinoa", "Lentil stew", "Pork with potatoes"}


def test_duplicate_meals_across_days_are_considered_once():
    plan = sample_plan()
    plan[6] = [make_meal(3, "Turkey with quinoa", 480, 44, 48, 9)]
    names = [m.name for m in MealMatcher().candidates(plan[1][0], plan, 100)]
    assert names.count("Turkey with quinoa") == 1


def test_result_is_deterministic():
    current = sample_plan()[1][0]
    picks = {find_meal_substitute(current, sample_plan()).name for _ in range(5)}
    assert picks == {"Turkey with quinoa"}


def test_returns_none_when_nothing_qualifies():
    current = make_meal(3, "Feast", 2000, 100, 200, 80)
    assert find_meal_substitute(current, sample_plan()) is None
    assert find_meal_substitute(current, {}) is None


def test_threshold_override():
    current = sample_plan()[1][0]
    meal = find_meal_substitute(current, {5: sample_plan()[5]}, threshold=400)
    assert meal.name == "Beef with buckwheat"


def test_meal_time_categories():
    assert get_meal_time_category(1) == "breakfast"
    assert get_meal_time_category(2) == "snack"
    assert get_meal_time_category(3) == "lunch"
    assert get_meal_time_category(4) == "snack"
    assert get_meal_time_category(5) == "dinner"
    assert get_meal_time_category(9) == "other"
