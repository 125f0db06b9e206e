"""Tests for the habit condition classifier and dynamic question copy."""

import pytest

from core.exceptions import ValidationError
from data.quiz_bank import get_question_by_id
from services.quiz_scoring import calculate_quiz_score, classify_habit_condition, get_dynamic_copy, scorer


def test_healthy_habits_example():
    responses = {
        "ene_q1": 8,
        "ene_q2": 7,
        "ene_q11": "balanced diet",
        "ene_q12": "non-smoker",
        "ene_q13": "rarely",
        "ene_q14": 8,
    }
    assert classify_habit_condition(responses, "energy") == "healthy_habits"
    assert calculate_quiz_score(responses, "energy").habit_condition == "healthy_habits"


def test_fewer_than_five_responses_defaults_to_average():
    responses = {"mus_q11": "fast_food", "mus_q12": "daily", "mus_q13": "frequent", "mus_q14": 4}
    assert classify_habit_condition(responses, "muscle") == "average_habits"


def test_no_habit_slots_answered_defaults_to_average():
    responses = {"lib_q1": 3, "lib_q2": 3, "lib_q3": "often", "lib_q4": "often", "lib_q6": "30_39"}
    assert classify_habit_condition(responses, "libido") == "average_habits"


def test_unhealthy_habits():
    responses = {
        "lib_q1": 3, "lib_q2": 3,
        "lib_q11": "fast_food", "lib_q12": "daily", "lib_q13": "frequent", "lib_q14": 5,
    }
    assert classify_habit_condition(responses, "libido") == "unhealthy_habits"


def test_average_habits_from_mixed_answers():
    # 1 + 1 + 1 + 1 = 1.0 average
    responses = {
        "ene_q1": 5,
        "ene_q11": "average_diet", "ene_q12": "occasionally", "ene_q13": "moderate", "ene_q14": 6,
    }
    assert classify_habit_condition(responses, "energy") == "average_habits"


def test_only_answered_slots_are_averaged():
    # sleep 7h -> 2 and smoking non_smoker -> 2; nutrition and alcohol unanswered
    responses = {"ene_q1": 5, "ene_q2": 5, "ene_q3": "never", "ene_q12": "non_smoker", "ene_q14": 7}
    assert classify_habit_condition(responses, "energy") == "healthy_habits"


def test_unknown_string_answer_counts_as_zero():
    # 2 (sleep) + 0 (unknown diet) = 1.0 average
    responses = {"ene_q1": 5, "ene_q2": 5, "ene_q3": "never", "ene_q11": "keto", "ene_q14": 9}
    assert classify_habit_condition(responses, "energy") == "average_habits"


@pytest.mark.parametrize("slot, answer, points", [
    (11, "I eat healthy", 2),
    (11, "Unhealthy, lots of sugar", 0),
    (11, "about average", 1),
    (12, "none", 2),
    (12, "never smoked", 2),
    (13, "None at all", 2),
    (13, "rare", 2),
    (13, "weekends only", 0),
])
def test_free_text_habit_answers_fall_back_to_keywords(slot, answer, points):
    assert scorer.habit_points(slot, answer) == points


def test_free_text_answers_classify_like_option_ids():
    responses = {"ene_q1": 5, "ene_q2": 5, "ene_q11": "healthy", "ene_q12": "none", "ene_q13": "none", "ene_q14": 8}
    assert classify_habit_condition(responses, "energy") == "healthy_habits"


def test_sleep_must_be_numeric():
    # a string sleep answer is ignored, leaving only the diet slot
    responses = {"ene_q1": 5, "ene_q2": 5, "ene_q3": "never", "ene_q11": "fast_food", "ene_q14": "8"}
    assert classify_habit_condition(responses, "energy") == "unhealthy_habits"


def test_invalid_category_raises():
    with pytest.raises(ValidationError):
        classify_habit_condition({}, "focus")


def test_dynamic_copy_follows_condition():
    question = get_question_by_id("energy", "ene_q15")
    healthy = {
        "ene_q1": 8, "ene_q2": 7, "ene_q11": "balanced_diet", "ene_q12": "non_smoker",
        "ene_q13": "rarely", "ene_q14": 8,
    }
    unhealthy = {
        "ene_q1": 2, "ene_q2": 2, "ene_q11": "fast_food", "ene_q12": "daily",
        "ene_q13": "frequent", "ene_q14": 4,
    }
    texts = {variant.condition: variant.text for variant in question.dynamic_copy}
    assert get_dynamic_copy(question, healthy, "energy") == texts["healthy_habits"]
    assert get_dynamic_copy(question, unhealthy, "energy") == texts["unhealthy_habits"]
    assert get_dynamic_copy(question, {}, "energy") == texts["average_habits"]


def test_dynamic_copy_without_variants_returns_description():
    question = get_question_by_id("energy", "ene_q5")
    assert get_dynamic_copy(question, {}, "energy") == question.description
