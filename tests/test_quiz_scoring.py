"""Unit tests for quiz scoring."""

import pytest

from core.exceptions import ConfigurationError, InvalidChoiceError, ValidationError
from data.quiz_bank import get_max_score, get_question_by_id, get_questions_by_section, get_quiz_for_category
from services.quiz_scoring import (
    LevelThresholds,
    QuizScorer,
    calculate_quiz_score,
    get_score_level,
    get_score_level_display,
    get_section_label,
)


def perfect_answers(prefix):
    """Best answer for every scored question of a category."""
    category = {"ene": "energy", "lib": "libido", "mus": "muscle"}[prefix]
    answers = {}
    for q in get_quiz_for_category(category).questions:
        if not q.scored:
            continue
        if q.type == "scale":
            answers[q.id] = q.scale.max
        elif q.type == "single_choice":
            answers[q.id] = max(q.options, key=lambda o: o.points).id
    return answers


def test_bank_has_21_slots_per_category():
    for category, prefix in (("energy", "ene"), ("libido", "lib"), ("muscle", "mus")):
        quiz = get_quiz_for_category(category)
        assert len(quiz.questions) == 21
        assert [q.id for q in quiz.questions][:2] == [f"{prefix}_q1", f"{prefix}_q2"]


def test_slots_share_section_and_type_across_categories():
    for number in range(1, 22):
        shapes = {
            (get_question_by_id(c, f"{p}_q{number}").section, get_question_by_id(c, f"{p}_q{number}").type)
            for c, p in (("energy", "ene"), ("libido", "lib"), ("muscle", "mus"))
        }
        assert len(shapes) == 1


def test_max_score_counts_only_scored_questions():
    # 17 scored questions, each worth at most 10 points
    assert get_max_score("energy") == 170
    assert get_question_by_id("energy", "ene_q10").scored is False
    assert get_question_by_id("energy", "ene_q99") is None
    assert {q.number for q in get_questions_by_section("energy", "sleep_recovery")} == {14, 15, 16}


def test_empty_responses_score_zero_without_error():
    result = calculate_quiz_score({}, "energy")
    assert result.total_score == 0
    assert result.determined_level == "low"
    assert result.habit_condition == "average_habits"
    assert result.breakdown.symptoms == 0
    assert result.responses == []


def test_perfect_answers_score_100_and_high():
    result = calculate_quiz_score(perfect_answers("mus"), "muscle")
    assert result.total_score == 100
    assert result.breakdown.overall == 100
    assert result.determined_level == "high"
    for section in ("symptoms", "nutrition", "training", "sleep_recovery", "context"):
        assert getattr(result.breakdown, section) == 10


def test_section_score_uses_answered_questions_only():
    result = calculate_quiz_score({"ene_q1": 8, "ene_q2": 6}, "energy")
    # (8 + 6) / (2 * 10) * 10 = 7
    assert result.breakdown.symptoms == 7
    assert result.breakdown.nutrition == 0
    # 14 / 170 * 100 = 8.2
    assert result.total_score == 8


def test_scale_answers_are_clamped_and_numeric_strings_accepted():
    result = calculate_quiz_score({"ene_q1": 25, "ene_q2": "4"}, "energy")
    points = {a.question_id: a.points for a in result.responses}
    assert points == {"ene_q1": 10, "ene_q2": 4}


def test_malformed_answers_contribute_zero():
    result = calculate_quiz_score({"ene_q1": "lots", "ene_q3": "whatever", "ene_q2": True}, "energy")
    assert all(a.points == 0 for a in result.responses)
    assert result.total_score == 0


def test_choice_answers_are_normalised_to_option_ids():
    result = calculate_quiz_score({"lib_q12": "Non-smoker", "lib_q11": "balanced diet"}, "libido")
    points = {a.question_id: a.points for a in result.responses}
    assert points == {"lib_q12": 10, "lib_q11": 10}


def test_text_input_and_unscored_answers_are_recorded_with_zero_points():
    result = calculate_quiz_score({"ene_q5": "Ivan", "ene_q10": "home", "ene_q21": "ok"}, "energy")
    recorded = {a.question_id: a.points for a in result.responses}
    assert recorded == {"ene_q5": 0, "ene_q10": 0}
    assert result.breakdown.context == 0
    assert result.breakdown.training == 0


def test_scoring_is_deterministic():
    answers = {"ene_q1": 8, "ene_q2": 7, "ene_q11": "balanced diet", "ene_q12": "non-smoker",
               "ene_q13": "rarely", "ene_q14": 8}
    first = calculate_quiz_score(answers, "energy")
    second = calculate_quiz_score(dict(answers), "energy")
    assert first == second
    assert first.model_dump_json() == second.model_dump_json()


@pytest.mark.parametrize("answers", [
    {},
    {"ene_q1": 10_000, "ene_q14": 10_000, "ene_q15": -50},
    {"ene_q1": float("inf")},
    {"ene_q11": "fast food", "ene_q12": "daily"},
])
def test_overall_score_stays_in_range(answers):
    result = calculate_quiz_score(answers, "energy")
    assert 0 <= result.total_score <= 100
    assert all(0 <= getattr(result.breakdown, s) <= 10
               for s in ("symptoms", "nutrition", "training", "sleep_recovery", "context"))


def test_unknown_category_raises_validation_error():
    with pytest.raises(ValidationError) as exc_info:
        calculate_quiz_score({"ene_q1": 5}, "sleep")
    assert isinstance(exc_info.value, InvalidChoiceError)
    assert exc_info.value.status_code == 400


def test_level_thresholds_and_monotonicity():
    assert get_score_level(0) == "low"
    assert get_score_level(40) == "low"
    assert get_score_level(41) == "normal"
    assert get_score_level(70) == "normal"
    assert get_score_level(71) == "high"
    order = {"low": 0, "normal": 1, "high": 2}
    for category in ("energy", "libido", "muscle"):
        levels = [order[get_score_level(s, category)] for s in range(101)]
        assert levels == sorted(levels)


def test_descending_direction_mirrors_levels(monkeypatch):
    from services import quiz_scoring

    monkeypatch.setitem(quiz_scoring.LEVEL_DIRECTION, "energy", "descending")
    assert get_score_level(100, "energy") == "low"
    assert get_score_level(0, "energy") == "high"


def test_custom_thresholds():
    scorer = QuizScorer(LevelThresholds(normal_min=30, high_min=60))
    assert scorer.get_score_level(35) == "normal"
    assert scorer.get_score_level(60) == "high"


def test_invalid_thresholds_raise_configuration_error(monkeypatch):
    with pytest.raises(ConfigurationError):
        LevelThresholds(normal_min=80, high_min=50)
    monkeypatch.setenv("QUIZ_LEVEL_HIGH_MIN", "lots")
    with pytest.raises(ConfigurationError):
        LevelThresholds.from_env()


def test_level_display_and_section_labels():
    assert get_score_level_display(85)["display_level"] == "excellent"
    assert get_score_level_display(50)["discount"] == 20
    assert get_score_level_display(10)["level"] == "low"
    assert get_section_label("sleep_recovery") == "Sleep & recovery"
    assert get_section_label("unknown") == "unknown"
