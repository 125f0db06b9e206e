"""Quiz scoring service.

Turns a raw answer map into a `QuizScoreResult`: per-section sub-scores,
an overall score in [0, 100], the program level derived from it and the
habit condition used to pick dynamic question copy.

Scoring is a pure function of (responses, category). Missing or malformed
answers contribute zero; only a category outside the closed enum raises.
"""

import math
import os
from typing import Any, Dict, Mapping, Optional

from core.exceptions import ConfigurationError
from core.logger import get_logger
from data.quiz_bank import get_quiz_for_category, question_id
from schemas.choices import CATEGORIES, SECTIONS, ensure_choice
from schemas.quiz_schema import QuizBreakdown, QuizQuestion, QuizScoreResult, ScoredAnswer

logger = get_logger("services.quiz_scoring")

# points awarded per habit slot, keyed by option id
HABIT_RUBRIC = {
    11: {"balanced_diet": 2, "mostly_healthy": 2, "average_diet": 1},
    12: {"non_smoker": 2, "occasionally": 1},
    13: {"non_drinker": 2, "rarely": 2, "moderate": 1},
}
# free-text answers that match no option id; first keyword found wins
HABIT_KEYWORDS = {
    11: (("unhealthy", 0), ("fast", 0), ("irregular", 0), ("healthy", 2), ("balanced", 2), ("average", 1)),
    12: (("non", 2), ("never", 2), ("occasion", 1)),
    13: (("non", 2), ("never", 2), ("rare", 2), ("moderate", 1)),
}
SLEEP_HOURS_SLOT = 14
MIN_RESPONSES_FOR_HABITS = 5

# higher score means a higher baseline and so a more intensive program
LEVEL_DIRECTION = {
    "energy": "ascending",
    "libido": "ascending",
    "muscle": "ascending",
}

SECTION_LABELS = {
    "symptoms": "Symptoms",
    "nutrition": "Nutrition",
    "training": "Training",
    "sleep_recovery": "Sleep & recovery",
    "context": "Commitment & goals",
}


def round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def normalize_option(value: Any) -> str:
    """Normalise a choice answer to an option id ("Non-smoker" -> "non_smoker")."""
    text = str(value).strip().lower()
    for ch in (" ", "-"):
        text = text.replace(ch, "_")
    return text


def as_number(value: Any) -> Optional[float]:
    """Return a numeric answer as float, accepting numeric strings. Bools are not numbers."""
    if isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        return None if math.isnan(value) else float(value)
    if isinstance(value, str):
        try:
            f = float(value.strip())
        except ValueError:
            return None
        return None if math.isnan(f) else f
    return None


class LevelThresholds:
    """Cut points between low / normal / high on the 0-100 overall score."""

    def __init__(self, normal_min: int = 41, high_min: int = 71):
        if not (0 <= normal_min <= high_min <= 100):
            raise ConfigurationError(
                f"Invalid level thresholds: normal_min={normal_min}, high_min={high_min}",
                config_key="QUIZ_LEVEL_NORMAL_MIN",
            )
        self.normal_min = normal_min
        self.high_min = high_min

    @classmethod
    def from_env(cls) -> "LevelThresholds":
        """Build thresholds from QUIZ_LEVEL_NORMAL_MIN / QUIZ_LEVEL_HIGH_MIN."""
        values = {}
        for key, default in (("QUIZ_LEVEL_NORMAL_MIN", 41), ("QUIZ_LEVEL_HIGH_MIN", 71)):
            raw = os.getenv(key)
            if raw is None or raw.strip() == "":
                values[key] = default
                continue
            try:
                values[key] = int(raw)
            except ValueError:
                raise ConfigurationError(f"{key} must be an integer, got {raw!r}", config_key=key)
        return cls(values["QUIZ_LEVEL_NORMAL_MIN"], values["QUIZ_LEVEL_HIGH_MIN"])


class QuizScorer:
    """Scores completed quizzes and classifies habit conditions."""

    def __init__(self, thresholds: Optional[LevelThresholds] = None):
        self.thresholds = thresholds or LevelThresholds.from_env()

    def score_answer(self, question: QuizQuestion, answer: Any) -> float:
        """Points earned by one answer. Never raises for malformed answers."""
        if not question.scored or question.type in ("text_input", "transition_message"):
            return 0
        if question.type == "scale" and question.scale:
            value = as_number(answer)
            if value is None:
                return 0
            value = min(max(value, question.scale.min), question.scale.max)
            return value * question.scale.points_multiplier
        if question.type == "single_choice" and question.options:
            wanted = normalize_option(answer)
            for option in question.options:
                if option.id == wanted:
                    return option.points
        return 0

    def calculate_quiz_score(self, responses: Mapping[str, Any], category: str) -> QuizScoreResult:
        """Score a completed quiz.

        Args:
            responses: Question id -> answer (scale value, option id or text).
            category: Quiz category.

        Returns:
            The immutable score result.

        Raises:
            InvalidChoiceError: If `category` is not a known category.
        """
        ensure_choice("category", category, CATEGORIES)
        quiz = get_quiz_for_category(category)
        responses = responses or {}

        totals = {s: 0.0 for s in SECTIONS}
        counts = {s: 0 for s in SECTIONS}
        scored = []
        total_points = 0.0
        for question in quiz.questions:
            if question.type == "transition_message" or question.id not in responses:
                continue
            answer = responses[question.id]
            if answer is None:
                continue
            points = self.score_answer(question, answer)
            if not isinstance(answer, (int, float, str)) or isinstance(answer, bool):
                answer = str(answer)
            scored.append(ScoredAnswer(question_id=question.id, answer=answer, points=points))
            if not question.scored or question.type == "text_input":
                continue
            totals[question.section] += points
            counts[question.section] += 1
            total_points += points

        sections = {}
        for section in SECTIONS:
            if counts[section] == 0:
                sections[section] = 0
            else:
                sections[section] = min(10, round_half_up(totals[section] / (counts[section] * 10) * 10))

        overall = 0
        if quiz.max_score > 0:
            overall = min(100, max(0, round_half_up(total_points / quiz.max_score * 100)))

        result = QuizScoreResult(
            category=category,
            total_score=overall,
            determined_level=self.get_score_level(overall, category),
            breakdown=QuizBreakdown(overall=overall, **sections),
            habit_condition=self.classify_habit_condition(responses, category),
            responses=scored,
        )
        logger.info(
            "Scored %s quiz: %s answers, total=%s, level=%s",
            category, len(scored), overall, result.determined_level,
        )
        return result

    def get_score_level(self, score: float, category: Optional[str] = None) -> str:
        """Map an overall score to a program level.

        Ascending categories get more intensive levels for higher scores;
        descending ones are mirrored.
        """
        direction = LEVEL_DIRECTION.get(category, "ascending") if category else "ascending"
        if direction == "descending":
            score = 100 - score
        if score >= self.thresholds.high_min:
            return "high"
        if score >= self.thresholds.normal_min:
            return "normal"
        return "low"

    def habit_points(self, slot: int, answer: str) -> int:
        """Points of one habit answer: its option id, else the first keyword it contains."""
        option = normalize_option(answer)
        rubric = HABIT_RUBRIC[slot]
        if option in rubric:
            return rubric[option]
        for keyword, points in HABIT_KEYWORDS[slot]:
            if keyword in option:
                return points
        return 0

    def classify_habit_condition(self, responses: Mapping[str, Any], category: str) -> str:
        """Classify lifestyle habits from the nutrition, smoking, alcohol and sleep answers.

        Returns ``average_habits`` while fewer than five questions are answered
        or none of the four habit slots is.
        """
        ensure_choice("category", category, CATEGORIES)
        responses = responses or {}
        answered = [k for k, v in responses.items() if v is not None and v != ""]
        if len(answered) < MIN_RESPONSES_FOR_HABITS:
            return "average_habits"

        points = []
        for slot, rubric in HABIT_RUBRIC.items():
            answer = responses.get(question_id(category, slot))
            if isinstance(answer, str) and answer.strip():
                points.append(self.habit_points(slot, answer))
        # sleep hours only count when answered on the numeric scale
        sleep = responses.get(question_id(category, SLEEP_HOURS_SLOT))
        if isinstance(sleep, (int, float)) and not isinstance(sleep, bool):
            points.append(2 if sleep >= 7 else 1 if sleep >= 6 else 0)

        if not points:
            return "average_habits"
        average = sum(points) / len(points)
        if average >= 1.5:
            condition = "healthy_habits"
        elif average >= 0.8:
            condition = "average_habits"
        else:
            condition = "unhealthy_habits"
        logger.debug("Habit condition for %s: avg=%.2f -> %s", category, average, condition)
        return condition

    def get_dynamic_copy(self, question: QuizQuestion, responses: Mapping[str, Any], category: str) -> str:
        """Pick the question description variant matching the user's habits."""
        if not question.dynamic_copy:
            return question.description
        condition = self.classify_habit_condition(responses, category)
        for variant in question.dynamic_copy:
            if variant.condition == condition:
                return variant.text
        return question.dynamic_copy[0].text or question.description


scorer = QuizScorer()


def calculate_quiz_score(responses: Mapping[str, Any], category: str) -> QuizScoreResult:
    return scorer.calculate_quiz_score(responses, category)


def get_score_level(score: float, category: Optional[str] = None) -> str:
    return scorer.get_score_level(score, category)


def classify_habit_condition(responses: Mapping[str, Any], category: str) -> str:
    return scorer.classify_habit_condition(responses, category)


def get_dynamic_copy(question: QuizQuestion, responses: Mapping[str, Any], category: str) -> str:
    return scorer.get_dynamic_copy(question, responses, category)


def get_score_level_display(score: float) -> Dict[str, Any]:
    """Display metadata for the results page."""
    level = scorer.get_score_level(score)
    if level == "high":
        return {
            "level": "high",
            "display_level": "excellent",
            "title": "EXCELLENT",
            "message": "Congratulations! You are in great shape and ready for an intensive program.",
            "discount": 15,
        }
    if level == "normal":
        return {
            "level": "normal",
            "display_level": "good",
            "title": "GOOD SHAPE",
            "message": "You are doing well, with room to improve.",
            "discount": 20,
        }
    return {
        "level": "low",
        "display_level": "critical",
        "title": "NEEDS IMPROVEMENT",
        "message": "There is a lot to gain. We start with the basics.",
        "discount": 30,
    }


def get_section_label(section: str) -> str:
    return SECTION_LABELS.get(section, section)


__all__ = [
    "QuizScorer",
    "LevelThresholds",
    "scorer",
    "calculate_quiz_score",
    "get_score_level",
    "classify_habit_condition",
    "get_dynamic_copy",
    "get_score_level_display",
    "get_section_label",
]
