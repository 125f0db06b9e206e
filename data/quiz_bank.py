"""Question bank for the three category quizzes.

Every category quiz has the same twenty-one slots; the numeric suffix of a
question id (``ene_q11``, ``lib_q11``, ``mus_q11``) fixes the slot's
section, answer type and options. Only the symptom questions (q1-q4) are
worded per category.

Points are authored so that every scored question is worth at most 10 and a
higher answer always means a better baseline.
"""

from functools import lru_cache
from typing import Dict, List, Optional

from core.logger import get_logger
from schemas.choices import CATEGORIES, CATEGORY_PREFIXES, ensure_choice
from schemas.quiz_schema import CategoryQuiz, QuizQuestion

logger = get_logger("data.quiz_bank")

QUIZ_VERSION = "2.1"

CATEGORY_NAMES = {
    "energy": "Energy & vitality",
    "libido": "Libido & confidence",
    "muscle": "Muscle & strength",
}

FREQUENCY_OPTIONS = [
    {"id": "never", "text": "Never", "points": 10},
    {"id": "rarely", "text": "Rarely", "points": 8},
    {"id": "sometimes", "text": "Sometimes", "points": 5},
    {"id": "often", "text": "Often", "points": 2},
    {"id": "every_day", "text": "Every day", "points": 0},
]

_SYMPTOMS = {
    "energy": [
        ("How would you rate your energy during the day?", "Very low", "Full of energy"),
        ("How rested do you feel when you wake up?", "Exhausted", "Fully rested"),
        ("How often do you hit an afternoon slump?", FREQUENCY_OPTIONS),
        ("How often do you need caffeine to get through the day?", FREQUENCY_OPTIONS),
    ],
    "libido": [
        ("How would you rate your libido right now?", "Very low", "Very high"),
        ("How confident do you feel in your body?", "Not at all", "Completely"),
        ("How often do you notice a lack of desire?", FREQUENCY_OPTIONS),
        ("How often do you feel too tired for intimacy?", FREQUENCY_OPTIONS),
    ],
    "muscle": [
        ("How satisfied are you with your muscle mass?", "Not at all", "Completely"),
        ("How strong do you feel in everyday activities?", "Weak", "Very strong"),
        ("How often do you stay sore for more than two days after training?", FREQUENCY_OPTIONS),
        ("How often do your lifts stall for weeks at a time?", FREQUENCY_OPTIONS),
    ],
}

# slots shared by every category, keyed by question number
_COMMON_SLOTS = {
    5: {
        "section": "context", "type": "text_input", "scored": False,
        "question": "What is your name?",
        "description": "We will use it to personalise your program.",
        "placeholder": "Your first name",
    },
    6: {
        "section": "context", "type": "single_choice",
        "question": "How old are you?",
        "options": [
            {"id": "18_29", "text": "18-29", "points": 10},
            {"id": "30_39", "text": "30-39", "points": 8},
            {"id": "40_49", "text": "40-49", "points": 6},
            {"id": "50_59", "text": "50-59", "points": 4},
            {"id": "60_plus", "text": "60+", "points": 2},
        ],
    },
    7: {
        "section": "context", "type": "single_choice",
        "question": "Which best describes your body type?",
        "options": [
            {"id": "athletic", "text": "Athletic", "points": 10},
            {"id": "lean", "text": "Lean", "points": 7},
            {"id": "average", "text": "Average", "points": 5},
            {"id": "overweight", "text": "Overweight", "points": 2},
        ],
    },
    8: {
        "section": "training", "type": "single_choice",
        "question": "How often do you train?",
        "options": [
            {"id": "5_plus_per_week", "text": "5+ times a week", "points": 10},
            {"id": "3_4_per_week", "text": "3-4 times a week", "points": 8},
            {"id": "1_2_per_week", "text": "1-2 times a week", "points": 5},
            {"id": "rarely", "text": "Rarely", "points": 2},
            {"id": "never", "text": "I don't train", "points": 0},
        ],
    },
    9: {
        "section": "training", "type": "single_choice",
        "question": "What kind of training do you do most?",
        "options": [
            {"id": "strength", "text": "Strength training", "points": 10},
            {"id": "mixed", "text": "A mix of strength and cardio", "points": 9},
            {"id": "cardio", "text": "Mostly cardio", "points": 6},
            {"id": "walking", "text": "Walking only", "points": 3},
            {"id": "none", "text": "None", "points": 0},
        ],
    },
    10: {
        "section": "training", "type": "single_choice", "scored": False,
        "question": "Where do you prefer to train?",
        "options": [
            {"id": "gym", "text": "At the gym", "points": 0},
            {"id": "home", "text": "At home", "points": 0},
        ],
    },
    11: {
        "section": "nutrition", "type": "single_choice",
        "question": "How would you describe your diet?",
        "options": [
            {"id": "balanced_diet", "text": "Balanced diet", "points": 10},
            {"id": "mostly_healthy", "text": "Mostly healthy", "points": 8},
            {"id": "average_diet", "text": "Average diet", "points": 5},
            {"id": "irregular_meals", "text": "Irregular meals", "points": 2},
            {"id": "fast_food", "text": "Mostly fast food", "points": 0},
        ],
    },
    12: {
        "section": "nutrition", "type": "single_choice",
        "question": "Do you smoke?",
        "options": [
            {"id": "non_smoker", "text": "Non-smoker", "points": 10},
            {"id": "occasionally", "text": "Occasionally", "points": 5},
            {"id": "daily", "text": "Daily", "points": 0},
        ],
    },
    13: {
        "section": "nutrition", "type": "single_choice",
        "question": "How often do you drink alcohol?",
        "options": [
            {"id": "non_drinker", "text": "I don't drink", "points": 10},
            {"id": "rarely", "text": "Rarely", "points": 9},
            {"id": "moderate", "text": "A few times a week", "points": 5},
            {"id": "frequent", "text": "Almost every day", "points": 0},
        ],
    },
    14: {
        "section": "sleep_recovery", "type": "scale",
        "question": "How many hours do you sleep per night?",
        "scale": {"min": 4, "max": 10, "min_label": "4 h or less", "max_label": "10 h"},
    },
    15: {
        "section": "sleep_recovery", "type": "scale",
        "question": "How would you rate the quality of your sleep?",
        "description": "Think about the last two weeks.",
        "scale": {"min": 1, "max": 10, "min_label": "Very poor", "max_label": "Excellent"},
        "dynamic_copy": [
            {"condition": "healthy_habits",
             "text": "Your habits are a strong base. Sleep is where the next gains come from."},
            {"condition": "average_habits",
             "text": "Small changes in sleep often make the biggest difference."},
            {"condition": "unhealthy_habits",
             "text": "Poor sleep amplifies everything else. Be honest here."},
        ],
    },
    16: {
        "section": "sleep_recovery", "type": "scale",
        "question": "How well do you manage stress?",
        "scale": {"min": 1, "max": 10, "min_label": "Not at all", "max_label": "Very well"},
    },
    17: {
        "section": "nutrition", "type": "single_choice",
        "question": "How much protein do you eat?",
        "options": [
            {"id": "every_meal", "text": "Some with every meal", "points": 10},
            {"id": "most_days", "text": "Most days", "points": 7},
            {"id": "not_sure", "text": "I'm not sure", "points": 3},
            {"id": "very_little", "text": "Very little", "points": 0},
        ],
    },
    18: {
        "section": "nutrition", "type": "single_choice",
        "question": "How much water do you drink per day?",
        "options": [
            {"id": "over_2l", "text": "More than 2 litres", "points": 10},
            {"id": "1_2l", "text": "1-2 litres", "points": 6},
            {"id": "under_1l", "text": "Less than 1 litre", "points": 2},
        ],
    },
    19: {
        "section": "context", "type": "single_choice",
        "question": "How committed are you to following a 30-day program?",
        "description": "Be realistic, the program adapts to you.",
        "options": [
            {"id": "all_in", "text": "All in", "points": 10},
            {"id": "committed", "text": "Committed, with some flexibility", "points": 7},
            {"id": "trying", "text": "I'll give it a try", "points": 4},
        ],
        "dynamic_copy": [
            {"condition": "healthy_habits",
             "text": "You already do a lot right. Thirty days of focus will show."},
            {"condition": "average_habits",
             "text": "Consistency is what turns average habits into results."},
            {"condition": "unhealthy_habits",
             "text": "Starting is the hardest part. The first week is built to be easy."},
        ],
    },
    20: {
        "section": "context", "type": "single_choice", "scored": False,
        "question": "Which diet do you follow?",
        "options": [
            {"id": "omnivor", "text": "I eat everything", "points": 0},
            {"id": "pescatarian", "text": "Pescatarian", "points": 0},
            {"id": "vegetarian", "text": "Vegetarian", "points": 0},
            {"id": "vegan", "text": "Vegan", "points": 0},
        ],
    },
    21: {
        "section": "context", "type": "transition_message", "scored": False, "required": False,
        "question": "Your results are ready",
        "description": "Enter your email to see your score and your personal program.",
    },
}

TOTAL_QUESTIONS = 21


def _symptom_slot(entry) -> Dict:
    text = entry[0]
    if isinstance(entry[1], list):
        return {"section": "symptoms", "type": "single_choice", "question": text, "options": entry[1]}
    return {
        "section": "symptoms",
        "type": "scale",
        "question": text,
        "scale": {"min": 1, "max": 10, "min_label": entry[1], "max_label": entry[2]},
    }


@lru_cache(maxsize=None)
def _build_quiz(category: str) -> CategoryQuiz:
    prefix = CATEGORY_PREFIXES[category]
    questions = []
    for number in range(1, TOTAL_QUESTIONS + 1):
        if number <= 4:
            raw = _symptom_slot(_SYMPTOMS[category][number - 1])
        else:
            raw = _COMMON_SLOTS[number]
        questions.append(QuizQuestion(id=f"{prefix}_q{number}", number=number, **raw))
    max_score = sum(q.max_points() for q in questions)
    logger.debug("Built %s quiz: %s questions, max_score=%s", category, len(questions), max_score)
    return CategoryQuiz(
        category=category,
        category_name=CATEGORY_NAMES[category],
        version=QUIZ_VERSION,
        max_score=max_score,
        questions=questions,
    )


def get_quiz_for_category(category: str) -> CategoryQuiz:
    """Return the full quiz for a category.

    Raises:
        InvalidChoiceError: If `category` is not one of the known categories.
    """
    ensure_choice("category", category, CATEGORIES)
    return _build_quiz(category)


def get_question_by_id(category: str, question_id: str) -> Optional[QuizQuestion]:
    """Return one question of the category's quiz, or None if the id is unknown."""
    for question in get_quiz_for_category(category).questions:
        if question.id == question_id:
            return question
    return None


def get_questions_by_section(category: str, section: str) -> List[QuizQuestion]:
    return [q for q in get_quiz_for_category(category).questions if q.section == section]


def get_max_score(category: str) -> float:
    """Sum of the best possible points of every scored question."""
    return get_quiz_for_category(category).max_score


def question_id(category: str, number: int) -> str:
    """Build the namespaced id of a slot, e.g. ``question_id("energy", 11) == "ene_q11"``."""
    return f"{CATEGORY_PREFIXES[category]}_q{number}"
