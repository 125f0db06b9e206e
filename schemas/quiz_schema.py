"""Schemas for the quiz funnel: question bank, scoring results and requests."""

from pydantic import BaseModel, Field
from typing import Any, Dict, List, Optional, Union

from .choices import Category, Level, Section, HabitCondition, QuestionType

AnswerValue = Union[int, float, str]


class ScaleConfig(BaseModel):
    min: int
    max: int
    min_label: str = ""
    max_label: str = ""
    points_multiplier: float = 1.0


class QuestionOption(BaseModel):
    id: str
    text: str
    points: float = 0


class DynamicCopyVariant(BaseModel):
    """Alternative description shown for one habit condition."""

    condition: HabitCondition
    text: str


class QuizQuestion(BaseModel):
    """One question of a category quiz. Section and meaning follow `number`."""

    id: str
    number: int
    section: Section
    type: QuestionType
    question: str
    description: str = ""
    required: bool = True
    scored: bool = True
    options: Optional[List[QuestionOption]] = None
    scale: Optional[ScaleConfig] = None
    dynamic_copy: Optional[List[DynamicCopyVariant]] = None
    placeholder: Optional[str] = None

    def max_points(self) -> float:
        """Highest number of points an answer to this question can earn."""
        if not self.scored or self.type in ("text_input", "transition_message"):
            return 0
        if self.type == "scale" and self.scale:
            return self.scale.max * self.scale.points_multiplier
        if self.type == "single_choice" and self.options:
            return max(opt.points for opt in self.options)
        return 0


class CategoryQuiz(BaseModel):
    category: Category
    category_name: str
    version: str
    max_score: float
    questions: List[QuizQuestion]


class QuizBreakdown(BaseModel):
    """Per-section sub-scores (0-10) plus the overall score (0-100)."""

    symptoms: int = 0
    nutrition: int = 0
    training: int = 0
    sleep_recovery: int = 0
    context: int = 0
    overall: int = 0


class ScoredAnswer(BaseModel):
    question_id: str
    answer: AnswerValue
    points: float


class QuizScoreResult(BaseModel):
    """Outcome of scoring one completed quiz. Immutable once computed."""

    model_config = {"frozen": True}

    category: Category
    total_score: int = Field(..., ge=0, le=100)
    determined_level: Level
    breakdown: QuizBreakdown
    habit_condition: HabitCondition
    responses: List[ScoredAnswer] = []


class QuizScoreRequest(BaseModel):
    category: Category = Field(..., examples=["energy"])
    responses: Dict[str, AnswerValue] = Field(
        default_factory=dict,
        examples=[{"ene_q1": 8, "ene_q2": 7, "ene_q11": "balanced_diet", "ene_q14": 8}],
        description="Question id -> answer (scale value, option id or free text)",
    )


class HabitConditionResponse(BaseModel):
    category: Category
    condition: HabitCondition


class QuizCompleteRequest(BaseModel):
    """Payload sent when the user reaches the email-capture step."""

    email: str = Field(..., examples=["ivan@example.com"])
    category: Category = Field(..., examples=["muscle"])
    responses: Dict[str, AnswerValue] = Field(default_factory=dict)
    session_id: Optional[str] = None


class QuizCompleteResponse(BaseModel):
    success: bool = True
    result_id: int
    result: QuizScoreResult
    program_created: bool


class StoredQuizResult(BaseModel):
    """A persisted quiz result as returned by the results endpoint."""

    id: int
    email: str
    category: Category
    total_score: int
    determined_level: Level
    habit_condition: HabitCondition
    workout_location: Optional[str] = None
    breakdown: QuizBreakdown
    responses: List[ScoredAnswer]
    created_at: str
    level_display: Dict[str, Any] = {}
