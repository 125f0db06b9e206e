"""SQLAlchemy ORM models for the program engine.

These tables make up the record store behind the dashboard: quiz results
(with their individual answers), the user's program assignment, and the
per-day tracking tables for meals, workouts, sleep and supplement intake,
keyed by email and date. Models are plain declarative classes with no
behavior; scoring and substitution live in `services`.
"""

from sqlalchemy import (
    Boolean, Column, Integer, String, Float, Date, DateTime, ForeignKey, Text, UniqueConstraint,
)
from sqlalchemy.orm import declarative_base, relationship
from datetime import datetime

Base = declarative_base()


class QuizResult(Base):
    """A completed quiz. Never updated; a retake inserts a new row."""

    __tablename__ = "quiz_results"
    id = Column(Integer, primary_key=True, index=True)
    email = Column(String, nullable=False, index=True)
    session_id = Column(String, nullable=True)
    category = Column(String, nullable=False)
    total_score = Column(Integer, nullable=False)
    determined_level = Column(String, nullable=False)
    habit_condition = Column(String, nullable=False)
    workout_location = Column(String, nullable=True)
    breakdown_symptoms = Column(Integer, nullable=False, default=0)
    breakdown_nutrition = Column(Integer, nullable=False, default=0)
    breakdown_training = Column(Integer, nullable=False, default=0)
    breakdown_sleep_recovery = Column(Integer, nullable=False, default=0)
    breakdown_context = Column(Integer, nullable=False, default=0)
    breakdown_overall = Column(Integer, nullable=False, default=0)
    created_at = Column(DateTime, default=datetime.utcnow)

    answers = relationship("QuizAnswer", back_populates="result", cascade="all, delete-orphan")


class QuizAnswer(Base):
    """One scored answer belonging to a quiz result."""

    __tablename__ = "quiz_answers"
    id = Column(Integer, primary_key=True, index=True)
    result_id = Column(Integer, ForeignKey("quiz_results.id"), nullable=False)
    question_id = Column(String, nullable=False)
    answer = Column(Text, nullable=False)
    points = Column(Float, nullable=False, default=0)

    result = relationship("QuizResult", back_populates="answers")


class UserProgram(Base):
    """The program a user is following (one row per email)."""

    __tablename__ = "user_programs"
    id = Column(Integer, primary_key=True, index=True)
    email = Column(String, nullable=False, unique=True, index=True)
    first_name = Column(String, nullable=True)
    category = Column(String, nullable=False)
    level = Column(String, nullable=False)
    workout_location = Column(String, nullable=False, default="gym")
    dietary_preference = Column(String, nullable=False, default="omnivor")
    program_start_date = Column(Date, nullable=False)
    quiz_result_id = Column(Integer, ForeignKey("quiz_results.id"), nullable=True)
    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)


class MealCompletion(Base):
    """Marks a meal of a given day as eaten. Presence means completed."""

    __tablename__ = "meal_completions"
    __table_args__ = (UniqueConstraint("email", "date", "meal_number", name="uq_meal_completion"),)
    id = Column(Integer, primary_key=True, index=True)
    email = Column(String, nullable=False, index=True)
    date = Column(Date, nullable=False)
    meal_number = Column(Integer, nullable=False)
    created_at = Column(DateTime, default=datetime.utcnow)


class MealSubstitution(Base):
    """An AI-generated replacement for one meal on one day.

    `substituted_meal` holds the JSON-encoded meal; it takes precedence over
    the deterministic dietary substitution for that slot.
    """

    __tablename__ = "meal_substitutions"
    __table_args__ = (UniqueConstraint("email", "date", "meal_number", name="uq_meal_substitution"),)
    id = Column(Integer, primary_key=True, index=True)
    email = Column(String, nullable=False, index=True)
    date = Column(Date, nullable=False)
    meal_number = Column(Integer, nullable=False)
    substituted_meal = Column(Text, nullable=False)
    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)


class WorkoutSession(Base):
    """A finished workout. One per (email, date, day_of_week); never overwritten."""

    __tablename__ = "workout_sessions"
    __table_args__ = (UniqueConstraint("email", "date", "day_of_week", name="uq_workout_session"),)
    id = Column(Integer, primary_key=True, index=True)
    email = Column(String, nullable=False, index=True)
    date = Column(Date, nullable=False)
    day_of_week = Column(Integer, nullable=False)
    workout_name = Column(String, nullable=False)
    target_duration_minutes = Column(Integer, nullable=False, default=0)
    actual_duration_minutes = Column(Integer, nullable=False, default=0)
    # JSON: exercise key -> list of completed set numbers
    completed_sets = Column(Text, nullable=False, default="{}")
    total_sets_completed = Column(Integer, nullable=False, default=0)
    finished_at = Column(DateTime, default=datetime.utcnow)


class SleepEntry(Base):
    """Sleep logged for one night, upserted by (email, date)."""

    __tablename__ = "sleep_entries"
    __table_args__ = (UniqueConstraint("email", "date", name="uq_sleep_entry"),)
    id = Column(Integer, primary_key=True, index=True)
    email = Column(String, nullable=False, index=True)
    date = Column(Date, nullable=False)
    hours_slept = Column(Float, nullable=False, default=0)
    quality_rating = Column(Integer, nullable=False, default=0)
    feeling = Column(String, nullable=False, default="neutral")
    notes = Column(Text, nullable=True)
    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)


class SupplementIntake(Base):
    """Morning and evening supplement capsules taken on one day."""

    __tablename__ = "supplement_intakes"
    __table_args__ = (UniqueConstraint("email", "date", name="uq_supplement_intake"),)
    id = Column(Integer, primary_key=True, index=True)
    email = Column(String, nullable=False, index=True)
    date = Column(Date, nullable=False)
    morning_taken = Column(Boolean, nullable=False, default=False)
    evening_taken = Column(Boolean, nullable=False, default=False)
    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)


class SupplementInventory(Base):
    """Capsules left in the user's current pack (one row per email)."""

    __tablename__ = "supplement_inventory"
    id = Column(Integer, primary_key=True, index=True)
    email = Column(String, nullable=False, unique=True, index=True)
    total_capsules = Column(Integer, nullable=False, default=60)
    capsules_remaining = Column(Integer, nullable=False, default=60)
    last_refill_date = Column(Date, nullable=True)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)
