"""ORM models for the habit ladder schema.

Each model is one collection of the application. Embedded documents
(achievements, question fields, submission responses) are stored as JSON.
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any

from sqlalchemy import (
    Boolean,
    CheckConstraint,
    ForeignKey,
    Index,
    Integer,
    String,
    Text,
    UniqueConstraint,
)
from sqlalchemy.orm import Mapped, mapped_column

from habitladder.db.base import Base, BigIntId, JSONDoc, UTCDateTime


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def as_utc(dt: datetime) -> datetime:
    """Attach UTC to naive datetimes (SQLite drops tzinfo on the way back)."""
    return dt.replace(tzinfo=timezone.utc) if dt.tzinfo is None else dt.astimezone(timezone.utc)


WEEKS = ("week1", "week2", "week3", "week4", "complete")
LADDER_THEMES = ("classic", "neon", "nature", "space", "minimal")
ACHIEVEMENT_TYPES = ("streak", "points", "completion", "milestone")
APPLICATION_STATUSES = ("draft", "submitted", "reviewed", "accepted", "rejected")
SUBMISSION_STATUSES = ("draft", "submitted", "reviewed", "approved", "rejected")
FIELD_TYPES = ("text", "textarea", "select", "radio", "checkbox", "file")
INTENSITIES = ("easy", "medium", "hard")
CATEGORIES = ("health", "productivity", "learning", "mindfulness", "fitness", "creative", "social", "other")
FREQUENCIES = ("daily", "weekly")
ACTIVITY_FREQUENCIES = ("daily", "weekly", "monthly", "none")


# ---------------------------------------------------------------------------
# Users
# ---------------------------------------------------------------------------


class User(Base):
    """Registered account. The session token carries id, name and email."""

    __tablename__ = "users"

    id: Mapped[int] = mapped_column(BigIntId, primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(String(128), nullable=False)
    email: Mapped[str] = mapped_column(String(320), unique=True, nullable=False)
    password_hash: Mapped[str] = mapped_column(String(256), nullable=False)
    created_at: Mapped[datetime] = mapped_column(UTCDateTime, nullable=False, default=utcnow)
    last_login: Mapped[datetime | None] = mapped_column(UTCDateTime, nullable=True)


# ---------------------------------------------------------------------------
# Ladder progress
# ---------------------------------------------------------------------------


class LadderProgress(Base):
    """Per-user ladder state. Exactly one row per user (unique user_id)."""

    __tablename__ = "ladder_progress"
    __table_args__ = (
        CheckConstraint("current_level >= 0", name="ck_ladder_progress_level"),
        CheckConstraint("total_points >= 0", name="ck_ladder_progress_total_points"),
        CheckConstraint("weekly_points >= 0", name="ck_ladder_progress_weekly_points"),
        CheckConstraint("current_streak >= 0", name="ck_ladder_progress_current_streak"),
        CheckConstraint("longest_streak >= 0", name="ck_ladder_progress_longest_streak"),
        CheckConstraint("completed_challenges >= 0", name="ck_ladder_progress_completed"),
    )

    id: Mapped[int] = mapped_column(BigIntId, primary_key=True, autoincrement=True)
    user_id: Mapped[int] = mapped_column(
        BigIntId, ForeignKey("users.id", ondelete="CASCADE"), unique=True, nullable=False
    )
    current_level: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    total_points: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    weekly_points: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    current_streak: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    longest_streak: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    challenge_start_date: Mapped[datetime] = mapped_column(UTCDateTime, nullable=False, default=utcnow)
    completed_challenges: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    achievements: Mapped[list[dict[str, Any]]] = mapped_column(JSONDoc, nullable=False, default=list)
    ladder_theme: Mapped[str] = mapped_column(String(16), nullable=False, default="classic")
    updated_at: Mapped[datetime] = mapped_column(UTCDateTime, nullable=False, default=utcnow)


# ---------------------------------------------------------------------------
# Ladder questions & submissions
# ---------------------------------------------------------------------------


class LadderQuestion(Base):
    """Weekly question form. The newest active question of a week is the current one."""

    __tablename__ = "ladder_questions"
    __table_args__ = (Index("ix_ladder_questions_week_active_created", "week", "is_active", "created_at"),)

    id: Mapped[int] = mapped_column(BigIntId, primary_key=True, autoincrement=True)
    week: Mapped[str] = mapped_column(String(16), nullable=False)
    title: Mapped[str] = mapped_column(String(256), nullable=False)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    fields: Mapped[list[dict[str, Any]]] = mapped_column(JSONDoc, nullable=False, default=list)
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    created_at: Mapped[datetime] = mapped_column(UTCDateTime, nullable=False, default=utcnow)
    updated_at: Mapped[datetime] = mapped_column(UTCDateTime, nullable=False, default=utcnow)
    created_by: Mapped[str] = mapped_column(String(320), nullable=False)


class LadderSubmission(Base):
    """A user's answers for one ladder week."""

    __tablename__ = "ladder_submissions"
    __table_args__ = (
        UniqueConstraint("user_id", "week", name="uq_ladder_submissions_user_week"),
        CheckConstraint("score IS NULL OR (score >= 0 AND score <= 100)", name="ck_ladder_submissions_score"),
    )

    id: Mapped[int] = mapped_column(BigIntId, primary_key=True, autoincrement=True)
    user_id: Mapped[int] = mapped_column(BigIntId, ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    user_email: Mapped[str] = mapped_column(String(320), nullable=False)
    user_name: Mapped[str] = mapped_column(String(128), nullable=False)
    week: Mapped[str] = mapped_column(String(16), nullable=False)
    question_id: Mapped[int | None] = mapped_column(
        BigIntId, ForeignKey("ladder_questions.id", ondelete="SET NULL"), nullable=True
    )
    responses: Mapped[list[dict[str, Any]]] = mapped_column(JSONDoc, nullable=False, default=list)
    status: Mapped[str] = mapped_column(String(16), nullable=False, default="draft")
    submitted_at: Mapped[datetime | None] = mapped_column(UTCDateTime, nullable=True)
    reviewed_at: Mapped[datetime | None] = mapped_column(UTCDateTime, nullable=True)
    reviewed_by: Mapped[str | None] = mapped_column(String(320), nullable=True)
    review_comments: Mapped[str | None] = mapped_column(Text, nullable=True)
    score: Mapped[int | None] = mapped_column(Integer, nullable=True)
    created_at: Mapped[datetime] = mapped_column(UTCDateTime, nullable=False, default=utcnow)
    updated_at: Mapped[datetime] = mapped_column(UTCDateTime, nullable=False, default=utcnow)


# ---------------------------------------------------------------------------
# Applications
# ---------------------------------------------------------------------------


class Application(Base):
    """Program application. One per user; reviewed by the administrator."""

    __tablename__ = "applications"

    id: Mapped[int] = mapped_column(BigIntId, primary_key=True, autoincrement=True)
    user_id: Mapped[int] = mapped_column(
        BigIntId, ForeignKey("users.id", ondelete="CASCADE"), unique=True, nullable=False
    )
    name: Mapped[str] = mapped_column(String(128), nullable=False)
    email: Mapped[str] = mapped_column(String(320), nullable=False)
    phone: Mapped[str] = mapped_column(String(32), nullable=False, default="")
    why_join: Mapped[str] = mapped_column(String(1000), nullable=False, default="")
    status: Mapped[str] = mapped_column(String(16), nullable=False, default="draft")
    submitted_at: Mapped[datetime | None] = mapped_column(UTCDateTime, nullable=True)
    reviewed_at: Mapped[datetime | None] = mapped_column(UTCDateTime, nullable=True)
    created_at: Mapped[datetime] = mapped_column(UTCDateTime, nullable=False, default=utcnow)
    updated_at: Mapped[datetime] = mapped_column(UTCDateTime, nullable=False, default=utcnow)


# ---------------------------------------------------------------------------
# Habits, goals & activities
# ---------------------------------------------------------------------------


class Habit(Base):
    """Recurring habit owned by one user. Points follow the intensity."""

    __tablename__ = "habits"
    __table_args__ = (
        CheckConstraint("point_value >= 1 AND point_value <= 100", name="ck_habits_point_value"),
        Index("ix_habits_user_active", "user_id", "is_active"),
    )

    id: Mapped[int] = mapped_column(BigIntId, primary_key=True, autoincrement=True)
    user_id: Mapped[int] = mapped_column(BigIntId, ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    title: Mapped[str] = mapped_column(String(100), nullable=False)
    description: Mapped[str | None] = mapped_column(String(500), nullable=True)
    intensity: Mapped[str] = mapped_column(String(8), nullable=False, default="medium")
    category: Mapped[str] = mapped_column(String(16), nullable=False, default="other")
    target_frequency: Mapped[str] = mapped_column(String(8), nullable=False, default="daily")
    point_value: Mapped[int] = mapped_column(Integer, nullable=False)
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    created_at: Mapped[datetime] = mapped_column(UTCDateTime, nullable=False, default=utcnow)
    updated_at: Mapped[datetime] = mapped_column(UTCDateTime, nullable=False, default=utcnow)


class Goal(Base):
    """Goal owned by one user; completions earn the streak bonus."""

    __tablename__ = "goals"
    __table_args__ = (
        CheckConstraint("point_value >= 1 AND point_value <= 100", name="ck_goals_point_value"),
        Index("ix_goals_user_active", "user_id", "is_active"),
    )

    id: Mapped[int] = mapped_column(BigIntId, primary_key=True, autoincrement=True)
    user_id: Mapped[int] = mapped_column(BigIntId, ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    title: Mapped[str] = mapped_column(String(100), nullable=False)
    description: Mapped[str | None] = mapped_column(String(500), nullable=True)
    intensity: Mapped[str] = mapped_column(String(8), nullable=False, default="medium")
    category: Mapped[str] = mapped_column(String(16), nullable=False, default="other")
    target_frequency: Mapped[str] = mapped_column(String(8), nullable=False, default="daily")
    point_value: Mapped[int] = mapped_column(Integer, nullable=False)
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    created_at: Mapped[datetime] = mapped_column(UTCDateTime, nullable=False, default=utcnow)
    updated_at: Mapped[datetime] = mapped_column(UTCDateTime, nullable=False, default=utcnow)


class Activity(Base):
    """Free-form activity: recurring (habit-like) or one-off with a deadline."""

    __tablename__ = "activities"
    __table_args__ = (CheckConstraint("point_value >= 1 AND point_value <= 100", name="ck_activities_point_value"),)

    id: Mapped[int] = mapped_column(BigIntId, primary_key=True, autoincrement=True)
    user_id: Mapped[int] = mapped_column(BigIntId, ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    title: Mapped[str] = mapped_column(String(100), nullable=False)
    description: Mapped[str | None] = mapped_column(String(500), nullable=True)
    intensity: Mapped[str] = mapped_column(String(8), nullable=False, default="medium")
    category: Mapped[str] = mapped_column(String(16), nullable=False, default="other")
    target_frequency: Mapped[str] = mapped_column(String(8), nullable=False, default="none")
    point_value: Mapped[int] = mapped_column(Integer, nullable=False)
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    is_recurring: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    deadline: Mapped[datetime | None] = mapped_column(UTCDateTime, nullable=True)
    created_at: Mapped[datetime] = mapped_column(UTCDateTime, nullable=False, default=utcnow)
    updated_at: Mapped[datetime] = mapped_column(UTCDateTime, nullable=False, default=utcnow)


# ---------------------------------------------------------------------------
# Todos
# ---------------------------------------------------------------------------


class Todo(Base):
    """Task, either standalone or attached to an activity or a goal.

    Repetitive todos attached to a goal are reopened whenever that goal is
    completed.
    """

    __tablename__ = "todos"
    __table_args__ = (Index("ix_todos_user_archived", "user_id", "is_archived"),)

    id: Mapped[int] = mapped_column(BigIntId, primary_key=True, autoincrement=True)
    user_id: Mapped[int] = mapped_column(BigIntId, ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    activity_id: Mapped[int | None] = mapped_column(
        BigIntId, ForeignKey("activities.id", ondelete="SET NULL"), nullable=True
    )
    goal_id: Mapped[int | None] = mapped_column(BigIntId, ForeignKey("goals.id", ondelete="SET NULL"), nullable=True)
    title: Mapped[str] = mapped_column(String(100), nullable=False)
    description: Mapped[str | None] = mapped_column(String(500), nullable=True)
    is_completed: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    is_archived: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    archived_at: Mapped[datetime | None] = mapped_column(UTCDateTime, nullable=True)
    is_repetitive: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    last_shown: Mapped[datetime] = mapped_column(UTCDateTime, nullable=False, default=utcnow)
    created_at: Mapped[datetime] = mapped_column(UTCDateTime, nullable=False, default=utcnow)


# ---------------------------------------------------------------------------
# Completion events
# ---------------------------------------------------------------------------


class HabitCompletion(Base):
    """Append-only record of a habit being done on a given day."""

    __tablename__ = "habit_completions"
    __table_args__ = (
        CheckConstraint("points >= 1", name="ck_habit_completions_points"),
        CheckConstraint("streak >= 0", name="ck_habit_completions_streak"),
    )

    id: Mapped[int] = mapped_column(BigIntId, primary_key=True, autoincrement=True)
    habit_id: Mapped[int] = mapped_column(BigIntId, ForeignKey("habits.id", ondelete="CASCADE"), nullable=False)
    user_id: Mapped[int] = mapped_column(BigIntId, ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    completed_at: Mapped[datetime] = mapped_column(UTCDateTime, nullable=False, default=utcnow)
    points: Mapped[int] = mapped_column(Integer, nullable=False)
    streak: Mapped[int] = mapped_column(Integer, nullable=False, default=1)
    notes: Mapped[str | None] = mapped_column(String(200), nullable=True)


class GoalCompletion(Base):
    """Append-only record of a goal being completed."""

    __tablename__ = "goal_completions"
    __table_args__ = (
        CheckConstraint("points >= 1", name="ck_goal_completions_points"),
        CheckConstraint("streak >= 0", name="ck_goal_completions_streak"),
    )

    id: Mapped[int] = mapped_column(BigIntId, primary_key=True, autoincrement=True)
    goal_id: Mapped[int] = mapped_column(BigIntId, ForeignKey("goals.id", ondelete="CASCADE"), nullable=False)
    user_id: Mapped[int] = mapped_column(BigIntId, ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    completed_at: Mapped[datetime] = mapped_column(UTCDateTime, nullable=False, default=utcnow)
    points: Mapped[int] = mapped_column(Integer, nullable=False)
    streak: Mapped[int] = mapped_column(Integer, nullable=False, default=1)
    notes: Mapped[str | None] = mapped_column(String(200), nullable=True)


class ActivityCompletion(Base):
    """Append-only record of an activity being done."""

    __tablename__ = "activity_completions"
    __table_args__ = (CheckConstraint("points_earned >= 1", name="ck_activity_completions_points"),)

    id: Mapped[int] = mapped_column(BigIntId, primary_key=True, autoincrement=True)
    activity_id: Mapped[int] = mapped_column(
        BigIntId, ForeignKey("activities.id", ondelete="CASCADE"), nullable=False
    )
    user_id: Mapped[int] = mapped_column(BigIntId, ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    completed_at: Mapped[datetime] = mapped_column(UTCDateTime, nullable=False, default=utcnow)
    points_earned: Mapped[int] = mapped_column(Integer, nullable=False)
    notes: Mapped[str | None] = mapped_column(String(500), nullable=True)


Index("ix_habit_completions_user_completed", HabitCompletion.user_id, HabitCompletion.completed_at.desc())
Index("ix_habit_completions_habit_completed", HabitCompletion.habit_id, HabitCompletion.completed_at.desc())
Index("ix_goal_completions_user_completed", GoalCompletion.user_id, GoalCompletion.completed_at.desc())
Index("ix_goal_completions_goal_completed", GoalCompletion.goal_id, GoalCompletion.completed_at.desc())
Index("ix_activity_completions_user_completed", ActivityCompletion.user_id, ActivityCompletion.completed_at.desc())
