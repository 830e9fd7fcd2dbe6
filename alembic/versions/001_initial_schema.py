"""Initial schema: users, ladder progress, questions, submissions,
applications, habits, goals, activities, todos and completion events.

Revision ID: 001_initial_schema
Revises: None
Create Date: 2026-10-19
"""

from collections.abc import Sequence

import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

from alembic import op

revision: str = "001_initial_schema"
down_revision: str | None = None
branch_labels: str | Sequence[str] | None = None
depends_on: str | Sequence[str] | None = None


def _created_updated() -> list[sa.Column]:
    return [
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.text("NOW()"), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.text("NOW()"), nullable=False),
    ]


def upgrade() -> None:
    """Create all application tables."""
    # --- users ---
    op.create_table(
        "users",
        sa.Column("id", sa.BigInteger(), primary_key=True, autoincrement=True),
        sa.Column("name", sa.String(128), nullable=False),
        sa.Column("email", sa.String(320), nullable=False),
        sa.Column("password_hash", sa.String(256), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.text("NOW()"), nullable=False),
        sa.Column("last_login", sa.DateTime(timezone=True), nullable=True),
        sa.UniqueConstraint("email", name="uq_users_email"),
    )

    # --- ladder_progress (one row per user) ---
    op.create_table(
        "ladder_progress",
        sa.Column("id", sa.BigInteger(), primary_key=True, autoincrement=True),
        sa.Column("user_id", sa.BigInteger(), sa.ForeignKey("users.id", ondelete="CASCADE"), nullable=False),
        sa.Column("current_level", sa.Integer(), server_default="0", nullable=False),
        sa.Column("total_points", sa.Integer(), server_default="0", nullable=False),
        sa.Column("weekly_points", sa.Integer(), server_default="0", nullable=False),
        sa.Column("current_streak", sa.Integer(), server_default="0", nullable=False),
        sa.Column("longest_streak", sa.Integer(), server_default="0", nullable=False),
        sa.Column("challenge_start_date", sa.DateTime(timezone=True), server_default=sa.text("NOW()"), nullable=False),
        sa.Column("completed_challenges", sa.Integer(), server_default="0", nullable=False),
        sa.Column("achievements", postgresql.JSONB(), server_default=sa.text("'[]'::jsonb"), nullable=False),
        sa.Column("ladder_theme", sa.String(16), server_default="classic", nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.text("NOW()"), nullable=False),
        sa.UniqueConstraint("user_id", name="uq_ladder_progress_user_id"),
    )
    for column, name in (
        ("current_level", "level"),
        ("total_points", "total_points"),
        ("weekly_points", "weekly_points"),
        ("current_streak", "current_streak"),
        ("longest_streak", "longest_streak"),
        ("completed_challenges", "completed"),
    ):
        op.execute(f"ALTER TABLE ladder_progress ADD CONSTRAINT ck_ladder_progress_{name} CHECK ({column} >= 0)")
    op.execute(
        "ALTER TABLE ladder_progress ADD CONSTRAINT ck_ladder_progress_theme "
        "CHECK (ladder_theme IN ('classic', 'neon', 'nature', 'space', 'minimal'))"
    )

    # --- ladder_questions ---
    op.create_table(
        "ladder_questions",
        sa.Column("id", sa.BigInteger(), primary_key=True, autoincrement=True),
        sa.Column("week", sa.String(16), nullable=False),
        sa.Column("title", sa.String(256), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("fields", postgresql.JSONB(), server_default=sa.text("'[]'::jsonb"), nullable=False),
        sa.Column("is_active", sa.Boolean(), server_default="true", nullable=False),
        *_created_updated(),
        sa.Column("created_by", sa.String(320), nullable=False),
    )
    op.create_index(
        "ix_ladder_questions_week_active_created",
        "ladder_questions",
        ["week", "is_active", "created_at"],
    )
    op.execute(
        "ALTER TABLE ladder_questions ADD CONSTRAINT ck_ladder_questions_week "
        "CHECK (week IN ('week1', 'week2', 'week3', 'week4', 'complete'))"
    )

    # --- ladder_submissions ---
    op.create_table(
        "ladder_submissions",
        sa.Column("id", sa.BigInteger(), primary_key=True, autoincrement=True),
        sa.Column("user_id", sa.BigInteger(), sa.ForeignKey("users.id", ondelete="CASCADE"), nullable=False),
        sa.Column("user_email", sa.String(320), nullable=False),
        sa.Column("user_name", sa.String(128), nullable=False),
        sa.Column("week", sa.String(16), nullable=False),
        sa.Column(
            "question_id",
            sa.BigInteger(),
            sa.ForeignKey("ladder_questions.id", ondelete="SET NULL"),
            nullable=True,
        ),
        sa.Column("responses", postgresql.JSONB(), server_default=sa.text("'[]'::jsonb"), nullable=False),
        sa.Column("status", sa.String(16), server_default="draft", nullable=False),
        sa.Column("submitted_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("reviewed_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("reviewed_by", sa.String(320), nullable=True),
        sa.Column("review_comments", sa.Text(), nullable=True),
        sa.Column("score", sa.Integer(), nullable=True),
        *_created_updated(),
        sa.UniqueConstraint("user_id", "week", name="uq_ladder_submissions_user_week"),
    )
    op.create_index("ix_ladder_submissions_week_status", "ladder_submissions", ["week", "status"])
    op.execute(
        "ALTER TABLE ladder_submissions ADD CONSTRAINT ck_ladder_submissions_score "
        "CHECK (score IS NULL OR (score >= 0 AND score <= 100))"
    )
    op.execute(
        "ALTER TABLE ladder_submissions ADD CONSTRAINT ck_ladder_submissions_status "
        "CHECK (status IN ('draft', 'submitted', 'reviewed', 'approved', 'rejected'))"
    )

    # --- applications ---
    op.create_table(
        "applications",
        sa.Column("id", sa.BigInteger(), primary_key=True, autoincrement=True),
        sa.Column("user_id", sa.BigInteger(), sa.ForeignKey("users.id", ondelete="CASCADE"), nullable=False),
        sa.Column("name", sa.String(128), nullable=False),
        sa.Column("email", sa.String(320), nullable=False),
        sa.Column("phone", sa.String(32), server_default="", nullable=False),
        sa.Column("why_join", sa.String(1000), server_default="", nullable=False),
        sa.Column("status", sa.String(16), server_default="draft", nullable=False),
        sa.Column("submitted_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("reviewed_at", sa.DateTime(timezone=True), nullable=True),
        *_created_updated(),
        sa.UniqueConstraint("user_id", name="uq_applications_user_id"),
    )
    op.create_index("ix_applications_created_at", "applications", [sa.text("created_at DESC")])
    op.execute(
        "ALTER TABLE applications ADD CONSTRAINT ck_applications_status "
        "CHECK (status IN ('draft', 'submitted', 'reviewed', 'accepted', 'rejected'))"
    )

    # --- habits & goals ---
    for table in ("habits", "goals"):
        op.create_table(
            table,
            sa.Column("id", sa.BigInteger(), primary_key=True, autoincrement=True),
            sa.Column("user_id", sa.BigInteger(), sa.ForeignKey("users.id", ondelete="CASCADE"), nullable=False),
            sa.Column("title", sa.String(100), nullable=False),
            sa.Column("description", sa.String(500), nullable=True),
            sa.Column("intensity", sa.String(8), server_default="medium", nullable=False),
            sa.Column("category", sa.String(16), server_default="other", nullable=False),
            sa.Column("target_frequency", sa.String(8), server_default="daily", nullable=False),
            sa.Column("point_value", sa.Integer(), nullable=False),
            sa.Column("is_active", sa.Boolean(), server_default="true", nullable=False),
            *_created_updated(),
        )
        op.create_index(f"ix_{table}_user_active", table, ["user_id", "is_active"])
        op.execute(
            f"ALTER TABLE {table} ADD CONSTRAINT ck_{table}_point_value "
            "CHECK (point_value >= 1 AND point_value <= 100)"
        )

    # --- activities ---
    op.create_table(
        "activities",
        sa.Column("id", sa.BigInteger(), primary_key=True, autoincrement=True),
        sa.Column("user_id", sa.BigInteger(), sa.ForeignKey("users.id", ondelete="CASCADE"), nullable=False),
        sa.Column("title", sa.String(100), nullable=False),
        sa.Column("description", sa.String(500), nullable=True),
        sa.Column("intensity", sa.String(8), server_default="medium", nullable=False),
        sa.Column("category", sa.String(16), server_default="other", nullable=False),
        sa.Column("target_frequency", sa.String(8), server_default="none", nullable=False),
        sa.Column("point_value", sa.Integer(), nullable=False),
        sa.Column("is_active", sa.Boolean(), server_default="true", nullable=False),
        sa.Column("is_recurring", sa.Boolean(), server_default="false", nullable=False),
        sa.Column("deadline", sa.DateTime(timezone=True), nullable=True),
        *_created_updated(),
    )
    op.execute(
        "ALTER TABLE activities ADD CONSTRAINT ck_activities_point_value "
        "CHECK (point_value >= 1 AND point_value <= 100)"
    )

    # --- todos ---
    op.create_table(
        "todos",
        sa.Column("id", sa.BigInteger(), primary_key=True, autoincrement=True),
        sa.Column("user_id", sa.BigInteger(), sa.ForeignKey("users.id", ondelete="CASCADE"), nullable=False),
        sa.Column(
            "activity_id",
            sa.BigInteger(),
            sa.ForeignKey("activities.id", ondelete="SET NULL"),
            nullable=True,
        ),
        sa.Column("goal_id", sa.BigInteger(), sa.ForeignKey("goals.id", ondelete="SET NULL"), nullable=True),
        sa.Column("title", sa.String(100), nullable=False),
        sa.Column("description", sa.String(500), nullable=True),
        sa.Column("is_completed", sa.Boolean(), server_default="false", nullable=False),
        sa.Column("is_archived", sa.Boolean(), server_default="false", nullable=False),
        sa.Column("archived_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("is_repetitive", sa.Boolean(), server_default="false", nullable=False),
        sa.Column("last_shown", sa.DateTime(timezone=True), server_default=sa.text("NOW()"), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.text("NOW()"), nullable=False),
    )
    op.create_index("ix_todos_user_archived", "todos", ["user_id", "is_archived"])

    # --- completion events ---
    for table, key, parent in (
        ("habit_completions", "habit_id", "habits"),
        ("goal_completions", "goal_id", "goals"),
    ):
        op.create_table(
            table,
            sa.Column("id", sa.BigInteger(), primary_key=True, autoincrement=True),
            sa.Column(key, sa.BigInteger(), sa.ForeignKey(f"{parent}.id", ondelete="CASCADE"), nullable=False),
            sa.Column("user_id", sa.BigInteger(), sa.ForeignKey("users.id", ondelete="CASCADE"), nullable=False),
            sa.Column("completed_at", sa.DateTime(timezone=True), server_default=sa.text("NOW()"), nullable=False),
            sa.Column("points", sa.Integer(), nullable=False),
            sa.Column("streak", sa.Integer(), server_default="1", nullable=False),
            sa.Column("notes", sa.String(200), nullable=True),
        )
        op.execute(f"ALTER TABLE {table} ADD CONSTRAINT ck_{table}_points CHECK (points >= 1)")
        op.execute(f"ALTER TABLE {table} ADD CONSTRAINT ck_{table}_streak CHECK (streak >= 0)")
        op.create_index(f"ix_{table}_user_completed", table, ["user_id", sa.text("completed_at DESC")])
        op.create_index(
            f"ix_{table}_{key.removesuffix('_id')}_completed", table, [key, sa.text("completed_at DESC")]
        )

    op.create_table(
        "activity_completions",
        sa.Column("id", sa.BigInteger(), primary_key=True, autoincrement=True),
        sa.Column(
            "activity_id",
            sa.BigInteger(),
            sa.ForeignKey("activities.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("user_id", sa.BigInteger(), sa.ForeignKey("users.id", ondelete="CASCADE"), nullable=False),
        sa.Column("completed_at", sa.DateTime(timezone=True), server_default=sa.text("NOW()"), nullable=False),
        sa.Column("points_earned", sa.Integer(), nullable=False),
        sa.Column("notes", sa.String(500), nullable=True),
    )
    op.execute(
        "ALTER TABLE activity_completions ADD CONSTRAINT ck_activity_completions_points CHECK (points_earned >= 1)"
    )
    op.create_index(
        "ix_activity_completions_user_completed",
        "activity_completions",
        ["user_id", sa.text("completed_at DESC")],
    )


def downgrade() -> None:
    """Drop all application tables."""
    op.drop_table("activity_completions")
    op.drop_table("goal_completions")
    op.drop_table("habit_completions")
    op.drop_table("todos")
    op.drop_table("activities")
    op.drop_table("goals")
    op.drop_table("habits")
    op.drop_table("applications")
    op.drop_table("ladder_submissions")
    op.drop_table("ladder_questions")
    op.drop_table("ladder_progress")
    op.drop_table("users")
