"""Initial faculty schema: users, AAT1, AAT2, remedial sessions, AAT1 submissions

Revision ID: 202610180001
Revises:
Create Date: 2026-10-18 00:01:00
"""

from __future__ import annotations

import sqlalchemy as sa
from alembic import op

revision = "202610180001"
down_revision = None
branch_labels = None
depends_on = None

user_role_enum = sa.Enum(
    "student",
    "faculty",
    "admin",
    "superadmin",
    name="user_role",
)


def _created_at() -> sa.Column:
    return sa.Column(
        "created_at",
        sa.DateTime(timezone=True),
        nullable=False,
        server_default=sa.func.now(),
    )


def upgrade() -> None:
    op.create_table(
        "users",
        sa.Column("id", sa.String(length=36), primary_key=True),
        sa.Column("name", sa.String(length=128), nullable=False),
        sa.Column("email", sa.String(length=255), nullable=False),
        sa.Column("hashed_password", sa.String(length=255), nullable=False),
        sa.Column("role", user_role_enum, nullable=False, server_default="student"),
        _created_at(),
    )
    op.create_index("ix_users_email", "users", ["email"], unique=True)
    op.create_index("ix_users_role", "users", ["role"])

    op.create_table(
        "aat1",
        sa.Column("id", sa.String(length=36), primary_key=True),
        sa.Column("course_link", sa.String(length=1024), nullable=False),
        sa.Column("deadline", sa.DateTime(timezone=True), nullable=False),
        sa.Column("faculty_id", sa.String(length=64), nullable=False),
        _created_at(),
    )
    op.create_index("ix_aat1_faculty_id", "aat1", ["faculty_id"])

    op.create_table(
        "aat2",
        sa.Column("id", sa.String(length=36), primary_key=True),
        sa.Column("title", sa.String(length=255), nullable=False),
        sa.Column("questions", sa.JSON(), nullable=False),
        sa.Column("start_time", sa.DateTime(timezone=True), nullable=False),
        sa.Column("end_time", sa.DateTime(timezone=True), nullable=False),
        sa.Column("duration", sa.Integer(), nullable=False),
        sa.Column("faculty_id", sa.String(length=64), nullable=False),
        _created_at(),
    )
    op.create_index("ix_aat2_faculty_id", "aat2", ["faculty_id"])

    op.create_table(
        "remedial_sessions",
        sa.Column("id", sa.String(length=36), primary_key=True),
        sa.Column("title", sa.String(length=255), nullable=False),
        sa.Column("description", sa.Text(), nullable=False),
        sa.Column("start_time", sa.DateTime(timezone=True), nullable=False),
        sa.Column("end_time", sa.DateTime(timezone=True), nullable=False),
        sa.Column("duration", sa.Integer(), nullable=False),
        sa.Column("link", sa.String(length=1024), nullable=False),
        sa.Column("faculty_id", sa.String(length=64), nullable=False),
        sa.Column("students", sa.JSON(), nullable=False),
        _created_at(),
    )
    op.create_index("ix_remedial_sessions_faculty_id", "remedial_sessions", ["faculty_id"])

    op.create_table(
        "student_aat1_submissions",
        sa.Column("id", sa.String(length=36), primary_key=True),
        sa.Column("student_id", sa.String(length=36), nullable=False),
        sa.Column("aat1_id", sa.String(length=36), nullable=False),
        sa.Column("certificate", sa.String(length=1024), nullable=False),
        sa.Column("grade", sa.String(length=16), nullable=True),
        sa.Column("graded_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("graded_by", sa.String(length=64), nullable=True),
        _created_at(),
    )
    op.create_index(
        "ix_student_aat1_submissions_student_id", "student_aat1_submissions", ["student_id"]
    )
    op.create_index(
        "ix_student_aat1_submissions_aat1_id", "student_aat1_submissions", ["aat1_id"]
    )
    op.create_index(
        "ix_student_aat1_submissions_created_at", "student_aat1_submissions", ["created_at"]
    )


def downgrade() -> None:
    op.drop_table("student_aat1_submissions")
    op.drop_table("remedial_sessions")
    op.drop_table("aat2")
    op.drop_table("aat1")
    op.drop_index("ix_users_role", table_name="users")
    op.drop_index("ix_users_email", table_name="users")
    op.drop_table("users")
    user_role_enum.drop(op.get_bind(), checkfirst=True)
