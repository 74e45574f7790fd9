from __future__ import annotations

import enum
import uuid
from datetime import datetime

from sqlalchemy import JSON, DateTime, Enum, Integer, String, Text, func
from sqlalchemy.orm import Mapped, mapped_column

from .base import Base


def _uuid() -> str:
    return str(uuid.uuid4())


class UserRole(str, enum.Enum):
    """User role enum matching auth.Role."""

    STUDENT = "student"
    FACULTY = "faculty"
    ADMIN = "admin"
    SUPERADMIN = "superadmin"


class UserModel(Base):
    """Users table. Owned by the identity tooling; read-only for faculty workflows."""

    __tablename__ = "users"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=_uuid)
    name: Mapped[str] = mapped_column(String(128), nullable=False)
    email: Mapped[str] = mapped_column(String(255), unique=True, nullable=False, index=True)
    hashed_password: Mapped[str] = mapped_column(String(255), nullable=False)
    role: Mapped[UserRole] = mapped_column(
        Enum(UserRole, name="user_role", values_callable=lambda e: [x.value for x in e]),
        default=UserRole.STUDENT,
        nullable=False,
        index=True,
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), nullable=False
    )

    def __repr__(self) -> str:
        return f"<UserModel(id={self.id}, email={self.email}, role={self.role.value})>"


class AAT1Model(Base):
    """Alternate assessment tool 1: an external course to finish before a deadline."""

    __tablename__ = "aat1"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=_uuid)
    course_link: Mapped[str] = mapped_column(String(1024), nullable=False)
    deadline: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    faculty_id: Mapped[str] = mapped_column(String(64), nullable=False, index=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), nullable=False
    )


class AAT2Model(Base):
    """Alternate assessment tool 2: a timed quiz."""

    __tablename__ = "aat2"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=_uuid)
    title: Mapped[str] = mapped_column(String(255), nullable=False)
    questions: Mapped[list[dict]] = mapped_column(JSON, nullable=False)
    start_time: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    end_time: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    duration: Mapped[int] = mapped_column(Integer, nullable=False)  # minutes
    faculty_id: Mapped[str] = mapped_column(String(64), nullable=False, index=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), nullable=False
    )


class RemedialSessionModel(Base):
    __tablename__ = "remedial_sessions"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=_uuid)
    title: Mapped[str] = mapped_column(String(255), nullable=False)
    description: Mapped[str] = mapped_column(Text, nullable=False)
    start_time: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    end_time: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    duration: Mapped[int] = mapped_column(Integer, nullable=False)  # minutes
    link: Mapped[str] = mapped_column(String(1024), nullable=False)
    faculty_id: Mapped[str] = mapped_column(String(64), nullable=False, index=True)
    # Invite list is authoritative, including ids the directory cannot resolve
    students: Mapped[list[str]] = mapped_column(JSON, nullable=False, default=list)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), nullable=False
    )


class StudentAAT1Model(Base):
    """A student's AAT1 completion certificate and its grade."""

    __tablename__ = "student_aat1_submissions"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=_uuid)
    # Plain references: rows must outlive deleted users and assessments
    student_id: Mapped[str] = mapped_column(String(36), nullable=False, index=True)
    aat1_id: Mapped[str] = mapped_column(String(36), nullable=False, index=True)
    certificate: Mapped[str] = mapped_column(String(1024), nullable=False)
    grade: Mapped[str | None] = mapped_column(String(16), nullable=True)
    graded_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    graded_by: Mapped[str | None] = mapped_column(String(64), nullable=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), nullable=False, index=True
    )


__all__ = [
    "UserRole",
    "UserModel",
    "AAT1Model",
    "AAT2Model",
    "RemedialSessionModel",
    "StudentAAT1Model",
]
