from __future__ import annotations

from dataclasses import dataclass, field
from datetime import UTC, datetime
from enum import Enum
from typing import Any


class AssessmentKind(str, Enum):
    AAT1 = "aat1"
    AAT2 = "aat2"


@dataclass(slots=True)
class Principal:
    """Represents the authenticated actor performing a request."""

    user_id: str
    role: str
    email: str = ""


@dataclass(slots=True)
class DirectoryEntry:
    """Read-only projection of a user record (never carries secrets)."""

    id: str
    name: str
    email: str
    role: str


@dataclass(slots=True)
class AAT1Record:
    id: str
    course_link: str
    deadline: datetime
    faculty_id: str
    created_at: datetime | None = None


@dataclass(slots=True)
class AAT2Record:
    id: str
    title: str
    questions: list[dict[str, Any]]
    start_time: datetime
    end_time: datetime
    duration: int
    faculty_id: str
    created_at: datetime | None = None


@dataclass(slots=True)
class RemedialSessionRecord:
    id: str
    title: str
    description: str
    start_time: datetime
    end_time: datetime
    duration: int
    link: str
    faculty_id: str
    students: list[str] = field(default_factory=list)
    created_at: datetime | None = None


@dataclass(slots=True)
class SubmissionRecord:
    id: str
    student_id: str
    aat1_id: str
    certificate: str
    grade: str | None
    created_at: datetime
    graded_at: datetime | None = None
    graded_by: str | None = None


@dataclass(slots=True)
class SubmissionView:
    """Faculty-facing submission row joined with student and assessment labels."""

    id: str
    student_id: str
    student_name: str
    aat1_id: str
    course_title: str
    certificate: str
    grade: str | None
    submitted_at: datetime


@dataclass(slots=True)
class OutboundNotification:
    recipient_id: str
    recipient_email: str
    subject: str
    body: str


@dataclass(slots=True)
class DeliveryReceipt:
    recipient_email: str
    provider_id: str | None = None


@dataclass(slots=True)
class DeliveryOutcome:
    recipient_id: str
    recipient_email: str
    delivered: bool
    provider_id: str | None = None
    error: str | None = None


@dataclass(slots=True)
class FanoutReport:
    """Outcome of one notification batch, kept for operational visibility."""

    reference: str
    outcomes: list[DeliveryOutcome] = field(default_factory=list)
    started_at: datetime = field(default_factory=lambda: datetime.now(UTC))
    finished_at: datetime | None = None
    cancelled: bool = False

    @property
    def delivered_count(self) -> int:
        return sum(1 for outcome in self.outcomes if outcome.delivered)

    @property
    def failed_count(self) -> int:
        return sum(1 for outcome in self.outcomes if not outcome.delivered)


def as_utc(value: datetime) -> datetime:
    """Interpret naive timestamps (as returned by some drivers) as UTC."""
    if value.tzinfo is None:
        return value.replace(tzinfo=UTC)
    return value.astimezone(UTC)
