"""In-memory collaborators for exercising the orchestration layer without a database."""

from __future__ import annotations

import asyncio
import uuid
from collections.abc import Iterable, Sequence
from dataclasses import replace
from datetime import UTC, datetime
from typing import Any

from src.domain.errors import DeliveryFailure, StorageFailure
from src.domain.models import (
    AAT1Record,
    AAT2Record,
    DeliveryReceipt,
    DirectoryEntry,
    OutboundNotification,
    RemedialSessionRecord,
    SubmissionRecord,
    SubmissionView,
)


def _new_id() -> str:
    return str(uuid.uuid4())


class RecordingDispatcher:
    """Dispatcher that records every call and fails for selected addresses."""

    def __init__(
        self,
        failing: Iterable[str] = (),
        *,
        crashing: Iterable[str] = (),
        delay: float = 0.0,
    ) -> None:
        self.failing = set(failing)
        self.crashing = set(crashing)
        self.delay = delay
        self.calls: list[tuple[str, str, str]] = []
        self.in_flight = 0
        self.max_in_flight = 0
        self.release: asyncio.Event | None = None

    async def send(self, recipient_email: str, subject: str, body: str) -> DeliveryReceipt:
        self.calls.append((recipient_email, subject, body))
        self.in_flight += 1
        self.max_in_flight = max(self.max_in_flight, self.in_flight)
        try:
            if self.release is not None:
                await self.release.wait()
            if self.delay:
                await asyncio.sleep(self.delay)
        finally:
            self.in_flight -= 1

        if recipient_email in self.crashing:
            raise RuntimeError("dispatcher bug")
        if recipient_email in self.failing:
            raise DeliveryFailure("mailbox unavailable", recipient=recipient_email)
        return DeliveryReceipt(recipient_email=recipient_email, provider_id=f"msg-{len(self.calls)}")


class RecordingQueue:
    def __init__(self, *, error: Exception | None = None) -> None:
        self.batches: list[tuple[str, list[OutboundNotification]]] = []
        self.error = error

    async def submit(self, reference: str, notifications: Sequence[OutboundNotification]) -> None:
        if self.error is not None:
            raise self.error
        self.batches.append((reference, list(notifications)))


class InMemoryAssessmentStore:
    def __init__(self) -> None:
        self.aat1: dict[str, AAT1Record] = {}
        self.aat2: dict[str, AAT2Record] = {}
        self.writes = 0

    async def create_aat1(self, *, course_link, deadline, faculty_id) -> AAT1Record:
        self.writes += 1
        record = AAT1Record(
            id=_new_id(),
            course_link=course_link,
            deadline=deadline,
            faculty_id=faculty_id,
            created_at=datetime.now(UTC),
        )
        self.aat1[record.id] = record
        return record

    async def create_aat2(
        self, *, title, questions, start_time, end_time, duration, faculty_id
    ) -> AAT2Record:
        self.writes += 1
        record = AAT2Record(
            id=_new_id(),
            title=title,
            questions=list(questions),
            start_time=start_time,
            end_time=end_time,
            duration=duration,
            faculty_id=faculty_id,
            created_at=datetime.now(UTC),
        )
        self.aat2[record.id] = record
        return record

    async def get_aat1(self, aat1_id: str) -> AAT1Record | None:
        return self.aat1.get(aat1_id)

    async def get_aat2(self, aat2_id: str) -> AAT2Record | None:
        return self.aat2.get(aat2_id)

    async def list_aat1(self, *, faculty_id: str) -> list[AAT1Record]:
        return [r for r in self.aat1.values() if r.faculty_id == faculty_id]

    async def list_aat2(self, *, faculty_id: str) -> list[AAT2Record]:
        return [r for r in self.aat2.values() if r.faculty_id == faculty_id]


class InMemorySessionStore:
    def __init__(self, *, fail: bool = False) -> None:
        self.sessions: dict[str, RemedialSessionRecord] = {}
        self.writes = 0
        self.fail = fail

    async def create(self, **fields: Any) -> RemedialSessionRecord:
        if self.fail:
            raise StorageFailure("Failed to create remedial session")
        self.writes += 1
        record = RemedialSessionRecord(id=_new_id(), created_at=datetime.now(UTC), **fields)
        self.sessions[record.id] = record
        return record

    async def get(self, session_id: str) -> RemedialSessionRecord | None:
        return self.sessions.get(session_id)

    async def list_for_faculty(self, faculty_id: str) -> list[RemedialSessionRecord]:
        return [s for s in self.sessions.values() if s.faculty_id == faculty_id]


class InMemorySubmissionStore:
    def __init__(self) -> None:
        self.submissions: dict[str, SubmissionRecord] = {}

    def add(self, *, student_id: str = "student-1", aat1_id: str = "aat1-1") -> SubmissionRecord:
        record = SubmissionRecord(
            id=_new_id(),
            student_id=student_id,
            aat1_id=aat1_id,
            certificate="https://certs.example.com/abc.pdf",
            grade=None,
            created_at=datetime.now(UTC),
        )
        self.submissions[record.id] = record
        return record

    async def get(self, submission_id: str) -> SubmissionRecord | None:
        record = self.submissions.get(submission_id)
        return replace(record) if record else None

    async def set_grade(self, submission_id: str, *, grade: str, graded_by: str):
        record = self.submissions.get(submission_id)
        if record is None:
            return None
        record.grade = grade
        record.graded_by = graded_by
        record.graded_at = datetime.now(UTC)
        return record

    async def list_views(self) -> list[SubmissionView]:
        return []


class InMemoryDirectory:
    def __init__(self, entries: Iterable[DirectoryEntry] = (), *, fail: bool = False) -> None:
        self.entries = {entry.id: entry for entry in entries}
        self.fail = fail
        self.lookups: list[list[str]] = []

    async def resolve_many(self, ids: Iterable[str]) -> list[DirectoryEntry]:
        wanted = list(ids)
        self.lookups.append(wanted)
        if self.fail:
            raise StorageFailure("Failed to resolve users")
        return [self.entries[i] for i in wanted if i in self.entries]

    async def list_by_role(self, role: str) -> list[DirectoryEntry]:
        return [entry for entry in self.entries.values() if entry.role == role]


def student(index: int) -> DirectoryEntry:
    return DirectoryEntry(
        id=f"student-{index}",
        name=f"Student {index}",
        email=f"student{index}@example.edu",
        role="student",
    )
