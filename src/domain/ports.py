"""Protocols for the collaborators the orchestration layer depends on.

The SQLAlchemy repositories, the Resend dispatcher and the notification queues
implement these; tests substitute in-memory fakes.
"""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from datetime import datetime
from typing import Any, Protocol

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


class AssessmentStoreProtocol(Protocol):
    async def create_aat1(
        self, *, course_link: str, deadline: datetime, faculty_id: str
    ) -> AAT1Record: ...

    async def create_aat2(
        self,
        *,
        title: str,
        questions: list[dict[str, Any]],
        start_time: datetime,
        end_time: datetime,
        duration: int,
        faculty_id: str,
    ) -> AAT2Record: ...

    async def get_aat1(self, aat1_id: str) -> AAT1Record | None: ...

    async def get_aat2(self, aat2_id: str) -> AAT2Record | None: ...

    async def list_aat1(self, *, faculty_id: str) -> list[AAT1Record]: ...

    async def list_aat2(self, *, faculty_id: str) -> list[AAT2Record]: ...


class RemedialSessionStoreProtocol(Protocol):
    async def create(
        self,
        *,
        title: str,
        description: str,
        start_time: datetime,
        end_time: datetime,
        duration: int,
        link: str,
        faculty_id: str,
        students: list[str],
    ) -> RemedialSessionRecord: ...

    async def get(self, session_id: str) -> RemedialSessionRecord | None: ...

    async def list_for_faculty(self, faculty_id: str) -> list[RemedialSessionRecord]: ...


class SubmissionStoreProtocol(Protocol):
    async def get(self, submission_id: str) -> SubmissionRecord | None: ...

    async def set_grade(
        self, submission_id: str, *, grade: str, graded_by: str
    ) -> SubmissionRecord | None: ...

    async def list_views(self) -> list[SubmissionView]: ...


class DirectoryProtocol(Protocol):
    async def resolve_many(self, ids: Iterable[str]) -> list[DirectoryEntry]: ...

    async def list_by_role(self, role: str) -> list[DirectoryEntry]: ...


class NotificationDispatcher(Protocol):
    """Sends one message to one recipient; raises ``DeliveryFailure`` on error."""

    async def send(self, recipient_email: str, subject: str, body: str) -> DeliveryReceipt: ...


class NotificationQueue(Protocol):
    """Accepts a notification batch without waiting for delivery."""

    async def submit(
        self, reference: str, notifications: Sequence[OutboundNotification]
    ) -> object: ...
