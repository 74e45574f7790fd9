"""
Faculty workflows: assessments, remedial sessions and AAT1 grading.

Every operation runs the authorization policy first, then validates its
payload, then touches a store. Remedial session invitations are handed to the
notification queue only after the session row is committed, and nothing that
happens during fan-out can fail the request.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from typing import TYPE_CHECKING, Any, cast

import structlog
from src.core.auth import Role
from src.domain.errors import InvalidInput, NotFound, StorageFailure
from src.domain.models import (
    AAT1Record,
    AAT2Record,
    AssessmentKind,
    DirectoryEntry,
    OutboundNotification,
    Principal,
    RemedialSessionRecord,
    SubmissionRecord,
    SubmissionView,
)
from src.domain.policy import ensure_can_read, ensure_can_write
from src.domain.ports import (
    AssessmentStoreProtocol,
    DirectoryProtocol,
    NotificationQueue,
    RemedialSessionStoreProtocol,
    SubmissionStoreProtocol,
)
from src.domain.services.notifications import build_remedial_invitation
from src.domain.validation import (
    AAT1Fields,
    AAT2Fields,
    RemedialSessionFields,
    normalize_grade,
    normalize_invitees,
    parse_fields,
)
from src.infrastructure.repositories import (
    AssessmentRepository,
    DirectoryRepository,
    RemedialSessionRepository,
    SubmissionRepository,
)

if TYPE_CHECKING:
    from sqlalchemy.ext.asyncio import AsyncSession

logger = structlog.get_logger(__name__)

AssessmentRecord = AAT1Record | AAT2Record


def _coerce_kind(kind: AssessmentKind | str) -> AssessmentKind:
    try:
        return AssessmentKind(kind)
    except ValueError as exc:
        raise InvalidInput(f"Unknown assessment kind '{kind}'") from exc


class FacultyService:
    """Orchestrates the faculty-facing operations over the stores and notifier."""

    def __init__(
        self,
        *,
        assessments: AssessmentStoreProtocol,
        sessions: RemedialSessionStoreProtocol,
        submissions: SubmissionStoreProtocol,
        directory: DirectoryProtocol,
        notifications: NotificationQueue,
    ) -> None:
        self.assessments = assessments
        self.sessions = sessions
        self.submissions = submissions
        self.directory = directory
        self.notifications = notifications

    @classmethod
    def from_session(
        cls, session: AsyncSession, notifications: NotificationQueue
    ) -> FacultyService:
        """Wire the SQLAlchemy repositories around one request-scoped session."""
        return cls(
            assessments=AssessmentRepository(session),
            sessions=RemedialSessionRepository(session),
            submissions=SubmissionRepository(session),
            directory=DirectoryRepository(session),
            notifications=notifications,
        )

    # Assessments

    async def create_assessment(
        self,
        kind: AssessmentKind | str,
        fields: Mapping[str, Any] | None,
        principal: Principal | None,
    ) -> AssessmentRecord:
        principal = ensure_can_write(principal)
        kind = _coerce_kind(kind)

        record: AssessmentRecord
        if kind is AssessmentKind.AAT1:
            aat1 = parse_fields(AAT1Fields, fields)
            record = await self.assessments.create_aat1(
                course_link=aat1.course_link,
                deadline=aat1.deadline,
                faculty_id=principal.user_id,
            )
        else:
            aat2 = parse_fields(AAT2Fields, fields)
            record = await self.assessments.create_aat2(
                title=aat2.title,
                questions=aat2.questions,
                start_time=aat2.start_time,
                end_time=aat2.end_time,
                duration=aat2.duration,
                faculty_id=principal.user_id,
            )

        await logger.ainfo(
            "assessment_created",
            kind=kind.value,
            assessment_id=record.id,
            faculty_id=principal.user_id,
        )
        return record

    async def create_aat1(
        self, fields: Mapping[str, Any] | None, principal: Principal | None
    ) -> AAT1Record:
        record = await self.create_assessment(AssessmentKind.AAT1, fields, principal)
        return cast(AAT1Record, record)

    async def create_aat2(
        self, fields: Mapping[str, Any] | None, principal: Principal | None
    ) -> AAT2Record:
        record = await self.create_assessment(AssessmentKind.AAT2, fields, principal)
        return cast(AAT2Record, record)

    async def list_assessments(
        self, kind: AssessmentKind | str, principal: Principal | None
    ) -> list[AAT1Record] | list[AAT2Record]:
        principal = ensure_can_read(principal)
        if _coerce_kind(kind) is AssessmentKind.AAT1:
            return await self.assessments.list_aat1(faculty_id=principal.user_id)
        return await self.assessments.list_aat2(faculty_id=principal.user_id)

    async def get_assessment(
        self, kind: AssessmentKind | str, assessment_id: str, principal: Principal | None
    ) -> AssessmentRecord:
        ensure_can_read(principal)
        kind = _coerce_kind(kind)
        record: AssessmentRecord | None
        if kind is AssessmentKind.AAT1:
            record = await self.assessments.get_aat1(assessment_id)
        else:
            record = await self.assessments.get_aat2(assessment_id)
        if record is None:
            raise NotFound(f"{kind.value.upper()} {assessment_id} not found")
        return record

    # Remedial sessions

    async def create_remedial_session(
        self,
        fields: Mapping[str, Any] | None,
        invitees: Iterable[str] | None,
        principal: Principal | None,
    ) -> RemedialSessionRecord:
        principal = ensure_can_write(principal)
        data = parse_fields(RemedialSessionFields, fields)
        students = normalize_invitees(invitees)

        record = await self.sessions.create(
            title=data.title,
            description=data.description,
            start_time=data.start_time,
            end_time=data.end_time,
            duration=data.duration,
            link=data.link,
            faculty_id=principal.user_id,
            students=students,
        )
        await logger.ainfo(
            "remedial_session_created",
            session_id=record.id,
            faculty_id=principal.user_id,
            invitees=len(record.students),
        )

        await self._notify_invitees(record)
        return record

    async def _notify_invitees(self, record: RemedialSessionRecord) -> None:
        if not record.students:
            return

        try:
            entries = await self.directory.resolve_many(record.students)
        except StorageFailure:
            logger.error("remedial_invitee_lookup_failed", session_id=record.id)
            return

        unresolved = len(record.students) - len(entries)
        if unresolved:
            logger.info(
                "remedial_invitees_unresolved",
                session_id=record.id,
                unresolved=unresolved,
            )

        subject, body = build_remedial_invitation(record)
        batch = [
            OutboundNotification(
                recipient_id=entry.id,
                recipient_email=entry.email,
                subject=subject,
                body=body,
            )
            for entry in entries
        ]

        try:
            await self.notifications.submit(record.id, batch)
        except Exception:  # fan-out is best-effort; the session is already committed
            logger.exception("notification_submit_failed", session_id=record.id)

    async def list_remedial_sessions(
        self, principal: Principal | None
    ) -> list[RemedialSessionRecord]:
        principal = ensure_can_read(principal)
        return await self.sessions.list_for_faculty(principal.user_id)

    async def get_remedial_session(
        self, session_id: str, principal: Principal | None
    ) -> RemedialSessionRecord:
        ensure_can_read(principal)
        record = await self.sessions.get(session_id)
        if record is None:
            raise NotFound(f"Remedial session {session_id} not found")
        return record

    # Directory and submissions

    async def list_students(self, principal: Principal | None) -> list[DirectoryEntry]:
        ensure_can_read(principal)
        return await self.directory.list_by_role(Role.STUDENT.value)

    async def list_submissions(self, principal: Principal | None) -> list[SubmissionView]:
        ensure_can_read(principal)
        return await self.submissions.list_views()

    async def grade_submission(
        self, submission_id: str, grade: Any, principal: Principal | None
    ) -> SubmissionRecord:
        """Set the grade on a submission. Repeated calls overwrite (last write wins)."""
        principal = ensure_can_write(principal)
        grade = normalize_grade(grade)

        existing = await self.submissions.get(submission_id)
        if existing is None:
            raise NotFound("Submission not found")

        updated = await self.submissions.set_grade(
            submission_id, grade=grade, graded_by=principal.user_id
        )
        if updated is None:
            raise NotFound("Submission not found")

        if existing.grade is not None and existing.grade != grade:
            await logger.ainfo(
                "submission_regraded",
                submission_id=submission_id,
                previous_grade=existing.grade,
                grade=grade,
                graded_by=principal.user_id,
            )
        else:
            await logger.ainfo(
                "submission_graded",
                submission_id=submission_id,
                grade=grade,
                graded_by=principal.user_id,
            )
        return updated
