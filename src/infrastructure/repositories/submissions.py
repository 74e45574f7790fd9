from __future__ import annotations

from datetime import UTC, datetime

from sqlalchemy import select
from src.domain.models import SubmissionRecord, SubmissionView, as_utc
from src.infrastructure.db.models import AAT1Model, StudentAAT1Model, UserModel
from src.infrastructure.repositories.base import SqlRepository

UNKNOWN_LABEL = "Unknown"


def _to_record(row: StudentAAT1Model) -> SubmissionRecord:
    return SubmissionRecord(
        id=row.id,
        student_id=row.student_id,
        aat1_id=row.aat1_id,
        certificate=row.certificate,
        grade=row.grade,
        created_at=as_utc(row.created_at),
        graded_at=as_utc(row.graded_at) if row.graded_at else None,
        graded_by=row.graded_by,
    )


class SubmissionRepository(SqlRepository):
    """AAT1 submissions. Students create them; faculty only grade them."""

    async def create(
        self,
        *,
        student_id: str,
        aat1_id: str,
        certificate: str,
        created_at: datetime | None = None,
    ) -> SubmissionRecord:
        row = StudentAAT1Model(student_id=student_id, aat1_id=aat1_id, certificate=certificate)
        if created_at is not None:
            row.created_at = created_at
        await self._insert(row, operation="create submission")
        return _to_record(row)

    async def get(self, submission_id: str) -> SubmissionRecord | None:
        async with self._guard("load submission"):
            row = await self.session.get(StudentAAT1Model, submission_id)
        return _to_record(row) if row else None

    async def set_grade(
        self, submission_id: str, *, grade: str, graded_by: str
    ) -> SubmissionRecord | None:
        """Overwrite the grade. Returns ``None`` when the submission does not exist."""
        async with self._guard("update grade"):
            row = await self.session.get(StudentAAT1Model, submission_id)
            if row is None:
                return None
            row.grade = grade
            row.graded_by = graded_by
            row.graded_at = datetime.now(UTC)
            await self.session.commit()
            await self.session.refresh(row)
        return _to_record(row)

    async def list_views(self) -> list[SubmissionView]:
        stmt = (
            select(StudentAAT1Model, UserModel.name, AAT1Model.course_link)
            .outerjoin(UserModel, UserModel.id == StudentAAT1Model.student_id)
            .outerjoin(AAT1Model, AAT1Model.id == StudentAAT1Model.aat1_id)
            .order_by(StudentAAT1Model.created_at.desc(), StudentAAT1Model.id)
        )
        async with self._guard("list submissions"):
            rows = (await self.session.execute(stmt)).all()

        return [
            SubmissionView(
                id=submission.id,
                student_id=submission.student_id,
                student_name=student_name or UNKNOWN_LABEL,
                aat1_id=submission.aat1_id,
                course_title=course_link or UNKNOWN_LABEL,
                certificate=submission.certificate,
                grade=submission.grade,
                submitted_at=as_utc(submission.created_at),
            )
            for submission, student_name, course_link in rows
        ]
