from __future__ import annotations

from datetime import datetime
from typing import TYPE_CHECKING, Any

from sqlalchemy import select
from src.domain.models import AAT1Record, AAT2Record, as_utc
from src.infrastructure.db.models import AAT1Model, AAT2Model
from src.infrastructure.repositories.base import SqlRepository

if TYPE_CHECKING:
    from sqlalchemy import Select


def _aat1_record(row: AAT1Model) -> AAT1Record:
    return AAT1Record(
        id=row.id,
        course_link=row.course_link,
        deadline=as_utc(row.deadline),
        faculty_id=row.faculty_id,
        created_at=as_utc(row.created_at) if row.created_at else None,
    )


def _aat2_record(row: AAT2Model) -> AAT2Record:
    return AAT2Record(
        id=row.id,
        title=row.title,
        questions=list(row.questions or []),
        start_time=as_utc(row.start_time),
        end_time=as_utc(row.end_time),
        duration=row.duration,
        faculty_id=row.faculty_id,
        created_at=as_utc(row.created_at) if row.created_at else None,
    )


class AssessmentRepository(SqlRepository):
    """Persists AAT1 and AAT2 assessments."""

    async def create_aat1(
        self, *, course_link: str, deadline: datetime, faculty_id: str
    ) -> AAT1Record:
        row = AAT1Model(course_link=course_link, deadline=deadline, faculty_id=faculty_id)
        await self._insert(row, operation="create AAT1")
        return _aat1_record(row)

    async def create_aat2(
        self,
        *,
        title: str,
        questions: list[dict[str, Any]],
        start_time: datetime,
        end_time: datetime,
        duration: int,
        faculty_id: str,
    ) -> AAT2Record:
        row = AAT2Model(
            title=title,
            questions=questions,
            start_time=start_time,
            end_time=end_time,
            duration=duration,
            faculty_id=faculty_id,
        )
        await self._insert(row, operation="create AAT2")
        return _aat2_record(row)

    async def get_aat1(self, aat1_id: str) -> AAT1Record | None:
        async with self._guard("load AAT1"):
            row = await self.session.get(AAT1Model, aat1_id)
        return _aat1_record(row) if row else None

    async def get_aat2(self, aat2_id: str) -> AAT2Record | None:
        async with self._guard("load AAT2"):
            row = await self.session.get(AAT2Model, aat2_id)
        return _aat2_record(row) if row else None

    async def list_aat1(self, *, faculty_id: str) -> list[AAT1Record]:
        stmt: Select[tuple[AAT1Model]] = (
            select(AAT1Model)
            .where(AAT1Model.faculty_id == faculty_id)
            .order_by(AAT1Model.created_at.desc())
        )
        async with self._guard("list AAT1"):
            rows = (await self.session.execute(stmt)).scalars().all()
        return [_aat1_record(row) for row in rows]

    async def list_aat2(self, *, faculty_id: str) -> list[AAT2Record]:
        stmt: Select[tuple[AAT2Model]] = (
            select(AAT2Model)
            .where(AAT2Model.faculty_id == faculty_id)
            .order_by(AAT2Model.created_at.desc())
        )
        async with self._guard("list AAT2"):
            rows = (await self.session.execute(stmt)).scalars().all()
        return [_aat2_record(row) for row in rows]
