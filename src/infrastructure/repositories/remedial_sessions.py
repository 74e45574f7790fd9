from __future__ import annotations

from datetime import datetime

from sqlalchemy import select
from src.domain.models import RemedialSessionRecord, as_utc
from src.infrastructure.db.models import RemedialSessionModel
from src.infrastructure.repositories.base import SqlRepository


def _to_record(row: RemedialSessionModel) -> RemedialSessionRecord:
    return RemedialSessionRecord(
        id=row.id,
        title=row.title,
        description=row.description,
        start_time=as_utc(row.start_time),
        end_time=as_utc(row.end_time),
        duration=row.duration,
        link=row.link,
        faculty_id=row.faculty_id,
        students=list(row.students or []),
        created_at=as_utc(row.created_at) if row.created_at else None,
    )


class RemedialSessionRepository(SqlRepository):
    """Persists remedial sessions together with their invite list."""

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
    ) -> RemedialSessionRecord:
        row = RemedialSessionModel(
            title=title,
            description=description,
            start_time=start_time,
            end_time=end_time,
            duration=duration,
            link=link,
            faculty_id=faculty_id,
            students=list(students),
        )
        await self._insert(row, operation="create remedial session")
        return _to_record(row)

    async def get(self, session_id: str) -> RemedialSessionRecord | None:
        async with self._guard("load remedial session"):
            row = await self.session.get(RemedialSessionModel, session_id)
        return _to_record(row) if row else None

    async def list_for_faculty(self, faculty_id: str) -> list[RemedialSessionRecord]:
        stmt = (
            select(RemedialSessionModel)
            .where(RemedialSessionModel.faculty_id == faculty_id)
            .order_by(RemedialSessionModel.start_time.desc())
        )
        async with self._guard("list remedial sessions"):
            rows = (await self.session.execute(stmt)).scalars().all()
        return [_to_record(row) for row in rows]
