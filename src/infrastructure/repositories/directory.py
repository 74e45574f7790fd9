"""
Directory adapter over the users table.

Resolves user ids to display name and email for notifications and listings.
Only the public projection leaves this module; password hashes are never
selected.
"""

from __future__ import annotations

from collections.abc import Iterable

from sqlalchemy import select
from src.domain.models import DirectoryEntry
from src.infrastructure.db.models import UserModel, UserRole
from src.infrastructure.repositories.base import SqlRepository

_PUBLIC_COLUMNS = (UserModel.id, UserModel.name, UserModel.email, UserModel.role)


def _role_value(role: UserRole | str) -> str:
    return role.value if isinstance(role, UserRole) else str(role)


class DirectoryRepository(SqlRepository):
    async def resolve_many(self, ids: Iterable[str]) -> list[DirectoryEntry]:
        """Look up users by id. Unknown ids are omitted, not reported."""
        wanted = list(dict.fromkeys(ids))
        if not wanted:
            return []

        stmt = select(*_PUBLIC_COLUMNS).where(UserModel.id.in_(wanted))
        async with self._guard("resolve users"):
            rows = (await self.session.execute(stmt)).all()

        by_id = {
            row.id: DirectoryEntry(
                id=row.id, name=row.name, email=row.email, role=_role_value(row.role)
            )
            for row in rows
        }
        # Preserve the caller's ordering
        return [by_id[user_id] for user_id in wanted if user_id in by_id]

    async def list_by_role(self, role: str) -> list[DirectoryEntry]:
        stmt = (
            select(*_PUBLIC_COLUMNS)
            .where(UserModel.role == UserRole(role))
            .order_by(UserModel.name, UserModel.id)
        )
        async with self._guard("list users"):
            rows = (await self.session.execute(stmt)).all()
        return [
            DirectoryEntry(id=row.id, name=row.name, email=row.email, role=_role_value(row.role))
            for row in rows
        ]
