from __future__ import annotations

from collections.abc import Iterable
from datetime import UTC, datetime

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker
from src.api.deps import issue_smoke_token
from src.core.auth import Role
from src.infrastructure.db.models import UserModel, UserRole


def auth_headers(user_id: str = "faculty-1", role: Role = Role.FACULTY) -> dict[str, str]:
    token = issue_smoke_token(user_id, role=role, email=f"{user_id}@example.edu")
    return {"Authorization": f"Bearer {token}"}


def utc(*args: int) -> datetime:
    return datetime(*args, tzinfo=UTC)


def session_payload(**overrides) -> dict:
    """Build a JSON body for POST /faculty/remedial-sessions."""
    payload = {
        "title": "Recursion clinic",
        "description": "Walkthrough of the AAT2 recursion questions",
        "startTime": "2026-11-02T09:00:00+00:00",
        "endTime": "2026-11-02T10:00:00+00:00",
        "duration": 60,
        "link": "https://meet.example.edu/recursion",
        "students": [],
    }
    payload.update(overrides)
    return payload


async def seed_users(
    session_factory: async_sessionmaker[AsyncSession],
    users: Iterable[tuple[str, str, UserRole]],
) -> None:
    """Insert ``(id, name, role)`` users with a placeholder password hash."""
    async with session_factory() as session:
        for user_id, name, role in users:
            session.add(
                UserModel(
                    id=user_id,
                    name=name,
                    email=f"{user_id}@example.edu",
                    hashed_password="$2b$12$not-a-real-hash",
                    role=role,
                )
            )
        await session.commit()
