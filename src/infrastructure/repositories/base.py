from __future__ import annotations

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

import structlog
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession
from src.domain.errors import StorageFailure

logger = structlog.get_logger(__name__)


class SqlRepository:
    """Shared session handling for the SQLAlchemy-backed stores.

    Each write is a single commit, so a record is either fully persisted or not
    at all. Driver errors surface as ``StorageFailure`` with the original
    exception chained as ``__cause__``.
    """

    def __init__(self, session: AsyncSession) -> None:
        self.session = session

    @asynccontextmanager
    async def _guard(self, operation: str) -> AsyncIterator[None]:
        try:
            yield
        except SQLAlchemyError as exc:
            await self.session.rollback()
            logger.error(
                "storage_operation_failed",
                repository=type(self).__name__,
                operation=operation,
                error=str(exc),
            )
            raise StorageFailure(f"Failed to {operation}") from exc

    async def _insert(self, instance, *, operation: str):
        async with self._guard(operation):
            self.session.add(instance)
            await self.session.commit()
            await self.session.refresh(instance)
        return instance
