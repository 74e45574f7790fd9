from __future__ import annotations

from collections.abc import AsyncIterator

import structlog
from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.ext.asyncio import AsyncSession
from src.core.auth import Role, TokenError, create_access_token, decode_access_token
from src.core.config import get_settings
from src.domain import Principal
from src.domain.errors import (
    FacultyDeskError,
    Forbidden,
    InvalidInput,
    NotFound,
    StorageFailure,
    Unauthenticated,
)
from src.domain.ports import NotificationQueue
from src.domain.services import FacultyService, NotificationFanout, ResendNotificationDispatcher
from src.infrastructure.db.session import get_session

logger = structlog.get_logger()

bearer_scheme = HTTPBearer(auto_error=False)

_notification_queue: NotificationQueue | None = None

_STATUS_BY_ERROR: dict[type[FacultyDeskError], int] = {
    Unauthenticated: status.HTTP_401_UNAUTHORIZED,
    Forbidden: status.HTTP_403_FORBIDDEN,
    InvalidInput: status.HTTP_422_UNPROCESSABLE_ENTITY,
    NotFound: status.HTTP_404_NOT_FOUND,
    StorageFailure: status.HTTP_500_INTERNAL_SERVER_ERROR,
}


async def get_current_principal(
    credentials: HTTPAuthorizationCredentials | None = Depends(bearer_scheme),  # noqa: B008
) -> Principal:
    """Resolve the authenticated principal from a bearer token."""
    if credentials is None:
        raise _unauthorized("Missing bearer token")

    try:
        payload = decode_access_token(credentials.credentials)
    except TokenError as exc:
        raise _unauthorized(str(exc)) from exc

    user_id = payload.get("sub")
    if not user_id:
        raise _unauthorized("Token missing subject")

    return Principal(user_id=user_id, role=payload["role"], email=payload.get("email", ""))


def issue_smoke_token(user_id: str, *, role: Role, email: str | None = None) -> str:
    """Generate a signed token for manual smoke testing."""
    return create_access_token(user_id, role=role.value, email=email)


async def get_db_session() -> AsyncIterator[AsyncSession]:
    """Provide an async SQLAlchemy session for API handlers."""
    async for session in get_session():
        yield session


def get_notification_queue() -> NotificationQueue:
    """Return the process-wide notification queue for the configured backend."""
    global _notification_queue

    if _notification_queue is None:
        settings = get_settings()
        if settings.notification_backend == "rq":
            from src.workers.queue import RQNotificationQueue

            _notification_queue = RQNotificationQueue.from_settings(settings)
        else:
            _notification_queue = NotificationFanout(
                ResendNotificationDispatcher(settings), settings=settings
            )
        logger.info("notification_queue_ready", backend=settings.notification_backend)
    return _notification_queue


async def shutdown_notification_queue() -> None:
    global _notification_queue

    if isinstance(_notification_queue, NotificationFanout):
        await _notification_queue.aclose()
    _notification_queue = None


def get_faculty_service(
    session: AsyncSession = Depends(get_db_session),  # noqa: B008
    notifications: NotificationQueue = Depends(get_notification_queue),  # noqa: B008
) -> FacultyService:
    return FacultyService.from_session(session, notifications)


def to_http_exception(exc: FacultyDeskError) -> HTTPException:
    """Translate a domain failure into the HTTP response the client sees."""
    status_code = _STATUS_BY_ERROR.get(type(exc), status.HTTP_500_INTERNAL_SERVER_ERROR)
    detail = exc.message
    if isinstance(exc, StorageFailure):
        logger.error("storage_failure", error=exc.message, cause=repr(exc.__cause__))
        if get_settings().expose_error_detail and exc.__cause__ is not None:
            detail = f"{exc.message}: {exc.__cause__}"
    return HTTPException(
        status_code=status_code, detail=detail, headers={"X-Error-Kind": exc.kind}
    )


def _unauthorized(detail: str) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail=detail,
        headers={"X-Error-Kind": Unauthenticated.kind},
    )
