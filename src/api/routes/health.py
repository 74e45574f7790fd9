from __future__ import annotations

from datetime import UTC, datetime

import structlog
from fastapi import APIRouter, Depends
from sqlalchemy import text
from src.api.deps import get_notification_queue
from src.core.config import get_settings
from src.domain.ports import NotificationQueue
from src.domain.services import NotificationFanout
from src.infrastructure.db.session import get_session_factory

router = APIRouter(tags=["Observability"])
logger = structlog.get_logger()


async def check_postgres() -> dict:
    """Check database connection."""
    try:
        session_factory = get_session_factory()
        async with session_factory() as session:
            await session.execute(text("SELECT 1"))
            return {"status": "ok"}
    except Exception as e:
        return {"status": "error", "message": str(e)[:100]}


async def check_redis() -> dict:
    """Check Redis connection (only used by the rq notification backend)."""
    try:
        import redis.asyncio as aioredis

        settings = get_settings()
        client = aioredis.from_url(settings.redis_url)
        await client.ping()
        await client.aclose()
        return {"status": "ok"}
    except Exception as e:
        return {"status": "error", "message": str(e)[:100]}


def notification_status(queue: NotificationQueue) -> dict:
    backend = "inline" if isinstance(queue, NotificationFanout) else "rq"
    payload: dict = {"backend": backend}
    if isinstance(queue, NotificationFanout):
        latest = queue.reports[-1] if queue.reports else None
        payload["pending_batches"] = queue.pending
        payload["last_batch"] = (
            {
                "reference": latest.reference,
                "delivered": latest.delivered_count,
                "failed": latest.failed_count,
            }
            if latest
            else None
        )
    return payload


@router.get("/health", summary="Service health probe")
async def health_check(
    queue: NotificationQueue = Depends(get_notification_queue),  # noqa: B008
) -> dict:
    """Return basic service, datastore and notification status information."""
    settings = get_settings()

    datastores = {"postgres": await check_postgres()}
    if settings.notification_backend == "rq":
        datastores["redis"] = await check_redis()

    overall_status = "ok"
    if any(check.get("status") != "ok" for check in datastores.values()):
        overall_status = "degraded"

    payload = {
        "service": settings.app_name,
        "version": settings.version,
        "status": overall_status,
        "timestamp": datetime.now(UTC).isoformat(),
        "datastores": datastores,
        "notifications": notification_status(queue),
    }
    logger.info("health_probe", **payload)
    return payload
