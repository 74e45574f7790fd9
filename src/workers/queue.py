from __future__ import annotations

import asyncio
from collections.abc import Sequence

import structlog
from redis import Redis
from rq import Queue
from src.core.config import Settings, get_settings
from src.domain.models import OutboundNotification

logger = structlog.get_logger()

DELIVER_JOB = "src.workers.jobs.deliver_notification_job"


class RQNotificationQueue:
    """Hands each invitation to the ``notifications`` RQ queue as its own job.

    Enqueueing talks to Redis synchronously, so ``submit`` runs it in a worker
    thread and the event loop keeps serving other requests meanwhile.
    """

    def __init__(self, queue: Queue, *, job_timeout: int = 60) -> None:
        self.queue = queue
        self.job_timeout = job_timeout

    @classmethod
    def from_settings(cls, settings: Settings | None = None) -> RQNotificationQueue:
        settings = settings or get_settings()
        connection = Redis.from_url(
            settings.redis_url,
            socket_connect_timeout=settings.redis_socket_timeout_seconds,
            socket_timeout=settings.redis_socket_timeout_seconds,
        )
        return cls(Queue(settings.notification_queue_name, connection=connection))

    async def submit(
        self, reference: str, notifications: Sequence[OutboundNotification]
    ) -> list[str]:
        job_ids = await asyncio.to_thread(self._enqueue_all, reference, list(notifications))
        logger.info(
            "notification_jobs_enqueued",
            reference=reference,
            queue=self.queue.name,
            jobs=len(job_ids),
        )
        return job_ids

    def _enqueue_all(
        self, reference: str, notifications: list[OutboundNotification]
    ) -> list[str]:
        job_ids: list[str] = []
        for notification in notifications:
            job = self.queue.enqueue(
                DELIVER_JOB,
                notification.recipient_email,
                notification.subject,
                notification.body,
                reference,
                job_timeout=self.job_timeout,
                meta={"reference": reference, "recipient_id": notification.recipient_id},
            )
            job_ids.append(job.id)
        return job_ids
