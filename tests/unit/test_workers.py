from __future__ import annotations

import asyncio
import time
from unittest.mock import MagicMock

from src.core.config import Settings
from src.domain.models import OutboundNotification
from src.workers.jobs import deliver_notification_job
from src.workers.queue import DELIVER_JOB, RQNotificationQueue

from tests.fakes import RecordingDispatcher


async def test_rq_queue_enqueues_one_job_per_recipient() -> None:
    queue = MagicMock()
    queue.name = "notifications"
    queue.enqueue.side_effect = [MagicMock(id="job-1"), MagicMock(id="job-2")]
    notifications = [
        OutboundNotification("student-1", "student1@example.edu", "Subject", "Body"),
        OutboundNotification("student-2", "student2@example.edu", "Subject", "Body"),
    ]

    job_ids = await RQNotificationQueue(queue, job_timeout=30).submit("session-1", notifications)

    assert job_ids == ["job-1", "job-2"]
    first_call = queue.enqueue.call_args_list[0]
    assert first_call.args == (DELIVER_JOB, "student1@example.edu", "Subject", "Body", "session-1")
    assert first_call.kwargs["job_timeout"] == 30
    assert first_call.kwargs["meta"] == {"reference": "session-1", "recipient_id": "student-1"}


async def test_rq_enqueue_runs_off_the_event_loop() -> None:
    queue = MagicMock()
    queue.name = "notifications"

    def slow_enqueue(*args, **kwargs) -> MagicMock:
        time.sleep(0.05)
        return MagicMock(id="job")

    queue.enqueue.side_effect = slow_enqueue
    notifications = [
        OutboundNotification(f"student-{i}", f"student{i}@example.edu", "Subject", "Body")
        for i in range(4)
    ]
    ticks = 0

    async def ticker() -> None:
        nonlocal ticks
        while True:
            await asyncio.sleep(0.01)
            ticks += 1

    ticking = asyncio.create_task(ticker())
    try:
        job_ids = await RQNotificationQueue(queue).submit("session-1", notifications)
    finally:
        ticking.cancel()

    assert len(job_ids) == 4
    assert ticks > 0


def test_redis_connection_uses_socket_timeouts() -> None:
    settings = Settings(REDIS_SOCKET_TIMEOUT_SECONDS=1.5)

    rq_queue = RQNotificationQueue.from_settings(settings)

    connection_kwargs = rq_queue.queue.connection.connection_pool.connection_kwargs
    assert connection_kwargs["socket_timeout"] == 1.5
    assert connection_kwargs["socket_connect_timeout"] == 1.5


def test_delivery_job_reports_success() -> None:
    dispatcher = RecordingDispatcher()

    result = deliver_notification_job(
        "student1@example.edu", "Subject", "Body", "session-1", dispatcher=dispatcher
    )

    assert result["status"] == "delivered"
    assert result["provider_id"] == "msg-1"
    assert dispatcher.calls == [("student1@example.edu", "Subject", "Body")]


def test_delivery_job_reports_failure_without_raising() -> None:
    dispatcher = RecordingDispatcher(failing={"student1@example.edu"})

    result = deliver_notification_job(
        "student1@example.edu", "Subject", "Body", "session-1", dispatcher=dispatcher
    )

    assert result == {
        "reference": "session-1",
        "recipient": "student1@example.edu",
        "status": "failed",
        "error": "mailbox unavailable",
    }
