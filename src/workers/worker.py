from __future__ import annotations

from collections.abc import Sequence

import structlog
from redis import Redis
from rq import Queue, Worker
from src.core.config import get_settings
from src.core.logging import setup_logging
from src.workers import jobs

logger = structlog.get_logger()

REGISTERED_JOBS = {
    "deliver_notification": jobs.deliver_notification_job,
}


def main() -> None:
    """Bootstrap the notification worker, wiring queues and job handlers."""
    setup_logging()
    settings = get_settings()
    redis_connection = Redis.from_url(settings.redis_url)
    queue_names: Sequence[str] = (settings.notification_queue_name,)
    logger.info(
        "worker_bootstrap",
        queues=list(queue_names),
        redis_url=settings.redis_url,
        jobs=list(REGISTERED_JOBS.keys()),
    )

    _run_worker(redis_connection, queue_names)


def _run_worker(connection: Redis, queue_names: Sequence[str]) -> None:
    """Run the RQ worker; blocks until it receives a shutdown signal."""
    queues = [Queue(name, connection=connection) for name in queue_names]
    worker = Worker(queues, connection=connection, name="facultydesk-notifier")
    worker.work(with_scheduler=True)


if __name__ == "__main__":
    main()
