"""
Worker jobs for the Redis-backed notification backend.

Each job delivers one invitation. A ``DeliveryFailure`` is logged and reported
in the job result instead of being raised, so RQ does not retry a recipient
whose address the provider rejected.
"""

from __future__ import annotations

import asyncio
from typing import Any

import structlog
from src.domain.errors import DeliveryFailure
from src.domain.ports import NotificationDispatcher
from src.domain.services.notifications import ResendNotificationDispatcher

logger = structlog.get_logger()


def deliver_notification_job(
    recipient_email: str,
    subject: str,
    body: str,
    reference: str | None = None,
    dispatcher: NotificationDispatcher | None = None,
) -> dict[str, Any]:
    """Entry point executed by the RQ worker."""
    return asyncio.run(
        _deliver_async(recipient_email, subject, body, reference, dispatcher)
    )


async def _deliver_async(
    recipient_email: str,
    subject: str,
    body: str,
    reference: str | None,
    dispatcher: NotificationDispatcher | None,
) -> dict[str, Any]:
    dispatcher = dispatcher or ResendNotificationDispatcher()
    try:
        receipt = await dispatcher.send(recipient_email, subject, body)
    except DeliveryFailure as exc:
        logger.warning(
            "notification_delivery_failed",
            reference=reference,
            recipient=recipient_email,
            error=exc.message,
        )
        return {
            "reference": reference,
            "recipient": recipient_email,
            "status": "failed",
            "error": exc.message,
        }

    logger.info(
        "notification_delivered",
        reference=reference,
        recipient=recipient_email,
        provider_id=receipt.provider_id,
    )
    return {
        "reference": reference,
        "recipient": recipient_email,
        "status": "delivered",
        "provider_id": receipt.provider_id,
    }
