"""
Notification dispatch and fan-out for remedial session invitations.

Delivery is best-effort: a batch runs in the background after the session is
committed, each recipient is attempted independently under a concurrency
bound, and failures are logged and counted in a ``FanoutReport`` rather than
raised to the caller.
"""

from __future__ import annotations

import asyncio
from collections import deque
from collections.abc import Callable, Sequence
from datetime import UTC, datetime
from html import escape

import structlog
from src.core.config import Settings, get_settings
from src.domain.errors import DeliveryFailure
from src.domain.models import (
    DeliveryOutcome,
    DeliveryReceipt,
    FanoutReport,
    OutboundNotification,
    RemedialSessionRecord,
)
from src.domain.ports import NotificationDispatcher
from src.libs.resend_client import ResendClient, ResendClientError

logger = structlog.get_logger(__name__)

REMEDIAL_SUBJECT = "Remedial Session Notification"


def _format_time(value: datetime) -> str:
    return value.astimezone(UTC).strftime("%Y-%m-%d %H:%M UTC")


def build_remedial_invitation(session: RemedialSessionRecord) -> tuple[str, str]:
    """Return ``(subject, body)`` for a remedial session invitation."""
    lines = [
        "You have been invited to a remedial session.",
        "",
        f"Title: {session.title}",
        f"Description: {session.description}",
        f"Start Time: {_format_time(session.start_time)}",
        f"End Time: {_format_time(session.end_time)}",
        f"Duration: {session.duration} minutes",
        f"Link: {session.link}",
    ]
    return REMEDIAL_SUBJECT, "\n".join(lines)


def _text_to_html(body: str) -> str:
    paragraphs = [p for p in body.split("\n\n") if p.strip()]
    return "".join(f"<p>{escape(p).replace(chr(10), '<br>')}</p>" for p in paragraphs)


class ResendNotificationDispatcher:
    """Dispatcher backed by the Resend transactional email API."""

    def __init__(
        self,
        settings: Settings | None = None,
        client: ResendClient | None = None,
    ) -> None:
        self.settings = settings or get_settings()
        self.client = client or ResendClient(self.settings)

    async def send(self, recipient_email: str, subject: str, body: str) -> DeliveryReceipt:
        if not recipient_email:
            raise DeliveryFailure("Recipient email address is missing")

        try:
            response = await self.client.send_email(
                from_email=self.settings.resend_from_email,
                to_emails=[recipient_email],
                subject=subject,
                html=_text_to_html(body),
                text=body,
            )
        except ResendClientError as exc:
            raise DeliveryFailure(str(exc), recipient=recipient_email) from exc

        return DeliveryReceipt(recipient_email=recipient_email, provider_id=response.id)


class NotificationFanout:
    """In-process, bounded-concurrency fan-out with fire-and-forget submission.

    ``submit`` schedules a batch on the running event loop and returns
    immediately. Completed batches are appended to ``reports`` (most recent
    last) and handed to ``on_report`` when one is configured.
    """

    def __init__(
        self,
        dispatcher: NotificationDispatcher,
        *,
        settings: Settings | None = None,
        max_concurrency: int | None = None,
        history_size: int = 100,
        on_report: Callable[[FanoutReport], None] | None = None,
    ) -> None:
        settings = settings or get_settings()
        self.dispatcher = dispatcher
        self.max_concurrency = max(1, max_concurrency or settings.notification_max_concurrency)
        self.reports: deque[FanoutReport] = deque(maxlen=history_size)
        self.on_report = on_report
        self._tasks: set[asyncio.Task[FanoutReport]] = set()

    @property
    def pending(self) -> int:
        return len(self._tasks)

    async def submit(
        self, reference: str, notifications: Sequence[OutboundNotification]
    ) -> asyncio.Task[FanoutReport] | None:
        if not notifications:
            logger.info("notification_batch_empty", reference=reference)
            return None

        task = asyncio.get_running_loop().create_task(
            self.deliver(reference, list(notifications)),
            name=f"notify:{reference}",
        )
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)
        logger.info(
            "notification_batch_submitted",
            reference=reference,
            recipients=len(notifications),
        )
        return task

    async def deliver(
        self, reference: str, notifications: Sequence[OutboundNotification]
    ) -> FanoutReport:
        """Send every notification, at most ``max_concurrency`` at a time."""
        report = FanoutReport(reference=reference)
        semaphore = asyncio.Semaphore(self.max_concurrency)

        async def _bounded(notification: OutboundNotification) -> None:
            async with semaphore:
                report.outcomes.append(await self._deliver_one(reference, notification))

        try:
            await asyncio.gather(*(_bounded(n) for n in notifications))
        except asyncio.CancelledError:
            report.cancelled = True
            raise
        finally:
            report.finished_at = datetime.now(UTC)
            self._record(report)
        return report

    async def _deliver_one(
        self, reference: str, notification: OutboundNotification
    ) -> DeliveryOutcome:
        try:
            receipt = await self.dispatcher.send(
                notification.recipient_email, notification.subject, notification.body
            )
        except DeliveryFailure as exc:
            logger.warning(
                "notification_delivery_failed",
                reference=reference,
                recipient_id=notification.recipient_id,
                error=exc.message,
            )
            return DeliveryOutcome(
                recipient_id=notification.recipient_id,
                recipient_email=notification.recipient_email,
                delivered=False,
                error=exc.message,
            )
        except Exception as exc:  # one broken recipient must not sink the batch
            logger.exception(
                "notification_dispatcher_error",
                reference=reference,
                recipient_id=notification.recipient_id,
            )
            return DeliveryOutcome(
                recipient_id=notification.recipient_id,
                recipient_email=notification.recipient_email,
                delivered=False,
                error=str(exc),
            )

        return DeliveryOutcome(
            recipient_id=notification.recipient_id,
            recipient_email=notification.recipient_email,
            delivered=True,
            provider_id=receipt.provider_id,
        )

    def _record(self, report: FanoutReport) -> None:
        self.reports.append(report)
        logger.info(
            "notification_batch_completed",
            reference=report.reference,
            delivered=report.delivered_count,
            failed=report.failed_count,
            cancelled=report.cancelled,
        )
        if self.on_report is not None:
            self.on_report(report)

    async def drain(self) -> None:
        """Wait until every submitted batch has finished."""
        while self._tasks:
            await asyncio.gather(*list(self._tasks), return_exceptions=True)

    async def aclose(self) -> None:
        """Cancel in-flight batches. Committed sessions are unaffected."""
        tasks = list(self._tasks)
        if not tasks:
            return
        for task in tasks:
            task.cancel()
        await asyncio.gather(*tasks, return_exceptions=True)
        logger.info("notification_batches_cancelled", count=len(tasks))
