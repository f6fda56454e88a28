"""Booking confirmation notices, delivered fire-and-forget."""

import asyncio
import logging

import httpx

from ..core.config import settings
from ..core.observability import metrics_collector
from .ports import BookingNotifier

logger = logging.getLogger(__name__)


class ConfirmationNotifier:
    """Calls the confirmation webhook that emails the guest."""

    def __init__(
        self,
        webhook_url: str | None = None,
        enabled: bool | None = None,
        timeout_seconds: float | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.webhook_url = webhook_url if webhook_url is not None else settings.confirmation_webhook_url
        self.enabled = enabled if enabled is not None else settings.send_emails_enabled
        self.timeout_seconds = (
            timeout_seconds if timeout_seconds is not None else settings.confirmation_webhook_timeout_seconds
        )
        self._transport = transport

    async def notify_confirmed(self, booking_id: str) -> None:
        """
        Ask the webhook to send the confirmation email for a booking.

        Does nothing when emails are disabled or no webhook is configured.

        Raises:
            httpx.HTTPError: If the webhook cannot be reached or rejects the call
        """
        if not self.enabled or not self.webhook_url:
            logger.debug(
                "Confirmation emails disabled - skipping notice",
                extra={"booking_id": booking_id}
            )
            return

        async with httpx.AsyncClient(timeout=self.timeout_seconds, transport=self._transport) as client:
            response = await client.post(self.webhook_url, json={"bookingId": booking_id})
            response.raise_for_status()

        logger.info("Confirmation notice sent", extra={"booking_id": booking_id})


class NotificationDispatcher:
    """
    Runs confirmation notices as background tasks.

    A failed notice is logged and counted, never raised to the caller. Tasks
    are tracked until they finish so shutdown can wait for them.
    """

    def __init__(self, notifier: BookingNotifier):
        self.notifier = notifier
        self._tasks: set[asyncio.Task] = set()

    @property
    def pending(self) -> int:
        return len(self._tasks)

    def dispatch(self, booking_id: str) -> None:
        """Schedule the notice for a confirmed booking and return immediately."""
        task = asyncio.create_task(self._deliver(booking_id), name=f"confirmation-notice-{booking_id}")
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)

    async def _deliver(self, booking_id: str) -> None:
        try:
            await self.notifier.notify_confirmed(booking_id)
        except Exception as e:
            metrics_collector.record_confirmation_notice(delivered=False)
            logger.error(
                "Failed to send confirmation notice",
                extra={"booking_id": booking_id, "error": str(e)},
                exc_info=True
            )
            return
        metrics_collector.record_confirmation_notice(delivered=True)

    async def drain(self) -> None:
        """Wait for every scheduled notice to finish."""
        if self._tasks:
            await asyncio.gather(*list(self._tasks), return_exceptions=True)


# Process-wide dispatcher used by the API
notification_dispatcher = NotificationDispatcher(ConfirmationNotifier())
