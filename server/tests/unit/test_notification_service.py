"""Unit tests for confirmation notices."""

import asyncio
import json

import httpx
import pytest

from rental_booking.services.notification_service import ConfirmationNotifier, NotificationDispatcher

WEBHOOK_URL = "http://notifications.test/confirmation"


def _recording_transport(status_code=200):
    calls = []

    def handler(request: httpx.Request) -> httpx.Response:
        calls.append(request)
        return httpx.Response(status_code, json={})

    return httpx.MockTransport(handler), calls


@pytest.mark.asyncio
async def test_notifier_posts_booking_id():
    transport, calls = _recording_transport()
    notifier = ConfirmationNotifier(webhook_url=WEBHOOK_URL, enabled=True, transport=transport)

    await notifier.notify_confirmed("booking-123")

    assert len(calls) == 1
    assert calls[0].method == "POST"
    assert str(calls[0].url) == WEBHOOK_URL
    assert json.loads(calls[0].content) == {"bookingId": "booking-123"}


@pytest.mark.asyncio
async def test_notifier_raises_on_rejected_call():
    transport, _ = _recording_transport(status_code=500)
    notifier = ConfirmationNotifier(webhook_url=WEBHOOK_URL, enabled=True, transport=transport)

    with pytest.raises(httpx.HTTPStatusError):
        await notifier.notify_confirmed("booking-123")


@pytest.mark.asyncio
@pytest.mark.parametrize("enabled, url", [(False, WEBHOOK_URL), (True, "")])
async def test_notifier_skips_when_disabled(enabled, url):
    transport, calls = _recording_transport()
    notifier = ConfirmationNotifier(webhook_url=url, enabled=enabled, transport=transport)

    await notifier.notify_confirmed("booking-123")

    assert calls == []


class SlowNotifier:
    def __init__(self, error=None):
        self.error = error
        self.delivered = []

    async def notify_confirmed(self, booking_id):
        await asyncio.sleep(0.01)
        if self.error:
            raise self.error
        self.delivered.append(booking_id)


@pytest.mark.asyncio
async def test_dispatch_returns_before_delivery():
    notifier = SlowNotifier()
    dispatcher = NotificationDispatcher(notifier)

    dispatcher.dispatch("booking-1")

    assert dispatcher.pending == 1
    assert notifier.delivered == []

    await dispatcher.drain()

    assert notifier.delivered == ["booking-1"]
    assert dispatcher.pending == 0


@pytest.mark.asyncio
async def test_dispatch_swallows_delivery_failure():
    dispatcher = NotificationDispatcher(SlowNotifier(error=httpx.ConnectError("unreachable")))

    dispatcher.dispatch("booking-1")
    dispatcher.dispatch("booking-2")
    await dispatcher.drain()

    assert dispatcher.pending == 0


@pytest.mark.asyncio
async def test_drain_without_tasks_returns():
    await NotificationDispatcher(SlowNotifier()).drain()
