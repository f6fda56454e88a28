"""Unit tests for booking admission with in-memory collaborators."""

import asyncio
from datetime import date, datetime, timezone
from uuid import uuid4

import pytest

from rental_booking.core.exceptions import DateRangeConflictError
from rental_booking.schemas.availability import AvailabilityStatus, DateAvailability
from rental_booking.schemas.booking import Booking, BookingRequest, BookingStatus
from rental_booking.schemas.common import ErrorCategory, ErrorKind, Money
from rental_booking.schemas.property import PropertyBookingRules
from rental_booking.services.admission import BookingAdmissionController, admit_booking
from rental_booking.services.availability_service import AvailabilityService
from rental_booking.services.booking_service import BookingService, PropertyLockRegistry
from rental_booking.services.calendar_sync_service import CalendarSyncService
from rental_booking.services.date_math import iter_dates
from rental_booking.services.notification_service import NotificationDispatcher
from rental_booking.services.ports import BookingProfile
from rental_booking.services.property_service import PropertyService

PROPERTY_ID = "prop-1"
TODAY = date(2024, 7, 1)


class FakeDirectory:
    def __init__(self, profile=None):
        self.profile = profile or BookingProfile(property_id=PROPERTY_ID, rules=PropertyBookingRules(), max_guests=4)

    async def get_booking_profile(self, property_id):
        return self.profile if property_id == self.profile.property_id else None


class FakeAvailability:
    def __init__(self, blocked=(), error=None, delay=0.0):
        self.blocked = set(blocked)
        self.error = error
        self.delay = delay
        self.calls = 0
        self.ranges = []

    async def fetch_availability(self, property_id, start_date, end_date):
        self.calls += 1
        self.ranges.append((start_date, end_date))
        if self.delay:
            await asyncio.sleep(self.delay)
        if self.error:
            raise self.error
        return [
            DateAvailability(
                date=day,
                status=AvailabilityStatus.BLOCKED if day in self.blocked else AvailabilityStatus.AVAILABLE,
            )
            for day in iter_dates(start_date, end_date)
        ]


class FakeCalendarSync:
    def __init__(self, active=False, error=None, delay=0.0):
        self.active = active
        self.error = error
        self.delay = delay
        self.calls = 0

    async def has_active_calendar_sync(self, property_id):
        self.calls += 1
        if self.delay:
            await asyncio.sleep(self.delay)
        if self.error:
            raise self.error
        return self.active


class FakeStore:
    def __init__(self, error=None, delay=0.0):
        self.error = error
        self.delay = delay
        self.saved = []

    async def persist_booking(self, request, status):
        if self.delay:
            await asyncio.sleep(self.delay)
        if self.error:
            raise self.error
        booking = Booking(
            id=str(uuid4()),
            property_id=request.property_id,
            requester_id=request.requester_id,
            check_in=request.check_in,
            check_out=request.check_out,
            guest_count=request.guest_count,
            total_price=request.total_price,
            status=status,
            created_at=datetime.now(timezone.utc),
        )
        self.saved.append(booking)
        return booking


class FakeNotifier:
    def __init__(self, error=None):
        self.error = error
        self.calls = []

    async def notify_confirmed(self, booking_id):
        self.calls.append(booking_id)
        if self.error:
            raise self.error


def _request(check_in=date(2024, 7, 15), check_out=date(2024, 7, 22), guests=2, property_id=PROPERTY_ID):
    return BookingRequest(
        property_id=property_id,
        requester_id="guest-1",
        check_in=check_in,
        check_out=check_out,
        guest_count=guests,
        total_price=Money(amount=70000, currency="USD"),
    )


def _controller(
    directory=None,
    availability=None,
    calendar_sync=None,
    store=None,
    notifier=None,
    upstream_timeout=1.0,
    sync_timeout=1.0,
):
    notifier = notifier or FakeNotifier()
    controller = BookingAdmissionController(
        directory=directory or FakeDirectory(),
        availability=availability or FakeAvailability(),
        calendar_sync=calendar_sync or FakeCalendarSync(),
        store=store or FakeStore(),
        notifications=NotificationDispatcher(notifier),
        clock=lambda: TODAY,
        upstream_timeout_seconds=upstream_timeout,
        calendar_sync_timeout_seconds=sync_timeout,
    )
    return controller, notifier


@pytest.mark.asyncio
async def test_active_calendar_sync_admits_pending_without_notice():
    store = FakeStore()
    controller, notifier = _controller(calendar_sync=FakeCalendarSync(active=True), store=store)

    result = await controller.admit(_request())
    await controller.notifications.drain()

    assert result.ok
    assert result.booking.status == BookingStatus.PENDING_CONFIRMATION
    assert notifier.calls == []
    assert len(store.saved) == 1


@pytest.mark.asyncio
async def test_no_calendar_sync_confirms_and_notifies_once():
    controller, notifier = _controller()

    result = await controller.admit(_request())
    await controller.notifications.drain()

    assert result.ok
    assert result.booking.status == BookingStatus.CONFIRMED
    assert notifier.calls == [result.booking.id]


@pytest.mark.asyncio
async def test_failed_notice_does_not_affect_booking():
    controller, notifier = _controller(notifier=FakeNotifier(error=RuntimeError("smtp down")))

    result = await controller.admit(_request())
    await controller.notifications.drain()

    assert result.ok
    assert result.booking.status == BookingStatus.CONFIRMED
    assert len(notifier.calls) == 1
    assert controller.notifications.pending == 0


@pytest.mark.asyncio
async def test_calendar_sync_error_fails_open():
    controller, _ = _controller(calendar_sync=FakeCalendarSync(active=True, error=ConnectionError("boom")))

    result = await controller.admit(_request())

    assert result.ok
    assert result.booking.status == BookingStatus.CONFIRMED


@pytest.mark.asyncio
async def test_calendar_sync_timeout_fails_open():
    controller, _ = _controller(calendar_sync=FakeCalendarSync(active=True, delay=0.5), sync_timeout=0.01)

    result = await controller.admit(_request())

    assert result.ok
    assert result.booking.status == BookingStatus.CONFIRMED


@pytest.mark.asyncio
async def test_validation_failure_rejects_without_writing():
    store = FakeStore()
    sync = FakeCalendarSync()
    controller, notifier = _controller(
        availability=FakeAvailability(blocked={date(2024, 7, 18)}), calendar_sync=sync, store=store
    )

    result = await controller.admit(_request())
    await controller.notifications.drain()

    assert not result.ok
    assert result.error.kind == ErrorKind.RANGE_CONTAINS_UNAVAILABLE
    assert result.error.category == ErrorCategory.INPUT
    assert result.error.context == {"date": date(2024, 7, 18)}
    assert store.saved == []
    assert sync.calls == 0
    assert notifier.calls == []


@pytest.mark.asyncio
async def test_rules_are_checked_against_server_clock():
    directory = FakeDirectory(
        BookingProfile(property_id=PROPERTY_ID, rules=PropertyBookingRules(lead_time_days=5), max_guests=None)
    )
    controller, _ = _controller(directory=directory)

    result = await controller.admit(_request(check_in=date(2024, 7, 3), check_out=date(2024, 7, 8)))

    assert result.error.kind == ErrorKind.INSUFFICIENT_LEAD_TIME


@pytest.mark.asyncio
async def test_inverted_range_skips_availability_lookup():
    availability = FakeAvailability()
    controller, _ = _controller(availability=availability)

    result = await controller.admit(_request(check_in=date(2024, 7, 22), check_out=date(2024, 7, 15)))

    assert result.error.kind == ErrorKind.INVERTED_RANGE
    assert availability.calls == 0


@pytest.mark.asyncio
async def test_unknown_property_is_rejected():
    controller, _ = _controller()

    result = await controller.admit(_request(property_id="missing"))

    assert result.error.kind == ErrorKind.PROPERTY_NOT_FOUND
    assert result.error.category == ErrorCategory.NOT_FOUND


@pytest.mark.asyncio
async def test_guest_limit_exceeded():
    controller, _ = _controller()

    result = await controller.admit(_request(guests=5))

    assert result.error.kind == ErrorKind.GUEST_LIMIT_EXCEEDED
    assert result.error.context == {"guest_count": 5, "max_guests": 4}


@pytest.mark.asyncio
async def test_availability_timeout_is_upstream_timeout():
    store = FakeStore()
    controller, _ = _controller(availability=FakeAvailability(delay=0.5), store=store, upstream_timeout=0.01)

    result = await controller.admit(_request())

    assert result.error.kind == ErrorKind.UPSTREAM_TIMEOUT
    assert store.saved == []


@pytest.mark.asyncio
async def test_availability_failure_is_upstream_unavailable():
    controller, _ = _controller(availability=FakeAvailability(error=ConnectionError("db gone")))

    result = await controller.admit(_request())

    assert result.error.kind == ErrorKind.UPSTREAM_UNAVAILABLE
    assert result.error.category == ErrorCategory.UPSTREAM


@pytest.mark.asyncio
async def test_persistence_failure_never_notifies():
    controller, notifier = _controller(store=FakeStore(error=RuntimeError("disk full")))

    result = await controller.admit(_request())
    await controller.notifications.drain()

    assert result.error.kind == ErrorKind.PERSISTENCE_FAILURE
    assert result.error.detail == ErrorKind.PERSISTENCE_FAILURE.describe()
    assert notifier.calls == []


@pytest.mark.asyncio
async def test_persistence_timeout_is_upstream_timeout():
    controller, notifier = _controller(store=FakeStore(delay=0.5), upstream_timeout=0.01)

    result = await controller.admit(_request())
    await controller.notifications.drain()

    assert result.error.kind == ErrorKind.UPSTREAM_TIMEOUT
    assert notifier.calls == []


@pytest.mark.asyncio
async def test_write_time_overlap_is_a_conflict():
    error = DateRangeConflictError(
        property_id=PROPERTY_ID, check_in=date(2024, 7, 15), check_out=date(2024, 7, 22), booking_id="other"
    )
    controller, notifier = _controller(store=FakeStore(error=error))

    result = await controller.admit(_request())

    assert result.error.kind == ErrorKind.DATE_RANGE_CONFLICT
    assert result.error.context == {"booking_id": "other"}
    assert notifier.calls == []


@pytest.mark.asyncio
async def test_admit_booking_delegates_to_controller():
    controller, _ = _controller()

    result = await admit_booking(controller, _request())

    assert result.ok


@pytest.mark.asyncio
async def test_own_turnover_days_are_fetched_and_checked():
    directory = FakeDirectory(
        BookingProfile(property_id=PROPERTY_ID, rules=PropertyBookingRules(buffer_days=2), max_guests=4)
    )
    availability = FakeAvailability(blocked={date(2024, 7, 23)})
    store = FakeStore()
    controller, _ = _controller(directory=directory, availability=availability, store=store)

    result = await controller.admit(_request())

    assert availability.ranges == [(date(2024, 7, 15), date(2024, 7, 23))]
    assert result.error.kind == ErrorKind.CHECK_OUT_UNAVAILABLE
    assert result.error.context == {"date": date(2024, 7, 23), "buffer_days": 2}
    assert store.saved == []


def test_zero_timeouts_are_kept():
    controller, _ = _controller(upstream_timeout=0, sync_timeout=0)

    assert controller.upstream_timeout_seconds == 0
    assert controller.calendar_sync_timeout_seconds == 0


def _store_backed_controller(session, notifier, upstream_timeout):
    return BookingAdmissionController(
        directory=PropertyService(session),
        availability=AvailabilityService(session),
        calendar_sync=CalendarSyncService(session),
        store=BookingService(session, locks=PropertyLockRegistry()),
        notifications=NotificationDispatcher(notifier),
        clock=lambda: TODAY,
        upstream_timeout_seconds=upstream_timeout,
    )


@pytest.mark.asyncio
async def test_commit_landing_after_deadline_is_admitted(test_session, property_factory, monkeypatch):
    """A stored booking is never reported as a timeout, and it still gets its notice."""
    prop = await property_factory()
    commit = test_session.commit

    async def slow_commit():
        await asyncio.sleep(0.3)
        await commit()

    monkeypatch.setattr(test_session, "commit", slow_commit)
    notifier = FakeNotifier()
    controller = _store_backed_controller(test_session, notifier, upstream_timeout=0.1)

    result = await controller.admit(_request(property_id=str(prop.id)))
    await controller.notifications.drain()

    stored = await BookingService(test_session).list_bookings_for_requester("guest-1")
    assert result.ok
    assert result.booking.status == BookingStatus.CONFIRMED
    assert result.booking.created_at is not None
    assert [str(booking.id) for booking in stored] == [result.booking.id]
    assert notifier.calls == [result.booking.id]


@pytest.mark.asyncio
async def test_deadline_before_commit_stores_nothing(test_session, property_factory, monkeypatch):
    prop = await property_factory()
    flush = test_session.flush

    async def slow_flush(*args, **kwargs):
        await asyncio.sleep(0.3)
        await flush(*args, **kwargs)

    monkeypatch.setattr(test_session, "flush", slow_flush)
    notifier = FakeNotifier()
    controller = _store_backed_controller(test_session, notifier, upstream_timeout=0.1)

    result = await controller.admit(_request(property_id=str(prop.id)))
    await controller.notifications.drain()

    monkeypatch.undo()
    assert result.error.kind == ErrorKind.UPSTREAM_TIMEOUT
    assert result.error.context == {"operation": "persist"}
    assert await BookingService(test_session).list_bookings_for_requester("guest-1") == []
    assert notifier.calls == []
