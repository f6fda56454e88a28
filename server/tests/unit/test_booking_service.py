"""Unit tests for BookingService persistence."""

from datetime import date

import pytest
import pytest_asyncio

from rental_booking.core.exceptions import DateRangeConflictError, NotFoundError
from rental_booking.schemas.booking import BookingRequest, BookingStatus
from rental_booking.schemas.common import Money
from rental_booking.services.booking_service import BookingService, PropertyLockRegistry

REQUESTER = "guest-1"


def _request(prop, check_in, check_out, requester=REQUESTER, guests=2):
    return BookingRequest(
        property_id=str(prop.id),
        requester_id=requester,
        check_in=check_in,
        check_out=check_out,
        guest_count=guests,
        total_price=Money(amount=50000, currency="USD"),
    )


@pytest_asyncio.fixture
async def booking_service(test_session):
    return BookingService(test_session, locks=PropertyLockRegistry())


@pytest.mark.asyncio
async def test_persist_booking(booking_service, property_factory):
    prop = await property_factory()

    booking = await booking_service.persist_booking(
        _request(prop, date(2030, 7, 10), date(2030, 7, 14)), BookingStatus.PENDING_CONFIRMATION
    )

    assert booking.id
    assert booking.property_id == str(prop.id)
    assert booking.status == BookingStatus.PENDING_CONFIRMATION
    assert booking.total_price == Money(amount=50000, currency="USD")
    assert booking.created_at is not None

    stored = await booking_service.get_booking_or_raise(booking.id)
    assert stored.status == BookingStatus.PENDING_CONFIRMATION.value


@pytest.mark.asyncio
async def test_overlapping_write_is_refused(booking_service, property_factory):
    prop = await property_factory()
    first = await booking_service.persist_booking(
        _request(prop, date(2030, 7, 10), date(2030, 7, 14)), BookingStatus.CONFIRMED
    )

    with pytest.raises(DateRangeConflictError) as exc_info:
        await booking_service.persist_booking(
            _request(prop, date(2030, 7, 12), date(2030, 7, 16), requester="guest-2"), BookingStatus.CONFIRMED
        )

    assert exc_info.value.booking_id == first.id
    assert exc_info.value.problem_details["code"] == "DATE_RANGE_CONFLICT"


@pytest.mark.asyncio
async def test_back_to_back_stays_are_allowed(booking_service, property_factory):
    prop = await property_factory()
    await booking_service.persist_booking(_request(prop, date(2030, 7, 10), date(2030, 7, 14)), BookingStatus.CONFIRMED)

    booking = await booking_service.persist_booking(
        _request(prop, date(2030, 7, 14), date(2030, 7, 16)), BookingStatus.CONFIRMED
    )

    assert booking.check_in == date(2030, 7, 14)


@pytest.mark.asyncio
async def test_buffer_days_are_held_at_write_time(booking_service, property_factory):
    prop = await property_factory(buffer_days=2)
    await booking_service.persist_booking(_request(prop, date(2030, 7, 10), date(2030, 7, 14)), BookingStatus.CONFIRMED)

    with pytest.raises(DateRangeConflictError):
        await booking_service.persist_booking(
            _request(prop, date(2030, 7, 15), date(2030, 7, 18)), BookingStatus.CONFIRMED
        )

    booking = await booking_service.persist_booking(
        _request(prop, date(2030, 7, 16), date(2030, 7, 18)), BookingStatus.CONFIRMED
    )
    assert booking.check_in == date(2030, 7, 16)


@pytest.mark.asyncio
async def test_new_stay_buffer_clears_later_booking(booking_service, property_factory):
    """The turnover days after a new stay may not reach another guest's check-in."""
    prop = await property_factory(buffer_days=2)
    later = await booking_service.persist_booking(
        _request(prop, date(2030, 7, 20), date(2030, 7, 22)), BookingStatus.CONFIRMED
    )

    with pytest.raises(DateRangeConflictError) as exc_info:
        await booking_service.persist_booking(
            _request(prop, date(2030, 7, 15), date(2030, 7, 19), requester="guest-2"), BookingStatus.CONFIRMED
        )

    booking = await booking_service.persist_booking(
        _request(prop, date(2030, 7, 15), date(2030, 7, 18), requester="guest-2"), BookingStatus.CONFIRMED
    )
    assert exc_info.value.booking_id == later.id
    assert booking.check_out == date(2030, 7, 18)


@pytest.mark.asyncio
async def test_other_properties_do_not_conflict(booking_service, property_factory):
    cabin = await property_factory(title="Cabin")
    loft = await property_factory(title="Loft")
    await booking_service.persist_booking(_request(cabin, date(2030, 7, 10), date(2030, 7, 14)), BookingStatus.CONFIRMED)

    booking = await booking_service.persist_booking(
        _request(loft, date(2030, 7, 10), date(2030, 7, 14)), BookingStatus.CONFIRMED
    )

    assert booking.property_id == str(loft.id)


@pytest.mark.asyncio
async def test_cancelled_booking_does_not_conflict(booking_service, property_factory):
    prop = await property_factory()
    await booking_service.persist_booking(_request(prop, date(2030, 7, 10), date(2030, 7, 14)), BookingStatus.CANCELLED)

    booking = await booking_service.persist_booking(
        _request(prop, date(2030, 7, 10), date(2030, 7, 14)), BookingStatus.CONFIRMED
    )

    assert booking.status == BookingStatus.CONFIRMED


@pytest.mark.asyncio
async def test_persist_unknown_property(booking_service):
    request = BookingRequest(
        property_id="00000000-0000-0000-0000-000000000000",
        requester_id=REQUESTER,
        check_in=date(2030, 7, 10),
        check_out=date(2030, 7, 14),
        guest_count=1,
        total_price=Money(amount=100, currency="USD"),
    )

    with pytest.raises(NotFoundError):
        await booking_service.persist_booking(request, BookingStatus.CONFIRMED)


@pytest.mark.asyncio
async def test_get_booking_scoped_to_requester(booking_service, property_factory):
    prop = await property_factory()
    booking = await booking_service.persist_booking(
        _request(prop, date(2030, 7, 10), date(2030, 7, 14)), BookingStatus.CONFIRMED
    )

    found = await booking_service.get_booking_or_raise(booking.id, requester_id=REQUESTER)
    assert str(found.id) == booking.id

    with pytest.raises(NotFoundError):
        await booking_service.get_booking_or_raise(booking.id, requester_id="guest-2")


@pytest.mark.asyncio
async def test_get_booking_malformed_id(booking_service):
    with pytest.raises(NotFoundError):
        await booking_service.get_booking_or_raise("not-a-uuid")


@pytest.mark.asyncio
async def test_list_bookings_for_requester(booking_service, property_factory):
    prop = await property_factory()
    mine = [
        await booking_service.persist_booking(_request(prop, date(2030, 7, 1), date(2030, 7, 3)), BookingStatus.CONFIRMED),
        await booking_service.persist_booking(_request(prop, date(2030, 8, 1), date(2030, 8, 3)), BookingStatus.CONFIRMED),
    ]
    await booking_service.persist_booking(
        _request(prop, date(2030, 9, 1), date(2030, 9, 3), requester="guest-2"), BookingStatus.CONFIRMED
    )

    listed = await booking_service.list_bookings_for_requester(REQUESTER)
    limited = await booking_service.list_bookings_for_requester(REQUESTER, limit=1)

    assert {str(b.id) for b in listed} == {b.id for b in mine}
    assert len(limited) == 1


@pytest.mark.asyncio
async def test_lock_registry_reuses_lock_per_property():
    registry = PropertyLockRegistry()

    assert registry.get("a") is registry.get("a")
    assert registry.get("a") is not registry.get("b")

    async with registry.hold("a"):
        assert registry.get("a").locked()
    assert not registry.get("a").locked()
