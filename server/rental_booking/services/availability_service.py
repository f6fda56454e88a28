"""Availability service backed by the booking store."""

import logging
from datetime import date, timedelta
from uuid import UUID

from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession

from ..core.config import settings
from ..models.availability import BlockedDate
from ..models.booking import ACTIVE_BOOKING_STATUSES, Booking
from ..models.property import Property
from ..schemas.availability import (
    AvailabilityWindowRequest,
    DateAvailability,
    DateRangeSelection,
    ValidateSelectionRequest,
    ValidationResult,
)
from ..schemas.property import BlockDatesRequest
from .blocked_dates import build_blocked_dates, transform_availability_rows
from .booking_rules import availability_horizon, validate_selection
from .date_math import default_availability_window, iter_dates, iter_stay_nights
from .property_service import PropertyService

logger = logging.getLogger(__name__)


class AvailabilityService:
    """
    Per-date availability of a property.

    A date is blocked when the owner blocked it, when an active booking
    occupies it as a night, or when it falls in the buffer that follows an
    active booking's check-out. Cancelled and completed bookings free their
    dates. Nothing is cached; every call reads the store.
    """

    def __init__(self, db: AsyncSession):
        self.db = db
        self.property_service = PropertyService(db)

    async def fetch_availability(self, property_id: str, start_date: date, end_date: date) -> list[DateAvailability]:
        """
        Availability for every date in [start_date, end_date].

        Args:
            property_id: Property to query
            start_date: First date of the window
            end_date: Last date of the window (inclusive)

        Returns:
            One DateAvailability per date, in date order

        Raises:
            ValueError: If property_id is not a valid identifier
        """
        property_uuid = UUID(property_id)
        unavailable = await self._unavailable_dates(property_uuid, start_date, end_date)

        rows = [
            {"date": day, "is_available": day not in unavailable}
            for day in iter_dates(start_date, end_date)
        ]
        return transform_availability_rows(rows)

    async def get_blocked_dates(self, property_id: str, start_date: date, end_date: date) -> set[date]:
        """Blocked dates of a property within [start_date, end_date]."""
        return build_blocked_dates(await self.fetch_availability(property_id, start_date, end_date))

    async def _unavailable_dates(self, property_id: UUID, start_date: date, end_date: date) -> set[date]:
        buffer_days = await self.db.scalar(select(Property.buffer_days).where(Property.id == property_id)) or 0

        owner_blocked = await self.db.scalars(
            select(BlockedDate.blocked_on).where(
                BlockedDate.property_id == property_id,
                BlockedDate.blocked_on >= start_date,
                BlockedDate.blocked_on <= end_date,
            )
        )
        unavailable = set(owner_blocked)

        # A booking reaches into the window if its nights or trailing buffer do
        stays = await self.db.execute(
            select(Booking.check_in, Booking.check_out).where(
                Booking.property_id == property_id,
                Booking.status.in_(ACTIVE_BOOKING_STATUSES),
                Booking.check_in <= end_date,
                Booking.check_out > start_date - timedelta(days=buffer_days),
            )
        )
        for check_in, check_out in stays:
            unavailable.update(iter_stay_nights(check_in, check_out + timedelta(days=buffer_days)))

        return {day for day in unavailable if start_date <= day <= end_date}

    async def get_window(self, request: AvailabilityWindowRequest) -> tuple[date, date, list[DateAvailability]]:
        """
        Availability for the requested window, or the default picker window.

        The default window starts at the property's earliest bookable date and
        spans ``settings.availability_window_days`` days.

        Raises:
            NotFoundError: If property not found
        """
        prop = await self.property_service.get_property_or_raise(request.property_id)

        if request.start_date and request.end_date:
            start_date, end_date = request.start_date, request.end_date
        else:
            start_date, end_date = default_availability_window(
                prop.lead_time_days, settings.availability_window_days
            )

        availability = await self.fetch_availability(str(prop.id), start_date, end_date)
        return start_date, end_date, availability

    async def validate(self, request: ValidateSelectionRequest) -> ValidationResult:
        """
        Validate a selection against fresh availability and the property's rules.

        Raises:
            NotFoundError: If property not found
        """
        prop = await self.property_service.get_property_or_raise(request.property_id)
        selection = DateRangeSelection(check_in=request.check_in, check_out=request.check_out)

        blocked: set[date] = set()
        if selection.check_in and selection.check_out and selection.check_in < selection.check_out:
            blocked = await self.get_blocked_dates(
                str(prop.id), selection.check_in, availability_horizon(selection.check_out, prop.booking_rules)
            )

        result = validate_selection(selection, blocked, prop.booking_rules)
        if not result.ok:
            logger.info(
                "Date selection rejected",
                extra={
                    "property_id": request.property_id,
                    "reason": result.reason.value,
                }
            )
        return result

    async def block_dates(self, request: BlockDatesRequest) -> int:
        """
        Take dates off the market for a property.

        Dates that are already blocked are left as they are.

        Returns:
            Number of dates newly blocked

        Raises:
            NotFoundError: If property not found
        """
        prop = await self.property_service.get_property_or_raise(request.property_id)
        wanted = set(request.dates)

        existing = set(await self.db.scalars(
            select(BlockedDate.blocked_on).where(
                BlockedDate.property_id == prop.id,
                BlockedDate.blocked_on.in_(wanted),
            )
        ))

        new_dates = sorted(wanted - existing)
        for day in new_dates:
            self.db.add(BlockedDate(property_id=prop.id, blocked_on=day, reason=request.reason))
        await self.db.commit()

        logger.info(
            "Dates blocked",
            extra={
                "property_id": request.property_id,
                "requested": len(wanted),
                "blocked": len(new_dates)
            }
        )
        return len(new_dates)

    async def unblock_dates(self, request: BlockDatesRequest) -> int:
        """
        Put owner-blocked dates back on the market.

        Dates held by bookings are unaffected.

        Returns:
            Number of dates unblocked

        Raises:
            NotFoundError: If property not found
        """
        prop = await self.property_service.get_property_or_raise(request.property_id)

        result = await self.db.execute(
            delete(BlockedDate).where(
                BlockedDate.property_id == prop.id,
                BlockedDate.blocked_on.in_(set(request.dates)),
            )
        )
        await self.db.commit()

        logger.info(
            "Dates unblocked",
            extra={
                "property_id": request.property_id,
                "unblocked": result.rowcount
            }
        )
        return result.rowcount
