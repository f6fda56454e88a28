"""Booking service for persistence and retrieval of bookings."""

import asyncio
import logging
from contextlib import asynccontextmanager
from datetime import timedelta
from typing import AsyncIterator, Optional
from uuid import UUID

from sqlalchemy import select, text
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from ..core.exceptions import DateRangeConflictError, NotFoundError
from ..models.booking import ACTIVE_BOOKING_STATUSES, Booking
from ..models.property import Property
from ..schemas.booking import Booking as BookingSchema
from ..schemas.booking import BookingRequest, BookingStatus
from ..schemas.common import Money
from .property_service import parse_resource_id

logger = logging.getLogger(__name__)


class PropertyLockRegistry:
    """One asyncio.Lock per property, serializing admission writes in this process."""

    def __init__(self):
        self._locks: dict[str, asyncio.Lock] = {}

    def get(self, property_id: str) -> asyncio.Lock:
        lock = self._locks.get(property_id)
        if lock is None:
            lock = self._locks[property_id] = asyncio.Lock()
        return lock

    @asynccontextmanager
    async def hold(self, property_id: str) -> AsyncIterator[None]:
        async with self.get(property_id):
            yield


# Process-wide registry shared by every BookingService
property_locks = PropertyLockRegistry()


def booking_to_schema(booking: Booking) -> BookingSchema:
    """Convert a booking entity to its response schema."""
    return BookingSchema(
        id=str(booking.id),
        property_id=str(booking.property_id),
        requester_id=booking.requester_id,
        check_in=booking.check_in,
        check_out=booking.check_out,
        guest_count=booking.guest_count,
        total_price=Money(amount=booking.total_price_amount, currency=booking.total_price_currency),
        status=BookingStatus(booking.status),
        created_at=booking.created_at,
    )


class BookingService:
    """Service for booking-related operations."""

    def __init__(self, db: AsyncSession, locks: Optional[PropertyLockRegistry] = None):
        self.db = db
        self.locks = locks or property_locks

    async def persist_booking(self, request: BookingRequest, status: BookingStatus) -> BookingSchema:
        """
        Write one booking record in a single transaction.

        Writes for the same property are serialized, and inside that critical
        section the stay is checked again against active bookings so two
        admissions racing for the same nights cannot both be stored. With a
        buffer, the turnover days after each existing stay and after the new
        stay must also stay clear of other guests' nights.

        Args:
            request: Validated booking request
            status: Status decided by admission

        Returns:
            Stored booking

        Raises:
            NotFoundError: If property not found
            DateRangeConflictError: If an active booking already holds any of the nights
        """
        property_uuid = parse_resource_id(request.property_id, "property")

        async with self.locks.hold(request.property_id):
            try:
                await self._acquire_advisory_lock(property_uuid)

                prop = await self.db.get(Property, property_uuid)
                if prop is None:
                    raise NotFoundError(resource_type="property", resource_id=request.property_id)
                buffer_days = prop.buffer_days or 0

                # Turnover days apply on both sides: after the existing stays and after this one
                buffer = timedelta(days=buffer_days)
                conflicting_id = await self.db.scalar(
                    select(Booking.id)
                    .where(
                        Booking.property_id == property_uuid,
                        Booking.status.in_(ACTIVE_BOOKING_STATUSES),
                        Booking.check_in < request.check_out + buffer,
                        Booking.check_out > request.check_in - buffer,
                    )
                    .limit(1)
                )
                if conflicting_id is not None:
                    logger.warning(
                        "Booking write refused - dates already taken",
                        extra={
                            "property_id": request.property_id,
                            "check_in": request.check_in.isoformat(),
                            "check_out": request.check_out.isoformat(),
                            "conflicting_booking_id": str(conflicting_id)
                        }
                    )
                    raise DateRangeConflictError(
                        property_id=request.property_id,
                        check_in=request.check_in,
                        check_out=request.check_out,
                        booking_id=str(conflicting_id),
                    )

                booking = Booking(
                    property_id=property_uuid,
                    requester_id=request.requester_id,
                    check_in=request.check_in,
                    check_out=request.check_out,
                    guest_count=request.guest_count,
                    total_price_amount=request.total_price.amount,
                    total_price_currency=request.total_price.currency,
                    status=status.value,
                )
                self.db.add(booking)
                try:
                    await self.db.flush()
                    await self._commit_to_completion()
                except IntegrityError as e:
                    # Exclusion constraint on PostgreSQL, for writers outside this service
                    if "ex_bookings_no_overlap" not in str(e.orig):
                        raise
                    raise DateRangeConflictError(
                        property_id=request.property_id,
                        check_in=request.check_in,
                        check_out=request.check_out,
                        booking_id="unknown",
                    ) from e
            except BaseException:
                await self.db.rollback()
                raise

        logger.info(
            "Booking stored",
            extra={
                "booking_id": str(booking.id),
                "property_id": request.property_id,
                "requester_id": request.requester_id,
                "check_in": request.check_in.isoformat(),
                "check_out": request.check_out.isoformat(),
                "status": booking.status
            }
        )

        return booking_to_schema(booking)

    async def _commit_to_completion(self) -> None:
        """
        Commit the transaction, even if the caller's deadline expires meanwhile.

        Once the commit is in flight its outcome decides the result: a commit
        that lands is reported as stored, one that fails raises its own error.
        A cancellation arriving during the commit is absorbed so the caller
        never reports a failure for a row that exists.
        """
        commit = asyncio.ensure_future(self.db.commit())
        try:
            await asyncio.shield(commit)
        except asyncio.CancelledError:
            logger.warning("Deadline reached during booking commit - waiting for its outcome")
            await asyncio.wait({commit})
            commit.result()

    async def _acquire_advisory_lock(self, property_id: UUID) -> None:
        # Serializes writers across processes; released when the transaction ends.
        # SQLite (tests) has no advisory locks.
        if self.db.bind and self.db.bind.dialect.name == "postgresql":
            await self.db.execute(
                text("SELECT pg_advisory_xact_lock(hashtext(:property_id))"),
                {"property_id": str(property_id)}
            )
            logger.debug(
                "Acquired advisory lock for property",
                extra={"property_id": str(property_id)}
            )

    async def get_booking_by_id(self, booking_id: UUID) -> Optional[Booking]:
        """
        Get booking by ID.

        Args:
            booking_id: Booking ID to search for

        Returns:
            Booking if found, None otherwise
        """
        stmt = select(Booking).where(Booking.id == booking_id)
        result = await self.db.execute(stmt)
        return result.scalar_one_or_none()

    async def get_booking_or_raise(self, booking_id: str, requester_id: Optional[str] = None) -> Booking:
        """
        Get booking by ID or raise NotFoundError.

        When requester_id is given, bookings of other members are reported as
        not found.

        Raises:
            NotFoundError: If booking not found
        """
        booking = await self.get_booking_by_id(parse_resource_id(booking_id, "booking"))
        if not booking or (requester_id is not None and booking.requester_id != requester_id):
            logger.warning(
                "Booking not found",
                extra={"booking_id": booking_id}
            )
            raise NotFoundError(resource_type="booking", resource_id=booking_id)
        return booking

    async def list_bookings_for_requester(self, requester_id: str, limit: int = 50) -> list[Booking]:
        """
        Bookings made by a member, newest first.

        Args:
            requester_id: Member whose bookings to list
            limit: Maximum number of bookings to return

        Returns:
            Booking entities ordered by creation time, descending
        """
        stmt = (
            select(Booking)
            .where(Booking.requester_id == requester_id)
            .order_by(Booking.created_at.desc(), Booking.id.desc())
            .limit(limit)
        )
        result = await self.db.execute(stmt)
        return list(result.scalars().all())
