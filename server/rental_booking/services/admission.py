"""Booking admission: re-validate a request, pick its status and store it."""

import asyncio
import logging
import time
from dataclasses import dataclass, field
from datetime import date
from typing import Any, Awaitable, Callable, Optional, TypeVar

from ..core.config import settings
from ..core.exceptions import DateRangeConflictError
from ..core.observability import metrics_collector
from ..schemas.availability import DateRangeSelection
from ..schemas.booking import Booking, BookingRequest, BookingStatus
from ..schemas.common import ErrorCategory, ErrorKind
from .blocked_dates import build_blocked_dates
from .booking_rules import availability_horizon, validate_selection
from .calendar_sync_service import resolve_calendar_sync
from .date_math import today
from .notification_service import NotificationDispatcher
from .ports import AvailabilitySource, BookingStore, CalendarSyncInspector, PropertyDirectory

logger = logging.getLogger(__name__)

T = TypeVar("T")


@dataclass(frozen=True)
class AdmissionError:
    """Why a booking request was not admitted."""
    kind: ErrorKind
    detail: str = ""
    context: dict[str, Any] = field(default_factory=dict)

    def __post_init__(self):
        if not self.detail:
            object.__setattr__(self, "detail", self.kind.describe())

    @property
    def category(self) -> ErrorCategory:
        return self.kind.category


@dataclass(frozen=True)
class AdmissionResult:
    """Either the stored booking or the reason there is none."""
    booking: Optional[Booking] = None
    error: Optional[AdmissionError] = None

    @property
    def ok(self) -> bool:
        return self.booking is not None

    @classmethod
    def admitted(cls, booking: Booking) -> "AdmissionResult":
        return cls(booking=booking)

    @classmethod
    def rejected(cls, error: AdmissionError) -> "AdmissionResult":
        return cls(error=error)


class BookingAdmissionController:
    """
    Admits booking requests.

    A request moves from requested to exactly one of:

    - rejected: the property is unknown, the stay breaks availability, booking
      rules or the guest limit, or an upstream call failed; nothing is stored
    - PENDING_CONFIRMATION: the property syncs an external calendar that must
      reconcile before the stay is guaranteed; no notice is sent
    - CONFIRMED: no calendar sync; a confirmation notice is scheduled and its
      failure never affects the booking

    Availability is always fetched again, whatever the client validated.
    """

    def __init__(
        self,
        directory: PropertyDirectory,
        availability: AvailabilitySource,
        calendar_sync: CalendarSyncInspector,
        store: BookingStore,
        notifications: Optional[NotificationDispatcher] = None,
        clock: Callable[[], date] = today,
        upstream_timeout_seconds: Optional[float] = None,
        calendar_sync_timeout_seconds: Optional[float] = None,
    ):
        self.directory = directory
        self.availability = availability
        self.calendar_sync = calendar_sync
        self.store = store
        self.notifications = notifications
        self.clock = clock
        self.upstream_timeout_seconds = (
            upstream_timeout_seconds if upstream_timeout_seconds is not None else settings.upstream_timeout_seconds
        )
        self.calendar_sync_timeout_seconds = (
            calendar_sync_timeout_seconds
            if calendar_sync_timeout_seconds is not None
            else settings.calendar_sync_timeout_seconds
        )

    async def admit(self, request: BookingRequest) -> AdmissionResult:
        """
        Admit a booking request.

        Args:
            request: Booking request from the caller

        Returns:
            AdmissionResult holding the stored Booking, or an AdmissionError
        """
        started = time.perf_counter()
        try:
            result = await self._admit(request)
        finally:
            metrics_collector.observe_admission(time.perf_counter() - started)

        if result.ok:
            metrics_collector.record_booking_admitted(result.booking.status.value)
        else:
            metrics_collector.record_booking_rejected(result.error.kind.value)
        return result

    async def _admit(self, request: BookingRequest) -> AdmissionResult:
        profile, error = await self._upstream(
            self.directory.get_booking_profile(request.property_id), "property_lookup", request
        )
        if error:
            return AdmissionResult.rejected(error)
        if profile is None:
            return self._reject(request, AdmissionError(ErrorKind.PROPERTY_NOT_FOUND))

        selection = DateRangeSelection(check_in=request.check_in, check_out=request.check_out)
        blocked: set[date] = set()
        if request.check_in < request.check_out:
            availability, error = await self._upstream(
                self.availability.fetch_availability(
                    request.property_id, request.check_in, availability_horizon(request.check_out, profile.rules)
                ),
                "availability",
                request,
            )
            if error:
                return AdmissionResult.rejected(error)
            blocked = build_blocked_dates(availability)

        validation = validate_selection(selection, blocked, profile.rules, today=self.clock())
        if not validation.ok:
            return self._reject(request, AdmissionError(validation.reason, context=dict(validation.context or {})))

        if profile.max_guests is not None and request.guest_count > profile.max_guests:
            return self._reject(
                request,
                AdmissionError(
                    ErrorKind.GUEST_LIMIT_EXCEEDED,
                    context={"guest_count": request.guest_count, "max_guests": profile.max_guests},
                ),
            )

        has_sync = await resolve_calendar_sync(
            self.calendar_sync, request.property_id, self.calendar_sync_timeout_seconds
        )
        status = BookingStatus.PENDING_CONFIRMATION if has_sync else BookingStatus.CONFIRMED

        try:
            booking = await asyncio.wait_for(
                self.store.persist_booking(request, status), timeout=self.upstream_timeout_seconds
            )
        except asyncio.TimeoutError:
            logger.error(
                "Booking write timed out",
                extra={"property_id": request.property_id, "timeout_seconds": self.upstream_timeout_seconds}
            )
            return AdmissionResult.rejected(AdmissionError(ErrorKind.UPSTREAM_TIMEOUT, context={"operation": "persist"}))
        except DateRangeConflictError as e:
            return self._reject(
                request, AdmissionError(ErrorKind.DATE_RANGE_CONFLICT, context={"booking_id": e.booking_id})
            )
        except Exception as e:
            logger.error(
                "Failed to store booking",
                extra={"property_id": request.property_id, "error": str(e)},
                exc_info=True
            )
            return AdmissionResult.rejected(AdmissionError(ErrorKind.PERSISTENCE_FAILURE))

        logger.info(
            "Booking admitted",
            extra={
                "booking_id": booking.id,
                "property_id": request.property_id,
                "status": booking.status.value,
                "calendar_sync": has_sync
            }
        )

        if booking.status == BookingStatus.CONFIRMED and self.notifications is not None:
            self.notifications.dispatch(booking.id)

        return AdmissionResult.admitted(booking)

    async def _upstream(
        self, call: Awaitable[T], operation: str, request: BookingRequest
    ) -> tuple[Optional[T], Optional[AdmissionError]]:
        try:
            return await asyncio.wait_for(call, timeout=self.upstream_timeout_seconds), None
        except asyncio.TimeoutError:
            logger.warning(
                "Upstream call timed out during admission",
                extra={"operation": operation, "property_id": request.property_id}
            )
            return None, AdmissionError(ErrorKind.UPSTREAM_TIMEOUT, context={"operation": operation})
        except Exception as e:
            logger.warning(
                "Upstream call failed during admission",
                extra={"operation": operation, "property_id": request.property_id, "error": str(e)},
                exc_info=True
            )
            return None, AdmissionError(ErrorKind.UPSTREAM_UNAVAILABLE, context={"operation": operation})

    def _reject(self, request: BookingRequest, error: AdmissionError) -> AdmissionResult:
        # Expected outcomes of user input, not failures
        logger.info(
            "Booking request rejected",
            extra={
                "property_id": request.property_id,
                "requester_id": request.requester_id,
                "reason": error.kind.value
            }
        )
        return AdmissionResult.rejected(error)


async def admit_booking(controller: BookingAdmissionController, request: BookingRequest) -> AdmissionResult:
    """Admit a booking request through the given controller."""
    return await controller.admit(request)
