"""Collaborator interfaces the admission engine depends on."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from typing import Optional, Protocol

from ..schemas.availability import DateAvailability
from ..schemas.booking import Booking, BookingRequest, BookingStatus
from ..schemas.property import PropertyBookingRules


@dataclass(frozen=True)
class BookingProfile:
    """What admission needs to know about a property."""
    property_id: str
    rules: PropertyBookingRules
    max_guests: Optional[int] = None


class AvailabilitySource(Protocol):
    async def fetch_availability(self, property_id: str, start_date: date, end_date: date) -> list[DateAvailability]:
        ...


class CalendarSyncInspector(Protocol):
    async def has_active_calendar_sync(self, property_id: str) -> bool:
        ...


class PropertyDirectory(Protocol):
    async def get_booking_profile(self, property_id: str) -> Optional[BookingProfile]:
        ...


class BookingStore(Protocol):
    async def persist_booking(self, request: BookingRequest, status: BookingStatus) -> Booking:
        """Write one booking record atomically or raise."""
        ...


class BookingNotifier(Protocol):
    async def notify_confirmed(self, booking_id: str) -> None:
        ...
