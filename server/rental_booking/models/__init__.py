"""Models module exporting all database models."""

from .availability import BlockedDate
from .booking import ACTIVE_BOOKING_STATUSES, Booking
from .calendar import CalendarIntegration
from .property import Property

__all__ = [
    # Core entities
    "Property",
    "BlockedDate",

    # Booking entities
    "Booking",
    "ACTIVE_BOOKING_STATUSES",

    # Calendar sync
    "CalendarIntegration",
]
