"""Service layer package."""

from .admission import AdmissionError, AdmissionResult, BookingAdmissionController, admit_booking
from .availability_service import AvailabilityService
from .blocked_dates import build_blocked_dates, get_blocked_dates, transform_availability_rows
from .booking_rules import validate_selection
from .booking_service import BookingService
from .calendar_sync_service import CalendarSyncService, resolve_calendar_sync
from .notification_service import ConfirmationNotifier, NotificationDispatcher
from .property_service import PropertyService

__all__ = [
    # Library surface
    "admit_booking",
    "build_blocked_dates",
    "get_blocked_dates",
    "transform_availability_rows",
    "validate_selection",
    "resolve_calendar_sync",

    # Admission
    "AdmissionError",
    "AdmissionResult",
    "BookingAdmissionController",

    # Store-backed services
    "AvailabilityService",
    "BookingService",
    "CalendarSyncService",
    "PropertyService",

    # Notices
    "ConfirmationNotifier",
    "NotificationDispatcher",
]
