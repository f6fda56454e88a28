"""Booking-related Pydantic schemas."""

from datetime import date, datetime
from enum import Enum

from pydantic import BaseModel, Field, model_validator

from .common import Money


class BookingStatus(str, Enum):
    """Booking status enumeration."""
    PENDING_CONFIRMATION = "PENDING_CONFIRMATION"
    CONFIRMED = "CONFIRMED"
    CANCELLED = "CANCELLED"
    COMPLETED = "COMPLETED"


class BookingRequest(BaseModel):
    """Request schema for admitting a booking."""

    property_id: str = Field(..., description="Property to book")
    requester_id: str = Field(..., min_length=1, max_length=128, description="Member making the booking")
    check_in: date = Field(..., description="Arrival date")
    check_out: date = Field(..., description="Departure date")
    guest_count: int = Field(..., ge=1, le=50, description="Number of guests")
    total_price: Money = Field(..., description="Total price computed by the caller")


class GetBookingRequest(BaseModel):
    """Request schema for getting a booking."""

    booking_id: str = Field(..., description="Booking to retrieve")


class ListBookingsRequest(BaseModel):
    """Request schema for listing the caller's bookings."""

    limit: int = Field(50, ge=1, le=200, description="Maximum number of bookings to return")


class Booking(BaseModel):
    """Booking response schema."""

    id: str = Field(..., description="Unique booking ID")
    property_id: str = Field(..., description="Booked property")
    requester_id: str = Field(..., description="Member who made the booking")
    check_in: date = Field(..., description="Arrival date")
    check_out: date = Field(..., description="Departure date")
    guest_count: int = Field(..., ge=1, description="Number of guests")
    total_price: Money = Field(..., description="Total price")
    status: BookingStatus = Field(..., description="Booking status")
    created_at: datetime = Field(..., description="Booking creation time (ISO 8601)")

    @model_validator(mode="after")
    def check_range(self) -> "Booking":
        if self.check_in >= self.check_out:
            raise ValueError("check_out must be after check_in")
        return self


class BookingList(BaseModel):
    """List of bookings, newest first."""

    items: list[Booking]
