"""Availability-related Pydantic schemas."""

from datetime import date
from enum import Enum
from typing import Any, Optional

from pydantic import BaseModel, Field, model_validator

from .common import ErrorKind, Money


class AvailabilityStatus(str, Enum):
    """Availability status of a single calendar date."""
    AVAILABLE = "AVAILABLE"
    BLOCKED = "BLOCKED"


class DateAvailability(BaseModel):
    """Availability of one property on one calendar date."""

    date: date
    status: AvailabilityStatus

    model_config = {"frozen": True}


class DateRangeSelection(BaseModel):
    """A candidate stay; either date may still be missing while the guest picks."""

    check_in: Optional[date] = Field(None, description="Arrival date")
    check_out: Optional[date] = Field(None, description="Departure date")


class ValidationResult(BaseModel):
    """Outcome of validating a date selection."""

    ok: bool = Field(..., description="Whether the selection can be booked")
    reason: Optional[ErrorKind] = Field(None, description="First rule the selection broke")
    context: Optional[dict[str, Any]] = Field(None, description="Structured details such as the offending date")

    model_config = {"frozen": True}

    @classmethod
    def success(cls) -> "ValidationResult":
        return cls(ok=True)

    @classmethod
    def failure(cls, reason: ErrorKind, **context: Any) -> "ValidationResult":
        return cls(ok=False, reason=reason, context=context or None)


class AvailabilityWindowRequest(BaseModel):
    """Request schema for an availability window; defaults to the picker window."""

    property_id: str = Field(..., description="Property to query")
    start_date: Optional[date] = Field(None, description="First date of the window")
    end_date: Optional[date] = Field(None, description="Last date of the window (inclusive)")

    @model_validator(mode="after")
    def check_window(self) -> "AvailabilityWindowRequest":
        """Require both bounds or neither, in order."""
        if (self.start_date is None) != (self.end_date is None):
            raise ValueError("start_date and end_date must be given together")
        if self.start_date and self.end_date and self.start_date > self.end_date:
            raise ValueError("start_date must not be after end_date")
        if self.start_date and self.end_date and (self.end_date - self.start_date).days > 730:
            raise ValueError("Availability windows are limited to 730 days")
        return self


class AvailabilityWindowResponse(BaseModel):
    """Per-date availability for a window."""

    property_id: str
    start_date: date
    end_date: date
    dates: list[DateAvailability]


class BlockedDatesResponse(BaseModel):
    """Blocked dates for a window, sorted ascending."""

    property_id: str
    start_date: date
    end_date: date
    blocked_dates: list[date]


class ValidateSelectionRequest(BaseModel):
    """Request schema for validating a date selection against a property."""

    property_id: str = Field(..., description="Property to validate against")
    check_in: Optional[date] = Field(None, description="Arrival date")
    check_out: Optional[date] = Field(None, description="Departure date")


class QuoteRequest(BaseModel):
    """Request schema for a nightly-rate quote."""

    property_id: str = Field(..., description="Property to quote")
    check_in: date = Field(..., description="Arrival date")
    check_out: date = Field(..., description="Departure date")


class Quote(BaseModel):
    """Nightly-rate quote for a stay."""

    property_id: str
    nights: int = Field(..., ge=1)
    nightly_rate: Money
    subtotal: Money
