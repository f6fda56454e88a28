"""Common Pydantic schemas."""

from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, Field


class ErrorCategory(str, Enum):
    """Broad class of an error kind, used for logging and HTTP mapping."""
    INPUT = "input"
    NOT_FOUND = "not_found"
    CONFLICT = "conflict"
    UPSTREAM = "upstream"
    PERSISTENCE = "persistence"


class ErrorKind(str, Enum):
    """Closed set of reasons a stay can be refused or an admission can fail."""
    # Date selection and booking rules
    MISSING_DATES = "MISSING_DATES"
    INVERTED_RANGE = "INVERTED_RANGE"
    CHECK_IN_UNAVAILABLE = "CHECK_IN_UNAVAILABLE"
    CHECK_OUT_UNAVAILABLE = "CHECK_OUT_UNAVAILABLE"
    RANGE_CONTAINS_UNAVAILABLE = "RANGE_CONTAINS_UNAVAILABLE"
    BELOW_MINIMUM_STAY = "BELOW_MINIMUM_STAY"
    ABOVE_MAXIMUM_STAY = "ABOVE_MAXIMUM_STAY"
    INSUFFICIENT_LEAD_TIME = "INSUFFICIENT_LEAD_TIME"
    GUEST_LIMIT_EXCEEDED = "GUEST_LIMIT_EXCEEDED"

    # Admission
    PROPERTY_NOT_FOUND = "PROPERTY_NOT_FOUND"
    DATE_RANGE_CONFLICT = "DATE_RANGE_CONFLICT"
    UPSTREAM_TIMEOUT = "UPSTREAM_TIMEOUT"
    UPSTREAM_UNAVAILABLE = "UPSTREAM_UNAVAILABLE"
    PERSISTENCE_FAILURE = "PERSISTENCE_FAILURE"

    @property
    def category(self) -> ErrorCategory:
        """Return the category this kind belongs to."""
        return _CATEGORIES.get(self, ErrorCategory.INPUT)

    def describe(self) -> str:
        """Return the default English message for this kind."""
        return _DESCRIPTIONS[self]


_CATEGORIES = {
    ErrorKind.PROPERTY_NOT_FOUND: ErrorCategory.NOT_FOUND,
    ErrorKind.DATE_RANGE_CONFLICT: ErrorCategory.CONFLICT,
    ErrorKind.UPSTREAM_TIMEOUT: ErrorCategory.UPSTREAM,
    ErrorKind.UPSTREAM_UNAVAILABLE: ErrorCategory.UPSTREAM,
    ErrorKind.PERSISTENCE_FAILURE: ErrorCategory.PERSISTENCE,
}

_DESCRIPTIONS = {
    ErrorKind.MISSING_DATES: "Both check-in and check-out dates are required",
    ErrorKind.INVERTED_RANGE: "Check-out date must be after check-in date",
    ErrorKind.CHECK_IN_UNAVAILABLE: "Selected check-in date is not available",
    ErrorKind.CHECK_OUT_UNAVAILABLE: "Selected check-out date is not available",
    ErrorKind.RANGE_CONTAINS_UNAVAILABLE: "Selected date range contains unavailable dates",
    ErrorKind.BELOW_MINIMUM_STAY: "Stay is shorter than the property minimum",
    ErrorKind.ABOVE_MAXIMUM_STAY: "Stay is longer than the property maximum",
    ErrorKind.INSUFFICIENT_LEAD_TIME: "Check-in is too soon for this property",
    ErrorKind.GUEST_LIMIT_EXCEEDED: "Guest count exceeds the property maximum",
    ErrorKind.PROPERTY_NOT_FOUND: "Property could not be found",
    ErrorKind.DATE_RANGE_CONFLICT: "Dates were booked by another guest",
    ErrorKind.UPSTREAM_TIMEOUT: "An upstream dependency timed out",
    ErrorKind.UPSTREAM_UNAVAILABLE: "An upstream dependency is unavailable",
    ErrorKind.PERSISTENCE_FAILURE: "Failed to create booking. Please try again.",
}


class Money(BaseModel):
    """Money representation with amount in minor units."""

    amount: int = Field(..., ge=0, description="Amount in minor units (e.g., cents)")
    currency: str = Field(..., min_length=3, max_length=3, pattern=r"^[A-Z]{3}$", description="ISO 4217 currency code")


class Violation(BaseModel):
    """Validation error violation."""

    path: str = Field(..., description="JSON path to the invalid field")
    message: str = Field(..., description="Validation error message")


class Problem(BaseModel):
    """RFC 9457 Problem Details response."""

    type: Optional[str] = Field(None, description="Problem type URI")
    title: str = Field(..., description="Short human-readable summary")
    status: int = Field(..., description="HTTP status code")
    detail: Optional[str] = Field(None, description="Human-readable explanation")
    instance: Optional[str] = Field(None, description="URI reference for this occurrence")
    code: Optional[str] = Field(None, description="Application-specific error code")
    retryable: Optional[bool] = Field(None, description="Whether the operation can be retried")
    violations: Optional[List[Violation]] = Field(None, description="Validation errors")
