"""Property-related Pydantic schemas."""

from datetime import date, datetime
from typing import Optional

from pydantic import BaseModel, Field, field_validator, model_validator

from .common import Money


class PropertyBookingRules(BaseModel):
    """
    Per-property booking rules.

    Every field is optional and ``None`` means the rule is not enforced. An
    explicit ``0`` is a real value: a zero-night minimum is always satisfied
    and a zero-day lead time still refuses check-ins before today.
    """

    min_stay_nights: Optional[int] = Field(None, ge=0, description="Minimum number of nights")
    max_stay_nights: Optional[int] = Field(None, ge=1, description="Maximum number of nights")
    lead_time_days: Optional[int] = Field(None, ge=0, description="Days between today and the earliest check-in")
    buffer_days: Optional[int] = Field(None, ge=0, description="Turnover days blocked after each stay")

    model_config = {"frozen": True, "from_attributes": True}

    @model_validator(mode="after")
    def check_stay_bounds(self) -> "PropertyBookingRules":
        if (
            self.min_stay_nights is not None
            and self.max_stay_nights is not None
            and self.min_stay_nights > self.max_stay_nights
        ):
            raise ValueError("min_stay_nights must not exceed max_stay_nights")
        return self


class CreatePropertyRequest(BaseModel):
    """Request schema for creating a property."""

    title: str = Field(..., min_length=1, max_length=255, description="Listing title")
    nightly_rate: Money = Field(..., description="Price per night")
    max_guests: Optional[int] = Field(None, ge=1, le=50, description="Maximum number of guests")
    rules: PropertyBookingRules = Field(default_factory=PropertyBookingRules, description="Booking rules")

    @field_validator("title")
    @classmethod
    def strip_title(cls, v: str) -> str:
        """Reject titles made only of whitespace."""
        if not v.strip():
            raise ValueError("Title must not be blank")
        return v.strip()


class GetPropertyRequest(BaseModel):
    """Request schema for getting a property."""

    property_id: str = Field(..., description="Property to retrieve")


class Property(BaseModel):
    """Property response schema."""

    id: str = Field(..., description="Unique property ID")
    title: str = Field(..., description="Listing title")
    nightly_rate: Money = Field(..., description="Price per night")
    max_guests: Optional[int] = Field(None, description="Maximum number of guests")
    rules: PropertyBookingRules = Field(..., description="Booking rules")
    created_at: datetime = Field(..., description="Creation time (ISO 8601)")


class BlockDatesRequest(BaseModel):
    """Request schema for blocking or unblocking dates on a property calendar."""

    property_id: str = Field(..., description="Property whose calendar changes")
    dates: list[date] = Field(..., min_length=1, max_length=366, description="Dates to change")
    reason: Optional[str] = Field(None, max_length=255, description="Why the dates are blocked")


class BlockDatesResponse(BaseModel):
    """Response schema for block and unblock operations."""

    property_id: str = Field(..., description="Property whose calendar changed")
    changed: int = Field(..., ge=0, description="Number of dates that changed state")


class SearchPropertiesRequest(BaseModel):
    """Request schema for searching property listings."""

    guests: Optional[int] = Field(None, ge=1, le=50, description="Only listings that sleep at least this many guests")
    min_nightly_rate: Optional[int] = Field(None, ge=0, description="Lowest nightly rate in minor units")
    max_nightly_rate: Optional[int] = Field(None, ge=0, description="Highest nightly rate in minor units")
    currency: Optional[str] = Field(None, pattern="^[A-Z]{3}$", description="Only listings priced in this currency")
    query: Optional[str] = Field(None, min_length=1, max_length=255, description="Text the listing title contains")
    page: int = Field(1, ge=1, description="Page number, starting at 1")
    limit: int = Field(20, ge=1, le=100, description="Results per page")

    @model_validator(mode="after")
    def check_rate_range(self) -> "SearchPropertiesRequest":
        if (
            self.min_nightly_rate is not None
            and self.max_nightly_rate is not None
            and self.min_nightly_rate > self.max_nightly_rate
        ):
            raise ValueError("min_nightly_rate must not exceed max_nightly_rate")
        return self


class SearchPropertiesResponse(BaseModel):
    """Response schema for property search."""

    items: list[Property] = Field(..., description="Listings on this page")
    total_count: int = Field(..., ge=0, description="Listings matching the filters across all pages")
    page: int = Field(..., ge=1, description="Page number")
    limit: int = Field(..., ge=1, description="Results per page")
