"""Calendar integration Pydantic schemas."""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field


class ConnectCalendarRequest(BaseModel):
    """Request schema for connecting an external calendar to a property."""

    property_id: str = Field(..., description="Property to connect")
    provider: str = Field(..., min_length=1, max_length=64, description="Calendar provider, e.g. airbnb or vrbo")
    feed_url: Optional[str] = Field(None, max_length=2048, description="iCal feed URL")


class DisconnectCalendarRequest(BaseModel):
    """Request schema for disconnecting a calendar integration."""

    integration_id: str = Field(..., description="Integration to disconnect")


class CalendarStatusRequest(BaseModel):
    """Request schema for a property's calendar sync state."""

    property_id: str = Field(..., description="Property to inspect")


class CalendarIntegration(BaseModel):
    """Calendar integration response schema."""

    id: str = Field(..., description="Unique integration ID")
    property_id: str = Field(..., description="Connected property")
    provider: str = Field(..., description="Calendar provider")
    feed_url: Optional[str] = Field(None, description="iCal feed URL")
    is_active: bool = Field(..., description="Whether the integration is syncing")
    created_at: datetime = Field(..., description="Creation time (ISO 8601)")


class CalendarStatus(BaseModel):
    """Calendar sync state of a property."""

    property_id: str
    has_active_calendar_sync: bool
