"""Calendar integration lookups and the calendar-sync policy used at admission."""

import asyncio
import logging
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from ..core.config import settings
from ..core.exceptions import NotFoundError
from ..core.observability import metrics_collector
from ..models.calendar import CalendarIntegration
from ..schemas.calendar import ConnectCalendarRequest
from .ports import CalendarSyncInspector
from .property_service import PropertyService, parse_resource_id

logger = logging.getLogger(__name__)


async def resolve_calendar_sync(
    inspector: CalendarSyncInspector,
    property_id: str,
    timeout_seconds: float | None = None,
) -> bool:
    """
    Decide whether a property's bookings must wait for calendar reconciliation.

    Fails open: if the lookup errors or times out, the property is treated as
    having no calendar sync and the booking is confirmed straight away. This
    trades strict correctness for never blocking a booking on the lookup.
    """
    timeout = timeout_seconds if timeout_seconds is not None else settings.calendar_sync_timeout_seconds
    try:
        return bool(await asyncio.wait_for(inspector.has_active_calendar_sync(property_id), timeout=timeout))
    except Exception as e:
        metrics_collector.record_calendar_sync_fail_open()
        logger.warning(
            "Calendar sync lookup failed - assuming no calendar sync",
            extra={
                "property_id": property_id,
                "error_type": type(e).__name__,
                "error": str(e)
            }
        )
        return False


class CalendarSyncService:
    """Service for calendar integration records."""

    def __init__(self, db: AsyncSession):
        self.db = db
        self.property_service = PropertyService(db)

    async def has_active_calendar_sync(self, property_id: str) -> bool:
        """
        Return True if the property has an active, non-deleted calendar integration.

        Always reads the store; the answer is never cached.

        Raises:
            ValueError: If property_id is not a valid identifier
        """
        stmt = (
            select(CalendarIntegration.id)
            .where(
                CalendarIntegration.property_id == UUID(property_id),
                CalendarIntegration.is_active.is_(True),
                CalendarIntegration.is_deleted.is_(False),
            )
            .limit(1)
        )
        result = await self.db.execute(stmt)
        return result.first() is not None

    async def connect_calendar(self, request: ConnectCalendarRequest) -> CalendarIntegration:
        """
        Connect an external calendar to a property.

        Raises:
            NotFoundError: If property not found
        """
        prop = await self.property_service.get_property_or_raise(request.property_id)

        integration = CalendarIntegration(
            property_id=prop.id,
            provider=request.provider.strip().lower(),
            feed_url=request.feed_url,
            is_active=True,
            is_deleted=False,
        )
        self.db.add(integration)
        await self.db.commit()
        await self.db.refresh(integration)

        logger.info(
            "Calendar integration connected",
            extra={
                "integration_id": str(integration.id),
                "property_id": request.property_id,
                "provider": integration.provider
            }
        )
        return integration

    async def disconnect_calendar(self, integration_id: str) -> CalendarIntegration:
        """
        Deactivate and soft-delete a calendar integration.

        Disconnecting twice returns the already-disconnected record.

        Raises:
            NotFoundError: If integration not found
        """
        integration = await self.get_integration_or_raise(integration_id)

        if integration.is_deleted:
            logger.info(
                "Calendar integration already disconnected",
                extra={"integration_id": integration_id}
            )
            return integration

        integration.is_active = False
        integration.is_deleted = True
        self.db.add(integration)
        await self.db.commit()
        await self.db.refresh(integration)

        logger.info(
            "Calendar integration disconnected",
            extra={
                "integration_id": integration_id,
                "property_id": str(integration.property_id)
            }
        )
        return integration

    async def get_integration_or_raise(self, integration_id: str) -> CalendarIntegration:
        """Get integration by ID or raise NotFoundError."""
        integration_uuid = parse_resource_id(integration_id, "calendar_integration")
        stmt = select(CalendarIntegration).where(CalendarIntegration.id == integration_uuid)
        result = await self.db.execute(stmt)
        integration = result.scalar_one_or_none()
        if not integration:
            raise NotFoundError(resource_type="calendar_integration", resource_id=integration_id)
        return integration
