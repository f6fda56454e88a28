"""Calendar router for external calendar integrations."""

import logging

from fastapi import APIRouter, Depends, HTTPException
from fastapi.responses import JSONResponse
from sqlalchemy.ext.asyncio import AsyncSession

from ..core.dependencies import get_db
from ..core.exceptions import ProblemDetailsException
from ..models.calendar import CalendarIntegration as CalendarIntegrationModel
from ..schemas.calendar import (
    CalendarIntegration,
    CalendarStatus,
    CalendarStatusRequest,
    ConnectCalendarRequest,
    DisconnectCalendarRequest,
)
from ..services.calendar_sync_service import CalendarSyncService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/v1/calendar", tags=["calendar"])

DB_DEPENDENCY = Depends(get_db)


def _to_schema(integration: CalendarIntegrationModel) -> CalendarIntegration:
    return CalendarIntegration(
        id=str(integration.id),
        property_id=str(integration.property_id),
        provider=integration.provider,
        feed_url=integration.feed_url,
        is_active=integration.is_active and not integration.is_deleted,
        created_at=integration.created_at,
    )


@router.post("/connect", response_model=CalendarIntegration)
async def connect_calendar(
    request: ConnectCalendarRequest,
    db: AsyncSession = DB_DEPENDENCY
) -> JSONResponse:
    """
    Connect an external calendar to a property.

    New bookings for the property are admitted as PENDING_CONFIRMATION
    until the integration is disconnected.
    """
    try:
        integration = await CalendarSyncService(db).connect_calendar(request)
        return JSONResponse(status_code=200, content=_to_schema(integration).model_dump(mode="json"))

    except ProblemDetailsException:
        raise

    except Exception as e:
        logger.error(
            "Unexpected error connecting calendar",
            extra={"property_id": request.property_id, "error": str(e)},
            exc_info=True
        )
        raise HTTPException(status_code=500, detail="Internal server error")


@router.post("/disconnect", response_model=CalendarIntegration)
async def disconnect_calendar(
    request: DisconnectCalendarRequest,
    db: AsyncSession = DB_DEPENDENCY
) -> JSONResponse:
    """Disconnect a calendar integration."""
    try:
        integration = await CalendarSyncService(db).disconnect_calendar(request.integration_id)
        return JSONResponse(status_code=200, content=_to_schema(integration).model_dump(mode="json"))

    except ProblemDetailsException:
        raise

    except Exception as e:
        logger.error(
            "Unexpected error disconnecting calendar",
            extra={"integration_id": request.integration_id, "error": str(e)},
            exc_info=True
        )
        raise HTTPException(status_code=500, detail="Internal server error")


@router.post("/status", response_model=CalendarStatus)
async def calendar_status(
    request: CalendarStatusRequest,
    db: AsyncSession = DB_DEPENDENCY
) -> JSONResponse:
    """Whether a property currently has an active calendar sync."""
    service = CalendarSyncService(db)
    try:
        prop = await service.property_service.get_property_or_raise(request.property_id)
        response_data = CalendarStatus(
            property_id=request.property_id,
            has_active_calendar_sync=await service.has_active_calendar_sync(str(prop.id)),
        )
        return JSONResponse(status_code=200, content=response_data.model_dump(mode="json"))

    except ProblemDetailsException:
        raise

    except Exception as e:
        logger.error(
            "Unexpected error in calendar status",
            extra={"property_id": request.property_id, "error": str(e)},
            exc_info=True
        )
        raise HTTPException(status_code=500, detail="Internal server error")
