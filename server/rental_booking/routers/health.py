"""Health check router."""

import logging
from datetime import datetime, timezone

from fastapi import APIRouter
from fastapi.responses import JSONResponse

from ..core.observability import SERVICE_NAME, SERVICE_VERSION
from ..schemas.health import HealthResponse, HealthStatus
from ..services.notification_service import notification_dispatcher

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/v1/health", tags=["health"])


@router.post("/ping", response_model=HealthResponse)
async def health_ping() -> JSONResponse:
    """
    Health check endpoint.

    Returns current service status, timestamp and the number of confirmation
    notices still in flight.
    """
    response_data = HealthResponse(
        status=HealthStatus.HEALTHY,
        service=SERVICE_NAME,
        timestamp=datetime.now(timezone.utc),
        version=SERVICE_VERSION,
        pending_notices=notification_dispatcher.pending,
    )

    logger.debug(
        "Health check requested",
        extra={"pending_notices": response_data.pending_notices}
    )

    return JSONResponse(
        status_code=200,
        content=response_data.model_dump(mode="json")
    )
