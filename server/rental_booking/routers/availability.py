"""Availability router for date picker queries."""

import logging

from fastapi import APIRouter, Depends, HTTPException
from fastapi.responses import JSONResponse
from sqlalchemy.ext.asyncio import AsyncSession

from ..core.dependencies import get_db
from ..core.exceptions import ProblemDetailsException
from ..schemas.availability import (
    AvailabilityWindowRequest,
    AvailabilityWindowResponse,
    BlockedDatesResponse,
    Quote,
    QuoteRequest,
    ValidateSelectionRequest,
    ValidationResult,
)
from ..services.availability_service import AvailabilityService
from ..services.blocked_dates import build_blocked_dates
from ..services.property_service import PropertyService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/v1/availability", tags=["availability"])

DB_DEPENDENCY = Depends(get_db)


@router.post("/get", response_model=AvailabilityWindowResponse)
async def get_availability(
    request: AvailabilityWindowRequest,
    db: AsyncSession = DB_DEPENDENCY
) -> JSONResponse:
    """
    Per-date availability for a property.

    Without explicit bounds the window starts at the earliest bookable date.
    """
    try:
        start_date, end_date, availability = await AvailabilityService(db).get_window(request)
        response_data = AvailabilityWindowResponse(
            property_id=request.property_id,
            start_date=start_date,
            end_date=end_date,
            dates=availability,
        )
        return JSONResponse(status_code=200, content=response_data.model_dump(mode="json"))

    except ProblemDetailsException:
        raise

    except Exception as e:
        logger.error(
            "Unexpected error in availability retrieval",
            extra={"property_id": request.property_id, "error": str(e)},
            exc_info=True
        )
        raise HTTPException(status_code=500, detail="Internal server error")


@router.post("/blocked-dates", response_model=BlockedDatesResponse)
async def get_blocked_dates(
    request: AvailabilityWindowRequest,
    db: AsyncSession = DB_DEPENDENCY
) -> JSONResponse:
    """Blocked dates of a property for a window, sorted ascending."""
    try:
        start_date, end_date, availability = await AvailabilityService(db).get_window(request)
        response_data = BlockedDatesResponse(
            property_id=request.property_id,
            start_date=start_date,
            end_date=end_date,
            blocked_dates=sorted(build_blocked_dates(availability)),
        )
        return JSONResponse(status_code=200, content=response_data.model_dump(mode="json"))

    except ProblemDetailsException:
        raise

    except Exception as e:
        logger.error(
            "Unexpected error in blocked dates retrieval",
            extra={"property_id": request.property_id, "error": str(e)},
            exc_info=True
        )
        raise HTTPException(status_code=500, detail="Internal server error")


@router.post("/validate", response_model=ValidationResult)
async def validate_selection(
    request: ValidateSelectionRequest,
    db: AsyncSession = DB_DEPENDENCY
) -> JSONResponse:
    """
    Validate a check-in/check-out selection.

    A rule violation is a normal answer (ok=false with a reason), not an error.
    """
    try:
        result = await AvailabilityService(db).validate(request)
        return JSONResponse(status_code=200, content=result.model_dump(mode="json"))

    except ProblemDetailsException:
        raise

    except Exception as e:
        logger.error(
            "Unexpected error in selection validation",
            extra={"property_id": request.property_id, "error": str(e)},
            exc_info=True
        )
        raise HTTPException(status_code=500, detail="Internal server error")


@router.post("/quote", response_model=Quote)
async def quote(
    request: QuoteRequest,
    db: AsyncSession = DB_DEPENDENCY
) -> JSONResponse:
    """Nightly-rate subtotal for a stay."""
    try:
        response_data = await PropertyService(db).quote(request)
        return JSONResponse(status_code=200, content=response_data.model_dump(mode="json"))

    except ProblemDetailsException:
        raise

    except Exception as e:
        logger.error(
            "Unexpected error in quote",
            extra={"property_id": request.property_id, "error": str(e)},
            exc_info=True
        )
        raise HTTPException(status_code=500, detail="Internal server error")
