"""Property router for listing and calendar management operations."""

import logging

from fastapi import APIRouter, Depends, HTTPException
from fastapi.responses import JSONResponse
from sqlalchemy.ext.asyncio import AsyncSession

from ..core.dependencies import get_db
from ..core.exceptions import ProblemDetailsException
from ..schemas.property import (
    BlockDatesRequest,
    BlockDatesResponse,
    CreatePropertyRequest,
    GetPropertyRequest,
    Property,
    SearchPropertiesRequest,
    SearchPropertiesResponse,
)
from ..services.availability_service import AvailabilityService
from ..services.property_service import PropertyService, property_to_schema

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/v1/property", tags=["property"])

DB_DEPENDENCY = Depends(get_db)


@router.post("/create", response_model=Property)
async def create_property(
    request: CreatePropertyRequest,
    db: AsyncSession = DB_DEPENDENCY
) -> JSONResponse:
    """Create a new property listing with its nightly rate and booking rules."""
    try:
        prop = await PropertyService(db).create_property(request)
        return JSONResponse(
            status_code=200,
            content=property_to_schema(prop).model_dump(mode="json")
        )

    except ProblemDetailsException:
        raise

    except Exception as e:
        logger.error(
            "Unexpected error in property creation",
            extra={"title": request.title, "error": str(e)},
            exc_info=True
        )
        raise HTTPException(status_code=500, detail="Internal server error")


@router.post("/get", response_model=Property)
async def get_property(
    request: GetPropertyRequest,
    db: AsyncSession = DB_DEPENDENCY
) -> JSONResponse:
    """Retrieve a property by ID."""
    try:
        prop = await PropertyService(db).get_property_or_raise(request.property_id)
        return JSONResponse(
            status_code=200,
            content=property_to_schema(prop).model_dump(mode="json")
        )

    except ProblemDetailsException:
        raise

    except Exception as e:
        logger.error(
            "Unexpected error in property retrieval",
            extra={"property_id": request.property_id, "error": str(e)},
            exc_info=True
        )
        raise HTTPException(status_code=500, detail="Internal server error")


@router.post("/search", response_model=SearchPropertiesResponse)
async def search_properties(
    request: SearchPropertiesRequest,
    db: AsyncSession = DB_DEPENDENCY
) -> JSONResponse:
    """
    Search property listings.

    Filters by guest capacity, nightly-rate range, currency and title text,
    and returns one page of results with the total match count.
    """
    try:
        result = await PropertyService(db).search_properties(request)
        return JSONResponse(status_code=200, content=result.model_dump(mode="json"))

    except ProblemDetailsException:
        raise

    except Exception as e:
        logger.error(
            "Unexpected error in property search",
            extra={"page": request.page, "limit": request.limit, "error": str(e)},
            exc_info=True
        )
        raise HTTPException(status_code=500, detail="Internal server error")


@router.post("/block-dates", response_model=BlockDatesResponse)
async def block_dates(
    request: BlockDatesRequest,
    db: AsyncSession = DB_DEPENDENCY
) -> JSONResponse:
    """
    Block dates on a property calendar.

    Blocking an already blocked date is a no-op, so retries are safe.
    """
    try:
        changed = await AvailabilityService(db).block_dates(request)
        response_data = BlockDatesResponse(property_id=request.property_id, changed=changed)
        return JSONResponse(status_code=200, content=response_data.model_dump(mode="json"))

    except ProblemDetailsException:
        raise

    except Exception as e:
        logger.error(
            "Unexpected error blocking dates",
            extra={"property_id": request.property_id, "error": str(e)},
            exc_info=True
        )
        raise HTTPException(status_code=500, detail="Internal server error")


@router.post("/unblock-dates", response_model=BlockDatesResponse)
async def unblock_dates(
    request: BlockDatesRequest,
    db: AsyncSession = DB_DEPENDENCY
) -> JSONResponse:
    """Remove owner blocks from a property calendar; booked nights stay blocked."""
    try:
        changed = await AvailabilityService(db).unblock_dates(request)
        response_data = BlockDatesResponse(property_id=request.property_id, changed=changed)
        return JSONResponse(status_code=200, content=response_data.model_dump(mode="json"))

    except ProblemDetailsException:
        raise

    except Exception as e:
        logger.error(
            "Unexpected error unblocking dates",
            extra={"property_id": request.property_id, "error": str(e)},
            exc_info=True
        )
        raise HTTPException(status_code=500, detail="Internal server error")
