"""Booking router for admission and booking lookups."""

import logging

from fastapi import APIRouter, Depends, HTTPException
from fastapi.responses import JSONResponse
from sqlalchemy.ext.asyncio import AsyncSession

from ..core.dependencies import get_admission_controller, get_current_user, get_db
from ..core.exceptions import (
    AuthorizationError,
    BookingRuleError,
    ConflictError,
    InternalServerError,
    NotFoundError,
    ProblemDetailsException,
    UpstreamTimeoutError,
    UpstreamUnavailableError,
)
from ..schemas.booking import Booking, BookingList, BookingRequest, GetBookingRequest, ListBookingsRequest
from ..schemas.common import ErrorCategory, ErrorKind
from ..services.admission import AdmissionError, BookingAdmissionController
from ..services.booking_service import BookingService, booking_to_schema

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/v1/booking", tags=["booking"])

DB_DEPENDENCY = Depends(get_db)
AUTH_DEPENDENCY = Depends(get_current_user)
ADMISSION_DEPENDENCY = Depends(get_admission_controller)


def admission_problem(error: AdmissionError, property_id: str) -> ProblemDetailsException:
    """Problem Details exception for a refused admission."""
    category = error.kind.category

    if category == ErrorCategory.INPUT:
        return BookingRuleError(kind=error.kind, detail=error.detail, context=error.context)

    if category == ErrorCategory.NOT_FOUND:
        exc = NotFoundError(resource_type="property", resource_id=property_id)
    elif category == ErrorCategory.CONFLICT:
        exc = ConflictError(detail=error.detail, conflicting_resource=error.context or None)
    elif error.kind == ErrorKind.UPSTREAM_TIMEOUT:
        return UpstreamTimeoutError(detail=error.detail)
    elif error.kind == ErrorKind.UPSTREAM_UNAVAILABLE:
        return UpstreamUnavailableError(detail=error.detail)
    else:
        return InternalServerError(detail=error.detail, code=error.kind.value)

    exc.problem_details.update({"code": error.kind.value, "retryable": False})
    return exc


@router.post("/admit", response_model=Booking)
async def admit_booking(
    request: BookingRequest,
    current_user: dict = AUTH_DEPENDENCY,
    controller: BookingAdmissionController = ADMISSION_DEPENDENCY,
) -> JSONResponse:
    """
    Admit a booking request.

    Availability and booking rules are checked again on the server. The
    booking is stored as CONFIRMED, or as PENDING_CONFIRMATION when the
    property syncs an external calendar.
    """
    if request.requester_id != current_user["user_id"]:
        logger.warning(
            "Booking requester does not match token subject",
            extra={"requester_id": request.requester_id, "user_id": current_user["user_id"]}
        )
        raise AuthorizationError(detail="Bookings can only be made for the authenticated member")

    try:
        result = await controller.admit(request)

    except Exception as e:
        logger.error(
            "Unexpected error in booking admission",
            extra={"property_id": request.property_id, "error": str(e)},
            exc_info=True
        )
        raise HTTPException(status_code=500, detail="Internal server error")

    if not result.ok:
        raise admission_problem(result.error, request.property_id)

    return JSONResponse(status_code=200, content=result.booking.model_dump(mode="json"))


@router.post("/get", response_model=Booking)
async def get_booking(
    request: GetBookingRequest,
    current_user: dict = AUTH_DEPENDENCY,
    db: AsyncSession = DB_DEPENDENCY
) -> JSONResponse:
    """Retrieve one of the caller's bookings."""
    try:
        booking = await BookingService(db).get_booking_or_raise(
            request.booking_id, requester_id=current_user["user_id"]
        )
        return JSONResponse(status_code=200, content=booking_to_schema(booking).model_dump(mode="json"))

    except ProblemDetailsException:
        raise

    except Exception as e:
        logger.error(
            "Unexpected error in booking retrieval",
            extra={"booking_id": request.booking_id, "error": str(e)},
            exc_info=True
        )
        raise HTTPException(status_code=500, detail="Internal server error")


@router.post("/list", response_model=BookingList)
async def list_bookings(
    request: ListBookingsRequest,
    current_user: dict = AUTH_DEPENDENCY,
    db: AsyncSession = DB_DEPENDENCY
) -> JSONResponse:
    """List the caller's bookings, newest first."""
    try:
        bookings = await BookingService(db).list_bookings_for_requester(
            current_user["user_id"], limit=request.limit
        )
        response_data = BookingList(items=[booking_to_schema(booking) for booking in bookings])
        return JSONResponse(status_code=200, content=response_data.model_dump(mode="json"))

    except ProblemDetailsException:
        raise

    except Exception as e:
        logger.error(
            "Unexpected error listing bookings",
            extra={"user_id": current_user["user_id"], "error": str(e)},
            exc_info=True
        )
        raise HTTPException(status_code=500, detail="Internal server error")
