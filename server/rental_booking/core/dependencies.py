"""FastAPI dependencies for database, authentication, and admission."""

from typing import AsyncGenerator, Optional

import jwt
from fastapi import Depends, Header
from jwt import PyJWTError
from sqlalchemy.ext.asyncio import AsyncSession

from ..services.admission import BookingAdmissionController
from ..services.availability_service import AvailabilityService
from ..services.booking_service import BookingService
from ..services.calendar_sync_service import CalendarSyncService
from ..services.notification_service import notification_dispatcher
from ..services.property_service import PropertyService
from .config import settings
from .database import get_async_session
from .exceptions import AuthenticationError


async def get_db() -> AsyncGenerator[AsyncSession, None]:
    """
    Database dependency that provides async database sessions.

    Yields:
        AsyncSession: Database session
    """
    async for session in get_async_session():
        yield session


async def get_current_user(
    authorization: Optional[str] = Header(None, alias="Authorization")
) -> dict:
    """
    Authentication dependency that validates Bearer tokens.

    Args:
        authorization: Authorization header with Bearer token

    Returns:
        dict: User information from validated token

    Raises:
        AuthenticationError: If token is invalid or missing
    """
    if not authorization:
        raise AuthenticationError(detail="Authorization header missing")

    try:
        scheme, token = authorization.split()
    except ValueError:
        raise AuthenticationError(detail="Invalid authorization header format")

    if scheme.lower() != "bearer":
        raise AuthenticationError(detail="Invalid authentication scheme")

    try:
        # jwt.decode rejects expired tokens itself
        payload = jwt.decode(
            token,
            settings.bearer_token_secret,
            algorithms=["HS256"]
        )
    except PyJWTError as e:
        raise AuthenticationError(detail=f"Token validation failed: {str(e)}")

    user_id = payload.get("sub")
    if user_id is None:
        raise AuthenticationError(detail="Invalid token payload")

    return {
        "user_id": str(user_id),
        "username": payload.get("username"),
        "email": payload.get("email"),
        "roles": payload.get("roles", []),
    }


def get_admission_controller(db: AsyncSession = Depends(get_db)):
    """Admission controller wired to the request's database session."""
    return BookingAdmissionController(
        directory=PropertyService(db),
        availability=AvailabilityService(db),
        calendar_sync=CalendarSyncService(db),
        store=BookingService(db),
        notifications=notification_dispatcher,
    )


RequiredAuth = Depends(get_current_user)
DatabaseSession = Depends(get_db)
AdmissionController = Depends(get_admission_controller)
