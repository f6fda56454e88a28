"""Property service for listing, rules and quote operations."""

import logging
from typing import Optional
from uuid import UUID

from sqlalchemy import and_, func, or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from ..core.exceptions import BookingRuleError, NotFoundError
from ..models.property import Property
from ..schemas.common import ErrorKind, Money
from ..schemas.property import CreatePropertyRequest, SearchPropertiesRequest, SearchPropertiesResponse
from ..schemas.property import Property as PropertySchema
from ..schemas.availability import Quote, QuoteRequest
from .date_math import night_count, nightly_subtotal
from .ports import BookingProfile

logger = logging.getLogger(__name__)


def parse_resource_id(value: str, resource_type: str) -> UUID:
    """
    Parse an identifier sent by a client.

    Raises:
        NotFoundError: If the value is not a UUID; no such resource can exist
    """
    try:
        return UUID(value)
    except (TypeError, ValueError):
        raise NotFoundError(resource_type=resource_type, resource_id=str(value))


def property_to_schema(prop: Property) -> PropertySchema:
    """Convert a property entity to its response schema."""
    return PropertySchema(
        id=str(prop.id),
        title=prop.title,
        nightly_rate=Money(amount=prop.nightly_rate_amount, currency=prop.nightly_rate_currency),
        max_guests=prop.max_guests,
        rules=prop.booking_rules,
        created_at=prop.created_at,
    )


class PropertyService:
    """Service for property-related operations."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def create_property(self, request: CreatePropertyRequest) -> Property:
        """
        Create a new property listing.

        Args:
            request: Property creation request

        Returns:
            Created property entity
        """
        rules = request.rules
        prop = Property(
            title=request.title,
            nightly_rate_amount=request.nightly_rate.amount,
            nightly_rate_currency=request.nightly_rate.currency,
            max_guests=request.max_guests,
            min_stay_nights=rules.min_stay_nights,
            max_stay_nights=rules.max_stay_nights,
            lead_time_days=rules.lead_time_days,
            buffer_days=rules.buffer_days,
        )

        self.db.add(prop)
        await self.db.commit()
        await self.db.refresh(prop)

        logger.info(
            "Property created successfully",
            extra={
                "property_id": str(prop.id),
                "title": prop.title,
                "max_guests": prop.max_guests
            }
        )

        return prop

    async def search_properties(self, request: SearchPropertiesRequest) -> SearchPropertiesResponse:
        """
        Search property listings.

        Listings without a guest limit match any guest count. Results are
        ordered by title and paged; ``total_count`` covers every page.

        Args:
            request: Search filters and page

        Returns:
            One page of matching listings
        """
        conditions = []

        if request.guests:
            conditions.append(or_(Property.max_guests.is_(None), Property.max_guests >= request.guests))

        if request.min_nightly_rate is not None:
            conditions.append(Property.nightly_rate_amount >= request.min_nightly_rate)

        if request.max_nightly_rate is not None:
            conditions.append(Property.nightly_rate_amount <= request.max_nightly_rate)

        if request.currency:
            conditions.append(Property.nightly_rate_currency == request.currency)

        if request.query:
            conditions.append(Property.title.icontains(request.query, autoescape=True))

        where = and_(*conditions) if conditions else None

        count_stmt = select(func.count()).select_from(Property)
        stmt = select(Property).order_by(Property.title, Property.id)
        if where is not None:
            count_stmt = count_stmt.where(where)
            stmt = stmt.where(where)

        total_count = await self.db.scalar(count_stmt) or 0
        offset = (request.page - 1) * request.limit
        result = await self.db.execute(stmt.offset(offset).limit(request.limit))
        properties = list(result.scalars())

        logger.info(
            "Property search completed",
            extra={
                "total_count": total_count,
                "returned": len(properties),
                "page": request.page,
                "filters": {
                    "guests": request.guests,
                    "min_nightly_rate": request.min_nightly_rate,
                    "max_nightly_rate": request.max_nightly_rate,
                    "currency": request.currency,
                    "query": request.query
                }
            }
        )

        return SearchPropertiesResponse(
            items=[property_to_schema(prop) for prop in properties],
            total_count=total_count,
            page=request.page,
            limit=request.limit,
        )

    async def get_property_by_id(self, property_id: UUID) -> Optional[Property]:
        """
        Get property by ID.

        Args:
            property_id: Property ID to search for

        Returns:
            Property if found, None otherwise
        """
        stmt = select(Property).where(Property.id == property_id)
        result = await self.db.execute(stmt)
        return result.scalar_one_or_none()

    async def get_property_or_raise(self, property_id: str) -> Property:
        """
        Get property by ID or raise NotFoundError.

        Args:
            property_id: Property ID as sent by the client

        Returns:
            Property entity

        Raises:
            NotFoundError: If property not found
        """
        prop = await self.get_property_by_id(parse_resource_id(property_id, "property"))
        if not prop:
            logger.warning(
                "Property not found",
                extra={"property_id": property_id}
            )
            raise NotFoundError(
                resource_type="property",
                resource_id=property_id
            )
        return prop

    async def get_booking_profile(self, property_id: str) -> Optional[BookingProfile]:
        """Rules and guest limit used at admission, or None for an unknown property."""
        try:
            property_uuid = UUID(property_id)
        except ValueError:
            return None

        prop = await self.get_property_by_id(property_uuid)
        if not prop:
            return None

        return BookingProfile(
            property_id=str(prop.id),
            rules=prop.booking_rules,
            max_guests=prop.max_guests,
        )

    async def quote(self, request: QuoteRequest) -> Quote:
        """
        Price a stay at the property's nightly rate.

        Raises:
            NotFoundError: If property not found
            BookingRuleError: If check-out is not after check-in
        """
        prop = await self.get_property_or_raise(request.property_id)

        nights = night_count(request.check_in, request.check_out)
        if nights < 1:
            raise BookingRuleError(
                kind=ErrorKind.INVERTED_RANGE,
                context={"check_in": request.check_in, "check_out": request.check_out}
            )

        currency = prop.nightly_rate_currency
        return Quote(
            property_id=str(prop.id),
            nights=nights,
            nightly_rate=Money(amount=prop.nightly_rate_amount, currency=currency),
            subtotal=Money(amount=nightly_subtotal(prop.nightly_rate_amount, nights), currency=currency),
        )
