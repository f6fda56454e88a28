"""Property model definition."""

from datetime import datetime
from typing import TYPE_CHECKING
from uuid import UUID, uuid4

from sqlalchemy import CheckConstraint, Integer, String, Uuid, func
from sqlalchemy.orm import Mapped, mapped_column, relationship

from ..core.database import Base
from ..schemas.property import PropertyBookingRules

if TYPE_CHECKING:
    from .availability import BlockedDate
    from .booking import Booking
    from .calendar import CalendarIntegration


class Property(Base):
    """Rental property with its nightly rate and booking rules."""

    __tablename__ = "properties"

    # Primary key
    id: Mapped[UUID] = mapped_column(Uuid(as_uuid=True), primary_key=True, default=uuid4)

    # Listing information
    title: Mapped[str] = mapped_column(String(255), nullable=False, index=True)
    max_guests: Mapped[int | None] = mapped_column(Integer, nullable=True)

    # Nightly rate (stored as minor units, e.g., cents)
    nightly_rate_amount: Mapped[int] = mapped_column(Integer, nullable=False)
    nightly_rate_currency: Mapped[str] = mapped_column(String(3), nullable=False, default="USD")

    # Booking rules; NULL means the rule is not enforced
    min_stay_nights: Mapped[int | None] = mapped_column(Integer, nullable=True)
    max_stay_nights: Mapped[int | None] = mapped_column(Integer, nullable=True)
    lead_time_days: Mapped[int | None] = mapped_column(Integer, nullable=True)
    buffer_days: Mapped[int | None] = mapped_column(Integer, nullable=True)

    # Timestamps
    created_at: Mapped[datetime] = mapped_column(
        nullable=False,
        server_default=func.now()
    )
    updated_at: Mapped[datetime] = mapped_column(
        nullable=False,
        server_default=func.now(),
        onupdate=func.now()
    )

    __table_args__ = (
        CheckConstraint("length(title) > 0", name="ck_property_title_not_empty"),
        CheckConstraint("nightly_rate_amount >= 0", name="ck_property_nightly_rate_non_negative"),
        CheckConstraint("length(nightly_rate_currency) = 3", name="ck_property_currency_length"),
        CheckConstraint("max_guests IS NULL OR max_guests > 0", name="ck_property_max_guests_positive"),
        CheckConstraint("min_stay_nights IS NULL OR min_stay_nights >= 0", name="ck_property_min_stay_non_negative"),
        CheckConstraint("max_stay_nights IS NULL OR max_stay_nights > 0", name="ck_property_max_stay_positive"),
        CheckConstraint(
            "min_stay_nights IS NULL OR max_stay_nights IS NULL OR min_stay_nights <= max_stay_nights",
            name="ck_property_stay_bounds_ordered"
        ),
        CheckConstraint("lead_time_days IS NULL OR lead_time_days >= 0", name="ck_property_lead_time_non_negative"),
        CheckConstraint("buffer_days IS NULL OR buffer_days >= 0", name="ck_property_buffer_non_negative"),
    )

    # Relationships
    bookings: Mapped[list["Booking"]] = relationship(
        "Booking",
        back_populates="property",
        cascade="all, delete-orphan"
    )
    blocked_dates: Mapped[list["BlockedDate"]] = relationship(
        "BlockedDate",
        back_populates="property",
        cascade="all, delete-orphan"
    )
    calendar_integrations: Mapped[list["CalendarIntegration"]] = relationship(
        "CalendarIntegration",
        back_populates="property",
        cascade="all, delete-orphan"
    )

    @property
    def booking_rules(self) -> PropertyBookingRules:
        """Booking rules as an immutable value object."""
        return PropertyBookingRules(
            min_stay_nights=self.min_stay_nights,
            max_stay_nights=self.max_stay_nights,
            lead_time_days=self.lead_time_days,
            buffer_days=self.buffer_days,
        )

    def __repr__(self) -> str:
        return f"<Property(id={self.id}, title='{self.title}')>"
