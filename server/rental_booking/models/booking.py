"""Booking model definition."""

from datetime import date, datetime
from typing import TYPE_CHECKING
from uuid import UUID, uuid4

from sqlalchemy import CheckConstraint, Date, ForeignKey, Index, Integer, String, Uuid, func
from sqlalchemy.orm import Mapped, mapped_column, relationship

from ..core.database import Base
from ..schemas.booking import BookingStatus

if TYPE_CHECKING:
    from .property import Property

# Statuses that hold the property's nights
ACTIVE_BOOKING_STATUSES = (BookingStatus.PENDING_CONFIRMATION.value, BookingStatus.CONFIRMED.value)


class Booking(Base):
    """Booking entity for a stay of whole nights at one property."""

    __tablename__ = "bookings"

    # Primary key
    id: Mapped[UUID] = mapped_column(Uuid(as_uuid=True), primary_key=True, default=uuid4)

    # Foreign key to property
    property_id: Mapped[UUID] = mapped_column(
        Uuid(as_uuid=True),
        ForeignKey("properties.id", ondelete="CASCADE"),
        nullable=False,
        index=True
    )

    # Booking details
    requester_id: Mapped[str] = mapped_column(String(128), nullable=False, index=True)
    check_in: Mapped[date] = mapped_column(Date, nullable=False)
    check_out: Mapped[date] = mapped_column(Date, nullable=False)
    guest_count: Mapped[int] = mapped_column(Integer, nullable=False)

    # Total price (stored as minor units, e.g., cents)
    total_price_amount: Mapped[int] = mapped_column(Integer, nullable=False)
    total_price_currency: Mapped[str] = mapped_column(String(3), nullable=False, default="USD")

    status: Mapped[str] = mapped_column(
        String(32),
        nullable=False,
        default=BookingStatus.CONFIRMED.value,
        index=True
    )

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

    # Constraints
    __table_args__ = (
        CheckConstraint("check_in < check_out", name="ck_booking_check_in_before_check_out"),
        CheckConstraint("guest_count > 0", name="ck_booking_guest_count_positive"),
        CheckConstraint("total_price_amount >= 0", name="ck_booking_total_price_non_negative"),
        CheckConstraint("length(requester_id) > 0", name="ck_booking_requester_not_empty"),
        CheckConstraint(
            "status IN ('PENDING_CONFIRMATION', 'CONFIRMED', 'CANCELLED', 'COMPLETED')",
            name="ck_booking_status_known"
        ),
        Index("ix_bookings_property_stay", "property_id", "check_in", "check_out"),
    )

    # Server-generated timestamps come back with the INSERT, before commit
    __mapper_args__ = {"eager_defaults": True}

    # Relationships
    property: Mapped["Property"] = relationship("Property", back_populates="bookings")

    def __repr__(self) -> str:
        return (
            f"<Booking(id={self.id}, property_id={self.property_id}, "
            f"check_in={self.check_in}, check_out={self.check_out}, status={self.status})>"
        )
