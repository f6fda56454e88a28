"""Owner-blocked calendar date model."""

from datetime import date, datetime
from typing import TYPE_CHECKING
from uuid import UUID, uuid4

from sqlalchemy import Date, ForeignKey, String, UniqueConstraint, Uuid, func
from sqlalchemy.orm import Mapped, mapped_column, relationship

from ..core.database import Base

if TYPE_CHECKING:
    from .property import Property


class BlockedDate(Base):
    """A date the owner has taken off the market."""

    __tablename__ = "blocked_dates"

    id: Mapped[UUID] = mapped_column(Uuid(as_uuid=True), primary_key=True, default=uuid4)

    property_id: Mapped[UUID] = mapped_column(
        Uuid(as_uuid=True),
        ForeignKey("properties.id", ondelete="CASCADE"),
        nullable=False,
        index=True
    )

    blocked_on: Mapped[date] = mapped_column(Date, nullable=False, index=True)
    reason: Mapped[str | None] = mapped_column(String(255), nullable=True)

    created_at: Mapped[datetime] = mapped_column(
        nullable=False,
        server_default=func.now()
    )

    __table_args__ = (
        UniqueConstraint("property_id", "blocked_on", name="uq_blocked_date_property_day"),
    )

    property: Mapped["Property"] = relationship("Property", back_populates="blocked_dates")

    def __repr__(self) -> str:
        return f"<BlockedDate(property_id={self.property_id}, blocked_on={self.blocked_on})>"
