"""External calendar integration model."""

from datetime import datetime
from typing import TYPE_CHECKING
from uuid import UUID, uuid4

from sqlalchemy import Boolean, CheckConstraint, DateTime, ForeignKey, String, Uuid, func
from sqlalchemy.orm import Mapped, mapped_column, relationship

from ..core.database import Base

if TYPE_CHECKING:
    from .property import Property


class CalendarIntegration(Base):
    """Third-party calendar feed synced with a property."""

    __tablename__ = "calendar_integrations"

    id: Mapped[UUID] = mapped_column(Uuid(as_uuid=True), primary_key=True, default=uuid4)

    property_id: Mapped[UUID] = mapped_column(
        Uuid(as_uuid=True),
        ForeignKey("properties.id", ondelete="CASCADE"),
        nullable=False,
        index=True
    )

    provider: Mapped[str] = mapped_column(String(64), nullable=False)
    feed_url: Mapped[str | None] = mapped_column(String(2048), nullable=True)

    # Soft state; only active, non-deleted rows count as calendar sync
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True, index=True)
    is_deleted: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False, index=True)
    last_synced_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)

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
        CheckConstraint("length(provider) > 0", name="ck_calendar_provider_not_empty"),
    )

    property: Mapped["Property"] = relationship("Property", back_populates="calendar_integrations")

    def __repr__(self) -> str:
        return (
            f"<CalendarIntegration(id={self.id}, property_id={self.property_id}, "
            f"provider='{self.provider}', active={self.is_active}, deleted={self.is_deleted})>"
        )
