#!/usr/bin/env python3
"""Migrate the database and seed a few sample listings for the rental booking API."""

import asyncio
import logging
import sys
from datetime import timedelta
from pathlib import Path

# Allow running from a checkout without installing the package
server_dir = Path(__file__).parent.parent / "server"
sys.path.insert(0, str(server_dir))

from alembic import command
from alembic.config import Config
from sqlalchemy import func, select

from rental_booking.core.database import async_session_factory
from rental_booking.models import BlockedDate, CalendarIntegration, Property
from rental_booking.services.date_math import today

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)


def run_migrations():
    """Upgrade the schema to the latest revision."""
    alembic_cfg = Config(str(server_dir / "db" / "alembic.ini"))
    alembic_cfg.set_main_option("script_location", str(server_dir / "db" / "alembic"))

    logger.info("Running database migrations...")
    command.upgrade(alembic_cfg, "head")
    logger.info("Database migrations completed")


async def create_sample_data():
    """Create sample properties unless some already exist."""
    logger.info("Creating sample data...")

    async with async_session_factory() as db:
        try:
            existing = await db.scalar(select(func.count()).select_from(Property))
            if existing:
                logger.info("Sample data already exists, skipping...")
                return

            cabin = Property(
                title="Lakeside Cabin",
                nightly_rate_amount=18500,
                nightly_rate_currency="USD",
                max_guests=4,
                min_stay_nights=2,
                max_stay_nights=14,
                lead_time_days=1,
                buffer_days=1,
            )
            loft = Property(
                title="Downtown Loft",
                nightly_rate_amount=12900,
                nightly_rate_currency="USD",
                max_guests=2,
            )
            db.add_all([cabin, loft])
            await db.flush()

            # Owner maintenance week on the cabin
            start = today() + timedelta(days=21)
            for offset in range(7):
                db.add(BlockedDate(property_id=cabin.id, blocked_on=start + timedelta(days=offset), reason="maintenance"))

            # The loft is also listed elsewhere, so its bookings start out pending
            db.add(CalendarIntegration(property_id=loft.id, provider="vrbo", feed_url="https://example.com/loft.ics"))

            await db.commit()
            logger.info("Sample data created successfully!")

        except Exception as e:
            await db.rollback()
            logger.error(f"Failed to create sample data: {e}")
            raise


async def main():
    """Main setup function."""
    logger.info("Starting rental booking API setup...")

    await asyncio.to_thread(run_migrations)
    await create_sample_data()

    logger.info("Setup completed successfully!")
    logger.info("You can now start the API server with: cd server && uvicorn rental_booking.main:app --reload")


if __name__ == "__main__":
    asyncio.run(main())
