"""Blocked-date index built from availability data."""

import logging
from collections.abc import Mapping
from datetime import date
from typing import Any

from pydantic import ValidationError

from ..schemas.availability import AvailabilityStatus, DateAvailability
from .ports import AvailabilitySource

logger = logging.getLogger(__name__)


def transform_availability_rows(rows: Any) -> list[DateAvailability]:
    """
    Convert raw store rows of ``{"date", "is_available"}`` into DateAvailability.

    Anything that is not a list yields an empty list, and rows that cannot be
    parsed are skipped.
    """
    if not isinstance(rows, (list, tuple)):
        return []

    availability = []
    for row in rows:
        if not isinstance(row, Mapping):
            continue
        try:
            availability.append(
                DateAvailability(
                    date=row.get("date"),
                    status=AvailabilityStatus.AVAILABLE if row.get("is_available") else AvailabilityStatus.BLOCKED,
                )
            )
        except ValidationError:
            logger.debug("Skipping malformed availability row", extra={"row": repr(row)[:200]})
    return availability


def build_blocked_dates(availability: Any) -> set[date]:
    """
    Return the set of dates whose availability is BLOCKED.

    Total and side-effect free: non-list input gives an empty set, and entries
    that are neither DateAvailability nor a mapping with a parseable date and
    status are ignored.
    """
    if not isinstance(availability, (list, tuple)):
        return set()

    blocked: set[date] = set()
    for entry in availability:
        if isinstance(entry, DateAvailability):
            if entry.status == AvailabilityStatus.BLOCKED:
                blocked.add(entry.date)
            continue

        if isinstance(entry, Mapping):
            try:
                parsed = DateAvailability.model_validate(entry)
            except ValidationError:
                continue
            if parsed.status == AvailabilityStatus.BLOCKED:
                blocked.add(parsed.date)

    return blocked


async def get_blocked_dates(
    source: AvailabilitySource,
    property_id: str,
    start_date: date,
    end_date: date,
) -> set[date]:
    """Fetch availability for a window and return the blocked dates in it."""
    availability = await source.fetch_availability(property_id, start_date, end_date)
    return build_blocked_dates(availability)
