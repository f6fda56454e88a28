"""Calendar arithmetic shared by availability, validation and quoting."""

import math
from datetime import date, datetime, timedelta
from typing import Iterator

SECONDS_PER_DAY = 24 * 60 * 60


def as_date(value: date | datetime) -> date:
    """Return the calendar date of a date or datetime."""
    if isinstance(value, datetime):
        return value.date()
    return value


def today() -> date:
    """Current calendar date on the server clock."""
    return date.today()


def night_count(check_in: date | datetime, check_out: date | datetime) -> int:
    """
    Number of nights between check-in and check-out.

    Partial days round up, so a datetime range that drifts by a few hours
    across a timezone boundary still counts as the next whole night.
    """
    if isinstance(check_in, datetime) and isinstance(check_out, datetime):
        seconds = (check_out - check_in).total_seconds()
        return math.ceil(seconds / SECONDS_PER_DAY)
    return (as_date(check_out) - as_date(check_in)).days


def earliest_available_date(lead_time_days: int | None = None, on: date | None = None) -> date:
    """Earliest check-in allowed by a lead time; today when the lead time is unset or zero."""
    start = on or today()
    if lead_time_days and lead_time_days > 0:
        return start + timedelta(days=lead_time_days)
    return start


def iter_stay_nights(check_in: date | datetime, check_out: date | datetime) -> Iterator[date]:
    """Yield each night of a stay: every date in [check_in, check_out)."""
    current = as_date(check_in)
    end = as_date(check_out)
    while current < end:
        yield current
        current += timedelta(days=1)


def iter_dates(start: date, end: date) -> Iterator[date]:
    """Yield every date in the closed interval [start, end]."""
    yield from iter_stay_nights(start, end + timedelta(days=1))


def default_availability_window(
    lead_time_days: int | None,
    days: int,
    on: date | None = None,
) -> tuple[date, date]:
    """Window the date picker loads: ``days`` days from the earliest bookable date."""
    start = earliest_available_date(lead_time_days, on)
    return start, start + timedelta(days=days)


def nightly_subtotal(nightly_rate_amount: int, nights: int) -> int:
    """Nightly rate times nights, in minor units."""
    if nights < 0:
        raise ValueError("nights must not be negative")
    return nightly_rate_amount * nights
