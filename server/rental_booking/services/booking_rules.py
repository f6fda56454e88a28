"""Validation of a check-in/check-out selection against availability and property rules."""

from datetime import date, timedelta
from typing import AbstractSet

from ..schemas.availability import DateRangeSelection, ValidationResult
from ..schemas.common import ErrorKind
from ..schemas.property import PropertyBookingRules
from .date_math import earliest_available_date, iter_stay_nights, night_count

_NO_RULES = PropertyBookingRules()


def availability_horizon(check_out: date, rules: PropertyBookingRules | None = None) -> date:
    """Last date whose availability a stay ending on check_out depends on."""
    buffer_days = (rules or _NO_RULES).buffer_days or 0
    return check_out + timedelta(days=max(buffer_days - 1, 0))


def validate_selection(
    selection: DateRangeSelection,
    blocked: AbstractSet[date],
    rules: PropertyBookingRules | None = None,
    today: date | None = None,
) -> ValidationResult:
    """
    Validate a date selection; the first failing check wins.

    Checks run in this order: both dates present, check-in before check-out,
    check-in not blocked, check-out not blocked, no blocked night in
    [check_in, check_out), no blocked turnover day in
    [check_out, check_out + buffer_days), minimum and maximum stay, lead time.

    The check-out date is only tested on its own. It is the departure day and
    is not one of the booked nights, so the range scan stops before it.

    Args:
        selection: Candidate check-in and check-out dates
        blocked: Dates the property cannot be booked on
        rules: Property booking rules; unset fields are not enforced
        today: Reference date for the lead-time check, defaults to the server date

    Returns:
        ValidationResult with the first broken rule, or ok=True
    """
    rules = rules or _NO_RULES
    check_in, check_out = selection.check_in, selection.check_out

    if check_in is None or check_out is None:
        return ValidationResult.failure(ErrorKind.MISSING_DATES)

    if check_in >= check_out:
        return ValidationResult.failure(ErrorKind.INVERTED_RANGE, check_in=check_in, check_out=check_out)

    if check_in in blocked:
        return ValidationResult.failure(ErrorKind.CHECK_IN_UNAVAILABLE, date=check_in)

    if check_out in blocked:
        return ValidationResult.failure(ErrorKind.CHECK_OUT_UNAVAILABLE, date=check_out)

    for night in iter_stay_nights(check_in, check_out):
        if night in blocked:
            return ValidationResult.failure(ErrorKind.RANGE_CONTAINS_UNAVAILABLE, date=night)

    if rules.buffer_days:
        for day in iter_stay_nights(check_out, check_out + timedelta(days=rules.buffer_days)):
            if day in blocked:
                return ValidationResult.failure(
                    ErrorKind.CHECK_OUT_UNAVAILABLE, date=day, buffer_days=rules.buffer_days
                )

    nights = night_count(check_in, check_out)

    if rules.min_stay_nights is not None and nights < rules.min_stay_nights:
        return ValidationResult.failure(
            ErrorKind.BELOW_MINIMUM_STAY, nights=nights, min_stay_nights=rules.min_stay_nights
        )

    if rules.max_stay_nights is not None and nights > rules.max_stay_nights:
        return ValidationResult.failure(
            ErrorKind.ABOVE_MAXIMUM_STAY, nights=nights, max_stay_nights=rules.max_stay_nights
        )

    if rules.lead_time_days is not None:
        earliest = earliest_available_date(rules.lead_time_days, today)
        if check_in < earliest:
            return ValidationResult.failure(
                ErrorKind.INSUFFICIENT_LEAD_TIME,
                earliest_check_in=earliest,
                lead_time_days=rules.lead_time_days,
            )

    return ValidationResult.success()
