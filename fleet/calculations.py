"""Helper functions for due-service calculations."""

import math
from datetime import datetime
from typing import Optional, Tuple

from .interval import IntervalRule
from .maintenance_record import to_utc_naive
from .status import Status

SOON_FRACTION = 0.9
SECONDS_PER_DAY = 24 * 60 * 60


def days_since(last: datetime, now: datetime) -> int:
    """Whole days elapsed from `last` to `now`, floored (23.9 hours -> 0)."""
    elapsed = to_utc_naive(now) - to_utc_naive(last)
    return math.floor(elapsed.total_seconds() / SECONDS_PER_DAY)


def miles_since(current_mileage: Optional[int], mileage_at_service: Optional[int]) -> int:
    """Miles driven since service. Negative when the current reading is stale."""
    return (current_mileage or 0) - (mileage_at_service or 0)


def check_status(
    miles: int, days: int, rule: IntervalRule
) -> Tuple[Status, Optional[str]]:
    """
    Classify a serviced category against its interval rule.

    First match wins: overdue by miles, overdue by days, soon by miles,
    soon by days, otherwise OK.
    """
    if rule.miles and miles >= rule.miles:
        return Status.OVERDUE, f"{miles - rule.miles} miles overdue"
    if rule.days and days >= rule.days:
        return Status.OVERDUE, f"{days - rule.days} days overdue"
    if rule.miles and miles >= rule.miles * SOON_FRACTION:
        return Status.SOON, f"{rule.miles - miles} miles"
    if rule.days and days >= rule.days * SOON_FRACTION:
        return Status.SOON, f"{rule.days - days} days"
    return Status.OK, None
