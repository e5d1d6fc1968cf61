"""MaintenanceRecord class for logged service events."""

from datetime import date, datetime, timezone
from typing import List, Optional, Union

from dateutil.parser import isoparse

from .category import Category


def to_utc_naive(value: datetime) -> datetime:
    """Convert an aware datetime to naive UTC. Naive values are taken as UTC already."""
    if value.tzinfo is None:
        return value
    return value.astimezone(timezone.utc).replace(tzinfo=None)


def parse_service_date(value: Union[str, date, datetime]) -> datetime:
    """
    Parse a service date into a naive UTC datetime.

    Accepts ISO-8601 strings ('2025-01-15', '2025-01-15T08:30:00Z'),
    date and datetime objects. Values with a UTC offset are converted to
    UTC, so every parsed date compares with every other one.
    Raises ValueError for anything else.
    """
    if isinstance(value, datetime):
        return to_utc_naive(value)
    if isinstance(value, date):
        return datetime(value.year, value.month, value.day)
    if not isinstance(value, str):
        raise ValueError(f"Invalid service date: {value!r}")
    return to_utc_naive(isoparse(value))


class MaintenanceRecord:
    """A record of maintenance performed on a truck."""

    def __init__(
        self,
        id,
        truck_id,
        date: Union[str, date, datetime],
        category: Union[str, Category],
        mileage_at_service: Optional[int] = 0,
        description: Optional[str] = None,
        cost: Optional[float] = 0,
        parts_cost: Optional[float] = 0,
        labor_cost: Optional[float] = 0,
        service_provider: Optional[str] = None,
        notes: Optional[str] = None,
        photos: Optional[List[str]] = None,
    ):
        self.id = id
        self.truck_id = truck_id
        self.service_datetime = parse_service_date(date)
        self.date = date if isinstance(date, str) else date.isoformat()
        self.category = Category(category)
        self.mileage_at_service = mileage_at_service or 0
        self.description = description
        self.cost = cost or 0
        self.parts_cost = parts_cost or 0
        self.labor_cost = labor_cost or 0
        self.service_provider = service_provider
        self.notes = notes
        self.photos = photos or []

    @property
    def month_key(self) -> str:
        """Calendar month of the service as 'YYYY-MM'."""
        return self.service_datetime.strftime("%Y-%m")
