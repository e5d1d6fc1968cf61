"""Fleet class - the main aggregate for trucks, records and analytics."""

from datetime import datetime
from typing import Any, Dict, List, Optional, Tuple

from dateutil.relativedelta import relativedelta

from .category import Category
from .interval import DEFAULT_INTERVALS, IntervalTable
from .maintenance_record import MaintenanceRecord, parse_service_date, to_utc_naive
from .service_due import ServiceDue
from .truck import Truck
from .evaluator import evaluate

PERIODS = ("all", "year", "quarter", "month")


class Fleet:
    """A point-in-time snapshot of trucks and their maintenance records."""

    def __init__(
        self,
        trucks: Optional[List[Truck]] = None,
        records: Optional[List[MaintenanceRecord]] = None,
        intervals: Optional[IntervalTable] = None,
    ):
        self.trucks = trucks or []
        self.records = records or []
        self.intervals = intervals if intervals is not None else list(DEFAULT_INTERVALS)

    def get_truck(self, truck_id) -> Optional[Truck]:
        """Find a truck by id."""
        for truck in self.trucks:
            if truck.id == truck_id:
                return truck
        return None

    def get_record(self, record_id) -> Optional[MaintenanceRecord]:
        """Find a maintenance record by id."""
        for record in self.records:
            if record.id == record_id:
                return record
        return None

    def get_records_for_truck(self, truck_id) -> List[MaintenanceRecord]:
        return [r for r in self.records if r.truck_id == truck_id]

    def get_records_by_category(self, category) -> List[MaintenanceRecord]:
        category = Category(category)
        return [r for r in self.records if r.category == category]

    def get_records_by_date_range(self, start, end) -> List[MaintenanceRecord]:
        """Records with start <= date <= end (inclusive)."""
        start = parse_service_date(start)
        end = parse_service_date(end)
        return [r for r in self.records if start <= r.service_datetime <= end]

    def get_history_sorted(
        self,
        sort_by: str = "date",
        reverse: bool = True,
        truck_id: Any = None,
    ) -> List[MaintenanceRecord]:
        """
        Get records sorted by specified field.

        Args:
            sort_by: "date", "mileage", or "category"
            reverse: If True, newest/highest first (default)
            truck_id: Limit to one truck's records
        """
        records = self.records
        if truck_id is not None:
            records = self.get_records_for_truck(truck_id)
        if sort_by == "date":
            return sorted(records, key=lambda r: r.service_datetime, reverse=reverse)
        elif sort_by == "mileage":
            return sorted(records, key=lambda r: r.mileage_at_service, reverse=reverse)
        elif sort_by == "category":
            return sorted(
                records,
                key=lambda r: (r.category.value, r.service_datetime),
                reverse=reverse,
            )
        return list(records)

    def records_since(
        self, period: str, now: datetime
    ) -> List[MaintenanceRecord]:
        """
        Records inside a reporting period ending at `now`.

        - all: everything
        - year: since January 1 of the current year
        - quarter: since the first of the month three months back
        - month: since the first of the current month
        """
        if period not in PERIODS:
            raise ValueError(f"Unknown period '{period}' (expected one of {', '.join(PERIODS)})")
        if period == "all":
            return list(self.records)
        now = to_utc_naive(now)
        month_start = datetime(now.year, now.month, 1)
        if period == "month":
            start = month_start
        elif period == "quarter":
            start = month_start - relativedelta(months=3)
        else:
            start = datetime(now.year, 1, 1)
        return [r for r in self.records if r.service_datetime >= start]

    # =========================================================================
    # Cost analytics
    # =========================================================================

    def _select(self, records: Optional[List[MaintenanceRecord]]) -> List[MaintenanceRecord]:
        return self.records if records is None else records

    def total_cost(self, records: Optional[List[MaintenanceRecord]] = None) -> float:
        return sum(r.cost for r in self._select(records))

    def average_cost(self, records: Optional[List[MaintenanceRecord]] = None) -> float:
        records = self._select(records)
        if not records:
            return 0
        return self.total_cost(records) / len(records)

    def trucks_serviced(self, records: Optional[List[MaintenanceRecord]] = None) -> int:
        """Number of distinct trucks with at least one record."""
        return len({r.truck_id for r in self._select(records)})

    def cost_by_category(
        self, records: Optional[List[MaintenanceRecord]] = None
    ) -> List[Tuple[Category, float]]:
        """Cost totals per category, in category order, omitting zero totals."""
        totals: Dict[Category, float] = {}
        for r in self._select(records):
            totals[r.category] = totals.get(r.category, 0) + r.cost
        return [(cat, totals[cat]) for cat in Category if totals.get(cat, 0) > 0]

    def cost_by_truck(
        self, records: Optional[List[MaintenanceRecord]] = None
    ) -> List[Tuple[Truck, float]]:
        """Cost totals per truck, highest first, omitting zero totals."""
        totals: Dict[Any, float] = {}
        for r in self._select(records):
            totals[r.truck_id] = totals.get(r.truck_id, 0) + r.cost
        rows = [(t, totals[t.id]) for t in self.trucks if totals.get(t.id, 0) > 0]
        return sorted(rows, key=lambda row: row[1], reverse=True)

    def cost_over_time(
        self, records: Optional[List[MaintenanceRecord]] = None
    ) -> List[Tuple[str, float]]:
        """Cost totals per calendar month ('YYYY-MM'), oldest first."""
        totals: Dict[str, float] = {}
        for r in self._select(records):
            totals[r.month_key] = totals.get(r.month_key, 0) + r.cost
        return sorted(totals.items())

    # =========================================================================
    # Due services
    # =========================================================================

    def get_due_services(self, now: datetime) -> List[ServiceDue]:
        """Due-service alerts for the whole fleet as of `now`."""
        return evaluate(self.trucks, self.records, now, self.intervals)
