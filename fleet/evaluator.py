"""Due-service evaluation across a fleet."""

import logging
from collections import Counter
from datetime import datetime
from numbers import Number
from typing import Any, Dict, Iterable, List, Optional, Tuple

from .calculations import check_status, days_since, miles_since
from .category import Category
from .interval import DEFAULT_INTERVALS, IntervalRule
from .maintenance_record import MaintenanceRecord
from .service_due import ServiceDue
from .status import Status
from .truck import Truck

logger = logging.getLogger(__name__)

NO_HISTORY = "No service history"


def _id_key(record_id: Any) -> Tuple[int, Any]:
    """Sort key for record ids: numbers numerically, anything else as text after them."""
    if isinstance(record_id, Number) and not isinstance(record_id, bool):
        return (0, record_id)
    return (1, str(record_id))


def latest_record(records: Iterable[MaintenanceRecord]) -> Optional[MaintenanceRecord]:
    """Most recent record by service date. Ties go to the greatest record id."""
    records = list(records)
    if not records:
        return None
    return max(records, key=lambda r: (r.service_datetime, _id_key(r.id)))


def evaluate_truck(
    truck: Truck,
    records: List[MaintenanceRecord],
    now: datetime,
    intervals: Iterable[Tuple[Category, IntervalRule]] = DEFAULT_INTERVALS,
) -> List[ServiceDue]:
    """
    Evaluate one truck against every tracked category, in table order.

    `records` may contain other trucks' records; only this truck's are used.
    OK results are left out; categories with no history come back UNKNOWN.
    """
    own = [r for r in records if r.truck_id == truck.id]
    results = []
    for category, rule in intervals:
        last = latest_record(r for r in own if r.category == category)
        if last is None:
            results.append(
                ServiceDue(
                    truck_id=truck.id,
                    truck_number=truck.truck_number,
                    category=category,
                    status=Status.UNKNOWN,
                    due_in=NO_HISTORY,
                )
            )
            continue

        status, due_in = check_status(
            miles_since(truck.current_mileage, last.mileage_at_service),
            days_since(last.service_datetime, now),
            rule,
        )
        if status == Status.OK:
            continue
        results.append(
            ServiceDue(
                truck_id=truck.id,
                truck_number=truck.truck_number,
                category=category,
                status=status,
                due_in=due_in,
                last_service_date=last.date,
                last_service_mileage=last.mileage_at_service,
            )
        )
    return results


def evaluate(
    trucks: Iterable[Truck],
    records: Iterable[MaintenanceRecord],
    now: datetime,
    intervals: Iterable[Tuple[Category, IntervalRule]] = DEFAULT_INTERVALS,
) -> List[ServiceDue]:
    """
    Compute due-service alerts for every truck and tracked category.

    Returns only OVERDUE, SOON and UNKNOWN entries, stable-sorted by
    urgency (OVERDUE, then SOON, then UNKNOWN). Entries of equal urgency
    stay in truck order, then interval-table order.

    `now` is the reference instant for elapsed days. Pure: no I/O, and
    the same inputs always give the same list.
    """
    records = list(records)
    intervals = list(intervals)
    results: List[ServiceDue] = []
    for truck in trucks:
        results.extend(evaluate_truck(truck, records, now, intervals))
    results.sort(key=lambda s: s.status.value)
    logger.debug(
        "Evaluated %d records: %d alerts (%s)",
        len(records),
        len(results),
        ", ".join(f"{k}={v}" for k, v in sorted(status_counts(results).items())),
    )
    return results


def alert_counts(statuses: Iterable[ServiceDue]) -> Dict[Any, int]:
    """Number of OVERDUE or SOON entries per truck id."""
    counts: Dict[Any, int] = {}
    for svc in statuses:
        if svc.is_due:
            counts[svc.truck_id] = counts.get(svc.truck_id, 0) + 1
    return counts


def status_counts(statuses: Iterable[ServiceDue]) -> Dict[str, int]:
    """Number of entries per status label, e.g. {'overdue': 2, 'unknown': 5}."""
    return dict(Counter(svc.status.label for svc in statuses))
