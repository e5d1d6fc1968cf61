"""
Fleet maintenance tracking models.

This package provides data models and the due-service engine:
- Status: Urgency levels (OVERDUE, SOON, UNKNOWN, OK)
- Category: Closed set of maintenance categories
- IntervalRule: Recommended service intervals per category
- Truck: Fleet vehicle identification and mileage
- MaintenanceRecord: Logged service events
- ServiceDue: Evaluated service status
- Fleet: Main aggregate combining all data
"""

from .status import Status
from .category import Category, CATEGORY_LABELS
from .interval import IntervalRule, DEFAULT_INTERVALS, get_interval, merge_intervals
from .truck import Truck
from .maintenance_record import MaintenanceRecord, parse_service_date
from .service_due import ServiceDue
from .calculations import days_since, miles_since, check_status
from .evaluator import evaluate, alert_counts, status_counts
from .fleet import Fleet
from .loader import load_fleet, save_record

__all__ = [
    "Status",
    "Category",
    "CATEGORY_LABELS",
    "IntervalRule",
    "DEFAULT_INTERVALS",
    "get_interval",
    "merge_intervals",
    "Truck",
    "MaintenanceRecord",
    "parse_service_date",
    "ServiceDue",
    "days_since",
    "miles_since",
    "check_status",
    "evaluate",
    "alert_counts",
    "status_counts",
    "Fleet",
    "load_fleet",
    "save_record",
]
