"""ServiceDue dataclass for evaluated service status."""

from dataclasses import dataclass
from typing import Any, Dict, Optional

from .category import Category
from .status import Status


@dataclass(frozen=True)
class ServiceDue:
    """Due-service status for one truck and category."""

    truck_id: Any
    truck_number: str
    category: Category
    status: Status
    due_in: Optional[str] = None
    last_service_date: Optional[str] = None
    last_service_mileage: Optional[int] = None

    @property
    def is_due(self) -> bool:
        return self.status in (Status.OVERDUE, Status.SOON)

    def to_dict(self) -> Dict[str, Any]:
        """Plain dict for JSON output (camelCase keys)."""
        d: Dict[str, Any] = {
            "truckId": self.truck_id,
            "truckNumber": self.truck_number,
            "category": self.category.value,
            "status": self.status.label,
            "dueIn": self.due_in,
        }
        if self.last_service_date is not None:
            d["lastServiceDate"] = self.last_service_date
            d["lastServiceMileage"] = self.last_service_mileage
        return d
