"""CSV export of maintenance records."""

import csv
from typing import IO, Iterable, List

from .maintenance_record import MaintenanceRecord
from .truck import Truck

CSV_HEADERS = [
    "Date",
    "Truck Number",
    "Make",
    "Model",
    "Mileage",
    "Category",
    "Description",
    "Total Cost",
    "Parts Cost",
    "Labor Cost",
    "Service Provider",
    "Notes",
]


def make_export_rows(
    records: Iterable[MaintenanceRecord], trucks: Iterable[Truck]
) -> List[List[str]]:
    """Convert records to CSV rows, joining in truck details by id."""
    truck_map = {t.id: t for t in trucks}
    rows = []
    for record in records:
        truck = truck_map.get(record.truck_id)
        rows.append(
            [
                record.service_datetime.date().isoformat(),
                truck.truck_number if truck else "",
                (truck.make if truck else None) or "",
                (truck.model if truck else None) or "",
                record.mileage_at_service or "",
                record.category.value,
                record.description or "",
                record.cost,
                record.parts_cost,
                record.labor_cost,
                record.service_provider or "",
                record.notes or "",
            ]
        )
    return rows


def export_csv(
    records: Iterable[MaintenanceRecord], trucks: Iterable[Truck], fp: IO[str]
) -> int:
    """Write records as CSV (every cell quoted) to an open text file. Returns row count."""
    rows = make_export_rows(records, trucks)
    writer = csv.writer(fp, quoting=csv.QUOTE_ALL, lineterminator="\n")
    writer.writerow(CSV_HEADERS)
    writer.writerows(rows)
    return len(rows)
