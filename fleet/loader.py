"""YAML loading and saving utilities for fleet data."""

import logging
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

import yaml

from .category import Category
from .fleet import Fleet
from .interval import DEFAULT_INTERVALS, IntervalRule, IntervalTable, merge_intervals
from .maintenance_record import MaintenanceRecord
from .truck import Truck

logger = logging.getLogger(__name__)

PathLike = Union[str, Path]


class NotFoundError(KeyError):
    """No truck or record with the requested id."""

    def __str__(self) -> str:
        return self.args[0] if self.args else "Not found"


# =============================================================================
# Raw file access
# =============================================================================


def _read(filename: PathLike) -> Dict[str, Any]:
    with open(filename, "r") as fp:
        return yaml.load(fp, Loader=yaml.SafeLoader) or {}


def _write(filename: PathLike, data: Dict[str, Any]) -> None:
    with open(filename, "w") as fp:
        yaml.dump(
            data,
            fp,
            default_flow_style=False,
            allow_unicode=True,
            sort_keys=False,
            width=120,
        )


def _next_id(items: List[Dict[str, Any]]) -> int:
    ids = [d["id"] for d in items if isinstance(d.get("id"), int)]
    return max(ids) + 1 if ids else 1


def _find_index(items: List[Dict[str, Any]], item_id, kind: str) -> int:
    for i, d in enumerate(items):
        if d.get("id") == item_id:
            return i
    raise NotFoundError(f"{kind} {item_id} not found")


def check_mileage(value, field: str) -> Optional[int]:
    """Return a mileage reading unchanged, or raise ValueError unless it is a non-negative int."""
    if value is None:
        return None
    if isinstance(value, bool) or not isinstance(value, int) or value < 0:
        raise ValueError(f"Invalid {field}: {value!r}")
    return value


# =============================================================================
# Parsing
# =============================================================================


def _parse_truck(dct: Dict[str, Any]) -> Truck:
    return Truck(
        dct["id"],
        dct["truckNumber"],
        check_mileage(dct.get("currentMileage"), f"current mileage for truck {dct['id']}"),
        dct.get("make"),
        dct.get("model"),
        dct.get("year"),
        dct.get("vin"),
        dct.get("notes"),
    )


def _parse_record(dct: Dict[str, Any]) -> MaintenanceRecord:
    return MaintenanceRecord(
        dct["id"],
        dct["truckId"],
        dct["date"],
        dct["category"],
        check_mileage(dct.get("mileageAtService"), "mileage at service"),
        dct.get("description"),
        dct.get("cost"),
        dct.get("partsCost"),
        dct.get("laborCost"),
        dct.get("serviceProvider"),
        dct.get("notes"),
        dct.get("photos"),
    )


def parse_intervals(entries: Optional[List[Dict[str, Any]]]) -> IntervalTable:
    """
    Build the interval table from an 'intervals' config section.

    Each entry overrides (or adds) one category on top of the defaults.
    Raises ValueError for unknown categories or non-integer bounds.
    """
    if not entries:
        return list(DEFAULT_INTERVALS)
    overrides = []
    for entry in entries:
        try:
            category = Category(entry["category"])
        except (KeyError, ValueError):
            raise ValueError(f"Invalid interval category: {entry.get('category')!r}")
        bounds = {}
        for key in ("miles", "days"):
            value = entry.get(key)
            if value is not None and (not isinstance(value, int) or value < 0):
                raise ValueError(
                    f"Invalid {key} interval for {category.value}: {value!r}"
                )
            bounds[key] = value
        overrides.append((category, IntervalRule(**bounds)))
    return merge_intervals(overrides)


def load_fleet(filename: PathLike) -> Fleet:
    """
    Load a fleet from a YAML file.

    Records with an unparseable date or an unknown category are skipped
    (and logged) so that the evaluator only ever sees well-formed data.
    """
    data = _read(filename)
    trucks = [_parse_truck(d) for d in data.get("trucks") or []]

    records = []
    for dct in data.get("records") or []:
        try:
            records.append(_parse_record(dct))
        except (KeyError, ValueError, OverflowError) as e:
            logger.warning("Skipping malformed record %s in %s: %s", dct.get("id"), filename, e)

    fleet = Fleet(trucks, records, parse_intervals(data.get("intervals")))
    logger.debug(
        "Loaded %s: %d trucks, %d records", filename, len(fleet.trucks), len(fleet.records)
    )
    return fleet


# =============================================================================
# Serialization
# =============================================================================


def _truck_to_dict(truck: Truck) -> Dict[str, Any]:
    """Serialize a Truck to the YAML dict format (camelCase keys)."""
    check_mileage(truck.current_mileage, "current mileage")
    d: Dict[str, Any] = {
        "id": truck.id,
        "truckNumber": truck.truck_number,
        "currentMileage": truck.current_mileage,
    }
    if truck.make is not None:
        d["make"] = truck.make
    if truck.model is not None:
        d["model"] = truck.model
    if truck.year is not None:
        d["year"] = truck.year
    if truck.vin is not None:
        d["vin"] = truck.vin
    if truck.notes is not None:
        d["notes"] = truck.notes
    return d


def _record_to_dict(record: MaintenanceRecord) -> Dict[str, Any]:
    """Serialize a MaintenanceRecord, omitting None values for cleaner YAML."""
    check_mileage(record.mileage_at_service, "mileage at service")
    d: Dict[str, Any] = {
        "id": record.id,
        "truckId": record.truck_id,
        "date": record.date,
        "mileageAtService": record.mileage_at_service,
        "category": record.category.value,
        "cost": record.cost,
    }
    if record.description is not None:
        d["description"] = record.description
    if record.parts_cost:
        d["partsCost"] = record.parts_cost
    if record.labor_cost:
        d["laborCost"] = record.labor_cost
    if record.service_provider is not None:
        d["serviceProvider"] = record.service_provider
    if record.notes is not None:
        d["notes"] = record.notes
    if record.photos:
        d["photos"] = list(record.photos)
    return d


# =============================================================================
# Trucks
# =============================================================================


def create_fleet(filename: PathLike) -> None:
    """Create a new, empty fleet YAML file."""
    _write(filename, {"trucks": [], "records": []})


def add_truck(filename: PathLike, truck: Truck) -> int:
    """
    Append a truck to a fleet YAML file.

    Assigns the next free id when the truck has none. Returns the id.
    """
    data = _read(filename)
    if data.get("trucks") is None:
        data["trucks"] = []

    if truck.id is None:
        truck.id = _next_id(data["trucks"])
    elif any(d.get("id") == truck.id for d in data["trucks"]):
        raise ValueError(f"Truck {truck.id} already exists")

    data["trucks"].append(_truck_to_dict(truck))
    _write(filename, data)
    logger.info("Added truck %s (%s)", truck.id, truck.truck_number)
    return truck.id


def update_truck(filename: PathLike, truck_id, truck: Truck) -> None:
    """Replace the truck with the given id, keeping its id."""
    data = _read(filename)
    trucks = data.get("trucks") or []
    index = _find_index(trucks, truck_id, "Truck")
    truck.id = truck_id
    trucks[index] = _truck_to_dict(truck)
    _write(filename, data)


def delete_truck(filename: PathLike, truck_id) -> int:
    """
    Remove a truck and all of its maintenance records.

    Returns the number of records removed along with the truck.
    """
    data = _read(filename)
    trucks = data.get("trucks") or []
    del trucks[_find_index(trucks, truck_id, "Truck")]

    records = data.get("records") or []
    kept = [r for r in records if r.get("truckId") != truck_id]
    removed = len(records) - len(kept)
    data["records"] = kept

    _write(filename, data)
    logger.info("Deleted truck %s and %d records", truck_id, removed)
    return removed


def save_current_mileage(filename: PathLike, truck_id, miles: int) -> None:
    """Set a truck's current mileage."""
    check_mileage(miles, "mileage value")
    data = _read(filename)
    trucks = data.get("trucks") or []
    trucks[_find_index(trucks, truck_id, "Truck")]["currentMileage"] = miles
    _write(filename, data)


# =============================================================================
# Maintenance records
# =============================================================================


def save_record(filename: PathLike, record: MaintenanceRecord) -> int:
    """
    Append a maintenance record to a fleet YAML file.

    Assigns the next free id when the record has none, and raises the
    truck's current mileage when the record's mileage is higher.
    Returns the record id.
    """
    data = _read(filename)
    trucks = data.get("trucks") or []
    truck_dict = trucks[_find_index(trucks, record.truck_id, "Truck")]

    if data.get("records") is None:
        data["records"] = []
    if record.id is None:
        record.id = _next_id(data["records"])

    data["records"].append(_record_to_dict(record))

    truck = _parse_truck(truck_dict)
    if truck.raise_mileage(record.mileage_at_service):
        truck_dict["currentMileage"] = truck.current_mileage
        logger.info(
            "Raised truck %s mileage to %d", truck.id, truck.current_mileage
        )

    _write(filename, data)
    logger.info(
        "Logged %s for truck %s (record %s)",
        record.category.value,
        record.truck_id,
        record.id,
    )
    return record.id


def update_record(filename: PathLike, record_id, record: MaintenanceRecord) -> None:
    """Replace the record with the given id, keeping its id."""
    data = _read(filename)
    records = data.get("records") or []
    index = _find_index(records, record_id, "Record")
    record.id = record_id
    records[index] = _record_to_dict(record)
    _write(filename, data)


def delete_record(filename: PathLike, record_id) -> None:
    """Remove the record with the given id."""
    data = _read(filename)
    records = data.get("records") or []
    del records[_find_index(records, record_id, "Record")]
    _write(filename, data)
