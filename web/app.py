"""Flask web application for fleet maintenance tracking."""

import io
import logging
import os
from datetime import date, datetime
from pathlib import Path

from flask import Flask, Response, jsonify, request

# Add parent directory to path for package imports
import sys
sys.path.insert(0, str(Path(__file__).parent.parent))

from fleet.category import CATEGORY_LABELS
from fleet.evaluator import alert_counts, status_counts
from fleet.export import export_csv
from fleet.fleet import PERIODS
from fleet.loader import (
    NotFoundError,
    add_truck,
    delete_record,
    delete_truck,
    load_fleet,
    save_current_mileage,
    save_record,
    update_record,
    update_truck,
)
from fleet.logging_config import setup_logging
from fleet.maintenance_record import MaintenanceRecord, parse_service_date
from fleet.truck import Truck

logger = logging.getLogger(__name__)

app = Flask(__name__)
app.secret_key = os.environ.get("SECRET_KEY", "dev-secret-key-change-in-prod")

# Path to the fleet file (relative to project root unless overridden)
app.config["FLEET_FILE"] = Path(
    os.environ.get("FLEET_FILE", Path(__file__).parent.parent / "fleet.yaml")
)


def get_fleet_path() -> Path:
    return Path(app.config["FLEET_FILE"])


def error(message: str, code: int):
    return jsonify({"error": message}), code


def truck_to_json(truck, alerts: int = 0) -> dict:
    return {
        "id": truck.id,
        "truckNumber": truck.truck_number,
        "make": truck.make,
        "model": truck.model,
        "year": truck.year,
        "vin": truck.vin,
        "currentMileage": truck.current_mileage,
        "notes": truck.notes,
        "alertCount": alerts,
    }


def record_to_json(record) -> dict:
    return {
        "id": record.id,
        "truckId": record.truck_id,
        "date": record.date,
        "mileageAtService": record.mileage_at_service,
        "category": record.category.value,
        "description": record.description,
        "cost": record.cost,
        "partsCost": record.parts_cost,
        "laborCost": record.labor_cost,
        "serviceProvider": record.service_provider,
        "notes": record.notes,
        "photos": record.photos,
    }


def truck_from_json(data: dict) -> Truck:
    """Build a Truck from a JSON body. Raises ValueError for bad input."""
    if not data.get("truckNumber"):
        raise ValueError("Please enter a truck number")
    try:
        mileage = int(data.get("currentMileage") or 0)
        year = int(data["year"]) if data.get("year") not in (None, "") else None
    except (TypeError, ValueError):
        raise ValueError("Invalid mileage or year value")
    return Truck(
        id=None,
        truck_number=data["truckNumber"],
        current_mileage=mileage,
        make=data.get("make") or None,
        model=data.get("model") or None,
        year=year,
        vin=data.get("vin") or None,
        notes=data.get("notes") or None,
    )


def record_from_json(data: dict, truck_id) -> MaintenanceRecord:
    """Build a MaintenanceRecord from a JSON body. Raises ValueError for bad input."""
    if not data.get("category"):
        raise ValueError("Please select a category")

    mileage = data.get("mileageAtService")
    try:
        return MaintenanceRecord(
            id=None,
            truck_id=truck_id,
            date=data.get("date") or date.today().isoformat(),
            category=data["category"],
            mileage_at_service=int(mileage) if mileage not in (None, "") else None,
            description=data.get("description"),
            cost=float(data.get("cost") or 0),
            parts_cost=float(data.get("partsCost") or 0),
            labor_cost=float(data.get("laborCost") or 0),
            service_provider=data.get("serviceProvider"),
            notes=data.get("notes"),
            photos=data.get("photos"),
        )
    except TypeError:
        raise ValueError("Invalid record values")


def parse_as_of() -> datetime:
    """Reference instant from ?as_of=YYYY-MM-DD, defaulting to now."""
    as_of = request.args.get("as_of")
    return parse_service_date(as_of) if as_of else datetime.now()


@app.errorhandler(NotFoundError)
def handle_not_found(e):
    return error(str(e), 404)


@app.errorhandler(ValueError)
def handle_bad_request(e):
    return error(str(e), 400)


@app.route("/api/trucks")
def list_trucks():
    """All trucks, sorted by truck number, with alert counts."""
    fleet = load_fleet(get_fleet_path())
    counts = alert_counts(fleet.get_due_services(parse_as_of()))
    trucks = sorted(fleet.trucks, key=lambda t: t.truck_number)
    return jsonify([truck_to_json(t, counts.get(t.id, 0)) for t in trucks])


@app.route("/api/trucks/<int:truck_id>")
def truck_detail(truck_id: int):
    """One truck with its records (newest first) and due services."""
    fleet = load_fleet(get_fleet_path())
    truck = fleet.get_truck(truck_id)
    if truck is None:
        return error(f"Truck {truck_id} not found", 404)

    records = fleet.get_history_sorted(sort_by="date", reverse=True, truck_id=truck_id)
    due = [s for s in fleet.get_due_services(parse_as_of()) if s.truck_id == truck_id]
    return jsonify(
        {
            "truck": truck_to_json(truck, alert_counts(due).get(truck_id, 0)),
            "records": [record_to_json(r) for r in records],
            "totalCost": fleet.total_cost(records),
            "dueServices": [s.to_dict() for s in due],
        }
    )


@app.route("/api/due-services")
def due_services():
    """Fleet-wide due-service alerts, most urgent first."""
    fleet = load_fleet(get_fleet_path())
    statuses = fleet.get_due_services(parse_as_of())
    return jsonify(
        {
            "counts": status_counts(statuses),
            "services": [s.to_dict() for s in statuses],
        }
    )


@app.route("/api/analytics")
def analytics():
    """Cost analytics for ?period=all|year|quarter|month."""
    period = request.args.get("period", "all")
    if period not in PERIODS:
        return error(f"Unknown period '{period}'", 400)

    fleet = load_fleet(get_fleet_path())
    records = fleet.records_since(period, datetime.now())
    return jsonify(
        {
            "period": period,
            "totalCost": fleet.total_cost(records),
            "avgCost": fleet.average_cost(records),
            "totalServices": len(records),
            "trucksServiced": fleet.trucks_serviced(records),
            "costByCategory": [
                {"category": cat.value, "label": cat.label, "value": cost}
                for cat, cost in fleet.cost_by_category(records)
            ],
            "costByTruck": [
                {"truckId": t.id, "truckNumber": t.truck_number, "cost": cost}
                for t, cost in fleet.cost_by_truck(records)
            ],
            "costOverTime": [
                {"month": month, "cost": cost}
                for month, cost in fleet.cost_over_time(records)
            ],
        }
    )


@app.route("/api/export.csv")
def export():
    """Download all records as CSV."""
    fleet = load_fleet(get_fleet_path())
    buf = io.StringIO()
    export_csv(fleet.get_history_sorted(), fleet.trucks, buf)
    return Response(
        buf.getvalue(),
        mimetype="text/csv",
        headers={"Content-Disposition": "attachment; filename=maintenance-export.csv"},
    )


@app.route("/api/trucks/<int:truck_id>/records", methods=["POST"])
def log_record(truck_id: int):
    """Log a maintenance record from a JSON body."""
    record = record_from_json(request.get_json(silent=True) or {}, truck_id)
    record_id = save_record(get_fleet_path(), record)
    logger.info("Logged record %s via API", record_id)
    return jsonify(record_to_json(record)), 201


@app.route("/api/records")
def list_records():
    """
    Maintenance history, filtered and sorted by query parameters.

    ?truck=ID, ?category=ID, ?start=DATE&end=DATE (inclusive),
    ?sort=date|mileage|category, ?order=asc|desc (default desc).
    """
    fleet = load_fleet(get_fleet_path())
    sort_by = request.args.get("sort", "date")
    if sort_by not in ("date", "mileage", "category"):
        return error(f"Unknown sort '{sort_by}'", 400)

    truck_id = request.args.get("truck", type=int)
    records = fleet.get_history_sorted(
        sort_by=sort_by,
        reverse=request.args.get("order", "desc") != "asc",
        truck_id=truck_id,
    )

    category = request.args.get("category")
    if category:
        keep = {id(r) for r in fleet.get_records_by_category(category)}
        records = [r for r in records if id(r) in keep]

    start, end = request.args.get("start"), request.args.get("end")
    if start or end:
        keep = {
            id(r)
            for r in fleet.get_records_by_date_range(start or datetime.min, end or datetime.max)
        }
        records = [r for r in records if id(r) in keep]

    return jsonify(
        {
            "records": [record_to_json(r) for r in records],
            "totalCost": fleet.total_cost(records),
        }
    )


@app.route("/api/records/<int:record_id>", methods=["PUT"])
def edit_record(record_id: int):
    """Replace a record from a JSON body (truckId keeps its current value if omitted)."""
    fleet = load_fleet(get_fleet_path())
    existing = fleet.get_record(record_id)
    if existing is None:
        return error(f"Record {record_id} not found", 404)

    data = request.get_json(silent=True) or {}
    record = record_from_json(data, data.get("truckId", existing.truck_id))
    if fleet.get_truck(record.truck_id) is None:
        return error(f"Truck {record.truck_id} not found", 404)
    update_record(get_fleet_path(), record_id, record)
    return jsonify(record_to_json(record))


@app.route("/api/records/<int:record_id>", methods=["DELETE"])
def remove_record(record_id: int):
    delete_record(get_fleet_path(), record_id)
    return "", 204


@app.route("/api/trucks", methods=["POST"])
def create_truck():
    """Add a truck from a JSON body."""
    truck = truck_from_json(request.get_json(silent=True) or {})
    fleet = load_fleet(get_fleet_path())
    if any(t.truck_number == truck.truck_number for t in fleet.trucks):
        return error(f"Truck '{truck.truck_number}' already exists", 400)
    add_truck(get_fleet_path(), truck)
    return jsonify(truck_to_json(truck)), 201


@app.route("/api/trucks/<int:truck_id>", methods=["PUT"])
def edit_truck(truck_id: int):
    """Replace a truck's details from a JSON body."""
    truck = truck_from_json(request.get_json(silent=True) or {})
    update_truck(get_fleet_path(), truck_id, truck)
    return jsonify(truck_to_json(truck))


@app.route("/api/trucks/<int:truck_id>", methods=["DELETE"])
def remove_truck(truck_id: int):
    """Delete a truck along with its maintenance records."""
    removed = delete_truck(get_fleet_path(), truck_id)
    return jsonify({"id": truck_id, "recordsRemoved": removed})


@app.route("/api/categories")
def categories():
    return jsonify([{"value": c.value, "label": label} for c, label in CATEGORY_LABELS.items()])


@app.route("/api/trucks/<int:truck_id>/mileage", methods=["POST"])
def update_mileage(truck_id: int):
    """Set a truck's current mileage from {"mileage": N}."""
    data = request.get_json(silent=True) or {}
    mileage = data.get("mileage")
    if mileage in (None, ""):
        return error("Please enter mileage", 400)
    try:
        miles = int(mileage)
    except (TypeError, ValueError):
        return error("Invalid mileage value", 400)
    if miles < 0:
        return error("Invalid mileage value", 400)

    save_current_mileage(get_fleet_path(), truck_id, miles)
    return jsonify({"id": truck_id, "currentMileage": miles})


if __name__ == "__main__":
    setup_logging()
    # Using 5001 to avoid conflict with macOS AirPlay Receiver on 5000
    app.run(debug=True, host="0.0.0.0", port=5001)
