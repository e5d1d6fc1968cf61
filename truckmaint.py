#!/usr/bin/env python3
"""
Unified CLI for fleet maintenance tracking.

Commands:
  status         - Show which services are overdue, due soon, or never logged
  trucks         - List trucks with their alert counts
  history        - View maintenance records
  log            - Add a new maintenance record
  add-truck      - Add a truck to the fleet
  update-miles   - Update a truck's current mileage
  delete-record  - Remove a maintenance record
  delete-truck   - Remove a truck and its records
  costs          - Cost analytics by category, truck and month
  export         - Export maintenance records to CSV
  intervals      - List the service interval table
"""

import argparse
import logging
import sys
from datetime import date, datetime
from pathlib import Path
from typing import List, Optional

from tabulate import tabulate

from fleet import (
    Category,
    Fleet,
    MaintenanceRecord,
    ServiceDue,
    Status,
    Truck,
    alert_counts,
    load_fleet,
    parse_service_date,
)
from fleet.export import export_csv
from fleet.fleet import PERIODS
from fleet.formatting import (
    format_category,
    format_cost,
    format_date,
    format_miles,
    truncate,
)
from fleet.loader import (
    NotFoundError,
    add_truck,
    create_fleet,
    delete_record,
    delete_truck,
    save_current_mileage,
    save_record,
)
from fleet.logging_config import setup_logging

logger = logging.getLogger("truckmaint")

# =============================================================================
# Helpers
# =============================================================================


def find_truck(fleet: Fleet, ref: str) -> Optional[Truck]:
    """Find a truck by id or, failing that, by truck number (case-insensitive)."""
    try:
        truck = fleet.get_truck(int(ref))
        if truck is not None:
            return truck
    except ValueError:
        pass
    for truck in fleet.trucks:
        if truck.truck_number.lower() == ref.lower():
            return truck
    return None


def parse_as_of(value: Optional[str]) -> datetime:
    """Reference instant for evaluation: the given date, or now."""
    if value is None:
        return datetime.now()
    return parse_service_date(value)


# =============================================================================
# Status command
# =============================================================================


def make_status_table(services: List[ServiceDue]) -> List[List[str]]:
    """Convert service status list to table rows."""
    rows = []
    for svc in services:
        last_done = "-"
        if svc.last_service_date:
            last_done = f"{svc.last_service_date} @ {format_miles(svc.last_service_mileage)}"
        rows.append(
            [
                svc.truck_number,
                format_category(svc.category),
                last_done,
                svc.due_in or "-",
            ]
        )
    return rows


def cmd_status(args):
    """Show which services are overdue, due soon, or never logged."""
    fleet = load_fleet(args.fleet_file)
    now = parse_as_of(args.as_of)

    trucks = fleet.trucks
    if args.truck:
        truck = find_truck(fleet, args.truck)
        if truck is None:
            print(f"Error: Unknown truck '{args.truck}'")
            return 1
        trucks = [truck]

    print(f"Fleet: {len(trucks)} trucks, {len(fleet.records)} records")
    print(f"As of: {now.date().isoformat()}")
    print()

    statuses = Fleet(trucks, fleet.records, fleet.intervals).get_due_services(now)

    overdue = [s for s in statuses if s.status == Status.OVERDUE]
    due_soon = [s for s in statuses if s.status == Status.SOON]
    unknown = [s for s in statuses if s.status == Status.UNKNOWN]

    headers = ["Truck", "Category", "Last Done", "Due"]

    if overdue:
        print("OVERDUE:")
        print(tabulate(make_status_table(overdue), headers=headers, tablefmt="simple"))
        print()

    if due_soon:
        print("DUE SOON:")
        print(tabulate(make_status_table(due_soon), headers=headers, tablefmt="simple"))
        print()

    if unknown:
        print("UNKNOWN (no service history):")
        for svc in unknown:
            print(f"  {svc.truck_number}: {format_category(svc.category)}")
        print()

    if not statuses:
        print("All services up to date.")

    return 0


# =============================================================================
# Trucks command
# =============================================================================


def make_trucks_table(fleet: Fleet, counts) -> List[List[str]]:
    """Convert trucks to table rows with alert counts."""
    rows = []
    for truck in sorted(fleet.trucks, key=lambda t: t.truck_number):
        records = fleet.get_records_for_truck(truck.id)
        rows.append(
            [
                str(truck.id),
                truck.truck_number,
                " ".join(str(p) for p in (truck.year, truck.make, truck.model) if p) or "-",
                format_miles(truck.current_mileage),
                str(len(records)),
                format_cost(fleet.total_cost(records)),
                str(counts.get(truck.id, 0)),
            ]
        )
    return rows


def cmd_trucks(args):
    """List trucks with their alert counts."""
    fleet = load_fleet(args.fleet_file)
    if not fleet.trucks:
        print("No trucks found.")
        return 0

    counts = alert_counts(fleet.get_due_services(datetime.now()))
    headers = ["ID", "Truck", "Vehicle", "Mileage", "Records", "Total Cost", "Alerts"]
    print(tabulate(make_trucks_table(fleet, counts), headers=headers, tablefmt="simple"))
    return 0


# =============================================================================
# History command
# =============================================================================


def make_history_table(records: List[MaintenanceRecord], fleet: Fleet) -> List[List[str]]:
    """Convert maintenance records to table rows."""
    rows = []
    for record in records:
        truck = fleet.get_truck(record.truck_id)
        rows.append(
            [
                str(record.id),
                record.date,
                truck.truck_number if truck else str(record.truck_id),
                format_miles(record.mileage_at_service),
                format_category(record.category),
                record.service_provider or "-",
                format_cost(record.cost),
                truncate(record.description),
            ]
        )
    return rows


def cmd_history(args):
    """View maintenance records."""
    fleet = load_fleet(args.fleet_file)

    truck_id = None
    if args.truck:
        truck = find_truck(fleet, args.truck)
        if truck is None:
            print(f"Error: Unknown truck '{args.truck}'")
            return 1
        truck_id = truck.id

    records = fleet.get_history_sorted(
        sort_by=args.sort, reverse=not args.asc, truck_id=truck_id
    )

    # Apply filters
    if args.category:
        records = [r for r in records if r.category.value == args.category]

    if args.since:
        since = parse_service_date(args.since)
        records = [r for r in records if r.service_datetime >= since]

    print(f"Total records: {len(fleet.records)}")
    if args.truck or args.category or args.since:
        print(f"Showing: {len(records)} (filtered)")
    total_cost = fleet.total_cost(records)
    if total_cost > 0:
        print(f"Total cost: {format_cost(total_cost)}")
    print()

    if not records:
        print("No maintenance records found.")
        return 0

    headers = ["ID", "Date", "Truck", "Mileage", "Category", "Provider", "Cost", "Description"]
    print(tabulate(make_history_table(records, fleet), headers=headers, tablefmt="simple"))
    return 0


# =============================================================================
# Log command
# =============================================================================


def cmd_log(args):
    """Add a new maintenance record."""
    fleet = load_fleet(args.fleet_file)

    truck = find_truck(fleet, args.truck)
    if truck is None:
        print(f"Error: Unknown truck '{args.truck}'")
        return 1

    record = MaintenanceRecord(
        id=None,
        truck_id=truck.id,
        date=args.date or date.today().isoformat(),
        category=args.category,
        mileage_at_service=args.mileage,
        description=args.description,
        cost=args.cost,
        parts_cost=args.parts_cost,
        labor_cost=args.labor_cost,
        service_provider=args.provider,
        notes=args.notes,
    )

    # Show what will be added
    print(f"Adding maintenance record to {args.fleet_file}:")
    print(f"  Truck:    {truck.name}")
    print(f"  Category: {format_category(record.category)}")
    print(f"  Date:     {format_date(record.date)}")
    if record.mileage_at_service:
        print(f"  Mileage:  {format_miles(record.mileage_at_service)}")
    if record.description:
        print(f"  Work:     {record.description}")
    if record.service_provider:
        print(f"  Provider: {record.service_provider}")
    if record.cost:
        print(f"  Cost:     {format_cost(record.cost)}")
    if record.mileage_at_service > truck.current_mileage:
        print(f"  (raises truck mileage from {format_miles(truck.current_mileage)})")
    print()

    if args.dry_run:
        print("(dry run - no changes made)")
        return 0

    record_id = save_record(args.fleet_file, record)
    print(f"Record {record_id} saved.")
    return 0


# =============================================================================
# Truck management commands
# =============================================================================


def cmd_add_truck(args):
    """Add a truck to the fleet (creating the fleet file if needed)."""
    if not args.fleet_file.exists():
        create_fleet(args.fleet_file)
        print(f"Created {args.fleet_file}")

    fleet = load_fleet(args.fleet_file)
    if find_truck(fleet, args.truck_number) is not None:
        print(f"Error: Truck '{args.truck_number}' already exists")
        return 1

    truck = Truck(
        id=None,
        truck_number=args.truck_number,
        current_mileage=args.mileage,
        make=args.make,
        model=args.model,
        year=args.year,
        vin=args.vin,
        notes=args.notes,
    )
    truck_id = add_truck(args.fleet_file, truck)
    print(f"Added truck {truck.truck_number} (id {truck_id}).")
    return 0


def cmd_update_miles(args):
    """Update a truck's current mileage."""
    fleet = load_fleet(args.fleet_file)
    truck = find_truck(fleet, args.truck)
    if truck is None:
        print(f"Error: Unknown truck '{args.truck}'")
        return 1

    print(f"Truck: {truck.name}")
    print(f"Current mileage: {format_miles(truck.current_mileage)}")
    print(f"New mileage:     {format_miles(args.mileage)}")
    if args.mileage < truck.current_mileage:
        print("Warning: new mileage is lower than the current reading")
    print()

    if args.dry_run:
        print("(dry run - no changes made)")
        return 0

    save_current_mileage(args.fleet_file, truck.id, args.mileage)
    print("Mileage updated.")
    return 0


def cmd_delete_record(args):
    """Remove a maintenance record."""
    delete_record(args.fleet_file, args.record_id)
    print(f"Record {args.record_id} deleted.")
    return 0


def cmd_delete_truck(args):
    """Remove a truck and all of its records."""
    fleet = load_fleet(args.fleet_file)
    truck = find_truck(fleet, args.truck)
    if truck is None:
        print(f"Error: Unknown truck '{args.truck}'")
        return 1

    removed = delete_truck(args.fleet_file, truck.id)
    print(f"Truck {truck.truck_number} deleted ({removed} records removed).")
    return 0


# =============================================================================
# Costs command
# =============================================================================


def cmd_costs(args):
    """Cost analytics by category, truck and month."""
    fleet = load_fleet(args.fleet_file)
    records = fleet.records_since(args.period, datetime.now())

    print(f"Period: {args.period}")
    print(f"Total cost:      {format_cost(fleet.total_cost(records))}")
    print(f"Average/service: {format_cost(fleet.average_cost(records))}")
    print(f"Services:        {len(records)}")
    print(f"Trucks serviced: {fleet.trucks_serviced(records)}")
    print()

    if not records:
        print("No maintenance records in this period.")
        return 0

    by_category = [
        [format_category(cat), format_cost(cost)]
        for cat, cost in fleet.cost_by_category(records)
    ]
    if by_category:
        print("BY CATEGORY:")
        print(tabulate(by_category, headers=["Category", "Cost"], tablefmt="simple"))
        print()

    by_truck = [[t.truck_number, format_cost(cost)] for t, cost in fleet.cost_by_truck(records)]
    if by_truck:
        print("BY TRUCK:")
        print(tabulate(by_truck, headers=["Truck", "Cost"], tablefmt="simple"))
        print()

    by_month = [[month, format_cost(cost)] for month, cost in fleet.cost_over_time(records)]
    if len(by_month) > 1:
        print("BY MONTH:")
        print(tabulate(by_month, headers=["Month", "Cost"], tablefmt="simple"))
        print()

    return 0


# =============================================================================
# Export command
# =============================================================================


def cmd_export(args):
    """Export maintenance records to CSV."""
    fleet = load_fleet(args.fleet_file)
    records = fleet.get_history_sorted(sort_by="date", reverse=True)
    with open(args.output, "w", newline="") as fp:
        count = export_csv(records, fleet.trucks, fp)
    print(f"Exported {count} records to {args.output}")
    return 0


# =============================================================================
# Intervals command
# =============================================================================


def cmd_intervals(args):
    """List the service interval table."""
    fleet = load_fleet(args.fleet_file)

    rows = []
    for category, rule in fleet.intervals:
        rows.append(
            [
                format_category(category),
                f"{rule.miles:,} mi" if rule.miles else "-",
                f"{rule.days} days" if rule.days else "-",
            ]
        )

    print(tabulate(rows, headers=["Category", "Miles", "Time"], tablefmt="simple"))
    return 0


# =============================================================================
# Main
# =============================================================================


def build_parser() -> argparse.ArgumentParser:
    category_choices = [c.value for c in Category]

    parser = argparse.ArgumentParser(
        description="Fleet maintenance tracker",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  %(prog)s fleet.yaml status
  %(prog)s fleet.yaml status --truck T-101 --as-of 2025-06-01
  %(prog)s fleet.yaml add-truck T-101 --make Freightliner --mileage 42000
  %(prog)s fleet.yaml log T-101 oil_change --mileage 49000 --cost 120
  %(prog)s fleet.yaml history --category brakes --since 2024-01-01
  %(prog)s fleet.yaml costs --period quarter
  %(prog)s fleet.yaml export maintenance-export.csv
""",
    )
    parser.add_argument("fleet_file", type=Path, help="Path to fleet YAML file")
    parser.add_argument(
        "-v", "--verbose", action="store_true", help="Enable debug logging"
    )

    subparsers = parser.add_subparsers(dest="command", required=True)

    # Status subcommand
    status_parser = subparsers.add_parser(
        "status", help="Show which services are overdue, due soon, or never logged"
    )
    status_parser.add_argument("--truck", type=str, help="Truck id or number")
    status_parser.add_argument(
        "--as-of", type=str, help="Evaluate as of date (YYYY-MM-DD, default: now)"
    )

    # Trucks subcommand
    subparsers.add_parser("trucks", help="List trucks with their alert counts")

    # History subcommand
    history_parser = subparsers.add_parser("history", help="View maintenance records")
    history_parser.add_argument("--truck", type=str, help="Truck id or number")
    history_parser.add_argument("--category", choices=category_choices)
    history_parser.add_argument(
        "--since", type=str, help="Show only records since date (YYYY-MM-DD)"
    )
    history_parser.add_argument(
        "--sort",
        choices=["date", "mileage", "category"],
        default="date",
        help="Sort order (default: date)",
    )
    history_parser.add_argument(
        "--asc", action="store_true", help="Sort ascending instead of descending"
    )

    # Log subcommand
    log_parser = subparsers.add_parser("log", help="Add a new maintenance record")
    log_parser.add_argument("truck", type=str, help="Truck id or number")
    log_parser.add_argument("category", choices=category_choices)
    log_parser.add_argument("--date", type=str, help="Service date (default: today)")
    log_parser.add_argument("--mileage", type=int, help="Odometer at time of service")
    log_parser.add_argument("--description", type=str)
    log_parser.add_argument("--cost", type=float, help="Total cost")
    log_parser.add_argument("--parts-cost", type=float)
    log_parser.add_argument("--labor-cost", type=float)
    log_parser.add_argument("--provider", type=str, help="Service provider")
    log_parser.add_argument("--notes", type=str)
    log_parser.add_argument(
        "--dry-run", action="store_true", help="Show what would be added without saving"
    )

    # Add-truck subcommand
    add_truck_parser = subparsers.add_parser("add-truck", help="Add a truck to the fleet")
    add_truck_parser.add_argument("truck_number", type=str)
    add_truck_parser.add_argument("--make", type=str)
    add_truck_parser.add_argument("--model", type=str)
    add_truck_parser.add_argument("--year", type=int)
    add_truck_parser.add_argument("--vin", type=str)
    add_truck_parser.add_argument("--mileage", type=int, default=0)
    add_truck_parser.add_argument("--notes", type=str)

    # Update-miles subcommand
    update_miles_parser = subparsers.add_parser(
        "update-miles", help="Update a truck's current mileage"
    )
    update_miles_parser.add_argument("truck", type=str, help="Truck id or number")
    update_miles_parser.add_argument("mileage", type=int, help="Current mileage")
    update_miles_parser.add_argument(
        "--dry-run", action="store_true", help="Show what would be updated without saving"
    )

    # Delete subcommands
    delete_record_parser = subparsers.add_parser(
        "delete-record", help="Remove a maintenance record"
    )
    delete_record_parser.add_argument("record_id", type=int)

    delete_truck_parser = subparsers.add_parser(
        "delete-truck", help="Remove a truck and its records"
    )
    delete_truck_parser.add_argument("truck", type=str, help="Truck id or number")

    # Costs subcommand
    costs_parser = subparsers.add_parser("costs", help="Cost analytics")
    costs_parser.add_argument(
        "--period", choices=PERIODS, default="all", help="Reporting period (default: all)"
    )

    # Export subcommand
    export_parser = subparsers.add_parser("export", help="Export records to CSV")
    export_parser.add_argument("output", type=Path, help="Output CSV path")

    # Intervals subcommand
    subparsers.add_parser("intervals", help="List the service interval table")

    return parser


COMMANDS = {
    "status": cmd_status,
    "trucks": cmd_trucks,
    "history": cmd_history,
    "log": cmd_log,
    "add-truck": cmd_add_truck,
    "update-miles": cmd_update_miles,
    "delete-record": cmd_delete_record,
    "delete-truck": cmd_delete_truck,
    "costs": cmd_costs,
    "export": cmd_export,
    "intervals": cmd_intervals,
}


def main(argv=None):
    args = build_parser().parse_args(argv)
    setup_logging("DEBUG" if args.verbose else None)

    # add-truck may create the file; everything else needs it
    if args.command != "add-truck" and not args.fleet_file.exists():
        print(f"Error: File not found: {args.fleet_file}")
        return 1

    try:
        return COMMANDS[args.command](args)
    except (NotFoundError, ValueError) as e:
        logger.debug("Command %s failed", args.command, exc_info=True)
        print(f"Error: {e}")
        return 1


if __name__ == "__main__":
    sys.exit(main() or 0)
