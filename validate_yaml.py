#!/usr/bin/env python3
"""Validate fleet YAML files against the schema and check cross-references."""
import sys
from pathlib import Path

import yaml
from jsonschema import validate, ValidationError

from fleet.maintenance_record import parse_service_date


def load_schema() -> dict:
    """Load the JSON schema from schema.yaml."""
    schema_path = Path(__file__).parent / "schema.yaml"
    with open(schema_path) as f:
        return yaml.safe_load(f)


def _duplicates(values) -> list:
    seen, dupes = set(), []
    for value in values:
        if value in seen and value not in dupes:
            dupes.append(value)
        seen.add(value)
    return dupes


def check_references(data: dict) -> list[str]:
    """Checks the schema cannot express: unique ids, known trucks, real dates."""
    errors = []
    trucks = data.get("trucks") or []
    records = data.get("records") or []

    for truck_id in _duplicates(t["id"] for t in trucks):
        errors.append(f"Duplicate truck id: {truck_id}")
    for number in _duplicates(t["truckNumber"] for t in trucks):
        errors.append(f"Duplicate truck number: {number}")
    for record_id in _duplicates(r["id"] for r in records):
        errors.append(f"Duplicate record id: {record_id}")

    truck_ids = {t["id"] for t in trucks}
    for r in records:
        if r["truckId"] not in truck_ids:
            errors.append(f"Record {r['id']}: unknown truck {r['truckId']}")
        try:
            parse_service_date(r["date"])
        except ValueError:
            errors.append(f"Record {r['id']}: invalid date {r['date']!r}")
    return errors


def validate_fleet_file(filepath: Path, schema: dict) -> list[str]:
    """Validate a single fleet YAML file. Returns list of errors."""
    errors = []
    try:
        with open(filepath) as f:
            data = yaml.safe_load(f)
        validate(instance=data, schema=schema)
    except yaml.YAMLError as e:
        errors.append(f"YAML parse error: {e}")
    except ValidationError as e:
        errors.append(f"Schema validation error: {e.message}")
        if e.path:
            errors.append(f"  at path: {'.'.join(str(p) for p in e.path)}")
    except OSError as e:
        errors.append(f"Error: {e}")
    else:
        errors.extend(check_references(data))
    return errors


def find_fleet_files(root: Path) -> list[Path]:
    """YAML files in root, excluding the schema itself."""
    candidates = list(root.glob("*.yaml")) + list(root.glob("*.yml"))
    return sorted(p for p in candidates if p.name != "schema.yaml")


def main(argv=None):
    """Validate the given fleet files (default: every fleet file beside this script)."""
    schema = load_schema()
    args = sys.argv[1:] if argv is None else argv
    yaml_files = [Path(a) for a in args] or find_fleet_files(Path(__file__).parent)

    if not yaml_files:
        print("Warning: No fleet files found")
        return 0

    failed = 0
    for filepath in yaml_files:
        errors = validate_fleet_file(filepath, schema)
        if not errors:
            print(f"OK: {filepath.name}")
            continue
        failed += 1
        print(f"FAIL: {filepath.name}")
        for error in errors:
            print(f"  {error}")

    if failed:
        print(f"\n{failed} of {len(yaml_files)} files failed validation")
    return 1 if failed else 0


if __name__ == "__main__":
    sys.exit(main())
