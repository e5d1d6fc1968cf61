#!/usr/bin/env python3
"""Tests for the Flask JSON API."""

import pytest
import yaml

from fleet.loader import NotFoundError
from web.app import app

FLEET_YAML = """
trucks:
  - {id: 1, truckNumber: T-101, make: Freightliner, model: Cascadia, year: 2019, currentMileage: 55000}
  - {id: 2, truckNumber: T-102, currentMileage: 40000}
records:
  - {id: 1, truckId: 1, date: '2025-01-10', mileageAtService: 49000, category: oil_change, cost: 185.5}
  - {id: 2, truckId: 2, date: '2025-03-02', mileageAtService: 0, category: tires, cost: 1240.0}
"""


@pytest.fixture
def fleet_file(tmp_path):
    path = tmp_path / "fleet.yaml"
    path.write_text(FLEET_YAML)
    return path


@pytest.fixture
def client(fleet_file):
    app.config["TESTING"] = True
    app.config["FLEET_FILE"] = fleet_file
    with app.test_client() as client:
        yield client


def read_yaml(path):
    with open(path) as f:
        return yaml.safe_load(f)


class TestTrucks:
    """Tests for the truck endpoints."""

    def test_list_trucks_with_alert_counts(self, client):
        resp = client.get("/api/trucks?as_of=2025-03-12")

        assert resp.status_code == 200
        data = resp.get_json()
        assert [t["truckNumber"] for t in data] == ["T-101", "T-102"]
        assert data[0]["alertCount"] == 1
        assert data[1]["alertCount"] == 0

    def test_truck_detail(self, client):
        resp = client.get("/api/trucks/1?as_of=2025-03-12")

        assert resp.status_code == 200
        data = resp.get_json()
        assert data["truck"]["truckNumber"] == "T-101"
        assert [r["id"] for r in data["records"]] == [1]
        assert data["totalCost"] == 185.5
        assert data["dueServices"][0]["status"] == "overdue"
        assert data["dueServices"][0]["dueIn"] == "1000 miles overdue"

    def test_unknown_truck(self, client):
        resp = client.get("/api/trucks/99")

        assert resp.status_code == 404
        assert resp.get_json() == {"error": "Truck 99 not found"}


class TestDueServices:
    """Tests for /api/due-services."""

    def test_counts_and_order(self, client):
        resp = client.get("/api/due-services?as_of=2025-03-12")

        data = resp.get_json()
        assert data["counts"] == {"overdue": 1, "unknown": 10}
        assert data["services"][0] == {
            "truckId": 1,
            "truckNumber": "T-101",
            "category": "oil_change",
            "status": "overdue",
            "dueIn": "1000 miles overdue",
            "lastServiceDate": "2025-01-10",
            "lastServiceMileage": 49000,
        }
        assert all(s["status"] == "unknown" for s in data["services"][1:])

    def test_bad_as_of(self, client):
        resp = client.get("/api/due-services?as_of=someday")
        assert resp.status_code == 400


class TestAnalytics:
    """Tests for /api/analytics."""

    def test_all_time(self, client):
        data = client.get("/api/analytics").get_json()

        assert data["period"] == "all"
        assert data["totalCost"] == 1425.5
        assert data["totalServices"] == 2
        assert data["trucksServiced"] == 2
        assert [c["category"] for c in data["costByCategory"]] == ["oil_change", "tires"]
        assert data["costByTruck"][0]["truckNumber"] == "T-102"
        assert [m["month"] for m in data["costOverTime"]] == ["2025-01", "2025-03"]

    def test_unknown_period(self, client):
        resp = client.get("/api/analytics?period=decade")

        assert resp.status_code == 400
        assert "Unknown period" in resp.get_json()["error"]


class TestExport:
    """Tests for /api/export.csv."""

    def test_csv_download(self, client):
        resp = client.get("/api/export.csv")

        assert resp.status_code == 200
        assert resp.mimetype == "text/csv"
        assert "attachment" in resp.headers["Content-Disposition"]
        lines = resp.get_data(as_text=True).splitlines()
        assert len(lines) == 3
        assert lines[1].startswith('"2025-03-02","T-102"')


class TestLogRecord:
    """Tests for POST /api/trucks/<id>/records."""

    def test_creates_record(self, client, fleet_file):
        resp = client.post(
            "/api/trucks/2/records",
            json={"date": "2025-04-01", "category": "brakes", "mileageAtService": 41000, "cost": "300"},
        )

        assert resp.status_code == 201
        data = resp.get_json()
        assert data["id"] == 3
        assert data["category"] == "brakes"
        assert data["cost"] == 300.0
        saved = read_yaml(fleet_file)
        assert saved["records"][2]["truckId"] == 2
        assert saved["trucks"][1]["currentMileage"] == 41000

    def test_missing_category(self, client):
        resp = client.post("/api/trucks/2/records", json={"date": "2025-04-01"})

        assert resp.status_code == 400
        assert resp.get_json() == {"error": "Please select a category"}

    def test_invalid_category(self, client, fleet_file):
        resp = client.post("/api/trucks/2/records", json={"category": "wheels"})

        assert resp.status_code == 400
        assert len(read_yaml(fleet_file)["records"]) == 2

    def test_unknown_truck(self, client):
        resp = client.post("/api/trucks/9/records", json={"category": "brakes"})

        assert resp.status_code == 404
        assert resp.get_json() == {"error": "Truck 9 not found"}


class TestUpdateMileage:
    """Tests for POST /api/trucks/<id>/mileage."""

    def test_updates_mileage(self, client, fleet_file):
        resp = client.post("/api/trucks/1/mileage", json={"mileage": 56000})

        assert resp.get_json() == {"id": 1, "currentMileage": 56000}
        assert read_yaml(fleet_file)["trucks"][0]["currentMileage"] == 56000

    def test_missing_mileage(self, client):
        resp = client.post("/api/trucks/1/mileage", json={})
        assert resp.get_json() == {"error": "Please enter mileage"}

    def test_invalid_mileage(self, client):
        resp = client.post("/api/trucks/1/mileage", json={"mileage": "lots"})

        assert resp.status_code == 400
        assert resp.get_json() == {"error": "Invalid mileage value"}

    def test_negative_mileage(self, client, fleet_file):
        resp = client.post("/api/trucks/1/mileage", json={"mileage": -100})

        assert resp.status_code == 400
        assert resp.get_json() == {"error": "Invalid mileage value"}
        assert read_yaml(fleet_file)["trucks"][0]["currentMileage"] == 55000

    def test_unknown_truck(self, client):
        resp = client.post("/api/trucks/9/mileage", json={"mileage": 100})

        assert resp.status_code == 404
        assert resp.get_json() == {"error": "Truck 9 not found"}


class TestRecords:
    """Tests for /api/records."""

    def test_newest_first(self, client):
        data = client.get("/api/records").get_json()

        assert [r["id"] for r in data["records"]] == [2, 1]
        assert data["totalCost"] == 1425.5

    def test_filters(self, client):
        data = client.get("/api/records?category=oil_change").get_json()
        assert [r["id"] for r in data["records"]] == [1]

        data = client.get("/api/records?truck=2").get_json()
        assert [r["id"] for r in data["records"]] == [2]

        data = client.get("/api/records?start=2025-02-01&end=2025-03-02").get_json()
        assert [r["id"] for r in data["records"]] == [2]

    def test_ascending_by_mileage(self, client):
        data = client.get("/api/records?sort=mileage&order=asc").get_json()
        assert [r["id"] for r in data["records"]] == [2, 1]

    def test_bad_filters(self, client):
        assert client.get("/api/records?category=wheels").status_code == 400
        assert client.get("/api/records?sort=cost").status_code == 400

    def test_edit_record(self, client, fleet_file):
        resp = client.put(
            "/api/records/1",
            json={"date": "2025-01-11", "category": "oil_change", "mileageAtService": 49500},
        )

        assert resp.status_code == 200
        saved = read_yaml(fleet_file)["records"][0]
        assert saved["id"] == 1
        assert saved["truckId"] == 1
        assert saved["date"] == "2025-01-11"
        assert saved["mileageAtService"] == 49500

    def test_edit_unknown_record(self, client):
        resp = client.put("/api/records/9", json={"category": "tires"})
        assert resp.status_code == 404

    def test_delete_record(self, client, fleet_file):
        assert client.delete("/api/records/1").status_code == 204
        assert [r["id"] for r in read_yaml(fleet_file)["records"]] == [2]

    def test_delete_unknown_record(self, client):
        resp = client.delete("/api/records/9")

        assert resp.status_code == 404
        assert resp.get_json() == {"error": "Record 9 not found"}


class TestTruckEditing:
    """Tests for truck create, update and delete."""

    def test_create_truck(self, client, fleet_file):
        resp = client.post("/api/trucks", json={"truckNumber": "T-103", "currentMileage": "1200"})

        assert resp.status_code == 201
        assert resp.get_json()["id"] == 3
        assert read_yaml(fleet_file)["trucks"][2] == {
            "id": 3,
            "truckNumber": "T-103",
            "currentMileage": 1200,
        }

    def test_create_requires_number(self, client):
        resp = client.post("/api/trucks", json={"make": "Volvo"})

        assert resp.status_code == 400
        assert resp.get_json() == {"error": "Please enter a truck number"}

    def test_create_duplicate_number(self, client):
        assert client.post("/api/trucks", json={"truckNumber": "T-101"}).status_code == 400

    def test_edit_truck(self, client, fleet_file):
        resp = client.put("/api/trucks/2", json={"truckNumber": "T-102B", "year": "2022"})

        assert resp.get_json()["id"] == 2
        truck = read_yaml(fleet_file)["trucks"][1]
        assert truck["truckNumber"] == "T-102B"
        assert truck["year"] == 2022

    def test_delete_truck(self, client, fleet_file):
        resp = client.delete("/api/trucks/1")

        assert resp.get_json() == {"id": 1, "recordsRemoved": 1}
        assert [t["id"] for t in read_yaml(fleet_file)["trucks"]] == [2]


class TestCategories:
    """Tests for /api/categories."""

    def test_lists_labels_in_order(self, client):
        data = client.get("/api/categories").get_json()

        assert len(data) == 12
        assert data[0] == {"value": "oil_change", "label": "Oil Change"}
        assert {"value": "body", "label": "Body/Exterior"} in data


class TestMixedDateForms:
    """Date-only and zoned service dates in one fleet file."""

    @pytest.fixture
    def fleet_file(self, tmp_path):
        path = tmp_path / "fleet.yaml"
        path.write_text("""
trucks:
  - {id: 1, truckNumber: T-101, currentMileage: 6600}
records:
  - {id: 1, truckId: 1, date: '2025-01-15', mileageAtService: 1000, category: oil_change}
  - {id: 2, truckId: 1, date: '2025-03-15T08:30:00Z', mileageAtService: 2000, category: oil_change}
  - {id: 3, truckId: 1, date: '2025-03-15T20:00:00-05:00', mileageAtService: 2100, category: brakes}
""")
        return path

    def test_records_sorted(self, client):
        resp = client.get("/api/records")

        assert resp.status_code == 200
        assert [r["id"] for r in resp.get_json()["records"]] == [3, 2, 1]

    def test_date_range_compares_in_utc(self, client):
        data = client.get("/api/records?start=2025-03-16&end=2025-03-31").get_json()
        assert [r["id"] for r in data["records"]] == [3]

    def test_due_services_use_latest_record(self, client):
        resp = client.get("/api/due-services?as_of=2025-06-01")

        assert resp.status_code == 200
        oil = [s for s in resp.get_json()["services"] if s["category"] == "oil_change"]
        assert oil[0]["status"] == "soon"
        assert oil[0]["dueIn"] == "400 miles"

    def test_truck_detail(self, client):
        assert client.get("/api/trucks/1?as_of=2025-06-01").status_code == 200


class TestErrorHandlers:
    """Only missing trucks and records map to 404."""

    def test_not_found_handler_registered(self):
        handlers = app.error_handler_spec[None][None]
        assert NotFoundError in handlers
        assert KeyError not in handlers

    def test_negative_record_mileage_rejected(self, client, fleet_file):
        resp = client.post(
            "/api/trucks/1/records", json={"category": "brakes", "mileageAtService": -1}
        )

        assert resp.status_code == 400
        assert len(read_yaml(fleet_file)["records"]) == 2

    def test_negative_truck_mileage_rejected(self, client, fleet_file):
        resp = client.post("/api/trucks", json={"truckNumber": "T-103", "currentMileage": -1})

        assert resp.status_code == 400
        assert len(read_yaml(fleet_file)["trucks"]) == 2
