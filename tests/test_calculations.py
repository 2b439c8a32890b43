#!/usr/bin/env python3
"""Tests for calculation helper functions."""

from datetime import date

import pytest

from carcare import FuelLog, Maintenance, Repair
from carcare.calculations import (
    add_months,
    calc_next_due_date,
    cost_report,
    fuel_quantity,
    initial_maintenance,
    oil_change_distance,
    quick_fuel_log,
    upcoming_deadlines,
)


class TestAddMonths:
    """Tests for add_months / calc_next_due_date."""

    def test_simple(self):
        assert add_months(date(2025, 1, 15), 6) == date(2025, 7, 15)

    def test_clamps_to_month_end(self):
        assert add_months(date(2025, 8, 31), 6) == date(2026, 2, 28)

    def test_leap_day_plus_a_year(self):
        assert add_months(date(2024, 2, 29), 12) == date(2025, 2, 28)

    def test_next_due_from_string(self):
        assert calc_next_due_date("2025-03-01", 12) == "2026-03-01"

    def test_next_due_without_date(self):
        assert calc_next_due_date(None, 12) is None
        assert calc_next_due_date("bad", 12) is None


class TestInitialMaintenance:
    """Tests for seeding the maintenance schedule."""

    def test_all_fields(self):
        entries = initial_maintenance(
            "v1",
            current_mileage=48200,
            last_technical_inspection="2025-03-01",
            last_insurance_payment="2025-01-10",
            insurance_type="annuelle",
            last_vignette_payment="2025-04-05",
            last_oil_change="2025-06-01",
        )
        by_task = {e.task: e for e in entries}

        assert by_task["Visite technique"].next_due_date == "2026-03-01"
        assert by_task["Paiement Assurance"].next_due_date == "2026-01-10"
        assert by_task["Vignette"].next_due_date == "2026-04-05"
        assert by_task["Vidange"].next_due_mileage == 58200
        assert by_task["Vidange"].next_due_date is None
        assert all(e.cost == 0 and e.vehicle_id == "v1" for e in entries)
        assert all(e.mileage == 48200 for e in entries)

    def test_half_year_insurance(self):
        entries = initial_maintenance(
            "v1", last_insurance_payment="2025-01-10", insurance_type="semestrielle"
        )
        assert entries[0].next_due_date == "2025-07-10"

    def test_insurance_needs_type(self):
        assert initial_maintenance("v1", last_insurance_payment="2025-01-10") == []

    def test_unknown_insurance_type(self):
        with pytest.raises(ValueError):
            initial_maintenance("v1", last_insurance_payment="2025-01-10", insurance_type="mensuelle")

    def test_oil_change_needs_mileage(self):
        assert initial_maintenance("v1", last_oil_change="2025-06-01") == []

    def test_invalid_date(self):
        with pytest.raises(ValueError):
            initial_maintenance("v1", last_vignette_payment="31/12/2025")

    def test_ids(self):
        entries = initial_maintenance(
            "v1", last_technical_inspection="2025-03-01", last_vignette_payment="2025-04-05"
        )
        assert [e.id for e in entries] == ["v1-init-1", "v1-init-2"]

        ids = iter(["a", "b"])
        entries = initial_maintenance(
            "v1",
            last_technical_inspection="2025-03-01",
            last_vignette_payment="2025-04-05",
            id_factory=lambda: next(ids),
        )
        assert [e.id for e in entries] == ["a", "b"]


class TestFuel:
    """Tests for fuel helpers."""

    def test_quantity(self):
        assert fuel_quantity(100, 2.5) == 40

    def test_rejects_non_positive(self):
        with pytest.raises(ValueError):
            fuel_quantity(0, 2.5)
        with pytest.raises(ValueError):
            fuel_quantity(100, 0)

    def test_quick_fuel_log(self):
        log = quick_fuel_log("f1", "v1", "2025-06-01", 48650, 110, 2.2)
        assert isinstance(log, FuelLog)
        assert log.quantity == pytest.approx(50)
        assert log.price_per_liter == 2.2
        assert log.total_cost == 110
        assert log.date == "2025-06-01"


class TestCostReport:
    """Tests for cost_report."""

    def test_totals_and_categories(self):
        repairs = [
            Repair("r1", "v1", "2025-01-01", 30000, "Plaquettes", "Freins", 150),
            Repair("r2", "v1", "2025-02-01", 31000, "Disques", "Freins", 250),
            Repair("r3", "v1", "2025-03-01", 0, "Essuie-glaces", None, 20),
        ]
        fuel = [FuelLog("f1", "v1", "2025-03-10", 40000, 40, 2.5, 100)]

        report = cost_report(repairs, fuel)

        assert report.total_repair_cost == 420
        assert report.total_fuel_cost == 100
        assert report.total_cost == 520
        assert report.by_category == {"Carburant": 100, "Freins": 400, "Non classé": 20}
        assert report.max_mileage == 40000
        assert report.cost_per_km == pytest.approx(520 / 40000)

    def test_empty(self):
        report = cost_report([], [])
        assert report.total_cost == 0
        assert report.cost_per_km == 0
        assert report.by_category == {"Carburant": 0}


class TestOilChangeDistance:
    """Tests for oil_change_distance."""

    def oil(self, id, day, mileage, vehicle_id="v1"):
        return Maintenance(id, vehicle_id, day, mileage, "Vidange", 100)

    def test_last_two_by_date(self):
        records = [
            self.oil("a", "2024-01-01", 20000),
            self.oil("c", "2025-06-01", 39000),
            self.oil("b", "2024-12-01", 30000),
        ]
        assert oil_change_distance(records, "v1") == 9000

    def test_needs_two(self):
        assert oil_change_distance([self.oil("a", "2024-01-01", 20000)], "v1") is None

    def test_ignores_other_vehicles_and_tasks(self):
        records = [
            self.oil("a", "2024-01-01", 20000),
            self.oil("b", "2025-01-01", 99000, vehicle_id="v2"),
            Maintenance("c", "v1", "2025-02-01", 50000, "Vignette", 130),
        ]
        assert oil_change_distance(records, "v1") is None

    def test_non_positive_distance(self):
        records = [self.oil("a", "2024-01-01", 30000), self.oil("b", "2025-01-01", 25000)]
        assert oil_change_distance(records, "v1") is None


class TestUpcomingDeadlines:
    """Tests for upcoming_deadlines."""

    def test_filters_and_sorts(self):
        today = date(2026, 10, 19)
        records = [
            Maintenance("a", "v1", "2025-01-01", 0, "Vignette", 0, next_due_date="2027-01-01"),
            Maintenance("b", "v1", "2025-01-01", 0, "Visite technique", 0, next_due_date="2026-10-19"),
            Maintenance("c", "v1", "2025-01-01", 0, "Paiement Assurance", 0, next_due_date="2026-10-01"),
            Maintenance("d", "v1", "2025-01-01", 0, "Lavage", 0, next_due_date="2026-11-01"),
            Maintenance("e", "v1", "2025-01-01", 0, "Vidange", 0, next_due_mileage=50000),
        ]
        assert [m.id for m in upcoming_deadlines(records, today)] == ["b", "a"]
