#!/usr/bin/env python3
"""Tests for latest odometer derivation."""

from datetime import date, datetime

from carcare import FuelLog, Maintenance, Repair, latest_mileage_samples
from carcare.mileage import parse_observed_at


def repair(vehicle_id, day, mileage):
    return Repair(f"r-{day}", vehicle_id, day, mileage, "Plaquettes", "Freins", 150)


def maint(vehicle_id, day, mileage):
    return Maintenance(f"m-{day}", vehicle_id, day, mileage, "Vidange", 120)


def fuel(vehicle_id, day, mileage):
    return FuelLog(f"f-{day}", vehicle_id, day, mileage, 40, 2.5, 100)


class TestParseObservedAt:
    """Tests for parse_observed_at."""

    def test_iso_date(self):
        assert parse_observed_at("2025-06-10") == datetime(2025, 6, 10)

    def test_iso_datetime_with_zone(self):
        assert parse_observed_at("2025-06-10T08:30:00Z") == datetime(2025, 6, 10, 8, 30)

    def test_date_object(self):
        assert parse_observed_at(date(2025, 6, 10)) == datetime(2025, 6, 10)

    def test_garbage(self):
        assert parse_observed_at("hier") is None
        assert parse_observed_at("") is None
        assert parse_observed_at(None) is None
        assert parse_observed_at(20250610) is None


class TestLatestMileageSamples:
    """Tests for latest_mileage_samples."""

    def test_most_recent_wins_across_collections(self):
        samples = latest_mileage_samples(
            [repair("v1", "2025-01-10", 30000)],
            [maint("v1", "2025-03-01", 32000)],
            [fuel("v1", "2025-02-15", 31000)],
        )
        assert samples["v1"].mileage == 32000
        assert samples["v1"].observed_at == datetime(2025, 3, 1)

    def test_latest_by_date_not_by_mileage(self):
        """A later entry with a lower reading (typo or reset) still wins."""
        samples = latest_mileage_samples(
            [repair("v1", "2025-01-10", 90000)], [], [fuel("v1", "2025-02-01", 45000)]
        )
        assert samples["v1"].mileage == 45000

    def test_per_vehicle(self):
        samples = latest_mileage_samples(
            [repair("v1", "2025-01-10", 30000), repair("v2", "2025-01-11", 80000)], [], []
        )
        assert samples["v1"].mileage == 30000
        assert samples["v2"].mileage == 80000

    def test_zero_and_negative_mileage_ignored(self):
        samples = latest_mileage_samples(
            [repair("v1", "2025-01-10", 30000)],
            [maint("v1", "2025-05-01", 0)],
            [fuel("v1", "2025-06-01", -5)],
        )
        assert samples["v1"].mileage == 30000

    def test_unparseable_date_ignored(self):
        samples = latest_mileage_samples(
            [repair("v1", "2025-01-10", 30000), repair("v1", "n/a", 99999)], [], []
        )
        assert samples["v1"].mileage == 30000

    def test_same_date_keeps_first_seen(self):
        samples = latest_mileage_samples(
            [repair("v1", "2025-01-10", 30000)], [maint("v1", "2025-01-10", 30050)], []
        )
        assert samples["v1"].mileage == 30000

    def test_no_history(self):
        assert latest_mileage_samples([], [], []) == {}
