"""Latest known odometer reading per vehicle, derived from history."""

from dataclasses import dataclass
from datetime import date, datetime
from typing import Any, Dict, Iterable, Optional

from dateutil.parser import isoparse


@dataclass
class VehicleMileageSample:
    """Odometer reading observed on a given date."""

    vehicle_id: str
    mileage: float
    observed_at: datetime


def parse_observed_at(value: Any) -> Optional[datetime]:
    """Parse an entry date (ISO date or datetime). None when unparseable."""
    if isinstance(value, datetime):
        return value.replace(tzinfo=None)
    if isinstance(value, date):
        return datetime(value.year, value.month, value.day)
    if not isinstance(value, str) or not value.strip():
        return None
    try:
        return isoparse(value.strip()).replace(tzinfo=None)
    except ValueError:
        return None


def latest_mileage_samples(
    repairs: Iterable[Any],
    maintenance: Iterable[Any],
    fuel_logs: Iterable[Any],
) -> Dict[str, VehicleMileageSample]:
    """
    Keep the most recent positive-mileage entry per vehicle.

    Repairs, maintenance and fuel logs are scanned in that order; entries
    without a usable date or with mileage <= 0 are ignored. On equal dates
    the entry seen first wins.
    """
    latest: Dict[str, VehicleMileageSample] = {}
    for entries in (repairs, maintenance, fuel_logs):
        for entry in entries:
            mileage = getattr(entry, "mileage", None)
            if isinstance(mileage, bool) or not isinstance(mileage, (int, float)):
                continue
            if mileage <= 0:
                continue
            observed_at = parse_observed_at(getattr(entry, "date", None))
            if observed_at is None:
                continue
            current = latest.get(entry.vehicle_id)
            if current is None or observed_at > current.observed_at:
                latest[entry.vehicle_id] = VehicleMileageSample(
                    entry.vehicle_id, mileage, observed_at
                )
    return latest
