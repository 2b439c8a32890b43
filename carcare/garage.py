"""Garage class - the aggregate of one user's vehicles and their history."""

from datetime import date
from typing import Dict, List, Optional

from .calculations import oil_change_distance, upcoming_deadlines
from .mileage import VehicleMileageSample, latest_mileage_samples
from .records import FuelLog, Maintenance, Repair, Vehicle


class Garage:
    """All records for one user, as loaded from their garage file."""

    def __init__(
        self,
        user: str,
        vehicles: Optional[List[Vehicle]] = None,
        repairs: Optional[List[Repair]] = None,
        maintenance: Optional[List[Maintenance]] = None,
        fuel_logs: Optional[List[FuelLog]] = None,
    ):
        self.user = user
        self.vehicles = vehicles or []
        self.repairs = repairs or []
        self.maintenance = maintenance or []
        self.fuel_logs = fuel_logs or []

    def get_vehicle(self, vehicle_id: str) -> Optional[Vehicle]:
        """Find a vehicle by id."""
        for vehicle in self.vehicles:
            if vehicle.id == vehicle_id:
                return vehicle
        return None

    def vehicle_name(self, vehicle_id: str) -> str:
        vehicle = self.get_vehicle(vehicle_id)
        return vehicle.name if vehicle else vehicle_id

    def mileage_samples(self) -> Dict[str, VehicleMileageSample]:
        """Latest odometer reading per vehicle across all history."""
        return latest_mileage_samples(self.repairs, self.maintenance, self.fuel_logs)

    def current_mileage(self, vehicle_id: str) -> Optional[float]:
        sample = self.mileage_samples().get(vehicle_id)
        return sample.mileage if sample else None

    def upcoming_deadlines(self, today: Optional[date] = None) -> List[Maintenance]:
        return upcoming_deadlines(self.maintenance, today or date.today())

    def oil_change_distances(self) -> Dict[str, float]:
        """Distance between the last two oil changes, for vehicles that have one."""
        distances = {}
        for vehicle in self.vehicles:
            distance = oil_change_distance(self.maintenance, vehicle.id)
            if distance is not None:
                distances[vehicle.id] = distance
        return distances
