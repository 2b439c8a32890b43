"""Garage records: vehicles, repairs, maintenance tasks and fuel logs."""

from typing import Optional

OIL_CHANGE_TASK = "Vidange"
VIGNETTE_TASK = "Vignette"
TECHNICAL_INSPECTION_TASK = "Visite technique"
INSURANCE_TASK = "Paiement Assurance"

FUEL_TYPES = ("Essence", "Diesel", "Électrique", "Hybride")


class Vehicle:
    """A vehicle owned by the user."""

    def __init__(
        self,
        id: str,
        brand: str,
        model: str,
        year: int,
        license_plate: str,
        fuel_type: str,
        fiscal_power: Optional[int] = None,
    ):
        self.id = id
        self.brand = brand
        self.model = model
        self.year = year
        self.license_plate = license_plate
        self.fuel_type = fuel_type
        self.fiscal_power = fiscal_power

    @property
    def name(self) -> str:
        """Human-readable vehicle name."""
        return f"{self.brand} {self.model} ({self.year})"


class Repair:
    """A repair performed on a vehicle."""

    def __init__(
        self,
        id: str,
        vehicle_id: str,
        date: str,
        mileage: float,
        description: str,
        category: Optional[str],
        cost: float,
    ):
        self.id = id
        self.vehicle_id = vehicle_id
        self.date = date
        self.mileage = mileage
        self.description = description
        self.category = category
        self.cost = cost


class Maintenance:
    """A maintenance record, optionally carrying the next deadline."""

    def __init__(
        self,
        id: str,
        vehicle_id: str,
        date: str,
        mileage: float,
        task: str,
        cost: float,
        next_due_date: Optional[str] = None,
        next_due_mileage: Optional[float] = None,
    ):
        self.id = id
        self.vehicle_id = vehicle_id
        self.date = date
        self.mileage = mileage
        self.task = task
        self.cost = cost
        self.next_due_date = next_due_date
        self.next_due_mileage = next_due_mileage

    @property
    def is_mileage_based(self) -> bool:
        """Only oil changes with a positive due mileage are tracked by distance."""
        due = self.next_due_mileage
        if isinstance(due, bool) or not isinstance(due, (int, float)):
            return False
        return self.task == OIL_CHANGE_TASK and due > 0


class FuelLog:
    """A refuelling."""

    def __init__(
        self,
        id: str,
        vehicle_id: str,
        date: str,
        mileage: float,
        quantity: float,
        price_per_liter: float,
        total_cost: float,
    ):
        self.id = id
        self.vehicle_id = vehicle_id
        self.date = date
        self.mileage = mileage
        self.quantity = quantity
        self.price_per_liter = price_per_liter
        self.total_cost = total_cost
