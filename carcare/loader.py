"""YAML loading and saving utilities for garage data."""

import json
from pathlib import Path
from typing import Any, Dict, Union

import yaml

from .garage import Garage
from .records import FuelLog, Maintenance, Repair, Vehicle

ENTRY_SECTIONS = ("repairs", "maintenance", "fuelLogs")
SECTIONS = ("vehicles",) + ENTRY_SECTIONS


def _parse_object(dct: Dict[str, Any]) -> Union[Garage, Vehicle, Repair, Maintenance, FuelLog, dict]:
    """Parse dictionary into appropriate object type."""
    # Vehicle
    if "brand" in dct and "licensePlate" in dct:
        return Vehicle(
            dct["id"],
            dct["brand"],
            dct["model"],
            dct["year"],
            dct["licensePlate"],
            dct["fuelType"],
            dct.get("fiscalPower"),
        )
    # Maintenance record
    elif "task" in dct and "vehicleId" in dct:
        return Maintenance(
            dct["id"],
            dct["vehicleId"],
            dct["date"],
            dct.get("mileage") or 0,
            dct["task"],
            dct.get("cost") or 0,
            dct.get("nextDueDate"),
            dct.get("nextDueMileage"),
        )
    # Fuel log
    elif "quantity" in dct and "vehicleId" in dct:
        return FuelLog(
            dct["id"],
            dct["vehicleId"],
            dct["date"],
            dct.get("mileage") or 0,
            dct["quantity"],
            dct["pricePerLiter"],
            dct["totalCost"],
        )
    # Repair
    elif "description" in dct and "vehicleId" in dct:
        return Repair(
            dct["id"],
            dct["vehicleId"],
            dct["date"],
            dct.get("mileage") or 0,
            dct["description"],
            dct.get("category"),
            dct.get("cost") or 0,
        )
    # Top-level garage object
    elif "user" in dct and "vehicles" in dct:
        return Garage(
            dct["user"],
            dct.get("vehicles"),
            dct.get("repairs"),
            dct.get("maintenance"),
            dct.get("fuelLogs"),
        )
    else:
        return dct


def load_garage(filename: Union[str, Path]) -> Garage:
    """Load a garage from a YAML file."""
    with open(filename, "rb") as fp:
        # default=str turns unquoted YAML dates back into ISO strings
        json_data = json.dumps(yaml.load(fp, Loader=yaml.SafeLoader), default=str)
        return json.loads(json_data, object_hook=_parse_object)


def _vehicle_to_dict(vehicle: Vehicle) -> Dict[str, Any]:
    d: Dict[str, Any] = {
        "id": vehicle.id,
        "brand": vehicle.brand,
        "model": vehicle.model,
        "year": vehicle.year,
        "licensePlate": vehicle.license_plate,
        "fuelType": vehicle.fuel_type,
    }
    if vehicle.fiscal_power is not None:
        d["fiscalPower"] = vehicle.fiscal_power
    return d


def _repair_to_dict(entry: Repair) -> Dict[str, Any]:
    d: Dict[str, Any] = {
        "id": entry.id,
        "vehicleId": entry.vehicle_id,
        "date": entry.date,
        "mileage": entry.mileage,
        "description": entry.description,
    }
    if entry.category:
        d["category"] = entry.category
    d["cost"] = entry.cost
    return d


def _maintenance_to_dict(entry: Maintenance) -> Dict[str, Any]:
    """Serialize a Maintenance record (camelCase keys, None omitted)."""
    d: Dict[str, Any] = {
        "id": entry.id,
        "vehicleId": entry.vehicle_id,
        "date": entry.date,
        "mileage": entry.mileage,
        "task": entry.task,
        "cost": entry.cost,
    }
    if entry.next_due_date is not None:
        d["nextDueDate"] = entry.next_due_date
    if entry.next_due_mileage is not None:
        d["nextDueMileage"] = entry.next_due_mileage
    return d


def _fuel_log_to_dict(entry: FuelLog) -> Dict[str, Any]:
    return {
        "id": entry.id,
        "vehicleId": entry.vehicle_id,
        "date": entry.date,
        "mileage": entry.mileage,
        "quantity": round(entry.quantity, 3),
        "pricePerLiter": entry.price_per_liter,
        "totalCost": entry.total_cost,
    }


def _read_raw(filename: Union[str, Path]) -> Dict[str, Any]:
    with open(filename, "r", encoding="utf-8") as fp:
        return yaml.load(fp, Loader=yaml.SafeLoader)


def _write_raw(filename: Union[str, Path], data: Dict[str, Any]) -> None:
    with open(filename, "w", encoding="utf-8") as fp:
        yaml.dump(
            data,
            fp,
            default_flow_style=False,
            allow_unicode=True,
            sort_keys=False,
            width=120,
        )


def _append(filename: Union[str, Path], section: str, entry_dict: Dict[str, Any]) -> None:
    """
    Append an entry to a list section of a garage YAML file.

    Loads the raw YAML, appends the entry and writes back to the file.
    """
    data = _read_raw(filename)

    if data.get(section) is None:
        data[section] = []

    ids = {e.get("id") for e in data[section] if isinstance(e, dict)}
    if entry_dict["id"] in ids:
        raise KeyError(f"Duplicate {section} id '{entry_dict['id']}'")

    data[section].append(entry_dict)
    _write_raw(filename, data)


def save_vehicle(filename: Union[str, Path], vehicle: Vehicle) -> None:
    """Append a vehicle to a garage YAML file."""
    _append(filename, "vehicles", _vehicle_to_dict(vehicle))


def save_repair(filename: Union[str, Path], entry: Repair) -> None:
    """Append a repair to a garage YAML file."""
    _append(filename, "repairs", _repair_to_dict(entry))


def save_maintenance(filename: Union[str, Path], entry: Maintenance) -> None:
    """Append a maintenance record to a garage YAML file."""
    _append(filename, "maintenance", _maintenance_to_dict(entry))


def save_fuel_log(filename: Union[str, Path], entry: FuelLog) -> None:
    """Append a fuel log to a garage YAML file."""
    _append(filename, "fuelLogs", _fuel_log_to_dict(entry))


def delete_entry(filename: Union[str, Path], section: str, entry_id: str) -> int:
    """
    Remove an entry by id from a section of a garage YAML file.

    Deleting a vehicle also removes its repairs, maintenance and fuel logs.
    Returns the number of entries removed; raises KeyError for an unknown
    section or id.
    """
    if section not in SECTIONS:
        raise KeyError(f"Unknown section '{section}' (expected one of {', '.join(SECTIONS)})")

    data = _read_raw(filename)
    entries = data.get(section) or []
    kept = [e for e in entries if not (isinstance(e, dict) and e.get("id") == entry_id)]
    if len(kept) == len(entries):
        raise KeyError(f"No {section} entry with id '{entry_id}'")
    data[section] = kept
    removed = len(entries) - len(kept)

    if section == "vehicles":
        for child in ENTRY_SECTIONS:
            children = data.get(child) or []
            remaining = [
                e for e in children if not (isinstance(e, dict) and e.get("vehicleId") == entry_id)
            ]
            removed += len(children) - len(remaining)
            if child in data:
                data[child] = remaining

    _write_raw(filename, data)
    return removed
