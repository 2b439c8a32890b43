"""Helper functions for deadlines, fuel and cost figures."""

from dataclasses import dataclass, field
from itertools import count
from datetime import date
from dateutil.relativedelta import relativedelta
from typing import Callable, Dict, Iterable, List, Optional

from .mileage import parse_observed_at
from .records import (
    FuelLog,
    Maintenance,
    Repair,
    INSURANCE_TASK,
    OIL_CHANGE_TASK,
    TECHNICAL_INSPECTION_TASK,
    VIGNETTE_TASK,
)

OIL_CHANGE_INTERVAL_KM = 10000
INSURANCE_MONTHS = {"annuelle": 12, "semestrielle": 6}
FUEL_CATEGORY = "Carburant"
UNCATEGORIZED = "Non classé"
DEADLINE_TASKS = (OIL_CHANGE_TASK, TECHNICAL_INSPECTION_TASK, INSURANCE_TASK, VIGNETTE_TASK)


def add_months(start: date, months: int) -> date:
    """Add calendar months, clamping to the end of shorter months."""
    return start + relativedelta(months=months)


def calc_next_due_date(last_date: Optional[str], interval_months: int) -> Optional[str]:
    """Next due date (ISO) from the last one, or None without a usable date."""
    last = parse_observed_at(last_date)
    if last is None:
        return None
    return add_months(last.date(), interval_months).isoformat()


def initial_maintenance(
    vehicle_id: str,
    current_mileage: Optional[float] = None,
    last_technical_inspection: Optional[str] = None,
    last_insurance_payment: Optional[str] = None,
    insurance_type: Optional[str] = None,
    last_vignette_payment: Optional[str] = None,
    last_oil_change: Optional[str] = None,
    id_factory: Optional[Callable[[], str]] = None,
) -> List[Maintenance]:
    """
    Seed the maintenance schedule for a newly added vehicle.

    - Technical inspection and vignette: due one year after the last one
    - Insurance: 12 months (annuelle) or 6 months (semestrielle)
    - Oil change: due at current mileage + 10,000 km, only when both the
      last oil change date and the current mileage are known
    """
    if insurance_type is not None and insurance_type not in INSURANCE_MONTHS:
        raise ValueError(
            f"Unknown insurance type '{insurance_type}' "
            f"(expected one of {', '.join(INSURANCE_MONTHS)})"
        )

    counter = count(1)

    def next_id() -> str:
        if id_factory is not None:
            return id_factory()
        return f"{vehicle_id}-init-{next(counter)}"

    mileage = current_mileage or 0
    entries = []

    def seed(task: str, when: str, months: int) -> None:
        due = calc_next_due_date(when, months)
        if due is None:
            raise ValueError(f"Invalid date for {task}: {when!r}")
        entries.append(
            Maintenance(next_id(), vehicle_id, when, mileage, task, 0, next_due_date=due)
        )

    if last_technical_inspection:
        seed(TECHNICAL_INSPECTION_TASK, last_technical_inspection, 12)
    if last_insurance_payment and insurance_type:
        seed(INSURANCE_TASK, last_insurance_payment, INSURANCE_MONTHS[insurance_type])
    if last_vignette_payment:
        seed(VIGNETTE_TASK, last_vignette_payment, 12)
    if last_oil_change and current_mileage:
        entries.append(
            Maintenance(
                next_id(),
                vehicle_id,
                last_oil_change,
                current_mileage,
                OIL_CHANGE_TASK,
                0,
                next_due_mileage=current_mileage + OIL_CHANGE_INTERVAL_KM,
            )
        )
    return entries


# =============================================================================
# Fuel
# =============================================================================


def fuel_quantity(total_cost: float, price_per_liter: float) -> float:
    """Liters bought for a paid amount."""
    if price_per_liter <= 0:
        raise ValueError("Price per liter must be greater than 0")
    if total_cost <= 0:
        raise ValueError("Cost must be greater than 0")
    return total_cost / price_per_liter


def quick_fuel_log(
    id: str,
    vehicle_id: str,
    log_date: str,
    mileage: float,
    total_cost: float,
    price_per_liter: float,
) -> FuelLog:
    """Build a fuel log from the amount paid and a default liter price."""
    quantity = fuel_quantity(total_cost, price_per_liter)
    return FuelLog(id, vehicle_id, log_date, mileage, quantity, price_per_liter, total_cost)


# =============================================================================
# Reports
# =============================================================================


@dataclass
class CostReport:
    """Spending summary across repairs and fuel."""

    total_cost: float = 0
    total_fuel_cost: float = 0
    total_repair_cost: float = 0
    by_category: Dict[str, float] = field(default_factory=dict)
    max_mileage: float = 0
    cost_per_km: float = 0


def cost_report(repairs: Iterable[Repair], fuel_logs: Iterable[FuelLog]) -> CostReport:
    """Totals, per-category spend and cost per km (total / highest odometer)."""
    repairs = list(repairs)
    fuel_logs = list(fuel_logs)

    total_repair_cost = sum(r.cost for r in repairs)
    total_fuel_cost = sum(f.total_cost for f in fuel_logs)
    total_cost = total_repair_cost + total_fuel_cost

    by_category = {FUEL_CATEGORY: total_fuel_cost}
    for repair in repairs:
        category = repair.category or UNCATEGORIZED
        by_category[category] = by_category.get(category, 0) + repair.cost

    max_mileage = max(
        [r.mileage or 0 for r in repairs] + [f.mileage or 0 for f in fuel_logs] + [0]
    )
    cost_per_km = total_cost / max_mileage if max_mileage > 0 else 0

    return CostReport(
        total_cost=total_cost,
        total_fuel_cost=total_fuel_cost,
        total_repair_cost=total_repair_cost,
        by_category=by_category,
        max_mileage=max_mileage,
        cost_per_km=cost_per_km,
    )


def oil_change_distance(maintenance: Iterable[Maintenance], vehicle_id: str) -> Optional[float]:
    """Km driven between the two most recent oil changes of a vehicle."""
    changes = [
        m
        for m in maintenance
        if m.vehicle_id == vehicle_id
        and m.task == OIL_CHANGE_TASK
        and (m.mileage or 0) > 0
        and parse_observed_at(m.date) is not None
    ]
    if len(changes) < 2:
        return None
    changes.sort(key=lambda m: parse_observed_at(m.date))
    distance = changes[-1].mileage - changes[-2].mileage
    if distance <= 0:
        return None
    return distance


def upcoming_deadlines(maintenance: Iterable[Maintenance], today: date) -> List[Maintenance]:
    """Date-based deadlines on or after today, soonest first."""
    upcoming = []
    for m in maintenance:
        if m.task not in DEADLINE_TASKS or not m.next_due_date:
            continue
        due = parse_observed_at(m.next_due_date)
        if due is not None and due.date() >= today:
            upcoming.append((due, m))
    upcoming.sort(key=lambda pair: pair[0])
    return [m for _, m in upcoming]
