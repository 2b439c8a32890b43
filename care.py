#!/usr/bin/env python3
"""
Unified CLI for personal vehicle care.

Commands:
  settings          - Show fuel prices, inspection fee and vignette tables
  set-price         - Change a default price
  deadlines         - Show upcoming deadlines and latest mileage per vehicle
  check             - Send due deadline reminders once
  watch             - Keep checking reminders on an interval
  report            - Show spending summary
  init-maintenance  - Seed the maintenance schedule for a vehicle
  fuel              - Log a refuelling from the amount paid
  add-vehicle       - Add a vehicle
  repair            - Record a repair
  maintenance       - Record completed maintenance and its next deadline
  delete            - Delete a vehicle (with its history) or an entry
"""

import argparse
import logging
import sys
import threading
import uuid
from datetime import date, datetime, timedelta
from pathlib import Path
from tabulate import tabulate
from typing import List, Optional

from carcare import (
    DeadlineNotifier,
    Garage,
    Maintenance,
    NotificationEvent,
    ReminderScheduler,
    Repair,
    Vehicle,
    YamlFileStore,
    delete_entry,
    load_garage,
    load_settings,
    save_fuel_log,
    save_maintenance,
    save_repair,
    save_settings,
    save_vehicle,
    vignette_cost,
)
from carcare.calculations import UNCATEGORIZED, cost_report, initial_maintenance, quick_fuel_log
from carcare.config import Config
from carcare.loader import SECTIONS
from carcare.mileage import parse_observed_at
from carcare.notifier import format_km
from carcare.records import FUEL_TYPES
from carcare.settings import fuel_price, with_price

logger = logging.getLogger("carcare.cli")

# =============================================================================
# Formatting helpers
# =============================================================================


def format_km_cell(km: Optional[float]) -> str:
    """Format kilometres for a table cell."""
    return f"{km:,.0f}" if km is not None else "-"


def format_money(amount: Optional[float]) -> str:
    """Format an amount in dinars (three decimals)."""
    return f"{amount:,.3f} TND" if amount is not None else "-"


def make_deadline_table(entries: List[Maintenance], garage: Garage) -> List[List[str]]:
    """Convert upcoming deadlines to table rows."""
    return [
        [garage.vehicle_name(m.vehicle_id), m.task, m.next_due_date] for m in entries
    ]


def print_event(event: NotificationEvent) -> None:
    """Deliver a notification to the terminal."""
    print(f"[{event.title}] {event.body}")


def open_store(args) -> YamlFileStore:
    return YamlFileStore(args.state or Config.STATE_FILE)


# =============================================================================
# Settings commands
# =============================================================================


def cmd_settings(args):
    """Show resolved settings."""
    settings = load_settings(open_store(args))

    print(f"Prix / litre Essence:   {format_money(settings.price_essence)}")
    print(f"Prix / litre Diesel:    {format_money(settings.price_diesel)}")
    print(f"Coût visite technique:  {format_money(settings.cost_visite_technique)}")
    print()

    rows = [
        [e.range, format_money(e.cost), format_money(d.cost)]
        for e, d in zip(settings.vignette_essence, settings.vignette_diesel)
    ]
    print("Vignette:")
    print(tabulate(rows, headers=["CV", "Essence", "Diesel"], tablefmt="simple"))
    return 0


def cmd_set_price(args):
    """Change one default price."""
    store = open_store(args)
    settings = load_settings(store)
    try:
        settings = with_price(settings, args.which, args.value)
    except ValueError as e:
        print(f"Error: {e}")
        return 1

    if args.dry_run:
        print(f"Would set {args.which} to {format_money(args.value)}")
        print("(dry run - no changes made)")
        return 0

    save_settings(store, settings)
    print(f"Set {args.which} to {format_money(args.value)}")
    return 0


# =============================================================================
# Deadline commands
# =============================================================================


def cmd_deadlines(args):
    """Show upcoming date deadlines and the latest known mileage."""
    garage = load_garage(args.garage_file)
    settings = load_settings(open_store(args))

    print(f"User: {garage.user}")
    print(f"Vehicles: {len(garage.vehicles)}")
    print()

    upcoming = garage.upcoming_deadlines()
    if upcoming:
        print("UPCOMING:")
        print(
            tabulate(
                make_deadline_table(upcoming, garage),
                headers=["Vehicle", "Task", "Due"],
                tablefmt="simple",
            )
        )
    else:
        print("No upcoming deadlines.")
    print()

    samples = garage.mileage_samples()
    rows = []
    for vehicle in garage.vehicles:
        sample = samples.get(vehicle.id)
        rows.append(
            [
                vehicle.name,
                format_km_cell(sample.mileage if sample else None),
                sample.observed_at.date().isoformat() if sample else "-",
                format_money(vignette_cost(settings, vehicle.fuel_type, vehicle.fiscal_power)),
            ]
        )
    print(tabulate(rows, headers=["Vehicle", "Km", "As of", "Vignette"], tablefmt="simple"))
    return 0


def build_check(garage_file: Path, notifier: DeadlineNotifier, now: Optional[datetime] = None):
    """Check callable for the scheduler: reload data, then notify."""

    def check(user_id: str) -> List[NotificationEvent]:
        garage = load_garage(garage_file)
        return notifier.run(user_id, garage.maintenance, garage.mileage_samples(), now)

    return check


def resolve_user(args, garage: Garage) -> str:
    return args.user or garage.user or Config.USER


def cmd_check(args):
    """Send due reminders once."""
    try:
        now = datetime.fromisoformat(args.now) if args.now else None
    except ValueError as e:
        print(f"Error: Invalid --now value '{args.now}': {e}")
        return 1

    garage = load_garage(args.garage_file)
    notifier = DeadlineNotifier(open_store(args), print_event)
    events = notifier.run(
        resolve_user(args, garage), garage.maintenance, garage.mileage_samples(), now
    )
    if not events:
        print("Nothing to remind.")
    return 0


def cmd_watch(args):
    """Check reminders now and then on an interval until interrupted."""
    garage = load_garage(args.garage_file)
    user_id = resolve_user(args, garage)
    interval = (
        timedelta(hours=args.interval_hours)
        if args.interval_hours
        else Config.check_interval()
    )
    notifier = DeadlineNotifier(open_store(args), print_event)
    scheduler = ReminderScheduler(build_check(args.garage_file, notifier), interval)

    logger.info(f"Watching {args.garage_file} for {user_id}")
    scheduler.start(user_id)
    try:
        threading.Event().wait()
    except KeyboardInterrupt:
        print()
    finally:
        scheduler.stop_all()
    return 0


# =============================================================================
# Report command
# =============================================================================


def cmd_report(args):
    """Show spending summary."""
    garage = load_garage(args.garage_file)
    report = cost_report(garage.repairs, garage.fuel_logs)

    print(f"Total cost:     {format_money(report.total_cost)}")
    print(f"Fuel:           {format_money(report.total_fuel_cost)}")
    print(f"Repairs:        {format_money(report.total_repair_cost)}")
    if report.cost_per_km > 0:
        print(f"Cost per km:    {format_money(report.cost_per_km)} / km")
    else:
        print("Cost per km:    N/A")
    print()

    rows = [[name, format_money(cost)] for name, cost in report.by_category.items()]
    print(tabulate(rows, headers=["Category", "Cost"], tablefmt="simple"))

    distances = garage.oil_change_distances()
    if distances:
        print()
        print("Distance between last two oil changes:")
        for vehicle_id, distance in distances.items():
            print(f"  {garage.vehicle_name(vehicle_id)}: {format_km(distance)} km")
    return 0


# =============================================================================
# Entry commands
# =============================================================================


def cmd_init_maintenance(args):
    """Seed the maintenance schedule for a vehicle."""
    garage = load_garage(args.garage_file)
    if garage.get_vehicle(args.vehicle_id) is None:
        print(f"Error: Unknown vehicle '{args.vehicle_id}'")
        return 1

    try:
        entries = initial_maintenance(
            args.vehicle_id,
            current_mileage=args.mileage,
            last_technical_inspection=args.inspection,
            last_insurance_payment=args.insurance,
            insurance_type=args.insurance_type,
            last_vignette_payment=args.vignette,
            last_oil_change=args.oil_change,
            id_factory=lambda: uuid.uuid4().hex,
        )
    except ValueError as e:
        print(f"Error: {e}")
        return 1

    if not entries:
        print("Nothing to add.")
        return 0

    rows = [
        [m.task, m.date, m.next_due_date or "-", format_km_cell(m.next_due_mileage)]
        for m in entries
    ]
    print(tabulate(rows, headers=["Task", "Last", "Next (date)", "Next (km)"], tablefmt="simple"))
    print()

    if args.dry_run:
        print("(dry run - no changes made)")
        return 0

    for entry in entries:
        save_maintenance(args.garage_file, entry)
    print(f"{len(entries)} entries saved.")
    return 0


def cmd_fuel(args):
    """Log a refuelling from the amount paid."""
    garage = load_garage(args.garage_file)
    vehicle = garage.get_vehicle(args.vehicle_id)
    if vehicle is None:
        print(f"Error: Unknown vehicle '{args.vehicle_id}'")
        return 1

    price = args.price or fuel_price(load_settings(open_store(args)), vehicle.fuel_type)
    try:
        entry = quick_fuel_log(
            uuid.uuid4().hex,
            vehicle.id,
            args.date or date.today().isoformat(),
            args.mileage,
            args.cost,
            price,
        )
    except ValueError as e:
        print(f"Error: {e}")
        return 1

    print(f"Vehicle:  {vehicle.name}")
    print(f"Date:     {entry.date}")
    print(f"Mileage:  {format_km_cell(entry.mileage)}")
    print(f"Quantity: {entry.quantity:.2f} L @ {format_money(entry.price_per_liter)}")
    print(f"Total:    {format_money(entry.total_cost)}")
    print()

    if args.dry_run:
        print("(dry run - no changes made)")
        return 0

    save_fuel_log(args.garage_file, entry)
    print("Entry saved.")
    return 0


def _check_date(label: str, value: Optional[str]) -> Optional[str]:
    """Error message for an unparseable date, None when fine or absent."""
    if value and parse_observed_at(value) is None:
        return f"Invalid {label} '{value}' (expected YYYY-MM-DD)"
    return None


def cmd_add_vehicle(args):
    """Add a vehicle to the garage file."""
    vehicle = Vehicle(
        args.vehicle_id,
        args.brand,
        args.model,
        args.year,
        args.plate,
        args.fuel_type,
        args.fiscal_power,
    )

    print(f"Vehicle:  {vehicle.name}")
    print(f"Plate:    {vehicle.license_plate}")
    print(f"Fuel:     {vehicle.fuel_type}")
    if vehicle.fiscal_power is not None:
        settings = load_settings(open_store(args))
        print(f"Power:    {vehicle.fiscal_power} CV")
        cost = vignette_cost(settings, vehicle.fuel_type, vehicle.fiscal_power)
        print(f"Vignette: {format_money(cost)}")
    print()

    if args.dry_run:
        print("(dry run - no changes made)")
        return 0

    try:
        save_vehicle(args.garage_file, vehicle)
    except KeyError as e:
        print(f"Error: {e.args[0]}")
        return 1
    print("Vehicle saved.")
    return 0


def cmd_repair(args):
    """Record a repair."""
    garage = load_garage(args.garage_file)
    vehicle = garage.get_vehicle(args.vehicle_id)
    if vehicle is None:
        print(f"Error: Unknown vehicle '{args.vehicle_id}'")
        return 1
    error = _check_date("date", args.date)
    if error:
        print(f"Error: {error}")
        return 1

    entry = Repair(
        uuid.uuid4().hex,
        vehicle.id,
        args.date or date.today().isoformat(),
        args.mileage,
        args.description,
        args.category,
        args.cost,
    )

    print(f"Vehicle:  {vehicle.name}")
    print(f"Date:     {entry.date}")
    print(f"Mileage:  {format_km_cell(entry.mileage)}")
    print(f"Repair:   {entry.description} ({entry.category or UNCATEGORIZED})")
    print(f"Cost:     {format_money(entry.cost)}")
    print()

    if args.dry_run:
        print("(dry run - no changes made)")
        return 0

    save_repair(args.garage_file, entry)
    print("Entry saved.")
    return 0


def cmd_maintenance(args):
    """Record completed maintenance, optionally with its next deadline."""
    garage = load_garage(args.garage_file)
    vehicle = garage.get_vehicle(args.vehicle_id)
    if vehicle is None:
        print(f"Error: Unknown vehicle '{args.vehicle_id}'")
        return 1
    error = _check_date("date", args.date) or _check_date("next date", args.next_date)
    if error:
        print(f"Error: {error}")
        return 1
    if args.next_km is not None and args.next_km <= (args.mileage or 0):
        print("Error: Next due mileage must be greater than the current mileage")
        return 1

    entry = Maintenance(
        uuid.uuid4().hex,
        vehicle.id,
        args.date or date.today().isoformat(),
        args.mileage or 0,
        args.task,
        args.cost,
        next_due_date=args.next_date,
        next_due_mileage=args.next_km,
    )

    print(f"Vehicle:  {vehicle.name}")
    print(f"Task:     {entry.task}")
    print(f"Date:     {entry.date}")
    print(f"Mileage:  {format_km_cell(entry.mileage)}")
    print(f"Cost:     {format_money(entry.cost)}")
    print(f"Next:     {entry.next_due_date or '-'} / {format_km_cell(entry.next_due_mileage)} km")
    print()

    if args.dry_run:
        print("(dry run - no changes made)")
        return 0

    save_maintenance(args.garage_file, entry)
    print("Entry saved.")
    return 0


def cmd_delete(args):
    """Delete an entry; deleting a vehicle removes its history too."""
    if args.dry_run:
        print(f"Would delete {args.section} entry '{args.entry_id}'")
        print("(dry run - no changes made)")
        return 0

    try:
        removed = delete_entry(args.garage_file, args.section, args.entry_id)
    except KeyError as e:
        print(f"Error: {e.args[0]}")
        return 1
    print(f"{removed} entries deleted.")
    return 0


# =============================================================================
# Main
# =============================================================================


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Personal vehicle care tracker",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  %(prog)s garages/me.yaml settings
  %(prog)s garages/me.yaml set-price essence 2.525
  %(prog)s garages/me.yaml deadlines
  %(prog)s garages/me.yaml check
  %(prog)s garages/me.yaml watch --interval-hours 6
  %(prog)s garages/me.yaml report
  %(prog)s garages/me.yaml init-maintenance clio --mileage 48200 \\
      --inspection 2025-03-01 --insurance 2025-01-10 --insurance-type annuelle
  %(prog)s garages/me.yaml fuel clio --cost 120 --mileage 48650
  %(prog)s garages/me.yaml repair clio --description Plaquettes --category Freins \\
      --cost 150 --mileage 48700
  %(prog)s garages/me.yaml maintenance clio Vidange --cost 120 --mileage 49800 \\
      --next-km 59800
  %(prog)s garages/me.yaml delete repairs r1
""",
    )
    parser.add_argument("garage_file", type=Path, help="Path to garage YAML file")
    parser.add_argument(
        "--state",
        type=Path,
        help="Path to state file for settings and reminders (default: $CARCARE_STATE_FILE)",
    )

    subparsers = parser.add_subparsers(dest="command", required=True)

    subparsers.add_parser("settings", help="Show resolved settings")

    price_parser = subparsers.add_parser("set-price", help="Change a default price")
    price_parser.add_argument("which", choices=["essence", "diesel", "visite"])
    price_parser.add_argument("value", type=float)
    price_parser.add_argument(
        "--dry-run", action="store_true", help="Show the change without saving"
    )

    subparsers.add_parser("deadlines", help="Show upcoming deadlines and mileage")

    check_parser = subparsers.add_parser("check", help="Send due reminders once")
    check_parser.add_argument("--user", type=str, help="User id (default: garage user)")
    check_parser.add_argument(
        "--now", type=str, help="Evaluate as of this ISO datetime (default: now)"
    )

    watch_parser = subparsers.add_parser("watch", help="Check reminders periodically")
    watch_parser.add_argument("--user", type=str, help="User id (default: garage user)")
    watch_parser.add_argument(
        "--interval-hours",
        type=float,
        help="Hours between checks (default: $CHECK_INTERVAL_HOURS or 6)",
    )

    subparsers.add_parser("report", help="Show spending summary")

    init_parser = subparsers.add_parser(
        "init-maintenance", help="Seed the maintenance schedule for a vehicle"
    )
    init_parser.add_argument("vehicle_id", type=str)
    init_parser.add_argument("--mileage", type=float, help="Current mileage")
    init_parser.add_argument("--inspection", type=str, help="Last technical inspection date")
    init_parser.add_argument("--insurance", type=str, help="Last insurance payment date")
    init_parser.add_argument(
        "--insurance-type", choices=["annuelle", "semestrielle"], help="Insurance period"
    )
    init_parser.add_argument("--vignette", type=str, help="Last vignette payment date")
    init_parser.add_argument("--oil-change", type=str, help="Last oil change date")
    init_parser.add_argument(
        "--dry-run", action="store_true", help="Show what would be added without saving"
    )

    fuel_parser = subparsers.add_parser("fuel", help="Log a refuelling")
    fuel_parser.add_argument("vehicle_id", type=str)
    fuel_parser.add_argument("--cost", type=float, required=True, help="Amount paid")
    fuel_parser.add_argument("--mileage", type=float, required=True, help="Odometer")
    fuel_parser.add_argument("--date", type=str, help="Date in YYYY-MM-DD (default: today)")
    fuel_parser.add_argument(
        "--price", type=float, help="Price per liter (default: settings price)"
    )
    fuel_parser.add_argument(
        "--dry-run", action="store_true", help="Show what would be added without saving"
    )

    vehicle_parser = subparsers.add_parser("add-vehicle", help="Add a vehicle")
    vehicle_parser.add_argument("vehicle_id", type=str)
    vehicle_parser.add_argument("--brand", type=str, required=True)
    vehicle_parser.add_argument("--model", type=str, required=True)
    vehicle_parser.add_argument("--year", type=int, required=True)
    vehicle_parser.add_argument("--plate", type=str, required=True, help="License plate")
    vehicle_parser.add_argument("--fuel-type", choices=FUEL_TYPES, required=True)
    vehicle_parser.add_argument("--fiscal-power", type=int, help="Fiscal horsepower (CV)")
    vehicle_parser.add_argument(
        "--dry-run", action="store_true", help="Show what would be added without saving"
    )

    repair_parser = subparsers.add_parser("repair", help="Record a repair")
    repair_parser.add_argument("vehicle_id", type=str)
    repair_parser.add_argument("--description", type=str, required=True)
    repair_parser.add_argument("--cost", type=float, required=True)
    repair_parser.add_argument("--mileage", type=float, required=True, help="Odometer")
    repair_parser.add_argument("--category", type=str, help="Repair category")
    repair_parser.add_argument("--date", type=str, help="Date in YYYY-MM-DD (default: today)")
    repair_parser.add_argument(
        "--dry-run", action="store_true", help="Show what would be added without saving"
    )

    maint_parser = subparsers.add_parser(
        "maintenance", help="Record completed maintenance and its next deadline"
    )
    maint_parser.add_argument("vehicle_id", type=str)
    maint_parser.add_argument("task", type=str, help='Task name, e.g. "Vidange"')
    maint_parser.add_argument("--cost", type=float, default=0)
    maint_parser.add_argument("--mileage", type=float, help="Odometer")
    maint_parser.add_argument("--date", type=str, help="Date in YYYY-MM-DD (default: today)")
    maint_parser.add_argument("--next-date", type=str, help="Next due date (YYYY-MM-DD)")
    maint_parser.add_argument("--next-km", type=float, help="Next due mileage")
    maint_parser.add_argument(
        "--dry-run", action="store_true", help="Show what would be added without saving"
    )

    delete_parser = subparsers.add_parser(
        "delete", help="Delete a vehicle (with its history) or an entry"
    )
    delete_parser.add_argument("section", choices=SECTIONS)
    delete_parser.add_argument("entry_id", type=str)
    delete_parser.add_argument(
        "--dry-run", action="store_true", help="Show what would be deleted without saving"
    )

    return parser


COMMANDS = {
    "settings": cmd_settings,
    "set-price": cmd_set_price,
    "deadlines": cmd_deadlines,
    "check": cmd_check,
    "watch": cmd_watch,
    "report": cmd_report,
    "init-maintenance": cmd_init_maintenance,
    "fuel": cmd_fuel,
    "add-vehicle": cmd_add_vehicle,
    "repair": cmd_repair,
    "maintenance": cmd_maintenance,
    "delete": cmd_delete,
}


def main(argv=None):
    args = build_parser().parse_args(argv)

    try:
        Config.validate()
    except ValueError as e:
        print(f"Configuration error: {e}")
        return 1

    logging.basicConfig(
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        level=getattr(logging, Config.LOG_LEVEL.upper()),
        stream=sys.stderr,
    )

    # Validate garage file exists
    if not args.garage_file.exists():
        print(f"Error: File not found: {args.garage_file}")
        return 1

    return COMMANDS[args.command](args)


if __name__ == "__main__":
    sys.exit(main() or 0)
