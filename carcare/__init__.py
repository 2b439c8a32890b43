"""
Personal vehicle care tracking.

This package provides:
- Records: Vehicle, Repair, Maintenance, FuelLog
- Garage: one user's records, with derived odometer readings
- Settings: fuel prices and vignette tables merged over defaults
- Notifier: once-only deadline reminders (date or mileage based)
- ReminderScheduler: periodic, non-overlapping reminder checks
"""

from .records import Vehicle, Repair, Maintenance, FuelLog
from .garage import Garage
from .mileage import VehicleMileageSample, latest_mileage_samples
from .settings import (
    AppSettings,
    VignetteBracket,
    DEFAULT_SETTINGS,
    resolve_settings,
    load_settings,
    save_settings,
    vignette_cost,
)
from .store import KeyValueStore, MemoryStore, YamlFileStore
from .notifier import (
    NotificationEvent,
    CheckResult,
    DeadlineNotifier,
    check_and_notify,
    REMINDER_KM_THRESHOLD,
    REMINDER_DAYS_THRESHOLD,
)
from .scheduler import ReminderScheduler
from .loader import (
    load_garage,
    save_vehicle,
    save_repair,
    save_maintenance,
    save_fuel_log,
    delete_entry,
)

__all__ = [
    "Vehicle",
    "Repair",
    "Maintenance",
    "FuelLog",
    "Garage",
    "VehicleMileageSample",
    "latest_mileage_samples",
    "AppSettings",
    "VignetteBracket",
    "DEFAULT_SETTINGS",
    "resolve_settings",
    "load_settings",
    "save_settings",
    "vignette_cost",
    "KeyValueStore",
    "MemoryStore",
    "YamlFileStore",
    "NotificationEvent",
    "CheckResult",
    "DeadlineNotifier",
    "check_and_notify",
    "REMINDER_KM_THRESHOLD",
    "REMINDER_DAYS_THRESHOLD",
    "ReminderScheduler",
    "load_garage",
    "save_vehicle",
    "save_repair",
    "save_maintenance",
    "save_fuel_log",
    "delete_entry",
]
