"""Deadline reminders for maintenance tasks.

A task is reminded at most once, ever: the ledger of notified task ids is
append-only. Editing or deleting a task does not clear its marker.

Oil changes with a due mileage are checked against the latest odometer
reading and also fire once already overdue. Every other task with a due
date fires only while the date sits in the next seven days.
"""

import logging
from dataclasses import dataclass, field
from datetime import date, datetime, timedelta
from typing import Any, Callable, Dict, Iterable, List, Mapping, Optional, Union

from .mileage import VehicleMileageSample, parse_observed_at
from .records import Maintenance
from .store import KeyValueStore

logger = logging.getLogger(__name__)

NOTIFIED_KEY = "carcare_notified_deadlines"
REMINDER_KM_THRESHOLD = 2000
REMINDER_DAYS_THRESHOLD = 7

# fr-FR digit grouping uses a narrow no-break space
_GROUP_SEPARATOR = "\u202f"

NotifiedDeadlines = Dict[str, bool]
MileageSamples = Union[Mapping[str, VehicleMileageSample], Iterable[VehicleMileageSample]]


@dataclass
class NotificationEvent:
    """What to tell the user about one task."""

    task_id: str
    title: str
    body: str


@dataclass
class CheckResult:
    """Events to deliver and the ledger to persist."""

    to_notify: List[NotificationEvent] = field(default_factory=list)
    notified: NotifiedDeadlines = field(default_factory=dict)


# =============================================================================
# Formatting
# =============================================================================


def format_km(km: float) -> str:
    """Format kilometres with French digit grouping ("12 500")."""
    text = f"{abs(km):,.0f}".replace(",", _GROUP_SEPARATOR)
    return f"-{text}" if km < 0 else text


def format_due_date(due: date) -> str:
    """Format a date as DD/MM/YYYY."""
    return due.strftime("%d/%m/%Y")


def mileage_event(task: Maintenance, km_remaining: float) -> NotificationEvent:
    return NotificationEvent(
        task_id=task.id,
        title="Rappel de vidange imminente",
        body=f"Vidange à prévoir : environ {format_km(km_remaining)} km restants.",
    )


def date_event(task: Maintenance, due: date) -> NotificationEvent:
    return NotificationEvent(
        task_id=task.id,
        title="Rappel d'entretien proche",
        body=f'N\'oubliez pas : "{task.task}" est à faire avant le {format_due_date(due)}.',
    )


# =============================================================================
# Decision
# =============================================================================


def parse_due_date(value: Any) -> Optional[date]:
    """Parse a due date, dropping any time component."""
    observed = parse_observed_at(value)
    return observed.date() if observed else None


def _index_samples(samples: MileageSamples) -> Mapping[str, VehicleMileageSample]:
    if isinstance(samples, Mapping):
        return samples
    return {s.vehicle_id: s for s in samples}


def check_and_notify(
    user_id: str,
    tasks: Iterable[Maintenance],
    mileage_samples: MileageSamples,
    notified: Optional[Mapping[str, bool]],
    now: datetime,
) -> CheckResult:
    """
    Decide which tasks to remind now.

    Tasks are evaluated in input order. The returned ledger is a new
    mapping containing the old entries plus every task notified here; the
    caller must persist it before (or atomically with) delivering.
    """
    ledger: NotifiedDeadlines = dict(notified or {})
    samples = _index_samples(mileage_samples)
    today = now.date()
    horizon = today + timedelta(days=REMINDER_DAYS_THRESHOLD)
    events: List[NotificationEvent] = []

    for task in tasks:
        if ledger.get(task.id):
            continue

        if task.is_mileage_based:
            sample = samples.get(task.vehicle_id)
            if sample is None:
                logger.debug(f"No mileage history for vehicle {task.vehicle_id}, skipping {task.id}")
                continue
            km_remaining = task.next_due_mileage - sample.mileage
            if km_remaining <= REMINDER_KM_THRESHOLD:
                events.append(mileage_event(task, km_remaining))
                ledger[task.id] = True
            continue

        if not task.next_due_date:
            continue
        due = parse_due_date(task.next_due_date)
        if due is None:
            logger.debug(f"Unparseable due date {task.next_due_date!r} on task {task.id}")
            continue
        if today <= due <= horizon:
            events.append(date_event(task, due))
            ledger[task.id] = True

    if events:
        logger.info(f"User {user_id}: {len(events)} deadline reminder(s) to send")
    return CheckResult(to_notify=events, notified=ledger)


# =============================================================================
# Ledger persistence
# =============================================================================


def load_notified(store: KeyValueStore) -> NotifiedDeadlines:
    """Read the ledger; anything malformed reads as empty."""
    raw = store.get(NOTIFIED_KEY)
    if raw is None:
        return {}
    if not isinstance(raw, dict):
        logger.warning("Ignoring malformed notified-deadline ledger")
        return {}
    return {str(k): True for k, v in raw.items() if v}


def save_notified(store: KeyValueStore, notified: Mapping[str, bool]) -> None:
    store.put(NOTIFIED_KEY, {k: True for k, v in notified.items() if v})


class DeadlineNotifier:
    """Runs a check against persisted state and hands events to a deliverer."""

    def __init__(
        self,
        store: KeyValueStore,
        deliver: Callable[[NotificationEvent], None],
    ):
        self.store = store
        self.deliver = deliver

    def run(
        self,
        user_id: str,
        tasks: Iterable[Maintenance],
        mileage_samples: MileageSamples,
        now: Optional[datetime] = None,
    ) -> List[NotificationEvent]:
        """
        Check deadlines, persist the ledger, then deliver.

        Delivery failures are logged and not retried; the task stays marked.
        """
        result = check_and_notify(
            user_id,
            tasks,
            mileage_samples,
            load_notified(self.store),
            now or datetime.now(),
        )
        if not result.to_notify:
            return []

        save_notified(self.store, result.notified)
        for event in result.to_notify:
            try:
                self.deliver(event)
            except Exception as e:
                logger.error(f"Failed to deliver reminder for task {event.task_id}: {e}")
        return result.to_notify
