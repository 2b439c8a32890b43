"""Periodic deadline checks, one interval job per active user."""

import logging
import threading
from datetime import datetime, timedelta
from typing import Callable, Dict, Optional

from apscheduler.job import Job
from apscheduler.jobstores.base import JobLookupError
from apscheduler.schedulers.background import BackgroundScheduler

logger = logging.getLogger(__name__)

DEFAULT_CHECK_INTERVAL = timedelta(hours=6)


class ReminderScheduler:
    """
    Run ``check(user_id)`` once on start, then on a fixed interval.

    Checks for the same user never overlap: the interval job allows a
    single running instance, and a direct call that finds one already in
    flight is skipped.
    """

    def __init__(
        self,
        check: Callable[[str], object],
        interval: timedelta = DEFAULT_CHECK_INTERVAL,
    ):
        self.check = check
        self.interval = interval
        self._scheduler: Optional[BackgroundScheduler] = None
        self._guard = threading.Lock()
        self._in_flight: Dict[str, threading.Lock] = {}

    @staticmethod
    def job_id(user_id: str) -> str:
        return f"reminders-{user_id}"

    def _user_lock(self, user_id: str) -> threading.Lock:
        with self._guard:
            if user_id not in self._in_flight:
                self._in_flight[user_id] = threading.Lock()
            return self._in_flight[user_id]

    def run_once(self, user_id: str) -> bool:
        """Run a check now. Returns False if one was already running."""
        lock = self._user_lock(user_id)
        if not lock.acquire(blocking=False):
            logger.info(f"Deadline check already running for {user_id}, skipping")
            return False
        try:
            self.check(user_id)
        except Exception as e:
            logger.error(f"Deadline check failed for {user_id}: {e}")
        finally:
            lock.release()
        return True

    def get_job(self, user_id: str) -> Optional[Job]:
        if self._scheduler is None:
            return None
        return self._scheduler.get_job(self.job_id(user_id))

    def start(self, user_id: str) -> None:
        """Schedule the periodic check for a user (no-op if already scheduled)."""
        with self._guard:
            if self.get_job(user_id) is not None:
                return
            if self._scheduler is None or not self._scheduler.running:
                self._scheduler = BackgroundScheduler(daemon=True)
                self._scheduler.start()
            self._scheduler.add_job(
                self.run_once,
                "interval",
                seconds=self.interval.total_seconds(),
                args=[user_id],
                id=self.job_id(user_id),
                next_run_time=datetime.now(),
                max_instances=1,
                coalesce=True,
                replace_existing=True,
            )
        logger.info(
            f"Reminder checks scheduled for {user_id} "
            f"(interval: {self.interval.total_seconds():.0f}s)"
        )

    def is_running(self, user_id: str) -> bool:
        return self.get_job(user_id) is not None

    def stop(self, user_id: str, timeout: float = 5.0) -> None:
        """Unschedule a user's check and wait for a running one to finish."""
        if self._scheduler is not None:
            try:
                self._scheduler.remove_job(self.job_id(user_id))
            except JobLookupError:
                logger.debug(f"No reminder job scheduled for {user_id}")
        lock = self._in_flight.get(user_id)
        if lock is not None and lock.acquire(timeout=timeout):
            lock.release()

    def stop_all(self) -> None:
        """Unschedule every user and shut the background scheduler down."""
        with self._guard:
            scheduler, self._scheduler = self._scheduler, None
        if scheduler is not None and scheduler.running:
            scheduler.remove_all_jobs()
            scheduler.shutdown(wait=True)
