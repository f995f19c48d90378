"""
Periodic snapshot scheduler.

A single daemon loop thread that runs one interval job: persisting the
greenhouse record every ``interval_seconds``.

Design Principles:
- Fixed-rate: the next run advances from the scheduled time, not from the
  completion time, so a slow store does not make the cadence drift.
- Missed slots (e.g. the host slept) are skipped rather than piled up.
- No retry or backoff; a failed run is logged and counted, and the next
  slot simply runs again.
"""

from __future__ import annotations

import logging
import threading
import time
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Any, Callable

from app.constants import Intervals
from app.utils.time import utc_now

logger = logging.getLogger(__name__)


@dataclass
class JobResult:
    """Result of one snapshot run."""

    success: bool
    started_at: datetime
    completed_at: datetime
    result: Any = None
    error: str | None = None

    @property
    def duration_seconds(self) -> float:
        return (self.completed_at - self.started_at).total_seconds()


class SnapshotScheduler:
    """Runs a save callable on a fixed interval in a background thread."""

    def __init__(
        self,
        save_fn: Callable[[], Any],
        interval_seconds: int = Intervals.SNAPSHOT_SAVE_DEFAULT,
        *,
        check_interval: float = Intervals.SCHEDULER_CHECK,
        name: str = "SnapshotScheduler",
    ):
        if interval_seconds <= 0:
            raise ValueError("interval_seconds must be positive")

        self._save_fn = save_fn
        self.interval_seconds = int(interval_seconds)
        self._check_interval = check_interval
        self._name = name

        self._running = False
        self._thread: threading.Thread | None = None
        self._lock = threading.Lock()

        self.next_run: datetime | None = None
        self.last_run: datetime | None = None
        self.last_result: JobResult | None = None
        self.run_count = 0
        self.success_count = 0
        self.failure_count = 0
        self.last_error: str | None = None

    # ==================== Scheduler Control ====================

    def start(self) -> None:
        """Start the scheduler background thread; the first run is one interval away."""
        if self._running:
            logger.warning("Scheduler already running")
            return

        with self._lock:
            self.next_run = utc_now() + timedelta(seconds=self.interval_seconds)

        self._running = True
        self._thread = threading.Thread(target=self._run_loop, daemon=True, name=self._name)
        self._thread.start()
        logger.info("%s started (every %ss)", self._name, self.interval_seconds)

    def stop(self, wait: bool = True, timeout: float = 5.0) -> None:
        """
        Stop the scheduler.

        Args:
            wait: Wait for scheduler thread to finish
            timeout: Maximum wait time in seconds
        """
        if not self._running:
            return

        self._running = False
        if wait and self._thread:
            self._thread.join(timeout=timeout)
        self._thread = None

        with self._lock:
            self.next_run = None
        logger.info("%s stopped", self._name)

    def shutdown(self, wait: bool = True, timeout: float = 5.0) -> None:
        """Alias for stop(); matches other services' shutdown() convention."""
        self.stop(wait=wait, timeout=timeout)

    def is_running(self) -> bool:
        return self._running

    def _run_loop(self) -> None:
        logger.debug("Scheduler loop started")

        while self._running:
            try:
                self._process_due()
                time.sleep(self._check_interval)
            except Exception as e:
                logger.error("Error in scheduler loop: %s", e, exc_info=True)
                time.sleep(1)

        logger.debug("Scheduler loop ended")

    # ==================== Core Scheduling Logic ====================

    def _process_due(self, now: datetime | None = None) -> bool:
        """Run the job if its slot has arrived. Returns True when it ran."""
        now = now or utc_now()
        with self._lock:
            scheduled_for = self.next_run
            if scheduled_for is None or scheduled_for > now:
                return False
            # Advance before executing so a long run cannot cause a missed slot
            self.next_run = self._calculate_next_run(scheduled_for, now)

        self.run_now()
        return True

    def _calculate_next_run(self, scheduled_for: datetime, now: datetime) -> datetime:
        next_run = scheduled_for + timedelta(seconds=self.interval_seconds)
        if next_run <= now:
            skips = int((now - next_run).total_seconds() // self.interval_seconds) + 1
            next_run += timedelta(seconds=skips * self.interval_seconds)
        return next_run

    def run_now(self) -> JobResult:
        """Execute the save callable immediately and record the outcome."""
        started_at = utc_now()
        try:
            result = self._save_fn()
        except Exception as e:
            completed_at = utc_now()
            job_result = JobResult(
                success=False,
                started_at=started_at,
                completed_at=completed_at,
                error=str(e),
            )
            with self._lock:
                self.run_count += 1
                self.failure_count += 1
                self.last_error = str(e)
                self.last_run = completed_at
                self.last_result = job_result
            logger.error("Scheduled snapshot failed: %s", e, exc_info=True)
            return job_result

        completed_at = utc_now()
        job_result = JobResult(success=True, started_at=started_at, completed_at=completed_at, result=result)
        with self._lock:
            self.run_count += 1
            self.success_count += 1
            self.last_run = completed_at
            self.last_result = job_result
        logger.debug("Scheduled snapshot completed in %.3fs", job_result.duration_seconds)
        return job_result

    # ==================== Status ====================

    def get_status(self) -> dict[str, Any]:
        """Get scheduler status."""
        with self._lock:
            return {
                "running": self._running,
                "interval_seconds": self.interval_seconds,
                "run_count": self.run_count,
                "success_count": self.success_count,
                "failure_count": self.failure_count,
                "last_error": self.last_error,
                "last_run": self.last_run.isoformat() if self.last_run else None,
                "next_run": self.next_run.isoformat() if self.next_run else None,
            }
