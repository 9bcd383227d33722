from __future__ import annotations

import logging
import threading
from dataclasses import asdict, dataclass
from datetime import datetime, timedelta, timezone
from typing import Any, Callable, Dict, Optional

logger = logging.getLogger(__name__)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


@dataclass
class SchedulerStatus:
    enabled: bool = False
    interval_hours: Optional[float] = None
    last_run_at: Optional[str] = None
    next_run_at: Optional[str] = None
    last_run_status: Optional[str] = None
    last_error: Optional[str] = None
    skipped_runs: int = 0


class HealthCheckScheduler:
    """Recurring background trigger for health check runs.

    At most one schedule is active. Each tick takes `guard` without blocking and is skipped
    when another run (manual or scheduled) already holds it. `on_result` receives the job's
    return value after `guard` is released.
    """

    def __init__(
        self,
        job: Callable[[], Any],
        *,
        guard: Optional[threading.Lock] = None,
        on_result: Optional[Callable[[Any], None]] = None,
        clock: Callable[[], datetime] = _utcnow,
    ):
        self._job = job
        self._guard = guard or threading.Lock()
        self._on_result = on_result
        self._clock = clock
        self._lock = threading.Lock()
        self._stop_event: Optional[threading.Event] = None
        self._thread: Optional[threading.Thread] = None
        self._status = SchedulerStatus()

    @property
    def is_running(self) -> bool:
        with self._lock:
            return self._thread is not None and self._thread.is_alive()

    def get_status(self) -> Dict[str, Any]:
        with self._lock:
            return asdict(self._status)

    def start(self, interval_hours: float) -> None:
        """Start (or restart with a new interval) the recurring schedule."""
        if interval_hours <= 0:
            raise ValueError(f"interval_hours must be positive, got {interval_hours}")
        interval_seconds = interval_hours * 3600

        with self._lock:
            replaced = self._stop_locked()
            stop_event = threading.Event()
            thread = threading.Thread(
                target=self._run_loop,
                args=(stop_event, interval_seconds),
                name="health-check-scheduler",
                daemon=True,
            )
            self._stop_event = stop_event
            self._thread = thread
            self._status.enabled = True
            self._status.interval_hours = interval_hours
            self._status.next_run_at = (self._clock() + timedelta(seconds=interval_seconds)).isoformat()
            thread.start()

        if replaced:
            logger.info("Auto health check rescheduled (every %sh)", interval_hours)
        else:
            logger.info("Auto health check started (every %sh)", interval_hours)

    def stop(self) -> None:
        """Cancel future ticks. A run already in progress is left to finish."""
        with self._lock:
            stopped = self._stop_locked()
            self._status.enabled = False
            self._status.next_run_at = None
        if stopped:
            logger.info("Auto health check stopped")

    def tick(self) -> bool:
        """Run the job once unless a run is already in flight. Returns False when skipped."""
        if not self._guard.acquire(blocking=False):
            with self._lock:
                self._status.skipped_runs += 1
            logger.warning("Skipping scheduled health check: a run is already in progress")
            return False

        value = None
        try:
            value = self._job()
        except Exception as exc:
            logger.exception("Scheduled health check failed")
            outcome, error = "error", str(exc)
        else:
            outcome, error = "ok", None
        finally:
            self._guard.release()

        with self._lock:
            self._status.last_run_at = self._clock().isoformat()
            self._status.last_run_status = outcome
            self._status.last_error = error

        if outcome == "ok" and self._on_result is not None:
            try:
                self._on_result(value)
            except Exception:
                logger.exception("Scheduled health check result handler failed")
        return True

    def _stop_locked(self) -> bool:
        if self._stop_event is None:
            return False
        # No join: the loop exits after any tick it is currently running.
        self._stop_event.set()
        self._stop_event = None
        self._thread = None
        return True

    def _run_loop(self, stop_event: threading.Event, interval_seconds: float) -> None:
        while not stop_event.wait(interval_seconds):
            self.tick()
            with self._lock:
                if self._stop_event is stop_event:
                    self._status.next_run_at = (
                        self._clock() + timedelta(seconds=interval_seconds)
                    ).isoformat()
