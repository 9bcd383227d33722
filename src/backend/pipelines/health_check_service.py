from __future__ import annotations

import logging
import threading
from datetime import datetime, timezone
from typing import Callable, Dict, List, Optional, Tuple, Union

from pydantic import BaseModel, Field

from adapters.integrations import (
    HealthCheckNotification,
    HealthCheckReminder,
    HealthCheckTask,
    notifications_from_result,
    reminders_from_result,
    tasks_from_result,
)
from common.health_check.config import HealthCheckConfig
from common.health_check.errors import NoPriorResultError
from common.health_check.models import HealthCheckResult, HistoryEntry, Issue, Severity
from common.health_check.registry import RuleRegistry
from common.health_check.reports import ReportFormat, generate_report
from common.health_check.rule import RuleLike
from common.health_check.runner import HealthCheckRunner
from common.health_check.scheduler import HealthCheckScheduler

from .data_source import FarmDataSource
from .history import HistoryStore
from .state_store import InMemoryStateStore, StateStore

logger = logging.getLogger(__name__)

CompletionListener = Callable[[HealthCheckResult], None]
TaskSink = Callable[[List[HealthCheckTask]], None]
ReminderSink = Callable[[List[HealthCheckReminder]], None]
NotificationSink = Callable[[List[HealthCheckNotification]], None]


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class SystemStatus(BaseModel):
    last_check_timestamp: Optional[datetime] = None
    auto_check_enabled: bool = False
    total_rule_count: int = 0
    notification_count: int = 0
    integrations: Dict[str, bool] = Field(default_factory=dict)


class FarmRecordsHealthCheck:
    """Public entry point: runs health checks, keeps the last result, and feeds integrations.

    Runs are single-flight: a manual run waits for one in progress, a scheduled tick skips.
    Completion listeners are called after the run lock is released.
    """

    def __init__(
        self,
        data_source: FarmDataSource,
        *,
        state_store: Optional[StateStore] = None,
        config: Optional[HealthCheckConfig] = None,
        registry: Optional[RuleRegistry] = None,
        task_sink: Optional[TaskSink] = None,
        reminder_sink: Optional[ReminderSink] = None,
        notification_sink: Optional[NotificationSink] = None,
        clock: Callable[[], datetime] = _utcnow,
    ):
        self.config = config or HealthCheckConfig()
        self.registry = registry if registry is not None else RuleRegistry.with_builtin_rules()
        self._data_source = data_source
        self._history = HistoryStore(
            state_store if state_store is not None else InMemoryStateStore(),
            max_entries=self.config.history_max_entries,
        )
        self._runner = HealthCheckRunner(self.registry, config=self.config, clock=clock)
        self._clock = clock
        self._task_sink = task_sink
        self._reminder_sink = reminder_sink
        self._notification_sink = notification_sink

        self._run_lock = threading.Lock()
        self._listeners: List[CompletionListener] = []
        self._notifications: List[HealthCheckNotification] = []
        self.scheduler = HealthCheckScheduler(
            self._run_scheduled_check,
            guard=self._run_lock,
            on_result=self._after_scheduled_check,
            clock=clock,
        )

        self._last_result: Optional[HealthCheckResult] = self._history.load_last()
        if self._last_result is not None:
            logger.info("Restored last health check from %s", self._last_result.timestamp.isoformat())

    # ============ RUNS ============

    @property
    def last_result(self) -> Optional[HealthCheckResult]:
        return self._last_result

    def run_full_health_check(self) -> HealthCheckResult:
        with self._run_lock:
            result = self._run_locked()
        self._emit(result)
        return result

    def _run_scheduled_check(self) -> HealthCheckResult:
        # Called by the scheduler with the run lock already held.
        return self._run_locked()

    def _after_scheduled_check(self, result: HealthCheckResult) -> None:
        self._emit(result)
        critical = self.get_critical_issues(result)
        if critical:
            logger.warning(
                "Automatic health check found %d critical issues requiring immediate attention",
                len(critical),
            )
        else:
            logger.info("Automatic health check completed")

    def _run_locked(self) -> HealthCheckResult:
        snapshot = self._data_source.load_snapshot()
        result = self._runner.run(snapshot)
        self._last_result = result
        self._history.save_result(result)
        return result

    def on_complete(self, listener: CompletionListener) -> Callable[[], None]:
        """Register a callback invoked with every completed result. Returns an unsubscribe function."""
        self._listeners.append(listener)

        def _unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return _unsubscribe

    def _emit(self, result: HealthCheckResult) -> None:
        for listener in list(self._listeners):
            try:
                listener(result)
            except Exception:
                logger.exception("Health check completion listener failed")

    # ============ REPORTING ============

    def export_report(self, fmt: Union[ReportFormat, str] = ReportFormat.STYLED_DOCUMENT) -> str:
        if self._last_result is None:
            raise NoPriorResultError()
        return generate_report(self._last_result, fmt)

    def get_health_check_history(self) -> List[HistoryEntry]:
        return self._history.get_history()

    def get_system_status(self) -> SystemStatus:
        return SystemStatus(
            last_check_timestamp=self._last_result.timestamp if self._last_result else None,
            auto_check_enabled=self.scheduler.is_running,
            total_rule_count=self.registry.rule_count(),
            notification_count=len(self._notifications),
            integrations={
                "tasks": self._task_sink is not None,
                "reminders": self._reminder_sink is not None,
                "notifications": self._notification_sink is not None,
            },
        )

    @staticmethod
    def get_critical_issues(result: HealthCheckResult) -> List[Tuple[str, Issue]]:
        return [
            (category_id, issue)
            for category_id, _, issue in result.iter_issues()
            if issue.severity == Severity.CRITICAL
        ]

    # ============ RULES ============

    def add_custom_validation_rule(self, category: str, rule_name: str, rule: RuleLike) -> None:
        self.registry.add(category, rule_name, rule)
        logger.info("Added custom validation rule: %s.%s", category, rule_name)

    def remove_validation_rule(self, category: str, rule_name: str) -> None:
        if self.registry.remove(category, rule_name):
            logger.info("Removed validation rule: %s.%s", category, rule_name)

    # ============ AUTO HEALTH CHECK ============

    def start_auto_health_check(self, interval_hours: Optional[float] = None) -> None:
        self.scheduler.start(interval_hours or self.config.auto_check_interval_hours)

    def stop_auto_health_check(self) -> None:
        self.scheduler.stop()

    # ============ INTEGRATIONS ============

    def integrate_with_task_manager(self) -> List[HealthCheckTask]:
        if self._last_result is None:
            return []
        tasks = tasks_from_result(self._last_result, now=self._clock(), assigned_to=self.config.assigned_to)
        if self._task_sink is not None and tasks:
            self._task_sink(tasks)
        return tasks

    def integrate_with_reminders(self) -> List[HealthCheckReminder]:
        if self._last_result is None:
            return []
        reminders = reminders_from_result(
            self._last_result, now=self._clock(), time_of_day=self.config.reminder_time
        )
        if self._reminder_sink is not None and reminders:
            self._reminder_sink(reminders)
        return reminders

    def integrate_with_notifications(self) -> List[HealthCheckNotification]:
        if self._last_result is None:
            return []
        notifications = notifications_from_result(
            self._last_result, now=self._clock(), min_severity=self.config.notification_min_severity
        )
        self._notifications.extend(notifications)
        if self._notification_sink is not None and notifications:
            self._notification_sink(notifications)
        return notifications
