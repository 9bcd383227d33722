from __future__ import annotations

from datetime import datetime, timedelta
from typing import List

from common.health_check.models import HealthCheckResult, Severity

from .models import HealthCheckTask

TASK_DUE_OFFSET_DAYS = {
    Severity.CRITICAL: 1,
    Severity.HIGH: 3,
    Severity.MEDIUM: 7,
}
DEFAULT_DUE_OFFSET_DAYS = 14

TASK_PRIORITY = {
    Severity.CRITICAL: "urgent",
    Severity.HIGH: "high",
    Severity.MEDIUM: "medium",
}
DEFAULT_TASK_PRIORITY = "low"

# Only issues at these severities become tasks.
TASK_SEVERITIES = (Severity.CRITICAL, Severity.HIGH)


def due_offset_days(severity: Severity) -> int:
    return TASK_DUE_OFFSET_DAYS.get(severity, DEFAULT_DUE_OFFSET_DAYS)


def task_priority(severity: Severity) -> str:
    return TASK_PRIORITY.get(severity, DEFAULT_TASK_PRIORITY)


def tasks_from_result(
    result: HealthCheckResult,
    *,
    now: datetime,
    assigned_to: str = "Farm Manager",
) -> List[HealthCheckTask]:
    """One task per recommendation of every CRITICAL/HIGH issue."""
    tasks: List[HealthCheckTask] = []
    for category_id, _, issue in result.iter_issues():
        if issue.severity not in TASK_SEVERITIES:
            continue
        due_date = now.date() + timedelta(days=due_offset_days(issue.severity))
        for index, recommendation in enumerate(issue.recommendations):
            tasks.append(
                HealthCheckTask(
                    task_id=f"{result.run_id}:{category_id}:{issue.rule_name}:{index}",
                    title=f"Health Check: {issue.description}",
                    description=recommendation,
                    priority=task_priority(issue.severity),
                    due_date=due_date,
                    assigned_to=assigned_to,
                    created_at=now,
                    severity=issue.severity,
                )
            )
    return tasks
