from __future__ import annotations

from datetime import datetime
from typing import List

from common.health_check.models import HealthCheckResult, Severity

from .models import HealthCheckReminder


def reminders_from_result(
    result: HealthCheckResult,
    *,
    now: datetime,
    time_of_day: str = "08:00",
) -> List[HealthCheckReminder]:
    """One same-day reminder per CRITICAL issue."""
    return [
        HealthCheckReminder(
            reminder_id=f"{result.run_id}:{category_id}:{issue.rule_name}",
            title=f"Critical Issue: {issue.description}",
            description=(
                f"Health check found {issue.count} critical issues that need immediate attention."
            ),
            date=now.date(),
            time=time_of_day,
        )
        for category_id, _, issue in result.iter_issues()
        if issue.severity == Severity.CRITICAL
    ]
