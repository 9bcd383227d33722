from __future__ import annotations

from datetime import datetime
from typing import List

from common.health_check.models import HealthCheckResult, Severity

from .models import HealthCheckNotification


def notifications_from_result(
    result: HealthCheckResult,
    *,
    now: datetime,
    min_severity: Severity = Severity.HIGH,
) -> List[HealthCheckNotification]:
    """One notification per issue at or above `min_severity`, most urgent first."""
    notifications = [
        HealthCheckNotification(
            notification_id=f"{result.run_id}:{category_id}:{issue.rule_name}",
            title=f"{issue.severity.value}: {issue.description}",
            message=f"Found {issue.count} issues in {category.name}",
            severity=issue.severity,
            timestamp=now,
            category=category_id,
            rule_name=issue.rule_name,
        )
        for category_id, category, issue in result.iter_issues()
        if issue.severity.at_least(min_severity)
    ]
    # Stable sort keeps run order within a severity.
    notifications.sort(key=lambda n: n.severity.priority)
    return notifications
