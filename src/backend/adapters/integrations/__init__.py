"""Translate health check results into task, reminder and notification payloads.

Pure mappers: delivery belongs to whoever consumes the payloads.
"""

from .models import HealthCheckNotification, HealthCheckReminder, HealthCheckTask
from .notifications import notifications_from_result
from .reminders import reminders_from_result
from .tasks import due_offset_days, task_priority, tasks_from_result

__all__ = [
    "HealthCheckNotification",
    "HealthCheckReminder",
    "HealthCheckTask",
    "due_offset_days",
    "notifications_from_result",
    "reminders_from_result",
    "task_priority",
    "tasks_from_result",
]
