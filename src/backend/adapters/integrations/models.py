from __future__ import annotations

import datetime as dt
from datetime import date, datetime

from pydantic import BaseModel

from common.health_check.models import Severity

HEALTH_CHECK_SOURCE = "health-check"


class HealthCheckTask(BaseModel):
    task_id: str
    title: str
    description: str
    priority: str
    due_date: date
    category: str = "Health Check"
    status: str = "pending"
    assigned_to: str = "Farm Manager"
    created_at: datetime
    source: str = HEALTH_CHECK_SOURCE
    severity: Severity


class HealthCheckReminder(BaseModel):
    reminder_id: str
    title: str
    description: str
    date: dt.date
    time: str
    type: str = HEALTH_CHECK_SOURCE
    recurring: bool = False
    completed: bool = False
    priority: str = "high"
    source: str = HEALTH_CHECK_SOURCE


class HealthCheckNotification(BaseModel):
    notification_id: str
    title: str
    message: str
    severity: Severity
    timestamp: datetime
    category: str
    rule_name: str
    read: bool = False
    source: str = HEALTH_CHECK_SOURCE
