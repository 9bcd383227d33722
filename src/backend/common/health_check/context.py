from __future__ import annotations

import calendar
from dataclasses import dataclass, field
from datetime import date
from typing import Any, NamedTuple, Tuple

from .config import HealthCheckConfig
from .models import Animal, Category, FarmSnapshot, HealthRecord


class HealthSlice(NamedTuple):
    health_records: Tuple[HealthRecord, ...]
    animals: Tuple[Animal, ...]


@dataclass(frozen=True)
class RuleContext:
    today: date
    config: HealthCheckConfig = field(default_factory=HealthCheckConfig)


def select_slice(category: str, snapshot: FarmSnapshot) -> Any:
    """Return the data a rule in `category` receives.

    Unknown (custom) categories receive the full snapshot.
    """
    if category == Category.ANIMALS:
        return snapshot.animals
    if category == Category.HEALTH:
        return HealthSlice(health_records=snapshot.health_records, animals=snapshot.animals)
    if category == Category.BREEDING:
        return snapshot.breeding_records
    if category == Category.FINANCIAL:
        return snapshot.transactions
    if category == Category.FEED:
        return snapshot.feed_records
    return snapshot


def days_overdue(scheduled: date, today: date) -> int:
    """Whole days elapsed since `scheduled`; 0 on the day itself, negative before it."""
    return (today - scheduled).days


def shift_months(d: date, months: int) -> date:
    """
    Shift `d` by `months` calendar months (negative allowed), clamping the day to the end of the target month.
    """
    total_months = (d.year * 12 + (d.month - 1)) + months
    year = total_months // 12
    month = (total_months % 12) + 1
    last_day = calendar.monthrange(year, month)[1]
    return date(year, month, min(d.day, last_day))


def is_blank(value: Any) -> bool:
    if value is None:
        return True
    if isinstance(value, str):
        return not value.strip()
    return False
