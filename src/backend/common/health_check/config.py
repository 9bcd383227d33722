from __future__ import annotations

import os
from decimal import Decimal
from pathlib import Path
from typing import Any, Dict, List, Optional, Type, TypeVar

import yaml
from pydantic import BaseModel, Field

from .models import Severity

T = TypeVar("T", bound=BaseModel)

CONFIG_PATH_ENV = "FARM_HEALTH_CONFIG"


class RuleConfigBase(BaseModel):
    # Disabled rules run as "no findings" so category counts stay complete.
    enabled: bool = True


class MissingRequiredFieldsRuleConfig(RuleConfigBase):
    required_fields: List[str] = Field(
        default_factory=lambda: ["name", "ear_tag", "breed", "gender", "date_of_birth"]
    )


class DuplicateEarTagsRuleConfig(RuleConfigBase):
    key_field: str = "ear_tag"


class AgeValidationRuleConfig(RuleConfigBase):
    # Ages are whole days; a year is 365 days. Reaching the limit already counts as implausible.
    max_age_years: int = 20


class MissingRecentCheckupsRuleConfig(RuleConfigBase):
    # Calendar months, counted back from today.
    window_months: int = 6


class ExpiredTreatmentsRuleConfig(RuleConfigBase):
    pass


class PregnancyTrackingRuleConfig(RuleConfigBase):
    gestation_days: int = 150
    pregnant_status: str = "pregnant"


class MissingReceiptsRuleConfig(RuleConfigBase):
    # Transactions strictly above this amount require a receipt or documentation.
    amount_threshold: Decimal = Decimal("1000")


class IrregularFeedingRuleConfig(RuleConfigBase):
    # Gaps strictly longer than this many days are flagged.
    max_gap_days: int = 3


class OrphanedRecordsRuleConfig(RuleConfigBase):
    check_health_records: bool = True
    check_breeding_records: bool = True


class HealthCheckConfig(BaseModel):
    """Engine-wide settings plus per-rule configuration.

    Rules pull their typed config via `get_rule_config`.
    """

    auto_check_interval_hours: float = 24
    notification_min_severity: Severity = Severity.HIGH
    history_max_entries: Optional[int] = None
    rule_timeout_seconds: Optional[float] = None
    reminder_time: str = "08:00"
    assigned_to: str = "Farm Manager"
    # Overall recommendation triggers (strictly greater than).
    high_issue_threshold: int = 5
    total_issue_threshold: int = 20

    rules: Dict[str, Dict[str, Any]] = Field(default_factory=dict)

    def get_rule_config(
        self,
        rule_name: str,
        model: Type[T],
        default: Optional[T] = None,
    ) -> T:
        if rule_name not in self.rules:
            if default is not None:
                return default
            return model()  # type: ignore[call-arg]
        raw = self.rules.get(rule_name, {})
        return model.model_validate(raw)


def load_config(path: str | Path | None = None) -> HealthCheckConfig:
    """Load settings from a YAML file.

    Falls back to `$FARM_HEALTH_CONFIG`, and to defaults when neither is set or the file does not exist.
    """
    if path is None:
        path = os.getenv(CONFIG_PATH_ENV, "").strip() or None
    if path is None:
        return HealthCheckConfig()
    config_path = Path(path)
    if not config_path.exists():
        return HealthCheckConfig()
    with config_path.open("r", encoding="utf-8") as handle:
        raw = yaml.safe_load(handle) or {}
    if not isinstance(raw, dict):
        raise ValueError(f"Health check config must be a mapping: {config_path}")
    return HealthCheckConfig.model_validate(raw)
