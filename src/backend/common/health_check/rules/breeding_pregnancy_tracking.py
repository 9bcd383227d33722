from __future__ import annotations

from datetime import timedelta
from typing import Sequence

from ..config import PregnancyTrackingRuleConfig
from ..context import RuleContext, days_overdue
from ..models import BreedingRecord, Category, OverdueFinding, Severity
from ..registry import register_rule
from ..rule import Rule


@register_rule
class BREEDING_PREGNANCY_TRACKING(Rule):
    category = Category.BREEDING.value
    rule_name = "pregnancy_tracking"
    description = "Pregnancies missing expected kidding dates"
    severity = Severity.HIGH
    config_model = PregnancyTrackingRuleConfig
    recommendations = (
        "Verify pregnancy status of overdue animals",
        "Update breeding records with outcomes",
    )

    def check(self, data: Sequence[BreedingRecord], ctx: RuleContext) -> list[OverdueFinding]:
        cfg = self.config(ctx)
        if not cfg.enabled:
            return []

        findings: list[OverdueFinding] = []
        for record in data:
            if (record.status or "").strip().lower() != cfg.pregnant_status.strip().lower():
                continue
            if record.breeding_date is None or record.kidding_date is not None:
                continue
            expected = record.breeding_date + timedelta(days=cfg.gestation_days)
            lateness = days_overdue(expected, ctx.today)
            if lateness < 0:
                continue
            findings.append(
                OverdueFinding(
                    record_id=record.id,
                    subject_id=record.doe_id,
                    label=f"Expected kidding for {record.doe or record.doe_id or 'unknown doe'}",
                    reference_date=record.breeding_date,
                    scheduled_date=expected,
                    days_overdue=lateness,
                )
            )
        return findings
