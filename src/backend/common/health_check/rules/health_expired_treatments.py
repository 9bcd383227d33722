from __future__ import annotations

from typing import Sequence

from ..config import ExpiredTreatmentsRuleConfig
from ..context import HealthSlice, RuleContext, days_overdue
from ..models import Category, HealthRecord, OverdueFinding, Severity
from ..registry import register_rule
from ..rule import Rule


@register_rule
class HEALTH_EXPIRED_TREATMENTS(Rule):
    category = Category.HEALTH.value
    rule_name = "expired_treatments"
    description = "Treatments with expired follow-up dates"
    severity = Severity.CRITICAL
    config_model = ExpiredTreatmentsRuleConfig
    recommendations = (
        "Schedule follow-up treatments immediately",
        "Review treatment protocols",
    )

    def check(self, data: HealthSlice, ctx: RuleContext) -> list[OverdueFinding]:
        cfg = self.config(ctx)
        if not cfg.enabled:
            return []

        records: Sequence[HealthRecord] = data.health_records
        findings: list[OverdueFinding] = []
        for record in records:
            if record.follow_up_date is None:
                continue
            lateness = days_overdue(record.follow_up_date, ctx.today)
            if lateness < 0:
                continue
            findings.append(
                OverdueFinding(
                    record_id=record.id,
                    subject_id=record.animal_id,
                    label=record.treatment or "Follow-up",
                    reference_date=record.date,
                    scheduled_date=record.follow_up_date,
                    days_overdue=lateness,
                )
            )
        return findings
