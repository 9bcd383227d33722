from __future__ import annotations

from datetime import date

from ..config import MissingRecentCheckupsRuleConfig
from ..context import HealthSlice, RuleContext, shift_months
from ..models import Category, Severity, StalenessFinding
from ..registry import register_rule
from ..rule import Rule


@register_rule
class HEALTH_MISSING_RECENT_CHECKUPS(Rule):
    category = Category.HEALTH.value
    rule_name = "missing_recent_checkups"
    description = "Animals missing recent health checkups"
    severity = Severity.HIGH
    config_model = MissingRecentCheckupsRuleConfig
    recommendations = (
        "Schedule health checkups for affected animals",
        "Set up automated health check reminders",
    )

    def check(self, data: HealthSlice, ctx: RuleContext) -> list[StalenessFinding]:
        cfg = self.config(ctx)
        if not cfg.enabled:
            return []

        window_start = shift_months(ctx.today, -cfg.window_months)

        # Latest record date per animal; records without a date never count as a checkup.
        last_seen: dict[str, date] = {}
        for record in data.health_records:
            if record.animal_id is None or record.date is None:
                continue
            current = last_seen.get(record.animal_id)
            if current is None or record.date > current:
                last_seen[record.animal_id] = record.date

        findings: list[StalenessFinding] = []
        for animal in data.animals:
            latest = last_seen.get(animal.id)
            if latest is not None and latest > window_start:
                continue
            findings.append(
                StalenessFinding(
                    entity_id=animal.id,
                    name=animal.name or "Unnamed",
                    ear_tag=animal.ear_tag,
                    last_seen=latest,
                    window_start=window_start,
                )
            )
        return findings
