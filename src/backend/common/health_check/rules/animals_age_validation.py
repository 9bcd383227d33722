from __future__ import annotations

from typing import Sequence

from ..config import AgeValidationRuleConfig
from ..context import RuleContext
from ..models import Animal, Category, DateRangeFinding, Severity
from ..registry import register_rule
from ..rule import Rule


@register_rule
class ANIMALS_AGE_VALIDATION(Rule):
    category = Category.ANIMALS.value
    rule_name = "age_validation"
    description = "Invalid age calculations"
    severity = Severity.MEDIUM
    config_model = AgeValidationRuleConfig

    def check(self, data: Sequence[Animal], ctx: RuleContext) -> list[DateRangeFinding]:
        cfg = self.config(ctx)
        if not cfg.enabled:
            return []

        max_age_days = cfg.max_age_years * 365
        findings: list[DateRangeFinding] = []
        for animal in data:
            if animal.date_of_birth is None:
                continue
            age_days = (ctx.today - animal.date_of_birth).days
            if age_days < 0:
                problem, message = "future_date", "Future birth date"
            elif age_days >= max_age_days:
                problem, message = "implausible_age", f"Unrealistic age (>{cfg.max_age_years} years)"
            else:
                continue
            findings.append(
                DateRangeFinding(
                    entity_id=animal.id,
                    name=animal.name or "Unnamed",
                    ear_tag=animal.ear_tag,
                    field="date_of_birth",
                    value=animal.date_of_birth,
                    problem=problem,
                    message=message,
                )
            )
        return findings
