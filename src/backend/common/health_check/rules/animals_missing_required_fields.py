from __future__ import annotations

from typing import Sequence

from ..config import MissingRequiredFieldsRuleConfig
from ..context import RuleContext, is_blank
from ..models import Animal, Category, MissingFieldsFinding, Severity
from ..registry import register_rule
from ..rule import Rule


@register_rule
class ANIMALS_MISSING_REQUIRED_FIELDS(Rule):
    category = Category.ANIMALS.value
    rule_name = "missing_required_fields"
    description = "Animals missing required fields"
    severity = Severity.HIGH
    config_model = MissingRequiredFieldsRuleConfig
    recommendations = (
        "Update animal records with missing information",
        "Implement data validation at entry point",
    )

    def check(self, data: Sequence[Animal], ctx: RuleContext) -> list[MissingFieldsFinding]:
        cfg = self.config(ctx)
        if not cfg.enabled:
            return []

        findings: list[MissingFieldsFinding] = []
        for animal in data:
            missing = [name for name in cfg.required_fields if is_blank(getattr(animal, name, None))]
            if not missing:
                continue
            findings.append(
                MissingFieldsFinding(
                    entity_id=animal.id,
                    name=animal.name or "Unnamed",
                    ear_tag=animal.ear_tag,
                    missing=missing,
                )
            )
        return findings
