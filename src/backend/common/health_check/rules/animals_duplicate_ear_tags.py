from __future__ import annotations

from typing import Sequence

from ..config import DuplicateEarTagsRuleConfig
from ..context import RuleContext, is_blank
from ..models import Animal, Category, DuplicateKeyFinding, Severity
from ..registry import register_rule
from ..rule import Rule


@register_rule
class ANIMALS_DUPLICATE_EAR_TAGS(Rule):
    category = Category.ANIMALS.value
    rule_name = "duplicate_ear_tags"
    description = "Duplicate ear tags detected"
    severity = Severity.CRITICAL
    config_model = DuplicateEarTagsRuleConfig
    recommendations = (
        "Assign unique ear tags to affected animals",
        "Implement ear tag validation system",
    )

    def check(self, data: Sequence[Animal], ctx: RuleContext) -> list[DuplicateKeyFinding]:
        cfg = self.config(ctx)
        if not cfg.enabled:
            return []

        # Insertion-ordered, so findings follow first appearance of each key.
        groups: dict[str, list[Animal]] = {}
        for animal in data:
            key = getattr(animal, cfg.key_field, None)
            if is_blank(key):
                continue
            groups.setdefault(str(key), []).append(animal)

        return [
            DuplicateKeyFinding(
                key_field=cfg.key_field,
                key_value=key,
                count=len(animals),
                entity_ids=[a.id for a in animals],
                entity_names=[a.name or "Unnamed" for a in animals],
            )
            for key, animals in groups.items()
            if len(animals) > 1
        ]
