from __future__ import annotations

from ..config import OrphanedRecordsRuleConfig
from ..context import RuleContext
from ..models import Category, FarmSnapshot, OrphanedReferenceFinding, Severity
from ..registry import register_rule
from ..rule import Rule


@register_rule
class INTEGRITY_ORPHANED_RECORDS(Rule):
    category = Category.INTEGRITY.value
    rule_name = "orphaned_records"
    description = "Records referencing non-existent animals"
    severity = Severity.HIGH
    config_model = OrphanedRecordsRuleConfig

    def check(self, data: FarmSnapshot, ctx: RuleContext) -> list[OrphanedReferenceFinding]:
        cfg = self.config(ctx)
        if not cfg.enabled:
            return []

        animal_ids = {animal.id for animal in data.animals}
        findings: list[OrphanedReferenceFinding] = []

        if cfg.check_health_records:
            for record in data.health_records:
                if record.animal_id not in animal_ids:
                    findings.append(
                        OrphanedReferenceFinding(
                            source_collection="Health Record",
                            record_id=record.id,
                            missing_key=record.animal_id,
                            description=record.treatment or "Health record",
                        )
                    )

        if cfg.check_breeding_records:
            for record in data.breeding_records:
                if record.doe_id not in animal_ids:
                    findings.append(
                        OrphanedReferenceFinding(
                            source_collection="Breeding Record",
                            record_id=record.id,
                            missing_key=record.doe_id,
                            description=f"Breeding with {record.buck or 'unknown buck'}",
                        )
                    )

        return findings
