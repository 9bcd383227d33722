from __future__ import annotations

from typing import Sequence

from ..config import MissingReceiptsRuleConfig
from ..context import RuleContext, is_blank
from ..models import Category, MissingDocumentationFinding, Severity, Transaction
from ..registry import register_rule
from ..rule import Rule


@register_rule
class FINANCIAL_MISSING_RECEIPTS(Rule):
    category = Category.FINANCIAL.value
    rule_name = "missing_receipts"
    description = "Transactions missing receipt documentation"
    severity = Severity.MEDIUM
    config_model = MissingReceiptsRuleConfig

    def check(self, data: Sequence[Transaction], ctx: RuleContext) -> list[MissingDocumentationFinding]:
        cfg = self.config(ctx)
        if not cfg.enabled:
            return []

        return [
            MissingDocumentationFinding(
                record_id=txn.id,
                description=txn.description,
                amount=txn.amount,
                date=txn.date,
                category=txn.category,
            )
            for txn in data
            if txn.amount > cfg.amount_threshold and is_blank(txn.receipt) and is_blank(txn.documentation)
        ]
