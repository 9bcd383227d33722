from __future__ import annotations

from typing import Sequence

from ..config import IrregularFeedingRuleConfig
from ..context import RuleContext
from ..models import Category, FeedRecord, IntervalGapFinding, Severity
from ..registry import register_rule
from ..rule import Rule


@register_rule
class FEED_IRREGULAR_FEEDING(Rule):
    category = Category.FEED.value
    rule_name = "irregular_feeding"
    description = "Irregular feeding patterns detected"
    severity = Severity.MEDIUM
    config_model = IrregularFeedingRuleConfig

    def check(self, data: Sequence[FeedRecord], ctx: RuleContext) -> list[IntervalGapFinding]:
        cfg = self.config(ctx)
        if not cfg.enabled:
            return []

        # sorted() is stable and leaves the snapshot untouched.
        dated = sorted((r for r in data if r.date is not None), key=lambda r: r.date)
        findings: list[IntervalGapFinding] = []
        for previous, current in zip(dated, dated[1:]):
            gap = (current.date - previous.date).days
            if gap > cfg.max_gap_days:
                findings.append(
                    IntervalGapFinding(
                        start=previous.date,
                        end=current.date,
                        gap_days=gap,
                        label=current.feed_type,
                    )
                )
        return findings
