from __future__ import annotations

import json
import logging
import time
import uuid
from concurrent.futures import ThreadPoolExecutor
from concurrent.futures import TimeoutError as FutureTimeoutError
from datetime import date, datetime, timezone
from typing import Any, Callable, Dict, List, Mapping, Optional

from .config import HealthCheckConfig
from .context import RuleContext, select_slice
from .errors import RuleExecutionError
from .models import (
    CategoryResult,
    DateRangeFinding,
    DuplicateKeyFinding,
    FarmSnapshot,
    GenericFinding,
    HealthCheckResult,
    HealthSummary,
    IntervalGapFinding,
    Issue,
    MissingDocumentationFinding,
    MissingFieldsFinding,
    OrphanedReferenceFinding,
    OverdueFinding,
    Severity,
    StalenessFinding,
    category_display_name,
)
from .recommendations import issue_recommendations, overall_recommendations
from .registry import RuleRegistry
from .rule import Rule

logger = logging.getLogger(__name__)

_FINDING_TYPES = (
    MissingFieldsFinding,
    DuplicateKeyFinding,
    DateRangeFinding,
    StalenessFinding,
    OverdueFinding,
    MissingDocumentationFinding,
    IntervalGapFinding,
    OrphanedReferenceFinding,
    GenericFinding,
)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class HealthCheckRunner:
    """Runs every registered rule against one snapshot and aggregates a `HealthCheckResult`.

    A rule that raises (or times out) is logged and treated as having no findings;
    it never aborts the run.
    """

    def __init__(
        self,
        registry: Optional[RuleRegistry] = None,
        *,
        config: Optional[HealthCheckConfig] = None,
        clock: Callable[[], datetime] = _utcnow,
    ):
        self.registry = registry if registry is not None else RuleRegistry.with_builtin_rules()
        self.config = config or HealthCheckConfig()
        self._clock = clock

    def run(self, snapshot: FarmSnapshot, *, today: Optional[date] = None) -> HealthCheckResult:
        started = time.perf_counter()
        timestamp = self._clock()
        ctx = RuleContext(today=today or timestamp.date(), config=self.config)
        catalog = self.registry.items()
        logger.info(
            "Starting farm records health check (%d rules in %d categories)",
            sum(len(rules) for _, rules in catalog),
            len(catalog),
        )

        categories: Dict[str, CategoryResult] = {}
        severity_counts: Dict[Severity, int] = {severity: 0 for severity in Severity}
        total_issues = 0

        for category, rules in catalog:
            data = select_slice(category, snapshot)
            issues: List[Issue] = []
            passed = 0
            for rule_name, rule in rules:
                findings = self._execute(category, rule_name, rule, data, ctx)
                if not findings:
                    passed += 1
                    continue
                issues.append(
                    Issue(
                        rule_name=rule_name,
                        description=rule.description,
                        severity=rule.severity,
                        count=len(findings),
                        findings=findings,
                        recommendations=issue_recommendations(rule),
                    )
                )
                total_issues += len(findings)
                # Severity is attributed per rule, scaled by how many findings it produced.
                severity_counts[rule.severity] += len(findings)

            categories[category] = CategoryResult(
                name=category_display_name(category),
                issues=issues,
                passed_rule_count=passed,
                failed_rule_count=len(issues),
            )

        summary = HealthSummary(
            total_issues=total_issues,
            **{severity.summary_field: count for severity, count in severity_counts.items()},
        )
        duration_ms = round((time.perf_counter() - started) * 1000, 3)
        result = HealthCheckResult(
            run_id=str(uuid.uuid4()),
            timestamp=timestamp,
            duration_ms=duration_ms,
            categories=categories,
            summary=summary,
            recommendations=overall_recommendations(summary, self.config),
        )
        logger.info(
            "Health check completed in %.1fms: %d issues across %d categories",
            duration_ms,
            summary.total_issues,
            len(categories),
        )
        return result

    def _execute(self, category: str, rule_name: str, rule: Rule, data: Any, ctx: RuleContext) -> List[Any]:
        try:
            return normalize_findings(self._call(category, rule_name, rule, data, ctx))
        except RuleExecutionError as exc:
            logger.error("%s", exc, exc_info=True)
        except Exception as exc:
            error = RuleExecutionError(category, rule_name, str(exc) or type(exc).__name__)
            logger.error("%s", error, exc_info=True)
        return []

    def _call(self, category: str, rule_name: str, rule: Rule, data: Any, ctx: RuleContext) -> Any:
        timeout = self.config.rule_timeout_seconds
        if not timeout:
            return rule.check(data, ctx)

        executor = ThreadPoolExecutor(max_workers=1, thread_name_prefix="health-rule")
        future = executor.submit(lambda: list(rule.check(data, ctx) or []))
        try:
            return future.result(timeout=timeout)
        except FutureTimeoutError as exc:
            raise RuleExecutionError(category, rule_name, f"timed out after {timeout}s") from exc
        finally:
            # A hung check keeps its worker thread; the run moves on without it.
            executor.shutdown(wait=False)


def normalize_findings(raw: Any) -> List[Any]:
    """Coerce whatever a rule returned into a list of typed findings."""
    if raw is None:
        return []
    if isinstance(raw, (str, bytes, Mapping)) or isinstance(raw, _FINDING_TYPES):
        raw = [raw]
    findings: List[Any] = []
    for item in raw:
        if isinstance(item, _FINDING_TYPES):
            findings.append(item)
        elif isinstance(item, Mapping):
            values = {str(k): v for k, v in item.items()}
            findings.append(GenericFinding(message=_describe_mapping(values), values=values))
        else:
            findings.append(GenericFinding(message=str(item)))
    return findings


def _describe_mapping(values: Dict[str, Any]) -> str:
    name = values.get("name")
    ear_tag = values.get("ear_tag") or values.get("earTag")
    if name and ear_tag:
        return f"{name} ({ear_tag})"
    if values.get("id") and values.get("description"):
        return f"ID: {values['id']} - {values['description']}"
    return json.dumps(values, sort_keys=True, default=str)
