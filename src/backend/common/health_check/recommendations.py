from __future__ import annotations

from typing import List

from .config import HealthCheckConfig
from .models import HealthSummary
from .rule import Rule

GENERIC_RECOMMENDATION = "Review and address identified issues"

CRITICAL_RECOMMENDATION = "Address all critical issues immediately to ensure farm compliance and animal welfare"
HIGH_VOLUME_RECOMMENDATION = "Create a prioritized action plan to resolve high-priority issues within 1 week"
TOTAL_VOLUME_RECOMMENDATION = "Consider implementing automated data validation to prevent future issues"
PERIODIC_CHECK_RECOMMENDATION = "Run health checks weekly to maintain data quality"
TRAINING_RECOMMENDATION = "Train staff on proper record-keeping procedures"


def issue_recommendations(rule: Rule) -> List[str]:
    recommendations = [str(r) for r in (getattr(rule, "recommendations", ()) or ())]
    return recommendations or [GENERIC_RECOMMENDATION]


def overall_recommendations(summary: HealthSummary, config: HealthCheckConfig) -> List[str]:
    """Run-level guidance; periodic-check and training guidance are always included."""
    recommendations: List[str] = []
    if summary.critical_issues > 0:
        recommendations.append(CRITICAL_RECOMMENDATION)
    if summary.high_issues > config.high_issue_threshold:
        recommendations.append(HIGH_VOLUME_RECOMMENDATION)
    if summary.total_issues > config.total_issue_threshold:
        recommendations.append(TOTAL_VOLUME_RECOMMENDATION)
    recommendations.append(PERIODIC_CHECK_RECOMMENDATION)
    recommendations.append(TRAINING_RECOMMENDATION)
    return recommendations
