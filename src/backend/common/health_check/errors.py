"""Exception hierarchy for the farm records health check."""

from __future__ import annotations


class HealthCheckError(Exception):
    """Base exception for all health check errors."""


class RuleExecutionError(HealthCheckError):
    """Raised (and caught by the runner) when a rule's check fails or times out."""

    def __init__(self, category: str, rule_name: str, reason: str):
        super().__init__(f"Validation rule {category}.{rule_name} failed: {reason}")
        self.category = category
        self.rule_name = rule_name
        self.reason = reason


class NoPriorResultError(HealthCheckError):
    """Raised when a report is requested before any health check has completed."""

    def __init__(self, message: str = "No health check results available. Run a health check first."):
        super().__init__(message)


class UnknownReportFormatError(HealthCheckError, ValueError):
    """Raised when a report is requested in a format the generator does not know."""
