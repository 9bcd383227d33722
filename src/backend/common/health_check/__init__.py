"""Rule-based data-quality checks for farm records.

This package contains only domain logic:
- Rule inputs are an in-memory `FarmSnapshot` plus configuration.
- No persistence, scheduling side effects on import, or network calls live here.
"""

from .config import HealthCheckConfig, load_config
from .context import HealthSlice, RuleContext
from .errors import (
    HealthCheckError,
    NoPriorResultError,
    RuleExecutionError,
    UnknownReportFormatError,
)
from .models import (
    Animal,
    BreedingRecord,
    CategoryResult,
    FarmSnapshot,
    FeedRecord,
    HealthCheckResult,
    HealthRecord,
    HealthSummary,
    HistoryEntry,
    Issue,
    Severity,
    Transaction,
)
from .registry import RuleRegistry, register_rule
from .reports import ReportFormat, generate_report
from .rule import FunctionRule, Rule
from .runner import HealthCheckRunner
from .scheduler import HealthCheckScheduler

# Import built-in rules so they self-register.
from . import rules as _builtin_rules  # noqa: F401
