from __future__ import annotations

import inspect
from abc import ABC, abstractmethod
from typing import Any, Callable, Iterable, Mapping, Optional, Sequence, Type, Union

from pydantic import BaseModel

from .config import RuleConfigBase
from .context import HealthSlice, RuleContext
from .models import Category, Severity


class Rule(ABC):
    category: str
    rule_name: str
    description: str
    severity: Severity
    config_model: Type[BaseModel] = RuleConfigBase
    recommendations: Sequence[str] = ()

    def __init__(self):
        if not getattr(self, "rule_name", None):
            raise ValueError("Rule must define rule_name")
        if not getattr(self, "category", None):
            raise ValueError(f"Rule {self.rule_name} must define category")

    def config(self, ctx: RuleContext) -> Any:
        return ctx.config.get_rule_config(self.rule_name, self.config_model)

    @abstractmethod
    def check(self, data: Any, ctx: RuleContext) -> Iterable[Any]:  # pragma: no cover
        """Return zero or more findings for the category-specific `data` slice."""
        raise NotImplementedError


class FunctionRule(Rule):
    """Adapts a plain `check(data)` callable (custom rules) to the `Rule` interface."""

    def __init__(
        self,
        *,
        description: str,
        severity: Union[Severity, str],
        check: Callable[[Any], Optional[Iterable[Any]]],
        rule_name: str = "custom_rule",
        category: str = "custom",
        recommendations: Sequence[str] = (),
    ):
        self.rule_name = rule_name
        self.category = category
        self.description = description
        self.severity = Severity(severity.upper()) if isinstance(severity, str) else severity
        self.recommendations = tuple(recommendations)
        self._check = check
        self._spreads_health_slice = _takes_two_positional_args(check)
        super().__init__()

    def check(self, data: Any, ctx: RuleContext) -> Iterable[Any]:
        # Health checks may be written as check(health_records, animals).
        if isinstance(data, HealthSlice) and self._spreads_health_slice:
            return self._check(*data) or []
        return self._check(data) or []


_POSITIONAL_KINDS = (inspect.Parameter.POSITIONAL_ONLY, inspect.Parameter.POSITIONAL_OR_KEYWORD)


def _takes_two_positional_args(func: Callable[..., Any]) -> bool:
    try:
        params = inspect.signature(func).parameters.values()
    except (TypeError, ValueError):
        return False
    positional = 0
    for param in params:
        if param.kind is inspect.Parameter.VAR_POSITIONAL:
            return True
        if param.kind in _POSITIONAL_KINDS and param.default is inspect.Parameter.empty:
            positional += 1
    return positional >= 2


RuleLike = Union[Rule, Mapping[str, Any]]


def as_rule(category: str, rule_name: str, rule: RuleLike) -> Rule:
    """Normalise a registrant-supplied rule (a `Rule` or a `{description, severity, check}` mapping)."""
    if isinstance(rule, Rule):
        return rule
    if isinstance(rule, Mapping):
        missing = [key for key in ("description", "severity", "check") if key not in rule]
        if missing:
            raise ValueError(f"Rule {category}.{rule_name} is missing: {', '.join(missing)}")
        return FunctionRule(
            rule_name=rule_name,
            category=str(category.value if isinstance(category, Category) else category),
            description=str(rule["description"]),
            severity=rule["severity"],
            check=rule["check"],
            recommendations=list(rule.get("recommendations") or []),
        )
    raise TypeError(f"Unsupported rule type for {category}.{rule_name}: {type(rule).__name__}")
