from __future__ import annotations

import logging
from typing import Dict, List, Tuple, Type

from .rule import Rule, RuleLike, as_rule

logger = logging.getLogger(__name__)

_builtin_rule_classes: List[Type[Rule]] = []


def register_rule(rule_cls: Type[Rule]) -> Type[Rule]:
    """Class decorator: add a built-in rule to the set every default registry starts with."""
    key = (getattr(rule_cls, "category", None), getattr(rule_cls, "rule_name", None))
    if not all(key):
        raise ValueError("Rule class missing category or rule_name")
    for existing in _builtin_rule_classes:
        if (existing.category, existing.rule_name) == key:
            raise ValueError(f"Duplicate rule registered: {key[0]}.{key[1]}")
    _builtin_rule_classes.append(rule_cls)
    return rule_cls


def builtin_rule_classes() -> List[Type[Rule]]:
    from . import rules as _builtin_rules  # noqa: F401

    return list(_builtin_rule_classes)


class RuleRegistry:
    """Rules grouped by category, iterated in registration order."""

    def __init__(self):
        self._rules: Dict[str, Dict[str, Rule]] = {}

    @classmethod
    def with_builtin_rules(cls) -> "RuleRegistry":
        registry = cls()
        for rule_cls in builtin_rule_classes():
            rule = rule_cls()
            registry.add(rule.category, rule.rule_name, rule)
        return registry

    def add(self, category: str, rule_name: str, rule: RuleLike) -> Rule:
        category = str(getattr(category, "value", category))
        resolved = as_rule(category, rule_name, rule)
        self._rules.setdefault(category, {})[rule_name] = resolved
        return resolved

    def remove(self, category: str, rule_name: str) -> bool:
        category = str(getattr(category, "value", category))
        rules = self._rules.get(category)
        if rules is None or rule_name not in rules:
            logger.debug("Rule %s.%s not registered; nothing to remove", category, rule_name)
            return False
        del rules[rule_name]
        return True

    def get(self, category: str, rule_name: str) -> Rule:
        return self._rules[category][rule_name]

    def has(self, category: str, rule_name: str) -> bool:
        return rule_name in self._rules.get(category, {})

    def categories(self) -> List[str]:
        return list(self._rules.keys())

    def items(self) -> List[Tuple[str, List[Tuple[str, Rule]]]]:
        """A point-in-time copy, so add/remove during a run cannot affect it."""
        return [(category, list(rules.items())) for category, rules in self._rules.items()]

    def rule_count(self) -> int:
        return sum(len(rules) for rules in self._rules.values())
