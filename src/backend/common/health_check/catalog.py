from __future__ import annotations

import argparse
import json
from typing import Any, Dict, List, Optional

import yaml
from pydantic import BaseModel

from .registry import RuleRegistry


class RuleCatalogEntry(BaseModel):
    category: str
    rule_name: str
    description: str
    severity: str
    recommendations: List[str]

    module: str
    class_name: str

    config_model: str
    config_schema: Dict[str, Any]


def build_catalog(registry: Optional[RuleRegistry] = None) -> List[RuleCatalogEntry]:
    """Describe every rule in `registry` (the built-in rules by default), in run order."""
    registry = registry if registry is not None else RuleRegistry.with_builtin_rules()
    entries: List[RuleCatalogEntry] = []
    for category, rules in registry.items():
        for rule_name, rule in rules:
            cfg_model = getattr(rule, "config_model", None)
            cfg_schema: Dict[str, Any] = {}
            cfg_model_name = ""
            if cfg_model is not None:
                cfg_model_name = getattr(cfg_model, "__name__", str(cfg_model))
                cfg_schema = cfg_model.model_json_schema()

            entries.append(
                RuleCatalogEntry(
                    category=category,
                    rule_name=rule_name,
                    description=rule.description,
                    severity=rule.severity.value,
                    recommendations=list(getattr(rule, "recommendations", ()) or ()),
                    module=type(rule).__module__,
                    class_name=type(rule).__name__,
                    config_model=cfg_model_name,
                    config_schema=cfg_schema,
                )
            )
    return entries


def _dump_json(catalog: list[dict[str, Any]]) -> str:
    return json.dumps(catalog, indent=2, sort_keys=True)


def _dump_yaml(catalog: list[dict[str, Any]]) -> str:
    return yaml.safe_dump(catalog, sort_keys=True)


def main(argv: list[str] | None = None) -> None:
    parser = argparse.ArgumentParser(description="List the built-in farm records validation rules.")
    parser.add_argument(
        "--format",
        choices=("yaml", "json"),
        default="yaml",
        help="Output format (default: yaml).",
    )
    args = parser.parse_args(argv)

    catalog = [e.model_dump(mode="json") for e in build_catalog()]
    if args.format == "json":
        print(_dump_json(catalog))
    else:
        print(_dump_yaml(catalog))


if __name__ == "__main__":
    main()
