from __future__ import annotations

import argparse
import json
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field

from .config import FeeRulesConfig
from .registry import registry

# Ensure built-in rules are imported/registered when generating a catalog.
from . import rules as _builtin_rules  # noqa: F401


class RuleCatalogEntry(BaseModel):
    rule_id: str
    rule_title: str
    display_name: str
    description: str = ""
    priority: int
    enabled: bool = True

    module: str
    class_name: str

    config_model: str
    config_schema: Dict[str, Any]
    parameters: Dict[str, Any] = Field(default_factory=dict)


def build_catalog(config: Optional[FeeRulesConfig] = None) -> List[RuleCatalogEntry]:
    """Describe every registered rule with the parameters `config` gives it.

    Entries are ordered by effective priority, the order the runner evaluates them in.
    """
    config = config or FeeRulesConfig()
    entries: List[RuleCatalogEntry] = []
    for rule_id in registry.ids():
        rule_cls = registry.get(rule_id)
        cfg_model = rule_cls.config_model
        cfg = config.get_rule_config(rule_id, cfg_model)
        entries.append(
            RuleCatalogEntry(
                rule_id=rule_id,
                rule_title=rule_cls.rule_title,
                display_name=rule_cls().display_name(cfg),
                description=getattr(rule_cls, "description", ""),
                priority=cfg.priority if cfg.priority is not None else rule_cls.priority,
                enabled=cfg.enabled,
                module=getattr(rule_cls, "__module__", ""),
                class_name=getattr(rule_cls, "__name__", ""),
                config_model=cfg_model.__name__,
                config_schema=cfg_model.model_json_schema(),
                parameters=cfg.model_dump(mode="json"),
            )
        )

    entries.sort(key=lambda e: (e.priority, e.rule_id))
    return entries


def _dump_json(catalog: list[dict[str, Any]]) -> str:
    return json.dumps(catalog, indent=2, sort_keys=True)


def _dump_yaml(catalog: list[dict[str, Any]]) -> str:
    import yaml

    return yaml.safe_dump(catalog, sort_keys=True, allow_unicode=True)


def main(argv: list[str] | None = None) -> None:
    parser = argparse.ArgumentParser(description="Generate a fee rules catalog from the registry.")
    parser.add_argument(
        "--format",
        choices=("yaml", "json"),
        default="yaml",
        help="Output format (default: yaml).",
    )
    parser.add_argument(
        "--config",
        default=None,
        help="Rule parameter document to resolve parameters from (defaults to built-in defaults).",
    )
    args = parser.parse_args(argv)

    config = None
    if args.config:
        from pipelines.rule_config_store import JsonFileRuleConfigStore

        config = JsonFileRuleConfigStore(args.config).load()

    catalog = [e.model_dump(mode="json") for e in build_catalog(config)]
    if args.format == "json":
        print(_dump_json(catalog))
    else:
        print(_dump_yaml(catalog))


if __name__ == "__main__":
    main()
