from __future__ import annotations

from typing import Dict, List, Type

from .config import RuleConfigBase
from .rule import Rule


class RuleRegistry:
    """Fee rule classes by rule id.

    Classes are checked when registered, so a rule with a missing id, a non-integer
    priority or a parameter model outside `RuleConfigBase` fails at import time
    instead of in the middle of a billing batch.
    """

    def __init__(self):
        self._rules: Dict[str, Type[Rule]] = {}

    def register(self, rule_cls: Type[Rule]) -> None:
        rule_id = getattr(rule_cls, "rule_id", None)
        if not rule_id:
            raise ValueError(f"Fee rule {rule_cls.__name__} is missing rule_id")
        if rule_id in self._rules:
            raise ValueError(f"Duplicate fee rule id registered: {rule_id}")
        priority = getattr(rule_cls, "priority", None)
        if not isinstance(priority, int) or isinstance(priority, bool):
            raise ValueError(f"Fee rule {rule_id} must define an integer priority")
        config_model = getattr(rule_cls, "config_model", None)
        if not (isinstance(config_model, type) and issubclass(config_model, RuleConfigBase)):
            raise ValueError(f"Fee rule {rule_id} config_model must subclass RuleConfigBase")
        self._rules[rule_id] = rule_cls

    def _by_priority(self) -> List[Type[Rule]]:
        # Stable: equal priorities keep registration order.
        return sorted(self._rules.values(), key=lambda cls: cls.priority)

    def create_all(self) -> list[Rule]:
        """One instance per registered rule, in built-in priority order."""
        return [cls() for cls in self._by_priority()]

    def get(self, rule_id: str) -> Type[Rule]:
        return self._rules[rule_id]

    def ids(self) -> List[str]:
        return [cls.rule_id for cls in self._by_priority()]

    def __contains__(self, rule_id: object) -> bool:
        return rule_id in self._rules

    def __len__(self) -> int:
        return len(self._rules)


registry = RuleRegistry()


def register_rule(rule_cls: Type[Rule]) -> Type[Rule]:
    registry.register(rule_cls)
    return rule_cls
