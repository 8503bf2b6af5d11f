from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Type

from .config import RuleConfigBase
from .models import FeeRecord, RuleSplit


class Rule(ABC):
    rule_id: str
    rule_title: str
    description: str
    priority: int
    config_model: Type[RuleConfigBase]

    def __init__(self):
        if not getattr(self, "rule_id", None):
            raise ValueError("Rule must define rule_id")
        if not isinstance(getattr(self, "priority", None), int):
            raise ValueError(f"Rule {self.rule_id} must define an integer priority")

    def display_name(self, cfg: RuleConfigBase) -> str:
        return self.rule_title

    @abstractmethod
    def condition(self, record: FeeRecord, cfg: RuleConfigBase) -> bool:  # pragma: no cover
        raise NotImplementedError

    @abstractmethod
    def action(self, record: FeeRecord, cfg: RuleConfigBase) -> RuleSplit:  # pragma: no cover
        raise NotImplementedError
