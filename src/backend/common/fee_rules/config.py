from __future__ import annotations

from datetime import date
from decimal import Decimal
from typing import Any, Dict, List, Optional, Type, TypeVar

from pydantic import BaseModel, Field, field_validator, model_validator

from .models import FeeType

T = TypeVar("T", bound=BaseModel)


class RuleConfigBase(BaseModel):
    enabled: bool = True
    # Overrides the rule's built-in priority when set. Lower is evaluated first.
    priority: Optional[int] = None


class SpecificFeeTypesRuleConfig(RuleConfigBase):
    fee_types: List[FeeType] = Field(
        default_factory=lambda: [FeeType.LATE, FeeType.DNS, FeeType.CHIP_RENTAL]
    )


class ChampionshipRuleConfig(RuleConfigBase):
    pass


class SeasonalPeriodRuleConfig(RuleConfigBase):
    # Both bounds are inclusive `YYYY-MM-DD` strings. If either is unset the rule never matches.
    start_date: Optional[str] = None
    end_date: Optional[str] = None

    @field_validator("start_date", "end_date")
    @classmethod
    def _iso_date(cls, value: Optional[str]) -> Optional[str]:
        if value in (None, ""):
            return None
        value = value.strip()
        # Lexicographic comparison is only valid for the fixed-width ISO form.
        if len(value) != 10:
            raise ValueError("dates must be formatted YYYY-MM-DD")
        date.fromisoformat(value)
        return value

    @model_validator(mode="after")
    def _ordered(self) -> "SeasonalPeriodRuleConfig":
        if self.start_date and self.end_date and self.start_date > self.end_date:
            raise ValueError("start_date cannot be after end_date")
        return self

    @property
    def is_configured(self) -> bool:
        return bool(self.start_date and self.end_date)

    def contains(self, day: date) -> bool:
        if not self.is_configured:
            return False
        return date.fromisoformat(self.start_date) <= day <= date.fromisoformat(self.end_date)


class YouthRuleConfig(RuleConfigBase):
    max_age: int = Field(default=16, ge=0)


class FeeShareRuleConfig(RuleConfigBase):
    percentage: Decimal = Field(default=Decimal("0.6"), ge=0, le=1)
    cap_amount: Optional[Decimal] = Field(default=Decimal("120"), ge=0)


class JuniorShareRuleConfig(FeeShareRuleConfig):
    # Shipped disabled; the youth rule covers the whole junior range unless this is switched on.
    enabled: bool = False
    min_age: int = Field(default=17, ge=0)
    max_age: int = Field(default=20, ge=0)
    percentage: Decimal = Field(default=Decimal("0.5"), ge=0, le=1)
    cap_amount: Optional[Decimal] = Field(default=Decimal("200"), ge=0)

    @model_validator(mode="after")
    def _age_range(self) -> "JuniorShareRuleConfig":
        if self.min_age > self.max_age:
            raise ValueError("min_age cannot be greater than max_age")
        return self


class ReconciliationConfig(BaseModel):
    similarity_threshold: float = Field(default=0.75, ge=0, le=1)
    # When false a competition can be paired with at most one invoice.
    allow_multiple_invoices_per_competition: bool = False


class FeeRulesConfig(BaseModel):
    """Rule parameters for one billing batch.

    Rules pull their typed config via `get_rule_config`. Rule ids missing from
    `rules` fall back to the config model's defaults.
    """

    rules: Dict[str, Dict[str, Any]] = Field(default_factory=dict)
    reconciliation: ReconciliationConfig = Field(default_factory=ReconciliationConfig)

    def get_rule_config(
        self,
        rule_id: str,
        model: Type[T],
        default: Optional[T] = None,
    ) -> T:
        if rule_id not in self.rules:
            if default is not None:
                return default
            return model()  # type: ignore[call-arg]
        raw = self.rules.get(rule_id, {})
        return model.model_validate(raw)

    def with_rule_parameters(self, rule_id: str, parameters: Dict[str, Any]) -> "FeeRulesConfig":
        rules = {key: dict(value) for key, value in self.rules.items()}
        rules[rule_id] = dict(parameters)
        return self.model_copy(update={"rules": rules})
