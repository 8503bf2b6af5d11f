from __future__ import annotations

from ..config import SeasonalPeriodRuleConfig
from ..models import FeeRecord, FeeType, RuleSplit
from ..registry import register_rule
from ..rule import Rule
from ..splits import runner_pays_all


@register_rule
class FEE_SEASONAL_PERIOD_PASS_THROUGH(Rule):
    rule_id = "FEE-SEASONAL-PERIOD-PASS-THROUGH"
    rule_title = "Seasonal period full pass-through"
    description = (
        "Runner pays the full start fee for non-championship competitions starting inside the "
        "configured seasonal period (inclusive)."
    )
    priority = 35
    config_model = SeasonalPeriodRuleConfig

    def display_name(self, cfg: SeasonalPeriodRuleConfig) -> str:
        if not cfg.is_configured:
            return self.rule_title
        return f"{self.rule_title} ({cfg.start_date} - {cfg.end_date})"

    def condition(self, record: FeeRecord, cfg: SeasonalPeriodRuleConfig) -> bool:
        if not cfg.is_configured:
            return False
        if record.fee_type != FeeType.STANDARD or record.is_championship:
            return False
        # Records without a readable start day are left to the later rules.
        day = record.competition_start_day
        if day is None:
            return False
        return cfg.contains(day)

    def action(self, record: FeeRecord, cfg: SeasonalPeriodRuleConfig) -> RuleSplit:
        return runner_pays_all(record)
